"""Logging utilities for Glyph Lab."""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

import structlog

_HANDLER_MARK = "_glyphlab_handler"


@dataclass
class DecodeStats:
    """Statistics from a decode run."""

    clusters_decoded: int = 0
    parts_emitted: int = 0
    fallback_count: int = 0
    error_count: int = 0
    strategy_hits: dict[str, int] = field(default_factory=dict)
    errors: list[tuple[int, str]] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate decode duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    def to_dict(self) -> dict[str, object]:
        return {
            "clusters": self.clusters_decoded,
            "parts": self.parts_emitted,
            "fallbacks": self.fallback_count,
            "errors": self.error_count,
            "strategies": dict(sorted(self.strategy_hits.items())),
        }


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure structured logging to the console and an optional file.

    Calling this again replaces the handlers installed by the previous call.

    Args:
        log_file: Path to log file (no file output if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(logging.DEBUG)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        setattr(file_handler, _HANDLER_MARK, True)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    setattr(console_handler, _HANDLER_MARK, True)
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("glyphlab")
    logger.debug(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=console_level,
    )

    return logger


class DecodeLogger:
    """Logger for tracking cluster decoding and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = DecodeStats()

    def start(self, text: str, font_id: str) -> None:
        """Log start of a decode run."""
        self._stats.start_time = time.time()
        self._logger.debug("Decoding text", text=text, font=font_id)

    def finish(self) -> None:
        """Log end of a decode run."""
        self._stats.end_time = time.time()
        self._logger.info(
            "Decode complete",
            clusters=self._stats.clusters_decoded,
            parts=self._stats.parts_emitted,
            fallbacks=self._stats.fallback_count,
            duration_ms=round(self._stats.duration_seconds * 1000, 2),
        )

    def log_cluster_mapped(self, cluster_id: int, text: str, strategy: str, part_count: int) -> None:
        """Log a cluster mapped to parts."""
        self._logger.debug(
            "Cluster mapped",
            cluster=cluster_id,
            text=text,
            strategy=strategy,
            parts=part_count,
        )
        self._stats.clusters_decoded += 1
        self._stats.parts_emitted += part_count
        self._stats.strategy_hits[strategy] = self._stats.strategy_hits.get(strategy, 0) + 1

    def log_cluster_fallback(self, cluster_id: int, reason: str) -> None:
        """Log a cluster that fell back to one full-glyph part."""
        self._logger.debug("Cluster fell back to full glyph", cluster=cluster_id, reason=reason)
        self._stats.fallback_count += 1

    def log_cluster_error(self, cluster_id: int, error: str) -> None:
        """Log a mapping error recovered by the full-glyph fallback."""
        self._logger.error("Cluster mapping failed", cluster=cluster_id, error=error)
        self._stats.error_count += 1
        self._stats.errors.append((cluster_id, error))

    def log_metrics_missing(self, font_id: str) -> None:
        """Log that zones fall back to proportional heuristics."""
        self._logger.warning("Font metrics unavailable, using fallback proportions", font=font_id)

    @property
    def stats(self) -> DecodeStats:
        """Get current decode statistics."""
        return self._stats
