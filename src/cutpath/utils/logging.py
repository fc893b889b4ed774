"""Logging utilities for cutpath."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import structlog


@dataclass
class ProcessingStats:
    """Statistics from a path planning run."""

    chain_count: int = 0
    part_count: int = 0
    leads_generated: int = 0
    lead_warning_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None
    part_timings_ms: list[float] = field(default_factory=list)
    was_cancelled: bool = False
    cancelled_count: int = 0

    @property
    def duration_seconds(self) -> float:
        """Calculate processing duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def avg_part_time_ms(self) -> float | None:
        """Average lead calculation time per work unit."""
        if not self.part_timings_ms:
            return None
        return sum(self.part_timings_ms) / len(self.part_timings_ms)

    @property
    def min_part_time_ms(self) -> float | None:
        return min(self.part_timings_ms) if self.part_timings_ms else None

    @property
    def max_part_time_ms(self) -> float | None:
        return max(self.part_timings_ms) if self.part_timings_ms else None


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (auto-generated if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    if log_file is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = Path(f"cutpath_{timestamp}.log")

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(getattr(logging, file_level.upper()))
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
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

    logger = structlog.get_logger("cutpath")
    logger.info("Logging initialized", log_file=str(log_file), level=file_level)

    return logger


class ProcessingLogger:
    """Logger for tracking lead calculation progress and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = ProcessingStats()

    def log_part_start(self, unit_id: str, chain_count: int) -> None:
        """Log start of lead calculation for a part (or orphan chain)."""
        self._logger.debug("Calculating leads", unit=unit_id, chains=chain_count)

    def log_part_complete(
        self,
        unit_id: str,
        leads_generated: int,
        duration_ms: float,
    ) -> None:
        """Log successful lead calculation for a part."""
        self._logger.info(
            "Leads calculated",
            unit=unit_id,
            leads=leads_generated,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.leads_generated += leads_generated
        self._stats.part_timings_ms.append(duration_ms)

    def log_chain_skipped(self, chain_id: str, reason: str) -> None:
        """Log a chain that received no leads."""
        self._logger.debug("Chain skipped", chain=chain_id, reason=reason)
        self._stats.skipped_count += 1

    def log_part_error(
        self,
        unit_id: str,
        error: Exception,
        traceback: str | None = None,
    ) -> None:
        """Log lead calculation error."""
        self._logger.error(
            "Lead calculation failed",
            unit=unit_id,
            error=str(error),
            error_type=type(error).__name__,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((unit_id, str(error)))

    def log_lead_warning(self, chain_id: str, message: str) -> None:
        """Log a lead warning for a chain."""
        self._logger.info("Lead warning", chain=chain_id, message=message)
        self._stats.lead_warning_count += 1

    def log_part_analysis(
        self,
        chain_count: int,
        closed_count: int,
        part_count: int,
        warning_count: int,
    ) -> None:
        """Log chain and part detection results."""
        self._logger.debug(
            "Part analysis",
            chains=chain_count,
            closed=closed_count,
            parts=part_count,
            warnings=warning_count,
        )
        self._stats.chain_count = chain_count
        self._stats.part_count = part_count

    @property
    def stats(self) -> ProcessingStats:
        """Get current processing statistics."""
        return self._stats
