"""
Logging setup and error-line formatting for the run's error log.
"""

import sys

from loguru import logger

import leadcrawl.config as cfg


class ErrorHandler:
    """Logging setup and formatting of recovered errors."""

    # -- Logging -----------------------------------------------------------

    @staticmethod
    def setup_logging(level: str = cfg.LOG_LEVEL) -> None:
        """Configure loguru sinks (console + rotating file)."""
        logger.remove()
        logger.add(sys.stderr, level=level)
        cfg.LOGS_DIR.mkdir(parents=True, exist_ok=True)
        log_path = cfg.LOGS_DIR / "leadcrawl_{time:YYYY-MM-DD}.log"
        logger.add(
            str(log_path),
            rotation="10 MB",
            retention="7 days",
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | {message}",
        )
        logger.info("Logging initialised  ->  {}", cfg.LOGS_DIR)

    # -- Error log ---------------------------------------------------------

    @staticmethod
    def record(error: Exception, context: str = "") -> str:
        """
        Log *error* as a warning and return the line for the run's error log.

        The line reads ``"<ErrorType>: <message>"``, prefixed by *context*
        when one is given.
        """
        line = f"{type(error).__name__}: {error}"
        if context:
            line = f"{context} | {line}"
        logger.warning(line)
        return line
