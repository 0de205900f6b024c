"""
Logging Configuration

This module provides configurable logging for rollup-stream and its CLI:
- Configurable logging levels (debug, info, warning, error)
- Optional log file output with rotation
- Masked dumps of invocation options at debug level
- Timing of backend operations
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Mapping, Optional


logger = logging.getLogger(__name__)

SENSITIVE_MARKERS = ("key", "password", "secret", "token")


class LoggingConfig:
    """
    Centralized logging configuration for rollup-stream.

    Library code only logs through module-level loggers; handlers are
    installed when an application (such as the CLI) calls
    ``configure_logging``.
    """

    def __init__(self):
        self._configured = False
        self._log_file_handler: Optional[logging.Handler] = None
        self._console_handler: Optional[logging.Handler] = None

    def configure_logging(
        self,
        level: str = "warning",
        log_file: Optional[str] = None,
        include_timestamps: bool = True,
        max_log_file_size: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
        force: bool = False,
    ) -> None:
        """
        Configure logging for the application.

        Args:
            level: Logging level (debug, info, warning, error)
            log_file: Optional log file path
            include_timestamps: Whether to include timestamps in console messages
            max_log_file_size: Maximum log file size before rotation
            backup_count: Number of backup log files to keep
            force: Reconfigure even if logging was already configured
        """
        if self._configured and not force:
            return

        self.reset()
        log_level = self._get_log_level(level)

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)

        self._console_handler = logging.StreamHandler(sys.stderr)
        self._console_handler.setLevel(log_level)
        self._console_handler.setFormatter(
            self._create_console_formatter(include_timestamps, level.lower() == "debug")
        )
        root_logger.addHandler(self._console_handler)

        if log_file:
            self._configure_file_logging(log_file, log_level, max_log_file_size, backup_count)

        self._configured = True
        logger.debug(f"Logging configured: level={level}, file={log_file}")

    def _get_log_level(self, level_str: str) -> int:
        """Convert string log level to logging constant."""
        level_map = {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR
        }
        return level_map.get(level_str.lower(), logging.WARNING)

    def _create_console_formatter(self, include_timestamps: bool, debug_mode: bool) -> logging.Formatter:
        """Create formatter for console output."""
        parts = []

        if include_timestamps:
            parts.append("%(asctime)s")

        if debug_mode:
            parts.append("%(name)s")

        parts.extend(["%(levelname)s", "%(message)s"])

        return logging.Formatter(
            " - ".join(parts),
            datefmt="%H:%M:%S" if not debug_mode else "%Y-%m-%d %H:%M:%S"
        )

    def _configure_file_logging(
        self,
        log_file: str,
        log_level: int,
        max_size: int,
        backup_count: int
    ) -> None:
        """Configure file logging with rotation."""
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)

            self._log_file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=max_size,
                backupCount=backup_count,
                encoding='utf-8'
            )
            self._log_file_handler.setLevel(log_level)
            self._log_file_handler.setFormatter(logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            ))
            logging.getLogger().addHandler(self._log_file_handler)

        except OSError as e:
            # Log file setup failed, continue with console only
            logger.warning(f"Failed to setup log file {log_file}: {e}")

    def log_configuration_details(self, options: Mapping[str, Any]) -> None:
        """Log invocation options at debug level, masking sensitive values."""
        if not logger.isEnabledFor(logging.DEBUG):
            return

        logger.debug("=== Bundle Options ===")
        for key, value in options.items():
            if any(marker in key.lower() for marker in SENSITIVE_MARKERS):
                display_value = "***MASKED***" if value else None
            elif key == "cache":
                display_value = f"<{type(value).__name__} id={id(value):#x}>" if value is not None else None
            else:
                display_value = value
            logger.debug(f"  {key}: {display_value!r}")
        logger.debug("=== End Bundle Options ===")

    def log_backend_selection(self, backend: Any, reason: str) -> None:
        """Log which backend drives an invocation."""
        name = getattr(backend, "name", None) or type(backend).__name__
        logger.debug(f"Selected backend: {name} ({reason})")

    def log_operation_timing(self, operation: str, duration: float) -> None:
        """Log operation timing information."""
        if duration < 1.0:
            logger.debug(f"{operation} completed in {duration*1000:.0f}ms")
        else:
            logger.info(f"{operation} completed in {duration:.1f}s")

    def reset(self) -> None:
        """Remove the handlers installed by configure_logging."""
        root_logger = logging.getLogger()
        for handler in (self._console_handler, self._log_file_handler):
            if handler is not None:
                root_logger.removeHandler(handler)
                handler.close()
        self._console_handler = None
        self._log_file_handler = None
        self._configured = False

    def is_debug_enabled(self) -> bool:
        """Check if debug logging is enabled."""
        return logging.getLogger().isEnabledFor(logging.DEBUG)


# Global logging configuration instance
logging_config = LoggingConfig()


def configure_logging(level: str = "warning", log_file: Optional[str] = None, force: bool = False) -> None:
    """
    Convenience function to configure logging.

    Args:
        level: Logging level (debug, info, warning, error)
        log_file: Optional log file path
        force: Reconfigure even if logging was already configured
    """
    logging_config.configure_logging(level=level, log_file=log_file, force=force)
