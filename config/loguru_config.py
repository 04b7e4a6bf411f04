"""
Loguru Logging Configuration

This module provides centralized logging configuration for the datalayer
package. Library modules only ever call ``get_logger``; applications call
``setup_logging`` once at startup to install sinks.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger


DEFAULT_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

DEFAULT_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
    "{level: <8} | "
    "{name}:{function}:{line} | "
    "{message}"
)


class LoguruConfig:
    """Loguru configuration manager."""

    def __init__(self):
        self._configured = False

    def remove_default_handlers(self):
        """Remove default loguru handlers."""
        logger.remove()
        self._configured = False

    def configure_console_logging(
        self,
        level: str = "INFO",
        format_string: Optional[str] = None,
        colorize: Optional[bool] = None,
        backtrace: bool = True,
        diagnose: bool = True,
    ):
        """Configure console logging."""
        if colorize is None:
            colorize = sys.stdout.isatty()

        logger.add(
            sys.stdout,
            format=format_string or DEFAULT_CONSOLE_FORMAT,
            level=level,
            colorize=colorize,
            backtrace=backtrace,
            diagnose=diagnose,
        )
        self._configured = True

    def configure_file_logging(
        self,
        log_dir: Union[str, Path],
        level: str = "INFO",
        format_string: Optional[str] = None,
        rotation: str = "1 day",
        retention: str = "30 days",
        compression: str = "zip",
        encoding: str = "utf-8",
        enqueue: bool = True,
    ):
        """Configure file logging: a general log plus an errors-only log."""
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        format_string = format_string or DEFAULT_FILE_FORMAT

        logger.add(
            log_dir / "datalayer.log",
            format=format_string,
            level=level,
            rotation=rotation,
            retention=retention,
            compression=compression,
            encoding=encoding,
            enqueue=enqueue,
        )

        logger.add(
            log_dir / "error.log",
            format=format_string,
            level="ERROR",
            rotation=rotation,
            retention=retention,
            compression=compression,
            encoding=encoding,
            enqueue=enqueue,
        )

        self._configured = True

    def configure_json_logging(
        self,
        log_dir: Union[str, Path],
        level: str = "INFO",
    ):
        """Configure JSON structured logging, one record per line."""
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        def json_sink(message) -> None:
            record = message.record
            log_entry: Dict[str, Any] = {
                "timestamp": record["time"].isoformat(),
                "level": record["level"].name,
                "logger": record["extra"].get("name", record["name"]),
                "function": record["function"],
                "line": record["line"],
                "message": record["message"],
                "extra": {k: v for k, v in record["extra"].items() if k != "name"},
            }
            if record["exception"]:
                log_entry["exception"] = {
                    "type": record["exception"].type.__name__,
                    "value": str(record["exception"].value),
                }
            with open(log_dir / "structured.json", "a", encoding="utf-8") as handle:
                handle.write(json.dumps(log_entry, ensure_ascii=False, default=str) + "\n")

        logger.add(json_sink, level=level, enqueue=True)
        self._configured = True

    def configure_development_logging(self, log_dir: Union[str, Path] = "logs"):
        """Configure development environment logging."""
        self.remove_default_handlers()
        self.configure_console_logging(level="DEBUG", colorize=True)
        self.configure_file_logging(log_dir=log_dir, level="DEBUG", rotation="10 MB", retention="7 days")

    def configure_production_logging(self, log_dir: Union[str, Path] = "logs"):
        """Configure production environment logging."""
        self.remove_default_handlers()
        self.configure_console_logging(level="ERROR", colorize=False, backtrace=False, diagnose=False)
        self.configure_file_logging(log_dir=log_dir, level="INFO", rotation="100 MB", retention="30 days")
        self.configure_json_logging(log_dir=log_dir, level="INFO")

    def configure_staging_logging(self, log_dir: Union[str, Path] = "logs"):
        """Configure staging environment logging."""
        self.remove_default_handlers()
        self.configure_console_logging(level="INFO", colorize=False)
        self.configure_file_logging(log_dir=log_dir, level="INFO", rotation="50 MB", retention="14 days")
        self.configure_json_logging(log_dir=log_dir, level="INFO")

    def configure_testing_logging(self):
        """Configure testing environment logging: warnings to the console only."""
        self.remove_default_handlers()
        self.configure_console_logging(level="WARNING", colorize=False, backtrace=False, diagnose=False)

    def get_logger(self, name: Optional[str] = None, module: Optional[str] = None):
        """Get a configured logger instance."""
        log = logger.bind(name=name or "datalayer")
        if module:
            log = log.bind(module=module)
        return log

    def is_configured(self) -> bool:
        """Check if logging has been configured."""
        return self._configured


# Global loguru configuration instance
loguru_config = LoguruConfig()


def setup_logging(
    environment: str = "development",
    log_dir: Union[str, Path] = "logs",
) -> None:
    """
    Setup logging based on environment.

    Args:
        environment: Environment name (development, production, testing, staging)
        log_dir: Directory for log files
    """
    environment = environment.lower()

    if environment == "production":
        loguru_config.configure_production_logging(log_dir)
    elif environment == "staging":
        loguru_config.configure_staging_logging(log_dir)
    elif environment in ("testing", "test"):
        loguru_config.configure_testing_logging()
    else:
        loguru_config.configure_development_logging(log_dir)

    get_logger(__name__).info(f"Logging configured for environment: {environment}")


def get_logger(name: Optional[str] = None, module: Optional[str] = None):
    """Get a configured logger instance."""
    return loguru_config.get_logger(name=name, module=module)
