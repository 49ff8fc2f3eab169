"""Centralized logging configuration for plotcraft.

Configures structured JSON logging for service deployments
and human-readable logging for development/CLI usage.
"""

import copy
import logging
import logging.config
import os
from typing import Any


# Default logging configuration
LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            "datefmt": "%Y-%m-%dT%H:%M:%S%z",
        },
        "console": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "INFO",
            "formatter": "console",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "plotcraft": {
            "level": "DEBUG",
            "handlers": ["console"],
            "propagate": False,
        },
        # matplotlib's font manager is chatty at DEBUG
        "matplotlib": {
            "level": "WARNING",
        },
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"],
    },
}


def build_logging_config(
    json_output: bool = False,
    log_level: str = "INFO",
    log_file: str | None = None,
) -> dict[str, Any]:
    """Return a dictConfig mapping for the requested output mode.

    Args:
        json_output: If True, use JSON formatter for console output
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path of a rotating JSON log file
    """
    config = copy.deepcopy(LOGGING_CONFIG)

    if json_output:
        config["handlers"]["console"]["formatter"] = "json"

    if log_level:
        config["handlers"]["console"]["level"] = log_level
        config["loggers"]["plotcraft"]["level"] = log_level

    if log_file:
        config["handlers"]["json_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "json",
            "filename": log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
        }
        config["loggers"]["plotcraft"]["handlers"].append("json_file")

    return config


def setup_logging(
    json_output: bool = False,
    log_level: str = "INFO",
    log_file: str | None = None,
) -> None:
    """Configure logging for the application.

    Args:
        json_output: If True, use JSON formatter for console output (for services)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path of a rotating JSON log file; its directory is created
    """
    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)

    logging.config.dictConfig(build_logging_config(json_output, log_level, log_file))


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Configured logger instance

    Example:
        logger = get_logger(__name__)
        logger.info("Rendering chart", extra={"chart_type": "stacked", "items": 12})
    """
    return logging.getLogger(name)
