"""Logger module."""

import logging
import os
import sys

import colorlog

loggers: dict[str, logging.Logger] = {}

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_logger(
    name: str,
    log_handler: str = "stdout",
    log_level: str | None = None,
    log_color: bool = False,
) -> logging.Logger:
    """Get logger.

    Args:
        name: The name of the logger.
        log_handler: The log handler type ('stdout' or 'stderr').
        log_level: The logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR',
            'CRITICAL'). Falls back to the LOG_LEVEL environment variable,
            then 'INFO'.
        log_color: Whether to use colored output.

    Returns:
        logging.Logger: Configured logger instance.

    Raises:
        ValueError: If invalid handler or log level is provided.
    """
    if name in loggers:
        return loggers[name]

    level_name = (log_level or os.getenv("LOG_LEVEL") or "INFO").upper()
    if level_name not in LOG_LEVELS:
        err_msg = f"Invalid log level: {level_name}"
        raise ValueError(err_msg)

    streams = {"stdout": sys.stdout, "stderr": sys.stderr}
    if log_handler not in streams:
        err_msg = f"Invalid handler: {log_handler}"
        raise ValueError(err_msg)

    logger = logging.getLogger(name) if not log_color else colorlog.getLogger(name)

    if log_color:
        handler: logging.Handler = colorlog.StreamHandler(streams[log_handler])
        formatter: logging.Formatter = colorlog.ColoredFormatter(
            "%(log_color)s %(asctime)s - %(name)s - %(levelname)s - %(message)s",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
    else:
        handler = logging.StreamHandler(streams[log_handler])
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    level = LOG_LEVELS[level_name]
    logger.setLevel(level)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    loggers[name] = logger
    return logger


__all__ = ["get_logger"]
