#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Logging configuration for the leaf feature extraction pipeline.

All module loggers are children of the ``leaf_features`` package logger,
which owns the handlers. The package logger is set up once on import from
LOGGING_CONFIG and can be rebuilt with `apply_logging_config` after the
configuration has been overridden (see `leaf_features.core.config.load_config`).
"""
import logging
import os
from typing import Optional, Union
from leaf_features.core.config import LOGGING_CONFIG

LOGGER_NAME = "leaf_features"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")
    return numeric_level


def _attach_handlers(logger: logging.Logger, log_file: Optional[str]) -> None:
    formatter = logging.Formatter(LOGGING_CONFIG.get("log_format", DEFAULT_FORMAT))

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is None and LOGGING_CONFIG.get("log_to_file", False):
        log_file = LOGGING_CONFIG.get("log_file")
    if not log_file:
        return

    log_dir = os.path.dirname(str(log_file))
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)


def setup_logging(log_level: Optional[str] = None,
                  log_file: Optional[str] = None,
                  module_name: str = LOGGER_NAME) -> logging.Logger:
    """
    Configure and return a logger, unless it already has handlers.

    Parameters
    ----------
    log_level : str, optional
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        If None, uses LOGGING_CONFIG.
    log_file : str, optional
        Also write to this file. If None, a file is only written when
        LOGGING_CONFIG enables ``log_to_file``.
    module_name : str, optional
        Name of the logger, by default "leaf_features".

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(module_name)
    if logger.handlers:
        return logger

    level = log_level or LOGGING_CONFIG.get("level", "INFO")
    logger.setLevel(_resolve_level(level))
    _attach_handlers(logger, log_file)

    logger.debug(f"Logging initialized at level: {level}")
    return logger


def apply_logging_config(module_name: str = LOGGER_NAME) -> logging.Logger:
    """
    Rebuild a logger's level and handlers from the current LOGGING_CONFIG.
    """
    logger = logging.getLogger(module_name)
    level = _resolve_level(LOGGING_CONFIG.get("level", "INFO"))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(level)
    _attach_handlers(logger, None)
    return logger


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Parameters
    ----------
    module_name : str
        Name of the module, typically __name__.

    Returns
    -------
    logging.Logger
        Logger nested under the package logger.
    """
    if module_name == LOGGER_NAME or module_name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(module_name)
    return logging.getLogger(f"{LOGGER_NAME}.{module_name}")

# Initialize the package logger
root_logger = setup_logging()
