"""
Logging configuration for Data Fusion.

This module provides centralized logging configuration with proper
formatting, log levels, and file output options.
"""

import logging
import os
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(
    level: str = 'INFO',
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    format_string: Optional[str] = None
) -> None:
    """
    Set up logging configuration for the application.

    Args:
        level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
        log_file: Name of log file (optional)
        log_dir: Directory for log files (defaults to 'logs')
        format_string: Custom format string (optional)
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Only replace handlers installed by a previous setup_logging call
    for handler in root_logger.handlers[:]:
        if getattr(handler, '_data_fusion_handler', False):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    console_handler._data_fusion_handler = True
    root_logger.addHandler(console_handler)

    if log_file:
        add_file_handler(log_file, log_dir or 'logs', level, format_string)

    logging.info(f"Logging configured with level: {level}")


def set_log_level(level: str) -> None:
    """
    Set the log level for the root logger and the handlers setup_logging installed.

    Args:
        level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.getLogger().setLevel(numeric_level)

    for handler in logging.getLogger().handlers:
        if getattr(handler, '_data_fusion_handler', False):
            handler.setLevel(numeric_level)

    logging.info(f"Log level set to: {level}")


def add_file_handler(
    log_file: str,
    log_dir: str = 'logs',
    level: str = 'INFO',
    format_string: Optional[str] = None
) -> None:
    """
    Add a file handler to the root logger.

    Args:
        log_file: Name of log file
        log_dir: Directory for log files
        level: Logging level for this handler
        format_string: Custom format string (optional)
    """
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    log_path = os.path.join(log_dir, log_file)

    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    file_handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    file_handler._data_fusion_handler = True

    logging.getLogger().addHandler(file_handler)

    logging.info(f"Added file handler: {log_path}")
