"""
Core infrastructure module for Data Fusion.

This module provides the foundational components including configuration management,
logging setup, and custom exceptions.
"""

from .config import AnalysisConfig, Config, CSVConfig, LoggingConfig, MergeConfig, ProfilingConfig
from .exceptions import (
    CollaboratorError,
    ConfigurationError,
    CSVDecodeError,
    DataFusionError,
    FileProcessingError,
    ValidationError,
)
from .logging_config import add_file_handler, set_log_level, setup_logging

__all__ = [
    # Configuration
    'CSVConfig',
    'ProfilingConfig',
    'MergeConfig',
    'AnalysisConfig',
    'LoggingConfig',
    'Config',

    # Exceptions
    'DataFusionError',
    'ConfigurationError',
    'FileProcessingError',
    'CSVDecodeError',
    'ValidationError',
    'CollaboratorError',

    # Logging
    'setup_logging',
    'set_log_level',
    'add_file_handler',
]

# Version info
__version__ = "1.0.0"
