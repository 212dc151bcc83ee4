"""
Configuration management for Data Fusion.

This module provides a split configuration system that separates concerns
into focused configuration classes, persisted as a single TOML file.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import toml

from .exceptions import ConfigurationError

VALID_STRATEGIES = ('inner_join', 'left_join', 'outer_join', 'smart_merge', 'append')
VALID_UNIQUENESS_BASES = ('examples', 'non_null')
VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class CSVConfig:
    """Configuration for CSV decoding and ingestion."""

    dynamic_typing: bool = True
    max_upload_mb: float = 10
    sample_row_count: int = 5

    def validate(self) -> List[str]:
        """Validate the CSV configuration and return any errors."""
        errors = []

        if self.max_upload_mb <= 0:
            errors.append("max_upload_mb must be positive")

        if self.sample_row_count < 0:
            errors.append("sample_row_count cannot be negative")

        return errors


@dataclass
class ProfilingConfig:
    """Configuration for column profiling and identifier detection."""

    example_value_count: int = 3
    # 'examples' compares unique counts against the stored example values,
    # 'non_null' against the true non-null count of the column
    identifier_uniqueness_basis: str = 'examples'

    def validate(self) -> List[str]:
        """Validate the profiling configuration and return any errors."""
        errors = []

        if self.example_value_count < 0:
            errors.append("example_value_count cannot be negative")

        if self.identifier_uniqueness_basis not in VALID_UNIQUENESS_BASES:
            errors.append(f"identifier_uniqueness_basis must be one of {list(VALID_UNIQUENESS_BASES)}")

        return errors


@dataclass
class MergeConfig:
    """Configuration for dataset merging."""

    default_strategy: str = 'outer_join'

    def validate(self) -> List[str]:
        """Validate the merge configuration and return any errors."""
        errors = []

        if self.default_strategy not in VALID_STRATEGIES:
            errors.append(f"default_strategy must be one of {list(VALID_STRATEGIES)}")

        return errors


@dataclass
class AnalysisConfig:
    """Configuration for the insight generation step."""

    max_rows: int = 100

    def validate(self) -> List[str]:
        errors = []
        if self.max_rows <= 0:
            errors.append("max_rows must be positive")
        return errors


@dataclass
class LoggingConfig:
    """Configuration for application logging."""

    level: str = 'INFO'
    log_file: Optional[str] = None
    log_dir: str = 'logs'

    def validate(self) -> List[str]:
        errors = []
        if self.level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"level must be one of {list(VALID_LOG_LEVELS)}")
        return errors


@dataclass
class Config:
    """Main configuration class that combines all configuration sections."""

    config_file_path: Optional[str] = None

    csv: CSVConfig = field(default_factory=CSVConfig)
    profiling: ProfilingConfig = field(default_factory=ProfilingConfig)
    merge: MergeConfig = field(default_factory=MergeConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """Load configuration when an instance is created with a file path."""
        if self.config_file_path:
            self.load_config()

    def to_dict(self) -> dict:
        """Convert all sections to a TOML-ready dictionary."""
        logging_section = {
            'level': self.logging.level,
            'log_dir': self.logging.log_dir,
        }
        # TOML has no null value
        if self.logging.log_file:
            logging_section['log_file'] = self.logging.log_file

        return {
            'csv': {
                'dynamic_typing': self.csv.dynamic_typing,
                'max_upload_mb': self.csv.max_upload_mb,
                'sample_row_count': self.csv.sample_row_count,
            },
            'profiling': {
                'example_value_count': self.profiling.example_value_count,
                'identifier_uniqueness_basis': self.profiling.identifier_uniqueness_basis,
            },
            'merge': {
                'default_strategy': self.merge.default_strategy,
            },
            'analysis': {
                'max_rows': self.analysis.max_rows,
            },
            'logging': logging_section,
        }

    def save_config(self) -> None:
        """Save current configuration to the TOML file."""
        if not self.config_file_path:
            raise ConfigurationError("No configuration file path set")

        try:
            with open(self.config_file_path, 'w') as f:
                toml.dump(self.to_dict(), f)
            logging.info(f"Configuration saved to {self.config_file_path}")
        except OSError as e:
            error_msg = f"Error saving configuration: {e}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg, config_file=self.config_file_path)

    def load_config(self) -> None:
        """Load configuration from the TOML file, creating it with defaults if missing."""
        try:
            with open(self.config_file_path) as f:
                config_data = toml.load(f)
        except FileNotFoundError:
            logging.info(f"{self.config_file_path} not found. Creating with default values.")
            self.save_config()
            return
        except toml.TomlDecodeError as e:
            error_msg = f"Error decoding {self.config_file_path}: {e}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg, config_file=self.config_file_path)
        except OSError as e:
            error_msg = f"Error loading configuration: {e}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg, config_file=self.config_file_path)

        if 'csv' in config_data:
            csv_config = config_data['csv']
            self.csv.dynamic_typing = csv_config.get('dynamic_typing', self.csv.dynamic_typing)
            self.csv.max_upload_mb = csv_config.get('max_upload_mb', self.csv.max_upload_mb)
            self.csv.sample_row_count = csv_config.get('sample_row_count', self.csv.sample_row_count)

        if 'profiling' in config_data:
            profiling_config = config_data['profiling']
            self.profiling.example_value_count = profiling_config.get(
                'example_value_count', self.profiling.example_value_count)
            self.profiling.identifier_uniqueness_basis = profiling_config.get(
                'identifier_uniqueness_basis', self.profiling.identifier_uniqueness_basis)

        if 'merge' in config_data:
            self.merge.default_strategy = config_data['merge'].get('default_strategy', self.merge.default_strategy)

        if 'analysis' in config_data:
            self.analysis.max_rows = config_data['analysis'].get('max_rows', self.analysis.max_rows)

        if 'logging' in config_data:
            logging_config = config_data['logging']
            self.logging.level = logging_config.get('level', self.logging.level)
            self.logging.log_file = logging_config.get('log_file', self.logging.log_file)
            self.logging.log_dir = logging_config.get('log_dir', self.logging.log_dir)

        errors = self.validate()
        if errors:
            error_msg = f"Invalid configuration in {self.config_file_path}: {'; '.join(errors)}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg, config_file=self.config_file_path)

        logging.info(f"Configuration loaded from {self.config_file_path}")

    def validate(self) -> List[str]:
        """Validate all configuration sections and return any errors."""
        errors = []
        errors.extend(self.csv.validate())
        errors.extend(self.profiling.validate())
        errors.extend(self.merge.validate())
        errors.extend(self.analysis.validate())
        errors.extend(self.logging.validate())
        return errors
