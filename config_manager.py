"""
Centralized configuration manager to avoid multiple Config instances.
"""
from core.config import Config
from core.logging_config import setup_logging

DEFAULT_CONFIG_FILE = "config.toml"

# Global config instance - loaded once
_config_instance = None


def get_config(config_file_path: str = DEFAULT_CONFIG_FILE) -> Config:
    """Get the global config instance, creating it and applying its logging settings only once."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config(config_file_path=config_file_path)
        setup_logging(
            level=_config_instance.logging.level,
            log_file=_config_instance.logging.log_file,
            log_dir=_config_instance.logging.log_dir
        )
    return _config_instance


def refresh_config(config_file_path: str = DEFAULT_CONFIG_FILE) -> Config:
    """Force a refresh of the global config instance."""
    global _config_instance
    _config_instance = None
    return get_config(config_file_path)
