"""Core types shared by every layer: results, exit codes, configuration."""

from .config import Config, ConfigError, GitConfig, RegistryConfig, load_config
from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "Config",
    "ConfigError",
    "GitConfig",
    "RegistryConfig",
    "load_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
