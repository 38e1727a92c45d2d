"""Core types shared by every layer."""

from .config import Config, ConfigError, load_config, load_settings
from .errors import ErrorCode, error_code_for
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "Config",
    "ConfigError",
    "load_config",
    "load_settings",
    # errors
    "ErrorCode",
    "error_code_for",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
