"""Core types: results, context store, versions and configuration."""

from .config import ConfigFileError, ReleaseConfig, load_config, load_config_or_default
from .context import Context
from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok
from .version import Version, parse_version, resolve_next_version

__all__ = [
    # config
    "ConfigFileError",
    "ReleaseConfig",
    "load_config",
    "load_config_or_default",
    # context
    "Context",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
    # version
    "Version",
    "parse_version",
    "resolve_next_version",
]
