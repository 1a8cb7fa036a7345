"""Core domain types: results, errors, configuration."""

from .config import Config, ValueMapping, find_catalog_dir, load_config, load_config_or_default
from .errors import CatalogError, ErrorCode, exit_code_for
from .result import Err, Ok, Result

__all__ = [
    # config
    "Config",
    "ValueMapping",
    "find_catalog_dir",
    "load_config",
    "load_config_or_default",
    # errors
    "CatalogError",
    "ErrorCode",
    "exit_code_for",
    # result
    "Err",
    "Ok",
    "Result",
]
