"""Catalog module - tool definitions loaded from YAML."""

from .config import (
    ParamConfig,
    ToolConfig,
    ServerConfig,
    AuthConfig,
    CatalogConfig,
    load_catalog,
    parse_catalog,
    validate_catalog,
)
from .exceptions import CatalogError


__all__ = [
    # Models
    "ParamConfig",
    "ToolConfig",
    "ServerConfig",
    "AuthConfig",
    "CatalogConfig",
    # Loader
    "load_catalog",
    "parse_catalog",
    "validate_catalog",
    # Exceptions
    "CatalogError",
]
