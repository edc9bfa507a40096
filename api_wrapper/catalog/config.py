"""Tool catalog models and YAML loader."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from structlog import get_logger

from .exceptions import CatalogError

logger = get_logger(__name__)

DEFAULT_SERVER_NAME = "API Wrapper MCP"
DEFAULT_SERVER_VERSION = "1.0.0"
DEFAULT_TIMEOUT_SECONDS = 30
SUPPORTED_METHODS = ("GET", "POST")


class ParamConfig(BaseModel):
    """Declared tool parameter."""

    type: str = "string"
    description: str = ""
    required: bool = False
    default: Any = None
    enum: list[Any] | None = None


class ToolConfig(BaseModel):
    """Tool definition loaded from the catalog.

    Attributes:
        name: Unique tool identifier.
        description: Human-readable description shown in tools/list.
        endpoint: Base URL of the upstream API.
        method: HTTP method, GET or POST.
        timeout: Per-call timeout in seconds.
        template: Request body template (POST only).
        query_params: Query key to placeholder template (GET only).
        headers: Header name to placeholder template.
        parameters: Parameter name to declaration.
    """

    name: str = ""
    description: str = ""
    endpoint: str = ""
    method: str = ""
    timeout: int = DEFAULT_TIMEOUT_SECONDS
    template: str = ""
    query_params: dict[str, str] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)
    parameters: dict[str, ParamConfig] = Field(default_factory=dict)

    @field_validator("timeout", mode="before")
    @classmethod
    def _default_timeout(cls, value: Any) -> Any:
        if value is None or (isinstance(value, (int, float)) and value <= 0):
            return DEFAULT_TIMEOUT_SECONDS
        return value

    @field_validator("query_params", "headers", "parameters", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class ServerConfig(BaseModel):
    """Server metadata reported during initialize."""

    name: str = DEFAULT_SERVER_NAME
    description: str = ""
    version: str = DEFAULT_SERVER_VERSION


class AuthConfig(BaseModel):
    """Bearer token lookup for outbound calls."""

    token_env_var: str = ""


class CatalogConfig(BaseModel):
    """Container for the server metadata, auth settings and tool definitions."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    tools: list[ToolConfig] = Field(default_factory=list)

    def get_tool(self, name: str) -> ToolConfig | None:
        """Return the tool with exactly this name, or None."""
        return next((tool for tool in self.tools if tool.name == name), None)


def validate_catalog(catalog: CatalogConfig) -> CatalogConfig:
    """Apply server defaults and check tool definitions.

    Args:
        catalog: Parsed catalog.

    Returns:
        The same catalog with defaults filled in.

    Raises:
        CatalogError: If a tool is missing a name or endpoint, uses an
            unsupported method, or shares its name with another tool.
    """
    if not catalog.server.name:
        catalog.server.name = DEFAULT_SERVER_NAME
    if not catalog.server.version:
        catalog.server.version = DEFAULT_SERVER_VERSION

    seen: set[str] = set()
    for index, tool in enumerate(catalog.tools):
        if not tool.name:
            raise CatalogError(f"tool at index {index} has no name")
        if not tool.endpoint:
            raise CatalogError(f"tool '{tool.name}' has no endpoint")
        if tool.method not in SUPPORTED_METHODS:
            raise CatalogError(
                f"tool '{tool.name}' has unsupported method: {tool.method} (must be GET or POST)"
            )
        if tool.name in seen:
            raise CatalogError(f"duplicate tool name '{tool.name}'")
        seen.add(tool.name)

    return catalog


def parse_catalog(data: dict[str, Any]) -> CatalogConfig:
    """Build and validate a catalog from already-decoded YAML data."""
    try:
        catalog = CatalogConfig(**(data or {}))
    except ValidationError as e:
        raise CatalogError(f"failed to parse config file: {e}")
    return validate_catalog(catalog)


def load_catalog(config_path: str | Path) -> CatalogConfig:
    """Load the tool catalog from YAML.

    Args:
        config_path: Path of the catalog file.

    Returns:
        Validated CatalogConfig.

    Raises:
        CatalogError: If the file cannot be read, parsed or validated.
    """
    path = Path(config_path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except OSError as e:
        raise CatalogError(f"failed to read config file: {e}", path=str(path))
    except yaml.YAMLError as e:
        raise CatalogError(f"failed to parse config file: {e}", path=str(path))

    if not isinstance(data, dict):
        raise CatalogError("failed to parse config file: top level must be a mapping", path=str(path))

    try:
        catalog = parse_catalog(data)
    except CatalogError as e:
        e.path = str(path)
        raise

    logger.info("catalog_loaded", path=str(path), tools=len(catalog.tools))
    return catalog
