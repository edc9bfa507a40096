"""API Wrapper MCP - exposes declaratively configured HTTP endpoints as MCP tools."""

__version__ = "1.0.0"
