"""MCP transport - SSE sessions and JSON-RPC routing."""
