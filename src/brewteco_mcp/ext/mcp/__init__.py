"""MCP and HTTP adapters around the dispatcher.

Example:
    >>> from brewteco_mcp.ext.mcp import serve_mcp, serve_http
    >>> serve_mcp(settings)                    # stdio
    >>> serve_mcp(settings, transport="sse")   # push stream
    >>> serve_http(settings, port=3710)        # plain HTTP + JSON-RPC
"""

from .presenters import (
    HTTP_STATUS,
    ErrorPresenter,
    HttpErrorView,
    HttpPresenter,
    JsonRpcPresenter,
    McpPresenter,
    render_payload,
)
from .server import (
    PROTOCOL_VERSION,
    CatalogTool,
    HTTPToolServer,
    MCPServer,
    ToolServer,
    Transport,
    create_http_app,
    create_mcp_server,
    serve_http,
    serve_mcp,
)

__all__ = [
    # Servers
    "ToolServer", "MCPServer", "HTTPToolServer", "CatalogTool", "Transport", "PROTOCOL_VERSION",
    "serve_mcp", "serve_http", "create_http_app", "create_mcp_server",
    # Presenters
    "ErrorPresenter", "McpPresenter", "HttpPresenter", "HttpErrorView", "JsonRpcPresenter",
    "HTTP_STATUS", "render_payload",
]
