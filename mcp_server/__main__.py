"""Entry point for ``python -m mcp_server``."""

from mcp_server.send_request_server import run

run()
