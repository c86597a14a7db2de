"""MCP client wrapper for communicating with the sendRequest MCP server."""

import sys
from contextlib import AsyncExitStack
from pathlib import Path
from typing import Any, Dict, List, Optional

from mcp import ClientSession, StdioServerParameters, types
from mcp.client.stdio import stdio_client
from pydantic import AnyUrl

from mcp_server.send_request_server import STATUS_URI


PROJECT_ROOT = Path(__file__).parent.parent


class SendRequestMCPClient:
    """Client for communicating with the sendRequest MCP server."""

    def __init__(self, command: Optional[str] = None, args: Optional[List[str]] = None):
        """Initialize MCP client.

        Args:
            command: Executable used to start the server. Defaults to the current interpreter.
            args: Arguments for ``command``. Defaults to ``-m mcp_server``.
        """
        self.session: Optional[ClientSession] = None
        self._exit_stack: Optional[AsyncExitStack] = None

        self.server_params = StdioServerParameters(
            command=command or sys.executable,
            args=args if args is not None else ["-m", "mcp_server"],
            env=None,
            cwd=PROJECT_ROOT,
        )

    @classmethod
    def from_session(cls, session: ClientSession) -> "SendRequestMCPClient":
        """Wrap an already initialized session (e.g. an in-memory one)."""
        client = cls()
        client.session = session
        return client

    async def connect(self):
        """Start the server process and initialize the session."""
        if self.session is not None:
            raise RuntimeError("Client is already connected")

        stack = AsyncExitStack()
        try:
            read_stream, write_stream = await stack.enter_async_context(stdio_client(self.server_params))
            session = await stack.enter_async_context(ClientSession(read_stream, write_stream))
            await session.initialize()
        except BaseException:
            await stack.aclose()
            raise

        self.session = session
        self._exit_stack = stack

    def _require_session(self) -> ClientSession:
        if self.session is None:
            raise RuntimeError("Client is not connected. Call connect() first.")
        return self.session

    async def call_tool(self, tool_name: str, arguments: Dict[str, Any]) -> str:
        """Call an MCP tool and return its text payload.

        Args:
            tool_name: Name of the tool to call
            arguments: Tool arguments as a dictionary

        Returns:
            Concatenated text content of the result

        Raises:
            RuntimeError: If client is not connected
            ValueError: If the server reports a protocol-level tool error
        """
        result = await self._require_session().call_tool(tool_name, arguments)

        text = "".join(item.text for item in result.content if isinstance(item, types.TextContent))
        if result.isError:
            raise ValueError(f"Tool '{tool_name}' returned error: {text}")

        return text

    async def read_status(self) -> types.TextResourceContents:
        """Read the server status resource."""
        result = await self._require_session().read_resource(AnyUrl(STATUS_URI))
        return result.contents[0]

    async def echo_message(self, message: str) -> str:
        return await self.call_tool("echo_message", {"message": message})

    async def send_get_request(
        self,
        uri: str,
        params: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
    ) -> str:
        """Ask the server to GET ``uri``.

        Returns:
            Text reply; failures of the outbound request are reported in the
            text rather than raised
        """
        arguments: Dict[str, Any] = {"uri": uri, "params": params}
        if headers is not None:
            arguments["headers"] = headers
        return await self.call_tool("send-get-request", arguments)

    async def generate_slogan(self, theme: str) -> List[types.PromptMessage]:
        result = await self._require_session().get_prompt("generate_slogan", {"theme": theme})
        return result.messages

    async def list_capability_names(self) -> Dict[str, List[str]]:
        """Names of the advertised resources (by URI), tools and prompts."""
        session = self._require_session()
        resources = await session.list_resources()
        tools = await session.list_tools()
        prompts = await session.list_prompts()
        return {
            "resources": [str(resource.uri) for resource in resources.resources],
            "tools": [tool.name for tool in tools.tools],
            "prompts": [prompt.name for prompt in prompts.prompts],
        }

    async def close(self):
        """Close the MCP connection."""
        if self._exit_stack is not None:
            await self._exit_stack.aclose()
            self._exit_stack = None
        self.session = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
