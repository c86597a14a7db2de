"""Capability registry wrapping the low-level MCP server.

A ``CapabilityServer`` owns one ``mcp.server.lowlevel.Server`` and answers the
list/read/call/get requests from the resources, tools and prompts registered on
it. Arguments are validated against the registered pydantic model before a tool
or prompt handler runs, so handlers only ever see typed, validated input.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from pydantic import AnyUrl, BaseModel, ValidationError

from models.data_models import input_schema, prompt_arguments

logger = logging.getLogger(__name__)


ResourceHandler = Callable[[str], Awaitable[str]]
ToolHandler = Callable[[Any], Awaitable[List[types.TextContent]]]
PromptHandler = Callable[[Any], List[types.PromptMessage]]


@dataclass
class ResourceDescriptor:
    """A read-only data endpoint addressed by a fixed URI."""

    name: str
    uri: str
    handler: ResourceHandler
    description: Optional[str] = None
    mime_type: str = "text/plain"

    def to_resource(self) -> types.Resource:
        return types.Resource(
            name=self.name,
            uri=AnyUrl(self.uri),
            description=self.description,
            mimeType=self.mime_type,
        )


@dataclass
class ToolDescriptor:
    """An invocable action with a validated argument model."""

    name: str
    description: str
    input_schema: Type[BaseModel]
    handler: ToolHandler

    def to_tool(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=input_schema(self.input_schema),
        )


@dataclass
class PromptDescriptor:
    """A pure template producing a message sequence."""

    name: str
    description: str
    input_schema: Type[BaseModel]
    handler: PromptHandler

    def to_prompt(self) -> types.Prompt:
        return types.Prompt(
            name=self.name,
            description=self.description,
            arguments=[
                types.PromptArgument(
                    name=arg["name"],
                    description=arg["description"],
                    required=arg["required"],
                )
                for arg in prompt_arguments(self.input_schema)
            ],
        )


def _validate(kind: str, name: str, model: Type[BaseModel], arguments: Optional[Dict[str, Any]]) -> BaseModel:
    try:
        return model.model_validate(arguments or {})
    except ValidationError as e:
        logger.warning(f"Rejected arguments for {kind} '{name}': {e.error_count()} error(s)")
        raise ValueError(f"Invalid arguments for {kind} '{name}': {e}") from e


class CapabilityServer:
    """Registers MCP capabilities and dispatches protocol requests to them."""

    def __init__(self, name: str, version: str):
        self.server: Server = Server(name, version=version)
        self._resources: Dict[str, ResourceDescriptor] = {}
        self._tools: Dict[str, ToolDescriptor] = {}
        self._prompts: Dict[str, PromptDescriptor] = {}
        self._install_handlers()

    @property
    def name(self) -> str:
        return self.server.name

    @property
    def version(self) -> Optional[str]:
        return self.server.version

    # ==================== Registration ====================

    def register_resource(
        self,
        name: str,
        uri: str,
        handler: ResourceHandler,
        description: Optional[str] = None,
        mime_type: str = "text/plain",
    ) -> None:
        """Add a read-only resource served at ``uri``."""
        self._resources[uri] = ResourceDescriptor(name, uri, handler, description, mime_type)
        logger.info(f"已注册资源: {uri}")

    def register_tool(
        self,
        name: str,
        description: str,
        input_schema: Type[BaseModel],
        handler: ToolHandler,
    ) -> None:
        """Add a tool whose arguments are validated by ``input_schema``."""
        self._tools[name] = ToolDescriptor(name, description, input_schema, handler)
        logger.info(f"已注册工具: {name}")

    def register_prompt(
        self,
        name: str,
        description: str,
        input_schema: Type[BaseModel],
        handler: PromptHandler,
    ) -> None:
        """Add a prompt template whose arguments are validated by ``input_schema``."""
        self._prompts[name] = PromptDescriptor(name, description, input_schema, handler)
        logger.info(f"已注册提示: {name}")

    # ==================== Dispatch ====================

    def list_resources(self) -> List[types.Resource]:
        return [resource.to_resource() for resource in self._resources.values()]

    def list_tools(self) -> List[types.Tool]:
        return [tool.to_tool() for tool in self._tools.values()]

    def list_prompts(self) -> List[types.Prompt]:
        return [prompt.to_prompt() for prompt in self._prompts.values()]

    async def read_resource(self, uri: str) -> List[ReadResourceContents]:
        """Read a registered resource.

        Raises:
            ValueError: If no resource is registered at ``uri``
        """
        resource = self._resources.get(uri)
        if resource is None:
            logger.warning(f"read_resource: Resource '{uri}' not found")
            raise ValueError(f"Unknown resource: {uri}")

        content = await resource.handler(uri)
        return [ReadResourceContents(content=content, mime_type=resource.mime_type)]

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        """Validate arguments and run a registered tool.

        Raises:
            ValueError: If the tool is unknown or the arguments are invalid
        """
        tool = self._tools.get(name)
        if tool is None:
            logger.warning(f"call_tool: Tool '{name}' not found")
            raise ValueError(f"Unknown tool: {name}")

        args = _validate("tool", name, tool.input_schema, arguments)
        logger.info(f"call_tool: Starting '{name}'")
        return await tool.handler(args)

    async def get_prompt(self, name: str, arguments: Optional[Dict[str, str]]) -> types.GetPromptResult:
        """Validate arguments and render a registered prompt.

        Raises:
            ValueError: If the prompt is unknown or the arguments are invalid
        """
        prompt = self._prompts.get(name)
        if prompt is None:
            logger.warning(f"get_prompt: Prompt '{name}' not found")
            raise ValueError(f"Unknown prompt: {name}")

        args = _validate("prompt", name, prompt.input_schema, arguments)
        logger.info(f"get_prompt: Rendering '{name}'")
        return types.GetPromptResult(
            description=prompt.description,
            messages=prompt.handler(args),
        )

    def _install_handlers(self) -> None:
        app = self.server

        @app.list_resources()
        async def list_resources() -> List[types.Resource]:
            return self.list_resources()

        @app.read_resource()
        async def read_resource(uri: AnyUrl) -> List[ReadResourceContents]:
            return await self.read_resource(str(uri))

        @app.list_tools()
        async def list_tools() -> List[types.Tool]:
            return self.list_tools()

        @app.call_tool()
        async def call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
            return await self.call_tool(name, arguments)

        @app.list_prompts()
        async def list_prompts() -> List[types.Prompt]:
            return self.list_prompts()

        @app.get_prompt()
        async def get_prompt(name: str, arguments: Optional[Dict[str, str]]) -> types.GetPromptResult:
            return await self.get_prompt(name, arguments)

    # ==================== Serving ====================

    async def connect(self, read_stream, write_stream) -> None:
        """Serve requests arriving on ``read_stream`` until the stream closes."""
        await self.server.run(read_stream, write_stream, self.server.create_initialization_options())

    async def run_stdio(self) -> None:
        """Serve over standard input/output for the life of the process."""
        async with stdio_server() as (read_stream, write_stream):
            logger.info("MCP演示服务器已成功启动，并监听Stdio传输。")
            await self.connect(read_stream, write_stream)
