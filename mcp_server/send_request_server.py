"""MCP demonstration server.

Exposes one static resource (server status), two tools (echo and an HTTP GET
proxy) and one prompt (slogan generation) over stdio. Diagnostics are logged
to stderr so that stdout only carries protocol messages.
"""

import asyncio
import logging
import sys
from functools import partial
from typing import List, Optional

from dotenv import load_dotenv
from mcp import types

from config.settings import Settings
from mcp_server.capabilities import CapabilityServer
from mcp_server.request_proxy import send_get_request
from models.data_models import EchoMessageArgs, GenerateSloganArgs, SendGetRequestArgs

logger = logging.getLogger(__name__)


STATUS_URI = "resource://status/server"
STATUS_TEXT = "服务器运行正常，无已知错误。自上次启动以来已处理 100 次请求。"
ECHO_PREFIX = "你说了："
SLOGAN_TEMPLATE = "请为“{theme}”主题生成一句有创意且吸引人的口号。要求口号简短有力，易于传播。"


async def read_status(uri: str) -> str:
    return STATUS_TEXT


async def echo_message(args: EchoMessageArgs) -> List[types.TextContent]:
    return [types.TextContent(type="text", text=f"{ECHO_PREFIX}{args.message}")]


async def proxy_get_request(args: SendGetRequestArgs, timeout: float) -> List[types.TextContent]:
    text = await send_get_request(args, timeout=timeout)
    return [types.TextContent(type="text", text=text)]


def generate_slogan(args: GenerateSloganArgs) -> List[types.PromptMessage]:
    return [
        types.PromptMessage(
            role="user",
            content=types.TextContent(type="text", text=SLOGAN_TEMPLATE.format(theme=args.theme)),
        )
    ]


def create_server(config: Optional[Settings] = None) -> CapabilityServer:
    """Build the server and register every capability on it."""
    config = config or Settings()

    server = CapabilityServer(config.server_name, config.server_version)

    server.register_resource(
        "status",
        STATUS_URI,
        read_status,
        description="服务器运行状态",
        mime_type="text/plain",
    )
    server.register_tool(
        "echo_message",
        "回显您输入的任何消息",
        EchoMessageArgs,
        echo_message,
    )
    server.register_tool(
        "send-get-request",
        "发送HTTP GET请求并返回响应数据",
        SendGetRequestArgs,
        partial(proxy_get_request, timeout=config.request_timeout_seconds),
    )
    server.register_prompt(
        "generate_slogan",
        "为给定主题生成一句口号",
        GenerateSloganArgs,
        generate_slogan,
    )

    return server


def configure_logging(level: int) -> None:
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def serve(config: Settings) -> None:
    server = create_server(config)
    await server.run_stdio()


def main() -> int:
    """Run the server over stdio.

    Returns:
        Process exit code: 0 on normal shutdown, 1 if the server fails
    """
    # Load environment variables from .env file
    load_dotenv()

    try:
        config = Settings()
    except Exception as e:
        print(f"✗ Invalid configuration: {e}", file=sys.stderr, flush=True)
        return 1

    configure_logging(config.log_level_number)

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception:
        logger.exception("服务器启动时发生致命错误")
        return 1

    logger.info("MCP server stopped")
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
