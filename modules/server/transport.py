"""MCP server composition and stdio transport."""

from __future__ import annotations

import logging
from typing import Optional

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from config.settings import AppConfig
from modules.pipelines.text2img import Text2ImageService
from modules.server.handlers import build_handlers
from modules.services.history_service import GenerationHistoryService

logger = logging.getLogger(__name__)


def build_server(
    config: AppConfig,
    text2img: Optional[Text2ImageService] = None,
    history: Optional[GenerationHistoryService] = None,
) -> Server:
    """Compose and return the MCP server."""
    handlers = build_handlers(config, text2img=text2img, history=history)

    server: Server = Server(config.server_name, version=config.server_version)
    server.list_resources()(handlers["list_resources"])
    server.read_resource()(handlers["read_resource"])
    server.list_tools()(handlers["list_tools"])

    # McpError from call_tool must reach the client as a JSON-RPC error;
    # server.call_tool() would wrap it into an isError result.
    call_tool = handlers["call_tool"]

    async def handle_call_tool(request: types.CallToolRequest) -> types.ServerResult:
        result = await call_tool(request.params.name, request.params.arguments)
        return types.ServerResult(result)

    server.request_handlers[types.CallToolRequest] = handle_call_tool
    return server


async def serve_stdio(server: Server) -> None:
    """Run the server over stdin/stdout until the stream closes."""
    async with stdio_server() as (read_stream, write_stream):
        logger.info("SiliconFlow Flux MCP server is listening on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())
