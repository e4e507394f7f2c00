"""Request handlers for the generate_image tool and the history resources."""

from __future__ import annotations

import logging
from typing import Any, Optional

import anyio.to_thread
from mcp import types
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.shared.exceptions import McpError

from config.settings import AppConfig
from modules.pipelines.arguments import RESOLUTION_VALUES, GenerationRequest, ParseFailure, parse_generation_args
from modules.pipelines.text2img import ImageResult, Text2ImageService, UpstreamError, UpstreamShapeError
from modules.server.resources import (
    RESOURCE_MIME_TYPE,
    describe_record,
    parse_resource_uri,
    render_record,
)
from modules.services.history_service import GenerationHistoryService, GenerationRecord, utc_timestamp

logger = logging.getLogger(__name__)

TOOL_NAME = "generate_image"

INVALID_ARGUMENTS_MESSAGE = (
    "Invalid arguments. Required: prompt (non-empty string), resolution "
    f"(one of {', '.join(RESOLUTION_VALUES)}). Optional: seed (integer >= 0)."
)


def _protocol_error(code: int, message: str) -> McpError:
    return McpError(types.ErrorData(code=code, message=message))


def tool_definition(config: AppConfig) -> types.Tool:
    return types.Tool(
        name=TOOL_NAME,
        description=(
            "Generates an image using the SiliconFlow API with the Flux Schnell model "
            f"({config.model_id}). Provide a detailed English prompt and select a resolution."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "prompt": {
                    "type": "string",
                    "description": "Required. The detailed text prompt for image generation. "
                    "English prompts give the best results.",
                },
                "resolution": {
                    "type": "string",
                    "description": "Required. The desired image resolution.",
                    "enum": list(RESOLUTION_VALUES),
                },
                "seed": {
                    "type": "integer",
                    "description": "Optional. A specific seed for reproducibility. "
                    "If omitted, a random seed is used.",
                    "minimum": 0,
                },
            },
            "required": ["prompt", "resolution"],
        },
    )


def format_markdown_image(result: ImageResult) -> str:
    """Render a generation as a Markdown image, alt text cut to 50 characters."""
    alt_text = result.prompt[:50] + ("..." if len(result.prompt) > 50 else "")
    seed_text = f" (Seed: {result.seed})" if result.seed is not None else ""
    return f"![{alt_text}]({result.image_url}){seed_text}"


def format_upstream_error(error: UpstreamError) -> str:
    status = error.status if error.status is not None else "n/a"
    return f"SiliconFlow API error (Status {status}): {error.message}"


def build_handlers(
    config: AppConfig,
    text2img: Optional[Text2ImageService] = None,
    history: Optional[GenerationHistoryService] = None,
) -> dict[str, Any]:
    """Return the MCP request handlers bound to one service and history store."""

    service = text2img or Text2ImageService(config)
    store = history if history is not None else GenerationHistoryService(config.history_capacity)

    async def list_resources() -> list[types.Resource]:
        return [describe_record(config, index, record) for index, record in store.list()]

    async def read_resource(uri: Any) -> list[ReadResourceContents]:
        uri_text = str(uri)
        index = parse_resource_uri(config, uri_text)
        if index is None:
            raise _protocol_error(types.INVALID_REQUEST, f"Unknown resource URI: {uri_text}")

        record = store.get(index)
        if record is None:
            raise _protocol_error(types.INVALID_REQUEST, f"Image generation not found at index: {index}")
        return [ReadResourceContents(content=render_record(record), mime_type=RESOURCE_MIME_TYPE)]

    async def list_tools() -> list[types.Tool]:
        return [tool_definition(config)]

    async def generate_image(request: GenerationRequest) -> types.CallToolResult:
        logger.info(
            'Received image generation request: prompt="%s", resolution="%s", seed=%s',
            request.prompt,
            request.resolution.value,
            request.seed if request.seed is not None else "random",
        )
        try:
            result = await anyio.to_thread.run_sync(service.generate, request)
        except UpstreamError as exc:
            logger.error("Error calling SiliconFlow API (status %s): %s", exc.status, exc.message)
            return types.CallToolResult(
                content=[types.TextContent(type="text", text=format_upstream_error(exc))],
                isError=True,
            )
        except UpstreamShapeError as exc:
            raise _protocol_error(types.INTERNAL_ERROR, str(exc)) from exc

        # Runs on the event loop after the await; no other call interleaves here.
        store.record(
            GenerationRecord(
                prompt=result.prompt,
                resolution=result.resolution,
                image_url=result.image_url,
                raw_response=result.raw_response,
                timestamp=utc_timestamp(),
            )
        )
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=format_markdown_image(result))],
        )

    async def call_tool(name: str, arguments: Any) -> types.CallToolResult:
        if name != TOOL_NAME:
            raise _protocol_error(types.METHOD_NOT_FOUND, f"Unknown tool: {name}")

        parsed = parse_generation_args(arguments)
        if isinstance(parsed, ParseFailure):
            logger.warning("Invalid generate_image arguments (%s): %r", parsed.reason, arguments)
            raise _protocol_error(types.INVALID_PARAMS, INVALID_ARGUMENTS_MESSAGE)

        try:
            return await generate_image(parsed.request)
        except McpError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error while generating image")
            raise _protocol_error(
                types.INTERNAL_ERROR,
                f"An unexpected error occurred while generating the image: {exc}",
            ) from exc

    return {
        "list_resources": list_resources,
        "read_resource": read_resource,
        "list_tools": list_tools,
        "call_tool": call_tool,
    }
