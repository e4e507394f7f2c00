"""Addressing of cached generations as MCP resources."""

from __future__ import annotations

import json
import re
from typing import Optional

from mcp import types

from config.settings import AppConfig
from modules.services.history_service import GenerationRecord

RESOURCE_MIME_TYPE = "application/json"


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def resource_uri(config: AppConfig, index: int) -> str:
    return f"{config.resource_scheme}://{config.resource_namespace}/images/{index}"


def parse_resource_uri(config: AppConfig, uri: str) -> Optional[int]:
    """Return the history index addressed by uri, or None if it is not ours."""
    pattern = rf"^{re.escape(config.resource_scheme)}://{re.escape(config.resource_namespace)}/images/(\d+)$"
    match = re.match(pattern, uri)
    if match is None:
        return None
    return int(match.group(1))


def describe_record(config: AppConfig, index: int, record: GenerationRecord) -> types.Resource:
    return types.Resource(
        uri=resource_uri(config, index),
        name=f"Recent Flux Image: {_truncate(record.prompt, 30)}",
        mimeType=RESOURCE_MIME_TYPE,
        description=f"[{record.resolution}] Image for prompt: {record.prompt} ({record.timestamp})",
    )


def render_record(record: GenerationRecord) -> str:
    return json.dumps(record.to_resource_payload(), indent=2, ensure_ascii=False)
