"""One-off script for debugging a live generate_image call."""

from __future__ import annotations

import argparse
from typing import Optional

import anyio
from mcp.shared.exceptions import McpError

from config.settings import load_config
from modules.pipelines.arguments import RESOLUTION_VALUES
from modules.server.handlers import build_handlers
from modules.server.resources import resource_uri
from modules.utils.logging import setup_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Call the generate_image handler against SiliconFlow.")
    parser.add_argument("prompt", nargs="?", default="A cozy orange cat sleeping on a sunny windowsill")
    parser.add_argument("--resolution", choices=RESOLUTION_VALUES, default="1024x1024")
    parser.add_argument("--seed", type=int, default=None)
    return parser.parse_args()


async def run(prompt: str, resolution: str, seed: Optional[int]) -> None:
    # 1. Real configuration, same handlers the server registers
    config = load_config()
    setup_logging(config)
    handlers = build_handlers(config)

    arguments: dict[str, object] = {"prompt": prompt, "resolution": resolution}
    if seed is not None:
        arguments["seed"] = seed

    # 2. Tool call, then read back the cached record
    try:
        result = await handlers["call_tool"]("generate_image", arguments)
    except McpError as exc:
        print("Protocol error:", exc.error.code, exc.error.message)
        return

    for item in result.content:
        print("Error:" if result.isError else "Result:", item.text)
    if result.isError:
        return

    contents = await handlers["read_resource"](resource_uri(config, 0))
    print(contents[0].content)


def main() -> None:
    args = parse_args()
    anyio.run(run, args.prompt, args.resolution, args.seed)


if __name__ == "__main__":
    main()
