"""MCP server exposing the card image localizer as a tool."""

from __future__ import annotations

import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from .config import LocalizeConfig
from .localizer import localize_images as localize_card
from .models import CharacterRef

logger = logging.getLogger("card_localizer.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="card-localizer")


@mcp.tool()
async def localize_images(avatar: str, name: Optional[str] = None) -> int:
    """Download a card's remote images and rewrite it to use local copies.

    Returns 1 when the card was updated, 0 when there was nothing to do and
    -1 on failure.
    """
    config = LocalizeConfig.from_env()
    result = await localize_card(CharacterRef(avatar=avatar, name=name), config)
    return int(result)


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
