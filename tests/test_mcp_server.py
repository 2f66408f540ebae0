import asyncio

from card_localizer import mcp_server
from card_localizer.models import LocalizeResult


def test_tool_returns_tri_state_int(monkeypatch):
    seen = {}

    async def fake_localize(character, config):
        seen["character"] = character
        return LocalizeResult.NOOP

    monkeypatch.setattr(mcp_server, "localize_card", fake_localize)
    assert asyncio.run(mcp_server.localize_images("Alice3.png", name="Alice")) == 0
    assert seen["character"].avatar == "Alice3.png"
    assert seen["character"].name == "Alice"
