import asyncio
import json
from pathlib import Path

import mcp_server
from thumbforge import store

from conftest import image_reply, text_reply


def call(name, args=None):
    return asyncio.run(mcp_server._handle_tool(name, args or {}))


def call_tool(name, args=None):
    contents = asyncio.run(mcp_server.call_tool(name, args or {}))
    return contents[0].text


def test_lists_every_tool():
    names = {tool.name for tool in asyncio.run(mcp_server.list_tools())}
    assert names == {
        "generate_thumbnail", "generate_titles", "score_thumbnail", "ab_test_thumbnails",
        "edit_thumbnail", "face_swap", "analyze_youtube", "generate_from_youtube",
        "analyze_image_stats", "upload_image", "usage_status", "set_plan",
        "list_generations", "delete_generation",
    }


def test_generate_thumbnail_is_metered(fake_gemini):
    fake_gemini(lambda model, contents, cfg: image_reply())
    result = json.loads(call("generate_thumbnail", {"prompt": "sunset surf", "user_id": "alice"}))

    assert result["success"] is True
    assert Path(result["image_url"]).exists()
    assert result["monthly_usage"] == 1

    history = store.list_generations("alice")
    assert history[0]["id"] == result["generation_id"]
    assert history[0]["generation_type"] == "thumbnail"
    assert history[0]["metadata"] == {"style": "professional"}


def test_usage_limit_blocks_ai_call(fake_gemini):
    client = fake_gemini(lambda model, contents, cfg: image_reply())
    for _ in range(10):
        store.increment_usage("alice")

    text = call_tool("generate_thumbnail", {"prompt": "sunset surf", "user_id": "alice"})

    assert text == "ERROR: Usage limit reached. Please upgrade your plan."
    assert client.calls == []
    assert store.list_generations("alice") == []


def test_failed_call_is_not_counted(fake_gemini):
    fake_gemini(lambda model, contents, cfg: text_reply("no image for you"))
    text = call_tool("generate_thumbnail", {"prompt": "sunset surf"})

    assert text == "ERROR: No image generated"
    assert store.get_profile("local")["monthly_usage"] == 0


def test_validation_errors_are_reported():
    assert call_tool("generate_titles", {"topic": ""}) == "ERROR: Topic is required"


def test_usage_status_and_set_plan():
    store.increment_usage("alice")
    assert call("usage_status", {"user_id": "alice"}) == (
        "Plan: free\n  Usage: 1/10 this month\n  Remaining: 9"
    )
    assert call("set_plan", {"user_id": "alice", "tier": "enterprise"}) == (
        "Plan updated: enterprise (1/1000 used)"
    )
    assert call_tool("set_plan", {"user_id": "alice", "tier": "gold"}).startswith("ERROR: Unknown plan")


def test_list_and_delete_generations():
    assert call("list_generations", {"user_id": "alice"}) == "No generations yet. Start creating!"

    record = store.record_generation("alice", "title", prompt="budget travel")
    listing = call("list_generations", {"user_id": "alice"})
    assert listing.startswith("1 generation(s):")
    assert record["id"] in listing
    assert "budget travel" in listing

    assert call("delete_generation", {"user_id": "alice", "generation_id": record["id"]}) == (
        f"Deleted generation {record['id']}"
    )
    assert call("delete_generation", {"user_id": "alice"}) == "ERROR: generation_id is required"
    assert call_tool("delete_generation", {"user_id": "alice", "generation_id": record["id"]}).startswith(
        "ERROR:"
    )


def test_analyze_image_stats_is_free(tmp_path):
    from PIL import Image

    path = tmp_path / "thumb.png"
    Image.new("RGB", (64, 36), (128, 128, 128)).save(path)
    result = json.loads(call("analyze_image_stats", {"image_url": str(path)}))

    assert result["resolution"] == {"width": 64, "height": 36}
    assert store.get_profile("local")["monthly_usage"] == 0


def test_unknown_tool():
    assert call("make_coffee") == "ERROR: Unknown tool 'make_coffee'"


def test_delete_unknown_generation_message():
    assert call_tool("delete_generation", {"user_id": "alice", "generation_id": "nope"}) == (
        "ERROR: Generation not found: nope"
    )
