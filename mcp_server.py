#!/usr/bin/env python3
"""
ThumbForge - MCP Server
=======================
Model Context Protocol server that exposes ThumbForge's thumbnail tools.

Metered tools (count against the user's monthly plan limit):
  - generate_thumbnail: Generate a thumbnail from a prompt
  - generate_titles: Generate title ideas for a topic
  - score_thumbnail: CTR score with category feedback
  - ab_test_thumbnails: Pick the stronger of two thumbnails
  - edit_thumbnail: AI edits (enhance, text overlay, object edits...)
  - face_swap: Swap a face onto a thumbnail
  - analyze_youtube: Find and analyze a YouTube video's thumbnail
  - generate_from_youtube: Remix a YouTube thumbnail into new variants

Free tools:
  - analyze_image_stats: Local brightness / contrast / colors / faces
  - upload_image: Upload an image to Cloudinary
  - usage_status: Show plan and usage
  - set_plan: Change a user's plan
  - list_generations: Recent generation history
  - delete_generation: Delete a history entry

Run: python mcp_server.py
"""

import asyncio
import contextlib
import json
import sys
from typing import Any

# MCP SDK imports
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from thumbforge import config, store
from thumbforge.gateway import externalize_images
from thumbforge.store import run_metered

# ─── Helpers ───────────────────────────────────────────────────────────

def to_text(result: dict) -> str:
    return json.dumps(externalize_images(result), ensure_ascii=False, indent=2)


def _user(args: dict) -> str:
    return args.get("user_id") or config.DEFAULT_USER_ID


_USER_PROP = {
    "user_id": {
        "type": "string",
        "description": "Profile to bill the generation to (default: THUMBFORGE_USER_ID or 'local')",
    }
}

_PLATFORM_PROP = {
    "platform": {
        "type": "string",
        "enum": ["youtube", "instagram", "tiktok", "twitter", "facebook"],
        "default": "youtube",
    }
}


# ─── MCP Server ───────────────────────────────────────────────────────

app = Server("thumbforge")


@app.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(
            name="generate_thumbnail",
            description=(
                "Generate a thumbnail image from a prompt, tuned for the target platform "
                "(youtube 16:9, instagram 1:1, tiktok 9:16). Counts against the usage limit."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "prompt": {"type": "string", "description": "What the thumbnail should show"},
                    **_PLATFORM_PROP,
                    "style": {"type": "string", "default": "professional"},
                    **_USER_PROP,
                },
                "required": ["prompt"],
            },
        ),
        Tool(
            name="generate_titles",
            description="Generate click-worthy video titles for a topic. Counts against the usage limit.",
            inputSchema={
                "type": "object",
                "properties": {
                    "topic": {"type": "string"},
                    "platform": {"type": "string", "default": "YouTube"},
                    "tone": {"type": "string", "default": "engaging"},
                    "count": {"type": "integer", "default": 5, "minimum": 1, "maximum": 20},
                    **_USER_PROP,
                },
                "required": ["topic"],
            },
        ),
        Tool(
            name="score_thumbnail",
            description=(
                "Score a thumbnail 1-100 with grade, CTR prediction, category feedback and "
                "prioritized improvements. Accepts an http(s) URL, data URL or local path."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "image_url": {"type": "string"},
                    "niche": {"type": "string", "default": "general"},
                    **_USER_PROP,
                },
                "required": ["image_url"],
            },
        ),
        Tool(
            name="ab_test_thumbnails",
            description="Compare two thumbnails and predict which one gets more clicks.",
            inputSchema={
                "type": "object",
                "properties": {
                    "thumbnail_a": {"type": "string"},
                    "thumbnail_b": {"type": "string"},
                    "video_title": {"type": "string", "default": ""},
                    **_USER_PROP,
                },
                "required": ["thumbnail_a", "thumbnail_b"],
            },
        ),
        Tool(
            name="edit_thumbnail",
            description=(
                "Edit a thumbnail with AI. edit_type: enhance, text_overlay, background_change, "
                "style_transfer, color_grade, remove_background, add_effects, upscale, "
                "detect_objects, object_edit, remove_object, replace_object. "
                "detect_objects returns bounding boxes instead of an image."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "image_url": {"type": "string"},
                    "edit_type": {"type": "string", "default": "enhance"},
                    "edit_prompt": {"type": "string", "default": ""},
                    **_PLATFORM_PROP,
                    "region": {
                        "type": "object",
                        "description": "{x, y, width, height} in pixels",
                    },
                    "selected_object": {
                        "type": "object",
                        "description": "An object from detect_objects (needs 'label')",
                    },
                    "overlays": {
                        "type": "array",
                        "items": {"type": "object"},
                        "description": "[{content, type, x, y}]",
                    },
                    "title_overlay": {"type": "string"},
                    **_USER_PROP,
                },
                "required": ["image_url"],
            },
        ),
        Tool(
            name="face_swap",
            description="Swap the face in target_face_url onto source_image_url (PiAPI).",
            inputSchema={
                "type": "object",
                "properties": {
                    "source_image_url": {"type": "string"},
                    "target_face_url": {"type": "string"},
                    **_USER_PROP,
                },
                "required": ["source_image_url", "target_face_url"],
            },
        ),
        Tool(
            name="analyze_youtube",
            description="Find the available thumbnails of a YouTube video and analyze the best one.",
            inputSchema={
                "type": "object",
                "properties": {"youtube_url": {"type": "string"}, **_USER_PROP},
                "required": ["youtube_url"],
            },
        ),
        Tool(
            name="generate_from_youtube",
            description=(
                "Remix a YouTube video's thumbnail: analyze it, then generate 3 new variants "
                "(or 1) and optional title ideas in parallel."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "youtube_url": {"type": "string"},
                    "style": {"type": "string", "default": "viral"},
                    "persona": {"type": "string", "default": "none"},
                    **_PLATFORM_PROP,
                    "overlays": {
                        "type": "array",
                        "items": {"type": "string", "enum": ["subscribe", "views", "like", "duration"]},
                    },
                    "generate_multiple": {"type": "boolean", "default": True},
                    "generate_titles": {"type": "boolean", "default": True},
                    "preserve_original": {"type": "boolean", "default": True},
                    **_USER_PROP,
                },
                "required": ["youtube_url"],
            },
        ),
        Tool(
            name="analyze_image_stats",
            description=(
                "Local pixel statistics: face count, dominant colors, brightness, contrast, "
                "resolution and a heuristic quality score. Free, no AI call."
            ),
            inputSchema={
                "type": "object",
                "properties": {"image_url": {"type": "string"}},
                "required": ["image_url"],
            },
        ),
        Tool(
            name="upload_image",
            description="Upload an image (URL, data URL or saved output path) to Cloudinary.",
            inputSchema={
                "type": "object",
                "properties": {
                    "image_url": {"type": "string"},
                    "folder": {"type": "string", "default": "thumbnails"},
                },
                "required": ["image_url"],
            },
        ),
        Tool(
            name="usage_status",
            description="Show a user's plan, monthly usage and limit.",
            inputSchema={"type": "object", "properties": {**_USER_PROP}, "required": []},
        ),
        Tool(
            name="set_plan",
            description="Change a user's plan (free, pro, enterprise).",
            inputSchema={
                "type": "object",
                "properties": {
                    "tier": {"type": "string", "enum": list(store.PLANS)},
                    **_USER_PROP,
                },
                "required": ["tier"],
            },
        ),
        Tool(
            name="list_generations",
            description="List a user's most recent generations, newest first.",
            inputSchema={
                "type": "object",
                "properties": {"limit": {"type": "integer", "default": 20}, **_USER_PROP},
                "required": [],
            },
        ),
        Tool(
            name="delete_generation",
            description="Delete one generation from a user's history.",
            inputSchema={
                "type": "object",
                "properties": {"generation_id": {"type": "string"}, **_USER_PROP},
                "required": ["generation_id"],
            },
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    # stdout carries the protocol; progress prints go to stderr
    with contextlib.redirect_stdout(sys.stderr):
        try:
            result = await _handle_tool(name, arguments or {})
        except Exception as e:
            result = f"ERROR: {str(e)}"
    return [TextContent(type="text", text=result)]


async def _handle_tool(name: str, args: dict[str, Any]) -> str:

    # ── generate_thumbnail ────────────────────────────────────────
    if name == "generate_thumbnail":
        from thumbforge.generator import generate_thumbnail

        prompt = args.get("prompt", "")
        platform = args.get("platform", "youtube")
        style = args.get("style", "professional")
        result = run_metered(
            _user(args), "thumbnail",
            lambda: generate_thumbnail(prompt, platform, style),
            prompt=prompt, platform=platform, metadata={"style": style},
        )
        return to_text(result)

    # ── generate_titles ───────────────────────────────────────────
    elif name == "generate_titles":
        from thumbforge.generator import generate_titles

        topic = args.get("topic", "")
        platform = args.get("platform", "YouTube")
        result = run_metered(
            _user(args), "title",
            lambda: generate_titles(topic, platform, args.get("tone", "engaging"), args.get("count", 5)),
            prompt=topic, platform=platform.lower(),
        )
        return to_text(result)

    # ── score_thumbnail ───────────────────────────────────────────
    elif name == "score_thumbnail":
        from thumbforge.strategist import score_thumbnail

        niche = args.get("niche", "general")
        result = run_metered(
            _user(args), "score",
            lambda: score_thumbnail(args.get("image_url", ""), niche),
            metadata={"niche": niche},
        )
        return to_text(result)

    # ── ab_test_thumbnails ────────────────────────────────────────
    elif name == "ab_test_thumbnails":
        from thumbforge.strategist import ab_test_thumbnails

        title = args.get("video_title", "")
        result = run_metered(
            _user(args), "ab_test",
            lambda: ab_test_thumbnails(args.get("thumbnail_a", ""), args.get("thumbnail_b", ""), title),
            prompt=title or None,
        )
        return to_text(result)

    # ── edit_thumbnail ────────────────────────────────────────────
    elif name == "edit_thumbnail":
        from thumbforge.editor import edit_thumbnail

        edit_type = args.get("edit_type", "enhance")
        platform = args.get("platform", "youtube")
        result = run_metered(
            _user(args), "edit",
            lambda: edit_thumbnail(
                args.get("image_url", ""),
                edit_prompt=args.get("edit_prompt", ""),
                edit_type=edit_type,
                platform=platform,
                region=args.get("region"),
                selected_object=args.get("selected_object"),
                overlays=args.get("overlays"),
                title_overlay=args.get("title_overlay"),
            ),
            prompt=args.get("edit_prompt") or None,
            platform=platform,
            metadata={"edit_type": edit_type},
        )
        return to_text(result)

    # ── face_swap ─────────────────────────────────────────────────
    elif name == "face_swap":
        from thumbforge.faceswap import face_swap

        result = run_metered(
            _user(args), "face_swap",
            lambda: face_swap(args.get("source_image_url", ""), args.get("target_face_url", "")),
        )
        return to_text(result)

    # ── analyze_youtube ───────────────────────────────────────────
    elif name == "analyze_youtube":
        from thumbforge.youtube import analyze_youtube

        url = args.get("youtube_url", "")
        result = run_metered(
            _user(args), "youtube_analysis",
            lambda: analyze_youtube(url),
            prompt=url, platform="youtube",
        )
        return to_text(result)

    # ── generate_from_youtube ─────────────────────────────────────
    elif name == "generate_from_youtube":
        from thumbforge.youtube import generate_from_youtube

        url = args.get("youtube_url", "")
        style = args.get("style", "viral")
        persona = args.get("persona", "none")
        platform = args.get("platform", "youtube")
        result = run_metered(
            _user(args), "youtube_remix",
            lambda: generate_from_youtube(
                url,
                style=style,
                persona=persona,
                platform=platform,
                overlays=args.get("overlays") or [],
                generate_multiple=args.get("generate_multiple", True),
                generate_titles=args.get("generate_titles", True),
                preserve_original=args.get("preserve_original", True),
            ),
            prompt=url, platform=platform,
            metadata={"style": style, "persona": persona},
        )
        return to_text(result)

    # ── analyze_image_stats ───────────────────────────────────────
    elif name == "analyze_image_stats":
        from thumbforge.image_stats import analyze_image

        return to_text(analyze_image(args.get("image_url", "")))

    # ── upload_image ──────────────────────────────────────────────
    elif name == "upload_image":
        from thumbforge.uploader import upload_image

        image = args.get("image_url", "")
        if image and not image.startswith(("http://", "https://", "data:")):
            from thumbforge.gateway import image_to_data_url, load_image
            image = image_to_data_url(load_image(image))
        return to_text(upload_image(image, args.get("folder", "thumbnails")))

    # ── usage_status ──────────────────────────────────────────────
    elif name == "usage_status":
        profile = store.get_profile(_user(args))
        remaining = max(0, profile["usage_limit"] - profile["monthly_usage"])
        return (
            f"Plan: {profile['subscription_tier']}\n"
            f"  Usage: {profile['monthly_usage']}/{profile['usage_limit']} this month\n"
            f"  Remaining: {remaining}"
        )

    # ── set_plan ──────────────────────────────────────────────────
    elif name == "set_plan":
        profile = store.set_subscription_tier(_user(args), args.get("tier", ""))
        return (
            f"Plan updated: {profile['subscription_tier']} "
            f"({profile['monthly_usage']}/{profile['usage_limit']} used)"
        )

    # ── list_generations ──────────────────────────────────────────
    elif name == "list_generations":
        records = store.list_generations(_user(args), args.get("limit", store.HISTORY_LIMIT))
        if not records:
            return "No generations yet. Start creating!"
        lines = [f"{len(records)} generation(s):"]
        for g in records:
            detail = g.get("prompt") or g.get("image_url") or ""
            lines.append(f"  {g['id']}  {g['created_at'][:19]}  {g['generation_type']:<16} {detail[:60]}")
        return "\n".join(lines)

    # ── delete_generation ─────────────────────────────────────────
    elif name == "delete_generation":
        generation_id = args.get("generation_id", "")
        if not generation_id:
            return "ERROR: generation_id is required"
        store.delete_generation(_user(args), generation_id)
        return f"Deleted generation {generation_id}"

    else:
        return f"ERROR: Unknown tool '{name}'"


# ─── Main ─────────────────────────────────────────────────────────────

async def main():
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
