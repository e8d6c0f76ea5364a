"""
Thumbnail Editor - prompt-driven edits with the Gemini image model.

Each edit type maps to an instruction template, tuned by a per-platform
style guide. Region / object targets, extra overlays and a title overlay are
appended to the prompt. `detect_objects` is the one text-only edit type:
it asks for a JSON list of elements with bounding boxes instead of an image.
"""

from . import config, gateway
from .errors import GatewayError, ResponseParseError, ValidationError

# ── Platform Style Guides ─────────────────────────────────────────────

PLATFORM_STYLES = {
    "youtube": (
        "YouTube thumbnail optimization:\n"
        "- 1280x720 optimal resolution\n"
        "- Bold, contrasting colors that pop\n"
        "- Large readable text (if any)\n"
        "- Expressive faces with clear emotions\n"
        "- Avoid small details that get lost at small sizes"
    ),
    "instagram": (
        "Instagram feed optimization:\n"
        "- Square or 4:5 friendly composition\n"
        "- Cohesive aesthetic and color palette\n"
        "- Bright, warm tones, minimal text"
    ),
    "tiktok": (
        "TikTok thumbnail optimization:\n"
        "- Vertical-friendly composition\n"
        "- Bold, attention-grabbing elements\n"
        "- High contrast, vibrant colors, dynamic feel"
    ),
    "twitter": (
        "Twitter/X optimization:\n"
        "- Works in 16:9 and card formats\n"
        "- Clear focal point, professional yet engaging"
    ),
    "facebook": (
        "Facebook optimization:\n"
        "- Works in various feed placements\n"
        "- Clear, relatable imagery with warm, inviting colors"
    ),
}

# ── Edit Instructions ─────────────────────────────────────────────────
# Placeholders: {platform} {PLATFORM} {style_guide} {edit_prompt} {target}

EDIT_INSTRUCTIONS = {
    "enhance": (
        "ENHANCE this thumbnail for maximum {PLATFORM} CTR.\n{style_guide}\n\n"
        "Increase vibrancy and contrast for small screens, sharpen faces, text and main "
        "subjects, add subtle professional color grading. Keep the original composition."
    ),
    "text_overlay": (
        'Add a professional text overlay to this thumbnail: "{edit_prompt}"\n'
        "Platform: {PLATFORM}\n{style_guide}\n\n"
        "Bold readable font, strong contrast (shadow/outline/glow if needed), placed so it "
        "does not cover key elements, legible at 100x56 pixels."
    ),
    "background_change": (
        "Replace the background of this {platform} thumbnail with: {edit_prompt}\n{style_guide}\n\n"
        "Keep the main subject intact, integrate the lighting, add depth."
    ),
    "style_transfer": (
        "Apply this artistic style to the {platform} thumbnail: {edit_prompt}\n{style_guide}\n\n"
        "Keep key elements recognizable and faces/text readable."
    ),
    "color_grade": (
        "Apply professional color grading for {platform}: {edit_prompt}\n{style_guide}\n\n"
        "Mood-appropriate palette, natural skin tones, colors that pop on mobile."
    ),
    "remove_background": (
        "Remove the background and create a new {platform}-optimized one.\n{style_guide}\n\n"
        "Cut out the main subject with clean edges and add subtle depth with shadows."
    ),
    "add_effects": (
        "Add professional effects for {platform}: {edit_prompt}\n{style_guide}\n\n"
        "Effects should enhance, not distract: lens flare, bokeh, color splash or vignette."
    ),
    "upscale": (
        "Enhance image quality and resolution for {platform}: sharpen key details, reduce "
        "noise and artifacts, improve clarity while keeping a natural look."
    ),
    "detect_objects": (
        "Analyze this {platform} thumbnail and list every distinct person, object, text "
        "element and background element.\n\n"
        "Return ONLY a JSON array, pixel coordinates relative to the image:\n"
        '[{{"label": string, "x": number, "y": number, "width": number, "height": number, '
        '"confidence": number, "importance": string, "suggested_edit": string}}]'
    ),
    "object_edit": (
        "Edit the specific object/region in this {platform} thumbnail.\n{target}\n{style_guide}\n\n"
        "Edit instruction: {edit_prompt}\n"
        "Only change the specified area, keep it consistent with the rest of the image."
    ),
    "remove_object": (
        "Remove the specified element from this {platform} thumbnail.\n{target}\n\n"
        "Fill the area naturally with no visible seams, as if it was never there."
    ),
    "replace_object": (
        "Replace the specified element in this {platform} thumbnail.\n{target}\n{style_guide}\n\n"
        "Replace with: {edit_prompt}\n"
        "Match lighting and perspective of the original."
    ),
}

DEFAULT_EDIT_PROMPTS = {
    "text_overlay": "CLICK NOW!",
    "background_change": "professional, gradient background",
    "style_transfer": "viral, trending, eye-catching",
    "color_grade": "cinematic, high-impact, viral-worthy",
    "add_effects": "dramatic lighting, subtle glow, depth of field",
    "object_edit": "enhance and improve this element",
    "replace_object": "something more engaging and clickable",
}

EDIT_TYPES = tuple(EDIT_INSTRUCTIONS)

MAX_LABEL_LENGTH = 30


def _describe_target(region: dict | None, selected_object: dict | None) -> str:
    lines = []
    if selected_object:
        lines.append(f"Target: {selected_object.get('label', 'selected object')}")
    if region:
        lines.append(
            f"Region: x={region.get('x')}, y={region.get('y')}, "
            f"{region.get('width')}x{region.get('height')}"
        )
    return "\n".join(lines)


def build_edit_prompt(
    edit_type: str = "enhance",
    edit_prompt: str = "",
    platform: str = "youtube",
    region: dict | None = None,
    selected_object: dict | None = None,
    overlays: list | None = None,
    title_overlay: str | None = None,
) -> str:
    """Assemble the full edit instruction for an edit type."""
    template = EDIT_INSTRUCTIONS.get(edit_type)
    if template is None:
        # Unknown edit types fall back to the free-form prompt, then enhance
        prompt = edit_prompt or EDIT_INSTRUCTIONS["enhance"].format(
            PLATFORM=platform.upper(),
            style_guide=PLATFORM_STYLES.get(platform, PLATFORM_STYLES["youtube"]),
        )
    else:
        prompt = template.format(
            platform=platform,
            PLATFORM=platform.upper(),
            style_guide=PLATFORM_STYLES.get(platform, PLATFORM_STYLES["youtube"]),
            edit_prompt=edit_prompt or DEFAULT_EDIT_PROMPTS.get(edit_type, ""),
            target=_describe_target(region, selected_object),
        )

    if overlays:
        prompt += "\n\nAdditional elements to incorporate:\n"
        for overlay in overlays:
            prompt += (
                f"- {overlay.get('content', '')} ({overlay.get('type', 'element')}) "
                f"at position ({overlay.get('x', 0)}, {overlay.get('y', 0)})\n"
            )

    if title_overlay:
        prompt += (
            f'\n\nIMPORTANT: Add this text prominently on the thumbnail: "{title_overlay}"\n'
            "- Bold, attention-grabbing typography\n"
            "- Maximum readability"
        )

    return prompt


def parse_detected_objects(text: str) -> list:
    """
    Normalize the model's element list into detection boxes.
    Unparseable replies yield an empty list.
    """
    try:
        raw = gateway.extract_json_array(text)
    except ResponseParseError:
        print("  WARNING: Object list was not JSON, no boxes extracted")
        return []

    objects = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            box = {
                "x": float(item.get("x", 0)),
                "y": float(item.get("y", 0)),
                "width": float(item.get("width", 0)),
                "height": float(item.get("height", 0)),
            }
            confidence = float(item.get("confidence", 0.0))
        except (TypeError, ValueError):
            continue
        objects.append({
            "id": str(len(objects) + 1),
            "label": str(item.get("label", "object")).strip()[:MAX_LABEL_LENGTH],
            **box,
            "confidence": min(max(confidence, 0.0), 1.0),
        })
    return objects


def edit_thumbnail(
    image_url: str,
    edit_prompt: str = "",
    edit_type: str = "enhance",
    platform: str = "youtube",
    region: dict | None = None,
    selected_object: dict | None = None,
    overlays: list | None = None,
    title_overlay: str | None = None,
) -> dict:
    """Apply an AI edit to a thumbnail, or detect its objects."""
    if not image_url:
        raise ValidationError("Image URL is required")

    print(
        f"  Editing thumbnail: type={edit_type}, platform={platform}, "
        f"region={bool(region)}, object={bool(selected_object)}"
    )
    prompt = build_edit_prompt(
        edit_type, edit_prompt, platform, region, selected_object, overlays, title_overlay
    )

    if edit_type == "detect_objects":
        analysis = gateway.generate_text(prompt, images=[image_url])
        objects = parse_detected_objects(analysis)
        print(f"  Detected {len(objects)} object(s)")
        return {
            "success": True,
            "detected_objects": objects,
            "analysis": analysis,
            "edit_type": edit_type,
            "platform": platform,
        }

    result = gateway.generate_image(prompt, images=[image_url])
    if not result["image_url"]:
        raise GatewayError("No edited image generated")

    return {
        "success": True,
        "image_url": result["image_url"],
        "edit_type": edit_type,
        "platform": platform,
        "model": config.IMAGE_MODEL,
        "analysis": result["text"],
    }
