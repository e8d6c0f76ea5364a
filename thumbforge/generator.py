"""
Thumbnail Generator - text-to-image thumbnails and title ideas.

  - generate_thumbnail: one image from a free-form prompt, tuned per platform
  - generate_titles:    click-worthy title suggestions for a topic
"""

from . import gateway
from .errors import GatewayError, ResponseParseError, ValidationError

# ── Platform Guidelines ───────────────────────────────────────────────

PLATFORM_GUIDELINES = {
    "youtube": {
        "aspect_ratio": "16:9",
        "tips": (
            "Use bold text, high contrast colors, expressive faces, and clear focal points. "
            "Include text that is readable even at small sizes."
        ),
    },
    "instagram": {
        "aspect_ratio": "1:1",
        "tips": (
            "Use vibrant colors, aesthetic composition, and lifestyle-oriented imagery. "
            "Keep text minimal and stylish."
        ),
    },
    "tiktok": {
        "aspect_ratio": "9:16",
        "tips": (
            "Use dynamic, eye-catching visuals with bold colors. "
            "Include trendy elements and expressive faces."
        ),
    },
}

THUMBNAIL_PROMPT = """Create a professional thumbnail image for: "{prompt}"

Style: {style}
Platform: {platform}
Aspect Ratio: {aspect_ratio}

Design Requirements:
- {tips}
- Visually striking and attention-grabbing
- High contrast and bold colors that stand out
- Clear focal points, no clutter
- Optimized for {platform} standards
- Professional composition with dramatic lighting
- Ultra high resolution, photorealistic quality"""


TITLES_PROMPT = """You are an expert content strategist who writes viral, click-worthy titles for {platform}.

Generate {count} highly engaging titles for a video about: "{topic}"

Platform: {platform}
Tone: {tone}

Follow these practices:
1. Power words that evoke emotion (Amazing, Shocking, Ultimate, Secret, Proven)
2. Numbers when relevant (Top 5, 3 Ways, 10 Secrets)
3. Curiosity gaps without being clickbait
4. Concise (50-60 characters for YouTube)
5. Brackets or parentheses for context [2024], (MUST WATCH)
6. Address the viewer directly (You, Your)
7. Promise value or transformation
8. Urgency when appropriate

Return ONLY a JSON array:
[
  {{
    "title": "The actual title text",
    "reason": "Why this title works",
    "estimated_ctr": "high" | "medium" | "low"
  }}
]"""


def get_guidelines(platform: str) -> dict:
    """Guidelines for a platform; unknown platforms get YouTube's."""
    return PLATFORM_GUIDELINES.get((platform or "").lower(), PLATFORM_GUIDELINES["youtube"])


def build_thumbnail_prompt(prompt: str, platform: str = "youtube", style: str = "professional") -> str:
    guidelines = get_guidelines(platform)
    return THUMBNAIL_PROMPT.format(
        prompt=prompt,
        style=style,
        platform=platform.upper(),
        aspect_ratio=guidelines["aspect_ratio"],
        tips=guidelines["tips"],
    )


def generate_thumbnail(prompt: str, platform: str = "youtube", style: str = "professional") -> dict:
    """Generate a single thumbnail image. Returns the image as a data URL."""
    if not prompt or not prompt.strip():
        raise ValidationError("Prompt is required")

    print(f"  Generating thumbnail: platform={platform}, style={style}")
    print(f"  Prompt: {prompt[:100]}")

    result = gateway.generate_image(
        build_thumbnail_prompt(prompt, platform, style),
        aspect_ratio=get_guidelines(platform)["aspect_ratio"],
    )
    if not result["image_url"]:
        raise GatewayError("No image generated")

    return {
        "success": True,
        "image_url": result["image_url"],
        "prompt": prompt,
        "platform": platform,
        "style": style,
    }


def generate_titles(topic: str, platform: str = "YouTube", tone: str = "engaging", count: int = 5) -> dict:
    """
    Generate title suggestions for a topic.
    If the reply is not a JSON array, the raw text is returned as a single title.
    """
    if not topic or not topic.strip():
        raise ValidationError("Topic is required")

    print(f"  Generating {count} titles for: {topic[:80]}")
    content = gateway.generate_text(
        TITLES_PROMPT.format(topic=topic, platform=platform, tone=tone, count=count)
    )

    try:
        titles = gateway.extract_json_array(content)
    except ResponseParseError:
        print("  WARNING: Titles reply was not JSON, returning raw content")
        titles = [{"title": content, "reason": "AI generated", "estimated_ctr": "medium"}]

    return {
        "success": True,
        "titles": titles,
        "topic": topic,
        "platform": platform,
    }
