"""
YouTube Tools - look up, analyze and remix an existing video's thumbnail.

  - analyze_youtube:       find the best available thumbnail and score it
  - generate_from_youtube: analyze the original, then generate fresh variants
                           and titles in parallel

Analysis here is best-effort: if Gemini fails, the lookup still succeeds
with analysis=None. Variant generation drops failed variants.
"""

import re
from concurrent.futures import ThreadPoolExecutor

import requests

from . import config, gateway
from .errors import ThumbForgeError, ValidationError

VIDEO_ID_PATTERNS = [
    re.compile(
        r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/v/|youtube\.com/shorts/)"
        r"([^&\n?#]+)"
    ),
    re.compile(r"^([a-zA-Z0-9_-]{11})$"),
]

THUMBNAIL_QUALITIES = {
    "maxres": "maxresdefault.jpg",
    "hq": "hqdefault.jpg",
    "mq": "mqdefault.jpg",
    "sd": "sddefault.jpg",
    "default": "default.jpg",
}

# mq is listed but never picked for analysis
BEST_QUALITY_ORDER = ["maxres", "hq", "sd", "default"]

# ── Styles & Personas ─────────────────────────────────────────────────

STYLE_CONFIGS = {
    "professional": ("Clean, polished, business-appropriate design",
                     ["clean lines", "minimal clutter", "professional fonts", "muted colors"]),
    "bold": ("High contrast, dramatic lighting, bold text",
             ["extreme contrast", "bold text", "dramatic shadows", "vibrant colors"]),
    "minimal": ("Simple, elegant with whitespace",
                ["whitespace", "simple shapes", "clean fonts", "limited colors"]),
    "gaming": ("Energetic, vibrant, gaming aesthetic",
               ["neon colors", "glowing effects", "dynamic angles", "gaming UI"]),
    "cinematic": ("Movie poster style, dramatic lighting",
                  ["letterbox", "cinematic lighting", "movie typography", "dramatic atmosphere"]),
    "viral": ("Maximum click appeal, emotional triggers",
              ["shocked expressions", "arrows", "circles", "bold numbers", "question marks"]),
    "educational": ("Clear, informative, trustworthy",
                    ["diagrams", "step indicators", "infographics", "educational icons"]),
    "vlog": ("Personal, authentic, natural",
             ["natural lighting", "casual fonts", "personal branding", "location context"]),
    "documentary": ("Serious, professional, impactful",
                    ["high contrast", "powerful imagery", "documentary fonts", "impactful quotes"]),
    "comedy": ("Fun, playful, bright",
               ["bright colors", "playful fonts", "exaggerated expressions", "comic elements"]),
}

PERSONA_CONFIGS = {
    "none": "",
    "mrbeast": "Bold, massive text, red/yellow, shocked faces, money imagery, challenge vibes",
    "mkbhd": "Clean minimalist, tech-focused, red on black, premium feel",
    "veritasium": "Science aesthetic, curiosity-inducing, educational, question-driven",
    "pewdiepie": "Meme culture, reactions, gaming, red/black, casual fun",
    "casey": "Cinematic, urban, storytelling, bold fonts, adventure",
    "linus": "Tech products, orange accent, product showcase, clean tech",
    "vsauce": "Mind-bending, curious, science humor, question marks",
    "kurzgesagt": "Flat design, space themes, soft gradients, minimalist icons",
    "cocomelon": "Bright primary colors, cartoon, child-friendly, playful",
    "dude_perfect": "Sports, action shots, blue branding, trick shots, energy",
    "marques": "Tech review, clean gradients, product focus, premium",
    "graham_stephan": "Finance, money imagery, professional, real estate",
    "ali_abdaal": "Productivity, clean minimal, study vibes, soft colors",
}

VARIATIONS = ["maximum CTR focus", "alternative composition", "bold experimental"]

OVERLAY_LABELS = {
    "subscribe": "subscribe button",
    "views": "view counter",
    "like": "like button",
    "duration": "duration badge",
}

# ── Prompts ───────────────────────────────────────────────────────────

ANALYSIS_PROMPT = """Analyze this YouTube thumbnail and provide:
1. Overall score (1-100)
2. Color analysis (dominant colors, contrast level)
3. Text analysis (visible text, readability)
4. Face analysis (number of faces, expressions)
5. Composition (rule of thirds, focal points)
6. CTR prediction (low/medium/high)
7. 3 specific improvements to increase CTR

Return ONLY this JSON:
{
  "score": number,
  "color_analysis": {"dominant_colors": [string], "contrast_level": "low" | "medium" | "high"},
  "text_analysis": {"has_text": boolean, "readability": "poor" | "good" | "excellent"},
  "face_analysis": {"face_count": number, "expressions": [string]},
  "composition": {"rule_of_thirds": boolean, "focal_points": [string]},
  "ctr_prediction": "low" | "medium" | "high",
  "improvements": [string]
}"""

BRIEF_ANALYSIS_PROMPT = """Analyze this YouTube thumbnail briefly. Return ONLY this JSON:
{
  "video_topic": "brief topic",
  "visual_elements": ["element1", "element2"],
  "emotions": ["emotion1"],
  "target_audience": "audience",
  "content_type": "type",
  "improved_concept": "improved thumbnail concept",
  "suggested_text": "text for thumbnail"
}"""

VARIANT_PROMPT = """Create a YouTube thumbnail (16:9, high resolution):

TOPIC: {topic}
STYLE: {style}
{extras}TEXT: "{text}"
VARIATION: {variation}

Make it IRRESISTIBLE to click. Professional quality."""

REMIX_TITLES_PROMPT = """Generate 5 viral YouTube titles for: "{topic}"
Audience: {audience}

Return ONLY a JSON array:
[{{"title": "title", "reason": "why", "estimated_ctr": "high" | "medium", "hook": "hook type", "emotion": "emotion"}}]"""


def extract_video_id(url: str) -> str | None:
    """Extract the video ID from any common YouTube URL format (or a bare ID)."""
    if not url:
        return None
    url = url.strip()
    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def thumbnail_urls(video_id: str) -> dict:
    """All thumbnail quality URLs for a video, best first."""
    return {
        quality: f"https://img.youtube.com/vi/{video_id}/{filename}"
        for quality, filename in THUMBNAIL_QUALITIES.items()
    }


def _require_video_id(youtube_url: str) -> str:
    if not youtube_url:
        raise ValidationError("YouTube URL is required")
    video_id = extract_video_id(youtube_url)
    if not video_id:
        raise ValidationError("Invalid YouTube URL")
    return video_id


def available_thumbnails(video_id: str) -> dict:
    """HEAD-probe every quality and keep the ones that exist."""
    available = {}
    for quality, url in thumbnail_urls(video_id).items():
        try:
            r = requests.head(url, timeout=config.HTTP_TIMEOUT)
        except requests.RequestException as e:
            print(f"  WARNING: {quality} thumbnail check failed: {e}")
            continue
        if r.ok:
            available[quality] = url
    return available


def analyze_youtube(youtube_url: str) -> dict:
    """Look up a video's thumbnails and analyze the best one."""
    video_id = _require_video_id(youtube_url)
    print(f"  Analyzing YouTube video: {video_id}")

    thumbnails = available_thumbnails(video_id)
    best = next((thumbnails[q] for q in BEST_QUALITY_ORDER if q in thumbnails), None)

    analysis = None
    if config.GEMINI_API_KEY and best:
        try:
            content = gateway.generate_text(ANALYSIS_PROMPT, images=[best])
            analysis = gateway.extract_json_object(content)
        except ThumbForgeError as e:
            print(f"  ERROR: Thumbnail analysis failed: {e}")

    return {
        "success": True,
        "video_id": video_id,
        "thumbnails": thumbnails,
        "best_thumbnail": best,
        "analysis": analysis,
    }


# ── Remix ─────────────────────────────────────────────────────────────

def build_variant_prompt(
    analysis: dict | None,
    style: str,
    persona: str,
    overlays,
    preserve_original: bool,
    variation_index: int,
) -> str:
    description, elements = STYLE_CONFIGS.get(style, STYLE_CONFIGS["viral"])
    persona_style = PERSONA_CONFIGS.get(persona, "")
    analysis = analysis or {}

    extras = ""
    if persona_style:
        extras += f"CREATOR STYLE: {persona_style}\n"
    if preserve_original and analysis:
        keep = ", ".join((analysis.get("visual_elements") or [])[:2])
        if keep:
            extras += f"KEEP: {keep}\n"
    overlay_text = ", ".join(OVERLAY_LABELS[o] for o in OVERLAY_LABELS if o in (overlays or ()))
    if overlay_text:
        extras += f"OVERLAYS: {overlay_text}\n"

    return VARIANT_PROMPT.format(
        topic=analysis.get("video_topic") or "engaging content",
        style=f"{description} - {', '.join(elements)}",
        extras=extras,
        text=analysis.get("suggested_text") or "",
        variation=VARIATIONS[variation_index % len(VARIATIONS)],
    )


def _generate_variant(prompt: str, index: int) -> str | None:
    try:
        result = gateway.generate_image(prompt, aspect_ratio="16:9")
    except ThumbForgeError as e:
        print(f"  ERROR: Thumbnail {index + 1} failed: {e}")
        return None
    if result["image_url"]:
        print(f"  Thumbnail {index + 1} generated")
    return result["image_url"]


def _generate_remix_titles(analysis: dict | None) -> list | None:
    analysis = analysis or {}
    prompt = REMIX_TITLES_PROMPT.format(
        topic=analysis.get("video_topic") or "video",
        audience=analysis.get("target_audience") or "general",
    )
    try:
        return gateway.extract_json_array(gateway.generate_text(prompt))
    except ThumbForgeError as e:
        print(f"  ERROR: Title generation failed: {e}")
        return None


def generate_from_youtube(
    youtube_url: str,
    style: str = "viral",
    persona: str = "none",
    platform: str = "youtube",
    overlays=(),
    generate_multiple: bool = True,
    generate_titles: bool = True,
    preserve_original: bool = True,
) -> dict:
    """
    Remix an existing video's thumbnail into fresh variants.

    Steps:
      1. Brief analysis of the original maxres thumbnail (best-effort)
      2. 3 variants (1 if generate_multiple is False) and, optionally,
         5 titles, all requested concurrently
    """
    video_id = _require_video_id(youtube_url)
    gateway.get_client()  # fail fast on missing credentials

    print(f"  Processing: {video_id} (style={style}, persona={persona}, platform={platform})")
    original = thumbnail_urls(video_id)["maxres"]

    analysis = None
    try:
        analysis = gateway.extract_json_object(
            gateway.generate_text(BRIEF_ANALYSIS_PROMPT, images=[original])
        )
        print(f"  Analysis done: {analysis.get('video_topic', '?')}")
    except ThumbForgeError as e:
        print(f"  ERROR: Analysis failed: {e}")

    count = 3 if generate_multiple else 1
    prompts = [
        build_variant_prompt(analysis, style, persona, overlays, preserve_original, i)
        for i in range(count)
    ]

    with ThreadPoolExecutor(max_workers=count + 1) as executor:
        variant_futures = [
            executor.submit(_generate_variant, prompt, i) for i, prompt in enumerate(prompts)
        ]
        titles_future = executor.submit(_generate_remix_titles, analysis) if generate_titles else None

        generated = [url for url in (f.result() for f in variant_futures) if url]
        titles = titles_future.result() if titles_future else None

    print(f"  Done: {len(generated)} thumbnails, {len(titles or [])} titles")
    return {
        "success": True,
        "video_id": video_id,
        "original_thumbnail": original,
        "generated_thumbnails": generated,
        "analysis": analysis,
        "titles": titles,
    }
