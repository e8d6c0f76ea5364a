"""
AI Gateway - thin wrapper around the Gemini multimodal API.

Every "intelligent" feature in ThumbForge is a prompt sent through here:
  - generate_text:  text (+ optional reference images) in, text out
  - generate_image: text (+ optional reference images) in, inline image out

Replies that should be JSON are pulled out with extract_json_object /
extract_json_array. Gateway failures are classified by status code:
429 -> RateLimitError, 402 -> CreditsExhaustedError, else GatewayError.
Transport failures (timeouts, refused connections) are GatewayError too.
No retries.
"""

import base64
import io
import json
import re
import uuid
from pathlib import Path

import httpx
import requests
from PIL import Image, UnidentifiedImageError

from . import config
from .errors import (
    ConfigurationError,
    CreditsExhaustedError,
    GatewayError,
    RateLimitError,
    ResponseParseError,
    ValidationError,
)

_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")
_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(;base64)?,(?P<data>.*)$", re.DOTALL)

IMAGE_EXTENSIONS = {"image/png": ".png", "image/jpeg": ".jpg", "image/webp": ".webp"}


def get_client():
    """Get Gemini client."""
    from google import genai
    if not config.GEMINI_API_KEY:
        raise ConfigurationError("GEMINI_API_KEY is not configured")
    return genai.Client(api_key=config.GEMINI_API_KEY)


def raise_for_status(code: int | None) -> None:
    """Translate a gateway status code into the matching error."""
    if code == 429:
        raise RateLimitError()
    if code == 402:
        raise CreditsExhaustedError()
    raise GatewayError(f"AI Gateway error: {code}", status=code)


# ── Images in / out ───────────────────────────────────────────────────

def load_image(source: str) -> Image.Image:
    """
    Load an image from a data: URL, an http(s) URL or a local path.
    Returns an RGB PIL image. Anything unreadable raises ValidationError.
    """
    if not source:
        raise ValidationError("Image URL is required")

    match = _DATA_URL_RE.match(source)
    if match:
        try:
            raw = base64.b64decode(match.group("data"))
        except ValueError:
            raise ValidationError("Image data URL is not valid base64")
        return _open_image(io.BytesIO(raw), "data URL")

    if source.startswith(("http://", "https://")):
        try:
            r = requests.get(source, timeout=config.HTTP_TIMEOUT)
        except requests.RequestException as e:
            raise ValidationError(f"Failed to load image: {source[:80]} ({e})")
        if not r.ok:
            raise ValidationError(f"Failed to load image ({r.status_code}): {source[:80]}")
        return _open_image(io.BytesIO(r.content), source[:80])

    path = Path(source)
    if not path.is_file():
        raise ValidationError(f"Image not found: {source}")
    return _open_image(path, source)


def _open_image(fp, label: str) -> Image.Image:
    try:
        return Image.open(fp).convert("RGB")
    except (UnidentifiedImageError, OSError):
        raise ValidationError(f"Not a readable image: {label}")


def to_data_url(data: bytes, mime_type: str = "image/png") -> str:
    """Encode raw image bytes as a data: URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def image_to_data_url(img: Image.Image, fmt: str = "PNG") -> str:
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return to_data_url(buffer.getvalue(), f"image/{fmt.lower()}")


def save_data_url(data_url: str) -> str:
    """Write an inline data: URL image to data/output/. Returns the file path."""
    header, _, payload = data_url.partition(",")
    mime = header[len("data:"):].split(";")[0]
    config.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    path = config.OUTPUT_DIR / f"{uuid.uuid4().hex[:12]}{IMAGE_EXTENSIONS.get(mime, '.png')}"
    path.write_bytes(base64.b64decode(payload))
    print(f"  Saved: {path.name}")
    return str(path)


def externalize_images(value):
    """Replace inline images anywhere in a result with saved file paths."""
    if isinstance(value, str) and value.startswith("data:image"):
        return save_data_url(value)
    if isinstance(value, dict):
        return {k: externalize_images(v) for k, v in value.items()}
    if isinstance(value, list):
        return [externalize_images(v) for v in value]
    return value


# ── Requests ──────────────────────────────────────────────────────────

def _generate(model: str, contents: list, config_obj):
    from google.genai import errors

    client = get_client()
    try:
        return client.models.generate_content(
            model=model,
            contents=contents,
            config=config_obj,
        )
    except errors.APIError as e:
        print(f"  ERROR: AI Gateway returned {e.code}: {str(e)[:150]}")
        raise_for_status(e.code)
    except httpx.HTTPError as e:
        print(f"  ERROR: AI Gateway unreachable: {type(e).__name__}: {e}")
        raise GatewayError(f"AI Gateway error: {type(e).__name__}")


def generate_text(prompt: str, images: tuple | list = ()) -> str:
    """
    Send a text prompt (plus optional reference images) to the text model.
    String entries in `images` are loaded with load_image; anything else
    (PIL images, genai Parts) is passed through as-is. Returns the reply text.
    """
    from google.genai import types

    contents = [prompt]
    for source in images:
        contents.append(load_image(source) if isinstance(source, str) else source)

    response = _generate(
        config.TEXT_MODEL,
        contents,
        types.GenerateContentConfig(response_modalities=["TEXT"]),
    )

    text = response.text
    if not text:
        raise GatewayError("No content generated")
    print(f"  Reply received ({len(text)} chars)")
    return text


def generate_image(prompt: str, images: tuple | list = (), aspect_ratio: str | None = None) -> dict:
    """
    Send a prompt (plus optional images to edit) to the image model.

    Returns {"image_url": data URL or None, "text": accompanying text or None}.
    Callers decide whether a missing image is an error.
    """
    from google.genai import types

    contents = [prompt]
    for source in images:
        contents.append(load_image(source) if isinstance(source, str) else source)

    options = {"response_modalities": ["IMAGE", "TEXT"]}
    if aspect_ratio:
        options["image_config"] = types.ImageConfig(aspect_ratio=aspect_ratio)

    response = _generate(config.IMAGE_MODEL, contents, types.GenerateContentConfig(**options))

    image_url = None
    texts = []
    for part in response.parts or []:
        if part.inline_data is not None and image_url is None:
            mime = part.inline_data.mime_type or "image/png"
            image_url = to_data_url(part.inline_data.data, mime)
        elif part.text:
            texts.append(part.text)

    if image_url is None:
        print("  WARNING: No image in response")
    return {"image_url": image_url, "text": "\n".join(texts) or None}


# ── Reply parsing ─────────────────────────────────────────────────────

def extract_json_object(text: str) -> dict:
    """Pull the outermost {...} out of a model reply."""
    match = _OBJECT_RE.search(text or "")
    if not match:
        raise ResponseParseError("Invalid response format")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError:
        raise ResponseParseError("Failed to parse AI response")


def extract_json_array(text: str) -> list:
    """Pull the outermost [...] out of a model reply; falls back to the whole text."""
    match = _ARRAY_RE.search(text or "")
    candidate = match.group(0) if match else (text or "")
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        raise ResponseParseError("Failed to parse AI response")
    if not isinstance(data, list):
        raise ResponseParseError("Invalid response format")
    return data
