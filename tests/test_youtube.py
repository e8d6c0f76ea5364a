import json

import pytest
import requests

from thumbforge import config, gateway, youtube
from thumbforge.errors import ConfigurationError, ValidationError

from conftest import FakeHTTPResponse, api_error, image_reply, solid_image, text_reply

VIDEO_ID = "dQw4w9WgXcQ"

BRIEF = {
    "video_topic": "Budget gaming PC build",
    "visual_elements": ["glowing PC case", "surprised face", "price tag"],
    "emotions": ["excitement"],
    "target_audience": "PC gamers",
    "content_type": "tutorial",
    "improved_concept": "Bigger price tag",
    "suggested_text": "$300 BEAST",
}

TITLES = [{"title": "The $300 PC That Beats Consoles", "reason": "Price hook", "estimated_ctr": "high"}]


@pytest.mark.parametrize("url", [
    f"https://www.youtube.com/watch?v={VIDEO_ID}",
    f"https://www.youtube.com/watch?v={VIDEO_ID}&t=42s",
    f"https://youtu.be/{VIDEO_ID}?si=abc",
    f"https://www.youtube.com/embed/{VIDEO_ID}",
    f"https://www.youtube.com/v/{VIDEO_ID}",
    f"https://youtube.com/shorts/{VIDEO_ID}",
    f"  {VIDEO_ID}  ",
])
def test_extract_video_id(url):
    assert youtube.extract_video_id(url) == VIDEO_ID


@pytest.mark.parametrize("url", ["", "https://vimeo.com/12345", "not a video", "abc"])
def test_extract_video_id_rejects(url):
    assert youtube.extract_video_id(url) is None


def test_thumbnail_urls():
    urls = youtube.thumbnail_urls(VIDEO_ID)
    assert urls["maxres"] == f"https://img.youtube.com/vi/{VIDEO_ID}/maxresdefault.jpg"
    assert urls["default"] == f"https://img.youtube.com/vi/{VIDEO_ID}/default.jpg"
    assert list(urls) == ["maxres", "hq", "mq", "sd", "default"]


def fake_head(existing):
    def head(url, timeout=None):
        if "sddefault" in url:
            raise requests.ConnectionError("boom")
        return FakeHTTPResponse(200 if any(name in url for name in existing) else 404)
    return head


def test_analyze_youtube_picks_best_available(fake_gemini, monkeypatch):
    monkeypatch.setattr(youtube.requests, "head", fake_head(["hqdefault", "mqdefault", "/default.jpg"]))
    monkeypatch.setattr(gateway, "load_image", lambda source: solid_image())
    client = fake_gemini(lambda model, contents, cfg: text_reply(json.dumps({"score": 64})))

    result = youtube.analyze_youtube(f"https://youtu.be/{VIDEO_ID}")

    assert result["success"] is True
    assert result["video_id"] == VIDEO_ID
    assert set(result["thumbnails"]) == {"hq", "mq", "default"}
    assert result["best_thumbnail"].endswith("/hqdefault.jpg")
    assert result["analysis"] == {"score": 64}
    assert len(client.calls) == 1


def test_analyze_youtube_never_picks_mq(monkeypatch):
    monkeypatch.setattr(config, "GEMINI_API_KEY", None)
    monkeypatch.setattr(youtube.requests, "head", fake_head(["mqdefault"]))

    result = youtube.analyze_youtube(VIDEO_ID)
    assert result["thumbnails"] == {"mq": f"https://img.youtube.com/vi/{VIDEO_ID}/mqdefault.jpg"}
    assert result["best_thumbnail"] is None
    assert result["analysis"] is None


def test_analyze_youtube_tolerates_ai_failure(fake_gemini, monkeypatch):
    monkeypatch.setattr(youtube.requests, "head", fake_head(["maxresdefault"]))
    monkeypatch.setattr(gateway, "load_image", lambda source: solid_image())

    def fail(model, contents, cfg):
        raise api_error(429)

    fake_gemini(fail)
    result = youtube.analyze_youtube(VIDEO_ID)
    assert result["best_thumbnail"].endswith("/maxresdefault.jpg")
    assert result["analysis"] is None


def test_analyze_youtube_invalid_url():
    with pytest.raises(ValidationError, match="YouTube URL is required"):
        youtube.analyze_youtube("")
    with pytest.raises(ValidationError, match="Invalid YouTube URL"):
        youtube.analyze_youtube("https://example.com/video")


def test_variant_prompt():
    prompt = youtube.build_variant_prompt(
        BRIEF, "gaming", "mrbeast", ["views", "subscribe"], preserve_original=True, variation_index=4,
    )
    assert "TOPIC: Budget gaming PC build" in prompt
    assert "STYLE: Energetic, vibrant, gaming aesthetic - neon colors" in prompt
    assert "CREATOR STYLE: Bold, massive text" in prompt
    assert "KEEP: glowing PC case, surprised face\n" in prompt
    assert "OVERLAYS: subscribe button, view counter" in prompt
    assert 'TEXT: "$300 BEAST"' in prompt
    assert "VARIATION: alternative composition" in prompt


def test_variant_prompt_without_analysis():
    prompt = youtube.build_variant_prompt(None, "unknown", "none", (), True, 0)
    assert "TOPIC: engaging content" in prompt
    assert "STYLE: Maximum click appeal" in prompt
    assert "KEEP" not in prompt
    assert "CREATOR STYLE" not in prompt


def remix_handler(model, contents, cfg):
    if model == config.IMAGE_MODEL:
        if "alternative composition" in contents[0]:
            raise api_error(500)
        return image_reply()
    if len(contents) > 1:
        return text_reply(json.dumps(BRIEF))
    return text_reply(json.dumps(TITLES))


def test_generate_from_youtube_drops_failed_variants(fake_gemini, monkeypatch):
    monkeypatch.setattr(gateway, "load_image", lambda source: solid_image())
    client = fake_gemini(remix_handler)

    result = youtube.generate_from_youtube(f"https://www.youtube.com/watch?v={VIDEO_ID}", style="bold")

    assert result["success"] is True
    assert result["original_thumbnail"] == f"https://img.youtube.com/vi/{VIDEO_ID}/maxresdefault.jpg"
    assert result["analysis"] == BRIEF
    assert len(result["generated_thumbnails"]) == 2
    assert all(url.startswith("data:image/") for url in result["generated_thumbnails"])
    assert result["titles"] == TITLES
    # analysis + 3 variants + titles
    assert len(client.calls) == 5


def test_generate_from_youtube_single_without_titles(fake_gemini, monkeypatch):
    monkeypatch.setattr(gateway, "load_image", lambda source: solid_image())
    client = fake_gemini(remix_handler)

    result = youtube.generate_from_youtube(VIDEO_ID, generate_multiple=False, generate_titles=False)

    assert len(result["generated_thumbnails"]) == 1
    assert result["titles"] is None
    assert len(client.calls) == 2


def test_generate_from_youtube_continues_without_analysis(fake_gemini, monkeypatch):
    def unreachable(source):
        raise ValidationError(f"Failed to load image: {source}")

    monkeypatch.setattr(gateway, "load_image", unreachable)
    client = fake_gemini(remix_handler)

    result = youtube.generate_from_youtube(VIDEO_ID, generate_titles=False)

    assert result["analysis"] is None
    assert len(result["generated_thumbnails"]) == 2
    assert "TOPIC: engaging content" in client.calls[0]["contents"][0]


def test_generate_from_youtube_requires_key(monkeypatch):
    monkeypatch.setattr(config, "GEMINI_API_KEY", None)
    with pytest.raises(ConfigurationError):
        youtube.generate_from_youtube(VIDEO_ID)


def test_remix_keeps_variants_when_one_times_out(fake_gemini, monkeypatch):
    import httpx

    monkeypatch.setattr(gateway, "load_image", lambda source: solid_image())

    def handler(model, contents, cfg):
        if model == config.IMAGE_MODEL and "alternative composition" in contents[0]:
            raise httpx.ReadTimeout("timed out")
        return remix_handler(model, contents, cfg)

    fake_gemini(handler)
    result = youtube.generate_from_youtube(VIDEO_ID)

    assert len(result["generated_thumbnails"]) == 2
    assert result["titles"] == TITLES


def test_analyze_youtube_survives_connection_error(fake_gemini, monkeypatch):
    import httpx

    monkeypatch.setattr(youtube.requests, "head", fake_head(["maxresdefault"]))
    monkeypatch.setattr(gateway, "load_image", lambda source: solid_image())

    def refuse(model, contents, cfg):
        raise httpx.ConnectError("connection refused")

    fake_gemini(refuse)
    result = youtube.analyze_youtube(VIDEO_ID)
    assert result["best_thumbnail"].endswith("/maxresdefault.jpg")
    assert result["analysis"] is None
