import pytest

from thumbforge import generator
from thumbforge.errors import GatewayError, ValidationError

from conftest import image_reply, text_reply


def test_guidelines_fall_back_to_youtube():
    assert generator.get_guidelines("TikTok")["aspect_ratio"] == "9:16"
    assert generator.get_guidelines("myspace") == generator.PLATFORM_GUIDELINES["youtube"]


def test_thumbnail_prompt_mentions_platform_and_style():
    prompt = generator.build_thumbnail_prompt("coffee review", "instagram", "minimal")
    assert '"coffee review"' in prompt
    assert "Platform: INSTAGRAM" in prompt
    assert "Aspect Ratio: 1:1" in prompt
    assert "Style: minimal" in prompt


def test_generate_thumbnail(fake_gemini):
    client = fake_gemini(lambda model, contents, cfg: image_reply())
    result = generator.generate_thumbnail("epic mountain hike", platform="tiktok", style="bold")

    assert result["success"] is True
    assert result["image_url"].startswith("data:image/")
    assert result["platform"] == "tiktok"
    assert result["style"] == "bold"
    assert client.calls[0]["config"].image_config.aspect_ratio == "9:16"


def test_generate_thumbnail_requires_prompt(fake_gemini):
    client = fake_gemini(lambda model, contents, cfg: image_reply())
    with pytest.raises(ValidationError, match="Prompt is required"):
        generator.generate_thumbnail("   ")
    assert client.calls == []


def test_generate_thumbnail_without_image(fake_gemini):
    fake_gemini(lambda model, contents, cfg: text_reply("Sorry"))
    with pytest.raises(GatewayError, match="No image generated"):
        generator.generate_thumbnail("anything")


def test_generate_titles_parses_array(fake_gemini):
    reply = (
        'Here are your titles:\n'
        '[{"title": "I Tried It For 30 Days", "reason": "Challenge", "estimated_ctr": "high"},'
        ' {"title": "Nobody Talks About This", "reason": "Curiosity", "estimated_ctr": "medium"}]'
    )
    client = fake_gemini(lambda model, contents, cfg: text_reply(reply))
    result = generator.generate_titles("cold showers", count=2, tone="bold")

    assert [t["title"] for t in result["titles"]] == ["I Tried It For 30 Days", "Nobody Talks About This"]
    assert result["topic"] == "cold showers"
    assert "Generate 2 highly engaging titles" in client.calls[0]["contents"][0]
    assert "Tone: bold" in client.calls[0]["contents"][0]


def test_generate_titles_falls_back_to_raw_text(fake_gemini):
    fake_gemini(lambda model, contents, cfg: text_reply("Just One Great Title"))
    result = generator.generate_titles("cold showers")
    assert result["titles"] == [
        {"title": "Just One Great Title", "reason": "AI generated", "estimated_ctr": "medium"}
    ]


def test_generate_titles_requires_topic():
    with pytest.raises(ValidationError, match="Topic is required"):
        generator.generate_titles("")
