"""
Thumbnail Strategist - CTR scoring and A/B comparison using Gemini vision.

  - score_thumbnail:    weighted category scores, grade, CTR range, fixes
  - ab_test_thumbnails: pick the stronger of two thumbnails, with reasons
"""

from datetime import datetime, timezone

from . import gateway
from .errors import ValidationError


SCORE_PROMPT = """You are a YouTube thumbnail expert. Analyze this thumbnail for the "{niche}" niche and score it.

Score each category and give specific feedback:

1. **Visual Impact** (25 points max): grabs attention in under a second? Bold colors, high contrast?
2. **Emotional Appeal** (25 points max): curiosity, excitement or urgency? Compelling faces?
3. **Clarity & Readability** (25 points max): clear focal point? Text readable when small? Uncluttered?
4. **Brand Consistency** (15 points max): professional look, consistent style?
5. **Platform Optimization** (10 points max): 16:9, works on mobile?

Return ONLY this JSON:
{{
  "total_score": number,
  "grade": "S" | "A" | "B" | "C" | "D" | "F",
  "ctr_prediction": {{"low": number, "expected": number, "high": number}},
  "categories": {{
    "visual_impact": {{"score": number, "feedback": string}},
    "emotional_appeal": {{"score": number, "feedback": string}},
    "clarity_readability": {{"score": number, "feedback": string}},
    "brand_consistency": {{"score": number, "feedback": string}},
    "platform_optimization": {{"score": number, "feedback": string}}
  }},
  "strengths": [string],
  "weaknesses": [string],
  "actionable_improvements": [
    {{"priority": "high" | "medium" | "low", "suggestion": string, "expected_impact": string}}
  ],
  "competitor_comparison": string
}}"""


AB_TEST_PROMPT = """You are a YouTube A/B testing expert. Compare these two thumbnails{title_context} and decide which one would perform better.

Provide:
1. The winner with a confidence percentage
2. A comparison across key metrics
3. Why the winner is better
4. How to improve the losing thumbnail

Return ONLY this JSON:
{{
  "winner": "A" | "B",
  "confidence": number,
  "winner_explanation": string,
  "comparison": {{
    "visual_impact": {{"A": number, "B": number, "winner": "A" | "B"}},
    "emotional_appeal": {{"A": number, "B": number, "winner": "A" | "B"}},
    "clarity": {{"A": number, "B": number, "winner": "A" | "B"}},
    "clickability": {{"A": number, "B": number, "winner": "A" | "B"}},
    "professionalism": {{"A": number, "B": number, "winner": "A" | "B"}}
  }},
  "thumbnail_a": {{"score": number, "strengths": [string], "weaknesses": [string]}},
  "thumbnail_b": {{"score": number, "strengths": [string], "weaknesses": [string]}},
  "ctr_prediction": {{"A": {{"min": number, "max": number}}, "B": {{"min": number, "max": number}}}},
  "recommendation": string,
  "improvement_suggestions": {{"for_loser": [string], "for_winner": [string]}}
}}"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def score_thumbnail(image_url: str, niche: str = "general") -> dict:
    """
    Score a thumbnail's click-worthiness with Gemini vision.
    Returns the model's JSON plus success/analyzed_at.
    """
    if not image_url:
        raise ValidationError("Image URL is required")

    print(f"  Scoring thumbnail for niche: {niche}")
    content = gateway.generate_text(SCORE_PROMPT.format(niche=niche), images=[image_url])
    score = gateway.extract_json_object(content)
    print(f"  Score: {score.get('total_score', '?')} ({score.get('grade', '?')})")

    return {"success": True, **score, "analyzed_at": _now()}


def ab_test_thumbnails(thumbnail_a: str, thumbnail_b: str, video_title: str = "") -> dict:
    """Compare two thumbnails head to head. Returns the model's verdict."""
    if not thumbnail_a or not thumbnail_b:
        raise ValidationError("Both thumbnails are required for A/B testing")

    from google.genai import types

    title_context = f' for the video "{video_title}"' if video_title else ""
    prompt = AB_TEST_PROMPT.format(title_context=title_context)

    print("  A/B testing thumbnails")
    # Labels interleaved with images so the model knows which is which
    content = gateway.generate_text(
        prompt,
        images=[
            types.Part.from_text(text="Thumbnail A:"),
            gateway.load_image(thumbnail_a),
            types.Part.from_text(text="Thumbnail B:"),
            gateway.load_image(thumbnail_b),
        ],
    )
    verdict = gateway.extract_json_object(content)
    print(f"  Winner: {verdict.get('winner', '?')} ({verdict.get('confidence', '?')}%)")

    return {"success": True, **verdict, "tested_at": _now()}
