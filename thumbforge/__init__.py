"""
ThumbForge - AI thumbnail generation, editing, scoring and A/B testing.

Modules:
  config      - Paths, credentials and model names (.env driven)
  errors      - Error taxonomy surfaced to users
  gateway     - Gemini multimodal gateway (prompts in, JSON/images out)
  generator   - Thumbnail image and title generation
  strategist  - CTR scoring and A/B comparison
  editor      - Prompt-driven image edits and object detection
  youtube     - YouTube thumbnail lookup, analysis and remixing
  faceswap    - Face swap through the PiAPI task API
  uploader    - Cloudinary signed uploads
  image_stats - Local pixel statistics and face counting
  store       - Generation history, profiles and usage limits
"""

__version__ = "0.1.0"
