"""
Configuration - paths, credentials and model names.

Everything comes from the environment (.env is loaded on import).
Modules read these attributes at call time, so overriding them at runtime
(or in tests) takes effect immediately.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).parent.parent
load_dotenv(BASE_DIR / ".env")

DATA_DIR = Path(os.getenv("THUMBFORGE_DATA_DIR", BASE_DIR / "data"))
STORE_PATH = DATA_DIR / "thumbforge.json"
OUTPUT_DIR = DATA_DIR / "output"

# ── Credentials ───────────────────────────────────────────────────────

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
FACESWAP_API_KEY = os.getenv("FACESWAP_API_KEY")
CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")

# ── Models ────────────────────────────────────────────────────────────

TEXT_MODEL = os.getenv("THUMBFORGE_TEXT_MODEL", "gemini-2.5-flash")
IMAGE_MODEL = os.getenv("THUMBFORGE_IMAGE_MODEL", "gemini-2.5-flash-image")

# Seconds, for plain HTTP calls (image fetches, PiAPI, Cloudinary)
HTTP_TIMEOUT = int(os.getenv("THUMBFORGE_HTTP_TIMEOUT", "60"))

# Profile used when a tool call doesn't name a user
DEFAULT_USER_ID = os.getenv("THUMBFORGE_USER_ID", "local")
