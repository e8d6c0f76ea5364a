"""
Uploader - signed Cloudinary uploads so generated data URLs get a public URL.
"""

import hashlib
import time

import requests

from . import config
from .errors import ConfigurationError, GatewayError, ValidationError


def sign(params: dict, api_secret: str) -> str:
    """Cloudinary signature: SHA-1 of the sorted params joined with &, plus the secret."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


def upload_image(image_url: str, folder: str = "thumbnails") -> dict:
    """Upload an image (remote URL or data URL) to Cloudinary."""
    if not (config.CLOUDINARY_CLOUD_NAME and config.CLOUDINARY_API_KEY and config.CLOUDINARY_API_SECRET):
        raise ConfigurationError("Cloudinary credentials are not configured")
    if not image_url:
        raise ValidationError("Image URL is required")

    print(f"  Uploading to Cloudinary: {image_url[:50]}... (folder={folder})")
    timestamp = int(time.time())
    signature = sign({"folder": folder, "timestamp": timestamp}, config.CLOUDINARY_API_SECRET)

    r = requests.post(
        f"https://api.cloudinary.com/v1_1/{config.CLOUDINARY_CLOUD_NAME}/image/upload",
        data={
            "file": image_url,
            "api_key": config.CLOUDINARY_API_KEY,
            "timestamp": str(timestamp),
            "signature": signature,
            "folder": folder,
        },
        timeout=config.HTTP_TIMEOUT,
    )
    if not r.ok:
        print(f"  ERROR: Cloudinary returned {r.status_code}: {r.text[:150]}")
        raise GatewayError(f"Cloudinary upload failed: {r.status_code}", status=r.status_code)

    result = r.json()
    print(f"  Upload successful: {result.get('secure_url')}")
    return {
        "success": True,
        "url": result.get("secure_url"),
        "public_id": result.get("public_id"),
        "width": result.get("width"),
        "height": result.get("height"),
        "format": result.get("format"),
    }
