"""
Store - generation history, user profiles and plan usage limits.

The store is a single JSON ledger (data/thumbforge.json):

  {
    "profiles":    {user_id: {subscription_tier, monthly_usage, usage_limit, ...}},
    "generations": {generation_id: {user_id, generation_type, prompt, ...}}
  }

Usage is enforced with a read-before-write check: check_usage_limit before
the AI call, increment_usage after it succeeds.
"""

import json
import uuid
from datetime import datetime, timezone

from . import config
from .errors import NotFoundError, UsageLimitError, ValidationError
from .gateway import externalize_images

PLANS = {
    "free": {"usage_limit": 10, "price": 0},
    "pro": {"usage_limit": 100, "price": 19},
    "enterprise": {"usage_limit": 1000, "price": 49},
}

DEFAULT_TIER = "free"
HISTORY_LIMIT = 20


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def load_store() -> dict:
    """Load the ledger, or an empty one if it doesn't exist yet."""
    if not config.STORE_PATH.exists():
        return {"profiles": {}, "generations": {}}
    with open(config.STORE_PATH, "r", encoding="utf-8") as f:
        data = json.load(f)
    data.setdefault("profiles", {})
    data.setdefault("generations", {})
    return data


def save_store(data: dict) -> None:
    config.STORE_PATH.parent.mkdir(parents=True, exist_ok=True)
    with open(config.STORE_PATH, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


# ── Profiles ──────────────────────────────────────────────────────────

def _ensure_profile(data: dict, user_id: str) -> dict:
    if not user_id:
        raise ValidationError("user_id is required")
    profile = data["profiles"].get(user_id)
    if profile is None:
        profile = {
            "user_id": user_id,
            "subscription_tier": DEFAULT_TIER,
            "monthly_usage": 0,
            "usage_limit": PLANS[DEFAULT_TIER]["usage_limit"],
            "created_at": _now(),
        }
        data["profiles"][user_id] = profile
    return profile


def get_profile(user_id: str) -> dict:
    """Return a user's profile, creating a free-plan one on first use."""
    data = load_store()
    is_new = user_id not in data["profiles"]
    profile = _ensure_profile(data, user_id)
    if is_new:
        save_store(data)
    return dict(profile)


def set_subscription_tier(user_id: str, tier: str) -> dict:
    """Move a user to another plan. The usage counter is kept."""
    if tier not in PLANS:
        raise ValidationError(f"Unknown plan '{tier}'. Choose from: {', '.join(PLANS)}")
    data = load_store()
    profile = _ensure_profile(data, user_id)
    profile["subscription_tier"] = tier
    profile["usage_limit"] = PLANS[tier]["usage_limit"]
    save_store(data)
    return dict(profile)


def check_usage_limit(user_id: str) -> dict:
    """Raise UsageLimitError if the user has no generations left this month."""
    profile = get_profile(user_id)
    if profile["monthly_usage"] >= profile["usage_limit"]:
        raise UsageLimitError()
    return profile


def increment_usage(user_id: str) -> int:
    """Count one generation against the user's plan. Returns the new usage."""
    data = load_store()
    profile = _ensure_profile(data, user_id)
    profile["monthly_usage"] += 1
    save_store(data)
    return profile["monthly_usage"]


def reset_monthly_usage(user_id: str) -> dict:
    data = load_store()
    profile = _ensure_profile(data, user_id)
    profile["monthly_usage"] = 0
    save_store(data)
    return dict(profile)


# ── Generations ───────────────────────────────────────────────────────

def record_generation(
    user_id: str,
    generation_type: str,
    prompt: str | None = None,
    image_url: str | None = None,
    platform: str | None = None,
    metadata: dict | None = None,
    title_suggestions: list | None = None,
) -> dict:
    """Store one generation record. Returns it, including its new id."""
    data = load_store()
    _ensure_profile(data, user_id)

    record = {
        "id": str(uuid.uuid4()),
        "user_id": user_id,
        "generation_type": generation_type,
        "prompt": prompt,
        "image_url": image_url,
        "title_suggestions": title_suggestions,
        "platform": platform,
        "metadata": metadata or {},
        "created_at": _now(),
    }
    data["generations"][record["id"]] = record
    save_store(data)
    return record


def list_generations(user_id: str, limit: int = HISTORY_LIMIT) -> list:
    """A user's most recent generations, newest first."""
    data = load_store()
    # Reversed insertion order breaks timestamp ties in favour of the latest write
    records = [g for g in reversed(data["generations"].values()) if g["user_id"] == user_id]
    records.sort(key=lambda g: g["created_at"], reverse=True)
    return records[:limit]


def delete_generation(user_id: str, generation_id: str) -> None:
    """Delete one of the user's generations. Raises NotFoundError if not found."""
    data = load_store()
    record = data["generations"].get(generation_id)
    if record is None or record["user_id"] != user_id:
        raise NotFoundError(f"Generation not found: {generation_id}")
    del data["generations"][generation_id]
    save_store(data)


def run_metered(user_id: str, generation_type: str, call, prompt=None, platform=None, metadata=None) -> dict:
    """
    Usage-limited AI call: check the plan limit, run the call, then record
    the generation and count it. Nothing is counted when the call fails.
    Inline images in the result are saved to data/output/ first, so the
    ledger stores file paths rather than base64.
    """
    check_usage_limit(user_id)
    result = externalize_images(call())

    images = result.get("generated_thumbnails") or []
    record = record_generation(
        user_id,
        generation_type,
        prompt=prompt,
        image_url=result.get("image_url") or (images[0] if images else None),
        platform=platform,
        metadata=metadata,
        title_suggestions=result.get("titles"),
    )
    usage = increment_usage(user_id)
    return {**result, "generation_id": record["id"], "monthly_usage": usage}
