"""
Face Swap - PiAPI image toolkit task API.

Submits a face-swap task, then polls until it completes, fails, or the
polling budget (MAX_POLLS x POLL_INTERVAL seconds) runs out.
"""

import time

import requests

from . import config
from .errors import ConfigurationError, GatewayError, ValidationError

PIAPI_TASK_URL = "https://api.piapi.ai/api/v1/task"
POLL_INTERVAL = 2
MAX_POLLS = 30


def _headers() -> dict:
    if not config.FACESWAP_API_KEY:
        raise ConfigurationError("FACESWAP_API_KEY is not configured")
    return {"X-API-Key": config.FACESWAP_API_KEY, "Content-Type": "application/json"}


def submit_task(source_image_url: str, target_face_url: str) -> str:
    """Create a face-swap task. Returns the task ID."""
    r = requests.post(
        PIAPI_TASK_URL,
        headers=_headers(),
        json={
            "model": "Qubico/image-toolkit",
            "task_type": "face-swap",
            "input": {"target_image": source_image_url, "swap_image": target_face_url},
        },
        timeout=config.HTTP_TIMEOUT,
    )
    if not r.ok:
        print(f"  ERROR: Face swap API returned {r.status_code}: {r.text[:150]}")
        raise GatewayError(f"Face swap API error: {r.status_code}", status=r.status_code)

    task_id = (r.json().get("data") or {}).get("task_id")
    if not task_id:
        raise GatewayError("No task ID returned from face swap API")
    print(f"  Task created: {task_id}")
    return task_id


def wait_for_result(task_id: str) -> str:
    """Poll a task until it yields an image URL."""
    headers = _headers()
    for attempt in range(MAX_POLLS):
        time.sleep(POLL_INTERVAL)
        try:
            r = requests.get(f"{PIAPI_TASK_URL}/{task_id}", headers=headers, timeout=config.HTTP_TIMEOUT)
        except requests.RequestException as e:
            print(f"  WARNING: Status check failed: {e}")
            continue
        if not r.ok:
            print(f"  WARNING: Status check returned {r.status_code}")
            continue

        data = r.json().get("data") or {}
        status = data.get("status")
        print(f"  Task status ({attempt + 1}/{MAX_POLLS}): {status}")
        if status == "completed":
            output = data.get("output") or {}
            image_url = output.get("image_url") or output.get("image")
            if not image_url:
                print("  WARNING: Task completed without an output image")
                break
            return image_url
        elif status == "failed":
            raise GatewayError("Face swap task failed")

    raise GatewayError("Face swap timed out")


def face_swap(source_image_url: str, target_face_url: str) -> dict:
    """Swap the face from target_face_url onto source_image_url."""
    if not source_image_url or not target_face_url:
        raise ValidationError("Both source_image_url and target_face_url are required")
    _headers()

    print("  Starting face swap")
    task_id = submit_task(source_image_url, target_face_url)
    image_url = wait_for_result(task_id)
    return {"success": True, "image_url": image_url, "task_id": task_id}
