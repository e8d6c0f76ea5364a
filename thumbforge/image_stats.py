"""
Image Statistics - local pixel analysis shown next to the AI scores.

Four independent, single-pass routines:
  - detect_faces:          OpenCV's pretrained Haar frontal-face cascade
  - extract_colors:        dominant colors from a 100x100 quantized sample
  - analyze_image_quality: brightness (mean BT.601 luma) and contrast (its std)
  - analyze_image:         all of the above plus a heuristic quality score
"""

import math

import cv2
import numpy as np
from PIL import Image

from . import gateway

SAMPLE_SIZE = (100, 100)
COLOR_BIN = 32
TOP_COLORS = 5

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])

FACE_CASCADE = "haarcascade_frontalface_default.xml"

_face_model = None


def load_face_model():
    """Load the face cascade once and reuse it."""
    global _face_model
    if _face_model is None:
        model = cv2.CascadeClassifier(cv2.data.haarcascades + FACE_CASCADE)
        if model.empty():
            raise RuntimeError(f"Face detection model could not be loaded: {FACE_CASCADE}")
        _face_model = model
        print("  Face detection model loaded")
    return _face_model


def is_model_loaded() -> bool:
    return _face_model is not None


def _percent(value: float) -> int:
    """0-1 value as a 0-100 integer, rounding halves up."""
    return int(math.floor(value * 100 + 0.5))


def _as_image(image) -> Image.Image:
    if isinstance(image, Image.Image):
        return image.convert("RGB")
    return gateway.load_image(image)


# ── Analysis Routines ─────────────────────────────────────────────────

def detect_faces(image) -> list:
    """
    Detect faces. Returns [{"top_left": [x, y], "bottom_right": [x, y],
    "probability": float, "landmarks": []}, ...]. The cascade has no
    calibrated score and no landmark points, so every accepted detection
    reports probability 1.0 and an empty landmark list.
    """
    img = _as_image(image)
    gray = np.array(img.convert("L"))
    model = load_face_model()
    boxes = model.detectMultiScale(gray, scaleFactor=1.1, minNeighbors=5, minSize=(30, 30))

    faces = []
    for (x, y, w, h) in boxes:
        faces.append({
            "top_left": [int(x), int(y)],
            "bottom_right": [int(x + w), int(y + h)],
            "probability": 1.0,
            "landmarks": [],
        })
    return faces


def extract_colors(image, count: int = TOP_COLORS) -> list:
    """
    Dominant colors as "rgb(r, g, b)" strings, most frequent first.

    The image is downsampled to 100x100 and each channel snapped to the
    nearest multiple of 32 (capped at 255). Equal counts keep the order in
    which the buckets first appear, scanning row by row.
    """
    img = _as_image(image).resize(SAMPLE_SIZE, Image.BILINEAR)
    pixels = np.asarray(img, dtype=np.float64).reshape(-1, 3)

    binned = np.minimum(np.floor(pixels / COLOR_BIN + 0.5) * COLOR_BIN, 255).astype(np.int64)
    buckets, first_seen, counts = np.unique(binned, axis=0, return_index=True, return_counts=True)

    order = sorted(range(len(buckets)), key=lambda i: (-counts[i], first_seen[i]))
    return [
        f"rgb({buckets[i][0]}, {buckets[i][1]}, {buckets[i][2]})"
        for i in order[:count]
    ]


def analyze_image_quality(image) -> dict:
    """Brightness and contrast over every pixel, each as a 0-100 integer."""
    arr = np.asarray(_as_image(image), dtype=np.float64)
    luma = (arr @ LUMA_WEIGHTS) / 255.0
    return {
        "brightness": _percent(float(luma.mean())),
        "contrast": _percent(float(luma.std())),
    }


def quality_score(face_count: int, brightness: int, contrast: int, width: int, height: int) -> int:
    """Heuristic 0-100 thumbnail quality from the raw statistics."""
    score = 50

    if 0 < face_count <= 3:
        score += 15

    if 20 < contrast < 50:
        score += 15
    elif contrast > 10:
        score += 10

    if 30 < brightness < 70:
        score += 10

    if width >= 1280 and height >= 720:
        score += 10

    return min(100, score)


def analyze_image(source) -> dict:
    """
    Full local analysis of an image (URL, data URL, path or PIL image).
    A face detector failure counts as zero faces.
    """
    img = _as_image(source)
    width, height = img.size

    try:
        faces = detect_faces(img)
    except (cv2.error, RuntimeError) as e:
        print(f"  WARNING: Face detection failed: {e}")
        faces = []

    colors = extract_colors(img)
    quality = analyze_image_quality(img)

    print(
        f"  Stats: {len(faces)} face(s), brightness={quality['brightness']}, "
        f"contrast={quality['contrast']}, {width}x{height}"
    )
    return {
        "faces": faces,
        "dominant_colors": colors,
        "brightness": quality["brightness"],
        "contrast": quality["contrast"],
        "has_text": False,  # no OCR
        "aspect_ratio": width / height,
        "resolution": {"width": width, "height": height},
        "quality_score": quality_score(
            len(faces), quality["brightness"], quality["contrast"], width, height
        ),
    }
