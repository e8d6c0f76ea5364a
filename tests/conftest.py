import base64
import io
import threading

import pytest
from PIL import Image

from thumbforge import config, gateway

PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="
)


# ── Fake Gemini client ────────────────────────────────────────────────

class FakeInlineData:
    def __init__(self, data: bytes, mime_type: str = "image/png"):
        self.data = data
        self.mime_type = mime_type


class FakePart:
    def __init__(self, text=None, inline_data=None):
        self.text = text
        self.inline_data = inline_data


class FakeResponse:
    def __init__(self, text=None, image: bytes | None = None):
        self.text = text
        self.parts = []
        if image is not None:
            self.parts.append(FakePart(inline_data=FakeInlineData(image)))
        if text:
            self.parts.append(FakePart(text=text))


def text_reply(text: str) -> FakeResponse:
    return FakeResponse(text=text)


def image_reply(text: str | None = None) -> FakeResponse:
    return FakeResponse(text=text, image=PNG_BYTES)


def api_error(code):
    """A google-genai APIError carrying the given HTTP status."""
    from google.genai import errors

    err = errors.APIError.__new__(errors.APIError)
    err.code = code
    err.status = "ERROR"
    err.message = "upstream failure"
    err.details = {}
    err.response = None
    return err


class FakeModels:
    def __init__(self, handler):
        self.handler = handler
        self.calls = []
        self._lock = threading.Lock()

    def generate_content(self, model, contents, config=None):
        with self._lock:
            self.calls.append({"model": model, "contents": contents, "config": config})
        return self.handler(model, contents, config)


class FakeClient:
    def __init__(self, handler):
        self.models = FakeModels(handler)

    @property
    def calls(self):
        return self.models.calls


@pytest.fixture
def fake_gemini(monkeypatch):
    """
    Install a fake Gemini client. Call the fixture with a handler
    (model, contents, config) -> FakeResponse; returns the client.
    """
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")

    def install(handler):
        client = FakeClient(handler)
        monkeypatch.setattr(gateway, "get_client", lambda: client)
        return client

    return install


# ── Fake HTTP ─────────────────────────────────────────────────────────

class FakeHTTPResponse:
    def __init__(self, status_code=200, payload=None, content=b"", text=""):
        self.status_code = status_code
        self.ok = 200 <= status_code < 400
        self._payload = payload
        self.content = content
        self.text = text

    def json(self):
        return self._payload


# ── Storage & images ──────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def tmp_data(tmp_path, monkeypatch):
    """Point the store and output directory at a temp dir for every test."""
    monkeypatch.setattr(config, "DATA_DIR", tmp_path)
    monkeypatch.setattr(config, "STORE_PATH", tmp_path / "thumbforge.json")
    monkeypatch.setattr(config, "OUTPUT_DIR", tmp_path / "output")
    return tmp_path


def solid_image(size=(100, 100), color=(128, 128, 128)) -> Image.Image:
    return Image.new("RGB", size, color)


def as_data_url(img: Image.Image) -> str:
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")
