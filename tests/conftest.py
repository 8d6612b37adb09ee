# Test fixtures and configuration
import base64
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from doppl_vton.config import PhaseConfig, PipelineConfig
from doppl_vton.models import EncodedImage, GenerationRequest


VALID_KEY = "AIzaSyTestKey0123456789"

WELL_FORMED_REPLY = """Here is your try-on result.

```json
{
  "comfort": "Soft against the skin",
  "weight": "Light and flowing",
  "touch": "Silky and cool",
  "breathability": "Wicks moisture well",
  "scores": {
    "comfort": 8,
    "heaviness": 3,
    "softness": 9,
    "breathability": 7,
    "elasticity": 4
  }
}
```
"""


class FakeTransport:
    """Records requests and replays a canned reply (or raises)."""

    def __init__(self, reply=None, error=None, delay=0.0):
        self.reply = reply if reply is not None else []
        self.error = error
        self.delay = delay
        self.calls = []

    async def send_model_request(self, model, parts, api_key):
        import asyncio

        self.calls.append({"model": model, "parts": parts, "api_key": api_key})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def minimal_png_bytes():
    """Minimal valid PNG image bytes."""
    return bytes([
        0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A,  # PNG signature
        0x00, 0x00, 0x00, 0x0D, 0x49, 0x48, 0x44, 0x52,  # IHDR chunk
        0x00, 0x00, 0x00, 0x01, 0x00, 0x00, 0x00, 0x01,  # 1x1 dimensions
        0x08, 0x02, 0x00, 0x00, 0x00, 0x90, 0x77, 0x53,
        0xDE, 0x00, 0x00, 0x00, 0x0C, 0x49, 0x44, 0x41,  # IDAT chunk
        0x54, 0x08, 0xD7, 0x63, 0xF8, 0xCF, 0xC0, 0x00,
        0x00, 0x00, 0x03, 0x00, 0x01, 0x00, 0x05, 0xFE,
        0xD4, 0xAA, 0x00, 0x00, 0x00, 0x00, 0x49, 0x45,  # IEND chunk
        0x4E, 0x44, 0xAE, 0x42, 0x60, 0x82
    ])


@pytest.fixture
def temp_image_file(tmp_path, minimal_png_bytes):
    """Create a temporary PNG file."""
    img_path = tmp_path / "test_image.png"
    img_path.write_bytes(minimal_png_bytes)
    return img_path


@pytest.fixture
def encoded_image(minimal_png_bytes):
    return EncodedImage(
        data=base64.b64encode(minimal_png_bytes).decode(),
        mime_type="image/png",
    )


@pytest.fixture
def png_data_url(minimal_png_bytes):
    return f"data:image/png;base64,{base64.b64encode(minimal_png_bytes).decode()}"


@pytest.fixture
def make_request(encoded_image):
    """Factory for GenerationRequest with sensible defaults."""
    def _make(**overrides):
        fields = {
            "subject_image": encoded_image,
            "garment_image": encoded_image,
            "user_instruction": None,
            "model": "gemini-2.5-flash-image",
            "credential": VALID_KEY,
        }
        fields.update(overrides)
        return GenerationRequest(**fields)
    return _make


@pytest.fixture
def image_part():
    return {"inlineData": {"mimeType": "image/png", "data": "iVBORw0KGgo="}}


@pytest.fixture
def fast_config(tmp_path):
    """Config with near-zero phase dwell times and an isolated credential file."""
    return PipelineConfig(
        phases=PhaseConfig(analyzing=0.01, warping=0.01, compositing=0.01),
        credential_file=tmp_path / "credentials.json",
        gemini_api_key=None,
    )
