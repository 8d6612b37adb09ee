"""Response Interpreter - issues the try-on request and types the reply."""

import logging
from typing import Any, Protocol

from ..errors import (
    AuthorizationDenied,
    InvalidCredential,
    InvalidRequest,
    NoImageProduced,
    RateLimited,
    TryOnError,
    UnclassifiedProviderError,
)
from ..models import EncodedImage, GenerationRequest, GenerationResult
from ..utils.analysis_parser import parse_analysis


logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are the "Doppl-Next VTON Engine", a top-tier virtual try-on engine.
Your core task is to produce an **8K photorealistic** virtual try-on image and **physical tactile data**.

# Task 1: Image generation (highest priority)
- **Absolute realism**: keep skin detail and fabric weave.
- **Physically correct**: simulate gravity drape and tension wrinkles.
- **Identity lock**: the face of [Input A] must be fully preserved.

# Task 2: Tactile analysis report (mandatory)
After the image, you **must** output one JSON block analysing the wearing experience.
Always include this JSON block at the very end of your reply.

Use exactly these key names:
```json
{
  "comfort": "one sentence on comfort (e.g. soft against the skin)",
  "weight": "one sentence on weight (e.g. light and flowing)",
  "touch": "one sentence on touch (e.g. silky and cool)",
  "breathability": "one sentence on breathability (e.g. wicks moisture)",
  "scores": {
    "comfort": 8,
    "heaviness": 6,
    "softness": 9,
    "breathability": 7,
    "elasticity": 5
  }
}
```
Scores are integers from 1 to 10 (higher = more comfortable, heavier, softer, more breathable, stretchier).
"""

SUBJECT_LABEL = "[Input A: the user's original photo]"
GARMENT_LABEL = "[Input B: the target garment]"
DEFAULT_INSTRUCTION = "Generate the try-on image, then append the detailed JSON tactile analysis."
USER_INSTRUCTION_TEMPLATE = (
    "[Additional user instruction]: {instruction}. "
    "Remember to append the JSON analysis at the end of your reply."
)

DEFAULT_IMAGE_MIME = "image/png"
CREDENTIAL_PREFIX = "AIza"


class ModelTransport(Protocol):
    async def send_model_request(
        self, model: str, parts: list[dict[str, Any]], api_key: str
    ) -> list[dict[str, Any]]: ...


def validate_credential(credential: str, prefix: str = CREDENTIAL_PREFIX) -> str:
    """Return the trimmed key, or raise InvalidCredential."""
    clean_key = (credential or "").strip()
    if not clean_key:
        raise InvalidCredential()
    if not clean_key.startswith(prefix):
        raise InvalidCredential(prefix=prefix)
    return clean_key


def _image_part(image: EncodedImage) -> dict[str, Any]:
    return {"inline_data": {"mime_type": image.mime_type, "data": image.data}}


def build_parts(request: GenerationRequest) -> list[dict[str, Any]]:
    """Ordered request parts: instruction, subject, label, garment, label, prompt."""
    parts = [
        {"text": SYSTEM_PROMPT},
        _image_part(request.subject_image),
        {"text": SUBJECT_LABEL},
        _image_part(request.garment_image),
        {"text": GARMENT_LABEL},
    ]

    instruction = (request.user_instruction or "").strip()
    if instruction:
        parts.append({"text": USER_INSTRUCTION_TEMPLATE.format(instruction=instruction)})
    else:
        parts.append({"text": DEFAULT_INSTRUCTION})
    return parts


def scan_response(parts: list[dict[str, Any]]) -> tuple[str | None, str]:
    """Pick the first inline image and concatenate all text, in reply order.

    Accepts both the REST (``inlineData``) and SDK (``inline_data``) spellings.
    """
    image: str | None = None
    text_chunks: list[str] = []

    for part in parts:
        inline = part.get("inlineData") or part.get("inline_data")
        if inline and inline.get("data"):
            if image is None:
                mime_type = inline.get("mimeType") or inline.get("mime_type") or DEFAULT_IMAGE_MIME
                image = EncodedImage(data=inline["data"], mime_type=mime_type).to_data_url()
        elif part.get("text"):
            text_chunks.append(part["text"])

    return image, "".join(text_chunks)


def classify_provider_error(error: Exception) -> TryOnError:
    """Map a transport failure onto the error taxonomy by its message."""
    message = str(error)
    if "403" in message or "PERMISSION_DENIED" in message:
        return AuthorizationDenied(message)
    if "429" in message:
        return RateLimited(message)
    if "400" in message:
        return InvalidRequest(message)
    return UnclassifiedProviderError(message, error_type=type(error).__name__)


class ResponseInterpreter:
    """Sends the one real request and turns the reply into a GenerationResult."""

    def __init__(self, transport: ModelTransport, credential_prefix: str = CREDENTIAL_PREFIX):
        self.transport = transport
        self.credential_prefix = credential_prefix

    async def interpret(self, request: GenerationRequest) -> GenerationResult:
        """Run one try-on generation.

        Raises:
            InvalidCredential: before any network attempt.
            NoImageProduced: the reply contained only text.
            AuthorizationDenied, RateLimited, InvalidRequest,
            UnclassifiedProviderError: transport/provider failures.
        """
        api_key = validate_credential(request.credential, self.credential_prefix)
        parts = build_parts(request)

        try:
            reply = await self.transport.send_model_request(request.model, parts, api_key)
        except Exception as e:
            classified = classify_provider_error(e)
            logger.error("Gemini VTON generation error (%s): %s", classified.code, classified)
            raise classified from e

        image, raw_text = scan_response(reply)

        # Parse even when no image came back so the text is still inspectable
        analysis = parse_analysis(raw_text)

        if image is None:
            logger.warning("Model returned %d parts but no image", len(reply))
            raise NoImageProduced(analysis=analysis)

        return GenerationResult(image=image, analysis=analysis)
