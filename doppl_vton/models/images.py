"""Image payload and request models."""

import base64
import binascii

from pydantic import BaseModel, ConfigDict, Field

from ..errors import FileReadError


class EncodedImage(BaseModel):
    """An uploaded image as base64 text plus its mime type."""

    model_config = ConfigDict(frozen=True)

    data: str = Field(description="Base64-encoded image bytes, without data URL prefix")
    mime_type: str = Field(default="image/png", description="e.g., 'image/jpeg', 'image/png'")

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

    @classmethod
    def from_data_url(cls, value: str, default_mime: str = "image/png") -> "EncodedImage":
        """Parse a ``data:<mime>;base64,<data>`` URL (or raw base64).

        Raises:
            FileReadError: if the header has no payload or the payload is not base64.
        """
        mime_type = default_mime
        encoded = value
        if value.startswith("data:"):
            # Remove data URL prefix (e.g., "data:image/png;base64,")
            header, sep, encoded = value.partition(",")
            if not sep:
                raise FileReadError("Malformed data URL: missing ',' before the payload")
            mime_type = header[len("data:"):].split(";", 1)[0] or default_mime

        try:
            base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise FileReadError(f"Invalid base64 image data: {e}") from e
        if not encoded:
            raise FileReadError("Empty image data")
        return cls(data=encoded, mime_type=mime_type)


class GenerationRequest(BaseModel):
    """Everything one try-on call needs. Built per invocation, never persisted."""

    model_config = ConfigDict(frozen=True)

    subject_image: EncodedImage
    garment_image: EncodedImage
    user_instruction: str | None = None
    model: str = "gemini-2.5-flash-image"
    credential: str = Field(default="", repr=False)
