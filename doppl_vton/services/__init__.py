"""External service clients."""

from .gemini_client import GeminiClient
from .image_encoder import encode_file, encode_bytes
from .credential_store import CredentialStore

__all__ = [
    "GeminiClient",
    "encode_file",
    "encode_bytes",
    "CredentialStore",
]
