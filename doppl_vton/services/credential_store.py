"""Local persistence of the Gemini API key under a fixed name."""

import json
import logging
from pathlib import Path


logger = logging.getLogger(__name__)

CREDENTIAL_KEY = "gemini_api_key"


class CredentialStore:
    """A tiny JSON file holding the user's API key."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> str | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt credential file %s", self.path)
            return None
        value = data.get(CREDENTIAL_KEY) if isinstance(data, dict) else None
        return value or None

    def save(self, api_key: str) -> Path:
        """Store the trimmed key and return the file path."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({CREDENTIAL_KEY: api_key.strip()}, indent=2),
            encoding="utf-8",
        )
        return self.path

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
