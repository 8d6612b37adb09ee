"""Configuration management for the Doppl VTON engine."""

from pathlib import Path
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiConfig(BaseModel):
    """Gemini endpoint settings."""
    base_url: str = "https://generativelanguage.googleapis.com"
    api_version: str = "v1beta"
    model: str = "gemini-2.5-flash-image"
    supported_models: list[str] = Field(default_factory=lambda: [
        "gemini-2.5-flash-image",
        "gemini-2.0-flash-exp",
        "gemini-3-pro-image-preview",
    ])
    timeout: float = 300.0  # image generation is slow
    key_prefix: str = "AIza"

    def generate_url(self, model: str) -> str:
        return f"{self.base_url}/{self.api_version}/models/{model}:generateContent"


class PhaseConfig(BaseModel):
    """Dwell times (seconds) of the simulated progress phases.

    The last phase has no dwell; it holds until the real call resolves.
    """
    analyzing: float = 2.0
    warping: float = 2.5
    compositing: float = 2.0

    @property
    def dwell_times(self) -> tuple[float, float, float]:
        return (self.analyzing, self.warping, self.compositing)


class PipelineConfig(BaseSettings):
    """Main engine configuration."""

    # Sub-configs
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    phases: PhaseConfig = Field(default_factory=PhaseConfig)

    # Credential (loaded from .env, overridden by the credential store)
    gemini_api_key: str | None = None
    credential_file: Path = Path(".doppl/credentials.json")

    # Presentation
    locale: str = "en"  # "en" or "zh-TW"
    log_level: str = "info"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        env_nested_delimiter="__",
        extra="ignore",
    )


def load_config() -> PipelineConfig:
    """Load configuration from environment and defaults."""
    return PipelineConfig()
