"""Data models for the Doppl VTON engine."""

from .images import EncodedImage, GenerationRequest
from .analysis import AnalysisScores, AnalysisReport, PLACEHOLDER_TEXT, DEFAULT_SCORE
from .run_state import CancellationToken
from .session import (
    Phase,
    PhaseInfo,
    RunStatus,
    GENERATION_PHASES,
    GenerationResult,
    GenerationSession,
)

__all__ = [
    "EncodedImage",
    "GenerationRequest",
    "AnalysisScores",
    "AnalysisReport",
    "PLACEHOLDER_TEXT",
    "DEFAULT_SCORE",
    "Phase",
    "PhaseInfo",
    "RunStatus",
    "GENERATION_PHASES",
    "GenerationResult",
    "GenerationSession",
    "CancellationToken",
]
