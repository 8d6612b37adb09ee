"""Sensory analysis models."""

from typing import Any

from pydantic import BaseModel, Field, computed_field


DEFAULT_SCORE = 5
PLACEHOLDER_TEXT = "Analyzing... (parsing failed)"

NARRATIVE_FIELDS = ("comfort", "weight", "touch", "breathability")
SCORE_FIELDS = ("comfort", "heaviness", "softness", "breathability", "elasticity")


class AnalysisScores(BaseModel):
    """Fabric scores, semantically 1-10 but not range-enforced."""

    comfort: int = Field(default=DEFAULT_SCORE, description="Higher is more comfortable")
    heaviness: int = Field(default=DEFAULT_SCORE, description="Higher is heavier")
    softness: int = Field(default=DEFAULT_SCORE, description="Higher is softer")
    breathability: int = Field(default=DEFAULT_SCORE, description="Higher is more breathable")
    elasticity: int = Field(default=DEFAULT_SCORE, description="Higher is stretchier")

    @computed_field
    @property
    def average(self) -> float:
        """Plain average across all five dimensions."""
        scores = [getattr(self, name) for name in SCORE_FIELDS]
        return round(sum(scores) / len(scores), 1)


class AnalysisReport(BaseModel):
    """Structured sensory report. Always fully populated."""

    comfort: str = PLACEHOLDER_TEXT
    weight: str = PLACEHOLDER_TEXT
    touch: str = PLACEHOLDER_TEXT
    breathability: str = PLACEHOLDER_TEXT
    scores: AnalysisScores = Field(default_factory=AnalysisScores)
    raw_text: str = ""

    @classmethod
    def default(cls, raw_text: str = "") -> "AnalysisReport":
        return cls(raw_text=raw_text)

    def merge(self, partial: dict[str, Any]) -> "AnalysisReport":
        """Overlay already-validated fields from ``partial`` onto this report.

        ``partial`` may hold any of the narrative keys and a ``scores`` dict
        with any of the score keys. Unknown keys are ignored.
        """
        text_updates = {
            name: partial[name] for name in NARRATIVE_FIELDS if name in partial
        }
        partial_scores = partial.get("scores") or {}
        score_updates = {
            name: partial_scores[name] for name in SCORE_FIELDS if name in partial_scores
        }
        return self.model_copy(update={
            **text_updates,
            "scores": self.scores.model_copy(update=score_updates),
        })

    @property
    def is_default(self) -> bool:
        return self.model_dump(exclude={"raw_text"}) == AnalysisReport().model_dump(exclude={"raw_text"})
