"""Phase, result and in-memory session tracking models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .analysis import AnalysisReport


class RunStatus(str, Enum):
    """Observable state of a generation, in display order."""
    IDLE = "IDLE"
    ANALYZING = "ANALYZING"
    WARPING = "WARPING"
    COMPOSITING = "COMPOSITING"
    RENDERING = "RENDERING"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"


class Phase(str, Enum):
    """Simulated progress phases. Purely presentational."""
    ANALYZING = "ANALYZING"
    WARPING = "WARPING"
    COMPOSITING = "COMPOSITING"
    RENDERING = "RENDERING"

    @property
    def info(self) -> "PhaseInfo":
        return _PHASE_INFO[self]

    @property
    def status(self) -> RunStatus:
        return RunStatus(self.value)


class PhaseInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Phase
    label: str
    detail: str


GENERATION_PHASES: tuple[PhaseInfo, ...] = (
    PhaseInfo(id=Phase.ANALYZING, label="Semantic & material analysis",
              detail="Detecting pose, resolving fabric physics..."),
    PhaseInfo(id=Phase.WARPING, label="Physical warp simulation",
              detail="Building 3D volume, simulating gravity drape..."),
    PhaseInfo(id=Phase.COMPOSITING, label="Light-field compositing",
              detail="Handling occlusion, edge blending and retouching..."),
    PhaseInfo(id=Phase.RENDERING, label="Tactile inference rendering",
              detail="Computing comfort data and rendering the image..."),
)

_PHASE_INFO = {info.id: info for info in GENERATION_PHASES}

TERMINAL_STATUSES = (RunStatus.COMPLETE, RunStatus.ERROR)


class GenerationResult(BaseModel):
    """Composited image plus its analysis. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    image: str = Field(description="Renderable image reference (data URL)")
    analysis: AnalysisReport


class GenerationSession(BaseModel):
    """In-memory state of one generation as seen by watchers.

    Phase transitions only move forward; the terminal states can be reached
    from any in-progress phase.
    """

    model: str
    status: RunStatus = RunStatus.IDLE
    history: list[RunStatus] = Field(default_factory=list)

    result: GenerationResult | None = None
    error: str | None = None
    error_type: str | None = None

    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def phase_index(self) -> int | None:
        """Index of the current phase in GENERATION_PHASES, if in one."""
        for index, info in enumerate(GENERATION_PHASES):
            if info.id.status == self.status:
                return index
        return None

    def advance(self, phase: Phase) -> bool:
        """Move to ``phase`` if it is ahead of the current state.

        Returns False (and leaves the state untouched) for backward moves or
        once the session is terminal.
        """
        if self.is_terminal:
            return False
        current = self.phase_index
        target = list(Phase).index(phase)
        if current is not None and target <= current:
            return False
        self._set(phase.status)
        return True

    def complete(self, result: GenerationResult) -> None:
        self.result = result
        self.completed_at = datetime.now()
        self._set(RunStatus.COMPLETE)

    def fail(self, message: str, error_type: str | None = None) -> None:
        self.error = message
        self.error_type = error_type
        self.completed_at = datetime.now()
        self._set(RunStatus.ERROR)

    def _set(self, status: RunStatus) -> None:
        self.status = status
        self.history.append(status)
