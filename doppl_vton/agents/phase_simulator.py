"""Phase Simulator - timed progress labels for a call with no progress signal."""

import asyncio
import logging
from typing import Callable

from ..models import GENERATION_PHASES, CancellationToken, GenerationSession, Phase


logger = logging.getLogger(__name__)

PhaseListener = Callable[[Phase], None]

DEFAULT_DWELL_TIMES = (2.0, 2.5, 2.0)


class PhaseSimulator:
    """Walks the fixed phases on a timer, independent of real work.

    Each of the first phases is held for its dwell time; the final phase has
    none and holds until the caller resolves the real call.
    """

    def __init__(
        self,
        dwell_times: tuple[float, ...] = DEFAULT_DWELL_TIMES,
        on_phase: PhaseListener | None = None,
    ):
        if len(dwell_times) != len(GENERATION_PHASES) - 1:
            raise ValueError(
                f"Expected {len(GENERATION_PHASES) - 1} dwell times, got {len(dwell_times)}"
            )
        self.dwell_times = dwell_times
        self.on_phase = on_phase

    async def run(
        self,
        token: CancellationToken,
        session: GenerationSession | None = None,
    ) -> None:
        dwells = (*self.dwell_times, None)
        for info, dwell in zip(GENERATION_PHASES, dwells):
            if not token.running:
                logger.debug("Phase simulation stopped before %s", info.id.value)
                return

            if session is not None and not session.advance(info.id):
                return
            self._notify(info.id)

            if dwell is not None:
                await asyncio.sleep(dwell)

    def _notify(self, phase: Phase) -> None:
        if self.on_phase is None:
            return
        try:
            self.on_phase(phase)
        except Exception:
            # Progress display must never break a generation
            logger.exception("Phase listener failed on %s", phase.value)
