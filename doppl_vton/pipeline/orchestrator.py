"""Try-on orchestrator: simulated progress and the real call, side by side."""

import asyncio
import logging

from ..agents import PhaseSimulator, ResponseInterpreter
from ..agents.phase_simulator import PhaseListener
from ..agents.response_interpreter import ModelTransport
from ..config import PipelineConfig
from ..models import (
    CancellationToken,
    EncodedImage,
    GenerationRequest,
    GenerationResult,
    GenerationSession,
)
from ..services import GeminiClient


logger = logging.getLogger(__name__)


class TryOnOrchestrator:
    """Runs the Phase Simulator and the Response Interpreter concurrently.

    Flow:
    1. Start a fresh cancellation token
    2. Fan out: phase simulation task + real generation task
    3. Fan in: the result (or classified error) comes from the generation
       task only; the simulator just drives the session's visible phase

    The real call is never interrupted. Serializing calls is up to the caller.
    """

    def __init__(self, config: PipelineConfig, transport: ModelTransport | None = None):
        self.config = config

        # Initialize services
        self.gemini = transport if transport is not None else GeminiClient(config.gemini)
        self.interpreter = ResponseInterpreter(
            self.gemini,
            credential_prefix=config.gemini.key_prefix,
        )

        self.session: GenerationSession | None = None
        self._token: CancellationToken | None = None
        self._generation: asyncio.Task | None = None
        self._background: set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        """True until the real request finishes, even after cancel()."""
        return self._generation is not None and not self._generation.done()

    def cancel(self) -> None:
        """Stop the phase simulation at its next boundary. Advisory only."""
        if self._token is not None:
            self._token.cancel()

    async def generate(
        self,
        request: GenerationRequest,
        on_phase: PhaseListener | None = None,
    ) -> GenerationResult:
        """Run one generation.

        Args:
            request: Images, instruction, model and credential
            on_phase: Optional callback invoked on each phase change

        Returns:
            GenerationResult from the real model reply

        Raises:
            TryOnError: whatever the Response Interpreter classified
        """
        token = CancellationToken()
        token.start()
        self._token = token

        session = GenerationSession(model=request.model)
        self.session = session

        simulator = PhaseSimulator(self.config.phases.dwell_times, on_phase)
        phases = asyncio.create_task(simulator.run(token, session))
        generation = asyncio.create_task(self.interpreter.interpret(request))
        self._generation = generation

        logger.info("Generation started with %s", request.model)
        try:
            # Shielded: cancelling this coroutine must not abort the request
            result = await asyncio.shield(generation)
        except asyncio.CancelledError:
            token.cancel()
            self._detach(phases)
            self._detach(generation)
            raise
        except Exception as e:
            token.cancel()
            message = e.user_message(self.config.locale) if hasattr(e, "user_message") else str(e)
            session.fail(message, getattr(e, "code", type(e).__name__))
            # The simulator winds down on its own at its next boundary
            self._detach(phases)
            logger.error("Generation failed: %s", message)
            raise

        await phases
        token.cancel()
        session.complete(result)
        logger.info("Generation complete (comfort score %d)", result.analysis.scores.comfort)
        return result

    async def generate_from_data_urls(
        self,
        subject_photo: str,
        garment_photo: str,
        credential: str,
        model: str | None = None,
        instruction: str | None = None,
        on_phase: PhaseListener | None = None,
    ) -> GenerationResult:
        """Run a generation from browser-style base64 data URLs."""
        request = GenerationRequest(
            subject_image=EncodedImage.from_data_url(subject_photo),
            garment_image=EncodedImage.from_data_url(garment_photo),
            user_instruction=instruction,
            model=model or self.config.gemini.model,
            credential=credential,
        )
        return await self.generate(request, on_phase=on_phase)

    def _detach(self, task: asyncio.Task) -> None:
        """Keep a still-running task referenced until it finishes."""
        if task.done():
            self._reap(task)
            return
        self._background.add(task)
        task.add_done_callback(self._reap)

    def _reap(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning("Detached task finished with error: %s", error)

    async def close(self):
        """Close the transport if it owns a connection."""
        close = getattr(self.gemini, "close", None)
        if close is not None:
            await close()
