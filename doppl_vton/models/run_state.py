"""Explicit cancellation token shared by one generation's routines."""


class CancellationToken:
    """Advisory run flag: owned by the orchestrator, polled by the simulator.

    Cancelling never interrupts anything; readers check ``running`` at their
    own boundaries.
    """

    def __init__(self, running: bool = False):
        self._running = running

    @property
    def running(self) -> bool:
        return self._running

    @property
    def cancelled(self) -> bool:
        return not self._running

    def start(self) -> None:
        self._running = True

    def cancel(self) -> None:
        self._running = False

    def __repr__(self) -> str:
        return f"CancellationToken(running={self._running})"
