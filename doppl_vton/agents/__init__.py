"""Generation agents: the real model call and the simulated progress."""

from .response_interpreter import ResponseInterpreter, classify_provider_error, validate_credential
from .phase_simulator import PhaseSimulator

__all__ = [
    "ResponseInterpreter",
    "classify_provider_error",
    "validate_credential",
    "PhaseSimulator",
]
