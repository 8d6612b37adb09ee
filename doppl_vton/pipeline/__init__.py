"""Generation orchestration."""

from .orchestrator import TryOnOrchestrator

__all__ = ["TryOnOrchestrator"]
