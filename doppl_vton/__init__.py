"""Doppl VTON - virtual try-on generation with sensory fabric analysis."""

__version__ = "1.0.0"
