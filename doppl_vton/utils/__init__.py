"""Utility helpers."""

from .analysis_parser import parse_analysis

__all__ = ["parse_analysis"]
