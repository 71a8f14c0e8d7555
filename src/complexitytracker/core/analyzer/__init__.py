"""Batch analysis engine."""

from .engine import AnalysisEngine

__all__ = ['AnalysisEngine']
