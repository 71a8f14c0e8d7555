"""
Complexity scorers.
"""

from .calculator import MetricsCalculator
from .cognitive import CognitiveResult, CognitiveScorer
from .cyclomatic import CyclomaticScorer
from .structural import StructuralMetrics, StructuralResult

__all__ = [
    'MetricsCalculator',
    'CognitiveResult',
    'CognitiveScorer',
    'CyclomaticScorer',
    'StructuralMetrics',
    'StructuralResult',
]
