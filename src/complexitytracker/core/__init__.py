"""
Core functionality for ComplexityTracker.
Provides the control-flow graph builder and the complexity scorers.
"""

from .graph import CFGBuilder, ControlFlowGraph
from .metrics import MetricsCalculator, CognitiveScorer, CyclomaticScorer, StructuralMetrics

__all__ = [
    'CFGBuilder',
    'ControlFlowGraph',
    'MetricsCalculator',
    'CognitiveScorer',
    'CyclomaticScorer',
    'StructuralMetrics',
]
