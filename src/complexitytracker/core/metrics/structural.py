"""
Structural metrics: nesting depth and function length.
"""

from dataclasses import dataclass
from typing import Optional

from ...models import FunctionUnit
from .cognitive import CognitiveResult, CognitiveScorer


@dataclass(frozen=True)
class StructuralResult:
    max_nesting_depth: int
    line_count: int


class StructuralMetrics:
    """Measures the deepest nesting level and the physical length of a unit."""

    def __init__(self, cognitive_scorer: Optional[CognitiveScorer] = None):
        self.cognitive_scorer = cognitive_scorer or CognitiveScorer()

    def measure(self, unit: FunctionUnit, cognitive: Optional[CognitiveResult] = None) -> StructuralResult:
        """
        Measure a function unit.

        The nesting depth is the one observed by the cognitive walk, so a
        result from an earlier walk of the same unit can be passed in.

        Args:
            unit: Function unit to measure
            cognitive: Optional result of a previous cognitive walk

        Returns:
            StructuralResult for the unit
        """
        if cognitive is None:
            cognitive = self.cognitive_scorer.score(unit)
        return StructuralResult(
            max_nesting_depth=cognitive.max_nesting,
            line_count=unit.line_count,
        )
