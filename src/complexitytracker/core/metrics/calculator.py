"""
Combines the scorers into per-function metric records.
"""

import logging

from ...models import ComplexityEstimate, FunctionUnit, MetricRecord
from .cognitive import CognitiveScorer
from .cyclomatic import CyclomaticScorer
from .structural import StructuralMetrics

logger = logging.getLogger(__name__)


class MetricsCalculator:
    """
    Runs the cyclomatic, cognitive and structural scorers over a unit.
    """

    def __init__(self):
        self.cyclomatic_scorer = CyclomaticScorer()
        self.cognitive_scorer = CognitiveScorer()
        self.structural_metrics = StructuralMetrics(self.cognitive_scorer)

    def measure(self, unit: FunctionUnit) -> MetricRecord:
        """
        Compute the metric record for a function unit.

        Args:
            unit: Function unit to measure

        Returns:
            A new, immutable MetricRecord
        """
        cognitive = self.cognitive_scorer.score(unit)
        structural = self.structural_metrics.measure(unit, cognitive)
        record = MetricRecord(
            cyclomatic_complexity=self.cyclomatic_scorer.score(unit),
            cognitive_complexity=cognitive.score,
            max_nesting_depth=structural.max_nesting_depth,
            line_count=structural.line_count,
            function=unit,
            increments=cognitive.increments,
        )
        logger.debug(f"{unit.qualified_name}: cyclomatic={record.cyclomatic_complexity} "
                     f"cognitive={record.cognitive_complexity} nesting={record.max_nesting_depth}")
        return record

    def estimate(self, unit: FunctionUnit) -> ComplexityEstimate:
        """Score a unit without building a full record."""
        cognitive = self.cognitive_scorer.score(unit)
        return ComplexityEstimate(
            cyclomatic=self.cyclomatic_scorer.score(unit),
            cognitive=cognitive.score,
            max_nesting=cognitive.max_nesting,
        )

    @staticmethod
    def summarize(record: MetricRecord) -> ComplexityEstimate:
        return ComplexityEstimate(
            cyclomatic=record.cyclomatic_complexity,
            cognitive=record.cognitive_complexity,
            max_nesting=record.max_nesting_depth,
        )
