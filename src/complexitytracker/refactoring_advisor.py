"""
Refactoring Advisor - Suggests refactoring patterns for complex functions.
"""

import logging
from typing import List, Optional

from .ast_analysis import ASTAnalyzer
from .core.metrics import MetricsCalculator
from .exceptions import ParseError
from .models import FunctionUnit, MetricRecord, PatternSuggestion
from .patterns import CHECKERS, PatternChecker
from .services.configuration_service import ThresholdConfig


class PatternAdvisor:
    """
    Matches a function against the refactoring pattern checkers and
    estimates what each suggested rewrite would score.

    Every checker runs independently. The rewrite it proposes is lowered
    and scored with the same scorers as the original, so ``before`` and
    ``after`` are directly comparable.
    """

    def __init__(self, thresholds: Optional[ThresholdConfig] = None,
                 calculator: Optional[MetricsCalculator] = None):
        self.logger = logging.getLogger(__name__)
        self.thresholds = thresholds or ThresholdConfig()
        self.calculator = calculator or MetricsCalculator()
        self.analyzer = ASTAnalyzer()
        self.checkers: List[PatternChecker] = [checker(self.thresholds) for checker in CHECKERS]

    def advise(self, unit: FunctionUnit, record: MetricRecord) -> List[PatternSuggestion]:
        """
        Produce ranked suggestions for a function unit.

        Args:
            unit: Function unit to examine
            record: Its metric record

        Returns:
            Suggestions ordered by descending estimated reduction; ties keep
            checker priority order
        """
        if unit.node is None:
            return []

        before = self.calculator.summarize(record)
        suggestions = []
        for checker in self.checkers:
            rewrite = checker.check(unit, record)
            if rewrite is None:
                continue
            try:
                rewritten = self.analyzer.create_unit(
                    rewrite.function, unit.qualified_name, unit.file_path, unit.is_method
                )
            except ParseError as e:
                self.logger.debug(f"Could not score {checker.kind.value} rewrite of {unit.qualified_name}: {e}")
                continue

            suggestions.append(PatternSuggestion(
                pattern=checker.kind,
                start_line=rewrite.start_line,
                end_line=rewrite.end_line,
                before=before,
                after=self.calculator.estimate(rewritten),
                rationale=rewrite.rationale,
            ))

        # sort is stable, so equal reductions stay in priority order
        suggestions.sort(key=lambda suggestion: suggestion.reduction, reverse=True)
        if suggestions:
            self.logger.debug(f"{unit.qualified_name}: {len(suggestions)} suggestions")
        return suggestions
