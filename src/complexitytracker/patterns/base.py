"""
Base interface for refactoring pattern checkers.
"""

import ast
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..models import FunctionUnit, MetricRecord, PatternKind
from ..services.configuration_service import ThresholdConfig


@dataclass
class Rewrite:
    """The textbook rewrite of a function, ready to be re-scored."""
    function: ast.AST
    start_line: int
    end_line: int
    rationale: str


class PatternChecker(ABC):
    """
    Checks one refactoring pattern's precondition against a function.

    Checkers are independent: each one works on its own copy of the
    function definition and never sees another checker's rewrite.
    """

    kind: PatternKind

    def __init__(self, thresholds: Optional[ThresholdConfig] = None):
        self.thresholds = thresholds or ThresholdConfig()
        self.logger = logging.getLogger(__name__)

    @abstractmethod
    def check(self, unit: FunctionUnit, record: MetricRecord) -> Optional[Rewrite]:
        """Return the rewrite this pattern proposes, or None if it does not apply.

        Args:
            unit: Function unit under analysis
            record: Its metric record

        Returns:
            A Rewrite holding the transformed function definition
        """
        pass

    @staticmethod
    def finish(function: ast.AST) -> ast.AST:
        """Fill in positions of synthesized nodes."""
        return ast.fix_missing_locations(function)
