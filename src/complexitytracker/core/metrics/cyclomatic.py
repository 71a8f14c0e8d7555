"""
Cyclomatic complexity scoring.
"""

import logging

from ...models import FunctionUnit, SyntaxNode
from ..graph import CFGBuilder, ControlFlowGraph

logger = logging.getLogger(__name__)


class CyclomaticScorer:
    """
    Computes V(G) = decision points + 1 from a function's control-flow graph.

    The graph is built per call and dropped afterwards, so one scorer can be
    shared between worker threads.
    """

    def score(self, unit: FunctionUnit) -> int:
        """
        Score a function unit.

        Args:
            unit: Function unit to score

        Returns:
            Cyclomatic complexity, at least 1
        """
        return self.score_body(unit.body)

    def score_body(self, body: SyntaxNode) -> int:
        return self.build_graph(body).decision_points + 1

    def build_graph(self, body: SyntaxNode) -> ControlFlowGraph:
        return CFGBuilder().build(body)
