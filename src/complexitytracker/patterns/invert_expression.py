"""Invert Expression: restate a mixed negated/positive condition with fewer operators."""

import ast
from typing import Optional

from ..models import FunctionUnit, MetricRecord, PatternKind
from .base import PatternChecker, Rewrite
from .boolean_minimizer import minimize_condition
from .rewrite import clone_function, walk_local


class InvertExpressionChecker(PatternChecker):
    """
    Applies to ``if``/``while``/ternary tests that combine a negated and a
    positive term and are equivalent to a condition with fewer ``and``/``or``
    operators. Every such test in the function is replaced.
    """

    kind = PatternKind.INVERT_EXPRESSION

    def check(self, unit: FunctionUnit, record: MetricRecord) -> Optional[Rewrite]:
        function = clone_function(unit)
        rewritten = []
        for node in walk_local(function):
            if isinstance(node, (ast.If, ast.While, ast.IfExp)):
                simpler = minimize_condition(node.test)
                if simpler is not None:
                    rewritten.append((node, ast.unparse(node.test), ast.unparse(simpler)))
                    node.test = simpler

        if not rewritten:
            return None

        first = rewritten[0][0]
        rationale = "; ".join(f"'{before}' is equivalent to '{after}'" for _, before, after in rewritten)
        return Rewrite(self.finish(function), first.lineno, first.end_lineno, rationale)
