"""Decompose Conditional: move deeply nested branches into their own functions."""

import ast
from typing import List, Optional

from ..models import FunctionUnit, MetricRecord, PatternKind
from .base import PatternChecker, Rewrite
from .rewrite import (
    branch_bodies, call_statement, clone_function, contains_if, is_exit,
    local_ifs, replace_statement, walk_statements,
)


class DecomposeConditionalChecker(PatternChecker):
    """
    Applies to an ``if`` whose branch holds an ``if`` that itself contains
    another ``if``. Every such inner conditional of the outermost match is
    replaced by a call to an extracted helper.
    """

    kind = PatternKind.DECOMPOSE_CONDITIONAL

    def check(self, unit: FunctionUnit, record: MetricRecord) -> Optional[Rewrite]:
        function = clone_function(unit)
        for outer in local_ifs(function.body):
            inner = self._deep_branches(outer)
            if inner:
                break
        else:
            return None

        for index, node in enumerate(inner, start=1):
            helper = f"_{unit.name}_branch_{index}" if len(inner) > 1 else f"_{unit.name}_branch"
            returns = any(is_exit(child) for child in walk_statements([node]))
            replace_statement(function, node, [call_statement(helper, node, returns=returns)])

        lines = ", ".join(f"{node.lineno}-{node.end_lineno}" for node in inner)
        rationale = f"extract the nested conditional{'s' if len(inner) > 1 else ''} at lines {lines} into named helpers"
        return Rewrite(self.finish(function), outer.lineno, outer.end_lineno, rationale)

    @staticmethod
    def _deep_branches(outer: ast.If) -> List[ast.If]:
        """Outermost ifs inside ``outer``'s branches that nest another if."""
        found: List[ast.If] = []
        for body in branch_bodies(outer):
            for statement in body:
                candidates = [statement] if isinstance(statement, ast.If) else list(local_ifs([statement]))
                for candidate in candidates:
                    if any(candidate is seen or _inside(candidate, seen) for seen in found):
                        continue
                    if any(contains_if(branch) for branch in branch_bodies(candidate)):
                        found.append(candidate)
        return found


def _inside(node: ast.AST, container: ast.AST) -> bool:
    return any(child is node for child in ast.walk(container))
