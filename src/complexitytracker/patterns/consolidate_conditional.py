"""Consolidate Conditional: merge consecutive early exits with the same result."""

import ast
from typing import List, Optional

from ..models import FunctionUnit, MetricRecord, PatternKind
from .base import PatternChecker, Rewrite
from .rewrite import clone_function, is_exit, iter_statement_lists, join_or


class ConsolidateConditionalChecker(PatternChecker):
    """
    Applies to two or more consecutive ``if cond: return X`` statements
    (no ``else``) in one block that exit with the same value under distinct
    conditions. The first such run is merged into ``if c1 or c2 ...: return X``.
    """

    kind = PatternKind.CONSOLIDATE_CONDITIONAL

    def check(self, unit: FunctionUnit, record: MetricRecord) -> Optional[Rewrite]:
        function = clone_function(unit)
        for statements in iter_statement_lists(function):
            run = self._first_run(statements)
            if run is None:
                continue
            start, stop = run
            exits = statements[start:stop]
            merged = ast.copy_location(
                ast.If(test=join_or([node.test for node in exits]), body=exits[0].body, orelse=[]),
                exits[0],
            )
            statements[start:stop] = [merged]
            outcome = ast.unparse(exits[0].body[0])
            rationale = f"{len(exits)} separate conditions all end in '{outcome}'; combine them into one check"
            return Rewrite(self.finish(function), exits[0].lineno, exits[-1].end_lineno, rationale)
        return None

    def _first_run(self, statements: List[ast.stmt]):
        index = 0
        while index < len(statements):
            stop = index
            while stop + 1 < len(statements) and self._continues(statements[index:stop + 1], statements[stop + 1]):
                stop += 1
            if stop > index and self._is_early_exit(statements[index]):
                return index, stop + 1
            index = stop + 1
        return None

    def _continues(self, run: List[ast.stmt], candidate: ast.stmt) -> bool:
        if not (self._is_early_exit(run[0]) and self._is_early_exit(candidate)):
            return False
        outcome = ast.dump(run[0].body[0])
        tests = {ast.dump(node.test) for node in run}
        return ast.dump(candidate.body[0]) == outcome and ast.dump(candidate.test) not in tests

    @staticmethod
    def _is_early_exit(statement: ast.stmt) -> bool:
        return (isinstance(statement, ast.If) and not statement.orelse
                and len(statement.body) == 1 and is_exit(statement.body[0]))
