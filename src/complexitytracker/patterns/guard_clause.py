"""Guard Clause: return early instead of wrapping the rest of the function."""

import ast
from typing import Optional

from ..models import FunctionUnit, MetricRecord, PatternKind
from .base import PatternChecker, Rewrite
from .rewrite import clone_function, contains_control, negate


class GuardClauseChecker(PatternChecker):
    """
    Applies when the function ends in an ``if`` without ``else`` whose
    branch opens further nesting. Each such trailing ``if`` is inverted into
    ``if not cond: return`` and its body dedented, repeatedly.
    """

    kind = PatternKind.GUARD_CLAUSE

    def check(self, unit: FunctionUnit, record: MetricRecord) -> Optional[Rewrite]:
        function = clone_function(unit)
        first = self._wrapping_if(function.body)
        if first is None:
            return None

        start_line, end_line = first.lineno, first.end_lineno
        flattened = 0
        while True:
            # the dedented block may itself end in another wrapper
            wrapper = self._wrapping_if(function.body)
            if wrapper is None:
                break
            guard = ast.copy_location(
                ast.If(test=negate(wrapper.test), body=[ast.copy_location(ast.Return(value=None), wrapper)], orelse=[]),
                wrapper,
            )
            function.body[-1:] = [guard] + wrapper.body
            flattened += 1

        rationale = (f"invert {flattened} wrapping condition{'s' if flattened > 1 else ''} "
                     f"into early return{'s' if flattened > 1 else ''} to flatten the main path")
        return Rewrite(self.finish(function), start_line, end_line, rationale)

    @staticmethod
    def _wrapping_if(statements) -> Optional[ast.If]:
        if not statements:
            return None
        last = statements[-1]
        if isinstance(last, ast.If) and not last.orelse and contains_control(last.body):
            return last
        return None
