"""Extract Function: split a long function along a clean cut."""

import ast
from typing import List, NamedTuple, Optional, Sequence, Set

from ..models import FunctionUnit, MetricRecord, PatternKind
from .base import PatternChecker, Rewrite
from .rewrite import (
    assigned_names, call_statement, clone_function, is_docstring, loaded_names,
    walk_statements,
)

# share of the function's lines a single block must exceed on its own
BLOCK_SHARE = 0.4
# fewest lines an extracted run may span
MIN_SEGMENT_LINES = 5


class _Segment(NamedTuple):
    start: int
    stop: int
    lines: int
    leaked: Optional[str]
    arguments: List[str]
    returns: bool


class ExtractFunctionChecker(PatternChecker):
    """
    Applies when the function is longer than the line limit, or when a run
    of at least five lines of top-level statements covers more than 40% of
    its lines and works on its own variables: it reads only parameters and
    names it binds itself, and at most one of those names (never rebound
    afterwards) flows back into the rest of the body as the helper's result.
    """

    kind = PatternKind.EXTRACT_FUNCTION

    def check(self, unit: FunctionUnit, record: MetricRecord) -> Optional[Rewrite]:
        function = clone_function(unit)
        too_long = record.line_count > self.thresholds.line_limit
        segment = self._best_segment(function, unit)

        if segment is None or (not too_long and segment.lines <= BLOCK_SHARE * record.line_count):
            if not too_long:
                return None
            rationale = (f"{record.line_count} lines exceed the limit of {self.thresholds.line_limit}; "
                         "split it into smaller functions")
            return Rewrite(function, unit.start_line, unit.end_line, rationale)

        body = function.body
        first, last = body[segment.start], body[segment.stop - 1]
        helper = f"_{unit.name}_step"
        replacement = call_statement(helper, first, segment.arguments,
                                     target=segment.leaked, returns=segment.returns)
        body[segment.start:segment.stop] = [replacement]

        reason = (f"{record.line_count} lines exceed the limit of {self.thresholds.line_limit}"
                  if too_long else
                  f"lines {first.lineno}-{last.end_lineno} are {segment.lines} of {record.line_count} lines")
        rationale = f"{reason}; extract lines {first.lineno}-{last.end_lineno} into {helper}()"
        return Rewrite(self.finish(function), first.lineno, last.end_lineno, rationale)

    def _best_segment(self, function: ast.AST, unit: FunctionUnit) -> Optional[_Segment]:
        """
        Pick the longest run of top-level statements whose locals are its own.

        Each start grows its run one statement at a time and stops at the
        first statement that touches a local already used before the run, so
        each start costs one pass over its own run.
        """
        body = function.body
        offset = 1 if body and is_docstring(body[0]) else 0
        statements = body[offset:]
        if len(statements) < 2:
            return None

        names = _NameIndex(statements, unit.parameters)
        best: Optional[_Segment] = None
        for start in range(len(statements)):
            segment = self._longest_from(statements, start, names)
            if segment is not None and (best is None or segment.lines > best.lines):
                best = segment._replace(start=start + offset, stop=segment.stop + offset)
        return best

    @staticmethod
    def _longest_from(statements: List[ast.stmt], start: int,
                      names: "_NameIndex") -> Optional[_Segment]:
        count = len(statements)
        best: Optional[_Segment] = None
        open_names: Set[str] = set()
        produced: Set[str] = set()
        arguments: Set[str] = set()
        returns = False
        for stop in range(start + 1, count + 1):
            index = stop - 1
            is_tail = stop == count
            if not (names.movable_at_tail if is_tail else names.movable)[index]:
                break
            touched = names.touched[index]
            if any(names.first_use[name] < start for name in touched):
                break
            open_names.update(name for name in touched if names.last_use[name] > index)
            open_names.difference_update(name for name in touched if names.last_use[name] == index)
            produced |= names.assigned[index]
            arguments |= names.inputs[index]
            returns = returns or names.returns[index]

            if start == 0 and is_tail:
                continue
            lines = statements[index].end_lineno - statements[start].lineno + 1
            if len(open_names) > 1 or lines < MIN_SEGMENT_LINES:
                continue
            leaked = next(iter(open_names), None)
            # the one name read afterwards must be produced here and never rebound later
            if leaked is not None and (leaked not in produced or names.last_assignment[leaked] >= stop):
                continue
            best = _Segment(start, stop, lines, leaked, sorted(arguments), is_tail and returns)
        return best


class _NameIndex:
    """
    Where each local name is used, computed once for the segment search.

    Locals are the names the body binds. A parameter the body rebinds
    counts as a local used before the first statement; any other parameter
    is a plain input that a helper takes as an argument.
    """

    def __init__(self, statements: List[ast.stmt], parameters: Sequence[str]):
        self.assigned = [assigned_names([statement]) for statement in statements]
        loaded = [loaded_names([statement]) for statement in statements]
        local = set().union(*self.assigned)
        inputs = set(parameters) - local

        self.touched = [(assigned | used) & local for assigned, used in zip(self.assigned, loaded)]
        self.inputs = [used & inputs for used in loaded]
        self.first_use = {}
        self.last_use = {}
        self.last_assignment = {}
        for index, touched in enumerate(self.touched):
            for name in touched:
                self.first_use.setdefault(name, -1 if name in parameters else index)
                self.last_use[name] = index
            for name in self.assigned[index]:
                self.last_assignment[name] = index

        # a statement can move anywhere, or only as the last one of the body
        self.movable = [_movable(statement, allow_return=False) for statement in statements]
        self.movable_at_tail = [_movable(statement, allow_return=True) for statement in statements]
        self.returns = [any(isinstance(node, ast.Return) for node in walk_statements([statement]))
                        for statement in statements]


def _movable(statement: ast.stmt, allow_return: bool) -> bool:
    """Check that a statement keeps its meaning inside an extracted helper."""
    for node in walk_statements([statement]):
        if isinstance(node, (ast.Yield, ast.YieldFrom, ast.Await, ast.Nonlocal, ast.Global)):
            return False
        if isinstance(node, ast.Return) and not allow_return:
            return False
        if isinstance(node, (ast.Break, ast.Continue)) and not _inside_loop(node, [statement]):
            return False
    return True


def _inside_loop(target: ast.AST, statements: List[ast.stmt]) -> bool:
    """Check that a break/continue belongs to a loop within ``statements``."""
    for node in walk_statements(statements):
        if isinstance(node, (ast.For, ast.AsyncFor, ast.While)):
            if any(child is target for child in ast.walk(node)):
                return True
    return False
