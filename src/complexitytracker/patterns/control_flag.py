"""Remove Control Flag: replace a boolean loop flag with break/return."""

import ast
import copy
from typing import Iterator, List, Optional

from ..models import FunctionUnit, MetricRecord, PatternKind
from .base import PatternChecker, Rewrite
from .rewrite import SCOPE_NODES, child_statement_lists, clone_function, iter_statement_lists, walk_local

LOOPS = (ast.For, ast.AsyncFor, ast.While)


class RemoveControlFlagChecker(PatternChecker):
    """
    Applies to a name set to a bool constant earlier in the loop's block, assigned a
    bool constant inside it, and read only in that loop's ``while`` test or
    in the statement right after the loop. A flag with no value before the
    loop is per-iteration state, not a control flag.

    The flag assignments become ``break`` (or ``return`` when the statement
    after the loop just returns the flag) and the flag leaves the test.
    """

    kind = PatternKind.REMOVE_CONTROL_FLAG

    def check(self, unit: FunctionUnit, record: MetricRecord) -> Optional[Rewrite]:
        function = clone_function(unit)
        for statements in iter_statement_lists(function):
            for index, loop in enumerate(statements):
                if not isinstance(loop, LOOPS):
                    continue
                following = statements[index + 1] if index + 1 < len(statements) else None
                for flag in self._flag_candidates(loop):
                    initial = _initial_value(statements[:index], flag)
                    if initial is None or not self._read_only_at_edges(function, loop, following, flag):
                        continue
                    rationale = self._rewrite(statements, index, loop, following, flag, initial)
                    return Rewrite(self.finish(function), loop.lineno, loop.end_lineno, rationale)
        return None

    @staticmethod
    def _flag_candidates(loop: ast.stmt) -> List[str]:
        names = []
        for body in _own_statement_lists(loop.body):
            for node in body:
                if _flag_assignment(node) and node.targets[0].id not in names:
                    names.append(node.targets[0].id)
        return names

    @staticmethod
    def _read_only_at_edges(function: ast.AST, loop: ast.stmt,
                            following: Optional[ast.stmt], flag: str) -> bool:
        edges = [following] if following is not None else []
        if isinstance(loop, ast.While):
            edges.append(loop.test)
        allowed = {id(node) for root in edges for node in ast.walk(root)}

        reads = [node for node in walk_local(function)
                 if isinstance(node, ast.Name) and node.id == flag and isinstance(node.ctx, ast.Load)]
        return bool(reads) and all(id(node) in allowed for node in reads)

    def _rewrite(self, statements: List[ast.stmt], index: int, loop: ast.stmt,
                 following: Optional[ast.stmt], flag: str, initial: bool) -> str:
        returns_flag = (isinstance(following, ast.Return) and isinstance(following.value, ast.Name)
                        and following.value.id == flag)

        for body in _own_statement_lists(loop.body):
            positions = [position for position, node in enumerate(body)
                         if _flag_assignment(node) and node.targets[0].id == flag
                         and node.value.value != initial]
            for position in reversed(positions):
                node = body[position]
                if returns_flag:
                    body[position] = ast.copy_location(ast.Return(value=ast.Constant(value=node.value.value)), node)
                elif isinstance(loop, ast.While):
                    body[position] = ast.copy_location(ast.Break(), node)
                else:
                    body.insert(position + 1, ast.copy_location(ast.Break(), node))

        if returns_flag:
            following.value = ast.copy_location(ast.Constant(value=initial), following.value)
            return f"return from inside the loop instead of setting '{flag}' and returning it afterwards"

        if isinstance(loop, ast.While):
            loop.test = _without_flag(loop.test, flag)
            statements[:index] = [node for node in statements[:index]
                                  if not (_flag_assignment(node) and node.targets[0].id == flag)]
            return f"use 'break' instead of the control flag '{flag}' in the loop condition"
        return f"stop the loop with 'break' as soon as '{flag}' is set"


def _flag_assignment(node: ast.AST) -> bool:
    return (isinstance(node, ast.Assign) and len(node.targets) == 1
            and isinstance(node.targets[0], ast.Name)
            and isinstance(node.value, ast.Constant) and isinstance(node.value.value, bool))


def _initial_value(statements: List[ast.stmt], flag: str) -> Optional[bool]:
    for node in reversed(statements):
        if _flag_assignment(node) and node.targets[0].id == flag:
            return node.value.value
    return None


def _own_statement_lists(statements: List[ast.stmt]) -> Iterator[List[ast.stmt]]:
    """Statement lists of a loop body, stopping at nested loops."""
    yield statements
    for node in statements:
        if isinstance(node, LOOPS + SCOPE_NODES):
            continue
        for nested in child_statement_lists(node):
            yield from _own_statement_lists(nested)


def _without_flag(test: ast.expr, flag: str) -> ast.expr:
    """Drop the flag from a ``while`` test."""
    def mentions(expr: ast.expr) -> bool:
        return any(isinstance(node, ast.Name) and node.id == flag for node in ast.walk(expr))

    if isinstance(test, ast.BoolOp) and isinstance(test.op, ast.And):
        kept = [value for value in test.values if not mentions(value)]
        if len(kept) == 1:
            return kept[0]
        if kept:
            return ast.copy_location(ast.BoolOp(op=ast.And(), values=copy.deepcopy(kept)), test)
    if mentions(test):
        return ast.copy_location(ast.Constant(value=True), test)
    return test
