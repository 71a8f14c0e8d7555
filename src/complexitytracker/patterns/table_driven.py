"""Table-Driven: replace a same-shape branch chain with a lookup."""

import ast
import copy
from typing import List, Optional, Tuple

from ..models import FunctionUnit, MetricRecord, PatternKind
from .base import PatternChecker, Rewrite
from .rewrite import (
    branch_bodies, clone_function, constants_of, ordered_walk, replace_statement, shape_of, walk_local,
)

MIN_BRANCHES = 3
TABLE_NAME = "_TABLE"


class TableDrivenChecker(PatternChecker):
    """
    Applies to a ``match`` or ``if``/``elif`` chain with at least three
    branches whose bodies are single statements identical up to constants.
    The chain becomes one statement reading the varying constants from a
    lookup table keyed by the dispatch value.
    """

    kind = PatternKind.TABLE_DRIVEN

    def check(self, unit: FunctionUnit, record: MetricRecord) -> Optional[Rewrite]:
        function = clone_function(unit)
        for node in walk_local(function):
            if isinstance(node, ast.Match):
                bodies = [case.body for case in node.cases]
                key = node.subject
            elif isinstance(node, ast.If) and not self._is_elif_continuation(function, node):
                bodies = branch_bodies(node)
                key = self._dispatch_key(node)
            else:
                continue

            template = self._template(bodies)
            if template is None:
                continue
            statement, varying = template
            replacement = self._lookup_statement(statement, varying, key)
            replace_statement(function, node, [replacement])
            rationale = (f"{len(bodies)} branches differ only in constant values; "
                         f"look them up in a table instead")
            return Rewrite(self.finish(function), node.lineno, node.end_lineno, rationale)
        return None

    @staticmethod
    def _template(bodies: List[List[ast.stmt]]) -> Optional[Tuple[ast.stmt, List[int]]]:
        """Return the shared statement and the constant positions that vary."""
        if len(bodies) < MIN_BRANCHES or any(len(body) != 1 for body in bodies):
            return None
        statements = [body[0] for body in bodies]
        if not all(isinstance(statement, (ast.Expr, ast.Return, ast.Assign, ast.AugAssign))
                   for statement in statements):
            return None
        shape = shape_of(statements[0])
        if any(shape_of(statement) != shape for statement in statements[1:]):
            return None

        columns = list(zip(*(constants_of(statement) for statement in statements)))
        varying = [index for index, column in enumerate(columns) if len(set(map(repr, column))) > 1]
        if not varying:
            return None
        return statements[0], varying

    @staticmethod
    def _lookup_statement(statement: ast.stmt, varying: List[int], key: ast.expr) -> ast.stmt:
        replacement = copy.deepcopy(statement)
        constants = [node for node in ordered_walk(replacement) if isinstance(node, ast.Constant)]
        for index in varying:
            target = constants[index]
            lookup = ast.Subscript(
                value=ast.Name(id=TABLE_NAME, ctx=ast.Load()),
                slice=copy.deepcopy(key),
                ctx=ast.Load(),
            )
            _replace_child(replacement, target, ast.copy_location(lookup, target))
        return ast.fix_missing_locations(replacement)

    @staticmethod
    def _dispatch_key(node: ast.If) -> ast.expr:
        """The common left operand of ``x == CONST`` tests, or a generic key."""
        lefts = set()
        current = node
        while True:
            test = current.test
            if isinstance(test, ast.Compare) and len(test.ops) == 1 and isinstance(test.ops[0], ast.Eq):
                lefts.add(ast.dump(test.left))
            else:
                lefts.add(None)
            if len(current.orelse) == 1 and isinstance(current.orelse[0], ast.If):
                current = current.orelse[0]
                continue
            break
        if len(lefts) == 1 and None not in lefts:
            return node.test.left
        return ast.Name(id="key", ctx=ast.Load())

    @staticmethod
    def _is_elif_continuation(function: ast.AST, node: ast.If) -> bool:
        for parent in walk_local(function):
            if isinstance(parent, ast.If) and len(parent.orelse) == 1 and parent.orelse[0] is node:
                return True
        return False


def _replace_child(root: ast.AST, target: ast.AST, replacement: ast.AST) -> None:
    for parent in ordered_walk(root):
        for name, value in ast.iter_fields(parent):
            if value is target:
                setattr(parent, name, replacement)
                return
            if isinstance(value, list):
                for index, item in enumerate(value):
                    if item is target:
                        value[index] = replacement
                        return
