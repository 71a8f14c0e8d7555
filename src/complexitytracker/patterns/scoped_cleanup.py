"""Use Scoped Cleanup: let a ``with`` block release a resource on every exit."""

import ast
from typing import List, Optional, Tuple

from ..models import FunctionUnit, MetricRecord, PatternKind
from .base import PatternChecker, Rewrite
from .rewrite import SCOPE_NODES, clone_function, is_exit, iter_statement_lists

RELEASE_METHODS = frozenset({
    "close", "release", "unlock", "disconnect", "shutdown", "cleanup", "dispose", "stop",
})


class ScopedCleanupChecker(PatternChecker):
    """
    Applies when a name bound to a call (or ``x.acquire()``) is followed by
    two or more exit paths that each release it before leaving. The rewrite
    wraps the rest of the block in ``with`` and drops the release calls.
    """

    kind = PatternKind.USE_SCOPED_CLEANUP

    def check(self, unit: FunctionUnit, record: MetricRecord) -> Optional[Rewrite]:
        function = clone_function(unit)
        for statements in iter_statement_lists(function):
            for index, statement in enumerate(statements):
                acquired = self._acquisition(statement)
                if acquired is None:
                    continue
                name, context = acquired
                rest = statements[index + 1:]
                paths = self._releasing_exits(rest, name, at_tail=statements is function.body)
                if paths < 2:
                    continue

                end_line = rest[-1].end_lineno if rest else statement.end_lineno
                self._drop_releases(rest, name)
                body = rest or [ast.Pass()]
                with_node = ast.With(
                    items=[ast.withitem(
                        context_expr=context,
                        optional_vars=ast.Name(id=name, ctx=ast.Store()) if not _is_acquire(statement) else None,
                    )],
                    body=body,
                )
                statements[index:] = [ast.copy_location(with_node, statement)]
                rationale = (f"'{name}' is released separately on {paths} exit paths; "
                             f"a 'with' block releases it once on every path")
                return Rewrite(self.finish(function), statement.lineno, end_line, rationale)
        return None

    @staticmethod
    def _acquisition(statement: ast.stmt) -> Optional[Tuple[str, ast.expr]]:
        """Return the resource name and its context expression."""
        if (isinstance(statement, ast.Assign) and len(statement.targets) == 1
                and isinstance(statement.targets[0], ast.Name) and isinstance(statement.value, ast.Call)):
            return statement.targets[0].id, statement.value
        if _is_acquire(statement):
            receiver = statement.value.func.value
            return receiver.id, ast.Name(id=receiver.id, ctx=ast.Load())
        return None

    def _releasing_exits(self, statements: List[ast.stmt], name: str, at_tail: bool) -> int:
        """Count exits in ``statements`` directly preceded by a release of ``name``."""
        count = 0
        for block in [statements] + list(_nested_lists(statements)):
            for position, statement in enumerate(block):
                if is_exit(statement) and position and _is_release(block[position - 1], name):
                    count += 1
        # falling off the end of the function is an exit too
        if at_tail and statements and _is_release(statements[-1], name):
            count += 1
        return count

    @staticmethod
    def _drop_releases(statements: List[ast.stmt], name: str) -> None:
        for block in [statements] + list(_nested_lists(statements)):
            block[:] = [statement for statement in block if not _is_release(statement, name)] or [ast.Pass()]


def _nested_lists(statements: List[ast.stmt]):
    for statement in statements:
        if not isinstance(statement, SCOPE_NODES):
            yield from iter_statement_lists(statement)


def _is_release(statement: ast.stmt, name: str) -> bool:
    return _method_call_on(statement, name) in RELEASE_METHODS


def _is_acquire(statement: ast.stmt) -> bool:
    call = statement.value if isinstance(statement, ast.Expr) else None
    return (isinstance(call, ast.Call) and isinstance(call.func, ast.Attribute)
            and call.func.attr == "acquire" and isinstance(call.func.value, ast.Name))


def _method_call_on(statement: ast.stmt, name: str) -> Optional[str]:
    if not (isinstance(statement, ast.Expr) and isinstance(statement.value, ast.Call)):
        return None
    func = statement.value.func
    if isinstance(func, ast.Attribute) and isinstance(func.value, ast.Name) and func.value.id == name:
        return func.attr
    return None
