"""
AST helpers shared by the pattern checkers.

Checkers never touch the analysed tree: they deep-copy the function
definition, look for their shape in the copy and rewrite the copy in place.
"""

import ast
import copy
from typing import Iterator, List, Optional, Sequence, Set

from ..models import FunctionUnit

SCOPE_NODES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef, ast.Lambda)

_INVERTED_COMPARISONS = {
    ast.Eq: ast.NotEq,
    ast.NotEq: ast.Eq,
    ast.Lt: ast.GtE,
    ast.GtE: ast.Lt,
    ast.Gt: ast.LtE,
    ast.LtE: ast.Gt,
    ast.Is: ast.IsNot,
    ast.IsNot: ast.Is,
    ast.In: ast.NotIn,
    ast.NotIn: ast.In,
}


def clone_function(unit: FunctionUnit) -> ast.AST:
    """Return a private copy of the unit's function definition."""
    return copy.deepcopy(unit.node)


def walk_local(node: ast.AST) -> Iterator[ast.AST]:
    """Like ``ast.walk`` but does not enter nested functions, classes or lambdas."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        for child in reversed(list(ast.iter_child_nodes(current))):
            if not isinstance(child, SCOPE_NODES):
                stack.append(child)


def child_statement_lists(node: ast.AST) -> List[List[ast.stmt]]:
    """Return the statement lists directly owned by a compound statement."""
    lists = []
    for name in ("body", "orelse", "finalbody"):
        statements = getattr(node, name, None)
        if isinstance(statements, list) and statements and isinstance(statements[0], ast.stmt):
            lists.append(statements)
    lists.extend(handler.body for handler in getattr(node, "handlers", None) or ())
    lists.extend(case.body for case in getattr(node, "cases", None) or ())
    return lists


def iter_statement_lists(node: ast.AST) -> Iterator[List[ast.stmt]]:
    """Yield every statement list of a function body, outermost first."""
    for statements in child_statement_lists(node):
        yield statements
        for statement in statements:
            if not isinstance(statement, SCOPE_NODES):
                yield from iter_statement_lists(statement)


def walk_statements(statements: Sequence[ast.stmt]) -> Iterator[ast.AST]:
    """Walk the local scope of each statement, skipping nested definitions."""
    for statement in statements:
        if not isinstance(statement, SCOPE_NODES):
            yield from walk_local(statement)


def local_ifs(statements: Sequence[ast.stmt]) -> Iterator[ast.If]:
    """Yield every ``if`` statement under ``statements``."""
    for node in walk_statements(statements):
        if isinstance(node, ast.If):
            yield node


def is_elif(if_node: ast.If) -> bool:
    """Check whether the else branch is a plain ``elif`` continuation."""
    return len(if_node.orelse) == 1 and isinstance(if_node.orelse[0], ast.If)


def branch_bodies(if_node: ast.If) -> List[List[ast.stmt]]:
    """Return the bodies of every branch of an if/elif/else chain."""
    bodies = []
    node = if_node
    while True:
        bodies.append(node.body)
        if is_elif(node):
            node = node.orelse[0]
            continue
        if node.orelse:
            bodies.append(node.orelse)
        return bodies


def contains_if(statements: Sequence[ast.stmt]) -> bool:
    return any(True for _ in local_ifs(statements))


def contains_control(statements: Sequence[ast.stmt]) -> bool:
    """Check for any construct that opens a nesting level."""
    control = (ast.If, ast.For, ast.AsyncFor, ast.While, ast.Match, ast.Try, ast.IfExp)
    return any(isinstance(node, control) for node in walk_statements(statements))


def negate(expr: ast.expr) -> ast.expr:
    """Build the logical negation of ``expr`` in its simplest textual form."""
    if isinstance(expr, ast.UnaryOp) and isinstance(expr.op, ast.Not):
        return copy.deepcopy(expr.operand)
    if isinstance(expr, ast.Compare) and len(expr.ops) == 1:
        inverted = _INVERTED_COMPARISONS[type(expr.ops[0])]()
        return ast.copy_location(
            ast.Compare(left=copy.deepcopy(expr.left), ops=[inverted],
                        comparators=copy.deepcopy(expr.comparators)),
            expr,
        )
    if isinstance(expr, ast.Constant) and isinstance(expr.value, bool):
        return ast.copy_location(ast.Constant(value=not expr.value), expr)
    return ast.copy_location(ast.UnaryOp(op=ast.Not(), operand=copy.deepcopy(expr)), expr)


def join_or(tests: Sequence[ast.expr]) -> ast.expr:
    """Combine tests with ``or``, flattening nested ``or`` chains."""
    values: List[ast.expr] = []
    for test in tests:
        if isinstance(test, ast.BoolOp) and isinstance(test.op, ast.Or):
            values.extend(copy.deepcopy(test.values))
        else:
            values.append(copy.deepcopy(test))
    if len(values) == 1:
        return values[0]
    return ast.copy_location(ast.BoolOp(op=ast.Or(), values=values), tests[0])


def helper_call(name: str, arguments: Sequence[str] = ()) -> ast.Call:
    return ast.Call(
        func=ast.Name(id=name, ctx=ast.Load()),
        args=[ast.Name(id=argument, ctx=ast.Load()) for argument in arguments],
        keywords=[],
    )


def call_statement(name: str, template: ast.stmt, arguments: Sequence[str] = (),
                   target: Optional[str] = None, returns: bool = False) -> ast.stmt:
    """Build ``name(args)`` as a statement positioned at ``template``."""
    call = helper_call(name, arguments)
    if returns:
        statement = ast.Return(value=call)
    elif target:
        statement = ast.Assign(targets=[ast.Name(id=target, ctx=ast.Store())], value=call)
    else:
        statement = ast.Expr(value=call)
    return ast.fix_missing_locations(ast.copy_location(statement, template))


def replace_statements(statements: List[ast.stmt], start: int, stop: int,
                       replacement: Sequence[ast.stmt]) -> None:
    """Replace ``statements[start:stop]`` in place."""
    statements[start:stop] = list(replacement)


def find_statement_list(root: ast.AST, target: ast.stmt) -> Optional[List[ast.stmt]]:
    """Return the statement list holding ``target`` (by identity)."""
    for statements in iter_statement_lists(root):
        if any(statement is target for statement in statements):
            return statements
    return None


def replace_statement(root: ast.AST, target: ast.stmt, replacement: Sequence[ast.stmt]) -> bool:
    statements = find_statement_list(root, target)
    if statements is None:
        return False
    index = next(i for i, statement in enumerate(statements) if statement is target)
    replace_statements(statements, index, index + 1, replacement)
    return True


def is_docstring(statement: ast.stmt) -> bool:
    return (isinstance(statement, ast.Expr) and isinstance(statement.value, ast.Constant)
            and isinstance(statement.value.value, str))


def is_exit(statement: ast.stmt) -> bool:
    return isinstance(statement, (ast.Return, ast.Raise))


class _ConstantMask(ast.NodeTransformer):
    def visit_Constant(self, node):
        return ast.Constant(value="<const>")


def shape_of(node: ast.AST) -> str:
    """Dump ``node`` with every constant masked, for same-shape comparisons."""
    return ast.dump(_ConstantMask().visit(copy.deepcopy(node)))


def constants_of(node: ast.AST) -> List[object]:
    """Constant values of ``node`` in a stable traversal order."""
    return [child.value for child in ordered_walk(node) if isinstance(child, ast.Constant)]


def ordered_walk(node: ast.AST) -> Iterator[ast.AST]:
    yield node
    for child in ast.iter_child_nodes(node):
        yield from ordered_walk(child)


def assigned_names(statements: Sequence[ast.stmt]) -> Set[str]:
    """Names bound by ``statements`` in the enclosing scope."""
    names: Set[str] = set()
    for statement in statements:
        for node in ast.walk(statement):
            if isinstance(node, ast.Name) and isinstance(node.ctx, (ast.Store, ast.Del)):
                names.add(node.id)
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
                names.add(node.name)
            elif isinstance(node, (ast.Import, ast.ImportFrom)):
                names.update((alias.asname or alias.name).split(".")[0] for alias in node.names)
    return names


def loaded_names(statements: Sequence[ast.stmt]) -> Set[str]:
    names: Set[str] = set()
    for statement in statements:
        for node in ast.walk(statement):
            if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Load):
                names.add(node.id)
    return names
