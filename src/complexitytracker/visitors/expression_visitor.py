"""Visitor for expression AST nodes."""
import ast
from typing import List, Sequence

from ..models import NodeKind, SyntaxNode
from .base import BaseSyntaxVisitor

STRUCTURAL_EXPRESSIONS = (
    ast.BoolOp, ast.IfExp, ast.Call, ast.Lambda,
    ast.ListComp, ast.SetComp, ast.GeneratorExp, ast.DictComp,
)


class ExpressionVisitor(BaseSyntaxVisitor):
    """
    Lowers expressions: boolean operators, negation, ternaries, calls,
    lambdas and comprehensions. Anything else collapses to a LEAF unless
    it contains one of those.
    """

    def lower_expr(self, expr: ast.AST, role: str) -> SyntaxNode:
        """Lower ``expr`` and place it in ``role``."""
        return self._with_role(self.visit(expr), role)

    def visit_BoolOp(self, node):
        """Visit ``and``/``or`` chains."""
        kind = NodeKind.LOGICAL_AND if isinstance(node.op, ast.And) else NodeKind.LOGICAL_OR
        operands = [self.lower_expr(value, "operand") for value in node.values]
        return self._make(kind, kind.value, node, operands, role="value")

    def visit_UnaryOp(self, node):
        """Visit unary operators; only ``not`` is kept as a structural node."""
        if isinstance(node.op, ast.Not):
            operand = self.lower_expr(node.operand, "operand")
            return self._make(NodeKind.NEGATION, "not", node, [operand], role="value")
        return self._generic_expression(node)

    def visit_IfExp(self, node):
        """Visit conditional expressions (``a if cond else b``)."""
        children = [
            self.lower_expr(node.test, "test"),
            self.lower_expr(node.body, "value"),
            self.lower_expr(node.orelse, "alternative"),
        ]
        return self._make(NodeKind.CONDITIONAL, "ternary", node, children, role="value")

    def visit_Call(self, node):
        """Visit calls, marking direct self-calls as recursion."""
        kind = NodeKind.RECURSION if self._is_recursive_call(node) else NodeKind.CALL
        children = []
        if not isinstance(node.func, ast.Name):
            func = self.lower_expr(node.func, "callee")
            if not self._is_trivial(func):
                children.append(func)
        arguments = list(node.args) + [keyword.value for keyword in node.keywords]
        children.extend(self._interesting(arguments, "argument"))
        return self._make(kind, self._get_call_name(node), node, children, role="value")

    def visit_Lambda(self, node):
        """Visit lambdas; the body is an expression nested one level deeper."""
        self._function_stack.append(("<lambda>", False))
        try:
            body = self.lower_expr(node.body, "value")
        finally:
            self._function_stack.pop()
        return self._make(NodeKind.FUNCTION, "lambda", node, [body], role="value")

    def visit_ListComp(self, node):
        return self._comprehension(node, [node.elt])

    def visit_SetComp(self, node):
        return self._comprehension(node, [node.elt])

    def visit_GeneratorExp(self, node):
        return self._comprehension(node, [node.elt])

    def visit_DictComp(self, node):
        return self._comprehension(node, [node.key, node.value])

    def _comprehension(self, node, elements: Sequence[ast.expr]) -> SyntaxNode:
        """Lower a comprehension into generator loops with filter conditionals."""
        children: List[SyntaxNode] = []
        for generator in node.generators:
            parts = [self.lower_expr(generator.iter, "iter")]
            for condition in generator.ifs:
                test = self.lower_expr(condition, "test")
                parts.append(self._make(NodeKind.CONDITIONAL, "filter", condition, [test], role="filter"))
            children.append(self._make(NodeKind.LOOP, "generator", generator.iter, parts, role="generator"))
        children.extend(self.lower_expr(element, "element") for element in elements)
        return self._make(NodeKind.BLOCK, "comprehension", node, children, role="value")

    def _interesting(self, exprs: Sequence[ast.AST], role: str) -> List[SyntaxNode]:
        """Lower ``exprs`` and drop the ones that lowered to plain leaves."""
        lowered = []
        for expr in exprs:
            if expr is None:
                continue
            node = self.lower_expr(expr, role)
            if not self._is_trivial(node):
                lowered.append(node)
        return lowered

    def _generic_expression(self, node) -> SyntaxNode:
        """
        Lower an expression with no structure of its own.

        Only the structural sub-expressions matter, so they are collected
        with an explicit stack: operator chains like ``a + b + ...`` nest
        one level per operand and would exhaust the recursion limit.
        """
        children = [self.lower_expr(expr, "value") for expr in self._structural_parts(node)]
        if children:
            return self._make(NodeKind.BLOCK, "expr", node, children, role="value")
        return self._make(NodeKind.LEAF, type(node).__name__.lower(), node, role="value")

    @classmethod
    def _structural_parts(cls, node: ast.AST) -> List[ast.expr]:
        """Outermost structural sub-expressions of ``node``, left to right."""
        found = []
        stack = list(reversed(cls._sub_expressions(node)))
        while stack:
            expr = stack.pop()
            if cls._is_structural(expr):
                found.append(expr)
            else:
                stack.extend(reversed(cls._sub_expressions(expr)))
        return found

    @staticmethod
    def _sub_expressions(node: ast.AST) -> List[ast.expr]:
        parts = []
        for child in ast.iter_child_nodes(node):
            if isinstance(child, ast.keyword):
                child = child.value
            if isinstance(child, ast.expr):
                parts.append(child)
        return parts

    @staticmethod
    def _is_structural(expr: ast.expr) -> bool:
        """Expressions with their own ``visit_*`` lowering."""
        if isinstance(expr, ast.UnaryOp):
            return isinstance(expr.op, ast.Not)
        return isinstance(expr, STRUCTURAL_EXPRESSIONS)

    def generic_visit(self, node):
        return self._generic_expression(node)
