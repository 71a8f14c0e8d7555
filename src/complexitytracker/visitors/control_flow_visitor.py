"""Visitor for statement and control flow AST nodes."""
import ast
from typing import List, Sequence, Union

from ..models import NodeKind, SyntaxNode
from .expression_visitor import ExpressionVisitor

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]


class ControlFlowVisitor(ExpressionVisitor):
    """
    Lowers statements: if/elif/else, loops, match, try, with, jumps and
    nested definitions. Expressions are delegated to ExpressionVisitor.
    """

    def lower_block(self, statements: Sequence[ast.stmt], role: str,
                    label: str, anchor: ast.AST) -> SyntaxNode:
        """Lower a statement list into a BLOCK node."""
        children = [self.visit(statement) for statement in statements]
        block = self._make(NodeKind.BLOCK, label, anchor, children, role=role)
        if statements:
            first, last = statements[0], statements[-1]
            return SyntaxNode(
                kind=block.kind,
                label=block.label,
                role=block.role,
                children=block.children,
                lineno=first.lineno,
                end_lineno=getattr(last, "end_lineno", None) or last.lineno,
                node=anchor,
            )
        return block

    def visit_If(self, node):
        """Visit if statements."""
        return self._lower_if(node, "if")

    def _lower_if(self, node: ast.If, label: str) -> SyntaxNode:
        children = [
            self.lower_expr(node.test, "test"),
            self.lower_block(node.body, "body", "then", node),
        ]
        orelse = node.orelse
        if len(orelse) == 1 and isinstance(orelse[0], ast.If):
            children.append(self._with_role(self._lower_if(orelse[0], "elif"), "orelse"))
        elif orelse:
            children.append(self.lower_block(orelse, "orelse", "else", node))
        return self._make(NodeKind.CONDITIONAL, label, node, children)

    def visit_For(self, node):
        """Visit for loops."""
        return self._lower_loop(node, "for", self.lower_expr(node.iter, "iter"))

    def visit_AsyncFor(self, node):
        return self._lower_loop(node, "for", self.lower_expr(node.iter, "iter"))

    def visit_While(self, node):
        """Visit while loops."""
        return self._lower_loop(node, "while", self.lower_expr(node.test, "test"))

    def _lower_loop(self, node, label: str, head: SyntaxNode) -> SyntaxNode:
        children = [head, self.lower_block(node.body, "body", "loop-body", node)]
        if node.orelse:
            children.append(self.lower_block(node.orelse, "orelse", "loop-else", node))
        return self._make(NodeKind.LOOP, label, node, children)

    def visit_Match(self, node):
        """Visit match statements."""
        children = [self.lower_expr(node.subject, "subject")]
        for case in node.cases:
            parts = []
            if case.guard is not None:
                parts.append(self.lower_expr(case.guard, "guard"))
            parts.append(self.lower_block(case.body, "body", "case-body", case.pattern))
            label = "default" if self._is_default_case(case) else "case"
            children.append(self._make(NodeKind.CASE, label, case.pattern, parts, role="case"))
        return self._make(NodeKind.SWITCH, "match", node, children)

    @staticmethod
    def _is_default_case(case: ast.match_case) -> bool:
        """An unguarded capture or wildcard pattern always matches."""
        pattern = case.pattern
        return case.guard is None and isinstance(pattern, ast.MatchAs) and pattern.pattern is None

    def visit_Try(self, node):
        """Visit try/except blocks."""
        children = [self.lower_block(node.body, "body", "try-body", node)]
        for handler in node.handlers:
            body = self.lower_block(handler.body, "body", "except-body", handler)
            children.append(self._make(NodeKind.CATCH, "except", handler, [body], role="handler"))
        if node.orelse:
            children.append(self.lower_block(node.orelse, "orelse", "try-else", node))
        if node.finalbody:
            children.append(self.lower_block(node.finalbody, "finally", "finally", node))
        return self._make(NodeKind.BLOCK, "try", node, children)

    def visit_TryStar(self, node):
        return self.visit_Try(node)

    def visit_With(self, node):
        """Visit with statements."""
        items = self._interesting([item.context_expr for item in node.items], "value")
        body = self.lower_block(node.body, "body", "with-body", node)
        return self._make(NodeKind.BLOCK, "with", node, items + [body])

    def visit_AsyncWith(self, node):
        return self.visit_With(node)

    def visit_Return(self, node):
        return self._lower_jump(node, "return", node.value)

    def visit_Raise(self, node):
        return self._lower_jump(node, "raise", node.exc)

    def visit_Break(self, node):
        return self._lower_jump(node, "break", None)

    def visit_Continue(self, node):
        return self._lower_jump(node, "continue", None)

    def _lower_jump(self, node, label: str, value) -> SyntaxNode:
        children = self._interesting([value], "value") if value is not None else []
        return self._make(NodeKind.JUMP, label, node, children)

    def visit_FunctionDef(self, node):
        """Visit nested function definitions."""
        return self._lower_nested_function(node)

    def visit_AsyncFunctionDef(self, node):
        return self._lower_nested_function(node)

    def _lower_nested_function(self, node: FunctionNode) -> SyntaxNode:
        self._function_stack.append((node.name, False))
        try:
            body = self.lower_block(node.body, "body", "def-body", node)
        finally:
            self._function_stack.pop()
        return self._make(NodeKind.FUNCTION, "def", node, [body])

    def visit_ClassDef(self, node):
        """Visit nested class definitions; their methods lower as FUNCTION nodes."""
        children = []
        for statement in node.body:
            if isinstance(statement, (ast.FunctionDef, ast.AsyncFunctionDef)):
                self._function_stack.append((statement.name, True))
                try:
                    body = self.lower_block(statement.body, "body", "def-body", statement)
                finally:
                    self._function_stack.pop()
                children.append(self._make(NodeKind.FUNCTION, "def", statement, [body]))
            else:
                children.append(self.visit(statement))
        return self._make(NodeKind.BLOCK, "class", node, children)

    def generic_visit(self, node):
        if isinstance(node, ast.stmt):
            return self._generic_statement(node)
        return self._generic_expression(node)

    def _generic_statement(self, node: ast.stmt) -> SyntaxNode:
        """Lower a simple statement (assignment, expression, assert, ...)."""
        parts: List[ast.AST] = []
        for child in ast.iter_child_nodes(node):
            if isinstance(child, ast.keyword):
                child = child.value
            if isinstance(child, ast.expr):
                parts.append(child)
        children = self._interesting(parts, "value")
        label = type(node).__name__.lower()
        if children:
            return self._make(NodeKind.BLOCK, label, node, children)
        return self._make(NodeKind.LEAF, label, node)


class SyntaxTreeBuilder:
    """Builds the SyntaxNode tree for a single function definition."""

    def build(self, func_node: FunctionNode, is_method: bool = False) -> SyntaxNode:
        """
        Lower the body of ``func_node``.

        Args:
            func_node: Function definition to lower
            is_method: Whether the function is defined directly in a class body

        Returns:
            BLOCK node holding the lowered body statements
        """
        visitor = ControlFlowVisitor(func_node.name, is_method)
        return visitor.lower_block(func_node.body, "body", "function-body", func_node)
