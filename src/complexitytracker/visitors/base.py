"""Base visitor class for lowering Python AST into syntax trees."""
import ast
from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from ..models import NodeKind, SyntaxNode


class BaseSyntaxVisitor(ast.NodeVisitor):
    """
    Base class for lowering visitors.
    Each ``visit_*`` method returns a SyntaxNode instead of collecting
    tokens, so callers compose the tree from return values.
    """

    def __init__(self, function_name: Optional[str] = None, is_method: bool = False):
        # (name, is_method) of the enclosing function definitions, innermost last
        self._function_stack: List[Tuple[str, bool]] = []
        if function_name:
            self._function_stack.append((function_name, is_method))

    def _make(self, kind: NodeKind, label: str, node: ast.AST,
              children: Iterable[SyntaxNode] = (), role: str = "statement") -> SyntaxNode:
        """Create a SyntaxNode positioned at ``node``."""
        lineno = getattr(node, "lineno", 0) or 0
        end_lineno = getattr(node, "end_lineno", None) or lineno
        return SyntaxNode(
            kind=kind,
            label=label,
            role=role,
            children=tuple(children),
            lineno=lineno,
            end_lineno=end_lineno,
            node=node,
        )

    @staticmethod
    def _with_role(node: SyntaxNode, role: str) -> SyntaxNode:
        if node.role == role:
            return node
        return replace(node, role=role)

    @staticmethod
    def _is_trivial(node: SyntaxNode) -> bool:
        """A leaf carries nothing the scorers or the CFG care about."""
        return node.kind is NodeKind.LEAF

    def _get_call_name(self, call: ast.Call) -> str:
        """Extract a readable callee name from a Call node."""
        func = call.func
        if isinstance(func, ast.Name):
            return func.id
        if isinstance(func, ast.Attribute):
            return func.attr
        return "<call>"

    def _is_recursive_call(self, call: ast.Call) -> bool:
        """Check whether ``call`` invokes the innermost enclosing function."""
        if not self._function_stack:
            return False
        name, is_method = self._function_stack[-1]
        func = call.func
        if isinstance(func, ast.Name):
            return func.id == name and not is_method
        if is_method and isinstance(func, ast.Attribute) and func.attr == name:
            return isinstance(func.value, ast.Name) and func.value.id in ("self", "cls")
        return False
