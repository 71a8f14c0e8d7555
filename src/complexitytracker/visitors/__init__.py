"""AST visitor modules for lowering function bodies."""
from .base import BaseSyntaxVisitor
from .expression_visitor import ExpressionVisitor
from .control_flow_visitor import ControlFlowVisitor, SyntaxTreeBuilder

__all__ = [
    'BaseSyntaxVisitor',
    'ExpressionVisitor',
    'ControlFlowVisitor',
    'SyntaxTreeBuilder',
]
