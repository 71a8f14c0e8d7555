"""
AST analysis module.
Parses Python source into function units with lowered syntax trees.
"""

from ..models import FunctionUnit, NodeKind, SyntaxNode, LOGICAL_KINDS, STATEMENT_ROLES
from .analyzer import ASTAnalyzer, ParsedModule

__all__ = [
    'FunctionUnit',
    'NodeKind',
    'SyntaxNode',
    'LOGICAL_KINDS',
    'STATEMENT_ROLES',
    'ASTAnalyzer',
    'ParsedModule',
]
