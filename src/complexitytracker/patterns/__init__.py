"""
Refactoring pattern checkers.

``CHECKERS`` lists them in priority order, least invasive first; the
advisor uses that order to break ties between equally good suggestions.
"""

from .base import PatternChecker, Rewrite
from .boolean_minimizer import BooleanMinimizer, minimize_condition
from .consolidate_conditional import ConsolidateConditionalChecker
from .control_flag import RemoveControlFlagChecker
from .decompose_conditional import DecomposeConditionalChecker
from .extract_function import ExtractFunctionChecker
from .guard_clause import GuardClauseChecker
from .invert_expression import InvertExpressionChecker
from .scoped_cleanup import ScopedCleanupChecker
from .table_driven import TableDrivenChecker

CHECKERS = [
    GuardClauseChecker,
    DecomposeConditionalChecker,
    ExtractFunctionChecker,
    InvertExpressionChecker,
    ConsolidateConditionalChecker,
    RemoveControlFlagChecker,
    TableDrivenChecker,
    ScopedCleanupChecker,
]

__all__ = [
    'CHECKERS',
    'PatternChecker',
    'Rewrite',
    'BooleanMinimizer',
    'minimize_condition',
    'ConsolidateConditionalChecker',
    'RemoveControlFlagChecker',
    'DecomposeConditionalChecker',
    'ExtractFunctionChecker',
    'GuardClauseChecker',
    'InvertExpressionChecker',
    'ScopedCleanupChecker',
    'TableDrivenChecker',
]
