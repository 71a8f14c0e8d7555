"""
Data models for ComplexityTracker.
"""

import ast
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple


class NodeKind(Enum):
    """Kinds of nodes in a lowered function body."""
    CONDITIONAL = "conditional"
    LOOP = "loop"
    SWITCH = "switch"
    CASE = "case"
    LOGICAL_AND = "and"
    LOGICAL_OR = "or"
    CALL = "call"
    RECURSION = "recursion"
    JUMP = "jump"
    BLOCK = "block"
    LEAF = "leaf"
    # Python constructs without a direct counterpart above
    CATCH = "catch"
    FUNCTION = "function"
    NEGATION = "negation"


LOGICAL_KINDS = (NodeKind.LOGICAL_AND, NodeKind.LOGICAL_OR)

# Child roles holding statements rather than expressions
STATEMENT_ROLES = frozenset({"body", "orelse", "finally"})


@dataclass(frozen=True)
class SyntaxNode:
    """A node of the lowered function body tree.

    ``label`` names the concrete construct (``if``, ``elif``, ``while``,
    ``generator``, ``default`` ...) and ``role`` the slot it occupies in
    its parent (``test``, ``body``, ``orelse``, ``operand`` ...).
    """

    kind: NodeKind
    label: str
    role: str = "statement"
    children: Tuple["SyntaxNode", ...] = ()
    lineno: int = 0
    end_lineno: int = 0
    node: Optional[ast.AST] = field(default=None, compare=False, repr=False)

    def child(self, role: str) -> Optional["SyntaxNode"]:
        """Return the first child occupying ``role``, if any."""
        for child in self.children:
            if child.role == role:
                return child
        return None

    def children_with(self, role: str) -> List["SyntaxNode"]:
        """Return every child occupying ``role``."""
        return [child for child in self.children if child.role == role]

    def walk(self) -> Iterator["SyntaxNode"]:
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    @property
    def is_statement_block(self) -> bool:
        return self.kind is NodeKind.BLOCK and self.role in STATEMENT_ROLES


@dataclass(frozen=True)
class FunctionUnit:
    """One analyzable function or method."""

    qualified_name: str
    name: str
    start_line: int
    end_line: int
    parameters: Tuple[str, ...]
    body: SyntaxNode
    file_path: Optional[str] = None
    is_method: bool = False
    node: Optional[ast.AST] = field(default=None, compare=False, repr=False)

    @property
    def line_count(self) -> int:
        """Physical lines of the definition, inclusive."""
        return self.end_line - self.start_line + 1

    @property
    def location(self) -> str:
        return f"{self.file_path or '<string>'}:{self.start_line}"


class CognitiveIncrement(NamedTuple):
    """One scoring step of the cognitive walk."""
    line: int
    amount: int
    reason: str


@dataclass(frozen=True)
class MetricRecord:
    """Per-function metrics. Re-analysis produces a new record."""

    cyclomatic_complexity: int
    cognitive_complexity: int
    max_nesting_depth: int
    line_count: int
    function: FunctionUnit
    increments: Tuple[CognitiveIncrement, ...] = field(default=(), compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "function": self.function.qualified_name,
            "file_path": self.function.file_path,
            "line": self.function.start_line,
            "cyclomatic": self.cyclomatic_complexity,
            "cognitive": self.cognitive_complexity,
            "max_nesting": self.max_nesting_depth,
            "lines": self.line_count,
        }


class PatternKind(Enum):
    """The eight refactoring patterns the advisor can recommend."""
    GUARD_CLAUSE = "Guard Clause"
    DECOMPOSE_CONDITIONAL = "Decompose Conditional"
    EXTRACT_FUNCTION = "Extract Function"
    INVERT_EXPRESSION = "Invert Expression"
    CONSOLIDATE_CONDITIONAL = "Consolidate Conditional"
    REMOVE_CONTROL_FLAG = "Remove Control Flag"
    TABLE_DRIVEN = "Table-Driven"
    USE_SCOPED_CLEANUP = "Use Scoped Cleanup"


@dataclass(frozen=True)
class ComplexityEstimate:
    """Scores of a function shape, before or after a rewrite."""
    cyclomatic: int
    cognitive: int
    max_nesting: int

    def to_dict(self) -> Dict[str, int]:
        return {"cyclomatic": self.cyclomatic, "cognitive": self.cognitive, "max_nesting": self.max_nesting}


@dataclass(frozen=True)
class PatternSuggestion:
    """A refactoring recommendation for one span of a function."""

    pattern: PatternKind
    start_line: int
    end_line: int
    before: ComplexityEstimate
    after: ComplexityEstimate
    rationale: str

    @property
    def reduction(self) -> int:
        """Combined cyclomatic and cognitive gain of applying the rewrite."""
        return ((self.before.cyclomatic - self.after.cyclomatic)
                + (self.before.cognitive - self.after.cognitive))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "pattern": self.pattern.value,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "before": self.before.to_dict(),
            "after": self.after.to_dict(),
            "rationale": self.rationale,
        }


@dataclass(frozen=True)
class FunctionResult:
    """Metrics and ranked suggestions for one function unit."""

    record: MetricRecord
    suggestions: Tuple[PatternSuggestion, ...] = ()
    # names of the limits this function exceeds, filled in by the aggregator
    exceeded: Tuple[str, ...] = ()

    @property
    def function(self) -> FunctionUnit:
        return self.record.function

    def to_dict(self) -> Dict[str, Any]:
        data = self.record.to_dict()
        data["exceeded"] = list(self.exceeded)
        data["suggestions"] = [suggestion.to_dict() for suggestion in self.suggestions]
        return data
