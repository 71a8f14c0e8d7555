"""
Cognitive complexity scoring.

Flow-breaking constructs cost ``1 + nesting`` where they appear, continuations
(``elif``/``else``) and ``match`` cost a flat 1, and each run of same-kind
boolean operators costs 1. The nesting level is passed down by value, so
a scorer holds no state between calls.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from ...models import CognitiveIncrement, FunctionUnit, LOGICAL_KINDS, NodeKind, SyntaxNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CognitiveResult:
    """Outcome of one cognitive walk."""
    score: int
    max_nesting: int
    increments: Tuple[CognitiveIncrement, ...]


class _CognitiveWalk:
    """Accumulates increments for a single function body."""

    def __init__(self):
        self.increments: List[CognitiveIncrement] = []
        self.max_nesting = 0

    def add(self, node: SyntaxNode, amount: int, reason: str) -> None:
        self.increments.append(CognitiveIncrement(node.lineno, amount, reason))

    def nested(self, nodes: Iterable[SyntaxNode], nesting: int) -> None:
        """Visit ``nodes`` inside a construct that raises the nesting level."""
        self.max_nesting = max(self.max_nesting, nesting)
        for node in nodes:
            self.visit(node, nesting)

    def visit(self, node: SyntaxNode, nesting: int) -> None:
        kind = node.kind
        if kind is NodeKind.CONDITIONAL:
            self._conditional(node, nesting)
        elif kind is NodeKind.LOOP:
            self._loop(node, nesting)
        elif kind is NodeKind.SWITCH:
            self.add(node, 1, "match")
            self.visit(node.child("subject"), nesting)
            for case in node.children_with("case"):
                self.nested(case.children, nesting + 1)
        elif kind is NodeKind.CATCH:
            self.add(node, 1 + nesting, f"except (nesting={nesting})")
            self.nested(node.children, nesting + 1)
        elif kind is NodeKind.FUNCTION:
            self.nested(node.children, nesting + 1)
        elif kind in LOGICAL_KINDS:
            self._logical(node, nesting)
        elif kind is NodeKind.RECURSION:
            self.add(node, 1, f"recursive call to {node.label}")
            self._children(node, nesting)
        else:
            # Python has no goto or labeled break/continue, so jumps are free
            self._children(node, nesting)

    def _children(self, node: SyntaxNode, nesting: int) -> None:
        for child in node.children:
            self.visit(child, nesting)

    def _conditional(self, node: SyntaxNode, nesting: int) -> None:
        if node.label == "filter":
            # comprehension shorthand
            self._children(node, nesting)
            return

        if node.label == "ternary":
            self.add(node, 1 + nesting, f"ternary (nesting={nesting})")
            self.visit(node.child("test"), nesting)
            self.nested([node.child("value"), node.child("alternative")], nesting + 1)
            return

        self.add(node, 1 + nesting, f"if (nesting={nesting})")
        while True:
            self.visit(node.child("test"), nesting)
            self.nested(node.child("body").children, nesting + 1)
            orelse = node.child("orelse")
            if orelse is None:
                return
            if orelse.kind is NodeKind.CONDITIONAL:
                self.add(orelse, 1, "elif")
                node = orelse
                continue
            self.add(orelse, 1, "else")
            self.nested(orelse.children, nesting + 1)
            return

    def _loop(self, node: SyntaxNode, nesting: int) -> None:
        if node.label == "generator":
            self._children(node, nesting)
            return

        self.add(node, 1 + nesting, f"{node.label} loop (nesting={nesting})")
        for child in node.children:
            if child.role == "body":
                self.nested(child.children, nesting + 1)
            elif child.role == "orelse":
                self.add(child, 1, f"{node.label}-else")
                self.nested(child.children, nesting + 1)
            else:
                self.visit(child, nesting)

    def _logical(self, node: SyntaxNode, nesting: int) -> None:
        operators: List[NodeKind] = []
        operands: List[SyntaxNode] = []
        self._flatten(node, operators, operands)
        runs = 1 + sum(1 for left, right in zip(operators, operators[1:]) if left is not right)
        sequence = " ".join(operator.value for operator in operators)
        self.add(node, runs, f"boolean operators ({sequence})")
        for operand in operands:
            self.visit(operand, nesting)

    def _flatten(self, node: SyntaxNode, operators: List[NodeKind], operands: List[SyntaxNode]) -> None:
        """Collect the in-order operator sequence of a boolean expression."""
        if node.kind in LOGICAL_KINDS:
            for index, operand in enumerate(node.children):
                if index:
                    operators.append(node.kind)
                self._flatten(operand, operators, operands)
        elif node.kind is NodeKind.NEGATION:
            self._flatten(node.children[0], operators, operands)
        else:
            operands.append(node)


class CognitiveScorer:
    """Scores readability cost with a nesting-aware walk of the syntax tree."""

    def score(self, unit: FunctionUnit) -> CognitiveResult:
        """
        Score a function unit.

        Args:
            unit: Function unit to score

        Returns:
            CognitiveResult with the score, the deepest nesting level reached
            and the individual increments in walk order
        """
        return self.score_body(unit.body)

    def score_body(self, body: SyntaxNode) -> CognitiveResult:
        walk = _CognitiveWalk()
        for statement in body.children:
            walk.visit(statement, 0)
        return CognitiveResult(
            score=sum(increment.amount for increment in walk.increments),
            max_nesting=walk.max_nesting,
            increments=tuple(walk.increments),
        )
