"""
Control-flow graph construction.

The graph is an arena: blocks live in a list and edges are index pairs.
It is built once per function unit, read by the cyclomatic scorer and
discarded.
"""

import ast
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List, NamedTuple, Optional, Set

from ...models import NodeKind, SyntaxNode

logger = logging.getLogger(__name__)

ENTRY = 0
EXIT = 1


class Edge(NamedTuple):
    """A possible transfer of control between two blocks."""
    source: int
    target: int
    kind: str


@dataclass
class BasicBlock:
    """A straight-line run of operations with a single entry."""
    index: int
    kind: str
    lineno: int = 0


@dataclass
class ControlFlowGraph:
    """Directed graph of basic blocks. Block 0 is the entry, block 1 the exit."""
    blocks: List[BasicBlock] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    def new_block(self, kind: str, lineno: int = 0) -> int:
        index = len(self.blocks)
        self.blocks.append(BasicBlock(index=index, kind=kind, lineno=lineno))
        return index

    def add_edge(self, source: int, target: int, kind: str = "next") -> None:
        self.edges.append(Edge(source, target, kind))

    def successors(self, index: int) -> List[int]:
        return [edge.target for edge in self.edges if edge.source == index]

    def has_predecessors(self, index: int) -> bool:
        return any(edge.target == index for edge in self.edges)

    def out_degree(self, index: int) -> int:
        return sum(1 for edge in self.edges if edge.source == index)

    @property
    def decision_points(self) -> int:
        """Every out-edge beyond the first one of a block is a decision."""
        degrees = Counter(edge.source for edge in self.edges)
        return sum(max(0, degree - 1) for degree in degrees.values())

    def reachable(self, start: int = ENTRY) -> Set[int]:
        """Return the indices of all blocks reachable from ``start``."""
        seen = {start}
        stack = [start]
        while stack:
            for target in self.successors(stack.pop()):
                if target not in seen:
                    seen.add(target)
                    stack.append(target)
        return seen


class _LoopFrame(NamedTuple):
    header: int
    after: int


class CFGBuilder:
    """
    Builds a ControlFlowGraph from a lowered function body.

    Conditions are lowered with short-circuit edges, so every ``and``/``or``
    operand beyond the first becomes its own branch block. Nested function
    and class definitions are separate units and contribute no blocks.
    A `while True` loop with no break, return or raise never reaches the exit
    block: the function cannot terminate normally, and the loop adds no
    decision.
    A builder instance is not reentrant; create one per graph.
    """

    def __init__(self):
        self.graph = ControlFlowGraph()
        self._loops: List[_LoopFrame] = []

    def build(self, body: SyntaxNode) -> ControlFlowGraph:
        """
        Build the graph for a function body.

        Args:
            body: Root BLOCK of a FunctionUnit

        Returns:
            The finished ControlFlowGraph
        """
        self.graph = ControlFlowGraph()
        self._loops = []
        self.graph.new_block("entry", body.lineno)
        self.graph.new_block("exit", body.end_lineno)

        end = self._statements(body.children, ENTRY)
        if end is not None:
            self.graph.add_edge(end, EXIT, "fallthrough")

        logger.debug(f"Built CFG with {len(self.graph.blocks)} blocks, "
                     f"{len(self.graph.edges)} edges, {self.graph.decision_points} decisions")
        return self.graph

    # Statements

    def _statements(self, statements: Iterable[SyntaxNode], current: Optional[int]) -> Optional[int]:
        """Thread control through a statement list; None means no path falls through."""
        for statement in statements:
            if current is None:
                # code after return/break still gets scored
                current = self.graph.new_block("unreachable", statement.lineno)
            current = self._statement(statement, current)
        return current

    def _statement(self, node: SyntaxNode, current: int) -> Optional[int]:
        if node.kind is NodeKind.CONDITIONAL:
            return self._if(node, current)
        if node.kind is NodeKind.LOOP:
            return self._loop(node, current)
        if node.kind is NodeKind.SWITCH:
            return self._match(node, current)
        if node.kind is NodeKind.JUMP:
            return self._jump(node, current)
        if node.kind is NodeKind.FUNCTION or node.label == "class":
            return current
        if node.label == "try":
            return self._try(node, current)

        for child in node.children:
            if current is None:
                current = self.graph.new_block("unreachable", child.lineno)
            if child.is_statement_block:
                current = self._statements(child.children, current)
            else:
                current = self._expression(child, current)
        return current

    def _if(self, node: SyntaxNode, current: int) -> Optional[int]:
        then_block = self.graph.new_block("then", node.lineno)
        after = self.graph.new_block("after-if", node.end_lineno)
        orelse = node.child("orelse")
        else_block = self.graph.new_block("else", orelse.lineno) if orelse else after

        self._branch(node.child("test"), current, then_block, else_block)
        self._join(after, self._statements(node.child("body").children, then_block))
        if orelse is not None:
            if orelse.kind is NodeKind.CONDITIONAL:
                self._join(after, self._if(orelse, else_block))
            else:
                self._join(after, self._statements(orelse.children, else_block))
        return self._live(after)

    def _loop(self, node: SyntaxNode, current: int) -> Optional[int]:
        if node.label == "for":
            current = self._expression(node.child("iter"), current)

        header = self.graph.new_block("loop-header", node.lineno)
        body_block = self.graph.new_block("loop-body", node.lineno)
        after = self.graph.new_block("after-loop", node.end_lineno)
        orelse = node.child("orelse")
        exit_target = self.graph.new_block("loop-else", orelse.lineno) if orelse else after
        self.graph.add_edge(current, header)

        body = node.child("body")
        if node.label == "for":
            self.graph.add_edge(header, body_block, "iterate")
            self.graph.add_edge(header, exit_target, "exhausted")
        elif self._is_constant_true(node.child("test")):
            self.graph.add_edge(header, body_block, "always")
            if self._has_embedded_exit(body):
                self.graph.add_edge(header, exit_target, "exit")
        else:
            self._branch(node.child("test"), header, body_block, exit_target)

        self._loops.append(_LoopFrame(header, after))
        try:
            end = self._statements(body.children, body_block)
        finally:
            self._loops.pop()
        if end is not None:
            self.graph.add_edge(end, header, "loop-back")

        if orelse is not None:
            self._join(after, self._statements(orelse.children, exit_target))
        return self._live(after)

    def _match(self, node: SyntaxNode, current: int) -> Optional[int]:
        test_block: Optional[int] = self._expression(node.child("subject"), current)
        after = self.graph.new_block("after-match", node.end_lineno)

        for case in node.children_with("case"):
            if test_block is None:
                test_block = self.graph.new_block("unreachable", case.lineno)
            case_block = self.graph.new_block("case", case.lineno)
            if case.label == "default":
                self.graph.add_edge(test_block, case_block, "default")
                test_block = None
            else:
                next_test = self.graph.new_block("case-test", case.end_lineno)
                guard = case.child("guard")
                if guard is not None:
                    guard_block = self.graph.new_block("case-guard", guard.lineno)
                    self.graph.add_edge(test_block, guard_block, "match")
                    self.graph.add_edge(test_block, next_test, "no-match")
                    self._branch(guard, guard_block, case_block, next_test)
                else:
                    self.graph.add_edge(test_block, case_block, "match")
                    self.graph.add_edge(test_block, next_test, "no-match")
                test_block = next_test
            self._join(after, self._statements(case.child("body").children, case_block))

        if test_block is not None:
            self.graph.add_edge(test_block, after, "no-match")
        return self._live(after)

    def _try(self, node: SyntaxNode, current: int) -> Optional[int]:
        try_block = self.graph.new_block("try", node.lineno)
        body_block = self.graph.new_block("try-body", node.lineno)
        after = self.graph.new_block("after-try", node.end_lineno)
        final = node.child("finally")
        final_block = self.graph.new_block("finally", final.lineno) if final else None
        join_target = final_block if final_block is not None else after

        self.graph.add_edge(current, try_block)
        self.graph.add_edge(try_block, body_block)
        end = self._statements(node.child("body").children, body_block)
        orelse = node.child("orelse")
        if orelse is not None and end is not None:
            end = self._statements(orelse.children, end)
        self._join(join_target, end)

        handlers = node.children_with("handler")
        if handlers:
            dispatch = self.graph.new_block("except-dispatch", handlers[0].lineno)
            self.graph.add_edge(try_block, dispatch, "exception")
            for handler in handlers:
                handler_block = self.graph.new_block("except", handler.lineno)
                self.graph.add_edge(dispatch, handler_block, "handler")
                self._join(join_target, self._statements(handler.child("body").children, handler_block))

        if final_block is not None:
            self._join(after, self._statements(final.children, final_block))
        return self._live(after)

    def _jump(self, node: SyntaxNode, current: int) -> None:
        for child in node.children:
            current = self._expression(child, current)
        if node.label in ("break", "continue") and self._loops:
            frame = self._loops[-1]
            target = frame.after if node.label == "break" else frame.header
            self.graph.add_edge(current, target, node.label)
        else:
            self.graph.add_edge(current, EXIT, node.label)
        return None

    # Expressions

    def _branch(self, node: SyntaxNode, current: int, on_true: int, on_false: int) -> None:
        """Lower a condition so that control reaches ``on_true`` or ``on_false``."""
        if node.kind is NodeKind.NEGATION:
            self._branch(node.children[0], current, on_false, on_true)
            return
        if node.kind in (NodeKind.LOGICAL_AND, NodeKind.LOGICAL_OR):
            operands = node.children
            for operand in operands[:-1]:
                next_block = self.graph.new_block("operand", operand.end_lineno)
                if node.kind is NodeKind.LOGICAL_AND:
                    self._branch(operand, current, next_block, on_false)
                else:
                    self._branch(operand, current, on_true, next_block)
                current = next_block
            self._branch(operands[-1], current, on_true, on_false)
            return

        current = self._expression(node, current)
        self.graph.add_edge(current, on_true, "true")
        self.graph.add_edge(current, on_false, "false")

    def _expression(self, node: SyntaxNode, current: int) -> int:
        """Evaluate an expression for its value; returns the block control continues in."""
        if node.kind is NodeKind.LEAF:
            return current
        if node.kind is NodeKind.CONDITIONAL and node.label == "ternary":
            value_block = self.graph.new_block("ternary-value", node.lineno)
            alternative_block = self.graph.new_block("ternary-alternative", node.lineno)
            after = self.graph.new_block("after-ternary", node.end_lineno)
            self._branch(node.child("test"), current, value_block, alternative_block)
            self.graph.add_edge(self._expression(node.child("value"), value_block), after)
            self.graph.add_edge(self._expression(node.child("alternative"), alternative_block), after)
            return after
        if node.kind in (NodeKind.LOGICAL_AND, NodeKind.LOGICAL_OR):
            after = self.graph.new_block("after-bool", node.end_lineno)
            for operand in node.children[:-1]:
                current = self._expression(operand, current)
                next_block = self.graph.new_block("operand", operand.end_lineno)
                self.graph.add_edge(current, next_block, "evaluate")
                self.graph.add_edge(current, after, "short-circuit")
                current = next_block
            self.graph.add_edge(self._expression(node.children[-1], current), after)
            return after
        if node.kind is NodeKind.BLOCK and node.label == "comprehension":
            return self._comprehension(node, current)

        for child in node.children:
            current = self._expression(child, current)
        return current

    def _comprehension(self, node: SyntaxNode, current: int) -> int:
        done = self.graph.new_block("after-comprehension", node.end_lineno)
        exhausted_target = done
        body = current
        for generator in node.children_with("generator"):
            body = self._expression(generator.child("iter"), body)
            header = self.graph.new_block("generator", generator.lineno)
            self.graph.add_edge(body, header)
            body = self.graph.new_block("generator-body", generator.lineno)
            self.graph.add_edge(header, body, "iterate")
            self.graph.add_edge(header, exhausted_target, "exhausted")
            for condition in generator.children_with("filter"):
                passed = self.graph.new_block("filter-pass", condition.lineno)
                self._branch(condition.child("test"), body, passed, header)
                body = passed
            exhausted_target = header

        for element in node.children_with("element"):
            body = self._expression(element, body)
        self.graph.add_edge(body, exhausted_target, "loop-back")
        return done

    # Helpers

    def _join(self, target: int, end: Optional[int]) -> None:
        if end is not None:
            self.graph.add_edge(end, target)

    def _live(self, block: int) -> Optional[int]:
        return block if self.graph.has_predecessors(block) else None

    @staticmethod
    def _is_constant_true(test: SyntaxNode) -> bool:
        source = test.node
        return isinstance(source, ast.Constant) and bool(source.value)

    @staticmethod
    def _has_embedded_exit(body: SyntaxNode) -> bool:
        """Check for a break of this loop, or a return/raise, inside a loop body."""
        stack = [(child, False) for child in body.children]
        while stack:
            node, in_inner_loop = stack.pop()
            if node.kind is NodeKind.FUNCTION:
                continue
            if node.kind is NodeKind.JUMP:
                if node.label in ("return", "raise"):
                    return True
                if node.label == "break" and not in_inner_loop:
                    return True
            for child in node.children:
                # a break in an inner loop body exits that loop only
                inner = in_inner_loop or (node.kind is NodeKind.LOOP and child.role == "body")
                stack.append((child, inner))
        return False
