"""
Exact minimisation of small boolean conditions.

A condition is split into a skeleton of ``and``/``or``/``not`` over atoms
(maximal non-boolean sub-expressions, deduplicated structurally). Its truth
table is then matched against every expression buildable from the same atoms
with fewer ``and``/``or`` operators, smallest first.
"""

import ast
import copy
from typing import Dict, List, Optional, Tuple, Union

from .rewrite import negate

# ("atom", index, negated) | ("and" | "or", [children]) | ("not", child)
Skeleton = Tuple
# ("atom", index, negated) | ("and" | "or", left, right) | ("not", inner)
Candidate = Tuple


class BooleanMinimizer:
    """Finds an equivalent condition with fewer boolean operators."""

    MAX_ATOMS = 4
    MAX_OPERATORS = 3

    def __init__(self, expr: ast.expr):
        self.expr = expr
        self.atoms: List[ast.expr] = []
        self._atom_keys: Dict[str, int] = {}
        self.skeleton = self._decompose(expr)

    @property
    def operator_count(self) -> int:
        return self._count(self.skeleton)

    def mixes_polarity(self) -> bool:
        """Check for a negated term next to a positive one."""
        polarities = set()
        self._polarities(self.skeleton, False, polarities)
        return polarities == {True, False}

    def minimize(self) -> Optional[ast.expr]:
        """
        Return an equivalent expression with strictly fewer operators.

        Returns:
            The rewritten condition, or None when the condition is already
            minimal or too large to search
        """
        current = self.operator_count
        if current == 0 or len(self.atoms) > self.MAX_ATOMS:
            return None

        target = self._table(self.skeleton)
        found = self._search(target, min(current - 1, self.MAX_OPERATORS))
        if found is None:
            return None
        return ast.fix_missing_locations(ast.copy_location(self._render(found), self.expr))

    # Skeleton

    def _decompose(self, expr: ast.expr) -> Skeleton:
        if isinstance(expr, ast.BoolOp):
            op = "and" if isinstance(expr.op, ast.And) else "or"
            return (op, [self._decompose(value) for value in expr.values])
        if isinstance(expr, ast.UnaryOp) and isinstance(expr.op, ast.Not):
            return ("not", self._decompose(expr.operand))
        key = ast.dump(expr)
        if key not in self._atom_keys:
            self._atom_keys[key] = len(self.atoms)
            self.atoms.append(expr)
        return ("atom", self._atom_keys[key], False)

    def _count(self, node: Skeleton) -> int:
        if node[0] == "atom":
            return 0
        if node[0] == "not":
            return self._count(node[1])
        return len(node[1]) - 1 + sum(self._count(child) for child in node[1])

    def _polarities(self, node: Skeleton, negated: bool, seen: set) -> None:
        if node[0] == "atom":
            seen.add(negated)
        elif node[0] == "not":
            self._polarities(node[1], not negated, seen)
        else:
            for child in node[1]:
                self._polarities(child, negated, seen)

    # Truth tables: bit ``row`` holds the value under assignment ``row``

    @property
    def _mask(self) -> int:
        return (1 << (1 << len(self.atoms))) - 1

    def _atom_table(self, index: int) -> int:
        table = 0
        for row in range(1 << len(self.atoms)):
            if row >> index & 1:
                table |= 1 << row
        return table

    def _table(self, node: Skeleton) -> int:
        if node[0] == "atom":
            return self._atom_table(node[1])
        if node[0] == "not":
            return ~self._table(node[1]) & self._mask
        tables = [self._table(child) for child in node[1]]
        result = tables[0]
        for table in tables[1:]:
            result = result & table if node[0] == "and" else result | table
        return result

    def _search(self, target: int, limit: int) -> Optional[Candidate]:
        seen: Dict[int, Candidate] = {}
        levels: List[Dict[int, Candidate]] = [{}]
        for index in range(len(self.atoms)):
            table = self._atom_table(index)
            for negated, value in ((False, table), (True, ~table & self._mask)):
                if value not in seen:
                    seen[value] = levels[0][value] = ("atom", index, negated)
        if target in seen:
            return seen[target]

        for size in range(1, limit + 1):
            level: Dict[int, Candidate] = {}
            for left_size in range(size):
                right_size = size - 1 - left_size
                for left_table, left in levels[left_size].items():
                    for right_table, right in levels[right_size].items():
                        for op, table in (("and", left_table & right_table), ("or", left_table | right_table)):
                            if table not in seen:
                                seen[table] = level[table] = (op, left, right)
            for table, candidate in list(level.items()):
                inverted = ~table & self._mask
                if inverted not in seen:
                    seen[inverted] = level[inverted] = ("not", candidate)
            if target in seen:
                return seen[target]
            levels.append(level)
        return None

    # Rendering

    def _render(self, candidate: Candidate) -> ast.expr:
        if candidate[0] == "atom":
            atom = self.atoms[candidate[1]]
            return negate(atom) if candidate[2] else copy.deepcopy(atom)
        if candidate[0] == "not":
            return ast.UnaryOp(op=ast.Not(), operand=self._render(candidate[1]))
        op = candidate[0]
        values = []
        for part in candidate[1:]:
            rendered = self._render(part)
            if isinstance(rendered, ast.BoolOp) and self._op_name(rendered) == op:
                values.extend(rendered.values)
            else:
                values.append(rendered)
        return ast.BoolOp(op=ast.And() if op == "and" else ast.Or(), values=values)

    @staticmethod
    def _op_name(expr: ast.BoolOp) -> str:
        return "and" if isinstance(expr.op, ast.And) else "or"


def minimize_condition(expr: Union[ast.expr, None]) -> Optional[ast.expr]:
    """Minimise ``expr`` if it mixes negated and positive terms."""
    if not isinstance(expr, ast.BoolOp):
        return None
    minimizer = BooleanMinimizer(expr)
    if not minimizer.mixes_polarity():
        return None
    return minimizer.minimize()
