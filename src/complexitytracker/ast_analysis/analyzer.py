"""
AST Analyzer Module
Parses Python source and extracts one FunctionUnit per function definition.
"""

import ast
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..exceptions import ParseError
from ..visitors import SyntaxTreeBuilder
from ..models import FunctionUnit

logger = logging.getLogger(__name__)

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]


def _statement_children(node: ast.AST) -> List[ast.AST]:
    """Direct statement-level children of ``node``: statements, except handlers and match cases."""
    return [child for child in ast.iter_child_nodes(node)
            if isinstance(child, (ast.stmt, ast.excepthandler, ast.match_case))]


@dataclass
class ParsedModule:
    """Function units of one module plus the units that failed to lower."""
    file_path: Optional[str]
    units: List[FunctionUnit] = field(default_factory=list)
    failures: List[ParseError] = field(default_factory=list)


class ASTAnalyzer:
    """
    Analyzes Python code using AST to extract function units.
    """

    def __init__(self):
        self.tree_builder = SyntaxTreeBuilder()

    def parse_file(self, file_path: Union[str, Path]) -> ParsedModule:
        """
        Parse a Python file and extract function units.

        Args:
            file_path: Path to the Python file

        Returns:
            ParsedModule with the units found

        Raises:
            ParseError: If the file cannot be read or is not valid Python
        """
        path = str(file_path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                source_code = f.read()
        except (FileNotFoundError, PermissionError, UnicodeDecodeError, IsADirectoryError) as e:
            raise ParseError(f"cannot read file: {e}", file_path=path) from e

        return self.parse_code(source_code, path)

    def parse_code(self, source_code: str, file_path: Optional[str] = None) -> ParsedModule:
        """
        Parse Python source code and extract function units.

        Args:
            source_code: Python source code
            file_path: Optional file path for context

        Returns:
            ParsedModule with units in source order; units whose body could
            not be lowered are reported in ``failures``

        Raises:
            ParseError: If the module is not valid Python
        """
        try:
            tree = ast.parse(source_code, filename=file_path or "<string>")
        except SyntaxError as e:
            raise ParseError(e.msg or "invalid syntax", file_path=file_path, line=e.lineno) from e
        except (ValueError, RecursionError, MemoryError) as e:
            # null bytes, or nesting too deep for the parser
            raise ParseError(str(e) or type(e).__name__, file_path=file_path) from e

        parsed = ParsedModule(file_path=file_path)
        for func_node, qualified_name, is_method in self._iter_functions(tree):
            try:
                parsed.units.append(self.create_unit(func_node, qualified_name, file_path, is_method))
            except ParseError as e:
                logger.warning(f"Skipping {qualified_name}: {e.message}")
                parsed.failures.append(e)

        logger.debug(f"Parsed {len(parsed.units)} function units from {file_path or '<string>'}")
        return parsed

    def create_unit(self, func_node: FunctionNode, qualified_name: Optional[str] = None,
                    file_path: Optional[str] = None, is_method: bool = False) -> FunctionUnit:
        """
        Create a FunctionUnit from a function definition node.

        Raises:
            ParseError: If the body cannot be lowered (e.g. pathological nesting)
        """
        try:
            body = self.tree_builder.build(func_node, is_method=is_method)
        except RecursionError as e:
            raise ParseError(
                "function body nested too deeply to analyze",
                file_path=file_path,
                line=func_node.lineno,
                unit_name=qualified_name or func_node.name,
            ) from e

        start_line = getattr(func_node, "lineno", 1) or 1
        end_line = getattr(func_node, "end_lineno", None) or start_line
        return FunctionUnit(
            qualified_name=qualified_name or func_node.name,
            name=func_node.name,
            start_line=start_line,
            end_line=end_line,
            parameters=self._parameter_names(func_node.args),
            body=body,
            file_path=file_path,
            is_method=is_method,
            node=func_node,
        )

    @staticmethod
    def _iter_functions(tree: ast.AST) -> List[Tuple[FunctionNode, str, bool]]:
        """
        Collect function definitions with dotted qualified names, in source order.

        Definitions are statements, so only statement-level nodes are entered;
        expressions can nest far deeper than any block structure.
        """
        found = []
        stack = [(child, "", False) for child in reversed(_statement_children(tree))]
        while stack:
            node, prefix, in_class = stack.pop()
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                name = f"{prefix}{node.name}"
                found.append((node, name, in_class))
                prefix, in_class = f"{name}.", False
            elif isinstance(node, ast.ClassDef):
                prefix, in_class = f"{prefix}{node.name}.", True
            # defs inside if/try/with/match blocks keep the enclosing prefix
            stack.extend((child, prefix, in_class) for child in reversed(_statement_children(node)))
        return found

    @staticmethod
    def _parameter_names(args: ast.arguments) -> Tuple[str, ...]:
        names = [arg.arg for arg in args.posonlyargs + args.args]
        if args.vararg:
            names.append(args.vararg.arg)
        names.extend(arg.arg for arg in args.kwonlyargs)
        if args.kwarg:
            names.append(args.kwarg.arg)
        return tuple(names)
