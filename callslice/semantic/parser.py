"""Tree-sitter parsing and declaration discovery for Python sources."""

from __future__ import annotations

from typing import Dict, List, Optional

import tree_sitter_python
from tree_sitter import Language, Node, Parser, Tree

from ..models import FunctionDeclaration, SymbolId

PYTHON_LANGUAGE = Language(tree_sitter_python.language())

# Statements whose blocks can hold definitions that still belong to the
# enclosing module or class scope.
_COMPOUND_TYPES = {
    "if_statement",
    "elif_clause",
    "else_clause",
    "try_statement",
    "except_clause",
    "except_group_clause",
    "finally_clause",
    "with_statement",
    "for_statement",
    "while_statement",
    "block",
}


class SourceParser:
    """Thin wrapper around a tree-sitter parser for Python."""

    def __init__(self) -> None:
        self._parser = Parser(PYTHON_LANGUAGE)

    def parse(self, source: bytes) -> Tree:
        return self._parser.parse(source)


def node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def unwrap_definition(node: Node) -> Node:
    """Return the class/function node behind an optional decorator wrapper."""
    if node.type == "decorated_definition":
        inner = node.child_by_field_name("definition")
        if inner is not None:
            return inner
    return node


def decorator_names(node: Node, source: bytes) -> List[str]:
    """Return decorator expressions of a decorated definition as text, without '@'."""
    if node.type != "decorated_definition":
        return []
    names: List[str] = []
    for child in node.named_children:
        if child.type == "decorator":
            text = node_text(child, source).lstrip("@").strip()
            names.append(text.split("(", 1)[0].strip())
    return names


def collect_declarations(tree: Tree, source: bytes, module: str) -> List[FunctionDeclaration]:
    """Collect module-level functions and methods in source order."""
    comment_rows = _comment_rows(tree)
    lines = source.split(b"\n")
    declarations: List[FunctionDeclaration] = []
    _collect(tree.root_node, source, module, [], declarations, comment_rows, lines)
    return declarations


def _collect(
    node: Node,
    source: bytes,
    module: str,
    class_path: List[str],
    out: List[FunctionDeclaration],
    comment_rows: Dict[int, Node],
    lines: List[bytes],
) -> None:
    for child in node.named_children:
        target = unwrap_definition(child)
        if target.type == "function_definition":
            name_node = target.child_by_field_name("name")
            if name_node is None:
                continue
            name = node_text(name_node, source)
            qualname = ".".join([*class_path, name])
            out.append(
                FunctionDeclaration(
                    symbol=SymbolId(module, qualname),
                    name=name,
                    definition=child,
                    function=target,
                    owner_class=".".join(class_path) or None,
                    doc_comments=_doc_comments(child, comment_rows, lines),
                    has_body=_has_body(target, source),
                )
            )
        elif target.type == "class_definition":
            name_node = target.child_by_field_name("name")
            body = target.child_by_field_name("body")
            if name_node is None or body is None:
                continue
            class_name = node_text(name_node, source)
            _collect(body, source, module, [*class_path, class_name], out, comment_rows, lines)
        elif child.type in _COMPOUND_TYPES:
            _collect(child, source, module, class_path, out, comment_rows, lines)


def _comment_rows(tree: Tree) -> Dict[int, Node]:
    rows: Dict[int, Node] = {}
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type == "comment":
            rows[node.start_point[0]] = node
            continue
        stack.extend(node.children)
    return rows


def _doc_comments(definition: Node, comment_rows: Dict[int, Node], lines: List[bytes]) -> List[Node]:
    """Return the comment-only lines directly above a definition, top to bottom."""
    comments: List[Node] = []
    row = definition.start_point[0] - 1
    while row >= 0:
        comment = comment_rows.get(row)
        if comment is None or not lines[row].lstrip().startswith(b"#"):
            break
        comments.append(comment)
        row -= 1
    comments.reverse()
    return comments


def _has_body(function: Node, source: bytes) -> bool:
    """Return False for stubs whose body is only an optional docstring and `...`."""
    body = function.child_by_field_name("body")
    if body is None:
        return False
    statements = [child for child in body.named_children if child.type != "comment"]
    if statements and _is_docstring(statements[0]):
        statements = statements[1:]
    if len(statements) != 1:
        return True
    expression = _single_expression(statements[0])
    return expression is None or expression.type != "ellipsis"


def _is_docstring(statement: Node) -> bool:
    expression = _single_expression(statement)
    return expression is not None and expression.type in {"string", "concatenated_string"}


def _single_expression(statement: Node) -> Optional[Node]:
    if statement.type != "expression_statement" or statement.named_child_count != 1:
        return None
    return statement.named_children[0]


__all__ = [
    "PYTHON_LANGUAGE",
    "SourceParser",
    "collect_declarations",
    "decorator_names",
    "node_text",
    "unwrap_definition",
]
