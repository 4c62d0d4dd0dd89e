"""Name bindings of module, class and function scopes.

Bindings are collected flow-insensitively: every statement of a scope is
visited in source order and the last binding of a name wins. Nested function,
class, lambda and comprehension scopes are not entered; their names are bound
in the scope that defines them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from tree_sitter import Node

from ..models import CompilationUnit
from .parser import node_text, unwrap_definition

FUNCTION = "function"
CLASS = "class"
MODULE = "module"
IMPORT = "import"
RECEIVER = "receiver"
SUPER = "super"
VALUE = "value"
LOCAL_FUNCTION = "local_function"

MODULE_SCOPE = "module"
CLASS_SCOPE = "class"
FUNCTION_SCOPE = "function"

COMPREHENSION_TYPES = {
    "list_comprehension",
    "set_comprehension",
    "dictionary_comprehension",
    "generator_expression",
}

_NESTED_SCOPE_TYPES = {"function_definition", "class_definition", "lambda", *COMPREHENSION_TYPES}

_TARGET_CONTAINERS = {
    "pattern_list",
    "tuple_pattern",
    "list_pattern",
    "tuple",
    "list",
    "expression_list",
    "list_splat_pattern",
    "parenthesized_expression",
    "as_pattern_target",
}


@dataclass(frozen=True)
class Binding:
    """What a name refers to.

    `module` is the defining module for functions, classes and receivers and the
    target module for module and import bindings. `name` is the qualified name
    for functions, classes and receivers and the imported member for imports.
    """

    kind: str
    module: str = ""
    name: str = ""


@dataclass
class Scope:
    kind: str
    bindings: Dict[str, Binding] = field(default_factory=dict)
    globals: Set[str] = field(default_factory=set)
    nonlocals: Set[str] = field(default_factory=set)


def module_scope(unit: CompilationUnit) -> Scope:
    scope = Scope(kind=MODULE_SCOPE)
    _BindingCollector(unit, scope).visit(unit.tree.root_node.children)
    return scope


def class_scope(unit: CompilationUnit, body: Node, qualname: str) -> Scope:
    scope = Scope(kind=CLASS_SCOPE)
    _BindingCollector(unit, scope, prefix=qualname).visit(body.children)
    return scope


def function_scope(
    unit: CompilationUnit,
    function: Node,
    *,
    owner_class: Optional[str] = None,
    has_receiver: bool = False,
) -> Scope:
    """Build the scope of a `def`; the first parameter binds to the owner class
    when `has_receiver` is set."""
    scope = Scope(kind=FUNCTION_SCOPE)
    parameters = function.child_by_field_name("parameters")
    names = parameter_names(parameters, unit.source) if parameters is not None else []
    for index, name in enumerate(names):
        if index == 0 and has_receiver and owner_class:
            scope.bindings[name] = Binding(RECEIVER, unit.module, owner_class)
        else:
            scope.bindings[name] = Binding(VALUE)

    body = function.child_by_field_name("body")
    if body is not None:
        _BindingCollector(unit, scope).visit(body.children)
    for name in scope.globals | scope.nonlocals:
        scope.bindings.pop(name, None)
    return scope


def lambda_scope(unit: CompilationUnit, node: Node) -> Scope:
    scope = Scope(kind=FUNCTION_SCOPE)
    parameters = node.child_by_field_name("parameters")
    if parameters is not None:
        for name in parameter_names(parameters, unit.source):
            scope.bindings[name] = Binding(VALUE)
    return scope


def comprehension_scope(unit: CompilationUnit, node: Node) -> Scope:
    """Bind the loop targets of every `for` clause of a comprehension."""
    scope = Scope(kind=FUNCTION_SCOPE)
    for clause in node.named_children:
        if clause.type != "for_in_clause":
            continue
        left = clause.child_by_field_name("left")
        if left is not None:
            for name in target_names(left, unit.source):
                scope.bindings[name] = Binding(VALUE)
    return scope


def parameter_names(parameters: Node, source: bytes) -> List[str]:
    names: List[str] = []
    for child in parameters.named_children:
        name = _parameter_name(child, source)
        if name:
            names.append(name)
    return names


def _parameter_name(node: Node, source: bytes) -> Optional[str]:
    if node.type == "identifier":
        return node_text(node, source)
    named = node.child_by_field_name("name")
    if named is not None:
        return _parameter_name(named, source)
    if node.type in {"typed_parameter", "list_splat_pattern", "dictionary_splat_pattern"}:
        for child in node.named_children:
            name = _parameter_name(child, source)
            if name:
                return name
    return None


def target_names(node: Node, source: bytes) -> List[str]:
    """Return identifiers bound by an assignment-like target."""
    if node.type == "identifier":
        return [node_text(node, source)]
    if node.type in _TARGET_CONTAINERS:
        names: List[str] = []
        for child in node.named_children:
            names.extend(target_names(child, source))
        return names
    return []


def import_base(node: Node, unit: CompilationUnit) -> Optional[str]:
    """Return the absolute module path named by an import's module part."""
    if node.type == "dotted_name":
        return _dotted(node, unit.source)
    if node.type != "relative_import":
        return None

    level = 0
    name = ""
    for child in node.children:
        if child.type == "import_prefix":
            level = node_text(child, unit.source).count(".")
        elif child.type == "dotted_name":
            name = _dotted(child, unit.source)

    base = unit.package_path.split(".") if unit.package_path else []
    if level - 1 > len(base):
        return None
    base = base[: len(base) - (level - 1)]
    if name:
        base.extend(name.split("."))
    return ".".join(base) or None


def _dotted(node: Node, source: bytes) -> str:
    return "".join(node_text(node, source).split())


class _BindingCollector:
    """Walks the statements of one scope in source order."""

    def __init__(self, unit: CompilationUnit, scope: Scope, prefix: str = "") -> None:
        self._unit = unit
        self._source = unit.source
        self._scope = scope
        self._prefix = prefix

    def visit(self, nodes: Iterable[Node]) -> None:
        stack = list(reversed(list(nodes)))
        while stack:
            node = stack.pop()
            children = self._bind(node)
            stack.extend(reversed(children))

    def _bind(self, node: Node) -> List[Node]:
        """Record bindings made by `node`; return the children still to visit."""
        kind = node.type
        if kind == "decorated_definition":
            definition = unwrap_definition(node)
            decorators = [child for child in node.named_children if child.type == "decorator"]
            return [*decorators, definition]
        if kind == "function_definition":
            self._bind_definition(node, FUNCTION)
            return _defaults_of(node)
        if kind == "class_definition":
            self._bind_definition(node, CLASS)
            superclasses = node.child_by_field_name("superclasses")
            return [superclasses] if superclasses is not None else []
        if kind in _NESTED_SCOPE_TYPES:
            return []
        if kind == "import_statement":
            self._bind_import(node)
            return []
        if kind == "import_from_statement":
            self._bind_import_from(node)
            return []
        if kind == "global_statement":
            self._scope.globals.update(self._identifiers(node))
            return []
        if kind == "nonlocal_statement":
            self._scope.nonlocals.update(self._identifiers(node))
            return []
        if kind in {"assignment", "augmented_assignment", "for_statement"}:
            left = node.child_by_field_name("left")
            if left is not None:
                self._bind_values(target_names(left, self._source))
        elif kind == "as_pattern":
            alias = node.child_by_field_name("alias")
            if alias is not None:
                self._bind_values(target_names(alias, self._source))
        elif kind == "named_expression":
            name = node.child_by_field_name("name")
            if name is not None:
                self._bind_values([node_text(name, self._source)])
        return list(node.children)

    def _bind_definition(self, node: Node, kind: str) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        name = node_text(name_node, self._source)
        if self._scope.kind == FUNCTION_SCOPE:
            # Functions and classes defined inside a function are not indexed.
            binding = Binding(LOCAL_FUNCTION if kind == FUNCTION else VALUE)
        else:
            qualname = f"{self._prefix}.{name}" if self._prefix else name
            binding = Binding(kind, self._unit.module, qualname)
        self._scope.bindings[name] = binding

    def _bind_import(self, node: Node) -> None:
        for child in node.children_by_field_name("name"):
            if child.type == "aliased_import":
                target = child.child_by_field_name("name")
                alias = child.child_by_field_name("alias")
                if target is None or alias is None:
                    continue
                module = _dotted(target, self._source)
                self._scope.bindings[node_text(alias, self._source)] = Binding(MODULE, module)
            elif child.type == "dotted_name":
                module = _dotted(child, self._source)
                top = module.split(".", 1)[0]
                self._scope.bindings[top] = Binding(MODULE, top)

    def _bind_import_from(self, node: Node) -> None:
        module_node = node.child_by_field_name("module_name")
        base = import_base(module_node, self._unit) if module_node is not None else None
        for child in node.children_by_field_name("name"):
            if child.type == "aliased_import":
                target = child.child_by_field_name("name")
                alias = child.child_by_field_name("alias")
                if target is None or alias is None:
                    continue
                member = _dotted(target, self._source)
                local = node_text(alias, self._source)
            else:
                member = _dotted(child, self._source)
                local = member
            if base is None:
                self._scope.bindings[local] = Binding(VALUE)
            else:
                self._scope.bindings[local] = Binding(IMPORT, base, member)

    def _bind_values(self, names: Iterable[str]) -> None:
        for name in names:
            self._scope.bindings[name] = Binding(VALUE)

    def _identifiers(self, node: Node) -> List[str]:
        return [node_text(child, self._source) for child in node.named_children if child.type == "identifier"]


def _defaults_of(function: Node) -> List[Node]:
    """Parameter defaults and annotations are evaluated in the enclosing scope."""
    parameters = function.child_by_field_name("parameters")
    return [parameters] if parameters is not None else []


__all__ = [
    "Binding",
    "CLASS",
    "COMPREHENSION_TYPES",
    "FUNCTION",
    "IMPORT",
    "LOCAL_FUNCTION",
    "MODULE",
    "RECEIVER",
    "SUPER",
    "Scope",
    "VALUE",
    "class_scope",
    "comprehension_scope",
    "function_scope",
    "import_base",
    "lambda_scope",
    "module_scope",
    "parameter_names",
    "target_names",
]
