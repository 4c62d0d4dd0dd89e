"""Static resolution of call expressions to function symbols."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from tree_sitter import Node

from ..logging import get_logger
from ..models import CallSite, CompilationUnit, FunctionDeclaration, SymbolId
from .loader import Project
from .parser import decorator_names, node_text, unwrap_definition
from .scopes import (
    CLASS,
    COMPREHENSION_TYPES,
    FUNCTION,
    IMPORT,
    MODULE,
    RECEIVER,
    SUPER,
    Binding,
    Scope,
    class_scope,
    comprehension_scope,
    function_scope,
    lambda_scope,
    module_scope,
)

_CLASS_CONTAINER_TYPES = {
    "if_statement",
    "elif_clause",
    "else_clause",
    "try_statement",
    "except_clause",
    "except_group_clause",
    "finally_clause",
    "with_statement",
    "block",
}

ScopeChain = Tuple[Scope, ...]


@dataclass
class ClassInfo:
    """A class defined at module level or nested in another class."""

    module: str
    qualname: str
    scope: Scope
    bases: List[Node] = field(default_factory=list)


@dataclass
class _ModuleInfo:
    unit: CompilationUnit
    scope: Scope
    classes: Dict[str, ClassInfo]


class SemanticModel:
    """Resolves call expressions of a loaded project to `SymbolId`s.

    Module and class information is computed lazily, once per module.
    """

    def __init__(self, project: Project) -> None:
        self._project = project
        self._modules: Dict[str, _ModuleInfo] = {}
        self.logger = get_logger("resolver")

    def call_sites(self, declaration: FunctionDeclaration, unit: CompilationUnit) -> List[CallSite]:
        """Return the calls of a declaration's body in source pre-order."""
        body = declaration.body
        if body is None:
            return []

        is_static = "staticmethod" in decorator_names(declaration.definition, unit.source)
        root = function_scope(
            unit,
            declaration.function,
            owner_class=declaration.owner_class,
            has_receiver=declaration.owner_class is not None and not is_static,
        )

        sites: List[CallSite] = []
        stack: List[Tuple[Node, ScopeChain]] = [(body, (root,))]
        while stack:
            node, chain = stack.pop()
            if node.type == "call":
                target = self.resolve_call(node, unit, chain, declaration.owner_class)
                sites.append(CallSite(node=node, target=target))
            stack.extend(reversed(self._children(node, unit, chain)))

        self.logger.debug(
            "%s: %d calls, %d resolved",
            declaration.symbol,
            len(sites),
            sum(1 for site in sites if site.target is not None),
        )
        return sites

    def resolve_call(
        self,
        call: Node,
        unit: CompilationUnit,
        chain: ScopeChain = (),
        owner_class: Optional[str] = None,
    ) -> Optional[SymbolId]:
        """Return the function a call expression targets, or None when it cannot be
        resolved statically to a function declared in the project."""
        function = call.child_by_field_name("function")
        if function is None:
            return None
        function = _strip_parens(function)

        binding: Optional[Binding] = None
        if function.type == "identifier":
            binding = self._follow(self._lookup(node_text(function, unit.source), unit, chain))
        elif function.type == "attribute":
            receiver = function.child_by_field_name("object")
            attribute = function.child_by_field_name("attribute")
            if receiver is None or attribute is None:
                return None
            namespace = self._namespace(receiver, unit, chain, owner_class)
            if namespace is not None:
                binding = self._member(namespace, node_text(attribute, unit.source))

        if binding is None or binding.kind != FUNCTION:
            return None
        return SymbolId(binding.module, binding.name)

    def class_info(self, module: str, qualname: str) -> Optional[ClassInfo]:
        info = self._module(module)
        return info.classes.get(qualname) if info is not None else None

    # Scopes

    def _children(self, node: Node, unit: CompilationUnit, chain: ScopeChain) -> List[Tuple[Node, ScopeChain]]:
        """Pair each child of `node` with the scope chain it is evaluated in."""
        if node.type in COMPREHENSION_TYPES:
            return _comprehension_children(node, chain, (*chain, comprehension_scope(unit, node)))
        if node.type == "function_definition":
            inner = (*chain, function_scope(unit, node))
        elif node.type == "lambda":
            inner = (*chain, lambda_scope(unit, node))
        else:
            return [(child, chain) for child in node.children]
        body = node.child_by_field_name("body")
        return [
            (child, inner if body is not None and _same_node(child, body) else chain)
            for child in node.children
        ]

    def _lookup(self, name: str, unit: CompilationUnit, chain: ScopeChain) -> Optional[Binding]:
        for scope in reversed(chain):
            if name in scope.globals:
                break
            if name in scope.bindings:
                return scope.bindings[name]
        info = self._module(unit.module)
        return info.scope.bindings.get(name) if info is not None else None

    def _module(self, module: str) -> Optional[_ModuleInfo]:
        info = self._modules.get(module)
        if info is not None:
            return info
        unit = self._project.units.get(module)
        if unit is None:
            return None
        classes: Dict[str, ClassInfo] = {}
        _collect_classes(unit, unit.tree.root_node, "", classes)
        info = _ModuleInfo(unit=unit, scope=module_scope(unit), classes=classes)
        self._modules[module] = info
        return info

    # Namespaces

    def _namespace(
        self,
        node: Node,
        unit: CompilationUnit,
        chain: ScopeChain,
        owner_class: Optional[str],
    ) -> Optional[Binding]:
        """Resolve a receiver expression to a module, class or super() namespace."""
        node = _strip_parens(node)
        if node.type == "identifier":
            binding = self._follow(self._lookup(node_text(node, unit.source), unit, chain))
            if binding is None:
                return None
            if binding.kind == RECEIVER:
                return Binding(CLASS, binding.module, binding.name)
            return binding if binding.kind in {MODULE, CLASS} else None
        if node.type == "attribute":
            receiver = node.child_by_field_name("object")
            attribute = node.child_by_field_name("attribute")
            if receiver is None or attribute is None:
                return None
            namespace = self._namespace(receiver, unit, chain, owner_class)
            if namespace is None:
                return None
            member = self._member(namespace, node_text(attribute, unit.source))
            return member if member is not None and member.kind in {MODULE, CLASS} else None
        if node.type == "call" and owner_class is not None:
            function = node.child_by_field_name("function")
            if function is not None and function.type == "identifier":
                if node_text(function, unit.source) == "super":
                    return Binding(SUPER, unit.module, owner_class)
        return None

    def _member(
        self,
        namespace: Binding,
        name: str,
        seen: Optional[Set[Tuple[str, str, str]]] = None,
    ) -> Optional[Binding]:
        seen = set() if seen is None else seen
        if namespace.kind == MODULE:
            return self._module_member(namespace.module, name, seen)
        if namespace.kind in {CLASS, SUPER}:
            info = self.class_info(namespace.module, namespace.name)
            if info is None:
                return None
            return self._class_member(info, name, seen, skip_own=namespace.kind == SUPER)
        return None

    def _module_member(self, module: str, name: str, seen: Set[Tuple[str, str, str]]) -> Optional[Binding]:
        key = (MODULE, module, name)
        info = self._module(module)
        if info is not None and key not in seen:
            seen.add(key)
            binding = info.scope.bindings.get(name)
            if binding is not None:
                resolved = self._follow(binding, seen)
                if resolved is not None:
                    return resolved
                if binding.kind != IMPORT:
                    return None
        submodule = f"{module}.{name}"
        if self._project.has_module(submodule):
            return Binding(MODULE, submodule)
        return None

    def _class_member(
        self,
        info: ClassInfo,
        name: str,
        seen: Set[Tuple[str, str, str]],
        skip_own: bool = False,
    ) -> Optional[Binding]:
        key = (CLASS, info.module, info.qualname)
        if key in seen:
            return None
        seen.add(key)

        if not skip_own and name in info.scope.bindings:
            return self._follow(info.scope.bindings[name], seen)

        owner = self._project.units.get(info.module)
        if owner is None:
            return None
        for base in info.bases:
            base_namespace = self._namespace(base, owner, (), None)
            if base_namespace is None or base_namespace.kind != CLASS:
                continue
            base_info = self.class_info(base_namespace.module, base_namespace.name)
            if base_info is None:
                continue
            found = self._class_member(base_info, name, seen)
            if found is not None:
                return found
        return None

    def _follow(
        self,
        binding: Optional[Binding],
        seen: Optional[Set[Tuple[str, str, str]]] = None,
    ) -> Optional[Binding]:
        """Chase import bindings to what they finally name."""
        if binding is None or binding.kind != IMPORT:
            return binding
        return self._module_member(binding.module, binding.name, set() if seen is None else seen)


def _collect_classes(unit: CompilationUnit, node: Node, prefix: str, out: Dict[str, ClassInfo]) -> None:
    for child in node.named_children:
        target = unwrap_definition(child)
        if target.type == "class_definition":
            name_node = target.child_by_field_name("name")
            body = target.child_by_field_name("body")
            if name_node is None or body is None:
                continue
            name = node_text(name_node, unit.source)
            qualname = f"{prefix}.{name}" if prefix else name
            out[qualname] = ClassInfo(
                module=unit.module,
                qualname=qualname,
                scope=class_scope(unit, body, qualname),
                bases=_bases(target),
            )
            _collect_classes(unit, body, qualname, out)
        elif child.type in _CLASS_CONTAINER_TYPES:
            _collect_classes(unit, child, prefix, out)


def _comprehension_children(
    node: Node, outer: ScopeChain, inner: ScopeChain
) -> List[Tuple[Node, ScopeChain]]:
    # The iterable of the first `for` clause is evaluated in the enclosing scope.
    children: List[Tuple[Node, ScopeChain]] = []
    first_clause = True
    for child in node.children:
        if child.type == "for_in_clause" and first_clause:
            first_clause = False
            iterables = child.children_by_field_name("right")
            for part in child.children:
                in_outer = any(_same_node(part, iterable) for iterable in iterables)
                children.append((part, outer if in_outer else inner))
        else:
            children.append((child, inner))
    return children


def _bases(class_node: Node) -> List[Node]:
    superclasses = class_node.child_by_field_name("superclasses")
    if superclasses is None:
        return []
    return [
        child
        for child in superclasses.named_children
        if child.type in {"identifier", "attribute"}
    ]


def _strip_parens(node: Node) -> Node:
    while node.type == "parenthesized_expression" and node.named_child_count == 1:
        node = node.named_children[0]
    return node


def _same_node(left: Node, right: Node) -> bool:
    return (
        left.type == right.type
        and left.start_byte == right.start_byte
        and left.end_byte == right.end_byte
    )


__all__ = ["ClassInfo", "SemanticModel"]
