"""Recursive, memoized rendering of TypeScript types across modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from tree_sitter import Node

from ..errors import ImportResolutionError, TypeResolutionError
from ..logging import get_logger
from ..models import Declaration, DeclarationKind, HeritageRef, Member, SourceModule
from ..stores.module_cache import ModuleCache
from ..stores.type_table import TypeTable
from .tree_sitter import line_of, named, quote_string, read_members, reference_from_type, string_value

logger = get_logger("resolver")

OPAQUE_TYPE = "unknown"
DEFAULT_TYPE = "any"

_PREDEFINED = {
    "string",
    "number",
    "boolean",
    "object",
    "any",
    "unknown",
    "void",
    "never",
    "symbol",
    "bigint",
}

ReferenceCallback = Callable[[str], None]


@dataclass(frozen=True)
class _Context:
    module: SourceModule
    on_reference: Optional[ReferenceCallback]
    scope: FrozenSet[str]


class TypeResolver:
    """Renders type nodes to text and records every named type it reaches.

    Named references are rendered once per run into the shared
    :class:`TypeTable`. Only relative imports are followed; anything that
    cannot be traced to a local declaration is left as written.
    """

    def __init__(self, modules: ModuleCache, table: TypeTable | None = None) -> None:
        self.modules = modules
        self.table = table if table is not None else TypeTable()

    def resolve_type(
        self,
        node: Optional[Node],
        module: SourceModule,
        on_reference: Optional[ReferenceCallback] = None,
        scope: Iterable[str] = (),
    ) -> str:
        """Return the text of ``node``; a missing annotation renders as ``any``."""
        if node is None:
            return DEFAULT_TYPE
        return self._render(node, _Context(module, on_reference, frozenset(scope)))

    def resolve_reference(
        self,
        reference: HeritageRef,
        module: SourceModule,
        on_reference: Optional[ReferenceCallback] = None,
        scope: Iterable[str] = (),
    ) -> str:
        """Render a heritage-style reference such as ``ApiHandler<Item>``."""
        return self._reference(reference, _Context(module, on_reference, frozenset(scope)))

    # ------------------------------------------------------------------
    # Type nodes

    def _render(self, node: Node, ctx: _Context) -> str:
        try:
            renderer = _TYPE_RENDERERS.get(node.type)
            if renderer is None:
                raise TypeResolutionError(node.type, ctx.module.path, line_of(node))
            return renderer(self, node, ctx)
        except TypeResolutionError as exc:
            logger.warning("%s", exc)
            return OPAQUE_TYPE

    def _optional(self, node: Optional[Node], ctx: _Context) -> str:
        return self._render(node, ctx) if node is not None else DEFAULT_TYPE

    def _predefined(self, node: Node, ctx: _Context) -> str:
        text = ctx.module.text(node)
        if text not in _PREDEFINED:
            raise TypeResolutionError(text, ctx.module.path, line_of(node))
        return text

    def _literal(self, node: Node, ctx: _Context) -> str:
        children = named(node)
        if children and children[0].type == "string":
            return quote_string(string_value(children[0], ctx.module.source))
        return ctx.module.text(node)

    def _named(self, node: Node, ctx: _Context) -> str:
        return self._reference(reference_from_type(node, ctx.module.source), ctx)

    def _array(self, node: Node, ctx: _Context) -> str:
        children = named(node)
        if not children:
            raise TypeResolutionError(node.type, ctx.module.path, line_of(node))
        return f"{self._render(children[0], ctx)}[]"

    def _object(self, node: Node, ctx: _Context) -> str:
        members = read_members(node, ctx.module.source)
        if not members:
            return "{}"
        rendered = " ".join(f"{self._member(member, ctx)};" for member in members)
        return f"{{ {rendered} }}"

    def _union(self, node: Node, ctx: _Context) -> str:
        return " | ".join(self._render(part, ctx) for part in _flatten(node))

    def _intersection(self, node: Node, ctx: _Context) -> str:
        return " & ".join(self._render(part, ctx) for part in _flatten(node))

    def _parenthesized(self, node: Node, ctx: _Context) -> str:
        children = named(node)
        if not children:
            raise TypeResolutionError(node.type, ctx.module.path, line_of(node))
        return f"({self._render(children[0], ctx)})"

    def _readonly(self, node: Node, ctx: _Context) -> str:
        children = named(node)
        if not children:
            raise TypeResolutionError(node.type, ctx.module.path, line_of(node))
        return f"readonly {self._render(children[0], ctx)}"

    def _type_parameter(self, node: Node, ctx: _Context) -> str:
        name = node.child_by_field_name("name")
        return ctx.module.text(name if name is not None else node)

    def _member(self, member: Member, ctx: _Context) -> str:
        value = self._optional(member.type, ctx)
        if member.index_type is not None:
            return f"[{member.name}: {self._render(member.index_type, ctx)}]: {value}"
        marker = "?" if member.optional else ""
        return f"{member.name}{marker}: {value}"

    # ------------------------------------------------------------------
    # Named references

    def _reference(self, reference: HeritageRef, ctx: _Context) -> str:
        if reference.namespace is None and reference.name in ctx.scope:
            text = reference.name
        else:
            text = self._define(reference.name, reference.namespace, ctx.module)
            if ctx.on_reference is not None:
                ctx.on_reference(text)
        if reference.type_arguments:
            arguments = ", ".join(self._render(arg, ctx) for arg in reference.type_arguments)
            text = f"{text}<{arguments}>"
        return text

    def _define(self, name: str, namespace: Optional[str], module: SourceModule) -> str:
        """Render the declaration behind ``name`` once; return the name to emit."""
        try:
            target, declaration = self._locate(name, namespace, module, set())
        except ImportResolutionError as exc:
            logger.debug("%s", exc)
            if not self.table.is_settled(name):
                self.table.mark_unresolved(name)
            return f"{namespace}.{name}" if namespace else name
        if not self.table.is_settled(declaration.name):
            self._render_declaration(declaration, target)
        return declaration.name

    def _locate(
        self,
        name: str,
        namespace: Optional[str],
        module: SourceModule,
        visited: Set[str],
    ) -> Tuple[SourceModule, Declaration]:
        key = str(module.path)
        if key in visited:
            raise ImportResolutionError(name, module.path, "circular re-export")
        visited.add(key)

        # A qualified name never refers to a declaration of the importing module.
        if namespace is not None:
            entry = module.find_namespace_import(namespace)
            target_name = name
        else:
            declaration = module.find_declaration(name)
            if declaration is not None:
                return module, declaration
            entry = module.find_named_import(name)
            target_name = entry.member(name) or name if entry is not None else name

        if entry is not None:
            if not entry.is_local:
                raise ImportResolutionError(name, module.path, f"external import '{entry.source}'")
            target = self.modules.open(self.modules.resolve_import(module, entry.source))
            return self._locate(target_name, None, target, visited)

        if namespace is None:
            for wildcard in module.wildcard_imports():
                if not wildcard.is_local:
                    continue
                target = self.modules.open(self.modules.resolve_import(module, wildcard.source))
                try:
                    return self._locate(name, None, target, set(visited))
                except ImportResolutionError:
                    continue

        raise ImportResolutionError(name, module.path, "no local declaration or import")

    # ------------------------------------------------------------------
    # Declarations

    def _render_declaration(self, declaration: Declaration, module: SourceModule) -> None:
        self.table.begin(declaration.name, module.path)
        references: List[str] = []

        def collect(name: str) -> None:
            if name != declaration.name and name not in references:
                references.append(name)

        ctx = _Context(
            module=module,
            on_reference=collect,
            scope=frozenset(param.name for param in declaration.type_parameters),
        )
        renderer = _DECLARATION_RENDERERS[declaration.kind]
        text = renderer(self, declaration, ctx)
        self.table.complete(declaration.name, text, references)
        logger.debug("Rendered %s %s from %s", declaration.kind.value, declaration.name, module.path)

    def _shape(self, declaration: Declaration, ctx: _Context) -> str:
        heritage = ""
        if declaration.heritage:
            bases = ", ".join(self._reference(ref, ctx) for ref in declaration.heritage)
            heritage = f" extends {bases}"
        lines = [
            f"export interface {declaration.name}"
            f"{self._type_parameters(declaration, ctx)}{heritage} {{"
        ]
        lines.extend(f"    {self._member(member, ctx)};" for member in declaration.members)
        lines.append("}")
        return "\n".join(lines) + "\n"

    def _enum(self, declaration: Declaration, ctx: _Context) -> str:
        lines = [f"export enum {declaration.name} {{"]
        for member in declaration.enum_members:
            if member.initializer is not None:
                lines.append(f"    {member.name} = {member.initializer},")
            else:
                lines.append(f"    {member.name},")
        lines.append("}")
        return "\n".join(lines) + "\n"

    def _alias(self, declaration: Declaration, ctx: _Context) -> str:
        value = self._optional(declaration.value, ctx)
        parameters = self._type_parameters(declaration, ctx)
        return f"export type {declaration.name}{parameters} = {value};\n"

    def _type_parameters(self, declaration: Declaration, ctx: _Context) -> str:
        if not declaration.type_parameters:
            return ""
        parts = []
        for param in declaration.type_parameters:
            text = param.name
            if param.constraint is not None:
                text += f" extends {self._render(param.constraint, ctx)}"
            if param.default is not None:
                text += f" = {self._render(param.default, ctx)}"
            parts.append(text)
        return "<" + ", ".join(parts) + ">"


def _flatten(node: Node) -> List[Node]:
    """Operands of a left-nested union or intersection chain."""
    parts: List[Node] = []
    for child in named(node):
        if child.type == node.type:
            parts.extend(_flatten(child))
        else:
            parts.append(child)
    return parts


_TYPE_RENDERERS: Dict[str, Callable[[TypeResolver, Node, _Context], str]] = {
    "predefined_type": TypeResolver._predefined,
    "literal_type": TypeResolver._literal,
    "type_identifier": TypeResolver._named,
    "generic_type": TypeResolver._named,
    "nested_type_identifier": TypeResolver._named,
    "array_type": TypeResolver._array,
    "object_type": TypeResolver._object,
    "union_type": TypeResolver._union,
    "intersection_type": TypeResolver._intersection,
    "parenthesized_type": TypeResolver._parenthesized,
    "readonly_type": TypeResolver._readonly,
    "type_parameter": TypeResolver._type_parameter,
}

_DECLARATION_RENDERERS: Dict[DeclarationKind, Callable[[TypeResolver, Declaration, _Context], str]] = {
    DeclarationKind.INTERFACE: TypeResolver._shape,
    DeclarationKind.CLASS: TypeResolver._shape,
    DeclarationKind.ENUM: TypeResolver._enum,
    DeclarationKind.ALIAS: TypeResolver._alias,
}


__all__ = ["DEFAULT_TYPE", "OPAQUE_TYPE", "ReferenceCallback", "TypeResolver"]
