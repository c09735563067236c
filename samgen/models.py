"""Core data models shared across samgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from tree_sitter import Node


# ----------------------------------------------------------------------
# Literal values


class LiteralValue:
    """Closed variant produced by the literal evaluator."""

    def get(self, key: str) -> LiteralValue:
        """Return the member ``key``; anything but an object yields unknown."""
        return UnknownValue(f"no member '{key}'")

    def items(self) -> Iterator[Tuple[str, LiteralValue]]:
        return iter(())

    def as_str(self) -> Optional[str]:
        return None

    @property
    def is_unknown(self) -> bool:
        return False

    def to_python(self) -> Any:
        raise NotImplementedError


@dataclass
class StringValue(LiteralValue):
    value: str

    def as_str(self) -> Optional[str]:
        return self.value

    def to_python(self) -> Any:
        return self.value


@dataclass
class NumberValue(LiteralValue):
    value: int | float

    def to_python(self) -> Any:
        return self.value


@dataclass
class BoolValue(LiteralValue):
    value: bool

    def to_python(self) -> Any:
        return self.value


@dataclass
class ArrayValue(LiteralValue):
    elements: List[LiteralValue] = field(default_factory=list)

    def to_python(self) -> Any:
        return [None if item.is_unknown else item.to_python() for item in self.elements]


@dataclass
class ObjectValue(LiteralValue):
    fields: Dict[str, LiteralValue] = field(default_factory=dict)

    def get(self, key: str) -> LiteralValue:
        return self.fields.get(key, UnknownValue(f"no member '{key}'"))

    def items(self) -> Iterator[Tuple[str, LiteralValue]]:
        return iter(list(self.fields.items()))

    def has(self, key: str) -> bool:
        """Return True when ``key`` holds a known value."""
        value = self.fields.get(key)
        return value is not None and not value.is_unknown

    def set(self, key: str, value: LiteralValue) -> None:
        self.fields[key] = value

    def setdefault(self, key: str, value: LiteralValue) -> LiteralValue:
        if not self.has(key):
            self.fields[key] = value
        return self.fields[key]

    def child(self, key: str) -> ObjectValue:
        """Return the object stored under ``key``, replacing anything else."""
        value = self.fields.get(key)
        if isinstance(value, ObjectValue):
            return value
        created = ObjectValue()
        self.fields[key] = created
        return created

    def to_python(self) -> Any:
        return {
            key: value.to_python()
            for key, value in self.fields.items()
            if not value.is_unknown
        }


@dataclass
class UnknownValue(LiteralValue):
    reason: str = ""

    @property
    def is_unknown(self) -> bool:
        return True

    def to_python(self) -> Any:
        return None


def literal_from_python(value: Any) -> LiteralValue:
    """Wrap plain JSON-like data in the literal variant."""
    if isinstance(value, bool):
        return BoolValue(value)
    if isinstance(value, (int, float)):
        return NumberValue(value)
    if isinstance(value, str):
        return StringValue(value)
    if isinstance(value, (list, tuple)):
        return ArrayValue([literal_from_python(item) for item in value])
    if isinstance(value, dict):
        return ObjectValue({str(key): literal_from_python(item) for key, item in value.items()})
    return UnknownValue(f"unsupported value {type(value).__name__}")


# ----------------------------------------------------------------------
# Parsed declarations


class DeclarationKind(str, Enum):
    INTERFACE = "interface"
    CLASS = "class"
    ENUM = "enum"
    ALIAS = "alias"


# Lookup precedence when a name is declared more than once in a module.
RESOLUTION_ORDER: Tuple[DeclarationKind, ...] = (
    DeclarationKind.INTERFACE,
    DeclarationKind.CLASS,
    DeclarationKind.ENUM,
    DeclarationKind.ALIAS,
)


@dataclass(frozen=True)
class Attribute:
    """Decorator applied to a class or parameter, captured at parse time."""

    name: str
    arguments: Tuple[Node, ...]
    target: str


@dataclass(frozen=True)
class TypeParameter:
    name: str
    constraint: Optional[Node] = None
    default: Optional[Node] = None


@dataclass(frozen=True)
class HeritageRef:
    """Base type listed in an ``extends`` or ``implements`` clause."""

    name: str
    namespace: Optional[str] = None
    type_arguments: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class Member:
    """Data member; an index signature when ``index_type`` is set."""

    name: str
    type: Optional[Node]
    optional: bool = False
    index_type: Optional[Node] = None


@dataclass(frozen=True)
class EnumMember:
    name: str
    initializer: Optional[str] = None


@dataclass(frozen=True)
class Parameter:
    name: str
    type: Optional[Node]
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class Method:
    name: str
    parameters: Tuple[Parameter, ...] = ()


@dataclass(frozen=True)
class Declaration:
    """Top-level interface, class, enum or type alias."""

    kind: DeclarationKind
    name: str
    line: int
    type_parameters: Tuple[TypeParameter, ...] = ()
    heritage: Tuple[HeritageRef, ...] = ()
    members: Tuple[Member, ...] = ()
    enum_members: Tuple[EnumMember, ...] = ()
    methods: Tuple[Method, ...] = ()
    attributes: Tuple[Attribute, ...] = ()
    value: Optional[Node] = None

    def attribute(self, name: str) -> Optional[Attribute]:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def method(self, name: str) -> Optional[Method]:
        for method in self.methods:
            if method.name == name:
                return method
        return None


class ImportKind(str, Enum):
    NAMESPACE = "namespace"
    NAMED = "named"
    WILDCARD = "wildcard"


@dataclass(frozen=True)
class ImportEntry:
    """Import or re-export statement; ``members`` maps local to exported names."""

    source: str
    kind: ImportKind
    namespace: Optional[str] = None
    members: Tuple[Tuple[str, str], ...] = ()

    @property
    def is_local(self) -> bool:
        return self.source.startswith(".")

    def member(self, local_name: str) -> Optional[str]:
        for local, exported in self.members:
            if local == local_name:
                return exported
        return None


@dataclass(frozen=True)
class ExportedBinding:
    """Exported variable initialised as ``new <constructor>(...).<member>``."""

    name: str
    constructor: str
    line: int


@dataclass(frozen=True, eq=False)
class SourceModule:
    """Parsed source file; identity is the resolved path."""

    path: Path
    source: bytes
    declarations: Tuple[Declaration, ...] = ()
    imports: Tuple[ImportEntry, ...] = ()
    exports: Tuple[ExportedBinding, ...] = ()

    def find_declaration(
        self, name: str, kinds: Tuple[DeclarationKind, ...] = RESOLUTION_ORDER
    ) -> Optional[Declaration]:
        for kind in kinds:
            for declaration in self.declarations:
                if declaration.kind is kind and declaration.name == name:
                    return declaration
        return None

    def find_named_import(self, name: str) -> Optional[ImportEntry]:
        for entry in self.imports:
            if entry.kind is ImportKind.NAMED and entry.member(name) is not None:
                return entry
        return None

    def find_namespace_import(self, alias: str) -> Optional[ImportEntry]:
        for entry in self.imports:
            if entry.kind is ImportKind.NAMESPACE and entry.namespace == alias:
                return entry
        return None

    def wildcard_imports(self) -> List[ImportEntry]:
        return [entry for entry in self.imports if entry.kind is ImportKind.WILDCARD]

    def text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


# ----------------------------------------------------------------------
# Extracted handlers


class BindingSource(str, Enum):
    BODY = "body"
    QUERY = "query"
    PATH = "path"


@dataclass
class ParameterBinding:
    """Handler parameter with its request binding and rendered type."""

    source: BindingSource
    type: str
    name: str
    key: str


@dataclass
class FunctionDescriptor:
    """Everything extracted about one annotated handler."""

    name: str
    path: Path
    handler: str
    metadata: LiteralValue
    parameters: List[ParameterBinding] = field(default_factory=list)
    return_type: str = "any"
    http_method: Optional[str] = None
    http_path: Optional[str] = None
    imports: List[str] = field(default_factory=list)

    def add_import(self, name: str) -> None:
        if name not in self.imports:
            self.imports.append(name)

    @property
    def has_route(self) -> bool:
        return bool(self.http_method) and bool(self.http_path)

    def bindings(self, source: BindingSource) -> List[ParameterBinding]:
        return [binding for binding in self.parameters if binding.source is source]


__all__ = [
    "ArrayValue",
    "Attribute",
    "BindingSource",
    "BoolValue",
    "Declaration",
    "DeclarationKind",
    "EnumMember",
    "ExportedBinding",
    "FunctionDescriptor",
    "HeritageRef",
    "ImportEntry",
    "ImportKind",
    "LiteralValue",
    "Member",
    "Method",
    "NumberValue",
    "ObjectValue",
    "Parameter",
    "ParameterBinding",
    "SourceModule",
    "StringValue",
    "TypeParameter",
    "UnknownValue",
    "literal_from_python",
]
