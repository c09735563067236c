"""Tree-sitter front end turning TypeScript files into source modules."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_parser

from ..errors import ParseError
from ..models import (
    Attribute,
    Declaration,
    DeclarationKind,
    EnumMember,
    ExportedBinding,
    HeritageRef,
    ImportEntry,
    ImportKind,
    Member,
    Method,
    Parameter,
    SourceModule,
    TypeParameter,
)

_SUPPORTED_SUFFIXES = {
    ".ts": "typescript",
    ".tsx": "tsx",
}

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


class TypeScriptParser:
    """Parses TypeScript sources with tree-sitter and builds source modules."""

    def __init__(self) -> None:
        self._parsers: Dict[str, Parser] = {}

    def parse(self, path: Path, source: bytes) -> SourceModule:
        """Return the module for ``source``; raise ParseError on syntax errors."""
        parser = self._get_parser(language_for_file(path))
        tree = parser.parse(source)
        root = tree.root_node
        if root.has_error:
            error = _first_error(root)
            raise ParseError(path, f"syntax error at line {error.start_point[0] + 1}")
        return build_module(path, source, root)

    def _get_parser(self, language_key: str) -> Parser:
        parser = self._parsers.get(language_key)
        if parser is None:
            parser = get_parser(language_key)  # type: ignore[arg-type]
            self._parsers[language_key] = parser
        return parser


def language_for_file(path: Path) -> str:
    return _SUPPORTED_SUFFIXES.get(path.suffix.lower(), "typescript")


# ----------------------------------------------------------------------
# Node helpers


def node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def named(node: Optional[Node]) -> List[Node]:
    """Named children of ``node`` without comments."""
    if node is None:
        return []
    return [child for child in node.named_children if child.type != "comment"]


def line_of(node: Node) -> int:
    return node.start_point[0] + 1


def has_token(node: Node, token: str) -> bool:
    return any(child.type == token for child in node.children)


def string_value(node: Node, source: bytes) -> str:
    """Decoded contents of a ``string`` node."""
    parts: List[str] = []
    for child in node.named_children:
        text = node_text(child, source)
        if child.type == "escape_sequence":
            parts.append(_unescape(text))
        else:
            parts.append(text)
    return "".join(parts)


def quote_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def annotated_type(annotation: Optional[Node]) -> Optional[Node]:
    """Return the type inside a ``: T`` annotation node."""
    if annotation is None:
        return None
    children = named(annotation)
    return children[0] if children else None


def read_members(body: Optional[Node], source: bytes) -> Tuple[Member, ...]:
    """Property and index signatures of an interface body or object type."""
    members: List[Member] = []
    for child in named(body):
        if child.type == "property_signature":
            name_node = child.child_by_field_name("name")
            if name_node is None:
                continue
            members.append(
                Member(
                    name=node_text(name_node, source),
                    type=annotated_type(child.child_by_field_name("type")),
                    optional=has_token(child, "?"),
                )
            )
        elif child.type == "index_signature":
            key_node = child.child_by_field_name("name") or _first_of(child, "identifier")
            index_type = child.child_by_field_name("index_type")
            if key_node is None or index_type is None:
                continue
            members.append(
                Member(
                    name=node_text(key_node, source),
                    type=annotated_type(child.child_by_field_name("type")),
                    index_type=index_type,
                )
            )
    return tuple(members)


def reference_from_type(node: Node, source: bytes) -> HeritageRef:
    """Split a type reference node into name, namespace and type arguments."""
    arguments: Tuple[Node, ...] = ()
    if node.type == "generic_type":
        arguments = tuple(named(node.child_by_field_name("type_arguments")))
        node = node.child_by_field_name("name") or node
    if node.type == "nested_type_identifier":
        module = node.child_by_field_name("module")
        name = node.child_by_field_name("name")
        if module is not None and name is not None:
            return HeritageRef(
                name=node_text(name, source),
                namespace=node_text(module, source),
                type_arguments=arguments,
            )
    return HeritageRef(name=node_text(node, source), type_arguments=arguments)


# ----------------------------------------------------------------------
# Module construction


def build_module(path: Path, source: bytes, root: Node) -> SourceModule:
    declarations: List[Declaration] = []
    imports: List[ImportEntry] = []
    exports: List[ExportedBinding] = []

    for statement in named(root):
        decorators: Sequence[Node] = ()
        exported = False
        if statement.type == "import_statement":
            entry = _read_import(statement, source)
            if entry is not None:
                imports.append(entry)
            continue
        if statement.type == "export_statement":
            if statement.child_by_field_name("source") is not None:
                entry = _read_reexport(statement, source)
                if entry is not None:
                    imports.append(entry)
                continue
            declaration_node = statement.child_by_field_name("declaration")
            if declaration_node is None:
                continue
            decorators = statement.children_by_field_name("decorator")
            statement = declaration_node
            exported = True

        builder = _DECLARATION_BUILDERS.get(statement.type)
        if builder is not None:
            declarations.append(builder(statement, source, decorators))
        elif exported and statement.type in {"lexical_declaration", "variable_declaration"}:
            exports.extend(_read_bindings(statement, source))

    return SourceModule(
        path=path,
        source=source,
        declarations=tuple(declarations),
        imports=tuple(imports),
        exports=tuple(exports),
    )


def _read_import(statement: Node, source: bytes) -> Optional[ImportEntry]:
    source_node = statement.child_by_field_name("source")
    clause = _first_of(statement, "import_clause")
    if source_node is None or clause is None:
        return None
    specifier = string_value(source_node, source)
    for child in named(clause):
        if child.type == "namespace_import":
            alias = _first_of(child, "identifier")
            if alias is not None:
                return ImportEntry(
                    source=specifier,
                    kind=ImportKind.NAMESPACE,
                    namespace=node_text(alias, source),
                )
        elif child.type == "named_imports":
            members = tuple(
                _specifier_pair(spec, source)
                for spec in named(child)
                if spec.type == "import_specifier"
            )
            return ImportEntry(source=specifier, kind=ImportKind.NAMED, members=members)
    return None


def _read_reexport(statement: Node, source: bytes) -> Optional[ImportEntry]:
    specifier = string_value(statement.child_by_field_name("source"), source)  # type: ignore[arg-type]
    clause = _first_of(statement, "export_clause")
    if clause is not None:
        members = tuple(
            _specifier_pair(spec, source)
            for spec in named(clause)
            if spec.type == "export_specifier"
        )
        return ImportEntry(source=specifier, kind=ImportKind.NAMED, members=members)
    if has_token(statement, "*") and _first_of(statement, "namespace_export") is None:
        return ImportEntry(source=specifier, kind=ImportKind.WILDCARD)
    return None


def _specifier_pair(spec: Node, source: bytes) -> Tuple[str, str]:
    name_node = spec.child_by_field_name("name")
    alias_node = spec.child_by_field_name("alias")
    if name_node is None:
        text = node_text(spec, source)
        return text, text
    exported = _identifier_text(name_node, source)
    local = _identifier_text(alias_node, source) if alias_node is not None else exported
    return local, exported


def _read_bindings(statement: Node, source: bytes) -> List[ExportedBinding]:
    bindings: List[ExportedBinding] = []
    for declarator in named(statement):
        if declarator.type != "variable_declarator":
            continue
        name_node = declarator.child_by_field_name("name")
        value = declarator.child_by_field_name("value")
        if name_node is None or value is None or value.type != "member_expression":
            continue
        instance = value.child_by_field_name("object")
        if instance is None or instance.type != "new_expression":
            continue
        constructor = instance.child_by_field_name("constructor")
        if constructor is None or constructor.type != "identifier":
            continue
        bindings.append(
            ExportedBinding(
                name=node_text(name_node, source),
                constructor=node_text(constructor, source),
                line=line_of(declarator),
            )
        )
    return bindings


def _class_declaration(node: Node, source: bytes, decorators: Sequence[Node]) -> Declaration:
    attributes = _read_attributes(
        [*decorators, *node.children_by_field_name("decorator")], source, "class"
    )
    heritage: List[HeritageRef] = []
    for clause in named(_first_of(node, "class_heritage")):
        if clause.type == "extends_clause":
            values = clause.children_by_field_name("value")
            arguments = clause.children_by_field_name("type_arguments")
            for index, value in enumerate(values):
                args = named(arguments[index]) if index < len(arguments) else []
                heritage.append(_reference_from_expression(value, tuple(args), source))
        elif clause.type == "implements_clause":
            heritage.extend(reference_from_type(child, source) for child in named(clause))

    members: List[Member] = []
    methods: List[Method] = []
    for member in named(node.child_by_field_name("body")):
        if member.type == "public_field_definition":
            name_node = member.child_by_field_name("name")
            if name_node is None or has_token(member, "static"):
                continue
            members.append(
                Member(
                    name=node_text(name_node, source),
                    type=annotated_type(member.child_by_field_name("type")),
                    optional=has_token(member, "?"),
                )
            )
        elif member.type == "method_definition":
            methods.append(_method(member, source))

    return Declaration(
        kind=DeclarationKind.CLASS,
        name=_name(node, source),
        line=line_of(node),
        type_parameters=_type_parameters(node, source),
        heritage=tuple(heritage),
        members=tuple(members),
        methods=tuple(methods),
        attributes=tuple(attributes),
    )


def _interface_declaration(node: Node, source: bytes, decorators: Sequence[Node]) -> Declaration:
    clause = _first_of(node, "extends_type_clause")
    heritage = tuple(reference_from_type(child, source) for child in named(clause))
    return Declaration(
        kind=DeclarationKind.INTERFACE,
        name=_name(node, source),
        line=line_of(node),
        type_parameters=_type_parameters(node, source),
        heritage=heritage,
        members=read_members(node.child_by_field_name("body"), source),
    )


def _enum_declaration(node: Node, source: bytes, decorators: Sequence[Node]) -> Declaration:
    members: List[EnumMember] = []
    for child in named(node.child_by_field_name("body")):
        if child.type == "enum_assignment":
            name_node = child.child_by_field_name("name")
            value = child.child_by_field_name("value")
            if name_node is None:
                continue
            initializer = None
            if value is not None and value.type == "string":
                initializer = quote_string(string_value(value, source))
            elif value is not None and value.type == "number":
                initializer = node_text(value, source)
            members.append(EnumMember(name=node_text(name_node, source), initializer=initializer))
        else:
            members.append(EnumMember(name=node_text(child, source)))
    return Declaration(
        kind=DeclarationKind.ENUM,
        name=_name(node, source),
        line=line_of(node),
        enum_members=tuple(members),
    )


def _type_alias_declaration(node: Node, source: bytes, decorators: Sequence[Node]) -> Declaration:
    return Declaration(
        kind=DeclarationKind.ALIAS,
        name=_name(node, source),
        line=line_of(node),
        type_parameters=_type_parameters(node, source),
        value=node.child_by_field_name("value"),
    )


_DECLARATION_BUILDERS: Dict[str, Callable[[Node, bytes, Sequence[Node]], Declaration]] = {
    "class_declaration": _class_declaration,
    "abstract_class_declaration": _class_declaration,
    "interface_declaration": _interface_declaration,
    "enum_declaration": _enum_declaration,
    "type_alias_declaration": _type_alias_declaration,
}


def read_attribute(decorator: Node, source: bytes, target: str) -> Optional[Attribute]:
    """Capture a decorator as name plus raw argument nodes."""
    children = named(decorator)
    if not children:
        return None
    expression = children[0]
    arguments: Tuple[Node, ...] = ()
    if expression.type == "call_expression":
        arguments = tuple(named(expression.child_by_field_name("arguments")))
        callee = expression.child_by_field_name("function")
        if callee is None:
            return None
        expression = callee
    if expression.type == "member_expression":
        property_node = expression.child_by_field_name("property")
        if property_node is None:
            return None
        expression = property_node
    return Attribute(name=node_text(expression, source), arguments=arguments, target=target)


def _read_attributes(
    decorators: Sequence[Node], source: bytes, target: str
) -> Tuple[Attribute, ...]:
    attributes: List[Attribute] = []
    for decorator in decorators:
        attribute = read_attribute(decorator, source, target)
        if attribute is not None:
            attributes.append(attribute)
    return tuple(attributes)


def _method(node: Node, source: bytes) -> Method:
    parameters: List[Parameter] = []
    for param in named(node.child_by_field_name("parameters")):
        if param.type not in {"required_parameter", "optional_parameter"}:
            continue
        pattern = param.child_by_field_name("pattern")
        if pattern is None:
            continue
        attributes = _read_attributes(
            param.children_by_field_name("decorator"), source, "parameter"
        )
        parameters.append(
            Parameter(
                name=node_text(pattern, source),
                type=annotated_type(param.child_by_field_name("type")),
                attributes=attributes,
            )
        )
    name_node = node.child_by_field_name("name")
    name = node_text(name_node, source) if name_node is not None else ""
    return Method(name=name, parameters=tuple(parameters))


def _type_parameters(node: Node, source: bytes) -> Tuple[TypeParameter, ...]:
    parameters: List[TypeParameter] = []
    for param in named(node.child_by_field_name("type_parameters")):
        if param.type != "type_parameter":
            continue
        name_node = param.child_by_field_name("name")
        if name_node is None:
            continue
        parameters.append(
            TypeParameter(
                name=node_text(name_node, source),
                constraint=annotated_type(param.child_by_field_name("constraint")),
                default=annotated_type(param.child_by_field_name("value")),
            )
        )
    return tuple(parameters)


def _reference_from_expression(
    node: Node, arguments: Tuple[Node, ...], source: bytes
) -> HeritageRef:
    if node.type == "member_expression":
        obj = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        if obj is not None and prop is not None:
            return HeritageRef(
                name=node_text(prop, source),
                namespace=node_text(obj, source),
                type_arguments=arguments,
            )
    return HeritageRef(name=node_text(node, source), type_arguments=arguments)


def _name(node: Node, source: bytes) -> str:
    name_node = node.child_by_field_name("name")
    return node_text(name_node, source) if name_node is not None else ""


def _identifier_text(node: Node, source: bytes) -> str:
    if node.type == "string":
        return string_value(node, source)
    return node_text(node, source)


def _first_of(node: Optional[Node], node_type: str) -> Optional[Node]:
    for child in named(node):
        if child.type == node_type:
            return child
    return None


def _first_error(node: Node) -> Node:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            return _first_error(child)
    return node


def _unescape(sequence: str) -> str:
    body = sequence[1:]
    if body in _ESCAPES:
        return _ESCAPES[body]
    if body.startswith("u{") and body.endswith("}"):
        return chr(int(body[2:-1], 16))
    if body[:1] in {"u", "x"} and len(body) > 1:
        try:
            return chr(int(body[1:], 16))
        except ValueError:
            return body
    if body in {"\n", "\r\n", "\r"}:
        return ""
    return body


__all__ = [
    "TypeScriptParser",
    "annotated_type",
    "build_module",
    "has_token",
    "language_for_file",
    "line_of",
    "named",
    "node_text",
    "quote_string",
    "read_attribute",
    "read_members",
    "reference_from_type",
    "string_value",
]
