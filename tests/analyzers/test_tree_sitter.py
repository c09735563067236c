"""Tests for the tree-sitter front end."""

from __future__ import annotations

import pytest

from samgen.errors import ParseError
from samgen.models import DeclarationKind, ImportKind
from tests._fixtures.project_builder import ProjectBuilder


def test_parser_reads_import_table(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "src/handler.ts": """
            import * as models from './models';
            import { Item as Thing, Other } from './other';
            import { APIGatewayProxyEvent } from 'aws-lambda';
            export * from './shared';
            export { Order } from './orders';
            """
        }
    )

    module = project_builder.open("src/handler.ts")

    kinds = [(entry.kind, entry.source) for entry in module.imports]
    assert kinds == [
        (ImportKind.NAMESPACE, "./models"),
        (ImportKind.NAMED, "./other"),
        (ImportKind.NAMED, "aws-lambda"),
        (ImportKind.WILDCARD, "./shared"),
        (ImportKind.NAMED, "./orders"),
    ]
    assert module.find_namespace_import("models").source == "./models"
    other = module.find_named_import("Thing")
    assert other is not None
    assert other.member("Thing") == "Item"
    assert other.member("Other") == "Other"
    assert module.find_named_import("Item") is None
    assert not module.find_named_import("APIGatewayProxyEvent").is_local
    assert [entry.source for entry in module.wildcard_imports()] == ["./shared"]


def test_parser_builds_class_attribute_tables(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "src/get-item.ts": """
            @LambdaFunction({ Properties: { Events: {} } })
            export class GetItemFunction extends ApiHandler<Item> implements Traced {
                static count: number = 0;
                label?: string;

                async handle(@FromPath('id') id: number, verbose) {
                    return null;
                }
            }

            export const handler = new GetItemFunction().handler;
            """
        }
    )

    module = project_builder.open("src/get-item.ts")
    declaration = module.find_declaration("GetItemFunction")

    assert declaration is not None
    assert declaration.kind is DeclarationKind.CLASS
    attribute = declaration.attribute("LambdaFunction")
    assert attribute is not None
    assert attribute.target == "class"
    assert [node.type for node in attribute.arguments] == ["object"]

    assert [(ref.name, len(ref.type_arguments)) for ref in declaration.heritage] == [
        ("ApiHandler", 1),
        ("Traced", 0),
    ]
    assert [(member.name, member.optional) for member in declaration.members] == [("label", True)]

    method = declaration.method("handle")
    assert method is not None
    assert [param.name for param in method.parameters] == ["id", "verbose"]
    assert [attr.name for attr in method.parameters[0].attributes] == ["FromPath"]
    assert method.parameters[0].attributes[0].target == "parameter"
    assert method.parameters[1].type is None

    assert [(binding.name, binding.constructor) for binding in module.exports] == [
        ("handler", "GetItemFunction")
    ]


def test_parser_reads_interfaces_enums_and_aliases(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "src/models.ts": """
            export interface Bag<T extends object = {}> extends Base<T> {
                id: string;
                note?: string;
                [key: string]: unknown;
            }

            export enum Color {
                Red = 'red',
                Green = 2,
                Blue,
            }

            export type Shape = Circle | Square;
            """
        }
    )

    module = project_builder.open("src/models.ts")

    bag = module.find_declaration("Bag")
    assert bag is not None and bag.kind is DeclarationKind.INTERFACE
    assert [param.name for param in bag.type_parameters] == ["T"]
    assert bag.type_parameters[0].constraint is not None
    assert bag.type_parameters[0].default is not None
    assert [ref.name for ref in bag.heritage] == ["Base"]
    assert [(m.name, m.optional, m.index_type is not None) for m in bag.members] == [
        ("id", False, False),
        ("note", True, False),
        ("key", False, True),
    ]

    color = module.find_declaration("Color")
    assert color is not None and color.kind is DeclarationKind.ENUM
    assert [(m.name, m.initializer) for m in color.enum_members] == [
        ("Red", "'red'"),
        ("Green", "2"),
        ("Blue", None),
    ]

    shape = module.find_declaration("Shape")
    assert shape is not None and shape.kind is DeclarationKind.ALIAS
    assert shape.value is not None and shape.value.type == "union_type"


def test_parser_prefers_interface_over_other_kinds(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "src/merged.ts": """
            export type Item = string;
            export class Item { name: string; }
            export interface Item { id: number; }
            """
        }
    )

    module = project_builder.open("src/merged.ts")

    assert module.find_declaration("Item").kind is DeclarationKind.INTERFACE
    assert module.find_declaration("Item", (DeclarationKind.ALIAS,)).kind is DeclarationKind.ALIAS


def test_parser_rejects_syntax_errors(project_builder: ProjectBuilder) -> None:
    project_builder.write({"src/broken.ts": "export class {\n"})

    with pytest.raises(ParseError) as excinfo:
        project_builder.open("src/broken.ts")

    assert "broken.ts" in str(excinfo.value)
