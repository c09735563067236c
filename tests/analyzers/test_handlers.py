"""Tests for function descriptor extraction."""

from __future__ import annotations

import logging

import pytest

from samgen.analyzers.handlers import HandlerExtractor
from samgen.analyzers.resolver import TypeResolver
from samgen.models import BindingSource
from tests._fixtures.project_builder import ProjectBuilder

_MODELS = """
export interface Item {
    id: number;
    name: string;
}

export interface ItemFilter {
    tag?: string;
}
"""


def _extractor(project_builder: ProjectBuilder) -> HandlerExtractor:
    return HandlerExtractor(project_builder.modules, TypeResolver(project_builder.modules))


def test_extracts_route_bindings_and_return_type(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "src/models.ts": _MODELS,
            "src/items.ts": """
            import { ApiHandler, FromBody, FromPath, FromQuery, LambdaFunction } from 'sam-decorators';
            import { Item, ItemFilter } from './models';

            @LambdaFunction({
                Properties: {
                    Events: {
                        Update: {
                            Type: 'Api',
                            Properties: { Path: '/items/{itemId}', Method: 'put' },
                        },
                    },
                },
            })
            class UpdateItemFunction extends ApiHandler<Item> {
                async handle(
                    @FromPath('itemId') id: number,
                    @FromBody() item: Item,
                    @FromQuery('dry-run') dryRun: boolean,
                    filter: ItemFilter,
                ) {
                    return item;
                }
            }

            export const update = new UpdateItemFunction().handler;
            """,
        }
    )

    descriptors = _extractor(project_builder).extract(project_builder.path("src/items.ts"))

    assert len(descriptors) == 1
    descriptor = descriptors[0]
    assert descriptor.name == "UpdateItemFunction"
    assert descriptor.handler == "update"
    assert descriptor.http_method == "put"
    assert descriptor.http_path == "/items/{itemId}"
    assert descriptor.return_type == "Item"
    assert [(b.source, b.name, b.key, b.type) for b in descriptor.parameters] == [
        (BindingSource.PATH, "id", "itemId", "number"),
        (BindingSource.BODY, "item", "item", "Item"),
        (BindingSource.QUERY, "dryRun", "dry-run", "boolean"),
        (BindingSource.QUERY, "filter", "filter", "ItemFilter"),
    ]
    assert descriptor.imports == ["Item", "ItemFilter"]


def test_ignores_classes_without_lambda_attribute(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "src/plain.ts": """
            class Plain {
                handle() {}
            }

            export const handler = new Plain().handler;
            export const other = 42;
            """
        }
    )

    assert _extractor(project_builder).extract(project_builder.path("src/plain.ts")) == []


def test_skips_handler_without_entry_method(
    project_builder: ProjectBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    project_builder.write(
        {
            "src/broken.ts": """
            @LambdaFunction({ Properties: { Events: {} } })
            class NoEntryFunction {
                run() {}
            }

            export const handler = new NoEntryFunction().handler;
            """
        }
    )

    with caplog.at_level(logging.WARNING, logger="samgen"):
        descriptors = _extractor(project_builder).extract(project_builder.path("src/broken.ts"))

    assert descriptors == []
    assert "NoEntryFunction" in caplog.text


def test_last_api_event_wins(
    project_builder: ProjectBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    project_builder.write(
        {
            "src/multi.ts": """
            @LambdaFunction({
                Properties: {
                    Events: {
                        Nightly: { Type: 'Schedule', Properties: { Schedule: 'rate(1 day)' } },
                        First: { Type: 'Api', Properties: { Path: '/first', Method: 'get' } },
                        Second: { Type: 'Api', Properties: { Path: '/second', Method: 'post' } },
                    },
                },
            })
            export class MultiFunction {
                handle(query: string) {}
            }

            export const handler = new MultiFunction().handler;
            """
        }
    )

    with caplog.at_level(logging.WARNING, logger="samgen"):
        descriptors = _extractor(project_builder).extract(project_builder.path("src/multi.ts"))

    descriptor = descriptors[0]
    assert (descriptor.http_method, descriptor.http_path) == ("post", "/second")
    assert descriptor.return_type == "any"
    assert "Second" in caplog.text


def test_handler_without_http_event_has_no_route(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "src/worker.ts": """
            @LambdaFunction({ MemorySize: 512 })
            export class WorkerFunction extends BaseHandler<void> {
                handle(payload) {}
            }

            export const handler = new WorkerFunction().handler;
            """
        }
    )

    descriptor = _extractor(project_builder).extract(project_builder.path("src/worker.ts"))[0]

    assert not descriptor.has_route
    assert descriptor.return_type == "void"
    assert descriptor.parameters[0].type == "any"
    assert descriptor.metadata.to_python() == {"MemorySize": 512}
