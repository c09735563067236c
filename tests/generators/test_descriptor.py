"""Tests for SAM template I/O and function merging."""

from __future__ import annotations

import copy
from pathlib import Path

import pytest

from samgen.errors import ConfigError
from samgen.generators.descriptor import (
    FUNCTION_TYPE,
    DescriptorMerger,
    IntrinsicFunction,
    dump_template,
    load_template,
)
from samgen.models import FunctionDescriptor, UnknownValue, literal_from_python

_TEMPLATE = """\
AWSTemplateFormatVersion: '2010-09-09'
Transform: AWS::Serverless-2016-10-31
Resources:
  Table:
    Type: AWS::DynamoDB::Table
    Properties:
      TableName: !Sub '${AWS::StackName}-items'
      KeySchema:
        - AttributeName: id
          KeyType: HASH
  Legacy:
    Type: AWS::Serverless::Function
    Properties:
      Handler: old.handler
Outputs:
  TableArn:
    Value: !GetAtt Table.Arn
  Joined:
    Value: !Join ['', [a, b]]
"""


def _descriptor(root: Path, metadata: object = None, name: str = "GetItemFunction") -> FunctionDescriptor:
    literal = literal_from_python(metadata) if metadata is not None else UnknownValue("missing")
    return FunctionDescriptor(
        name=name,
        path=root / "src" / "items.ts",
        handler="getItem",
        metadata=literal,
    )


def test_short_form_tags_round_trip() -> None:
    document = load_template(_TEMPLATE)

    table = document["Resources"]["Table"]
    assert table["Properties"]["TableName"] == IntrinsicFunction("!Sub", "${AWS::StackName}-items")
    assert document["Outputs"]["Joined"]["Value"] == IntrinsicFunction("!Join", ["", ["a", "b"]])

    text = dump_template(document)

    assert "Value: !GetAtt Table.Arn" in text
    assert "!Sub" in text and "'!Sub" not in text
    assert "!Join" in text
    assert load_template(text) == document
    assert list(load_template(text)) == ["AWSTemplateFormatVersion", "Transform", "Resources", "Outputs"]


def test_metadata_strings_are_written_as_tags() -> None:
    text = dump_template({"Policies": ["!Ref Table", "plain"], "Role": "!GetAtt Role.Arn"})

    assert "- !Ref Table" in text
    assert "Role: !GetAtt Role.Arn" in text
    assert "'!" not in text


def test_load_template_rejects_invalid_documents() -> None:
    with pytest.raises(ConfigError):
        load_template("Resources: [unclosed\n")
    with pytest.raises(ConfigError):
        load_template("- just\n- a list\n")
    assert load_template("") == {}


def test_merge_replaces_function_resources(tmp_path: Path) -> None:
    document = load_template(_TEMPLATE)
    original = copy.deepcopy(document)
    metadata = {
        "Properties": {
            "MemorySize": 256,
            "Events": {"Get": {"Type": "Api", "Properties": {"Path": "/items/{id}", "Method": "get"}}},
        },
        "Metadata": {"BuildProperties": {"Minify": True}},
    }
    merger = DescriptorMerger(tmp_path, {"target": "es2019", "sourceMap": True})

    merged = merger.merge(document, [_descriptor(tmp_path, metadata)])

    assert document == original
    assert list(merged["Resources"]) == ["Table", "GetItemFunction"]
    assert merged["Resources"]["Table"] == original["Resources"]["Table"]
    assert merged["Outputs"] == original["Outputs"]
    assert merged["Resources"]["GetItemFunction"] == {
        "Type": FUNCTION_TYPE,
        "Properties": {
            "MemorySize": 256,
            "Events": {"Get": {"Type": "Api", "Properties": {"Path": "/items/{id}", "Method": "get"}}},
            "Handler": "src/items.getItem",
        },
        "Metadata": {
            "BuildMethod": "esbuild",
            "BuildProperties": {
                "Minify": True,
                "EntryPoints": ["src/items.ts"],
                "Target": "es2019",
                "Sourcemap": True,
            },
        },
    }
    assert list(merged["Resources"]["GetItemFunction"])[0] == "Type"


def test_merge_is_idempotent_and_additive(tmp_path: Path) -> None:
    merger = DescriptorMerger(tmp_path)
    first = _descriptor(tmp_path, {"Properties": {}}, name="FirstFunction")
    second = _descriptor(tmp_path, {"Properties": {}}, name="SecondFunction")

    once = merger.merge(load_template(_TEMPLATE), [first])
    twice = merger.merge(once, [first])
    added = merger.merge(twice, [first, second])
    removed = merger.merge(added, [second])

    assert twice == once
    assert added["Resources"]["FirstFunction"] == once["Resources"]["FirstFunction"]
    assert list(added["Resources"]) == ["Table", "FirstFunction", "SecondFunction"]
    assert list(removed["Resources"]) == ["Table", "SecondFunction"]


def test_merge_defaults_when_metadata_is_not_an_object(tmp_path: Path) -> None:
    merged = DescriptorMerger(tmp_path).merge({}, [_descriptor(tmp_path)])

    assert merged["Resources"]["GetItemFunction"] == {
        "Type": FUNCTION_TYPE,
        "Metadata": {
            "BuildProperties": {
                "EntryPoints": ["src/items.ts"],
                "Minify": False,
                "Target": "es2020",
                "Sourcemap": False,
            },
            "BuildMethod": "esbuild",
        },
        "Properties": {"Handler": "src/items.getItem"},
    }
