"""SAM template I/O and the merge of extracted functions into it."""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

import yaml

from ..errors import ConfigError
from ..logging import get_logger
from ..models import (
    ArrayValue,
    BoolValue,
    FunctionDescriptor,
    ObjectValue,
    StringValue,
    literal_from_python,
)

FUNCTION_TYPE = "AWS::Serverless::Function"
BUILD_METHOD = "esbuild"
DEFAULT_TARGET = "es2020"
DEFAULT_SOURCEMAP = False

_SHORT_FORM = re.compile(r"^!([A-Za-z][A-Za-z0-9:]*)\s+(.+)$", re.DOTALL)
_SOURCE_SUFFIX = re.compile(r"\.tsx?$")

logger = get_logger("descriptor")


@dataclass(frozen=True)
class IntrinsicFunction:
    """CloudFormation short-form tag such as ``!Ref Table``."""

    tag: str
    value: Any


class TemplateLoader(yaml.SafeLoader):
    """Safe loader that keeps unknown ``!`` tags as intrinsic functions."""


class TemplateDumper(yaml.SafeDumper):
    """Safe dumper writing intrinsic functions back as unquoted tags."""

    def ignore_aliases(self, data: Any) -> bool:
        return True

    def choose_scalar_style(self) -> str:
        # Explicitly tagged scalars would otherwise always be single-quoted.
        tag = self.event.tag
        if tag and tag.startswith("!") and not self.event.style:
            if self.analysis is None:
                self.analysis = self.analyze_scalar(self.event.value)
            if self.flow_level:
                plain = self.analysis.allow_flow_plain
            else:
                plain = self.analysis.allow_block_plain
            if plain and not self.analysis.empty and not self.analysis.multiline:
                return ""
        return super().choose_scalar_style()


def _construct_intrinsic(loader: TemplateLoader, suffix: str, node: yaml.Node) -> IntrinsicFunction:
    tag = f"!{suffix}"
    if isinstance(node, yaml.MappingNode):
        return IntrinsicFunction(tag, loader.construct_mapping(node, deep=True))
    if isinstance(node, yaml.SequenceNode):
        return IntrinsicFunction(tag, loader.construct_sequence(node, deep=True))
    return IntrinsicFunction(tag, loader.construct_scalar(node))


def _represent_intrinsic(dumper: TemplateDumper, data: IntrinsicFunction) -> yaml.Node:
    if isinstance(data.value, dict):
        return dumper.represent_mapping(data.tag, data.value)
    if isinstance(data.value, (list, tuple)):
        return dumper.represent_sequence(data.tag, data.value)
    return dumper.represent_scalar(data.tag, str(data.value))


def _represent_str(dumper: TemplateDumper, data: str) -> yaml.Node:
    match = _SHORT_FORM.match(data)
    if match:
        return dumper.represent_scalar(f"!{match.group(1)}", match.group(2))
    return dumper.represent_str(data)


TemplateLoader.add_multi_constructor("!", _construct_intrinsic)
TemplateDumper.add_representer(IntrinsicFunction, _represent_intrinsic)
TemplateDumper.add_representer(str, _represent_str)


def load_template(text: str) -> Dict[str, Any]:
    """Parse a SAM template; raise ConfigError when it is not a YAML mapping."""
    try:
        document = yaml.load(text, Loader=TemplateLoader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse template: {exc}") from exc
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigError("Template must contain a mapping at the root")
    return document


def dump_template(document: Mapping[str, Any]) -> str:
    return yaml.dump(
        dict(document),
        Dumper=TemplateDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )


class DescriptorMerger:
    """Replaces the template's function resources with the extracted handlers."""

    def __init__(self, root: Path, compiler_options: Mapping[str, Any] | None = None) -> None:
        self.root = Path(root)
        self.compiler_options = dict(compiler_options or {})

    def merge(
        self, document: Mapping[str, Any], descriptors: Iterable[FunctionDescriptor]
    ) -> Dict[str, Any]:
        """Return a merged copy of ``document``; the input is left untouched."""
        merged = copy.deepcopy(dict(document))
        resources = merged.get("Resources")
        if not isinstance(resources, dict):
            resources = {}

        kept: Dict[str, Any] = {}
        for name, resource in resources.items():
            if isinstance(resource, dict) and resource.get("Type") == FUNCTION_TYPE:
                continue
            kept[name] = resource

        for descriptor in descriptors:
            if descriptor.name in kept:
                logger.warning("Resource %s replaced by the generated function", descriptor.name)
            kept[descriptor.name] = self.stamp(descriptor)

        merged["Resources"] = kept
        return merged

    def stamp(self, descriptor: FunctionDescriptor) -> Dict[str, Any]:
        """Fill in the build and handler fields of one function resource."""
        if isinstance(descriptor.metadata, ObjectValue):
            source = copy.deepcopy(descriptor.metadata)
        else:
            logger.warning("%s: metadata is not an object literal; starting empty", descriptor.name)
            source = ObjectValue()

        resource = ObjectValue()
        resource.set("Type", StringValue(FUNCTION_TYPE))
        for key, value in source.items():
            if key != "Type":
                resource.set(key, value)

        relative = self.relative_path(descriptor.path)
        metadata = resource.child("Metadata")
        build = metadata.child("BuildProperties")
        properties = resource.child("Properties")

        metadata.set("BuildMethod", StringValue(BUILD_METHOD))
        build.set("EntryPoints", ArrayValue([StringValue(relative)]))
        properties.set("Handler", StringValue(_SOURCE_SUFFIX.sub(f".{descriptor.handler}", relative)))

        build.setdefault("Minify", BoolValue(False))
        build.setdefault(
            "Target", literal_from_python(self.compiler_options.get("target", DEFAULT_TARGET))
        )
        build.setdefault(
            "Sourcemap",
            literal_from_python(self.compiler_options.get("sourceMap", DEFAULT_SOURCEMAP)),
        )
        return resource.to_python()

    def relative_path(self, path: Path) -> str:
        try:
            return Path(path).relative_to(self.root).as_posix()
        except ValueError:
            return Path(path).as_posix()


__all__ = [
    "DescriptorMerger",
    "FUNCTION_TYPE",
    "IntrinsicFunction",
    "TemplateDumper",
    "TemplateLoader",
    "dump_template",
    "load_template",
]
