"""Shared plumbing for the output generators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from jinja2 import Environment, FileSystemLoader

from ..models import FunctionDescriptor
from ..stores.type_table import TypeStatus, TypeTable
from .naming import slugify

_TEMPLATES_DIR = Path(__file__).with_name("templates")


@dataclass(frozen=True)
class GeneratedFile:
    """An output unit waiting to be written to the output directory."""

    name: str
    content: str


@dataclass
class GenerationContext:
    """Facts collected by the analysis phase of a run."""

    descriptors: Sequence[FunctionDescriptor] = field(default_factory=list)
    types: TypeTable = field(default_factory=TypeTable)

    def referenced_types(self) -> List[str]:
        """Rendered types referenced by any descriptor, first-seen order."""
        names: List[str] = []
        for descriptor in self.descriptors:
            for name in descriptor.imports:
                if name in names:
                    continue
                if self.types.status(name) is TypeStatus.RENDERED:
                    names.append(name)
        return names

    def routed(self) -> List[FunctionDescriptor]:
        return [descriptor for descriptor in self.descriptors if descriptor.has_route]


class Generator(ABC):
    """Produces output files from a generation context without touching disk."""

    def __init__(self, env: Environment | None = None) -> None:
        self._env = env or create_environment()

    @abstractmethod
    def generate(self, context: GenerationContext) -> List[GeneratedFile]:
        """Return the files this generator contributes."""

    def render(self, template_name: str, **values: object) -> str:
        template = self._env.get_template(template_name)
        return template.render(**values).rstrip("\n") + "\n"


def create_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["slug"] = slugify
    return env


__all__ = ["GeneratedFile", "GenerationContext", "Generator", "create_environment"]
