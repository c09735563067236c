"""Generators turning extracted handlers and types into output files."""

from .barrel import BarrelGenerator
from .base import GeneratedFile, GenerationContext, Generator
from .client import ClientServiceGenerator
from .declarations import TypeDeclarationGenerator
from .descriptor import DescriptorMerger, dump_template, load_template

__all__ = [
    "BarrelGenerator",
    "ClientServiceGenerator",
    "DescriptorMerger",
    "GeneratedFile",
    "GenerationContext",
    "Generator",
    "TypeDeclarationGenerator",
    "dump_template",
    "load_template",
]
