"""Emitter writing one declaration file per rendered type."""

from __future__ import annotations

from typing import List

from ..stores.type_table import TypeStatus
from .base import GeneratedFile, GenerationContext, Generator
from .naming import slugify


class TypeDeclarationGenerator(Generator):
    """Writes ``<slug>.ts`` for every type the resolver rendered."""

    def generate(self, context: GenerationContext) -> List[GeneratedFile]:
        files: List[GeneratedFile] = []
        for definition in context.types.rendered():
            imports = [
                name
                for name in definition.references
                if context.types.status(name) is TypeStatus.RENDERED
            ]
            content = self.render("type.ts.j2", imports=imports, text=definition.text)
            files.append(GeneratedFile(name=f"{slugify(definition.name)}.ts", content=content))
        return files


__all__ = ["TypeDeclarationGenerator"]
