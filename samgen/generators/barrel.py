"""Emitter for the base-url token, DI module and barrel index."""

from __future__ import annotations

from typing import List

from .base import GeneratedFile, GenerationContext, Generator


class BarrelGenerator(Generator):
    """Fixed Angular glue files plus an index re-exporting every referenced type."""

    def generate(self, context: GenerationContext) -> List[GeneratedFile]:
        return [
            GeneratedFile(name="baseurl.token.ts", content=self.render("baseurl.token.ts.j2")),
            GeneratedFile(name="api.module.ts", content=self.render("api.module.ts.j2")),
            GeneratedFile(
                name="index.ts",
                content=self.render("index.ts.j2", types=context.referenced_types()),
            ),
        ]


__all__ = ["BarrelGenerator"]
