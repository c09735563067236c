"""Tests for the per-run module cache."""

from __future__ import annotations

import pytest

from samgen.errors import ParseError
from samgen.stores import ModuleCache
from tests._fixtures.project_builder import ProjectBuilder


def test_open_returns_same_instance(project_builder: ProjectBuilder) -> None:
    project_builder.write({"src/item.ts": "export interface Item { id: string; }\n"})
    cache = ModuleCache()

    first = cache.open(project_builder.path("src/item.ts"))
    second = cache.open(project_builder.path("src/../src/item.ts"))

    assert first is second
    assert len(cache) == 1
    assert project_builder.path("src/item.ts") in cache


def test_open_raises_for_missing_file(project_builder: ProjectBuilder) -> None:
    with pytest.raises(ParseError):
        ModuleCache().open(project_builder.path("src/missing.ts"))


def test_open_raises_for_invalid_utf8(project_builder: ProjectBuilder) -> None:
    target = project_builder.path("src/binary.ts")
    target.parent.mkdir(parents=True)
    target.write_bytes(b"export const x = '\xff';\n")

    with pytest.raises(ParseError) as excinfo:
        ModuleCache().open(target)

    assert "UTF-8" in str(excinfo.value)


def test_resolve_import_candidates(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "src/handler.ts": "export {};\n",
            "src/models.ts": "export {};\n",
            "src/view.tsx": "export {};\n",
            "src/shared/index.ts": "export {};\n",
        }
    )
    cache = ModuleCache()
    module = cache.open(project_builder.path("src/handler.ts"))
    src = project_builder.path("src").resolve()

    assert cache.resolve_import(module, "./models") == src / "models.ts"
    assert cache.resolve_import(module, "./view") == src / "view.tsx"
    assert cache.resolve_import(module, "./shared") == src / "shared" / "index.ts"
    assert cache.resolve_import(module, "./models.ts") == src / "models.ts"
