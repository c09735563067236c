"""Per-run cache of parsed source modules."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from ..analyzers.tree_sitter import TypeScriptParser
from ..errors import ParseError
from ..logging import get_logger
from ..models import SourceModule

_IMPORT_SUFFIXES = (".ts", ".tsx", ".d.ts")

logger = get_logger("modules")


class ModuleCache:
    """Parses each source file at most once for the lifetime of a run."""

    def __init__(self, parser: TypeScriptParser | None = None) -> None:
        self._parser = parser or TypeScriptParser()
        self._modules: Dict[Path, SourceModule] = {}

    def open(self, path: Path) -> SourceModule:
        """Return the module for ``path``, parsing it on first use."""
        resolved = Path(path).expanduser().resolve()
        module = self._modules.get(resolved)
        if module is not None:
            return module
        try:
            source = resolved.read_bytes()
        except OSError as exc:
            raise ParseError(resolved, exc.strerror or str(exc)) from exc
        try:
            source.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(resolved, "file is not valid UTF-8") from exc
        module = self._parser.parse(resolved, source)
        logger.debug(
            "Parsed %s (%d declarations, %d imports)",
            resolved,
            len(module.declarations),
            len(module.imports),
        )
        self._modules[resolved] = module
        return module

    def resolve_import(self, module: SourceModule, specifier: str) -> Path:
        """Map a relative import specifier to the file it names."""
        base = module.path.parent / specifier
        candidates = [Path(f"{base}{suffix}") for suffix in _IMPORT_SUFFIXES]
        candidates.extend(base / f"index{suffix}" for suffix in _IMPORT_SUFFIXES)
        if base.suffix in _IMPORT_SUFFIXES:
            candidates.insert(0, base)
        found = _first_existing(candidates)
        return (found or candidates[0]).resolve()

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, Path):
            return False
        return path.expanduser().resolve() in self._modules

    def __len__(self) -> int:
        return len(self._modules)


def _first_existing(candidates: list[Path]) -> Optional[Path]:
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


__all__ = ["ModuleCache"]
