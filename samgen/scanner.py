"""Deterministic discovery of TypeScript handler sources."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

_EXCLUDED_DIRS = {
    "dist",
    "node_modules",
    ".aws",
    ".aws-sam",
    ".git",
    ".hg",
    ".svn",
    ".idea",
    ".vscode",
    ".cache",
    "__pycache__",
    ".pytest_cache",
}

_SOURCE_SUFFIXES = (".ts", ".tsx")


@dataclass
class ExcludeRule:
    """Glob pattern from the ``exclude`` list in samgen.json."""

    pattern: str
    directory_only: bool
    anchored: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        for part in rel_path.split("/"):
            if fnmatchcase(part, self.pattern):
                return True
        return False


def build_exclude_rule(pattern: str) -> ExcludeRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return ExcludeRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        has_slash="/" in pattern,
    )


def _is_excluded(rel_path: str, is_dir: bool, rules: Sequence[ExcludeRule]) -> bool:
    return any(rule.matches(rel_path, is_dir) for rule in rules)


class SourceScanner:
    """Walks a project tree and yields handler candidates in sorted order."""

    def __init__(
        self,
        exclude: Iterable[str] = (),
        skip_dirs: Iterable[Path] = (),
    ) -> None:
        self.rules: List[ExcludeRule] = []
        for pattern in exclude:
            rule = build_exclude_rule(pattern)
            if rule is not None:
                self.rules.append(rule)
        self.skip_dirs = {Path(path).expanduser().resolve() for path in skip_dirs}

    def scan(self, root: Path) -> List[Path]:
        """Return every ``.ts``/``.tsx`` file below ``root``."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")
        return list(self._iter_files(root_path))

    def _iter_files(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept = []
            for name in sorted(dirnames):
                if name in _EXCLUDED_DIRS:
                    continue
                if (current_dir / name).resolve() in self.skip_dirs:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if _is_excluded(rel_path, True, self.rules):
                    continue
                kept.append(name)
            dirnames[:] = kept

            for filename in sorted(filenames):
                if not filename.endswith(_SOURCE_SUFFIXES):
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if _is_excluded(rel_path, False, self.rules):
                    continue
                yield current_dir / filename


__all__ = ["ExcludeRule", "SourceScanner", "build_exclude_rule"]
