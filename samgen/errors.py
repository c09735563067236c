"""Error taxonomy shared by the samgen pipeline."""

from __future__ import annotations

from pathlib import Path


class SamGenError(RuntimeError):
    """Base class for every error raised by samgen."""


class ConfigError(SamGenError):
    """Raised when samgen.json, the template or the tsconfig is missing or invalid."""


class ParseError(SamGenError):
    """Raised when a source module cannot be read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to parse {path}: {reason}")
        self.path = path
        self.reason = reason


class LiteralEvaluationError(SamGenError):
    """Raised for expressions outside the supported literal subset."""

    def __init__(self, kind: str, path: Path, line: int) -> None:
        super().__init__(f"Unsupported literal expression '{kind}' at {path}:{line}")
        self.kind = kind
        self.path = path
        self.line = line


class TypeResolutionError(SamGenError):
    """Raised for type syntax the resolver cannot re-render."""

    def __init__(self, kind: str, path: Path, line: int) -> None:
        super().__init__(f"Unsupported type syntax '{kind}' at {path}:{line}")
        self.kind = kind
        self.path = path
        self.line = line


class ImportResolutionError(SamGenError):
    """Raised when a named type cannot be traced to a local declaration."""

    def __init__(self, name: str, path: Path, reason: str) -> None:
        super().__init__(f"Type '{name}' referenced from {path} left unresolved: {reason}")
        self.name = name
        self.path = path
        self.reason = reason


__all__ = [
    "ConfigError",
    "ImportResolutionError",
    "LiteralEvaluationError",
    "ParseError",
    "SamGenError",
    "TypeResolutionError",
]
