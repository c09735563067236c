"""Configuration loading for samgen (samgen.json)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .errors import ConfigError

CONFIG_FILE = "samgen.json"
DEFAULT_TEMPLATE = "template.yaml"
# Assigned to ``template`` when ``tsconfig`` is missing; see DESIGN.md.
TSCONFIG_FALLBACK = "tsconfig.yaml"


@dataclass
class SamGenConfig:
    """Represents the settings defined in samgen.json."""

    root: Path
    template: Path
    tsconfig: Path
    output: Path
    exclude: List[str] = field(default_factory=list)
    verbose: bool = False
    log_file: Optional[Path] = None


def load_config(directory: Path) -> SamGenConfig:
    """Load and validate samgen.json from ``directory``."""
    root = Path(directory).expanduser().resolve()
    config_file = root / CONFIG_FILE
    if not config_file.is_file():
        raise ConfigError(f'No "{CONFIG_FILE}" file found!')

    data = _read_config(config_file)

    template = _as_str(data.get("template")) or DEFAULT_TEMPLATE
    tsconfig = _as_str(data.get("tsconfig"))
    if not tsconfig:
        template = TSCONFIG_FALLBACK

    output = _as_str(data.get("output"))
    if not output:
        raise ConfigError("No output configured!")

    template_path = root / template
    if not template_path.is_file():
        raise ConfigError(f'No "{template}" file found!')

    if not tsconfig or not (root / tsconfig).is_file():
        raise ConfigError(f'No "{tsconfig or "tsconfig"}" file found!')

    log_file = _as_str(data.get("log_file"))
    return SamGenConfig(
        root=root,
        template=template_path,
        tsconfig=root / tsconfig,
        output=(root / output).resolve(),
        exclude=_as_str_list(data.get("exclude")),
        verbose=_as_bool(data.get("verbose")) or False,
        log_file=root / log_file if log_file else None,
    )


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain an object at the root")
    return loaded


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["CONFIG_FILE", "ConfigError", "SamGenConfig", "load_config"]
