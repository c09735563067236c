"""CLI entrypoint for samgen."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import CONFIG_FILE, load_config
from .errors import SamGenError
from .logging import configure_logging
from .pipeline import Pipeline


def _build_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        prog="samgen",
        description=(
            "Regenerate the SAM template, shared types and Angular client from annotated "
            f"Lambda handlers. Settings are read from {CONFIG_FILE} in the current directory."
        ),
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for samgen."""
    parser = _build_parser()
    parser.parse_args(argv)

    configure_logging()

    try:
        config = load_config(Path.cwd())
        configure_logging(verbose=config.verbose, log_file=config.log_file)
        result = Pipeline().run(config)
    except SamGenError as exc:
        parser.exit(
            1,
            f"samgen failed: {exc}\nSet \"verbose\": true in {CONFIG_FILE} for more details.\n",
        )

    print(
        f"Generated {len(result.descriptors)} functions and {len(result.types)} types "
        f"into {_relativize(config.output)}"
    )


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
