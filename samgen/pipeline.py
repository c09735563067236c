"""End-to-end regeneration run: analyse everything, then write."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .analyzers.handlers import HandlerExtractor
from .analyzers.resolver import TypeResolver
from .config import SamGenConfig
from .errors import ConfigError
from .generators import (
    BarrelGenerator,
    ClientServiceGenerator,
    DescriptorMerger,
    GeneratedFile,
    GenerationContext,
    Generator,
    TypeDeclarationGenerator,
    dump_template,
    load_template,
)
from .logging import get_logger
from .models import FunctionDescriptor
from .scanner import SourceScanner
from .stores import ModuleCache, TypeTable

OUTPUT_SUFFIX = ".ts"


@dataclass
class RunResult:
    """Summary of a completed run."""

    descriptors: List[FunctionDescriptor] = field(default_factory=list)
    types: List[str] = field(default_factory=list)
    written: List[Path] = field(default_factory=list)
    template: Optional[Path] = None


class Pipeline:
    """Coordinates scanning, extraction, resolution, generation and output."""

    def __init__(self, generators: Optional[Iterable[Generator]] = None) -> None:
        self._generators = list(generators) if generators is not None else None
        self.logger = get_logger("pipeline")

    def run(self, config: SamGenConfig) -> RunResult:
        """Regenerate the template and the output directory for ``config``."""
        self.logger.info("Starting samgen run in %s", config.root)
        compiler_options = _load_compiler_options(config.tsconfig)
        document = load_template(_read_text(config.template))

        modules = ModuleCache()
        table = TypeTable()
        resolver = TypeResolver(modules, table)
        extractor = HandlerExtractor(modules, resolver)
        scanner = SourceScanner(exclude=config.exclude, skip_dirs=[config.output])

        sources = scanner.scan(config.root)
        self.logger.debug("Scanner discovered %d source files", len(sources))
        descriptors: List[FunctionDescriptor] = []
        for path in sources:
            descriptors.extend(extractor.extract(path))
        _warn_duplicates(descriptors, self.logger)
        self.logger.info(
            "Extracted %d handlers referencing %d types", len(descriptors), len(table.rendered())
        )

        context = GenerationContext(descriptors=descriptors, types=table)
        files = self._generate(context)
        merged = DescriptorMerger(config.root, compiler_options).merge(document, descriptors)
        template_text = dump_template(merged)

        written = self._write_output(config.output, files)
        config.template.write_text(template_text, encoding="utf-8")
        self.logger.info("Wrote %d files to %s and updated %s", len(written), config.output, config.template)

        return RunResult(
            descriptors=descriptors,
            types=[definition.name for definition in table.rendered()],
            written=written,
            template=config.template,
        )

    def _generate(self, context: GenerationContext) -> List[GeneratedFile]:
        generators = self._generators
        if generators is None:
            generators = [
                TypeDeclarationGenerator(),
                ClientServiceGenerator(),
                BarrelGenerator(),
            ]
        files: Dict[str, GeneratedFile] = {}
        for generator in generators:
            for generated in generator.generate(context):
                if generated.name in files:
                    self.logger.warning("Output %s produced twice; keeping the last one", generated.name)
                files[generated.name] = generated
        return list(files.values())

    def _write_output(self, output: Path, files: Sequence[GeneratedFile]) -> List[Path]:
        output.mkdir(parents=True, exist_ok=True)
        for stale in sorted(output.iterdir()):
            if stale.is_file() and stale.suffix == OUTPUT_SUFFIX:
                stale.unlink()
        written: List[Path] = []
        for generated in files:
            target = output / generated.name
            target.write_text(generated.content, encoding="utf-8")
            written.append(target)
        return written


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to read {path}: {exc}") from exc


def _load_compiler_options(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(_read_text(path))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if not isinstance(data, dict):
        return {}
    options = data.get("compilerOptions")
    return options if isinstance(options, dict) else {}


def _warn_duplicates(descriptors: Sequence[FunctionDescriptor], logger: Any) -> None:
    seen: Dict[str, Path] = {}
    for descriptor in descriptors:
        previous = seen.get(descriptor.name)
        if previous is not None:
            logger.warning(
                "Logical name %s declared in %s and %s; the later entry wins",
                descriptor.name,
                previous,
                descriptor.path,
            )
        seen[descriptor.name] = descriptor.path


__all__ = ["Pipeline", "RunResult"]
