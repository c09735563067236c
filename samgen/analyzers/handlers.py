"""Extraction of function descriptors from annotated handler classes."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from ..logging import get_logger
from ..models import (
    Attribute,
    BindingSource,
    Declaration,
    DeclarationKind,
    ExportedBinding,
    FunctionDescriptor,
    Parameter,
    ParameterBinding,
    SourceModule,
    UnknownValue,
)
from ..stores.module_cache import ModuleCache
from .literals import LiteralEvaluator
from .resolver import TypeResolver

LAMBDA_ATTRIBUTE = "LambdaFunction"
ENTRY_METHOD = "handle"
HANDLER_SUFFIX = "Handler"
HTTP_EVENT_TYPE = "Api"

BINDING_ATTRIBUTES = {
    "FromBody": BindingSource.BODY,
    "FromQuery": BindingSource.QUERY,
    "FromPath": BindingSource.PATH,
}

logger = get_logger("handlers")


class HandlerExtractor:
    """Builds a :class:`FunctionDescriptor` for every exported Lambda handler."""

    def __init__(
        self,
        modules: ModuleCache,
        resolver: TypeResolver,
        evaluator: LiteralEvaluator | None = None,
    ) -> None:
        self.modules = modules
        self.resolver = resolver
        self.evaluator = evaluator or LiteralEvaluator()

    def extract(self, path: Path) -> List[FunctionDescriptor]:
        module = self.modules.open(path)
        descriptors: List[FunctionDescriptor] = []
        for binding in module.exports:
            declaration = module.find_declaration(binding.constructor, (DeclarationKind.CLASS,))
            if declaration is None:
                continue
            attribute = declaration.attribute(LAMBDA_ATTRIBUTE)
            if attribute is None:
                continue
            descriptor = self._describe(module, binding, declaration, attribute)
            if descriptor is not None:
                descriptors.append(descriptor)
        return descriptors

    def _describe(
        self,
        module: SourceModule,
        binding: ExportedBinding,
        declaration: Declaration,
        attribute: Attribute,
    ) -> Optional[FunctionDescriptor]:
        if attribute.arguments:
            metadata = self.evaluator.evaluate(attribute.arguments[0], module)
        else:
            metadata = UnknownValue("no metadata argument")
        descriptor = FunctionDescriptor(
            name=declaration.name,
            path=module.path,
            handler=binding.name,
            metadata=metadata,
        )
        self._read_route(descriptor)

        method = declaration.method(ENTRY_METHOD)
        if method is None:
            logger.warning(
                "Skipping %s in %s: no '%s' method",
                declaration.name,
                module.path,
                ENTRY_METHOD,
            )
            return None

        scope = [param.name for param in declaration.type_parameters]
        for parameter in method.parameters:
            descriptor.parameters.append(
                self._bind(parameter, module, descriptor, scope)
            )

        for base in declaration.heritage:
            if base.name.endswith(HANDLER_SUFFIX) and base.type_arguments:
                descriptor.return_type = self.resolver.resolve_type(
                    base.type_arguments[0], module, descriptor.add_import, scope
                )
                break

        logger.debug(
            "Extracted %s (%s %s) from %s",
            descriptor.name,
            descriptor.http_method or "-",
            descriptor.http_path or "-",
            module.path,
        )
        return descriptor

    def _read_route(self, descriptor: FunctionDescriptor) -> None:
        events = descriptor.metadata.get("Properties").get("Events")
        for event_name, event in events.items():
            if event.get("Type").as_str() != HTTP_EVENT_TYPE:
                continue
            properties = event.get("Properties")
            if descriptor.has_route:
                logger.warning(
                    "%s declares more than one Api event; using '%s'",
                    descriptor.name,
                    event_name,
                )
            descriptor.http_path = properties.get("Path").as_str()
            descriptor.http_method = properties.get("Method").as_str()

    def _bind(
        self,
        parameter: Parameter,
        module: SourceModule,
        descriptor: FunctionDescriptor,
        scope: List[str],
    ) -> ParameterBinding:
        source = BindingSource.QUERY
        key = parameter.name
        for attribute in parameter.attributes:
            if attribute.name not in BINDING_ATTRIBUTES:
                continue
            source = BINDING_ATTRIBUTES[attribute.name]
            if attribute.arguments:
                wire_name = self.evaluator.evaluate(attribute.arguments[0], module).as_str()
                if wire_name:
                    key = wire_name
            break
        type_text = self.resolver.resolve_type(
            parameter.type, module, descriptor.add_import, scope
        )
        return ParameterBinding(source=source, type=type_text, name=parameter.name, key=key)


__all__ = ["HandlerExtractor", "LAMBDA_ATTRIBUTE"]
