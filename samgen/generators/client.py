"""Emitter for the typed Angular client service."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List

from ..analyzers.tree_sitter import quote_string
from ..logging import get_logger
from ..models import BindingSource, FunctionDescriptor
from .base import GeneratedFile, GenerationContext, Generator
from .naming import client_method_name, is_identifier

SERVICE_FILE = "api.service.ts"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")
_BODY_METHODS = {"post", "put"}

logger = get_logger("client")


@dataclass(frozen=True)
class ClientMethod:
    """Template view of one generated service method."""

    name: str
    signature: str
    url: str
    verb: str
    return_type: str
    arguments: str
    query: str
    sends_body: bool


class ClientServiceGenerator(Generator):
    """Builds ``ApiService`` with one method per routed handler."""

    def generate(self, context: GenerationContext) -> List[GeneratedFile]:
        methods = [self.build_method(descriptor) for descriptor in context.routed()]
        content = self.render(
            "api.service.ts.j2",
            imports=context.referenced_types(),
            methods=methods,
        )
        return [GeneratedFile(name=SERVICE_FILE, content=content)]

    def build_method(self, descriptor: FunctionDescriptor) -> ClientMethod:
        verb = (descriptor.http_method or "").lower()
        sends_body = verb in _BODY_METHODS

        path_names: Dict[str, str] = {
            binding.key: binding.name for binding in descriptor.bindings(BindingSource.PATH)
        }

        def substitute(match: re.Match) -> str:
            placeholder = match.group(1)
            identifier = path_names.get(placeholder)
            if identifier is None:
                logger.warning(
                    "%s: no path parameter bound to '{%s}'", descriptor.name, placeholder
                )
                identifier = placeholder
            return f"${{encodeURIComponent({identifier})}}"

        url = _PLACEHOLDER.sub(substitute, descriptor.http_path or "")

        if sends_body:
            bodies = descriptor.bindings(BindingSource.BODY)
            payload = bodies[0].name if bodies else "null"
            arguments = f"url, {payload}, options"
        else:
            arguments = "url, options"

        return ClientMethod(
            name=client_method_name(descriptor.name),
            signature=", ".join(
                f"{binding.name}: {binding.type}" for binding in descriptor.parameters
            ),
            url=url,
            verb=verb,
            return_type=descriptor.return_type,
            arguments=arguments,
            query=", ".join(
                _query_entry(binding.key, binding.name)
                for binding in descriptor.bindings(BindingSource.QUERY)
            ),
            sends_body=sends_body,
        )


def _query_entry(key: str, identifier: str) -> str:
    if key == identifier:
        return identifier
    if is_identifier(key):
        return f"{key}: {identifier}"
    return f"{quote_string(key)}: {identifier}"


__all__ = ["ClientMethod", "ClientServiceGenerator", "SERVICE_FILE"]
