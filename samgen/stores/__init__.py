"""Run-scoped stores shared by the analyzers and generators."""

from .module_cache import ModuleCache
from .type_table import TypeDefinition, TypeStatus, TypeTable

__all__ = ["ModuleCache", "TypeDefinition", "TypeStatus", "TypeTable"]
