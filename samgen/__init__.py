"""Generate SAM templates, shared types and an HTTP client from annotated handlers."""

__version__ = "0.1.0"

__all__ = ["__version__"]
