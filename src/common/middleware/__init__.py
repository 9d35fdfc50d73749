"""Common middleware for Registrar."""

from .observability import StructlogContextMiddleware

__all__ = ["StructlogContextMiddleware"]
