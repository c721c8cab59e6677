"""
Infrastructure package for querydesk.

Centralizes pool construction and the handle registry. Keep this layer
focused on resource management; query semantics live in the operations.
"""

from querydesk.infrastructure.pool_factory import make_pool
from querydesk.infrastructure.registry import ConnectionRegistry, RegistryEntry

__all__ = [
    "ConnectionRegistry",
    "RegistryEntry",
    "make_pool",
]
