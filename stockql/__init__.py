"""StockQL public API and lightweight lazy exports.

This __init__ avoids importing heavy submodules at import time so that the
models module can import StockQL helpers (ids, enum columns) without
building any schemas.

Exposes:
- get_active_registry, set_active_registry (without importing registry eagerly)
- Lazy attributes: SchemaRegistry, BoundSchema, RegistryConfig
- Lazy sentinels: DbNull, JsonNull, AnyNull
- enum_column (resolved lazily from .sql.enum_helpers)
"""
from __future__ import annotations

from typing import Any

_ACTIVE_REGISTRY: Any = None


def set_active_registry(registry: Any) -> None:
    global _ACTIVE_REGISTRY
    _ACTIVE_REGISTRY = registry


def get_active_registry() -> Any:
    if _ACTIVE_REGISTRY is None:
        raise RuntimeError("Active StockQL registry not set. Import stockql.schema or call set_active_registry().")
    return _ACTIVE_REGISTRY


def __getattr__(name: str):  # PEP 562 lazy exports
    import importlib as _importlib
    if name in {'registry', 'schema', 'models', 'pagination', 'ids', 'errors'}:
        return _importlib.import_module(__name__ + '.' + name)
    if name in {'SchemaRegistry', 'BoundSchema', 'ParseResult'}:
        _registry = _importlib.import_module(__name__ + '.registry')
        return getattr(_registry, name)
    if name == 'RegistryConfig':
        from .config import RegistryConfig as _RegistryConfig
        return _RegistryConfig
    if name in {'DbNull', 'JsonNull', 'AnyNull'}:
        from .core import json_values as _json_values
        return getattr(_json_values, name)
    if name in {
        'StockQLError', 'SchemaValidationError', 'SchemaNotFoundError', 'SchemaDefinitionError',
        'PaginationError', 'UpdateOperationError',
    }:
        from . import errors as _errors
        return getattr(_errors, name)
    if name in {'enum_column', 'enum_list_column'}:
        from .sql import enum_helpers as _enum_helpers
        return getattr(_enum_helpers, name)
    raise AttributeError(name)


__all__ = [
    'SchemaRegistry', 'BoundSchema', 'ParseResult', 'RegistryConfig',
    'DbNull', 'JsonNull', 'AnyNull',
    'StockQLError', 'SchemaValidationError', 'SchemaNotFoundError', 'SchemaDefinitionError', 'PaginationError',
    'UpdateOperationError',
    'enum_column', 'enum_list_column',
    'get_active_registry', 'set_active_registry',
]
