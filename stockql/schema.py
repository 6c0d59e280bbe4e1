"""Active schema module.

Importing this module builds the registry for the inventory models and
registers it as the active one. Module attributes ``<Name>Schema`` resolve to
bound validators::

    from stockql.schema import UserSchema, OrganizationCreateInputSchema

    UserSchema.parse(payload)
"""
from __future__ import annotations

from . import set_active_registry
from .config import get_config
from .models import Base
from .registry import BoundSchema, SchemaRegistry

registry = SchemaRegistry(base=Base, config=get_config())
set_active_registry(registry)


def __getattr__(name: str) -> BoundSchema:  # PEP 562
    if name.endswith('Schema') and name in registry:
        return registry.validator(name)
    raise AttributeError(name)


def __dir__():
    return sorted(list(globals()) + [f"{n}Schema" for n in registry.slot_names()])
