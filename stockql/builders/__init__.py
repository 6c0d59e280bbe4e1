"""Per-entity schema composers.

Each composer declares its slots for one entity at a time; field bodies are
built only when a slot is materialized.
"""
from .aggregates import AggregateComposer
from .entity import EntitySchemaBuilder
from .projection import ProjectionComposer
from .where import WhereInputComposer
from .writes import WriteInputComposer

COMPOSERS = (
    EntitySchemaBuilder,
    WhereInputComposer,
    WriteInputComposer,
    AggregateComposer,
    ProjectionComposer,
)

__all__ = [
    'AggregateComposer',
    'EntitySchemaBuilder',
    'ProjectionComposer',
    'WhereInputComposer',
    'WriteInputComposer',
    'COMPOSERS',
]
