from __future__ import annotations

from typing import Any, Dict, List

from pydantic import PlainValidator
from pydantic_core import PydanticCustomError
from typing_extensions import Annotated

from ..core.fields import ColumnDef, EntityDef, InputField, any_of, opt


def _only_true(value: Any) -> bool:
    if value is True:
        return True
    raise PydanticCustomError('true_expected', 'Input should be true')


TrueOnly = Annotated[bool, PlainValidator(_only_true)]


def _orderable(col: ColumnDef) -> bool:
    """Columns with a min/max: everything except lists and JSON."""
    return not col.is_list and not col.is_json


class AggregateComposer:
    """Declares order-by inputs and aggregate selectors of an entity."""

    def __init__(self, registry: Any):
        self.registry = registry
        self.names = registry.names

    def declare(self, entity: EntityDef) -> None:
        r, n, e = self.registry, self.names, entity.name
        numeric = bool(entity.numeric_columns)
        r.declare_model(n.order_by_with_relation(e), lambda: self.order_by_with_relation(entity))
        r.declare_model(n.order_by_with_aggregation(e), lambda: self.order_by_with_aggregation(entity))
        r.declare_model(n.order_by_relation_aggregate(e), lambda: {'_count': opt(self._sort_order())})

        r.declare_model(n.order_by_aggregate(e, 'count'), lambda: self._sort_fields(entity.columns))
        r.declare_model(n.order_by_aggregate(e, 'max'), lambda: self._sort_fields(filter(_orderable, entity.columns)))
        r.declare_model(n.order_by_aggregate(e, 'min'), lambda: self._sort_fields(filter(_orderable, entity.columns)))
        r.declare_model(n.aggregate_input(e, 'count'), lambda: self._count_selector(entity))
        r.declare_model(n.aggregate_input(e, 'max'), lambda: self._true_fields(filter(_orderable, entity.columns)))
        r.declare_model(n.aggregate_input(e, 'min'), lambda: self._true_fields(filter(_orderable, entity.columns)))
        if numeric:
            for op in ('avg', 'sum'):
                r.declare_model(n.order_by_aggregate(e, op), lambda: self._sort_fields(entity.numeric_columns))
                r.declare_model(n.aggregate_input(e, op), lambda: self._true_fields(entity.numeric_columns))

    def _sort_order(self) -> Any:
        return self.registry.value_type('SortOrder')

    def _column_order(self, col: ColumnDef) -> Any:
        if col.nullable:
            return any_of(self._sort_order(), self.registry.ref('SortOrderInput'))
        return self._sort_order()

    def _sort_fields(self, columns) -> Dict[str, InputField]:
        return {c.name: opt(self._sort_order()) for c in columns}

    def _true_fields(self, columns) -> Dict[str, InputField]:
        return {c.name: opt(TrueOnly) for c in columns}

    def _count_selector(self, entity: EntityDef) -> Dict[str, InputField]:
        fields = self._true_fields(entity.columns)
        fields['_all'] = opt(TrueOnly)
        return fields

    def order_by_with_relation(self, entity: EntityDef) -> Dict[str, InputField]:
        ref, n = self.registry.ref, self.names
        fields = {c.name: opt(self._column_order(c)) for c in entity.columns}
        for rel in entity.relations:
            if rel.many:
                fields[rel.name] = opt(ref(n.order_by_relation_aggregate(rel.target), relation=True))
            else:
                fields[rel.name] = opt(ref(n.order_by_with_relation(rel.target), relation=True))
        return fields

    def order_by_with_aggregation(self, entity: EntityDef) -> Dict[str, InputField]:
        ref, n, e = self.registry.ref, self.names, entity.name
        fields = {c.name: opt(self._column_order(c)) for c in entity.columns}
        ops: List[str] = ['count', 'avg', 'max', 'min', 'sum'] if entity.numeric_columns else ['count', 'max', 'min']
        for op in ops:
            fields[f"_{op}"] = opt(ref(n.order_by_aggregate(e, op)))
        return fields
