"""Projection (select/include) schemas and query argument envelopes."""
from __future__ import annotations

from typing import Any, Dict

from pydantic import Field, StrictBool, StrictInt
from typing_extensions import Annotated

from ..core.fields import EntityDef, InputField, any_of, one_or_many, opt, req
from .aggregates import TrueOnly

NonNegativeStrictInt = Annotated[StrictInt, Field(ge=0)]

FIND_MANY_OPERATIONS = ('FindFirst', 'FindFirstOrThrow', 'FindMany')
FIND_UNIQUE_OPERATIONS = ('FindUnique', 'FindUniqueOrThrow')


class ProjectionComposer:
    def __init__(self, registry: Any):
        self.registry = registry
        self.names = registry.names

    def declare(self, entity: EntityDef) -> None:
        r, n, e = self.registry, self.names, entity.name
        r.declare_model(n.select(e), lambda: self.select_fields(entity))
        if entity.relations:
            r.declare_model(n.include(e), lambda: self.include_fields(entity))
        r.declare_model(n.args(e), lambda: self._projection(entity), rules=('projection',))
        if entity.to_many:
            r.declare_model(
                n.count_output_select(e), lambda: {rel.name: opt(StrictBool) for rel in entity.to_many}
            )
            r.declare_model(n.count_output_args(e), lambda: {'select': opt(r.ref(n.count_output_select(e)))})
        for op in FIND_MANY_OPERATIONS:
            self._args(entity, op, lambda: self.find_many_fields(entity))
        for op in FIND_UNIQUE_OPERATIONS:
            self._args(entity, op, lambda: {'where': req(r.ref(n.where_unique(e)))})
        self._args(entity, 'Create', lambda: {
            'data': req(any_of(r.ref(n.create(e)), r.ref(n.unchecked_create(e)))),
        })
        self._args(entity, 'Upsert', lambda: {
            'where': req(r.ref(n.where_unique(e))),
            'create': req(any_of(r.ref(n.create(e)), r.ref(n.unchecked_create(e)))),
            'update': req(any_of(r.ref(n.update(e)), r.ref(n.unchecked_update(e)))),
        })
        self._args(entity, 'Delete', lambda: {'where': req(r.ref(n.where_unique(e)))})
        self._args(entity, 'Update', lambda: {
            'data': req(any_of(r.ref(n.update(e)), r.ref(n.unchecked_update(e)))),
            'where': req(r.ref(n.where_unique(e))),
        })
        r.declare_model(n.operation_args(e, 'CreateMany'), lambda: {
            'data': req(one_or_many(r.ref(n.create_many(e)))),
            'skipDuplicates': opt(StrictBool),
        })
        r.declare_model(n.operation_args(e, 'UpdateMany'), lambda: {
            'data': req(any_of(r.ref(n.update_many_mutation(e)), r.ref(n.unchecked_update_many(e)))),
            'where': opt(r.ref(n.where(e))),
        })
        r.declare_model(n.operation_args(e, 'DeleteMany'), lambda: {'where': opt(r.ref(n.where(e)))})
        r.declare_model(n.operation_args(e, 'Aggregate'), lambda: self.aggregate_fields(entity))
        r.declare_model(n.operation_args(e, 'GroupBy'), lambda: self.group_by_fields(entity))

    def _args(self, entity: EntityDef, operation: str, body) -> None:
        def fields() -> Dict[str, InputField]:
            out = self._projection(entity)
            out.update(body())
            return out

        self.registry.declare_model(self.names.operation_args(entity.name, operation), fields, rules=('projection',))

    def _projection(self, entity: EntityDef) -> Dict[str, InputField]:
        ref, n = self.registry.ref, self.names
        fields = {'select': opt(ref(n.select(entity.name)))}
        if entity.relations:
            fields['include'] = opt(ref(n.include(entity.name)))
        return fields

    def _relation_projection(self, entity: EntityDef) -> Dict[str, InputField]:
        ref, n = self.registry.ref, self.names
        fields: Dict[str, InputField] = {}
        for rel in entity.relations:
            if rel.many:
                target = n.operation_args(rel.target, 'FindMany')
            else:
                target = n.args(rel.target)
            fields[rel.name] = opt(any_of(StrictBool, ref(target, relation=True)))
        if entity.to_many:
            fields['_count'] = opt(any_of(StrictBool, ref(n.count_output_args(entity.name))))
        return fields

    def select_fields(self, entity: EntityDef) -> Dict[str, InputField]:
        fields = {c.name: opt(StrictBool) for c in entity.columns}
        fields.update(self._relation_projection(entity))
        return fields

    def include_fields(self, entity: EntityDef) -> Dict[str, InputField]:
        return self._relation_projection(entity)

    def _paging(self, entity: EntityDef) -> Dict[str, InputField]:
        return {
            'cursor': opt(self.registry.ref(self.names.where_unique(entity.name))),
            'take': opt(StrictInt),
            'skip': opt(NonNegativeStrictInt),
        }

    def find_many_fields(self, entity: EntityDef) -> Dict[str, InputField]:
        ref, n, e = self.registry.ref, self.names, entity.name
        fields = {
            'where': opt(ref(n.where(e))),
            'orderBy': opt(one_or_many(ref(n.order_by_with_relation(e)))),
        }
        fields.update(self._paging(entity))
        fields['distinct'] = opt(one_or_many(self.registry.scalar_field_type(e)))
        return fields

    def _aggregate_selectors(self, entity: EntityDef) -> Dict[str, InputField]:
        ref, n, e = self.registry.ref, self.names, entity.name
        fields = {'_count': opt(any_of(TrueOnly, ref(n.aggregate_input(e, 'count'))))}
        ops = ('avg', 'sum', 'min', 'max') if entity.numeric_columns else ('min', 'max')
        for op in ops:
            fields[f"_{op}"] = opt(ref(n.aggregate_input(e, op)))
        return fields

    def aggregate_fields(self, entity: EntityDef) -> Dict[str, InputField]:
        ref, n, e = self.registry.ref, self.names, entity.name
        fields = {
            'where': opt(ref(n.where(e))),
            'orderBy': opt(one_or_many(ref(n.order_by_with_relation(e)))),
        }
        fields.update(self._paging(entity))
        fields.update(self._aggregate_selectors(entity))
        return fields

    def group_by_fields(self, entity: EntityDef) -> Dict[str, InputField]:
        ref, n, e = self.registry.ref, self.names, entity.name
        fields = {
            'where': opt(ref(n.where(e))),
            'orderBy': opt(one_or_many(ref(n.order_by_with_aggregation(e)))),
            'by': req(one_or_many(self.registry.scalar_field_type(e))),
            'having': opt(ref(n.scalar_where_with_aggregates(e))),
            'take': opt(StrictInt),
            'skip': opt(NonNegativeStrictInt),
        }
        fields.update(self._aggregate_selectors(entity))
        return fields
