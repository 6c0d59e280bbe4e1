from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.fields import ColumnDef, EntityDef, InputField, any_of, one_or_many, opt, req


class WhereInputComposer:
    """Declares ``WhereInput``, ``WhereUniqueInput`` and the relation filters of an entity."""

    def __init__(self, registry: Any):
        self.registry = registry
        self.names = registry.names
        self.filters = registry.filters

    def declare(self, entity: EntityDef) -> None:
        r, n, e = self.registry, self.names, entity.name
        r.declare_model(n.where(e), lambda: self.where_fields(entity, n.where(e), relations=True))
        r.declare_model(n.scalar_where(e), lambda: self.where_fields(entity, n.scalar_where(e), relations=False))
        r.declare_model(
            n.scalar_where_with_aggregates(e),
            lambda: self.where_fields(entity, n.scalar_where_with_aggregates(e), relations=False, aggregates=True),
        )
        r.declare_model(
            n.where_unique(e),
            lambda: self.where_unique_fields(entity),
            rules=('unique_where',),
            class_vars={'__unique_keys__': tuple(entity.unique_keys)},
            doc=f"Identifies one {e} by a unique key, optionally narrowed by filters.",
        )
        for key in entity.unique_keys:
            if key.compound:
                r.declare_model(
                    n.compound_unique(e, key.fields),
                    lambda key=key: {f: req(self.registry.value_type(entity.column(f).kind)) for f in key.fields},
                )
        where = lambda: r.ref(n.where(e))
        r.declare_model(n.relation_filter(e), lambda: {'is': opt(where()), 'isNot': opt(where())}, shape='strict')
        r.declare_model(
            n.nullable_relation_filter(e),
            lambda: {'is': opt(Optional[where()]), 'isNot': opt(Optional[where()])},
            shape='strict',
        )
        r.declare_model(
            n.list_relation_filter(e),
            lambda: {'every': opt(where()), 'some': opt(where()), 'none': opt(where())},
            shape='strict',
        )

    def column_filter(self, col: ColumnDef, aggregates: bool = False) -> Any:
        ref = self.registry.ref
        if col.is_list:
            return ref(self.filters.list_filter(col.kind))
        filt = ref(self.filters.filter(col.kind, nullable=col.nullable, aggregates=aggregates))
        if col.is_json:
            return filt
        ann = any_of(filt, self.registry.value_type(col.kind))
        return Optional[ann] if col.nullable else ann

    def _combinators(self, self_name: str) -> Dict[str, InputField]:
        me = self.registry.ref(self_name)
        return {'AND': opt(one_or_many(me)), 'OR': opt(one_or_many(me)), 'NOT': opt(one_or_many(me))}

    def where_fields(self, entity: EntityDef, self_name: str, relations: bool, aggregates: bool = False) -> Dict[str, InputField]:
        fields = self._combinators(self_name)
        for col in entity.columns:
            fields[col.name] = opt(self.column_filter(col, aggregates=aggregates))
        if relations:
            self._relation_filters(fields, entity)
        return fields

    def _relation_filters(self, fields: Dict[str, InputField], entity: EntityDef) -> None:
        ref, n = self.registry.ref, self.names
        for rel in entity.relations:
            if rel.many:
                fields[rel.name] = opt(ref(n.list_relation_filter(rel.target), relation=True))
            elif rel.required:
                fields[rel.name] = opt(any_of(
                    ref(n.relation_filter(rel.target), relation=True),
                    ref(n.where(rel.target), relation=True),
                ))
            else:
                fields[rel.name] = opt(Optional[any_of(
                    ref(n.nullable_relation_filter(rel.target), relation=True),
                    ref(n.where(rel.target), relation=True),
                )])

    def where_unique_fields(self, entity: EntityDef) -> Dict[str, InputField]:
        fields: Dict[str, InputField] = {}
        plain = set()
        for key in entity.unique_keys:
            if key.compound:
                fields[key.name] = opt(self.registry.ref(self.names.compound_unique(entity.name, key.fields)))
            else:
                col = entity.column(key.name)
                fields[key.name] = opt(self.registry.value_type(col.kind))
                plain.add(key.name)
        fields.update(self._combinators(self.names.where(entity.name)))
        for col in entity.columns:
            if col.name not in plain:
                fields[col.name] = opt(self.column_filter(col))
        self._relation_filters(fields, entity)
        return fields
