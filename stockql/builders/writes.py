"""Create and update inputs.

Checked inputs write relations through nested operations
(``creator: {connect: {id}}``); unchecked inputs take raw foreign-key
columns instead. Payloads nested under a relation omit the back-reference,
which is what the ``...Without<Relation>...`` families are for:
``SessionCreateWithoutUserInput`` is a Session created from inside a User.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import StrictBool

from ..core.fields import ColumnDef, EntityDef, InputField, RelationDef, any_of, one_or_many, opt, req
from ..core.json_values import JsonWriteValue, NullableJsonWriteValue


class WriteInputComposer:
    def __init__(self, registry: Any):
        self.registry = registry
        self.names = registry.names
        self.ops = registry.update_ops

    # --- declaration ----------------------------------------------------------------

    def declare(self, entity: EntityDef) -> None:
        r, n, e = self.registry, self.names, entity.name
        self._create_model(n.create(e), entity, lambda: self.create_fields(entity))
        self._create_model(n.unchecked_create(e), entity, lambda: self.create_fields(entity, unchecked=True))
        self._create_model(n.create_many(e), entity, lambda: self.scalar_create_fields(entity))
        r.declare_model(n.update(e), lambda: self.update_fields(entity))
        r.declare_model(n.unchecked_update(e), lambda: self.update_fields(entity, unchecked=True))
        r.declare_model(n.update_many_mutation(e), lambda: self.scalar_update_fields(entity, with_fk=False))
        r.declare_model(n.unchecked_update_many(e), lambda: self.scalar_update_fields(entity))
        for col in entity.list_columns:
            self.ops.list_create(e, col.name, col.kind)
            self.ops.list_update(e, col.name, col.kind)
        for rel in entity.relations:
            self._declare_without(entity, rel)

    def _create_model(self, name: str, entity: EntityDef, fields: Callable[[], Dict[str, InputField]]) -> None:
        db_null = tuple(c.name for c in entity.columns if c.is_json and c.nullable)
        self.registry.declare_model(
            name,
            fields,
            rules=('json_defaults',) if db_null else (),
            class_vars={'__db_null_fields__': db_null} if db_null else None,
        )

    def _declare_without(self, entity: EntityDef, rel: RelationDef) -> None:
        r, n, e, b = self.registry, self.names, entity.name, rel.name
        self._create_model(n.create_without(e, b), entity, lambda: self.create_fields(entity, without=b))
        self._create_model(
            n.unchecked_create_without(e, b), entity, lambda: self.create_fields(entity, unchecked=True, without=b)
        )
        r.declare_model(n.update_without(e, b), lambda: self.update_fields(entity, without=b))
        r.declare_model(n.unchecked_update_without(e, b), lambda: self.update_fields(entity, unchecked=True, without=b))
        r.declare_model(
            n.create_or_connect_without(e, b),
            lambda: {'where': req(self._where_unique(e)), 'create': req(self._create_choice(e, b))},
        )
        if rel.owning:
            self._declare_to_many_side(entity, rel)
        else:
            opposite = r.entity(rel.target).relation(rel.back)
            self._declare_to_one_side(entity, rel, opposite.required)

    def _declare_to_many_side(self, entity: EntityDef, rel: RelationDef) -> None:
        """``entity`` seen as the to-many side of ``rel.target``."""
        r, n, e, b = self.registry, self.names, entity.name, rel.name
        fk = set(rel.fk_columns)
        self._create_model(n.create_many_for(e, b), entity, lambda: self.scalar_create_fields(entity, skip=fk))
        r.declare_model(
            n.create_many_envelope(e, b),
            lambda: {
                'data': req(one_or_many(r.ref(n.create_many_for(e, b)))),
                'skipDuplicates': opt(StrictBool),
            },
        )
        r.declare_model(n.create_nested_many_without(e, b), lambda: self._nested_many_create(e, b))
        r.declare_model(n.unchecked_create_nested_many_without(e, b), lambda: self._nested_many_create(e, b))
        r.declare_model(
            n.upsert_with_where_unique_without(e, b),
            lambda: {
                'where': req(self._where_unique(e)),
                'update': req(self._update_choice(e, b)),
                'create': req(self._create_choice(e, b)),
            },
        )
        r.declare_model(
            n.update_with_where_unique_without(e, b),
            lambda: {'where': req(self._where_unique(e)), 'data': req(self._update_choice(e, b))},
        )
        r.declare_model(
            n.unchecked_update_many_without(e, b), lambda: self.scalar_update_fields(entity, skip=fk)
        )
        r.declare_model(
            n.update_many_with_where_without(e, b),
            lambda: {
                'where': req(r.ref(n.scalar_where(e))),
                'data': req(any_of(r.ref(n.update_many_mutation(e)), r.ref(n.unchecked_update_many_without(e, b)))),
            },
        )
        r.declare_model(n.update_many_without_nested(e, b), lambda: self._nested_many_update(e, b))
        r.declare_model(n.unchecked_update_many_without_nested(e, b), lambda: self._nested_many_update(e, b))

    def _declare_to_one_side(self, entity: EntityDef, rel: RelationDef, required: bool) -> None:
        """``entity`` seen as the to-one side of ``rel.target``."""
        r, n, e, b = self.registry, self.names, entity.name, rel.name
        r.declare_model(
            n.create_nested_one_without(e, b),
            lambda: {
                'create': opt(self._create_choice(e, b)),
                'connectOrCreate': opt(r.ref(n.create_or_connect_without(e, b))),
                'connect': opt(self._where_unique(e)),
            },
        )
        r.declare_model(
            n.upsert_without(e, b),
            lambda: {
                'update': req(self._update_choice(e, b)),
                'create': req(self._create_choice(e, b)),
                'where': opt(r.ref(n.where(e))),
            },
        )
        r.declare_model(
            n.update_to_one_with_where_without(e, b),
            lambda: {'where': opt(r.ref(n.where(e))), 'data': req(self._update_choice(e, b))},
        )
        if required:
            r.declare_model(n.update_one_required_without_nested(e, b), lambda: self._nested_one_update(e, b, False))
        else:
            r.declare_model(n.update_one_without_nested(e, b), lambda: self._nested_one_update(e, b, True))

    # --- nested operation bodies ----------------------------------------------------

    def _where_unique(self, entity: str) -> Any:
        return self.registry.ref(self.names.where_unique(entity))

    def _create_choice(self, entity: str, without: str) -> Any:
        ref, n = self.registry.ref, self.names
        return any_of(ref(n.create_without(entity, without)), ref(n.unchecked_create_without(entity, without)))

    def _update_choice(self, entity: str, without: str) -> Any:
        ref, n = self.registry.ref, self.names
        return any_of(ref(n.update_without(entity, without)), ref(n.unchecked_update_without(entity, without)))

    def _nested_many_create(self, e: str, b: str) -> Dict[str, InputField]:
        ref, n = self.registry.ref, self.names
        return {
            'create': opt(one_or_many(self._create_choice(e, b))),
            'connectOrCreate': opt(one_or_many(ref(n.create_or_connect_without(e, b)))),
            'createMany': opt(ref(n.create_many_envelope(e, b))),
            'connect': opt(one_or_many(self._where_unique(e))),
        }

    def _nested_many_update(self, e: str, b: str) -> Dict[str, InputField]:
        ref, n = self.registry.ref, self.names
        unique_list = one_or_many(self._where_unique(e))
        fields = self._nested_many_create(e, b)
        fields.update({
            'upsert': opt(one_or_many(ref(n.upsert_with_where_unique_without(e, b)))),
            'set': opt(unique_list),
            'disconnect': opt(unique_list),
            'delete': opt(unique_list),
            'update': opt(one_or_many(ref(n.update_with_where_unique_without(e, b)))),
            'updateMany': opt(one_or_many(ref(n.update_many_with_where_without(e, b)))),
            'deleteMany': opt(one_or_many(ref(n.scalar_where(e)))),
        })
        # keep the conventional key order
        order = ('create', 'connectOrCreate', 'upsert', 'createMany', 'set', 'disconnect',
                 'delete', 'connect', 'update', 'updateMany', 'deleteMany')
        return {k: fields[k] for k in order}

    def _nested_one_update(self, e: str, b: str, optional: bool) -> Dict[str, InputField]:
        ref, n = self.registry.ref, self.names
        fields = {
            'create': opt(self._create_choice(e, b)),
            'connectOrCreate': opt(ref(n.create_or_connect_without(e, b))),
            'upsert': opt(ref(n.upsert_without(e, b))),
        }
        if optional:
            detach = any_of(StrictBool, ref(n.where(e)))
            fields['disconnect'] = opt(detach)
            fields['delete'] = opt(detach)
        fields['connect'] = opt(self._where_unique(e))
        fields['update'] = opt(any_of(
            ref(n.update_to_one_with_where_without(e, b)),
            ref(n.update_without(e, b)),
            ref(n.unchecked_update_without(e, b)),
        ))
        return fields

    # --- field sets -----------------------------------------------------------------

    def create_column(self, entity: EntityDef, col: ColumnDef) -> InputField:
        if col.is_list:
            value = self.registry.value_type(col.kind)
            return opt(any_of(self.registry.ref(self.ops.list_create(entity.name, col.name, col.kind)), List[value]))
        if col.is_json:
            if col.nullable:
                return opt(NullableJsonWriteValue)
            return opt(JsonWriteValue) if col.has_default else req(JsonWriteValue)
        value = self.registry.value_type(col.kind)
        if col.nullable:
            return opt(Optional[value])
        return opt(value) if col.has_default else req(value)

    def update_column(self, entity: EntityDef, col: ColumnDef) -> InputField:
        if col.is_list:
            value = self.registry.value_type(col.kind)
            return opt(any_of(self.registry.ref(self.ops.list_update(entity.name, col.name, col.kind)), List[value]))
        if col.is_json:
            return opt(NullableJsonWriteValue if col.nullable else JsonWriteValue)
        value = self.registry.value_type(col.kind)
        ann = any_of(value, self.registry.ref(self.ops.scalar(col.kind, col.nullable)))
        return opt(Optional[ann] if col.nullable else ann)

    def _columns(self, entity: EntityDef, unchecked: bool, without: Optional[str]) -> Iterable[ColumnDef]:
        skip = set()
        if without is not None:
            skip = set(entity.relation(without).fk_columns)
        for col in entity.columns:
            if col.relation is not None and not unchecked:
                continue
            if col.name in skip:
                continue
            yield col

    def create_fields(self, entity: EntityDef, *, unchecked: bool = False, without: Optional[str] = None) -> Dict[str, InputField]:
        ref, n = self.registry.ref, self.names
        fields = {c.name: self.create_column(entity, c) for c in self._columns(entity, unchecked, without)}
        for rel in entity.relations:
            if rel.name == without:
                continue
            if rel.owning:
                if unchecked:
                    continue
                ann = ref(n.create_nested_one_without(rel.target, rel.back), relation=True)
                fields[rel.name] = req(ann) if rel.required else opt(ann)
            else:
                nested = n.unchecked_create_nested_many_without if unchecked else n.create_nested_many_without
                fields[rel.name] = opt(ref(nested(rel.target, rel.back), relation=True))
        return fields

    def update_fields(self, entity: EntityDef, *, unchecked: bool = False, without: Optional[str] = None) -> Dict[str, InputField]:
        ref, n = self.registry.ref, self.names
        fields = {c.name: self.update_column(entity, c) for c in self._columns(entity, unchecked, without)}
        for rel in entity.relations:
            if rel.name == without:
                continue
            if rel.owning:
                if unchecked:
                    continue
                nested = n.update_one_required_without_nested if rel.required else n.update_one_without_nested
            else:
                nested = n.unchecked_update_many_without_nested if unchecked else n.update_many_without_nested
            fields[rel.name] = opt(ref(nested(rel.target, rel.back), relation=True))
        return fields

    def scalar_create_fields(self, entity: EntityDef, skip: Iterable[str] = ()) -> Dict[str, InputField]:
        skipped = set(skip)
        return {c.name: self.create_column(entity, c) for c in entity.columns if c.name not in skipped}

    def scalar_update_fields(self, entity: EntityDef, *, with_fk: bool = True, skip: Iterable[str] = ()) -> Dict[str, InputField]:
        skipped = set(skip)
        return {
            c.name: self.update_column(entity, c)
            for c in entity.columns
            if c.name not in skipped and (with_fk or c.relation is None)
        }
