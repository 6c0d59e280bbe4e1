"""Record shapes for each entity.

``User`` validates a full row; ``UserPartial`` makes every column optional;
``UserOptionalDefaults`` relaxes columns with a default. The relation
variants embed related records: ``UserWithRelations.sessions`` is a list of
``SessionWithRelations``.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..core.fields import ColumnDef, EntityDef, InputField, opt, req
from ..core.json_values import JsonValue


class EntitySchemaBuilder:
    def __init__(self, registry: Any):
        self.registry = registry
        self.names = registry.names
        self.config = registry.config

    def declare(self, entity: EntityDef) -> None:
        names, cfg, e = self.names, self.config, entity.name
        self._declare(e, entity, 'base', None)
        if cfg.create_partial_types:
            self._declare(names.partial(e), entity, 'partial', None)
        if cfg.create_optional_defaults_types:
            self._declare(names.optional_defaults(e), entity, 'defaults', None)
        if not cfg.create_relation_values_types or not entity.relations:
            return
        self._declare(names.with_relations(e), entity, 'base', 'full')
        if cfg.create_optional_defaults_types:
            self._declare(names.optional_defaults_with_relations(e), entity, 'defaults', 'full')
        if cfg.create_partial_types:
            self._declare(names.partial_with_relations(e), entity, 'partial', 'partial')
            self._declare(names.with_partial_relations(e), entity, 'base', 'partial')
            if cfg.create_optional_defaults_types:
                self._declare(names.optional_defaults_with_partial_relations(e), entity, 'defaults', 'partial')

    def _declare(self, name: str, entity: EntityDef, columns: str, relations: Optional[str]) -> None:
        self.registry.declare_model(
            name,
            lambda: self._fields(entity, columns, relations),
            shape='entity',
            doc=entity.doc,
        )

    def column_type(self, col: ColumnDef) -> Any:
        if col.is_json:
            value = JsonValue
        else:
            value = self.registry.value_type(col.kind)
        if col.is_list:
            value = List[value]
        return Optional[value] if col.nullable else value

    def _fields(self, entity: EntityDef, columns: str, relations: Optional[str]) -> Dict[str, InputField]:
        fields: Dict[str, InputField] = {}
        for col in entity.columns:
            ann = self.column_type(col)
            if columns == 'partial':
                fields[col.name] = opt(ann)
            elif columns == 'defaults' and col.has_default:
                fields[col.name] = opt(ann)
            elif col.nullable and self.config.write_nullish_in_model_types:
                fields[col.name] = opt(ann)
            else:
                fields[col.name] = req(ann)
        if relations is not None:
            self._relation_fields(fields, entity, partial=(relations == 'partial'))
        return fields

    def _relation_fields(self, fields: Dict[str, InputField], entity: EntityDef, partial: bool) -> None:
        for rel in entity.relations:
            if partial:
                target = self.names.partial_with_relations(rel.target)
                if target not in self.registry:
                    target = self.names.partial(rel.target)
            else:
                target = self.names.with_relations(rel.target)
                if target not in self.registry:
                    target = rel.target
            ref = self.registry.ref(target, relation=True)
            if rel.many:
                ann = List[ref]
            elif rel.required:
                ann = ref
            else:
                ann = Optional[ref]
            fields[rel.name] = opt(ann) if partial else req(ann)
