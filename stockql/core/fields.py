from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema
from sqlalchemy import inspect as sa_inspect
from sqlalchemy import UniqueConstraint
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import RelationshipDirection, configure_mappers
from sqlalchemy.sql import sqltypes
from typing_extensions import Annotated

from ..errors import SchemaDefinitionError
from ..naming import snake_to_camel
from .enum_utils import enum_class_of_type, enum_kind_name
from .unique import UniqueKey, UniqueKeyKind

_logger = logging.getLogger("stockql.introspection")


@dataclass
class ColumnDef:
    """Normalized column description collected from a mapped class.

    Attributes:
        key: Attribute name on the ORM class (snake_case).
        name: Wire name (lowerCamelCase).
        kind: Scalar kind name (``String``, ``Float``, ``EnumUserRole``, ...).
        nullable: Column accepts SQL NULL.
        is_list: Column stores an array of ``kind``.
        has_default: A client or server default exists, so writes may omit it.
        relation: Wire name of the owning to-one relation when this is a FK.
    """

    key: str
    name: str
    kind: str
    nullable: bool
    is_list: bool = False
    has_default: bool = False
    is_id: bool = False
    is_unique: bool = False
    enum_cls: Optional[type] = None
    relation: Optional[str] = None

    @property
    def is_json(self) -> bool:
        return self.kind == 'Json'

    @property
    def is_numeric(self) -> bool:
        return self.kind in ('Int', 'Float') and not self.is_list


@dataclass
class RelationDef:
    """One side of a relationship between two entities.

    ``back`` is the wire name of the relation on ``target`` pointing back here;
    ``fk_columns`` is non-empty only on the side owning the foreign key.
    """

    name: str
    key: str
    target: str
    many: bool
    back: str
    required: bool = False
    fk_columns: Tuple[str, ...] = ()

    @property
    def owning(self) -> bool:
        return bool(self.fk_columns)


@dataclass
class EntityDef:
    name: str
    model: Any
    columns: List[ColumnDef] = field(default_factory=list)
    relations: List[RelationDef] = field(default_factory=list)
    unique_keys: List[UniqueKey] = field(default_factory=list)
    doc: Optional[str] = None

    def column(self, name: str) -> ColumnDef:
        for col in self.columns:
            if col.name == name:
                return col
        raise KeyError(f"{self.name}.{name}")

    def relation(self, name: str) -> RelationDef:
        for rel in self.relations:
            if rel.name == name:
                return rel
        raise KeyError(f"{self.name}.{name}")

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    @property
    def numeric_columns(self) -> List[ColumnDef]:
        return [c for c in self.columns if c.is_numeric]

    @property
    def list_columns(self) -> List[ColumnDef]:
        return [c for c in self.columns if c.is_list]

    @property
    def to_many(self) -> List[RelationDef]:
        return [r for r in self.relations if r.many]


# --- SQLAlchemy introspection -------------------------------------------------------

def _scalar_kind(sa_type: Any) -> str:
    if isinstance(sa_type, sqltypes.ARRAY):
        sa_type = sa_type.item_type
    enum_cls = enum_class_of_type(sa_type)
    if enum_cls is not None:
        return enum_kind_name(enum_cls)
    if isinstance(sa_type, sqltypes.JSON):
        return 'Json'
    if isinstance(sa_type, sqltypes.Boolean):
        return 'Bool'
    if isinstance(sa_type, (sqltypes.DateTime, sqltypes.Date)):
        return 'DateTime'
    if isinstance(sa_type, sqltypes.Integer):
        return 'Int'
    if isinstance(sa_type, (sqltypes.Float, sqltypes.Numeric)):
        return 'Float'
    if isinstance(sa_type, sqltypes.String):
        return 'String'
    raise SchemaDefinitionError(f"Unsupported column type: {sa_type!r}")


def introspect_model(model_cls: Any) -> EntityDef:
    """Describe a declarative class as an :class:`EntityDef`."""
    try:
        mapper = sa_inspect(model_cls)
    except NoInspectionAvailable as exc:
        raise SchemaDefinitionError(f"{model_cls!r} is not a mapped class") from exc
    entity = EntityDef(name=model_cls.__name__, model=model_cls, doc=(model_cls.__doc__ or '').strip() or None)

    by_column: Dict[str, ColumnDef] = {}
    for prop in mapper.column_attrs:
        col = prop.columns[0]
        sa_type = col.type
        cdef = ColumnDef(
            key=prop.key,
            name=snake_to_camel(prop.key),
            kind=_scalar_kind(sa_type),
            nullable=bool(col.nullable) and not col.primary_key,
            is_list=isinstance(sa_type, sqltypes.ARRAY),
            has_default=col.default is not None or col.server_default is not None,
            is_id=bool(col.primary_key),
            is_unique=bool(col.unique) or bool(col.primary_key),
            enum_cls=enum_class_of_type(sa_type),
        )
        entity.columns.append(cdef)
        by_column[col.name] = cdef

    for rel in mapper.relationships:
        back = rel.back_populates
        if not back:
            _logger.warning("relation %s.%s has no back_populates; skipped", entity.name, rel.key)
            continue
        fk: Tuple[str, ...] = ()
        required = False
        if rel.direction is RelationshipDirection.MANYTOONE:
            local = [by_column[c.name] for c in rel.local_columns if c.name in by_column]
            fk = tuple(c.name for c in local)
            required = all(not c.nullable for c in local)
        elif rel.direction is RelationshipDirection.MANYTOMANY:
            _logger.warning("many-to-many relation %s.%s is not supported; skipped", entity.name, rel.key)
            continue
        rdef = RelationDef(
            name=snake_to_camel(rel.key),
            key=rel.key,
            target=rel.mapper.class_.__name__,
            many=bool(rel.uselist),
            back=snake_to_camel(back),
            required=required,
            fk_columns=fk,
        )
        for name in fk:
            for cdef in entity.columns:
                if cdef.name == name:
                    cdef.relation = rdef.name
        entity.relations.append(rdef)

    entity.unique_keys = _unique_keys(mapper, by_column)
    return entity


def _unique_keys(mapper: Any, by_column: Dict[str, ColumnDef]) -> List[UniqueKey]:
    keys: List[UniqueKey] = []
    seen = set()
    for cdef in by_column.values():
        if cdef.is_id:
            keys.append(UniqueKey((cdef.name,), UniqueKeyKind.PRIMARY))
            seen.add((cdef.name,))
    for cdef in by_column.values():
        if cdef.is_unique and (cdef.name,) not in seen:
            keys.append(UniqueKey((cdef.name,), UniqueKeyKind.FIELD))
            seen.add((cdef.name,))
    for table in mapper.tables:
        for constraint in table.constraints:
            if not isinstance(constraint, UniqueConstraint):
                continue
            fields = tuple(by_column[c.name].name for c in constraint.columns if c.name in by_column)
            if not fields or fields in seen:
                continue
            kind = UniqueKeyKind.COMPOUND if len(fields) > 1 else UniqueKeyKind.FIELD
            keys.append(UniqueKey(fields, kind))
            seen.add(fields)
    return keys


def introspect_models(models: Iterable[Any]) -> Dict[str, EntityDef]:
    """Introspect a set of mapped classes and check that relations resolve."""
    configure_mappers()
    entities: Dict[str, EntityDef] = {}
    for model_cls in models:
        entity = introspect_model(model_cls)
        entities[entity.name] = entity
    for entity in entities.values():
        for rel in entity.relations:
            target = entities.get(rel.target)
            if target is None:
                raise SchemaDefinitionError(f"{entity.name}.{rel.name} targets unknown entity {rel.target}")
            if not any(r.name == rel.back for r in target.relations):
                raise SchemaDefinitionError(f"{entity.name}.{rel.name}: back-reference {rel.target}.{rel.back} missing")
    return entities


def introspect_declarative(base: Any) -> Dict[str, EntityDef]:
    """Introspect every class mapped by a declarative base, sorted by name."""
    mappers = sorted(base.registry.mappers, key=lambda m: m.class_.__name__)
    return introspect_models(m.class_ for m in mappers)


# --- input field helpers -------------------------------------------------------------

@dataclass
class InputField:
    """A field of a generated schema: annotation plus presence rule."""

    annotation: Any
    required: bool = False
    default: Any = None


def req(annotation: Any) -> InputField:
    return InputField(annotation, required=True)


def opt(annotation: Any, default: Any = None) -> InputField:
    return InputField(annotation, required=False, default=default)


class _FirstMatch:
    """Union validated strictly left to right, each member labelled.

    Labels start with ``~`` so error locations can drop them.
    """

    def __init__(self, choices: Tuple[Any, ...]):
        self.choices = choices

    def __get_pydantic_core_schema__(self, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        members = [(handler.generate_schema(choice), f"~{i}") for i, choice in enumerate(self.choices)]
        return core_schema.union_schema(members, mode='left_to_right')


def any_of(*choices: Any) -> Any:
    """Annotation accepting the first of ``choices`` that validates."""
    if len(choices) == 1:
        return choices[0]
    return Annotated[Any, _FirstMatch(tuple(choices))]


def one_or_many(annotation: Any) -> Any:
    return any_of(annotation, List[annotation])
