"""Common naming utilities for StockQL.

Provides camelCase/snake_case conversion for wire names and the naming
conventions used for generated schema slots (``UserWhereInput``,
``SessionCreateNestedManyWithoutUserInput``, ...).
"""
from __future__ import annotations

import keyword
import re
from typing import Iterable, Optional, Set

from pydantic import BaseModel

__all__ = [
    "camel_to_snake",
    "snake_to_camel",
    "capitalize",
    "python_attr",
    "strip_schema_suffix",
    "SlotNames",
]

def camel_to_snake(name: str) -> str:
    """Convert camelCase or PascalCase identifier to snake_case.

    Idempotent for already snake_case input. Handles sequences of capitals.
    """
    if not isinstance(name, str) or not name:
        return name  # type: ignore
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return s2.lower()


def snake_to_camel(name: str, upper_first: bool = False) -> str:
    """Convert snake_case identifier to camelCase or PascalCase.

    upper_first=False returns lowerCamelCase (default), True returns UpperCamelCase.
    Idempotent for already camelCase strings without underscores.
    """
    if not isinstance(name, str) or not name:
        return name  # type: ignore
    if '_' not in name:
        if upper_first:
            return name[0].upper() + name[1:]
        return name
    parts = [p for p in name.split('_') if p]
    if not parts:
        return ''
    first = parts[0].lower() if not upper_first else parts[0].capitalize()
    rest = ''.join(p.capitalize() for p in parts[1:])
    return first + rest


def capitalize(name: str) -> str:
    """Upper-case the first character only (``sessions`` -> ``Sessions``)."""
    if not name:
        return name
    return name[0].upper() + name[1:]


def python_attr(wire_name: str, taken: Optional[Iterable[str]] = None) -> str:
    """Return a safe pydantic attribute name for a wire name.

    Wire names such as ``in``, ``NOT``, ``_count`` or ``organizationId_userId``
    are not usable as model attributes as-is; the wire name is kept as the
    field alias.
    """
    used: Set[str] = set(taken or ())
    base = camel_to_snake(wire_name)
    if base.startswith('_'):
        base = base.lstrip('_') + '_'
    if keyword.iskeyword(base) or hasattr(BaseModel, base):
        base = base + '_'
    attr = base
    while attr in used:
        attr = attr + '_'
    return attr


def strip_schema_suffix(name: str) -> str:
    """``UserWhereInputSchema`` -> ``UserWhereInput``."""
    if name.endswith('Schema') and len(name) > len('Schema'):
        return name[: -len('Schema')]
    return name


class SlotNames:
    """Slot naming rules for entity-derived schemas.

    ``entity`` is always the entity owning the slot; ``without`` is the
    relation field on that entity being omitted because the payload is
    nested under the opposite side of the relation.
    """

    # --- model shapes ---
    @staticmethod
    def partial(entity: str) -> str:
        return f"{entity}Partial"

    @staticmethod
    def optional_defaults(entity: str) -> str:
        return f"{entity}OptionalDefaults"

    @staticmethod
    def with_relations(entity: str) -> str:
        return f"{entity}WithRelations"

    @staticmethod
    def optional_defaults_with_relations(entity: str) -> str:
        return f"{entity}OptionalDefaultsWithRelations"

    @staticmethod
    def partial_with_relations(entity: str) -> str:
        return f"{entity}PartialWithRelations"

    @staticmethod
    def with_partial_relations(entity: str) -> str:
        return f"{entity}WithPartialRelations"

    @staticmethod
    def optional_defaults_with_partial_relations(entity: str) -> str:
        return f"{entity}OptionalDefaultsWithPartialRelations"

    # --- filters ---
    @staticmethod
    def where(entity: str) -> str:
        return f"{entity}WhereInput"

    @staticmethod
    def where_unique(entity: str) -> str:
        return f"{entity}WhereUniqueInput"

    @staticmethod
    def scalar_where(entity: str) -> str:
        return f"{entity}ScalarWhereInput"

    @staticmethod
    def scalar_where_with_aggregates(entity: str) -> str:
        return f"{entity}ScalarWhereWithAggregatesInput"

    @staticmethod
    def relation_filter(entity: str) -> str:
        return f"{entity}RelationFilter"

    @staticmethod
    def nullable_relation_filter(entity: str) -> str:
        return f"{entity}NullableRelationFilter"

    @staticmethod
    def list_relation_filter(entity: str) -> str:
        return f"{entity}ListRelationFilter"

    @staticmethod
    def compound_unique(entity: str, fields: Iterable[str]) -> str:
        return f"{entity}{''.join(capitalize(f) for f in fields)}CompoundUniqueInput"

    @staticmethod
    def scalar_field_enum(entity: str) -> str:
        return f"{entity}ScalarFieldEnum"

    # --- ordering / aggregates ---
    @staticmethod
    def order_by_with_relation(entity: str) -> str:
        return f"{entity}OrderByWithRelationInput"

    @staticmethod
    def order_by_with_aggregation(entity: str) -> str:
        return f"{entity}OrderByWithAggregationInput"

    @staticmethod
    def order_by_relation_aggregate(entity: str) -> str:
        return f"{entity}OrderByRelationAggregateInput"

    @staticmethod
    def order_by_aggregate(entity: str, op: str) -> str:
        return f"{entity}{capitalize(op)}OrderByAggregateInput"

    @staticmethod
    def aggregate_input(entity: str, op: str) -> str:
        return f"{entity}{capitalize(op)}AggregateInput"

    # --- projection / args ---
    @staticmethod
    def select(entity: str) -> str:
        return f"{entity}Select"

    @staticmethod
    def include(entity: str) -> str:
        return f"{entity}Include"

    @staticmethod
    def args(entity: str) -> str:
        return f"{entity}Args"

    @staticmethod
    def count_output_select(entity: str) -> str:
        return f"{entity}CountOutputTypeSelect"

    @staticmethod
    def count_output_args(entity: str) -> str:
        return f"{entity}CountOutputTypeArgs"

    @staticmethod
    def operation_args(entity: str, operation: str) -> str:
        return f"{entity}{operation}Args"

    # --- writes ---
    @staticmethod
    def create(entity: str) -> str:
        return f"{entity}CreateInput"

    @staticmethod
    def unchecked_create(entity: str) -> str:
        return f"{entity}UncheckedCreateInput"

    @staticmethod
    def update(entity: str) -> str:
        return f"{entity}UpdateInput"

    @staticmethod
    def unchecked_update(entity: str) -> str:
        return f"{entity}UncheckedUpdateInput"

    @staticmethod
    def create_many(entity: str) -> str:
        return f"{entity}CreateManyInput"

    @staticmethod
    def update_many_mutation(entity: str) -> str:
        return f"{entity}UpdateManyMutationInput"

    @staticmethod
    def unchecked_update_many(entity: str) -> str:
        return f"{entity}UncheckedUpdateManyInput"

    @staticmethod
    def list_create(entity: str, field: str) -> str:
        return f"{entity}Create{field}Input"

    @staticmethod
    def list_update(entity: str, field: str) -> str:
        return f"{entity}Update{field}Input"

    @staticmethod
    def create_without(entity: str, without: str) -> str:
        return f"{entity}CreateWithout{capitalize(without)}Input"

    @staticmethod
    def unchecked_create_without(entity: str, without: str) -> str:
        return f"{entity}UncheckedCreateWithout{capitalize(without)}Input"

    @staticmethod
    def update_without(entity: str, without: str) -> str:
        return f"{entity}UpdateWithout{capitalize(without)}Input"

    @staticmethod
    def unchecked_update_without(entity: str, without: str) -> str:
        return f"{entity}UncheckedUpdateWithout{capitalize(without)}Input"

    @staticmethod
    def create_or_connect_without(entity: str, without: str) -> str:
        return f"{entity}CreateOrConnectWithout{capitalize(without)}Input"

    @staticmethod
    def create_many_for(entity: str, without: str) -> str:
        return f"{entity}CreateMany{capitalize(without)}Input"

    @staticmethod
    def create_many_envelope(entity: str, without: str) -> str:
        return f"{entity}CreateMany{capitalize(without)}InputEnvelope"

    @staticmethod
    def create_nested_one_without(entity: str, without: str) -> str:
        return f"{entity}CreateNestedOneWithout{capitalize(without)}Input"

    @staticmethod
    def create_nested_many_without(entity: str, without: str) -> str:
        return f"{entity}CreateNestedManyWithout{capitalize(without)}Input"

    @staticmethod
    def unchecked_create_nested_many_without(entity: str, without: str) -> str:
        return f"{entity}UncheckedCreateNestedManyWithout{capitalize(without)}Input"

    @staticmethod
    def update_one_required_without_nested(entity: str, without: str) -> str:
        return f"{entity}UpdateOneRequiredWithout{capitalize(without)}NestedInput"

    @staticmethod
    def update_one_without_nested(entity: str, without: str) -> str:
        return f"{entity}UpdateOneWithout{capitalize(without)}NestedInput"

    @staticmethod
    def update_many_without_nested(entity: str, without: str) -> str:
        return f"{entity}UpdateManyWithout{capitalize(without)}NestedInput"

    @staticmethod
    def unchecked_update_many_without_nested(entity: str, without: str) -> str:
        return f"{entity}UncheckedUpdateManyWithout{capitalize(without)}NestedInput"

    @staticmethod
    def upsert_without(entity: str, without: str) -> str:
        return f"{entity}UpsertWithout{capitalize(without)}Input"

    @staticmethod
    def update_to_one_with_where_without(entity: str, without: str) -> str:
        return f"{entity}UpdateToOneWithWhereWithout{capitalize(without)}Input"

    @staticmethod
    def upsert_with_where_unique_without(entity: str, without: str) -> str:
        return f"{entity}UpsertWithWhereUniqueWithout{capitalize(without)}Input"

    @staticmethod
    def update_with_where_unique_without(entity: str, without: str) -> str:
        return f"{entity}UpdateWithWhereUniqueWithout{capitalize(without)}Input"

    @staticmethod
    def update_many_with_where_without(entity: str, without: str) -> str:
        return f"{entity}UpdateManyWithWhereWithout{capitalize(without)}Input"

    @staticmethod
    def unchecked_update_many_without(entity: str, without: str) -> str:
        return f"{entity}UncheckedUpdateManyWithout{capitalize(without)}Input"
