"""Base classes for generated pydantic models.

Every generated schema derives from one shape (entity or input) and,
optionally, from rule classes adding a cross-field check. Rule classes
carry no configuration, so the shape's ``model_config`` wins when combined.
"""
from __future__ import annotations

from typing import Any, ClassVar, Tuple

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic_core import PydanticCustomError

from .json_values import DbNull
from .unique import UniqueKey, describe_keys, present_keys


class EntityShape(BaseModel):
    """Record shapes: unknown keys are ignored."""

    model_config = ConfigDict(
        extra='ignore',
        populate_by_name=False,
        arbitrary_types_allowed=True,
        protected_namespaces=(),
    )


class InputShape(BaseModel):
    """Query and write inputs: unknown keys are rejected."""

    model_config = ConfigDict(
        extra='forbid',
        populate_by_name=False,
        arbitrary_types_allowed=True,
        protected_namespaces=(),
    )


class LenientInputShape(BaseModel):
    """Inputs with unknown keys dropped (``strict_inputs`` off)."""

    model_config = ConfigDict(
        extra='ignore',
        populate_by_name=False,
        arbitrary_types_allowed=True,
        protected_namespaces=(),
    )


def _wire_values(model: BaseModel):
    fields = type(model).model_fields
    for attr in model.model_fields_set:
        info = fields.get(attr)
        if info is None:
            continue
        yield info.alias or attr, getattr(model, attr)


class UniqueWhereRule(BaseModel):
    """Require at least one unique key alternative."""

    __unique_keys__: ClassVar[Tuple[UniqueKey, ...]] = ()

    @model_validator(mode='after')
    def _require_unique_key(self) -> Any:
        keys = type(self).__unique_keys__
        if keys and not present_keys(keys, dict(_wire_values(self))):
            raise PydanticCustomError(
                'no_matching_union_branch',
                'Expected at least one unique key: {expected}',
                {'expected': describe_keys(keys)},
            )
        return self


class JsonDefaultsRule(BaseModel):
    """Absent nullable JSON columns resolve to ``DbNull`` on creates."""

    __db_null_fields__: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode='before')
    @classmethod
    def _fill_db_null(cls, data: Any) -> Any:
        names = cls.__db_null_fields__
        if names and isinstance(data, dict):
            missing = [n for n in names if n not in data]
            if missing:
                data = dict(data)
                for n in missing:
                    data[n] = DbNull
        return data


class ProjectionRule(BaseModel):
    """``select`` and ``include`` cannot be combined."""

    @model_validator(mode='after')
    def _exclusive_projection(self) -> Any:
        values = dict(_wire_values(self))
        if values.get('select') is not None and values.get('include') is not None:
            raise PydanticCustomError(
                'conflicting_projection',
                'Please either use `include` or `select`, but not both at the same time.',
            )
        return self


class UpdateOperationRule(BaseModel):
    """Exactly one update operation per field."""

    @model_validator(mode='after')
    def _single_operation(self) -> Any:
        ops = sorted(name for name, _ in _wire_values(self))
        if len(ops) != 1:
            allowed = ', '.join(info.alias or attr for attr, info in type(self).model_fields.items())
            raise PydanticCustomError(
                'invalid_update_operation',
                'Expected exactly one of {allowed}, received {received}',
                {'allowed': allowed, 'received': ', '.join(ops) or 'none'},
            )
        return self


RULES = {
    'unique_where': UniqueWhereRule,
    'json_defaults': JsonDefaultsRule,
    'projection': ProjectionRule,
    'update_operation': UpdateOperationRule,
}
