"""Field update operations.

An update payload carries, per scalar field, either a plain value or an
operation object with exactly one key (``{increment: 2}``). Parsed payloads
normalize into :class:`FieldUpdate` intents.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import AfterValidator
from pydantic_core import PydanticCustomError
from typing_extensions import Annotated

from ..errors import UpdateOperationError
from .fields import EntityDef, InputField, one_or_many, opt, req
from .json_values import is_sentinel


class UpdateOp(str, enum.Enum):
    SET = 'set'
    INCREMENT = 'increment'
    DECREMENT = 'decrement'
    MULTIPLY = 'multiply'
    DIVIDE = 'divide'
    PUSH = 'push'


PLAIN_OPS: Tuple[UpdateOp, ...] = (UpdateOp.SET,)
NUMERIC_OPS: Tuple[UpdateOp, ...] = (
    UpdateOp.SET, UpdateOp.INCREMENT, UpdateOp.DECREMENT, UpdateOp.MULTIPLY, UpdateOp.DIVIDE,
)
LIST_OPS: Tuple[UpdateOp, ...] = (UpdateOp.SET, UpdateOp.PUSH)

_ARITHMETIC = {
    UpdateOp.INCREMENT: lambda cur, v: cur + v,
    UpdateOp.DECREMENT: lambda cur, v: cur - v,
    UpdateOp.MULTIPLY: lambda cur, v: cur * v,
    UpdateOp.DIVIDE: lambda cur, v: cur / v,
}


def _non_zero_divisor(v: Any) -> Any:
    if v == 0:
        raise PydanticCustomError('invalid_update_operation', 'Cannot divide by zero')
    return v


def ops_for_kind(kind: str, is_list: bool = False) -> Tuple[UpdateOp, ...]:
    if is_list:
        return LIST_OPS
    if kind in ('Int', 'Float'):
        return NUMERIC_OPS
    return PLAIN_OPS


@dataclass(frozen=True)
class FieldUpdate:
    """One mutation intent on one field."""

    field: str
    op: UpdateOp
    value: Any

    def apply(self, current: Any) -> Any:
        """Value of the field after applying this intent to ``current``."""
        if self.op is UpdateOp.SET:
            return self.value
        if self.op is UpdateOp.PUSH:
            items = self.value if isinstance(self.value, list) else [self.value]
            return list(current or []) + list(items)
        if current is None:
            return None
        if self.op is UpdateOp.DIVIDE and self.value == 0:
            raise UpdateOperationError(f"{self.field}: cannot divide by zero")
        return _ARITHMETIC[self.op](current, self.value)


def normalize_update(entity: EntityDef, payload: Mapping[str, Any]) -> List[FieldUpdate]:
    """Turn a parsed update payload into intents, scalar columns only.

    Relation keys are skipped; JSON columns always take their value as-is.
    """
    columns = {c.name: c for c in entity.columns}
    out: List[FieldUpdate] = []
    for name, value in payload.items():
        col = columns.get(name)
        if col is None:
            continue
        if isinstance(value, dict) and not col.is_json and not is_sentinel(value):
            if len(value) != 1:
                raise UpdateOperationError(f"{entity.name}.{name}: expected exactly one update operation")
            (op, arg), = value.items()
            try:
                update_op = UpdateOp(op)
            except ValueError:
                raise UpdateOperationError(f"{entity.name}.{name}: unknown update operation '{op}'") from None
            if update_op not in ops_for_kind(col.kind, col.is_list):
                raise UpdateOperationError(f"{entity.name}.{name}: '{op}' is not allowed here")
            out.append(FieldUpdate(name, update_op, arg))
        else:
            out.append(FieldUpdate(name, UpdateOp.SET, value))
    return out


def field_update_ops_name(kind: str, nullable: bool = False) -> str:
    return f"{'Nullable' if nullable else ''}{kind}FieldUpdateOperationsInput"


class UpdateOperationLibrary:
    """Declares update-operation slots in a registry."""

    def __init__(self, registry: Any):
        self.registry = registry

    def scalar(self, kind: str, nullable: bool = False) -> str:
        name = field_update_ops_name(kind, nullable)
        if name not in self.registry:
            self.registry.declare_model(
                name, lambda: self._scalar_fields(kind, nullable), rules=('update_operation',)
            )
        return name

    def list_update(self, entity: str, field: str, kind: str) -> str:
        name = self.registry.names.list_update(entity, field)
        if name not in self.registry:
            self.registry.declare_model(name, lambda: self._list_fields(kind, push=True), rules=('update_operation',))
        return name

    def list_create(self, entity: str, field: str, kind: str) -> str:
        name = self.registry.names.list_create(entity, field)
        if name not in self.registry:
            self.registry.declare_model(name, lambda: self._list_fields(kind, push=False))
        return name

    def _scalar_fields(self, kind: str, nullable: bool) -> Dict[str, InputField]:
        value = self.registry.value_type(kind)
        fields: Dict[str, InputField] = {}
        for op in ops_for_kind(kind):
            ann = Optional[value] if (nullable and op is UpdateOp.SET) else value
            if op is UpdateOp.DIVIDE:
                ann = Annotated[ann, AfterValidator(_non_zero_divisor)]
            fields[op.value] = opt(ann)
        return fields

    def _list_fields(self, kind: str, push: bool) -> Dict[str, InputField]:
        value = self.registry.value_type(kind)
        if not push:
            return {'set': req(List[value])}
        return {'set': opt(List[value]), 'push': opt(one_or_many(value))}
