"""JSON values and the null sentinels used by JSON columns.

A JSON column can be SQL ``NULL`` (:data:`DbNull`) or hold the JSON literal
``null`` (:data:`JsonNull`); filters can also match either (:data:`AnyNull`).
The three are distinct singletons and are never collapsed into ``None``.
"""
from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterable

from pydantic import JsonValue, PlainValidator
from pydantic_core import PydanticCustomError
from typing_extensions import Annotated


class NullSentinel:
    """Singleton marker carried through parsed payloads."""

    __slots__ = ('token',)
    _instances: Dict[str, 'NullSentinel'] = {}

    def __new__(cls, token: str):
        inst = cls._instances.get(token)
        if inst is None:
            inst = super().__new__(cls)
            inst.token = token
            cls._instances[token] = inst
        return inst

    def __repr__(self) -> str:
        return self.token

    def __reduce__(self):
        return (NullSentinel, (self.token,))

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


DbNull = NullSentinel('DbNull')
JsonNull = NullSentinel('JsonNull')
AnyNull = NullSentinel('AnyNull')

SENTINELS = {s.token: s for s in (DbNull, JsonNull, AnyNull)}

# Accepted token sets
JSON_NULL_VALUE_INPUT: FrozenSet[str] = frozenset({'JsonNull'})
NULLABLE_JSON_NULL_VALUE_INPUT: FrozenSet[str] = frozenset({'DbNull', 'JsonNull'})
JSON_NULL_VALUE_FILTER: FrozenSet[str] = frozenset({'DbNull', 'JsonNull', 'AnyNull'})


def is_sentinel(value: Any) -> bool:
    return isinstance(value, NullSentinel)


def _json_error(path: str) -> PydanticCustomError:
    where = f" at {path}" if path else ''
    return PydanticCustomError('json_type', 'Input should be a JSON value{where}', {'where': where})


def _check_json(value: Any, path: str, allow_null: bool, allow_to_json: bool) -> None:
    if value is None:
        if not allow_null:
            raise _json_error(path)
        return
    if isinstance(value, (bool, int, float, str)):
        return
    if isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _check_json(item, f"{path}[{i}]", True, allow_to_json)
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise _json_error(path)
            _check_json(item, f"{path}.{key}" if path else key, True, allow_to_json)
        return
    if allow_to_json and callable(getattr(value, 'to_json', None)):
        return
    raise _json_error(path)


def validate_input_json_value(value: Any) -> Any:
    """JSON value accepted on writes: no top-level null, ``to_json`` objects kept as-is."""
    _check_json(value, '', False, True)
    return value


def sentinel_validator(tokens: Iterable[str]):
    """Validator accepting exactly the given sentinel tokens (or instances)."""
    allowed = frozenset(tokens)
    expected = ' or '.join(repr(t) for t in sorted(allowed))

    def _validate(value: Any) -> NullSentinel:
        if isinstance(value, NullSentinel) and value.token in allowed:
            return value
        if isinstance(value, str) and value in allowed:
            return SENTINELS[value]
        raise PydanticCustomError('enum', 'Input should be {expected}', {'expected': expected})

    _validate.__name__ = 'sentinel'
    return _validate


def json_write_validator(tokens: Iterable[str]):
    """Sentinel tokens first, then any input JSON value."""
    allowed = frozenset(tokens)

    def _validate(value: Any) -> Any:
        if isinstance(value, NullSentinel):
            if value.token in allowed:
                return value
            raise PydanticCustomError(
                'enum', 'Input should be {expected}', {'expected': ' or '.join(sorted(allowed))}
            )
        if isinstance(value, str) and value in allowed:
            return SENTINELS[value]
        return validate_input_json_value(value)

    _validate.__name__ = 'json'
    return _validate


InputJsonValue = Annotated[Any, PlainValidator(validate_input_json_value)]
JsonNullValueInput = Annotated[Any, PlainValidator(sentinel_validator(JSON_NULL_VALUE_INPUT))]
NullableJsonNullValueInput = Annotated[Any, PlainValidator(sentinel_validator(NULLABLE_JSON_NULL_VALUE_INPUT))]
JsonNullValueFilter = Annotated[Any, PlainValidator(sentinel_validator(JSON_NULL_VALUE_FILTER))]

# Column-level write/filter value types
JsonWriteValue = Annotated[Any, PlainValidator(json_write_validator(JSON_NULL_VALUE_INPUT))]
NullableJsonWriteValue = Annotated[Any, PlainValidator(json_write_validator(NULLABLE_JSON_NULL_VALUE_INPUT))]
JsonFilterValue = Annotated[Any, PlainValidator(json_write_validator(JSON_NULL_VALUE_FILTER))]


__all__ = [
    'NullSentinel', 'DbNull', 'JsonNull', 'AnyNull', 'SENTINELS', 'is_sentinel',
    'JsonValue', 'InputJsonValue', 'JsonNullValueInput', 'NullableJsonNullValueInput',
    'JsonNullValueFilter', 'JsonWriteValue', 'NullableJsonWriteValue', 'JsonFilterValue',
    'validate_input_json_value', 'sentinel_validator', 'json_write_validator',
]
