import copy
import pickle

import pytest
from pydantic_core import PydanticCustomError

from stockql.core.json_values import (
    AnyNull,
    DbNull,
    JsonNull,
    NullSentinel,
    is_sentinel,
    json_write_validator,
    sentinel_validator,
    validate_input_json_value,
)
from stockql.errors import SchemaValidationError


class Money:
    def __init__(self, amount):
        self.amount = amount

    def to_json(self):
        return {'amount': self.amount}


def test_sentinels_are_distinct_singletons():
    assert NullSentinel('DbNull') is DbNull
    assert len({DbNull, JsonNull, AnyNull}) == 3
    assert DbNull is not None and not is_sentinel(None)
    assert repr(JsonNull) == 'JsonNull'
    assert copy.deepcopy(AnyNull) is AnyNull
    assert pickle.loads(pickle.dumps(DbNull)) is DbNull


def test_input_json_value():
    assert validate_input_json_value({'a': [1, 2.5, 'x', None, {'b': True}]}) == {'a': [1, 2.5, 'x', None, {'b': True}]}
    money = Money(3)
    assert validate_input_json_value(money) is money
    with pytest.raises(PydanticCustomError):
        validate_input_json_value(None)
    with pytest.raises(PydanticCustomError):
        validate_input_json_value({'a': {1, 2}})
    with pytest.raises(PydanticCustomError):
        validate_input_json_value({1: 'non-string key'})


def test_sentinel_validator_token_sets():
    nullable = sentinel_validator({'DbNull', 'JsonNull'})
    assert nullable('DbNull') is DbNull
    assert nullable(JsonNull) is JsonNull
    with pytest.raises(PydanticCustomError):
        nullable('AnyNull')
    with pytest.raises(PydanticCustomError):
        nullable(None)


def test_json_write_validator():
    write = json_write_validator({'JsonNull'})
    assert write('JsonNull') is JsonNull
    assert write({'k': 'v'}) == {'k': 'v'}
    with pytest.raises(PydanticCustomError):
        write(DbNull)


def test_value_slots(registry):
    assert registry.parse('JsonNullValueInput', 'JsonNull') is JsonNull
    assert registry.parse('NullableJsonNullValueInput', 'DbNull') is DbNull
    assert registry.parse('JsonNullValueFilter', 'AnyNull') is AnyNull
    # filters keep DbNull distinct from JsonNull
    assert registry.parse('JsonNullValueFilter', 'DbNull') is DbNull
    with pytest.raises(SchemaValidationError) as exc:
        registry.parse('JsonNullValueInput', 'DbNull')
    assert exc.value.codes == ['invalid_enum_value']
    assert registry.parse('JsonValue', [1, None, {'a': 'b'}]) == [1, None, {'a': 'b'}]
