import pytest

from stockql.core.enum_utils import enum_tokens
from stockql.core.filters import filter_name, list_filter_name
from stockql.core.fields import introspect_declarative
from stockql.enums import DOMAIN_ENUMS
from stockql.errors import SchemaValidationError
from stockql.models import Base

ENUM_COLUMNS = [
    (entity.name, col)
    for entity in introspect_declarative(Base).values()
    for col in entity.columns
    if col.enum_cls is not None
]


def _undeclared(tokens):
    candidates = [t.lower() for t in tokens] + ['NOT_A_TOKEN']
    return next(c for c in candidates if c not in tokens)


def test_every_domain_enum_is_bound_to_a_column():
    bound = {col.enum_cls for _, col in ENUM_COLUMNS}
    assert bound == set(DOMAIN_ENUMS)


@pytest.mark.parametrize('entity,col', ENUM_COLUMNS, ids=lambda v: getattr(v, 'name', v))
def test_enum_column_accepts_exactly_its_tokens(registry, entity, col):
    tokens = enum_tokens(col.enum_cls)
    bad = _undeclared(tokens)
    shape = registry.names.partial(entity)
    if col.is_list:
        filt = list_filter_name(col.kind)
        for token in tokens:
            assert registry.parse(shape, {col.name: [token]}) == {col.name: [token]}
            assert registry.parse(filt, {'has': token}) == {'has': token}
        with pytest.raises(SchemaValidationError):
            registry.parse(shape, {col.name: [bad]})
        with pytest.raises(SchemaValidationError):
            registry.parse(filt, {'has': bad})
        return
    filt = filter_name(col.kind, nullable=col.nullable)
    for token in tokens:
        assert registry.parse(shape, {col.name: token}) == {col.name: token}
        assert registry.parse(filt, {'equals': token}) == {'equals': token}
        assert registry.parse(filt, {'in': [token]}) == {'in': [token]}
    with pytest.raises(SchemaValidationError) as exc:
        registry.parse(shape, {col.name: bad})
    assert 'invalid_enum_value' in exc.value.codes
    with pytest.raises(SchemaValidationError):
        registry.parse(filt, {'equals': bad})
