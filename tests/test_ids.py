import pytest

from stockql.ids import ID_PREFIXES, extract_prefix, generate_id, id_factory, validate_id
from stockql.models import Organization


def test_generate_and_validate():
    value = generate_id('usr')
    assert value.startswith('usr_')
    assert len(value) >= 16
    assert validate_id(value)
    assert validate_id(value, 'usr')
    assert not validate_id(value, 'org')


def test_ids_are_unique():
    assert len({generate_id('itm') for _ in range(200)}) == 200


def test_unknown_prefix():
    with pytest.raises(ValueError):
        generate_id('xyz')


@pytest.mark.parametrize('value', ['', 'usr_', 'USR_abcdefghijkl', 'usr-abcdefghijkl', 'usr_abc', None, 42])
def test_invalid_ids(value):
    assert not validate_id(value)


def test_extract_prefix():
    assert extract_prefix(generate_id('org')) == 'org'
    assert extract_prefix('zzz_abcdefghijkl') is None
    assert extract_prefix('nope') is None


def test_id_factory_matches_entity_kind():
    make = id_factory('inventoryItem')
    assert make.__name__ == 'generate_inventoryItem_id'
    assert make().startswith(ID_PREFIXES['inventoryItem'] + '_')


def test_model_defaults_use_prefixed_ids():
    default = Organization.__table__.c.id.default
    assert default is not None and default.is_callable
