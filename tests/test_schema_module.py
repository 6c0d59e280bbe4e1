import pytest

import stockql
from stockql.core.json_values import JsonNull
from stockql.errors import SchemaValidationError


def test_schema_attributes_resolve(user_row):
    from stockql.schema import UserSchema

    assert UserSchema.parse(user_row) == user_row


def test_organization_create_scenario():
    from stockql.schema import OrganizationCreateInputSchema

    with pytest.raises(SchemaValidationError):
        OrganizationCreateInputSchema.parse({'name': 'Acme'})
    parsed = OrganizationCreateInputSchema.parse({
        'settings': 'JsonNull',
        'name': 'Acme',
        'creator': {'connect': {'id': 'u1'}},
        'updater': {'connect': {'id': 'u1'}},
    })
    assert parsed['settings'] is JsonNull


def test_schema_module_registers_active_registry():
    import stockql.schema as schema

    assert stockql.get_active_registry() is schema.registry
    assert 'UserWhereUniqueInputSchema' in dir(schema)


def test_unknown_schema_attribute():
    import stockql.schema as schema

    with pytest.raises(AttributeError):
        schema.NopeSchema
    with pytest.raises(AttributeError):
        schema.UserWhereInput


def test_lazy_package_exports():
    from stockql.core.json_values import DbNull

    assert stockql.DbNull is DbNull
    assert stockql.enum_column.__module__ == 'stockql.sql.enum_helpers'
    assert stockql.SchemaRegistry.__name__ == 'SchemaRegistry'
    assert stockql.RegistryConfig().strict_inputs
    with pytest.raises(AttributeError):
        stockql.nothing_here
