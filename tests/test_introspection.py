import pytest

from stockql.core.fields import introspect_models
from stockql.core.unique import UniqueKeyKind
from stockql.errors import SchemaDefinitionError
from stockql.models import ENTITY_MODELS, Session


def test_all_entities_described(registry):
    assert sorted(registry.entities) == sorted(m.__name__ for m in ENTITY_MODELS)


def test_wire_names_are_camel_case(registry):
    user = registry.entity('User')
    assert user.column_names[:3] == ['id', 'email', 'displayName']
    assert 'isEmailVerified' in user.column_names
    # attribute ``metadata_`` maps to wire name ``metadata``
    log = registry.entity('ActivityLog')
    meta = log.column('metadata')
    assert meta.key == 'metadata_'
    assert meta.is_json and meta.nullable


def test_column_kinds(registry):
    user = registry.entity('User')
    providers = user.column('providers')
    assert providers.kind == 'EnumAuthProvider'
    assert providers.is_list and not providers.nullable
    assert user.column('createdAt').kind == 'DateTime'
    assert user.column('isActive').kind == 'Bool'
    item = registry.entity('InventoryItem')
    assert item.column('tags').kind == 'String' and item.column('tags').is_list
    assert item.column('quantity').kind == 'Float'
    assert item.column('price').kind == 'Json'
    assert [c.name for c in item.numeric_columns] == ['quantity', 'minQuantity']
    assert registry.entity('Organization').column('privacy').has_default


def test_owning_relations_carry_foreign_keys(registry):
    org = registry.entity('Organization')
    creator = org.relation('creator')
    assert creator.owning and creator.required
    assert creator.fk_columns == ('createdBy',)
    assert creator.target == 'User' and creator.back == 'createdOrganizations'
    assert org.column('createdBy').relation == 'creator'
    assert org.column('name').relation is None

    user = registry.entity('User')
    created = user.relation('createdOrganizations')
    assert created.many and not created.owning
    assert created.back == 'creator'


def test_member_invited_by_is_plain_column(registry):
    member = registry.entity('OrganizationMember')
    assert member.column('invitedBy').relation is None
    assert [r.name for r in member.relations] == ['organization', 'user']


def test_unique_keys(registry):
    keys = registry.unique_keys('Session')
    assert [k.name for k in keys] == ['id', 'token', 'refreshToken']
    assert keys[0].kind is UniqueKeyKind.PRIMARY
    assert keys[1].kind is UniqueKeyKind.FIELD

    member_keys = registry.unique_keys('OrganizationMember')
    assert [k.name for k in member_keys] == ['id', 'organizationId_userId']
    compound = member_keys[1]
    assert compound.compound and compound.kind is UniqueKeyKind.COMPOUND
    assert compound.fields == ('organizationId', 'userId')


def test_missing_relation_target_is_rejected():
    with pytest.raises(SchemaDefinitionError):
        introspect_models([Session])


def test_entity_docs_come_from_models(registry):
    assert registry.entity('User').doc == 'Application users'
    assert registry.entity('Session').doc is None
