import pytest

from stockql.core.enum_utils import coerce_enum_token, enum_kind_name, enum_tokens
from stockql.enums import DOMAIN_ENUMS, InventoryCategory, UserRole
from stockql.naming import SlotNames, camel_to_snake, python_attr, snake_to_camel, strip_schema_suffix


def test_case_conversion():
    assert snake_to_camel('invite_code_expires_at') == 'inviteCodeExpiresAt'
    assert snake_to_camel('metadata_') == 'metadata'
    assert snake_to_camel('user', upper_first=True) == 'User'
    assert camel_to_snake('refreshExpiresAt') == 'refresh_expires_at'
    assert camel_to_snake('already_snake') == 'already_snake'


@pytest.mark.parametrize('wire,attr', [
    ('in', 'in_'),
    ('NOT', 'not_'),
    ('not', 'not_'),
    ('is', 'is_'),
    ('_count', 'count_'),
    ('notIn', 'not_in'),
    ('organizationId_userId', 'organization_id_user_id'),
    ('copy', 'copy_'),
    ('displayName', 'display_name'),
])
def test_python_attr(wire, attr):
    assert python_attr(wire) == attr


def test_python_attr_avoids_taken_names():
    assert python_attr('in', taken={'in_'}) == 'in__'


def test_strip_schema_suffix():
    assert strip_schema_suffix('UserWhereInputSchema') == 'UserWhereInput'
    assert strip_schema_suffix('Schema') == 'Schema'
    assert strip_schema_suffix('User') == 'User'


def test_slot_names():
    n = SlotNames
    assert n.create_nested_many_without('Session', 'user') == 'SessionCreateNestedManyWithoutUserInput'
    assert n.update_one_required_without_nested('User', 'createdOrganizations') == (
        'UserUpdateOneRequiredWithoutCreatedOrganizationsNestedInput'
    )
    assert n.compound_unique('OrganizationMember', ('organizationId', 'userId')) == (
        'OrganizationMemberOrganizationIdUserIdCompoundUniqueInput'
    )
    assert n.order_by_aggregate('InventoryItem', 'avg') == 'InventoryItemAvgOrderByAggregateInput'
    assert n.operation_args('User', 'FindFirstOrThrow') == 'UserFindFirstOrThrowArgs'
    assert n.list_update('InventoryItem', 'tags') == 'InventoryItemUpdatetagsInput'


def test_enum_tokens_keep_declaration_order():
    assert enum_tokens(UserRole) == ('ADMIN', 'EDITOR', 'VIEWER')
    assert enum_tokens(InventoryCategory)[1] == 'DAILY_GOODS'
    assert enum_kind_name(UserRole) == 'EnumUserRole'
    assert coerce_enum_token(UserRole, UserRole.ADMIN) == 'ADMIN'
    assert coerce_enum_token(UserRole, 'admin') == 'admin'
    assert len(DOMAIN_ENUMS) == 8


def test_enum_value_slots(registry):
    assert registry.parse('InventoryCategory', 'MEDICINE') == 'MEDICINE'
    assert registry.parse('SortOrder', 'desc') == 'desc'
    assert registry.parse('QueryMode', 'insensitive') == 'insensitive'
    assert registry.parse('UserScalarFieldEnum', 'displayName') == 'displayName'
    with pytest.raises(Exception):
        registry.parse('NullsOrder', 'FIRST')
