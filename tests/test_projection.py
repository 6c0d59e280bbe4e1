import pytest

from stockql.errors import SchemaValidationError


def test_order_by_scalar_nulls_and_relation_count(registry):
    order = {'email': 'asc', 'lastLoginAt': {'sort': 'desc', 'nulls': 'last'}, 'sessions': {'_count': 'desc'}}
    assert registry.parse('UserOrderByWithRelationInput', order) == order


def test_order_by_rejects_bad_direction(registry):
    with pytest.raises(SchemaValidationError) as exc:
        registry.parse('UserOrderByWithRelationInput', {'email': 'up'})
    assert exc.value.codes == ['invalid_enum_value']
    with pytest.raises(SchemaValidationError):
        # nulls ordering only applies to nullable columns
        registry.parse('UserOrderByWithRelationInput', {'email': {'sort': 'asc'}})


def test_order_by_to_one_relation(registry):
    order = {'organization': {'name': 'asc'}, 'quantity': 'desc'}
    assert registry.parse('InventoryItemOrderByWithRelationInput', order) == order


def test_numeric_aggregates_only_for_numeric_entities(registry):
    assert 'InventoryItemAvgOrderByAggregateInput' in registry
    assert 'InventoryItemSumAggregateInput' in registry
    assert 'SessionAvgOrderByAggregateInput' not in registry
    assert 'SessionSumAggregateInput' not in registry
    with pytest.raises(SchemaValidationError) as exc:
        registry.parse('InventoryItemAvgOrderByAggregateInput', {'name': 'asc'})
    assert exc.value.codes == ['unrecognized_key']
    assert registry.parse('InventoryItemAvgOrderByAggregateInput', {'minQuantity': 'desc'}) == {'minQuantity': 'desc'}


def test_min_max_skip_json_and_lists(registry):
    with pytest.raises(SchemaValidationError):
        registry.parse('InventoryItemMaxAggregateInput', {'tags': True})
    with pytest.raises(SchemaValidationError):
        registry.parse('InventoryItemMinOrderByAggregateInput', {'price': 'asc'})
    assert registry.parse('InventoryItemCountAggregateInput', {'tags': True, '_all': True}) == {'tags': True, '_all': True}


def test_aggregate_selectors_take_true_only(registry):
    with pytest.raises(SchemaValidationError):
        registry.parse('UserCountAggregateInput', {'_all': False})


def test_order_by_with_aggregation(registry):
    order = {'category': 'asc', '_count': {'id': 'desc'}, '_avg': {'quantity': 'asc'}}
    assert registry.parse('InventoryItemOrderByWithAggregationInput', order) == order
    with pytest.raises(SchemaValidationError):
        registry.parse('UserOrderByWithAggregationInput', {'_avg': {}})


def test_select_and_include_conflict(registry):
    with pytest.raises(SchemaValidationError) as exc:
        registry.parse('UserArgs', {'select': {'id': True}, 'include': {'sessions': True}})
    assert exc.value.codes == ['conflicting_projection']
    with pytest.raises(SchemaValidationError) as exc:
        registry.parse('UserFindManyArgs', {'select': {'id': True}, 'include': {'sessions': True}})
    assert exc.value.codes == ['conflicting_projection']


def test_nested_select(registry):
    args = {
        'select': {
            'id': True,
            'sessions': {'where': {'token': 't'}, 'take': 5, 'select': {'token': True}},
            'memberships': True,
            '_count': {'select': {'sessions': True}},
        }
    }
    assert registry.parse('UserFindUniqueArgs', {**args, 'where': {'id': 'u1'}}) == {**args, 'where': {'id': 'u1'}}


def test_include_only_lists_relations(registry):
    assert registry.parse('SessionInclude', {'user': {'select': {'email': True}}}) == {'user': {'select': {'email': True}}}
    with pytest.raises(SchemaValidationError):
        registry.parse('SessionInclude', {'token': True})


def test_count_output_type_only_for_to_many(registry):
    assert 'UserCountOutputTypeSelect' in registry
    assert 'SessionCountOutputTypeSelect' not in registry
    with pytest.raises(SchemaValidationError):
        registry.parse('SessionSelect', {'_count': True})


def test_find_many_args(registry):
    args = {
        'where': {'isActive': True},
        'orderBy': [{'createdAt': 'desc'}, {'email': 'asc'}],
        'cursor': {'id': 'u9'},
        'take': -10,
        'skip': 0,
        'distinct': 'email',
    }
    assert registry.parse('UserFindManyArgs', args) == args
    with pytest.raises(SchemaValidationError):
        registry.parse('UserFindManyArgs', {'skip': -1})
    with pytest.raises(SchemaValidationError) as exc:
        registry.parse('UserFindManyArgs', {'distinct': ['nope']})
    assert 'invalid_enum_value' in exc.value.codes


def test_find_unique_requires_where(registry):
    with pytest.raises(SchemaValidationError) as exc:
        registry.parse('UserFindUniqueOrThrowArgs', {})
    assert exc.value.codes == ['missing_required_field']


def test_group_by_args(registry):
    args = {'by': ['organizationId', 'category'], 'having': {'quantity': {'_sum': {'gt': 10}}}, '_count': True}
    assert registry.parse('InventoryItemGroupByArgs', args) == args
    with pytest.raises(SchemaValidationError):
        registry.parse('InventoryItemGroupByArgs', {'_count': True})


def test_aggregate_args(registry):
    args = {'where': {'organizationId': 'o1'}, '_avg': {'quantity': True}, '_count': {'_all': True}}
    assert registry.parse('InventoryItemAggregateArgs', args) == args
    with pytest.raises(SchemaValidationError):
        registry.parse('SessionAggregateArgs', {'_avg': {}})


def test_write_args(registry):
    upsert = {
        'where': {'id': 'm1'},
        'create': {'organizationId': 'o1', 'userId': 'u1'},
        'update': {'role': 'EDITOR'},
    }
    assert registry.parse('OrganizationMemberUpsertArgs', upsert) == upsert
    update_many = {'data': {'role': {'set': 'VIEWER'}}, 'where': {'organizationId': 'o1'}}
    assert registry.parse('OrganizationMemberUpdateManyArgs', update_many) == update_many
    assert registry.parse('OrganizationMemberDeleteManyArgs', {}) == {}
