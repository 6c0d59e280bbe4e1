import pytest

from stockql.errors import (
    PaginationError,
    SchemaNotFoundError,
    SchemaValidationError,
    StockQLError,
    ValidationIssue,
    clean_loc,
    format_path,
    issues_from_pydantic,
)


def test_format_path():
    assert format_path(('AND', 0, 'email')) == 'AND[0].email'
    assert format_path(()) == ''


def test_clean_loc_drops_union_labels():
    loc = ('AND', '~1', 0, 'function-plain[lazy_UserWhereInput()]', 'email', 'str')
    assert clean_loc(loc) == ('AND', 0, 'email')
    assert clean_loc(('UserWhereInput', 'email'), known_names=['UserWhereInput']) == ('email',)


def test_missing_and_enum_classification():
    issues = issues_from_pydantic([
        {'type': 'missing', 'loc': ('email',), 'msg': 'Field required', 'input': {}},
        {'type': 'literal_error', 'loc': ('role',), 'msg': 'bad', 'input': 'x', 'ctx': {'expected': "'ADMIN'"}},
        {'type': 'extra_forbidden', 'loc': ('nope',), 'msg': 'Extra inputs are not permitted', 'input': 1},
        {'type': 'int_type', 'loc': ('take',), 'msg': 'Input should be a valid integer', 'input': 'a'},
    ])
    assert [i.code for i in issues] == [
        'missing_required_field', 'invalid_enum_value', 'unrecognized_key', 'type_mismatch',
    ]
    assert issues[0].message == 'email is required'
    assert "Expected 'ADMIN'" in issues[1].message


def test_nested_relation_errors_carry_cause():
    errors = [{
        'type': 'nested_validation_failure',
        'loc': ('user', '~0'),
        'msg': 'UserWhereInput validation failed',
        'input': {},
        'ctx': {
            'schema': 'UserWhereInput',
            'relation': True,
            'errors': [{'type': 'string_type', 'loc': ('email',), 'msg': 'Input should be a valid string', 'input': 5}],
        },
    }]
    issue, = issues_from_pydantic(errors)
    assert issue.code == 'nested_validation_failure'
    assert issue.cause == 'type_mismatch'
    assert issue.field == 'user.email'
    assert issue.to_dict()['cause'] == 'type_mismatch'


def test_nested_non_relation_errors_keep_code():
    errors = [{
        'type': 'nested_validation_failure',
        'loc': ('email',),
        'msg': '',
        'ctx': {'relation': False, 'errors': [{'type': 'missing', 'loc': ('sort',), 'msg': '', 'input': {}}]},
    }]
    issue, = issues_from_pydantic(errors)
    assert issue.code == 'missing_required_field'
    assert issue.cause is None


def test_duplicate_issues_are_collapsed():
    error = {'type': 'string_type', 'loc': ('email', '~0'), 'msg': 'Input should be a valid string', 'input': 1}
    twin = dict(error, loc=('email', '~1'))
    assert len(issues_from_pydantic([error, twin])) == 1


def test_validation_error_payload():
    err = SchemaValidationError('UserWhereInput', [ValidationIssue('unrecognized_key', ('nope',), 'Unrecognized key')])
    data = err.to_dict()
    assert data['statusCode'] == 400
    assert data['code'] == 'VALIDATION_ERROR'
    assert data['schema'] == 'UserWhereInput'
    assert data['errors'][0]['field'] == 'nope'
    assert err.codes == ['unrecognized_key']
    assert 'nope: Unrecognized key' in str(err)


def test_general_field_for_root_issues():
    assert ValidationIssue('no_matching_union_branch', (), 'x').field == 'general'


def test_error_hierarchy():
    assert issubclass(SchemaNotFoundError, KeyError)
    assert issubclass(PaginationError, StockQLError)
    err = SchemaNotFoundError('Nope')
    assert str(err) == 'Unknown schema: Nope'
    assert PaginationError('bad').status_code == 400


def test_registry_raises_not_found(registry):
    with pytest.raises(SchemaNotFoundError):
        registry.get('NopeWhereInput')
    with pytest.raises(KeyError):
        registry.validator('Nope')
