import pytest
from pydantic import ValidationError

from stockql.config import RegistryConfig, get_config


def test_defaults(clean_env):
    cfg = RegistryConfig()
    assert cfg.coerce_date and cfg.strict_inputs
    assert cfg.create_partial_types and cfg.create_relation_values_types
    assert cfg.max_page_size == 100


def test_env_overrides(clean_env):
    clean_env.setenv('STOCKQL_COERCE_DATE', 'false')
    clean_env.setenv('STOCKQL_CREATE_PARTIAL_TYPES', '0')
    clean_env.setenv('STOCKQL_STRICT_INPUTS', 'Yes')
    clean_env.setenv('STOCKQL_CREATE_OPTIONAL_DEFAULTS_TYPES', 'off')
    clean_env.setenv('STOCKQL_MAX_PAGE_SIZE', '50')
    clean_env.setenv('STOCKQL_WRITE_NULLISH_IN_MODEL_TYPES', '')
    cfg = RegistryConfig()
    assert not cfg.coerce_date
    assert not cfg.create_partial_types
    assert not cfg.create_optional_defaults_types
    assert cfg.strict_inputs
    assert cfg.write_nullish_in_model_types
    assert cfg.max_page_size == 50


def test_keyword_arguments_win_over_env(clean_env):
    clean_env.setenv('STOCKQL_STRICT_INPUTS', 'false')
    assert RegistryConfig(strict_inputs=True).strict_inputs


@pytest.mark.parametrize('key,raw', [
    ('STOCKQL_COERCE_DATE', 'maybe'),
    ('STOCKQL_MAX_PAGE_SIZE', '0'),
    ('STOCKQL_MAX_PAGE_SIZE', 'lots'),
])
def test_invalid_values(clean_env, key, raw):
    clean_env.setenv(key, raw)
    with pytest.raises(ValidationError):
        RegistryConfig()


def test_max_page_size_must_be_positive():
    with pytest.raises(ValidationError):
        RegistryConfig(max_page_size=0)


def test_config_is_frozen():
    with pytest.raises(ValidationError):
        RegistryConfig().coerce_date = False


def test_get_config_is_cached(clean_env):
    get_config.cache_clear()
    try:
        assert get_config() is get_config()
    finally:
        get_config.cache_clear()
