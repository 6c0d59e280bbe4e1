"""Registry configuration.

Defaults mirror the generator options the schemas were modelled on; every
flag can be overridden from ``STOCKQL_*`` environment variables.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RegistryConfig(BaseSettings):
    """Flags that decide which schema variants a registry declares."""

    model_config = SettingsConfigDict(
        env_prefix='STOCKQL_',
        env_ignore_empty=True,
        case_sensitive=False,
        extra='ignore',
        frozen=True,
    )

    coerce_date: bool = Field(True, description="Accept ISO-8601 strings for datetime columns")
    strict_inputs: bool = Field(True, description="Reject unknown keys on input schemas")
    write_nullish_in_model_types: bool = True
    create_partial_types: bool = True
    create_optional_defaults_types: bool = True
    create_relation_values_types: bool = True
    max_page_size: int = Field(100, ge=1, description="Upper bound for page limits")


@lru_cache
def get_config() -> RegistryConfig:
    """Config read once from the process environment."""
    return RegistryConfig()
