"""Test configuration and fixtures for StockQL."""

import os
from datetime import datetime, timezone

import pytest
from dotenv import load_dotenv

from stockql.config import RegistryConfig
from stockql.models import Base
from stockql.registry import SchemaRegistry

# Try to load environment variables from .env file
load_dotenv()


@pytest.fixture(scope="session")
def registry():
    """One registry for the whole session; schemas materialize lazily."""
    return SchemaRegistry(base=Base, config=RegistryConfig())


@pytest.fixture(scope="session")
def lenient_registry():
    """Registry with unknown input keys dropped instead of rejected."""
    return SchemaRegistry(base=Base, config=RegistryConfig(strict_inputs=False))


@pytest.fixture
def now():
    return datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def user_row(now):
    return {
        "id": "c1",
        "email": "a@b.com",
        "displayName": "A",
        "isEmailVerified": True,
        "isActive": True,
        "providers": [],
        "createdAt": now,
        "updatedAt": now,
    }


@pytest.fixture
def clean_env(monkeypatch):
    """Strip STOCKQL_* variables a local .env may have set."""
    for key in list(os.environ):
        if key.startswith("STOCKQL_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
