"""
Tests for settings parsing and engine configuration.
"""

import pytest
from pydantic import ValidationError
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool

from lifestyle_cms.core.config import Settings, settings
from lifestyle_cms.db.session import get_engine_config


def test_allowed_origins_are_split():
    config = Settings(ALLOWED_ORIGINS="http://a.test, http://b.test")
    assert config.ALLOWED_ORIGINS == ["http://a.test", "http://b.test"]


def test_singleton_slots_parsed_into_pairs():
    config = Settings(SINGLETON_SLOTS="home:home-hero, storefront:storefront-deal,")
    assert config.SINGLETON_SLOTS == [("home", "home-hero"), ("storefront", "storefront-deal")]


def test_empty_singleton_slots():
    assert Settings(SINGLETON_SLOTS="").SINGLETON_SLOTS == []


@pytest.mark.parametrize("value", ["home", "home:", ":slug"])
def test_malformed_singleton_slot(value):
    with pytest.raises(ValidationError):
        Settings(SINGLETON_SLOTS=value)


def test_find_or_create_retries_bounded():
    with pytest.raises(ValidationError):
        Settings(FIND_OR_CREATE_RETRIES=10)


def test_environment_flags():
    assert Settings(APP_ENV="production").is_production
    assert Settings(APP_ENV="development").is_development


def test_postgres_engine_uses_pool(monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_URL", "postgresql+asyncpg://u:p@db:5432/cms")
    config = get_engine_config()

    assert config["poolclass"] is AsyncAdaptedQueuePool
    assert config["pool_size"] == settings.DB_POOL_SIZE
    assert config["connect_args"]["server_settings"]["application_name"] == settings.APP_NAME


def test_sqlite_engine_skips_pool_and_asyncpg_args(monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_URL", "sqlite+aiosqlite:///./cms.db")
    config = get_engine_config()

    assert config["poolclass"] is NullPool
    assert "connect_args" not in config
