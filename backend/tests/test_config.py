"""
Petstagram Backend — Configuration Tests
==========================================

What:  Environment aliases, defaults, validation and the derived database
       URL and pool sizing.
How:   Settings are built with `_env_file=None` so a developer's .env file
       cannot leak in; environment variables are set through monkeypatch.
"""

import pytest
from pydantic import ValidationError

from petstagram.config import Settings
from petstagram.database import Database

DB_ENV = ("DATABASE_URL", "DBHOST", "DBPORT", "DBNAME", "DBUSER", "DBPASSWORD")


@pytest.fixture
def clean_env(monkeypatch):
    for name in DB_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDatabaseSettings:
    def test_short_environment_names(self, clean_env):
        clean_env.setenv("DBHOST", "db.internal")
        clean_env.setenv("DBPORT", "6543")
        clean_env.setenv("DBNAME", "pets")
        clean_env.setenv("DBUSER", "petstagram")
        clean_env.setenv("DBPASSWORD", "s3cret")

        settings = Settings(_env_file=None)

        assert settings.db_host == "db.internal"
        assert settings.db_port == 6543
        assert settings.db_name == "pets"
        assert settings.db_user == "petstagram"
        assert settings.db_password == "s3cret"

    def test_password_defaults_to_literal_nil(self, clean_env):
        settings = Settings(_env_file=None)
        assert settings.db_password == "nil"
        assert settings.sqlalchemy_url.password == "nil"

    def test_url_is_assembled_from_parts(self, clean_env):
        settings = Settings(
            _env_file=None,
            db_host="db.internal",
            db_user="app",
            db_password="p@ss:word",
            db_name="pets",
        )
        url = settings.sqlalchemy_url

        assert url.drivername == "postgresql+asyncpg"
        assert url.host == "db.internal"
        assert url.port == 5432
        assert url.username == "app"
        assert url.password == "p@ss:word"
        assert url.database == "pets"

    def test_database_url_overrides_parts(self, clean_env):
        clean_env.setenv("DBHOST", "ignored")
        settings = Settings(_env_file=None, database_url="sqlite+aiosqlite:///./local.db")
        assert settings.sqlalchemy_url.get_backend_name() == "sqlite"


class TestPoolSettings:
    def test_defaults(self, clean_env):
        settings = Settings(_env_file=None)
        assert settings.db_pool_initial_capacity == 10
        assert settings.db_pool_max_capacity == 50
        assert settings.db_max_overflow == 40

    def test_max_below_initial_is_rejected(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, db_pool_initial_capacity=20, db_pool_max_capacity=10)

    @pytest.mark.asyncio
    async def test_engine_pool_uses_capacities(self, clean_env):
        settings = Settings(_env_file=None, db_pool_initial_capacity=5, db_pool_max_capacity=8)
        database = Database(settings)
        try:
            assert not database.is_sqlite
            assert database.engine.pool.size() == 5
            assert database.engine.pool._max_overflow == 3
        finally:
            await database.dispose()


class TestValidation:
    def test_log_level_is_normalised(self, clean_env):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="chatty")

    def test_comment_order(self, clean_env):
        assert Settings(_env_file=None).comment_order == "asc"
        assert Settings(_env_file=None, comment_order="DESC").comment_order == "desc"
        with pytest.raises(ValidationError):
            Settings(_env_file=None, comment_order="random")
