"""Tests for application configuration."""
import pytest
from pydantic import ValidationError

from core.config import Settings


class TestDefaults:
    """Defaults used when nothing is configured."""

    def test__settings__defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("DATABASE_URL", "DEV_MODE", "SCRAPE_TIMEOUT", "LOG_LEVEL", "MCP_SERVER_NAME"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.database_url.startswith("postgresql+asyncpg://")
        assert settings.dev_mode is False
        assert settings.scrape_timeout == 10.0
        assert settings.log_level == "INFO"
        assert settings.mcp_server_name == "otter"
        assert settings.mcp_server_version == "1.0.0"

    def test__settings__read_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCRAPE_TIMEOUT", "2.5")
        monkeypatch.setenv("SCRAPE_USER_AGENT", "Test/1.0")
        monkeypatch.setenv("DB_POOL_SIZE", "20")

        settings = Settings(_env_file=None)

        assert settings.scrape_timeout == 2.5
        assert settings.scrape_user_agent == "Test/1.0"
        assert settings.db_pool_size == 20


class TestDevModeSecurity:
    """DEV_MODE bypasses authentication and must stay on local databases."""

    @pytest.mark.parametrize(
        "url",
        [
            "postgresql+asyncpg://u:p@localhost:5432/otter",
            "postgresql+asyncpg://u:p@127.0.0.1/otter",
            "postgresql+asyncpg://u:p@[::1]:5432/otter",
        ],
    )
    def test__dev_mode__allowed_for_local_database(self, url: str) -> None:
        settings = Settings(_env_file=None, database_url=url, dev_mode=True)

        assert settings.dev_mode is True

    def test__dev_mode__rejected_for_remote_database(self) -> None:
        with pytest.raises(ValidationError, match="DEV_MODE cannot be enabled"):
            Settings(
                _env_file=None,
                database_url="postgresql+asyncpg://u:p@db.prod.example.com/otter",
                dev_mode=True,
            )

    def test__remote_database_allowed_without_dev_mode(self) -> None:
        settings = Settings(
            _env_file=None,
            database_url="postgresql+asyncpg://u:p@db.prod.example.com/otter",
            dev_mode=False,
        )

        assert settings.database_url.endswith("db.prod.example.com/otter")
