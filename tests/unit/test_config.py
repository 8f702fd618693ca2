"""Tests for configuration loading and environment overrides."""

import json
from pathlib import Path

import pytest

from sports_store.config import (
    MEMORY_DATABASE_URL,
    ConfigManager,
    SportsStoreConfig,
    get_config,
    get_database_url,
    is_debug_mode,
)
from sports_store.repositories import create_data_repository, create_document_store
from sports_store.store.memory_impl import MemoryDocumentStore
from sports_store.store.sqlalchemy_impl import SQLAlchemyDocumentStore


@pytest.mark.unit
class TestConfigDefaults:
    """Test the default configuration."""

    def test_defaults_live_in_user_data_dir(self, clean_env):
        config = get_config()

        assert config.app.user_data_dir == str(clean_env)
        assert config.database_url == f"sqlite:///{clean_env / 'sports_store.db'}"
        assert config.log_directory == clean_env / "logs"
        assert is_debug_mode() is False

    def test_round_trip_through_dict(self):
        config = ConfigManager().create_default_config()
        config.database.url = MEMORY_DATABASE_URL

        restored = SportsStoreConfig.from_dict(config.to_dict())

        assert restored == config
        assert restored.database.is_memory is True


@pytest.mark.unit
class TestEnvironmentOverrides:
    """Test SPORTS_STORE_* environment variables."""

    def test_database_url_override(self, clean_env, monkeypatch):
        monkeypatch.setenv("SPORTS_STORE_DATABASE_URL", "sqlite:///elsewhere.db")
        assert get_database_url() == "sqlite:///elsewhere.db"

    def test_debug_mode_lowers_log_level(self, clean_env, monkeypatch):
        monkeypatch.setenv("SPORTS_STORE_DEBUG", "1")
        config = ConfigManager().load_config()

        assert config.app.debug_mode is True
        assert config.app.log_level == "DEBUG"

    def test_log_dir_override(self, clean_env, monkeypatch, tmp_path):
        monkeypatch.setenv("SPORTS_STORE_LOG_DIR", str(tmp_path / "elsewhere"))
        assert ConfigManager().load_config().log_directory == tmp_path / "elsewhere"

    def test_environment_wins_over_file(self, clean_env, monkeypatch):
        Path(clean_env, "config.json").write_text(
            json.dumps({"app": {"debug_mode": True}, "database": {"url": "sqlite:///file.db"}}),
            encoding="utf-8",
        )
        monkeypatch.setenv("SPORTS_STORE_DATABASE_URL", MEMORY_DATABASE_URL)

        config = ConfigManager().load_config()

        assert config.app.debug_mode is True
        assert config.database.is_memory is True


@pytest.mark.unit
class TestConfigFile:
    """Test reading and writing the JSON config file."""

    def test_save_and_reload(self, clean_env):
        manager = ConfigManager()
        manager.load_config()

        assert manager.update_config({"database.echo": True, "app": {"log_level": "WARNING"}})

        reloaded = ConfigManager().load_config()
        assert reloaded.database.echo is True
        assert reloaded.app.log_level == "WARNING"

    def test_corrupt_file_falls_back_to_defaults(self, clean_env):
        Path(clean_env, "config.json").write_text("{not json", encoding="utf-8")

        config = ConfigManager().load_config()

        assert config.app.debug_mode is False
        assert config.database.url == ""

    def test_validate_reports_unknown_log_level(self, clean_env):
        manager = ConfigManager()
        manager.load_config().app.log_level = "CHATTY"

        issues = manager.validate_config()

        assert any("log level" in issue for issue in issues)

    def test_valid_config_has_no_issues(self, clean_env):
        manager = ConfigManager()
        manager.load_config()

        assert manager.validate_config() == []

    def test_loading_creates_no_directories(self, clean_env, monkeypatch):
        user_data_dir = clean_env / "fresh"
        monkeypatch.setenv("SPORTS_STORE_USER_DATA_DIR", str(user_data_dir))

        config = ConfigManager().load_config()

        assert config.app.user_data_dir == str(user_data_dir)
        assert not user_data_dir.exists()

    def test_save_creates_config_directory(self, clean_env, monkeypatch):
        user_data_dir = clean_env / "fresh" / "nested"
        monkeypatch.setenv("SPORTS_STORE_USER_DATA_DIR", str(user_data_dir))
        manager = ConfigManager()
        manager.load_config()

        assert manager.save_config()
        assert (user_data_dir / "config.json").exists()


@pytest.mark.unit
class TestStoreFactory:
    """Test choosing the store from the configuration."""

    def test_memory_url_selects_memory_store(self, clean_env, monkeypatch):
        monkeypatch.setenv("SPORTS_STORE_DATABASE_URL", MEMORY_DATABASE_URL)

        repository = create_data_repository()

        assert repository.is_open() is True
        assert repository.is_empty() is True
        assert isinstance(create_document_store(), MemoryDocumentStore)

    def test_default_uses_sqlite_file(self, clean_env):
        store = create_document_store()
        try:
            assert isinstance(store, SQLAlchemyDocumentStore)
            assert (clean_env / "sports_store.db").exists()
        finally:
            store.close()

    def test_sqlite_directory_is_created(self, clean_env, tmp_path):
        config = ConfigManager().load_config()
        config.database.url = f"sqlite:///{tmp_path / 'nested' / 'dir' / 'store.db'}"

        store = create_document_store(config)
        try:
            assert (tmp_path / "nested" / "dir" / "store.db").exists()
        finally:
            store.close()
