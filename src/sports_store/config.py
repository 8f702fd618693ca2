"""
Configuration management for Sports Store

Handles configuration loading with sensible defaults and environment overrides.
The configuration file lives in the user data directory next to the database.
"""

import json
import os
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, asdict, field
import logging


APP_NAME = "sports_store"
MEMORY_DATABASE_URL = "memory://"


def _default_user_data_dir() -> str:
    return str(Path.home() / APP_NAME)


@dataclass
class DatabaseConfig:
    """Database configuration."""

    url: str = ""  # Empty means sqlite file inside the user data directory
    echo: bool = False
    log_queries: bool = False  # Enable query logging for performance analysis

    @property
    def is_memory(self) -> bool:
        return self.url == MEMORY_DATABASE_URL


@dataclass
class AppConfig:
    """Main library configuration."""

    app_name: str = "Sports Store"
    version: str = "0.1.0"

    # Paths
    user_data_dir: str = field(default_factory=_default_user_data_dir)

    # Debug sink: diagnostics are only emitted in debug mode
    debug_mode: bool = False

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = True
    log_dir: str = ""  # Empty means <user_data_dir>/logs


@dataclass
class SportsStoreConfig:
    """Complete configuration for Sports Store."""

    app: AppConfig
    database: DatabaseConfig

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "app": asdict(self.app),
            "database": asdict(self.database),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SportsStoreConfig":
        """Create from dictionary."""
        return cls(
            app=AppConfig(**data.get("app", {})),
            database=DatabaseConfig(**data.get("database", {})),
        )

    @property
    def log_directory(self) -> Path:
        if self.app.log_dir:
            return Path(self.app.log_dir)
        return Path(self.app.user_data_dir) / "logs"

    @property
    def database_url(self) -> str:
        if self.database.url:
            return self.database.url
        db_path = Path(self.app.user_data_dir) / f"{APP_NAME}.db"
        return f"sqlite:///{db_path}"


class ConfigManager:
    """Manages configuration loading, saving, and environment overrides."""

    def __init__(self):
        self.config_file: Optional[Path] = None
        self.config: Optional[SportsStoreConfig] = None

    def detect_environment(self) -> Dict[str, Any]:
        """Read the environment overrides."""
        env_info: Dict[str, Any] = {}

        env_info["user_data_dir"] = os.getenv("SPORTS_STORE_USER_DATA_DIR")
        env_info["database_url"] = os.getenv("SPORTS_STORE_DATABASE_URL")
        env_info["log_dir"] = os.getenv("SPORTS_STORE_LOG_DIR")

        debug = os.getenv("SPORTS_STORE_DEBUG")
        env_info["debug"] = None if debug is None else debug == "1"

        log_to_file = os.getenv("SPORTS_STORE_LOG_TO_FILE")
        env_info["log_to_file"] = None if log_to_file is None else log_to_file != "0"

        return env_info

    def get_config_file_path(self) -> Path:
        """Get the path for the config file. The directory is created on save."""
        user_data_dir = os.getenv("SPORTS_STORE_USER_DATA_DIR") or _default_user_data_dir()
        return Path(user_data_dir) / "config.json"

    def create_default_config(self) -> SportsStoreConfig:
        """Create default configuration."""
        return SportsStoreConfig(app=AppConfig(), database=DatabaseConfig())

    def _apply_environment(self, config: SportsStoreConfig) -> SportsStoreConfig:
        env_info = self.detect_environment()

        if env_info["user_data_dir"]:
            config.app.user_data_dir = env_info["user_data_dir"]
        if env_info["database_url"]:
            config.database.url = env_info["database_url"]
        if env_info["log_dir"]:
            config.app.log_dir = env_info["log_dir"]
        if env_info["debug"] is not None:
            config.app.debug_mode = env_info["debug"]
            config.app.log_level = "DEBUG" if env_info["debug"] else config.app.log_level
        if env_info["log_to_file"] is not None:
            config.app.log_to_file = env_info["log_to_file"]

        return config

    def load_config(self) -> SportsStoreConfig:
        """Load configuration from file or create default."""
        self.config_file = self.get_config_file_path()

        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    data = json.load(f)

                config = SportsStoreConfig.from_dict(data)
                logging.info(f"Loaded configuration from {self.config_file}")

            except (OSError, ValueError, TypeError) as e:
                logging.warning(f"Failed to load config from {self.config_file}: {e}")
                logging.info("Creating default configuration")
                config = self.create_default_config()
        else:
            logging.info("No config file found, creating default configuration")
            config = self.create_default_config()

        self.config = self._apply_environment(config)
        return self.config

    def get(self) -> SportsStoreConfig:
        """Return the loaded configuration, loading it on first access."""
        if self.config is None:
            self.load_config()
        return self.config

    def reset(self) -> None:
        """Forget the loaded configuration so the next access reloads it."""
        self.config = None
        self.config_file = None

    def save_config(self, config: Optional[SportsStoreConfig] = None) -> bool:
        """Save configuration to file."""
        if config is None:
            config = self.config

        if config is None:
            logging.error("No configuration to save")
            return False

        try:
            if self.config_file is None:
                self.config_file = self.get_config_file_path()

            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)

            logging.info(f"Saved configuration to {self.config_file}")
            return True

        except OSError as e:
            logging.error(f"Failed to save config to {self.config_file}: {e}")
            return False

    def update_config(self, updates: Dict[str, Any]) -> bool:
        """Update configuration with new values."""
        config = self.get()

        try:
            config_dict = config.to_dict()

            for key, value in updates.items():
                if "." in key:
                    # Handle nested keys like "database.url"
                    section, field_name = key.split(".", 1)
                    if section in config_dict:
                        config_dict[section][field_name] = value
                else:
                    if key in config_dict and isinstance(value, dict):
                        config_dict[key].update(value)

            self.config = SportsStoreConfig.from_dict(config_dict)
            return self.save_config()

        except TypeError as e:
            logging.error(f"Failed to update configuration: {e}")
            return False

    def validate_config(self) -> List[str]:
        """Validate configuration and return list of warnings/errors."""
        config = self.get()
        issues = []

        if not isinstance(logging.getLevelName(config.app.log_level.upper()), int):
            issues.append(f"Unknown log level: {config.app.log_level}")

        # Check database file is writable
        db_url = config.database_url
        if db_url.startswith("sqlite:///"):
            db_path = Path(db_url.replace("sqlite:///", ""))
            db_dir = db_path.parent
            if not db_dir.exists():
                try:
                    db_dir.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    issues.append(f"Cannot create database directory: {e}")
            elif not os.access(db_dir, os.W_OK):
                issues.append(f"Database directory is not writable: {db_dir}")

        if config.app.log_to_file:
            log_dir = config.log_directory
            if log_dir.exists() and not os.access(log_dir, os.W_OK):
                issues.append(f"Log directory is not writable: {log_dir}")

        return issues


# Global config manager instance
config_manager = ConfigManager()


def get_config() -> SportsStoreConfig:
    """Get the current configuration."""
    return config_manager.get()


def reset_config() -> None:
    """Drop the cached configuration."""
    config_manager.reset()


def get_database_url() -> str:
    """Get the database URL."""
    return get_config().database_url


def is_debug_mode() -> bool:
    """Check if the debug sink is enabled."""
    return get_config().app.debug_mode
