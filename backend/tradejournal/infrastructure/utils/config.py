"""Configuration management for the journal backend.

Rules:
- YAML provides defaults (database file, API binding, log level).
- .env / environment variables override YAML (DATABASE__PATH, API__PORT, LOG_LEVEL).
- A missing YAML file is not an error: built-in defaults apply.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_DB_FILENAME = "trading_journal.db"


class DatabaseConfig(BaseModel):
    path: str = Field(default=DEFAULT_DB_FILENAME, description="SQLite file holding profile/accounts/trades")

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        # `sqlite:trading_journal.db` is how the frontend names the same file
        v = str(v).strip()
        if v.startswith("sqlite:"):
            v = v[len("sqlite:"):]
        if not v:
            raise ValueError("database path must not be empty")
        return v


class APIConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=1430, ge=1024, le=65535)
    cors_origins: List[str] = Field(default=["http://localhost:1420", "tauri://localhost"])


class JournalConfig(BaseSettings):
    """Main configuration class for the journal backend."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True)

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    api: APIConfig = Field(default_factory=APIConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if str(v).upper() not in valid:
            raise ValueError(f"Log level must be one of: {sorted(valid)}")
        return str(v).upper()

    @property
    def db_path(self) -> Path:
        return Path(self.database.path)

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "JournalConfig":
        """Load configuration from YAML, then re-apply env overrides on top."""
        if not yaml_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {yaml_path}")

        try:
            return cls.model_validate(_apply_env_overrides(data))
        except ValidationError as e:
            raise ValueError(f"Configuration validation error: {e}")


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    # init kwargs beat env in pydantic-settings, so env wins only if merged here
    out = dict(data)
    if os.getenv("LOG_LEVEL"):
        out["log_level"] = os.getenv("LOG_LEVEL")
    if os.getenv("DATABASE__PATH"):
        out["database"] = {**(out.get("database") or {}), "path": os.getenv("DATABASE__PATH")}
    if os.getenv("API__HOST"):
        out["api"] = {**(out.get("api") or {}), "host": os.getenv("API__HOST")}
    if os.getenv("API__PORT"):
        out["api"] = {**(out.get("api") or {}), "port": os.getenv("API__PORT")}
    return out


def load_config(config_path: Optional[Path] = None) -> JournalConfig:
    """Load configuration from YAML + .env (env wins)."""

    load_dotenv(dotenv_path=Path(".env"))

    if config_path is None:
        possible_paths = [Path("config/default.yaml"), Path("config/config.yaml"), Path("config.yaml")]
        for path in possible_paths:
            if path.exists():
                config_path = path
                break
        else:
            try:
                return JournalConfig()
            except ValidationError as e:
                raise ValueError(f"Configuration validation error: {e}")

    return JournalConfig.from_yaml(config_path)


# Global config instance
_config: Optional[JournalConfig] = None


def get_config() -> JournalConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: Optional[Path] = None) -> JournalConfig:
    global _config
    _config = load_config(config_path)
    return _config
