"""crudcore - 统一配置读取与校验.

目标:
- 将环境变量读取、默认值、校验集中到单一入口,避免散落在各模块中重复解析.
- `create_app(settings=...)` 只消费 Settings,不再直接读取环境变量.

说明:
- Settings 使用 `pydantic-settings` 的 `BaseSettings` 从环境变量与本地 `.env`(可选)读取配置.
- 生产环境更严格: 缺失 SECRET_KEY 会直接抛出 ValueError.
"""

from __future__ import annotations

import logging
import secrets
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from crudcore.constants import LogLevel

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DOTENV_PATH = PROJECT_ROOT / ".env"

DEFAULT_ENVIRONMENT = "development"
APP_VERSION = "1.0.0"

DEFAULT_DATABASE_URL = "sqlite:///:memory:"
DEFAULT_LANGUAGE_DIR = PROJECT_ROOT / "languages"
DEFAULT_LANGUAGE = "english"
DEFAULT_SETTINGS_TABLE_PREFIX = "user_"
DEFAULT_LOG_LEVEL = "INFO"

_VALID_LOG_LEVELS = frozenset(level.value for level in LogLevel)


class Settings(BaseSettings):
    """应用运行时设置集合."""

    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
    )

    environment: str = Field(default=DEFAULT_ENVIRONMENT, validation_alias="FLASK_ENV")
    debug: bool = Field(default=False, validation_alias="FLASK_DEBUG")

    app_name: str = Field(default="crudcore", validation_alias="APP_NAME")
    app_version: str = APP_VERSION

    secret_key: str = Field(default="", validation_alias="SECRET_KEY")
    database_url: str = Field(default=DEFAULT_DATABASE_URL, validation_alias="DATABASE_URL")
    record_queries: bool = Field(default=False, validation_alias="RECORD_QUERIES")

    language_dir: Path = Field(default=DEFAULT_LANGUAGE_DIR, validation_alias="LANGUAGE_DIR")
    default_language: str = Field(default=DEFAULT_LANGUAGE, validation_alias="DEFAULT_LANGUAGE")
    settings_table_prefix: str = Field(
        default=DEFAULT_SETTINGS_TABLE_PREFIX,
        validation_alias="SETTINGS_TABLE_PREFIX",
    )

    csrf_enabled: bool = Field(default=True, validation_alias="WTF_CSRF_ENABLED")

    log_level: str = Field(default=DEFAULT_LOG_LEVEL, validation_alias="LOG_LEVEL")
    enable_debug_log: bool = Field(default=False, validation_alias="ENABLE_DEBUG_LOG")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.upper()
        if normalized not in _VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL 仅支持 {', '.join(sorted(_VALID_LOG_LEVELS))}")
        return normalized

    @field_validator("default_language")
    @classmethod
    def _require_language(cls, value: str) -> str:
        if not value:
            raise ValueError("DEFAULT_LANGUAGE 不能为空")
        return value

    @property
    def is_production(self) -> bool:
        """当前是否为生产环境."""
        return self.environment.strip().lower() == "production"

    @property
    def is_testing(self) -> bool:
        """当前是否为测试环境."""
        return self.environment.strip().lower() in {"testing", "test"}

    def to_flask_config(self) -> dict[str, object]:
        """转换为 Flask app.config 可写入的配置字典."""
        return {
            "ENV": self.environment,
            "DEBUG": self.debug,
            "TESTING": self.is_testing,
            "APP_NAME": self.app_name,
            "APP_VERSION": self.app_version,
            "SECRET_KEY": self.secret_key,
            "SQLALCHEMY_DATABASE_URI": self.database_url,
            "SQLALCHEMY_TRACK_MODIFICATIONS": False,
            "SQLALCHEMY_RECORD_QUERIES": self.record_queries,
            "LANGUAGE_DIR": str(self.language_dir),
            "DEFAULT_LANGUAGE": self.default_language,
            "SETTINGS_TABLE_PREFIX": self.settings_table_prefix,
            "WTF_CSRF_ENABLED": self.csrf_enabled,
            "LOG_LEVEL": self.log_level,
            "ENABLE_DEBUG_LOG": self.enable_debug_log,
        }

    @classmethod
    def load(cls) -> Settings:
        """从环境变量加载 Settings 并执行必要校验."""
        load_dotenv(dotenv_path=DOTENV_PATH if DOTENV_PATH.exists() else None, override=False)
        return cls()

    @model_validator(mode="after")
    def _apply_defaults_and_validate(self) -> Settings:
        environment_normalized = self.environment.strip().lower()

        if "debug" not in self.model_fields_set:
            object.__setattr__(self, "debug", environment_normalized == "development")

        if not self.secret_key:
            if self.is_production:
                raise ValueError("SECRET_KEY environment variable must be set in production")
            object.__setattr__(self, "secret_key", secrets.token_urlsafe(32))
            if not self.is_testing:
                logger.warning("⚠️  未设置 SECRET_KEY,将使用随机生成的密钥,生产环境请设置环境变量")

        if self.is_production and self.database_url == DEFAULT_DATABASE_URL:
            raise ValueError("DATABASE_URL environment variable must be set in production")
        return self
