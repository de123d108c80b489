# app/config.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Union

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources.base import PydanticBaseSettingsSource
from pydantic_settings.sources.providers.env import EnvSettingsSource

APP_DIR = Path(__file__).resolve().parent

APP_VERSION = os.getenv("APP_VERSION", "0.1.0")
GIT_SHA = os.getenv("GIT_SHA", "")


class _CsvFriendlyEnvSettingsSource(EnvSettingsSource):
    # I18N may be a JSON object or a bare locale string such as "en-US".
    def decode_complex_value(self, field_name: str, field: Any, value: Any) -> Any:
        try:
            return super().decode_complex_value(field_name, field, value)
        except ValueError:
            return value


def _default_i18n() -> Dict[str, Any]:
    return {
        "defaultLang": "en-US",
        "supportedLanguages": ["en-US", "de", "es", "fr"],
    }


class Settings(BaseSettings):
    # --- Identity / Build ---
    APP_NAME: str = Field(default="Accounts Content Server")
    APP_VERSION: str = Field(default=APP_VERSION)
    GIT_SHA: str = Field(default=GIT_SHA)
    SOURCE_URL: str = Field(default="https://github.com/mozilla/fxa-content-server")

    # --- Values exposed to the front end ---
    env: str = Field(default="production", description="development | production")
    fxaccount_url: str = Field(default="http://127.0.0.1:9000")
    i18n: Union[Dict[str, Any], str] = Field(default_factory=_default_i18n)

    # --- Route discovery ---
    ROUTES_DIR: str = Field(default=str(APP_DIR / "routes"))
    # Abort startup when a route file cannot be imported.
    ROUTES_STRICT: bool = Field(default=True)

    # --- Views / templates ---
    VIEWS_DIR: str = Field(default=str(APP_DIR / "ui" / "templates"))
    EMAIL_TEMPLATES_DIR: str = Field(default=str(APP_DIR / "ui" / "email"))
    DEFAULT_LANG: str = Field(default="en-US")

    # --- Logging ---
    LOG_JSON: bool = Field(default=True)
    LOG_LEVEL: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        if isinstance(env_settings, EnvSettingsSource):
            env_settings = _CsvFriendlyEnvSettingsSource(
                settings_cls,
                case_sensitive=env_settings.case_sensitive,
                env_prefix=env_settings.env_prefix,
                env_nested_delimiter=env_settings.env_nested_delimiter,
                env_ignore_empty=env_settings.env_ignore_empty,
                env_parse_none_str=env_settings.env_parse_none_str,
                env_parse_enums=env_settings.env_parse_enums,
            )
        return init_settings, env_settings, dotenv_settings, file_secret_settings

    @property
    def is_development(self) -> bool:
        return self.env == "development"


def get_settings() -> Settings:
    return Settings()
