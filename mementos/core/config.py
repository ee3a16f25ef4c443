#!/usr/bin/env python3
"""
config.py
--------------------
Runtime configuration for the Mementos service.

Settings are resolved in layers, each overriding the previous one:
    1. Field defaults (filesystem locations from core.paths)
    2. An optional YAML file (``config.yaml`` in the data root, the file
       named by ``MEMENTOS_CONFIG``, or a path passed explicitly)
    3. ``MEMENTOS_*`` environment variables
    4. Keyword overrides passed to ``Settings.load`` (CLI flags)

Usage:
    settings = Settings.load()
    settings = Settings.load("/etc/mementos/config.yaml")
    settings = Settings(database_url="sqlite://", strict_place_lock=False)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
from contextvars import ContextVar
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional, Tuple, Type, Union

# --- Third party imports ---
import yaml
from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
    YamlConfigSettingsSource,
)

# --- Local imports ---
from .exceptions import ValidationError
from .paths import CONFIG_PATH, DB_PATH, LOG_DIR, STORAGE_DIR

ENV_PREFIX = "MEMENTOS_"

# YAML file read by the Settings instance being built (set by Settings.load)
_config_file: ContextVar[Optional[Path]] = ContextVar("mementos_config_file", default=None)


class ConfigFileSource(YamlConfigSettingsSource):
    """YAML source that requires the document to be a mapping."""

    def _read_file(self, file_path: Path) -> Dict[str, Any]:
        try:
            data = super()._read_file(file_path)
        except yaml.YAMLError as e:
            raise ValidationError(f"Invalid YAML in {file_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError(f"Config file {file_path} must contain a mapping")
        return data


class Settings(BaseSettings):
    """
    Process-wide configuration.

    Attributes:
        database_url: SQLAlchemy URL of the relational store
        log_dir: Directory for rotating log files
        storage_dir: Directory backing the local object storage
        public_base_url: Base URL used to build object and upload URLs
        signing_secret: Secret for HMAC-signed upload URLs
        max_upload_bytes: Largest accepted upload
        presign_expiry_seconds: Lifetime of a signed upload URL
        stripe_secret_key: Payment provider API key
        stripe_webhook_secret: Secret for verifying webhook signatures
        stripe_price_id: Subscription price used for checkout
        app_url: Front-end URL used for checkout redirects
        allowed_origins: CORS origins accepted by the HTTP layer (a list in
            YAML, comma-separated in the environment)
        strict_place_lock: Reject place changes on memories whose event
            dictates the place
        default_quota_limit: Quota assigned to newly synced users
    """

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="forbid")

    database_url: str = f"sqlite:///{DB_PATH}"
    log_dir: Path = LOG_DIR
    storage_dir: Path = STORAGE_DIR
    public_base_url: str = "http://localhost:8000"
    signing_secret: str = "change-me"
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    presign_expiry_seconds: int = Field(default=600, gt=0)
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    stripe_price_id: Optional[str] = None
    app_url: str = "http://localhost:3000"
    allowed_origins: Annotated[List[str], NoDecode] = ["http://localhost:3000"]
    strict_place_lock: bool = True
    default_quota_limit: int = Field(default=100, ge=0)

    @field_validator("log_dir", "storage_dir")
    @classmethod
    def _expand_home(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("public_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        config_file = _config_file.get()
        if config_file is None:
            return init_settings, env_settings
        return init_settings, env_settings, ConfigFileSource(settings_cls, yaml_file=config_file)

    # ---- Loading ----
    @classmethod
    def load(
        cls,
        config_path: Optional[Union[str, Path]] = None,
        **overrides: Any,
    ) -> "Settings":
        """
        Build settings from defaults, a YAML file and the environment.

        Args:
            config_path: YAML file to read. When omitted, ``MEMENTOS_CONFIG``
                or the default location is used if it exists.
            **overrides: Values taking precedence over every other layer

        Returns:
            Resolved Settings instance

        Raises:
            ValidationError: If the file is missing or a value is invalid
        """
        if config_path:
            path = Path(config_path).expanduser()
            if not path.is_file():
                raise ValidationError(f"Config file not found: {path}")
        else:
            env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
            path = Path(env_path).expanduser() if env_path else CONFIG_PATH

        token = _config_file.set(path)
        try:
            return cls(**overrides)
        except PydanticValidationError as e:
            problems = []
            for err in e.errors():
                location = ".".join(str(part) for part in err.get("loc", ()))
                problems.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
            raise ValidationError(f"Invalid configuration: {'; '.join(problems)}") from e
        except SettingsError as e:
            raise ValidationError(f"Invalid configuration: {e}") from e
        finally:
            _config_file.reset(token)

    # ---- Derived values ----
    @property
    def payments_enabled(self) -> bool:
        """Whether checkout can be offered."""
        return bool(self.stripe_secret_key and self.stripe_price_id)
