"""User configuration, persisted between runs.

Settings are read, highest priority first, from ``DBFSKIT_*`` environment
variables, a ``.env`` file, ``~/.dbfskit/config.yaml`` and the system
keyring. Setting ``DBFSKIT_PROFILE=name`` switches to
``~/.dbfskit/config-name.yaml`` and a separate keyring service.

The access token is kept in the keyring when one is available, and in the
YAML file otherwise.
"""

from __future__ import annotations

import os
from typing import Any

import keyring
import keyring.errors
import yaml
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from dbfskit.models import CloudProvider

# Fields stored in the keyring instead of the config file
SECRET_FIELDS = ("token",)


def supports_keyring() -> bool:
    try:
        keyring.get_password("dbfskit", "__check__")
    except Exception:
        # No backend, or one that cannot be reached (e.g., no D-Bus session)
        return False
    return True


KEYRING_SUPPORTED = supports_keyring()


def get_profile() -> str | None:
    """Get the active profile, which selects one of several config files."""
    return os.getenv("DBFSKIT_PROFILE") or None


def get_profile_suffix(sep: str = "-") -> str:
    profile = get_profile()
    return "" if profile is None else sep + profile


def get_app_name() -> str:
    """Get the keyring service name for the active profile."""
    return "dbfskit" + get_profile_suffix()


def get_config_yaml_fpath() -> str:
    return os.path.join(
        os.path.expanduser("~"),
        ".dbfskit",
        f"config{get_profile_suffix()}.yaml",
    )


class KeyringSource(PydanticBaseSettingsSource):
    """Load ``SECRET_FIELDS`` from the system keyring."""

    def get_field_value(self, field, field_name: str):
        value = keyring.get_password(get_app_name(), field_name)
        return value, field_name, False

    def __call__(self) -> dict[str, Any]:
        if not KEYRING_SUPPORTED:
            return {}
        values = {}
        for name in SECRET_FIELDS:
            field = self.settings_cls.model_fields[name]
            value, _, _ = self.get_field_value(field, name)
            if value is not None:
                values[name] = value
        return values


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        yaml_file=get_config_yaml_fpath(),
        extra="ignore",
        env_prefix="DBFSKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
    )
    host: str | None = None
    token: str | None = None
    cloud_provider: CloudProvider | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            KeyringSource(settings_cls),
        )

    def write(self) -> None:
        """Save to the YAML file for the active profile, moving secrets into
        the keyring if there is one.
        """
        fpath = self.model_config["yaml_file"]
        os.makedirs(os.path.dirname(fpath), exist_ok=True)
        cfg = self.model_dump()
        if KEYRING_SUPPORTED:
            for name in SECRET_FIELDS:
                _store_secret(name, cfg.pop(name))
        with open(fpath, "w") as f:
            yaml.safe_dump(cfg, f)


def _store_secret(name: str, value: str | None) -> None:
    service = get_app_name()
    if value is not None:
        keyring.set_password(service, name, value)
        return
    try:
        keyring.delete_password(service, name)
    except keyring.errors.PasswordDeleteError:
        # Nothing stored
        pass


def read() -> Settings:
    """Read the config."""
    # The profile may have changed since import
    Settings.model_config["yaml_file"] = get_config_yaml_fpath()
    return Settings()
