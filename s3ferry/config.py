"""
Configuration management for s3ferry.

Settings live in a JSON document, ``s3.json``, in the directory named by
``S3FERRY_CONFIG`` or else the user's home directory. The file is read with
``yaml.safe_load``, so a hand-written YAML file is accepted as well. It is always
written back as JSON.

``AWS_ACCESS_KEY_ID``, ``AWS_SECRET_ACCESS_KEY`` and ``AWS_SESSION_TOKEN`` take
precedence over the stored static credentials.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from voluptuous import ALLOW_EXTRA, All, Any, Coerce, Invalid, Optional as Opt, Range, Schema

from s3ferry.constants import (
    CONFIG_ENV_VAR,
    CONFIG_FILE_NAME,
    DEFAULT_REGION,
    ENV_ACCESS_KEY,
    ENV_SECRET_KEY,
    ENV_SESSION_TOKEN,
    VAULT_AUTH_METHODS,
    VAULT_AUTH_TOKEN,
    VAULT_DEFAULT_ENGINE_PATH,
    VAULT_ENGINE_VERSION_AUTO,
    VAULT_ENGINE_VERSIONS,
)
from s3ferry.exceptions import ConfigurationError

# Attribute name -> key in the JSON document
FIELD_MAP = {
    "metadata": "bucket_metadata",
    "bucket": "bucket_name",
    "region": "bucket_region",
    "part_size": "bucket_part_size",
    "endpoint": "bucket_endpoint_address",
    "access_key": "bucket_access_key",
    "secret_key": "bucket_secret_key",
    "session_token": "bucket_token_session",
    "local_folder": "local_folder",
    "vault_address": "vault_address",
    "vault_engine_path": "vault_token_engine_path",
    "vault_engine_version": "vault_engine_version",
    "vault_namespace": "vault_namespace",
    "vault_ssl_no_validate": "vault_ssl_no_validate",
    "vault_auth_method": "vault_auth_method",
    "vault_auth_token": "vault_auth_token",
    "vault_auth_role_id": "vault_auth_role_id",
    "vault_auth_secret_id": "vault_auth_secret_id",
    "vault_auth_approle_path": "vault_auth_approle_path",
    "vault_auth_cert": "vault_auth_certificate",
    "vault_auth_cert_key": "vault_auth_certificate_key",
    "vault_auth_cert_ca": "vault_auth_certificate_ca",
    "vault_auth_cert_role": "vault_auth_certificate_role",
    "vault_auth_cert_path": "vault_auth_certificate_path",
}

_STRING_KEYS = [key for attr, key in FIELD_MAP.items() if attr not in (
    "metadata", "part_size", "vault_ssl_no_validate", "vault_auth_method",
    "vault_engine_version",
)]


def _settings_schema():
    schema = {Opt(key): Any(None, str) for key in _STRING_KEYS}
    schema.update({
        Opt("bucket_metadata"): Any(None, {str: Coerce(str)}),
        Opt("bucket_part_size"): Any(None, All(Coerce(int), Range(min=0))),
        Opt("vault_ssl_no_validate"): Any(None, bool),
        Opt("vault_auth_method"): Any(None, "", *VAULT_AUTH_METHODS),
        Opt("vault_engine_version"): Any(
            None,
            All(Coerce(str), Any("", VAULT_ENGINE_VERSION_AUTO, *VAULT_ENGINE_VERSIONS)),
        ),
    })
    return Schema(schema, extra=ALLOW_EXTRA)


SETTINGS_SCHEMA = _settings_schema()


@dataclass
class Settings:
    """
    The process-wide context object. Built once at startup and passed to the
    credential broker, the S3 client factory and the actions.
    """

    bucket: str = ""
    region: str = DEFAULT_REGION
    part_size: int = 0
    endpoint: str = ""
    metadata: dict = field(default_factory=dict)
    local_folder: str = field(default_factory=os.getcwd)
    access_key: str = ""
    secret_key: str = ""
    session_token: str = ""
    vault_address: str = ""
    vault_engine_path: str = VAULT_DEFAULT_ENGINE_PATH
    vault_engine_version: str = ""
    vault_namespace: str = ""
    vault_ssl_no_validate: bool = False
    vault_auth_method: str = VAULT_AUTH_TOKEN
    vault_auth_token: str = ""
    vault_auth_role_id: str = ""
    vault_auth_secret_id: str = ""
    vault_auth_approle_path: str = ""
    vault_auth_cert: str = ""
    vault_auth_cert_key: str = ""
    vault_auth_cert_ca: str = ""
    vault_auth_cert_role: str = ""
    vault_auth_cert_path: str = ""

    @classmethod
    def from_dict(cls, document: dict) -> "Settings":
        """
        Build settings from a configuration document, keeping defaults for
        missing or empty keys.
        """
        try:
            document = SETTINGS_SCHEMA(document or {})
        except Invalid as err:
            raise ConfigurationError(f"Invalid configuration: {err}") from err
        settings = cls()
        for attr, key in FIELD_MAP.items():
            value = document.get(key)
            if value in (None, "") or value == {}:
                continue
            setattr(settings, attr, value)
        return settings

    def to_dict(self) -> dict:
        """Return the configuration document, leaving out empty values"""
        values = asdict(self)
        return {
            FIELD_MAP[attr]: values[attr]
            for attr in FIELD_MAP
            if values[attr] not in (None, "", 0, {}, False)
        }

    @property
    def has_static_credentials(self) -> bool:
        """Both halves of a static key pair are configured"""
        return bool(self.access_key and self.secret_key)

    def credential(self):
        """Return the static credentials as a :py:class:`~.s3ferry.vault.Credential`"""
        # Imported here so that the config module stays free of HTTP dependencies
        from s3ferry.vault import Credential

        return Credential(
            access_key=self.access_key,
            secret_key=self.secret_key,
            session_token=self.session_token,
        )


def default_config_path() -> Path:
    """
    Locate the configuration file.

    Priority: the ``S3FERRY_CONFIG`` directory, then the user's home directory.
    """
    config_dir = os.environ.get(CONFIG_ENV_VAR)
    if not config_dir:
        config_dir = Path.home()
    return Path(config_dir) / CONFIG_FILE_NAME


def apply_env_overrides(settings: Settings) -> Settings:
    """Let the AWS environment variables replace the stored static credentials"""
    loggit = logging.getLogger("s3ferry.config")
    overrides = {
        "access_key": ENV_ACCESS_KEY,
        "secret_key": ENV_SECRET_KEY,
        "session_token": ENV_SESSION_TOKEN,
    }
    for attr, env_var in overrides.items():
        value = os.environ.get(env_var)
        if value:
            loggit.debug("Applying environment override: %s", env_var)
            setattr(settings, attr, value)
    return settings


def load_settings(
    config_path: Optional[str] = None, env_overrides: bool = True
) -> Settings:
    """
    Load settings from the configuration file and the environment.

    A missing file is not an error: defaults are used and a debug message is
    logged.

    Args:
        config_path: Path to the configuration file. Defaults to
            :py:func:`default_config_path`.
        env_overrides: Apply the AWS credential environment variables. The
            ``config`` commands turn this off so they never persist them.

    Returns:
        Settings: The merged settings

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    loggit = logging.getLogger("s3ferry.config")
    path = Path(config_path) if config_path else default_config_path()
    document = {}
    if path.is_file():
        loggit.debug("Loading configuration from: %s", path)
        try:
            with open(path, encoding="utf-8") as f:
                document = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Unable to read configuration file {path}: {e}") from e
        if not isinstance(document, dict):
            raise ConfigurationError(f"Configuration file {path} must hold an object")
    else:
        loggit.debug("No configuration file at %s, using defaults", path)
    settings = Settings.from_dict(document)
    if env_overrides:
        apply_env_overrides(settings)
    return settings


def save_settings(settings: Settings, config_path: Optional[str] = None) -> Path:
    """
    Write the settings back as indented JSON.

    Returns:
        Path: Where the file was written
    """
    loggit = logging.getLogger("s3ferry.config")
    path = Path(config_path) if config_path else default_config_path()
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)
            f.write("\n")
    except OSError as e:
        raise ConfigurationError(f"Unable to write configuration file {path}: {e}") from e
    loggit.info("Configuration saved to %s", path)
    return path
