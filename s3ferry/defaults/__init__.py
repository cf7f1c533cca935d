"""
Option defaults for s3ferry.

This module provides voluptuous schema definitions for every option of the
``get``, ``put`` and ``config`` commands and for the logging options.
"""

from voluptuous import All, Any, Coerce, Length, Optional, Range, Required

from s3ferry.constants import (
    VAULT_AUTH_METHODS,
    VAULT_ENGINE_VERSION_AUTO,
    VAULT_ENGINE_VERSIONS,
)
from s3ferry.helpers import normalize_prefix


def Boolean():
    """
    Validate boolean-like string values.
    Accepts 'true', 'false', '1', '0', 'yes', 'no' (case-insensitive).
    """
    def validator(value):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            if value.lower() in ('true', '1', 'yes'):
                return True
            if value.lower() in ('false', '0', 'no'):
                return False
        raise ValueError(f"Invalid boolean value: {value}")
    return validator


def OptionalString(name):
    """An optional free-form string option, ``None`` allowed"""
    return {Optional(name, default=None): Any(None, str)}


# Transfer options

def filter_pattern():
    """
    File name filter. ``*`` is a wildcard; without one the filter names a single
    file or object.
    """
    return {Required("filter"): All(str, Length(min=1))}


def bucket():
    """
    Bucket name. Required once the stored configuration has been merged in.
    """
    return {Required("bucket"): All(str, Length(min=1))}


def region():
    """
    Bucket signing region.
    """
    return OptionalString("region")


def endpoint():
    """
    Custom endpoint URL for S3-compatible services.
    """
    return OptionalString("endpoint")


def part_size():
    """
    Multipart chunk size in bytes. Values under 5 MiB mean automatic.
    """
    return {Optional("part_size", default=0): Any(None, All(Coerce(int), Range(min=0)))}


def folder():
    """
    Local folder holding the files to send, or receiving downloads.
    """
    return OptionalString("folder")


def prefix():
    """
    Bucket prefix (sub folder). Normalized to no leading and one trailing ``/``.
    """
    return {Optional("prefix", default=""): All(Any(None, str), normalize_prefix)}


def rename():
    """
    Rename mask, see :py:mod:`s3ferry.template`.
    """
    return {Optional("rename", default=""): Any(None, str)}


def remove():
    """
    Remove the source after a successful transfer.
    """
    return {Optional("remove", default=False): Boolean()}


def error_no_files():
    """
    Exit with an error when nothing matched the filter.
    """
    return {Optional("error_no_files", default=False): Boolean()}


def role():
    """
    Vault role used to request bucket credentials.
    """
    return OptionalString("role")


def metadata():
    """
    Upload metadata, ``key1=value1;key2=value2``.
    """
    return OptionalString("metadata")


def porcelain():
    """
    Machine-readable output.
    """
    return {Optional("porcelain", default=False): Boolean()}


# Config s3 options

def access_key():
    """
    Static bucket access key.
    """
    return OptionalString("access_key")


def secret_key():
    """
    Static bucket secret key.
    """
    return OptionalString("secret_key")


def session_token():
    """
    Static bucket session token.
    """
    return OptionalString("session_token")


# Config vault options

def vault_address():
    """
    Vault base URL.
    """
    return OptionalString("vault_address")


def auth_method():
    """
    Vault authentication method.
    """
    return {
        Optional("auth_method", default=None): Any(
            None, All(str, lambda v: v.lower(), Any(*VAULT_AUTH_METHODS))
        )
    }


def engine_version():
    """
    Secrets engine version, or ``auto`` to ask the vault.
    """
    return {
        Optional("engine_version", default=None): Any(
            None, VAULT_ENGINE_VERSION_AUTO, *VAULT_ENGINE_VERSIONS
        )
    }


def ssl_no_validate():
    """
    Do not verify the vault server certificate.
    """
    return {Optional("ssl_no_validate", default=None): Any(None, Boolean())}


# Logging

def config_logging():
    """
    Logging options with defaults:

    .. code-block:: yaml

        loglevel: INFO
        logfile: None
        logformat: default
        blacklist: ['botocore', 'boto3', 's3transfer', 'urllib3']
    """
    return {
        Optional('loglevel', default='INFO'):
            Any(None, 'NOTSET', 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'),
        Optional('logfile', default=None): Any(None, str),
        Optional('logformat', default='default'):
            Any(None, 'default', 'json', 'logstash', 'ecs'),
        Optional('blacklist', default=['botocore', 'boto3', 's3transfer', 'urllib3']):
            Any(None, list),
    }
