"""
Schema validation for s3ferry command options.

Each command lists the option definitions from :py:mod:`s3ferry.defaults` that
apply to it. Validation applies the defaults and turns any
:py:class:`voluptuous.Invalid` into a
:py:class:`~.s3ferry.exceptions.ConfigurationError`.
"""

from voluptuous import Invalid, Schema

from s3ferry import defaults
from s3ferry.exceptions import ConfigurationError

_TRANSFER_OPTIONS = [
    defaults.filter_pattern(),
    defaults.bucket(),
    defaults.region(),
    defaults.endpoint(),
    defaults.part_size(),
    defaults.folder(),
    defaults.prefix(),
    defaults.rename(),
    defaults.remove(),
    defaults.error_no_files(),
    defaults.role(),
    defaults.porcelain(),
]

S3FERRY_OPTIONS = {
    'get': _TRANSFER_OPTIONS,
    'put': _TRANSFER_OPTIONS + [defaults.metadata()],
    'config_s3': [
        defaults.OptionalString('bucket'),
        defaults.region(),
        defaults.part_size(),
        defaults.metadata(),
        defaults.endpoint(),
        defaults.access_key(),
        defaults.secret_key(),
        defaults.session_token(),
    ],
    'config_vault': [
        defaults.vault_address(),
        defaults.OptionalString('token'),
        defaults.auth_method(),
        defaults.OptionalString('engine_path'),
        defaults.engine_version(),
        defaults.OptionalString('namespace'),
        defaults.OptionalString('role_id'),
        defaults.OptionalString('secret_id'),
        defaults.OptionalString('approle_path'),
        defaults.OptionalString('cert'),
        defaults.OptionalString('cert_key'),
        defaults.OptionalString('cert_ca'),
        defaults.OptionalString('cert_role'),
        defaults.OptionalString('cert_path'),
        defaults.ssl_no_validate(),
    ],
    'config_local': [
        defaults.folder(),
    ],
    'logging': [
        defaults.config_logging(),
    ],
}


def _build_schema(option_list: list) -> Schema:
    """
    Build a voluptuous Schema from a list of option definitions.

    Each option definition is a dict with a single key (the option name)
    and a validation rule as the value.

    Args:
        option_list: List of option definition dicts

    Returns:
        Schema: A voluptuous Schema that validates all options
    """
    schema_dict = {}
    for option_def in option_list:
        schema_dict.update(option_def)
    return Schema(schema_dict)


# Map command names to their schemas
ACTION_SCHEMAS = {
    name: _build_schema(option_list) for name, option_list in S3FERRY_OPTIONS.items()
}


def get_schema(action: str) -> Schema:
    """
    Get the validation schema for a given command.

    Args:
        action: The name of the command (get, put, config_s3, ...)

    Returns:
        Schema: The voluptuous Schema for the command

    Raises:
        KeyError: If the command is not recognized
    """
    if action not in ACTION_SCHEMAS:
        raise KeyError(f"Unknown action: {action}. Valid actions are: {list(ACTION_SCHEMAS.keys())}")
    return ACTION_SCHEMAS[action]


def validate_options(action: str, options: dict) -> dict:
    """
    Validate options for a given command, applying defaults.

    Args:
        action: The name of the command
        options: Dictionary of option values to validate

    Returns:
        dict: Validated and normalized options with defaults applied

    Raises:
        ConfigurationError: If validation fails
        KeyError: If the command is not recognized
    """
    schema = get_schema(action)
    try:
        return schema(options)
    except Invalid as err:
        raise ConfigurationError(f"Invalid {action} options: {err}") from err
