"""
s3ferry CLI entry point

``get`` and ``put`` move files between a local folder and a bucket; ``config``
edits the stored settings.
"""

import logging
from dataclasses import replace

import click

from s3ferry import __version__
from s3ferry.config import load_settings, save_settings
from s3ferry.constants import RENAME_TOKENS_HELP
from s3ferry.exceptions import S3FerryException
from s3ferry.helpers import effective_part_size, parse_metadata
from s3ferry.logtools import set_logging
from s3ferry.s3client import s3_client_factory
from s3ferry.validators import validate_options
from s3ferry.vault import load_credentials

# config vault option -> Settings attribute
VAULT_FIELDS = {
    "vault_address": "vault_address",
    "token": "vault_auth_token",
    "auth_method": "vault_auth_method",
    "engine_path": "vault_engine_path",
    "engine_version": "vault_engine_version",
    "namespace": "vault_namespace",
    "role_id": "vault_auth_role_id",
    "secret_id": "vault_auth_secret_id",
    "approle_path": "vault_auth_approle_path",
    "cert": "vault_auth_cert",
    "cert_key": "vault_auth_cert_key",
    "cert_ca": "vault_auth_cert_ca",
    "cert_role": "vault_auth_cert_role",
    "cert_path": "vault_auth_cert_path",
    "ssl_no_validate": "vault_ssl_no_validate",
}


def transfer_options(func):
    """Options shared by ``get`` and ``put``"""
    options = [
        click.option(
            "-f",
            "--filter",
            "filter_pattern",
            type=str,
            required=True,
            help="Filter to select files, * is a wildcard",
        ),
        click.option("-b", "--bucket", type=str, default=None, help="Bucket name"),
        click.option("--region", type=str, default=None, help="Bucket region"),
        click.option(
            "--partsize",
            "part_size",
            type=int,
            default=None,
            help="Size in bytes of each uploaded part (below 5 MiB is automatic)",
        ),
        click.option(
            "--endpoint",
            type=str,
            default=None,
            help="URL of the bucket end point (https://my-s3-url.com)",
        ),
        click.option(
            "-d", "--folder", type=str, default=None, help="Local folder for files"
        ),
        click.option(
            "--rm",
            "remove",
            is_flag=True,
            default=False,
            help="Remove files after transfer",
        ),
        click.option(
            "-c",
            "--rename",
            type=str,
            default="",
            help="Change the name of the target file, see the mask tokens below",
        ),
        click.option(
            "--enf",
            "--error-no-files",
            "error_no_files",
            is_flag=True,
            default=False,
            help="Exit with code 1 if no files are found",
        ),
        click.option(
            "-r", "--role", type=str, default=None, help="Vault role name to access the bucket"
        ),
        click.option(
            "-p", "--prefix", type=str, default="", help="Bucket prefix (sub folder)"
        ),
        click.option(
            "--porcelain",
            is_flag=True,
            default=False,
            help="Machine-readable output (tab-separated values, no formatting)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _transfer_settings(settings, options):
    """Merge the command line overrides into the stored settings"""
    return replace(
        settings,
        bucket=options["bucket"],
        region=options["region"] or settings.region,
        endpoint=options["endpoint"] or settings.endpoint,
        part_size=effective_part_size(options["part_size"]),
        local_folder=options["folder"] or settings.local_folder,
    )


def run_transfer(ctx, command, options):
    """
    Resolve credentials, build the S3 client and run the ``Send`` or ``Receive``
    action for ``command``.
    """
    from s3ferry.actions import Receive, Send

    loggit = logging.getLogger("s3ferry.cli")
    try:
        settings = load_settings(ctx.obj["config_path"])
        options["bucket"] = options["bucket"] or settings.bucket
        if options["part_size"] is None:
            options["part_size"] = settings.part_size
        options = validate_options(command, options)
        settings = _transfer_settings(settings, options)

        if settings.has_static_credentials:
            loggit.debug("Using static bucket credentials")
            credential = settings.credential()
        else:
            credential = load_credentials(settings, options["role"])
        s3 = s3_client_factory(settings, credential)

        kwargs = {
            "prefix": options["prefix"],
            "rename": options["rename"],
            "remove": options["remove"],
            "error_no_files": options["error_no_files"],
            "porcelain": options["porcelain"],
        }
        if command == "put":
            metadata = settings.metadata
            if options.get("metadata"):
                metadata = parse_metadata(options["metadata"])
            action = Send(
                s3,
                settings.bucket,
                options["filter"],
                settings.local_folder,
                metadata=metadata,
                part_size=settings.part_size,
                **kwargs,
            )
        else:
            action = Receive(
                s3, settings.bucket, options["filter"], settings.local_folder, **kwargs
            )

        if ctx.obj["dry_run"]:
            action.do_dry_run()
        else:
            action.do_action()
    except S3FerryException as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="s3ferry")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to the configuration file (default: s3.json in $S3FERRY_CONFIG or ~)",
)
@click.option(
    "--loglevel",
    type=click.Choice(
        ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False
    ),
    default=None,
    help="Log level",
)
@click.option("--logfile", type=str, default=None, help="Log file (default: stderr)")
@click.option(
    "--logformat",
    type=click.Choice(["default", "json", "logstash", "ecs"]),
    default=None,
    help="Log output format",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Do not perform any changes, only show what would happen",
)
@click.pass_context
def cli(ctx, config_path, loglevel, logfile, logformat, dry_run):
    """
    s3ferry - Move files between a local folder and an S3 bucket

    Bucket credentials come from the configuration, the AWS_ACCESS_KEY_ID,
    AWS_SECRET_ACCESS_KEY and AWS_SESSION_TOKEN environment variables, or a
    vault role.

    \b
    Configuration:
      Default config file: s3.json in $S3FERRY_CONFIG or the home directory
      Override with: --config /path/to/s3.json

    \b
    Available commands:
      get     Download files from the bucket
      put     Upload files to the bucket
      config  Change the stored configuration
    """
    ctx.ensure_object(dict)
    ctx.obj["dry_run"] = dry_run
    ctx.obj["config_path"] = config_path

    log_opts = {
        key: value
        for key, value in (
            ("loglevel", loglevel),
            ("logfile", logfile),
            ("logformat", logformat),
        )
        if value is not None
    }
    try:
        set_logging(validate_options("logging", log_opts))
    except S3FerryException as e:
        click.echo(f"Configuration error: {e}", err=True)
        ctx.exit(1)


@cli.command(epilog=RENAME_TOKENS_HELP)
@transfer_options
@click.pass_context
def get(ctx, filter_pattern, **kwargs):
    """
    Download files from the bucket.

    A filter with a * lists the bucket (under the prefix, if any) and downloads
    every key it matches. A filter without one names a single object.
    """
    run_transfer(ctx, "get", {"filter": filter_pattern, **kwargs})


@cli.command(epilog=RENAME_TOKENS_HELP)
@transfer_options
@click.option(
    "-m",
    "--metadata",
    type=str,
    default=None,
    help="Metadata stored with each uploaded file (key1=value1;key2=value2)",
)
@click.pass_context
def put(ctx, filter_pattern, **kwargs):
    """
    Upload files to the bucket.

    The filter is a file name pattern inside the local folder.
    """
    run_transfer(ctx, "put", {"filter": filter_pattern, **kwargs})


@cli.group(name="config")
def config_group():
    """Change the stored configuration"""


def _save(ctx, settings):
    try:
        path = save_settings(settings, ctx.obj["config_path"])
    except S3FerryException as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    click.echo(f"Configuration saved to {path}", err=True)


def _stored_settings(ctx):
    try:
        return load_settings(ctx.obj["config_path"], env_overrides=False)
    except S3FerryException as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def _require_one(options):
    if all(value is None for value in options.values()):
        raise click.UsageError("At least one option is required")


@config_group.command(name="s3")
@click.option("--bucket", type=str, default=None, help="Bucket name")
@click.option("--region", type=str, default=None, help="Bucket region")
@click.option(
    "--partsize",
    "part_size",
    type=int,
    default=None,
    help="Size in bytes of each uploaded part (below 5 MiB is automatic)",
)
@click.option(
    "--metadata",
    type=str,
    default=None,
    help="Metadata stored with each uploaded file (key1=value1;key2=value2)",
)
@click.option(
    "--endpoint",
    type=str,
    default=None,
    help="URL of the bucket end point (https://my-s3-url.com)",
)
@click.option(
    "--accesskey",
    "access_key",
    type=str,
    default=None,
    help="Bucket access key (asked to the vault if not provided)",
)
@click.option(
    "--secretkey",
    "secret_key",
    type=str,
    default=None,
    help="Bucket secret key (asked to the vault if not provided)",
)
@click.option(
    "--accesstoken", "session_token", type=str, default=None, help="Session token"
)
@click.pass_context
def config_s3(ctx, **options):
    """Store the bucket settings"""
    _require_one(options)
    settings = _stored_settings(ctx)
    try:
        options = validate_options("config_s3", options)
        if options["metadata"] is not None:
            settings.metadata = parse_metadata(options["metadata"])
    except S3FerryException as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    if options["part_size"] is not None:
        settings.part_size = effective_part_size(options["part_size"])
    for name in ("bucket", "region", "endpoint", "access_key", "secret_key", "session_token"):
        if options[name]:
            setattr(settings, name, options[name])
    _save(ctx, settings)


@config_group.command(name="vault")
@click.option(
    "--endpoint",
    "vault_address",
    type=str,
    default=None,
    help="URL of the vault API (https://my-vault-url.com)",
)
@click.option("--token", type=str, default=None, help="Vault authentication token")
@click.option(
    "--auth",
    "auth_method",
    type=str,
    default=None,
    help="Vault authentication method (token, approle, cert)",
)
@click.option(
    "--enginepath",
    "engine_path",
    type=str,
    default=None,
    help="Vault engine path to ask for credentials",
)
@click.option(
    "--engineversion",
    "engine_version",
    type=str,
    default=None,
    help="Secrets engine version (1, 2 or auto)",
)
@click.option("--namespace", type=str, default=None, help="Vault namespace")
@click.option(
    "--authrole", "role_id", type=str, default=None, help="Vault app-role role id"
)
@click.option(
    "--authsecret", "secret_id", type=str, default=None, help="Vault app-role secret id"
)
@click.option(
    "--approlepath",
    "approle_path",
    type=str,
    default=None,
    help="Vault app-role authentication path",
)
@click.option(
    "--authcert", "cert", type=str, default=None, help="Vault authentication certificate"
)
@click.option(
    "--authcertkey",
    "cert_key",
    type=str,
    default=None,
    help="Vault authentication certificate key",
)
@click.option(
    "--authcertca",
    "cert_ca",
    type=str,
    default=None,
    help="Vault authentication certificate CA",
)
@click.option(
    "--authcertrole",
    "cert_role",
    type=str,
    default=None,
    help="Vault authentication certificate role name",
)
@click.option(
    "--authcertpath",
    "cert_path",
    type=str,
    default=None,
    help="Vault certificate authentication path",
)
@click.option(
    "--ssl-no-validate/--ssl-validate",
    "ssl_no_validate",
    default=None,
    help="Do not verify the vault server certificate",
)
@click.pass_context
def config_vault(ctx, **options):
    """Store the vault settings"""
    _require_one(options)
    settings = _stored_settings(ctx)
    try:
        options = validate_options("config_vault", options)
    except S3FerryException as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    for name, attr in VAULT_FIELDS.items():
        value = options[name]
        if value is None or value == "":
            continue
        setattr(settings, attr, value)
    _save(ctx, settings)


@config_group.command(name="local")
@click.option(
    "--folder", type=str, default=None, help="Default folder of files to upload or download"
)
@click.pass_context
def config_local(ctx, **options):
    """Store the local folder"""
    _require_one(options)
    settings = _stored_settings(ctx)
    try:
        options = validate_options("config_local", options)
    except S3FerryException as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    if options["folder"]:
        settings.local_folder = options["folder"]
    _save(ctx, settings)
