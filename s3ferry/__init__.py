"""
s3ferry - Move files between a local folder and an S3 bucket

Bucket credentials are either configured statically or requested from a vault
server for a role, just before the transfer.
"""

__version__ = "1.0.0"

from s3ferry.exceptions import (
    S3FerryException,
    ConfigurationError,
    AuthError,
    EnumerationError,
    NoMatchingFiles,
    TransferError,
    DeleteError,
)
from s3ferry.constants import (
    CONFIG_ENV_VAR,
    CONFIG_FILE_NAME,
    DEFAULT_MASK,
    DEFAULT_REGION,
)
from s3ferry.config import (
    Settings,
    load_settings,
    save_settings,
)
from s3ferry.helpers import (
    Candidate,
    TransferResult,
    TransferReport,
)
from s3ferry.s3client import (
    S3Client,
    AwsS3Client,
    s3_client_factory,
)
from s3ferry.vault import (
    Credential,
    Vault,
    load_credentials,
)

__all__ = [
    "__version__",
    # Exceptions
    "S3FerryException",
    "ConfigurationError",
    "AuthError",
    "EnumerationError",
    "NoMatchingFiles",
    "TransferError",
    "DeleteError",
    # Constants
    "CONFIG_ENV_VAR",
    "CONFIG_FILE_NAME",
    "DEFAULT_MASK",
    "DEFAULT_REGION",
    # Configuration
    "Settings",
    "load_settings",
    "save_settings",
    # Helper classes
    "Candidate",
    "TransferResult",
    "TransferReport",
    # S3 Client
    "S3Client",
    "AwsS3Client",
    "s3_client_factory",
    # Vault
    "Credential",
    "Vault",
    "load_credentials",
]
