"""s3ferry Exceptions

This module contains all exception classes raised by s3ferry. Errors coming from
boto3, requests or the filesystem are wrapped in one of these before they leave
the module that caught them.
"""


class S3FerryException(Exception):
    """
    Base class for all exceptions raised by s3ferry
    """


class ConfigurationError(S3FerryException):
    """
    Exception raised when a required setting is missing or invalid. Always raised
    before any network call is made.
    """


class AuthError(S3FerryException):
    """
    Exception raised when the vault rejects an authentication or secret request, or
    answers with a payload that cannot be decoded
    """


class EnumerationError(S3FerryException):
    """
    Exception raised when the candidate list cannot be built (bucket listing or
    local glob failure)
    """


class NoMatchingFiles(EnumerationError):
    """
    Exception raised when no candidates were selected and the caller asked for
    that to be treated as an error
    """


class TransferError(S3FerryException):
    """
    Exception raised when a single file fails to upload or download. Aborts the
    remaining batch.

    :param completed: The results of the transfers that finished before the failure
    :param failed: The candidate whose transfer failed
    :param remaining: The candidates that were never attempted

    :type completed: list
    :type remaining: list
    """

    def __init__(self, message, completed=None, failed=None, remaining=None):
        super().__init__(message)
        self.completed = completed or []
        self.failed = failed
        self.remaining = remaining or []


class DeleteError(S3FerryException):
    """
    Exception raised when the source of a successful transfer cannot be removed
    """
