"""
s3client.py

S3 client abstraction for s3ferry. The orchestrator only talks to
:py:class:`S3Client`; :py:class:`AwsS3Client` implements it with boto3 for AWS and
any S3-compatible endpoint.
"""

# pylint: disable=too-many-arguments

import abc
import logging

import boto3
from boto3.s3.transfer import TransferConfig
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from s3transfer.exceptions import RetriesExceededError

from s3ferry.constants import (
    DOWNLOAD_PART_SIZE,
    LIST_PAGE_SIZE,
    S3_CONNECT_TIMEOUT,
    S3_READ_TIMEOUT,
)
from s3ferry.exceptions import DeleteError, EnumerationError, TransferError


class S3Client(metaclass=abc.ABCMeta):
    """
    Superclass for S3 Clients.

    This class should *only* perform object operations. Selection, naming and
    reporting belong to the calling actions.
    """

    @abc.abstractmethod
    def list_objects(
        self, bucket_name: str, prefix: str = "", page_size: int = LIST_PAGE_SIZE
    ) -> list[str]:
        """
        List every key in a bucket under a prefix.

        Args:
            bucket_name (str): The bucket to list.
            prefix (str): Only keys starting with this prefix are returned.
            page_size (int): Keys requested per listing call.

        Returns:
            list[str]: All keys, in listing order.
        """
        return

    @abc.abstractmethod
    def put_object(
        self,
        bucket_name: str,
        key: str,
        path: str,
        metadata: dict = None,
        part_size: int = None,
    ) -> str:
        """
        Upload a local file.

        Args:
            bucket_name (str): The destination bucket.
            key (str): The destination key.
            path (str): The local file to send.
            metadata (dict): User metadata stored with the object.
            part_size (int): Multipart chunk size in bytes.

        Returns:
            str: The location of the new object.
        """
        return

    @abc.abstractmethod
    def get_object(self, bucket_name: str, key: str, path: str) -> int:
        """
        Download an object to a local file, replacing it if it exists.

        Args:
            bucket_name (str): The source bucket.
            key (str): The object key.
            path (str): The local destination.

        Returns:
            int: The number of bytes written.
        """
        return

    @abc.abstractmethod
    def delete_object(self, bucket_name: str, key: str) -> None:
        """
        Delete an object.

        Args:
            bucket_name (str): The bucket holding the object.
            key (str): The object key.
        """
        return


class AwsS3Client(S3Client):
    """
    An S3 client object built on boto3.

    :param credential: The credentials to sign requests with
    :param region: The signing region
    :param endpoint: Custom endpoint URL for S3-compatible services

    :type credential: :py:class:`~.s3ferry.vault.Credential`
    :type region: str
    :type endpoint: str
    """

    def __init__(self, credential, region=None, endpoint=None) -> None:
        self.loggit = logging.getLogger("s3ferry.s3client")
        self.endpoint = endpoint or None
        config = Config(
            connect_timeout=S3_CONNECT_TIMEOUT,
            read_timeout=S3_READ_TIMEOUT,
            retries={"max_attempts": 1, "mode": "standard"},
            s3={"addressing_style": "path"} if self.endpoint else None,
        )
        self.client = boto3.client(
            "s3",
            aws_access_key_id=credential.access_key,
            aws_secret_access_key=credential.secret_key,
            aws_session_token=credential.session_token or None,
            region_name=region or None,
            endpoint_url=self.endpoint,
            config=config,
        )
        if self.endpoint:
            self.loggit.info("S3 client initialized for custom endpoint %s", self.endpoint)
        else:
            self.loggit.info("S3 client initialized for the default AWS endpoint")

    def list_objects(
        self, bucket_name: str, prefix: str = "", page_size: int = LIST_PAGE_SIZE
    ) -> list[str]:
        """
        List every key in a bucket under a prefix, one page at a time.

        Args:
            bucket_name (str): The bucket to list.
            prefix (str): Only keys starting with this prefix are returned.
            page_size (int): Keys requested per listing call.

        Returns:
            list[str]: All keys, in listing order.
        """
        self.loggit.info(
            "Listing objects in bucket: %s with prefix: %s", bucket_name, prefix
        )
        paginator = self.client.get_paginator("list_objects_v2")
        keys = []
        page_num = 0
        try:
            pages = paginator.paginate(
                Bucket=bucket_name, Prefix=prefix, PaginationConfig={"PageSize": page_size}
            )
            for page in pages:
                page_num += 1
                contents = page.get("Contents", [])
                self.loggit.debug("Page %d holds %d objects", page_num, len(contents))
                keys.extend(obj["Key"] for obj in contents)
        except (ClientError, BotoCoreError) as e:
            self.loggit.error("Unable to list bucket %s: %s", bucket_name, e)
            raise EnumerationError(f"Unable to list bucket {bucket_name}: {e}") from e
        return keys

    def put_object(
        self,
        bucket_name: str,
        key: str,
        path: str,
        metadata: dict = None,
        part_size: int = None,
    ) -> str:
        """
        Upload a local file, multipart when it is larger than one part.

        Args:
            bucket_name (str): The destination bucket.
            key (str): The destination key.
            path (str): The local file to send.
            metadata (dict): User metadata stored with the object.
            part_size (int): Multipart chunk size in bytes.

        Returns:
            str: The location of the new object.
        """
        self.loggit.debug("Putting object: %s in bucket: %s", key, bucket_name)
        config = TransferConfig(use_threads=False)
        if part_size:
            config = TransferConfig(
                multipart_threshold=part_size,
                multipart_chunksize=part_size,
                use_threads=False,
            )
        extra_args = {"Metadata": metadata} if metadata else None
        try:
            with open(path, "rb") as body:
                self.client.upload_fileobj(
                    body, bucket_name, key, ExtraArgs=extra_args, Config=config
                )
        except OSError as e:
            raise TransferError(f"Unable to open file {path}: {e}") from e
        except (ClientError, BotoCoreError) as e:
            self.loggit.error(e)
            raise TransferError(f"Transfer of {path} failed: {e}") from e
        return self.location(bucket_name, key)

    def get_object(self, bucket_name: str, key: str, path: str) -> int:
        """
        Download an object to a local file, replacing it if it exists.

        Args:
            bucket_name (str): The source bucket.
            key (str): The object key.
            path (str): The local destination.

        Returns:
            int: The number of bytes written.
        """
        self.loggit.debug("Getting object: %s from bucket: %s", key, bucket_name)
        config = TransferConfig(
            multipart_threshold=DOWNLOAD_PART_SIZE,
            multipart_chunksize=DOWNLOAD_PART_SIZE,
            use_threads=False,
            num_download_attempts=1,
        )
        try:
            with open(path, "wb") as target:
                self.client.download_fileobj(bucket_name, key, target, Config=config)
                return target.tell()
        except OSError as e:
            raise TransferError(f"Unable to create file {path}: {e}") from e
        except (ClientError, BotoCoreError, RetriesExceededError) as e:
            self.loggit.error(e)
            raise TransferError(f"Unable to download {key}: {e}") from e

    def delete_object(self, bucket_name: str, key: str) -> None:
        """
        Delete an object.

        Args:
            bucket_name (str): The bucket holding the object.
            key (str): The object key.
        """
        self.loggit.debug("Deleting object: %s from bucket: %s", key, bucket_name)
        try:
            self.client.delete_object(Bucket=bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise DeleteError(f"Unable to remove {key}: {e}") from e

    def location(self, bucket_name: str, key: str) -> str:
        """Return the URL of an object"""
        endpoint = self.client.meta.endpoint_url.rstrip("/")
        return f"{endpoint}/{bucket_name}/{key}"


def s3_client_factory(settings, credential) -> S3Client:
    """
    Build the S3 client for the configured bucket endpoint.

    Args:
        settings (Settings): Region and endpoint are read from here.
        credential (Credential): The credentials to sign requests with.

    Returns:
        S3Client: A ready client.
    """
    return AwsS3Client(
        credential, region=settings.region, endpoint=settings.endpoint
    )
