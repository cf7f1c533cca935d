"""Helper classes and functions for s3ferry

Data classes describing a transfer batch, plus the small policies shared by the
send and receive actions (part size tiers, prefix and metadata handling).
"""

from dataclasses import dataclass, field
from typing import Optional

from s3ferry.constants import (
    MIN_PART_SIZE,
    MiB,
    PART_SIZE_LARGE,
    PART_SIZE_MEDIUM,
    PART_SIZE_SMALL,
    TIER_MEDIUM_LIMIT,
    TIER_SMALL_LIMIT,
)
from s3ferry.exceptions import ConfigurationError


@dataclass
class Candidate:
    """
    A file or object selected for transfer.

    Attributes:
        source (str): Local path (upload) or object key (download).
        destination (str): Object key (upload) or local path (download). Empty
            until the rename mask is rendered, right before the transfer.
    """

    source: str
    destination: str = ""


@dataclass
class TransferResult:
    """
    Outcome of one transfer. Only used for reporting.

    Attributes:
        candidate (Candidate): What was transferred.
        size (int): Bytes moved.
        elapsed (float): Seconds spent in the transfer call.
        location (str): Object URL (upload) or local path (download).
    """

    candidate: Candidate
    size: int
    elapsed: float
    location: str = ""

    @property
    def rate(self) -> float:
        """Throughput in MiB/s. A zero elapsed time counts as one second."""
        if self.elapsed <= 0:
            return self.size / MiB
        return self.size / self.elapsed / MiB


@dataclass
class TransferReport:
    """
    Summary of one invocation.

    Attributes:
        selected (list[Candidate]): Every candidate, in transfer order.
        results (list[TransferResult]): Successful transfers.
        scanned (int): Keys read from the bucket listing (downloads with a
            wildcard filter only).
        remove_failures (list[str]): Sources that could not be removed.
        dry_run (bool): Nothing was transferred.
    """

    selected: list = field(default_factory=list)
    results: list = field(default_factory=list)
    scanned: Optional[int] = None
    remove_failures: list = field(default_factory=list)
    dry_run: bool = False

    @property
    def total_bytes(self) -> int:
        """Bytes moved across the batch"""
        return sum(result.size for result in self.results)


def effective_part_size(part_size):
    """
    Return the configured part size, or ``0`` for automatic when it is below the
    smallest usable multipart chunk.
    """
    if not part_size or part_size < MIN_PART_SIZE:
        return 0
    return part_size


def choose_part_size(file_size, part_size=0):
    """
    Pick the multipart chunk size for an upload.

    An explicit part size of at least 5 MiB always wins. Otherwise the tier
    follows the file size: 64 MiB under 10 GiB, 100 MiB under 100 GiB, and
    250 MiB beyond.

    :param file_size: Size of the file in bytes
    :param part_size: The configured part size

    :type file_size: int
    :type part_size: int

    :rtype: int
    """
    if effective_part_size(part_size):
        return part_size
    if file_size < TIER_SMALL_LIMIT:
        return PART_SIZE_SMALL
    if file_size < TIER_MEDIUM_LIMIT:
        return PART_SIZE_MEDIUM
    return PART_SIZE_LARGE


def normalize_prefix(prefix):
    """Drop a leading ``/`` and make sure a non-empty prefix ends with ``/``"""
    if not prefix:
        return ""
    prefix = prefix.lstrip("/")
    if prefix and not prefix.endswith("/"):
        prefix += "/"
    return prefix


def parse_metadata(value):
    """
    Parse ``key1=value1;key2=value2`` into a dict.

    :param value: The metadata string. Empty gives an empty dict.
    :type value: str

    :rtype: dict
    """
    metadata = {}
    if not value:
        return metadata
    for idx, item in enumerate(value.split(";")):
        key, sep, val = item.partition("=")
        if not sep or not key.strip():
            raise ConfigurationError(f"[{idx}] metadata {item} is invalid")
        metadata[key.strip()] = val.strip()
    return metadata
