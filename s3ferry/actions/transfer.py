"""Shared transfer pipeline for the send and receive actions"""

# pylint: disable=too-many-arguments,too-many-instance-attributes, raise-missing-from

import abc
import logging
import time

from rich.console import Console
from rich.table import Table

from s3ferry.constants import DEFAULT_MASK
from s3ferry.exceptions import (
    ConfigurationError,
    DeleteError,
    NoMatchingFiles,
    TransferError,
)
from s3ferry.helpers import TransferReport, TransferResult, normalize_prefix
from s3ferry.s3client import S3Client


class Transfer(metaclass=abc.ABCMeta):
    """
    Base class for a batch transfer between a local folder and a bucket.

    Subclasses provide the selection, naming, transfer and removal steps.
    Candidates are transferred one at a time, in selection order, and the batch
    stops at the first transfer failure. Each destination is rendered right
    before its transfer, so time tokens in the rename mask follow the batch.

    :param s3: The storage client
    :param bucket: Bucket name
    :param filter_pattern: File name filter, ``*`` is a wildcard
    :param folder: Local folder
    :param prefix: Bucket prefix
    :param rename: Rename mask, see :py:mod:`s3ferry.template`
    :param remove: Remove each source after it was transferred
    :param error_no_files: Raise :py:exc:`~.s3ferry.exceptions.NoMatchingFiles`
        when nothing matched
    :param porcelain: Print tab-separated results instead of rich tables
    """

    #: Verb used in log messages, e.g. ``send``
    direction = "transfer"

    def __init__(
        self,
        s3: S3Client,
        bucket: str,
        filter_pattern: str,
        folder: str,
        prefix: str = "",
        rename: str = "",
        remove: bool = False,
        error_no_files: bool = False,
        porcelain: bool = False,
    ) -> None:
        self.loggit = logging.getLogger(f"s3ferry.actions.{self.__class__.__name__.lower()}")
        self.loggit.debug("Initializing %s", self.__class__.__name__)

        # Console for STDERR output
        self.console = Console(stderr=True)

        if not filter_pattern:
            raise ConfigurationError("A file name filter is required")
        if not bucket:
            raise ConfigurationError("A bucket name is required")

        self.s3 = s3
        self.bucket = bucket
        self.filter_pattern = filter_pattern
        self.folder = folder
        self.prefix = normalize_prefix(prefix)
        self.rename = rename or DEFAULT_MASK
        self.remove = remove
        self.error_no_files = error_no_files
        self.porcelain = porcelain

        self.report = TransferReport()

    @abc.abstractmethod
    def select(self) -> list:
        """Return the candidates to transfer, in transfer order"""
        return

    @abc.abstractmethod
    def destination_for(self, source: str) -> str:
        """Render the rename mask for ``source``. Time tokens take the current time."""
        return

    @abc.abstractmethod
    def transfer(self, candidate) -> tuple:
        """Move one candidate. Returns ``(size, location)``."""
        return

    @abc.abstractmethod
    def remove_source(self, candidate) -> None:
        """Delete the source of a transferred candidate"""
        return

    def _selection(self) -> list:
        candidates = self.select()
        if not candidates:
            msg = f"no files matched {self.filter_pattern}"
            self.loggit.warning(msg)
            if self.error_no_files:
                raise NoMatchingFiles(msg)
        else:
            self.loggit.info(
                "[%d] selected to %s: %s",
                len(candidates),
                self.direction,
                ", ".join(c.source for c in candidates),
            )
        self.report.selected = candidates
        return candidates

    def _remove(self, idx: int, candidate) -> None:
        try:
            self.remove_source(candidate)
            self.loggit.info("[%d] removed %s", idx, candidate.source)
        except DeleteError as e:
            self.loggit.warning("[%d] unable to remove %s: %s", idx, candidate.source, e)
            self.report.remove_failures.append(candidate.source)

    def _display_selection(self) -> None:
        if self.porcelain:
            for candidate in self.report.selected:
                print(f"DRY-RUN\t{candidate.source}\t{candidate.destination}")
            return
        table = Table(title=f"Files to {self.direction} (dry run)")
        table.add_column("Source", style="cyan")
        table.add_column("Destination", style="yellow")
        for candidate in self.report.selected:
            table.add_row(candidate.source, candidate.destination)
        self.console.print(table)

    def _display_summary(self) -> None:
        if self.porcelain:
            for result in self.report.results:
                print(
                    f"{result.candidate.source}\t{result.location}\t"
                    f"{result.size}\t{result.elapsed:.2f}\t{result.rate:.2f}"
                )
            return
        table = Table(title=f"{self.direction.capitalize()} summary")
        table.add_column("Source", style="cyan")
        table.add_column("Location", style="yellow")
        table.add_column("Bytes", justify="right")
        table.add_column("Elapsed (s)", justify="right")
        table.add_column("MB/s", justify="right", style="green")
        for result in self.report.results:
            table.add_row(
                result.candidate.source,
                result.location,
                str(result.size),
                f"{result.elapsed:.2f}",
                f"{result.rate:.2f}",
            )
        self.console.print(table)
        for source in self.report.remove_failures:
            self.console.print(f"[yellow]Not removed:[/yellow] {source}")

    def do_dry_run(self) -> TransferReport:
        """Select candidates and show what would be transferred"""
        self.loggit.info("DRY-RUN MODE.  No changes will be made.")
        self.report.dry_run = True
        candidates = self._selection()
        for candidate in candidates:
            candidate.destination = self.destination_for(candidate.source)
            self.loggit.info(
                "DRY-RUN: %s %s -> %s", self.direction, candidate.source, candidate.destination
            )
        self._display_selection()
        return self.report

    def do_action(self) -> TransferReport:
        """
        Transfer every selected candidate.

        :raises TransferError: on the first failed transfer, carrying the
            completed results and the candidates never attempted
        """
        candidates = self._selection()
        for idx, candidate in enumerate(candidates):
            candidate.destination = self.destination_for(candidate.source)
            self.loggit.debug("[%d] %s %s -> %s", idx, self.direction, candidate.source, candidate.destination)
            start = time.perf_counter()
            try:
                size, location = self.transfer(candidate)
            except TransferError as e:
                raise TransferError(
                    f"[{idx}] failed to {self.direction} {candidate.source}: {e}",
                    completed=list(self.report.results),
                    failed=candidate,
                    remaining=candidates[idx + 1:],
                ) from e
            result = TransferResult(
                candidate=candidate,
                size=size,
                elapsed=time.perf_counter() - start,
                location=location,
            )
            self.report.results.append(result)
            self.loggit.info(
                "[%d] %s completed, size: %d bytes elapsed: %.2fs rate: %.2fMB/s location: %s",
                idx,
                self.direction,
                result.size,
                result.elapsed,
                result.rate,
                result.location,
            )
            if self.remove:
                self._remove(idx, candidate)
        self._display_summary()
        return self.report
