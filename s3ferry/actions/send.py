"""Send action: upload local files to a bucket"""

# pylint: disable=too-many-arguments,too-many-instance-attributes, raise-missing-from

import glob
import os

from s3ferry.actions.transfer import Transfer
from s3ferry.exceptions import DeleteError, EnumerationError, TransferError
from s3ferry.helpers import Candidate, choose_part_size, effective_part_size
from s3ferry.s3client import S3Client
from s3ferry.template import render


class Send(Transfer):
    """
    Send uploads every regular file in ``folder`` matching ``filter_pattern``.

    Each key is ``prefix`` followed by the file name rendered through the rename
    mask. The multipart chunk size follows the file size unless ``part_size`` is
    at least 5 MiB.

    :param s3: The storage client
    :param bucket: Destination bucket
    :param filter_pattern: Glob pattern, relative to ``folder``
    :param folder: Local folder to read from
    :param metadata: User metadata attached to every object
    :param part_size: Multipart chunk size in bytes, below 5 MiB means automatic

    :methods:
        do_dry_run: List the files that would be sent
        do_action: Send the files

    :example:
        >>> from s3ferry.actions import Send
        >>> send = Send(s3, "backups", "*.tar.gz", "/var/backups")
        >>> send.do_action()
    """

    direction = "send"

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
        metadata: dict = None,
        part_size: int = 0,
    ) -> None:
        super().__init__(
            s3,
            bucket,
            filter_pattern,
            folder,
            prefix=prefix,
            rename=rename,
            remove=remove,
            error_no_files=error_no_files,
            porcelain=porcelain,
        )
        self.metadata = metadata or {}
        self.part_size = effective_part_size(part_size)
        if self.part_size:
            self.loggit.debug("Using a fixed part size of %d bytes", self.part_size)

    def select(self) -> list:
        pattern = os.path.join(self.folder, self.filter_pattern)
        self.loggit.debug("Looking for files matching %s", pattern)
        try:
            paths = sorted(glob.glob(pattern))
        except (OSError, ValueError) as e:
            raise EnumerationError(f"Unable to list {pattern}: {e}")
        return [Candidate(source=path) for path in paths if os.path.isfile(path)]

    def destination_for(self, source: str) -> str:
        return self.prefix + render(source, self.rename)

    def transfer(self, candidate) -> tuple:
        try:
            size = os.stat(candidate.source).st_size
        except OSError as e:
            raise TransferError(f"Unable to stat {candidate.source}: {e}")
        part_size = choose_part_size(size, self.part_size)
        self.loggit.debug("Part size for %s: %d bytes", candidate.source, part_size)
        location = self.s3.put_object(
            self.bucket,
            candidate.destination,
            candidate.source,
            metadata=self.metadata,
            part_size=part_size,
        )
        return size, location

    def remove_source(self, candidate) -> None:
        try:
            os.remove(candidate.source)
        except OSError as e:
            raise DeleteError(f"Unable to remove {candidate.source}: {e}")
