"""Receive action: download objects from a bucket"""

# pylint: disable=too-many-arguments

import os

from s3ferry.actions.transfer import Transfer
from s3ferry.constants import LIST_PAGE_SIZE
from s3ferry.helpers import Candidate
from s3ferry.template import render
from s3ferry.wildcard import compile_filter, has_wildcard


class Receive(Transfer):
    """
    Receive downloads objects under ``prefix`` into ``folder``.

    A filter with a ``*`` lists the whole prefix and keeps the keys the filter
    matches. A filter without one names a single object and skips the listing.
    Each local file name is the key rendered through the rename mask.

    :methods:
        do_dry_run: List the objects that would be received
        do_action: Receive the objects

    :example:
        >>> from s3ferry.actions import Receive
        >>> receive = Receive(s3, "backups", "*.tar.gz", "/restore", prefix="daily")
        >>> receive.do_action()
    """

    direction = "receive"

    def select(self) -> list:
        if not has_wildcard(self.filter_pattern):
            return [Candidate(source=self.prefix + self.filter_pattern)]
        keys = self.s3.list_objects(self.bucket, self.prefix, LIST_PAGE_SIZE)
        self.report.scanned = len(keys)
        self.loggit.info("total of keys verified in bucket %s: %d", self.bucket, len(keys))
        matcher = compile_filter(self.filter_pattern, self.prefix)
        return [Candidate(source=key) for key in keys if matcher.search(key)]

    def destination_for(self, source: str) -> str:
        return os.path.join(self.folder, render(source, self.rename))

    def transfer(self, candidate) -> tuple:
        size = self.s3.get_object(self.bucket, candidate.source, candidate.destination)
        return size, candidate.destination

    def remove_source(self, candidate) -> None:
        self.s3.delete_object(self.bucket, candidate.source)
