"""Filename masks

Renders a rename mask such as ``#FN_#DY#DM#DD#FE`` against a source name and the
moment of rendering.
"""

import random
import re
from datetime import datetime

from s3ferry.constants import DEFAULT_MASK

TOKEN_RE = re.compile(r"#(?:DY|YY|DM|DD|DJ|TH|TM|TS|TU|SP|FN|FE|R1|R2|R4)")

_RANDOM = random.Random()


def split_name(name):
    """
    Split a path into the base name and the extension of its last component.

    The extension keeps its leading dot. A name without a dot has an empty
    extension. Both ``/`` and ``\\`` are treated as separators, whatever the
    platform.

    :param name: A local path or object key
    :type name: str

    :returns: ``(base, extension)``
    :rtype: tuple
    """
    name = re.split(r"[/\\]", name)[-1]
    idx = name.rfind(".")
    if idx < 0:
        return name, ""
    return name[:idx], name[idx:]


def token_values(source_name, now, rng):
    """Map every mask token to its value for this rendering"""
    base, ext = split_name(source_name)
    year = now.strftime("%Y")
    return {
        "#DY": year,
        "#YY": year[2:],
        "#DM": now.strftime("%m"),
        "#DD": now.strftime("%d"),
        "#DJ": str(now.timetuple().tm_yday),
        "#TH": now.strftime("%H"),
        "#TM": now.strftime("%M"),
        "#TS": now.strftime("%S"),
        "#TU": f"{now.microsecond // 1000:03d}",
        "#SP": now.strftime("%Y%m%d%H%M%S%f"),
        "#FN": base,
        "#FE": ext,
        "#R1": f"{rng.randint(0, 9):01d}",
        "#R2": f"{rng.randint(0, 99):02d}",
        "#R4": f"{rng.randint(0, 9999):04d}",
    }


def render(source_name, mask, now=None, rng=None):
    """
    Render ``mask`` for ``source_name``.

    Time tokens are evaluated against ``now`` (the transfer time, not the file
    time). Tokens may appear any number of times. Everything that is not a token
    is copied unchanged, and substituted values are never expanded again.

    :param source_name: The local path or object key being transferred
    :param mask: The rename mask. Empty means :py:data:`DEFAULT_MASK`
    :param now: The moment of rendering. Defaults to :py:meth:`datetime.now`
    :param rng: Random source for the ``#R*`` tokens

    :type source_name: str
    :type mask: str
    :type now: :py:class:`~.datetime.datetime`
    :type rng: :py:class:`~.random.Random`

    :rtype: str
    """
    if not mask:
        mask = DEFAULT_MASK
    if now is None:
        now = datetime.now()
    if rng is None:
        rng = _RANDOM
    values = token_values(source_name, now, rng)
    return TOKEN_RE.sub(lambda match: values[match.group(0)], mask)
