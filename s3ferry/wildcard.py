"""Wildcard filters

Turns a filter like ``*.csv`` into a regular expression for bucket keys. The
expression is searched for, not fully matched: ``report*`` selects every key
that contains ``report``.
"""

import re


def has_wildcard(pattern):
    """Return ``True`` if the filter needs a bucket listing to be resolved"""
    return "*" in pattern


def wildcard_to_regex(pattern):
    """
    Convert a wildcard filter to a regular expression string.

    ``*`` matches zero or more characters and runs of ``*`` collapse into one
    ``.*``. Every other character is matched literally.

    :param pattern: The wildcard filter
    :type pattern: str

    :rtype: str
    """
    result = []
    last = None
    for char in pattern:
        if char == "*":
            if last != "*":
                result.append(".*")
        else:
            result.append(re.escape(char))
        last = char
    return "".join(result)


def compile_filter(pattern, prefix=""):
    """
    Compile a wildcard filter, optionally scoped under a key prefix.

    The prefix is literal and must start the key.

    :param pattern: The wildcard filter
    :param prefix: Bucket sub folder, already normalized

    :type pattern: str
    :type prefix: str

    :rtype: :py:class:`re.Pattern`
    """
    expression = wildcard_to_regex(pattern)
    if prefix:
        expression = "^" + re.escape(prefix) + expression
    return re.compile(expression)


def select(keys, pattern, prefix=""):
    """Return the keys matched by ``pattern``, in listing order"""
    matcher = compile_filter(pattern, prefix)
    return [key for key in keys if matcher.search(key)]
