"""Logging setup for s3ferry

The ``logformat`` option selects one of:

* ``default``: text lines, with the logger name and call site added at DEBUG
* ``json`` (or ``logstash``): one JSON document per line
* ``ecs``: Elastic Common Schema documents built by :py:mod:`ecs_logging`

Log lines go to STDERR, or to ``logfile`` when one is set. STDOUT is left to
``--porcelain`` results.
"""
import json
import logging
import sys
import time

import ecs_logging

from s3ferry.exceptions import ConfigurationError

TEXT_FORMAT = '%(asctime)s %(levelname)-9s %(message)s'
DEBUG_FORMAT = (
    '%(asctime)s %(levelname)-9s %(name)24s %(funcName)18s:%(lineno)-4d %(message)s'
)


def nest(doc, dotted, value):
    """
    Store ``value`` in ``doc`` under a dotted field name, e.g. ``log.origin.function``

    :param doc: The document to update
    :param dotted: The dotted field name
    :param value: The value to store

    :type doc: dict
    :type dotted: str
    """
    *parents, leaf = dotted.split('.')
    for key in parents:
        doc = doc.setdefault(key, {})
    doc[leaf] = value


class JsonFormatter(logging.Formatter):
    """One JSON document per record, timestamped in UTC"""

    #: LogRecord attribute and the dotted output field it is stored under
    FIELDS = {
        'levelname': 'log.level',
        'name': 'log.logger',
        'funcName': 'log.origin.function',
        'lineno': 'log.origin.file.line',
    }
    converter = time.gmtime

    def format(self, record):
        """
        :param record: The incoming log record

        :rtype: str
        """
        stamp = self.formatTime(record, datefmt='%Y-%m-%dT%H:%M:%S')
        doc = {
            '@timestamp': f'{stamp}.{int(record.msecs):03d}Z',
            'message': record.getMessage(),
            'service': {'name': 's3ferry'},
        }
        for attr, dotted in self.FIELDS.items():
            nest(doc, dotted, getattr(record, attr, None))
        if record.exc_info:
            nest(doc, 'error.stack_trace', self.formatException(record.exc_info))
        return json.dumps(doc, sort_keys=True)


class Blacklist(logging.Filter):
    """Drop records from the named loggers and their children"""

    def __init__(self, *names):
        super().__init__()
        self.blocked = [logging.Filter(name) for name in names]

    def filter(self, record):
        return not any(f.filter(record) for f in self.blocked)


FORMATTERS = {
    'json': JsonFormatter,
    'logstash': JsonFormatter,
    'ecs': ecs_logging.StdlibFormatter,
}


class LogInfo:
    """
    Resolved logging options: the numeric level and a ready handler.

    :param cfg: Logging options, see :py:func:`~.s3ferry.defaults.config_logging`
    :type cfg: dict
    """

    def __init__(self, cfg):
        level = cfg.get('loglevel') or 'INFO'
        #: Attribute. The numeric equivalent of ``loglevel``
        self.numeric_log_level = logging.getLevelName(str(level).upper())
        if not isinstance(self.numeric_log_level, int):
            raise ConfigurationError(f'Invalid log level: {level}')

        logfile = cfg.get('logfile')
        #: Attribute. A file handler for ``logfile``, else a STDERR stream handler
        if logfile:
            self.handler = logging.FileHandler(logfile)
        else:
            self.handler = logging.StreamHandler(stream=sys.stderr)

        #: Attribute. The text format, used when ``logformat`` is ``default``
        if self.numeric_log_level <= logging.DEBUG:
            self.format_string = DEBUG_FORMAT
        else:
            self.format_string = TEXT_FORMAT

        formatter = FORMATTERS.get(cfg.get('logformat') or 'default')
        if formatter:
            self.handler.setFormatter(formatter())
        else:
            self.handler.setFormatter(logging.Formatter(self.format_string))


def set_logging(log_opts):
    """
    Replace the root logger's handlers with the one described by ``log_opts``.
    SDK loggers named in ``blacklist`` are silenced unless the level is DEBUG.

    :param log_opts: Logging options, validated by
        :py:func:`~.s3ferry.defaults.config_logging`

    :type log_opts: dict

    :rtype: :py:class:`LogInfo`
    """
    loginfo = LogInfo(log_opts)
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.addHandler(loginfo.handler)
    root.setLevel(loginfo.numeric_log_level)
    blacklist = log_opts.get('blacklist')
    if blacklist and loginfo.numeric_log_level > logging.DEBUG:
        loginfo.handler.addFilter(Blacklist(*blacklist))
    return loginfo
