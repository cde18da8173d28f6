"""
Provides loggers that emit JSON log lines.

Use this in place of :func:`logging.getLogger`, e.g.

.. code-block:: python

   from pictureit import logging

   logger = logging.getLogger(__name__)
   logger.debug('Loaded image %s', image_id)

The log level is taken from ``LOGLEVEL`` (default ``INFO``), and records are
also written to ``LOGFILE`` if that is set. Both are read from the Flask
application config when an application context is available, otherwise from
the process environment.
"""

import logging
import os
import sys
from typing import IO, Any, Mapping

from flask import current_app, has_app_context
from pythonjsonlogger.json import JsonFormatter

FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'
RENAME_FIELDS = {'levelname': 'level', 'asctime': 'timestamp'}


def _get_config() -> Mapping[str, Any]:
    if has_app_context():
        return current_app.config
    return os.environ


def _get_level(config: Mapping[str, Any]) -> int:
    level = config.get('LOGLEVEL', logging.INFO)
    try:
        return int(level)
    except (TypeError, ValueError):
        return logging.getLevelName(str(level).upper())


def getLogger(name: str, stream: IO = sys.stderr) -> logging.Logger:
    """
    Wrapper for :func:`logging.getLogger` that applies JSON formatting.

    Parameters
    ----------
    name : str
        Name of the logger, usually the ``__name__`` of the calling module.
    stream : io.IOBase
        Stream to which log lines are written. Defaults to stderr.

    Returns
    -------
    :class:`logging.Logger`

    """
    config = _get_config()
    logger = logging.getLogger(name)
    logger.handlers = []

    formatter = JsonFormatter(FORMAT, rename_fields=RENAME_FIELDS)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logfile = config.get('LOGFILE')
    if logfile:
        file_handler = logging.FileHandler(logfile)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.setLevel(_get_level(config))
    logger.propagate = False
    return logger
