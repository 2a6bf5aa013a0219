# Copyright (C) 2024 Collimator, Inc.
# SPDX-License-Identifier: AGPL-3.0-only
#
# This program is free software: you can redistribute it and/or modify it under
# the terms of the GNU Affero General Public License as published by the Free
# Software Foundation, version 3. This program is distributed in the hope that it
# will be useful, but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU Affero General
# Public License for more details.  You should have received a copy of the GNU
# Affero General Public License along with this program. If not, see
# <https://www.gnu.org/licenses/>.

"""Package-wide logging.

All modules log through `logger`, the `uwdynam` logger. Structured context is
attached with `logdata` and printed after the message as `key=value` pairs:

    logger.debug("Composed %d boxes", n, **logdata(nstates=5))
"""

import logging
from logging import CRITICAL, DEBUG, ERROR, INFO, WARNING

__all__ = [
    "logger",
    "set_log_level",
    "set_file_handler",
    "set_stream_handler",
    "unset_stream_handler",
    "scope_logging",
    "logdata",
    "DEBUG",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

packages = [__package__]


class ExtrasFormatter(logging.Formatter):
    """`name:LEVEL message` followed by the `logdata` extras of the record."""

    def __init__(self):
        super().__init__(fmt="%(name)s:%(levelname)s %(message)s")

    def format(self, record):
        s = super().format(record)
        extras = getattr(record, "extras", None)
        if extras:
            s += " " + " ".join(f"{k}={v}" for k, v in extras.items())
        return s


_formatter = ExtrasFormatter()
_stream_handler = logging.StreamHandler()
_stream_handler.setFormatter(_formatter)


def _loggers():
    return [logging.getLogger(package) for package in packages]


def set_file_handler(file, formatter=None):
    """Also write the logs of every package to `file`, truncating it."""
    handler = logging.FileHandler(file, mode="w")
    handler.setFormatter(formatter or _formatter)
    for logger_ in _loggers():
        logger_.addHandler(handler)
    return handler


def set_stream_handler(handler=None):
    """Attach `handler`, or the default stderr handler, to every package."""
    for logger_ in _loggers():
        logger_.addHandler(handler or _stream_handler)


def unset_stream_handler():
    """Detach the default stderr handler from every package."""
    for logger_ in _loggers():
        logger_.removeHandler(_stream_handler)


def set_log_level(level, pkg: str | None = None):
    """Set the log level for the specified or all packages.

    Args:
        level: The log level to set.
        pkg: If set, apply the log level only to the specified package or
            subpackage, e.g. "uwdynam.framework".
    """
    targets = [logging.getLogger(pkg)] if pkg is not None else _loggers()
    for logger_ in targets:
        logger_.setLevel(level)


def scope_logging(func):
    """Decorator logging entry and exit of `func` at DEBUG level."""

    def wrapper(*args, **kwargs):
        logger.debug("*** Entering %s ***", func.__qualname__)
        result = func(*args, **kwargs)
        logger.debug("*** Exiting %s ***", func.__qualname__)
        return result

    wrapper.__name__ = func.__name__
    wrapper.__qualname__ = func.__qualname__
    wrapper.__doc__ = func.__doc__
    return wrapper


def logdata(**kwargs):
    """Keyword arguments for a logging call attaching `kwargs` to the record."""
    if not kwargs:
        return {}
    return {"extra": {"extras": dict(kwargs)}}


logger = logging.getLogger(__package__)
