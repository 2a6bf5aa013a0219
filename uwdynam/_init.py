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

"""Import-time setup of JAX precision and log levels.

Environment variables:
    JAX_ENABLE_X64: "false" keeps JAX in single precision. Defaults to "true".
    LOG_LEVEL: Level of the uwdynam loggers. Defaults to "INFO".
    LOG_LEVELS: Comma-separated per-package overrides, for example
        "uwdynam.framework:DEBUG,jax:WARNING".
"""

import os

# Read by backend.py when the dispatcher is created
os.environ.setdefault("JAX_ENABLE_X64", "true")

# pylint: disable=wrong-import-position
from . import logging  # noqa: E402


def parse_log_levels(value: str) -> list[tuple[str, str]]:
    """Split a LOG_LEVELS string into (package, level) pairs."""
    overrides = []
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        pkg, sep, level = item.rpartition(":")
        if not sep or not pkg:
            raise ValueError(
                f"LOG_LEVELS entries must look like 'package:LEVEL', got '{item}'"
            )
        overrides.append((pkg, level.upper()))
    return overrides


logging.set_log_level(os.environ.get("LOG_LEVEL", "INFO").upper())
logging.set_stream_handler()

for _pkg, _level in parse_log_levels(os.environ.get("LOG_LEVELS", "")):
    logging.set_log_level(_level, pkg=_pkg)
