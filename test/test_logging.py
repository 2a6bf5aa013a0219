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

import logging

import pytest

from uwdynam import logging as uwdynam_logging
from uwdynam._init import parse_log_levels
from uwdynam.framework import WiringDiagramBuilder


def test_set_log_level_per_package():
    uwdynam_logging.set_log_level(logging.ERROR, pkg="uwdynam.framework")
    try:
        assert logging.getLogger("uwdynam.framework").level == logging.ERROR
        assert logging.getLogger("uwdynam").level != logging.ERROR
    finally:
        uwdynam_logging.set_log_level(logging.NOTSET, pkg="uwdynam.framework")


def test_file_handler(tmp_path):
    path = tmp_path / "uwdynam.log"
    handler = uwdynam_logging.set_file_handler(str(path))
    uwdynam_logging.set_log_level(logging.DEBUG)

    builder = WiringDiagramBuilder()
    builder.add_box(0, name="empty")
    builder.build()

    logging.getLogger("uwdynam").removeHandler(handler)
    handler.close()

    text = path.read_text()
    assert "uwdynam:DEBUG Added box empty" in text
    assert "Built wiring diagram with 1 boxes" in text


def test_scope_logging(caplog):
    caplog.set_level(logging.DEBUG, logger="uwdynam")

    @uwdynam_logging.scope_logging
    def compose():
        """Compose things."""
        return 3

    assert compose() == 3
    assert compose.__name__ == "compose"
    assert compose.__doc__ == "Compose things."
    assert "*** Entering" in caplog.text
    assert "*** Exiting" in caplog.text


def test_logdata():
    assert uwdynam_logging.logdata() == {}
    assert uwdynam_logging.logdata(nstates=3) == {"extra": {"extras": {"nstates": 3}}}


def test_stream_handler_is_removable():
    uwdynam_logging.unset_stream_handler()
    try:
        assert all(
            type(h) is not logging.StreamHandler
            for h in logging.getLogger("uwdynam").handlers
        )
    finally:
        uwdynam_logging.set_stream_handler()


def test_extras_are_formatted():
    record = logging.LogRecord(
        "uwdynam", logging.DEBUG, __file__, 1, "Composed %d boxes", (3,), None
    )
    record.extras = {"nstates": 5}
    text = uwdynam_logging.ExtrasFormatter().format(record)
    assert text == "uwdynam:DEBUG Composed 3 boxes nstates=5"


def test_parse_log_levels():
    assert parse_log_levels("uwdynam.framework:debug, jax:WARNING,") == [
        ("uwdynam.framework", "DEBUG"),
        ("jax", "WARNING"),
    ]
    assert parse_log_levels("") == []
    with pytest.raises(ValueError):
        parse_log_levels("DEBUG")
