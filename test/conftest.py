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

from uwdynam.backend import numpy_api, DEFAULT_BACKEND
from uwdynam import logging as uwdynam_logging


@pytest.fixture(autouse=True)
def configure_logging():
    # Follow pytest's --log-level, which is applied to the root logger
    uwdynam_logging.set_log_level(logging.getLogger().getEffectiveLevel())
    yield


@pytest.fixture(autouse=True)
def reset_backend():
    # Tests that switch backends must not leak the switch into later tests
    yield
    numpy_api.set_backend(DEFAULT_BACKEND)
