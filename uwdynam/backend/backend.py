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

"""Switchable array backend.

Composition code calls array functions through the `dispatcher` singleton,
usually imported as `cnp`, which forwards every attribute lookup to the array
library of the active backend (`numpy` or `jax.numpy`). A backend may override
single functions of its library: `segment_sum`, `scan` and `jit` have NumPy
versions written as Python loops, and resolve to `jax.ops.segment_sum`,
`jax.lax.scan` and `jax.jit` under JAX.

Lookups happen on every call, so composite dynamics built while one backend is
active evaluate with whichever backend is active when they are called.
"""

from __future__ import annotations

import os
from typing import Callable, Mapping

import jax

from . import _jax, _numpy

REQUESTED_BACKEND = os.environ.get("UWDYNAM_BACKEND", None)
DEFAULT_BACKEND = REQUESTED_BACKEND or "jax"


class _Backend:
    """An array library plus the functions that override it."""

    def __init__(self, name: str, lib, functions: Mapping[str, Callable]):
        self.name = name
        self.lib = lib
        self.functions = dict(functions)

    def lookup(self, attr: str):
        if attr in self.functions:
            return self.functions[attr]
        try:
            return getattr(self.lib, attr)
        except AttributeError:
            raise AttributeError(
                f"Backend {self.name} has no attribute {attr}"
            ) from None


def _configure_x64():
    # jax only honours this before the first array is created
    enable_x64 = os.environ.get("JAX_ENABLE_X64", "true").lower() != "false"
    jax.config.update("jax_enable_x64", enable_x64)


class MathDispatcher:
    """Singleton for calling out to the active backend."""

    _backends = {
        "numpy": _Backend("numpy", _numpy.lib, _numpy.functions),
        "jax": _Backend("jax", _jax.lib, _jax.functions),
    }

    def __init__(self, backend: str = DEFAULT_BACKEND):
        _configure_x64()
        self._active = None
        self.set_backend(backend)

    @property
    def active_backend(self) -> str:
        return self._active.name

    @property
    def available_backends(self) -> list[str]:
        return sorted(self._backends)

    def set_backend(self, backend: str):
        """Make `backend` ("numpy" or "jax") the active backend.

        Arrays created under the previous backend are not converted.
        """
        if backend not in self._backends:
            raise ValueError(
                f"Backend {backend} not supported, expected one of "
                f"{self.available_backends}"
            )
        self._active = self._backends[backend]

    def __getattr__(self, name):
        # Only reached for names not defined on the dispatcher itself
        if name.startswith("_"):
            raise AttributeError(name)
        return self._active.lookup(name)


dispatcher = MathDispatcher()
