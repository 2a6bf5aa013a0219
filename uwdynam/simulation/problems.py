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

"""Problem definitions for handing resource sharers to external solvers.

No integration scheme is implemented here. `ODEProblem.rhs` adapts the
`(u, p, t)` convention of resource sharers to the `(t, y)` convention of
`scipy.integrate.solve_ivp` and similar solvers; `trajectory` iterates a
discrete update rule, which needs no solver.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Tuple
import dataclasses

from ..backend import numpy_api as cnp
from ..framework.error import SystemKindMismatchError
from ..framework.system import SystemKind

if TYPE_CHECKING:
    from ..backend.typing import Array, History, Parameters, Scalar
    from ..framework.resource_sharer import ResourceSharer

__all__ = [
    "ODEProblem",
    "DDEProblem",
    "DiscreteProblem",
    "trajectory",
]


def _check_kind(r: ResourceSharer, kind: SystemKind):
    if r.kind != kind:
        raise SystemKindMismatchError(expected_kind=kind, actual_kind=r.kind)


@dataclasses.dataclass(frozen=True, eq=False)
class ODEProblem:
    """Initial value problem `du/dt = f(u, p, t)`, `u(t0) = u0`."""

    f: Callable
    u0: Array
    tspan: Tuple[Scalar, Scalar]
    p: Parameters = None

    @classmethod
    def from_sharer(
        cls, r: ResourceSharer, u0: Array, tspan, p: Parameters = None
    ) -> ODEProblem:
        _check_kind(r, SystemKind.CONTINUOUS)
        return cls(r.dynamics, cnp.asarray(u0), tuple(tspan), p)

    def rhs(self, t: Scalar, y: Array) -> Array:
        """Right-hand side in the `(t, y)` calling convention."""
        return self.f(y, self.p, t)


@dataclasses.dataclass(frozen=True, eq=False)
class DDEProblem:
    """Delay problem `du/dt = f(u, h, p, t)` with history function `h(p, t)`."""

    f: Callable
    u0: Array
    h: History
    tspan: Tuple[Scalar, Scalar]
    p: Parameters = None

    @classmethod
    def from_sharer(
        cls, r: ResourceSharer, u0: Array, h: History, tspan, p: Parameters = None
    ) -> DDEProblem:
        _check_kind(r, SystemKind.DELAY)
        return cls(r.dynamics, cnp.asarray(u0), h, tuple(tspan), p)

    def rhs(self, t: Scalar, y: Array, h: History = None) -> Array:
        """Right-hand side in the `(t, y)` calling convention. The history
        defaults to the one the problem was created with."""
        return self.f(y, self.h if h is None else h, self.p, t)


@dataclasses.dataclass(frozen=True, eq=False)
class DiscreteProblem:
    """Discrete problem `u[n+1] = f(u[n], p, t)` over integer time `tspan`."""

    f: Callable
    u0: Array
    tspan: Tuple[int, int]
    p: Parameters = None

    @classmethod
    def from_sharer(
        cls, r: ResourceSharer, u0: Array, tspan, p: Parameters = None
    ) -> DiscreteProblem:
        _check_kind(r, SystemKind.DISCRETE)
        return cls(r.dynamics, cnp.asarray(u0), tuple(tspan), p)

    def solve(self, dt: int = 1) -> Array:
        """Iterate the update rule from `tspan[0]` to `tspan[1]` in steps of `dt`.

        Returns:
            Array of shape `(nsteps + 1, len(u0))` whose first row is `u0`.
        """
        t0, tf = self.tspan
        nsteps = int((tf - t0) // dt)
        return _iterate(self.f, self.u0, self.p, nsteps, dt, t0)


def _iterate(f: Callable, u0: Array, p: Any, nsteps: int, dt, t0) -> Array:
    if nsteps < 0:
        raise ValueError(f"Number of steps must be non-negative, got {nsteps}")

    u0 = cnp.asarray(u0, dtype=float)
    if nsteps == 0:
        return u0[None]

    # Keep the time carry at the type of t0 + dt
    t0 = t0 + 0 * dt

    def _step(carry, _):
        u, t = carry
        u_next = cnp.asarray(f(u, p, t), dtype=u.dtype)
        return (u_next, t + dt), u_next

    _, us = cnp.scan(_step, (u0, t0), None, length=nsteps)
    return cnp.concatenate([u0[None], us])


def trajectory(
    r: ResourceSharer, u0: Array, p: Parameters, nsteps: int, dt: int = 1
) -> Array:
    """Evolve the discrete resource sharer `r` for `nsteps` steps of size `dt`
    from the initial condition `u0`.

    Returns:
        Array of shape `(nsteps + 1, len(u0))` whose first row is `u0`.
    """
    _check_kind(r, SystemKind.DISCRETE)
    return _iterate(r.dynamics, u0, p, nsteps, dt, 0)
