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

"""Explicit Euler discretization of continuous resource sharers."""

from __future__ import annotations

from typing import Mapping, Sequence, overload

from ..backend import numpy_api as cnp
from .error import SystemKindMismatchError
from .resource_sharer import (
    ContinuousResourceSharer,
    DiscreteResourceSharer,
    ResourceSharer,
)
from .system import DiscreteUndirectedSystem, SystemKind

__all__ = ["euler_approx"]


def _euler_approx(f: ResourceSharer, h: float = None) -> DiscreteResourceSharer:
    if f.kind != SystemKind.CONTINUOUS:
        raise SystemKindMismatchError(
            expected_kind=SystemKind.CONTINUOUS, actual_kind=f.kind
        )

    system = f.system

    if h is None:

        def step(u, p, t):
            u = cnp.asarray(u)
            return u + p[-1] * cnp.asarray(system.eval_dynamics(u, p[:-1], t))

    else:

        def step(u, p=None, t=0.0):
            u = cnp.asarray(u)
            return u + h * cnp.asarray(system.eval_dynamics(u, p, t))

    return DiscreteResourceSharer(
        f.interface, DiscreteUndirectedSystem(f.nstates, step, f.portmap)
    )


@overload
def euler_approx(
    f: ContinuousResourceSharer, h: float = None
) -> DiscreteResourceSharer: ...


@overload
def euler_approx(
    f: Sequence[ContinuousResourceSharer], h: float = None
) -> list[DiscreteResourceSharer]: ...


@overload
def euler_approx(
    f: Mapping[object, ContinuousResourceSharer], h: float = None
) -> dict[object, DiscreteResourceSharer]: ...


def euler_approx(f, h=None):
    """Transform continuous resource sharers into discrete ones via Euler's
    method.

    If the dynamics of `f` are `du/dt = f(u, p, t)`, the discrete system has the
    update rule `u[n+1] = u[n] + h * f(u[n], p, t)`. The interface and port map
    are unchanged.

    Args:
        f: A continuous resource sharer, or a sequence or mapping of them. Each
            element is transformed independently, keeping order or keys.
        h: The step size. If None, the step size is read at evaluation time
            from the last entry of the parameters `p`, and `f` receives the
            remaining entries `p[:-1]`.

    Raises:
        SystemKindMismatchError: If a resource sharer is not continuous.
    """
    if isinstance(f, ResourceSharer):
        return _euler_approx(f, h)
    if isinstance(f, Mapping):
        return {name: _euler_approx(x, h) for name, x in f.items()}
    if isinstance(f, tuple):
        return tuple(_euler_approx(x, h) for x in f)
    return [_euler_approx(x, h) for x in f]
