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

"""Undirected dynamical systems.

A system pairs a state count with a dynamics function and a port map. There are
three kinds, distinguished only by the calling convention of the dynamics:

- Continuous: `dynamics(u, p, t)` returns the time derivative of `u`.
- Discrete: `dynamics(u, p, t)` returns the next state.
- Delay: `dynamics(u, h, p, t)` returns the time derivative of `u`, where
    `h(p, t)` gives the history of the state.

The set of kinds is closed, see `SystemKind`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, ClassVar, Iterable
import dataclasses
import enum

import numpy as np

from ..backend import numpy_api as cnp
from .error import OutOfRangeIndexError

if TYPE_CHECKING:
    from ..backend.typing import Array, History, Parameters, Scalar

__all__ = [
    "SystemKind",
    "UndirectedSystem",
    "ContinuousUndirectedSystem",
    "DiscreteUndirectedSystem",
    "DelayUndirectedSystem",
    "block_indices",
]


class SystemKind(enum.Enum):
    CONTINUOUS = "continuous"
    DISCRETE = "discrete"
    DELAY = "delay"


def block_indices(indices, ndims: int) -> np.ndarray:
    """Expand block indices into the scalar indices they cover.

    Block `i` of size `ndims` covers scalars `i * ndims, ..., i * ndims + ndims - 1`.
    """
    indices = np.asarray(indices, dtype=np.intp).reshape(-1)
    if ndims == 1:
        return indices
    return (indices[:, None] * ndims + np.arange(ndims, dtype=np.intp)).reshape(-1)


@dataclasses.dataclass(frozen=True)
class UndirectedSystem:
    """State count, dynamics and port map of an undirected open system.

    Attributes:
        nstates (int):
            Number of states (blocks, for vector-valued systems).
        dynamics (Callable):
            The dynamics function, see the module docstring for the signature.
        portmap (tuple[int, ...]):
            `portmap[i]` is the index of the state behind port `i`.  Entries are
            checked against `[0, nstates)` when the port map is first used.
    """

    nstates: int
    dynamics: Callable
    portmap: Iterable[int] = None

    kind: ClassVar[SystemKind] = None

    def __post_init__(self):
        if self.nstates < 0:
            raise ValueError(f"State count must be non-negative, got {self.nstates}")
        portmap = self.portmap
        if portmap is None:
            portmap = range(self.nstates)
        object.__setattr__(self, "portmap", tuple(int(i) for i in portmap))

    def portfunction(self) -> np.ndarray:
        """The port map as an integer array, checked against the state range."""
        for port_index, state in enumerate(self.portmap):
            if not 0 <= state < self.nstates:
                raise OutOfRangeIndexError(
                    index=state, nstates=self.nstates, port_index=port_index
                )
        return np.asarray(self.portmap, dtype=np.intp)

    def exposed_states(self, u: Array, ndims: int = 1) -> Array:
        """The values of `u` behind each port, in port order."""
        return cnp.asarray(u)[block_indices(self.portfunction(), ndims)]


class ContinuousUndirectedSystem(UndirectedSystem):
    """The dynamics define an ODE `du/dt = f(u, p, t)`."""

    kind = SystemKind.CONTINUOUS

    def eval_dynamics(self, u: Array, p: Parameters = None, t: Scalar = 0.0) -> Array:
        return self.dynamics(u, p, t)


class DiscreteUndirectedSystem(UndirectedSystem):
    """The dynamics define an update rule `u[n+1] = f(u[n], p, t)`."""

    kind = SystemKind.DISCRETE

    def eval_dynamics(self, u: Array, p: Parameters = None, t: Scalar = 0.0) -> Array:
        return self.dynamics(u, p, t)


class DelayUndirectedSystem(UndirectedSystem):
    """The dynamics define a DDE `du/dt = f(u, h, p, t)`, where `h(p, t)` gives
    the history of the state before the integration interval."""

    kind = SystemKind.DELAY

    def eval_dynamics(
        self, u: Array, h: History, p: Parameters = None, t: Scalar = 0.0
    ) -> Array:
        return self.dynamics(u, h, p, t)
