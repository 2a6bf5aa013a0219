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

"""Resource sharers: undirected open dynamical systems with exposed ports.

A resource sharer is the unit of composition. It pairs an interface (which
ports are exposed) with a system (states, dynamics and which state sits behind
each port). All state operations delegate to the system and all port
operations delegate to the interface.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, ClassVar, Iterable, Union
import dataclasses

from .error import StaticError, SystemKindMismatchError
from .interface import UndirectedInterface, UndirectedVectorInterface
from .system import (
    SystemKind,
    UndirectedSystem,
    ContinuousUndirectedSystem,
    DiscreteUndirectedSystem,
    DelayUndirectedSystem,
)

if TYPE_CHECKING:
    import numpy as np
    from ..backend.typing import Array, Port

__all__ = [
    "ResourceSharer",
    "ContinuousResourceSharer",
    "DiscreteResourceSharer",
    "DelayResourceSharer",
    "resource_sharer",
    "sharer_type",
    "eval_dynamics",
    "exposed_states",
    "exposed_labels",
]


@dataclasses.dataclass(frozen=True, repr=False)
class ResourceSharer:
    """An undirected open dynamical system operating on vectors.

    Attributes:
        interface (UndirectedInterface):
            The exposed ports.
        system (UndirectedSystem):
            The states, dynamics and port map.

    Notes:
        The number of ports need not equal the number of states. The port map is
        the only place where the two interact.
    """

    interface: UndirectedInterface
    system: UndirectedSystem

    system_type: ClassVar[type[UndirectedSystem]] = UndirectedSystem

    def __post_init__(self):
        if not isinstance(self.system, self.system_type):
            raise SystemKindMismatchError(
                expected_kind=self.system_type.kind,
                actual_kind=getattr(self.system, "kind", None),
            )
        if len(self.system.portmap) != self.interface.nports:
            raise StaticError(
                f"Port map has {len(self.system.portmap)} entries but the "
                f"interface has {self.interface.nports} ports"
            )

    @classmethod
    def from_dynamics(
        cls,
        nstates: int,
        dynamics: Callable,
        *,
        ports: Union[int, Iterable[Port]] = None,
        portmap: Iterable[int] = None,
        ndims: int = 1,
    ) -> ResourceSharer:
        """Create a resource sharer from its dynamics.

        Args:
            nstates: Number of states.
            dynamics: The dynamics function.
            ports: Port identifiers, or the number of anonymous ports. Defaults
                to one port per entry of `portmap`.
            portmap: State index behind each port. Defaults to exposing every
                state in order.
            ndims: Block dimension of each port, for vector-valued systems.
        """
        if cls.system_type.kind is None:
            raise TypeError(
                "Use one of ContinuousResourceSharer, DiscreteResourceSharer or "
                "DelayResourceSharer to create a resource sharer from dynamics"
            )
        system = cls.system_type(nstates, dynamics, portmap)
        if ports is None:
            ports = len(system.portmap)
        if ndims == 1:
            interface = UndirectedInterface(ports)
        else:
            interface = UndirectedVectorInterface(ports, ndims=ndims)
        return cls(interface, system)

    @property
    def kind(self) -> SystemKind:
        return self.system.kind

    @property
    def ports(self) -> tuple:
        return self.interface.ports

    @property
    def nports(self) -> int:
        return self.interface.nports

    @property
    def ndims(self) -> int:
        return self.interface.ndims

    @property
    def nstates(self) -> int:
        return self.system.nstates

    @property
    def dynamics(self) -> Callable:
        return self.system.dynamics

    @property
    def portmap(self) -> tuple[int, ...]:
        return self.system.portmap

    def portfunction(self) -> np.ndarray:
        return self.system.portfunction()

    def eval_dynamics(self, u: Array, *args) -> Array:
        """Evaluate the dynamics at state `u`.

        The remaining arguments follow the system's calling convention: `(p, t)`
        for continuous and discrete systems, `(h, p, t)` for delay systems.
        Trailing `p` and `t` may be omitted when the dynamics do not use them.
        """
        return self.system.eval_dynamics(u, *args)

    def exposed_states(self, u: Array) -> Array:
        return self.system.exposed_states(u, self.ndims)

    def exposed_labels(self) -> list[tuple[Port, int]]:
        """Pairs of (port, state index) for labelling trajectories of the
        exposed states."""
        return list(zip(self.ports, self.portmap))

    def __repr__(self) -> str:
        n = self.nstates * self.ndims
        return (
            f"{type(self).__name__}(R^{n} → R^{n}) with {self.nports} exposed ports"
        )


class ContinuousResourceSharer(ResourceSharer):
    """An undirected open continuous system. The dynamics function `f` defines
    an ODE `du/dt = f(u, p, t)`."""

    system_type = ContinuousUndirectedSystem


class DiscreteResourceSharer(ResourceSharer):
    """An undirected open discrete system. The dynamics function `f` defines a
    discrete update rule `u[n+1] = f(u[n], p, t)`."""

    system_type = DiscreteUndirectedSystem


class DelayResourceSharer(ResourceSharer):
    """An undirected open delay system. The dynamics function `f` defines a DDE
    `du/dt = f(u, h, p, t)`, where `h` is a function giving the history of the
    state before the interval on which the solution is computed."""

    system_type = DelayUndirectedSystem


_SHARER_TYPES = {
    SystemKind.CONTINUOUS: ContinuousResourceSharer,
    SystemKind.DISCRETE: DiscreteResourceSharer,
    SystemKind.DELAY: DelayResourceSharer,
}


def sharer_type(kind: SystemKind) -> type[ResourceSharer]:
    return _SHARER_TYPES[kind]


def resource_sharer(
    interface: UndirectedInterface, system: UndirectedSystem
) -> ResourceSharer:
    """Wrap `interface` and `system` in the resource sharer type matching the
    kind of `system`."""
    return sharer_type(system.kind)(interface, system)


def eval_dynamics(r: ResourceSharer, u: Array, *args) -> Array:
    return r.eval_dynamics(u, *args)


def exposed_states(r: ResourceSharer, u: Array) -> Array:
    return r.exposed_states(u)


def exposed_labels(r: ResourceSharer) -> list[tuple[Port, int]]:
    return r.exposed_labels()
