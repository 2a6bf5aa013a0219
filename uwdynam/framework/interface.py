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

"""Interfaces: the ordered sets of ports a resource sharer exposes.

An interface only knows about port identity and ordering. Which state sits
behind each port is the business of the system's port map.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Union
import dataclasses
import numbers

if TYPE_CHECKING:
    from ..backend.typing import Port

__all__ = [
    "UndirectedInterface",
    "UndirectedVectorInterface",
]


@dataclasses.dataclass(frozen=True)
class UndirectedInterface:
    """Ordered collection of ports of an undirected open system.

    Attributes:
        ports (tuple):
            The port identifiers. Order defines the vector layout used when
            indexing exposed ports; identity, not position, defines equality of
            individual ports. Passing an integer `n` creates the anonymous ports
            `0, ..., n - 1`.
    """

    ports: Union[int, Iterable[Port]] = ()

    # Every port carries a scalar unless overridden by the vector variant.
    ndims = 1

    def __post_init__(self):
        ports = self.ports
        if isinstance(ports, numbers.Integral):
            ports = range(ports)
        object.__setattr__(self, "ports", tuple(ports))

    @property
    def nports(self) -> int:
        return len(self.ports)

    def __len__(self) -> int:
        return self.nports

    def __iter__(self):
        return iter(self.ports)


@dataclasses.dataclass(frozen=True)
class UndirectedVectorInterface(UndirectedInterface):
    """Interface whose ports each carry a fixed-size block of `ndims` values.

    State indices of a system behind such an interface count blocks, so a
    system with `nstates` states operates on vectors of length
    `nstates * ndims`.
    """

    ndims: int = 1

    def __post_init__(self):
        super().__post_init__()
        if self.ndims < 1:
            raise ValueError(f"Block dimension must be positive, got {self.ndims}")
