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

"""Merged state spaces of composite systems.

Composing resource sharers along a wiring diagram identifies every state that
sits behind a port with the junction of that port. The merged state space is
the pushout of

    total port map:  ports -> disjoint union of subsystem states
    junction map:    ports -> junctions

i.e. the connected components of the graph whose nodes are the global states
and the junctions, with one edge per port joining its state to its junction.
Components are computed with `networkx.utils.UnionFind` and numbered by first
appearance, scanning global states in order and then junctions in order, so the
numbering is a pure function of the inputs.
"""

from __future__ import annotations

from typing import Iterable, Sequence
import dataclasses

import networkx as nx
import numpy as np

__all__ = [
    "DisjointSet",
    "coproduct",
    "StatePushout",
    "pushout",
]


class DisjointSet:
    """Union-find over the integers `0, ..., n - 1`."""

    def __init__(self, n: int):
        self._n = n
        self._sets = nx.utils.UnionFind(range(n))

    def __len__(self) -> int:
        return self._n

    def find(self, x: int) -> int:
        return self._sets[x]

    def union(self, x: int, y: int) -> int:
        self._sets.union(x, y)
        return self._sets[x]

    def components(self) -> tuple[np.ndarray, int]:
        """Dense component labels in first-appearance order.

        Returns:
            labels: `labels[x]` is the component of element `x`.
            ncomponents: The number of components.
        """
        labels = np.empty(len(self), dtype=np.intp)
        numbering = {}
        for x in range(len(self)):
            root = self.find(x)
            if root not in numbering:
                numbering[root] = len(numbering)
            labels[x] = numbering[root]
        return labels, len(numbering)


def coproduct(sizes: Iterable[int]) -> tuple[np.ndarray, int]:
    """Disjoint union of finite sets of the given sizes.

    Returns:
        offsets: The injection of set `b` is `i -> offsets[b] + i`.
        total: The size of the disjoint union.
    """
    sizes = np.asarray(list(sizes), dtype=np.intp)
    offsets = np.zeros(len(sizes), dtype=np.intp)
    if len(sizes) > 1:
        offsets[1:] = np.cumsum(sizes)[:-1]
    return offsets, int(sizes.sum())


@dataclasses.dataclass(frozen=True, eq=False)
class StatePushout:
    """The merged state space of a composite.

    Attributes:
        state_map (np.ndarray):
            Merged index of every global (pre-quotient) state.
        junction_map (np.ndarray):
            Merged index of every junction.
        nstates (int):
            Number of merged states.
    """

    state_map: np.ndarray
    junction_map: np.ndarray
    nstates: int

    def preimage(self, i: int) -> np.ndarray:
        """The global states folded into merged state `i`."""
        return np.flatnonzero(self.state_map == i)

    def preimages(self) -> list[np.ndarray]:
        return [self.preimage(i) for i in range(self.nstates)]


def pushout(
    total_portmap: Sequence[int],
    port_junction: Sequence[int],
    nglobal: int,
    njunctions: int,
) -> StatePushout:
    """Identify global states that are connected through shared junctions.

    Args:
        total_portmap: Global state behind every diagram port.
        port_junction: Junction of every diagram port.
        nglobal: Number of global states.
        njunctions: Number of junctions.
    """
    if len(total_portmap) != len(port_junction):
        raise ValueError(
            f"Got {len(total_portmap)} port states but {len(port_junction)} "
            "port junctions"
        )

    # Junction j is node nglobal + j
    sets = DisjointSet(nglobal + njunctions)
    for state, junction in zip(total_portmap, port_junction):
        sets.union(int(state), nglobal + int(junction))

    labels, ncomponents = sets.components()
    return StatePushout(
        state_map=labels[:nglobal],
        junction_map=labels[nglobal:],
        nstates=ncomponents,
    )
