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

"""Undirected wiring diagrams: the composition patterns for resource sharers.

A diagram has boxes (slots for subsystems), ports attached to boxes, junctions
(the wires), and outer ports (the ports of the whole diagram). Every port and
every outer port is attached to exactly one junction; a junction may gather any
number of ports, from any boxes, or none at all.

Ports of a box are ordered by their global port index: the `k`-th port of box
`b` is the one that the `k`-th port of the resource sharer filling `b` plugs
into.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Hashable, List, Optional, Sequence, Tuple
import dataclasses

import numpy as np

from ..logging import logger
from .error import ArityMismatchError, BoxIndexError, DiagramError
from .pushout import DisjointSet

if TYPE_CHECKING:
    # (box, local port index)
    PortLocator = Tuple[int, int]

__all__ = [
    "UndirectedWiringDiagram",
    "WiringDiagramBuilder",
    "DisconnectedPortError",
    "ocompose",
]


class DisconnectedPortError(DiagramError):
    def __init__(self, box: int, port_index: int):
        super().__init__(
            "Port is not attached to any junction", box=box, port_index=port_index
        )


class BoxNameNotUniqueError(DiagramError):
    def __init__(self, name: Hashable):
        super().__init__(f"Box name {name} is not unique")


def _all_or_none(names: Sequence, what: str) -> Optional[tuple]:
    named = [name is not None for name in names]
    if all(named) and len(names) > 0:
        return tuple(names)
    if any(named):
        raise DiagramError(f"Either all or none of the {what} must be named")
    return None


@dataclasses.dataclass(frozen=True)
class UndirectedWiringDiagram:
    """Immutable undirected wiring diagram.

    Attributes:
        nboxes (int):
            Number of boxes.
        njunctions (int):
            Number of junctions.
        port_box (tuple[int, ...]):
            Box of every port.
        port_junction (tuple[int, ...]):
            Junction of every port.
        outer_junction (tuple[int, ...]):
            Junction of every outer port.
        box_names (tuple, optional):
            Name of every box, used to look up resource sharers by name.
        outer_port_names (tuple, optional):
            Variable name of every outer port. When present, these become the
            port identifiers of the composite.
    """

    nboxes: int
    njunctions: int
    port_box: Tuple[int, ...] = ()
    port_junction: Tuple[int, ...] = ()
    outer_junction: Tuple[int, ...] = ()
    box_names: Optional[Tuple[Hashable, ...]] = None
    outer_port_names: Optional[Tuple[Hashable, ...]] = None

    def __post_init__(self):
        for field in ("port_box", "port_junction", "outer_junction"):
            object.__setattr__(
                self, field, tuple(int(i) for i in getattr(self, field))
            )
        for field in ("box_names", "outer_port_names"):
            if getattr(self, field) is not None:
                object.__setattr__(self, field, tuple(getattr(self, field)))
        self._check()

    def _check(self):
        if self.nboxes < 0 or self.njunctions < 0:
            raise DiagramError("Box and junction counts must be non-negative")
        if len(self.port_box) != len(self.port_junction):
            raise DiagramError(
                f"Got {len(self.port_box)} port boxes but "
                f"{len(self.port_junction)} port junctions"
            )
        for port, box in enumerate(self.port_box):
            if not 0 <= box < self.nboxes:
                raise DiagramError(f"Port {port} is attached to missing box {box}")
        for port, junction in enumerate(self.port_junction):
            if not 0 <= junction < self.njunctions:
                raise DiagramError(
                    f"Port {port} is attached to missing junction {junction}"
                )
        for port, junction in enumerate(self.outer_junction):
            if not 0 <= junction < self.njunctions:
                raise DiagramError(
                    f"Outer port {port} is attached to missing junction {junction}"
                )
        if self.box_names is not None:
            if len(self.box_names) != self.nboxes:
                raise DiagramError(
                    f"Got {len(self.box_names)} box names for {self.nboxes} boxes"
                )
            if len(set(self.box_names)) != self.nboxes:
                duplicates = [
                    name for name in self.box_names if self.box_names.count(name) > 1
                ]
                raise BoxNameNotUniqueError(duplicates[0])
        if self.outer_port_names is not None and len(self.outer_port_names) != len(
            self.outer_junction
        ):
            raise DiagramError(
                f"Got {len(self.outer_port_names)} outer port names for "
                f"{len(self.outer_junction)} outer ports"
            )

    @property
    def nports(self) -> int:
        return len(self.port_box)

    @property
    def nouter_ports(self) -> int:
        return len(self.outer_junction)

    def boxes(self) -> range:
        return range(self.nboxes)

    def junctions(self) -> range:
        return range(self.njunctions)

    def incident_ports(self, box: int) -> List[int]:
        """Global indices of the ports of `box`, in local port order."""
        self._check_box(box)
        return [port for port, b in enumerate(self.port_box) if b == box]

    def box_arity(self, box: int) -> int:
        self._check_box(box)
        return sum(1 for b in self.port_box if b == box)

    def box_junctions(self, box: int) -> List[int]:
        """Junction of every port of `box`, in local port order."""
        return [self.port_junction[port] for port in self.incident_ports(box)]

    def junction_ports(self, junction: int) -> List[int]:
        return [port for port, j in enumerate(self.port_junction) if j == junction]

    def box_name(self, box: int) -> Hashable:
        self._check_box(box)
        return None if self.box_names is None else self.box_names[box]

    def local_port_indices(self) -> np.ndarray:
        """Position of every port among the ports of its box."""
        counts = [0] * self.nboxes
        local = np.empty(self.nports, dtype=np.intp)
        for port, box in enumerate(self.port_box):
            local[port] = counts[box]
            counts[box] += 1
        return local

    def _check_box(self, box: int):
        if not 0 <= box < self.nboxes:
            raise BoxIndexError(box=box, nboxes=self.nboxes)


class WiringDiagramBuilder:
    """Incremental construction of an `UndirectedWiringDiagram`.

    Example:
    ```python
    builder = WiringDiagramBuilder()
    x = builder.add_junction(variable="x")
    builder.add_box(1, name="growth", junctions=[x])
    builder.add_box(1, name="decay", junctions=[x])
    builder.add_outer_port(x)
    diagram = builder.build()
    ```
    """

    def __init__(self):
        # Junction of every port, None while unattached
        self._port_box: List[int] = []
        self._port_junction: List[Optional[int]] = []
        self._box_names: List[Hashable] = []
        self._junction_variables: List[Hashable] = []
        self._outer_junction: List[int] = []
        self._outer_port_names: List[Hashable] = []

        self._already_built = False

    @property
    def nboxes(self) -> int:
        return len(self._box_names)

    @property
    def njunctions(self) -> int:
        return len(self._junction_variables)

    def add_box(
        self,
        nports: int,
        name: Hashable = None,
        junctions: Sequence[int] = None,
    ) -> int:
        """Add a box with `nports` ports and return its index.

        Args:
            nports: Arity of the box.
            name: Optional box name.
            junctions: Optional junction for each port of the box. Ports left
                unattached must be attached with `set_junction` before building.
        """
        self._check_not_already_built()
        if junctions is not None and len(junctions) != nports:
            raise ArityMismatchError(
                expected_arity=nports, actual_arity=len(junctions), box=self.nboxes
            )
        for junction in junctions or ():
            self._check_junction(junction)
        box = self.nboxes
        self._box_names.append(name)
        for k in range(nports):
            self._port_box.append(box)
            self._port_junction.append(None)
            if junctions is not None:
                self.set_junction((box, k), junctions[k])

        logger.debug("Added box %s with %d ports", name or box, nports)
        return box

    def add_junction(self, variable: Hashable = None) -> int:
        """Add a junction and return its index.

        Outer ports attached to this junction are named after `variable` unless
        given a name of their own. If any outer port ends up without a name, the
        outer ports of the diagram are identified by index instead.
        """
        self._check_not_already_built()
        self._junction_variables.append(variable)
        return self.njunctions - 1

    def add_junctions(self, n: int) -> List[int]:
        return [self.add_junction() for _ in range(n)]

    def set_junction(self, port: PortLocator, junction: int):
        """Attach port `(box, k)` to `junction`."""
        self._check_not_already_built()
        box, k = port
        if not 0 <= box < self.nboxes:
            raise BoxIndexError(box=box, nboxes=self.nboxes)
        self._check_junction(junction)
        ports = [i for i, b in enumerate(self._port_box) if b == box]
        if not 0 <= k < len(ports):
            raise DiagramError(
                f"Box has {len(ports)} ports", box=box, port_index=k
            )
        self._port_junction[ports[k]] = junction

    def add_outer_port(self, junction: int, name: Hashable = None) -> int:
        """Expose `junction` as an outer port of the diagram."""
        self._check_not_already_built()
        self._check_junction(junction)
        if name is None:
            name = self._junction_variables[junction]
        self._outer_junction.append(junction)
        self._outer_port_names.append(name)
        return len(self._outer_junction) - 1

    def build(self) -> UndirectedWiringDiagram:
        self._check_not_already_built()
        local = [0] * self.nboxes
        for box, junction in zip(self._port_box, self._port_junction):
            if junction is None:
                raise DisconnectedPortError(box, local[box])
            local[box] += 1

        diagram = UndirectedWiringDiagram(
            nboxes=self.nboxes,
            njunctions=self.njunctions,
            port_box=self._port_box,
            port_junction=self._port_junction,
            outer_junction=self._outer_junction,
            box_names=_all_or_none(self._box_names, "boxes"),
            outer_port_names=self._outer_names(),
        )
        self._already_built = True

        logger.debug(
            "Built wiring diagram with %d boxes, %d junctions and %d outer ports",
            diagram.nboxes,
            diagram.njunctions,
            diagram.nouter_ports,
        )
        return diagram

    def _outer_names(self) -> Optional[tuple]:
        names = self._outer_port_names
        if any(name is None for name in names):
            if any(name is not None for name in names):
                logger.warning(
                    "Some outer ports have no name, using port indices for all "
                    "of them"
                )
            return None
        return tuple(names) if names else None

    def _check_not_already_built(self):
        if self._already_built:
            raise DiagramError(
                "WiringDiagramBuilder: build has already been called to create a "
                "diagram; this builder may no longer be used."
            )

    def _check_junction(self, junction: int):
        if not 0 <= junction < self.njunctions:
            raise DiagramError(f"Junction {junction} does not exist", junction=junction)


def ocompose(
    outer: UndirectedWiringDiagram, box: int, inner: UndirectedWiringDiagram
) -> UndirectedWiringDiagram:
    """Substitute the diagram `inner` into box `box` of the diagram `outer`.

    The outer ports of `inner` are glued, in order, to the ports of `box`. The
    boxes of the result are the boxes of `outer` with `box` replaced in place by
    the boxes of `inner`. Junctions of `outer` come first in the result, then the
    junctions of `inner` that were not glued to one of them.
    """
    arity = outer.box_arity(box)
    if inner.nouter_ports != arity:
        raise ArityMismatchError(
            expected_arity=arity, actual_arity=inner.nouter_ports, box=box
        )

    # Outer junction j is node j, inner junction j is node outer.njunctions + j
    sets = DisjointSet(outer.njunctions + inner.njunctions)
    for k, junction in enumerate(outer.box_junctions(box)):
        sets.union(junction, outer.njunctions + inner.outer_junction[k])
    labels, njunctions = sets.components()

    def _new_box(b: int) -> int:
        return b if b < box else b + inner.nboxes - 1

    port_box, port_junction = [], []
    for b in outer.boxes():
        if b == box:
            for port, inner_box in enumerate(inner.port_box):
                port_box.append(box + inner_box)
                port_junction.append(
                    labels[outer.njunctions + inner.port_junction[port]]
                )
            continue
        for junction in outer.box_junctions(b):
            port_box.append(_new_box(b))
            port_junction.append(labels[junction])

    box_names = None
    if outer.box_names is not None and inner.box_names is not None:
        box_names = (
            outer.box_names[:box] + inner.box_names + outer.box_names[box + 1 :]
        )

    return UndirectedWiringDiagram(
        nboxes=outer.nboxes + inner.nboxes - 1,
        njunctions=njunctions,
        port_box=port_box,
        port_junction=port_junction,
        outer_junction=[labels[j] for j in outer.outer_junction],
        box_names=box_names,
        outer_port_names=outer.outer_port_names,
    )
