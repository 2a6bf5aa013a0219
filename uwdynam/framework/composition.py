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

"""Undirected composition of resource sharers.

`oapply` fills the boxes of an undirected wiring diagram with resource sharers
and returns the composite resource sharer. Its dynamics are those of running
every subsystem independently on its own copy of the shared states, then
summing the contributions to each shared state:

1. Expand the merged state vector to the disjoint union of subsystem states.
2. Evaluate every subsystem on its slice of the expanded state.
3. Fold the results back by summing over the states merged into each index.

For discrete systems the fold sums the per-subsystem increments `u1 - u0` and
adds them to the previous merged value.

Composite dynamics allocate their output on every call and never write into
the arrays they are given.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Mapping, Sequence, Union

import numpy as np

from ..backend import numpy_api as cnp
from ..logging import logger, logdata
from .error import (
    ArityMismatchError,
    BlockDimensionMismatchError,
    DimensionMismatchError,
    StaticError,
    SystemKindMismatchError,
)
from .interface import UndirectedInterface, UndirectedVectorInterface
from .pushout import StatePushout, coproduct, pushout
from .resource_sharer import ResourceSharer, sharer_type
from .system import SystemKind, UndirectedSystem, block_indices
from .wiring_diagram import UndirectedWiringDiagram

if TYPE_CHECKING:
    from ..backend.typing import Array, History, Parameters, Scalar

    Sharers = Union[
        Sequence[ResourceSharer], Mapping[object, ResourceSharer], ResourceSharer
    ]

__all__ = [
    "fills",
    "induced_states",
    "induced_ports",
    "induced_dynamics",
    "oapply",
]


def fills(r: ResourceSharer, d: UndirectedWiringDiagram, b: int) -> bool:
    """Check if `r` has the right number of ports to fill box `b` of `d`.

    Raises:
        BoxIndexError: If `d` has no box `b`.
    """
    return r.nports == d.box_arity(b)


def _resolve_sharers(d: UndirectedWiringDiagram, xs: Sharers) -> list[ResourceSharer]:
    """One resource sharer per box, in box order."""
    if isinstance(xs, ResourceSharer):
        return [xs] * d.nboxes

    if isinstance(xs, Mapping):
        if d.nboxes == 0:
            return []
        if d.box_names is None:
            raise StaticError(
                "Resource sharers given by name, but the diagram boxes are unnamed"
            )
        resolved = []
        for b, name in enumerate(d.box_names):
            try:
                resolved.append(xs[name])
            except KeyError as exc:
                raise StaticError(
                    "No resource sharer given for box", box=b, box_name=name
                ) from exc
        return resolved

    xs = list(xs)
    if len(xs) != d.nboxes:
        raise StaticError(
            f"Got {len(xs)} resource sharers for a diagram with {d.nboxes} boxes"
        )
    return xs


def _check_fills(d: UndirectedWiringDiagram, xs: Sequence[ResourceSharer]):
    for b in d.boxes():
        if not fills(xs[b], d, b):
            raise ArityMismatchError(
                expected_arity=d.box_arity(b),
                actual_arity=xs[b].nports,
                box=b,
                box_name=d.box_name(b),
            )


def _common_kind(
    d: UndirectedWiringDiagram, xs: Sequence[ResourceSharer], kind: SystemKind
) -> SystemKind:
    for b, x in enumerate(xs):
        if kind is None:
            kind = x.kind
        elif x.kind != kind:
            raise SystemKindMismatchError(
                expected_kind=kind, actual_kind=x.kind, box=b, box_name=d.box_name(b)
            )
    return SystemKind.CONTINUOUS if kind is None else kind


def _common_ndims(d: UndirectedWiringDiagram, xs: Sequence[ResourceSharer]) -> int:
    ndims = xs[0].ndims if xs else 1
    for b, x in enumerate(xs):
        if x.ndims != ndims:
            raise BlockDimensionMismatchError(
                expected_ndims=ndims,
                actual_ndims=x.ndims,
                box=b,
                box_name=d.box_name(b),
            )
    return ndims


def induced_states(
    d: UndirectedWiringDiagram, xs: Sequence[ResourceSharer]
) -> StatePushout:
    """Merged state space of the composite of `xs` along `d`.

    Checks that every box is filled by a resource sharer of matching arity, then
    computes the pushout of the total port map (each diagram port to the global
    state behind it) and the junction map (each diagram port to its junction).

    Raises:
        ArityMismatchError: If a resource sharer does not fill its box.
        OutOfRangeIndexError: If a port map entry lies outside its state range.
    """
    _check_fills(d, xs)

    offsets, nglobal = coproduct(x.nstates for x in xs)
    portfunctions = []
    for b, x in enumerate(xs):
        try:
            portfunctions.append(x.portfunction())
        except StaticError as exc:
            exc.box = b
            exc.box_name = d.box_name(b)
            raise

    local = d.local_port_indices()
    total_portmap = [
        offsets[b] + portfunctions[b][k] for b, k in zip(d.port_box, local)
    ]
    return pushout(total_portmap, d.port_junction, nglobal, d.njunctions)


def induced_ports(d: UndirectedWiringDiagram) -> tuple:
    """Port identifiers of the composite: outer port names when the diagram
    has them, else the outer port indices."""
    if d.outer_port_names is not None:
        return d.outer_port_names
    return tuple(range(d.nouter_ports))


class _BoxEvaluator:
    """Evaluate every subsystem on its slice of the expanded state vector."""

    def __init__(
        self,
        d: UndirectedWiringDiagram,
        xs: Sequence[ResourceSharer],
        S: StatePushout,
        ndims: int,
    ):
        offsets, _ = coproduct(x.nstates for x in xs)
        self.systems: list[UndirectedSystem] = [x.system for x in xs]
        self.slices = [
            slice(int(offset) * ndims, (int(offset) + x.nstates) * ndims)
            for offset, x in zip(offsets, xs)
        ]
        self.box_names = [d.box_name(b) for b in d.boxes()]
        # Expansion and fold act on the same scalar index map
        self.state_map = block_indices(S.state_map, ndims)
        self.nmerged = S.nstates * ndims

    def expand(self, u_merged: Array) -> Array:
        return cnp.asarray(u_merged)[self.state_map]

    def fold(self, du: Array) -> Array:
        return cnp.segment_sum(du, self.state_map, self.nmerged)

    def __call__(self, u: Array, call: Callable) -> Array:
        outputs = []
        for b, (system, sl) in enumerate(zip(self.systems, self.slices)):
            out = cnp.asarray(call(system, u[sl], sl))
            expected_shape = (sl.stop - sl.start,)
            if out.shape != expected_shape:
                raise DimensionMismatchError(
                    expected_shape=expected_shape,
                    actual_shape=out.shape,
                    box=b,
                    box_name=self.box_names[b],
                )
            outputs.append(out)
        if not outputs:
            return cnp.zeros(0, dtype=u.dtype)
        return cnp.concatenate(outputs)


def induced_dynamics(
    d: UndirectedWiringDiagram,
    xs: Sequence[ResourceSharer],
    S: StatePushout,
    kind: SystemKind,
    ndims: int = 1,
) -> Callable:
    """Composite dynamics function of `xs` along `d` with merged states `S`."""
    evaluate = _BoxEvaluator(d, xs, S, ndims)

    if kind == SystemKind.CONTINUOUS:

        def v(u_merged: Array, p: Parameters = None, t: Scalar = 0.0) -> Array:
            u = evaluate.expand(u_merged)
            du = evaluate(u, lambda system, u_b, sl: system.eval_dynamics(u_b, p, t))
            # add along junctions
            return evaluate.fold(du)

    elif kind == SystemKind.DELAY:

        def v(
            u_merged: Array, h: History, p: Parameters = None, t: Scalar = 0.0
        ) -> Array:
            u = evaluate.expand(u_merged)

            def hist(p, t):
                return evaluate.expand(h(p, t))

            def _box_history(sl):
                return lambda p, t: hist(p, t)[sl]

            du = evaluate(
                u,
                lambda system, u_b, sl: system.eval_dynamics(
                    u_b, _box_history(sl), p, t
                ),
            )
            return evaluate.fold(du)

    elif kind == SystemKind.DISCRETE:

        def v(u_merged: Array, p: Parameters = None, t: Scalar = 0.0) -> Array:
            u_merged = cnp.asarray(u_merged)
            u0 = evaluate.expand(u_merged)
            u1 = evaluate(u0, lambda system, u_b, sl: system.eval_dynamics(u_b, p, t))
            # add increments along junctions
            return u_merged + evaluate.fold(u1 - u0)

    else:
        raise ValueError(f"Unknown system kind {kind}")

    return v


def oapply(
    d: UndirectedWiringDiagram, xs: Sharers, kind: SystemKind = None
) -> ResourceSharer:
    """Compose resource sharers along an undirected wiring diagram.

    Args:
        d: The composition pattern.
        xs: The resource sharers filling the boxes of `d`. Either a sequence
            with one resource sharer per box in box order, a mapping from box
            names to resource sharers, or a single resource sharer used to fill
            every box.
        kind: The system kind of the composite. Only needed when `d` has no
            boxes, in which case it defaults to continuous.

    Returns:
        The composite resource sharer, of the same kind as `xs`. Its ports are
        the outer ports of `d`.

    Raises:
        ArityMismatchError: If a resource sharer does not fill its box.
        OutOfRangeIndexError: If a port map entry lies outside its state range.
        SystemKindMismatchError: If `xs` mixes system kinds.
        BlockDimensionMismatchError: If `xs` mixes block dimensions.
    """
    xs = _resolve_sharers(d, xs)
    kind = _common_kind(d, xs, kind)
    ndims = _common_ndims(d, xs)

    S = induced_states(d, xs)
    v = induced_dynamics(d, xs, S, kind, ndims)

    cls = sharer_type(kind)
    ports = induced_ports(d)
    if ndims == 1:
        interface = UndirectedInterface(ports)
    else:
        interface = UndirectedVectorInterface(ports, ndims=ndims)
    portmap = np.asarray(S.junction_map)[np.asarray(d.outer_junction, dtype=np.intp)]
    system = cls.system_type(S.nstates, v, portmap)

    logger.debug(
        "Composed %d %s resource sharers into %d states",
        d.nboxes,
        kind.value,
        S.nstates,
        **logdata(nglobal=len(S.state_map), nports=len(ports)),
    )
    return cls(interface, system)
