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

from .interface import UndirectedInterface, UndirectedVectorInterface
from .system import (
    SystemKind,
    UndirectedSystem,
    ContinuousUndirectedSystem,
    DiscreteUndirectedSystem,
    DelayUndirectedSystem,
)
from .resource_sharer import (
    ResourceSharer,
    ContinuousResourceSharer,
    DiscreteResourceSharer,
    DelayResourceSharer,
    resource_sharer,
    eval_dynamics,
    exposed_states,
    exposed_labels,
)
from .wiring_diagram import (
    UndirectedWiringDiagram,
    WiringDiagramBuilder,
    ocompose,
)
from .pushout import DisjointSet, StatePushout, coproduct, pushout
from .composition import (
    fills,
    induced_states,
    induced_ports,
    induced_dynamics,
    oapply,
)
from .euler import euler_approx
from .error import (
    UWDynamError,
    StaticError,
    EvaluationError,
    DiagramError,
    BoxIndexError,
    ArityMismatchError,
    OutOfRangeIndexError,
    SystemKindMismatchError,
    BlockDimensionMismatchError,
    DimensionMismatchError,
)

__all__ = [
    "UndirectedInterface",
    "UndirectedVectorInterface",
    "SystemKind",
    "UndirectedSystem",
    "ContinuousUndirectedSystem",
    "DiscreteUndirectedSystem",
    "DelayUndirectedSystem",
    "ResourceSharer",
    "ContinuousResourceSharer",
    "DiscreteResourceSharer",
    "DelayResourceSharer",
    "resource_sharer",
    "eval_dynamics",
    "exposed_states",
    "exposed_labels",
    "UndirectedWiringDiagram",
    "WiringDiagramBuilder",
    "ocompose",
    "DisjointSet",
    "StatePushout",
    "coproduct",
    "pushout",
    "fills",
    "induced_states",
    "induced_ports",
    "induced_dynamics",
    "oapply",
    "euler_approx",
    "UWDynamError",
    "StaticError",
    "EvaluationError",
    "DiagramError",
    "BoxIndexError",
    "ArityMismatchError",
    "OutOfRangeIndexError",
    "SystemKindMismatchError",
    "BlockDimensionMismatchError",
    "DimensionMismatchError",
]
