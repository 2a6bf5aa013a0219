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

import pytest

from uwdynam.framework import (
    ArityMismatchError,
    BoxIndexError,
    DiagramError,
    UndirectedWiringDiagram,
    WiringDiagramBuilder,
    ocompose,
)
from uwdynam.framework.wiring_diagram import (
    BoxNameNotUniqueError,
    DisconnectedPortError,
)


@pytest.fixture
def diagram():
    builder = WiringDiagramBuilder()
    x = builder.add_junction(variable="x")
    y = builder.add_junction(variable="y")
    builder.add_box(1, name="a", junctions=[x])
    builder.add_box(2, name="b", junctions=[y, x])
    builder.add_outer_port(y)
    builder.add_outer_port(x, name="renamed")
    return builder.build()


class TestUndirectedWiringDiagram:
    def test_queries(self, diagram):
        assert diagram.nboxes == 2
        assert diagram.njunctions == 2
        assert diagram.nports == 3
        assert diagram.nouter_ports == 2
        assert list(diagram.boxes()) == [0, 1]
        assert list(diagram.junctions()) == [0, 1]

        assert diagram.incident_ports(1) == [1, 2]
        assert diagram.box_arity(0) == 1
        assert diagram.box_arity(1) == 2
        assert diagram.box_junctions(1) == [1, 0]
        assert diagram.junction_ports(0) == [0, 2]
        assert diagram.box_name(1) == "b"
        assert list(diagram.local_port_indices()) == [0, 0, 1]

    def test_outer_port_names(self, diagram):
        assert diagram.outer_junction == (1, 0)
        assert diagram.outer_port_names == ("y", "renamed")

    def test_box_out_of_range(self, diagram):
        with pytest.raises(BoxIndexError) as exc:
            diagram.box_arity(2)
        assert exc.value.box == 2
        assert exc.value.nboxes == 2
        # Also an IndexError for callers that don't know about diagrams
        with pytest.raises(IndexError):
            diagram.incident_ports(-1)

    def test_interleaved_ports(self):
        d = UndirectedWiringDiagram(
            nboxes=2, njunctions=1, port_box=[1, 0, 1], port_junction=[0, 0, 0]
        )
        assert d.incident_ports(1) == [0, 2]
        assert list(d.local_port_indices()) == [0, 0, 1]

    def test_box_with_no_ports(self):
        d = UndirectedWiringDiagram(nboxes=1, njunctions=0)
        assert d.box_arity(0) == 0
        assert d.incident_ports(0) == []

    @pytest.mark.parametrize(
        "kwargs",
        [
            dict(nboxes=1, njunctions=1, port_box=[0, 0], port_junction=[0]),
            dict(nboxes=1, njunctions=1, port_box=[1], port_junction=[0]),
            dict(nboxes=1, njunctions=1, port_box=[0], port_junction=[1]),
            dict(nboxes=1, njunctions=1, outer_junction=[2]),
            dict(nboxes=2, njunctions=0, box_names=["a"]),
            dict(nboxes=0, njunctions=1, outer_junction=[0], outer_port_names=[]),
            dict(nboxes=-1, njunctions=0),
        ],
    )
    def test_malformed(self, kwargs):
        with pytest.raises(DiagramError):
            UndirectedWiringDiagram(**kwargs)

    def test_duplicate_box_names(self):
        with pytest.raises(BoxNameNotUniqueError):
            UndirectedWiringDiagram(nboxes=2, njunctions=0, box_names=["a", "a"])


class TestWiringDiagramBuilder:
    def test_set_junction(self):
        builder = WiringDiagramBuilder()
        j0, j1 = builder.add_junctions(2)
        b = builder.add_box(2)
        builder.set_junction((b, 1), j0)
        builder.set_junction((b, 0), j1)
        d = builder.build()

        assert d.port_junction == (1, 0)
        assert d.box_names is None
        assert d.outer_port_names is None

    def test_disconnected_port(self):
        builder = WiringDiagramBuilder()
        j = builder.add_junction()
        b = builder.add_box(2)
        builder.set_junction((b, 0), j)

        with pytest.raises(DisconnectedPortError) as exc:
            builder.build()
        assert exc.value.box == 0
        assert exc.value.port_index == 1

    def test_wrong_number_of_junctions(self):
        builder = WiringDiagramBuilder()
        j = builder.add_junction()
        with pytest.raises(ArityMismatchError):
            builder.add_box(2, junctions=[j])

    def test_missing_junction(self):
        builder = WiringDiagramBuilder()
        builder.add_box(1)
        with pytest.raises(DiagramError):
            builder.set_junction((0, 0), 0)
        with pytest.raises(DiagramError):
            builder.add_outer_port(3)

    def test_bad_junction_leaves_builder_unchanged(self):
        builder = WiringDiagramBuilder()
        j = builder.add_junction()
        with pytest.raises(DiagramError):
            builder.add_box(2, junctions=[j, 99])

        assert builder.nboxes == 0
        builder.add_box(1, junctions=[j])
        d = builder.build()
        assert d.nboxes == 1
        assert d.port_box == (0,)
        assert d.port_junction == (j,)

    def test_partially_named_outer_ports(self, caplog):
        builder = WiringDiagramBuilder()
        x = builder.add_junction(variable="x")
        y = builder.add_junction()
        builder.add_box(2, junctions=[x, y])
        builder.add_outer_port(x)
        builder.add_outer_port(y)
        d = builder.build()

        assert d.outer_junction == (0, 1)
        assert d.outer_port_names is None
        assert "using port indices" in caplog.text

    def test_missing_box(self):
        builder = WiringDiagramBuilder()
        j = builder.add_junction()
        with pytest.raises(BoxIndexError):
            builder.set_junction((0, 0), j)

    def test_missing_port(self):
        builder = WiringDiagramBuilder()
        j = builder.add_junction()
        builder.add_box(1)
        with pytest.raises(DiagramError) as exc:
            builder.set_junction((0, 1), j)
        assert exc.value.port_index == 1

    def test_partially_named_boxes(self):
        builder = WiringDiagramBuilder()
        builder.add_box(0, name="a")
        builder.add_box(0)
        with pytest.raises(DiagramError):
            builder.build()

    def test_build_twice(self):
        builder = WiringDiagramBuilder()
        builder.add_box(0)
        builder.build()
        with pytest.raises(DiagramError):
            builder.build()
        with pytest.raises(DiagramError):
            builder.add_junction()


class TestOcompose:
    @pytest.fixture
    def outer(self):
        builder = WiringDiagramBuilder()
        x, y = builder.add_junctions(2)
        builder.add_box(1, name="p", junctions=[x])
        builder.add_box(2, name="hole", junctions=[x, y])
        builder.add_outer_port(y, name="out")
        return builder.build()

    @pytest.fixture
    def inner(self):
        builder = WiringDiagramBuilder()
        a, b = builder.add_junctions(2)
        builder.add_box(1, name="q", junctions=[a])
        builder.add_box(1, name="r", junctions=[b])
        builder.add_outer_port(a)
        builder.add_outer_port(b)
        return builder.build()

    def test_structure(self, outer, inner):
        d = ocompose(outer, 1, inner)

        assert d.nboxes == 3
        assert d.njunctions == 2
        assert d.port_box == (0, 1, 2)
        assert d.port_junction == (0, 0, 1)
        assert d.outer_junction == (1,)
        assert d.box_names == ("p", "q", "r")
        assert d.outer_port_names == ("out",)

    def test_inner_junctions_are_appended(self, outer):
        # The inner diagram has a private junction shared by its two boxes
        builder = WiringDiagramBuilder()
        a, b, hidden = builder.add_junctions(3)
        builder.add_box(2, junctions=[a, hidden])
        builder.add_box(2, junctions=[hidden, b])
        builder.add_outer_port(a)
        builder.add_outer_port(b)
        inner = builder.build()

        d = ocompose(outer, 1, inner)
        assert d.njunctions == 3
        assert d.port_junction == (0, 0, 2, 2, 1)
        # Inner boxes are unnamed
        assert d.box_names is None

    def test_boxes_after_the_hole_are_shifted(self, inner):
        builder = WiringDiagramBuilder()
        x, y = builder.add_junctions(2)
        builder.add_box(2, junctions=[x, y])
        builder.add_box(1, junctions=[y])
        outer = builder.build()

        d = ocompose(outer, 0, inner)
        assert d.nboxes == 3
        assert d.port_box == (0, 1, 2)
        assert d.port_junction == (0, 1, 1)

    def test_inner_glues_outer_junctions(self):
        # Both outer ports of the inner diagram sit on one junction, so the
        # two junctions around the hole are merged.
        builder = WiringDiagramBuilder()
        x, y = builder.add_junctions(2)
        builder.add_box(2, junctions=[x, y])
        builder.add_outer_port(y)
        outer = builder.build()

        builder = WiringDiagramBuilder()
        a = builder.add_junction()
        builder.add_box(1, junctions=[a])
        builder.add_outer_port(a)
        builder.add_outer_port(a)
        inner = builder.build()

        d = ocompose(outer, 0, inner)
        assert d.njunctions == 1
        assert d.port_junction == (0,)
        assert d.outer_junction == (0,)

    def test_arity_mismatch(self, outer, inner):
        with pytest.raises(ArityMismatchError) as exc:
            ocompose(outer, 0, inner)
        assert exc.value.expected_arity == 1
        assert exc.value.actual_arity == 2
