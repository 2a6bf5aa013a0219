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

import numpy as np

from uwdynam.backend import numpy_api as cnp
from uwdynam.framework import (
    ContinuousResourceSharer,
    DelayResourceSharer,
    DiscreteResourceSharer,
    SystemKind,
    SystemKindMismatchError,
    WiringDiagramBuilder,
    euler_approx,
    oapply,
)
from uwdynam.simulation import trajectory
from uwdynam.testing import set_backend


@pytest.fixture
def decay():
    return ContinuousResourceSharer.from_dynamics(
        2, lambda u, p, t: -cnp.asarray(u), ports=["x"], portmap=[1]
    )


def test_fixed_step(decay):
    r = euler_approx(decay, 0.1)

    assert isinstance(r, DiscreteResourceSharer)
    assert r.kind == SystemKind.DISCRETE
    assert r.interface == decay.interface
    assert r.portmap == decay.portmap
    assert np.allclose(r.eval_dynamics(cnp.array([1.0, 2.0])), [0.9, 1.8])


def test_parameters_and_time_are_forwarded():
    seen = []

    def f(u, p, t):
        seen.append((p, t))
        return cnp.zeros(1)

    euler_approx(ContinuousResourceSharer.from_dynamics(1, f), 0.5).eval_dynamics(
        cnp.zeros(1), "params", 2.0
    )
    assert seen == [("params", 2.0)]


def test_step_from_parameters():
    seen = []

    def f(u, p, t):
        seen.append(list(p))
        return cnp.asarray(u) * p[0]

    r = euler_approx(ContinuousResourceSharer.from_dynamics(1, f))
    u_next = r.eval_dynamics(cnp.array([2.0]), [3.0, 0.25], 0.0)

    # h is the last parameter and f gets the rest
    assert np.allclose(u_next, [2.0 + 0.25 * 6.0])
    assert seen == [[3.0]]


def test_sequence(decay):
    rs = euler_approx([decay, decay], 0.5)
    assert isinstance(rs, list)
    assert len(rs) == 2
    assert all(r.kind == SystemKind.DISCRETE for r in rs)

    rs = euler_approx((decay,), 0.5)
    assert isinstance(rs, tuple)


def test_mapping(decay):
    rs = euler_approx({"b": decay, "a": decay}, 0.5)
    assert list(rs) == ["b", "a"]
    assert np.allclose(rs["a"].eval_dynamics(cnp.array([2.0, 4.0])), [1.0, 2.0])


def test_not_continuous():
    discrete = DiscreteResourceSharer.from_dynamics(1, lambda u, p, t: u)
    delay = DelayResourceSharer.from_dynamics(1, lambda u, h, p, t: u)

    with pytest.raises(SystemKindMismatchError):
        euler_approx(discrete, 0.1)
    with pytest.raises(SystemKindMismatchError):
        euler_approx([delay], 0.1)


@pytest.mark.parametrize("backend", ["numpy", "jax"])
def test_step_from_parameters_composes(backend):
    set_backend(backend)
    growth = ContinuousResourceSharer.from_dynamics(
        1, lambda u, p, t: p[0] * cnp.asarray(u)
    )
    decay = ContinuousResourceSharer.from_dynamics(
        1, lambda u, p, t: -cnp.asarray(u)
    )

    builder = WiringDiagramBuilder()
    x = builder.add_junction(variable="x")
    builder.add_box(1, junctions=[x])
    builder.add_box(1, junctions=[x])
    builder.add_outer_port(x)
    composite = oapply(builder.build(), euler_approx([growth, decay]))

    assert composite.kind == SystemKind.DISCRETE
    # Same composite, different step sizes: u + h * (3u - u)
    for h in [0.1, 0.5]:
        u_next = composite.eval_dynamics(cnp.array([2.0]), [3.0, h], 0.0)
        assert np.allclose(u_next, [2.0 + h * (6.0 - 2.0)])

    us = trajectory(composite, [2.0], [3.0, 0.1], 3)
    assert np.allclose(us[:, 0], [2.0, 2.4, 2.88, 3.456])
