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

"""Predator-prey dynamics composed from three resource sharers.

Rabbits grow on their own and foxes die out on their own. Predation couples
the two species:

    rabbit_growth:        dr/dt = alpha * r
    rabbitfox_predation:  dr/dt = -beta * r * f,  df/dt = gamma * r * f
    fox_decline:          df/dt = -delta * f

Gluing the sharers along the `rabbits` and `foxes` junctions gives the
Lotka-Volterra equations.
"""

from ..backend import numpy_api as cnp
from ..framework import (
    ContinuousResourceSharer,
    WiringDiagramBuilder,
    euler_approx,
    oapply,
)


def rabbit_growth(alpha=0.3):
    return ContinuousResourceSharer.from_dynamics(
        1, lambda u, p, t: alpha * cnp.asarray(u)
    )


def rabbitfox_predation(beta=0.015, gamma=0.015):
    def dynamics(u, p, t):
        r, f = u[0], u[1]
        return cnp.array([-beta * r * f, gamma * r * f])

    return ContinuousResourceSharer.from_dynamics(2, dynamics)


def fox_decline(delta=0.7):
    return ContinuousResourceSharer.from_dynamics(
        1, lambda u, p, t: -delta * cnp.asarray(u)
    )


def lotka_volterra_diagram():
    """Three boxes sharing the `rabbits` and `foxes` junctions, both exposed."""
    builder = WiringDiagramBuilder()
    rabbits = builder.add_junction(variable="rabbits")
    foxes = builder.add_junction(variable="foxes")
    builder.add_box(1, name="rabbit_growth", junctions=[rabbits])
    builder.add_box(2, name="rabbitfox_predation", junctions=[rabbits, foxes])
    builder.add_box(1, name="fox_decline", junctions=[foxes])
    builder.add_outer_port(rabbits)
    builder.add_outer_port(foxes)
    return builder.build()


def LotkaVolterra(alpha=0.3, beta=0.015, gamma=0.015, delta=0.7, dt=None):
    """The composite predator-prey resource sharer with ports `rabbits` and
    `foxes`. If `dt` is given, every component is discretized with Euler's
    method before composing."""
    sharers = {
        "rabbit_growth": rabbit_growth(alpha),
        "rabbitfox_predation": rabbitfox_predation(beta, gamma),
        "fox_decline": fox_decline(delta),
    }
    if dt is not None:
        sharers = euler_approx(sharers, dt)
    return oapply(lotka_volterra_diagram(), sharers)
