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

"""Loop implementations of `jax.lax.scan`, `jax.jit` and
`jax.ops.segment_sum` for the NumPy backend."""

import numpy as np
from jax.tree_util import tree_map

__all__ = ["scan", "jit", "segment_sum"]


def scan(f, init, xs, length=None):
    """Same contract as `jax.lax.scan`, evaluated eagerly one step at a time.

    `ys` is stacked leaf by leaf, so `f` may return any pytree.
    """
    if length is None:
        length = len(xs)
    carry, ys = init, []
    for i in range(length):
        carry, y = f(carry, None if xs is None else xs[i])
        ys.append(y)
    return carry, tree_map(lambda *leaves: np.stack(leaves), *ys)


def jit(fun, *args, **kwargs):
    """Nothing to compile: returns `fun` unchanged."""
    return fun


def segment_sum(data, segment_ids, num_segments):
    """Sum the entries of `data` that share a segment id.

    `out[k]` is the sum of every `data[i]` with `segment_ids[i] == k`; segments
    without entries are zero.
    """
    data = np.asarray(data)
    out = np.zeros((num_segments,) + data.shape[1:], dtype=data.dtype)
    np.add.at(out, np.asarray(segment_ids, dtype=np.intp), data)
    return out
