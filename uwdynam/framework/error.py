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

from __future__ import annotations

from typing import Hashable


class UWDynamError(Exception):
    """Base class for all custom uwdynam errors."""

    def __init__(
        self,
        message=None,
        *,
        box: int = None,
        box_name: Hashable = None,
        port_index: int = None,
        junction: int = None,
    ):
        """Create a new UWDynamError.

        Only `message` is a positional argument, all others are keyword arguments.

        Args:
            message: A custom error message, defaults to the error class name.
            box: Index of the diagram box the error relates to, if any.
            box_name: Name of that box, when the diagram carries box names.
            port_index: Index of the port the error occurred at.
            junction: Index of the junction the error occurred at.
        """
        super().__init__(message)
        self.message = message
        self.box = box
        self.box_name = box_name
        self.port_index = port_index
        self.junction = junction

    def __str__(self):
        message = self.message or self.default_message
        return f"{message}{self._context_info()}"

    def _context_info(self) -> str:
        strbuf = []

        if self.box_name is not None:
            strbuf.append(f" in box {self.box_name}")
        elif self.box is not None:
            strbuf.append(f" in box {self.box}")

        if self.port_index is not None:
            strbuf.append(f" at port {self.port_index}")
        if self.junction is not None:
            strbuf.append(f" at junction {self.junction}")
        if self.__cause__ is not None:
            strbuf.append(f": {self.__cause__}")

        return "".join(strbuf)

    @property
    def default_message(self):
        return type(self).__name__

    def caused_by(self, exc_type: type):
        """Check if this error is or was caused by another error type.

        Args:
            exc_type: The type of exception to check for (eg. KeyError)

        Returns:
            bool: True if the error is or was caused by the given exception type.
        """

        def _is_or_caused_by(exc, cause_type) -> bool:
            if not exc or not cause_type:
                return False
            if isinstance(exc, cause_type):
                return True
            return _is_or_caused_by(exc.__cause__, cause_type)

        return _is_or_caused_by(self, exc_type)


class StaticError(UWDynamError):
    """Errors detected while building a diagram or a composite, before any
    dynamics function is evaluated."""

    pass


class EvaluationError(UWDynamError):
    """Errors detected while evaluating composite dynamics."""

    pass


class DiagramError(StaticError):
    """The wiring diagram is malformed."""

    pass


class BoxIndexError(DiagramError, IndexError):
    """A box index does not exist in the diagram."""

    def __init__(self, box=None, nboxes=None, **kwargs):
        super().__init__(box=box, **kwargs)
        self.nboxes = nboxes

    def __str__(self):
        return (
            f"Trying to fill box {self.box}, when the diagram has only "
            f"{self.nboxes} boxes"
        )


class ArityMismatchError(StaticError):
    """A resource sharer's port count disagrees with the box it fills."""

    def __init__(self, expected_arity=None, actual_arity=None, **kwargs):
        super().__init__(**kwargs)
        self.expected_arity = expected_arity
        self.actual_arity = actual_arity

    def __str__(self):
        if self.expected_arity is not None or self.actual_arity is not None:
            return (
                f"Arity mismatch: expected {self.expected_arity} ports, "
                f"got {self.actual_arity}" + self._context_info()
            )
        return f"Arity mismatch{self._context_info()}"


class OutOfRangeIndexError(StaticError):
    """A portmap entry falls outside the state range of its system."""

    def __init__(self, index=None, nstates=None, **kwargs):
        super().__init__(**kwargs)
        self.index = index
        self.nstates = nstates

    def __str__(self):
        return (
            f"Port map index {self.index} out of range for a system with "
            f"{self.nstates} states" + self._context_info()
        )


class SystemKindMismatchError(StaticError):
    """Systems of different kinds (continuous, discrete, delay) were mixed, or
    an operation was applied to a system of the wrong kind."""

    def __init__(self, expected_kind=None, actual_kind=None, **kwargs):
        super().__init__(**kwargs)
        self.expected_kind = expected_kind
        self.actual_kind = actual_kind

    def __str__(self):
        if self.expected_kind or self.actual_kind:
            return (
                f"System kind mismatch: expected {self.expected_kind}, "
                f"got {self.actual_kind}" + self._context_info()
            )
        return f"System kind mismatch{self._context_info()}"


class BlockDimensionMismatchError(StaticError):
    """Vector-valued resource sharers with different block dimensions were
    composed together."""

    def __init__(self, expected_ndims=None, actual_ndims=None, **kwargs):
        super().__init__(**kwargs)
        self.expected_ndims = expected_ndims
        self.actual_ndims = actual_ndims

    def __str__(self):
        return (
            f"Block dimension mismatch: expected {self.expected_ndims}, "
            f"got {self.actual_ndims}" + self._context_info()
        )


class DimensionMismatchError(EvaluationError):
    """A dynamics function returned a vector whose shape does not match the
    state count of its system."""

    def __init__(self, expected_shape=None, actual_shape=None, **kwargs):
        super().__init__(**kwargs)
        self.expected_shape = expected_shape
        self.actual_shape = actual_shape

    def __str__(self):
        if self.expected_shape or self.actual_shape:
            return (
                f"Shape mismatch: expected {self.expected_shape}, "
                f"got {self.actual_shape}" + self._context_info()
            )
        return f"Shape mismatch{self._context_info()}"
