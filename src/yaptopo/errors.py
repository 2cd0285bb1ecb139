"""Exceptions raised by the yapTopo kernel.

Every error here means the kernel was driven with input it cannot
represent.  None of them is recoverable: carrying on would leave the
topology graph silently inconsistent, so they are raised and never
caught inside the kernel.

Copyright (c) 2025 yapCAD contributors
MIT License
"""


class TopologyError(ValueError):
    """Base class for topology kernel errors."""

    def __init__(self, message, details=None):
        super().__init__(message)
        self.details = details or {}


class PreconditionError(TopologyError):
    """An operation was called with an entity of the wrong kind or shape."""


class DegenerateGeometryError(TopologyError):
    """Geometry the kernel does not know how to evaluate."""


class MalformedLoopError(TopologyError):
    """Loop uses that do not form a single simple cycle."""
