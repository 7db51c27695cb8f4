from __future__ import annotations


class EditorError(Exception):
    """Base class for recoverable editing errors.

    The rejected operation leaves every piece of state unchanged; callers decide
    how to notify the user.
    """


class EmptyRegionError(EditorError):
    """Commit attempted on a region with non-positive width or height."""


class SourceRegionEmptyError(EditorError):
    """The region maps to a zero-area rectangle in source pixels."""


class SourceDecodeError(EditorError):
    """The current artifact could not be decoded as a raster."""


class IllegalDragStart(EditorError):
    """A drag session was started while another one is active."""


class CroppingInactive(EditorError):
    """A crop operation was requested outside cropping mode."""


class TransformFailed(EditorError):
    """The external transform collaborator rejected the request or raised."""


class OperationPending(EditorError):
    """Another transform or commit is still outstanding for this history."""


class EmptyHistoryError(EditorError):
    """``current()`` was requested from a history with no versions."""


class HistoryAlreadySeeded(EditorError):
    """``seed()`` was called on a non-empty history; use ``reset()``."""


class SessionNotFound(EditorError):
    pass


class JobNotFound(EditorError):
    pass
