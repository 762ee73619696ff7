"""
Exception types raised by the geekfit engine.

NotFoundError and InvalidInputError are raised before any state is touched.
PersistenceError means the durable write (or read) failed; the committed
state is left exactly as it was before the call.
"""


class GeekfitError(Exception):
    """Base class for all engine errors."""


class NotFoundError(GeekfitError, LookupError):
    """An exercise reference did not resolve to a catalog entry."""


class InvalidInputError(GeekfitError, ValueError):
    """Rejected input: non-positive reps, bad names, or a malformed snapshot."""


class PersistenceError(GeekfitError):
    """The progress store could not read or write its data."""
