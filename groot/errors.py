"""groot error types."""


class GrootError(Exception):
    """Base class for all groot errors."""


class NotFound(GrootError):
    """Raised when a requested digest, commit or path is absent."""


class NotInitialized(NotFound):
    """Raised when the storage root has no HEAD or index yet."""


class CorruptData(GrootError):
    """Raised when a stored object does not deserialize as expected."""


class AlreadyInitialized(GrootError):
    """Raised by ``init`` when the storage root already exists.

    Callers treat this as an informational notice, not a failure.
    """


class EmptyMessage(GrootError, ValueError):
    """Raised when a commit message is blank."""


class ConcurrencyError(GrootError):
    """Raised when HEAD changed underneath a commit.

    Another writer advanced HEAD between the read and the
    compare-and-swap. The caller may retry.
    """
