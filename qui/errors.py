"""Error types raised by qui."""


class UsageError(AssertionError):
    """Programming error with no safe recovery.

    Raised for creating a second application while one is live, destroying an
    application that is still referenced, and calling thread-confined methods
    from the wrong thread. Callers are not expected to catch it.
    """
