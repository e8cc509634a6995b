"""Exception hierarchy for the person updates task."""


class PersonUpdatesError(Exception):
    """Base class for all person updates errors."""

    pass


class FeedError(PersonUpdatesError):
    """Raised when a page of the change feed cannot be obtained."""

    pass


class TransportError(FeedError):
    """Raised when the HTTP call to the change feed fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(FeedError):
    """Raised when a change feed payload does not have the expected shape."""

    pass


class RefreshError(PersonUpdatesError):
    """Raised when a single person cannot be refreshed."""

    def __init__(self, person_id: str, message: str):
        super().__init__(f"Failed to refresh person {person_id}: {message}")
        self.person_id = person_id


class SyncCancelledError(PersonUpdatesError):
    """Raised when a run observes its cancellation signal."""

    pass
