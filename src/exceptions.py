class DiskiError(Exception):
    """Base class for errors raised by diski itself."""


class UnknownStatusError(DiskiError, ValueError):
    """systemd reported a SubState we have no UnitState for."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Unexpected unit sub-state: {token!r}")
        self.token = token


class StreamClosedError(DiskiError):
    """A signal stream ended, which only happens when the bus went away."""
