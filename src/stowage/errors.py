"""Error taxonomy for Stowage.

- ConfigurationError: bad destination path or spool directory
- StagingError: local buffer I/O or compression failures
- BackendError: failures talking to the remote object store
- CommitAbortedError: a commit interrupted by abort()
"""

from __future__ import annotations


class StowageError(Exception):
    """Base exception for all Stowage errors."""

    pass


class ConfigurationError(StowageError):
    """Raised when a writer cannot be constructed from its configuration."""

    pass


class StagingError(StowageError):
    """Raised when the local staging buffer fails."""

    pass


class WriterClosedError(StagingError):
    """Raised when writing to a writer that is no longer open."""

    def __init__(self, path: str, state: str) -> None:
        self.path = path
        self.state = state
        super().__init__(f"writer closed: {path} ({state})")


class BackendError(StowageError):
    """Raised when a backend put or stat fails."""

    def __init__(self, message: str, destination: str = "") -> None:
        self.destination = destination
        if destination:
            message = f"{message} [{destination}]"
        super().__init__(message)


class ObjectNotFoundError(BackendError):
    """Raised by stat when the object does not exist."""

    def __init__(self, destination: str) -> None:
        super().__init__("object not found", destination)


class UnverifiedCommitError(BackendError):
    """Raised when the transfer succeeded but the follow-up stat failed.

    The object should be assumed written; its metadata is unconfirmed.
    """

    written = True

    def __init__(self, destination: str, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f"object written but stat failed: {cause}", destination)


class CommitAbortedError(StowageError):
    """Raised by close() when abort() cancelled the in-flight transfer."""

    def __init__(self, destination: str) -> None:
        self.destination = destination
        super().__init__(f"commit aborted: {destination}")
