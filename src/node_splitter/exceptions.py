"""Custom exceptions for the node splitter.

Provides a hierarchy of exceptions for different error conditions:
- SplitterError: Base exception for all splitter errors
- ConfigurationError: Split configuration could not be parsed
- StoreError: The graph store rejected a read, lock, create or delete
"""


class SplitterError(Exception):
    """Base exception for splitter errors."""


class ConfigurationError(SplitterError):
    """Split configuration is malformed.

    Raised before any graph mutation takes place, so a bad configuration
    aborts the whole call rather than part of it.

    Attributes:
        key: The configuration key that failed to parse, if known.
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        """Initialize ConfigurationError.

        Args:
            message: Description of what went wrong.
            key: The offending configuration key.
        """
        self.key = key
        super().__init__(message)


class StoreError(SplitterError):
    """The graph store rejected an operation.

    Raised mid-split; the enclosing per-node transaction is rolled back.

    Attributes:
        operation: Name of the store operation that failed.
        transient: Whether retrying the whole split may succeed
            (e.g. a lock deadlock detected by the store).
    """

    def __init__(
        self,
        operation: str,
        message: str,
        *,
        transient: bool = False,
    ) -> None:
        """Initialize StoreError.

        Args:
            operation: Name of the store operation that failed.
            message: Description of what went wrong.
            transient: Whether the failure is safe to retry.
        """
        self.operation = operation
        self.transient = transient
        super().__init__(f"Store operation '{operation}' failed: {message}")
