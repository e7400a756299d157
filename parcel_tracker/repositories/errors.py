from __future__ import annotations


class ParcelStoreError(Exception):
    """Base class for errors raised by a :class:`ParcelStore`."""


class StorageError(ParcelStoreError, RuntimeError):
    """Raised when the backing storage engine fails to execute a statement.

    The engine's own exception is kept as ``__cause__``.
    """

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class ParcelNotFoundError(ParcelStoreError, LookupError):
    """Raised by ``get`` when no parcel has the requested number."""

    def __init__(self, number: int) -> None:
        super().__init__(f"Parcel {number} not found")
        self.number = number
