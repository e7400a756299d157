"""Parcel store interface and implementations.

This package defines the abstract :class:`ParcelStore` interface together with
its error types, and concrete implementations such as the SQLite adapter under
:mod:`parcel_tracker.repositories.sqlite`.
"""
from __future__ import annotations

from .errors import ParcelNotFoundError, ParcelStoreError, StorageError
from .parcels import Parcel, ParcelStore

__all__ = [
    "Parcel",
    "ParcelNotFoundError",
    "ParcelStore",
    "ParcelStoreError",
    "StorageError",
]
