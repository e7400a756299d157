from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..domain.value_objects.enums import ParcelStatus
from ..domain.value_objects.ids import ClientId, ParcelNumber


@dataclass
class Parcel:
    """A shipment record as stored in the ``parcel`` table."""

    number: ParcelNumber | None
    client: ClientId
    status: str
    address: str
    created_at: str  # RFC3339, e.g. '2024-01-01T00:00:00Z'


class ParcelStore(ABC):
    """Abstract repository interface for :class:`Parcel` records.

    Mutations are unconditional: updating or deleting a number that does not
    exist succeeds without touching any row.
    """

    @abstractmethod
    def add(self, parcel: Parcel) -> ParcelNumber:
        """Persist a new parcel and return the assigned number.

        ``parcel.number`` is ignored.
        """

    @abstractmethod
    def get_by_client(self, client: ClientId) -> list[Parcel]:
        """Return all parcels owned by ``client`` (empty list if none)."""

    @abstractmethod
    def get(self, number: ParcelNumber) -> Parcel:
        """Return the parcel with ``number``.

        Raises:
            ParcelNotFoundError: no parcel has this number.
            StorageError: the read could not be executed.
        """

    @abstractmethod
    def set_status(self, number: ParcelNumber, status: ParcelStatus | str) -> None:
        """Update the status of a parcel."""

    @abstractmethod
    def set_address(self, number: ParcelNumber, address: str) -> None:
        """Update the delivery address of a parcel."""

    @abstractmethod
    def delete(self, number: ParcelNumber) -> None:
        """Remove a parcel by its number."""
