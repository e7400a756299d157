from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from parcel_tracker.domain.value_objects.enums import ParcelStatus
from parcel_tracker.domain.value_objects.ids import ClientId, ParcelNumber
from parcel_tracker.repositories.parcels import Parcel, ParcelStore

logger = logging.getLogger(__name__)


class ParcelStateError(ValueError):
    """Raised when an operation is not allowed in the parcel's current status."""

    def __init__(self, message: str, number: ParcelNumber | int, status: str) -> None:
        super().__init__(message)
        self.number = number
        self.status = status


class InvalidTransitionError(ParcelStateError):
    """Raised when a status change is not in the allowed transition table."""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_created_at(moment: datetime) -> str:
    """Format a timestamp as RFC3339 UTC with seconds precision."""
    if moment.tzinfo is None:
        raise ValueError("created_at must be timezone-aware")
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class ParcelService:
    """Lifecycle rules for parcels on top of a :class:`ParcelStore`.

    - New parcels start as ``registered``.
    - Status only moves forward: registered -> sent -> delivered.
    - Address changes and deletion are allowed only while ``registered``.

    The store itself stays schema-thin; all checks live here.
    """

    def __init__(
        self,
        store: ParcelStore,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._clock = clock or _utc_now

    def register(self, client: ClientId, address: str) -> Parcel:
        parcel = Parcel(
            number=None,
            client=client,
            status=ParcelStatus.REGISTERED.value,
            address=address,
            created_at=format_created_at(self._clock()),
        )
        parcel.number = self._store.add(parcel)
        logger.info("Parcel registered", extra={"number": parcel.number, "client": client})
        return parcel

    def client_parcels(self, client: ClientId) -> list[Parcel]:
        return self._store.get_by_client(client)

    def next_status(self, number: ParcelNumber) -> ParcelStatus:
        """Advance the parcel to the following status and return it."""
        current = self._status_of(self._store.get(number))
        target = current.next()
        if target is None:
            raise InvalidTransitionError(
                f"Parcel {number} is already {current.value}", number, current.value
            )
        self._store.set_status(number, target)
        logger.info(
            "Parcel status changed",
            extra={"number": number, "from": current.value, "to": target.value},
        )
        return target

    def change_status(self, number: ParcelNumber, status: ParcelStatus | str) -> None:
        target = ParcelStatus(status)
        current = self._status_of(self._store.get(number))
        if not current.can_move_to(target):
            raise InvalidTransitionError(
                f"Parcel {number} cannot move from {current.value} to {target.value}",
                number,
                current.value,
            )
        self._store.set_status(number, target)
        logger.info(
            "Parcel status changed",
            extra={"number": number, "from": current.value, "to": target.value},
        )

    def change_address(self, number: ParcelNumber, address: str) -> None:
        parcel = self._store.get(number)
        self._require_registered(parcel, "change the address of")
        self._store.set_address(number, address)
        logger.info("Parcel address changed", extra={"number": number})

    def delete(self, number: ParcelNumber) -> None:
        parcel = self._store.get(number)
        self._require_registered(parcel, "delete")
        self._store.delete(number)
        logger.info("Parcel deleted", extra={"number": number})

    @staticmethod
    def _status_of(parcel: Parcel) -> ParcelStatus:
        try:
            return ParcelStatus(parcel.status)
        except ValueError:
            raise ParcelStateError(
                f"Parcel {parcel.number} has unknown status {parcel.status!r}",
                parcel.number or 0,
                parcel.status,
            ) from None

    @staticmethod
    def _require_registered(parcel: Parcel, action: str) -> None:
        if parcel.status != ParcelStatus.REGISTERED.value:
            raise ParcelStateError(
                f"Cannot {action} parcel {parcel.number} in status {parcel.status}",
                parcel.number or 0,
                parcel.status,
            )
