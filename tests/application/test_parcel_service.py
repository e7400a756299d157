from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone

import pytest

from parcel_tracker.application.services.parcel_service import (
    InvalidTransitionError,
    ParcelService,
    ParcelStateError,
    format_created_at,
)
from parcel_tracker.domain.value_objects.enums import ParcelStatus
from parcel_tracker.repositories import ParcelNotFoundError
from parcel_tracker.repositories.parcels import Parcel, ParcelStore
from parcel_tracker.repositories.sqlite.parcels_sqlite import ParcelStoreSqlite

FIXED_NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


class _MemoryStore(ParcelStore):
    def __init__(self) -> None:
        self.rows: dict[int, Parcel] = {}
        self._last = 0

    def add(self, parcel: Parcel) -> int:
        self._last += 1
        self.rows[self._last] = Parcel(
            self._last, parcel.client, parcel.status, parcel.address, parcel.created_at
        )
        return self._last

    def get_by_client(self, client: int) -> list[Parcel]:
        return [p for p in self.rows.values() if p.client == client]

    def get(self, number: int) -> Parcel:
        if number not in self.rows:
            raise ParcelNotFoundError(number)
        return self.rows[number]

    def set_status(self, number: int, status: ParcelStatus | str) -> None:
        if number in self.rows:
            self.rows[number].status = ParcelStatus(status).value

    def set_address(self, number: int, address: str) -> None:
        if number in self.rows:
            self.rows[number].address = address

    def delete(self, number: int) -> None:
        self.rows.pop(number, None)


@pytest.fixture
def store() -> Iterator[ParcelStoreSqlite]:
    conn = sqlite3.connect(":memory:")
    yield ParcelStoreSqlite(conn)
    conn.close()


@pytest.fixture
def service(store: ParcelStoreSqlite) -> ParcelService:
    return ParcelService(store, clock=lambda: FIXED_NOW)


def test_register_sets_defaults(service: ParcelService, store: ParcelStoreSqlite) -> None:
    parcel = service.register(42, "A St")
    assert parcel.number == 1
    assert parcel.status == ParcelStatus.REGISTERED
    assert parcel.created_at == "2024-01-01T00:00:00Z"
    assert store.get(1) == parcel


def test_register_uses_utc_now_by_default(store: ParcelStoreSqlite) -> None:
    svc = ParcelService(store)
    before = datetime.now(timezone.utc).replace(microsecond=0)
    parcel = svc.register(1, "X")
    stamp = datetime.strptime(parcel.created_at, "%Y-%m-%dT%H:%M:%SZ").replace(
        tzinfo=timezone.utc
    )
    assert before <= stamp <= before + timedelta(seconds=5)


def test_format_created_at_converts_to_utc() -> None:
    tz = timezone(timedelta(hours=3))
    assert format_created_at(datetime(2024, 1, 1, 3, 0, tzinfo=tz)) == "2024-01-01T00:00:00Z"
    with pytest.raises(ValueError):
        format_created_at(datetime(2024, 1, 1))


def test_client_parcels(service: ParcelService) -> None:
    service.register(7, "A")
    service.register(7, "B")
    service.register(8, "C")
    assert [p.address for p in service.client_parcels(7)] == ["A", "B"]
    assert service.client_parcels(9) == []


def test_next_status_walks_the_table(service: ParcelService, store: ParcelStoreSqlite) -> None:
    number = service.register(1, "A").number
    assert service.next_status(number) == ParcelStatus.SENT
    assert store.get(number).status == "sent"
    assert service.next_status(number) == ParcelStatus.DELIVERED
    assert store.get(number).status == "delivered"
    with pytest.raises(InvalidTransitionError):
        service.next_status(number)
    assert store.get(number).status == "delivered"


def test_change_status_validates_transitions(
    service: ParcelService, store: ParcelStoreSqlite
) -> None:
    number = service.register(1, "A").number
    with pytest.raises(InvalidTransitionError) as exc_info:
        service.change_status(number, ParcelStatus.DELIVERED)
    assert exc_info.value.status == "registered"
    assert exc_info.value.number == number

    service.change_status(number, "sent")
    assert store.get(number).status == "sent"

    with pytest.raises(InvalidTransitionError):
        service.change_status(number, ParcelStatus.REGISTERED)


def test_change_status_rejects_unknown_value(service: ParcelService) -> None:
    number = service.register(1, "A").number
    with pytest.raises(ValueError):
        service.change_status(number, "lost")


def test_unknown_stored_status(service: ParcelService, store: ParcelStoreSqlite) -> None:
    number = service.register(1, "A").number
    store.set_status(number, "lost")
    with pytest.raises(ParcelStateError) as exc_info:
        service.next_status(number)
    assert exc_info.value.status == "lost"


def test_change_address_only_while_registered(
    service: ParcelService, store: ParcelStoreSqlite
) -> None:
    number = service.register(1, "A St").number
    service.change_address(number, "B St")
    assert store.get(number).address == "B St"

    service.next_status(number)
    with pytest.raises(ParcelStateError):
        service.change_address(number, "C St")
    assert store.get(number).address == "B St"


def test_delete_only_while_registered(service: ParcelService, store: ParcelStoreSqlite) -> None:
    sent = service.register(1, "A").number
    service.next_status(sent)
    with pytest.raises(ParcelStateError):
        service.delete(sent)
    assert store.get(sent).status == "sent"

    fresh = service.register(1, "B").number
    service.delete(fresh)
    with pytest.raises(ParcelNotFoundError):
        store.get(fresh)


def test_missing_parcel_raises_not_found(service: ParcelService) -> None:
    with pytest.raises(ParcelNotFoundError):
        service.next_status(404)
    with pytest.raises(ParcelNotFoundError):
        service.change_address(404, "X")
    with pytest.raises(ParcelNotFoundError):
        service.delete(404)


def test_service_works_with_any_store() -> None:
    mem = _MemoryStore()
    svc = ParcelService(mem, clock=lambda: FIXED_NOW)
    number = svc.register(3, "A").number
    svc.next_status(number)
    assert mem.get(number).status == "sent"
    assert len(svc.client_parcels(3)) == 1
    svc.delete(svc.register(3, "B").number)
    assert [p.address for p in svc.client_parcels(3)] == ["A"]
