from enum import Enum


class ParcelStatus(str, Enum):
    REGISTERED = "registered"
    SENT = "sent"
    DELIVERED = "delivered"

    def next(self) -> "ParcelStatus | None":
        """Return the status that follows this one, or ``None`` if terminal."""
        return NEXT_STATUS.get(self)

    def can_move_to(self, other: "ParcelStatus") -> bool:
        return NEXT_STATUS.get(self) == other


# registered -> sent -> delivered
NEXT_STATUS: dict[ParcelStatus, ParcelStatus] = {
    ParcelStatus.REGISTERED: ParcelStatus.SENT,
    ParcelStatus.SENT: ParcelStatus.DELIVERED,
}
