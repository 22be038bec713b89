"""
Waitlist Domain Events

Published after the transaction that changed the entry commits.
"""

from dataclasses import dataclass
from datetime import date, datetime

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class WaitlistSpotAvailable(DomainEvent):
    """
    Event: Freed inventory covers a waiting guest's stay

    Triggers:
    - Tell the guest to book before ``expires_at``
    """
    name = 'WAITLIST_SPOT_AVAILABLE'
    entry_id: int
    guest_id: str
    room_type_id: int
    start_date: date
    end_date: date
    rooms_requested: int
    expires_at: datetime

    def payload(self) -> dict:
        return {
            'entry_id': self.entry_id,
            'guest_id': self.guest_id,
            'room_type_id': self.room_type_id,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'rooms_requested': self.rooms_requested,
            'expires_at': self.expires_at.isoformat(),
        }
