"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingEvent(DomainEvent):
    """Fields every booking event carries"""
    booking_id: UUID
    room_type_id: int
    guest_id: str
    start_date: date
    end_date: date
    rooms_booked: int
    actor: str = 'system'

    def payload(self) -> dict:
        return {
            'booking_id': str(self.booking_id),
            'room_type_id': self.room_type_id,
            'guest_id': self.guest_id,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'rooms_booked': self.rooms_booked,
            'actor': self.actor,
        }


@dataclass(kw_only=True)
class BookingCreated(BookingEvent):
    """
    Event: A provisional booking was created and its inventory reserved

    Triggers:
    - Tell the guest what must be paid to confirm
    """
    name = 'BOOKING_CREATED'
    total_price: int
    deposit_required: int

    def payload(self) -> dict:
        return {
            **super().payload(),
            'total_price': self.total_price,
            'deposit_required': self.deposit_required,
        }


@dataclass(kw_only=True)
class BookingConfirmed(BookingEvent):
    """
    Event: Booking confirmed (PROVISIONAL -> CONFIRMED)

    Triggers:
    - Send booking confirmation to guest
    """
    name = 'BOOKING_CONFIRMED'
    paid_amount: int = 0


@dataclass(kw_only=True)
class BookingCancelled(BookingEvent):
    """
    Event: Booking cancelled and its inventory released

    Triggers:
    - Notify guest; refunds are handled by the payment collaborator
    """
    name = 'BOOKING_CANCELLED'
    reason: str = ''

    def payload(self) -> dict:
        return {**super().payload(), 'reason': self.reason}


@dataclass(kw_only=True)
class BookingCheckedIn(BookingEvent):
    """Event: Guest has checked in (CONFIRMED -> CHECKED_IN)"""
    name = 'BOOKING_CHECKED_IN'


@dataclass(kw_only=True)
class BookingCheckedOut(BookingEvent):
    """Event: Guest has checked out (CHECKED_IN -> CHECKED_OUT)"""
    name = 'BOOKING_CHECKED_OUT'


@dataclass(kw_only=True)
class BookingCompleted(BookingEvent):
    """Event: Stay closed (CHECKED_OUT -> COMPLETED)"""
    name = 'BOOKING_COMPLETED'
