"""
Booking Domain Entities

Lifecycle of a reservation:
- BookingStatus: FSM states
- TRANSITIONS: the only legal moves between them

State transitions:
- PROVISIONAL -> CONFIRMED (paid amount covers the requirement)
- PROVISIONAL -> CANCELLED (guest, admin or hold expiry)
- CONFIRMED -> CHECKED_IN (guest arrived)
- CONFIRMED -> CANCELLED (guest or admin)
- CHECKED_IN -> CHECKED_OUT (guest left)
- CHECKED_OUT -> COMPLETED (scheduled or administrative follow-up)

Inventory is reserved when a booking is created and released only by the
move to CANCELLED.
"""

from enum import Enum
from typing import Dict, FrozenSet

from shared.domain.errors import InvalidTransition


class BookingStatus(str, Enum):
    PROVISIONAL = 'PROVISIONAL'    # Inventory held, waiting for payment
    CONFIRMED = 'CONFIRMED'        # Paid (deposit or full amount)
    CHECKED_IN = 'CHECKED_IN'      # Guest is in the hotel
    CHECKED_OUT = 'CHECKED_OUT'    # Guest has left
    COMPLETED = 'COMPLETED'        # Closed
    CANCELLED = 'CANCELLED'        # Inventory released

    @property
    def label(self) -> str:
        return self.value.replace('_', ' ').capitalize()

    @classmethod
    def choices(cls):
        return [(status.value, status.label) for status in cls]


TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PROVISIONAL: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CHECKED_IN, BookingStatus.CANCELLED}),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.CHECKED_OUT}),
    BookingStatus.CHECKED_OUT: frozenset({BookingStatus.COMPLETED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

TERMINAL_STATES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)

# Column stamped when a booking enters the state
TIMESTAMP_FIELDS: Dict[BookingStatus, str] = {
    BookingStatus.CONFIRMED: 'confirmed_at',
    BookingStatus.CHECKED_IN: 'checked_in_at',
    BookingStatus.CHECKED_OUT: 'checked_out_at',
    BookingStatus.COMPLETED: 'completed_at',
    BookingStatus.CANCELLED: 'cancelled_at',
}


def can_transition(current, target) -> bool:
    return BookingStatus(target) in TRANSITIONS[BookingStatus(current)]


def ensure_transition(current, target) -> None:
    """Raise InvalidTransition unless ``current -> target`` is in the table"""
    if not can_transition(current, target):
        raise InvalidTransition(BookingStatus(current).value, BookingStatus(target).value)


def confirmation_requirement(total_price: int, deposit_required: int) -> int:
    """Amount that must be paid before a provisional booking is confirmed"""
    return deposit_required if deposit_required > 0 else total_price
