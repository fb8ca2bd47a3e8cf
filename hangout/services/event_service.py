"""
hangout.services.event_service — Event Logistics
=================================================

Everything hanging off an event channel: RSVPs, the packing/todo
checklist, and shared travel options (flights and places to stay).

Travel options start as ``option`` with their creator as the first
passenger / guest.  Others join and leave freely; only the creator can
change the booking status or delete the option.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from hangout.constants import now_ms
from hangout.database.engine import get_session
from hangout.database.models import (
    AccommodationType,
    BookingStatus,
    Channel,
    ChannelType,
    EventAccommodation,
    EventChecklistItem,
    EventFlight,
    EventRsvp,
    RsvpStatus,
)
from hangout.errors import NotFound, PermissionDenied, ValidationError
from hangout.services.permissions import (
    get_channel_or_404,
    get_current_user,
    require_membership,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.orm import Session

    from hangout.database.models import User

logger = logging.getLogger(__name__)


def _member_channel(session: Session, subject: str | None, channel_id: int) -> tuple[User, Channel]:
    user = get_current_user(session, subject)
    channel = get_channel_or_404(session, channel_id)
    require_membership(session, channel.group_id, user.id)
    return user, channel


def _parse(enum_cls, value: str, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Unknown {label}: {value!r}") from None


# ---------------------------------------------------------------------------
# RSVPs
# ---------------------------------------------------------------------------
def set_rsvp(engine: Engine, subject: str | None, channel_id: int, status: str) -> EventRsvp:
    """Create or update the caller's RSVP for an event channel."""
    rsvp_status = _parse(RsvpStatus, status, "RSVP status")

    with get_session(engine) as session:
        user, channel = _member_channel(session, subject, channel_id)
        if channel.type != ChannelType.EVENT:
            raise ValidationError("RSVPs are only available in event channels")

        rsvp = session.scalar(
            select(EventRsvp).where(
                EventRsvp.channel_id == channel_id, EventRsvp.user_id == user.id
            )
        )
        if rsvp is None:
            rsvp = EventRsvp(channel_id=channel_id, user_id=user.id)
            session.add(rsvp)
        rsvp.status = rsvp_status.value
        rsvp.updated_at = now_ms()
        session.flush()
        return rsvp


def list_rsvps(engine: Engine, subject: str | None, channel_id: int) -> list[EventRsvp]:
    with get_session(engine) as session:
        _member_channel(session, subject, channel_id)
        return list(session.scalars(
            select(EventRsvp)
            .where(EventRsvp.channel_id == channel_id)
            .order_by(EventRsvp.updated_at, EventRsvp.id)
        ))


# ---------------------------------------------------------------------------
# Checklist
# ---------------------------------------------------------------------------
def _checklist_item_or_404(session: Session, subject: str | None, item_id: int) -> EventChecklistItem:
    item = session.get(EventChecklistItem, item_id)
    if item is None:
        raise NotFound("Checklist item not found")
    _member_channel(session, subject, item.channel_id)
    return item


def add_checklist_item(
    engine: Engine,
    subject: str | None,
    channel_id: int,
    text: str,
    assigned_to: int | None = None,
) -> EventChecklistItem:
    text = text.strip()
    if not text:
        raise ValidationError("Checklist item cannot be empty")

    with get_session(engine) as session:
        user, channel = _member_channel(session, subject, channel_id)
        if assigned_to is not None:
            require_membership(session, channel.group_id, assigned_to)

        item = EventChecklistItem(
            channel_id=channel_id,
            item=text,
            assigned_to=assigned_to,
            is_completed=False,
            created_by=user.id,
            created_at=now_ms(),
        )
        session.add(item)
        session.flush()
        return item


def toggle_checklist_item(engine: Engine, subject: str | None, item_id: int) -> EventChecklistItem:
    with get_session(engine) as session:
        item = _checklist_item_or_404(session, subject, item_id)
        item.is_completed = not item.is_completed
        return item


def delete_checklist_item(engine: Engine, subject: str | None, item_id: int) -> None:
    with get_session(engine) as session:
        item = _checklist_item_or_404(session, subject, item_id)
        session.delete(item)


def list_checklist(
    engine: Engine, subject: str | None, channel_id: int
) -> list[EventChecklistItem]:
    with get_session(engine) as session:
        _member_channel(session, subject, channel_id)
        return list(session.scalars(
            select(EventChecklistItem)
            .where(EventChecklistItem.channel_id == channel_id)
            .order_by(EventChecklistItem.created_at, EventChecklistItem.id)
        ))


# ---------------------------------------------------------------------------
# Travel: shared helpers
# ---------------------------------------------------------------------------
def _travel_or_404(session: Session, subject: str | None, model, travel_id: int, label: str):
    row = session.get(model, travel_id)
    if row is None:
        raise NotFound(f"{label} not found")
    user, _ = _member_channel(session, subject, row.channel_id)
    return user, row


def _require_creator(row, user: User, action: str) -> None:
    if row.created_by != user.id:
        raise PermissionDenied(f"Only the creator can {action}")


# ---------------------------------------------------------------------------
# Flights
# ---------------------------------------------------------------------------
def list_flights(engine: Engine, subject: str | None, channel_id: int) -> list[EventFlight]:
    with get_session(engine) as session:
        _member_channel(session, subject, channel_id)
        return list(session.scalars(
            select(EventFlight)
            .where(EventFlight.channel_id == channel_id)
            .order_by(EventFlight.departure_time, EventFlight.id)
        ))


def add_flight(
    engine: Engine,
    subject: str | None,
    channel_id: int,
    *,
    airline: str,
    flight_number: str,
    departure_airport: str,
    arrival_airport: str,
    departure_time: int,
    arrival_time: int,
    notes: str | None = None,
) -> EventFlight:
    if not airline.strip() or not flight_number.strip():
        raise ValidationError("Airline and flight number are required")
    if arrival_time < departure_time:
        raise ValidationError("Arrival cannot be before departure")

    with get_session(engine) as session:
        user, _ = _member_channel(session, subject, channel_id)
        flight = EventFlight(
            channel_id=channel_id,
            created_by=user.id,
            airline=airline.strip(),
            flight_number=flight_number.strip(),
            departure_airport=departure_airport.strip().upper(),
            arrival_airport=arrival_airport.strip().upper(),
            departure_time=departure_time,
            arrival_time=arrival_time,
            status=BookingStatus.OPTION.value,
            passengers=[user.id],
            notes=notes,
            created_at=now_ms(),
        )
        session.add(flight)
        session.flush()
        return flight


def join_flight(engine: Engine, subject: str | None, flight_id: int) -> EventFlight:
    with get_session(engine) as session:
        user, flight = _travel_or_404(session, subject, EventFlight, flight_id, "Flight")
        if user.id not in flight.passengers:
            flight.passengers = [*flight.passengers, user.id]
        return flight


def leave_flight(engine: Engine, subject: str | None, flight_id: int) -> EventFlight:
    with get_session(engine) as session:
        user, flight = _travel_or_404(session, subject, EventFlight, flight_id, "Flight")
        flight.passengers = [p for p in flight.passengers if p != user.id]
        return flight


def update_flight_status(
    engine: Engine, subject: str | None, flight_id: int, status: str
) -> EventFlight:
    booking = _parse(BookingStatus, status, "booking status")
    with get_session(engine) as session:
        user, flight = _travel_or_404(session, subject, EventFlight, flight_id, "Flight")
        _require_creator(flight, user, "update status")
        flight.status = booking.value
        return flight


def delete_flight(engine: Engine, subject: str | None, flight_id: int) -> None:
    with get_session(engine) as session:
        user, flight = _travel_or_404(session, subject, EventFlight, flight_id, "Flight")
        _require_creator(flight, user, "delete")
        session.delete(flight)


# ---------------------------------------------------------------------------
# Accommodations
# ---------------------------------------------------------------------------
def list_accommodations(
    engine: Engine, subject: str | None, channel_id: int
) -> list[EventAccommodation]:
    with get_session(engine) as session:
        _member_channel(session, subject, channel_id)
        return list(session.scalars(
            select(EventAccommodation)
            .where(EventAccommodation.channel_id == channel_id)
            .order_by(EventAccommodation.created_at, EventAccommodation.id)
        ))


def add_accommodation(
    engine: Engine,
    subject: str | None,
    channel_id: int,
    *,
    name: str,
    type: str,
    address: str | None = None,
    check_in: int | None = None,
    check_out: int | None = None,
    booking_link: str | None = None,
    price_per_night: int | None = None,
    total_price: int | None = None,
    notes: str | None = None,
) -> EventAccommodation:
    kind = _parse(AccommodationType, type, "accommodation type")
    name = name.strip()
    if not name:
        raise ValidationError("Accommodation name cannot be empty")
    if check_in is not None and check_out is not None and check_out < check_in:
        raise ValidationError("Check-out cannot be before check-in")

    with get_session(engine) as session:
        user, _ = _member_channel(session, subject, channel_id)
        stay = EventAccommodation(
            channel_id=channel_id,
            created_by=user.id,
            name=name,
            type=kind.value,
            address=address,
            check_in=check_in,
            check_out=check_out,
            booking_link=booking_link,
            price_per_night=price_per_night,
            total_price=total_price,
            status=BookingStatus.OPTION.value,
            guests=[user.id],
            notes=notes,
            created_at=now_ms(),
        )
        session.add(stay)
        session.flush()
        return stay


def join_accommodation(
    engine: Engine, subject: str | None, accommodation_id: int
) -> EventAccommodation:
    with get_session(engine) as session:
        user, stay = _travel_or_404(
            session, subject, EventAccommodation, accommodation_id, "Accommodation"
        )
        if user.id not in stay.guests:
            stay.guests = [*stay.guests, user.id]
        return stay


def leave_accommodation(
    engine: Engine, subject: str | None, accommodation_id: int
) -> EventAccommodation:
    with get_session(engine) as session:
        user, stay = _travel_or_404(
            session, subject, EventAccommodation, accommodation_id, "Accommodation"
        )
        stay.guests = [g for g in stay.guests if g != user.id]
        return stay


def update_accommodation_status(
    engine: Engine, subject: str | None, accommodation_id: int, status: str
) -> EventAccommodation:
    booking = _parse(BookingStatus, status, "booking status")
    with get_session(engine) as session:
        user, stay = _travel_or_404(
            session, subject, EventAccommodation, accommodation_id, "Accommodation"
        )
        _require_creator(stay, user, "update status")
        stay.status = booking.value
        return stay


def delete_accommodation(engine: Engine, subject: str | None, accommodation_id: int) -> None:
    with get_session(engine) as session:
        user, stay = _travel_or_404(
            session, subject, EventAccommodation, accommodation_id, "Accommodation"
        )
        _require_creator(stay, user, "delete")
        session.delete(stay)
