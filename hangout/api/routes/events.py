"""
hangout.api.routes.events — RSVPs, checklist & travel
======================================================

Routes are scoped to an event channel; item-level routes address the
item directly.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from hangout.api.deps import get_engine, get_subject
from hangout.api.serializers import (
    accommodation_dict,
    checklist_dict,
    flight_dict,
    rsvp_dict,
)
from hangout.services import event_service

router = APIRouter(tags=["events"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class RsvpBody(BaseModel):
    status: str  # going | maybe | not_going


class ChecklistCreate(BaseModel):
    item: str
    assigned_to: int | None = None


class StatusBody(BaseModel):
    status: str  # option | booked


class FlightCreate(BaseModel):
    airline: str
    flight_number: str
    departure_airport: str
    arrival_airport: str
    departure_time: int
    arrival_time: int
    notes: str | None = None


class AccommodationCreate(BaseModel):
    name: str
    type: str  # airbnb | hotel | hostel | other
    address: str | None = None
    check_in: int | None = None
    check_out: int | None = None
    booking_link: str | None = None
    price_per_night: int | None = None
    total_price: int | None = None
    notes: str | None = None


# ---------------------------------------------------------------------------
# RSVPs
# ---------------------------------------------------------------------------
@router.get("/channels/{channel_id}/rsvps")
def list_rsvps(
    channel_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return {"rsvps": [rsvp_dict(r) for r in event_service.list_rsvps(engine, subject, channel_id)]}


@router.put("/channels/{channel_id}/rsvp")
def set_rsvp(
    channel_id: int,
    body: RsvpBody,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return rsvp_dict(event_service.set_rsvp(engine, subject, channel_id, body.status))


# ---------------------------------------------------------------------------
# Checklist
# ---------------------------------------------------------------------------
@router.get("/channels/{channel_id}/checklist")
def list_checklist(
    channel_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    items = event_service.list_checklist(engine, subject, channel_id)
    return {"items": [checklist_dict(i) for i in items]}


@router.post("/channels/{channel_id}/checklist", status_code=201)
def add_checklist_item(
    channel_id: int,
    body: ChecklistCreate,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    item = event_service.add_checklist_item(
        engine, subject, channel_id, body.item, body.assigned_to
    )
    return checklist_dict(item)


@router.post("/checklist/{item_id}/toggle")
def toggle_checklist_item(
    item_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return checklist_dict(event_service.toggle_checklist_item(engine, subject, item_id))


@router.delete("/checklist/{item_id}", status_code=204)
def delete_checklist_item(
    item_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    event_service.delete_checklist_item(engine, subject, item_id)
    return None


# ---------------------------------------------------------------------------
# Flights
# ---------------------------------------------------------------------------
@router.get("/channels/{channel_id}/flights")
def list_flights(
    channel_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    rows = event_service.list_flights(engine, subject, channel_id)
    return {"flights": [flight_dict(f) for f in rows]}


@router.post("/channels/{channel_id}/flights", status_code=201)
def add_flight(
    channel_id: int,
    body: FlightCreate,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    flight = event_service.add_flight(engine, subject, channel_id, **body.model_dump())
    return flight_dict(flight)


@router.post("/flights/{flight_id}/join")
def join_flight(
    flight_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return flight_dict(event_service.join_flight(engine, subject, flight_id))


@router.post("/flights/{flight_id}/leave")
def leave_flight(
    flight_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return flight_dict(event_service.leave_flight(engine, subject, flight_id))


@router.put("/flights/{flight_id}/status")
def update_flight_status(
    flight_id: int,
    body: StatusBody,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return flight_dict(
        event_service.update_flight_status(engine, subject, flight_id, body.status)
    )


@router.delete("/flights/{flight_id}", status_code=204)
def delete_flight(
    flight_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    event_service.delete_flight(engine, subject, flight_id)
    return None


# ---------------------------------------------------------------------------
# Accommodations
# ---------------------------------------------------------------------------
@router.get("/channels/{channel_id}/accommodations")
def list_accommodations(
    channel_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    rows = event_service.list_accommodations(engine, subject, channel_id)
    return {"accommodations": [accommodation_dict(a) for a in rows]}


@router.post("/channels/{channel_id}/accommodations", status_code=201)
def add_accommodation(
    channel_id: int,
    body: AccommodationCreate,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    stay = event_service.add_accommodation(engine, subject, channel_id, **body.model_dump())
    return accommodation_dict(stay)


@router.post("/accommodations/{accommodation_id}/join")
def join_accommodation(
    accommodation_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return accommodation_dict(event_service.join_accommodation(engine, subject, accommodation_id))


@router.post("/accommodations/{accommodation_id}/leave")
def leave_accommodation(
    accommodation_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return accommodation_dict(event_service.leave_accommodation(engine, subject, accommodation_id))


@router.put("/accommodations/{accommodation_id}/status")
def update_accommodation_status(
    accommodation_id: int,
    body: StatusBody,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return accommodation_dict(
        event_service.update_accommodation_status(
            engine, subject, accommodation_id, body.status
        )
    )


@router.delete("/accommodations/{accommodation_id}", status_code=204)
def delete_accommodation(
    accommodation_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    event_service.delete_accommodation(engine, subject, accommodation_id)
    return None
