"""
hangout.api.serializers — ORM row → JSON dict helpers
======================================================

Shared by the routers so each resource has one wire shape.
"""

from __future__ import annotations

from hangout.database.models import (
    Channel,
    EventAccommodation,
    EventChecklistItem,
    EventFlight,
    EventRsvp,
    Group,
    GroupMember,
    HallOfFameEntry,
    Message,
    Notification,
    Split,
    SplitBalance,
    SplitItem,
    User,
)


def user_dict(u: User) -> dict:
    return {
        "id": u.id,
        "name": u.name,
        "username": u.username,
        "avatar_url": u.avatar_url,
        "created_at": u.created_at,
    }


def group_dict(g: Group) -> dict:
    return {
        "id": g.id,
        "name": g.name,
        "created_by": g.created_by,
        "created_at": g.created_at,
        "invite_code": g.invite_code,
        "hall_of_fame_threshold": g.hall_of_fame_threshold,
        "senpai_enabled": g.senpai_enabled,
        "senpai_frequency": g.senpai_frequency,
        "senpai_personality": g.senpai_personality,
    }


def member_dict(m: GroupMember) -> dict:
    return {
        "user_id": m.user_id,
        "role": m.role,
        "nickname": m.nickname,
        "joined_at": m.joined_at,
        "last_active_at": m.last_active_at,
        "user": user_dict(m.user) if m.user is not None else None,
    }


def channel_dict(c: Channel) -> dict:
    return {
        "id": c.id,
        "group_id": c.group_id,
        "name": c.name,
        "icon": c.icon,
        "type": c.type,
        "created_by": c.created_by,
        "created_at": c.created_at,
        "parent_channel_id": c.parent_channel_id,
        "parent_message_id": c.parent_message_id,
        "fork_depth": c.fork_depth,
        "is_archived": c.is_archived,
        "archived_at": c.archived_at,
        "event_date": c.event_date,
        "event_end_date": c.event_end_date,
        "event_location": c.event_location,
        "bracket_question": c.bracket_question,
        "bracket_status": c.bracket_status,
    }


def message_dict(m: Message) -> dict:
    return {
        "id": m.id,
        "channel_id": m.channel_id,
        "author_id": m.author_id,
        "body": "" if m.is_deleted else m.body,
        "created_at": m.created_at,
        "edited_at": m.edited_at,
        "is_deleted": m.is_deleted,
        "thread_parent_id": m.thread_parent_id,
        "thread_reply_count": m.thread_reply_count,
        "thread_last_reply_at": m.thread_last_reply_at,
        "forked_to_channel_id": m.forked_to_channel_id,
        "message_type": m.message_type,
        "senpai_trigger": m.senpai_trigger,
    }


def hall_of_fame_dict(h: HallOfFameEntry) -> dict:
    return {
        "id": h.id,
        "message_id": h.message_id,
        "channel_id": h.channel_id,
        "author_id": h.author_id,
        "body": h.body,
        "trophy_count": h.trophy_count,
        "enshrine_date": h.enshrine_date,
    }


def split_item_dict(i: SplitItem) -> dict:
    return {
        "id": i.id,
        "name": i.name,
        "price": i.price,
        "quantity": i.quantity,
        "claimed_by": i.claimant_ids,
    }


def split_dict(s: Split, with_items: bool = True) -> dict:
    data = {
        "id": s.id,
        "channel_id": s.channel_id,
        "name": s.name,
        "total_amount": s.total_amount,
        "tax_amount": s.tax_amount,
        "tip_amount": s.tip_amount,
        "created_by": s.created_by,
        "created_at": s.created_at,
        "status": s.status,
    }
    if with_items:
        data["items"] = [split_item_dict(i) for i in s.items]
    return data


def balance_dict(b: SplitBalance) -> dict:
    return {
        "id": b.id,
        "split_id": b.split_id,
        "from_user_id": b.from_user_id,
        "to_user_id": b.to_user_id,
        "amount": b.amount,
        "is_paid": b.is_paid,
        "paid_at": b.paid_at,
    }


def rsvp_dict(r: EventRsvp) -> dict:
    return {"user_id": r.user_id, "status": r.status, "updated_at": r.updated_at}


def checklist_dict(c: EventChecklistItem) -> dict:
    return {
        "id": c.id,
        "item": c.item,
        "assigned_to": c.assigned_to,
        "is_completed": c.is_completed,
        "created_by": c.created_by,
        "created_at": c.created_at,
    }


def flight_dict(f: EventFlight) -> dict:
    return {
        "id": f.id,
        "created_by": f.created_by,
        "airline": f.airline,
        "flight_number": f.flight_number,
        "departure_airport": f.departure_airport,
        "arrival_airport": f.arrival_airport,
        "departure_time": f.departure_time,
        "arrival_time": f.arrival_time,
        "status": f.status,
        "passengers": list(f.passengers),
        "notes": f.notes,
    }


def accommodation_dict(a: EventAccommodation) -> dict:
    return {
        "id": a.id,
        "created_by": a.created_by,
        "name": a.name,
        "type": a.type,
        "address": a.address,
        "check_in": a.check_in,
        "check_out": a.check_out,
        "booking_link": a.booking_link,
        "price_per_night": a.price_per_night,
        "total_price": a.total_price,
        "status": a.status,
        "guests": list(a.guests),
        "notes": a.notes,
    }


def notification_dict(n: Notification) -> dict:
    return {
        "id": n.id,
        "group_id": n.group_id,
        "channel_id": n.channel_id,
        "type": n.type,
        "title": n.title,
        "body": n.body,
        "is_read": n.is_read,
        "created_at": n.created_at,
    }
