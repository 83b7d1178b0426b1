import logging
from datetime import datetime, timedelta
from typing import List
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from boxoffice.core.config import EngineConfig
from boxoffice.core.exceptions import ConflictError, NotFoundError, ValidationError
from boxoffice.models.reservation import Reservation
from boxoffice.models.room import Room
from boxoffice.models.showing import Showing
from boxoffice.schemas.reservation import Reservation as ReservationSchema
from boxoffice.schemas.showing import ShowingDetail, ShowingListItem
from boxoffice.services.ledger import ensure_room_fits, total_reserved
from boxoffice.services.locks import lock_rooms, lock_showings
from boxoffice.services.overlap import find_conflict
from boxoffice.services.window import occupied_window, to_utc_naive

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Field validation
# ---------------------------------------------------------------------------


def parse_start(value) -> datetime:
    """Parse an ISO 8601 instant to naive UTC. Timestamps without an offset are taken as UTC."""
    if isinstance(value, datetime):
        return to_utc_naive(value)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("start_at", "start_at must be an ISO 8601 date string")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError("start_at", f"start_at has an invalid date format: {value!r}")
    return to_utc_naive(parsed)


def validate_showing_fields(config: EngineConfig, now: datetime, title, start_at, duration_min, room_id):
    """Check a showing payload field by field. Returns the cleaned (title, start, duration, room_id)."""
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("title", "title must be a non-empty string")

    start = parse_start(start_at)
    earliest = to_utc_naive(now) + timedelta(minutes=config.min_lead_minutes)
    if start < earliest:
        raise ValidationError(
            "start_at",
            f"Showings must start at least {config.min_lead_minutes} minutes from now",
        )

    # bool is an int subclass; reject it explicitly
    if not isinstance(duration_min, int) or isinstance(duration_min, bool) or duration_min <= 0:
        raise ValidationError("duration_min", "duration_min must be an integer > 0")
    if not config.min_duration <= duration_min <= config.max_duration:
        raise ValidationError(
            "duration_min",
            f"duration_min must be between {config.min_duration} and {config.max_duration} minutes",
        )

    if not isinstance(room_id, str) or not room_id.strip():
        raise ValidationError("room_id", "room_id must be a non-empty string")

    return title.strip(), start, duration_min, room_id


def _check_room_overlap(db: Session, config: EngineConfig, room_id: str, start: datetime, duration_min: int, exclude_showing_id: UUID | None = None):
    """Raise ConflictError if the room already hosts an overlapping showing."""
    conflict = find_conflict(
        db,
        room_id=room_id,
        start=start,
        duration_minutes=duration_min,
        buffer_minutes=config.buffer_minutes,
        exclude_showing_id=exclude_showing_id,
    )
    if conflict:
        raise ConflictError(conflict)


# ---------------------------------------------------------------------------
# Lifecycle: create / update / delete
# ---------------------------------------------------------------------------


def create_showing(db: Session, config: EngineConfig, now: datetime, title, start_at, duration_min, room_id) -> Showing:
    title, start, duration_min, room_id = validate_showing_fields(config, now, title, start_at, duration_min, room_id)

    room = lock_rooms(db, [room_id]).get(room_id)
    if not room:
        raise NotFoundError("room", room_id)

    _check_room_overlap(db, config, room_id, start, duration_min)

    showing = Showing(title=title, start_at=start, duration_min=duration_min, room=room)
    db.add(showing)
    db.flush()
    logger.info("Created showing %s (%r) in room %s at %s", showing.id, title, room_id, start.isoformat())
    return showing


def update_showing(db: Session, config: EngineConfig, now: datetime, showing_id: UUID, title, start_at, duration_min, room_id) -> Showing:
    current = db.get(Showing, showing_id)
    if not current:
        raise NotFoundError("showing", showing_id)

    title, start, duration_min, room_id = validate_showing_fields(config, now, title, start_at, duration_min, room_id)

    # Lock both the old and the new room, then the showing itself
    rooms = lock_rooms(db, [current.room_id, room_id])
    room = rooms.get(room_id)
    if not room:
        raise NotFoundError("room", room_id)
    showing = lock_showings(db, [showing_id]).get(showing_id)
    if not showing:
        raise NotFoundError("showing", showing_id)

    _check_room_overlap(db, config, room_id, start, duration_min, exclude_showing_id=showing_id)

    if showing.room_id != room_id:
        ensure_room_fits(db, showing, room)

    showing.title = title
    showing.start_at = start
    showing.duration_min = duration_min
    showing.room = room
    db.flush()
    logger.info("Updated showing %s", showing_id)
    return showing


def delete_showing(db: Session, showing_id: UUID) -> None:
    showing = lock_showings(db, [showing_id]).get(showing_id)
    if not showing:
        raise NotFoundError("showing", showing_id)

    # Reservations go with it (ORM cascade + ON DELETE CASCADE)
    db.delete(showing)
    db.flush()
    logger.info("Deleted showing %s", showing_id)


# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------


def _list_item(showing: Showing, room: Room, booked: int, config: EngineConfig) -> dict:
    _, ends_at = occupied_window(showing.start_at, showing.duration_min, config.buffer_minutes)
    return {
        "id": showing.id,
        "title": showing.title,
        "start_at": showing.start_at,
        "duration_min": showing.duration_min,
        "room_id": showing.room_id,
        "room_name": room.name,
        "room_capacity": room.capacity,
        "ends_at": ends_at,
        "booked_tickets": booked,
    }


def list_showings(db: Session, config: EngineConfig) -> List[ShowingListItem]:
    """Every showing with its room and booked ticket total, earliest first."""
    booked = (
        db.query(
            Reservation.showing_id.label("showing_id"),
            func.sum(Reservation.tickets).label("booked"),
        )
        .group_by(Reservation.showing_id)
        .subquery()
    )

    rows = (
        db.query(Showing, Room, func.coalesce(booked.c.booked, 0))
        .join(Room, Room.id == Showing.room_id)
        .outerjoin(booked, booked.c.showing_id == Showing.id)
        .order_by(Showing.start_at)
        .all()
    )

    return [ShowingListItem(**_list_item(showing, room, int(total), config)) for showing, room, total in rows]


def get_showing_detail(db: Session, config: EngineConfig, showing_id: UUID) -> ShowingDetail:
    showing = db.get(Showing, showing_id)
    if not showing:
        raise NotFoundError("showing", showing_id)

    reservations = (
        db.query(Reservation)
        .filter(Reservation.showing_id == showing_id)
        .order_by(Reservation.customer_name)
        .all()
    )
    return ShowingDetail(
        **_list_item(showing, showing.room, total_reserved(db, showing_id), config),
        reservations=[ReservationSchema.model_validate(r) for r in reservations],
    )
