from typing import Iterable
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from boxoffice.core.exceptions import CapacityError
from boxoffice.models.reservation import Reservation
from boxoffice.models.room import Room
from boxoffice.models.showing import Showing


def total_reserved(db: Session, showing_id: UUID, exclude_ids: Iterable[UUID] = ()) -> int:
    """Sum of tickets held for a showing, skipping the listed reservation ids."""
    query = db.query(func.coalesce(func.sum(Reservation.tickets), 0)).filter(
        Reservation.showing_id == showing_id
    )
    exclude_ids = [i for i in exclude_ids if i is not None]
    if exclude_ids:
        query = query.filter(Reservation.id.notin_(exclude_ids))
    return int(query.scalar())


def can_admit(db: Session, showing: Showing, additional: int, exclude_ids: Iterable[UUID] = ()) -> bool:
    return total_reserved(db, showing.id, exclude_ids) + additional <= showing.room.capacity


def ensure_admissible(db: Session, showing: Showing, additional: int, exclude_ids: Iterable[UUID] = ()) -> None:
    """Raise CapacityError unless ``additional`` more tickets fit in the showing's current room."""
    booked = total_reserved(db, showing.id, exclude_ids)
    capacity = showing.room.capacity
    if booked + additional > capacity:
        raise CapacityError(
            "Not enough seats left in the room",
            capacity=capacity,
            booked=booked,
            requested=additional,
        )


def ensure_room_fits(db: Session, showing: Showing, new_room: Room) -> None:
    """A showing may only move to a room that holds every ticket already reserved for it."""
    booked = total_reserved(db, showing.id)
    if booked > new_room.capacity:
        raise CapacityError(
            "Cannot change room: existing reservations exceed the new room's capacity",
            capacity=new_room.capacity,
            booked=booked,
            reason="capacityOnRoomChange",
        )
