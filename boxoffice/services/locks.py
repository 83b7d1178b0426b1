"""
Row locks taken at the start of every engine write.

Rows are locked in sorted id order so two operations touching the same pair of
rooms or showings always queue instead of deadlocking. On SQLite ``FOR UPDATE``
is not emitted; every transaction opens with ``BEGIN IMMEDIATE`` instead, so
writers queue on the database-level write lock.
"""
from typing import Iterable
from uuid import UUID

from sqlalchemy.orm import Session

from boxoffice.models.reservation import Reservation
from boxoffice.models.room import Room
from boxoffice.models.showing import Showing


def lock_rooms(db: Session, room_ids: Iterable[str]) -> dict[str, Room]:
    ids = sorted(set(room_ids))
    rows = (
        db.query(Room)
        .filter(Room.id.in_(ids))
        .order_by(Room.id)
        .with_for_update()
        .all()
    )
    return {room.id: room for room in rows}


def lock_showings(db: Session, showing_ids: Iterable[UUID]) -> dict[UUID, Showing]:
    ids = sorted(set(showing_ids), key=str)
    rows = (
        db.query(Showing)
        .filter(Showing.id.in_(ids))
        .order_by(Showing.id)
        .with_for_update()
        .populate_existing()
        .all()
    )
    return {showing.id: showing for showing in rows}


def reload_reservation(db: Session, reservation_id: UUID) -> Reservation | None:
    """Re-read a reservation after its showing is locked, discarding any stale copy."""
    return (
        db.query(Reservation)
        .filter(Reservation.id == reservation_id)
        .populate_existing()
        .first()
    )
