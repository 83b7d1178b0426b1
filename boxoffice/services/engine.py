from datetime import datetime, timezone
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from boxoffice.core.config import EngineConfig
from boxoffice.core.exceptions import NotFoundError
from boxoffice.db.session import atomic
from boxoffice.models.room import Room
from boxoffice.schemas.reservation import Reservation as ReservationSchema, ReservationOutcome
from boxoffice.schemas.room import Room as RoomSchema
from boxoffice.schemas.showing import Showing as ShowingSchema, ShowingDetail, ShowingListItem
from boxoffice.services import reservations, showings, transfer


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_uuid(value, resource: str) -> UUID:
    """Accept a UUID or its string form; anything else cannot name an existing row."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise NotFoundError(resource, value)


class BookingEngine:
    """
    Entry point for every scheduling and booking operation.

    Each write runs in its own transaction on ``db``: all of its checks and
    mutations commit together, or the transaction is rolled back and the
    engine error propagates to the caller. Nothing is retried here.
    """

    def __init__(self, db: Session, config: EngineConfig, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.config = config
        self.clock = clock

    # --- Showings ---

    def create_showing(self, title, start_at, duration_min, room_id) -> ShowingSchema:
        with atomic(self.db):
            showing = showings.create_showing(
                self.db, self.config, self.clock(), title, start_at, duration_min, room_id
            )
            result = ShowingSchema.model_validate(showing)
        return result

    def update_showing(self, showing_id, title, start_at, duration_min, room_id) -> ShowingSchema:
        showing_id = _as_uuid(showing_id, "showing")
        with atomic(self.db):
            showing = showings.update_showing(
                self.db, self.config, self.clock(), showing_id, title, start_at, duration_min, room_id
            )
            result = ShowingSchema.model_validate(showing)
        return result

    def delete_showing(self, showing_id) -> None:
        showing_id = _as_uuid(showing_id, "showing")
        with atomic(self.db):
            showings.delete_showing(self.db, showing_id)

    def list_showings(self) -> List[ShowingListItem]:
        return showings.list_showings(self.db, self.config)

    def get_showing_detail(self, showing_id) -> ShowingDetail:
        return showings.get_showing_detail(self.db, self.config, _as_uuid(showing_id, "showing"))

    # --- Reservations ---

    def create_or_merge_reservation(self, showing_id, customer_name, tickets) -> ReservationOutcome:
        showing_id = _as_uuid(showing_id, "showing")
        with atomic(self.db):
            return reservations.create_or_merge_reservation(
                self.db, self.config, showing_id, customer_name, tickets
            )

    def edit_reservation(self, reservation_id, customer_name, tickets, showing_id: Optional[UUID] = None) -> ReservationOutcome:
        reservation_id = _as_uuid(reservation_id, "reservation")
        if showing_id is not None:
            showing_id = _as_uuid(showing_id, "showing")
        with atomic(self.db):
            return reservations.edit_reservation(
                self.db, self.config, reservation_id, customer_name, tickets, showing_id
            )

    def delete_reservation(self, reservation_id, showing_id: Optional[UUID] = None) -> None:
        reservation_id = _as_uuid(reservation_id, "reservation")
        if showing_id is not None:
            showing_id = _as_uuid(showing_id, "showing")
        with atomic(self.db):
            reservations.delete_reservation(self.db, reservation_id, showing_id)

    def transfer_reservation(self, reservation_id, to_showing_id) -> ReservationOutcome:
        reservation_id = _as_uuid(reservation_id, "reservation")
        to_showing_id = _as_uuid(to_showing_id, "showing")
        with atomic(self.db):
            return transfer.transfer_reservation(self.db, self.config, reservation_id, to_showing_id)

    def list_reservations(self, showing_id) -> List[ReservationSchema]:
        rows = reservations.list_reservations(self.db, _as_uuid(showing_id, "showing"))
        return [ReservationSchema.model_validate(r) for r in rows]

    # --- Rooms ---

    def list_rooms(self) -> List[RoomSchema]:
        rows = self.db.query(Room).order_by(Room.name).all()
        return [RoomSchema.model_validate(r) for r in rows]
