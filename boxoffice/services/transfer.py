import logging
from uuid import UUID

from sqlalchemy.orm import Session

from boxoffice.core.config import EngineConfig
from boxoffice.core.exceptions import IneligibleTransferError, NotFoundError, ValidationError
from boxoffice.models.reservation import Reservation
from boxoffice.schemas.reservation import ReservationOutcome
from boxoffice.services.locks import lock_showings, reload_reservation
from boxoffice.services.merge import plan_merge

logger = logging.getLogger(__name__)


def transfer_reservation(db: Session, config: EngineConfig, reservation_id: UUID, to_showing_id: UUID) -> ReservationOutcome:
    """
    Move a reservation to another showing of the same title.

    If the claimant already holds a reservation at the destination the two are
    merged and the moving record is deleted; otherwise the record keeps its id
    and only changes showing. Every check runs before the first write.
    """
    reservation = db.get(Reservation, reservation_id)
    if not reservation:
        raise NotFoundError("reservation", reservation_id)

    showings = lock_showings(db, [reservation.showing_id, to_showing_id])
    reservation = reload_reservation(db, reservation_id)
    if not reservation:
        raise NotFoundError("reservation", reservation_id)
    if reservation.showing_id not in showings:
        # Moved by a concurrent transfer between our read and the lock
        showings.update(lock_showings(db, [reservation.showing_id]))

    destination = showings.get(to_showing_id)
    if not destination:
        raise NotFoundError("showing", to_showing_id)
    source = showings[reservation.showing_id]

    if source.id == destination.id:
        raise ValidationError("to_showing_id", "Reservation already belongs to this showing")
    if source.title != destination.title:
        raise IneligibleTransferError(from_title=source.title, to_title=destination.title)

    plan = plan_merge(db, destination, reservation.customer_name, reservation.tickets, config)

    if plan.is_merge:
        plan.absorber.tickets = plan.tickets
        db.delete(reservation)
        db.flush()
        logger.info(
            "Transferred reservation %s into %s (showing %s -> %s)",
            reservation_id, plan.absorber.id, source.id, destination.id,
        )
        return ReservationOutcome(
            status="merged",
            reservation_id=plan.absorber.id,
            showing_id=destination.id,
            tickets=plan.tickets,
            deleted_id=reservation_id,
        )

    reservation.showing = destination
    db.flush()
    logger.info("Transferred reservation %s (showing %s -> %s)", reservation_id, source.id, destination.id)
    return ReservationOutcome(
        status="moved",
        reservation_id=reservation_id,
        showing_id=destination.id,
        tickets=reservation.tickets,
    )
