import logging
from typing import List
from uuid import UUID

from sqlalchemy.orm import Session

from boxoffice.core.config import EngineConfig
from boxoffice.core.exceptions import NotFoundError, PerPersonLimitError, ValidationError
from boxoffice.models.reservation import Reservation
from boxoffice.models.showing import Showing
from boxoffice.schemas.reservation import ReservationOutcome
from boxoffice.services.locks import lock_showings, reload_reservation
from boxoffice.services.merge import plan_merge

logger = logging.getLogger(__name__)


def validate_reservation_fields(config: EngineConfig, customer_name, tickets) -> tuple[str, int]:
    if not isinstance(customer_name, str) or not customer_name.strip():
        raise ValidationError("customer_name", "customer_name must be a non-empty string")
    if not isinstance(tickets, int) or isinstance(tickets, bool) or tickets <= 0:
        raise ValidationError("tickets", "tickets must be an integer > 0")
    if tickets > config.max_tickets_per_person:
        raise PerPersonLimitError(limit=config.max_tickets_per_person, attempted=tickets)
    # Names merge on exact match once surrounding whitespace is gone
    return customer_name.strip(), tickets


def _lock_reservation(db: Session, reservation_id: UUID, showing_id: UUID | None = None):
    """Lock the reservation's showing and return (reservation, showing), re-read under the lock."""
    reservation = db.get(Reservation, reservation_id)
    if not reservation or (showing_id and reservation.showing_id != showing_id):
        raise NotFoundError("reservation", reservation_id)

    showing = lock_showings(db, [reservation.showing_id]).get(reservation.showing_id)
    reservation = reload_reservation(db, reservation_id)
    if not showing or not reservation or reservation.showing_id != showing.id:
        raise NotFoundError("reservation", reservation_id)
    return reservation, showing


def create_or_merge_reservation(db: Session, config: EngineConfig, showing_id: UUID, customer_name, tickets) -> ReservationOutcome:
    """
    Book ``tickets`` for ``customer_name``.

    A claimant who already holds a reservation for the showing gets the tickets
    added to it ("merged"); otherwise a new record is created.
    """
    showing = lock_showings(db, [showing_id]).get(showing_id)
    if not showing:
        raise NotFoundError("showing", showing_id)

    customer_name, tickets = validate_reservation_fields(config, customer_name, tickets)
    plan = plan_merge(db, showing, customer_name, tickets, config)

    if plan.is_merge:
        plan.absorber.tickets = plan.tickets
        db.flush()
        logger.info("Merged %d ticket(s) into reservation %s (showing %s)", tickets, plan.absorber.id, showing_id)
        return ReservationOutcome(
            status="merged",
            reservation_id=plan.absorber.id,
            showing_id=showing_id,
            tickets=plan.tickets,
        )

    reservation = Reservation(showing=showing, customer_name=customer_name, tickets=tickets)
    db.add(reservation)
    db.flush()
    logger.info("Created reservation %s for %d ticket(s) (showing %s)", reservation.id, tickets, showing_id)
    return ReservationOutcome(
        status="created",
        reservation_id=reservation.id,
        showing_id=showing_id,
        tickets=tickets,
    )


def edit_reservation(db: Session, config: EngineConfig, reservation_id: UUID, customer_name, tickets, showing_id: UUID | None = None) -> ReservationOutcome:
    """
    Replace a reservation's name and ticket count.

    Renaming onto another claimant of the same showing merges the two: the
    other record absorbs the tickets and this one is deleted.
    """
    reservation, showing = _lock_reservation(db, reservation_id, showing_id)
    customer_name, tickets = validate_reservation_fields(config, customer_name, tickets)

    plan = plan_merge(db, showing, customer_name, tickets, config, ignore_ids=[reservation.id])

    if plan.is_merge:
        plan.absorber.tickets = plan.tickets
        db.delete(reservation)
        db.flush()
        logger.info("Merged reservation %s into %s (showing %s)", reservation_id, plan.absorber.id, showing.id)
        return ReservationOutcome(
            status="merged",
            reservation_id=plan.absorber.id,
            showing_id=showing.id,
            tickets=plan.tickets,
            deleted_id=reservation_id,
        )

    reservation.customer_name = customer_name
    reservation.tickets = tickets
    db.flush()
    logger.info("Updated reservation %s", reservation_id)
    return ReservationOutcome(
        status="updated",
        reservation_id=reservation_id,
        showing_id=showing.id,
        tickets=tickets,
    )


def delete_reservation(db: Session, reservation_id: UUID, showing_id: UUID | None = None) -> None:
    reservation, _ = _lock_reservation(db, reservation_id, showing_id)
    db.delete(reservation)
    db.flush()
    logger.info("Deleted reservation %s", reservation_id)


def list_reservations(db: Session, showing_id: UUID) -> List[Reservation]:
    if not db.get(Showing, showing_id):
        raise NotFoundError("showing", showing_id)
    return (
        db.query(Reservation)
        .filter(Reservation.showing_id == showing_id)
        .order_by(Reservation.customer_name)
        .all()
    )
