from uuid import UUID
from typing import List

from fastapi import APIRouter, Depends, Response, status

from boxoffice.api.deps import get_engine
from boxoffice.services.engine import BookingEngine
from boxoffice.schemas.common import OkResponse
from boxoffice.schemas.reservation import (
    Reservation as ReservationSchema,
    ReservationCreate,
    ReservationUpdate,
    ReservationTransfer,
    ReservationOutcome,
)

# Reservations live under their showing; transfers address the reservation directly
router = APIRouter(prefix="/showings", tags=["Reservations"])
transfer_router = APIRouter(prefix="/reservations", tags=["Reservations"])


@router.get("/{showing_id}/reservations", response_model=List[ReservationSchema])
def list_reservations(showing_id: UUID, engine: BookingEngine = Depends(get_engine)):
    return engine.list_reservations(showing_id)


@router.post("/{showing_id}/reservations", response_model=ReservationOutcome, status_code=status.HTTP_201_CREATED)
def create_reservation(
    showing_id: UUID,
    data: ReservationCreate,
    response: Response,
    engine: BookingEngine = Depends(get_engine),
):
    """
    Reserve tickets for a named customer.
    If the customer already holds a reservation for this showing, the tickets
    are added to it (200, status "merged") instead of creating a second one (201).
    """
    outcome = engine.create_or_merge_reservation(showing_id, data.customer_name, data.tickets)
    if outcome.status == "merged":
        response.status_code = status.HTTP_200_OK
    return outcome


@router.put("/{showing_id}/reservations/{reservation_id}", response_model=ReservationOutcome)
def update_reservation(
    showing_id: UUID,
    reservation_id: UUID,
    data: ReservationUpdate,
    engine: BookingEngine = Depends(get_engine),
):
    """
    Edit a reservation. Renaming it to a customer who already has a reservation
    for this showing merges the two (`deleted_id` names the removed record).
    """
    return engine.edit_reservation(reservation_id, data.customer_name, data.tickets, showing_id=showing_id)


@router.delete("/{showing_id}/reservations/{reservation_id}", response_model=OkResponse)
def delete_reservation(showing_id: UUID, reservation_id: UUID, engine: BookingEngine = Depends(get_engine)):
    engine.delete_reservation(reservation_id, showing_id=showing_id)
    return OkResponse()


@transfer_router.post("/{reservation_id}/transfer", response_model=ReservationOutcome)
def transfer_reservation(
    reservation_id: UUID,
    data: ReservationTransfer,
    engine: BookingEngine = Depends(get_engine),
):
    """Move a reservation to another showing of the same title, merging with the customer's existing one there."""
    return engine.transfer_reservation(reservation_id, data.to_showing_id)
