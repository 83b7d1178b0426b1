from typing import Literal, Optional
from pydantic import BaseModel, UUID4


# Reservation: Create / Edit (POST and PUT under /showings/{id}/reservations)
class ReservationCreate(BaseModel):
    customer_name: str
    tickets: int


class ReservationUpdate(ReservationCreate):
    pass


# POST /reservations/{id}/transfer
class ReservationTransfer(BaseModel):
    to_showing_id: UUID4


class Reservation(BaseModel):
    id: UUID4
    showing_id: UUID4
    customer_name: str
    tickets: int

    class Config:
        from_attributes = True


class ReservationOutcome(BaseModel):
    """
    Result of a reservation write.

    status:
      "created": a new record was inserted
      "updated": the record was changed in place
      "moved": the record now belongs to another showing (same id)
      "merged": the claimant already held a record; it absorbed the tickets
    """
    status: Literal["created", "updated", "moved", "merged"]
    reservation_id: UUID4        # the surviving record
    showing_id: UUID4
    tickets: int                 # claimant's total on the surviving record
    deleted_id: Optional[UUID4] = None
