from typing import List
from pydantic import BaseModel, UUID4, field_validator
from datetime import datetime, timezone

from boxoffice.schemas.reservation import Reservation


# Showing: Create / Update (PUT replaces every field)
# start_at stays a string here so malformed timestamps reach the engine's field validation
class ShowingCreate(BaseModel):
    title: str
    start_at: str
    duration_min: int
    room_id: str


class ShowingUpdate(ShowingCreate):
    pass


class Showing(BaseModel):
    id: UUID4
    title: str
    start_at: datetime
    duration_min: int
    room_id: str

    @field_validator("start_at")
    @classmethod
    def mark_utc(cls, v: datetime) -> datetime:
        # Stored naive UTC; surface it as an aware instant
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    class Config:
        from_attributes = True


# Schedule row: GET /showings
class ShowingListItem(Showing):
    room_name: str
    room_capacity: int
    ends_at: datetime          # end of the occupied window, turnaround included
    booked_tickets: int = 0

    @field_validator("ends_at")
    @classmethod
    def mark_ends_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


# Showing with its reservations: GET /showings/{id}
class ShowingDetail(ShowingListItem):
    reservations: List[Reservation] = []


class ShowingCreated(BaseModel):
    id: UUID4
