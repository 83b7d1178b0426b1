from uuid import UUID
from typing import List

from fastapi import APIRouter, Depends, status

from boxoffice.api.deps import get_engine
from boxoffice.services.engine import BookingEngine
from boxoffice.schemas.common import OkResponse
from boxoffice.schemas.showing import (
    ShowingCreate,
    ShowingUpdate,
    ShowingCreated,
    ShowingListItem,
    ShowingDetail,
)

router = APIRouter(prefix="/showings", tags=["Showings"])


# ---------------------------------------------------------------------------
# Schedule (read side)
# ---------------------------------------------------------------------------


@router.get("", response_model=List[ShowingListItem])
def list_showings(engine: BookingEngine = Depends(get_engine)):
    """All showings ordered by start time, each with its room and booked ticket total."""
    return engine.list_showings()


@router.get("/{showing_id}", response_model=ShowingDetail)
def get_showing(showing_id: UUID, engine: BookingEngine = Depends(get_engine)):
    return engine.get_showing_detail(showing_id)


# ---------------------------------------------------------------------------
# Showing CRUD
# ---------------------------------------------------------------------------


@router.post("", response_model=ShowingCreated, status_code=status.HTTP_201_CREATED)
def create_showing(data: ShowingCreate, engine: BookingEngine = Depends(get_engine)):
    """
    Schedule a showing.
    - 400 on a bad field, 404 if the room is unknown.
    - 409 if the room is busy (turnaround included); `details` names the conflicting showing.
    """
    showing = engine.create_showing(data.title, data.start_at, data.duration_min, data.room_id)
    return ShowingCreated(id=showing.id)


@router.put("/{showing_id}", response_model=OkResponse)
def update_showing(showing_id: UUID, data: ShowingUpdate, engine: BookingEngine = Depends(get_engine)):
    """
    Replace a showing's title, start, duration and room.
    Moving to a smaller room is refused while its reservations would not fit.
    """
    engine.update_showing(showing_id, data.title, data.start_at, data.duration_min, data.room_id)
    return OkResponse()


@router.delete("/{showing_id}", response_model=OkResponse)
def delete_showing(showing_id: UUID, engine: BookingEngine = Depends(get_engine)):
    """Delete a showing together with all of its reservations."""
    engine.delete_showing(showing_id)
    return OkResponse()
