from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from boxoffice.models.showing import Showing
from boxoffice.services.window import occupied_window


def windows_overlap(a: tuple[datetime, datetime], b: tuple[datetime, datetime]) -> bool:
    """Half-open overlap test. Back-to-back windows (a ends where b starts) do not overlap."""
    return a[0] < b[1] and b[0] < a[1]


def find_conflict(
    db: Session,
    room_id: str,
    start: datetime,
    duration_minutes: int,
    buffer_minutes: int,
    exclude_showing_id: UUID | None = None,
) -> Optional[Showing]:
    """Return the earliest showing in the room whose occupied window overlaps the candidate's."""
    candidate = occupied_window(start, duration_minutes, buffer_minutes)

    # Only showings starting before the candidate window ends can overlap it
    query = db.query(Showing).filter(
        Showing.room_id == room_id,
        Showing.start_at < candidate[1],
    )
    if exclude_showing_id:
        query = query.filter(Showing.id != exclude_showing_id)

    for showing in query.order_by(Showing.start_at).all():
        existing = occupied_window(showing.start_at, showing.duration_min, buffer_minutes)
        if windows_overlap(candidate, existing):
            return showing
    return None
