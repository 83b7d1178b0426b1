"""Errors raised by the booking engine.

Every error carries a machine-readable ``reason`` and a ``context`` dict with
the values a caller needs to render a precise message. They are raised before
any mutation, so the surrounding transaction is rolled back untouched.
"""
from datetime import timezone
from typing import Any, Optional


class BookingEngineError(Exception):
    reason = "error"
    status_code = 400

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None, reason: Optional[str] = None):
        self.message = message
        self.context = context or {}
        if reason:
            self.reason = reason
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.reason, "message": self.message, "details": self.context}


class ValidationError(BookingEngineError):
    reason = "badField"
    status_code = 400

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message, {"field": field})


class NotFoundError(BookingEngineError):
    reason = "notFound"
    status_code = 404

    def __init__(self, resource: str, resource_id: Any):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            f"{resource.capitalize()} {resource_id} not found",
            {"resource": resource, "id": str(resource_id)},
            reason="roomMissing" if resource == "room" else None,
        )


class ConflictError(BookingEngineError):
    """The candidate window overlaps another showing in the same room."""

    reason = "overlap"
    status_code = 409

    def __init__(self, conflict):
        self.conflict = conflict
        super().__init__(
            "Showing overlaps another showing in the same room (turnaround included)",
            {
                "id": str(conflict.id),
                "start_at": conflict.start_at.replace(tzinfo=timezone.utc).isoformat(),
                "duration_min": conflict.duration_min,
            },
        )


class CapacityError(BookingEngineError):
    reason = "capacityFull"
    status_code = 409

    def __init__(self, message: str, capacity: int, booked: int, requested: Optional[int] = None, reason: Optional[str] = None):
        self.capacity = capacity
        self.booked = booked
        self.requested = requested
        context = {"capacity": capacity, "booked": booked}
        if requested is not None:
            context["requested"] = requested
        super().__init__(message, context, reason=reason)


class PerPersonLimitError(BookingEngineError):
    reason = "perPersonCap"
    status_code = 409

    def __init__(self, limit: int, attempted: int, current: int = 0):
        self.limit = limit
        self.attempted = attempted
        self.current = current
        super().__init__(
            f"Ticket limit per person exceeded ({attempted} > {limit})",
            {"limit": limit, "attempted": attempted, "current": current},
        )


class IneligibleTransferError(BookingEngineError):
    reason = "titleMismatch"
    status_code = 409

    def __init__(self, from_title: str, to_title: str):
        self.from_title = from_title
        self.to_title = to_title
        super().__init__(
            "Reservations can only move to another showing of the same title",
            {"from_title": from_title, "to_title": to_title},
        )
