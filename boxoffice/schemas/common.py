from typing import Any, Optional
from pydantic import BaseModel


# Error responses: rendered from BookingEngineError by the API exception handler
class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[dict[str, Any]] = None


class OkResponse(BaseModel):
    ok: bool = True
