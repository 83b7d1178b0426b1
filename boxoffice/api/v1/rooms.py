from typing import List

from fastapi import APIRouter, Depends

from boxoffice.api.deps import get_engine
from boxoffice.services.engine import BookingEngine
from boxoffice.schemas.room import Room as RoomSchema, EngineConfigResponse

router = APIRouter(prefix="/rooms", tags=["Rooms"])
config_router = APIRouter(prefix="/config", tags=["Config"])


@config_router.get("", response_model=EngineConfigResponse)
def get_config(engine: BookingEngine = Depends(get_engine)):
    """Scheduling rules plus the room list, for clients that validate forms up front."""
    return EngineConfigResponse(
        **engine.config.model_dump(),
        rooms=engine.list_rooms(),
    )


@router.get("", response_model=List[RoomSchema])
def list_rooms(engine: BookingEngine = Depends(get_engine)):
    return engine.list_rooms()
