from typing import List
from pydantic import BaseModel


class Room(BaseModel):
    id: str
    name: str
    capacity: int

    class Config:
        from_attributes = True


# GET /config: the rule set clients need to pre-validate forms
class EngineConfigResponse(BaseModel):
    buffer_minutes: int
    max_tickets_per_person: int
    min_duration: int
    max_duration: int
    min_lead_minutes: int
    rooms: List[Room] = []
