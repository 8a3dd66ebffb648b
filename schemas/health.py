from pydantic import BaseModel
from typing import Dict, Optional


class ComponentStatus(BaseModel):
    ok: bool
    backend: Optional[str] = None
    error: Optional[str] = None

class HealthResponse(BaseModel):
    status: str
    timestamp: str
    active_rooms: Optional[int] = None
    components: Dict[str, ComponentStatus]

class CorsTestResponse(BaseModel):
    message: str
    origin: Optional[str]
    timestamp: str
