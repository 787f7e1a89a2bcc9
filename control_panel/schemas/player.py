# control_panel/schemas/player.py
from typing import Optional
from pydantic import BaseModel, Field

class PlayerToggle(BaseModel):
    track_id: str = Field(..., min_length=1)

class PlayerProgress(BaseModel):
    position_seconds: float = Field(..., ge=0)
    duration_seconds: Optional[float] = Field(None, gt=0)

class PlayerStatus(BaseModel):
    """Preview player state as the dashboard renders it."""
    track_id: Optional[str] = None
    src: Optional[str] = None
    is_playing: bool = False
    position_seconds: float = 0.0
    duration_seconds: Optional[float] = None
    position_label: str = "0:00"
    duration_label: str = "0:00"
    progress_percent: float = 0.0
