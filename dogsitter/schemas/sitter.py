from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime

from .user import UserBrief

class SitterProfileIn(BaseModel):
    bio: str = Field(..., min_length=20, max_length=500)
    rate: float = Field(..., ge=5, le=200)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=2, max_length=2)
    zip_code: str = Field(..., min_length=1)
    capacity: int = Field(..., ge=1, le=10)

class SitterOut(BaseModel):
    id: str
    user_id: str
    bio: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    rate: float = 0
    capacity: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class SitterCard(SitterOut):
    user: UserBrief = UserBrief()
    completed_bookings: int = 0

class SitterDetail(SitterCard):
    # reservas completadas recientes, ya serializadas como BookingOut
    recent_bookings: List[dict] = []

class SitterDashboard(BaseModel):
    sitter: SitterOut
    today: List[dict] = []
    pending: List[dict] = []
    upcoming: List[dict] = []
    counts: Dict[str, int] = {}
    total_earnings: float = 0
