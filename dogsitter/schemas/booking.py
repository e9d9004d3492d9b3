from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime
from typing import Optional, List

from .dog import DogSnapshot
from .user import UserBrief

class BookingStatus(str, Enum):
    pending   = "PENDING"
    confirmed = "CONFIRMED"
    completed = "COMPLETED"
    cancelled = "CANCELLED"

class BookingCreate(BaseModel):
    sitter_id: str
    dog_ids: List[str] = Field(..., min_length=1)
    start_date: datetime
    end_date: datetime
    notes: Optional[str] = Field(None, max_length=1000)

class BookingSitter(BaseModel):
    id: str
    rate: float = 0
    city: str = ""
    state: str = ""
    user: UserBrief = UserBrief()

class BookingReview(BaseModel):
    id: str
    rating: int
    comment: str
    created_at: Optional[datetime] = None

class BookingOut(BaseModel):
    id: str
    client_id: str
    sitter_id: str
    dog_ids: List[str] = []
    dogs: List[DogSnapshot] = []
    start_date: datetime
    end_date: datetime
    status: BookingStatus
    total_price: float
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # relaciones que se añaden según el listado
    sitter: Optional[BookingSitter] = None
    client: Optional[UserBrief] = None
    review: Optional[BookingReview] = None
