from pydantic import BaseModel
from typing import Any, Optional
from datetime import datetime

class ReviewCreate(BaseModel):
    # Sin restricciones aquí: el servicio devuelve un único error genérico
    booking_id: Optional[Any] = None
    rating: Optional[Any] = None
    comment: Optional[Any] = None

class ReviewOut(BaseModel):
    id: str
    booking_id: str
    rating: int
    comment: str
    created_at: Optional[datetime] = None
