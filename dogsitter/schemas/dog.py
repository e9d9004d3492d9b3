from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class DogIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=80)
    breed: str = Field(..., min_length=1, max_length=80)
    age: float = Field(..., ge=0)
    weight: float = Field(..., gt=0)
    vaccinated: bool
    neutered: bool
    friendly: bool
    notes: Optional[str] = None

class DogOut(DogIn):
    id: str
    owner_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class DogSnapshot(BaseModel):
    """Copia del perro guardada en la reserva para poder mostrarla aunque se borre."""
    id: str
    name: str
    breed: str
    age: Optional[float] = None
    weight: Optional[float] = None
