from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal
from datetime import datetime

Role = Literal["CLIENT", "SITTER"]

class Signup(BaseModel):
    name: str = Field(..., min_length=2, max_length=80)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)  # límite de bcrypt
    role: Role
    image: Optional[str] = None
    # Campos opcionales del perfil de cuidador (solo si role=SITTER)
    bio: Optional[str] = Field(None, max_length=500)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    rate: Optional[float] = Field(None, gt=0)
    capacity: Optional[int] = Field(None, gt=0)

class Login(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class UserUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=80)
    email: EmailStr

class UserOut(BaseModel):
    id: str
    name: str
    email: EmailStr
    role: Role
    image: Optional[str] = None
    created_at: Optional[datetime] = None

class UserBrief(BaseModel):
    """Datos públicos que se anidan en cuidadores y reservas."""
    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None
