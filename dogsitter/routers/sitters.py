# dogsitter/routers/sitters.py
from fastapi import APIRouter, Depends, Query
from typing import Optional, List
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..db import get_db
from ..security import Principal, get_current_user
from ..schemas.sitter import SitterCard, SitterDashboard, SitterDetail, SitterOut, SitterProfileIn
from ..services import sitters

# Directorio público: /sitters
router = APIRouter()

# Perfil del cuidador autenticado: /sitter
profile_router = APIRouter()

@router.get("", response_model=List[SitterCard])
async def list_sitters(
    db: AsyncIOMotorDatabase = Depends(get_db),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    max_rate: Optional[float] = Query(None, ge=0),
):
    return await sitters.list_sitters(db, city=city, state=state, max_rate=max_rate)

@router.get("/{sitter_id}", response_model=SitterDetail)
async def get_sitter(sitter_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await sitters.get_sitter(db, sitter_id)

@profile_router.get("/profile", response_model=SitterOut)
async def get_my_profile(
    db: AsyncIOMotorDatabase = Depends(get_db),
    current: Principal = Depends(get_current_user),
):
    return await sitters.get_own_profile(db, current)

@profile_router.put("/profile", response_model=SitterOut)
async def update_my_profile(
    payload: SitterProfileIn,
    db: AsyncIOMotorDatabase = Depends(get_db),
    current: Principal = Depends(get_current_user),
):
    return await sitters.update_profile(db, current, payload)

@profile_router.get("/dashboard", response_model=SitterDashboard)
async def get_dashboard(
    db: AsyncIOMotorDatabase = Depends(get_db),
    current: Principal = Depends(get_current_user),
):
    return await sitters.dashboard(db, current)
