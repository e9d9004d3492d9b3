# dogsitter/routers/bookings.py
from fastapi import APIRouter, Depends, status, Request
from typing import List
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..db import get_db
from ..schemas.booking import BookingCreate, BookingOut
from ..security import Principal, get_current_user
from ..services import bookings
from ..middleware.rate_limit import apply_rate_limit

router = APIRouter()

# ---------- Listados ----------
# van antes de /{booking_id} para que no los capture la ruta con parámetro

@router.get("/mine", response_model=List[BookingOut])
async def list_my_bookings(
    db: AsyncIOMotorDatabase = Depends(get_db),
    current: Principal = Depends(get_current_user),
):
    return await bookings.list_for_client(db, current)

@router.get("/upcoming", response_model=List[BookingOut])
async def list_my_upcoming_bookings(
    db: AsyncIOMotorDatabase = Depends(get_db),
    current: Principal = Depends(get_current_user),
):
    return await bookings.upcoming_for_client(db, current)

@router.get("/sitter", response_model=List[BookingOut])
async def list_sitter_bookings(
    db: AsyncIOMotorDatabase = Depends(get_db),
    current: Principal = Depends(get_current_user),
):
    return await bookings.list_for_sitter(db, current)

@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking(
    booking_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    current: Principal = Depends(get_current_user),
):
    return await bookings.get_booking(db, current, booking_id)

# ---------- Creación y transiciones ----------

@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: Request,
    payload: BookingCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    current: Principal = Depends(get_current_user),
):
    # Rate limiting: máximo 15 reservas por minuto por IP
    apply_rate_limit(request, "15/minute")
    return await bookings.create_booking(db, current, payload)

@router.post("/{booking_id}/confirm", response_model=BookingOut)
async def confirm_booking(
    booking_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    current: Principal = Depends(get_current_user),
):
    return await bookings.confirm_booking(db, current, booking_id)

@router.post("/{booking_id}/complete", response_model=BookingOut)
async def complete_booking(
    booking_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    current: Principal = Depends(get_current_user),
):
    return await bookings.complete_booking(db, current, booking_id)

@router.post("/{booking_id}/cancel", response_model=BookingOut)
async def cancel_booking(
    booking_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    current: Principal = Depends(get_current_user),
):
    return await bookings.cancel_booking(db, current, booking_id)
