from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from ..db import get_db
from ..security import Principal, get_current_user
from ..schemas.review import ReviewCreate, ReviewOut
from ..services import reviews

router = APIRouter()

@router.post("", response_model=ReviewOut, status_code=status.HTTP_201_CREATED)
async def create_review(payload: ReviewCreate,
                        db: AsyncIOMotorDatabase = Depends(get_db),
                        me: Principal = Depends(get_current_user)):
    return await reviews.create_review(db, me, payload.booking_id, payload.rating, payload.comment)
