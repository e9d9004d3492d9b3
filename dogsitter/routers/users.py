# dogsitter/routers/users.py
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..db import get_db
from ..security import Principal, get_current_user
from ..schemas.user import UserOut, UserUpdate
from ..services import accounts

router = APIRouter()

@router.get("/me", response_model=UserOut)
async def get_me(db: AsyncIOMotorDatabase = Depends(get_db), current: Principal = Depends(get_current_user)):
    return await accounts.get_me(db, current)

@router.put("/update", response_model=UserOut)
async def update_me(
    body: UserUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    current: Principal = Depends(get_current_user),
):
    return await accounts.update_user(db, current, body)

@router.delete("/delete")
async def delete_me(
    db: AsyncIOMotorDatabase = Depends(get_db),
    current: Principal = Depends(get_current_user),
):
    await accounts.delete_account(db, current)
    return {"message": "Account deleted successfully"}
