from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from ..db import get_db
from ..security import Principal, get_current_user
from ..schemas.dog import DogIn, DogOut
from ..services import dogs

router = APIRouter()

@router.get("", response_model=list[DogOut])
async def my_dogs(
    current: Principal = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await dogs.list_dogs(db, current)

@router.get("/{dog_id}", response_model=DogOut)
async def get_dog(
    dog_id: str,
    current: Principal = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await dogs.get_dog(db, current, dog_id)

@router.post("", response_model=DogOut, status_code=status.HTTP_201_CREATED)
async def create_dog(
    payload: DogIn,
    current: Principal = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await dogs.create_dog(db, current, payload)

@router.patch("/{dog_id}", response_model=DogOut)
async def update_dog(
    dog_id: str,
    payload: DogIn,  # payload completo, no parcial
    current: Principal = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await dogs.update_dog(db, current, dog_id, payload)

@router.delete("/{dog_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_dog(
    dog_id: str,
    current: Principal = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    await dogs.delete_dog(db, current, dog_id)
    return None
