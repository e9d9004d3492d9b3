"""
Registro de perros: alta, edición y baja por parte de su dueño.
"""
import logging
from typing import Any, Dict, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from ..errors import ConflictError, NotFoundError, PermissionDenied
from ..schemas.dog import DogIn
from ..security import Principal
from ..utils import to_id, to_object_id, utcnow

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ["PENDING", "CONFIRMED"]


async def _load_owned(db: AsyncIOMotorDatabase, me: Principal, dog_id: str) -> Dict[str, Any]:
    dog = await db.dogs.find_one({"_id": to_object_id(dog_id, "Dog")})
    if not dog:
        raise NotFoundError("Dog not found")
    if str(dog.get("owner_id")) != me.id:
        raise PermissionDenied("You are not the owner of this dog")
    return dog


async def list_dogs(db: AsyncIOMotorDatabase, me: Principal) -> List[Dict[str, Any]]:
    docs = await db.dogs.find({"owner_id": me.id}).sort("created_at", -1).to_list(500)
    return [to_id(d) for d in docs]


async def get_dog(db: AsyncIOMotorDatabase, me: Principal, dog_id: str) -> Dict[str, Any]:
    return to_id(await _load_owned(db, me, dog_id))


async def create_dog(db: AsyncIOMotorDatabase, me: Principal, payload: DogIn) -> Dict[str, Any]:
    if not me.is_client:
        raise PermissionDenied("Only clients can register dogs")

    now = utcnow()
    doc = payload.model_dump()
    doc["owner_id"] = me.id     # lo pone el backend
    doc["created_at"] = now
    doc["updated_at"] = now
    res = await db.dogs.insert_one(doc)
    doc["_id"] = res.inserted_id
    return to_id(doc)


async def update_dog(db: AsyncIOMotorDatabase, me: Principal, dog_id: str, payload: DogIn) -> Dict[str, Any]:
    dog = await _load_owned(db, me, dog_id)

    # reemplazo completo: notes ausente vuelve a None
    updates = payload.model_dump()
    updates["updated_at"] = utcnow()
    await db.dogs.update_one({"_id": dog["_id"]}, {"$set": updates})
    updated = await db.dogs.find_one({"_id": dog["_id"]})
    return to_id(updated)


async def delete_dog(db: AsyncIOMotorDatabase, me: Principal, dog_id: str) -> None:
    dog = await _load_owned(db, me, dog_id)

    active = await db.bookings.count_documents({
        "dog_ids": str(dog["_id"]),
        "status": {"$in": ACTIVE_STATUSES},
    })
    if active:
        logger.warning(f"Dog {dog['_id']} still has {active} active booking(s); refusing delete")
        raise ConflictError("Dog has pending or confirmed bookings")

    # las reservas antiguas conservan su copia en booking.dogs
    await db.dogs.delete_one({"_id": dog["_id"]})
