"""
Cuentas de usuario: registro, login, edición y borrado en cascada.
"""
import logging
from typing import Any, Dict

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from ..errors import ConflictError, NotFoundError, UnauthorizedError
from ..schemas.user import Signup, UserUpdate
from ..security import Principal, create_access_token, hash_password, verify_password
from ..utils import to_id, utcnow
from . import sitters

logger = logging.getLogger(__name__)

SITTER_FIELDS = ("bio", "address", "city", "state", "zip_code", "rate", "capacity")


def public_user(doc: Dict[str, Any]) -> Dict[str, Any]:
    out = to_id(doc)
    out.pop("password_hash", None)
    return out


async def signup(db: AsyncIOMotorDatabase, payload: Signup) -> Dict[str, Any]:
    if await db.users.find_one({"email": payload.email}):
        raise ConflictError("User with this email already exists")

    doc = {
        "name": payload.name,
        "email": payload.email,
        "password_hash": hash_password(payload.password),
        "role": payload.role,
        "image": payload.image,
        "created_at": utcnow(),
    }
    try:
        res = await db.users.insert_one(doc)
    except DuplicateKeyError:
        raise ConflictError("User with this email already exists")
    doc["_id"] = res.inserted_id

    if payload.role == "SITTER":
        defaults = {k: getattr(payload, k) for k in SITTER_FIELDS}
        await sitters.create_on_signup(db, str(res.inserted_id), defaults)

    logger.info(f"New {payload.role} account {res.inserted_id}")
    return public_user(doc)


async def login(db: AsyncIOMotorDatabase, email: str, password: str) -> str:
    user = await db.users.find_one({"email": email})
    if not user or not verify_password(password, user.get("password_hash", "")):
        raise UnauthorizedError("Invalid credentials")
    return create_access_token(str(user["_id"]), user.get("role", "CLIENT"))


async def get_me(db: AsyncIOMotorDatabase, me: Principal) -> Dict[str, Any]:
    u = await db.users.find_one({"_id": ObjectId(me.id)})
    if not u:
        raise NotFoundError("User not found")
    return public_user(u)


async def update_user(db: AsyncIOMotorDatabase, me: Principal, payload: UserUpdate) -> Dict[str, Any]:
    taken = await db.users.find_one({"email": payload.email, "_id": {"$ne": ObjectId(me.id)}})
    if taken:
        raise ConflictError("Email already taken")

    try:
        await db.users.update_one(
            {"_id": ObjectId(me.id)},
            {"$set": {"name": payload.name, "email": payload.email}},
        )
    except DuplicateKeyError:
        raise ConflictError("Email already taken")
    return await get_me(db, me)


async def delete_account(db: AsyncIOMotorDatabase, me: Principal) -> None:
    """
    Borra la cuenta y todo lo que cuelga de ella: reseñas de sus reservas
    (como cliente o como cuidador), las reservas, el perfil de cuidador,
    los perros y el usuario. Sin transacción: un fallo a medias se propaga.
    """
    sitter = await db.sitters.find_one({"user_id": me.id})

    parties: list[Dict[str, Any]] = [{"client_id": me.id}]
    if sitter:
        parties.append({"sitter_id": str(sitter["_id"])})
    booking_query = {"$or": parties}

    booking_ids = [str(b["_id"]) async for b in db.bookings.find(booking_query, {"_id": 1})]
    reviews = await db.reviews.delete_many({"booking_id": {"$in": booking_ids}})
    bookings = await db.bookings.delete_many(booking_query)
    await db.sitters.delete_many({"user_id": me.id})
    dogs = await db.dogs.delete_many({"owner_id": me.id})
    await db.users.delete_one({"_id": ObjectId(me.id)})

    logger.info(
        f"Account {me.id} deleted ({bookings.deleted_count} bookings, "
        f"{reviews.deleted_count} reviews, {dogs.deleted_count} dogs)"
    )
