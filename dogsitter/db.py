from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from .config import get_settings

_settings = get_settings()
_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    await db.users.create_index("email", unique=True)
    await db.sitters.create_index("user_id", unique=True)
    await db.sitters.create_index([("city", 1), ("state", 1)])
    await db.dogs.create_index([("owner_id", 1)])
    await db.bookings.create_index([("client_id", 1), ("start_date", -1)])
    await db.bookings.create_index([("sitter_id", 1), ("status", 1)])
    # una reseña por reserva
    await db.reviews.create_index("booking_id", unique=True)


async def get_db() -> AsyncIOMotorDatabase:
    global _client, _db
    if _db is None:
        _client = AsyncIOMotorClient(_settings.mongodb_uri)
        _db = _client[_settings.db_name]
        await ensure_indexes(_db)
    return _db
