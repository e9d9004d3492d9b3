"""
Directorio de cuidadores: perfil propio, búsqueda pública y panel del cuidador.
"""
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..errors import NotFoundError
from ..schemas.sitter import SitterProfileIn
from ..security import Principal
from ..utils import to_id, to_object_id, utcnow
from .bookings import expand_bookings

logger = logging.getLogger(__name__)

RECENT_BOOKINGS_LIMIT = 5
UPCOMING_BOOKINGS_LIMIT = 5


def _user_brief(u: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not u:
        return {}
    return {
        "id": str(u["_id"]),
        "name": u.get("name"),
        "email": u.get("email"),
        "image": u.get("image"),
    }


async def create_on_signup(db: AsyncIOMotorDatabase, user_id: str, defaults: Dict[str, Any]) -> Dict[str, Any]:
    """
    Crea el perfil vacío de un cuidador recién registrado.
    Se completa más tarde con update_profile.
    """
    now = utcnow()
    doc = {
        "user_id": user_id,
        "bio": defaults.get("bio") or "",
        "address": defaults.get("address") or "",
        "city": defaults.get("city") or "",
        "state": defaults.get("state") or "",
        "zip_code": defaults.get("zip_code") or "",
        "rate": defaults.get("rate") or 0,
        "capacity": defaults.get("capacity") or 1,
        "created_at": now,
        "updated_at": now,
    }
    res = await db.sitters.insert_one(doc)
    doc["_id"] = res.inserted_id
    return to_id(doc)


async def get_profile_doc(db: AsyncIOMotorDatabase, me: Principal) -> Dict[str, Any]:
    sitter = await db.sitters.find_one({"user_id": me.id})
    if not sitter:
        raise NotFoundError("Sitter profile not found")
    return sitter


async def get_own_profile(db: AsyncIOMotorDatabase, me: Principal) -> Dict[str, Any]:
    return to_id(await get_profile_doc(db, me))


async def update_profile(db: AsyncIOMotorDatabase, me: Principal, payload: SitterProfileIn) -> Dict[str, Any]:
    sitter = await get_profile_doc(db, me)

    updates = payload.model_dump()
    updates["updated_at"] = utcnow()
    await db.sitters.update_one({"_id": sitter["_id"]}, {"$set": updates})
    updated = await db.sitters.find_one({"_id": sitter["_id"]})
    return to_id(updated)


async def _completed_count(db: AsyncIOMotorDatabase, sitter_id: str) -> int:
    return await db.bookings.count_documents({"sitter_id": sitter_id, "status": "COMPLETED"})


async def list_sitters(
    db: AsyncIOMotorDatabase,
    city: Optional[str] = None,
    state: Optional[str] = None,
    max_rate: Optional[float] = None,
) -> List[Dict[str, Any]]:
    """
    Devuelve todos los cuidadores que cumplen los filtros (sin paginar),
    del perfil más reciente al más antiguo.
    """
    match: Dict[str, Any] = {}
    if city:
        match["city"] = city
    if state:
        match["state"] = state
    if max_rate is not None:
        match["rate"] = {"$lte": max_rate}

    sitters = await db.sitters.find(match).sort("created_at", -1).to_list(1000)
    if not sitters:
        return []

    user_oids = [ObjectId(s["user_id"]) for s in sitters if ObjectId.is_valid(s.get("user_id", ""))]
    users = await db.users.find({"_id": {"$in": user_oids}}).to_list(1000)
    by_id = {str(u["_id"]): u for u in users}

    out: List[Dict[str, Any]] = []
    for s in sitters:
        card = to_id(s)
        card["user"] = _user_brief(by_id.get(s.get("user_id")))
        card["completed_bookings"] = await _completed_count(db, card["id"])
        out.append(card)
    return out


async def get_sitter(db: AsyncIOMotorDatabase, sitter_id: str) -> Dict[str, Any]:
    s = await db.sitters.find_one({"_id": to_object_id(sitter_id, "Sitter")})
    if not s:
        raise NotFoundError("Sitter not found")

    user = None
    if ObjectId.is_valid(s.get("user_id", "")):
        user = await db.users.find_one({"_id": ObjectId(s["user_id"])})

    doc = to_id(s)
    doc["user"] = _user_brief(user)
    doc["completed_bookings"] = await _completed_count(db, doc["id"])

    recent = await db.bookings.find(
        {"sitter_id": doc["id"], "status": "COMPLETED"}
    ).sort("end_date", -1).limit(RECENT_BOOKINGS_LIMIT).to_list(RECENT_BOOKINGS_LIMIT)
    doc["recent_bookings"] = await expand_bookings(db, recent, client=True, review=True)
    return doc


async def dashboard(db: AsyncIOMotorDatabase, me: Principal) -> Dict[str, Any]:
    """Resumen del panel del cuidador: hoy, pendientes, próximas y totales."""
    sitter = await get_profile_doc(db, me)
    sitter_id = str(sitter["_id"])

    today = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    tomorrow = today + timedelta(days=1)

    today_docs = await db.bookings.find({
        "sitter_id": sitter_id,
        "start_date": {"$gte": today, "$lt": tomorrow},
    }).sort("start_date", 1).to_list(200)
    pending_docs = await db.bookings.find(
        {"sitter_id": sitter_id, "status": "PENDING"}
    ).sort("start_date", 1).to_list(200)
    upcoming_docs = await db.bookings.find({
        "sitter_id": sitter_id,
        "status": "CONFIRMED",
        "start_date": {"$gt": today},
    }).sort("start_date", 1).limit(UPCOMING_BOOKINGS_LIMIT).to_list(UPCOMING_BOOKINGS_LIMIT)

    counts = {status: 0 for status in ("PENDING", "CONFIRMED", "COMPLETED", "CANCELLED")}
    total_earnings = 0.0
    async for b in db.bookings.find({"sitter_id": sitter_id}, {"status": 1, "total_price": 1}):
        status = b.get("status")
        if status in counts:
            counts[status] += 1
        if status == "COMPLETED":
            total_earnings += float(b.get("total_price") or 0)

    expand = dict(client=True, sitter=True, review=True)
    return {
        "sitter": to_id(sitter),
        "today": await expand_bookings(db, today_docs, **expand),
        "pending": await expand_bookings(db, pending_docs, **expand),
        "upcoming": await expand_bookings(db, upcoming_docs, **expand),
        "counts": counts,
        "total_earnings": round(total_earnings, 2),
    }
