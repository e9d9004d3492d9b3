"""
Ciclo de vida de las reservas.

    PENDING -> CONFIRMED -> COMPLETED
    PENDING | CONFIRMED -> CANCELLED

COMPLETED y CANCELLED son finales. Cada transición se escribe con un único
find_one_and_update filtrado por el estado leído, así que de dos peticiones
concurrentes sobre la misma reserva solo una puede ganar; la otra recibe
ConflictError.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ..errors import ConflictError, InvalidTransition, NotFoundError, PermissionDenied, ValidationFailed
from ..schemas.booking import BookingCreate, BookingStatus
from ..security import Principal
from ..utils import is_object_id, to_id, to_naive_utc, to_object_id, utcnow

logger = logging.getLogger(__name__)

ALLOWED: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.pending: {BookingStatus.confirmed, BookingStatus.cancelled},
    BookingStatus.confirmed: {BookingStatus.completed, BookingStatus.cancelled},
    BookingStatus.completed: set(),
    BookingStatus.cancelled: set(),
}

TRANSITION_ERRORS: dict[BookingStatus, str] = {
    BookingStatus.confirmed: "Only pending bookings can be confirmed",
    BookingStatus.completed: "Only confirmed bookings can be completed",
    BookingStatus.cancelled: "Only pending or confirmed bookings can be cancelled",
}

# orden del listado del cuidador
STATUS_ORDER = [
    BookingStatus.pending.value,
    BookingStatus.confirmed.value,
    BookingStatus.completed.value,
    BookingStatus.cancelled.value,
]

# resumen del panel del cliente
UPCOMING_LIMIT = 5


def compute_total_price(start: datetime, end: datetime, rate: float) -> float:
    """Horas (nunca negativas) por la tarifa horaria del cuidador."""
    hours = max(0.0, (end - start).total_seconds() / 3600)
    return hours * float(rate)


def _dog_snapshot(dog: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(dog["_id"]),
        "name": dog.get("name", ""),
        "breed": dog.get("breed", ""),
        "age": dog.get("age"),
        "weight": dog.get("weight"),
    }


def _brief(u: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not u:
        return None
    return {"id": str(u["_id"]), "name": u.get("name"), "email": u.get("email"), "image": u.get("image")}


async def _users_by_id(db: AsyncIOMotorDatabase, ids: set) -> Dict[str, Dict[str, Any]]:
    oids = [ObjectId(i) for i in ids if is_object_id(i)]
    if not oids:
        return {}
    users = await db.users.find({"_id": {"$in": oids}}).to_list(1000)
    return {str(u["_id"]): u for u in users}


async def expand_bookings(
    db: AsyncIOMotorDatabase,
    docs: List[Dict[str, Any]],
    *,
    sitter: bool = False,
    client: bool = False,
    review: bool = False,
) -> List[Dict[str, Any]]:
    """
    Serializa reservas añadiendo las relaciones pedidas (cuidador con su
    usuario, cliente, reseña). Carga cada colección una sola vez por lote.
    """
    if not docs:
        return []

    sitters_by_id: Dict[str, Dict[str, Any]] = {}
    if sitter:
        sitter_oids = [ObjectId(d["sitter_id"]) for d in docs if is_object_id(d.get("sitter_id"))]
        found = await db.sitters.find({"_id": {"$in": sitter_oids}}).to_list(1000)
        sitters_by_id = {str(s["_id"]): s for s in found}

    user_ids: set = set()
    if client:
        user_ids |= {d.get("client_id") for d in docs}
    if sitter:
        user_ids |= {s.get("user_id") for s in sitters_by_id.values()}
    users = await _users_by_id(db, user_ids)

    reviews_by_booking: Dict[str, Dict[str, Any]] = {}
    if review:
        booking_ids = [str(d["_id"]) for d in docs]
        found = await db.reviews.find({"booking_id": {"$in": booking_ids}}).to_list(1000)
        reviews_by_booking = {r["booking_id"]: r for r in found}

    out: List[Dict[str, Any]] = []
    for d in docs:
        item = to_id(d)
        if sitter:
            s = sitters_by_id.get(d.get("sitter_id"))
            if s:
                item["sitter"] = {
                    "id": str(s["_id"]),
                    "rate": s.get("rate", 0),
                    "city": s.get("city", ""),
                    "state": s.get("state", ""),
                    "user": _brief(users.get(s.get("user_id"))) or {},
                }
        if client:
            item["client"] = _brief(users.get(d.get("client_id")))
        if review:
            r = reviews_by_booking.get(item["id"])
            item["review"] = to_id(r) if r else None
        out.append(item)
    return out


async def _expand_one(db: AsyncIOMotorDatabase, doc: Dict[str, Any], **kwargs) -> Dict[str, Any]:
    return (await expand_bookings(db, [doc], **kwargs))[0]


# -------------------- Creación --------------------

async def create_booking(db: AsyncIOMotorDatabase, me: Principal, payload: BookingCreate) -> Dict[str, Any]:
    # todos los perros deben existir y ser del cliente; si falla uno, no se crea nada
    if not all(is_object_id(i) for i in payload.dog_ids):
        raise ValidationFailed("Invalid dog selection")
    # forma canónica (hex en minúsculas) para comparar y guardar
    dog_ids = [str(ObjectId(i)) for i in payload.dog_ids]
    if len(set(dog_ids)) != len(dog_ids):
        raise ValidationFailed("Invalid dog selection")
    dogs = await db.dogs.find({
        "_id": {"$in": [ObjectId(i) for i in dog_ids]},
        "owner_id": me.id,
    }).to_list(len(dog_ids))
    if len(dogs) != len(dog_ids):
        logger.warning(f"User {me.id} tried to book with dogs they do not own: {dog_ids}")
        raise ValidationFailed("Invalid dog selection")

    sitter = await db.sitters.find_one({"_id": to_object_id(payload.sitter_id, "Sitter")})
    if not sitter:
        raise NotFoundError("Sitter not found")

    start = to_naive_utc(payload.start_date)
    end = to_naive_utc(payload.end_date)
    # sin comprobar end > start ni solapes: una duración negativa cuesta 0
    total_price = compute_total_price(start, end, sitter.get("rate", 0))

    # mantener el orden pedido por el cliente
    dogs_by_id = {str(d["_id"]): d for d in dogs}
    now = utcnow()
    doc = {
        "client_id": me.id,
        "sitter_id": str(sitter["_id"]),
        "dog_ids": dog_ids,
        "dogs": [_dog_snapshot(dogs_by_id[i]) for i in dog_ids],
        "start_date": start,
        "end_date": end,
        "status": BookingStatus.pending.value,
        "total_price": total_price,
        "notes": payload.notes,
        "created_at": now,
        "updated_at": now,
    }
    res = await db.bookings.insert_one(doc)
    created = await db.bookings.find_one({"_id": res.inserted_id})
    logger.info(f"Booking {res.inserted_id} created by {me.id} for sitter {doc['sitter_id']} ({total_price:.2f})")
    return await _expand_one(db, created, sitter=True)


# -------------------- Transiciones --------------------

async def _load_booking(db: AsyncIOMotorDatabase, booking_id: str) -> Dict[str, Any]:
    booking = await db.bookings.find_one({"_id": to_object_id(booking_id, "Booking")})
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


async def _load_for_sitter(db: AsyncIOMotorDatabase, me: Principal, booking_id: str) -> Dict[str, Any]:
    sitter = await db.sitters.find_one({"user_id": me.id})
    if not sitter:
        raise NotFoundError("Sitter profile not found")
    booking = await _load_booking(db, booking_id)
    if booking.get("sitter_id") != str(sitter["_id"]):
        logger.warning(f"User {me.id} tried to change booking {booking_id} of another sitter")
        raise PermissionDenied("This booking belongs to another sitter")
    return booking


async def _transition(
    db: AsyncIOMotorDatabase,
    booking: Dict[str, Any],
    new: BookingStatus,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    try:
        old = BookingStatus(booking.get("status"))
    except ValueError:
        raise InvalidTransition(f"Invalid booking status: {booking.get('status')}")

    if new not in ALLOWED[old]:
        raise InvalidTransition(TRANSITION_ERRORS[new])

    updates = {"status": new.value, "updated_at": utcnow()}
    if extra:
        updates.update(extra)

    # compare-and-swap: solo escribe si el estado sigue siendo el leído
    updated = await db.bookings.find_one_and_update(
        {"_id": booking["_id"], "status": old.value},
        {"$set": updates},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        logger.warning(f"Booking {booking['_id']} changed while moving {old.value} -> {new.value}")
        raise ConflictError("Booking was modified concurrently")

    logger.info(f"Booking {booking['_id']}: {old.value} -> {new.value}")
    return updated


async def confirm_booking(db: AsyncIOMotorDatabase, me: Principal, booking_id: str) -> Dict[str, Any]:
    booking = await _load_for_sitter(db, me, booking_id)
    updated = await _transition(db, booking, BookingStatus.confirmed)
    return to_id(updated)


async def complete_booking(db: AsyncIOMotorDatabase, me: Principal, booking_id: str) -> Dict[str, Any]:
    booking = await _load_for_sitter(db, me, booking_id)
    # end_date pasa a ser la hora real de fin; total_price no se recalcula
    updated = await _transition(db, booking, BookingStatus.completed, {"end_date": utcnow()})
    return to_id(updated)


async def cancel_booking(db: AsyncIOMotorDatabase, me: Principal, booking_id: str) -> Dict[str, Any]:
    booking = await _load_booking(db, booking_id)
    if booking.get("client_id") != me.id:
        logger.warning(f"User {me.id} tried to cancel booking {booking_id} of another client")
        raise PermissionDenied("Only the client can cancel this booking")
    updated = await _transition(db, booking, BookingStatus.cancelled)
    return to_id(updated)


# -------------------- Lecturas --------------------

async def list_for_client(db: AsyncIOMotorDatabase, me: Principal) -> List[Dict[str, Any]]:
    docs = await db.bookings.find({"client_id": me.id}).sort("start_date", -1).to_list(500)
    return await expand_bookings(db, docs, sitter=True, review=True)


async def upcoming_for_client(db: AsyncIOMotorDatabase, me: Principal) -> List[Dict[str, Any]]:
    """Próximas reservas activas del cliente, de la más cercana a la más lejana."""
    docs = await db.bookings.find({
        "client_id": me.id,
        "status": {"$in": [BookingStatus.pending.value, BookingStatus.confirmed.value]},
        "start_date": {"$gte": utcnow()},
    }).sort("start_date", 1).limit(UPCOMING_LIMIT).to_list(UPCOMING_LIMIT)
    return await expand_bookings(db, docs, sitter=True)


async def list_for_sitter(db: AsyncIOMotorDatabase, me: Principal) -> List[Dict[str, Any]]:
    sitter = await db.sitters.find_one({"user_id": me.id})
    if not sitter:
        raise NotFoundError("Sitter profile not found")
    docs = await db.bookings.find({"sitter_id": str(sitter["_id"])}).sort("start_date", -1).to_list(500)
    # sort estable: dentro de cada estado se mantiene start_date desc
    docs.sort(key=lambda d: STATUS_ORDER.index(d["status"]) if d.get("status") in STATUS_ORDER else len(STATUS_ORDER))
    return await expand_bookings(db, docs, client=True, review=True)


async def get_booking(db: AsyncIOMotorDatabase, me: Principal, booking_id: str) -> Dict[str, Any]:
    booking = await _load_booking(db, booking_id)
    if booking.get("client_id") != me.id:
        sitter = await db.sitters.find_one({"user_id": me.id})
        if not sitter or booking.get("sitter_id") != str(sitter["_id"]):
            raise PermissionDenied("You do not have access to this booking")
    return await _expand_one(db, booking, sitter=True, client=True, review=True)
