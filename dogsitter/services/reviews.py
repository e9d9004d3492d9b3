import logging
from typing import Any, Dict

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from ..errors import ConflictError, InvalidTransition, NotFoundError, PermissionDenied, ValidationFailed
from ..schemas.booking import BookingStatus
from ..security import Principal
from ..utils import to_id, to_object_id, utcnow

logger = logging.getLogger(__name__)


def _valid_rating(value: Any) -> bool:
    # bool es subclase de int y no es una puntuación
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 5


async def create_review(
    db: AsyncIOMotorDatabase,
    me: Principal,
    booking_id: Any,
    rating: Any,
    comment: Any,
) -> Dict[str, Any]:
    """
    Reseña única (1-5 + comentario) de una reserva completada, escrita por su cliente.
    """
    if (
        not booking_id
        or not isinstance(booking_id, str)
        or not _valid_rating(rating)
        or not isinstance(comment, str)
        or not comment.strip()
    ):
        raise ValidationFailed("Missing or invalid fields")

    booking = await db.bookings.find_one({"_id": to_object_id(booking_id, "Booking")})
    if not booking:
        raise NotFoundError("Booking not found")
    # el id canónico, no el texto recibido: de él dependen el índice único y las búsquedas
    booking_id = str(booking["_id"])

    if booking.get("client_id") != me.id:
        logger.warning(f"User {me.id} tried to review booking {booking_id} of another client")
        raise PermissionDenied("Only the client can review this booking")

    if booking.get("status") != BookingStatus.completed.value:
        raise InvalidTransition("Can only review completed bookings")

    if await db.reviews.find_one({"booking_id": booking_id}):
        raise ConflictError("Review already exists")

    doc = {
        "booking_id": booking_id,
        "rating": rating,
        "comment": comment.strip(),
        "created_at": utcnow(),
    }
    try:
        res = await db.reviews.insert_one(doc)
    except DuplicateKeyError:
        # otra petición la insertó entre la comprobación y el insert
        raise ConflictError("Review already exists")

    doc["_id"] = res.inserted_id
    logger.info(f"Review {res.inserted_id} created for booking {booking_id}")
    return to_id(doc)
