# dogsitter/utils.py
from typing import Any, Dict, Optional
from bson import ObjectId
from datetime import datetime, timezone

from .errors import NotFoundError

def to_id(doc: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Convierte _id -> id (str) y todos los ObjectIds a strings.
    Los datetime se devuelven como ISO con zona UTC.
    Si doc es None, devuelve {}.
    """
    if doc is None:
        return {}
    d = dict(doc)

    if "_id" in d:
        d["id"] = str(d.pop("_id"))

    for key, value in d.items():
        if isinstance(value, ObjectId):
            d[key] = str(value)
        elif isinstance(value, datetime):
            d[key] = as_utc(value).isoformat()
        elif isinstance(value, dict):
            d[key] = to_id(value)
        elif isinstance(value, list):
            d[key] = [
                str(item) if isinstance(item, ObjectId)
                else as_utc(item).isoformat() if isinstance(item, datetime)
                else to_id(item) if isinstance(item, dict)
                else item
                for item in value
            ]

    return d

# ==================== Fechas ====================

def utcnow() -> datetime:
    """Hora actual en UTC sin tzinfo, que es como Mongo guarda las fechas."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def to_naive_utc(value: datetime) -> datetime:
    return as_utc(value).replace(tzinfo=None)

# ==================== Utilidades de Base de Datos ====================

def to_object_id(value: str, field_name: str = "id") -> ObjectId:
    """
    Convierte un string a ObjectId con validación.
    Un id mal formado no puede existir, así que se trata como no encontrado.
    """
    if not ObjectId.is_valid(value):
        raise NotFoundError(f"{field_name} not found")
    return ObjectId(value)

def is_object_id(value: Any) -> bool:
    return isinstance(value, str) and ObjectId.is_valid(value)
