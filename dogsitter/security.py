from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId

from .config import get_settings
from .db import get_db

settings = get_settings()
ALGO = "HS256"
pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


@dataclass(frozen=True)
class Principal:
    """Usuario autenticado que se pasa explícitamente a cada operación."""
    id: str
    role: str
    name: str = ""
    email: str = ""

    @property
    def is_client(self) -> bool:
        return self.role == "CLIENT"

    @property
    def is_sitter(self) -> bool:
        return self.role == "SITTER"


def hash_password(plain: str) -> str:
    return pwd.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd.verify(plain, hashed)


def create_access_token(user_id: str, role: str, expires_hours: Optional[int] = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(hours=expires_hours or settings.jwt_expires_hours)
    payload = {"sub": user_id, "role": role, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGO)


async def get_current_user_id(token: str = Depends(oauth2_scheme)) -> str:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGO])
        sub = payload.get("sub")
        if not sub:
            raise HTTPException(status_code=401, detail="Invalid token")
        return str(sub)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")


async def get_current_user(
    db: AsyncIOMotorDatabase = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> Principal:
    # el token puede sobrevivir a la cuenta borrada
    if not ObjectId.is_valid(user_id):
        raise HTTPException(status_code=401, detail="Invalid token")
    doc = await db.users.find_one({"_id": ObjectId(user_id)})
    if not doc:
        raise HTTPException(status_code=401, detail="User not found")
    return Principal(
        id=str(doc["_id"]),
        role=doc.get("role", "CLIENT"),
        name=doc.get("name") or "",
        email=doc.get("email") or "",
    )
