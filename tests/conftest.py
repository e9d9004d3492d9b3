"""
Configuración de pytest para tests

La base de datos es un Motor en memoria (mongomock-motor) inyectado con
dependency_overrides, así que no hace falta un MongoDB real.
"""
from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from dogsitter.db import ensure_indexes, get_db
from dogsitter.security import Principal
from dogsitter.utils import utcnow

TEST_DB_NAME = "dogsitter_test"


@pytest.fixture
def mongo():
    """Base de datos vacía para cada test"""
    return AsyncMongoMockClient()[TEST_DB_NAME]


@pytest.fixture
async def db(mongo):
    """La misma base de datos con los índices creados (tests de servicios)"""
    await ensure_indexes(mongo)
    return mongo


@pytest.fixture
def client(mongo):
    """Cliente de test de FastAPI apuntando a la base de datos en memoria"""
    from dogsitter.main import app

    async def _test_db():
        await ensure_indexes(mongo)
        return mongo

    # Deshabilitar rate limiting
    app.state.limiter = None
    app.dependency_overrides[get_db] = _test_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """
    Registra un usuario, hace login y devuelve sus datos junto con las
    cabeceras de autorización.
    """
    def _register(email: str, role: str = "CLIENT", **extra):
        payload = {"name": email.split("@")[0].title(), "email": email, "password": "password123", "role": role}
        payload.update(extra)
        r = client.post("/auth/signup", json=payload)
        assert r.status_code == 201, r.text
        r = client.post("/auth/login", json={"email": email, "password": "password123"})
        assert r.status_code == 200, r.text
        headers = {"Authorization": f"Bearer {r.json()['access_token']}"}
        return {"user": client.get("/user/me", headers=headers).json(), "headers": headers}

    return _register


@pytest.fixture
def dog_payload():
    return {
        "name": "Luna",
        "breed": "Beagle",
        "age": 3,
        "weight": 12.5,
        "vaccinated": True,
        "neutered": False,
        "friendly": True,
        "notes": "Afraid of thunder",
    }


def iso(dt: datetime) -> str:
    return dt.replace(tzinfo=timezone.utc).isoformat() if dt.tzinfo is None else dt.isoformat()


# ---------- helpers para tests de servicios (sin HTTP ni bcrypt) ----------

async def make_user(db, role: str = "CLIENT", name: str = "User") -> Principal:
    res = await db.users.insert_one({
        "name": name,
        "email": f"{name.lower()}-{ObjectId()}@example.com",
        "password_hash": "",
        "role": role,
        "created_at": utcnow(),
    })
    return Principal(id=str(res.inserted_id), role=role, name=name)


async def make_sitter(db, rate: float = 10, city: str = "Austin", state: str = "TX", name: str = "Sitter"):
    """Devuelve (principal, sitter_id)"""
    me = await make_user(db, "SITTER", name)
    res = await db.sitters.insert_one({
        "user_id": me.id,
        "bio": "Experienced with large and small dogs alike.",
        "address": "1 Main St",
        "city": city,
        "state": state,
        "zip_code": "78701",
        "rate": rate,
        "capacity": 2,
        "created_at": utcnow(),
        "updated_at": utcnow(),
    })
    return me, str(res.inserted_id)


async def make_dog(db, owner: Principal, name: str = "Luna") -> str:
    res = await db.dogs.insert_one({
        "name": name,
        "breed": "Beagle",
        "age": 3,
        "weight": 12.5,
        "vaccinated": True,
        "neutered": False,
        "friendly": True,
        "owner_id": owner.id,
        "created_at": utcnow(),
        "updated_at": utcnow(),
    })
    return str(res.inserted_id)


def window(hours: float = 2, start: datetime | None = None):
    start = start or datetime(2030, 6, 1, 9, 0, tzinfo=timezone.utc)
    return start, start + timedelta(hours=hours)
