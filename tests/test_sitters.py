"""
Tests del directorio de cuidadores
"""
from datetime import datetime, timedelta

import pytest
from bson import ObjectId
from fastapi import status

from dogsitter.errors import NotFoundError
from dogsitter.schemas.booking import BookingCreate
from dogsitter.services import bookings, reviews, sitters
from dogsitter.utils import utcnow

from conftest import make_dog, make_sitter, make_user, window

PROFILE = {
    "bio": "Dog lover with ten years of experience walking big dogs.",
    "rate": 18,
    "address": "742 Evergreen Terrace",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62704",
    "capacity": 4,
}


def test_update_profile(client, register):
    sitter = register("sitter@example.com", role="SITTER")
    r = client.put("/sitter/profile", json=PROFILE, headers=sitter["headers"])
    assert r.status_code == status.HTTP_200_OK
    profile = r.json()
    for key, value in PROFILE.items():
        assert profile[key] == value

    assert client.get("/sitter/profile", headers=sitter["headers"]).json()["city"] == "Springfield"


@pytest.mark.parametrize("field,value", [
    ("bio", "Too short"),
    ("bio", "x" * 501),
    ("rate", 4),
    ("rate", 201),
    ("address", ""),
    ("city", ""),
    ("state", "Illinois"),
    ("state", "I"),
    ("zip_code", ""),
    ("capacity", 0),
    ("capacity", 11),
    ("capacity", 2.5),
])
def test_update_profile_validation(client, register, field, value):
    sitter = register("sitter@example.com", role="SITTER")
    r = client.put("/sitter/profile", json=dict(PROFILE, **{field: value}), headers=sitter["headers"])
    assert r.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert r.json()["detail"][0]["loc"][-1] == field


def test_update_profile_without_sitter_profile(client, register):
    owner = register("owner@example.com")
    r = client.put("/sitter/profile", json=PROFILE, headers=owner["headers"])
    assert r.status_code == status.HTTP_404_NOT_FOUND
    assert r.json()["detail"] == "Sitter profile not found"


@pytest.mark.asyncio
async def test_list_filters_and_order(db):
    _, austin_cheap = await make_sitter(db, rate=10, city="Austin", state="TX", name="A")
    _, austin_pricey = await make_sitter(db, rate=40, city="Austin", state="TX", name="B")
    _, dallas = await make_sitter(db, rate=15, city="Dallas", state="TX", name="C")
    _, portland = await make_sitter(db, rate=20, city="Portland", state="OR", name="D")

    # fechas de alta distintas para que el orden sea estable
    base = datetime(2030, 1, 1)
    for minutes, sitter_id in enumerate((austin_cheap, austin_pricey, dallas, portland)):
        await db.sitters.update_one({"_id": ObjectId(sitter_id)},
                                    {"$set": {"created_at": base + timedelta(minutes=minutes)}})

    ids = lambda items: [s["id"] for s in items]

    # más reciente primero
    assert ids(await sitters.list_sitters(db)) == [portland, dallas, austin_pricey, austin_cheap]
    assert ids(await sitters.list_sitters(db, city="Austin")) == [austin_pricey, austin_cheap]
    assert ids(await sitters.list_sitters(db, state="TX", max_rate=15)) == [dallas, austin_cheap]
    assert ids(await sitters.list_sitters(db, city="Austin", max_rate=40)) == [austin_pricey, austin_cheap]
    assert await sitters.list_sitters(db, city="Austin", state="OR") == []

    card = (await sitters.list_sitters(db, city="Portland"))[0]
    assert card["user"]["name"] == "D"
    assert card["completed_bookings"] == 0


async def _complete(db, client, sitter, sitter_id, dog, day):
    start, end = window(start=utcnow().replace(tzinfo=None) - timedelta(days=30 - day))
    b = await bookings.create_booking(
        db, client, BookingCreate(sitter_id=sitter_id, dog_ids=[dog], start_date=start, end_date=end)
    )
    await bookings.confirm_booking(db, sitter, b["id"])
    await bookings.complete_booking(db, sitter, b["id"])
    # varias completadas en el mismo milisegundo empatarían en end_date
    await db.bookings.update_one({"_id": ObjectId(b["id"])},
                                 {"$set": {"end_date": datetime(2030, 1, 1) + timedelta(hours=day)}})
    return b["id"]


@pytest.mark.asyncio
async def test_get_sitter_with_recent_completed_bookings(db):
    client = await make_user(db, name="Carla")
    sitter, sitter_id = await make_sitter(db, name="Sam")
    dog = await make_dog(db, client)

    completed = [await _complete(db, client, sitter, sitter_id, dog, day) for day in range(6)]
    await reviews.create_review(db, client, completed[-1], 5, "Wonderful")
    # una pendiente no cuenta
    start, end = window()
    await bookings.create_booking(
        db, client, BookingCreate(sitter_id=sitter_id, dog_ids=[dog], start_date=start, end_date=end)
    )

    detail = await sitters.get_sitter(db, sitter_id)
    assert detail["user"]["name"] == "Sam"
    assert detail["completed_bookings"] == 6
    recent = detail["recent_bookings"]
    assert len(recent) == 5
    # la que terminó más tarde va primero
    assert recent[0]["id"] == completed[-1]
    assert recent[0]["review"]["comment"] == "Wonderful"
    assert recent[0]["client"]["name"] == "Carla"
    assert recent[1]["review"] is None

    cards = await sitters.list_sitters(db)
    assert cards[0]["completed_bookings"] == 6


@pytest.mark.asyncio
async def test_get_unknown_sitter(db):
    for sitter_id in ("507f1f77bcf86cd799439011", "nope"):
        with pytest.raises(NotFoundError):
            await sitters.get_sitter(db, sitter_id)


@pytest.mark.asyncio
async def test_dashboard(db):
    client = await make_user(db, name="Carla")
    sitter, sitter_id = await make_sitter(db, rate=10)
    dog = await make_dog(db, client)

    now = utcnow()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)

    def create(start, hours=2):
        s, e = window(hours=hours, start=start)
        return bookings.create_booking(
            db, client, BookingCreate(sitter_id=sitter_id, dog_ids=[dog], start_date=s, end_date=e)
        )

    todays = await create(today + timedelta(minutes=1))
    upcoming = await create(today + timedelta(days=3))
    await bookings.confirm_booking(db, sitter, upcoming["id"])
    done = await create(today - timedelta(days=10), hours=3)
    await bookings.confirm_booking(db, sitter, done["id"])
    await bookings.complete_booking(db, sitter, done["id"])

    board = await sitters.dashboard(db, sitter)
    assert [b["id"] for b in board["today"]] == [todays["id"]]
    assert [b["id"] for b in board["pending"]] == [todays["id"]]
    assert [b["id"] for b in board["upcoming"]] == [upcoming["id"]]
    assert board["counts"] == {"PENDING": 1, "CONFIRMED": 1, "COMPLETED": 1, "CANCELLED": 0}
    assert board["total_earnings"] == pytest.approx(30.0)


def test_sitter_endpoints(client, register):
    sitter = register("sitter@example.com", role="SITTER")
    client.put("/sitter/profile", json=PROFILE, headers=sitter["headers"])
    sitter_id = client.get("/sitter/profile", headers=sitter["headers"]).json()["id"]

    listed = client.get("/sitters", params={"city": "Springfield", "max_rate": 20}).json()
    assert [s["id"] for s in listed] == [sitter_id]
    assert listed[0]["user"]["email"] == "sitter@example.com"
    assert client.get("/sitters", params={"max_rate": 10}).json() == []

    detail = client.get(f"/sitters/{sitter_id}")
    assert detail.status_code == status.HTTP_200_OK
    assert detail.json()["recent_bookings"] == []
    assert client.get("/sitters/507f1f77bcf86cd799439011").status_code == status.HTTP_404_NOT_FOUND

    board = client.get("/sitter/dashboard", headers=sitter["headers"])
    assert board.status_code == status.HTTP_200_OK
    assert board.json()["total_earnings"] == 0
