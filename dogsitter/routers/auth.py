from fastapi import APIRouter, Depends, status, Request
from motor.motor_asyncio import AsyncIOMotorDatabase
from ..db import get_db
from ..schemas.user import Signup, Login, Token, UserOut
from ..services import accounts
from ..middleware.rate_limit import apply_rate_limit

router = APIRouter()

@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=UserOut)
async def signup(request: Request, payload: Signup, db: AsyncIOMotorDatabase = Depends(get_db)):
    # Rate limiting: máximo 5 registros por minuto por IP
    apply_rate_limit(request, "5/minute")
    return await accounts.signup(db, payload)

@router.post("/login", response_model=Token)
async def login(request: Request, payload: Login, db: AsyncIOMotorDatabase = Depends(get_db)):
    # Rate limiting: máximo 10 intentos de login por minuto por IP
    apply_rate_limit(request, "10/minute")
    token = await accounts.login(db, payload.email, payload.password)
    return {"access_token": token, "token_type": "bearer"}
