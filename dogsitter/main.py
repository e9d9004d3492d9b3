from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
import logging

from .config import get_settings
from .errors import DomainError
from .routers import auth, bookings, dogs, reviews, sitters, users

settings = get_settings()

# Configurar logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Configurar rate limiting
limiter = Limiter(key_func=get_remote_address)

app = FastAPI(title=settings.app_name)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    body = {"detail": exc.message}
    if exc.details is not None:
        body["errors"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # nada de detalles internos hacia el cliente
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Configuración de CORS según entorno
if settings.env == "dev":
    # Desarrollo: más permisivo para facilitar desarrollo
    cors_origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    cors_regex = r"https?://(localhost|127\.0\.0\.1)(:\d+)?"
    cors_headers = ["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With"]
else:
    # Producción: restrictivo - solo orígenes específicos
    frontend_url = settings.frontend_base_url
    cors_origins = [frontend_url] if frontend_url else []
    cors_regex = None
    cors_headers = ["Authorization", "Content-Type", "Accept"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_origin_regex=cors_regex,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=cors_headers,
    expose_headers=["Content-Type"],
)

@app.get("/health")
async def health():
    return {"status": "ok", "env": settings.env}

# Routers
app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(users.router, prefix="/user", tags=["user"])
app.include_router(dogs.router, prefix="/dogs", tags=["dogs"])
app.include_router(sitters.router, prefix="/sitters", tags=["sitters"])
app.include_router(sitters.profile_router, prefix="/sitter", tags=["sitter"])
app.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
app.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
