# tutordesk/backend/main.py
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import asyncpg
import logging

from slowapi.errors import RateLimitExceeded

from .config.config import settings
from .api import students, attendance, payments, dashboard
from .db.schema import create_schema
from .logging.logging_config import setup_logging
from .services.errors import StorageError
from .api.utilities.limiter import limiter

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Uygulama başlatıldığında ve durdurulduğunda çalışacak olan yaşam döngüsü yöneticisi.
    """
    setup_logging()
    app.state.limiter = limiter

    logger.info("Uygulama başlatılıyor...")

    try:
        postgres_pool = await asyncpg.create_pool(
            dsn=settings.DATABASE_URL,
            min_size=settings.DB_POOL_MIN_SIZE,
            max_size=settings.DB_POOL_MAX_SIZE,
        )
        app.state.postgres_pool = postgres_pool
        logger.info("PostgreSQL bağlantı havuzu başarıyla oluşturuldu.")

        if settings.DB_BOOTSTRAP:
            await create_schema(postgres_pool)
    except Exception as e:
        logger.error(f"HATA: Başlangıç sırasında bir hata oluştu: {e}", exc_info=True)
        # Requests will fail with 500 until the database is reachable.
        app.state.postgres_pool = None

    yield

    logger.info("Uygulama kapatılıyor...")
    if getattr(app.state, "postgres_pool", None):
        await app.state.postgres_pool.close()
        logger.info("PostgreSQL bağlantı havuzu kapatıldı.")


app = FastAPI(
    title="TutorDesk API",
    description="Student attendance and payment tracker for tutoring businesses",
    version=API_VERSION,
    lifespan=lifespan
)
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error responses: every failure is rendered as {"message": ...} ---

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": "; ".join(problems)})


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError):
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"message": str(exc)})


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(status_code=status.HTTP_429_TOO_MANY_REQUESTS, content={"message": f"Rate limit exceeded: {exc.detail}"})


@app.exception_handler(Exception)
async def unexpected_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"message": "An unexpected server error occurred."})


# API router'larını uygulamaya dahil et
app.include_router(students.router, prefix=settings.API_PREFIX)
app.include_router(attendance.router, prefix=settings.API_PREFIX)
app.include_router(payments.router, prefix=settings.API_PREFIX)
app.include_router(dashboard.router, prefix=settings.API_PREFIX)


@app.get("/", tags=["System"])
def read_root():
    return {"message": "Student Attendance & Payment Tracker API", "version": API_VERSION}


@app.get("/health", tags=["System"])
def health_check():
    """Uygulamanın ayakta olup olmadığını kontrol etmek için basit bir endpoint."""
    return {"status": "ok"}
