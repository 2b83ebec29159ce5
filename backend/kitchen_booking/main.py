import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from .config import settings
from .database import engine
from .errors import BookingError
from .models import Base
from .redis_client import redis_client
from .routers import availability, bookings, kitchens

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.create_tables:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created")
    yield


app = FastAPI(title="Kitchen Booking API", lifespan=lifespan)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health")
def health():
    redis_ok = False
    if settings.slots_cache_enabled:
        try:
            redis_ok = redis_client.ping()
        except RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
    return {"status": "ok", "redis": redis_ok}


app.include_router(kitchens.router)
app.include_router(bookings.router)
app.include_router(availability.router)
