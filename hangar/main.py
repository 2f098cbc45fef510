import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from .config import settings
from .database import engine
from .errors import HangarError
from .models import Base
from .redis_client import redis_client
from .routers import appointments, businesses, customers, expenses, metrics, public, services

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Alembic owns the schema in production; this only fills an empty dev DB
    Base.metadata.create_all(bind=engine)
    logger.info(f"Hangar API started (redis={'on' if redis_client else 'off'})")
    yield


app = FastAPI(title="Hangar Booking API", lifespan=lifespan)


@app.exception_handler(HangarError)
async def hangar_error_handler(request: Request, exc: HangarError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health")
def health():
    if redis_client is None:
        return {"status": "ok", "redis": None}
    try:
        return {"status": "ok", "redis": redis_client.ping()}
    except RedisError:
        logger.warning("Health check: Redis unreachable")
        return {"status": "degraded", "redis": False}


app.include_router(businesses.router)
app.include_router(services.router)
app.include_router(customers.router)
app.include_router(appointments.router)
app.include_router(public.router)
app.include_router(expenses.router)
app.include_router(metrics.router)
