from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from partyhub.api.errors import register_exception_handlers
from partyhub.api.health import router as health_router
from partyhub.api.v1.router import router as v1_router
from partyhub.core.config import settings
from partyhub.core.logging import configure_logging
from partyhub.db import engine, is_sqlite
from partyhub.middleware.rate_limit import RateLimitMiddleware
from partyhub.middleware.request_id import RequestIdMiddleware
from partyhub.models import Base

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Postgres schemas are migrated out of band; SQLite is for local runs and tests
    if is_sqlite():
        Base.metadata.create_all(bind=engine)
    logger.info("app_started", env=settings.env, auth_mode=settings.auth_mode)
    yield


app = FastAPI(title="PartyHub API", lifespan=lifespan)

# Starlette runs the LAST added middleware FIRST (outermost).
# RequestId wraps everything, CORS answers preflight, RateLimit sits closest to the app.
app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)

register_exception_handlers(app)

Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)


@app.get("/")
def root():
    return {"name": "PartyHub API", "status": "ok"}


app.include_router(health_router)
app.include_router(v1_router, prefix="/v1")
