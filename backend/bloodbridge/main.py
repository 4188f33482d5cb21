"""Blood Bridge - Blood Donor Matching API."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bloodbridge.config import get_settings
from bloodbridge.errors import register_exception_handlers

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: create tables, seed hospitals, build outbound clients
    from bloodbridge.database import Base, engine, get_db_context
    from bloodbridge.services.geocoding import build_geocoder
    from bloodbridge.services.hospital_loader import load_hospital_configs

    # Import all models so they're registered with Base
    from bloodbridge import models  # noqa: F401

    # SQLite file databases need their directory to exist
    if engine.url.get_backend_name() == "sqlite" and engine.url.database not in (None, "", ":memory:"):
        Path(engine.url.database).parent.mkdir(parents=True, exist_ok=True)

    Base.metadata.create_all(bind=engine)

    with get_db_context() as db:
        load_hospital_configs(db)

    app.state.geocoder = build_geocoder(settings)

    yield
    # Shutdown: cleanup if needed


app = FastAPI(
    title=settings.app_name,
    description="Match blood donors to blood requests from hospitals and patients",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}


# Import and include routers
from bloodbridge.api import donors, maps, notifications, requests  # noqa: E402

app.include_router(requests.router, prefix="/api")
app.include_router(donors.router, prefix="/api")
app.include_router(notifications.router, prefix="/api")
app.include_router(maps.router, prefix="/api")
