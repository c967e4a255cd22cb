import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _create_tables() -> None:
    """Create missing tables (local development only; use Alembic otherwise)."""
    import app.models  # noqa: F401  (registers every model on Base.metadata)
    from app.database import Base, engine

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured on %s", engine.url.render_as_string(hide_password=True))


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: load the reference tables once so a broken CSV fails fast
    from app.services.activity_catalog import get_activity_catalog
    from app.services.location_registry import get_location_registry

    registry = get_location_registry()
    catalog = get_activity_catalog()
    logger.info(
        "Reference data ready: %d provinces, %d hospitals, %d catalog programs",
        len(registry.list_provinces()), len(registry.list_hospitals()), len(catalog.programs()),
    )

    if settings.CREATE_TABLES_ON_STARTUP:
        _create_tables()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "app": settings.APP_NAME}


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

from app.routers import auth  # noqa: E402

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])

# Dropdown sources: provinces, districts, hospitals, catalog
from app.routers import locations  # noqa: E402

app.include_router(
    locations.router,
    prefix="/api/locations",
    tags=["Locations"],
)

# Saved user location and facility context
from app.routers import onboarding  # noqa: E402

app.include_router(
    onboarding.router,
    prefix="/api/onboarding",
    tags=["Onboarding"],
)

# Plans and activities
from app.routers import plans  # noqa: E402

app.include_router(
    plans.router,
    prefix="/api/plans",
    tags=["Plans"],
)

# Financial reports (JSON + Excel)
from app.routers import reports  # noqa: E402

app.include_router(
    reports.router,
    prefix="/api/reports",
    tags=["Reports"],
)
