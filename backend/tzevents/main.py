"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tzevents.config import settings
from tzevents.database import Base, engine
from tzevents.errors import FieldError, TzEventsError
from tzevents.schemas.error import ErrorOut

# Import routers
from tzevents.routers import events, profiles, timezones

# Import all models so Base.metadata knows about them
import tzevents.models  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Timezone Event Manager",
    description="Profiles and events stored in UTC, rendered per viewer timezone, with field-level change history",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(profiles.router, prefix="/api/profiles", tags=["Profiles"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(timezones.router, prefix="/api/timezones", tags=["Timezones"])


def _error_body(message: str, code: str, errors: list[FieldError]) -> dict:
    body = ErrorOut(error=message, error_code=code, errors=[e.to_dict() for e in errors])
    return body.model_dump(by_alias=True)


@app.exception_handler(TzEventsError)
async def domain_error_handler(request: Request, exc: TzEventsError) -> JSONResponse:
    """Map domain errors to their HTTP status with field-level detail."""
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.error_code, exc.errors),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are reported like any other field error (400)."""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if not isinstance(part, int)]
        field = loc[1] if len(loc) > 1 else (loc[0] if loc else "body")
        errors.append(FieldError(field, err.get("msg", "Invalid value")))
    return JSONResponse(status_code=400, content=_error_body("Validation failed", "VALIDATION_FAILED", errors))


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
