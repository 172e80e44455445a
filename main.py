import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from errors import (
    Conflict,
    ConcurrentModification,
    Forbidden,
    InvalidTransition,
    NotFound,
    PersistenceError,
    ServiceError,
    TerminalStateViolation,
    ValidationError,
)
from logging_config import setup_logging
from routes import admin, auth, requests, technicians
from services.access_policy import UNAUTHENTICATED

logger = logging.getLogger(__name__)

# Most specific classes first; the first match wins
ERROR_STATUS = [
    (TerminalStateViolation, 409),
    (InvalidTransition, 409),
    (ConcurrentModification, 409),
    (PersistenceError, 503),
    (NotFound, 404),
    (Conflict, 400),
    (ValidationError, 400),
    (Forbidden, 403),
]


def status_for(exc: ServiceError) -> int:
    if isinstance(exc, Forbidden) and exc.reason == UNAUTHENTICATED:
        return 401
    for error_class, status_code in ERROR_STATUS:
        if isinstance(exc, error_class):
            return status_code
    return 500


async def service_error_handler(request: Request, exc: ServiceError):
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": exc.kind, "reason": exc.reason},
    )


def create_app() -> FastAPI:
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(title=settings.project_name, version=settings.api_version)

    app.include_router(auth.router)
    app.include_router(requests.router)
    app.include_router(technicians.router)
    app.include_router(admin.router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ServiceError, service_error_handler)

    @app.get("/")
    def home():
        return {"message": "Home Services API is live", "version": app.version}

    return app


app = create_app()


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")), log_level="info")
