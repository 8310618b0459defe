"""Application wiring for the Asset Portal API.

Brings together configuration, database setup, middleware, error handling and
the API routers. Tables are created and migrated on import so a fresh data
directory is usable straight away.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.errors import (
    AssetPortalError,
    domain_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from .db.migrate import run_migrations
from .db.session import Base, engine
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware

# Registers the tables with the metadata before create_all.
from .models import asset as _asset  # noqa: F401
from .models import event as _event  # noqa: F401
from .models import items as _items  # noqa: F401

app = FastAPI(title=settings.APP_NAME)

Base.metadata.create_all(bind=engine)
run_migrations(engine)

# ---------- Middleware ----------
app.add_middleware(SecurityHeadersMiddleware)
if settings.ALLOWED_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
# Added last so it wraps everything else and every log line carries the id.
app.add_middleware(RequestIdMiddleware)

# ---------- Routers ----------
from .routers import api_assets as api_assets_router  # noqa: E402

app.include_router(api_assets_router.router)

from .routers import api_archive as api_archive_router  # noqa: E402

app.include_router(api_archive_router.router)

from .routers import api_events as api_events_router  # noqa: E402

app.include_router(api_events_router.router)

# ---------- Exception handling ----------
app.add_exception_handler(AssetPortalError, domain_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["app"]
