"""
Main entry point for the Bondline API.

This module defines the FastAPI application and includes all routers.
On startup, it creates the database tables defined in the models.  For local
development the application uses a SQLite database, but the engine can be
swapped out for PostgreSQL by setting `DATABASE_URL`.
"""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .database import Base, engine
from .errors import EngineError
from .routers import accounts, admin, auth, events, market, trades

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create database tables on startup.  In production you would use Alembic
# migrations instead of automatic creation.
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Bondline API", version="0.1.0")

app.include_router(accounts.router, prefix="/accounts", tags=["accounts"])
app.include_router(auth.router, tags=["auth"])
app.include_router(trades.router)
app.include_router(market.router)
app.include_router(admin.router)
app.include_router(events.router)


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
    """Render engine errors as `{"detail": ..., "error": ...}`."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": exc.__class__.__name__},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Return a simple status indicator.

    This endpoint can be used by load balancers or uptime monitoring services
    to verify that the API is running.
    """
    return {"status": "ok"}
