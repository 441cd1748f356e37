import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from invoice_analytics.core.config import settings
from invoice_analytics.core.database import engine
from invoice_analytics.core.sessions import ChatSessionStore, session_store
from invoice_analytics.api.router import api_router

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


async def sweep_sessions(store: ChatSessionStore, interval_seconds: float):
    """Periodically drop chat sessions nobody has touched for a while"""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            store.evict_expired()
        except Exception:
            logger.exception("Session sweep failed")


# Stop the sweeper and close the pool once everything is done
@asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper = asyncio.create_task(sweep_sessions(session_store, settings.SESSION_SWEEP_INTERVAL_SECONDS))
    logger.info("Session sweeper started")

    yield

    sweeper.cancel()
    try:
        await sweeper
    except asyncio.CancelledError:
        pass
    await engine.dispose()


app = FastAPI(title="Invoice Analytics API", lifespan=lifespan)


# Every error leaves the API in the same {success, error} envelope
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    missing = [error["loc"][-1] for error in exc.errors() if error["type"] == "missing"]
    message = "Question is required" if "question" in missing else "Invalid request body"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": message},
    )


# Include the master router containing all our endpoints
app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "Welcome to the Invoice Analytics API"}
