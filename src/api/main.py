import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.dependencies import CALENDAR_BACKEND
from api.metrics import REQUESTS_TOTAL
from api.routers import chains, ops
from scheduling.errors import SchedulingError
from storage import db

# Logging configuration
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

INIT_DB_SCHEMA = os.getenv("INIT_DB_SCHEMA", "false").lower() in {"1", "true", "yes"}

app = FastAPI(title="chain-planner")
app.include_router(chains.router)
app.include_router(ops.router)


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    REQUESTS_TOTAL.labels(endpoint=request.url.path, status=str(exc.status_code)).inc()
    if exc.status_code >= 500:
        logger.error(f"{request.url.path}: {exc.details}")
    else:
        logger.info(f"Rejected {request.url.path} ({exc.status_code}): {exc.details}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.on_event("startup")
async def startup() -> None:
    if CALENDAR_BACKEND != "postgres":
        logger.info(f"Calendar backend '{CALENDAR_BACKEND}': skipping database pool")
        return

    try:
        await db.init_db_pool()
        if INIT_DB_SCHEMA:
            await db.init_schema()
    except Exception as e:
        # Requests still succeed; calendar reads degrade to an empty day.
        logger.error(f"Database unavailable at startup: {e}")


@app.on_event("shutdown")
async def shutdown() -> None:
    await db.close_db_pool()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
