import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .db import Base, engine
from .errors import BudgetError
from .routers import analyze, log, reference, reports, transactions, users, webhook
from .seed import seed_reference_data

settings = get_settings()

logger = logging.getLogger(__name__)

app = FastAPI(title="Budget Bot API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(webhook.router, prefix=settings.api_prefix)
app.include_router(analyze.router, prefix=settings.api_prefix)
app.include_router(users.router, prefix=settings.api_prefix)
app.include_router(reference.router, prefix=settings.api_prefix)
app.include_router(transactions.spendings_router, prefix=settings.api_prefix)
app.include_router(transactions.earnings_router, prefix=settings.api_prefix)
app.include_router(reports.router, prefix=settings.api_prefix)
# Catch-all "/{user_id}/log" goes last.
app.include_router(log.router, prefix=settings.api_prefix)


@app.exception_handler(BudgetError)
async def budget_error_handler(request: Request, exc: BudgetError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Missing required fields", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s failed", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error", "details": str(exc)})


@app.on_event("startup")
def on_startup() -> None:
    """Configure logging, ensure tables exist and seed reference data."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    Base.metadata.create_all(bind=engine)
    if settings.seed_reference_data:
        seed_reference_data(engine)


@app.get("/")
def health_check() -> dict[str, str]:
    return {"status": "ok"}
