"""KrishiLink HTTP API.

Farmers list crops, buyers register interest in them, and owners accept or
reject those interests.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, PyMongoError
import structlog
from dotenv import load_dotenv

from .config import get_settings
from .db import open_db, setup_indexes
from .errors import KrishiLinkError, StoreUnavailableError
from .interests import list_interests_for_user, submit_interest, update_interest_status
from .listings import (
    create_listing,
    delete_listing,
    get_all_listings,
    get_latest_listings,
    get_listing,
    get_listings_by_owner,
    update_listing,
)
from .models import InterestCreate, InterestStatusUpdate, ListingCreate, ListingUpdate, UserCreate
from .users import get_user, register_user

load_dotenv()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    async with open_db(settings) as db:
        app.state.db = db
        try:
            await setup_indexes(db)
        except PyMongoError as e:
            logger.warning("index_setup_failed", error=str(e))
        logger.info("krishilink_api_started", port=settings.port)
        yield
    logger.info("krishilink_api_stopped")


app = FastAPI(
    title="KrishiLink",
    description="Crop marketplace connecting farmers and buyers",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_database(request: Request) -> AsyncIOMotorDatabase:
    """Database handle opened by the lifespan."""
    return request.app.state.db


# ============================================================
# Error Handlers
# ============================================================

def _error_response(status_code: int, kind: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "error": kind, "message": message},
    )


@app.exception_handler(KrishiLinkError)
async def handle_krishilink_error(request: Request, exc: KrishiLinkError):
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message)
    return _error_response(exc.status_code, exc.kind, exc.message)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}"
        for err in exc.errors()
    )
    return _error_response(422, "validation_failed", problems)


@app.exception_handler(ConnectionFailure)
async def handle_connection_failure(request: Request, exc: ConnectionFailure):
    error = StoreUnavailableError(f"Database connection failed: {exc}")
    logger.error("store_unavailable", path=request.url.path, error=str(exc))
    return _error_response(error.status_code, error.kind, error.message)


@app.exception_handler(PyMongoError)
async def handle_store_error(request: Request, exc: PyMongoError):
    logger.error("store_error", path=request.url.path, error=str(exc))
    return _error_response(500, "server_error", str(exc))


# ============================================================
# Service Endpoints
# ============================================================

@app.get("/")
def root():
    return {"name": "KrishiLink", "version": "0.1.0", "message": "KrishiLink Server Running"}


@app.get("/health")
async def health(db: AsyncIOMotorDatabase = Depends(get_database)):
    """Report whether the database answers a ping."""
    try:
        await db.command("ping")
    except PyMongoError as e:
        logger.error("health_check_failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content={
                "status": "ERROR",
                "message": "Database connection failed",
                "error": str(e),
            },
        )
    return {
        "status": "OK",
        "message": "Server and Database are running",
        "database": db.name,
    }


# ============================================================
# User Endpoints
# ============================================================

@app.post("/users")
async def create_user(request: UserCreate, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Register a user; an existing email returns the existing identity."""
    return await register_user(db, request)


@app.get("/users/{email}")
async def get_user_details(email: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    return await get_user(db, email)


# ============================================================
# Crop Endpoints
# ============================================================

@app.post("/crops")
async def create_crop(request: ListingCreate, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Post a new crop listing."""
    return await create_listing(db, request)


@app.get("/crops")
async def list_crops(db: AsyncIOMotorDatabase = Depends(get_database)):
    """Get all crop listings."""
    return await get_all_listings(db)


@app.get("/crops/latest")
async def list_latest_crops(
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Get the newest listings (six unless ``limit`` is given)."""
    return await get_latest_listings(db, limit or get_settings().latest_listings_limit)


@app.get("/crops/{crop_id}")
async def get_crop(crop_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    return await get_listing(db, crop_id)


@app.get("/my-crops/{email}")
async def list_my_crops(email: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Get listings posted by an owner."""
    return await get_listings_by_owner(db, email)


@app.put("/crops/{crop_id}")
async def update_crop(
    crop_id: str,
    request: ListingUpdate,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Update a listing's mutable fields."""
    return await update_listing(db, crop_id, request)


@app.delete("/crops/{crop_id}")
async def delete_crop(crop_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    return await delete_listing(db, crop_id)


# ============================================================
# Interest Endpoints
# ============================================================

@app.post("/interests")
async def create_interest(request: InterestCreate, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Express interest in buying from a listing."""
    return await submit_interest(db, request)


@app.get("/my-interests/{email}")
async def list_my_interests(email: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Get a buyer's interests with crop and owner details."""
    return await list_interests_for_user(db, email)


@app.put("/interests/update")
async def decide_interest(
    request: InterestStatusUpdate,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Accept or reject an interest. Accepting deducts its quantity from the listing."""
    return await update_interest_status(db, request.crop_id, request.interest_id, request.status)
