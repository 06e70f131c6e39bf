"""Exercise tracker API routes."""

import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request

from models.database import UserStore
from schemas.exercise import ExerciseResponse, LogResponse, UserResponse
from services.log_query import query_log
from services.validator import is_object_id, validate_exercise, validate_username
from utils.errors import Conflict, InvalidReference
from utils.logger import setup_logger

logger = setup_logger(__name__)

router = APIRouter(tags=["exercise"])

# Routes of the original service, kept for existing clients
legacy_router = APIRouter(prefix="/api/exercise", tags=["exercise"])

# ---------------------------
# Helpers
# ---------------------------

def get_user_store(request: Request) -> UserStore:
    """Return the store created once at application startup."""
    return request.app.state.user_store


async def read_fields(request: Request) -> Dict[str, Any]:
    """Read a JSON or form-encoded body as a flat dict."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Ignoring malformed JSON body")
            return {}
        return body if isinstance(body, dict) else {}
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        return dict(form)
    return {}

# ---------------------------
# 1. Register a user
# ---------------------------

@router.post("/users", response_model=UserResponse)
@legacy_router.post("/new-user", response_model=UserResponse)
async def register_user(request: Request, store: UserStore = Depends(get_user_store)):
    """Create a user with an empty log."""
    fields = await read_fields(request)
    username = validate_username(fields.get("username"))

    # The unique index still catches a concurrent registration in create()
    if await store.find_by_username(username):
        logger.info(f"Username already taken: {username}")
        raise Conflict()

    user = await store.create(username)
    return UserResponse(username=user.username, id=user.id)

# ---------------------------
# 2. Append an exercise
# ---------------------------

@router.post("/exercises", response_model=ExerciseResponse)
@legacy_router.post("/add", response_model=ExerciseResponse)
async def add_exercise(request: Request, store: UserStore = Depends(get_user_store)):
    """Validate an exercise and append it to the user's log."""
    fields = await read_fields(request)
    record = validate_exercise(fields)
    user_id = fields["userId"]

    user = await store.append_log(user_id, record)
    if user is None:
        logger.info(f"Exercise for unknown user id: {user_id}")
        raise InvalidReference("unknown _id.")

    return ExerciseResponse(
        username=user.username,
        id=user.id,
        **record.model_dump(),
    )

# ---------------------------
# 3. Query a log
# ---------------------------

@router.get("/logs", response_model=LogResponse)
@legacy_router.get("/log", response_model=LogResponse)
async def get_log(
    userId: Optional[str] = Query(None, description="User identifier"),
    from_: Optional[str] = Query(None, alias="from", description="Earliest date, inclusive"),
    to: Optional[str] = Query(None, description="Latest date, inclusive"),
    limit: Optional[str] = Query(None, description="Maximum number of records"),
    store: UserStore = Depends(get_user_store),
):
    """Return the user's log sorted by date, filtered and limited."""
    if not is_object_id(userId):
        raise InvalidReference("unknown userId.")

    user = await store.find_by_id(userId)
    if user is None:
        logger.info(f"Log requested for unknown user id: {userId}")
        raise InvalidReference("unknown userId.")

    log = query_log(user.log, from_=from_, to=to, limit=limit)
    return LogResponse(username=user.username, id=user.id, count=len(log), log=log)

