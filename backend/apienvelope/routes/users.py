"""
API Envelope — User Routes
============================

What:  Sample endpoints that exercise caller identity and structured faults.
Who:   Clients sending the UserId header.

    GET  /api/users/me  → identity from the UserId header, 401 envelope if absent
    POST /api/users     → validates the payload, 422 envelope with
                          validationErrors when it is incomplete
"""

import logging
import uuid
from typing import Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from apienvelope.context import UserContext, get_user_context
from apienvelope.exceptions import ApiException, UnauthorizedAccessError
from apienvelope.schemas.envelope import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


class CreateUserRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[str] = Field(default=None, max_length=254)


class CreatedUser(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    created_by: Optional[uuid.UUID] = None


@router.get("/me", response_model=UserResponse, summary="Current caller identity")
async def get_current_user(user: UserContext = Depends(get_user_context)) -> UserResponse:
    if not user.is_identified:
        raise UnauthorizedAccessError("No UserId header on request")
    return UserResponse(id=user.id)


@router.post("", response_model=CreatedUser, summary="Validate and echo a new user")
async def create_user(
    payload: CreateUserRequest,
    user: UserContext = Depends(get_user_context),
) -> CreatedUser:
    """
    Business-rule validation (not schema validation): empty fields are
    reported together in one ApiException so the client can fix them at once.
    """
    errors: Dict[str, str] = {}
    if not payload.name or not payload.name.strip():
        errors["name"] = "required"
    if not payload.email or "@" not in payload.email:
        errors["email"] = "a valid email address is required"
    if errors:
        raise ApiException(
            "Invalid user",
            status_code=422,
            errors=errors,
            reference_error_code="USR-VALIDATION",
        )

    created = CreatedUser(
        id=uuid.uuid4(),
        name=payload.name.strip(),
        email=payload.email,
        created_by=user.id,
    )
    logger.info("Validated user %s (created_by=%s)", created.id, created.created_by)
    return created
