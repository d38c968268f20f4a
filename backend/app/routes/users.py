"""
Exam Builder Backend — User Route Handlers
============================================

What:  CRUD endpoints under /users.
How:   Each handler builds nothing itself. It asks get_user_service for a
       UserService bound to the request's database session, calls one
       operation, and wraps the result in a `{success: true, ...}` envelope.

Failure mapping happens in main.register_exception_handlers, keyed on the
exception's `kind`. The one outcome handled here is get_user's None
sentinel, which becomes a 404.

The id path parameter is declared as a string on purpose: "abc" must reach
the service and come back as InvalidInput (400), not as FastAPI's 422.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.repositories.user_repository import SqlAlchemyUserRepository
from app.schemas.user import (
    DeletedUserEnvelope,
    ErrorResponse,
    UserCreate,
    UserEnvelope,
    UserListResponse,
    UserMessageEnvelope,
    UserUpdate,
)
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

_ERRORS = {
    400: {"description": "Invalid id or request body", "model": ErrorResponse},
    404: {"description": "User not found", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


def get_user_service(db: AsyncSession = Depends(get_db_session)) -> UserService:
    """Dependency: a UserService over the request-scoped session."""
    return UserService(SqlAlchemyUserRepository(db))


@router.get(
    "",
    response_model=UserListResponse,
    responses={500: _ERRORS[500]},
    summary="List all users",
)
async def list_users(service: UserService = Depends(get_user_service)) -> UserListResponse:
    users = await service.list_users()
    return UserListResponse(data=users, total=len(users))


@router.get(
    "/{user_id}",
    response_model=UserEnvelope,
    responses=_ERRORS,
    summary="Get a user by id",
)
async def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    user = await service.get_user(user_id)
    if user is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=ErrorResponse(message=f"User with ID {user_id} not found").model_dump(
                exclude_none=True
            ),
        )
    return UserEnvelope(data=user)


@router.post(
    "",
    response_model=UserMessageEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={400: _ERRORS[400], 500: _ERRORS[500]},
    summary="Create a user",
)
async def create_user(
    payload: UserCreate,
    service: UserService = Depends(get_user_service),
) -> UserMessageEnvelope:
    user = await service.create_user(payload.model_dump(exclude_unset=True))
    return UserMessageEnvelope(message="User created successfully", data=user)


@router.put(
    "/{user_id}",
    response_model=UserMessageEnvelope,
    responses=_ERRORS,
    summary="Update some or all fields of a user",
)
async def update_user(
    user_id: str,
    payload: Optional[UserUpdate] = Body(default=None),
    service: UserService = Depends(get_user_service),
) -> UserMessageEnvelope:
    # exclude_unset keeps "photo": null distinct from an absent photo key
    data = payload.model_dump(exclude_unset=True) if payload is not None else {}
    user = await service.update_user(user_id, data)
    return UserMessageEnvelope(message="User updated successfully", data=user)


@router.delete(
    "/{user_id}",
    response_model=DeletedUserEnvelope,
    responses=_ERRORS,
    summary="Delete a user",
)
async def delete_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
) -> DeletedUserEnvelope:
    snapshot = await service.delete_user(user_id)
    return DeletedUserEnvelope(message="User deleted successfully", data=snapshot)
