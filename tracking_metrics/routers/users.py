"""
Users router.

POST   /users          — create a user
GET    /users          — list active users
DELETE /users/{name}   — soft-delete a user and its metrics
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tracking_metrics.db.base import get_db
from tracking_metrics.schemas.common import ErrorResponse
from tracking_metrics.schemas.users import CreateUserRequest, DeleteUserResponse, UserOut
from tracking_metrics.services import users as users_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create new user",
    responses={409: {"model": ErrorResponse, "description": "Name already taken."}},
)
def create_user(payload: CreateUserRequest, db: Session = Depends(get_db)):
    user = users_service.create_user(db, name=payload.name)
    return users_service.user_to_dict(user)


@router.get("", response_model=list[UserOut], summary="Get all users")
def list_users(db: Session = Depends(get_db)):
    return [users_service.user_to_dict(u) for u in users_service.list_users(db)]


@router.delete(
    "/{name}",
    response_model=DeleteUserResponse,
    summary="Soft-delete a user",
    responses={404: {"model": ErrorResponse, "description": "No active user with that name."}},
)
def delete_user(name: str, db: Session = Depends(get_db)):
    """Marks the user deleted and soft-deletes every metric it owns."""
    deleted_metrics = users_service.delete_user(db, name=name)
    return DeleteUserResponse(name=name, deleted_metrics=deleted_metrics)
