"""
User service: create / list / soft-delete.

Deleting a user soft-deletes the user's metrics in the same transaction.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from tracking_metrics.core.errors import UserAlreadyExistsError, UserNotFoundError
from tracking_metrics.models.user import UserRecord
from tracking_metrics.repositories import metrics as metric_store

logger = logging.getLogger(__name__)


def _find_by_name(db: Session, name: str) -> UserRecord | None:
    return (
        db.query(UserRecord)
        .filter(UserRecord.name == name, UserRecord.deleted_at.is_(None))
        .first()
    )


def create_user(db: Session, name: str) -> UserRecord:
    # Soft-deleted names stay reserved by the unique constraint.
    if db.query(UserRecord.id).filter(UserRecord.name == name).first() is not None:
        raise UserAlreadyExistsError(name)
    user = UserRecord(name=name)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (id=%s)", user.name, user.id)
    return user


def list_users(db: Session) -> list[UserRecord]:
    return (
        db.query(UserRecord)
        .filter(UserRecord.deleted_at.is_(None))
        .order_by(UserRecord.id.asc())
        .all()
    )


def delete_user(db: Session, name: str) -> int:
    """Soft-delete a user and cascade to its metrics. Returns the metric count."""
    user = _find_by_name(db, name)
    if user is None:
        raise UserNotFoundError(name)
    user.deleted_at = datetime.now(tz=timezone.utc)
    deleted_metrics = metric_store.soft_delete_for_user(db, user.id)
    db.commit()
    logger.info("Deleted user %s and %d metrics", name, deleted_metrics)
    return deleted_metrics


def user_to_dict(u: UserRecord) -> dict:
    return {
        "id": u.id,
        "name": u.name,
        "created_at": u.created_at,
        "updated_at": u.updated_at,
    }
