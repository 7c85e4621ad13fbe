"""Shared route dependencies."""

from fastapi import Depends
from sqlalchemy.orm import Session

from preppal.core.auth import AuthUser, require_auth
from preppal.core.database import get_db
from preppal.models.models import User


def upsert_user(db: Session, auth_user: AuthUser) -> User:
    """Create or refresh the local user row for a verified token."""
    user = db.query(User).filter(User.id == auth_user.id).first()
    if user is None:
        user = User(id=auth_user.id)
        db.add(user)

    # Claims the token omits keep their stored values
    for field in ("email", "first_name", "last_name", "profile_image_url"):
        value = getattr(auth_user, field)
        if value is not None:
            setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user


def current_user(
    auth_user: AuthUser = Depends(require_auth),
    db: Session = Depends(get_db),
) -> AuthUser:
    """Authenticated user whose row exists, so owned records can reference it."""
    exists = db.query(User.id).filter(User.id == auth_user.id).first()
    if not exists:
        upsert_user(db, auth_user)
    return auth_user
