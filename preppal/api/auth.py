"""Authentication API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from preppal.api.deps import upsert_user
from preppal.core.auth import AuthUser, require_auth
from preppal.core.database import get_db
from preppal.schemas.schemas import UserResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/user", response_model=UserResponse)
def get_user(
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_auth)
):
    """Return the signed-in user, syncing profile fields from the token."""
    return upsert_user(db, user)
