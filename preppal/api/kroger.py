"""Kroger account, product search and cart endpoints."""

from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from preppal.api.deps import current_user
from preppal.core.auth import AuthUser, create_oauth_state, read_oauth_state
from preppal.core.database import get_db
from preppal.core.logging import get_logger
from preppal.models.models import KrogerToken, User
from preppal.schemas.schemas import (
    KrogerAuthUrlResponse,
    KrogerCartRequest,
    KrogerCartResponse,
    KrogerLocationUpdate,
    KrogerStatusResponse,
)
from preppal.services.errors import KrogerError
from preppal.services.kroger_service import kroger_service

logger = get_logger(__name__)

router = APIRouter(prefix="/api/kroger", tags=["kroger"])

# Access tokens this close to expiry are refreshed before use
REFRESH_BUFFER = timedelta(minutes=5)


@router.get("/status", response_model=KrogerStatusResponse)
def get_status(
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Whether the API is configured and the user's account is connected."""
    tokens = _get_tokens(db, user.id)
    return KrogerStatusResponse(
        is_configured=kroger_service.is_configured(),
        is_connected=bool(tokens and tokens.expires_at > datetime.utcnow()),
        location_id=tokens.location_id if tokens else None,
    )


@router.get("/auth-url", response_model=KrogerAuthUrlResponse)
def get_auth_url(user: AuthUser = Depends(current_user)):
    """Kroger authorization URL carrying a signed state bound to this user."""
    if not kroger_service.is_configured():
        raise HTTPException(status_code=400, detail="Kroger API not configured")

    state = create_oauth_state(user.id)
    return KrogerAuthUrlResponse(auth_url=kroger_service.get_authorization_url(state))


@router.get("/callback")
async def oauth_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """
    OAuth redirect target.

    The browser arrives here from Kroger without a bearer token, so the user
    is identified by the signed state. Always redirects back to the client.
    """
    user_id = read_oauth_state(state)
    if not user_id or not db.query(User.id).filter(User.id == user_id).first():
        logger.warning("kroger.callback: invalid state")
        return RedirectResponse("/?error=invalid_state", status_code=302)
    if not code:
        return RedirectResponse("/shopping-list?error=kroger_auth_failed", status_code=302)

    try:
        tokens = await kroger_service.exchange_code_for_tokens(code)
    except KrogerError as e:
        logger.error("kroger.callback: token exchange failed: %s", e)
        return RedirectResponse("/shopping-list?error=kroger_auth_failed", status_code=302)

    _save_tokens(db, user_id, tokens)
    logger.info("kroger.callback: connected user_id=%s", user_id)
    return RedirectResponse("/shopping-list?kroger=connected", status_code=302)


@router.delete("/disconnect", status_code=204)
def disconnect(
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Forget the user's Kroger tokens."""
    db.query(KrogerToken).filter(KrogerToken.user_id == user.id).delete()
    db.commit()
    return None


@router.get("/locations")
async def search_locations(
    zip_code: str = Query("", alias="zipCode"),
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Kroger stores near a zip code."""
    if not zip_code:
        raise HTTPException(status_code=400, detail="Zip code is required")

    access_token = await _require_access_token(db, user.id)
    return await kroger_service.search_locations(access_token, zip_code)


@router.put("/location")
def set_location(
    data: KrogerLocationUpdate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Set the preferred store used to scope product searches."""
    tokens = _get_tokens(db, user.id)
    if not tokens:
        raise HTTPException(status_code=401, detail="Kroger not connected")

    tokens.location_id = data.location_id
    db.commit()
    return {"success": True}


@router.get("/products")
async def search_products(
    term: str = Query(""),
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Search the Kroger catalog, scoped to the preferred store when set."""
    if not term:
        raise HTTPException(status_code=400, detail="Search term is required")

    access_token = await _require_access_token(db, user.id)
    tokens = _get_tokens(db, user.id)
    return await kroger_service.search_products(
        access_token,
        term,
        tokens.location_id if tokens else None,
    )


@router.post("/cart", response_model=KrogerCartResponse)
async def add_to_cart(
    request: KrogerCartRequest,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Add shopping list items to the user's Kroger cart."""
    access_token = await _require_access_token(db, user.id)
    await kroger_service.add_to_cart(access_token, [item.model_dump() for item in request.items])
    return KrogerCartResponse(success=True, item_count=len(request.items))


def _get_tokens(db: Session, user_id: str) -> Optional[KrogerToken]:
    return db.query(KrogerToken).filter(KrogerToken.user_id == user_id).first()


def _save_tokens(db: Session, user_id: str, tokens: dict) -> KrogerToken:
    """Insert or update the user's tokens; the preferred store is kept."""
    row = _get_tokens(db, user_id)
    if row is None:
        row = KrogerToken(user_id=user_id)
        db.add(row)

    row.access_token = tokens["access_token"]
    row.refresh_token = tokens.get("refresh_token") or row.refresh_token
    row.expires_at = datetime.utcnow() + timedelta(seconds=tokens.get("expires_in", 0))
    db.commit()
    db.refresh(row)
    return row


async def get_valid_access_token(db: Session, user_id: str) -> Optional[str]:
    """
    A usable access token for the user, refreshing it when near expiry.

    A failed refresh deletes the stored tokens so the user reconnects.
    """
    tokens = _get_tokens(db, user_id)
    if not tokens:
        return None

    if tokens.expires_at - datetime.utcnow() >= REFRESH_BUFFER:
        return tokens.access_token

    try:
        refreshed = await kroger_service.refresh_access_token(tokens.refresh_token)
    except KrogerError as e:
        logger.warning("kroger: token refresh failed for user_id=%s: %s", user_id, e)
        db.delete(tokens)
        db.commit()
        return None

    return _save_tokens(db, user_id, refreshed).access_token


async def _require_access_token(db: Session, user_id: str) -> str:
    access_token = await get_valid_access_token(db, user_id)
    if not access_token:
        raise HTTPException(status_code=401, detail="Kroger not connected")
    return access_token
