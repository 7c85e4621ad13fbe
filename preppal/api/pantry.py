"""Pantry staple API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from preppal.api.deps import current_user
from preppal.core.auth import AuthUser
from preppal.core.database import get_db
from preppal.core.matching import matches_staple, normalize_name
from preppal.models.models import PantryStaple
from preppal.schemas.schemas import (
    PantryStapleCheckResponse,
    PantryStapleCreate,
    PantryStapleResponse,
)

router = APIRouter(prefix="/api/pantry-staples", tags=["pantry staples"])


@router.get("", response_model=list[PantryStapleResponse])
def list_staples(
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """List the user's pantry staples by name."""
    return db.query(PantryStaple).filter(
        PantryStaple.user_id == user.id
    ).order_by(PantryStaple.name).all()


@router.post("", response_model=PantryStapleResponse, status_code=201)
def create_staple(
    data: PantryStapleCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Add a pantry staple; names are lowercased, trimmed and unique per user."""
    name = normalize_name(data.name)
    if not name:
        raise HTTPException(status_code=400, detail="Staple name is required")

    existing = db.query(PantryStaple).filter(
        PantryStaple.user_id == user.id,
        PantryStaple.name == name
    ).first()
    if existing:
        raise HTTPException(status_code=400, detail="This pantry staple already exists")

    staple = PantryStaple(user_id=user.id, name=name, category=data.category or None)
    db.add(staple)
    db.commit()
    db.refresh(staple)
    return staple


@router.get("/check", response_model=PantryStapleCheckResponse)
def check_staple(
    name: str = Query("", description="Ingredient name"),
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Whether an ingredient name matches any of the user's staples."""
    if not name:
        raise HTTPException(status_code=400, detail="Name query parameter required")

    staples = db.query(PantryStaple).filter(PantryStaple.user_id == user.id).all()
    return PantryStapleCheckResponse(
        is_pantry_staple=any(matches_staple(name, s.name) for s in staples)
    )


@router.delete("/{staple_id}", status_code=204)
def delete_staple(
    staple_id: int,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Remove a pantry staple."""
    staple = db.query(PantryStaple).filter(
        PantryStaple.id == staple_id,
        PantryStaple.user_id == user.id
    ).first()
    if not staple:
        raise HTTPException(status_code=404, detail="Pantry staple not found")

    db.delete(staple)
    db.commit()
    return None
