"""Ingredient alias API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from preppal.api.deps import current_user
from preppal.core.auth import AuthUser
from preppal.core.database import get_db
from preppal.core.matching import normalize_name
from preppal.models.models import IngredientAlias
from preppal.schemas.schemas import (
    CanonicalNameResponse,
    IngredientAliasCreate,
    IngredientAliasResponse,
)

router = APIRouter(prefix="/api/ingredient-aliases", tags=["ingredient aliases"])


@router.get("", response_model=list[IngredientAliasResponse])
def list_aliases(
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """List aliases ordered by canonical name."""
    return db.query(IngredientAlias).filter(
        IngredientAlias.user_id == user.id
    ).order_by(IngredientAlias.canonical_name, IngredientAlias.alias_name).all()


@router.post("", response_model=IngredientAliasResponse, status_code=201)
def create_alias(
    data: IngredientAliasCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """
    Map an alias name to a canonical ingredient name.

    Both names are lowercased and trimmed. An alias may map to only one
    canonical name.
    """
    canonical_name = normalize_name(data.canonical_name)
    alias_name = normalize_name(data.alias_name)

    if not canonical_name or not alias_name:
        raise HTTPException(
            status_code=400,
            detail="Both canonical name and alias name are required"
        )
    if canonical_name == alias_name:
        raise HTTPException(
            status_code=400,
            detail="Alias cannot be the same as the canonical name"
        )

    existing = db.query(IngredientAlias).filter(
        IngredientAlias.user_id == user.id,
        IngredientAlias.alias_name == alias_name
    ).first()
    if existing:
        raise HTTPException(status_code=400, detail="This alias already exists")

    alias = IngredientAlias(
        user_id=user.id,
        canonical_name=canonical_name,
        alias_name=alias_name,
    )
    db.add(alias)
    db.commit()
    db.refresh(alias)
    return alias


@router.get("/canonical", response_model=CanonicalNameResponse)
def get_canonical_name(
    name: str = Query("", description="Ingredient name"),
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Canonical name for an ingredient, or the name itself when it has no alias."""
    if not name:
        raise HTTPException(status_code=400, detail="Name query parameter required")

    alias = db.query(IngredientAlias).filter(
        IngredientAlias.user_id == user.id,
        IngredientAlias.alias_name == normalize_name(name)
    ).first()
    return CanonicalNameResponse(canonical_name=alias.canonical_name if alias else name)


@router.delete("/{alias_id}", status_code=204)
def delete_alias(
    alias_id: int,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Delete an alias."""
    alias = db.query(IngredientAlias).filter(
        IngredientAlias.id == alias_id,
        IngredientAlias.user_id == user.id
    ).first()
    if not alias:
        raise HTTPException(status_code=404, detail="Ingredient alias not found")

    db.delete(alias)
    db.commit()
    return None
