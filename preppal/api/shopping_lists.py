"""Shopping list API endpoints."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from preppal.api.deps import current_user
from preppal.core.auth import AuthUser
from preppal.core.database import get_db
from preppal.core.matching import normalize_name
from preppal.core.shopping import (
    consolidate_ingredients,
    format_shopping_list_text,
    group_by_category,
)
from preppal.models.models import IngredientAlias, PantryStaple, Recipe, ShoppingList
from preppal.schemas.schemas import (
    CartItem,
    GeneratedShoppingListResponse,
    ShoppingListCreate,
    ShoppingListExportRequest,
    ShoppingListExportResponse,
    ShoppingListGenerateRequest,
    ShoppingListResponse,
)

router = APIRouter(prefix="/api/shopping-lists", tags=["shopping lists"])


@router.get("", response_model=list[ShoppingListResponse])
def list_shopping_lists(
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """List saved shopping lists, newest first."""
    return db.query(ShoppingList).filter(
        ShoppingList.user_id == user.id
    ).order_by(ShoppingList.created_at.desc(), ShoppingList.id.desc()).all()


@router.post("", response_model=ShoppingListResponse, status_code=201)
def create_shopping_list(
    data: ShoppingListCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Save a named selection of recipes."""
    shopping_list = ShoppingList(
        user_id=user.id,
        name=data.name,
        recipe_ids=data.recipe_ids,
        exclude_pantry_staples=data.exclude_pantry_staples,
    )
    db.add(shopping_list)
    db.commit()
    db.refresh(shopping_list)
    return shopping_list


@router.delete("/{list_id}", status_code=204)
def delete_shopping_list(
    list_id: int,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Delete a saved shopping list."""
    shopping_list = _get_user_list(db, list_id, user.id)
    db.delete(shopping_list)
    db.commit()
    return None


@router.post("/generate", response_model=GeneratedShoppingListResponse)
def generate_shopping_list(
    request: ShoppingListGenerateRequest,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """
    Consolidate the ingredients of the selected recipes.

    Aliased ingredients are merged under their canonical name; pantry staples
    are dropped unless ``exclude_pantry_staples`` is false.
    """
    return build_shopping_list(db, user.id, request.recipe_ids, request.exclude_pantry_staples)


@router.post("/export", response_model=ShoppingListExportResponse)
def export_shopping_list(
    request: ShoppingListExportRequest,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Render a generated list as plain text; ``checked`` items are ticked."""
    groups = _grouped_items(db, user.id, request.recipe_ids, request.exclude_pantry_staples)
    return ShoppingListExportResponse(text=format_shopping_list_text(groups, request.checked))


@router.get("/{list_id}/items", response_model=GeneratedShoppingListResponse)
def get_shopping_list_items(
    list_id: int,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Regenerate the consolidated items of a saved list from its recipes."""
    shopping_list = _get_user_list(db, list_id, user.id)
    return build_shopping_list(
        db,
        user.id,
        shopping_list.recipe_ids or [],
        shopping_list.exclude_pantry_staples,
    )


def build_shopping_list(
    db: Session,
    user_id: str,
    recipe_ids: list[int],
    exclude_pantry_staples: bool,
) -> GeneratedShoppingListResponse:
    groups = _grouped_items(db, user_id, recipe_ids, exclude_pantry_staples)
    items = [item for group in groups for item in group.items]
    return GeneratedShoppingListResponse(
        recipe_ids=recipe_ids,
        exclude_pantry_staples=exclude_pantry_staples,
        item_count=len(items),
        groups=[
            {
                "category": group.category,
                "label": group.label,
                "items": [
                    {**asdict(item), "total_grams": round(item.total_grams, 1)}
                    for item in group.items
                ],
            }
            for group in groups
        ],
        cart_items=[
            CartItem(upc=item.kroger_product_id, quantity=1)
            for item in items
            if item.kroger_product_id
        ],
    )


def _grouped_items(
    db: Session,
    user_id: str,
    recipe_ids: list[int],
    exclude_pantry_staples: bool,
):
    # Recipes deleted since a list was saved are skipped
    recipes = []
    if recipe_ids:
        recipes = db.query(Recipe).filter(
            Recipe.user_id == user_id,
            Recipe.id.in_(recipe_ids)
        ).all()
        order = {recipe_id: index for index, recipe_id in enumerate(recipe_ids)}
        recipes.sort(key=lambda r: order[r.id])

    aliases = {
        normalize_name(a.alias_name): normalize_name(a.canonical_name)
        for a in db.query(IngredientAlias).filter(IngredientAlias.user_id == user_id)
    }
    staple_names = [s.name for s in db.query(PantryStaple).filter(PantryStaple.user_id == user_id)]

    items = consolidate_ingredients(recipes, aliases, staple_names, exclude_pantry_staples)
    return group_by_category(items)


def _get_user_list(db: Session, list_id: int, user_id: str) -> ShoppingList:
    shopping_list = db.query(ShoppingList).filter(
        ShoppingList.id == list_id,
        ShoppingList.user_id == user_id
    ).first()
    if not shopping_list:
        raise HTTPException(status_code=404, detail="Shopping list not found")
    return shopping_list
