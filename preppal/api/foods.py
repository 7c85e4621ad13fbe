"""Food API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from preppal.api.deps import current_user
from preppal.core.auth import AuthUser
from preppal.core.database import get_db
from preppal.core.logging import get_logger
from preppal.models.models import Food
from preppal.schemas.schemas import (
    AutoMatchRequest,
    AutoMatchResponse,
    FoodCreate,
    FoodResponse,
    FoodUpdate,
    USDAFoodCreate,
)
from preppal.services.nutrition_matcher import resolve_product_nutrition
from preppal.services.usda_service import usda_service

logger = get_logger(__name__)

router = APIRouter(prefix="/api/foods", tags=["foods"])


@router.get("", response_model=list[FoodResponse])
def list_foods(
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """List the user's foods by name."""
    return db.query(Food).filter(Food.user_id == user.id).order_by(Food.name).all()


@router.post("", response_model=FoodResponse, status_code=201)
def create_food(
    food: FoodCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Create a food with per-100g macros."""
    db_food = Food(user_id=user.id, **food.model_dump())
    db.add(db_food)
    db.commit()
    db.refresh(db_food)
    return db_food


@router.post("/from-usda", response_model=FoodResponse, status_code=201)
async def create_food_from_usda(
    data: USDAFoodCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """
    Import a food from USDA FoodData Central.

    Returns the existing food when this FDC ID was already imported.
    """
    existing = db.query(Food).filter(
        Food.user_id == user.id,
        Food.fdc_id == data.fdc_id
    ).first()
    if existing:
        return existing

    usda_food = await usda_service.get_food_by_id(data.fdc_id)
    normalized = usda_service.normalize_food_data(usda_food)

    db_food = Food(user_id=user.id, is_custom=False, **normalized)
    db.add(db_food)
    db.commit()
    db.refresh(db_food)
    return db_food


@router.post("/auto-match", response_model=AutoMatchResponse)
async def auto_match_food(
    product: AutoMatchRequest,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """
    Link a retailer product to nutrition data.

    Tries the product's label, then its barcode, then a name search across
    USDA, FatSecret and Open Food Facts. A miss is not an error: the response
    has ``matched: false`` and the ingredient can be linked by hand.
    """
    result = await resolve_product_nutrition(db, user.id, product)
    logger.info(
        "foods.auto_match matched=%s source=%s search_term=%s",
        result.matched, result.source, result.search_term,
    )
    return AutoMatchResponse(
        matched=result.matched,
        source=result.source,
        search_term=result.search_term,
        food=FoodResponse.model_validate(result.food) if result.food else None,
    )


@router.get("/{food_id}", response_model=FoodResponse)
def get_food(
    food_id: int,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Get a food by ID."""
    return _get_user_food(db, food_id, user.id)


@router.put("/{food_id}", response_model=FoodResponse)
def update_food(
    food_id: int,
    food_update: FoodUpdate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Update a food."""
    food = _get_user_food(db, food_id, user.id)

    update_data = food_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(food, field, value)

    db.commit()
    db.refresh(food)
    return food


@router.delete("/{food_id}", status_code=204)
def delete_food(
    food_id: int,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Delete a food; ingredients linked to it become unmatched."""
    food = _get_user_food(db, food_id, user.id)

    for ingredient in list(food.recipe_ingredients):
        ingredient.food = None

    db.delete(food)
    db.commit()
    return None


def _get_user_food(db: Session, food_id: int, user_id: str) -> Food:
    food = db.query(Food).filter(
        Food.id == food_id,
        Food.user_id == user_id
    ).first()
    if not food:
        raise HTTPException(status_code=404, detail="Food not found")
    return food
