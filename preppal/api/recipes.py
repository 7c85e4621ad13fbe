"""Recipe API endpoints."""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from preppal.api.deps import current_user
from preppal.core.auth import AuthUser
from preppal.core.database import get_db
from preppal.core.macros import (
    calculate_ingredient_macros,
    calculate_per_serving_macros,
    calculate_recipe_totals,
)
from preppal.core.matching import matches_staple
from preppal.core.units import convert_to_grams
from preppal.models.models import Food, PantryStaple, Recipe, RecipeIngredient, RecipeTool
from preppal.schemas.schemas import (
    FoodResponse,
    MacroTotalsResponse,
    RecipeCreate,
    RecipeIngredientIn,
    RecipeIngredientResponse,
    RecipeMacrosResponse,
    RecipeResponse,
    RecipeToolIn,
    RecipeToolResponse,
    RecipeUpdate,
)

router = APIRouter(prefix="/api/recipes", tags=["recipes"])


@router.get("", response_model=list[RecipeResponse])
def list_recipes(
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """List the user's recipes, most recently updated first."""
    recipes = db.query(Recipe).filter(
        Recipe.user_id == user.id
    ).order_by(Recipe.updated_at.desc(), Recipe.id.desc()).all()
    return [_recipe_to_response(r) for r in recipes]


@router.get("/{recipe_id}", response_model=RecipeResponse)
def get_recipe(
    recipe_id: int,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Get a recipe with ingredients, linked foods, tools and macros."""
    return _recipe_to_response(_get_user_recipe(db, recipe_id, user.id))


@router.post("", response_model=RecipeResponse, status_code=201)
def create_recipe(
    recipe: RecipeCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """
    Create a recipe with its ingredients and tools.

    Ingredient order becomes sort order. Missing grams are derived from
    amount and unit.
    """
    db_recipe = Recipe(
        user_id=user.id,
        title=recipe.title,
        description=recipe.description,
        servings=recipe.servings,
        tags=recipe.tags,
        instructions=recipe.instructions,
        is_currently_eating=recipe.is_currently_eating,
    )
    db_recipe.ingredients = _build_ingredients(db, user.id, recipe.ingredients)
    db_recipe.tools = _build_tools(recipe.tools)
    db.add(db_recipe)
    db.commit()
    db.refresh(db_recipe)
    return _recipe_to_response(db_recipe)


@router.put("/{recipe_id}", response_model=RecipeResponse)
def update_recipe(
    recipe_id: int,
    recipe_update: RecipeUpdate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Update recipe fields; ingredients and tools, when sent, replace the existing ones."""
    recipe = _get_user_recipe(db, recipe_id, user.id)

    update_data = recipe_update.model_dump(exclude_unset=True, exclude={"ingredients", "tools"})
    for field, value in update_data.items():
        setattr(recipe, field, value)

    if recipe_update.ingredients is not None:
        recipe.ingredients = _build_ingredients(db, user.id, recipe_update.ingredients)
    if recipe_update.tools is not None:
        recipe.tools = _build_tools(recipe_update.tools)

    db.commit()
    db.refresh(recipe)
    return _recipe_to_response(recipe)


@router.delete("/{recipe_id}", status_code=204)
def delete_recipe(
    recipe_id: int,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Delete a recipe and its ingredients."""
    recipe = _get_user_recipe(db, recipe_id, user.id)
    db.delete(recipe)
    db.commit()
    return None


@router.post("/{recipe_id}/duplicate", response_model=RecipeResponse, status_code=201)
def duplicate_recipe(
    recipe_id: int,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Copy a recipe, its ingredients and tools under a "(Copy)" title."""
    original = _get_user_recipe(db, recipe_id, user.id)

    copy = Recipe(
        user_id=user.id,
        title=f"{original.title} (Copy)",
        description=original.description,
        servings=original.servings,
        tags=list(original.tags or []),
        instructions=list(original.instructions or []),
    )
    copy.ingredients = [
        RecipeIngredient(
            food_id=ing.food_id,
            kroger_product_id=ing.kroger_product_id,
            kroger_product_name=ing.kroger_product_name,
            kroger_product_image=ing.kroger_product_image,
            display_name=ing.display_name,
            amount=ing.amount,
            unit=ing.unit,
            grams=ing.grams,
            sort_order=index,
            category=ing.category,
            is_pantry_staple=ing.is_pantry_staple,
        )
        for index, ing in enumerate(original.ingredients)
    ]
    copy.tools = [
        RecipeTool(name=tool.name, notes=tool.notes, sort_order=index)
        for index, tool in enumerate(original.tools)
    ]
    db.add(copy)
    db.commit()
    db.refresh(copy)
    return _recipe_to_response(copy)


@router.get("/{recipe_id}/macros", response_model=RecipeMacrosResponse)
def get_recipe_macros(
    recipe_id: int,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(current_user)
):
    """Recipe totals and per-serving macros."""
    recipe = _get_user_recipe(db, recipe_id, user.id)
    totals = calculate_recipe_totals([(ri.grams, ri.food) for ri in recipe.ingredients])
    per_serving = calculate_per_serving_macros(totals, recipe.servings)
    return RecipeMacrosResponse(
        recipe_id=recipe.id,
        servings=recipe.servings,
        totals=MacroTotalsResponse(**totals.to_dict()),
        per_serving=MacroTotalsResponse(**per_serving.to_dict()),
        unmatched_ingredients=sum(1 for ri in recipe.ingredients if ri.food is None),
    )


def _get_user_recipe(db: Session, recipe_id: int, user_id: str) -> Recipe:
    recipe = db.query(Recipe).filter(
        Recipe.id == recipe_id,
        Recipe.user_id == user_id
    ).first()
    if not recipe:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


def _build_ingredients(
    db: Session,
    user_id: str,
    ingredients: list[RecipeIngredientIn],
) -> list[RecipeIngredient]:
    """Turn request ingredients into rows, resolving grams and staple flags."""
    staple_names: Optional[list[str]] = None
    rows = []

    for index, data in enumerate(ingredients):
        food = None
        if data.food_id is not None:
            food = db.query(Food).filter(
                Food.id == data.food_id,
                Food.user_id == user_id
            ).first()
            if not food:
                raise HTTPException(status_code=404, detail=f"Food {data.food_id} not found")

        grams = data.grams
        if grams is None:
            grams = convert_to_grams(
                data.amount or 0,
                data.unit,
                food.grams_per_unit if food else None,
            )

        is_staple = data.is_pantry_staple
        if is_staple is None:
            if staple_names is None:
                staple_names = [
                    s.name for s in db.query(PantryStaple).filter(PantryStaple.user_id == user_id)
                ]
            is_staple = any(matches_staple(data.display_name, s) for s in staple_names)

        rows.append(RecipeIngredient(
            food_id=food.id if food else None,
            kroger_product_id=data.kroger_product_id,
            kroger_product_name=data.kroger_product_name,
            kroger_product_image=data.kroger_product_image,
            display_name=data.display_name,
            amount=data.amount,
            unit=data.unit,
            grams=grams,
            sort_order=index,
            category=data.category or (food.category if food else None),
            is_pantry_staple=is_staple,
        ))

    return rows


def _build_tools(tools: list[RecipeToolIn]) -> list[RecipeTool]:
    return [
        RecipeTool(name=tool.name, notes=tool.notes, sort_order=index)
        for index, tool in enumerate(tools)
    ]


def _recipe_to_response(recipe: Recipe) -> RecipeResponse:
    """Convert Recipe model to response schema with computed macros."""
    ingredients = []
    for ri in recipe.ingredients:
        food = ri.food
        macros = None
        if food is not None:
            macros = calculate_ingredient_macros(
                ri.grams,
                food.calories_per_100g,
                food.protein_per_100g,
                food.carbs_per_100g,
                food.fat_per_100g,
            )
        ingredients.append(RecipeIngredientResponse(
            id=ri.id,
            food_id=ri.food_id,
            food=FoodResponse.model_validate(food) if food else None,
            kroger_product_id=ri.kroger_product_id,
            kroger_product_name=ri.kroger_product_name,
            kroger_product_image=ri.kroger_product_image,
            display_name=ri.display_name,
            amount=ri.amount,
            unit=ri.unit,
            grams=ri.grams,
            sort_order=ri.sort_order,
            category=ri.category,
            is_pantry_staple=bool(ri.is_pantry_staple),
            macros=MacroTotalsResponse(**macros.to_dict()) if macros else None,
        ))

    totals = calculate_recipe_totals([(ri.grams, ri.food) for ri in recipe.ingredients])
    per_serving = calculate_per_serving_macros(totals, recipe.servings)

    return RecipeResponse(
        id=recipe.id,
        title=recipe.title,
        description=recipe.description,
        servings=recipe.servings,
        tags=recipe.tags or [],
        instructions=recipe.instructions or [],
        is_currently_eating=bool(recipe.is_currently_eating),
        created_at=recipe.created_at,
        updated_at=recipe.updated_at,
        ingredients=ingredients,
        tools=[RecipeToolResponse.model_validate(t) for t in recipe.tools],
        totals=MacroTotalsResponse(**totals.to_dict()),
        per_serving=MacroTotalsResponse(**per_serving.to_dict()),
        unmatched_ingredients=sum(1 for ri in recipe.ingredients if ri.food is None),
    )
