"""
Macro calculations for recipes.

Foods store macros per 100g; ingredient grams scale them:
    macro = per_100g × (grams / 100)
"""

import math
from dataclasses import dataclass, asdict
from typing import Optional, Protocol


@dataclass
class MacroTotals:
    """Calories and macronutrients (grams) for an ingredient or recipe."""
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0

    def to_dict(self) -> dict:
        return asdict(self)


class FoodMacros(Protocol):
    calories_per_100g: float
    protein_per_100g: float
    carbs_per_100g: float
    fat_per_100g: float


def round_half_up(value: float, digits: int = 1) -> float:
    """Round halves away from zero for positive values, the way the client displays macros."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def calculate_ingredient_macros(
    grams: float,
    calories_per_100g: float,
    protein_per_100g: float,
    carbs_per_100g: float,
    fat_per_100g: float,
) -> MacroTotals:
    """
    Calculate macros for a weight of food.

    Args:
        grams: Ingredient weight
        calories_per_100g: Caloric density of the food
        protein_per_100g: Protein per 100g
        carbs_per_100g: Carbohydrate per 100g
        fat_per_100g: Fat per 100g

    Returns:
        MacroTotals, each value rounded to 0.1
    """
    multiplier = grams / 100
    return MacroTotals(
        calories=round_half_up(calories_per_100g * multiplier),
        protein=round_half_up(protein_per_100g * multiplier),
        carbs=round_half_up(carbs_per_100g * multiplier),
        fat=round_half_up(fat_per_100g * multiplier),
    )


def calculate_recipe_totals(ingredients: list[tuple[float, Optional[FoodMacros]]]) -> MacroTotals:
    """
    Sum macros across a recipe's ingredients.

    Args:
        ingredients: (grams, food) pairs; pairs without a food are skipped

    Returns:
        MacroTotals for the whole recipe
    """
    totals = MacroTotals()

    for grams, food in ingredients:
        if food is None:
            continue
        macros = calculate_ingredient_macros(
            grams,
            food.calories_per_100g,
            food.protein_per_100g,
            food.carbs_per_100g,
            food.fat_per_100g,
        )
        totals.calories += macros.calories
        totals.protein += macros.protein
        totals.carbs += macros.carbs
        totals.fat += macros.fat

    return MacroTotals(
        calories=round_half_up(totals.calories),
        protein=round_half_up(totals.protein),
        carbs=round_half_up(totals.carbs),
        fat=round_half_up(totals.fat),
    )


def calculate_per_serving_macros(totals: MacroTotals, servings: int) -> MacroTotals:
    """Divide recipe totals by servings; non-positive servings return totals."""
    if servings <= 0:
        return totals
    return MacroTotals(
        calories=round_half_up(totals.calories / servings),
        protein=round_half_up(totals.protein / servings),
        carbs=round_half_up(totals.carbs / servings),
        fat=round_half_up(totals.fat / servings),
    )
