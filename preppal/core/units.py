"""Unit conversion utilities.

Grams are the authoritative quantity for macro math; everything else is
converted to grams on the way in.
"""

from typing import Optional


# Grams per unit. Volume units assume water-like density; count units are 0
# because they need a per-food grams_per_unit.
UNIT_CONVERSIONS = {
    "g": 1,
    "kg": 1000,
    "oz": 28.3495,
    "lb": 453.592,
    "ml": 1,
    "l": 1000,
    "tsp": 5,
    "tbsp": 15,
    "cup": 240,
    "fl oz": 30,
    "pint": 473,
    "quart": 946,
    "piece": 0,
    "slice": 0,
    "whole": 0,
}

UNIT_LABELS = {
    "g": "grams (g)",
    "kg": "kilograms (kg)",
    "oz": "ounces (oz)",
    "lb": "pounds (lb)",
    "ml": "milliliters (ml)",
    "l": "liters (l)",
    "tsp": "teaspoon (tsp)",
    "tbsp": "tablespoon (tbsp)",
    "cup": "cups",
    "fl oz": "fluid ounces (fl oz)",
    "pint": "pints",
    "quart": "quarts",
    "piece": "piece(s)",
    "slice": "slice(s)",
    "whole": "whole",
}

UNIT_CATEGORIES = {
    "weight": ["g", "kg", "oz", "lb"],
    "volume": ["ml", "l", "tsp", "tbsp", "cup", "fl oz", "pint", "quart"],
    "count": ["piece", "slice", "whole"],
}

# Retailer serving labels are only trusted when they are weights
SERVING_WEIGHT_UNITS = {
    "g": 1.0,
    "gram": 1.0,
    "grams": 1.0,
    "grm": 1.0,
    "oz": 28.35,
    "ounce": 28.35,
    "ounces": 28.35,
    "lb": 453.59,
    "pound": 453.59,
    "pounds": 453.59,
}

METRIC_SERVING_UNITS = {"g", "gram", "grams", "ml", "milliliter", "milliliters"}


def convert_to_grams(amount: float, unit: Optional[str], grams_per_unit: Optional[float] = None) -> float:
    """
    Convert an amount in a recipe unit to grams.

    Count units use ``grams_per_unit`` when given. Unknown units (and count
    units without a density) fall back to treating the amount as grams.
    """
    conversion = UNIT_CONVERSIONS.get(unit) if unit else None
    if conversion == 0 and grams_per_unit:
        return amount * grams_per_unit
    if conversion:
        return amount * conversion
    return amount


def estimate_grams_per_serving(serving_size: float, serving_unit: str) -> Optional[float]:
    """
    Convert a labelled serving size to grams.

    Returns None for volumetric, count-based or unknown units: without a
    density those conversions are guesses.
    """
    unit = (serving_unit or "").lower().strip()
    factor = SERVING_WEIGHT_UNITS.get(unit)
    if factor is None:
        return None
    return serving_size * factor


def to_per_100g(value: float, grams_per_serving: float) -> float:
    """Scale a per-serving nutrient value to per 100g."""
    if grams_per_serving <= 0:
        return value
    return (value / grams_per_serving) * 100


def serving_to_per_100g(value: float, serving_amount: float, serving_unit: str) -> float:
    """Scale a per-serving value to per 100 when the serving is metric (g or ml)."""
    if serving_unit in METRIC_SERVING_UNITS and serving_amount > 0:
        return (value / serving_amount) * 100
    return value
