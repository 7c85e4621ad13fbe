"""
Shopping list consolidation.

Ingredients from the selected recipes are merged by canonical name, pantry
staples are optionally dropped, and the result is grouped by store section.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from preppal.core.macros import round_half_up
from preppal.core.matching import matches_staple, normalize_name


CATEGORY_ORDER = [
    "produce",
    "meat",
    "seafood",
    "dairy",
    "bakery",
    "frozen",
    "pantry",
    "condiments",
    "spices",
    "beverages",
    "other",
]

CATEGORY_LABELS = {
    "produce": "Produce",
    "meat": "Meat & Poultry",
    "seafood": "Seafood",
    "dairy": "Dairy & Eggs",
    "bakery": "Bakery",
    "frozen": "Frozen",
    "pantry": "Pantry",
    "condiments": "Condiments & Sauces",
    "spices": "Spices & Seasonings",
    "beverages": "Beverages",
    "other": "Other",
}


@dataclass
class RecipeAmount:
    amount: float
    unit: str
    recipe_name: str


@dataclass
class ShoppingListItem:
    display_name: str
    total_grams: float
    category: str
    is_pantry_staple: bool
    recipe_names: list[str] = field(default_factory=list)
    amounts: list[RecipeAmount] = field(default_factory=list)
    kroger_product_id: Optional[str] = None


@dataclass
class ShoppingListGroup:
    category: str
    label: str
    items: list[ShoppingListItem]


def is_pantry_staple(ingredient, staple_names: Iterable[str]) -> bool:
    """An ingredient is a staple if flagged on the recipe or it matches a user staple."""
    if ingredient.is_pantry_staple:
        return True
    return any(matches_staple(ingredient.display_name, staple) for staple in staple_names)


def consolidate_ingredients(
    recipes: list,
    aliases: Optional[dict[str, str]] = None,
    staple_names: Iterable[str] = (),
    exclude_pantry_staples: bool = True,
) -> list[ShoppingListItem]:
    """
    Merge ingredients across recipes.

    Args:
        recipes: Recipes with ``title`` and ``ingredients``
        aliases: Normalized alias name -> canonical name
        staple_names: The user's pantry staple names
        exclude_pantry_staples: Drop staples from the result

    Returns:
        One item per canonical ingredient, in first-seen order
    """
    aliases = aliases or {}
    staple_names = list(staple_names)
    items: dict[str, ShoppingListItem] = {}

    for recipe in recipes:
        for ingredient in recipe.ingredients:
            staple = is_pantry_staple(ingredient, staple_names)
            if exclude_pantry_staples and staple:
                continue

            normalized = normalize_name(ingredient.display_name)
            key = aliases.get(normalized, normalized)
            has_amount = bool(ingredient.amount and ingredient.unit)

            existing = items.get(key)
            if existing:
                existing.total_grams += ingredient.grams or 0
                existing.recipe_names.append(recipe.title)
                if has_amount:
                    existing.amounts.append(
                        RecipeAmount(ingredient.amount, ingredient.unit, recipe.title)
                    )
                if not existing.kroger_product_id:
                    existing.kroger_product_id = ingredient.kroger_product_id
            else:
                items[key] = ShoppingListItem(
                    display_name=ingredient.display_name,
                    total_grams=ingredient.grams or 0,
                    category=ingredient.category or "other",
                    is_pantry_staple=staple,
                    recipe_names=[recipe.title],
                    amounts=(
                        [RecipeAmount(ingredient.amount, ingredient.unit, recipe.title)]
                        if has_amount else []
                    ),
                    kroger_product_id=ingredient.kroger_product_id,
                )

    return list(items.values())


def group_by_category(items: list[ShoppingListItem]) -> list[ShoppingListGroup]:
    """Group items into store sections in CATEGORY_ORDER, each sorted by name."""
    groups: dict[str, list[ShoppingListItem]] = {}
    for item in items:
        category = item.category if item.category in CATEGORY_LABELS else "other"
        groups.setdefault(category, []).append(item)

    return [
        ShoppingListGroup(
            category=category,
            label=CATEGORY_LABELS[category],
            items=sorted(groups[category], key=lambda i: i.display_name.lower()),
        )
        for category in CATEGORY_ORDER
        if groups.get(category)
    ]


def format_shopping_list_text(
    groups: list[ShoppingListGroup],
    checked: Iterable[str] = (),
) -> str:
    """Render grouped items as a plain-text checklist."""
    checked = set(checked)
    lines = []
    for group in groups:
        lines.append(f"\n{group.label.upper()}")
        lines.append("-" * len(group.label))
        for item in group.items:
            mark = "[x]" if item.display_name in checked else "[ ]"
            recipes = ", ".join(item.recipe_names)
            lines.append(f"{mark} {item.display_name} - {round_half_up(item.total_grams, 0):.0f}g ({recipes})")
    return "\n".join(lines)
