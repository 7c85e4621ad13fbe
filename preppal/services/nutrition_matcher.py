"""
Nutrition resolution for retailer products.

A product picked from the Kroger catalog is linked to a Food by trying, in
order: the product's own nutrition label, a barcode lookup, then a name
search across the food databases. The first acceptable match is saved (or an
existing food with the same external identifier is reused).
"""

from dataclasses import dataclass
from typing import Awaitable, Optional

from sqlalchemy.orm import Session

from preppal.core.logging import get_logger
from preppal.core.macros import round_half_up
from preppal.core.matching import build_search_term, contains_keyword
from preppal.core.units import estimate_grams_per_serving, to_per_100g
from preppal.models.models import DataType, Food
from preppal.schemas.schemas import AutoMatchRequest
from preppal.services.errors import ExternalServiceError
from preppal.services.fatsecret_service import fatsecret_service
from preppal.services.kroger_service import kroger_service
from preppal.services.open_food_facts_service import open_food_facts_service
from preppal.services.usda_service import usda_service

logger = get_logger(__name__)

MIN_SEARCH_TERM_LENGTH = 3
USDA_PAGE_SIZE = 10
SEARCH_LIMIT = 10

MACRO_FIELDS = ("calories_per_100g", "protein_per_100g", "carbs_per_100g", "fat_per_100g")


@dataclass
class MatchResult:
    matched: bool
    source: Optional[str] = None
    food: Optional[Food] = None
    search_term: Optional[str] = None


def has_usable_macros(values: dict) -> bool:
    """A candidate is usable when it reports calories or protein."""
    return (values.get("calories_per_100g") or 0) > 0 or (values.get("protein_per_100g") or 0) > 0


async def _attempt(source: str, call: Awaitable):
    """Await a lookup; a service failure is logged and yields None."""
    try:
        return await call
    except ExternalServiceError as e:
        logger.warning("nutrition_matcher: %s failed: %s", source, e)
        return None


def _find_existing(db: Session, user_id: str, column: str, value) -> Optional[Food]:
    if value is None or value == "":
        return None
    return db.query(Food).filter(
        Food.user_id == user_id,
        getattr(Food, column) == value,
    ).first()


def _save_food(db: Session, user_id: str, identifiers: tuple, values: dict) -> Food:
    """Persist a matched food unless one with the same external identifier already exists."""
    for identifier in identifiers:
        existing = _find_existing(db, user_id, identifier, values.get(identifier))
        if existing:
            logger.info("nutrition_matcher: reusing food id=%s (%s)", existing.id, identifier)
            return existing

    food = Food(user_id=user_id, is_custom=False, **values)
    db.add(food)
    db.commit()
    db.refresh(food)
    logger.info("nutrition_matcher: saved food id=%s name=%s", food.id, food.name)
    return food


def label_nutrition(product: AutoMatchRequest) -> Optional[dict]:
    """
    Per-100g macros from the retailer's label.

    None when the label is missing or its serving can't be converted to grams
    reliably (volume and count servings).
    """
    nutrition = kroger_service.extract_nutrition(
        [info.model_dump() for info in product.nutrition_information]
    )
    if not nutrition:
        return None

    grams_per_serving = estimate_grams_per_serving(
        nutrition["serving_size"], nutrition["serving_unit"]
    )
    if grams_per_serving is None:
        logger.info(
            "nutrition_matcher: unreliable serving unit %r for %s",
            nutrition["serving_unit"], product.description,
        )
        return None

    return {
        "calories_per_100g": round_half_up(to_per_100g(nutrition["calories"], grams_per_serving)),
        "protein_per_100g": round_half_up(to_per_100g(nutrition["protein"], grams_per_serving)),
        "carbs_per_100g": round_half_up(to_per_100g(nutrition["carbs"], grams_per_serving)),
        "fat_per_100g": round_half_up(to_per_100g(nutrition["fat"], grams_per_serving)),
    }


def _macros(result: dict) -> dict:
    return {field: result.get(field) or 0 for field in MACRO_FIELDS}


def _open_food_facts_values(result: dict, upc: Optional[str] = None) -> dict:
    return {
        "name": result["name"],
        "description": result.get("brand"),
        "data_type": DataType.OPEN_FOOD_FACTS.value,
        "off_code": result["external_id"],
        "upc": upc,
        **_macros(result),
    }


def _fatsecret_values(result: dict, upc: Optional[str] = None) -> dict:
    return {
        "name": result["name"],
        "description": result.get("brand") or result.get("description"),
        "data_type": DataType.FATSECRET.value,
        "fatsecret_id": result["external_id"],
        "upc": upc,
        **_macros(result),
    }


async def _match_barcode(db: Session, user_id: str, upc: str) -> Optional[MatchResult]:
    result = await _attempt(
        "openfoodfacts barcode", open_food_facts_service.get_product_by_barcode(upc)
    )
    if result and has_usable_macros(result):
        food = _save_food(db, user_id, ("off_code",), _open_food_facts_values(result, upc))
        return MatchResult(matched=True, source="openfoodfacts", food=food)

    result = await _attempt("fatsecret barcode", fatsecret_service.find_food_by_barcode(upc))
    if result and has_usable_macros(result):
        food = _save_food(db, user_id, ("fatsecret_id",), _fatsecret_values(result, upc))
        return MatchResult(matched=True, source="fatsecret", food=food)

    return None


def _first_acceptable(results: list[dict], search_term: str, name_key: str = "name") -> Optional[dict]:
    for result in results:
        if contains_keyword(result.get(name_key) or "", search_term) and has_usable_macros(result):
            return result
    return None


async def _match_name(db: Session, user_id: str, search_term: str) -> Optional[MatchResult]:
    response = await _attempt(
        "usda search", usda_service.search_foods(search_term, page_size=USDA_PAGE_SIZE)
    )
    if response:
        candidates = [
            {**result, **usda_service.result_macros(result)}
            for result in usda_service.format_search_results(response)
        ]
        match = _first_acceptable(candidates, search_term, name_key="description")
        if match:
            food = _save_food(db, user_id, ("fdc_id",), {
                "name": match["description"],
                "fdc_id": match["fdc_id"],
                "data_type": match.get("data_type"),
                **_macros(match),
            })
            return MatchResult(matched=True, source="usda", food=food, search_term=search_term)

    results = await _attempt(
        "fatsecret search", fatsecret_service.search_foods(search_term, max_results=SEARCH_LIMIT)
    )
    match = _first_acceptable(results or [], search_term)
    if match:
        food = _save_food(db, user_id, ("fatsecret_id",), _fatsecret_values(match))
        return MatchResult(matched=True, source="fatsecret", food=food, search_term=search_term)

    results = await _attempt(
        "openfoodfacts search",
        open_food_facts_service.search_products(search_term, limit=SEARCH_LIMIT),
    )
    match = _first_acceptable(results or [], search_term)
    if match:
        food = _save_food(db, user_id, ("off_code",), _open_food_facts_values(match))
        return MatchResult(
            matched=True, source="openfoodfacts", food=food, search_term=search_term
        )

    return None


async def resolve_product_nutrition(
    db: Session,
    user_id: str,
    product: AutoMatchRequest,
) -> MatchResult:
    """
    Link a retailer product to nutrition data.

    Sources are tried in order and the first acceptable one wins:
    1. the product's own nutrition label
    2. barcode lookup (Open Food Facts, then FatSecret)
    3. name search (USDA, then FatSecret, then Open Food Facts), where a
       result must contain the search term's primary keyword

    Args:
        db: Database session
        user_id: Owner of any food that gets saved
        product: Retailer product details

    Returns:
        MatchResult; ``matched`` is False when no source produced usable data
    """
    logger.info("nutrition_matcher.resolve description=%s upc=%s", product.description, product.upc)

    values = label_nutrition(product)
    if values and has_usable_macros(values):
        food = _save_food(db, user_id, ("kroger_product_id", "upc"), {
            "name": product.description,
            "data_type": DataType.KROGER.value,
            "kroger_product_id": product.product_id,
            "kroger_product_name": product.description,
            "kroger_product_image": product.image_url,
            "upc": product.upc,
            **values,
        })
        return MatchResult(matched=True, source="kroger", food=food)

    if product.upc:
        result = await _match_barcode(db, user_id, product.upc)
        if result:
            return result

    search_term = build_search_term(product.description)
    if len(search_term) < MIN_SEARCH_TERM_LENGTH:
        logger.info("nutrition_matcher: search term %r too short", search_term)
        return MatchResult(matched=False, search_term=search_term)

    result = await _match_name(db, user_id, search_term)
    if result:
        return result

    logger.info("nutrition_matcher: no match for %s", product.description)
    return MatchResult(matched=False, search_term=search_term)
