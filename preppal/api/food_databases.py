"""
External food database endpoints.

Thin search/lookup wrappers over USDA, FatSecret and Open Food Facts, plus
unit and attribution reference data for the client.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from preppal.core.auth import AuthUser, require_auth
from preppal.core.units import UNIT_CATEGORIES, UNIT_CONVERSIONS, UNIT_LABELS
from preppal.schemas.schemas import NutritionSearchResult, UnitsResponse, USDASearchResult
from preppal.services.fatsecret_service import fatsecret_service
from preppal.services.open_food_facts_service import open_food_facts_service
from preppal.services.usda_service import usda_service

router = APIRouter(prefix="/api", tags=["food databases"])

MIN_QUERY_LENGTH = 2


@router.get("/usda/search", response_model=list[USDASearchResult])
async def search_usda(
    q: str = Query("", description="Search query"),
    user: AuthUser = Depends(require_auth)
):
    """
    Search USDA FoodData Central (Foundation and SR Legacy foods).

    Results can be imported with /api/foods/from-usda.
    """
    if len(q) < MIN_QUERY_LENGTH:
        return []
    results = await usda_service.search_foods(q)
    return usda_service.format_search_results(results)


@router.get("/fatsecret/search", response_model=list[NutritionSearchResult])
async def search_fatsecret(
    q: str = Query("", description="Search query"),
    user: AuthUser = Depends(require_auth)
):
    """Search FatSecret; empty when FatSecret credentials are not configured."""
    if len(q) < MIN_QUERY_LENGTH:
        return []
    return await fatsecret_service.search_foods(q)


@router.get("/fatsecret/barcode/{barcode}", response_model=NutritionSearchResult)
async def fatsecret_barcode(
    barcode: str,
    user: AuthUser = Depends(require_auth)
):
    """Look up a barcode in FatSecret."""
    result = await fatsecret_service.find_food_by_barcode(barcode)
    if not result:
        raise HTTPException(status_code=404, detail="Product not found")
    return result


@router.get("/openfoodfacts/search", response_model=list[NutritionSearchResult])
async def search_open_food_facts(
    q: str = Query("", description="Search query"),
    user: AuthUser = Depends(require_auth)
):
    """Search Open Food Facts products."""
    if len(q) < MIN_QUERY_LENGTH:
        return []
    return await open_food_facts_service.search_products(q)


@router.get("/openfoodfacts/barcode/{barcode}", response_model=NutritionSearchResult)
async def open_food_facts_barcode(
    barcode: str,
    user: AuthUser = Depends(require_auth)
):
    """Look up a barcode in Open Food Facts."""
    result = await open_food_facts_service.get_product_by_barcode(barcode)
    if not result:
        raise HTTPException(status_code=404, detail="Product not found")
    return result


@router.get("/units", response_model=UnitsResponse)
def list_units(user: AuthUser = Depends(require_auth)):
    """Recipe units, their gram conversions and how the client groups them."""
    return UnitsResponse(
        conversions=UNIT_CONVERSIONS,
        labels=UNIT_LABELS,
        categories=UNIT_CATEGORIES,
    )


@router.get("/attribution")
def get_attribution():
    """Data source credits the client must display."""
    return {
        "usda": {
            "name": "USDA FoodData Central",
            "url": "https://fdc.nal.usda.gov/",
        },
        "fatsecret": {
            "name": "Powered by FatSecret",
            "url": "https://www.fatsecret.com",
            "image_url": "https://platform.fatsecret.com/api/static/images/powered_by_fatsecret.svg",
        },
        "openfoodfacts": {
            "name": "Open Food Facts",
            "url": "https://world.openfoodfacts.org",
            "license": "ODbL",
        },
    }
