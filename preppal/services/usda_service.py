"""
USDA FoodData Central API integration service.

API Documentation: https://fdc.nal.usda.gov/api-guide.html
"""

import httpx

from preppal.core.config import settings
from preppal.core.logging import get_logger
from preppal.services.errors import USDAError

logger = get_logger(__name__)


# Nutrient IDs from USDA FoodData Central
NUTRIENT_IDS = {
    "energy": 1008,   # kcal
    "protein": 1003,  # g
    "carbs": 1005,    # g (Carbohydrate, by difference)
    "fat": 1004,      # g
}

MACRO_NUTRIENT_IDS = set(NUTRIENT_IDS.values())


class USDAService:
    """Service for interacting with USDA FoodData Central API."""

    def __init__(self):
        self.base_url = settings.USDA_BASE_URL
        self.api_key = settings.USDA_API_KEY

    async def _get(self, path: str, params: dict) -> dict:
        params = {**params, "api_key": self.api_key}
        try:
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_S) as client:
                response = await client.get(f"{self.base_url}{path}", params=params)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as e:
            raise USDAError(f"timeout calling {path}", timeout=True) from e
        except httpx.HTTPStatusError as e:
            raise USDAError(
                f"returned {e.response.status_code}", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise USDAError(str(e)) from e

    async def search_foods(self, query: str, page_size: int = 25) -> dict:
        """
        Search for foods in USDA database.

        Args:
            query: Search term
            page_size: Number of results to return

        Returns:
            Raw search response with food items
        """
        logger.info("usda.search_foods query=%s page_size=%s", query, page_size)
        return await self._get(
            "/foods/search",
            {
                "query": query,
                "pageSize": page_size,
                "dataType": "Foundation,SR Legacy",
            },
        )

    async def get_food_by_id(self, fdc_id: int) -> dict:
        """
        Get detailed food information by FDC ID.

        Args:
            fdc_id: USDA FoodData Central ID

        Returns:
            Detailed food data including nutrients
        """
        logger.info("usda.get_food fdc_id=%s", fdc_id)
        return await self._get(f"/food/{fdc_id}", {})

    def extract_nutrient(
        self,
        nutrients: list,
        nutrient_id: int,
        default: float = 0
    ) -> float:
        """
        Extract a specific nutrient value from USDA nutrient list.

        Search results carry ``nutrientId``/``value``; food detail responses
        nest the id under ``nutrient`` and use ``amount``.
        """
        for nutrient in nutrients:
            nid = nutrient.get("nutrient", {}).get("id") or nutrient.get("nutrientId")
            if nid == nutrient_id:
                value = nutrient.get("amount")
                if value is None:
                    value = nutrient.get("value", default)
                return value
        return default

    def normalize_food_data(self, usda_food: dict) -> dict:
        """
        Normalize USDA food data to our food format (per 100g).

        Args:
            usda_food: Raw USDA food data

        Returns:
            Dict of Food column values
        """
        nutrients = usda_food.get("foodNutrients", [])

        return {
            "name": usda_food.get("description", "Unknown Food"),
            "fdc_id": usda_food.get("fdcId"),
            "data_type": usda_food.get("dataType"),
            "calories_per_100g": self.extract_nutrient(nutrients, NUTRIENT_IDS["energy"]),
            "protein_per_100g": self.extract_nutrient(nutrients, NUTRIENT_IDS["protein"]),
            "carbs_per_100g": self.extract_nutrient(nutrients, NUTRIENT_IDS["carbs"]),
            "fat_per_100g": self.extract_nutrient(nutrients, NUTRIENT_IDS["fat"]),
        }

    def format_search_results(self, search_response: dict) -> list[dict]:
        """
        Format USDA search results for API response.

        Only the four macro nutrients are kept on each result.
        """
        results = []

        for food in search_response.get("foods", []):
            results.append({
                "fdc_id": food.get("fdcId"),
                "description": food.get("description"),
                "data_type": food.get("dataType"),
                "brand_owner": food.get("brandOwner"),
                "food_nutrients": [
                    {
                        "nutrient_id": n.get("nutrientId"),
                        "nutrient_name": n.get("nutrientName"),
                        "value": n.get("value", 0),
                        "unit_name": n.get("unitName"),
                    }
                    for n in food.get("foodNutrients", [])
                    if n.get("nutrientId") in MACRO_NUTRIENT_IDS
                ],
            })

        return results

    def result_macros(self, result: dict) -> dict:
        """Per-100g macros of a formatted search result."""
        values = {n["nutrient_id"]: n["value"] for n in result.get("food_nutrients", [])}
        return {
            "calories_per_100g": values.get(NUTRIENT_IDS["energy"], 0),
            "protein_per_100g": values.get(NUTRIENT_IDS["protein"], 0),
            "carbs_per_100g": values.get(NUTRIENT_IDS["carbs"], 0),
            "fat_per_100g": values.get(NUTRIENT_IDS["fat"], 0),
        }


usda_service = USDAService()
