"""
Open Food Facts integration service.

Open Food Facts is a free, open product database; requests identify the app
through a custom User-Agent as its usage policy asks.
"""

from typing import Optional

import httpx

from preppal.core.config import settings
from preppal.core.logging import get_logger
from preppal.services.errors import OpenFoodFactsError

logger = get_logger(__name__)

SEARCH_FIELDS = "code,product_name,brands,nutriments,serving_size,serving_quantity,image_url,image_small_url"


class OpenFoodFactsService:
    """Service for the Open Food Facts search and product APIs."""

    def __init__(self):
        self.base_url = settings.OFF_BASE_URL
        self.headers = {"User-Agent": settings.OFF_USER_AGENT}

    async def _get(self, path: str, params: Optional[dict] = None) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_S) as client:
                return await client.get(
                    f"{self.base_url}{path}", params=params, headers=self.headers
                )
        except httpx.TimeoutException as e:
            raise OpenFoodFactsError(f"timeout calling {path}", timeout=True) from e
        except httpx.HTTPError as e:
            raise OpenFoodFactsError(str(e)) from e

    def normalize_product(self, product: dict) -> dict:
        nutriments = product.get("nutriments") or {}
        return {
            "source": "openfoodfacts",
            "external_id": str(product.get("code", "")),
            "name": product.get("product_name") or "Unknown",
            "brand": product.get("brands") or None,
            "calories_per_100g": nutriments.get("energy-kcal_100g") or 0,
            "protein_per_100g": nutriments.get("proteins_100g") or 0,
            "carbs_per_100g": nutriments.get("carbohydrates_100g") or 0,
            "fat_per_100g": nutriments.get("fat_100g") or 0,
            "serving_size": product.get("serving_size") or None,
            "image_url": product.get("image_small_url") or product.get("image_url") or None,
            "description": None,
        }

    async def search_products(self, query: str, limit: int = 20) -> list[dict]:
        """
        Full-text product search.

        Products without a name or nutriments are dropped.
        """
        logger.info("openfoodfacts.search_products query=%s", query)
        response = await self._get(
            "/cgi/search.pl",
            {
                "search_terms": query,
                "search_simple": "1",
                "action": "process",
                "json": "1",
                "page_size": str(limit),
                "fields": SEARCH_FIELDS,
            },
        )
        if response.is_error:
            raise OpenFoodFactsError(
                f"returned {response.status_code}", status_code=response.status_code
            )

        products = response.json().get("products") or []
        return [
            self.normalize_product(p)
            for p in products
            if p.get("product_name") and p.get("nutriments")
        ]

    async def get_product_by_barcode(self, barcode: str) -> Optional[dict]:
        """Fetch one product by barcode; None when Open Food Facts doesn't know it."""
        logger.info("openfoodfacts.get_product barcode=%s", barcode)
        response = await self._get(f"/api/v2/product/{barcode}")
        # Unknown barcodes come back as 404 with status 0
        if response.status_code == 404:
            return None
        if response.is_error:
            raise OpenFoodFactsError(
                f"returned {response.status_code}", status_code=response.status_code
            )

        data = response.json()
        if data.get("status") != 1 or not data.get("product"):
            return None
        product = data["product"]
        product.setdefault("code", barcode)
        return self.normalize_product(product)


open_food_facts_service = OpenFoodFactsService()
