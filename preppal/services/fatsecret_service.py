"""
FatSecret Platform API integration service.

API Documentation: https://platform.fatsecret.com/docs/guides
"""

import time
from typing import Optional

import httpx

from preppal.core.config import settings
from preppal.core.logging import get_logger
from preppal.core.macros import round_half_up
from preppal.core.units import serving_to_per_100g
from preppal.services.errors import FatSecretError

logger = get_logger(__name__)

# Refresh tokens a minute early so in-flight requests never carry an expired one
TOKEN_EXPIRY_MARGIN_S = 60


class FatSecretService:
    """Service for the FatSecret REST API (OAuth2 client credentials)."""

    def __init__(self):
        self.api_url = settings.FATSECRET_API_URL
        self.token_url = settings.FATSECRET_TOKEN_URL
        self.client_id = settings.FATSECRET_CLIENT_ID
        self.client_secret = settings.FATSECRET_CLIENT_SECRET
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    async def _get_access_token(self) -> str:
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        try:
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_S) as client:
                response = await client.post(
                    self.token_url,
                    auth=(self.client_id, self.client_secret),
                    data={"grant_type": "client_credentials", "scope": "basic"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise FatSecretError(
                f"token error {e.response.status_code}", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise FatSecretError(f"token error: {e}", timeout=isinstance(e, httpx.TimeoutException)) from e

        self._token = data["access_token"]
        self._token_expires_at = time.monotonic() + data.get("expires_in", 0) - TOKEN_EXPIRY_MARGIN_S
        logger.info("fatsecret: obtained new access token")
        return self._token

    async def _request(self, params: dict) -> dict:
        token = await self._get_access_token()
        try:
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_S) as client:
                response = await client.post(
                    self.api_url,
                    params={**params, "format": "json"},
                    headers={"Authorization": f"Bearer {token}"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise FatSecretError(
                f"returned {e.response.status_code}", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise FatSecretError(str(e), timeout=isinstance(e, httpx.TimeoutException)) from e

        # FatSecret reports API errors with a 200 status
        if data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise FatSecretError(message or "unknown error")
        return data

    def normalize_food(self, food: dict) -> dict:
        """Convert a FatSecret food (first serving) to per-100g macros."""
        servings = (food.get("servings") or {}).get("serving")
        serving = servings[0] if isinstance(servings, list) and servings else servings

        macros = {
            "calories_per_100g": 0.0,
            "protein_per_100g": 0.0,
            "carbs_per_100g": 0.0,
            "fat_per_100g": 0.0,
        }
        if serving:
            amount = float(serving.get("metric_serving_amount") or 100)
            unit = serving.get("metric_serving_unit") or "g"
            for key, field in (
                ("calories_per_100g", "calories"),
                ("protein_per_100g", "protein"),
                ("carbs_per_100g", "carbohydrate"),
                ("fat_per_100g", "fat"),
            ):
                value = float(serving.get(field) or 0)
                macros[key] = round_half_up(serving_to_per_100g(value, amount, unit))

        return {
            "source": "fatsecret",
            "external_id": str(food.get("food_id")),
            "name": food.get("food_name", "Unknown"),
            "brand": food.get("brand_name"),
            "description": food.get("food_description", ""),
            "image_url": None,
            "serving_size": serving.get("serving_description") if serving else None,
            **macros,
        }

    async def search_foods(self, query: str, max_results: int = 20) -> list[dict]:
        """Search foods; returns [] when FatSecret is not configured."""
        if not self.is_configured():
            logger.warning("fatsecret: not configured, skipping search")
            return []

        logger.info("fatsecret.search_foods query=%s", query)
        data = await self._request({
            "method": "foods.search.v3",
            "search_expression": query,
            "max_results": str(max_results),
            "page_number": "0",
            "include_food_images": "false",
            "flag_default_serving": "true",
            "region": "US",
            "language": "en",
        })

        foods = ((data.get("foods_search") or {}).get("results") or {}).get("food")
        if not foods:
            return []
        if not isinstance(foods, list):
            foods = [foods]
        logger.info("fatsecret.search_foods found=%s", len(foods))
        return [self.normalize_food(food) for food in foods]

    async def get_food_by_id(self, food_id: str) -> Optional[dict]:
        if not self.is_configured():
            return None

        data = await self._request({
            "method": "food.get.v4",
            "food_id": food_id,
            "include_food_images": "false",
            "region": "US",
            "language": "en",
        })
        food = data.get("food")
        return self.normalize_food(food) if food else None

    async def find_food_by_barcode(self, barcode: str) -> Optional[dict]:
        """Look up a GTIN-13/UPC barcode; None when unknown."""
        if not self.is_configured():
            return None

        logger.info("fatsecret.find_food_by_barcode barcode=%s", barcode)
        data = await self._request({
            "method": "food.find_id_for_barcode",
            "barcode": barcode,
            "region": "US",
        })

        food_id = data.get("food_id")
        if isinstance(food_id, dict):
            food_id = food_id.get("value")
        if not food_id or str(food_id) == "0":
            logger.info("fatsecret: no food for barcode %s", barcode)
            return None

        return await self.get_food_by_id(str(food_id))


fatsecret_service = FatSecretService()
