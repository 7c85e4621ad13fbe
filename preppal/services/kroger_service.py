"""
Kroger public API integration service.

API Documentation: https://developer.kroger.com/reference
"""

from typing import Optional
from urllib.parse import urlencode

import httpx

from preppal.core.config import settings
from preppal.core.logging import get_logger
from preppal.services.errors import KrogerError

logger = get_logger(__name__)

USER_SCOPES = "product.compact cart.basic:write"

# Nutrient codes as they appear on Kroger labels, in preference order
NUTRIENT_CODES = {
    "calories": ["ENER-", "ENER", "ENRC"],
    "protein": ["PRO-", "PRO", "PROCNT"],
    "carbs": ["CHO-", "CHO", "CHOCDF"],
    "fat": ["FAT", "FATNLEA"],
}


class KrogerService:
    """Service for Kroger OAuth, product, location and cart APIs."""

    def __init__(self):
        self.api_url = settings.KROGER_API_URL
        self.auth_url = settings.KROGER_AUTH_URL
        self.client_id = settings.KROGER_CLIENT_ID
        self.client_secret = settings.KROGER_CLIENT_SECRET
        self.redirect_uri = settings.KROGER_REDIRECT_URI

    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def get_authorization_url(self, state: str) -> str:
        params = {
            "scope": USER_SCOPES,
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "state": state,
        }
        return f"{self.auth_url}/authorize?{urlencode(params)}"

    async def _request(self, method: str, url: str, operation: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_S) as client:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response
        except httpx.TimeoutException as e:
            raise KrogerError(f"timeout during {operation}", timeout=True) from e
        except httpx.HTTPStatusError as e:
            raise KrogerError(
                f"{operation} failed: {e.response.status_code} {e.response.text}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise KrogerError(f"{operation} failed: {e}") from e

    async def _token_request(self, data: dict, operation: str) -> dict:
        response = await self._request(
            "POST",
            f"{self.auth_url}/token",
            operation,
            data=data,
            auth=(self.client_id, self.client_secret),
        )
        return response.json()

    async def exchange_code_for_tokens(self, code: str) -> dict:
        """Trade an authorization code for access and refresh tokens."""
        logger.info("kroger.exchange_code")
        return await self._token_request(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
            },
            "token exchange",
        )

    async def refresh_access_token(self, refresh_token: str) -> dict:
        logger.info("kroger.refresh_token")
        return await self._token_request(
            {"grant_type": "refresh_token", "refresh_token": refresh_token},
            "token refresh",
        )

    async def get_client_credentials_token(self) -> str:
        """App-level token for product search without a connected account."""
        data = await self._token_request(
            {"grant_type": "client_credentials", "scope": "product.compact"},
            "client credentials",
        )
        return data["access_token"]

    def _auth_headers(self, access_token: str) -> dict:
        return {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}

    async def search_products(
        self,
        access_token: str,
        term: str,
        location_id: Optional[str] = None,
        limit: int = 10,
    ) -> list[dict]:
        params = {"filter.term": term, "filter.limit": str(limit)}
        if location_id:
            params["filter.locationId"] = location_id

        logger.info("kroger.search_products term=%s location_id=%s", term, location_id)
        response = await self._request(
            "GET",
            f"{self.api_url}/products",
            "product search",
            params=params,
            headers=self._auth_headers(access_token),
        )
        return response.json().get("data") or []

    async def search_locations(
        self,
        access_token: str,
        zip_code: str,
        radius_miles: int = 10,
        limit: int = 10,
    ) -> list[dict]:
        params = {
            "filter.zipCode.near": zip_code,
            "filter.radiusInMiles": str(radius_miles),
            "filter.limit": str(limit),
        }
        logger.info("kroger.search_locations zip=%s", zip_code)
        response = await self._request(
            "GET",
            f"{self.api_url}/locations",
            "location search",
            params=params,
            headers=self._auth_headers(access_token),
        )
        return response.json().get("data") or []

    async def add_to_cart(self, access_token: str, items: list[dict]) -> None:
        """Add ``{"upc", "quantity"}`` items to the connected account's cart."""
        logger.info("kroger.add_to_cart items=%s", len(items))
        await self._request(
            "PUT",
            f"{self.api_url}/cart/add",
            "add to cart",
            json={"items": [{"upc": i["upc"], "quantity": i["quantity"]} for i in items]},
            headers={**self._auth_headers(access_token), "Content-Type": "application/json"},
        )

    def extract_nutrition(self, nutrition_information: list[dict]) -> Optional[dict]:
        """
        Pull per-serving macros from a product's nutrition label.

        Only the first label is used. Returns None when every macro is zero.
        """
        if not nutrition_information:
            return None

        info = nutrition_information[0]
        nutrients = info.get("nutrients") or []

        def nutrient(codes: list[str]) -> float:
            for code in codes:
                for n in nutrients:
                    if n.get("code") == code and n.get("quantity") is not None:
                        return n["quantity"]
            return 0

        values = {key: nutrient(codes) for key, codes in NUTRIENT_CODES.items()}
        if not any(values.values()):
            return None

        serving = info.get("servingSize") or {}
        unit = serving.get("unitOfMeasure") or {}
        return {
            **values,
            "serving_size": serving.get("quantity") or 1,
            "serving_unit": unit.get("abbreviation") or unit.get("name") or "serving",
        }


kroger_service = KrogerService()
