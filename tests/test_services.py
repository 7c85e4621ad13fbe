"""Tests for the third-party API services."""

from types import SimpleNamespace

import httpx
import pytest
from httpx import Response

from preppal.services.errors import (
    FatSecretError,
    InstructionGenerationError,
    KrogerError,
    OpenFoodFactsError,
    USDAError,
)
from preppal.services.fatsecret_service import FatSecretService
from preppal.services.instructions_service import (
    InstructionService,
    build_prompt,
    format_ingredient_line,
)
from preppal.services.kroger_service import KrogerService
from preppal.services.open_food_facts_service import OpenFoodFactsService
from preppal.services.usda_service import USDAService

USDA_URL = "https://api.nal.usda.gov/fdc/v1"
FATSECRET_API = "https://platform.fatsecret.com/rest/server.api"
FATSECRET_TOKEN = "https://oauth.fatsecret.com/connect/token"
OFF_URL = "https://world.openfoodfacts.org"
KROGER_API = "https://api.kroger.com/v1"
KROGER_AUTH = "https://api.kroger.com/v1/connect/oauth2"

USDA_SEARCH_RESPONSE = {
    "foods": [
        {
            "fdcId": 171477,
            "description": "Chicken, broilers or fryers, breast, meat only, cooked, roasted",
            "dataType": "SR Legacy",
            "foodNutrients": [
                {"nutrientId": 1008, "nutrientName": "Energy", "value": 165, "unitName": "KCAL"},
                {"nutrientId": 1003, "nutrientName": "Protein", "value": 31.0, "unitName": "G"},
                {"nutrientId": 1004, "nutrientName": "Total lipid (fat)", "value": 3.57, "unitName": "G"},
                {"nutrientId": 1005, "nutrientName": "Carbohydrate, by difference", "value": 0, "unitName": "G"},
                {"nutrientId": 1093, "nutrientName": "Sodium, Na", "value": 74, "unitName": "MG"},
            ],
        }
    ]
}


@pytest.fixture
def fatsecret():
    service = FatSecretService()
    service.client_id = "fs-id"
    service.client_secret = "fs-secret"
    return service


@pytest.fixture
def kroger():
    service = KrogerService()
    service.client_id = "kr-id"
    service.client_secret = "kr-secret"
    service.redirect_uri = "https://preppal.app/api/kroger/callback"
    return service


class TestUSDAService:
    """Tests for USDA FoodData Central."""

    @pytest.mark.anyio
    async def test_search_keeps_only_macro_nutrients(self, mock_httpx):
        route = mock_httpx.get(f"{USDA_URL}/foods/search").mock(
            return_value=Response(200, json=USDA_SEARCH_RESPONSE)
        )
        service = USDAService()

        response = await service.search_foods("chicken breast")
        results = service.format_search_results(response)

        params = route.calls.last.request.url.params
        assert params["query"] == "chicken breast"
        assert params["dataType"] == "Foundation,SR Legacy"
        assert params["api_key"] == "DEMO_KEY"
        assert len(results) == 1
        assert results[0]["fdc_id"] == 171477
        assert {n["nutrient_id"] for n in results[0]["food_nutrients"]} == {1003, 1004, 1005, 1008}
        assert service.result_macros(results[0]) == {
            "calories_per_100g": 165,
            "protein_per_100g": 31.0,
            "carbs_per_100g": 0,
            "fat_per_100g": 3.57,
        }

    @pytest.mark.anyio
    async def test_http_error_raises_usda_error(self, mock_httpx):
        mock_httpx.get(f"{USDA_URL}/foods/search").mock(return_value=Response(503))

        with pytest.raises(USDAError) as exc_info:
            await USDAService().search_foods("rice")
        assert exc_info.value.status_code == 503
        assert not exc_info.value.timeout

    @pytest.mark.anyio
    async def test_timeout_raises_usda_error(self, mock_httpx):
        mock_httpx.get(f"{USDA_URL}/foods/search").mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(USDAError) as exc_info:
            await USDAService().search_foods("rice")
        assert exc_info.value.timeout

    def test_normalize_food_detail(self):
        """Food detail responses nest nutrient ids and use ``amount``."""
        detail = {
            "fdcId": 168878,
            "description": "Rice, white, cooked",
            "dataType": "SR Legacy",
            "foodNutrients": [
                {"nutrient": {"id": 1008}, "amount": 130},
                {"nutrient": {"id": 1003}, "amount": 2.69},
                {"nutrient": {"id": 1005}, "amount": 28.2},
                {"nutrient": {"id": 1004}, "amount": 0.28},
            ],
        }
        assert USDAService().normalize_food_data(detail) == {
            "name": "Rice, white, cooked",
            "fdc_id": 168878,
            "data_type": "SR Legacy",
            "calories_per_100g": 130,
            "protein_per_100g": 2.69,
            "carbs_per_100g": 28.2,
            "fat_per_100g": 0.28,
        }

    def test_missing_nutrient_defaults_to_zero(self):
        assert USDAService().extract_nutrient([], 1008) == 0


class TestFatSecretService:
    """Tests for the FatSecret platform API."""

    @pytest.mark.anyio
    async def test_unconfigured_returns_nothing(self):
        service = FatSecretService()
        service.client_id = ""
        assert await service.search_foods("oats") == []
        assert await service.find_food_by_barcode("0001") is None

    @pytest.mark.anyio
    async def test_search_normalizes_first_serving(self, fatsecret, mock_httpx):
        mock_httpx.post(FATSECRET_TOKEN).mock(
            return_value=Response(200, json={"access_token": "tok", "expires_in": 86400})
        )
        mock_httpx.post(FATSECRET_API).mock(return_value=Response(200, json={
            "foods_search": {"results": {"food": [{
                "food_id": "4881",
                "food_name": "Rolled Oats",
                "brand_name": "Quaker",
                "servings": {"serving": [{
                    "serving_description": "1/2 cup",
                    "metric_serving_amount": "50.000",
                    "metric_serving_unit": "g",
                    "calories": "150",
                    "protein": "5",
                    "carbohydrate": "27",
                    "fat": "2.5",
                }]},
            }]}}
        }))

        results = await fatsecret.search_foods("oats")

        assert len(results) == 1
        oats = results[0]
        assert oats["source"] == "fatsecret"
        assert oats["external_id"] == "4881"
        assert oats["brand"] == "Quaker"
        assert oats["calories_per_100g"] == 300
        assert oats["protein_per_100g"] == 10
        assert oats["carbs_per_100g"] == 54
        assert oats["fat_per_100g"] == 5

    @pytest.mark.anyio
    async def test_household_serving_rounds_halves_up(self, fatsecret, mock_httpx):
        mock_httpx.post(FATSECRET_TOKEN).mock(
            return_value=Response(200, json={"access_token": "tok", "expires_in": 86400})
        )
        mock_httpx.post(FATSECRET_API).mock(return_value=Response(200, json={
            "foods_search": {"results": {"food": [{
                "food_id": "5120",
                "food_name": "Almonds",
                "servings": {"serving": {
                    "serving_description": "1 oz",
                    "metric_serving_amount": "1",
                    "metric_serving_unit": "oz",
                    "calories": "12.25",
                    "protein": "0.25",
                }},
            }]}}
        }))

        almonds = (await fatsecret.search_foods("almonds"))[0]

        assert almonds["calories_per_100g"] == 12.3
        assert almonds["protein_per_100g"] == 0.3

    @pytest.mark.anyio
    async def test_token_is_cached(self, fatsecret, mock_httpx):
        token_route = mock_httpx.post(FATSECRET_TOKEN).mock(
            return_value=Response(200, json={"access_token": "tok", "expires_in": 86400})
        )
        api_route = mock_httpx.post(FATSECRET_API).mock(
            return_value=Response(200, json={"foods_search": {"results": {}}})
        )

        await fatsecret.search_foods("oats")
        await fatsecret.search_foods("rice")

        assert token_route.call_count == 1
        assert api_route.call_count == 2
        assert api_route.calls.last.request.headers["Authorization"] == "Bearer tok"

    @pytest.mark.anyio
    async def test_api_error_payload_raises(self, fatsecret, mock_httpx):
        mock_httpx.post(FATSECRET_TOKEN).mock(
            return_value=Response(200, json={"access_token": "tok", "expires_in": 86400})
        )
        mock_httpx.post(FATSECRET_API).mock(
            return_value=Response(200, json={"error": {"code": 21, "message": "Invalid IP address"}})
        )

        with pytest.raises(FatSecretError, match="Invalid IP address"):
            await fatsecret.search_foods("oats")

    @pytest.mark.anyio
    async def test_unknown_barcode_returns_none(self, fatsecret, mock_httpx):
        mock_httpx.post(FATSECRET_TOKEN).mock(
            return_value=Response(200, json={"access_token": "tok", "expires_in": 86400})
        )
        mock_httpx.post(FATSECRET_API).mock(
            return_value=Response(200, json={"food_id": {"value": "0"}})
        )

        assert await fatsecret.find_food_by_barcode("0000000000000") is None

    def test_non_metric_serving_left_per_serving(self, fatsecret):
        food = fatsecret.normalize_food({
            "food_id": 1,
            "food_name": "Banana",
            "servings": {"serving": {
                "metric_serving_amount": "1",
                "metric_serving_unit": "oz",
                "calories": "105",
            }},
        })
        assert food["calories_per_100g"] == 105


class TestOpenFoodFactsService:
    """Tests for Open Food Facts."""

    @pytest.mark.anyio
    async def test_search_drops_products_without_data(self, mock_httpx):
        route = mock_httpx.get(f"{OFF_URL}/cgi/search.pl").mock(return_value=Response(200, json={
            "products": [
                {
                    "code": "3017620422003",
                    "product_name": "Nutella",
                    "brands": "Ferrero",
                    "nutriments": {
                        "energy-kcal_100g": 539,
                        "proteins_100g": 6.3,
                        "carbohydrates_100g": 57.5,
                        "fat_100g": 30.9,
                    },
                    "image_small_url": "https://images.off.org/small.jpg",
                },
                {"code": "1", "product_name": "", "nutriments": {"fat_100g": 1}},
                {"code": "2", "product_name": "No nutrition"},
            ]
        }))

        results = await OpenFoodFactsService().search_products("nutella")

        assert [r["external_id"] for r in results] == ["3017620422003"]
        assert results[0]["calories_per_100g"] == 539
        assert results[0]["image_url"] == "https://images.off.org/small.jpg"
        assert route.calls.last.request.headers["User-Agent"].startswith("PrepPal/")

    @pytest.mark.anyio
    async def test_barcode_not_found(self, mock_httpx):
        mock_httpx.get(f"{OFF_URL}/api/v2/product/123").mock(
            return_value=Response(200, json={"status": 0, "status_verbose": "product not found"})
        )
        assert await OpenFoodFactsService().get_product_by_barcode("123") is None

    @pytest.mark.anyio
    async def test_barcode_404_is_not_found(self, mock_httpx):
        mock_httpx.get(f"{OFF_URL}/api/v2/product/123").mock(return_value=Response(404, json={"status": 0}))
        assert await OpenFoodFactsService().get_product_by_barcode("123") is None

    @pytest.mark.anyio
    async def test_server_error_raises(self, mock_httpx):
        mock_httpx.get(f"{OFF_URL}/cgi/search.pl").mock(return_value=Response(500))
        with pytest.raises(OpenFoodFactsError):
            await OpenFoodFactsService().search_products("milk")


class TestKrogerService:
    """Tests for the Kroger API."""

    def test_authorization_url(self, kroger):
        url = httpx.URL(kroger.get_authorization_url("state-123"))
        assert str(url).startswith(f"{KROGER_AUTH}/authorize?")
        assert url.params["scope"] == "product.compact cart.basic:write"
        assert url.params["client_id"] == "kr-id"
        assert url.params["state"] == "state-123"
        assert url.params["response_type"] == "code"

    @pytest.mark.anyio
    async def test_exchange_code_uses_basic_auth(self, kroger, mock_httpx):
        route = mock_httpx.post(f"{KROGER_AUTH}/token").mock(return_value=Response(200, json={
            "access_token": "a", "refresh_token": "r", "expires_in": 1800,
        }))

        tokens = await kroger.exchange_code_for_tokens("code-1")

        assert tokens["refresh_token"] == "r"
        request = route.calls.last.request
        assert request.headers["Authorization"].startswith("Basic ")
        assert b"grant_type=authorization_code" in request.content

    @pytest.mark.anyio
    async def test_failed_refresh_raises(self, kroger, mock_httpx):
        mock_httpx.post(f"{KROGER_AUTH}/token").mock(return_value=Response(400, text="invalid_grant"))
        with pytest.raises(KrogerError) as exc_info:
            await kroger.refresh_access_token("old")
        assert exc_info.value.status_code == 400

    @pytest.mark.anyio
    async def test_search_products_with_location(self, kroger, mock_httpx):
        route = mock_httpx.get(f"{KROGER_API}/products").mock(
            return_value=Response(200, json={"data": [{"productId": "0001"}]})
        )

        products = await kroger.search_products("tok", "milk", location_id="01400943")

        assert products == [{"productId": "0001"}]
        params = route.calls.last.request.url.params
        assert params["filter.term"] == "milk"
        assert params["filter.locationId"] == "01400943"

    @pytest.mark.anyio
    async def test_client_credentials_token(self, kroger, mock_httpx):
        route = mock_httpx.post(f"{KROGER_AUTH}/token").mock(
            return_value=Response(200, json={"access_token": "app-token", "expires_in": 1800})
        )

        assert await kroger.get_client_credentials_token() == "app-token"
        assert b"scope=product.compact" in route.calls.last.request.content

    @pytest.mark.anyio
    async def test_search_locations(self, kroger, mock_httpx):
        route = mock_httpx.get(f"{KROGER_API}/locations").mock(
            return_value=Response(200, json={"data": [{"locationId": "01400943"}]})
        )

        locations = await kroger.search_locations("tok", "45202")

        assert locations == [{"locationId": "01400943"}]
        assert route.calls.last.request.url.params["filter.zipCode.near"] == "45202"

    @pytest.mark.anyio
    async def test_add_to_cart(self, kroger, mock_httpx):
        route = mock_httpx.put(f"{KROGER_API}/cart/add").mock(return_value=Response(204))

        await kroger.add_to_cart("tok", [{"upc": "0001111", "quantity": 2}])

        assert route.called
        assert route.calls.last.request.headers["Authorization"] == "Bearer tok"

    def test_extract_nutrition(self, kroger):
        nutrition = kroger.extract_nutrition([{
            "servingSize": {"quantity": 28, "unitOfMeasure": {"name": "Gram", "abbreviation": "g"}},
            "nutrients": [
                {"code": "ENER-", "quantity": 160},
                {"code": "PRO", "quantity": 6},
                {"code": "CHOCDF", "quantity": 6},
                {"code": "FATNLEA", "quantity": 14},
            ],
        }])
        assert nutrition == {
            "calories": 160,
            "protein": 6,
            "carbs": 6,
            "fat": 14,
            "serving_size": 28,
            "serving_unit": "g",
        }

    def test_extract_nutrition_all_zero(self, kroger):
        assert kroger.extract_nutrition([{"nutrients": [{"code": "ENER-", "quantity": 0}]}]) is None
        assert kroger.extract_nutrition([]) is None

    def test_extract_nutrition_serving_unit_fallbacks(self, kroger):
        nutrition = kroger.extract_nutrition([{"nutrients": [{"code": "FAT", "quantity": 1}]}])
        assert nutrition["serving_size"] == 1
        assert nutrition["serving_unit"] == "serving"


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class TestInstructionService:
    """Tests for LLM instruction generation."""

    def test_ingredient_lines(self):
        assert format_ingredient_line({"name": "rice", "amount": 2, "unit": "cup"}) == "- 2 cup rice"
        assert format_ingredient_line({"name": "rice", "grams": 150.0}) == "- 150g rice"
        assert format_ingredient_line({"name": "salt"}) == "- salt"

    def test_prompt_without_tools(self):
        prompt = build_prompt("Fried Rice", [{"name": "rice"}], [])
        assert "Recipe: Fried Rice" in prompt
        assert "No specific cooking tools specified." in prompt
        assert '{ "instructions": ["Step 1...", "Step 2...", ...] }' in prompt

    def test_prompt_with_tools(self):
        prompt = build_prompt("Fried Rice", [], ["wok", "spatula"])
        assert "Available cooking tools:\n- wok\n- spatula" in prompt

    @pytest.mark.anyio
    async def test_generate(self):
        completions = FakeCompletions(content='{"instructions": ["Rinse rice.", "Cook rice."]}')
        service = InstructionService()
        service.client = fake_client(completions)

        steps = await service.generate_cooking_instructions("Rice", [{"name": "rice"}], [])

        assert steps == ["Rinse rice.", "Cook rice."]
        assert completions.kwargs["response_format"] == {"type": "json_object"}
        assert completions.kwargs["model"] == service.model

    @pytest.mark.anyio
    async def test_invalid_json_raises(self):
        service = InstructionService()
        service.client = fake_client(FakeCompletions(content="Step 1: cook"))
        with pytest.raises(InstructionGenerationError):
            await service.generate_cooking_instructions("Rice", [], [])

    @pytest.mark.anyio
    async def test_empty_response_raises(self):
        service = InstructionService()
        service.client = fake_client(FakeCompletions(content=None))
        with pytest.raises(InstructionGenerationError):
            await service.generate_cooking_instructions("Rice", [], [])

    @pytest.mark.anyio
    async def test_missing_api_key_raises(self, monkeypatch):
        monkeypatch.setattr("preppal.services.instructions_service.settings.OPENAI_API_KEY", "")
        with pytest.raises(InstructionGenerationError):
            await InstructionService().generate_cooking_instructions("Rice", [], [])
