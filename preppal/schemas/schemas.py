"""Pydantic schemas for request/response validation."""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


# User schemas
class UserResponse(BaseModel):
    id: str
    email: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]
    profile_image_url: Optional[str]

    class Config:
        from_attributes = True


# Macro schemas
class MacroTotalsResponse(BaseModel):
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0


# Food schemas
class FoodBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    data_type: Optional[str] = None
    calories_per_100g: float = Field(..., ge=0)
    protein_per_100g: float = Field(0, ge=0)
    carbs_per_100g: float = Field(0, ge=0)
    fat_per_100g: float = Field(0, ge=0)
    category: Optional[str] = None
    default_unit: Optional[str] = None
    grams_per_unit: Optional[float] = Field(None, gt=0, description="Grams per piece for count units")


class FoodCreate(FoodBase):
    fdc_id: Optional[int] = None
    fatsecret_id: Optional[str] = None
    off_code: Optional[str] = None
    upc: Optional[str] = None
    kroger_product_id: Optional[str] = None
    kroger_product_name: Optional[str] = None
    kroger_product_image: Optional[str] = None
    is_custom: bool = False


class FoodUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = None
    calories_per_100g: Optional[float] = Field(None, ge=0)
    protein_per_100g: Optional[float] = Field(None, ge=0)
    carbs_per_100g: Optional[float] = Field(None, ge=0)
    fat_per_100g: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    default_unit: Optional[str] = None
    grams_per_unit: Optional[float] = Field(None, gt=0)


class USDAFoodCreate(BaseModel):
    fdc_id: int = Field(..., description="USDA FoodData Central ID")


class FoodResponse(BaseModel):
    id: int
    fdc_id: Optional[int]
    fatsecret_id: Optional[str]
    off_code: Optional[str]
    upc: Optional[str]
    kroger_product_id: Optional[str]
    kroger_product_name: Optional[str]
    kroger_product_image: Optional[str]
    name: str
    description: Optional[str]
    data_type: Optional[str]
    calories_per_100g: float
    protein_per_100g: float
    carbs_per_100g: float
    fat_per_100g: float
    is_custom: bool
    category: Optional[str]
    default_unit: Optional[str]
    grams_per_unit: Optional[float]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


# External food database results
class USDANutrient(BaseModel):
    nutrient_id: int
    nutrient_name: Optional[str]
    value: float
    unit_name: Optional[str]


class USDASearchResult(BaseModel):
    fdc_id: int
    description: str
    data_type: Optional[str]
    brand_owner: Optional[str] = None
    food_nutrients: list[USDANutrient] = []


class NutritionSearchResult(BaseModel):
    """A FatSecret or Open Food Facts food normalized to per-100g macros."""
    source: str
    external_id: str
    name: str
    brand: Optional[str] = None
    calories_per_100g: float
    protein_per_100g: float
    carbs_per_100g: float
    fat_per_100g: float
    serving_size: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None


# Recipe schemas
class RecipeIngredientIn(BaseModel):
    display_name: str = Field(..., min_length=1, max_length=300)
    amount: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = None
    grams: Optional[float] = Field(None, ge=0, description="Derived from amount and unit when omitted")
    food_id: Optional[int] = None
    kroger_product_id: Optional[str] = None
    kroger_product_name: Optional[str] = None
    kroger_product_image: Optional[str] = None
    category: Optional[str] = None
    is_pantry_staple: Optional[bool] = None


class RecipeToolIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    notes: Optional[str] = None


class RecipeCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    servings: int = Field(1, ge=1, le=100)
    tags: list[str] = []
    instructions: list[str] = []
    is_currently_eating: bool = False
    ingredients: list[RecipeIngredientIn] = []
    tools: list[RecipeToolIn] = []


class RecipeUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    servings: Optional[int] = Field(None, ge=1, le=100)
    tags: Optional[list[str]] = None
    instructions: Optional[list[str]] = None
    is_currently_eating: Optional[bool] = None
    ingredients: Optional[list[RecipeIngredientIn]] = Field(None, description="Replaces all ingredients when given")
    tools: Optional[list[RecipeToolIn]] = Field(None, description="Replaces all tools when given")


class RecipeIngredientResponse(BaseModel):
    id: int
    food_id: Optional[int]
    food: Optional[FoodResponse]
    kroger_product_id: Optional[str]
    kroger_product_name: Optional[str]
    kroger_product_image: Optional[str]
    display_name: str
    amount: Optional[float]
    unit: Optional[str]
    grams: float
    sort_order: int
    category: Optional[str]
    is_pantry_staple: bool
    macros: Optional[MacroTotalsResponse] = None


class RecipeToolResponse(BaseModel):
    id: int
    name: str
    notes: Optional[str]
    sort_order: int

    class Config:
        from_attributes = True


class RecipeResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    servings: int
    tags: list[str] = []
    instructions: list[str] = []
    is_currently_eating: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    ingredients: list[RecipeIngredientResponse] = []
    tools: list[RecipeToolResponse] = []
    totals: MacroTotalsResponse
    per_serving: MacroTotalsResponse
    unmatched_ingredients: int = Field(0, description="Ingredients with no linked food")


class RecipeMacrosResponse(BaseModel):
    recipe_id: int
    servings: int
    totals: MacroTotalsResponse
    per_serving: MacroTotalsResponse
    unmatched_ingredients: int


# Instruction generation
class InstructionIngredient(BaseModel):
    name: str
    amount: Optional[float] = None
    unit: Optional[str] = None
    grams: Optional[float] = None


class GenerateInstructionsRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    ingredients: list[InstructionIngredient] = []
    tools: list[str] = []


class GenerateInstructionsResponse(BaseModel):
    instructions: list[str]


# Auto-match (nutrition resolution)
class KrogerUnitOfMeasure(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    abbreviation: Optional[str] = None


class KrogerNutrient(BaseModel):
    code: str
    description: Optional[str] = None
    displayName: Optional[str] = None
    quantity: Optional[float] = None
    unitOfMeasure: Optional[KrogerUnitOfMeasure] = None


class KrogerServingSize(BaseModel):
    quantity: Optional[float] = None
    unitOfMeasure: Optional[KrogerUnitOfMeasure] = None


class KrogerNutritionInfo(BaseModel):
    servingSize: Optional[KrogerServingSize] = None
    nutrients: list[KrogerNutrient] = []


class AutoMatchRequest(BaseModel):
    product_id: Optional[str] = None
    upc: Optional[str] = None
    description: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    nutrition_information: list[KrogerNutritionInfo] = []


class AutoMatchResponse(BaseModel):
    matched: bool
    source: Optional[str] = None
    search_term: Optional[str] = None
    food: Optional[FoodResponse] = None


# Shopping list schemas
class ShoppingListCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    recipe_ids: list[int] = []
    exclude_pantry_staples: bool = True


class ShoppingListResponse(BaseModel):
    id: int
    name: str
    recipe_ids: list[int] = []
    exclude_pantry_staples: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class ShoppingListGenerateRequest(BaseModel):
    recipe_ids: list[int] = Field(..., min_length=1)
    exclude_pantry_staples: bool = True


class RecipeAmountResponse(BaseModel):
    amount: float
    unit: str
    recipe_name: str


class ShoppingListItemResponse(BaseModel):
    display_name: str
    total_grams: float
    category: str
    is_pantry_staple: bool
    recipe_names: list[str]
    amounts: list[RecipeAmountResponse]
    kroger_product_id: Optional[str] = None


class ShoppingListGroupResponse(BaseModel):
    category: str
    label: str
    items: list[ShoppingListItemResponse]


class CartItem(BaseModel):
    upc: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1)


class GeneratedShoppingListResponse(BaseModel):
    recipe_ids: list[int]
    exclude_pantry_staples: bool
    item_count: int
    groups: list[ShoppingListGroupResponse]
    cart_items: list[CartItem] = Field([], description="Items with a linked Kroger product")


class ShoppingListExportRequest(ShoppingListGenerateRequest):
    checked: list[str] = []


class ShoppingListExportResponse(BaseModel):
    text: str


# Ingredient alias schemas
class IngredientAliasCreate(BaseModel):
    canonical_name: str = ""
    alias_name: str = ""


class IngredientAliasResponse(BaseModel):
    id: int
    canonical_name: str
    alias_name: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class CanonicalNameResponse(BaseModel):
    canonical_name: str


# Pantry staple schemas
class PantryStapleCreate(BaseModel):
    name: str = ""
    category: Optional[str] = None


class PantryStapleResponse(BaseModel):
    id: int
    name: str
    category: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class PantryStapleCheckResponse(BaseModel):
    is_pantry_staple: bool


# Tool inventory schemas
class ToolCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class ToolResponse(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


# Kroger schemas
class KrogerStatusResponse(BaseModel):
    is_configured: bool
    is_connected: bool
    location_id: Optional[str]


class KrogerAuthUrlResponse(BaseModel):
    auth_url: str


class KrogerLocationUpdate(BaseModel):
    location_id: str = Field(..., min_length=1)


class KrogerCartRequest(BaseModel):
    items: list[CartItem] = Field(..., min_length=1)


class KrogerCartResponse(BaseModel):
    success: bool
    item_count: int


# Unit reference
class UnitsResponse(BaseModel):
    conversions: dict[str, float]
    labels: dict[str, str]
    categories: dict[str, list[str]]
