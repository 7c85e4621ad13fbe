from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Text, Float, Boolean, DateTime, JSON, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship
import enum

from preppal.core.database import Base


class DataType(str, enum.Enum):
    FOUNDATION = "Foundation"
    SR_LEGACY = "SR Legacy"
    BRANDED = "Branded"
    FATSECRET = "FatSecret"
    OPEN_FOOD_FACTS = "OpenFoodFacts"
    KROGER = "Kroger"
    CUSTOM = "Custom"


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    profile_image_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Food(Base):
    """Nutrition data per 100g, imported from a food database or entered by hand."""
    __tablename__ = "foods"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    fdc_id = Column(Integer, nullable=True)
    fatsecret_id = Column(String, nullable=True)
    off_code = Column(String, nullable=True)
    upc = Column(String, nullable=True)
    kroger_product_id = Column(String, nullable=True)
    kroger_product_name = Column(String, nullable=True)
    kroger_product_image = Column(String, nullable=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    data_type = Column(String, nullable=True)
    calories_per_100g = Column(Float, nullable=False)
    protein_per_100g = Column(Float, nullable=False)
    carbs_per_100g = Column(Float, nullable=False)
    fat_per_100g = Column(Float, nullable=False)
    is_custom = Column(Boolean, default=False)
    category = Column(String, nullable=True)
    default_unit = Column(String, nullable=True)
    grams_per_unit = Column(Float, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    recipe_ingredients = relationship("RecipeIngredient", back_populates="food")


class Recipe(Base):
    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    servings = Column(Integer, nullable=False, default=1)
    tags = Column(JSON, default=list)
    instructions = Column(JSON, default=list)
    is_currently_eating = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        order_by="RecipeIngredient.sort_order",
        cascade="all, delete-orphan",
    )
    tools = relationship(
        "RecipeTool",
        back_populates="recipe",
        order_by="RecipeTool.sort_order",
        cascade="all, delete-orphan",
    )


class RecipeIngredient(Base):
    """An ingredient line in a recipe; ``grams`` is authoritative for macros."""
    __tablename__ = "recipe_ingredients"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    food_id = Column(Integer, ForeignKey("foods.id"), nullable=True)
    kroger_product_id = Column(String, nullable=True)
    kroger_product_name = Column(String, nullable=True)
    kroger_product_image = Column(String, nullable=True)
    display_name = Column(String, nullable=False)
    amount = Column(Float, nullable=True)
    unit = Column(String, nullable=True)
    grams = Column(Float, nullable=False)
    sort_order = Column(Integer, default=0)
    category = Column(String, nullable=True)
    is_pantry_staple = Column(Boolean, default=False)

    recipe = relationship("Recipe", back_populates="ingredients")
    food = relationship("Food", back_populates="recipe_ingredients")


class RecipeTool(Base):
    __tablename__ = "recipe_tools"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    sort_order = Column(Integer, default=0)

    recipe = relationship("Recipe", back_populates="tools")


class Tool(Base):
    """A piece of cooking equipment in the user's kitchen inventory."""
    __tablename__ = "tools"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class ShoppingList(Base):
    __tablename__ = "shopping_lists"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    recipe_ids = Column(JSON, default=list)
    exclude_pantry_staples = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class IngredientAlias(Base):
    __tablename__ = "ingredient_aliases"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    canonical_name = Column(String, nullable=False)
    alias_name = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class PantryStaple(Base):
    __tablename__ = "pantry_staples"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class KrogerToken(Base):
    __tablename__ = "kroger_tokens"
    __table_args__ = (UniqueConstraint("user_id"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    location_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
