"""
Seed data for the PrepPal database.

Includes:
- A demo user
- Sample foods with per-100g macros (approximations of USDA SR Legacy values)
- Default pantry staples
- A sample meal prep recipe
"""

from preppal.core.config import settings
from preppal.core.database import SessionLocal, engine, Base
from preppal.core.logging import configure_logging, get_logger
from preppal.models.models import DataType, Food, PantryStaple, Recipe, RecipeIngredient, User

logger = get_logger(__name__)

DEMO_USER_ID = "demo-user"

DEFAULT_PANTRY_STAPLES = [
    {"name": "water", "category": "beverages"},
    {"name": "salt", "category": "spices"},
    {"name": "pepper", "category": "spices"},
    {"name": "black pepper", "category": "spices"},
    {"name": "olive oil", "category": "condiments"},
]

SAMPLE_FOODS = [
    {
        "name": "Chicken, broilers or fryers, breast, meat only, cooked, roasted",
        "fdc_id": 171477,
        "data_type": DataType.SR_LEGACY.value,
        "calories_per_100g": 165,
        "protein_per_100g": 31,
        "carbs_per_100g": 0,
        "fat_per_100g": 3.6,
        "category": "meat",
    },
    {
        "name": "Rice, white, long-grain, regular, enriched, cooked",
        "fdc_id": 168878,
        "data_type": DataType.SR_LEGACY.value,
        "calories_per_100g": 130,
        "protein_per_100g": 2.7,
        "carbs_per_100g": 28.2,
        "fat_per_100g": 0.3,
        "category": "pantry",
    },
    {
        "name": "Broccoli, raw",
        "fdc_id": 170379,
        "data_type": DataType.SR_LEGACY.value,
        "calories_per_100g": 34,
        "protein_per_100g": 2.8,
        "carbs_per_100g": 6.6,
        "fat_per_100g": 0.4,
        "category": "produce",
    },
    {
        "name": "Egg, whole, raw, fresh",
        "fdc_id": 171287,
        "data_type": DataType.SR_LEGACY.value,
        "calories_per_100g": 143,
        "protein_per_100g": 12.6,
        "carbs_per_100g": 0.7,
        "fat_per_100g": 9.5,
        "category": "dairy",
        "default_unit": "whole",
        "grams_per_unit": 50,
    },
    {
        "name": "Oil, olive, salad or cooking",
        "fdc_id": 171413,
        "data_type": DataType.SR_LEGACY.value,
        "calories_per_100g": 884,
        "protein_per_100g": 0,
        "carbs_per_100g": 0,
        "fat_per_100g": 100,
        "category": "condiments",
    },
]


def seed_demo_user(db) -> User:
    user = db.query(User).filter(User.id == DEMO_USER_ID).first()
    if user:
        return user

    user = User(id=DEMO_USER_ID, email="demo@preppal.app", first_name="Demo", last_name="User")
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Demo user seeded.")
    return user


def seed_pantry_staples(db, user_id: str):
    """Seed the default pantry staples for a user, skipping ones they have."""
    existing = {
        s.name for s in db.query(PantryStaple).filter(PantryStaple.user_id == user_id)
    }
    added = 0
    for staple in DEFAULT_PANTRY_STAPLES:
        if staple["name"] not in existing:
            db.add(PantryStaple(user_id=user_id, **staple))
            added += 1

    db.commit()
    logger.info("Pantry staples seeded (%s added).", added)


def seed_sample_foods(db, user_id: str):
    """Seed sample foods, keyed on FDC ID so reruns don't duplicate them."""
    for food_data in SAMPLE_FOODS:
        existing = db.query(Food).filter(
            Food.user_id == user_id,
            Food.fdc_id == food_data["fdc_id"]
        ).first()
        if not existing:
            db.add(Food(user_id=user_id, is_custom=False, **food_data))

    db.commit()
    logger.info("Sample foods seeded.")


def seed_sample_recipe(db, user_id: str):
    """Seed a four-serving chicken and rice meal prep recipe."""
    existing = db.query(Recipe).filter(
        Recipe.user_id == user_id,
        Recipe.title == "Chicken & Rice Meal Prep"
    ).first()
    if existing:
        logger.info("Sample recipe already exists.")
        return

    foods = {
        f.fdc_id: f
        for f in db.query(Food).filter(
            Food.user_id == user_id,
            Food.fdc_id.in_([171477, 168878, 170379, 171413])
        )
    }
    if len(foods) < 4:
        logger.warning("Sample foods not found. Run seed_sample_foods first.")
        return

    recipe = Recipe(
        user_id=user_id,
        title="Chicken & Rice Meal Prep",
        description="Four lunches of roasted chicken, rice and broccoli.",
        servings=4,
        tags=["meal prep", "high protein"],
        instructions=[
            "Cook the rice.",
            "Roast the chicken at 425F for 20-25 minutes.",
            "Steam the broccoli for 5 minutes.",
            "Divide between four containers.",
        ],
    )
    lines = [
        ("chicken breast", 171477, 600, "meat", False),
        ("white rice", 168878, 740, "pantry", False),
        ("broccoli", 170379, 400, "produce", False),
        ("olive oil", 171413, 27, "condiments", True),
    ]
    recipe.ingredients = [
        RecipeIngredient(
            food_id=foods[fdc_id].id,
            display_name=name,
            amount=grams,
            unit="g",
            grams=grams,
            sort_order=index,
            category=category,
            is_pantry_staple=staple,
        )
        for index, (name, fdc_id, grams, category, staple) in enumerate(lines)
    ]
    db.add(recipe)
    db.commit()
    logger.info("Sample recipe seeded.")


def run_seed():
    """Run all seed functions."""
    configure_logging(settings.LOG_LEVEL)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = seed_demo_user(db)
        seed_pantry_staples(db, user.id)
        seed_sample_foods(db, user.id)
        seed_sample_recipe(db, user.id)
        logger.info("Seed data complete!")
    finally:
        db.close()


if __name__ == "__main__":
    run_seed()
