"""Tests for demo seed data."""

from preppal.core.macros import calculate_per_serving_macros, calculate_recipe_totals
from preppal.models.models import Food, PantryStaple, Recipe
from preppal.seed_data import (
    DEMO_USER_ID,
    seed_demo_user,
    seed_pantry_staples,
    seed_sample_foods,
    seed_sample_recipe,
)


def seed_all(db):
    user = seed_demo_user(db)
    seed_pantry_staples(db, user.id)
    seed_sample_foods(db, user.id)
    seed_sample_recipe(db, user.id)


def test_seed_is_idempotent(db_session):
    seed_all(db_session)
    seed_all(db_session)

    assert db_session.query(PantryStaple).filter(PantryStaple.user_id == DEMO_USER_ID).count() == 5
    assert db_session.query(Food).filter(Food.user_id == DEMO_USER_ID).count() == 5
    assert db_session.query(Recipe).filter(Recipe.user_id == DEMO_USER_ID).count() == 1


def test_sample_recipe_links_foods(db_session):
    seed_all(db_session)

    recipe = db_session.query(Recipe).filter(Recipe.user_id == DEMO_USER_ID).one()
    assert recipe.servings == 4
    assert [i.display_name for i in recipe.ingredients] == [
        "chicken breast", "white rice", "broccoli", "olive oil",
    ]
    assert all(i.food is not None for i in recipe.ingredients)
    assert recipe.ingredients[-1].is_pantry_staple

    totals = calculate_recipe_totals([(i.grams, i.food) for i in recipe.ingredients])
    per_serving = calculate_per_serving_macros(totals, recipe.servings)
    assert per_serving.protein > 30


def test_recipe_needs_sample_foods(db_session):
    user = seed_demo_user(db_session)
    seed_sample_recipe(db_session, user.id)

    assert db_session.query(Recipe).count() == 0
