import pytest

from swiftbites.catalog import (
    RecipeOrder,
    search_by_name,
    search_recipes,
    sort_recipes,
)
from swiftbites.schemas import Ingredient, Recipe


def recipe(name, summary="", serving=2, time=30):
    return Recipe(
        id=name.lower(),
        name=name,
        summary=summary,
        serving_count=serving,
        time_minutes=time,
        instructions="",
    )


RECIPES = [
    recipe("Classic Hummus", "Middle Eastern dip", serving=6, time=10),
    recipe("Spaghetti Carbonara", "Eggs, cheese, pancetta", 4, 30),
    recipe("Classic Margherita Pizza", "Tomato and mozzarella", 4, 50),
]


def test_search_recipes_matches_name_or_summary():
    assert [r.name for r in search_recipes(RECIPES, "classic")] == [
        "Classic Hummus", "Classic Margherita Pizza"
    ]
    assert [r.name for r in search_recipes(RECIPES, "PANCETTA")] == [
        "Spaghetti Carbonara"
    ]
    assert search_recipes(RECIPES, "sushi") == []


@pytest.mark.parametrize("query", ["", "   "])
def test_empty_query_keeps_everything(query):
    assert search_recipes(RECIPES, query) == RECIPES


def test_search_by_name():
    items = [Ingredient(id="1", name="Garlic"), Ingredient(id="2", name="Salt")]
    assert search_by_name(items, "gar") == [items[0]]
    assert search_by_name(items, "") == items


@pytest.mark.parametrize(
    "order,expected",
    (
        (
            RecipeOrder.name,
            ["Classic Hummus", "Classic Margherita Pizza",
             "Spaghetti Carbonara"],
        ),
        (
            RecipeOrder.serving_asc,
            ["Classic Margherita Pizza", "Spaghetti Carbonara",
             "Classic Hummus"],
        ),
        (
            RecipeOrder.serving_desc,
            ["Classic Hummus", "Classic Margherita Pizza",
             "Spaghetti Carbonara"],
        ),
        (
            RecipeOrder.time_asc,
            ["Classic Hummus", "Spaghetti Carbonara",
             "Classic Margherita Pizza"],
        ),
        (
            RecipeOrder.time_desc,
            ["Classic Margherita Pizza", "Spaghetti Carbonara",
             "Classic Hummus"],
        ),
    ),
)
def test_sort_recipes(order, expected):
    assert [r.name for r in sort_recipes(RECIPES, order)] == expected
