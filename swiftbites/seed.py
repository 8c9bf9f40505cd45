import json
import logging
from pathlib import Path

from . import schemas
from .store import EntityStore


logger = logging.getLogger(__name__)


def load_catalog(path):
    """Load a sample catalog from a JSON file.

    Args:
        path (str or Path): Path to the JSON file.

    Returns:
        dict: with ``ingredients``, ``categories`` and ``recipes`` lists.
        A missing file gives an empty catalog.
    """
    p = Path(path)
    if not p.exists():
        logger.warning("catalog file %s not found", p)
        return {"ingredients": [], "categories": [], "recipes": []}
    with p.open("r", encoding="utf-8") as f:
        data = json.load(f)
    return {
        "ingredients": data.get("ingredients", []),
        "categories": data.get("categories", []),
        "recipes": data.get("recipes", []),
    }


def seed_store(store: EntityStore, catalog: dict, clear: bool = True) -> dict:
    """Insert `catalog` through the store's own operations.

    Recipes reference categories and ingredients by name. Without `clear`,
    entities already in the store are reused and recipes whose name is
    taken are skipped. Returns the number of entities added per kind.
    """
    if clear:
        store.reset()

    ingredient_ids = {i.name: i.id for i in store.list_ingredients()}
    category_ids = {c.name: c.id for c in store.list_categories()}
    recipe_names = {r.name for r in store.list_recipes()}
    added = {"ingredients": 0, "categories": 0, "recipes": 0}

    def ingredient_id(name):
        if name not in ingredient_ids:
            ingredient_ids[name] = store.add_ingredient(name).id
            added["ingredients"] += 1
        return ingredient_ids[name]

    def category_id(name):
        if name not in category_ids:
            category_ids[name] = store.add_category(name).id
            added["categories"] += 1
        return category_ids[name]

    for name in catalog.get("ingredients", []):
        ingredient_id(name)
    for name in catalog.get("categories", []):
        category_id(name)

    for r in catalog.get("recipes", []):
        if r["name"] in recipe_names:
            continue
        entries = [
            schemas.RecipeIngredientIn(
                ingredient_id=ingredient_id(entry["ingredient"]),
                quantity=entry.get("quantity", ""),
            )
            for entry in r.get("ingredients", [])
        ]
        category = r.get("category")
        store.add_recipe(
            schemas.RecipeCreate(
                name=r["name"],
                summary=r.get("summary", ""),
                category_id=category_id(category) if category else None,
                serving_count=r["serving_count"],
                time_minutes=r["time_minutes"],
                ingredients=entries,
                instructions=r.get("instructions", ""),
            )
        )
        recipe_names.add(r["name"])
        added["recipes"] += 1

    logger.info("seeded catalog: %s", added)
    return added
