from enum import Enum
from typing import List, Sequence, TypeVar

from . import schemas


T = TypeVar("T")


class RecipeOrder(str, Enum):
    name = "name"
    serving_asc = "serving_asc"
    serving_desc = "serving_desc"
    time_asc = "time_asc"
    time_desc = "time_desc"


def _contains(text: str, query: str) -> bool:
    return query.casefold() in (text or "").casefold()


def search_by_name(items: Sequence[T], query: str) -> List[T]:
    if not query or not query.strip():
        return list(items)
    q = query.strip()
    return [item for item in items if _contains(item.name, q)]


def search_recipes(
    recipes: Sequence[schemas.Recipe], query: str
) -> List[schemas.Recipe]:
    """Keep recipes whose name or summary contains `query`.

    Matching ignores case. An empty query keeps everything.
    """
    if not query or not query.strip():
        return list(recipes)
    q = query.strip()
    return [
        r for r in recipes if _contains(r.name, q) or _contains(r.summary, q)
    ]


def sort_recipes(
    recipes: Sequence[schemas.Recipe], order: RecipeOrder = RecipeOrder.name
) -> List[schemas.Recipe]:
    # sorted() is stable: sort by name first so ties stay alphabetical
    by_name = sorted(recipes, key=lambda r: r.name)
    if order == RecipeOrder.serving_asc:
        return sorted(by_name, key=lambda r: r.serving_count)
    if order == RecipeOrder.serving_desc:
        return sorted(by_name, key=lambda r: -r.serving_count)
    if order == RecipeOrder.time_asc:
        return sorted(by_name, key=lambda r: r.time_minutes)
    if order == RecipeOrder.time_desc:
        return sorted(by_name, key=lambda r: -r.time_minutes)
    return by_name
