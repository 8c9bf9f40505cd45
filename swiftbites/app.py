import threading
from contextlib import asynccontextmanager
from typing import Iterator, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from . import schemas
from .catalog import RecipeOrder, search_by_name, search_recipes, sort_recipes
from .db import SessionLocal, init_db
from .errors import (
    DuplicateNameError,
    NotFoundError,
    PersistenceError,
    PersistenceUnavailableError,
)
from .store import EntityStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    # tables must exist before the first request reaches the store
    init_db()
    yield


app = FastAPI(lifespan=lifespan)

_store = EntityStore(SessionLocal)
# sync endpoints run in a threadpool; the store expects one caller at a time
_store_lock = threading.Lock()


def provide_store() -> EntityStore:
    return _store


def get_store(
    store: EntityStore = Depends(provide_store),
) -> Iterator[EntityStore]:
    with _store_lock:
        yield store


@app.exception_handler(DuplicateNameError)
def duplicate_name(request: Request, exc: DuplicateNameError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
def not_found(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(PersistenceUnavailableError)
@app.exception_handler(PersistenceError)
def persistence_failed(request: Request, exc: Exception):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


# Categories

@app.get("/api/categories", response_model=List[schemas.Category])
def list_categories(
    q: Optional[str] = None, store: EntityStore = Depends(get_store)
):
    return search_by_name(store.list_categories(), q or "")


@app.post("/api/categories", response_model=schemas.Category)
def create_category(
    payload: schemas.CategoryCreate, store: EntityStore = Depends(get_store)
):
    return store.add_category(payload.name)


@app.get("/api/categories/{category_id}", response_model=schemas.Category)
def read_category(category_id: str, store: EntityStore = Depends(get_store)):
    return store.get_category(category_id)


@app.put("/api/categories/{category_id}", response_model=schemas.Category)
def update_category(
    category_id: str,
    payload: schemas.CategoryCreate,
    store: EntityStore = Depends(get_store),
):
    return store.update_category(category_id, payload.name)


@app.delete("/api/categories/{category_id}")
def delete_category(
    category_id: str, store: EntityStore = Depends(get_store)
):
    store.delete_category(category_id)
    return {"deleted": True}


# Ingredients

@app.get("/api/ingredients", response_model=List[schemas.Ingredient])
def list_ingredients(
    q: Optional[str] = None, store: EntityStore = Depends(get_store)
):
    return search_by_name(store.list_ingredients(), q or "")


@app.post("/api/ingredients", response_model=schemas.Ingredient)
def create_ingredient(
    payload: schemas.IngredientCreate, store: EntityStore = Depends(get_store)
):
    return store.add_ingredient(payload.name)


@app.get(
    "/api/ingredients/{ingredient_id}", response_model=schemas.Ingredient
)
def read_ingredient(
    ingredient_id: str, store: EntityStore = Depends(get_store)
):
    return store.get_ingredient(ingredient_id)


@app.put(
    "/api/ingredients/{ingredient_id}", response_model=schemas.Ingredient
)
def update_ingredient(
    ingredient_id: str,
    payload: schemas.IngredientCreate,
    store: EntityStore = Depends(get_store),
):
    return store.update_ingredient(ingredient_id, payload.name)


@app.delete("/api/ingredients/{ingredient_id}")
def delete_ingredient(
    ingredient_id: str, store: EntityStore = Depends(get_store)
):
    store.delete_ingredient(ingredient_id)
    return {"deleted": True}


# Recipes

@app.get("/api/recipes", response_model=List[schemas.Recipe])
def list_recipes(
    q: Optional[str] = None,
    order: RecipeOrder = RecipeOrder.name,
    store: EntityStore = Depends(get_store),
):
    recipes = search_recipes(store.list_recipes(), q or "")
    return sort_recipes(recipes, order)


@app.post("/api/recipes", response_model=schemas.Recipe)
def create_recipe(
    payload: schemas.RecipeCreate, store: EntityStore = Depends(get_store)
):
    return store.add_recipe(payload)


@app.get("/api/recipes/{recipe_id}", response_model=schemas.Recipe)
def read_recipe(recipe_id: str, store: EntityStore = Depends(get_store)):
    return store.get_recipe(recipe_id)


@app.put("/api/recipes/{recipe_id}", response_model=schemas.Recipe)
def update_recipe(
    recipe_id: str,
    payload: schemas.RecipeCreate,
    store: EntityStore = Depends(get_store),
):
    return store.update_recipe(recipe_id, payload)


@app.delete("/api/recipes/{recipe_id}")
def delete_recipe(recipe_id: str, store: EntityStore = Depends(get_store)):
    store.delete_recipe(recipe_id)
    return {"deleted": True}
