"""Entity store: the only code that mutates the recipe catalog.

Every mutation runs inside one database transaction. Business rules are
checked before anything is written, and any failure rolls the transaction
back, so callers never observe a half-applied change.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from . import crud, models, schemas
from .errors import (
    CategoryExists,
    IngredientExists,
    NotFoundError,
    PersistenceError,
    PersistenceUnavailableError,
    RecipeExists,
    StoreError,
)


logger = logging.getLogger(__name__)

_EXISTS = {
    models.Category: CategoryExists,
    models.Ingredient: IngredientExists,
    models.Recipe: RecipeExists,
}


class EntityStore:
    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory

    @property
    def attached(self) -> bool:
        return self._session_factory is not None

    def attach(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def detach(self) -> None:
        self._session_factory = None

    @contextmanager
    def _session(self) -> Iterator[Session]:
        if self._session_factory is None:
            raise PersistenceUnavailableError()
        db = self._session_factory()
        try:
            yield db
        finally:
            db.close()

    @contextmanager
    def _transaction(self, unique=None) -> Iterator[Session]:
        """Run one atomic unit of work.

        `unique` is an optional `(model, name, exclude_id)` triple. When a
        concurrent writer wins the race for that name, the constraint
        violation is reported as the matching `*Exists` error.
        """
        with self._session() as db:
            try:
                yield db
                db.commit()
            except StoreError:
                db.rollback()
                raise
            except IntegrityError as exc:
                db.rollback()
                if unique is not None:
                    model, name, exclude_id = unique
                    if crud.name_taken(db, model, name, exclude_id):
                        raise _EXISTS[model](name) from exc
                logger.exception("transaction rolled back")
                raise PersistenceError(str(exc)) from exc
            except SQLAlchemyError as exc:
                db.rollback()
                logger.exception("transaction rolled back")
                raise PersistenceError(str(exc)) from exc

    # Queries

    def list_categories(self) -> List[schemas.Category]:
        with self._session() as db:
            return [
                schemas.Category.model_validate(c)
                for c in crud.list_sorted(db, models.Category)
            ]

    def list_ingredients(self) -> List[schemas.Ingredient]:
        with self._session() as db:
            return [
                schemas.Ingredient.model_validate(i)
                for i in crud.list_sorted(db, models.Ingredient)
            ]

    def list_recipes(self) -> List[schemas.Recipe]:
        with self._session() as db:
            return [
                schemas.Recipe.model_validate(r)
                for r in crud.list_sorted(db, models.Recipe)
            ]

    def get_category(self, category_id: str) -> schemas.Category:
        with self._session() as db:
            category = self._require(db, models.Category, category_id)
            return schemas.Category.model_validate(category)

    def get_ingredient(self, ingredient_id: str) -> schemas.Ingredient:
        with self._session() as db:
            ingredient = self._require(db, models.Ingredient, ingredient_id)
            return schemas.Ingredient.model_validate(ingredient)

    def get_recipe(self, recipe_id: str) -> schemas.Recipe:
        with self._session() as db:
            recipe = self._require(db, models.Recipe, recipe_id)
            return schemas.Recipe.model_validate(recipe)

    # Categories

    def add_category(self, name: str) -> schemas.Category:
        payload = schemas.CategoryCreate(name=name)
        with self._transaction((models.Category, payload.name, None)) as db:
            if crud.name_taken(db, models.Category, payload.name):
                raise CategoryExists(payload.name)
            category = models.Category(name=payload.name)
            db.add(category)
            db.flush()
            db.refresh(category)
            result = schemas.Category.model_validate(category)
        logger.info("added category %s (%s)", result.name, result.id)
        return result

    def update_category(
        self, category_id: str, name: str
    ) -> schemas.Category:
        payload = schemas.CategoryCreate(name=name)
        with self._transaction(
            (models.Category, payload.name, category_id)
        ) as db:
            category = self._require(db, models.Category, category_id)
            if crud.name_taken(
                db, models.Category, payload.name, exclude_id=category_id
            ):
                raise CategoryExists(payload.name)
            category.name = payload.name
            db.flush()
            result = schemas.Category.model_validate(category)
        logger.info("renamed category %s to %s", category_id, result.name)
        return result

    def delete_category(self, category_id: str) -> None:
        with self._transaction() as db:
            category = crud.get_by_id(db, models.Category, category_id)
            if category is None:
                logger.debug("delete of unknown category %s", category_id)
                return
            recipes = crud.recipes_in_category(db, category_id)
            for recipe in recipes:
                recipe.category_id = None
            db.delete(category)
        logger.info(
            "deleted category %s, cleared %d recipe(s)",
            category_id, len(recipes),
        )

    # Ingredients

    def add_ingredient(self, name: str) -> schemas.Ingredient:
        payload = schemas.IngredientCreate(name=name)
        with self._transaction(
            (models.Ingredient, payload.name, None)
        ) as db:
            if crud.name_taken(db, models.Ingredient, payload.name):
                raise IngredientExists(payload.name)
            ingredient = models.Ingredient(name=payload.name)
            db.add(ingredient)
            db.flush()
            result = schemas.Ingredient.model_validate(ingredient)
        logger.info("added ingredient %s (%s)", result.name, result.id)
        return result

    def update_ingredient(
        self, ingredient_id: str, name: str
    ) -> schemas.Ingredient:
        payload = schemas.IngredientCreate(name=name)
        with self._transaction(
            (models.Ingredient, payload.name, ingredient_id)
        ) as db:
            ingredient = self._require(db, models.Ingredient, ingredient_id)
            if crud.name_taken(
                db, models.Ingredient, payload.name, exclude_id=ingredient_id
            ):
                raise IngredientExists(payload.name)
            ingredient.name = payload.name
            db.flush()
            result = schemas.Ingredient.model_validate(ingredient)
        logger.info("renamed ingredient %s to %s", ingredient_id, result.name)
        return result

    def delete_ingredient(self, ingredient_id: str) -> None:
        """Delete an ingredient together with every recipe entry using it."""
        with self._transaction() as db:
            ingredient = crud.get_by_id(db, models.Ingredient, ingredient_id)
            if ingredient is None:
                logger.debug("delete of unknown ingredient %s", ingredient_id)
                return
            entries = crud.entries_for_ingredient(db, ingredient_id)
            for entry in entries:
                db.delete(entry)
            db.delete(ingredient)
        logger.info(
            "deleted ingredient %s with %d recipe entries",
            ingredient_id, len(entries),
        )

    # Recipes

    def add_recipe(self, recipe: schemas.RecipeCreate) -> schemas.Recipe:
        with self._transaction((models.Recipe, recipe.name, None)) as db:
            if crud.name_taken(db, models.Recipe, recipe.name):
                raise RecipeExists(recipe.name)
            db_recipe = models.Recipe()
            self._apply(db, db_recipe, recipe)
            db.add(db_recipe)
            db.flush()
            db.refresh(db_recipe)
            result = schemas.Recipe.model_validate(db_recipe)
        logger.info("added recipe %s (%s)", result.name, result.id)
        return result

    def update_recipe(
        self, recipe_id: str, recipe: schemas.RecipeCreate
    ) -> schemas.Recipe:
        with self._transaction((models.Recipe, recipe.name, recipe_id)) as db:
            db_recipe = self._require(db, models.Recipe, recipe_id)
            if crud.name_taken(
                db, models.Recipe, recipe.name, exclude_id=recipe_id
            ):
                raise RecipeExists(recipe.name)
            self._apply(db, db_recipe, recipe)
            db.flush()
            db.refresh(db_recipe)
            result = schemas.Recipe.model_validate(db_recipe)
        logger.info("updated recipe %s (%s)", result.name, result.id)
        return result

    def delete_recipe(self, recipe_id: str) -> None:
        with self._transaction() as db:
            db_recipe = crud.get_by_id(db, models.Recipe, recipe_id)
            if db_recipe is None:
                logger.debug("delete of unknown recipe %s", recipe_id)
                return
            # owned entries go with the recipe via delete-orphan
            db.delete(db_recipe)
        logger.info("deleted recipe %s", recipe_id)

    def reset(self) -> None:
        with self._transaction() as db:
            for model in (
                models.RecipeIngredient,
                models.Recipe,
                models.Ingredient,
                models.Category,
            ):
                db.query(model).delete(synchronize_session=False)
        logger.info("cleared all entities")

    def _apply(
        self,
        db: Session,
        db_recipe: models.Recipe,
        recipe: schemas.RecipeCreate,
    ) -> None:
        # resolve every reference before touching the row
        if recipe.category_id is not None:
            self._require(db, models.Category, recipe.category_id)
        entries = [
            models.RecipeIngredient(
                ingredient=self._require(
                    db, models.Ingredient, entry.ingredient_id
                ),
                quantity=entry.quantity,
                position=position,
            )
            for position, entry in enumerate(recipe.ingredients)
        ]

        db_recipe.name = recipe.name
        db_recipe.summary = recipe.summary
        db_recipe.category_id = recipe.category_id
        db_recipe.serving_count = recipe.serving_count
        db_recipe.time_minutes = recipe.time_minutes
        db_recipe.instructions = recipe.instructions
        db_recipe.image_data = recipe.image_data
        db_recipe.ingredients = entries

    @staticmethod
    def _require(db: Session, model, entity_id: str):
        entity = crud.get_by_id(db, model, entity_id)
        if entity is None:
            raise NotFoundError(model.__name__.lower(), entity_id)
        return entity
