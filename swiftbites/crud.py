from typing import Optional

from sqlalchemy.orm import Session

from . import models


def get_by_id(db: Session, model, entity_id: str):
    return db.get(model, entity_id)


def name_taken(
    db: Session, model, name: str, exclude_id: Optional[str] = None
) -> bool:
    query = db.query(model.id).filter(model.name == name)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    return query.first() is not None


def list_sorted(db: Session, model):
    # id breaks ties so equal names still come back in a fixed order
    return db.query(model).order_by(model.name, model.id).all()


def recipes_in_category(db: Session, category_id: str):
    return (
        db.query(models.Recipe)
        .filter(models.Recipe.category_id == category_id)
        .all()
    )


def entries_for_ingredient(db: Session, ingredient_id: str):
    return (
        db.query(models.RecipeIngredient)
        .filter(models.RecipeIngredient.ingredient_id == ingredient_id)
        .all()
    )
