from uuid import uuid4

from sqlalchemy import Column, ForeignKey, Integer, LargeBinary, String, Text
from sqlalchemy.orm import relationship

from .db import Base


def new_id() -> str:
    return uuid4().hex


class Category(Base):
    __tablename__ = "categories"
    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, unique=True, index=True, nullable=False)
    # derived from Recipe.category_id, written only through the store
    recipes = relationship(
        "Recipe",
        primaryjoin="Category.id == foreign(Recipe.category_id)",
        order_by="Recipe.name",
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<Category(name='{self.name}')>"


class Ingredient(Base):
    __tablename__ = "ingredients"
    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, unique=True, index=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Ingredient(name='{self.name}')>"


class Recipe(Base):
    __tablename__ = "recipes"
    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, unique=True, index=True, nullable=False)
    summary = Column(Text, nullable=False, default="")
    category_id = Column(
        String(32),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    serving_count = Column(Integer, nullable=False)
    time_minutes = Column(Integer, nullable=False)
    instructions = Column(Text, nullable=False, default="")
    image_data = Column(LargeBinary, nullable=True)

    category = relationship(
        "Category",
        primaryjoin="foreign(Recipe.category_id) == Category.id",
        viewonly=True,
    )
    ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeIngredient.position",
    )

    def __repr__(self) -> str:
        return f"<Recipe(name='{self.name}')>"


class RecipeIngredient(Base):
    __tablename__ = "recipe_ingredients"
    id = Column(String(32), primary_key=True, default=new_id)
    recipe_id = Column(
        String(32),
        ForeignKey("recipes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    ingredient_id = Column(
        String(32),
        ForeignKey("ingredients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    quantity = Column(Text, nullable=False, default="")
    position = Column(Integer, nullable=False, default=0)

    recipe = relationship("Recipe", back_populates="ingredients")
    ingredient = relationship("Ingredient")
