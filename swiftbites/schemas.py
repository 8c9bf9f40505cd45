import base64
import binascii
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator


class NamedBase(BaseModel):
    name: str = Field(
        ..., min_length=1,
        json_schema_extra={"example": "Italian"},
    )

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        # names are compared verbatim, so only reject, never strip
        if not value.strip():
            raise ValueError("name must not be blank")
        return value


class CategoryCreate(NamedBase):
    pass


class IngredientCreate(NamedBase):
    pass


class RecipeIngredientIn(BaseModel):
    ingredient_id: str
    quantity: str = Field("", json_schema_extra={"example": "1/2 cup"})


class RecipeCreate(NamedBase):
    summary: str = ""
    category_id: Optional[str] = None
    serving_count: PositiveInt = Field(
        ..., json_schema_extra={"example": 4}
    )
    time_minutes: PositiveInt = Field(
        ..., json_schema_extra={"example": 30}
    )
    ingredients: List[RecipeIngredientIn] = Field(default_factory=list)
    instructions: str = ""
    image_data: Optional[bytes] = None

    @field_validator("image_data", mode="before")
    @classmethod
    def decode_image(cls, value):
        # JSON clients send images base64 encoded; raw bytes pass through
        if isinstance(value, str):
            try:
                return base64.b64decode(value, validate=True)
            except binascii.Error as exc:
                raise ValueError("image_data must be base64") from exc
        return value


class Snapshot(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class RecipeRef(Snapshot):
    id: str
    name: str


class CategoryRef(Snapshot):
    id: str
    name: str


class Category(Snapshot):
    id: str
    name: str
    recipes: List[RecipeRef] = Field(default_factory=list)


class Ingredient(Snapshot):
    id: str
    name: str


class RecipeIngredient(Snapshot):
    id: str
    ingredient: Ingredient
    quantity: str


class Recipe(Snapshot):
    model_config = ConfigDict(from_attributes=True, ser_json_bytes="base64")

    id: str
    name: str
    summary: str
    category: Optional[CategoryRef] = None
    serving_count: int
    time_minutes: int
    ingredients: List[RecipeIngredient] = Field(default_factory=list)
    instructions: str
    image_data: Optional[bytes] = None
