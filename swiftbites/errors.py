class StoreError(Exception):
    """Base class for everything the entity store raises."""


class DuplicateNameError(StoreError):
    kind = "entity"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"{self.kind.capitalize()} with the same name exists"
        )


class CategoryExists(DuplicateNameError):
    kind = "category"


class IngredientExists(DuplicateNameError):
    kind = "ingredient"


class RecipeExists(DuplicateNameError):
    kind = "recipe"


class NotFoundError(StoreError):
    def __init__(self, kind: str, entity_id: str) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind.capitalize()} {entity_id} not found")


class PersistenceUnavailableError(StoreError):
    def __init__(self) -> None:
        super().__init__("No backing store attached")


class PersistenceError(StoreError):
    """The database rejected a write after validation passed."""
