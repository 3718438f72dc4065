"""Recipe Pydantic models."""

import math
from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, field_validator


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def _coerce_whole_number(value: Any) -> Any:
    """Accept ints, finite floats and numeric strings; leave anything else for pydantic to reject."""
    if isinstance(value, bool):
        raise ValueError("must be a number, not a boolean")
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError as e:
            raise ValueError(f"must be a number, got {value!r}") from e
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError("must be a finite number")
        return round_half_up(value)
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value


RequiredText = Annotated[str, AfterValidator(_require_text)]
OptionalText = Annotated[Optional[str], BeforeValidator(_blank_to_none)]
WholeNumber = Annotated[int, BeforeValidator(_coerce_whole_number)]
OptionalWholeNumber = Annotated[Optional[int], BeforeValidator(_coerce_whole_number)]


class Ingredient(BaseModel):
    """Single ingredient line."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: RequiredText = Field(..., description="Ingredient name (e.g., 'Flour')")
    amount: OptionalText = Field(None, description="Free-text amount (e.g., '1 cup')")


class Instruction(BaseModel):
    """Single cooking step; position in the list is the step order."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    instruction: RequiredText = Field(..., description="Step text")


class Recipe(BaseModel):
    """
    Structured recipe as extracted from one source, or as merged from several.

    Optional fields are always serialized, as null when absent.
    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        json_schema_extra={
            "example": {
                "name": "Pancakes",
                "description": "Fluffy weekend pancakes",
                "cuisine_type": "American",
                "main_ingredient": "Flour",
                "time_estimation": 25,
                "servings": 4,
                "health_score": 55,
                "ingredients": [
                    {"name": "Flour", "amount": "1 cup"},
                    {"name": "Egg", "amount": "1"},
                ],
                "instructions": [
                    {"instruction": "Mix dry ingredients"},
                    {"instruction": "Cook on a hot griddle"},
                ],
            }
        },
    )

    name: RequiredText = Field(..., description="Recipe name")
    description: OptionalText = Field(None, description="Short description")
    cuisine_type: OptionalText = Field(None, description="Cuisine (e.g., 'Italian')")
    main_ingredient: OptionalText = Field(None, description="Main ingredient (e.g., 'Chicken')")
    time_estimation: WholeNumber = Field(..., ge=0, description="Total time in minutes")
    servings: OptionalWholeNumber = Field(None, gt=0, description="Number of servings")
    health_score: OptionalWholeNumber = Field(None, ge=0, le=100, description="Health score 0-100")
    ingredients: List[Ingredient] = Field(default_factory=list)
    instructions: List[Instruction] = Field(default_factory=list)

    @field_validator("ingredients", "instructions", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value


# ---------------------------------------------------------------------------
# Persistence shapes
# ---------------------------------------------------------------------------


class RecipeIngredientRow(BaseModel):
    """Ingredient row as stored, keyed to its parent recipe."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    recipe_id: Optional[str] = None
    name: str
    amount: Optional[str] = None
    order: int = Field(..., ge=0)


class RecipeInstructionRow(BaseModel):
    """Instruction row as stored; step_number is always order + 1."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    recipe_id: Optional[str] = None
    step_number: int = Field(..., ge=1)
    instruction: str
    order: int = Field(..., ge=0)


class StoredRecipe(BaseModel):
    """Recipe parent record as returned by storage."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    cuisine_type: Optional[str] = None
    main_ingredient: Optional[str] = None
    time_estimation: int
    health_score: Optional[int] = None
    servings: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StoredRecipeWithDetails(StoredRecipe):
    """Stored recipe plus its ordered ingredient and instruction rows."""

    ingredients: List[RecipeIngredientRow] = Field(default_factory=list)
    instructions: List[RecipeInstructionRow] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class TextParseRequest(BaseModel):
    """Body for transcript parsing."""

    text: str = Field(..., description="Recipe text, typically a voice transcript")


class CreateRecipeRequest(Recipe):
    """A reviewed recipe to persist, with an optional photo URL."""

    image_url: Optional[str] = Field(None, description="Public URL of the recipe photo")
