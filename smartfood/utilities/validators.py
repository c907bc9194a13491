"""
Input validation schemas using Pydantic for the serialized entity field sets.
"""
from typing import Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator

from smartfood.domain.exceptions import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", allow_inf_nan=False)


def _check_nutrients(v):
    for nutrient, amount in v.items():
        if not nutrient or not nutrient.strip():
            raise ValueError('Nutrient name cannot be empty')
        if amount < 0:
            raise ValueError(f'Nutrient amount cannot be negative: {nutrient}')
    return v


def _check_unique_ids(v, owner: str):
    ids = [ing.id for ing in v if ing.id]
    if len(ids) != len(set(ids)):
        raise ValueError(f"Duplicate ingredient id in {owner}")
    return v


class IngredientInput(_CamelModel):
    """Schema for a serialized ingredient."""
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=200)
    quantity: float = Field(0.0, ge=0)
    unit: Union[int, str] = 0
    unit_price: float = Field(0.0, ge=0, alias="unitPrice")
    expiry_date: Optional[int] = Field(None, alias="expiryDate")
    nutritional_info: Dict[str, float] = Field(default_factory=dict, alias="nutritionalInfo")

    @field_validator('name')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        if not v.strip():
            raise ValueError('Ingredient name cannot be empty')
        return v.strip()

    @field_validator('nutritional_info')
    @classmethod
    def validate_nutrients(cls, v):
        return _check_nutrients(v)


class StepInput(_CamelModel):
    """Schema for a serialized recipe step."""
    order: int = Field(..., ge=1)
    description: str = ""
    duration_minutes: int = Field(0, ge=0, alias="durationMinutes")


class RecipeInput(_CamelModel):
    """Schema for a serialized recipe."""
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    difficulty: int = Field(0, ge=0, le=2)
    servings: int = Field(1, ge=1)
    ingredients: List[IngredientInput] = Field(default_factory=list)
    steps: List[StepInput] = Field(default_factory=list)
    nutritional_info: Dict[str, float] = Field(default_factory=dict, alias="nutritionalInfo")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate recipe name."""
        if not v.strip():
            raise ValueError('Recipe name cannot be empty')
        return v.strip()

    @field_validator('ingredients')
    @classmethod
    def validate_unique_ids(cls, v):
        """Ingredient ids must be unique within a recipe."""
        return _check_unique_ids(v, "recipe")

    @field_validator('nutritional_info')
    @classmethod
    def validate_nutrients(cls, v):
        return _check_nutrients(v)


class MealInput(_CamelModel):
    """Schema for a serialized meal."""
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=200)
    type: int = Field(0, ge=0, le=3)
    status: int = Field(0, ge=0, le=4)
    planned_time: Optional[int] = Field(None, alias="plannedTime")
    estimated_cost: float = Field(0.0, ge=0, alias="estimatedCost")
    servings: int = Field(1, ge=1)
    ingredients: List[IngredientInput] = Field(default_factory=list)
    recipe: Optional[RecipeInput] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Meal name cannot be empty')
        return v.strip()

    @field_validator('ingredients')
    @classmethod
    def validate_unique_ids(cls, v):
        return _check_unique_ids(v, "meal")


def validate_payload(schema: Type[SchemaT], data) -> SchemaT:
    """Validate a raw mapping against schema, raising the domain ValidationError."""
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(first.get("msg", str(e)), field=field) from e
