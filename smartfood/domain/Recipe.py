"""Recipe domain entity: ordered steps, ingredient copies, derived nutrient totals."""
import copy
from dataclasses import dataclass, replace
from datetime import timedelta
from enum import IntEnum
from typing import Dict, Iterable, List, Optional

from smartfood.domain.exceptions import InvalidArgumentError, NotFoundError
from smartfood.domain.Ingredient import Ingredient, check_servings, new_id
from smartfood.utilities.constants import RECIPE_ID_PREFIX
from smartfood.utilities.validators import RecipeInput, validate_payload


class Difficulty(IntEnum):
    EASY = 0
    MEDIUM = 1
    HARD = 2


@dataclass(frozen=True)
class Step:
    order: int
    description: str = ""
    duration_minutes: int = 0

    def to_dict(self):
        return {"order": self.order, "description": self.description, "durationMinutes": self.duration_minutes}


class Recipe:
    """
    A named procedure over a list of ingredient copies.

    The recipe owns its ingredients: `add_ingredient` stores a copy, so the
    Repository's ingredient table is never aliased. Every structural mutation
    ends with `update_nutritional_info()`, which rebuilds the nutrient totals
    from scratch. Step orders are always the contiguous sequence 1..N.
    """

    def __init__(self, name: str = "", description: str = "", difficulty: Difficulty = Difficulty.EASY,
                 servings: int = 1, ingredients: Optional[Iterable[Ingredient]] = None,
                 steps: Optional[Iterable[Step]] = None, id: Optional[str] = None):
        self._id = id or new_id(RECIPE_ID_PREFIX)
        self._name = name
        self.description = description
        self.difficulty = Difficulty(difficulty)
        self._servings = 1
        self.servings = servings
        self._ingredients: List[Ingredient] = []
        self._steps: List[Step] = []
        self._nutritional_info: Dict[str, float] = {}
        for ingredient in ingredients or []:
            self._append_ingredient(ingredient)
        for step in steps or []:
            self.add_step(step)
        self.update_nutritional_info()

    # --- Getters / setters -------------------------------------------------
    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str):
        if not isinstance(value, str) or not value.strip():
            raise InvalidArgumentError("Recipe name cannot be empty")
        self._name = value

    @property
    def servings(self) -> int:
        return self._servings

    @servings.setter
    def servings(self, value: int):
        """Sets the serving count without touching ingredient quantities."""
        self._servings = check_servings(value)

    @property
    def ingredients(self) -> List[Ingredient]:
        return list(self._ingredients)

    @property
    def steps(self) -> List[Step]:
        return list(self._steps)

    @property
    def nutritional_info(self) -> Dict[str, float]:
        return dict(self._nutritional_info)

    # --- Ingredients -------------------------------------------------------
    def _append_ingredient(self, ingredient: Ingredient):
        if ingredient is None:
            raise InvalidArgumentError("Cannot add null ingredient")
        if any(existing.id == ingredient.id for existing in self._ingredients):
            raise InvalidArgumentError(f"Ingredient '{ingredient.id}' is already part of recipe '{self._name}'")
        self._ingredients.append(ingredient.clone())

    def add_ingredient(self, ingredient: Ingredient):
        '''Adds a copy of ingredient; the caller's object stays independent.'''
        self._append_ingredient(ingredient)
        self.update_nutritional_info()

    def remove_ingredient(self, ingredient_id: str):
        for index, ingredient in enumerate(self._ingredients):
            if ingredient.id == ingredient_id:
                del self._ingredients[index]
                self.update_nutritional_info()
                return
        raise NotFoundError(f"Ingredient '{ingredient_id}' not found in recipe '{self._name}'")

    def get_ingredient(self, ingredient_id: str) -> Ingredient:
        for ingredient in self._ingredients:
            if ingredient.id == ingredient_id:
                return ingredient
        raise NotFoundError(f"Ingredient '{ingredient_id}' not found in recipe '{self._name}'")

    # --- Steps -------------------------------------------------------------
    def _renumber_steps(self):
        self._steps.sort(key=lambda s: s.order)
        self._steps = [replace(step, order=index) for index, step in enumerate(self._steps, start=1)]

    def add_step(self, step: Step):
        '''
        Inserts step at its order. Steps at or after that order move down by one.
        '''
        if step.order <= 0:
            raise InvalidArgumentError(f"Step order must be positive: {step.order}")
        if any(existing.order == step.order for existing in self._steps):
            self._steps = [replace(s, order=s.order + 1) if s.order >= step.order else s for s in self._steps]
        self._steps.append(step)
        self._renumber_steps()

    def remove_step(self, order: int):
        remaining = [s for s in self._steps if s.order != order]
        if len(remaining) == len(self._steps):
            raise NotFoundError(f"Step {order} not found in recipe '{self._name}'")
        self._steps = remaining
        self._renumber_steps()

    def reorder_step(self, old_order: int, new_order: int):
        '''
        Moves the step at old_order to new_order, shifting the steps in between.
        A new_order past the last step moves the step to the end.
        '''
        if old_order <= 0 or new_order <= 0:
            raise InvalidArgumentError("Step orders must be positive")
        moving = next((s for s in self._steps if s.order == old_order), None)
        if moving is None:
            raise InvalidArgumentError(f"Step with order {old_order} not found")
        new_order = min(new_order, len(self._steps))

        shifted = []
        for s in self._steps:
            if s is moving:
                continue
            if old_order < new_order and old_order < s.order <= new_order:
                s = replace(s, order=s.order - 1)
            elif new_order < old_order and new_order <= s.order < old_order:
                s = replace(s, order=s.order + 1)
            shifted.append(s)
        shifted.append(replace(moving, order=new_order))
        self._steps = shifted
        self._renumber_steps()

    def total_time(self) -> timedelta:
        return timedelta(minutes=sum(s.duration_minutes for s in self._steps))

    # --- Derived values ----------------------------------------------------
    def scale_servings(self, new_servings: int):
        '''
        Rescales every ingredient (quantity and nutrient totals) to new_servings.
        '''
        check_servings(new_servings)
        if new_servings == self._servings:
            return
        factor = new_servings / self._servings
        for ingredient in self._ingredients:
            ingredient.scale(factor, with_nutrients=True)
        self._servings = new_servings
        self.update_nutritional_info()

    def update_nutritional_info(self):
        """Rebuild nutrient totals from the current ingredient list."""
        totals: Dict[str, float] = {}
        for ingredient in self._ingredients:
            for nutrient, amount in ingredient.nutritional_info.items():
                totals[nutrient] = totals.get(nutrient, 0.0) + amount
        self._nutritional_info = totals

    def total_cost(self) -> float:
        return sum(ingredient.cost() for ingredient in self._ingredients)

    def is_valid(self) -> bool:
        return bool(self._name) and self._servings > 0 and bool(self._ingredients) and bool(self._steps)

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on name and description."""
        needle = (query or "").lower()
        return needle in self._name.lower() or needle in (self.description or "").lower()

    def clone(self) -> "Recipe":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        return (f"{self._name} - {self._servings} servings - {self.difficulty.name.lower()} - "
                f"{len(self._ingredients)} ingredients - {len(self._steps)} steps")

    __repr__ = __str__

    # --- Serialization -----------------------------------------------------
    @staticmethod
    def from_dict(data) -> "Recipe":
        return Recipe.from_input(validate_payload(RecipeInput, data))

    @staticmethod
    def from_input(payload: RecipeInput) -> "Recipe":
        recipe = Recipe(
            name=payload.name,
            description=payload.description,
            difficulty=Difficulty(payload.difficulty),
            servings=payload.servings,
            ingredients=[Ingredient.from_input(ing) for ing in payload.ingredients],
            id=payload.id,
        )
        recipe._steps = [Step(s.order, s.description, s.duration_minutes) for s in payload.steps]
        recipe._renumber_steps()
        return recipe

    def to_dict(self):
        return {
            "id": self._id,
            "name": self._name,
            "description": self.description,
            "difficulty": int(self.difficulty),
            "servings": self._servings,
            "ingredients": [ing.to_dict() for ing in self._ingredients],
            "steps": [step.to_dict() for step in self._steps],
            "nutritionalInfo": dict(self._nutritional_info),
        }
