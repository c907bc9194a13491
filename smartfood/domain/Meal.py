"""Meal domain entity: a planned consumption event, optionally seeded from a Recipe."""
import copy
from datetime import date, datetime
from enum import IntEnum
from typing import Dict, List, Mapping, Optional, Union

from smartfood.domain.exceptions import InvalidArgumentError, NotFoundError
from smartfood.domain.Ingredient import Ingredient, check_servings, new_id
from smartfood.domain.Recipe import Recipe
from smartfood.utilities.clock import as_utc, from_epoch, to_epoch, utc_now
from smartfood.utilities.constants import CALORIES_KEY, MEAL_ID_PREFIX
from smartfood.utilities.validators import MealInput, validate_payload


class MealType(IntEnum):
    BREAKFAST = 0
    LUNCH = 1
    DINNER = 2
    SNACK = 3


class MealStatus(IntEnum):
    PLANNED = 0
    SHOPPING = 1
    PREPARING = 2
    READY = 3
    CONSUMED = 4


class Meal:
    """
    A meal owns independent copies of its ingredients; the recipe it came from
    is a shared reference and is never copied.

    `estimated_cost` and `nutritional_info` are derived: `update_cost()` rebuilds
    both at the end of every ingredient-list or serving change. Status
    transitions are unconstrained.
    """

    def __init__(self, name: str = "New Meal", meal_type: MealType = MealType.BREAKFAST,
                 planned_time: Optional[Union[date, datetime]] = None, servings: int = 1,
                 status: MealStatus = MealStatus.PLANNED, id: Optional[str] = None):
        self._id = id or new_id(MEAL_ID_PREFIX)
        self._name = name
        self.meal_type = MealType(meal_type)
        self.status = MealStatus(status)
        self.planned_time = as_utc(planned_time) or utc_now()
        self._servings = check_servings(servings)
        self._recipe: Optional[Recipe] = None
        self._ingredients: List[Ingredient] = []
        self._estimated_cost = 0.0
        self._nutritional_info: Dict[str, float] = {}

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
            raise InvalidArgumentError("Meal name cannot be empty")
        self._name = value

    @property
    def servings(self) -> int:
        return self._servings

    @property
    def recipe(self) -> Optional[Recipe]:
        return self._recipe

    @property
    def ingredients(self) -> List[Ingredient]:
        return list(self._ingredients)

    @property
    def estimated_cost(self) -> float:
        return self._estimated_cost

    @property
    def nutritional_info(self) -> Dict[str, float]:
        return dict(self._nutritional_info)

    def set_status(self, status: MealStatus):
        self.status = MealStatus(status)

    def set_planned_time(self, when: Union[date, datetime]):
        self.planned_time = as_utc(when)

    def is_planned_on(self, day: Union[date, datetime]) -> bool:
        if isinstance(day, datetime):
            day = as_utc(day).date()
        return self.planned_time.date() == day

    # --- Recipe link -------------------------------------------------------
    def set_recipe(self, recipe: Optional[Recipe]):
        '''
        Links recipe (shared, not copied) and replaces the ingredient list with
        fresh copies of its ingredients scaled from the recipe's servings to ours.
        Passing None only detaches the recipe.
        '''
        self._recipe = recipe
        if recipe is None:
            return
        copies = [ingredient.clone() for ingredient in recipe.ingredients]
        if recipe.servings != self._servings:
            factor = self._servings / recipe.servings
            for ingredient in copies:
                ingredient.scale(factor, with_nutrients=True)
        self._ingredients = copies
        self.update_cost()

    def link_recipe(self, recipe: Optional[Recipe]):
        """Points the meal at recipe without re-deriving its ingredients."""
        self._recipe = recipe

    # --- Ingredients / servings -------------------------------------------
    def add_ingredient(self, ingredient: Ingredient):
        if ingredient is None:
            raise InvalidArgumentError("Cannot add null ingredient")
        if any(existing.id == ingredient.id for existing in self._ingredients):
            raise InvalidArgumentError(f"Ingredient '{ingredient.id}' is already part of meal '{self._name}'")
        self._ingredients.append(ingredient.clone())
        self.update_cost()

    def remove_ingredient(self, ingredient_id: str):
        for index, ingredient in enumerate(self._ingredients):
            if ingredient.id == ingredient_id:
                del self._ingredients[index]
                self.update_cost()
                return
        raise NotFoundError(f"Ingredient '{ingredient_id}' not found in meal '{self._name}'")

    def scale_servings(self, new_servings: int):
        check_servings(new_servings)
        if new_servings == self._servings:
            return
        factor = new_servings / self._servings
        for ingredient in self._ingredients:
            ingredient.scale(factor, with_nutrients=True)
        self._servings = new_servings
        self.update_cost()

    set_servings = scale_servings

    def update_cost(self):
        """Rebuild estimated cost and nutrient totals from the current ingredients."""
        totals: Dict[str, float] = {}
        cost = 0.0
        for ingredient in self._ingredients:
            cost += ingredient.cost()
            for nutrient, amount in ingredient.nutritional_info.items():
                totals[nutrient] = totals.get(nutrient, 0.0) + amount
        self._estimated_cost = cost
        self._nutritional_info = totals

    # --- Utility -----------------------------------------------------------
    def is_complete(self) -> bool:
        return bool(self._ingredients) and self.status != MealStatus.PLANNED

    def nutritional_value(self) -> float:
        """Total calories only."""
        return sum(ingredient.nutritional_info.get(CALORIES_KEY, 0.0) for ingredient in self._ingredients)

    def clone(self) -> "Meal":
        '''Deep copy of the meal; the recipe reference stays shared.'''
        return copy.deepcopy(self, {id(self._recipe): self._recipe} if self._recipe is not None else None)

    def __str__(self) -> str:
        return (f"{self._name} - {self.meal_type.name.lower()} - {self.status.name.lower()} - "
                f"{self.planned_time.isoformat()} - {self._servings} servings - Cost: {self._estimated_cost:.2f}")

    __repr__ = __str__

    # --- Serialization -----------------------------------------------------
    @staticmethod
    def from_dict(data, recipes: Optional[Mapping[str, Recipe]] = None) -> "Meal":
        '''
        Creates a Meal from its serialized field set. When the embedded recipe's id
        is found in recipes, that instance is linked instead of a new copy.
        '''
        payload = validate_payload(MealInput, data)
        meal = Meal(
            name=payload.name,
            meal_type=MealType(payload.type),
            planned_time=from_epoch(payload.planned_time),
            servings=payload.servings,
            status=MealStatus(payload.status),
            id=payload.id,
        )
        meal._ingredients = [Ingredient.from_input(ing) for ing in payload.ingredients]
        if payload.recipe is not None:
            shared = (recipes or {}).get(payload.recipe.id) if payload.recipe.id else None
            meal.link_recipe(shared if shared is not None else Recipe.from_input(payload.recipe))
        meal.update_cost()
        return meal

    def to_dict(self):
        data = {
            "id": self._id,
            "name": self._name,
            "type": int(self.meal_type),
            "status": int(self.status),
            "plannedTime": to_epoch(self.planned_time),
            "estimatedCost": self._estimated_cost,
            "servings": self._servings,
            "ingredients": [ing.to_dict() for ing in self._ingredients],
        }
        if self._recipe is not None:
            data["recipe"] = self._recipe.to_dict()
        return data
