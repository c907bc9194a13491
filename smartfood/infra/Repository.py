"""Repository: the single shared owner of all ingredients, recipes and meals.

Contract:
  * One lock guards all three collections for every operation, reads
    included, so cross-collection queries see a consistent snapshot.
  * `get_*` and `list_*` hand out the stored instances themselves. Mutating
    a returned entity is visible to later lookups and races with concurrent
    Repository calls; use `entity.clone()` for an isolated copy, or route the
    change back through `update_*`.
  * Every operation either applies fully or leaves the Repository unchanged.
  * No I/O and no event delivery happen while the lock is held.
  * Removing an ingredient does not touch recipes or meals holding a copy of it.
"""
import logging
from datetime import date, datetime, timedelta
from threading import Lock
from typing import Dict, Iterable, List, Optional, Tuple, TypeVar, Union

from smartfood.domain.exceptions import DuplicateIdError, NotFoundError, ValidationError
from smartfood.domain.Ingredient import Ingredient, is_non_negative
from smartfood.domain.Meal import Meal
from smartfood.domain.Recipe import Recipe
from smartfood.domain.Units import format_unit
from smartfood.events.Event_Bus import PANTRY_LOW_STOCK, PANTRY_NEAR_EXPIRY, EventBus
from smartfood.utilities import config, statistics
from smartfood.utilities.clock import utc_now

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", Ingredient, Recipe, Meal)


# --- Structural validation ---------------------------------------------------
def _require_name(entity, kind: str, field: str = "name"):
    if not isinstance(entity.name, str) or not entity.name.strip():
        raise ValidationError(f"{kind} name cannot be empty", field=field)


def _require_non_negative(value, field: str):
    if not is_non_negative(value):
        raise ValidationError(f"must be a non-negative number: {value}", field=field)


def validate_ingredient(ingredient: Ingredient, prefix: str = ""):
    _require_name(ingredient, "Ingredient", prefix + "name")
    _require_non_negative(ingredient.quantity, prefix + "quantity")
    _require_non_negative(ingredient.unit_price, prefix + "unit_price")
    for nutrient, amount in ingredient.nutritional_info.items():
        _require_non_negative(amount, f"{prefix}nutritional_info.{nutrient}")


def validate_recipe(recipe: Recipe):
    _require_name(recipe, "Recipe")
    if recipe.servings <= 0:
        raise ValidationError(f"must be positive: {recipe.servings}", field="servings")
    for index, ingredient in enumerate(recipe.ingredients):
        validate_ingredient(ingredient, prefix=f"ingredients[{index}].")
    orders = [step.order for step in recipe.steps]
    if orders != list(range(1, len(orders) + 1)):
        raise ValidationError(f"step orders must be 1..N: {orders}", field="steps")


def validate_meal(meal: Meal):
    _require_name(meal, "Meal")
    if meal.servings <= 0:
        raise ValidationError(f"must be positive: {meal.servings}", field="servings")
    for index, ingredient in enumerate(meal.ingredients):
        validate_ingredient(ingredient, prefix=f"ingredients[{index}].")
    _require_non_negative(meal.estimated_cost, "estimated_cost")


class Repository:
    def __init__(self, event_bus: Optional[EventBus] = None, expiry_window: Optional[timedelta] = None):
        self._lock = Lock()
        self._ingredients: Dict[str, Ingredient] = {}
        self._recipes: Dict[str, Recipe] = {}
        self._meals: Dict[str, Meal] = {}
        self._event_bus = event_bus
        self.expiry_window = expiry_window or timedelta(days=config.DAYS_BEFORE_EXPIRY)

    # --- Generic helpers (caller holds the lock) ---------------------------
    @staticmethod
    def _insert(table: Dict[str, EntityT], entity: EntityT, kind: str):
        if entity.id in table:
            raise DuplicateIdError(f"{kind} with id '{entity.id}' already exists")
        table[entity.id] = entity

    @staticmethod
    def _lookup(table: Dict[str, EntityT], entity_id: str, kind: str) -> EntityT:
        try:
            return table[entity_id]
        except KeyError:
            raise NotFoundError(f"{kind} '{entity_id}' not found") from None

    @staticmethod
    def _sorted(table: Dict[str, EntityT]) -> List[EntityT]:
        return [table[key] for key in sorted(table)]

    # --- Ingredients -------------------------------------------------------
    def add_ingredient(self, ingredient: Ingredient):
        validate_ingredient(ingredient)
        with self._lock:
            self._insert(self._ingredients, ingredient, "Ingredient")
        logger.debug(f"Added ingredient {ingredient.id} ({ingredient.name})")
        self._evaluate_ingredient(ingredient)

    def get_ingredient(self, ingredient_id: str) -> Ingredient:
        with self._lock:
            return self._lookup(self._ingredients, ingredient_id, "Ingredient")

    def update_ingredient(self, ingredient: Ingredient):
        validate_ingredient(ingredient)
        with self._lock:
            self._lookup(self._ingredients, ingredient.id, "Ingredient")
            self._ingredients[ingredient.id] = ingredient
        logger.debug(f"Updated ingredient {ingredient.id}")
        self._evaluate_ingredient(ingredient)

    def remove_ingredient(self, ingredient_id: str):
        with self._lock:
            self._lookup(self._ingredients, ingredient_id, "Ingredient")
            del self._ingredients[ingredient_id]
        logger.debug(f"Removed ingredient {ingredient_id}")

    def list_ingredients(self) -> List[Ingredient]:
        with self._lock:
            return self._sorted(self._ingredients)

    def list_low_stock_ingredients(self) -> List[Ingredient]:
        with self._lock:
            return [i for i in self._sorted(self._ingredients) if i.is_low_stock()]

    def list_expired_ingredients(self) -> List[Ingredient]:
        now = utc_now()
        with self._lock:
            return [i for i in self._sorted(self._ingredients) if i.is_expired(now)]

    def list_expiring_ingredients(self, within: Optional[timedelta] = None) -> List[Ingredient]:
        '''
        Ingredients already expired or expiring within the given window
        (default: the configured DAYS_BEFORE_EXPIRY).
        '''
        window = self.expiry_window if within is None else within
        now = utc_now()
        with self._lock:
            return [i for i in self._sorted(self._ingredients)
                    if i.is_expired(now) or i.expires_within(window, now)]

    def total_inventory_value(self) -> float:
        with self._lock:
            return statistics.total_value(list(self._ingredients.values()))

    # --- Recipes -----------------------------------------------------------
    def add_recipe(self, recipe: Recipe):
        validate_recipe(recipe)
        with self._lock:
            self._insert(self._recipes, recipe, "Recipe")
        logger.debug(f"Added recipe {recipe.id} ({recipe.name})")

    def get_recipe(self, recipe_id: str) -> Recipe:
        with self._lock:
            return self._lookup(self._recipes, recipe_id, "Recipe")

    def update_recipe(self, recipe: Recipe):
        validate_recipe(recipe)
        with self._lock:
            self._lookup(self._recipes, recipe.id, "Recipe")
            self._recipes[recipe.id] = recipe
        logger.debug(f"Updated recipe {recipe.id}")

    def remove_recipe(self, recipe_id: str):
        with self._lock:
            self._lookup(self._recipes, recipe_id, "Recipe")
            del self._recipes[recipe_id]
        logger.debug(f"Removed recipe {recipe_id}")

    def list_recipes(self) -> List[Recipe]:
        with self._lock:
            return self._sorted(self._recipes)

    def search_recipes(self, query: str) -> List[Recipe]:
        """Case-insensitive substring search over recipe names and descriptions."""
        with self._lock:
            return [r for r in self._sorted(self._recipes) if r.matches(query)]

    # --- Meals -------------------------------------------------------------
    def add_meal(self, meal: Meal):
        validate_meal(meal)
        with self._lock:
            self._insert(self._meals, meal, "Meal")
        logger.debug(f"Added meal {meal.id} ({meal.name})")

    def get_meal(self, meal_id: str) -> Meal:
        with self._lock:
            return self._lookup(self._meals, meal_id, "Meal")

    def update_meal(self, meal: Meal):
        validate_meal(meal)
        with self._lock:
            self._lookup(self._meals, meal.id, "Meal")
            self._meals[meal.id] = meal
        logger.debug(f"Updated meal {meal.id}")

    def remove_meal(self, meal_id: str):
        with self._lock:
            self._lookup(self._meals, meal_id, "Meal")
            del self._meals[meal_id]
        logger.debug(f"Removed meal {meal_id}")

    def list_meals(self) -> List[Meal]:
        with self._lock:
            return self._sorted(self._meals)

    def list_meals_by_date(self, day: Union[date, datetime]) -> List[Meal]:
        """Meals planned on the same (UTC) calendar day as day."""
        with self._lock:
            return [m for m in self._sorted(self._meals) if m.is_planned_on(day)]

    # --- Analytics ---------------------------------------------------------
    def inventory_statistics(self) -> Dict[str, float]:
        with self._lock:
            return statistics.inventory_statistics(
                list(self._ingredients.values()), list(self._recipes.values()), list(self._meals.values()))

    def waste_statistics(self) -> Dict[str, float]:
        with self._lock:
            return statistics.waste_statistics(
                list(self._ingredients.values()), list(self._meals.values()), self.expiry_window)

    def counts(self) -> Dict[str, int]:
        with self._lock:
            return {'ingredients': len(self._ingredients), 'recipes': len(self._recipes), 'meals': len(self._meals)}

    # --- Bulk operations (persistence collaborators) -----------------------
    def snapshot(self) -> Tuple[List[Ingredient], List[Recipe], List[Meal]]:
        '''
        Isolated copies of all three collections, taken atomically.
        Meal copies stay linked to the recipe instances of this snapshot; a
        recipe that is not stored here is copied too (once per instance).
        '''
        with self._lock:
            ingredients = [i.clone() for i in self._sorted(self._ingredients)]
            recipe_copies = {rid: r.clone() for rid, r in self._recipes.items()}
            unstored: Dict[int, Recipe] = {}
            meals = []
            for meal in self._sorted(self._meals):
                meal_copy = meal.clone()
                recipe = meal.recipe
                if recipe is not None:
                    if recipe.id in recipe_copies:
                        meal_copy.link_recipe(recipe_copies[recipe.id])
                    else:
                        if id(recipe) not in unstored:
                            unstored[id(recipe)] = recipe.clone()
                        meal_copy.link_recipe(unstored[id(recipe)])
                meals.append(meal_copy)
        recipes = [recipe_copies[key] for key in sorted(recipe_copies)]
        return ingredients, recipes, meals

    def replace_all(self, ingredients: Iterable[Ingredient], recipes: Iterable[Recipe], meals: Iterable[Meal]):
        '''
        Replaces all three collections at once. Everything is validated first;
        on any failure the Repository keeps its previous contents.
        '''
        new_tables = []
        for items, validate, kind in ((ingredients, validate_ingredient, "Ingredient"),
                                      (recipes, validate_recipe, "Recipe"),
                                      (meals, validate_meal, "Meal")):
            table = {}
            for entity in items:
                validate(entity)
                self._insert(table, entity, kind)
            new_tables.append(table)
        with self._lock:
            self._ingredients, self._recipes, self._meals = new_tables
        logger.info(f"Repository replaced: {len(new_tables[0])} ingredients, "
                    f"{len(new_tables[1])} recipes, {len(new_tables[2])} meals")

    def clear(self):
        with self._lock:
            self._ingredients, self._recipes, self._meals = {}, {}, {}

    # --- Alerts ------------------------------------------------------------
    def _evaluate_ingredient(self, ingredient: Ingredient):
        if self._event_bus is None:
            return
        if ingredient.is_low_stock():
            self._event_bus.publish(PANTRY_LOW_STOCK, {
                "ingredient": ingredient,
                "remaining": ingredient.quantity,
                "threshold": config.LOW_STOCK_THRESHOLD.get(format_unit(ingredient.unit), 0.0),
            })
        if ingredient.expires_within(self.expiry_window):
            days_left = (ingredient.expiry_date - utc_now()).days
            self._event_bus.publish(PANTRY_NEAR_EXPIRY, {
                "ingredient": ingredient,
                "expired": ingredient.is_expired(),
                "days_left": days_left,
                "threshold": self.expiry_window.days,
            })
