"""
Statistics over ingredient, recipe and meal collections.

These are pure functions over plain sequences; the Repository calls them
while holding its lock so that all three collections are read as one
consistent snapshot. The key sets are fixed by INVENTORY_STATISTICS_KEYS and
WASTE_STATISTICS_KEYS and are consumed by reporting: add keys, never rename.
"""
from datetime import datetime, timedelta
from typing import Dict, Optional, Sequence

from smartfood.domain.Ingredient import Ingredient
from smartfood.domain.Meal import Meal, MealStatus
from smartfood.domain.Recipe import Recipe
from smartfood.domain.Units import UnitClass, unit_class
from smartfood.utilities.clock import utc_now


def total_value(ingredients: Sequence[Ingredient]) -> float:
    return sum(ingredient.cost() for ingredient in ingredients)


def inventory_statistics(ingredients: Sequence[Ingredient], recipes: Sequence[Recipe],
                         meals: Sequence[Meal], now: Optional[datetime] = None) -> Dict[str, float]:
    """Inventory overview: value, counts per unit class, alert counts."""
    now = now or utc_now()
    value = total_value(ingredients)
    by_class = {cls: 0 for cls in UnitClass}
    for ingredient in ingredients:
        by_class[unit_class(ingredient.unit)] += 1

    return {
        'total_value': round(value, 2),
        'ingredient_count': float(len(ingredients)),
        'recipe_count': float(len(recipes)),
        'meal_count': float(len(meals)),
        'mass_items': float(by_class[UnitClass.MASS]),
        'volume_items': float(by_class[UnitClass.VOLUME]),
        'count_items': float(by_class[UnitClass.COUNT]),
        'low_stock_count': float(sum(1 for i in ingredients if i.is_low_stock())),
        'expired_count': float(sum(1 for i in ingredients if i.is_expired(now))),
        'average_ingredient_value': round(value / len(ingredients), 2) if ingredients else 0.0,
    }


def waste_statistics(ingredients: Sequence[Ingredient], meals: Sequence[Meal], within: timedelta,
                     now: Optional[datetime] = None) -> Dict[str, float]:
    """
    Value already lost to expiry and value at risk within `within`.
    `waste_percentage` is expired value over total inventory value (0-100).
    """
    now = now or utc_now()
    expired = [i for i in ingredients if i.is_expired(now)]
    expiring = [i for i in ingredients if not i.is_expired(now) and i.expires_within(within, now)]
    value = total_value(ingredients)
    expired_value = total_value(expired)

    return {
        'total_value': round(value, 2),
        'expired_count': float(len(expired)),
        'expired_value': round(expired_value, 2),
        'expiring_soon_count': float(len(expiring)),
        'expiring_soon_value': round(total_value(expiring), 2),
        'waste_percentage': round(expired_value / value * 100, 2) if value else 0.0,
        'consumed_meals': float(sum(1 for m in meals if m.status == MealStatus.CONSUMED)),
        'planned_meals': float(sum(1 for m in meals if m.status == MealStatus.PLANNED)),
    }
