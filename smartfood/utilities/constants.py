from typing import Final

# Conversion factors relative to the canonical unit of each class
# (gram for mass, milliliter for volume, piece for count).
MASS_FACTORS: Final[dict[str, float]] = {
    "g": 1.0,
    "kg": 1000.0,
    "oz": 28.349523125,
    "lb": 453.59237,
}
VOLUME_FACTORS: Final[dict[str, float]] = {
    "ml": 1.0,
    "l": 1000.0,
    "tsp": 4.92892159375,
    "tbsp": 14.78676478125,
    "cup": 236.5882365,
}
COUNT_FACTORS: Final[dict[str, float]] = {"pc": 1.0}

DAYS_BEFORE_EXPIRY: Final[int] = 5
LOW_STOCK_THRESHOLD: Final[dict[str, float]] = {"g": 100.0, "kg": 0.1, "ml": 100.0, "l": 0.1, "pc": 2.0}

CALORIES_KEY: Final[str] = "calories"

INGREDIENT_ID_PREFIX: Final[str] = "ing_"
RECIPE_ID_PREFIX: Final[str] = "rec_"
MEAL_ID_PREFIX: Final[str] = "meal_"

STORAGE_FORMAT_VERSION: Final[str] = "1.0"

# Keys of the statistics mappings consumed by reporting. Do not rename.
INVENTORY_STATISTICS_KEYS: Final[tuple[str, ...]] = (
    "total_value",
    "ingredient_count",
    "recipe_count",
    "meal_count",
    "mass_items",
    "volume_items",
    "count_items",
    "low_stock_count",
    "expired_count",
    "average_ingredient_value",
)
WASTE_STATISTICS_KEYS: Final[tuple[str, ...]] = (
    "total_value",
    "expired_count",
    "expired_value",
    "expiring_soon_count",
    "expiring_soon_value",
    "waste_percentage",
    "consumed_meals",
    "planned_meals",
)
