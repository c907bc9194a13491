"""Ingredient domain entity: name, quantity + unit, unit price, optional expiry, nutrient totals."""
import copy
import math
from datetime import date, datetime, timedelta
from typing import Dict, Optional, Union
from uuid import uuid4

from smartfood.domain.exceptions import InvalidArgumentError
from smartfood.domain.Units import Unit, convert, format_unit, parse_unit, unit_from_code
from smartfood.utilities import config
from smartfood.utilities.clock import as_utc, from_epoch, to_epoch, utc_now
from smartfood.utilities.constants import INGREDIENT_ID_PREFIX
from smartfood.utilities.validators import IngredientInput, validate_payload


def new_id(prefix: str) -> str:
    return f"{prefix}{uuid4().hex[:8]}"


def is_non_negative(value) -> bool:
    """Finite and >= 0; rejects None, NaN and infinities."""
    return value is not None and math.isfinite(value) and value >= 0


def check_servings(value) -> int:
    """Servings are whole, positive numbers of portions."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgumentError(f"Number of servings must be a positive integer: {value!r}")
    return value


def coerce_unit(unit: Union[Unit, int, str]) -> Unit:
    """Accept a Unit, its integer code or its short token."""
    if isinstance(unit, Unit):
        return unit
    if isinstance(unit, str):
        return parse_unit(unit)
    return unit_from_code(unit)


class Ingredient:
    """
    A named substance held in some quantity of one unit.

    Nutrient amounts are totals for the current quantity. `cost()` is
    expressed in the ingredient's own unit; nothing is converted unless
    `convert_to` is called.
    """

    def __init__(self, name: str = "", quantity: float = 0.0, unit: Union[Unit, int, str] = Unit.GRAM,
                 unit_price: float = 0.0, expiry_date: Optional[Union[date, datetime]] = None,
                 nutritional_info: Optional[Dict[str, float]] = None, id: Optional[str] = None):
        self._id = id or new_id(INGREDIENT_ID_PREFIX)
        # name may stay empty on a draft; the Repository refuses to store it
        self._name = name
        self._quantity = 0.0
        self._unit_price = 0.0
        self.quantity = quantity
        self.unit = unit
        self.unit_price = unit_price
        self.expiry_date = as_utc(expiry_date)
        self._nutritional_info: Dict[str, float] = {}
        for nutrient, amount in (nutritional_info or {}).items():
            self.add_nutrient(nutrient, amount)

    # --- Identity and validated fields ------------------------------------
    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str):
        if not isinstance(value, str) or not value.strip():
            raise InvalidArgumentError("Ingredient name cannot be empty")
        self._name = value

    @property
    def quantity(self) -> float:
        return self._quantity

    @quantity.setter
    def quantity(self, value: float):
        if not is_non_negative(value):
            raise InvalidArgumentError(f"Quantity must be a non-negative number: {value}")
        self._quantity = float(value)

    def set_quantity(self, quantity: float):
        self.quantity = quantity

    @property
    def unit(self) -> Unit:
        return self._unit

    @unit.setter
    def unit(self, value: Union[Unit, int, str]):
        self._unit = coerce_unit(value)

    @property
    def unit_price(self) -> float:
        return self._unit_price

    @unit_price.setter
    def unit_price(self, value: float):
        if not is_non_negative(value):
            raise InvalidArgumentError(f"Price must be a non-negative number: {value}")
        self._unit_price = float(value)

    def set_unit_price(self, price: float):
        self.unit_price = price

    def set_expiry_date(self, expiry: Optional[Union[date, datetime]]):
        self.expiry_date = as_utc(expiry)

    @property
    def nutritional_info(self) -> Dict[str, float]:
        '''Copy of the nutrient mapping; mutate through add_nutrient/remove_nutrient.'''
        return dict(self._nutritional_info)

    def add_nutrient(self, nutrient: str, amount: float):
        if not nutrient:
            raise InvalidArgumentError("Nutrient name cannot be empty")
        if not is_non_negative(amount):
            raise InvalidArgumentError(f"Nutritional value must be a non-negative number: {nutrient}={amount}")
        self._nutritional_info[nutrient] = float(amount)

    def remove_nutrient(self, nutrient: str):
        self._nutritional_info.pop(nutrient, None)

    # --- Operations --------------------------------------------------------
    def scale(self, factor: float, with_nutrients: bool = False):
        '''
        Multiplies the quantity by factor. Unit, price and nutrients stay as they are
        unless with_nutrients is set, in which case nutrient totals follow the quantity.
        '''
        if not is_non_negative(factor) or factor == 0:
            raise InvalidArgumentError(f"Scale factor must be positive: {factor}")
        self._quantity *= factor
        if with_nutrients:
            for nutrient in self._nutritional_info:
                self._nutritional_info[nutrient] *= factor

    def cost(self) -> float:
        return self._quantity * self._unit_price

    def convert_to(self, unit: Union[Unit, int, str]) -> float:
        """Quantity expressed in another unit of the same class (the ingredient is not changed)."""
        return convert(self._quantity, self.unit, coerce_unit(unit))

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """True iff now is strictly after the expiry; no expiry means never expired."""
        if self.expiry_date is None:
            return False
        return as_utc(now or utc_now()) > self.expiry_date

    def expires_within(self, within: timedelta, now: Optional[datetime] = None) -> bool:
        if self.expiry_date is None:
            return False
        return self.expiry_date <= as_utc(now or utc_now()) + within

    def is_low_stock(self) -> bool:
        threshold = config.LOW_STOCK_THRESHOLD.get(format_unit(self.unit))
        if threshold is None:
            return False
        return self._quantity <= threshold

    def clone(self) -> "Ingredient":
        """Independent copy that keeps the same id."""
        return copy.deepcopy(self)

    def __str__(self) -> str:
        parts = [f"{self.name} - {self._quantity:g} {format_unit(self.unit)}"]
        if self._unit_price:
            parts.append(f"Price: {self._unit_price:g}/{format_unit(self.unit)}")
        if self.expiry_date:
            parts.append(f"Exp: {self.expiry_date.date().isoformat()}")
        return " - ".join(parts)

    __repr__ = __str__

    # --- Serialization -----------------------------------------------------
    @staticmethod
    def from_dict(data) -> "Ingredient":
        '''Creates an Ingredient from its serialized field set. Unknown keys are ignored.'''
        return Ingredient.from_input(validate_payload(IngredientInput, data))

    @staticmethod
    def from_input(payload: IngredientInput) -> "Ingredient":
        return Ingredient(
            name=payload.name,
            quantity=payload.quantity,
            unit=coerce_unit(payload.unit),
            unit_price=payload.unit_price,
            expiry_date=from_epoch(payload.expiry_date),
            nutritional_info=payload.nutritional_info,
            id=payload.id,
        )

    def to_dict(self):
        '''Converts the Ingredient to a dictionary for JSON persistence.'''
        return {
            "id": self._id,
            "name": self._name,
            "quantity": self._quantity,
            "unit": int(self.unit),
            "unitPrice": self._unit_price,
            "expiryDate": to_epoch(self.expiry_date),
            "nutritionalInfo": dict(self._nutritional_info),
        }
