"""Measurement units and conversion between compatible units.

Units fall into three compatibility classes (mass, volume, count). A value
converts only inside its class, through the class's canonical unit:
gram, milliliter and piece respectively. This module holds no state.
"""
from enum import Enum, IntEnum
from typing import Dict

from smartfood.domain.exceptions import IncompatibleUnitsError, UnknownUnitError
from smartfood.utilities.constants import COUNT_FACTORS, MASS_FACTORS, VOLUME_FACTORS


class Unit(IntEnum):
    # Integer values are the persisted codes; never reorder.
    GRAM = 0
    KILOGRAM = 1
    MILLILITER = 2
    LITER = 3
    PIECE = 4
    TEASPOON = 5
    TABLESPOON = 6
    CUP = 7
    OUNCE = 8
    POUND = 9


class UnitClass(Enum):
    MASS = "mass"
    VOLUME = "volume"
    COUNT = "count"


_TOKENS: Dict[Unit, str] = {
    Unit.GRAM: "g",
    Unit.KILOGRAM: "kg",
    Unit.MILLILITER: "ml",
    Unit.LITER: "l",
    Unit.PIECE: "pc",
    Unit.TEASPOON: "tsp",
    Unit.TABLESPOON: "tbsp",
    Unit.CUP: "cup",
    Unit.OUNCE: "oz",
    Unit.POUND: "lb",
}
_UNITS_BY_TOKEN: Dict[str, Unit] = {token: unit for unit, token in _TOKENS.items()}

_CLASS_FACTORS = (
    (UnitClass.MASS, MASS_FACTORS),
    (UnitClass.VOLUME, VOLUME_FACTORS),
    (UnitClass.COUNT, COUNT_FACTORS),
)
_CLASSES: Dict[Unit, UnitClass] = {}
_FACTORS: Dict[Unit, float] = {}
for _cls, _factors in _CLASS_FACTORS:
    for _token, _factor in _factors.items():
        _CLASSES[_UNITS_BY_TOKEN[_token]] = _cls
        _FACTORS[_UNITS_BY_TOKEN[_token]] = _factor


def format_unit(unit: Unit) -> str:
    """Short textual token for a unit, e.g. Unit.KILOGRAM -> "kg"."""
    try:
        return _TOKENS[unit]
    except KeyError:
        raise UnknownUnitError(f"Unknown unit: {unit!r}") from None


def parse_unit(text: str) -> Unit:
    """Inverse of format_unit; surrounding whitespace and case are ignored."""
    key = text.strip().lower() if isinstance(text, str) else ""
    try:
        return _UNITS_BY_TOKEN[key]
    except KeyError:
        raise UnknownUnitError(f"Unknown unit string: {text!r}") from None


def unit_from_code(code: int) -> Unit:
    """Decode a persisted integer unit code; non-integers are never truncated."""
    if isinstance(code, bool) or not isinstance(code, int):
        raise UnknownUnitError(f"Unknown unit code: {code!r}")
    try:
        return Unit(code)
    except ValueError:
        raise UnknownUnitError(f"Unknown unit code: {code!r}") from None


def unit_class(unit: Unit) -> UnitClass:
    return _CLASSES[unit_from_code(unit)]


def are_compatible(a: Unit, b: Unit) -> bool:
    return unit_class(a) is unit_class(b)


def convert(value: float, from_unit: Unit, to_unit: Unit) -> float:
    '''
    Converts value from from_unit to to_unit.
    Raises IncompatibleUnitsError when the units belong to different classes.
    '''
    if not are_compatible(from_unit, to_unit):
        raise IncompatibleUnitsError(
            f"Cannot convert {format_unit(from_unit)} ({unit_class(from_unit).value}) "
            f"to {format_unit(to_unit)} ({unit_class(to_unit).value})"
        )
    if from_unit == to_unit:
        return value
    return value * _FACTORS[from_unit] / _FACTORS[to_unit]


__all__ = [
    'Unit', 'UnitClass', 'format_unit', 'parse_unit', 'unit_from_code',
    'unit_class', 'are_compatible', 'convert',
]
