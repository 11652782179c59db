"""
Unit conversion for recipe costing.
Converts quantities within the mass and volume families and prices recipe
lines whose unit differs from the unit an ingredient is bought in.
"""
import logging
from dataclasses import dataclass
from typing import Literal, Optional

logger = logging.getLogger(__name__)

UnitType = Literal["mass", "volume", "count", "unknown"]

# Factors to the base unit of each family (g for mass, ml for volume)
MASS_TO_GRAMS = {
    "g": 1.0,
    "kg": 1000.0,
    "lb": 453.592,
    "oz": 28.3495,
}

VOLUME_TO_ML = {
    "ml": 1.0,
    "L": 1000.0,
    "tsp": 4.92892,
    "tbsp": 14.7868,
    "cup": 236.588,
}

COUNT_UNITS = frozenset({"each", "bunch", "case"})

_THREE_DECIMAL_UNITS = {"kg", "L", "lb"}
_ONE_DECIMAL_UNITS = {"g", "ml", "oz"}


class IncompatibleUnitsError(ValueError):
    """Raised when a quantity cannot be converted between two units."""

    def __init__(self, from_unit: str, to_unit: str):
        self.from_unit = from_unit
        self.to_unit = to_unit
        super().__init__(f"Cannot convert '{from_unit}' to '{to_unit}'")


@dataclass
class CostResult:
    """Outcome of pricing one recipe line."""

    line_cost: Optional[float]
    converted_qty: Optional[float]
    fallback_used: bool = False
    error: Optional[IncompatibleUnitsError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def get_unit_type(unit: str) -> UnitType:
    """Return the unit family, or "unknown" for unrecognised units."""
    if unit in MASS_TO_GRAMS:
        return "mass"
    if unit in VOLUME_TO_ML:
        return "volume"
    if unit in COUNT_UNITS:
        return "count"
    return "unknown"


def are_units_compatible(unit1: str, unit2: str) -> bool:
    """True when both units belong to the same known family."""
    unit_type = get_unit_type(unit1)
    return unit_type != "unknown" and unit_type == get_unit_type(unit2)


def convert_unit(quantity: float, from_unit: str, to_unit: str) -> Optional[float]:
    """
    Convert a quantity from one unit to another.

    Args:
        quantity: Amount in from_unit
        from_unit: Source unit (e.g. "g")
        to_unit: Target unit (e.g. "kg")

    Returns:
        Converted quantity, or None when no conversion is defined
        (count units, different families, unknown units)
    """
    if from_unit == to_unit:
        return quantity

    from_type = get_unit_type(from_unit)
    if from_type != get_unit_type(to_unit):
        return None

    if from_type == "mass":
        return quantity * MASS_TO_GRAMS[from_unit] / MASS_TO_GRAMS[to_unit]
    if from_type == "volume":
        return quantity * VOLUME_TO_ML[from_unit] / VOLUME_TO_ML[to_unit]

    # count and unknown units never convert between each other
    return None


def calculate_ingredient_cost(
    recipe_qty: float,
    recipe_unit: str,
    cost_per_unit: float,
    ingredient_unit: str,
    allow_unit_mismatch: bool = False,
) -> float:
    """
    Calculate the cost of a recipe ingredient, accounting for unit differences.

    Args:
        recipe_qty: Quantity used in the recipe
        recipe_unit: Unit used in the recipe (e.g. "g")
        cost_per_unit: Cost per ingredient_unit
        ingredient_unit: Unit the ingredient is priced in (e.g. "kg")
        allow_unit_mismatch: Multiply the raw quantity when the units can't be
            converted instead of raising. The result is usually wrong.

    Returns:
        Line cost in the currency of cost_per_unit

    Raises:
        IncompatibleUnitsError: units can't be converted and
            allow_unit_mismatch is False
    """
    if recipe_unit == ingredient_unit:
        return recipe_qty * cost_per_unit

    converted_qty = convert_unit(recipe_qty, recipe_unit, ingredient_unit)
    if converted_qty is None:
        if not allow_unit_mismatch:
            raise IncompatibleUnitsError(recipe_unit, ingredient_unit)
        logger.warning(
            f"Unit mismatch: recipe uses '{recipe_unit}' but ingredient is priced per "
            f"'{ingredient_unit}'. Falling back to direct multiplication which may be incorrect."
        )
        return recipe_qty * cost_per_unit

    return converted_qty * cost_per_unit


def try_calculate_ingredient_cost(
    recipe_qty: float,
    recipe_unit: str,
    cost_per_unit: float,
    ingredient_unit: str,
    allow_unit_mismatch: bool = False,
) -> CostResult:
    """Like calculate_ingredient_cost, but reports incompatibility in the result."""
    converted_qty = convert_unit(recipe_qty, recipe_unit, ingredient_unit)
    try:
        line_cost = calculate_ingredient_cost(
            recipe_qty, recipe_unit, cost_per_unit, ingredient_unit, allow_unit_mismatch
        )
    except IncompatibleUnitsError as e:
        return CostResult(line_cost=None, converted_qty=None, error=e)

    return CostResult(
        line_cost=line_cost,
        converted_qty=converted_qty,
        fallback_used=converted_qty is None,
    )


def format_quantity(quantity: float, unit: str) -> str:
    """Format a quantity with precision suited to the unit."""
    if unit in _THREE_DECIMAL_UNITS:
        return f"{quantity:.3f}"
    if unit in _ONE_DECIMAL_UNITS:
        return f"{quantity:.1f}"
    return f"{quantity:.2f}"


def _format_number(value: float) -> str:
    """Shortest round-tripping form, no trailing ".0" ("500", "0.25", "4e-07")."""
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


def get_conversion_explanation(
    recipe_qty: float,
    recipe_unit: str,
    ingredient_unit: str,
) -> Optional[str]:
    """
    Describe a conversion for display, e.g. "500 g = 0.500 kg".

    Returns None when the units are equal or can't be converted.
    """
    if recipe_unit == ingredient_unit:
        return None

    converted = convert_unit(recipe_qty, recipe_unit, ingredient_unit)
    if converted is None:
        return None

    return (
        f"{_format_number(recipe_qty)} {recipe_unit} = "
        f"{format_quantity(converted, ingredient_unit)} {ingredient_unit}"
    )
