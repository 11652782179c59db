"""
Unit conversion endpoints for recipe costing screens.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException, Path
from pydantic import BaseModel, Field

from error_handler import APIError
from services.unit_conversion import (
    IncompatibleUnitsError,
    calculate_ingredient_cost,
    convert_unit,
    format_quantity,
    get_conversion_explanation,
    get_unit_type,
)

router = APIRouter(prefix="/units", tags=["units"])


# ============================================================================
# Pydantic Models
# ============================================================================


class ConvertRequest(BaseModel):
    """Request body for converting a quantity."""

    quantity: float
    from_unit: str = Field(..., description="Unit of quantity, e.g. 'g'")
    to_unit: str = Field(..., description="Target unit, e.g. 'kg'")


class ConvertResponse(BaseModel):
    """Converted quantity."""

    quantity: float
    unit: str
    formatted: str
    explanation: Optional[str]


class CostRequest(BaseModel):
    """Request body for pricing a recipe line."""

    recipe_qty: float = Field(..., ge=0)
    recipe_unit: str
    cost_per_unit: float = Field(..., ge=0)
    ingredient_unit: str
    allow_unit_mismatch: bool = Field(
        False, description="Multiply mismatched units directly instead of rejecting"
    )


class CostResponse(BaseModel):
    """Priced recipe line."""

    line_cost: float
    explanation: Optional[str]


class UnitTypeResponse(BaseModel):
    """Family a unit belongs to."""

    unit: str
    unit_type: str


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/convert", response_model=ConvertResponse)
def convert(request: ConvertRequest) -> ConvertResponse:
    """
    Convert a quantity between units of the same family.

    Returns:
        Converted quantity, or 400 if the units can't be converted
    """
    converted = convert_unit(request.quantity, request.from_unit, request.to_unit)
    if converted is None:
        raise APIError.handle_validation_error(
            "unit conversion",
            IncompatibleUnitsError(request.from_unit, request.to_unit),
        )

    return ConvertResponse(
        quantity=converted,
        unit=request.to_unit,
        formatted=format_quantity(converted, request.to_unit),
        explanation=get_conversion_explanation(request.quantity, request.from_unit, request.to_unit),
    )


@router.post("/cost", response_model=CostResponse)
def cost(request: CostRequest) -> CostResponse:
    """
    Price a recipe line whose unit may differ from the ingredient's pricing unit.

    Returns:
        Line cost, or 400 if the units are incompatible and the caller
        didn't allow the direct-multiplication fallback
    """
    try:
        line_cost = calculate_ingredient_cost(
            request.recipe_qty,
            request.recipe_unit,
            request.cost_per_unit,
            request.ingredient_unit,
            allow_unit_mismatch=request.allow_unit_mismatch,
        )
    except IncompatibleUnitsError as e:
        raise APIError.handle_validation_error("ingredient costing", e)

    return CostResponse(
        line_cost=line_cost,
        explanation=get_conversion_explanation(
            request.recipe_qty, request.recipe_unit, request.ingredient_unit
        ),
    )


@router.get("/{unit}/type", response_model=UnitTypeResponse)
def unit_type(unit: str = Path(..., description="Unit symbol, e.g. 'tbsp'")) -> UnitTypeResponse:
    """Report the family (mass, volume, count, unknown) of a unit."""
    if not unit.strip():
        raise HTTPException(status_code=400, detail="Unit required")
    return UnitTypeResponse(unit=unit, unit_type=get_unit_type(unit))
