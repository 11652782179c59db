"""
Recipe costing endpoint.
"""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from db.session import get_session
from error_handler import APIError
from repositories.ingredients import IngredientRepository
from services.costing import PricingTargets, RecipeLine, summarize_recipe_cost

router = APIRouter(prefix="/costing", tags=["costing"])


# ============================================================================
# Pydantic Models
# ============================================================================


class RecipeLineRequest(BaseModel):
    """Ingredient line of a recipe."""

    ingredient_id: str
    quantity: float = Field(..., ge=0)
    unit: Optional[str] = Field(None, description="Recipe unit; defaults to the ingredient's pricing unit")


class RecipeCostRequest(BaseModel):
    """Recipe lines plus pricing targets."""

    lines: List[RecipeLineRequest]
    servings: Optional[float] = Field(None, gt=0)
    total_yield: Optional[float] = Field(None, gt=0)
    sell_price: float = Field(0.0, ge=0)
    target_food_cost_percent: float = Field(30.0, ge=0)
    gst_percent: float = Field(10.0, ge=0)
    food_cost_low_alert: float = Field(20.0, ge=0)
    food_cost_high_alert: float = Field(35.0, ge=0)


class LineCostResponse(BaseModel):
    """Costed recipe line."""

    ingredient_id: str
    ingredient_name: str
    quantity: float
    unit: str
    line_cost: Optional[float]
    percent_of_total: float
    explanation: Optional[str]
    fallback_used: bool


class RecipeCostResponse(BaseModel):
    """Recipe costing summary."""

    lines: List[LineCostResponse]
    total_food_cost: float
    portions: float
    cost_per_portion: float
    actual_food_cost_percent: float
    suggested_sell_price: float
    max_allowed_cost: float
    margin: float
    margin_percent: float
    alert_status: str
    unpriced_lines: List[str]


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/recipe", response_model=RecipeCostResponse)
def cost_recipe(
    request: RecipeCostRequest,
    org_id: str = Query(..., description="Organization UUID"),
    db: Session = Depends(get_session),
) -> RecipeCostResponse:
    """
    Cost a recipe from catalog ingredients.

    Lines whose unit can't be converted to the ingredient's pricing unit are
    handled per UNIT_MISMATCH_POLICY.
    """
    try:
        org_uuid = UUID(org_id)
        ingredient_ids = [UUID(line.ingredient_id) for line in request.lines]
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid UUID format")

    try:
        catalog = IngredientRepository(db).get_many(org_uuid, ingredient_ids)
    except SQLAlchemyError as e:
        raise APIError.handle_database_error("cost recipe", e, org_id=org_id)

    lines = []
    for line, ingredient_id in zip(request.lines, ingredient_ids):
        ingredient = catalog.get(ingredient_id)
        if ingredient is None:
            raise APIError.handle_not_found_error("Ingredient", line.ingredient_id, org_id=org_id)
        lines.append(
            RecipeLine(
                ingredient_id=str(ingredient.id),
                ingredient_name=ingredient.name,
                quantity=line.quantity,
                unit=line.unit or ingredient.unit,
                cost_per_unit=ingredient.cost_per_unit,
                ingredient_unit=ingredient.unit,
            )
        )

    targets = PricingTargets(
        sell_price=request.sell_price,
        target_food_cost_percent=request.target_food_cost_percent,
        gst_percent=request.gst_percent,
        food_cost_low_alert=request.food_cost_low_alert,
        food_cost_high_alert=request.food_cost_high_alert,
    )

    summary = summarize_recipe_cost(
        lines,
        servings=request.servings,
        total_yield=request.total_yield,
        targets=targets,
        policy=settings.UNIT_MISMATCH_POLICY,
    )

    return RecipeCostResponse(
        lines=[LineCostResponse(**vars(c)) for c in summary.lines],
        total_food_cost=summary.total_food_cost,
        portions=summary.portions,
        cost_per_portion=summary.cost_per_portion,
        actual_food_cost_percent=summary.actual_food_cost_percent,
        suggested_sell_price=summary.suggested_sell_price,
        max_allowed_cost=summary.max_allowed_cost,
        margin=summary.margin,
        margin_percent=summary.margin_percent,
        alert_status=summary.alert_status,
        unpriced_lines=summary.unpriced_lines,
    )
