"""
Recipe costing: line costs, food cost percentage, margins and sell price
suggestions for a recipe.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Literal, Optional

from services.unit_conversion import get_conversion_explanation, try_calculate_ingredient_cost

logger = logging.getLogger(__name__)

AlertStatus = Literal["low", "ok", "high", "critical"]
MismatchPolicy = Literal["error", "direct"]


@dataclass
class RecipeLine:
    """One ingredient used in a recipe."""

    ingredient_id: str
    ingredient_name: str
    quantity: float
    unit: str  # unit the recipe uses
    cost_per_unit: float
    ingredient_unit: str  # unit the ingredient is priced in


@dataclass
class LineCost:
    """Costed recipe line."""

    ingredient_id: str
    ingredient_name: str
    quantity: float
    unit: str
    line_cost: Optional[float]  # None when the units couldn't be reconciled
    percent_of_total: float = 0.0
    explanation: Optional[str] = None
    fallback_used: bool = False


@dataclass
class PricingTargets:
    """Sell price and food cost thresholds for a recipe (percentages 0-100)."""

    sell_price: float = 0.0
    target_food_cost_percent: float = 30.0
    gst_percent: float = 10.0
    food_cost_low_alert: float = 20.0
    food_cost_high_alert: float = 35.0


@dataclass
class RecipeCostSummary:
    """Costing figures for a recipe."""

    lines: List[LineCost]
    total_food_cost: float
    portions: float
    cost_per_portion: float
    actual_food_cost_percent: float
    suggested_sell_price: float
    max_allowed_cost: float
    margin: float
    margin_percent: float
    alert_status: AlertStatus
    unpriced_lines: List[str] = field(default_factory=list)


def cost_line(line: RecipeLine, policy: MismatchPolicy = "error") -> LineCost:
    """Price a single recipe line in the ingredient's pricing unit."""
    result = try_calculate_ingredient_cost(
        line.quantity,
        line.unit,
        line.cost_per_unit,
        line.ingredient_unit,
        allow_unit_mismatch=(policy == "direct"),
    )
    if not result.ok:
        logger.warning(f"Leaving '{line.ingredient_name}' unpriced: {result.error}")

    return LineCost(
        ingredient_id=line.ingredient_id,
        ingredient_name=line.ingredient_name,
        quantity=line.quantity,
        unit=line.unit,
        line_cost=result.line_cost,
        explanation=get_conversion_explanation(line.quantity, line.unit, line.ingredient_unit),
        fallback_used=result.fallback_used,
    )


def alert_status_for(actual_percent: float, targets: PricingTargets) -> AlertStatus:
    """Classify a food cost percentage against the recipe's thresholds."""
    if actual_percent > targets.food_cost_high_alert:
        return "critical"
    if actual_percent > targets.target_food_cost_percent:
        return "high"
    if actual_percent < targets.food_cost_low_alert:
        return "low"
    return "ok"


def summarize_recipe_cost(
    lines: List[RecipeLine],
    servings: Optional[float] = None,
    total_yield: Optional[float] = None,
    targets: Optional[PricingTargets] = None,
    policy: MismatchPolicy = "error",
) -> RecipeCostSummary:
    """
    Cost a recipe.

    Args:
        lines: Recipe lines with their ingredient pricing
        servings: Servings the recipe makes
        total_yield: Portions yielded; takes precedence over servings
        targets: Sell price and thresholds
        policy: "error" leaves unconvertible lines unpriced and out of the
            total, "direct" multiplies them as-is and flags them

    Returns:
        RecipeCostSummary
    """
    targets = targets or PricingTargets()
    costed = [cost_line(line, policy) for line in lines]

    total_food_cost = sum(c.line_cost for c in costed if c.line_cost is not None)
    for c in costed:
        if c.line_cost is not None and total_food_cost > 0:
            c.percent_of_total = c.line_cost / total_food_cost * 100

    portions = total_yield or servings or 1
    cost_per_portion = total_food_cost / portions
    sell_price = targets.sell_price
    target = targets.target_food_cost_percent

    actual_food_cost_percent = cost_per_portion / sell_price * 100 if sell_price > 0 else 0.0
    suggested_sell_price = (
        cost_per_portion / (target / 100) * (1 + targets.gst_percent / 100) if target > 0 else 0.0
    )
    margin = sell_price - cost_per_portion

    return RecipeCostSummary(
        lines=costed,
        total_food_cost=total_food_cost,
        portions=portions,
        cost_per_portion=cost_per_portion,
        actual_food_cost_percent=actual_food_cost_percent,
        suggested_sell_price=suggested_sell_price,
        max_allowed_cost=sell_price * (target / 100),
        margin=margin,
        margin_percent=margin / sell_price * 100 if sell_price > 0 else 0.0,
        alert_status=alert_status_for(actual_food_cost_percent, targets),
        unpriced_lines=[c.ingredient_id for c in costed if c.line_cost is None],
    )
