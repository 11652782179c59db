"""
Tests for recipe costing summaries.
"""
import pytest

from services.costing import PricingTargets, RecipeLine, alert_status_for, summarize_recipe_cost


@pytest.fixture
def lines():
    return [
        RecipeLine("flour", "Plain flour", 500, "g", 2.0, "kg"),
        RecipeLine("eggs", "Eggs", 2, "each", 0.5, "each"),
        RecipeLine("parsley", "Parsley", 1, "bunch", 10.0, "kg"),
    ]


def test_unconvertible_lines_are_left_unpriced(lines):
    """Test unconvertible lines are left unpriced."""
    summary = summarize_recipe_cost(lines, servings=4, targets=PricingTargets(sell_price=5))

    assert summary.total_food_cost == pytest.approx(2.0)
    assert summary.unpriced_lines == ["parsley"]
    parsley = summary.lines[2]
    assert parsley.line_cost is None
    assert parsley.percent_of_total == 0.0
    assert summary.lines[0].percent_of_total == pytest.approx(50.0)
    assert summary.lines[0].explanation == "500 g = 0.500 kg"


def test_pricing_figures(lines):
    """Test pricing figures."""
    summary = summarize_recipe_cost(lines, servings=4, targets=PricingTargets(sell_price=5))

    assert summary.portions == 4
    assert summary.cost_per_portion == pytest.approx(0.5)
    assert summary.actual_food_cost_percent == pytest.approx(10.0)
    assert summary.suggested_sell_price == pytest.approx(0.5 / 0.3 * 1.1)
    assert summary.max_allowed_cost == pytest.approx(1.5)
    assert summary.margin == pytest.approx(4.5)
    assert summary.margin_percent == pytest.approx(90.0)
    assert summary.alert_status == "low"


def test_direct_policy_uses_fallback(lines):
    """Test direct policy uses fallback."""
    summary = summarize_recipe_cost(
        lines, servings=4, targets=PricingTargets(sell_price=5), policy="direct"
    )

    assert summary.unpriced_lines == []
    assert summary.total_food_cost == pytest.approx(12.0)
    assert summary.lines[2].fallback_used
    assert summary.lines[2].line_cost == pytest.approx(10.0)
    assert summary.alert_status == "critical"


def test_total_yield_takes_precedence(lines):
    """Test total yield takes precedence."""
    summary = summarize_recipe_cost(lines, servings=4, total_yield=2)
    assert summary.portions == 2
    assert summary.cost_per_portion == pytest.approx(1.0)


def test_no_sell_price_or_target():
    """Test no sell price or target."""
    summary = summarize_recipe_cost(
        [RecipeLine("salt", "Salt", 10, "g", 0.01, "g")],
        targets=PricingTargets(sell_price=0, target_food_cost_percent=0),
    )
    assert summary.portions == 1
    assert summary.actual_food_cost_percent == 0.0
    assert summary.suggested_sell_price == 0.0
    assert summary.margin_percent == 0.0


def test_empty_recipe():
    """Test empty recipe."""
    summary = summarize_recipe_cost([])
    assert summary.total_food_cost == 0
    assert summary.lines == []


def test_alert_thresholds():
    """Test alert thresholds."""
    targets = PricingTargets(target_food_cost_percent=30, food_cost_low_alert=20, food_cost_high_alert=35)
    assert alert_status_for(36, targets) == "critical"
    assert alert_status_for(32, targets) == "high"
    assert alert_status_for(25, targets) == "ok"
    assert alert_status_for(10, targets) == "low"
