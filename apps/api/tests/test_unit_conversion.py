"""
Tests for unit conversion and ingredient line costing.
"""
import itertools
import logging

import pytest

from services.unit_conversion import (
    MASS_TO_GRAMS,
    VOLUME_TO_ML,
    IncompatibleUnitsError,
    are_units_compatible,
    calculate_ingredient_cost,
    convert_unit,
    format_quantity,
    get_conversion_explanation,
    get_unit_type,
    try_calculate_ingredient_cost,
)


class TestUnitTypes:
    def test_families(self):
        """Test unit family lookup."""
        assert get_unit_type("kg") == "mass"
        assert get_unit_type("tbsp") == "volume"
        assert get_unit_type("L") == "volume"
        assert get_unit_type("case") == "count"
        assert get_unit_type("xyz") == "unknown"

    def test_units_are_case_sensitive(self):
        """Test units are case sensitive."""
        assert get_unit_type("l") == "unknown"
        assert get_unit_type("KG") == "unknown"

    def test_compatibility(self):
        """Test compatibility."""
        assert are_units_compatible("g", "lb")
        assert are_units_compatible("cup", "ml")
        assert are_units_compatible("each", "bunch")
        assert not are_units_compatible("g", "ml")
        assert not are_units_compatible("each", "g")

    def test_unknown_units_are_never_compatible(self):
        """Test unknown units are never compatible."""
        assert not are_units_compatible("xyz", "xyz")
        assert not are_units_compatible("xyz", "abc")


class TestConvertUnit:
    def test_kilograms_and_grams(self):
        """Test kilograms and grams."""
        assert convert_unit(1, "kg", "g") == 1000
        assert convert_unit(1000, "g", "kg") == 1

    def test_volume(self):
        """Test volume conversions."""
        assert convert_unit(1, "tbsp", "tsp") == pytest.approx(3.0, abs=0.01)
        assert convert_unit(2, "L", "ml") == 2000

    def test_identity_short_circuit(self):
        """Test identity short circuit."""
        assert convert_unit(3, "each", "each") == 3
        assert convert_unit(7.5, "xyz", "xyz") == 7.5

    def test_cross_family_is_none(self):
        """Test cross family is none."""
        assert convert_unit(5, "each", "g") is None
        assert convert_unit(5, "g", "ml") is None
        assert convert_unit(5, "cup", "oz") is None

    def test_count_units_do_not_convert(self):
        """Test count units do not convert."""
        assert convert_unit(1, "case", "each") is None
        assert convert_unit(1, "bunch", "each") is None

    def test_unknown_units_do_not_convert(self):
        """Test unknown units do not convert."""
        assert convert_unit(1, "pinch", "g") is None
        assert convert_unit(1, "pinch", "dash") is None

    @pytest.mark.parametrize("table", [MASS_TO_GRAMS, VOLUME_TO_ML])
    def test_round_trip(self, table):
        """Test round trip."""
        for a, b in itertools.permutations(table, 2):
            there = convert_unit(12.5, a, b)
            assert convert_unit(there, b, a) == pytest.approx(12.5)


class TestIngredientCost:
    def test_same_unit(self):
        """Test same unit."""
        assert calculate_ingredient_cost(3, "each", 1.5, "each") == 4.5

    def test_grams_priced_per_kilogram(self):
        """Test grams priced per kilogram."""
        assert calculate_ingredient_cost(500, "g", 10, "kg") == pytest.approx(5.0)

    def test_cups_priced_per_litre(self):
        """Test cups priced per litre."""
        assert calculate_ingredient_cost(1, "cup", 2, "L") == pytest.approx(0.473176)

    def test_incompatible_units_raise(self):
        """Test incompatible units raise."""
        with pytest.raises(IncompatibleUnitsError) as exc_info:
            calculate_ingredient_cost(1, "each", 2, "g")
        assert exc_info.value.from_unit == "each"
        assert exc_info.value.to_unit == "g"

    def test_mismatch_fallback_is_opt_in_and_logged(self, caplog):
        """Test mismatch fallback is opt in and logged."""
        with caplog.at_level(logging.WARNING, logger="services.unit_conversion"):
            cost = calculate_ingredient_cost(1, "each", 2, "g", allow_unit_mismatch=True)
        assert cost == 2
        assert "Unit mismatch" in caplog.text

    def test_try_calculate_reports_error(self):
        """Test try calculate reports error."""
        result = try_calculate_ingredient_cost(2, "bunch", 3, "kg")
        assert not result.ok
        assert result.line_cost is None
        assert isinstance(result.error, IncompatibleUnitsError)

    def test_try_calculate_flags_fallback(self):
        """Test try calculate flags fallback."""
        result = try_calculate_ingredient_cost(2, "bunch", 3, "kg", allow_unit_mismatch=True)
        assert result.ok
        assert result.line_cost == 6
        assert result.fallback_used

    def test_try_calculate_converted(self):
        """Test try calculate converted."""
        result = try_calculate_ingredient_cost(250, "ml", 4, "L")
        assert result.ok
        assert result.converted_qty == pytest.approx(0.25)
        assert result.line_cost == pytest.approx(1.0)
        assert not result.fallback_used


class TestFormatting:
    def test_precision_tiers(self):
        """Test precision tiers."""
        assert format_quantity(0.5, "kg") == "0.500"
        assert format_quantity(1.23456, "L") == "1.235"
        assert format_quantity(500, "g") == "500.0"
        assert format_quantity(2.26, "oz") == "2.3"
        assert format_quantity(3, "each") == "3.00"

    def test_explanation(self):
        """Test explanation."""
        assert get_conversion_explanation(500, "g", "kg") == "500 g = 0.500 kg"
        assert get_conversion_explanation(0.25, "L", "ml") == "0.25 L = 250.0 ml"
        assert get_conversion_explanation(4e-7, "g", "kg") == "4e-07 g = 0.000 kg"

    def test_no_explanation_without_conversion(self):
        """Test no explanation without conversion."""
        assert get_conversion_explanation(500, "g", "g") is None
        assert get_conversion_explanation(1, "each", "g") is None
