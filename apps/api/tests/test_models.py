"""
Unit tests for SQLAlchemy ORM models and table constraints.
"""
from datetime import date
from uuid import UUID

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from db.models import DEFAULT_DUTY_SLOT, FoodSafetyDuty, FoodSafetyReminder, Ingredient


def _duty(org_id, user_id, shift="am", duty_date=None):
    return FoodSafetyDuty(
        org_id=org_id,
        user_id=user_id,
        shift=shift,
        duty_date=duty_date,
        duty_slot=duty_date.isoformat() if duty_date else DEFAULT_DUTY_SLOT,
    )


class TestIngredientModel:
    def test_defaults(self, test_db, org_id):
        """Test column defaults on a new ingredient."""
        item = Ingredient(org_id=org_id, name="Sea salt")
        test_db.add(item)
        test_db.commit()

        stored = test_db.scalars(select(Ingredient)).one()
        assert isinstance(stored.id, UUID)
        assert stored.category == "Other"
        assert stored.unit == "g"
        assert stored.cost_per_unit == 0.0
        assert stored.created_at is not None


class TestFoodSafetyDutyModel:
    def test_one_default_per_shift(self, test_db, org_id, user_ids):
        """Test one default per shift."""
        test_db.add(_duty(org_id, user_ids["alice"]))
        test_db.commit()

        test_db.add(_duty(org_id, user_ids["bob"]))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()

    def test_one_override_per_date(self, test_db, org_id, user_ids):
        """Test one override per date."""
        day = date(2026, 3, 10)
        test_db.add(_duty(org_id, user_ids["alice"], duty_date=day))
        test_db.commit()

        test_db.add(_duty(org_id, user_ids["bob"], duty_date=day))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()

    def test_default_and_overrides_coexist(self, test_db, org_id, user_ids):
        """Test default and overrides coexist."""
        test_db.add_all(
            [
                _duty(org_id, user_ids["alice"]),
                _duty(org_id, user_ids["alice"], shift="pm"),
                _duty(org_id, user_ids["bob"], duty_date=date(2026, 3, 10)),
                _duty(org_id, user_ids["bob"], duty_date=date(2026, 3, 11)),
            ]
        )
        test_db.commit()

        assert len(test_db.scalars(select(FoodSafetyDuty)).all()) == 4


class TestFoodSafetyReminderModel:
    def test_one_dismissal_per_day(self, test_db, org_id, user_ids):
        """Test one dismissal per day."""
        day = date(2026, 3, 10)
        for _ in range(2):
            test_db.add(
                FoodSafetyReminder(
                    org_id=org_id, user_id=user_ids["alice"], reminder_type="shift_start", reminder_date=day
                )
            )
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()
