"""
Integration tests for DutyRepository on SQLite.
"""
from datetime import date
from unittest.mock import patch
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from db.models import FoodSafetyDuty, OrgMembership, Profile
from repositories.duties import DutyRepository, DutyStoreError, duty_slot

DUTY_DAY = date(2026, 3, 10)


@pytest.fixture
def repo(test_db):
    return DutyRepository(test_db)


def test_duty_slot_keys():
    """Test duty slot keys."""
    assert duty_slot(None) == "default"
    assert duty_slot(DUTY_DAY) == "2026-03-10"


class TestUpsertDuty:
    def test_insert_default(self, repo, org_id, user_ids):
        """Test insert default."""
        duty = repo.upsert_duty(org_id, "am", user_ids["alice"], None, user_ids["manager"])

        assert duty.duty_date is None
        assert duty.user_id == user_ids["alice"]
        assert duty.assigned_by == user_ids["manager"]
        assert [d.id for d in repo.list_duties(org_id)] == [duty.id]

    def test_reassigning_default_keeps_one_row(self, repo, test_db, org_id, user_ids):
        """Test reassigning default keeps one row."""
        repo.upsert_duty(org_id, "am", user_ids["alice"], None, user_ids["manager"])
        duty = repo.upsert_duty(org_id, "am", user_ids["bob"], None, user_ids["manager"])

        rows = test_db.scalars(select(FoodSafetyDuty)).all()
        assert len(rows) == 1
        assert duty.user_id == user_ids["bob"]

    def test_override_does_not_touch_default(self, repo, org_id, user_ids):
        """Test override does not touch default."""
        default = repo.upsert_duty(org_id, "am", user_ids["alice"], None, user_ids["manager"])
        override = repo.upsert_duty(org_id, "am", user_ids["bob"], DUTY_DAY, user_ids["manager"])

        duties = {d.id: d for d in repo.list_duties(org_id)}
        assert len(duties) == 2
        assert duties[default.id].user_id == user_ids["alice"]
        assert duties[default.id].duty_date is None
        assert duties[override.id].duty_date == DUTY_DAY

    def test_reassigning_override_keeps_one_row(self, repo, org_id, user_ids):
        """Test reassigning override keeps one row."""
        repo.upsert_duty(org_id, "pm", user_ids["alice"], DUTY_DAY, user_ids["manager"])
        repo.upsert_duty(org_id, "pm", user_ids["bob"], DUTY_DAY, user_ids["manager"])

        duties = repo.list_duties(org_id)
        assert len(duties) == 1
        assert duties[0].user_id == user_ids["bob"]

    def test_orgs_are_isolated(self, repo, org_id, user_ids):
        """Test orgs are isolated."""
        other_org = uuid4()
        repo.upsert_duty(org_id, "am", user_ids["alice"], None, user_ids["manager"])
        repo.upsert_duty(other_org, "am", user_ids["bob"], None, user_ids["manager"])

        assert [d.user_id for d in repo.list_duties(org_id)] == [user_ids["alice"]]
        assert [d.user_id for d in repo.list_duties(other_org)] == [user_ids["bob"]]


class TestDeleteDuty:
    def test_delete(self, repo, org_id, user_ids):
        """Test deleting a duty row."""
        duty = repo.upsert_duty(org_id, "am", user_ids["alice"], None, user_ids["manager"])
        assert repo.delete_duty(org_id, duty.id) is True
        assert repo.list_duties(org_id) == []

    def test_delete_missing_or_other_org(self, repo, org_id, user_ids):
        """Test delete missing or other org."""
        duty = repo.upsert_duty(org_id, "am", user_ids["alice"], None, user_ids["manager"])
        assert repo.delete_duty(uuid4(), duty.id) is False
        assert repo.delete_duty(org_id, uuid4()) is False
        assert len(repo.list_duties(org_id)) == 1


class TestTeamMembers:
    def test_merges_profiles(self, repo, test_db, org_id, user_ids):
        """Test merges profiles."""
        test_db.add_all(
            [
                OrgMembership(org_id=org_id, user_id=user_ids["alice"], role="chef"),
                OrgMembership(org_id=org_id, user_id=user_ids["bob"], role="cook"),
                OrgMembership(org_id=org_id, user_id=user_ids["manager"], role="owner", is_active=False),
                Profile(user_id=user_ids["alice"], full_name="Alice Nguyen", avatar_url="https://img/a.png"),
            ]
        )
        test_db.commit()

        members = {m.user_id: m for m in repo.list_team_members(org_id)}

        assert set(members) == {user_ids["alice"], user_ids["bob"]}
        assert members[user_ids["alice"]].full_name == "Alice Nguyen"
        assert members[user_ids["alice"]].role == "chef"
        assert members[user_ids["bob"]].full_name == "Unknown"
        assert members[user_ids["bob"]].avatar_url is None

    def test_no_members(self, repo, org_id):
        """Test no members."""
        assert repo.list_team_members(org_id) == []


class TestReminders:
    def test_record_is_idempotent(self, repo, org_id, user_ids):
        """Test record is idempotent."""
        assert not repo.has_reminder(org_id, user_ids["alice"], "shift_start", DUTY_DAY)

        repo.record_reminder(org_id, user_ids["alice"], "shift_start", DUTY_DAY)
        repo.record_reminder(org_id, user_ids["alice"], "shift_start", DUTY_DAY)

        assert repo.has_reminder(org_id, user_ids["alice"], "shift_start", DUTY_DAY)
        assert not repo.has_reminder(org_id, user_ids["alice"], "shift_end", DUTY_DAY)


def test_database_errors_become_store_errors(repo, org_id):
    """Test database errors become store errors."""
    with patch.object(repo.db, "scalars", side_effect=OperationalError("SELECT", {}, Exception("down"))):
        with pytest.raises(DutyStoreError):
            repo.list_duties(org_id)
