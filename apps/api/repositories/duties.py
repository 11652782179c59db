"""
Food safety duty storage.
DutyStore is the data-access port used by the duty resolver; DutyRepository
implements it over a SQLAlchemy session.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models import DEFAULT_DUTY_SLOT, FoodSafetyDuty, FoodSafetyReminder, OrgMembership, Profile

logger = logging.getLogger(__name__)


@dataclass
class DutyAssignment:
    """A stored duty row. duty_date is None for the recurring default."""

    id: UUID
    org_id: UUID
    user_id: UUID
    shift: str
    duty_date: Optional[date]
    assigned_by: Optional[UUID]
    created_at: Optional[datetime]


@dataclass
class TeamMember:
    """Active member of an organization with display details."""

    user_id: UUID
    full_name: str
    avatar_url: Optional[str]
    role: str


class DutyStoreError(RuntimeError):
    """The duty store could not complete a read or write."""


def duty_slot(duty_date: Optional[date]) -> str:
    """Key of the slot a duty occupies: the ISO date, or "default"."""
    return duty_date.isoformat() if duty_date else DEFAULT_DUTY_SLOT


class DutyStore(ABC):
    """Data access needed to resolve and assign food safety duties."""

    @abstractmethod
    def list_duties(self, org_id: UUID) -> List[DutyAssignment]:
        """All duty rows (defaults and overrides) for an organization."""
        pass

    @abstractmethod
    def list_team_members(self, org_id: UUID) -> List[TeamMember]:
        """Active members of an organization merged with their profiles."""
        pass

    @abstractmethod
    def upsert_duty(
        self,
        org_id: UUID,
        shift: str,
        user_id: UUID,
        duty_date: Optional[date],
        assigned_by: Optional[UUID],
    ) -> DutyAssignment:
        """
        Assign a user to the (org, shift, date) slot in one atomic write.
        Replaces whoever held the slot; other slots are untouched.
        """
        pass

    @abstractmethod
    def delete_duty(self, org_id: UUID, duty_id: UUID) -> bool:
        """Delete one duty row. Returns False if it didn't exist."""
        pass

    @abstractmethod
    def has_reminder(self, org_id: UUID, user_id: UUID, reminder_type: str, reminder_date: date) -> bool:
        """Whether the user already dismissed this reminder for the date."""
        pass

    @abstractmethod
    def record_reminder(self, org_id: UUID, user_id: UUID, reminder_type: str, reminder_date: date) -> None:
        """Record a reminder dismissal. Recording twice is a no-op."""
        pass


def _to_assignment(row: FoodSafetyDuty) -> DutyAssignment:
    return DutyAssignment(
        id=row.id,
        org_id=row.org_id,
        user_id=row.user_id,
        shift=row.shift,
        duty_date=row.duty_date,
        assigned_by=row.assigned_by,
        created_at=row.created_at,
    )


class DutyRepository(DutyStore):
    """DutyStore backed by SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize with database session."""
        self.db = db

    def _insert_for_dialect(self, table):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(table)
        if dialect == "sqlite":
            return sqlite.insert(table)
        raise DutyStoreError(f"Upsert not supported for dialect '{dialect}'")

    def _fail(self, operation: str, error: SQLAlchemyError) -> DutyStoreError:
        self.db.rollback()
        logger.error(f"Duty store failed during {operation}: {error}", exc_info=True)
        return DutyStoreError(f"{operation} failed")

    def list_duties(self, org_id: UUID) -> List[DutyAssignment]:
        try:
            rows = self.db.scalars(
                select(FoodSafetyDuty)
                .where(FoodSafetyDuty.org_id == org_id)
                .order_by(FoodSafetyDuty.created_at)
            ).all()
        except SQLAlchemyError as e:
            raise self._fail("list duties", e) from e
        return [_to_assignment(row) for row in rows]

    def list_team_members(self, org_id: UUID) -> List[TeamMember]:
        try:
            memberships = self.db.scalars(
                select(OrgMembership).where(
                    OrgMembership.org_id == org_id,
                    OrgMembership.is_active.is_(True),
                )
            ).all()
            if not memberships:
                return []

            profiles = {
                p.user_id: p
                for p in self.db.scalars(
                    select(Profile).where(Profile.user_id.in_([m.user_id for m in memberships]))
                ).all()
            }
        except SQLAlchemyError as e:
            raise self._fail("list team members", e) from e

        members = []
        for membership in memberships:
            profile = profiles.get(membership.user_id)
            members.append(
                TeamMember(
                    user_id=membership.user_id,
                    full_name=(profile.full_name if profile and profile.full_name else "Unknown"),
                    avatar_url=profile.avatar_url if profile else None,
                    role=membership.role,
                )
            )
        return members

    def upsert_duty(
        self,
        org_id: UUID,
        shift: str,
        user_id: UUID,
        duty_date: Optional[date],
        assigned_by: Optional[UUID],
    ) -> DutyAssignment:
        slot = duty_slot(duty_date)
        now = datetime.utcnow()
        stmt = self._insert_for_dialect(FoodSafetyDuty.__table__).values(
            id=uuid4(),
            org_id=org_id,
            user_id=user_id,
            shift=shift,
            duty_date=duty_date,
            duty_slot=slot,
            assigned_by=assigned_by,
            created_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["org_id", "shift", "duty_slot"],
            set_={"user_id": user_id, "assigned_by": assigned_by, "created_at": now},
        )
        try:
            self.db.execute(stmt)
            self.db.commit()
            row = self.db.scalars(
                select(FoodSafetyDuty).where(
                    FoodSafetyDuty.org_id == org_id,
                    FoodSafetyDuty.shift == shift,
                    FoodSafetyDuty.duty_slot == slot,
                )
            ).one()
            # The upsert bypasses the identity map; make sure we see the new values
            self.db.refresh(row)
        except SQLAlchemyError as e:
            raise self._fail("assign duty", e) from e
        return _to_assignment(row)

    def delete_duty(self, org_id: UUID, duty_id: UUID) -> bool:
        try:
            row = self.db.scalars(
                select(FoodSafetyDuty).where(FoodSafetyDuty.id == duty_id, FoodSafetyDuty.org_id == org_id)
            ).first()
            if not row:
                return False
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("remove duty", e) from e
        return True

    def has_reminder(self, org_id: UUID, user_id: UUID, reminder_type: str, reminder_date: date) -> bool:
        try:
            found = self.db.scalars(
                select(FoodSafetyReminder.id).where(
                    FoodSafetyReminder.org_id == org_id,
                    FoodSafetyReminder.user_id == user_id,
                    FoodSafetyReminder.reminder_type == reminder_type,
                    FoodSafetyReminder.reminder_date == reminder_date,
                )
            ).first()
        except SQLAlchemyError as e:
            raise self._fail("check reminder", e) from e
        return found is not None

    def record_reminder(self, org_id: UUID, user_id: UUID, reminder_type: str, reminder_date: date) -> None:
        if self.has_reminder(org_id, user_id, reminder_type, reminder_date):
            return
        try:
            self.db.add(
                FoodSafetyReminder(
                    org_id=org_id,
                    user_id=user_id,
                    reminder_type=reminder_type,
                    reminder_date=reminder_date,
                )
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("record reminder", e) from e
