"""
SQLAlchemy ORM models for ChefOS.
All kitchen data is scoped to an organization via org_id.
"""
from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, DateTime, Float, Index, String, UniqueConstraint, UUID as SQLAUUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# duty_slot value for the recurring (dateless) assignment of a shift
DEFAULT_DUTY_SLOT = "default"


class Base(DeclarativeBase):
    pass


class Ingredient(Base):
    """Priced ingredient in an organization's catalog."""
    __tablename__ = "ingredients"

    id: Mapped[UUID] = mapped_column(SQLAUUID, primary_key=True, default=uuid4)
    org_id: Mapped[UUID] = mapped_column(SQLAUUID, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[str] = mapped_column(String(50), default="Other")
    unit: Mapped[str] = mapped_column(String(10), default="g")
    cost_per_unit: Mapped[float] = mapped_column(Float, default=0.0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    __table_args__ = (Index("ix_ingredients_org_name", "org_id", "name"),)


class FoodSafetyDuty(Base):
    """
    Food safety duty for a shift.

    duty_date is NULL for the recurring default; duty_slot mirrors it
    ("default" or the ISO date) so the unique constraint covers both kinds.
    """
    __tablename__ = "food_safety_duties"

    id: Mapped[UUID] = mapped_column(SQLAUUID, primary_key=True, default=uuid4)
    org_id: Mapped[UUID] = mapped_column(SQLAUUID, nullable=False, index=True)
    user_id: Mapped[UUID] = mapped_column(SQLAUUID, nullable=False)
    shift: Mapped[str] = mapped_column(String(2), nullable=False)
    duty_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    duty_slot: Mapped[str] = mapped_column(String(10), nullable=False)
    assigned_by: Mapped[UUID | None] = mapped_column(SQLAUUID, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("org_id", "shift", "duty_slot", name="uq_food_safety_duties_slot"),
    )


class OrgMembership(Base):
    """A user's membership (and role) in an organization."""
    __tablename__ = "org_memberships"

    id: Mapped[UUID] = mapped_column(SQLAUUID, primary_key=True, default=uuid4)
    org_id: Mapped[UUID] = mapped_column(SQLAUUID, nullable=False)
    user_id: Mapped[UUID] = mapped_column(SQLAUUID, nullable=False)
    role: Mapped[str] = mapped_column(String(30), default="staff")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    __table_args__ = (Index("ix_org_memberships_org_active", "org_id", "is_active"),)


class Profile(Base):
    """Display details for a user."""
    __tablename__ = "profiles"

    user_id: Mapped[UUID] = mapped_column(SQLAUUID, primary_key=True)
    full_name: Mapped[str | None] = mapped_column(String, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String, nullable=True)


class FoodSafetyReminder(Base):
    """Record that a user has dismissed a shift reminder for a date."""
    __tablename__ = "food_safety_reminders"

    id: Mapped[UUID] = mapped_column(SQLAUUID, primary_key=True, default=uuid4)
    org_id: Mapped[UUID] = mapped_column(SQLAUUID, nullable=False)
    user_id: Mapped[UUID] = mapped_column(SQLAUUID, nullable=False)
    reminder_type: Mapped[str] = mapped_column(String(20), nullable=False)
    reminder_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("org_id", "user_id", "reminder_type", "reminder_date", name="uq_food_safety_reminders_day"),
    )
