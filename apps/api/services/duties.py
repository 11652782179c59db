"""
Food safety duty resolution.

Works out who is responsible for food safety checks on a shift: a
date-specific override wins over the recurring default for that shift.
The resolver caches the organization's duties and team in memory and
reloads them in full after every change.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, List, Literal, Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from config import settings
from repositories.duties import DutyAssignment, DutyStore, DutyStoreError, TeamMember

logger = logging.getLogger(__name__)

Shift = Literal["am", "pm"]
SHIFTS = ("am", "pm")

ResolverStatus = Literal["loading", "ready", "error"]

REMINDER_SHIFT_START = "shift_start"
REMINDER_SHIFT_END = "shift_end"
REMINDER_TYPES = (REMINDER_SHIFT_START, REMINDER_SHIFT_END)

REMINDER_MESSAGES = {
    REMINDER_SHIFT_START: "You're on food safety duty today (AM). Start your temp checks!",
    REMINDER_SHIFT_END: (
        "Don't forget: Complete PM temp checks and submit tonight's prep list before you leave."
    ),
}


class DutyStateError(RuntimeError):
    """Duties were queried before a successful load."""


class DutyAssignmentError(ValueError):
    """A duty assignment request was invalid."""


@dataclass
class ResolvedDuty:
    """Who holds a shift on a given date. Not persisted."""

    shift: Shift
    user_id: Optional[UUID]
    full_name: Optional[str]
    avatar_url: Optional[str]
    is_default: bool


@dataclass
class ShiftReminder:
    """Reminder to show the signed-in user."""

    reminder_type: str
    shift: Shift
    reminder_date: date
    message: str


def kitchen_now() -> datetime:
    """Current local time in the kitchen's configured timezone."""
    return datetime.now(ZoneInfo(settings.KITCHEN_TIMEZONE))


def to_kitchen_time(moment: datetime) -> datetime:
    """Express an aware datetime in the kitchen timezone; naive values are taken as kitchen-local."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(ZoneInfo(settings.KITCHEN_TIMEZONE))


def kitchen_today() -> date:
    """Today's date in the kitchen's configured timezone."""
    return kitchen_now().date()


def _check_shift(shift: str) -> None:
    if shift not in SHIFTS:
        raise DutyAssignmentError(f"Unknown shift '{shift}', expected one of {SHIFTS}")


class FoodSafetyDutyResolver:
    """In-memory view of an organization's duty roster over a DutyStore."""

    def __init__(
        self,
        store: DutyStore,
        org_id: UUID,
        current_user_id: Optional[UUID] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        """
        Args:
            store: Data access for duties, team members and reminders
            org_id: Organization whose roster is resolved
            current_user_id: Signed-in user, if any
            today: Clock for "today" (defaults to the kitchen timezone)
        """
        self.store = store
        self.org_id = org_id
        self.current_user_id = current_user_id
        self._today = today or kitchen_today
        self.duties: List[DutyAssignment] = []
        self.team_members: List[TeamMember] = []
        self.status: ResolverStatus = "loading"
        self.error: Optional[Exception] = None

    def refresh(self) -> "FoodSafetyDutyResolver":
        """
        Reload duties and team members from the store.

        Raises:
            DutyStoreError: the store failed; status becomes "error"
        """
        self.status = "loading"
        try:
            duties = self.store.list_duties(self.org_id)
            team_members = self.store.list_team_members(self.org_id)
        except DutyStoreError as e:
            self.status = "error"
            self.error = e
            logger.error(f"Could not load food safety duties for org {self.org_id}: {e}")
            raise

        self.duties = duties
        self.team_members = team_members
        self.status = "ready"
        self.error = None
        return self

    def _reload_after_write(self) -> None:
        # Write is committed by now; a failed reload only marks the cache stale
        try:
            self.refresh()
        except DutyStoreError:
            logger.warning(f"Roster reload after write failed for org {self.org_id}; cache marked stale")

    def _require_ready(self) -> None:
        if self.status != "ready":
            raise DutyStateError(f"Duties are not available (status: {self.status})")

    def _member(self, user_id: UUID) -> Optional[TeamMember]:
        return next((m for m in self.team_members if m.user_id == user_id), None)

    def _resolved(self, shift: Shift, duty: DutyAssignment, is_default: bool) -> ResolvedDuty:
        member = self._member(duty.user_id)
        return ResolvedDuty(
            shift=shift,
            user_id=duty.user_id,
            full_name=member.full_name if member else None,
            avatar_url=member.avatar_url if member else None,
            is_default=is_default,
        )

    def resolve_duty(self, shift: Shift, duty_date: Optional[date] = None) -> ResolvedDuty:
        """
        Resolve who is on duty for a shift.

        Args:
            shift: "am" or "pm"
            duty_date: Date to resolve (defaults to today)

        Returns:
            The override for the date if there is one, else the recurring
            default, else an unassigned ResolvedDuty (user_id None)

        Raises:
            DutyStateError: duties haven't loaded successfully
        """
        self._require_ready()
        target_date = duty_date or self._today()

        override = next(
            (d for d in self.duties if d.shift == shift and d.duty_date == target_date), None
        )
        if override:
            return self._resolved(shift, override, is_default=False)

        default = next((d for d in self.duties if d.shift == shift and d.duty_date is None), None)
        if default:
            return self._resolved(shift, default, is_default=True)

        return ResolvedDuty(shift=shift, user_id=None, full_name=None, avatar_url=None, is_default=False)

    def assign_duty(self, shift: Shift, user_id: UUID, duty_date: Optional[date] = None) -> DutyAssignment:
        """
        Assign a user to a shift, as the default (no date) or for one date.

        An override never touches the default row for the shift.

        Raises:
            DutyAssignmentError: unknown shift or no signed-in user
            DutyStoreError: the write failed (a failed reload afterwards only marks status "error")
        """
        _check_shift(shift)
        if self.current_user_id is None:
            raise DutyAssignmentError("Assigning duties requires a signed-in user")

        assignment = self.store.upsert_duty(
            org_id=self.org_id,
            shift=shift,
            user_id=user_id,
            duty_date=duty_date,
            assigned_by=self.current_user_id,
        )
        logger.info(
            f"Assigned {shift} food safety duty "
            f"({duty_date.isoformat() if duty_date else 'default'}) to {user_id} in org {self.org_id}"
        )
        self._reload_after_write()
        return assignment

    def remove_duty(self, duty_id: UUID) -> bool:
        """Delete one duty row. Returns False if it didn't exist."""
        removed = self.store.delete_duty(self.org_id, duty_id)
        if removed:
            logger.info(f"Removed food safety duty {duty_id} in org {self.org_id}")
        self._reload_after_write()
        return removed

    def is_current_user_on_duty(self, shift: Shift) -> bool:
        """Whether the signed-in user holds the shift today."""
        if self.current_user_id is None:
            return False
        return self.resolve_duty(shift).user_id == self.current_user_id

    def get_default_duties(self) -> List[DutyAssignment]:
        """The recurring roster (rows without a date)."""
        self._require_ready()
        return [d for d in self.duties if d.duty_date is None]

    def shift_reminder(self, now: datetime) -> Optional[ShiftReminder]:
        """
        Reminder for the signed-in user at the given local time, if one is due.

        AM duty reminds before AM_REMINDER_CUTOFF_HOUR; PM duty reminds from
        PM_REMINDER_START_HOUR. Dismissed reminders don't come back that day.
        """
        if self.current_user_id is None:
            return None

        today = now.date()
        candidates = []
        if now.hour < settings.AM_REMINDER_CUTOFF_HOUR:
            candidates.append(("am", REMINDER_SHIFT_START))
        if now.hour >= settings.PM_REMINDER_START_HOUR:
            candidates.append(("pm", REMINDER_SHIFT_END))

        for shift, reminder_type in candidates:
            if self.resolve_duty(shift, today).user_id != self.current_user_id:
                continue
            if self.store.has_reminder(self.org_id, self.current_user_id, reminder_type, today):
                continue
            return ShiftReminder(
                reminder_type=reminder_type,
                shift=shift,
                reminder_date=today,
                message=REMINDER_MESSAGES[reminder_type],
            )
        return None

    def dismiss_reminder(self, reminder_type: str, reminder_date: Optional[date] = None) -> None:
        """Record that the signed-in user dismissed a reminder."""
        if reminder_type not in REMINDER_TYPES:
            raise DutyAssignmentError(f"Unknown reminder type '{reminder_type}'")
        if self.current_user_id is None:
            raise DutyAssignmentError("Dismissing reminders requires a signed-in user")
        self.store.record_reminder(
            self.org_id, self.current_user_id, reminder_type, reminder_date or self._today()
        )
