"""
Food safety duty roster endpoints: who is on duty, assignments, and the
shift reminders shown to the staff member on duty.
"""
from datetime import date, datetime
from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from db.session import get_session
from error_handler import APIError
from repositories.duties import DutyAssignment, DutyRepository, DutyStoreError
from services.duties import (
    DutyAssignmentError,
    FoodSafetyDutyResolver,
    ResolvedDuty,
    kitchen_now,
    to_kitchen_time,
)

router = APIRouter(prefix="/food-safety", tags=["food-safety"])


# ============================================================================
# Pydantic Models
# ============================================================================


class DutyAssignmentResponse(BaseModel):
    """Stored duty row; duty_date is null for the recurring default."""

    id: str
    org_id: str
    user_id: str
    shift: str
    duty_date: Optional[date]
    assigned_by: Optional[str]
    created_at: Optional[datetime]

    @staticmethod
    def from_assignment(duty: DutyAssignment) -> "DutyAssignmentResponse":
        return DutyAssignmentResponse(
            id=str(duty.id),
            org_id=str(duty.org_id),
            user_id=str(duty.user_id),
            shift=duty.shift,
            duty_date=duty.duty_date,
            assigned_by=str(duty.assigned_by) if duty.assigned_by else None,
            created_at=duty.created_at,
        )


class ResolvedDutyResponse(BaseModel):
    """Who holds a shift on a date."""

    shift: str
    duty_date: date
    user_id: Optional[str]
    full_name: Optional[str]
    avatar_url: Optional[str]
    is_default: bool

    @staticmethod
    def from_resolved(resolved: ResolvedDuty, duty_date: date) -> "ResolvedDutyResponse":
        return ResolvedDutyResponse(
            shift=resolved.shift,
            duty_date=duty_date,
            user_id=str(resolved.user_id) if resolved.user_id else None,
            full_name=resolved.full_name,
            avatar_url=resolved.avatar_url,
            is_default=resolved.is_default,
        )


class AssignDutyRequest(BaseModel):
    """Assign a user to a shift; omit duty_date to set the recurring default."""

    shift: Literal["am", "pm"]
    user_id: str
    duty_date: Optional[date] = None


class TeamMemberResponse(BaseModel):
    """Active team member."""

    user_id: str
    full_name: str
    avatar_url: Optional[str]
    role: str


class OnDutyResponse(BaseModel):
    """Whether a user holds a shift today."""

    shift: str
    user_id: str
    on_duty: bool


class ReminderResponse(BaseModel):
    """Reminder due for the user, if any."""

    reminder_type: Optional[str] = None
    shift: Optional[str] = None
    reminder_date: Optional[date] = None
    message: Optional[str] = None


class DismissReminderRequest(BaseModel):
    """Dismiss a reminder for a date (defaults to today)."""

    reminder_type: Literal["shift_start", "shift_end"]
    reminder_date: Optional[date] = None


# ============================================================================
# Helpers
# ============================================================================


def _parse_uuid(value: str, field: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {field} format")


def _load_resolver(db: Session, org_id: str, user_id: Optional[str] = None) -> FoodSafetyDutyResolver:
    """Build a resolver for the org and load its roster (503 if the store fails)."""
    org_uuid = _parse_uuid(org_id, "org_id")
    user_uuid = _parse_uuid(user_id, "user_id") if user_id else None
    resolver = FoodSafetyDutyResolver(DutyRepository(db), org_uuid, current_user_id=user_uuid)
    try:
        resolver.refresh()
    except DutyStoreError as e:
        raise APIError.handle_unavailable_error("load food safety duties", e, org_id=org_id, user_id=user_id)
    return resolver


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/duties", response_model=List[DutyAssignmentResponse])
def list_duties(
    org_id: str = Query(..., description="Organization UUID"),
    db: Session = Depends(get_session),
) -> List[DutyAssignmentResponse]:
    """All duty rows for the organization (defaults and overrides)."""
    resolver = _load_resolver(db, org_id)
    return [DutyAssignmentResponse.from_assignment(d) for d in resolver.duties]


@router.get("/duties/defaults", response_model=List[DutyAssignmentResponse])
def list_default_duties(
    org_id: str = Query(..., description="Organization UUID"),
    db: Session = Depends(get_session),
) -> List[DutyAssignmentResponse]:
    """The recurring duty roster."""
    resolver = _load_resolver(db, org_id)
    return [DutyAssignmentResponse.from_assignment(d) for d in resolver.get_default_duties()]


@router.get("/duties/resolve", response_model=ResolvedDutyResponse)
def resolve_duty(
    org_id: str = Query(..., description="Organization UUID"),
    shift: Literal["am", "pm"] = Query(..., description="Shift"),
    duty_date: Optional[date] = Query(None, description="Date to resolve (defaults to today)"),
    db: Session = Depends(get_session),
) -> ResolvedDutyResponse:
    """
    Who is on food safety duty for a shift: the date's override if set,
    otherwise the recurring default.
    """
    resolver = _load_resolver(db, org_id)
    target_date = duty_date or kitchen_now().date()
    return ResolvedDutyResponse.from_resolved(resolver.resolve_duty(shift, target_date), target_date)


@router.put("/duties", response_model=DutyAssignmentResponse)
def assign_duty(
    request: AssignDutyRequest,
    org_id: str = Query(..., description="Organization UUID"),
    user_id: str = Query(..., description="UUID of the user making the assignment"),
    db: Session = Depends(get_session),
) -> DutyAssignmentResponse:
    """
    Assign a user to a shift. Replaces any existing assignment for the same
    shift and date (or the same shift's default when no date is given).
    """
    assignee = _parse_uuid(request.user_id, "user_id")
    resolver = _load_resolver(db, org_id, user_id)
    APIError.log_operation_start("assign duty", org_id=org_id, user_id=user_id)
    try:
        assignment = resolver.assign_duty(request.shift, assignee, request.duty_date)
    except DutyAssignmentError as e:
        raise APIError.handle_validation_error("assign duty", e, org_id=org_id, user_id=user_id)
    except DutyStoreError as e:
        raise APIError.handle_unavailable_error("assign duty", e, org_id=org_id, user_id=user_id)
    APIError.log_operation_success(
        "assign duty", org_id=org_id, user_id=user_id, extra_context={"duty_id": str(assignment.id)}
    )
    return DutyAssignmentResponse.from_assignment(assignment)


@router.delete("/duties/{duty_id}")
def remove_duty(
    duty_id: str = Path(..., description="Duty UUID"),
    org_id: str = Query(..., description="Organization UUID"),
    db: Session = Depends(get_session),
) -> dict:
    """Delete one duty row."""
    duty_uuid = _parse_uuid(duty_id, "duty_id")
    resolver = _load_resolver(db, org_id)
    try:
        removed = resolver.remove_duty(duty_uuid)
    except DutyStoreError as e:
        raise APIError.handle_unavailable_error("remove duty", e, org_id=org_id)
    if not removed:
        raise APIError.handle_not_found_error("Duty", duty_id, org_id=org_id)
    return {"deleted": duty_id, "org_id": org_id}


@router.get("/team", response_model=List[TeamMemberResponse])
def list_team(
    org_id: str = Query(..., description="Organization UUID"),
    db: Session = Depends(get_session),
) -> List[TeamMemberResponse]:
    """Active team members who can be assigned duties."""
    resolver = _load_resolver(db, org_id)
    return [
        TeamMemberResponse(
            user_id=str(m.user_id), full_name=m.full_name, avatar_url=m.avatar_url, role=m.role
        )
        for m in resolver.team_members
    ]


@router.get("/on-duty", response_model=OnDutyResponse)
def on_duty(
    org_id: str = Query(..., description="Organization UUID"),
    user_id: str = Query(..., description="User UUID"),
    shift: Literal["am", "pm"] = Query(..., description="Shift"),
    db: Session = Depends(get_session),
) -> OnDutyResponse:
    """Whether the user holds the shift today."""
    resolver = _load_resolver(db, org_id, user_id)
    return OnDutyResponse(shift=shift, user_id=user_id, on_duty=resolver.is_current_user_on_duty(shift))


@router.get("/reminder", response_model=ReminderResponse)
def get_reminder(
    org_id: str = Query(..., description="Organization UUID"),
    user_id: str = Query(..., description="User UUID"),
    at: Optional[datetime] = Query(None, description="Local time to evaluate (defaults to now)"),
    db: Session = Depends(get_session),
) -> ReminderResponse:
    """Shift reminder due for the user; all fields null when none is due."""
    resolver = _load_resolver(db, org_id, user_id)
    try:
        reminder = resolver.shift_reminder(to_kitchen_time(at) if at else kitchen_now())
    except DutyStoreError as e:
        raise APIError.handle_unavailable_error("check reminders", e, org_id=org_id, user_id=user_id)
    if reminder is None:
        return ReminderResponse()
    return ReminderResponse(
        reminder_type=reminder.reminder_type,
        shift=reminder.shift,
        reminder_date=reminder.reminder_date,
        message=reminder.message,
    )


@router.post("/reminders/dismiss")
def dismiss_reminder(
    request: DismissReminderRequest,
    org_id: str = Query(..., description="Organization UUID"),
    user_id: str = Query(..., description="User UUID"),
    db: Session = Depends(get_session),
) -> dict:
    """Dismiss a reminder so it isn't shown again that day."""
    resolver = FoodSafetyDutyResolver(
        DutyRepository(db),
        _parse_uuid(org_id, "org_id"),
        current_user_id=_parse_uuid(user_id, "user_id"),
    )
    reminder_date = request.reminder_date or kitchen_now().date()
    try:
        resolver.dismiss_reminder(request.reminder_type, reminder_date)
    except DutyStoreError as e:
        raise APIError.handle_unavailable_error("dismiss reminder", e, org_id=org_id, user_id=user_id)
    return {"dismissed": request.reminder_type, "reminder_date": reminder_date.isoformat()}
