"""Shared helper functions for training service routers."""

from typing import Optional

from services.roster_service.models import TeamMember
from services.roster_service.schemas import TeamSummary
from services.training_service.models import Attendance
from services.training_service.schemas import (
    AttendanceMember,
    AttendanceResponse,
    AttendanceSummary,
    SessionExerciseResponse,
    TrainingSessionDetailResponse,
    TrainingSessionResponse,
)
from services.training_service.services.scheduler import HydratedSession
from services.workouts_service.schemas import WorkoutSummary


def attendance_response(
    attendance: Attendance, member: Optional[TeamMember]
) -> AttendanceResponse:
    """
    Build an attendance response. Once the roster row is gone the member
    block falls back to the user/role captured at scheduling time.
    """
    resp = AttendanceResponse.model_validate(attendance)
    if member is not None:
        resp.member = AttendanceMember(
            id=member.id,
            user_id=member.user_id,
            role=member.role,
            number=member.number,
            position=member.position,
        )
    else:
        resp.member = AttendanceMember(
            user_id=attendance.user_id, role=attendance.member_role
        )
    return resp


def session_response(hydrated: HydratedSession) -> TrainingSessionResponse:
    resp = TrainingSessionResponse.model_validate(hydrated.session)
    _decorate(resp, hydrated)
    return resp


def session_detail_response(hydrated: HydratedSession) -> TrainingSessionDetailResponse:
    resp = TrainingSessionDetailResponse.model_validate(hydrated.session)
    _decorate(resp, hydrated)
    resp.attendance = [attendance_response(a, m) for a, m in hydrated.attendance]
    resp.exercises = [
        SessionExerciseResponse.model_validate(e) for e in hydrated.exercises
    ]
    return resp


def _decorate(resp: TrainingSessionResponse, hydrated: HydratedSession) -> None:
    if hydrated.team is not None:
        resp.team = TeamSummary.model_validate(hydrated.team)
    if hydrated.workout is not None:
        resp.workout = WorkoutSummary.model_validate(hydrated.workout)
    resp.attendance_summary = AttendanceSummary(**hydrated.counts.as_dict())
