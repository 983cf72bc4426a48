"""Unit tests for attendance summary math."""

import pytest
from services.training_service.models import AttendanceStatus
from services.training_service.summary import (
    AttendanceCounts,
    attendance_rate,
    counts_from_mapping,
    summarize,
)

A = AttendanceStatus


@pytest.mark.unit
def test_summary_counts_each_status():
    counts = summarize([A.PRESENT] * 3 + [A.LATE, A.ABSENT])

    assert counts == AttendanceCounts(total=5, present=3, absent=1, late=1)
    assert counts.attendance_rate == 80


@pytest.mark.unit
def test_empty_session_rate_is_zero():
    counts = summarize([])
    assert counts.total == 0
    assert counts.attendance_rate == 0


@pytest.mark.unit
@pytest.mark.parametrize(
    "present,late,total,expected",
    [
        (1, 0, 3, 33),
        (2, 0, 3, 67),
        (1, 0, 8, 13),  # 12.5 rounds half up
        (0, 0, 4, 0),
        (2, 2, 4, 100),
    ],
)
def test_attendance_rate_rounding(present, late, total, expected):
    assert attendance_rate(present, late, total) == expected


@pytest.mark.unit
def test_pending_and_excused_do_not_count_as_attended():
    counts = summarize([A.PENDING, A.EXCUSED, A.PRESENT, A.PENDING])
    assert counts.pending == 2
    assert counts.excused == 1
    assert counts.attendance_rate == 25


@pytest.mark.unit
def test_counts_from_grouped_mapping():
    counts = counts_from_mapping({A.PRESENT: 2, A.PENDING: 1})
    assert counts.total == 3
    assert counts.as_dict() == {
        "total": 3,
        "present": 2,
        "absent": 0,
        "late": 0,
        "excused": 0,
        "pending": 1,
        "attendance_rate": 67,
    }
