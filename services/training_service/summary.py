"""Attendance summary math, computed from current row state at read time."""

import math
from collections import Counter
from dataclasses import asdict, dataclass
from typing import Iterable, Mapping

from services.training_service.models import AttendanceStatus


@dataclass(frozen=True)
class AttendanceCounts:
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0
    pending: int = 0

    @property
    def attendance_rate(self) -> int:
        return attendance_rate(self.present, self.late, self.total)

    def as_dict(self) -> dict:
        data = asdict(self)
        data["attendance_rate"] = self.attendance_rate
        return data


def attendance_rate(present: int, late: int, total: int) -> int:
    """Percentage of the roster that showed up, late arrivals included.

    Rounded half up to a whole percent; 0 for an empty session.
    """
    if total <= 0:
        return 0
    return math.floor((present + late) / total * 100 + 0.5)


def counts_from_mapping(by_status: Mapping[AttendanceStatus, int]) -> AttendanceCounts:
    def get(status: AttendanceStatus) -> int:
        return int(by_status.get(status, 0))

    return AttendanceCounts(
        total=sum(int(v) for v in by_status.values()),
        present=get(AttendanceStatus.PRESENT),
        absent=get(AttendanceStatus.ABSENT),
        late=get(AttendanceStatus.LATE),
        excused=get(AttendanceStatus.EXCUSED),
        pending=get(AttendanceStatus.PENDING),
    )


def summarize(statuses: Iterable[AttendanceStatus]) -> AttendanceCounts:
    """Count a session's attendance statuses."""
    return counts_from_mapping(Counter(AttendanceStatus(s) for s in statuses))
