import datetime as dt
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from ...models.db_models import AttendanceStatus
from .common import CamelModel
from .student import StudentRefResponse


class AttendanceMarkRequest(CamelModel):
    """Request model for marking a student present or absent on a day."""
    student_id: UUID
    date: dt.datetime = Field(..., description="Any time on the day; the time of day is dropped.")
    status: AttendanceStatus = Field(..., description="'Present' or 'Absent'.")


class AttendanceResponse(CamelModel):
    id: UUID
    student_id: UUID
    date: dt.date
    status: AttendanceStatus
    created_at: dt.datetime
    updated_at: dt.datetime


class EnrichedAttendanceResponse(AttendanceResponse):
    """Attendance record enriched with the student's data (null if the student is gone)."""
    student: Optional[StudentRefResponse] = None


class AttendanceStatisticsResponse(CamelModel):
    total_days: int
    present_days: int
    absent_days: int
    percentage: float


class StudentAttendanceResponse(CamelModel):
    attendance: List[EnrichedAttendanceResponse]
    statistics: AttendanceStatisticsResponse


class TodaySummaryResponse(CamelModel):
    date: dt.date
    total_students: int
    present_today: int
    absent_today: int
    not_marked: int
    attendance: List[EnrichedAttendanceResponse]
