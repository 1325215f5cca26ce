import logging
from typing import List, Optional, Tuple, Union
from uuid import UUID
from datetime import date, datetime
import datetime as dt
import asyncio

import asyncpg
from pydantic import BaseModel

from ..db.db_client import AsyncPostgresClient
from ..models.db_models import Attendance, AttendanceStatus
from . import dates
from .enrichment import EnrichedAttendance, attach_students
from .errors import NotFoundError, ServiceError, storage_errors

logger = logging.getLogger(__name__)


def attendance_percentage(present: int, total: int) -> float:
    """present/total as a percentage rounded to 2 decimals, 0 when nothing was marked."""
    if total <= 0:
        return 0
    return round(present / total * 100, 2)


class AttendanceStatistics(BaseModel):
    total_days: int
    present_days: int
    absent_days: int
    percentage: float


class StudentAttendance(BaseModel):
    attendance: List[EnrichedAttendance]
    statistics: AttendanceStatistics


class TodaySummary(BaseModel):
    date: dt.date
    total_students: int
    present_today: int
    absent_today: int
    # Negative only when records outlive their students; not clamped.
    not_marked: int
    attendance: List[EnrichedAttendance]


class AttendanceService:
    """
    Service layer for daily attendance: one Present/Absent mark per student and day.
    """
    def __init__(self, db_client: AsyncPostgresClient):
        self.db_client = db_client

    async def _require_student(self, student_id: UUID):
        student = await self.db_client.get_student(student_id)
        if not student:
            logger.warning(f"Attendance requested for unknown student ({student_id}).")
            raise NotFoundError("Student not found")
        return student

    async def mark_attendance(self, student_id: UUID, day: Union[date, datetime],
                              status: AttendanceStatus) -> Tuple[Attendance, bool]:
        """
        Marks a student Present/Absent for a day. Returns (record, created):
        an existing mark for the same day is overwritten and created is False.
        """
        day = dates.normalize_day(day)
        status = AttendanceStatus(status)
        with storage_errors("marking attendance"):
            await self._require_student(student_id)

            existing = await self.db_client.get_attendance_for_day(student_id, day)
            if existing:
                updated = await self.db_client.update_attendance_status(existing.id, status)
                logger.info(f"Attendance for student {student_id} on {day} updated to {status.value}.")
                return updated, False

            try:
                created = await self.db_client.add_attendance(student_id, day, status)
            except asyncpg.UniqueViolationError:
                # A concurrent mark for the same day won the insert.
                logger.info(f"Attendance for student {student_id} on {day} was created concurrently; updating instead.")
                existing = await self.db_client.get_attendance_for_day(student_id, day)
                if not existing:
                    raise ServiceError("Attendance for this day could not be recorded. Please retry.")
                updated = await self.db_client.update_attendance_status(existing.id, status)
                return updated, False

            logger.info(f"Attendance for student {student_id} on {day} marked {status.value}.")
            return created, True

    async def get_student_attendance(self, student_id: UUID,
                                     month: Optional[int] = None,
                                     year: Optional[int] = None) -> StudentAttendance:
        """A student's attendance history with statistics, optionally limited to one calendar month."""
        date_from = date_to = None
        if month is not None and year is not None:
            if not 1 <= month <= 12:
                raise ServiceError("Month must be between 1 and 12")
            if not date.min.year <= year <= date.max.year:
                raise ServiceError(f"Year must be between {date.min.year} and {date.max.year}")
            date_from, date_to = dates.month_days(year, month)

        with storage_errors("fetching student attendance"):
            await self._require_student(student_id)
            records = await self.db_client.find_attendance(student_id=student_id, date_from=date_from, date_to=date_to)
            enriched = await attach_students(self.db_client, records, EnrichedAttendance, fields=("name", "email"))

        total_days = len(records)
        present_days = sum(1 for record in records if record.status == AttendanceStatus.PRESENT)
        statistics = AttendanceStatistics(
            total_days=total_days,
            present_days=present_days,
            absent_days=total_days - present_days,
            percentage=attendance_percentage(present_days, total_days),
        )
        return StudentAttendance(attendance=enriched, statistics=statistics)

    async def list_attendance(self, day: Optional[Union[date, datetime]] = None) -> List[EnrichedAttendance]:
        """All attendance records, or only those of one day."""
        day = dates.normalize_day(day) if day is not None else None
        with storage_errors("listing attendance"):
            records = await self.db_client.find_attendance(date_from=day, date_to=day)
            return await attach_students(self.db_client, records, EnrichedAttendance, fields=("name", "email", "phone"))

    async def today_summary(self) -> TodaySummary:
        today = dates.today()
        with storage_errors("building today's attendance summary"):
            records, total_students = await asyncio.gather(
                self.db_client.find_attendance(date_from=today, date_to=today),
                self.db_client.count_students(),
            )
            enriched = await attach_students(self.db_client, records, EnrichedAttendance, fields=("name", "email"))

        present_today = sum(1 for record in records if record.status == AttendanceStatus.PRESENT)
        absent_today = sum(1 for record in records if record.status == AttendanceStatus.ABSENT)
        return TodaySummary(
            date=today,
            total_students=total_students,
            present_today=present_today,
            absent_today=absent_today,
            not_marked=total_students - len(records),
            attendance=enriched,
        )
