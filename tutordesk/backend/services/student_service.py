import logging
from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import datetime
import asyncio

import asyncpg
from pydantic import BaseModel

from ..db.db_client import AsyncPostgresClient
from ..models.db_models import Student, Payment, AttendanceStatus
from . import dates
from .attendance_service import attendance_percentage
from .errors import NotFoundError, ServiceError, storage_errors

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "Student with this email already exists"


class StudentAttendanceSummary(BaseModel):
    total: int
    present: int
    absent: int
    percentage: float


class StudentPaymentSummary(BaseModel):
    records: List[Payment]
    total_paid: float


class StudentDetail(BaseModel):
    student: Student
    attendance: StudentAttendanceSummary
    payments: StudentPaymentSummary


class StudentService:
    """
    Service layer for the student roster.
    """
    def __init__(self, db_client: AsyncPostgresClient):
        self.db_client = db_client

    async def _get_or_raise(self, student_id: UUID) -> Student:
        student = await self.db_client.get_student(student_id)
        if not student:
            logger.warning(f"Student ({student_id}) not found.")
            raise NotFoundError("Student not found")
        return student

    async def list_students(self) -> List[Student]:
        with storage_errors("listing students"):
            return await self.db_client.list_students()

    async def get_student_detail(self, student_id: UUID) -> StudentDetail:
        with storage_errors("fetching student details"):
            student = await self._get_or_raise(student_id)
            counts, payments = await asyncio.gather(
                self.db_client.count_attendance_by_status(student_id),
                self.db_client.find_payments(student_id=student_id),
            )

        present = counts.get(AttendanceStatus.PRESENT.value, 0)
        total = sum(counts.values())
        return StudentDetail(
            student=student,
            attendance=StudentAttendanceSummary(
                total=total,
                present=present,
                absent=total - present,
                percentage=attendance_percentage(present, total),
            ),
            payments=StudentPaymentSummary(
                records=payments,
                total_paid=sum(payment.amount for payment in payments),
            ),
        )

    async def create_student(self, name: str, email: str, phone: str, address: str,
                             joined_date: Optional[datetime] = None) -> Student:
        email = email.strip().lower()
        if joined_date is not None:
            joined_date = dates.as_aware(joined_date)

        with storage_errors("creating a student"):
            if await self.db_client.get_student_by_email(email):
                logger.warning(f"Refused to create a second student with email '{email}'.")
                raise ServiceError(DUPLICATE_EMAIL_MESSAGE)
            try:
                student = await self.db_client.add_student(name, email, phone, address, joined_date)
            except asyncpg.UniqueViolationError as e:
                raise ServiceError(DUPLICATE_EMAIL_MESSAGE) from e

        logger.info(f"Student {student.id} ('{student.email}') created.")
        return student

    async def update_student(self, student_id: UUID, fields: Dict[str, Any]) -> Student:
        """Applies the given fields only. Field constraints are the same as on create."""
        fields = dict(fields)
        if "email" in fields:
            fields["email"] = fields["email"].strip().lower()
        if fields.get("joined_date") is not None:
            fields["joined_date"] = dates.as_aware(fields["joined_date"])

        with storage_errors("updating a student"):
            await self._get_or_raise(student_id)
            if "email" in fields:
                owner = await self.db_client.get_student_by_email(fields["email"])
                if owner and owner.id != student_id:
                    raise ServiceError(DUPLICATE_EMAIL_MESSAGE)
            try:
                updated = await self.db_client.update_student(student_id, fields)
            except asyncpg.UniqueViolationError as e:
                raise ServiceError(DUPLICATE_EMAIL_MESSAGE) from e

        if not updated:
            raise NotFoundError("Student not found")
        logger.info(f"Student {student_id} updated: {sorted(fields)}.")
        return updated

    async def delete_student(self, student_id: UUID) -> str:
        """Deletes the student together with its attendance and payment records."""
        with storage_errors("deleting a student"):
            await self._get_or_raise(student_id)
            deleted = await self.db_client.delete_student_cascade(student_id)
        if not deleted:
            raise NotFoundError("Student not found")
        return "Student and related records deleted successfully"
