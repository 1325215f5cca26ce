import logging
from typing import List, Optional, Sequence, Type, TypeVar, Union
from uuid import UUID

from pydantic import BaseModel

from ..db.db_client import AsyncPostgresClient
from ..models.db_models import Attendance, Payment

logger = logging.getLogger(__name__)

# Student fields that may be attached to a record.
STUDENT_REF_FIELDS = ("name", "email", "phone")


class StudentRef(BaseModel):
    """The subset of a student that is attached to attendance and payment records."""
    id: UUID
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


# --- Enriched Models for API Responses ---
class EnrichedAttendance(Attendance):
    """Attendance record enriched with student data. `student` is None if the student is gone."""
    student: Optional[StudentRef] = None


class EnrichedPayment(Payment):
    """Payment record enriched with student data. `student` is None if the student is gone."""
    student: Optional[StudentRef] = None


EnrichedT = TypeVar("EnrichedT", EnrichedAttendance, EnrichedPayment)


async def attach_students(db_client: AsyncPostgresClient,
                          records: Sequence[Union[Attendance, Payment]],
                          enriched_model: Type[EnrichedT],
                          fields: Sequence[str] = ("name", "email")) -> List[EnrichedT]:
    """
    Fetches the students referenced by `records` in one query and attaches
    the requested `fields` of each to its record. Record order is kept.
    """
    unknown = set(fields) - set(STUDENT_REF_FIELDS)
    if unknown:
        raise ValueError(f"Unknown student fields: {sorted(unknown)}")
    if not records:
        return []

    student_ids = list({record.student_id for record in records})
    students = await db_client.get_students_by_ids(student_ids)
    refs = {
        student.id: StudentRef(id=student.id, **{field: getattr(student, field) for field in fields})
        for student in students
    }

    enriched = []
    for record in records:
        ref = refs.get(record.student_id)
        if ref is None:
            logger.warning(f"Student ({record.student_id}) referenced by record {record.id} was not found.")
        enriched.append(enriched_model(**record.model_dump(), student=ref))
    return enriched
