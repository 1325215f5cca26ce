# tutordesk/backend/models/db_models.py

from enum import Enum
from pydantic import BaseModel, Field
import datetime as dt
from uuid import UUID


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"


class Student(BaseModel):
    """
    Represents a student, mapping to the 'students' table.
    """
    id: UUID
    name: str
    email: str = Field(..., description="Unique, stored lowercase")
    phone: str
    address: str
    joined_date: dt.datetime
    created_at: dt.datetime
    updated_at: dt.datetime


class Attendance(BaseModel):
    """
    One attendance mark, mapping to the 'attendance' table.
    (student_id, date) is unique.
    """
    id: UUID
    student_id: UUID = Field(..., description="FK linking to the student")
    date: dt.date
    status: AttendanceStatus
    created_at: dt.datetime
    updated_at: dt.datetime


class Payment(BaseModel):
    """
    A payment, mapping to the 'payments' table. Several payments per student
    and month are allowed.
    """
    id: UUID
    student_id: UUID = Field(..., description="FK linking to the student")
    month: str = Field(..., description="Free-text label, e.g. 'January 2024'")
    amount: float
    paid_date: dt.datetime
    created_at: dt.datetime
    updated_at: dt.datetime
