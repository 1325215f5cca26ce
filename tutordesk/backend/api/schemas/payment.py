from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import ConfigDict, Field

from .common import CamelModel
from .student import StudentRefResponse


class PaymentCreateRequest(CamelModel):
    """Request model for recording a payment."""
    model_config = ConfigDict(str_strip_whitespace=True)

    student_id: UUID
    month: str = Field(..., min_length=1, description="Free-text label, e.g. 'January 2024'.")
    amount: float = Field(..., ge=0, description="Amount cannot be negative.")
    paid_date: Optional[datetime] = Field(None, description="Defaults to the time of recording.")


class PaymentUpdateRequest(CamelModel):
    """Partial update: only the fields that are sent are changed."""
    model_config = ConfigDict(str_strip_whitespace=True)

    student_id: Optional[UUID] = None
    month: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = Field(None, ge=0)
    paid_date: Optional[datetime] = None


class PaymentResponse(CamelModel):
    """Payment record enriched with the student's data (null if the student is gone)."""
    id: UUID
    student_id: UUID
    month: str
    amount: float
    paid_date: datetime
    created_at: datetime
    updated_at: datetime
    student: Optional[StudentRefResponse] = None


class StudentPaymentsResponse(CamelModel):
    payments: List[PaymentResponse]
    total_paid: float
    payment_count: int


class PaymentListResponse(CamelModel):
    payments: List[PaymentResponse]
    total_income: float
    payment_count: int


class MonthlySummaryResponse(CamelModel):
    month: str = Field(description="'<Month> <Year>', e.g. 'January 2024'.")
    total_income: float
    payment_count: int
    payments: List[PaymentResponse]
