import logging
from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel

from ..db.db_client import AsyncPostgresClient
from . import dates
from .enrichment import EnrichedPayment, attach_students
from .errors import NotFoundError, ServiceError, storage_errors

logger = logging.getLogger(__name__)


class StudentPayments(BaseModel):
    payments: List[EnrichedPayment]
    total_paid: float
    payment_count: int


class PaymentListing(BaseModel):
    payments: List[EnrichedPayment]
    total_income: float
    payment_count: int


class MonthlySummary(BaseModel):
    month: str
    total_income: float
    payment_count: int
    payments: List[EnrichedPayment]


class PaymentService:
    """
    Service layer for tuition payments.
    """
    def __init__(self, db_client: AsyncPostgresClient):
        self.db_client = db_client

    async def _require_student(self, student_id: UUID):
        student = await self.db_client.get_student(student_id)
        if not student:
            logger.warning(f"Payment references unknown student ({student_id}).")
            raise NotFoundError("Student not found")
        return student

    async def _enrich_one(self, payment, fields=("name", "email")) -> EnrichedPayment:
        enriched = await attach_students(self.db_client, [payment], EnrichedPayment, fields=fields)
        return enriched[0]

    async def record_payment(self, student_id: UUID, month: str, amount: float,
                             paid_date: Optional[datetime] = None) -> EnrichedPayment:
        month = month.strip()
        if not month:
            raise ServiceError("Month is required")
        if amount < 0:
            raise ServiceError("Amount cannot be negative")
        if paid_date is not None:
            paid_date = dates.as_aware(paid_date)

        with storage_errors("recording a payment"):
            await self._require_student(student_id)
            payment = await self.db_client.add_payment(student_id, month, amount, paid_date)
            logger.info(f"Payment {payment.id} of {payment.amount} recorded for student {student_id} ({month}).")
            return await self._enrich_one(payment)

    async def get_student_payments(self, student_id: UUID) -> StudentPayments:
        with storage_errors("fetching student payments"):
            await self._require_student(student_id)
            payments = await self.db_client.find_payments(student_id=student_id)
            enriched = await attach_students(self.db_client, payments, EnrichedPayment, fields=("name", "email"))
        return StudentPayments(
            payments=enriched,
            total_paid=sum(payment.amount for payment in payments),
            payment_count=len(payments),
        )

    async def list_payments(self, month: Optional[str] = None) -> PaymentListing:
        """All payments, or those whose month label equals `month` exactly."""
        with storage_errors("listing payments"):
            payments = await self.db_client.find_payments(month=month)
            enriched = await attach_students(self.db_client, payments, EnrichedPayment, fields=("name", "email", "phone"))
        return PaymentListing(
            payments=enriched,
            total_income=sum(payment.amount for payment in payments),
            payment_count=len(payments),
        )

    async def monthly_summary(self) -> MonthlySummary:
        """Income of the current calendar month, by paid date."""
        today = dates.today()
        month_start, next_month_start = dates.month_range(today)
        with storage_errors("building the monthly summary"):
            payments = await self.db_client.find_payments(paid_from=month_start, paid_before=next_month_start)
            enriched = await attach_students(self.db_client, payments, EnrichedPayment, fields=("name",))
        return MonthlySummary(
            month=dates.month_label(today),
            total_income=sum(payment.amount for payment in payments),
            payment_count=len(payments),
            payments=enriched,
        )

    async def update_payment(self, payment_id: UUID, fields: Dict[str, Any]) -> EnrichedPayment:
        fields = dict(fields)
        if "month" in fields:
            fields["month"] = fields["month"].strip()
            if not fields["month"]:
                raise ServiceError("Month is required")
        if "amount" in fields and fields["amount"] < 0:
            raise ServiceError("Amount cannot be negative")
        if fields.get("paid_date") is not None:
            fields["paid_date"] = dates.as_aware(fields["paid_date"])

        with storage_errors("updating a payment"):
            payment = await self.db_client.get_payment(payment_id)
            if not payment:
                logger.warning(f"Payment ({payment_id}) not found for update.")
                raise NotFoundError("Payment not found")
            if "student_id" in fields and fields["student_id"] != payment.student_id:
                await self._require_student(fields["student_id"])

            updated = await self.db_client.update_payment(payment_id, fields)
            if not updated:
                raise NotFoundError("Payment not found")
            logger.info(f"Payment {payment_id} updated: {sorted(fields)}.")
            return await self._enrich_one(updated)

    async def delete_payment(self, payment_id: UUID) -> str:
        with storage_errors("deleting a payment"):
            payment = await self.db_client.get_payment(payment_id)
            if not payment:
                logger.warning(f"Payment ({payment_id}) not found for deletion.")
                raise NotFoundError("Payment not found")
            await self.db_client.delete_payment(payment_id)
        logger.info(f"Payment {payment_id} deleted.")
        return "Payment deleted successfully"
