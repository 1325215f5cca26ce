import uuid
from datetime import date, datetime, timezone
from unittest.mock import patch

import pytest

from tutordesk.backend.services import dates
from tutordesk.backend.services.payment_service import PaymentService
from tutordesk.backend.services.errors import NotFoundError, ServiceError
from tests.factories import make_student, make_payment


@pytest.fixture
def service(db_client) -> PaymentService:
    return PaymentService(db_client=db_client)


@pytest.fixture
def student():
    return make_student()


@pytest.mark.asyncio
class TestPaymentService:

    async def test_record_payment_for_unknown_student_raises_not_found(self, service, db_client):
        db_client.get_student.return_value = None

        with pytest.raises(NotFoundError, match="Student not found"):
            await service.record_payment(uuid.uuid4(), "January 2024", 500)

        db_client.add_payment.assert_not_called()

    async def test_record_payment_returns_enriched_record(self, service, db_client, student):
        payment = make_payment(student.id, 500, "January 2024")
        db_client.get_student.return_value = student
        db_client.add_payment.return_value = payment
        db_client.get_students_by_ids.return_value = [student]
        paid = datetime(2024, 1, 5, 10, 0, tzinfo=timezone.utc)

        result = await service.record_payment(student.id, "  January 2024 ", 500, paid)

        db_client.add_payment.assert_awaited_once_with(student.id, "January 2024", 500, paid)
        assert result.id == payment.id
        assert result.student.name == student.name
        assert result.student.email == student.email
        assert result.student.phone is None

    async def test_record_payment_rejects_negative_amount(self, service, db_client, student):
        with pytest.raises(ServiceError, match="negative"):
            await service.record_payment(student.id, "January 2024", -1)

    async def test_student_payments_totals(self, service, db_client, student):
        payments = [make_payment(student.id, 300), make_payment(student.id, 200)]
        db_client.get_student.return_value = student
        db_client.find_payments.return_value = payments
        db_client.get_students_by_ids.return_value = [student]

        result = await service.get_student_payments(student.id)

        assert result.total_paid == 500
        assert result.payment_count == 2
        db_client.find_payments.assert_awaited_once_with(student_id=student.id)

    async def test_list_payments_filters_on_exact_month_label(self, service, db_client, student):
        db_client.find_payments.return_value = [make_payment(student.id, 100, "March 2024")]
        db_client.get_students_by_ids.return_value = [student]

        result = await service.list_payments("March 2024")

        db_client.find_payments.assert_awaited_once_with(month="March 2024")
        assert result.total_income == 100
        assert result.payment_count == 1
        assert result.payments[0].student.phone == student.phone

    async def test_monthly_summary_uses_half_open_calendar_month(self, service, db_client, student):
        db_client.find_payments.return_value = [make_payment(student.id, 500, "January 2024")]
        db_client.get_students_by_ids.return_value = [student]

        with patch("tutordesk.backend.services.dates.today", return_value=date(2024, 1, 20)):
            summary = await service.monthly_summary()

        db_client.find_payments.assert_awaited_once_with(
            paid_from=dates.start_of_day(date(2024, 1, 1)),
            paid_before=dates.start_of_day(date(2024, 2, 1)),
        )
        assert summary.month == "January 2024"
        assert summary.total_income == 500
        assert summary.payment_count == 1
        assert summary.payments[0].student.name == student.name
        assert summary.payments[0].student.email is None

    async def test_update_unknown_payment_raises_not_found(self, service, db_client):
        db_client.get_payment.return_value = None

        with pytest.raises(NotFoundError, match="Payment not found"):
            await service.update_payment(uuid.uuid4(), {"amount": 10})

    async def test_update_payment_rejects_negative_amount(self, service, db_client):
        with pytest.raises(ServiceError):
            await service.update_payment(uuid.uuid4(), {"amount": -5})

        db_client.update_payment.assert_not_called()

    async def test_update_payment_to_unknown_student_raises_not_found(self, service, db_client, student):
        db_client.get_payment.return_value = make_payment(student.id)
        db_client.get_student.return_value = None

        with pytest.raises(NotFoundError, match="Student not found"):
            await service.update_payment(uuid.uuid4(), {"student_id": uuid.uuid4()})

        db_client.update_payment.assert_not_called()

    async def test_update_payment_returns_enriched_record(self, service, db_client, student):
        payment = make_payment(student.id, 500)
        updated = payment.model_copy(update={"amount": 650.0})
        db_client.get_payment.return_value = payment
        db_client.update_payment.return_value = updated
        db_client.get_students_by_ids.return_value = [student]

        result = await service.update_payment(payment.id, {"amount": 650.0})

        db_client.update_payment.assert_awaited_once_with(payment.id, {"amount": 650.0})
        assert result.amount == 650.0
        assert result.student.name == student.name

    async def test_delete_unknown_payment_raises_not_found(self, service, db_client):
        db_client.get_payment.return_value = None

        with pytest.raises(NotFoundError):
            await service.delete_payment(uuid.uuid4())

        db_client.delete_payment.assert_not_called()

    async def test_delete_payment(self, service, db_client, student):
        payment = make_payment(student.id)
        db_client.get_payment.return_value = payment
        db_client.delete_payment.return_value = True

        assert await service.delete_payment(payment.id) == "Payment deleted successfully"
        db_client.delete_payment.assert_awaited_once_with(payment.id)
