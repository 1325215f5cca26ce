import uuid
from datetime import date
from unittest.mock import patch

import pytest

from tests.factories import make_student, make_payment

PREFIX = "/api"


@pytest.mark.asyncio
class TestPaymentsAPI:

    async def test_record_payment(self, http_client, db_client):
        student = make_student()
        payment = make_payment(student.id, 500, "January 2024")
        db_client.get_student.return_value = student
        db_client.add_payment.return_value = payment
        db_client.get_students_by_ids.return_value = [student]

        response = await http_client.post(f"{PREFIX}/payments", json={
            "studentId": str(student.id), "month": "January 2024", "amount": 500, "paidDate": "2024-01-05T10:00:00Z",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["amount"] == 500
        assert body["student"]["name"] == student.name
        assert body["student"]["email"] == student.email

    async def test_record_payment_with_negative_amount_returns_400(self, http_client, db_client):
        response = await http_client.post(f"{PREFIX}/payments", json={
            "studentId": str(uuid.uuid4()), "month": "January 2024", "amount": -10,
        })

        assert response.status_code == 400
        db_client.add_payment.assert_not_called()

    async def test_list_payments_by_month_label(self, http_client, db_client):
        student = make_student()
        db_client.find_payments.return_value = [make_payment(student.id, 200), make_payment(student.id, 300)]
        db_client.get_students_by_ids.return_value = [student]

        response = await http_client.get(f"{PREFIX}/payments", params={"month": "January 2024"})

        assert response.status_code == 200
        body = response.json()
        assert body["totalIncome"] == 500
        assert body["paymentCount"] == 2
        db_client.find_payments.assert_awaited_once_with(month="January 2024")

    async def test_monthly_summary_includes_payment_of_the_month(self, http_client, db_client):
        student = make_student()
        db_client.find_payments.return_value = [make_payment(student.id, 500, "January 2024")]
        db_client.get_students_by_ids.return_value = [student]

        with patch("tutordesk.backend.services.dates.today", return_value=date(2024, 1, 20)):
            response = await http_client.get(f"{PREFIX}/payments/summary/monthly")

        assert response.status_code == 200
        body = response.json()
        assert body["month"] == "January 2024"
        assert body["totalIncome"] == 500
        assert body["paymentCount"] == 1

    async def test_student_payments(self, http_client, db_client):
        student = make_student()
        db_client.get_student.return_value = student
        db_client.find_payments.return_value = [make_payment(student.id, 120)]
        db_client.get_students_by_ids.return_value = [student]

        response = await http_client.get(f"{PREFIX}/payments/student/{student.id}")

        assert response.status_code == 200
        assert response.json()["totalPaid"] == 120
        assert response.json()["paymentCount"] == 1

    async def test_student_payments_for_unknown_student_returns_404(self, http_client, db_client):
        db_client.get_student.return_value = None

        response = await http_client.get(f"{PREFIX}/payments/student/{uuid.uuid4()}")

        assert response.status_code == 404

    async def test_update_payment(self, http_client, db_client):
        student = make_student()
        payment = make_payment(student.id, 500)
        db_client.get_payment.return_value = payment
        db_client.update_payment.return_value = payment.model_copy(update={"amount": 450.0})
        db_client.get_students_by_ids.return_value = [student]

        response = await http_client.put(f"{PREFIX}/payments/{payment.id}", json={"amount": 450})

        assert response.status_code == 200
        assert response.json()["amount"] == 450.0
        db_client.update_payment.assert_awaited_once_with(payment.id, {"amount": 450.0})

    async def test_delete_unknown_payment_returns_404(self, http_client, db_client):
        db_client.get_payment.return_value = None

        response = await http_client.delete(f"{PREFIX}/payments/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json() == {"message": "Payment not found"}

    async def test_delete_payment(self, http_client, db_client):
        payment = make_payment(uuid.uuid4())
        db_client.get_payment.return_value = payment
        db_client.delete_payment.return_value = True

        response = await http_client.delete(f"{PREFIX}/payments/{payment.id}")

        assert response.status_code == 200
        assert response.json() == {"message": "Payment deleted successfully"}
