import uuid

import pytest

from tutordesk.backend.services.enrichment import EnrichedPayment, EnrichedAttendance, attach_students
from tests.factories import make_student, make_payment, make_attendance


@pytest.mark.asyncio
class TestAttachStudents:

    async def test_students_are_fetched_once_and_projected(self, db_client):
        ada = make_student(name="Ada", email="ada@example.com")
        alan = make_student(name="Alan", email="alan@example.com")
        payments = [make_payment(ada.id), make_payment(alan.id), make_payment(ada.id)]
        db_client.get_students_by_ids.return_value = [alan, ada]

        enriched = await attach_students(db_client, payments, EnrichedPayment, fields=("name",))

        db_client.get_students_by_ids.assert_awaited_once()
        assert set(db_client.get_students_by_ids.await_args.args[0]) == {ada.id, alan.id}
        assert [p.student.name for p in enriched] == ["Ada", "Alan", "Ada"]
        assert all(p.student.email is None for p in enriched)

    async def test_missing_student_leaves_student_empty(self, db_client):
        record = make_attendance(uuid.uuid4())
        db_client.get_students_by_ids.return_value = []

        enriched = await attach_students(db_client, [record], EnrichedAttendance)

        assert enriched[0].student is None
        assert enriched[0].id == record.id

    async def test_empty_input_skips_the_lookup(self, db_client):
        assert await attach_students(db_client, [], EnrichedPayment) == []
        db_client.get_students_by_ids.assert_not_called()

    async def test_unknown_field_is_rejected(self, db_client):
        with pytest.raises(ValueError):
            await attach_students(db_client, [], EnrichedPayment, fields=("name", "address"))
