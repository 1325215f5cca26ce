from datetime import date
from unittest.mock import patch

import pytest

PREFIX = "/api"


@pytest.mark.asyncio
async def test_dashboard_stats(http_client, db_client):
    db_client.count_students.return_value = 10
    db_client.count_attendance_by_day.return_value = [
        {"date": date(2024, 1, 10), "status": "Present", "total": 3},
        {"date": date(2024, 1, 10), "status": "Absent", "total": 2},
    ]
    db_client.sum_payments.return_value = 500.0
    db_client.find_payments.return_value = []

    with patch("tutordesk.backend.services.dates.today", return_value=date(2024, 1, 10)):
        response = await http_client.get(f"{PREFIX}/dashboard/stats")

    assert response.status_code == 200
    body = response.json()
    assert body["totalStudents"] == 10
    assert body["presentToday"] == 3
    assert body["absentToday"] == 2
    assert body["monthlyIncome"] == 500.0
    assert body["recentPayments"] == []
    assert len(body["attendanceChartData"]) == 7
    assert body["attendanceChartData"][-1] == {"date": "Jan 10", "present": 3, "absent": 2}
