from typing import List

from .common import CamelModel
from .payment import PaymentResponse


class TrendPointResponse(CamelModel):
    date: str
    present: int
    absent: int


class DashboardStatsResponse(CamelModel):
    total_students: int
    present_today: int
    absent_today: int
    monthly_income: float
    recent_payments: List[PaymentResponse]
    attendance_chart_data: List[TrendPointResponse]
