import logging
from typing import List
import asyncio

from pydantic import BaseModel

from ..db.db_client import AsyncPostgresClient
from ..models.db_models import AttendanceStatus
from . import dates
from .enrichment import EnrichedPayment, attach_students
from .errors import storage_errors

logger = logging.getLogger(__name__)

TREND_DAYS = 7
RECENT_PAYMENTS_LIMIT = 5


class TrendPoint(BaseModel):
    date: str
    present: int
    absent: int


class DashboardStats(BaseModel):
    total_students: int
    present_today: int
    absent_today: int
    monthly_income: float
    recent_payments: List[EnrichedPayment]
    attendance_chart_data: List[TrendPoint]


class DashboardService:
    """
    Composes the admin dashboard from students, attendance and payments.
    The reads are independent and run concurrently; any failure fails the whole call.
    """
    def __init__(self, db_client: AsyncPostgresClient):
        self.db_client = db_client

    async def get_stats(self) -> DashboardStats:
        today = dates.today()
        days = dates.last_days(TREND_DAYS, today)
        # Every paid date on the first through last calendar day of the month.
        month_start, next_month_start = dates.month_range(today)

        with storage_errors("building dashboard statistics"):
            total_students, day_counts, monthly_income, recent = await asyncio.gather(
                self.db_client.count_students(),
                self.db_client.count_attendance_by_day(days[0], days[-1]),
                self.db_client.sum_payments(month_start, next_month_start),
                self.db_client.find_payments(limit=RECENT_PAYMENTS_LIMIT),
            )
            recent_payments = await attach_students(self.db_client, recent, EnrichedPayment, fields=("name", "email"))

        counts = {(row["date"], row["status"]): row["total"] for row in day_counts}
        trend = [
            TrendPoint(
                date=dates.short_day_label(day),
                present=counts.get((day, AttendanceStatus.PRESENT.value), 0),
                absent=counts.get((day, AttendanceStatus.ABSENT.value), 0),
            )
            for day in days
        ]
        today_point = trend[-1]
        logger.info(
            f"Dashboard stats for {today}: {total_students} students, "
            f"{today_point.present} present, {today_point.absent} absent, income {monthly_income}."
        )

        return DashboardStats(
            total_students=total_students,
            present_today=today_point.present,
            absent_today=today_point.absent,
            monthly_income=monthly_income,
            recent_payments=recent_payments,
            attendance_chart_data=trend,
        )
