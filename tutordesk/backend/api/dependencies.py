# tutordesk/backend/api/dependencies.py
from typing import Optional

from fastapi import Request, Depends
import asyncpg

from ..db.db_client import AsyncPostgresClient
from ..services.errors import StorageError
from ..services.student_service import StudentService
from ..services.attendance_service import AttendanceService
from ..services.payment_service import PaymentService
from ..services.dashboard_service import DashboardService


def get_postgres_pool(request: Request) -> Optional[asyncpg.Pool]:
    """
    Uygulamanın state'inden PostgreSQL bağlantı havuzunu alır ve bir bağımlılık olarak sağlar.
    """
    return getattr(request.app.state, "postgres_pool", None)


def get_db_client(postgres_pool: Optional[asyncpg.Pool] = Depends(get_postgres_pool)) -> AsyncPostgresClient:
    """
    Her istek için paylaşımlı havuzu kullanan yeni bir istemci oluşturur.
    Havuz başlangıçta kurulamadıysa istek 500 ile sonuçlanır.
    """
    if postgres_pool is None:
        raise StorageError("The database is not available.")
    return AsyncPostgresClient(pool=postgres_pool)


def get_student_service(db_client: AsyncPostgresClient = Depends(get_db_client)) -> StudentService:
    return StudentService(db_client=db_client)


def get_attendance_service(db_client: AsyncPostgresClient = Depends(get_db_client)) -> AttendanceService:
    return AttendanceService(db_client=db_client)


def get_payment_service(db_client: AsyncPostgresClient = Depends(get_db_client)) -> PaymentService:
    return PaymentService(db_client=db_client)


def get_dashboard_service(db_client: AsyncPostgresClient = Depends(get_db_client)) -> DashboardService:
    return DashboardService(db_client=db_client)
