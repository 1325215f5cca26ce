import logging
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
import asyncpg
from datetime import date, datetime
from ..models.db_models import Student, Attendance, Payment, AttendanceStatus

logger = logging.getLogger(__name__)

# Update statements may only touch these columns.
STUDENT_UPDATABLE_COLUMNS = ("name", "email", "phone", "address", "joined_date")
PAYMENT_UPDATABLE_COLUMNS = ("student_id", "month", "amount", "paid_date")


def _affected_rows(status: str) -> int:
    """asyncpg komut durumundan ('DELETE 3') etkilenen satır sayısını çıkarır."""
    try:
        return int(status.split()[-1])
    except (AttributeError, ValueError, IndexError):
        return 0


def _build_where(conditions: List[Tuple[str, Any]]) -> Tuple[str, List[Any]]:
    """[(sütun ifadesi, değer)] listesinden $n parametreli bir WHERE cümlesi üretir."""
    clauses, args = [], []
    for expression, value in conditions:
        args.append(value)
        clauses.append(f"{expression} ${len(args)}")
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, args


def _build_set(fields: Dict[str, Any], allowed: Tuple[str, ...], first_index: int) -> Tuple[str, List[Any]]:
    assignments, args = [], []
    for column, value in fields.items():
        if column not in allowed:
            raise ValueError(f"Column '{column}' cannot be updated.")
        args.append(value)
        assignments.append(f"{column} = ${first_index + len(args) - 1}")
    assignments.append("updated_at = now()")
    return ", ".join(assignments), args


class AsyncPostgresClient:
    """
    Tüm veritabanı operasyonlarını yöneten PostgreSQL istemcisi.
    """
    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    # ===== Students =====

    async def list_students(self) -> List[Student]:
        """Tüm öğrencileri en yeni kayıt önce olacak şekilde getirir."""
        query = "SELECT * FROM students ORDER BY created_at DESC;"
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query)
            return [Student(**record) for record in records]

    async def get_student(self, student_id: UUID) -> Optional[Student]:
        query = "SELECT * FROM students WHERE id = $1;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, student_id)
            return Student(**record) if record else None

    async def get_student_by_email(self, email: str) -> Optional[Student]:
        query = "SELECT * FROM students WHERE email = $1;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, email)
            return Student(**record) if record else None

    async def get_students_by_ids(self, student_ids: List[UUID]) -> List[Student]:
        """Verilen ID'lere göre öğrenci listesi döndürür."""
        if not student_ids:
            return []
        query = "SELECT * FROM students WHERE id = ANY($1::uuid[]);"
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, list(student_ids))
            return [Student(**record) for record in records]

    async def count_students(self) -> int:
        async with self._pool.acquire() as connection:
            return await connection.fetchval("SELECT count(*) FROM students;")

    async def add_student(self, name: str, email: str, phone: str, address: str,
                          joined_date: Optional[datetime] = None) -> Student:
        """Yeni öğrenci ekler. E-posta çakışmasında asyncpg.UniqueViolationError fırlatır."""
        query = """
            INSERT INTO students (name, email, phone, address, joined_date)
            VALUES ($1, $2, $3, $4, COALESCE($5, now()))
            RETURNING *;
        """
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, name, email, phone, address, joined_date)
            return Student(**record)

    async def update_student(self, student_id: UUID, fields: Dict[str, Any]) -> Optional[Student]:
        """Sadece verilen alanları günceller. Öğrenci yoksa None döner."""
        if not fields:
            return await self.get_student(student_id)
        assignments, args = _build_set(fields, STUDENT_UPDATABLE_COLUMNS, first_index=2)
        query = f"UPDATE students SET {assignments} WHERE id = $1 RETURNING *;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, student_id, *args)
            return Student(**record) if record else None

    async def delete_student_cascade(self, student_id: UUID) -> bool:
        """
        Öğrenciyi ve ona ait tüm yoklama ve ödeme kayıtlarını tek bir
        transaction içinde siler.
        """
        async with self._pool.acquire() as connection:
            async with connection.transaction():
                attendance_status = await connection.execute(
                    "DELETE FROM attendance WHERE student_id = $1;", student_id
                )
                payment_status = await connection.execute(
                    "DELETE FROM payments WHERE student_id = $1;", student_id
                )
                student_status = await connection.execute(
                    "DELETE FROM students WHERE id = $1;", student_id
                )
        logger.info(
            f"Öğrenci {student_id} silindi: {_affected_rows(attendance_status)} yoklama, "
            f"{_affected_rows(payment_status)} ödeme kaydı."
        )
        return _affected_rows(student_status) > 0

    # ===== Attendance =====

    async def get_attendance_for_day(self, student_id: UUID, day: date) -> Optional[Attendance]:
        query = "SELECT * FROM attendance WHERE student_id = $1 AND date = $2;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, student_id, day)
            return Attendance(**record) if record else None

    async def add_attendance(self, student_id: UUID, day: date, status: AttendanceStatus) -> Attendance:
        """
        Yeni yoklama kaydı ekler. Aynı gün için kayıt varsa
        asyncpg.UniqueViolationError fırlatır.
        """
        query = """
            INSERT INTO attendance (student_id, date, status)
            VALUES ($1, $2, $3)
            RETURNING *;
        """
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, student_id, day, AttendanceStatus(status).value)
            return Attendance(**record)

    async def update_attendance_status(self, attendance_id: UUID, status: AttendanceStatus) -> Optional[Attendance]:
        query = """
            UPDATE attendance SET status = $2, updated_at = now()
            WHERE id = $1
            RETURNING *;
        """
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, attendance_id, AttendanceStatus(status).value)
            return Attendance(**record) if record else None

    async def find_attendance(self,
                              student_id: Optional[UUID] = None,
                              date_from: Optional[date] = None,
                              date_to: Optional[date] = None) -> List[Attendance]:
        """Filtrelere uyan yoklama kayıtlarını tarihe göre azalan sırada getirir. Tarih aralığı iki uçta da dahildir."""
        conditions = []
        if student_id is not None:
            conditions.append(("student_id =", student_id))
        if date_from is not None:
            conditions.append(("date >=", date_from))
        if date_to is not None:
            conditions.append(("date <=", date_to))
        where, args = _build_where(conditions)
        query = f"SELECT * FROM attendance {where} ORDER BY date DESC, created_at DESC;"
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, *args)
            return [Attendance(**record) for record in records]

    async def count_attendance_by_status(self, student_id: UUID) -> Dict[str, int]:
        """Bir öğrencinin yoklamalarını duruma göre sayar, örn. {'Present': 3, 'Absent': 1}."""
        query = "SELECT status, count(*) AS total FROM attendance WHERE student_id = $1 GROUP BY status;"
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, student_id)
            return {record["status"]: record["total"] for record in records}

    async def count_attendance_by_day(self, date_from: date, date_to: date) -> List[Dict[str, Any]]:
        """[date_from, date_to] aralığındaki her gün ve durum için kayıt sayısını döndürür."""
        query = """
            SELECT date, status, count(*) AS total
            FROM attendance
            WHERE date >= $1 AND date <= $2
            GROUP BY date, status;
        """
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, date_from, date_to)
            return [dict(record) for record in records]

    # ===== Payments =====

    async def add_payment(self, student_id: UUID, month: str, amount: float,
                          paid_date: Optional[datetime] = None) -> Payment:
        query = """
            INSERT INTO payments (student_id, month, amount, paid_date)
            VALUES ($1, $2, $3, COALESCE($4, now()))
            RETURNING *;
        """
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, student_id, month, amount, paid_date)
            return Payment(**record)

    async def get_payment(self, payment_id: UUID) -> Optional[Payment]:
        query = "SELECT * FROM payments WHERE id = $1;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, payment_id)
            return Payment(**record) if record else None

    async def find_payments(self,
                            student_id: Optional[UUID] = None,
                            month: Optional[str] = None,
                            paid_from: Optional[datetime] = None,
                            paid_before: Optional[datetime] = None,
                            limit: Optional[int] = None) -> List[Payment]:
        """
        Filtrelere uyan ödemeleri ödeme tarihine göre azalan sırada getirir.
        Ödeme tarihi aralığı yarı açıktır: [paid_from, paid_before).
        """
        conditions = []
        if student_id is not None:
            conditions.append(("student_id =", student_id))
        if month is not None:
            conditions.append(("month =", month))
        if paid_from is not None:
            conditions.append(("paid_date >=", paid_from))
        if paid_before is not None:
            conditions.append(("paid_date <", paid_before))
        where, args = _build_where(conditions)
        query = f"SELECT * FROM payments {where} ORDER BY paid_date DESC, created_at DESC"
        if limit is not None:
            args.append(limit)
            query += f" LIMIT ${len(args)}"
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query + ";", *args)
            return [Payment(**record) for record in records]

    async def sum_payments(self, paid_from: datetime, paid_before: datetime) -> float:
        """[paid_from, paid_before) aralığındaki ödemelerin toplamı."""
        query = "SELECT COALESCE(sum(amount), 0) FROM payments WHERE paid_date >= $1 AND paid_date < $2;"
        async with self._pool.acquire() as connection:
            return float(await connection.fetchval(query, paid_from, paid_before))

    async def update_payment(self, payment_id: UUID, fields: Dict[str, Any]) -> Optional[Payment]:
        if not fields:
            return await self.get_payment(payment_id)
        assignments, args = _build_set(fields, PAYMENT_UPDATABLE_COLUMNS, first_index=2)
        query = f"UPDATE payments SET {assignments} WHERE id = $1 RETURNING *;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, payment_id, *args)
            return Payment(**record) if record else None

    async def delete_payment(self, payment_id: UUID) -> bool:
        async with self._pool.acquire() as connection:
            status = await connection.execute("DELETE FROM payments WHERE id = $1;", payment_id)
            return _affected_rows(status) > 0
