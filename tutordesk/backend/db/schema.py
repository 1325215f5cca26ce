import logging
import asyncpg

logger = logging.getLogger(__name__)

# gen_random_uuid() is built in from PostgreSQL 13 on.
SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS students (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        name TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE,
        phone TEXT NOT NULL,
        address TEXT NOT NULL,
        joined_date TIMESTAMPTZ NOT NULL DEFAULT now(),
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS attendance (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        student_id UUID NOT NULL REFERENCES students (id),
        date DATE NOT NULL,
        status TEXT NOT NULL CHECK (status IN ('Present', 'Absent')),
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS attendance_student_day_uq ON attendance (student_id, date);",
    """
    CREATE TABLE IF NOT EXISTS payments (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        student_id UUID NOT NULL REFERENCES students (id),
        month TEXT NOT NULL,
        amount DOUBLE PRECISION NOT NULL CHECK (amount >= 0),
        paid_date TIMESTAMPTZ NOT NULL DEFAULT now(),
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    """,
    "CREATE INDEX IF NOT EXISTS payments_student_month_idx ON payments (student_id, month);",
    "CREATE INDEX IF NOT EXISTS payments_paid_date_idx ON payments (paid_date);",
]


async def create_schema(pool: asyncpg.Pool):
    """Tabloları ve indeksleri oluşturur. Tekrar çalıştırılması güvenlidir."""
    async with pool.acquire() as connection:
        async with connection.transaction():
            for statement in SCHEMA_STATEMENTS:
                await connection.execute(statement)
    logger.info("Veritabanı şeması hazır.")
