"""SQLite schema for services, schedules, tasks and payments (code-first approach)."""

import logging

from src.core import db_client


logger = logging.getLogger(__name__)


TABLES: dict[str, str] = {
    "users": """CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        email TEXT NOT NULL UNIQUE,
        role TEXT NOT NULL CHECK (role IN ('worker', 'payer', 'operator')),
        stripe_customer_id TEXT
    )""",
    "profiles": """CREATE TABLE IF NOT EXISTS profiles (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        user_id INTEGER NOT NULL UNIQUE REFERENCES users(id),
        first_name TEXT,
        last_name TEXT,
        referral_code TEXT UNIQUE,
        referred_by INTEGER REFERENCES users(id)
    )""",
    "homes": """CREATE TABLE IF NOT EXISTS homes (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        owner_id INTEGER NOT NULL REFERENCES users(id),
        name TEXT NOT NULL,
        stripe_subscription_id TEXT
    )""",
    "services": """CREATE TABLE IF NOT EXISTS services (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        home_id INTEGER NOT NULL REFERENCES homes(id),
        worker_id INTEGER REFERENCES users(id),
        name TEXT NOT NULL,
        plan_type TEXT CHECK (plan_type IN ('single_can', 'double_can', 'triple_can')),
        frequency TEXT NOT NULL CHECK (frequency IN ('weekly', 'biweekly', 'monthly', 'onetime')),
        price_per_task TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'active' CHECK (status IN ('active', 'paused', 'cancelled')),
        start_date TEXT NOT NULL,
        end_date TEXT
    )""",
    "service_pickup_days": """CREATE TABLE IF NOT EXISTS service_pickup_days (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        service_id INTEGER NOT NULL REFERENCES services(id) ON DELETE CASCADE,
        day_of_week TEXT NOT NULL,
        can_number INTEGER NOT NULL CHECK (can_number BETWEEN 1 AND 3)
    )""",
    "tasks": """CREATE TABLE IF NOT EXISTS tasks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        service_id INTEGER NOT NULL REFERENCES services(id),
        scheduled_date TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending'
            CHECK (status IN ('pending', 'completed', 'missed', 'cancelled')),
        completed_at TEXT,
        photo_url TEXT,
        notes TEXT,
        can_number INTEGER CHECK (can_number BETWEEN 1 AND 3),
        price_per_task TEXT NOT NULL
    )""",
    "payments": """CREATE TABLE IF NOT EXISTS payments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        worker_id INTEGER NOT NULL REFERENCES users(id),
        amount TEXT NOT NULL,
        type TEXT NOT NULL DEFAULT 'task_completion',
        status TEXT NOT NULL DEFAULT 'pending' CHECK (status IN ('pending', 'paid', 'failed')),
        description TEXT,
        reference_id INTEGER,
        reference_type TEXT
    )""",
}

INDEXES: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_homes_owner_id ON homes (owner_id)",
    "CREATE INDEX IF NOT EXISTS idx_services_home_id ON services (home_id)",
    "CREATE INDEX IF NOT EXISTS idx_services_worker_id ON services (worker_id)",
    "CREATE INDEX IF NOT EXISTS idx_pickup_days_service_id ON service_pickup_days (service_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_service_date ON tasks (service_id, scheduled_date)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks (status)",
    "CREATE INDEX IF NOT EXISTS idx_payments_worker_id ON payments (worker_id)",
]


async def init_db(*, db_path: str | None = None) -> None:
    """Create every table and index if missing."""
    async with db_client.transaction(db_path=db_path) as tx:
        for table_name, ddl in TABLES.items():
            await tx.execute(ddl)
            logger.debug("Ensured table", extra={"table": table_name})
        for index_sql in INDEXES:
            await tx.execute(index_sql)

    logger.info("Database schema initialized", extra={"tables": list(TABLES)})
