"""
SQLite database configuration and ORM models.

This module defines the SQLAlchemy ORM models and database initialization.
"""

from datetime import datetime
from functools import lru_cache
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from workday.core.config import get_settings


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class RecurringTaskORM(Base):
    """Recurring task template ORM model."""

    __tablename__ = "recurring_tasks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    workspace_id = Column(String(36), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    category = Column(String(60), nullable=False)
    estimated_minutes = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    priority = Column(String(10), default="none")
    rule = Column(String(30), nullable=False)
    start_date = Column(Date, nullable=True)
    time_of_day = Column(String(5), nullable=True)  # HH:MM
    repeat_until = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, index=True)
    parent_template_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class DailyPlanORM(Base):
    """Daily plan ORM model."""

    __tablename__ = "daily_plans"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "workspace_id", "date", name="uq_daily_plans_user_workspace_date"
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    workspace_id = Column(String(36), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    visibility = Column(String(10), nullable=False, default="team")
    submitted = Column(Boolean, default=False)
    reviewed = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class TaskORM(Base):
    """Task ORM model."""

    __tablename__ = "tasks"
    __table_args__ = (
        # One instance per (plan, template); NULL parents are not constrained
        UniqueConstraint(
            "daily_plan_id",
            "recurrence_parent_id",
            name="uq_tasks_plan_recurrence_parent",
        ),
        Index("ix_tasks_plan_position", "daily_plan_id", "position"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    daily_plan_id = Column(
        String(36), ForeignKey("daily_plans.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(String(255), nullable=False, index=True)
    workspace_id = Column(String(36), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    category = Column(String(60), nullable=False)
    estimated_minutes = Column(Integer, nullable=True)
    actual_minutes = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default="planned", index=True)
    notes = Column(Text, nullable=True)
    priority = Column(String(10), default="none")
    due_date = Column(Date, nullable=True)
    repeat_until = Column(Date, nullable=True)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)

    # Recurrence source fields (instances leave these empty)
    recurrence_rule = Column(String(30), nullable=True)
    recurrence_time = Column(String(5), nullable=True)
    recurrence_start_date = Column(Date, nullable=True)
    recurrence_active = Column(Boolean, default=False)
    recurrence_parent_id = Column(String(36), nullable=True, index=True)

    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class TaskSubtaskORM(Base):
    """Task subtask ORM model."""

    __tablename__ = "task_subtasks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    task_id = Column(
        String(36), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(200), nullable=False)
    completed = Column(Boolean, default=False)
    estimated_minutes = Column(Integer, nullable=True)
    actual_minutes = Column(Integer, nullable=True)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class TaskAttachmentORM(Base):
    """Task attachment ORM model."""

    __tablename__ = "task_attachments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    task_id = Column(
        String(36), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    url = Column(String(2048), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


# ===========================================
# Database Session Management
# ===========================================


def build_engine(database_url: str, busy_timeout: float | None = None) -> AsyncEngine:
    """
    Create an async engine.

    SQLite engines open every transaction with BEGIN IMMEDIATE so that
    concurrent writers queue on the database lock (for up to busy_timeout
    seconds) instead of failing when a read transaction upgrades to a write.
    """
    settings = get_settings()
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_async_engine(database_url, echo=settings.DEBUG)

    timeout = busy_timeout if busy_timeout is not None else settings.DATABASE_BUSY_TIMEOUT
    engine = create_async_engine(
        database_url,
        echo=False,
        connect_args={"timeout": timeout},
    )
    file_backed = url.database not in (None, "", ":memory:")

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if file_backed:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def build_session_factory(engine: AsyncEngine):
    """Create an async session factory bound to an engine."""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@lru_cache()
def get_engine() -> AsyncEngine:
    """Get async engine instance."""
    return build_engine(get_settings().DATABASE_URL)


def get_session_factory():
    """Get async session factory."""
    return build_session_factory(get_engine())


async def init_db(engine: AsyncEngine | None = None):
    """Initialize database tables."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

