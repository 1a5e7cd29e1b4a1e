import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    Boolean,
    ForeignKey,
    Integer,
    Float,
    JSON,
    UniqueConstraint,
    Text,
    CheckConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship, Mapped, mapped_column

from ..db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def uuid_pk() -> Mapped[uuid.UUID]:
    return mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = uuid_pk()
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    # Plaintext; password_hash is the legacy column and mirrors password
    password: Mapped[Optional[str]] = mapped_column(String(255))
    password_hash: Mapped[Optional[str]] = mapped_column(String(255))
    full_name: Mapped[Optional[str]] = mapped_column(String(255))
    position: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    contact_number: Mapped[Optional[str]] = mapped_column(String(50))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    employee_id: Mapped[Optional[str]] = mapped_column(String(50))
    address: Mapped[Optional[str]] = mapped_column(String(500))
    bio: Mapped[Optional[str]] = mapped_column(Text)
    department: Mapped[Optional[str]] = mapped_column(String(100))
    hire_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = uuid_pk()
    project_name: Mapped[Optional[str]] = mapped_column(String(255))
    client_name: Mapped[Optional[str]] = mapped_column(String(255))
    client_contact: Mapped[Optional[str]] = mapped_column(String(255))
    building_address: Mapped[Optional[str]] = mapped_column(String(500))
    work_type: Mapped[Optional[str]] = mapped_column(String(100))
    scope_of_work: Mapped[Optional[str]] = mapped_column(Text)
    project_cost: Mapped[Optional[str]] = mapped_column(String(100))  # free-form, e.g. "Php 120,000"
    deadline_date: Mapped[Optional[str]] = mapped_column(String(50))
    files: Mapped[Optional[list]] = mapped_column(JSON)
    tasks: Mapped[Optional[list]] = mapped_column(JSON)  # legacy inline task list
    last_edited_by: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    task_items = relationship(
        "ProjectTask",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProjectTask.order_index",
    )


class ProjectTask(Base):
    __tablename__ = "project_tasks"

    id: Mapped[uuid.UUID] = uuid_pk()
    project_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_finished: Mapped[bool] = mapped_column(Boolean, default=False)
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    project = relationship("Project", back_populates="task_items")


class Billing(Base):
    __tablename__ = "billing"

    id: Mapped[uuid.UUID] = uuid_pk()
    date: Mapped[Optional[str]] = mapped_column(String(50), index=True)
    sales_invoice_number: Mapped[Optional[str]] = mapped_column(String(100))
    bs_number: Mapped[Optional[str]] = mapped_column(String(100))
    quote_number: Mapped[Optional[str]] = mapped_column(String(100))
    description: Mapped[Optional[str]] = mapped_column(Text)
    address: Mapped[Optional[str]] = mapped_column(String(500))
    amount: Mapped[float] = mapped_column(Float, default=0)
    payment: Mapped[Optional[str]] = mapped_column(String(100))
    check_info: Mapped[Optional[str]] = mapped_column(String(255))
    check_number: Mapped[Optional[str]] = mapped_column(String(100))
    payment_date: Mapped[Optional[str]] = mapped_column(String(50))
    status: Mapped[str] = mapped_column(String(50), default="Not Paid")
    last_edited_by: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class Quotation(Base):
    __tablename__ = "quotations"

    id: Mapped[uuid.UUID] = uuid_pk()
    quotation_number: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    date: Mapped[Optional[str]] = mapped_column(String(50))
    valid_until: Mapped[Optional[str]] = mapped_column(String(50))
    client_name: Mapped[Optional[str]] = mapped_column(String(255))
    job_description: Mapped[Optional[str]] = mapped_column(Text)
    client_contact: Mapped[Optional[str]] = mapped_column(String(255))
    installation_address: Mapped[Optional[str]] = mapped_column(String(500))
    attention: Mapped[Optional[str]] = mapped_column(String(255))
    total_due: Mapped[Optional[str]] = mapped_column(String(100))
    terms: Mapped[Optional[list]] = mapped_column(JSON)
    terms_template: Mapped[str] = mapped_column(String(50), default="template1")
    items: Mapped[Optional[list]] = mapped_column(JSON)  # [{description, quantity, price, ...}]
    status: Mapped[str] = mapped_column(String(50), default="Draft")
    created_by: Mapped[Optional[str]] = mapped_column(String(255))
    last_edited_by: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class QuoteRequest(Base):
    __tablename__ = "quote_requests"

    id: Mapped[uuid.UUID] = uuid_pk()
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(50), nullable=False)
    project_type: Mapped[str] = mapped_column(String(100), nullable=False)
    project_location: Mapped[str] = mapped_column(String(500), nullable=False)
    estimated_budget: Mapped[Optional[str]] = mapped_column(String(100))
    project_details: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="pending", index=True)  # pending|reviewed|contacted|...
    reviewed_by: Mapped[Optional[str]] = mapped_column(String(255))
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class TaskReminder(Base):
    __tablename__ = "task_reminders"

    id: Mapped[uuid.UUID] = uuid_pk()
    project_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id", ondelete="SET NULL"), index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    reminder_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    reminder_time: Mapped[str] = mapped_column(String(8), nullable=False)  # HH:MM or HH:MM:SS
    deadline: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    priority: Mapped[str] = mapped_column(String(20), default="medium")  # low|medium|high
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)  # pending|completed|cancelled
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    project = relationship("Project")
    creator = relationship("User", foreign_keys=[created_by])
    tags = relationship(
        "TaskReminderTag",
        back_populates="reminder",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    completions = relationship(
        "TaskReminderCompletion",
        back_populates="reminder",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class TaskReminderTag(Base):
    __tablename__ = "task_reminder_tags"
    __table_args__ = (
        CheckConstraint(
            "(user_id IS NULL) <> (position IS NULL)",
            name="ck_task_reminder_tag_target",
        ),
    )

    id: Mapped[uuid.UUID] = uuid_pk()
    task_reminder_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("task_reminders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    position: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    reminder = relationship("TaskReminder", back_populates="tags")
    user = relationship("User")


class TaskReminderCompletion(Base):
    __tablename__ = "task_reminder_completions"
    __table_args__ = (
        UniqueConstraint("task_reminder_id", "user_id", name="uq_task_reminder_completion"),
    )

    id: Mapped[uuid.UUID] = uuid_pk()
    task_reminder_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("task_reminders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    reminder = relationship("TaskReminder", back_populates="completions")
    user = relationship("User")
