from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, JSON
from sqlalchemy.orm import relationship, validates
from app.database import Base
import enum
from datetime import datetime


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False)

    # User references are kept without a FK constraint so tasks outlive
    # their assignee (employee deletion cancels tasks, it doesn't drop them)
    assigned_to_id = Column(Integer, nullable=False, index=True)
    assigned_by_id = Column(Integer, nullable=False)

    # Task properties
    priority = Column(String, default=TaskPriority.MEDIUM.value, nullable=False)
    status = Column(String, default=TaskStatus.PENDING.value, nullable=False, index=True)
    tags = Column(JSON, default=list, nullable=False)
    notification_sent = Column(Boolean, default=False, nullable=False)

    # Dates
    deadline = Column(DateTime, nullable=False, index=True)
    start_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    completed_date = Column(DateTime, nullable=True)

    # System dates
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    assigned_to = relationship(
        "User",
        primaryjoin="foreign(Task.assigned_to_id) == User.id",
        viewonly=True,
    )
    assigned_by = relationship(
        "User",
        primaryjoin="foreign(Task.assigned_by_id) == User.id",
        viewonly=True,
    )
    comments = relationship(
        "TaskComment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskComment.id",
    )
    attachments = relationship(
        "TaskAttachment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskAttachment.id",
    )

    @validates("status")
    def validate_status(self, key, value):
        # completed_date is stamped on the first completion and kept afterwards
        if value == TaskStatus.COMPLETED.value and self.completed_date is None:
            self.completed_date = datetime.utcnow()
        return value

    @property
    def is_overdue(self) -> bool:
        return self.status != TaskStatus.COMPLETED.value and datetime.utcnow() > self.deadline

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title}', status='{self.status}')>"


class TaskComment(Base):
    __tablename__ = "task_comments"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False)
    user_id = Column(Integer, nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    task = relationship("Task", back_populates="comments")
    user = relationship(
        "User",
        primaryjoin="foreign(TaskComment.user_id) == User.id",
        viewonly=True,
    )


class TaskAttachment(Base):
    __tablename__ = "task_attachments"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False)
    filename = Column(String(255), nullable=False)
    url = Column(String(500), nullable=False)
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    task = relationship("Task", back_populates="attachments")
