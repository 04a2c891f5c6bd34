# app/schemas/task.py
from pydantic import Field, field_validator
from datetime import datetime
from typing import Optional, List
from enum import Enum

from app.schemas.common import ApiModel, to_naive_utc
from app.schemas.user import UserBrief


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class AttachmentIn(ApiModel):
    filename: str
    url: str


class TaskCreate(ApiModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    assigned_to: int
    priority: TaskPriority = TaskPriority.MEDIUM
    deadline: datetime
    start_date: Optional[datetime] = None
    tags: List[str] = []
    attachments: List[AttachmentIn] = []

    @field_validator("title")
    @classmethod
    def strip_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Task title is required")
        return v

    @field_validator("deadline", "start_date")
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)


class TaskUpdate(ApiModel):
    title: Optional[str] = None
    description: Optional[str] = None
    assigned_to: Optional[int] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    deadline: Optional[datetime] = None
    start_date: Optional[datetime] = None
    tags: Optional[List[str]] = None
    attachments: Optional[List[AttachmentIn]] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v):
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Task title cannot be empty")
        return v

    @field_validator("deadline", "start_date")
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)


class CommentCreate(ApiModel):
    text: str = Field(min_length=1)


# For returning task data
class CommentOut(ApiModel):
    id: int
    user_id: int
    user: Optional[UserBrief] = None
    text: str
    created_at: datetime


class AttachmentOut(ApiModel):
    id: int
    filename: str
    url: str
    uploaded_at: datetime


class TaskOut(ApiModel):
    id: int
    title: str
    description: str
    assigned_to_id: int
    assigned_to: Optional[UserBrief] = None
    assigned_by_id: int
    assigned_by: Optional[UserBrief] = None
    priority: TaskPriority
    status: TaskStatus
    deadline: datetime
    start_date: datetime
    completed_date: Optional[datetime] = None
    tags: List[str] = []
    notification_sent: bool
    is_overdue: bool
    created_at: datetime
    updated_at: datetime
    comments: List[CommentOut] = []
    attachments: List[AttachmentOut] = []


class CalendarTaskOut(ApiModel):
    id: int
    title: str
    status: TaskStatus
    priority: TaskPriority
    deadline: datetime
    assigned_to: Optional[UserBrief] = None


# Statistics
class PriorityCount(ApiModel):
    priority: str
    count: int


class TrendPoint(ApiModel):
    date: str
    status: str
    count: int


class TaskStats(ApiModel):
    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    in_progress_tasks: int
    cancelled_tasks: int
    overdue_tasks: int
    # "42.86" style string, plain 0 when there are no tasks
    completion_rate: str | int
    priority_stats: List[PriorityCount] = []
    task_trends: List[TrendPoint] = []
