# app/routers/tasks.py
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from app.config.settings import AppConfig
from app.database import get_db
from app.models import Employee, Task, TaskAttachment, TaskComment, TaskStatus, User, UserRole
from app.schemas import (
    ApiResponse,
    CalendarTaskOut,
    CommentCreate,
    PaginatedResponse,
    TaskCreate,
    TaskOut,
    TaskStats,
    TaskUpdate,
)
from app.schemas.common import to_naive_utc
from app.schemas.task import TaskPriority as PriorityParam, TaskStatus as StatusParam
from app.services import email_service
from app.utils.access import can_view_task, like_pattern, page_count, require_admin, scope_task_query
from app.utils.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])

TREND_WINDOW_DAYS = 7


def _task_query(db: Session):
    """Task query with assignee, assigner and comment authors loaded"""
    return db.query(Task).options(
        joinedload(Task.assigned_to),
        joinedload(Task.assigned_by),
        selectinload(Task.comments).joinedload(TaskComment.user),
        selectinload(Task.attachments),
    )


def _get_task_or_404(db: Session, task_id: int) -> Task:
    task = _task_query(db).filter(Task.id == task_id).first()
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


def _get_assignable_employee(db: Session, user_id: int) -> User:
    """Tasks can only go to existing users with the employee role"""
    user = db.query(User).filter(User.id == user_id).first()
    if not user or user.role != UserRole.EMPLOYEE.value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid employee ID")
    return user


def _parse_range_bound(value: Optional[str], name: str, end_of_day: bool = False) -> datetime:
    if not value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="startDate and endDate are required",
        )
    try:
        parsed = to_naive_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {name}: {value}",
        )
    # A bare date as the upper bound covers that whole day
    if end_of_day and len(value) == 10:
        parsed = parsed + timedelta(days=1) - timedelta(microseconds=1)
    return parsed


def _attachments(items) -> List[TaskAttachment]:
    return [TaskAttachment(filename=item.filename, url=item.url) for item in items]


@router.get("", response_model=PaginatedResponse[TaskOut])
def get_all_tasks(
    status_filter: Optional[StatusParam] = Query(None, alias="status"),
    priority: Optional[PriorityParam] = None,
    assigned_to: Optional[int] = Query(None, alias="assignedTo"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(
        AppConfig.PAGINATION["default_page_size"],
        ge=1,
    ),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get tasks, newest first

    - ADMIN: every task, optionally filtered by assignee
    - EMPLOYEE: only tasks assigned to them, whatever the filters say
    """
    limit = min(limit, AppConfig.PAGINATION["max_page_size"])
    try:
        query = scope_task_query(db.query(Task), current_user)

        # Apply filters
        if status_filter:
            query = query.filter(Task.status == status_filter.value)
        if priority:
            query = query.filter(Task.priority == priority.value)
        if assigned_to is not None and current_user.is_admin:
            query = query.filter(Task.assigned_to_id == assigned_to)
        if search:
            pattern = like_pattern(search)
            query = query.filter(
                or_(
                    Task.title.ilike(pattern, escape="\\"),
                    Task.description.ilike(pattern, escape="\\"),
                )
            )

        total = query.count()
        tasks = (
            query.options(
                joinedload(Task.assigned_to),
                joinedload(Task.assigned_by),
                selectinload(Task.comments).joinedload(TaskComment.user),
                selectinload(Task.attachments),
            )
            .order_by(Task.created_at.desc(), Task.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "success": True,
            "count": len(tasks),
            "total": total,
            "pages": page_count(total, limit),
            "current_page": page,
            "data": tasks,
        }
    except Exception:
        logger.exception("Get tasks error")
        raise HTTPException(status_code=500, detail="Error fetching tasks")


@router.get("/stats/overview", response_model=ApiResponse[TaskStats])
def get_task_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Counts by status, overdue count, completion rate, priority split and 7 day trend"""
    try:
        def scoped(*entities):
            return scope_task_query(db.query(*entities), current_user)

        total_tasks = scoped(Task).count()
        completed_tasks = scoped(Task).filter(Task.status == TaskStatus.COMPLETED.value).count()
        pending_tasks = scoped(Task).filter(Task.status == TaskStatus.PENDING.value).count()
        in_progress_tasks = scoped(Task).filter(Task.status == TaskStatus.IN_PROGRESS.value).count()
        cancelled_tasks = scoped(Task).filter(Task.status == TaskStatus.CANCELLED.value).count()

        now = datetime.utcnow()
        overdue_tasks = scoped(Task).filter(
            Task.status != TaskStatus.COMPLETED.value,
            Task.deadline < now,
        ).count()

        priority_rows = (
            scoped(Task.priority, func.count(Task.id))
            .group_by(Task.priority)
            .order_by(Task.priority)
            .all()
        )

        day = func.date(Task.created_at)
        trend_rows = (
            scoped(day.label("day"), Task.status, func.count(Task.id))
            .filter(Task.created_at >= now - timedelta(days=TREND_WINDOW_DAYS))
            .group_by(day, Task.status)
            .order_by(day, Task.status)
            .all()
        )

        completion_rate = f"{completed_tasks / total_tasks * 100:.2f}" if total_tasks > 0 else 0

        return {
            "success": True,
            "data": {
                "total_tasks": total_tasks,
                "completed_tasks": completed_tasks,
                "pending_tasks": pending_tasks,
                "in_progress_tasks": in_progress_tasks,
                "cancelled_tasks": cancelled_tasks,
                "overdue_tasks": overdue_tasks,
                "completion_rate": completion_rate,
                "priority_stats": [
                    {"priority": priority, "count": count} for priority, count in priority_rows
                ],
                "task_trends": [
                    {"date": str(day_value), "status": task_status, "count": count}
                    for day_value, task_status, count in trend_rows
                ],
            },
        }
    except Exception:
        logger.exception("Get task stats error")
        raise HTTPException(status_code=500, detail="Error fetching task statistics")


@router.get("/calendar/view", response_model=ApiResponse[List[CalendarTaskOut]])
def get_calendar_tasks(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Tasks whose deadline falls inside [startDate, endDate]"""
    start = _parse_range_bound(start_date, "startDate")
    end = _parse_range_bound(end_date, "endDate", end_of_day=True)
    if start > end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="startDate must not be after endDate",
        )

    try:
        tasks = (
            scope_task_query(db.query(Task), current_user)
            .options(joinedload(Task.assigned_to))
            .filter(Task.deadline >= start, Task.deadline <= end)
            .order_by(Task.deadline)
            .all()
        )
        return {"success": True, "data": tasks}
    except Exception:
        logger.exception("Get calendar tasks error")
        raise HTTPException(status_code=500, detail="Error fetching calendar tasks")


@router.get("/{task_id}", response_model=ApiResponse[TaskOut])
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get a specific task by ID"""
    try:
        task = _get_task_or_404(db, task_id)

        # Employees can only look at their own tasks
        if not can_view_task(current_user, task):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to view this task",
            )

        return {"success": True, "data": task}
    except HTTPException:
        raise
    except Exception:
        logger.exception("Get task error")
        raise HTTPException(status_code=500, detail="Error fetching task")


@router.post("", response_model=ApiResponse[TaskOut], status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Create a task and email the assignee in the background"""
    try:
        assignee = _get_assignable_employee(db, task.assigned_to)

        db_task = Task(
            title=task.title,
            description=task.description,
            assigned_to_id=assignee.id,
            assigned_by_id=current_user.id,
            priority=task.priority.value,
            deadline=task.deadline,
            start_date=task.start_date or datetime.utcnow(),
            tags=task.tags,
            attachments=_attachments(task.attachments),
        )

        db.add(db_task)
        db.commit()

        logger.info(f"Task {db_task.id} created and assigned to user {assignee.id}")

        # Don't fail the task creation if notification fails
        email_service.dispatch_task_notification(
            assignee.email,
            {
                "task_title": db_task.title,
                "assigned_by": current_user.name,
                "deadline": db_task.deadline,
                "priority": db_task.priority,
            },
            task_id=db_task.id,
        )

        return {
            "success": True,
            "message": "Task created successfully",
            "data": _get_task_or_404(db, db_task.id),
        }
    except HTTPException:
        raise
    except Exception:
        db.rollback()
        logger.exception("Create task error")
        raise HTTPException(status_code=500, detail="Error creating task")


@router.put("/{task_id}", response_model=ApiResponse[TaskOut])
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update a task

    Employees may only move the status of their own tasks; admins may
    change any field.
    """
    try:
        task = db.query(Task).filter(Task.id == task_id).first()
        if not task:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

        if current_user.is_admin:
            _apply_admin_update(db, task, task_update)
            db.commit()
        else:
            if task.assigned_to_id != current_user.id:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Not authorized to update this task",
                )
            if task_update.status is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Employees can only update the task status",
                )

            old_status = task.status
            new_status = task_update.status.value
            task.status = new_status

            # Count the completion on the employee profile
            if new_status == TaskStatus.COMPLETED.value and old_status != TaskStatus.COMPLETED.value:
                db.query(Employee).filter(Employee.user_id == task.assigned_to_id).update(
                    {Employee.tasks_completed: Employee.tasks_completed + 1},
                    synchronize_session=False,
                )

            db.commit()

            if new_status != old_status:
                _notify_assigner(db, task, current_user)

        logger.info(f"Task {task.id} updated by user {current_user.id}")
        return {
            "success": True,
            "message": "Task updated successfully",
            "data": _get_task_or_404(db, task.id),
        }
    except HTTPException:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception("Update task error")
        raise HTTPException(status_code=500, detail="Error updating task")


def _apply_admin_update(db: Session, task: Task, task_update: TaskUpdate) -> None:
    update_data = task_update.model_dump(exclude_unset=True)

    if update_data.get("assigned_to") is not None and update_data["assigned_to"] != task.assigned_to_id:
        task.assigned_to_id = _get_assignable_employee(db, update_data["assigned_to"]).id
    update_data.pop("assigned_to", None)

    if "attachments" in update_data:
        update_data.pop("attachments")
        if task_update.attachments is not None:
            task.attachments = _attachments(task_update.attachments)

    for key, value in update_data.items():
        # Required columns can't be cleared
        if value is None:
            continue
        if hasattr(value, "value"):
            value = value.value
        setattr(task, key, value)


def _notify_assigner(db: Session, task: Task, updated_by: User) -> None:
    assigner = db.query(User).filter(User.id == task.assigned_by_id).first()
    if not assigner:
        logger.warning(f"Task {task.id} assigner {task.assigned_by_id} not found, skipping notification")
        return
    email_service.dispatch_task_update_notification(
        assigner.email,
        {
            "task_title": task.title,
            "status": task.status,
            "updated_by": updated_by.name,
        },
    )


@router.delete("/{task_id}", response_model=ApiResponse[dict])
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Delete a task along with its comments and attachments"""
    try:
        task = db.query(Task).filter(Task.id == task_id).first()
        if not task:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

        db.delete(task)
        db.commit()

        logger.info(f"Task {task_id} deleted by user {current_user.id}")
        return {"success": True, "message": "Task deleted successfully"}
    except HTTPException:
        raise
    except Exception:
        db.rollback()
        logger.exception("Delete task error")
        raise HTTPException(status_code=500, detail="Error deleting task")


@router.post("/{task_id}/comments", response_model=ApiResponse[TaskOut])
def add_comment(
    task_id: int,
    comment: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Append a comment; any authenticated user may comment"""
    try:
        task = db.query(Task).filter(Task.id == task_id).first()
        if not task:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

        task.comments.append(TaskComment(user_id=current_user.id, text=comment.text))
        task.updated_at = datetime.utcnow()
        db.commit()

        return {
            "success": True,
            "message": "Comment added successfully",
            "data": _get_task_or_404(db, task_id),
        }
    except HTTPException:
        raise
    except Exception:
        db.rollback()
        logger.exception("Add comment error")
        raise HTTPException(status_code=500, detail="Error adding comment")
