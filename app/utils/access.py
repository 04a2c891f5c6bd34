# app/utils/access.py
from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Query

from app.models import Task, User, UserRole
from app.utils.auth import get_current_user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Route guard: only admins get past this dependency"""
    if current_user.role != UserRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"User role {current_user.role} is not authorized to access this route",
        )
    return current_user


def scope_task_query(query: Query, current_user: User) -> Query:
    """Employees only ever see tasks assigned to them"""
    if current_user.role == UserRole.ADMIN.value:
        return query
    return query.filter(Task.assigned_to_id == current_user.id)


def can_view_task(current_user: User, task: Task) -> bool:
    return current_user.role == UserRole.ADMIN.value or task.assigned_to_id == current_user.id


def like_pattern(term: str) -> str:
    """Case-insensitive substring pattern with LIKE wildcards escaped"""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def page_count(total: int, limit: int) -> int:
    return (total + limit - 1) // limit if limit else 0
