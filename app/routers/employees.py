# app/routers/employees.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from app.config.settings import AppConfig
from app.database import get_db
from app.models import Employee, PerformanceReview, Task, TaskStatus, User, UserRole
from app.schemas import (
    ApiResponse,
    EmployeeCreate,
    EmployeeDetail,
    EmployeeStats,
    EmployeeSummary,
    EmployeeUpdate,
    EmployeeProfileOut,
    PaginatedResponse,
    ReviewCreate,
)
from app.schemas.user import UserOut
from app.utils.access import like_pattern, page_count, require_admin
from app.utils.auth import get_current_user
from app.utils.security import hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])

PROFILE_FIELDS = ("position", "phone", "skills")
USER_FIELDS = ("name", "email", "department", "is_active")


def _user_fields(user: User) -> dict:
    return UserOut.model_validate(user).model_dump()


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    return user


def _apply_address(employee: Employee, address) -> None:
    if address is None:
        return
    for key, value in address.model_dump(exclude_unset=True).items():
        setattr(employee, key, value)


@router.get("", response_model=PaginatedResponse[EmployeeSummary])
def get_all_employees(
    search: Optional[str] = None,
    department: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(
        AppConfig.PAGINATION["default_page_size"],
        ge=1,
    ),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """List employees with their profile ID, position and task counters"""
    limit = min(limit, AppConfig.PAGINATION["max_page_size"])
    try:
        query = db.query(User).filter(User.role == UserRole.EMPLOYEE.value)

        if search:
            pattern = like_pattern(search)
            query = query.filter(
                or_(
                    User.name.ilike(pattern, escape="\\"),
                    User.email.ilike(pattern, escape="\\"),
                )
            )
        if department:
            query = query.filter(User.department == department)

        total = query.count()
        users = (
            query.order_by(User.created_at.desc(), User.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        # Get employee details
        employees = []
        for user in users:
            profile = db.query(Employee).filter(Employee.user_id == user.id).first()
            task_count = db.query(Task).filter(Task.assigned_to_id == user.id).count()
            completed_tasks = db.query(Task).filter(
                Task.assigned_to_id == user.id,
                Task.status == TaskStatus.COMPLETED.value,
            ).count()

            employees.append({
                **_user_fields(user),
                "employee_id": profile.employee_id if profile else None,
                "position": profile.position if profile else None,
                "task_count": task_count,
                "completed_tasks": completed_tasks,
            })

        return {
            "success": True,
            "count": len(employees),
            "total": total,
            "pages": page_count(total, limit),
            "current_page": page,
            "data": employees,
        }
    except Exception:
        logger.exception("Get employees error")
        raise HTTPException(status_code=500, detail="Error fetching employees")


@router.get("/stats/overview", response_model=ApiResponse[EmployeeStats])
def get_employee_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Headcount and department breakdown"""
    try:
        employees = db.query(User).filter(User.role == UserRole.EMPLOYEE.value)
        total_employees = employees.count()
        active_employees = employees.filter(User.is_active == True).count()

        count = func.count(User.id)
        department_rows = (
            db.query(User.department, count)
            .filter(User.role == UserRole.EMPLOYEE.value)
            .group_by(User.department)
            .order_by(count.desc(), User.department)
            .all()
        )

        return {
            "success": True,
            "data": {
                "total_employees": total_employees,
                "active_employees": active_employees,
                "inactive_employees": total_employees - active_employees,
                "department_stats": [
                    {"department": department, "count": dept_count}
                    for department, dept_count in department_rows
                ],
            },
        }
    except Exception:
        logger.exception("Get employee stats error")
        raise HTTPException(status_code=500, detail="Error fetching employee statistics")


@router.get("/{user_id}", response_model=ApiResponse[EmployeeDetail])
def get_employee(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """User fields, employee profile and every task assigned to the user"""
    try:
        user = _get_user_or_404(db, user_id)

        profile = (
            db.query(Employee)
            .options(selectinload(Employee.reviews).joinedload(PerformanceReview.reviewed_by))
            .filter(Employee.user_id == user.id)
            .first()
        )
        tasks = (
            db.query(Task)
            .options(joinedload(Task.assigned_to), joinedload(Task.assigned_by))
            .filter(Task.assigned_to_id == user.id)
            .order_by(Task.created_at.desc(), Task.id.desc())
            .all()
        )

        return {
            "success": True,
            "data": {
                **_user_fields(user),
                "employee_details": profile,
                "tasks": tasks,
            },
        }
    except HTTPException:
        raise
    except Exception:
        logger.exception("Get employee error")
        raise HTTPException(status_code=500, detail="Error fetching employee")


@router.post("", response_model=ApiResponse[EmployeeSummary], status_code=status.HTTP_201_CREATED)
def create_employee(
    employee: EmployeeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Create the user account and its employee profile together"""
    try:
        # Check if email already exists
        existing_user = db.query(User).filter(User.email == employee.email).first()
        if existing_user:
            raise HTTPException(status_code=400, detail="User already exists with this email")

        db_user = User(
            name=employee.name,
            email=employee.email,
            hashed_password=hash_password(employee.password),
            role=UserRole.EMPLOYEE.value,
            department=employee.department,
        )
        db.add(db_user)
        db.flush()

        profile = Employee(
            user_id=db_user.id,
            position=employee.position,
            phone=employee.phone,
            skills=employee.skills,
        )
        _apply_address(profile, employee.address)
        db.add(profile)

        # User and profile land in the same transaction
        db.commit()
        db.refresh(db_user)

        logger.info(f"Employee {profile.employee_id} created for user {db_user.id}")
        return {
            "success": True,
            "message": "Employee created successfully",
            "data": {
                **_user_fields(db_user),
                "employee_id": profile.employee_id,
                "position": profile.position,
            },
        }
    except HTTPException:
        raise
    except Exception:
        db.rollback()
        logger.exception("Create employee error")
        raise HTTPException(status_code=500, detail="Error creating employee")


@router.put("/{user_id}", response_model=ApiResponse[EmployeeDetail])
def update_employee(
    user_id: int,
    employee_update: EmployeeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Update account fields and profile fields independently"""
    try:
        db_user = _get_user_or_404(db, user_id)
        update_data = employee_update.model_dump(exclude_unset=True)

        # Check if email already exists for another user
        new_email = update_data.get("email")
        if new_email and new_email != db_user.email:
            existing_user = db.query(User).filter(User.email == new_email, User.id != user_id).first()
            if existing_user:
                raise HTTPException(status_code=400, detail="Email already registered")

        for field in USER_FIELDS:
            if field in update_data and update_data[field] is not None:
                setattr(db_user, field, update_data[field])

        profile = db.query(Employee).filter(Employee.user_id == user_id).first()
        if profile:
            for field in PROFILE_FIELDS:
                if field in update_data and update_data[field] is not None:
                    setattr(profile, field, update_data[field])
            _apply_address(profile, employee_update.address)

        db.commit()
        db.refresh(db_user)

        logger.info(f"Employee user {user_id} updated")
        return {
            "success": True,
            "message": "Employee updated successfully",
            "data": {
                **_user_fields(db_user),
                "employee_details": profile,
            },
        }
    except HTTPException:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception("Update employee error")
        raise HTTPException(status_code=500, detail="Error updating employee")


@router.delete("/{user_id}", response_model=ApiResponse[dict])
def delete_employee(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Remove profile and account; their tasks are cancelled, not deleted"""
    try:
        db_user = _get_user_or_404(db, user_id)

        profile = db.query(Employee).filter(Employee.user_id == user_id).first()
        if profile:
            db.delete(profile)
            db.flush()

        db.delete(db_user)

        cancelled = (
            db.query(Task)
            .filter(
                Task.assigned_to_id == user_id,
                Task.status != TaskStatus.CANCELLED.value,
            )
            .update({Task.status: TaskStatus.CANCELLED.value}, synchronize_session=False)
        )

        db.commit()

        logger.info(f"Employee user {user_id} deleted, {cancelled} tasks cancelled")
        return {"success": True, "message": "Employee deleted successfully"}
    except HTTPException:
        raise
    except Exception:
        db.rollback()
        logger.exception("Delete employee error")
        raise HTTPException(status_code=500, detail="Error deleting employee")


@router.post("/{user_id}/reviews", response_model=ApiResponse[EmployeeProfileOut], status_code=status.HTTP_201_CREATED)
def add_review(
    user_id: int,
    review: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Record a performance review; the rating becomes the average of all reviews"""
    try:
        profile = db.query(Employee).filter(Employee.user_id == user_id).first()
        if not profile:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")

        profile.reviews.append(
            PerformanceReview(
                reviewed_by_id=current_user.id,
                rating=review.rating,
                comment=review.comment,
            )
        )
        ratings = [r.rating for r in profile.reviews]
        profile.rating = round(sum(ratings) / len(ratings), 2)

        db.commit()
        db.refresh(profile)

        return {"success": True, "message": "Review added successfully", "data": profile}
    except HTTPException:
        raise
    except Exception:
        db.rollback()
        logger.exception("Add review error")
        raise HTTPException(status_code=500, detail="Error adding review")
