# app/schemas/employee.py
from pydantic import EmailStr, Field
from datetime import datetime
from typing import Optional, List

from app.schemas.common import ApiModel
from app.schemas.user import UserBrief, UserOut
from app.schemas.task import TaskOut


class Address(ApiModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class EmployeeCreate(ApiModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    department: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None
    skills: List[str] = []
    address: Optional[Address] = None


class EmployeeUpdate(ApiModel):
    # User fields
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    is_active: Optional[bool] = None
    # Profile fields
    position: Optional[str] = None
    phone: Optional[str] = None
    skills: Optional[List[str]] = None
    address: Optional[Address] = None


class ReviewCreate(ApiModel):
    rating: float = Field(ge=0, le=5)
    comment: Optional[str] = None


class ReviewOut(ApiModel):
    id: int
    reviewed_by_id: Optional[int] = None
    reviewed_by: Optional[UserBrief] = None
    rating: float
    comment: Optional[str] = None
    date: datetime


class EmployeeProfileOut(ApiModel):
    id: int
    user_id: int
    employee_id: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None
    address: Address
    skills: List[str] = []
    rating: float
    reviews: List[ReviewOut] = []
    tasks_completed: int
    created_at: datetime


class EmployeeSummary(UserOut):
    """User row joined with profile fields and task counters"""
    employee_id: Optional[str] = None
    position: Optional[str] = None
    task_count: Optional[int] = None
    completed_tasks: Optional[int] = None


class EmployeeDetail(UserOut):
    employee_details: Optional[EmployeeProfileOut] = None
    tasks: List[TaskOut] = []


class DepartmentCount(ApiModel):
    department: Optional[str] = None
    count: int


class EmployeeStats(ApiModel):
    total_employees: int
    active_employees: int
    inactive_employees: int
    department_stats: List[DepartmentCount] = []
