from .user import User, UserRole
from .employee import Employee, PerformanceReview, format_employee_id
from .task import Task, TaskComment, TaskAttachment, TaskStatus, TaskPriority
