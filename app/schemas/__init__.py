from .common import ApiModel, ApiResponse, PaginatedResponse
from .user import UserLogin, UserBrief, UserOut, Token
from .task import TaskCreate, TaskUpdate, TaskOut, TaskStatus, TaskPriority, CommentCreate, CommentOut, AttachmentIn, AttachmentOut, CalendarTaskOut, TaskStats, PriorityCount, TrendPoint
from .employee import Address, EmployeeCreate, EmployeeUpdate, EmployeeProfileOut, EmployeeSummary, EmployeeDetail, EmployeeStats, DepartmentCount, ReviewCreate, ReviewOut
