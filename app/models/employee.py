# app/models/employee.py
from sqlalchemy import Column, Integer, String, Float, Text, DateTime, ForeignKey, JSON, event, update
from sqlalchemy.orm import relationship, validates
from sqlalchemy.orm.attributes import set_committed_value
from datetime import datetime
from app.database import Base

EMPLOYEE_ID_PREFIX = "EMP"


def format_employee_id(sequence: int) -> str:
    """EMP0001, EMP0002, ... (wider once past 9999)"""
    return f"{EMPLOYEE_ID_PREFIX}{sequence:04d}"


class Employee(Base):
    __tablename__ = "employees"
    # AUTOINCREMENT keeps SQLite from reusing ids of deleted rows
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    employee_id = Column(String, unique=True, index=True, nullable=True)
    position = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    # Address
    street = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)

    skills = Column(JSON, default=list, nullable=False)
    rating = Column(Float, default=0, nullable=False)
    tasks_completed = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="employee")
    reviews = relationship(
        "PerformanceReview",
        back_populates="employee",
        cascade="all, delete-orphan",
        order_by="PerformanceReview.id",
    )

    @validates("employee_id")
    def validate_employee_id(self, key, value):
        if self.employee_id is not None and value != self.employee_id:
            raise ValueError("Employee ID cannot be changed once assigned")
        return value

    @validates("rating")
    def validate_rating(self, key, value):
        if value is not None and not 0 <= value <= 5:
            raise ValueError("Rating must be between 0 and 5")
        return value

    @property
    def address(self):
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
        }


@event.listens_for(Employee, "after_insert")
def assign_employee_id(mapper, connection, target):
    """Derive the human readable ID from the primary key on first save"""
    if target.employee_id:
        return
    employee_id = format_employee_id(target.id)
    connection.execute(
        update(Employee.__table__)
        .where(Employee.__table__.c.id == target.id)
        .values(employee_id=employee_id)
    )
    set_committed_value(target, "employee_id", employee_id)


class PerformanceReview(Base):
    __tablename__ = "performance_reviews"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    reviewed_by_id = Column(Integer, nullable=True)
    rating = Column(Float, nullable=False)
    comment = Column(Text, nullable=True)
    date = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    employee = relationship("Employee", back_populates="reviews")
    reviewed_by = relationship(
        "User",
        primaryjoin="foreign(PerformanceReview.reviewed_by_id) == User.id",
        viewonly=True,
    )
