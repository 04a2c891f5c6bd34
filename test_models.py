from datetime import datetime, timedelta

import pytest

from app.models import Employee, format_employee_id
from conftest import make_task, make_user


def test_completed_date_is_set_once(db, admin, employee):
    task = make_task(db, employee, admin)
    assert task.completed_date is None

    task.status = "completed"
    db.commit()
    first_completion = task.completed_date
    assert first_completion is not None

    task.status = "pending"
    db.commit()
    assert task.completed_date == first_completion

    task.status = "completed"
    db.commit()
    assert task.completed_date == first_completion


def test_updated_at_refreshes_on_save(db, admin, employee):
    task = make_task(db, employee, admin)
    before = task.updated_at

    task.title = "Renamed"
    db.commit()

    assert task.updated_at >= before
    assert task.created_at <= task.updated_at


def test_is_overdue(db, admin, employee):
    past = datetime.utcnow() - timedelta(hours=1)
    assert make_task(db, employee, admin, deadline=past).is_overdue is True
    assert make_task(db, employee, admin, deadline=past, status="completed").is_overdue is False
    assert make_task(db, employee, admin).is_overdue is False


def test_employee_id_is_assigned_on_insert_and_immutable(db):
    user = make_user(db, "Eve", "eve@example.com")
    profile = db.query(Employee).filter(Employee.user_id == user.id).one()

    assert profile.employee_id == format_employee_id(profile.id)

    with pytest.raises(ValueError):
        profile.employee_id = "EMP9999"


def test_format_employee_id():
    assert format_employee_id(1) == "EMP0001"
    assert format_employee_id(42) == "EMP0042"
    assert format_employee_id(12345) == "EMP12345"


def test_rating_bounds(db):
    user = make_user(db, "Frank", "frank@example.com")
    profile = db.query(Employee).filter(Employee.user_id == user.id).one()

    with pytest.raises(ValueError):
        profile.rating = 6
