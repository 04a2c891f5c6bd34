# conftest.py
import os

# Point the app at throwaway settings before anything from app/ is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ALGORITHM"] = "HS256"
os.environ["EMAIL_USER"] = ""
os.environ["EMAIL_PASSWORD"] = ""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.models import Employee, Task, User, UserRole
from app.services import email_service
from app.utils.security import create_access_token, hash_password
from main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Capture background email dispatches instead of starting threads"""
    sent = {"assigned": [], "updated": []}

    def fake_dispatch_task_notification(to, task_details, task_id=None):
        sent["assigned"].append((to, task_details, task_id))

    def fake_dispatch_task_update_notification(to, task_details):
        sent["updated"].append((to, task_details))

    monkeypatch.setattr(email_service, "dispatch_task_notification", fake_dispatch_task_notification)
    monkeypatch.setattr(email_service, "dispatch_task_update_notification", fake_dispatch_task_update_notification)
    return sent


def make_user(db, name, email, role=UserRole.EMPLOYEE.value, department="Engineering", profile=True, **kwargs):
    user = User(
        name=name,
        email=email,
        hashed_password=hash_password("secret123"),
        role=role,
        department=department,
        **kwargs,
    )
    db.add(user)
    db.flush()
    if role == UserRole.EMPLOYEE.value and profile:
        db.add(Employee(user_id=user.id, position="Developer", skills=["python"]))
    db.commit()
    db.refresh(user)
    return user


def make_task(db, assignee, assigner, title="Task", status="pending", priority="medium", deadline=None, created_at=None, **kwargs):
    task = Task(
        title=title,
        description=kwargs.pop("description", f"{title} description"),
        assigned_to_id=assignee.id,
        assigned_by_id=assigner.id,
        status=status,
        priority=priority,
        deadline=deadline or datetime.utcnow() + timedelta(days=3),
        **kwargs,
    )
    if created_at is not None:
        task.created_at = created_at
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}


@pytest.fixture()
def admin(db):
    return make_user(db, "Alice Admin", "admin@example.com", role=UserRole.ADMIN.value, department="Management")


@pytest.fixture()
def employee(db):
    return make_user(db, "Bob Builder", "bob@example.com")


@pytest.fixture()
def other_employee(db):
    return make_user(db, "Carol Coder", "carol@example.com", department="Design")
