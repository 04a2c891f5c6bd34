from app.config.settings import AppConfig
from app.models import Employee, Task, User
from app.utils.security import verify_password
from conftest import auth_headers, make_task, make_user


def _create(client, admin, **overrides):
    payload = {
        "name": "New Hire",
        "email": "hire@example.com",
        "password": "welcome1",
        "department": "Engineering",
        "position": "Backend Developer",
        "phone": "555-0100",
        "skills": ["python", "sql"],
    }
    payload.update(overrides)
    return client.post("/employees", json=payload, headers=auth_headers(admin))


def test_create_employee(client, admin, db):
    response = _create(client, admin, role="admin", address={"city": "Pune", "zipCode": "411001"})

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["role"] == "employee"
    assert data["employeeId"] == "EMP0001"
    assert data["position"] == "Backend Developer"
    assert "hashedPassword" not in data

    user = db.query(User).filter(User.email == "hire@example.com").one()
    assert verify_password("welcome1", user.hashed_password)
    profile = db.query(Employee).filter(Employee.user_id == user.id).one()
    assert profile.skills == ["python", "sql"]
    assert profile.city == "Pune"
    assert profile.zip_code == "411001"
    assert profile.tasks_completed == 0


def test_employee_ids_are_sequential_and_never_reused(client, admin, db):
    ids = [
        _create(client, admin, email=f"hire{i}@example.com").json()["data"]["employeeId"]
        for i in range(3)
    ]
    assert ids == ["EMP0001", "EMP0002", "EMP0003"]

    last = db.query(Employee).filter(Employee.employee_id == "EMP0003").one()
    assert client.delete(f"/employees/{last.user_id}", headers=auth_headers(admin)).status_code == 200

    next_id = _create(client, admin, email="hire9@example.com").json()["data"]["employeeId"]
    assert next_id == "EMP0004"


def test_create_employee_duplicate_email(client, admin, db):
    _create(client, admin)
    response = _create(client, admin, name="Someone Else")

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "User already exists with this email"}
    assert db.query(User).filter(User.email == "hire@example.com").count() == 1


def test_create_employee_validation(client, admin):
    response = _create(client, admin, email="not-an-email")
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_employee_routes_are_admin_only(client, employee):
    headers = auth_headers(employee)
    assert client.get("/employees", headers=headers).status_code == 403
    assert client.get("/employees/stats/overview", headers=headers).status_code == 403
    assert _create(client, employee).status_code == 403
    assert client.put(f"/employees/{employee.id}", json={"name": "X"}, headers=headers).status_code == 403
    assert client.delete(f"/employees/{employee.id}", headers=headers).status_code == 403


def test_list_employees_with_counts(client, admin, employee, other_employee, db):
    make_task(db, employee, admin, status="completed")
    make_task(db, employee, admin)
    make_task(db, other_employee, admin)

    body = client.get("/employees", headers=auth_headers(admin)).json()

    assert body["total"] == 2
    assert body["pages"] == 1
    assert body["currentPage"] == 1
    by_email = {item["email"]: item for item in body["data"]}
    assert "admin@example.com" not in by_email
    bob = by_email["bob@example.com"]
    assert bob["taskCount"] == 2
    assert bob["completedTasks"] == 1
    assert bob["position"] == "Developer"
    assert bob["employeeId"].startswith("EMP")


def test_list_employees_filters(client, admin, employee, other_employee):
    headers = auth_headers(admin)

    by_search = client.get("/employees", params={"search": "CAROL"}, headers=headers).json()
    assert [e["name"] for e in by_search["data"]] == ["Carol Coder"]

    by_department = client.get("/employees", params={"department": "Engineering"}, headers=headers).json()
    assert [e["name"] for e in by_department["data"]] == ["Bob Builder"]

    paged = client.get("/employees", params={"limit": 1, "page": 2}, headers=headers).json()
    assert paged["count"] == 1
    assert paged["pages"] == 2


def test_list_employees_clamps_limit(client, admin, employee, other_employee, monkeypatch):
    monkeypatch.setitem(AppConfig.PAGINATION, "max_page_size", 1)

    response = client.get("/employees", params={"limit": 500}, headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.json()["count"] == 1
    assert response.json()["pages"] == 2


def test_get_employee_detail(client, admin, employee, other_employee, db):
    make_task(db, employee, admin, title="first")
    make_task(db, employee, admin, title="second")
    make_task(db, other_employee, admin, title="not bob's")

    response = client.get(f"/employees/{employee.id}", headers=auth_headers(other_employee))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["email"] == "bob@example.com"
    assert data["employeeDetails"]["position"] == "Developer"
    assert data["employeeDetails"]["skills"] == ["python"]
    assert [t["title"] for t in data["tasks"]] == ["second", "first"]
    assert data["tasks"][0]["assignedBy"]["email"] == "admin@example.com"


def test_get_missing_employee(client, admin):
    response = client.get("/employees/999", headers=auth_headers(admin))
    assert response.status_code == 404
    assert response.json()["message"] == "Employee not found"


def test_update_employee(client, admin, employee, db):
    response = client.put(
        f"/employees/{employee.id}",
        json={
            "name": "Robert Builder",
            "isActive": False,
            "position": "Lead Developer",
            "skills": ["go"],
            "address": {"street": "1 Main St"},
        },
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Robert Builder"
    assert data["isActive"] is False
    assert data["employeeDetails"]["position"] == "Lead Developer"
    assert data["employeeDetails"]["address"]["street"] == "1 Main St"

    db.expire_all()
    profile = db.query(Employee).filter(Employee.user_id == employee.id).one()
    assert profile.skills == ["go"]
    assert profile.phone is None


def test_update_employee_email_conflict(client, admin, employee, other_employee):
    response = client.put(
        f"/employees/{employee.id}",
        json={"email": "carol@example.com"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400

    assert client.put("/employees/999", json={"name": "Ghost"}, headers=auth_headers(admin)).status_code == 404


def test_delete_employee_cancels_all_tasks(client, admin, employee, other_employee, db):
    make_task(db, employee, admin, status="completed")
    make_task(db, employee, admin, status="in-progress")
    make_task(db, employee, admin, status="cancelled")
    make_task(db, employee, admin)
    user_id = employee.id
    make_task(db, other_employee, admin)

    response = client.delete(f"/employees/{employee.id}", headers=auth_headers(admin))

    assert response.status_code == 200
    db.expire_all()
    assert db.get(User, user_id) is None
    assert db.query(Employee).filter(Employee.user_id == user_id).count() == 0

    statuses = [t.status for t in db.query(Task).filter(Task.assigned_to_id == user_id)]
    assert statuses == ["cancelled"] * 4
    assert db.query(Task).filter(Task.assigned_to_id == other_employee.id).one().status == "pending"

    # the cancelled tasks are still listed, without an expanded assignee
    listed = client.get("/tasks", params={"assignedTo": user_id}, headers=auth_headers(admin)).json()
    assert listed["total"] == 4
    assert all(task["assignedTo"] is None for task in listed["data"])


def test_delete_missing_employee(client, admin):
    assert client.delete("/employees/999", headers=auth_headers(admin)).status_code == 404


def test_employee_stats(client, admin, db):
    make_user(db, "E1", "e1@example.com", department="Sales")
    make_user(db, "E2", "e2@example.com", department="Sales", is_active=False)
    make_user(db, "E3", "e3@example.com", department="HR")
    make_user(db, "E4", "e4@example.com", department="Sales")

    data = client.get("/employees/stats/overview", headers=auth_headers(admin)).json()["data"]

    assert data["totalEmployees"] == 4
    assert data["activeEmployees"] == 3
    assert data["inactiveEmployees"] == 1
    assert data["departmentStats"] == [
        {"department": "Sales", "count": 3},
        {"department": "HR", "count": 1},
    ]


def test_add_review_updates_rating(client, admin, employee):
    headers = auth_headers(admin)

    client.post(f"/employees/{employee.id}/reviews", json={"rating": 4, "comment": "Solid"}, headers=headers)
    response = client.post(f"/employees/{employee.id}/reviews", json={"rating": 3.5}, headers=headers)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["rating"] == 3.75
    assert [r["rating"] for r in data["reviews"]] == [4, 3.5]
    assert data["reviews"][0]["reviewedBy"]["email"] == "admin@example.com"


def test_add_review_validation(client, admin, employee):
    headers = auth_headers(admin)
    assert client.post(f"/employees/{employee.id}/reviews", json={"rating": 7}, headers=headers).status_code == 400
    assert client.post(f"/employees/{admin.id}/reviews", json={"rating": 3}, headers=headers).status_code == 404
