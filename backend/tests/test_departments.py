"""Tests for /api/departments."""

from app.models.department import Department


class TestListDepartments:
    def test_requires_authentication(self, client):
        assert client.get("/api/departments").status_code == 401

    def test_any_user_can_list_sorted_by_name(self, client, alice, make_department):
        _, headers = alice
        for name in ("Operations", "Finance", "IT"):
            make_department(name)

        response = client.get("/api/departments", headers=headers)

        assert response.status_code == 200
        assert [d["name"] for d in response.json()["departments"]] == ["Finance", "IT", "Operations"]


class TestCreateDepartment:
    def test_admin_creates_trimmed_name(self, client, admin, count_rows):
        _, headers = admin

        response = client.post("/api/departments", headers=headers, json={"name": "  Research  "})

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert len(data["departments"]) == 1
        assert data["departments"][0]["name"] == "Research"
        assert count_rows(Department, Department.name == "Research") == 1

    def test_regular_user_is_forbidden(self, client, alice, count_rows):
        _, headers = alice

        response = client.post("/api/departments", headers=headers, json={"name": "Research"})

        assert response.status_code == 403
        assert response.json()["message"] == "Only admins can create departments"
        assert count_rows(Department) == 0

    def test_blank_name(self, client, admin):
        _, headers = admin
        response = client.post("/api/departments", headers=headers, json={"name": "   "})

        assert response.status_code == 400
        assert response.json()["message"] == "Department name is required"

    def test_duplicate_name(self, client, admin, make_department, count_rows):
        _, headers = admin
        make_department("Finance")

        response = client.post("/api/departments", headers=headers, json={"name": "Finance"})

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to create department"
        assert count_rows(Department) == 1


class TestDepartmentById:
    def test_get_is_admin_only(self, client, admin, alice, make_department):
        d = make_department("Finance")

        assert client.get(f"/api/departments/{d.id}", headers=alice[1]).status_code == 403

        response = client.get(f"/api/departments/{d.id}", headers=admin[1])
        assert response.status_code == 200
        assert response.json()["department"]["name"] == "Finance"

    def test_get_missing(self, client, admin):
        response = client.get("/api/departments/999", headers=admin[1])

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Department not found"}

    def test_rename(self, client, admin, make_department):
        d = make_department("Finance")

        response = client.put(f"/api/departments/{d.id}", headers=admin[1], json={"name": " Accounting "})

        assert response.status_code == 200
        assert response.json()["department"]["name"] == "Accounting"

    def test_rename_requires_a_name(self, client, admin, make_department):
        d = make_department("Finance")
        assert client.put(f"/api/departments/{d.id}", headers=admin[1], json={}).status_code == 400

    def test_rename_missing(self, client, admin):
        assert client.put("/api/departments/999", headers=admin[1], json={"name": "X"}).status_code == 404


class TestDeleteDepartment:
    def test_delete_unused(self, client, admin, make_department, count_rows):
        d = make_department("Finance")

        response = client.delete(f"/api/departments/{d.id}", headers=admin[1])

        assert response.status_code == 200
        assert response.json()["message"] == "Department deleted successfully"
        assert count_rows(Department) == 0

    def test_delete_missing(self, client, admin):
        assert client.delete("/api/departments/999", headers=admin[1]).status_code == 404

    def test_in_use_by_a_user(self, client, admin, make_user, make_department, count_rows):
        d = make_department("Finance")
        make_user("dana@example.com", department_id=d.id)

        response = client.delete(f"/api/departments/{d.id}", headers=admin[1])

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot delete department: it is assigned to one or more users"
        assert count_rows(Department) == 1

    def test_in_use_by_an_asset(self, client, admin, alice, make_asset, make_department, count_rows):
        d = make_department("Finance")
        make_asset(alice[0], department_obj=d)

        response = client.delete(f"/api/departments/{d.id}", headers=admin[1])

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot delete department: it is assigned to one or more assets"
        assert count_rows(Department, Department.id == d.id) == 1

    def test_regular_user_is_forbidden(self, client, alice, make_department):
        d = make_department("Finance")
        assert client.delete(f"/api/departments/{d.id}", headers=alice[1]).status_code == 403
