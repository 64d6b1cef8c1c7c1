# tests/test_teacher_routes.py
# Teacher listing, stats and admin management

from datetime import datetime, timezone

from app.services.mongo_service import TEACHERS


def seed_teachers(fake_mongo):
    fake_mongo.seed(TEACHERS, name="Anita Rao", email="anita@x.edu", apar_id="APAR2026001",
                    department="Computer Science", designation="Professor",
                    rating=4.5, publications=30, is_active=True)
    fake_mongo.seed(TEACHERS, name="Ravi Kumar", email="ravi@x.edu", apar_id="APAR2026002",
                    department="Physics", designation="Lecturer",
                    rating=3.5, publications=5, is_active=True)
    fake_mongo.seed(TEACHERS, name="Old Timer", email="old@x.edu", apar_id="APAR2026003",
                    department="Physics", rating=5.0, publications=100, is_active=False)


def test_list_sorted_by_rating_with_initials(client, fake_mongo, auth_headers):
    seed_teachers(fake_mongo)

    body = client.get("/api/teachers/", headers=auth_headers("student")).json()
    assert body["count"] == 2
    assert [t["name"] for t in body["data"]] == ["Anita Rao", "Ravi Kumar"]
    assert body["data"][0]["initials"] == "AR"


def test_list_filters(client, fake_mongo, admin_headers):
    seed_teachers(fake_mongo)

    by_department = client.get("/api/teachers/?department=physics", headers=admin_headers).json()
    assert [t["name"] for t in by_department["data"]] == ["Ravi Kumar"]

    by_search = client.get("/api/teachers/?search=APAR2026001", headers=admin_headers).json()
    assert [t["name"] for t in by_search["data"]] == ["Anita Rao"]

    by_designation = client.get("/api/teachers/?designation=Lecturer", headers=admin_headers).json()
    assert by_designation["count"] == 1


def test_teacher_stats(client, fake_mongo, admin_headers):
    seed_teachers(fake_mongo)

    data = client.get("/api/teachers/stats", headers=admin_headers).json()["data"]
    assert data == {
        "total": 2,
        "avg_rating": "4.00",
        "avg_publications": 18,
        "by_department": {"Computer Science": 1, "Physics": 1},
    }


def test_create_teacher_generates_apar_id(client, admin_headers):
    payload = {"name": "Meera Iyer", "email": "Meera@x.edu", "department": "Mathematics"}
    response = client.post("/api/teachers/", json=payload, headers=admin_headers)
    assert response.status_code == 201

    data = response.json()["data"]
    assert data["apar_id"] == f"APAR{datetime.now(timezone.utc).year}001"
    assert data["email"] == "meera@x.edu"
    assert data["initials"] == "MI"

    duplicate = client.post("/api/teachers/", json=payload, headers=admin_headers)
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Teacher with this email or APAR ID already exists"


def test_teacher_management_is_admin_only(client, auth_headers):
    payload = {"name": "Meera Iyer", "email": "meera@x.edu", "department": "Mathematics"}
    response = client.post("/api/teachers/", json=payload, headers=auth_headers("institution"))
    assert response.status_code == 403


def test_update_get_and_delete_teacher(client, fake_mongo, admin_headers):
    teacher_id = fake_mongo.seed(TEACHERS, name="Anita Rao", email="anita@x.edu",
                                 department="CS", rating=4.0, is_active=True)

    updated = client.put(f"/api/teachers/{teacher_id}", json={"rating": 4.8}, headers=admin_headers)
    assert updated.json()["data"]["rating"] == 4.8

    fetched = client.get(f"/api/teachers/{teacher_id}", headers=admin_headers).json()
    assert fetched["data"]["initials"] == "AR"

    assert client.delete(f"/api/teachers/{teacher_id}", headers=admin_headers).status_code == 200
    assert client.get("/api/teachers/", headers=admin_headers).json()["count"] == 0

    missing = client.get("/api/teachers/0123456789abcdef01234567", headers=admin_headers)
    assert missing.status_code == 404
    assert missing.json()["message"] == "Teacher not found"
