# tests/test_scheme_routes.py
# Scheme catalog management and recommendation endpoints

from datetime import datetime, timedelta, timezone

from app.services.mongo_service import SCHEMES, STUDENTS, USERS
from conftest import scheme_document


def new_scheme_payload(**overrides):
    payload = {
        "name": "Post Matric Scholarship",
        "description": "Support for post-matric studies",
        "type": "Scholarship",
        "department": "Department of Social Justice",
        "eligibility_criteria": {"min_cgpa": 6, "max_cgpa": 10, "min_attendance": 75},
        "application_end_date": (datetime.now(timezone.utc) + timedelta(days=60)).isoformat(),
    }
    payload.update(overrides)
    return payload


def seed_student(fake_mongo, **fields):
    data = {"name": "Asha", "email": "asha@x.edu", "course": "B.Tech CSE",
            "semester": 5, "cgpa": 8, "attendance": 90, "is_active": True}
    data.update(fields)
    return fake_mongo.seed(STUDENTS, **data)


def test_admin_creates_scheme(client, admin_headers):
    response = client.post("/api/schemes/", json=new_scheme_payload(), headers=admin_headers)
    assert response.status_code == 201
    assert response.json()["data"]["is_active"] is True

    duplicate = client.post("/api/schemes/", json=new_scheme_payload(), headers=admin_headers)
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Scheme with this name already exists"


def test_create_rejects_inverted_cgpa_bounds(client, admin_headers):
    payload = new_scheme_payload(eligibility_criteria={"min_cgpa": 9, "max_cgpa": 5})
    response = client.post("/api/schemes/", json=payload, headers=admin_headers)
    assert response.status_code == 422

    scheme_id = client.post("/api/schemes/", json=new_scheme_payload(), headers=admin_headers).json()["data"]["id"]
    response = client.put(f"/api/schemes/{scheme_id}", json={"eligibility_criteria": {"min_cgpa": 9, "max_cgpa": 5}},
                          headers=admin_headers)
    assert response.status_code == 422


def test_non_admin_cannot_create(client, auth_headers):
    response = client.post("/api/schemes/", json=new_scheme_payload(), headers=auth_headers("student"))
    assert response.status_code == 403


def test_list_active_schemes_by_type(client, fake_mongo, auth_headers):
    fake_mongo.seed(SCHEMES, **scheme_document("Scholarship A"))
    fake_mongo.seed(SCHEMES, **scheme_document("Loan B", type="Loan"))
    fake_mongo.seed(SCHEMES, **scheme_document("Closed", is_active=False))

    headers = auth_headers("student")
    body = client.get("/api/schemes/", headers=headers).json()
    assert sorted(s["name"] for s in body["data"]) == ["Loan B", "Scholarship A"]

    loans = client.get("/api/schemes/?type=Loan", headers=headers).json()
    assert [s["name"] for s in loans["data"]] == ["Loan B"]


def test_soft_delete_removes_scheme_from_recommendations(client, fake_mongo, admin_headers):
    scheme_id = fake_mongo.seed(SCHEMES, **scheme_document("Merit"))
    student_id = seed_student(fake_mongo)

    before = client.get(f"/api/schemes/recommended/{student_id}", headers=admin_headers).json()
    assert before["count"] == 1

    assert client.delete(f"/api/schemes/{scheme_id}", headers=admin_headers).status_code == 200
    assert fake_mongo.collections[SCHEMES][0]["is_active"] is False

    after = client.get(f"/api/schemes/recommended/{student_id}", headers=admin_headers).json()
    assert after["count"] == 0


def test_recommended_schemes_are_ranked(client, fake_mongo, auth_headers):
    fake_mongo.seed(SCHEMES, **scheme_document("Scheme 77"))
    fake_mongo.seed(SCHEMES, **scheme_document(
        "Scheme 90", eligibility_criteria={"min_cgpa": 4, "max_cgpa": 10, "min_attendance": 50}
    ))
    fake_mongo.seed(SCHEMES, **scheme_document(
        "ECE Only", eligibility_criteria={"min_cgpa": 0, "max_cgpa": 10, "courses": ["B.Tech ECE"]}
    ))
    student_id = seed_student(fake_mongo)
    headers = auth_headers("student")

    recommended = client.get(f"/api/schemes/recommended/{student_id}", headers=headers).json()
    assert [s["name"] for s in recommended["data"]] == ["Scheme 90", "Scheme 77"]

    matches = client.get(f"/api/schemes/matches/{student_id}", headers=headers).json()
    assert [(m["scheme"]["name"], m["match_score"]) for m in matches["data"]] == [
        ("Scheme 90", 90), ("Scheme 77", 77)
    ]


def test_recommendations_for_unknown_student(client, admin_headers):
    response = client.get("/api/schemes/recommended/0123456789abcdef01234567", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Student not found"

    response = client.get("/api/schemes/matches/nope", headers=admin_headers)
    assert response.status_code == 400


def test_eligibility_explanation(client, fake_mongo, admin_headers):
    scheme_id = fake_mongo.seed(SCHEMES, **scheme_document(
        "CSE Only", eligibility_criteria={"min_cgpa": 6, "max_cgpa": 10, "min_attendance": 75,
                                          "courses": ["B.Tech CSE"]}
    ))
    eligible = seed_student(fake_mongo)
    other = seed_student(fake_mongo, email="ravi@x.edu", course="B.Tech ECE")

    data = client.get(f"/api/schemes/{scheme_id}/eligibility/{eligible}", headers=admin_headers).json()["data"]
    assert data["eligible"] is True
    assert data["match_score"] == 77
    assert data["reason"] == "All criteria met"

    data = client.get(f"/api/schemes/{scheme_id}/eligibility/{other}", headers=admin_headers).json()["data"]
    assert data["eligible"] is False
    assert data["reason"] == "Course not eligible"


def test_get_scheme(client, fake_mongo, admin_headers):
    scheme_id = fake_mongo.seed(SCHEMES, **scheme_document("Merit"))
    assert client.get(f"/api/schemes/{scheme_id}", headers=admin_headers).json()["data"]["name"] == "Merit"

    missing = client.get("/api/schemes/0123456789abcdef01234567", headers=admin_headers)
    assert missing.status_code == 404
    assert missing.json()["message"] == "Scheme not found"


def test_institution_matching_is_limited_to_own_students(client, fake_mongo, auth_headers):
    """Institution users cannot read eligibility data of another institution's students"""
    scheme_id = fake_mongo.seed(SCHEMES, **scheme_document("Scheme 77"))
    headers = auth_headers("institution")
    own_institution = str(next(u["_id"] for u in fake_mongo.collections[USERS] if u["role"] == "institution"))

    own = seed_student(fake_mongo, institution=own_institution)
    foreign = seed_student(fake_mongo, email="ravi@x.edu", institution="another-institution")

    assert client.get(f"/api/schemes/matches/{own}", headers=headers).json()["count"] == 1

    for url in (
        f"/api/schemes/recommended/{foreign}",
        f"/api/schemes/matches/{foreign}",
        f"/api/schemes/{scheme_id}/eligibility/{foreign}",
    ):
        response = client.get(url, headers=headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Student not found"
