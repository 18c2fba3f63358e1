"""Tests for the quiz catalog and admin endpoints."""

from fastapi.testclient import TestClient

from quizmentor.models import UserRole
from tests.conftest import API


QUIZ_PAYLOAD = {
    "title": "Photosynthesis",
    "description": "Plant biology basics",
    "language": "sinhala",
    "difficultyLevel": 2,
    "tags": ["biology"],
}


def test_student_cannot_create_quiz(client: TestClient, student: dict) -> None:
    response = client.post(f"{API}/quizzes/", json=QUIZ_PAYLOAD, headers=student["headers"])

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "AUTHORIZATION_ERROR"


def test_teacher_creates_and_reads_quiz(client: TestClient, student: dict, set_role) -> None:
    set_role(student["user"]["id"], UserRole.TEACHER)

    created = client.post(f"{API}/quizzes/", json=QUIZ_PAYLOAD, headers=student["headers"])

    assert created.status_code == 201
    quiz = created.json()
    assert quiz["title"] == "Photosynthesis"
    assert quiz["language"] == "sinhala"
    assert quiz["difficultyLevel"] == 2
    assert quiz["timeLimit"] == 30
    assert quiz["passingScore"] == 70.0
    assert quiz["createdBy"] == student["user"]["id"]

    fetched = client.get(f"{API}/quizzes/{quiz['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["title"] == "Photosynthesis"


def test_create_quiz_validates_difficulty(client: TestClient, student: dict, set_role) -> None:
    set_role(student["user"]["id"], UserRole.ADMIN)

    response = client.post(
        f"{API}/quizzes/", json={**QUIZ_PAYLOAD, "difficultyLevel": 9}, headers=student["headers"]
    )
    assert response.status_code == 400


def test_list_quizzes_filters(client: TestClient, make_quiz) -> None:
    make_quiz(title="Easy", difficulty_level=1)
    make_quiz(title="Hard", difficulty_level=5)

    everything = client.get(f"{API}/quizzes/")
    hard_only = client.get(f"{API}/quizzes/", params={"difficultyLevel": 5})

    assert [q["title"] for q in everything.json()] == ["Easy", "Hard"]
    assert [q["title"] for q in hard_only.json()] == ["Hard"]


def test_get_missing_quiz(client: TestClient) -> None:
    response = client.get(f"{API}/quizzes/777")

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Quiz not found"


def test_admin_deactivates_user_who_then_cannot_login(
    client: TestClient, register_user, set_role
) -> None:
    admin = register_user(email="admin@example.com")
    set_role(admin["user"]["id"], UserRole.ADMIN)
    target = register_user(email="learner@example.com", password="secret123")

    response = client.put(
        f"{API}/admin/users/{target['user']['id']}/status",
        json={"isActive": False},
        headers={"Authorization": f"Bearer {admin['token']}"},
    )

    assert response.status_code == 200
    assert response.json()["message"] == "User deactivated"
    assert response.json()["user"]["isActive"] is False
    assert set(response.json()) == {"message", "user"}

    login = client.post(
        f"{API}/user/login", json={"email": "learner@example.com", "password": "secret123"}
    )
    assert login.status_code == 403

    client.put(
        f"{API}/admin/users/{target['user']['id']}/status",
        json={"isActive": True},
        headers={"Authorization": f"Bearer {admin['token']}"},
    )
    login = client.post(
        f"{API}/user/login", json={"email": "learner@example.com", "password": "secret123"}
    )
    assert login.status_code == 200


def test_non_admin_cannot_change_status(client: TestClient, student: dict) -> None:
    response = client.put(
        f"{API}/admin/users/{student['user']['id']}/status",
        json={"isActive": False},
        headers=student["headers"],
    )
    assert response.status_code == 403


def test_admin_status_for_missing_user(client: TestClient, student: dict, set_role) -> None:
    set_role(student["user"]["id"], UserRole.ADMIN)

    response = client.put(
        f"{API}/admin/users/5555/status", json={"isActive": False}, headers=student["headers"]
    )
    assert response.status_code == 404
