"""Tests for registration, login and profile endpoints."""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from quizmentor.core.security import password_hasher
from quizmentor.models import User
from tests.conftest import API, auth_headers


def test_register_returns_public_user_and_token(client: TestClient) -> None:
    response = client.post(
        f"{API}/user/register",
        json={"name": "Nimal", "email": "nimal@example.com", "password": "secret123"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "User registered successfully"
    assert data["token"]
    user = data["user"]
    assert user["email"] == "nimal@example.com"
    assert user["role"] == "student"
    assert user["preferredLanguage"] == "english"
    assert user["currentLevel"] == 1
    assert "password" not in user
    assert "hashedPassword" not in user


def test_register_stores_hash_not_plaintext(register_user, db_session: Session) -> None:
    register_user(email="hash@example.com", password="plaintext-pw")

    stored = db_session.query(User).filter(User.email == "hash@example.com").one()
    assert stored.hashed_password != "plaintext-pw"
    assert password_hasher.verify("plaintext-pw", stored.hashed_password)
    assert stored.is_active is True


def test_register_lowercases_email_and_accepts_language(register_user) -> None:
    body = register_user(email="  Mixed.Case@Example.COM ", preferredLanguage="tamil")

    assert body["user"]["email"] == "mixed.case@example.com"
    assert body["user"]["preferredLanguage"] == "tamil"


def test_register_duplicate_email_is_case_insensitive(client: TestClient, register_user) -> None:
    register_user(email="dup@example.com")

    response = client.post(
        f"{API}/user/register",
        json={"name": "Other", "email": "DUP@example.com", "password": "secret123"},
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "DUPLICATE_ERROR"
    assert error["message"] == "User already exists with this email"


def test_register_missing_fields_is_validation_error(client: TestClient) -> None:
    response = client.post(f"{API}/user/register", json={"email": "x@example.com"})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    fields = {e["field"] for e in error["details"]["errors"]}
    assert "body.name" in fields
    assert "body.password" in fields


def test_register_rejects_unknown_language(client: TestClient) -> None:
    response = client.post(
        f"{API}/user/register",
        json={
            "name": "A",
            "email": "lang@example.com",
            "password": "secret123",
            "preferredLanguage": "klingon",
        },
    )
    assert response.status_code == 400


def test_login_success_updates_login_stats(
    client: TestClient, register_user, db_session: Session
) -> None:
    register_user(email="login@example.com", password="secret123")

    response = client.post(
        f"{API}/user/login", json={"email": "LOGIN@example.com", "password": "secret123"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["user"]["currentLevel"] == 1
    assert data["token"]

    stored = db_session.query(User).filter(User.email == "login@example.com").one()
    assert stored.login_count == 1
    assert stored.last_login is not None


def test_login_wrong_password_and_unknown_email_look_the_same(
    client: TestClient, register_user
) -> None:
    register_user(email="someone@example.com", password="secret123")

    wrong_password = client.post(
        f"{API}/user/login", json={"email": "someone@example.com", "password": "nope-nope"}
    )
    unknown_email = client.post(
        f"{API}/user/login", json={"email": "nobody@example.com", "password": "secret123"}
    )

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json()["error"]["message"] == "Invalid credentials"
    assert unknown_email.json()["error"]["message"] == "Invalid credentials"


def test_login_deactivated_account_is_forbidden_without_counting(
    client: TestClient, register_user, db_session: Session
) -> None:
    body = register_user(email="inactive@example.com", password="secret123")
    stored = db_session.get(User, body["user"]["id"])
    stored.is_active = False
    db_session.commit()

    response = client.post(
        f"{API}/user/login", json={"email": "inactive@example.com", "password": "secret123"}
    )

    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Account has been deactivated"
    db_session.refresh(stored)
    assert stored.login_count == 0
    assert stored.last_login is None


def test_profile_requires_token(client: TestClient) -> None:
    response = client.get(f"{API}/user/profile")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_profile_rejects_garbage_token(client: TestClient) -> None:
    response = client.get(f"{API}/user/profile", headers=auth_headers("not-a-jwt"))
    assert response.status_code == 401


def test_profile_excludes_credential_and_expands_quizzes(
    client: TestClient, student: dict, make_quiz
) -> None:
    quiz = make_quiz(title="Algebra Basics", description="Linear equations")
    client.post(
        f"{API}/user/quiz-result",
        json={"quizId": quiz.id, "score": 75, "correctAnswers": 3, "incorrectTopics": []},
        headers=student["headers"],
    )

    response = client.get(f"{API}/user/profile", headers=student["headers"])

    assert response.status_code == 200
    user = response.json()["user"]
    assert "password" not in user and "hashedPassword" not in user
    assert user["email"] == "student@example.com"
    assert user["isActive"] is True
    [entry] = user["completedQuizzes"]
    assert entry["quiz"] == {"id": quiz.id, "title": "Algebra Basics", "description": "Linear equations"}
    assert entry["score"] == 75
    assert entry["attemptCount"] == 1


def test_profile_of_deleted_account_is_not_found(
    client: TestClient, student: dict, db_session: Session
) -> None:
    db_session.delete(db_session.get(User, student["user"]["id"]))
    db_session.commit()

    response = client.get(f"{API}/user/profile", headers=student["headers"])

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "User not found"


def test_update_profile_only_touches_provided_fields(client: TestClient, student: dict) -> None:
    response = client.put(
        f"{API}/user/profile",
        json={"name": "", "preferredLanguage": "sinhala", "profilePicture": "me.png"},
        headers=student["headers"],
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Profile updated successfully"
    assert data["user"]["name"] == "Test Student"
    assert data["user"]["preferredLanguage"] == "sinhala"
    assert data["user"]["profilePicture"] == "me.png"

    response = client.put(
        f"{API}/user/profile", json={"name": "Renamed"}, headers=student["headers"]
    )
    assert response.json()["user"]["name"] == "Renamed"
    assert response.json()["user"]["preferredLanguage"] == "sinhala"
    assert response.json()["user"]["profilePicture"] == "me.png"


def test_change_password_flow(client: TestClient, student: dict, db_session: Session) -> None:
    wrong = client.put(
        f"{API}/user/change-password",
        json={"currentPassword": "not-it", "newPassword": "brand-new-pw"},
        headers=student["headers"],
    )
    assert wrong.status_code == 401
    assert wrong.json()["error"]["message"] == "Current password is incorrect"

    response = client.put(
        f"{API}/user/change-password",
        json={"currentPassword": "secret123", "newPassword": "brand-new-pw"},
        headers=student["headers"],
    )
    assert response.status_code == 200
    assert response.json() == {"message": "Password changed successfully"}

    stored = db_session.get(User, student["user"]["id"])
    assert stored.hashed_password != "brand-new-pw"

    old_login = client.post(
        f"{API}/user/login", json={"email": "student@example.com", "password": "secret123"}
    )
    new_login = client.post(
        f"{API}/user/login", json={"email": "student@example.com", "password": "brand-new-pw"}
    )
    assert old_login.status_code == 401
    assert new_login.status_code == 200
