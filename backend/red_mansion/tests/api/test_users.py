from fastapi.testclient import TestClient

from red_mansion.core.config import settings

API = settings.API_V1_STR


def test_health_check(client: TestClient) -> None:
    response = client.get(f"{API}/utils/health-check/")
    assert response.status_code == 200
    assert response.json() is True


def test_provider_status_hides_keys(client: TestClient) -> None:
    response = client.get(f"{API}/utils/providers/")
    assert response.status_code == 200
    body = response.json()
    assert body["llm_model"] == settings.MODEL_DEFAULT
    assert "PERPLEXITYAI_API_KEY" not in body


def test_signup_login_and_read_me(client: TestClient) -> None:
    response = client.post(
        f"{API}/users/signup",
        json={"email": "daiyu@example.com", "password": "xiaoxiang-guan", "full_name": "林黛玉"},
    )
    assert response.status_code == 200
    created = response.json()
    assert created["email"] == "daiyu@example.com"
    assert created["current_chapter"] == 1
    assert "hashed_password" not in created

    response = client.post(
        f"{API}/login/access-token",
        data={"username": "daiyu@example.com", "password": "xiaoxiang-guan"},
    )
    assert response.status_code == 200
    headers = {"Authorization": f"Bearer {response.json()['access_token']}"}

    response = client.get(f"{API}/users/me", headers=headers)
    assert response.status_code == 200
    assert response.json()["full_name"] == "林黛玉"

    response = client.patch(f"{API}/users/me", headers=headers, json={"current_chapter": 27})
    assert response.status_code == 200
    assert response.json()["current_chapter"] == 27


def test_signup_rejects_duplicate_email(client: TestClient) -> None:
    response = client.post(
        f"{API}/users/signup",
        json={"email": settings.FIRST_SUPERUSER, "password": "another-password"},
    )
    assert response.status_code == 400


def test_login_rejects_wrong_password(client: TestClient) -> None:
    response = client.post(
        f"{API}/login/access-token",
        data={"username": settings.FIRST_SUPERUSER, "password": "wrong-password"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Incorrect email or password"


def test_me_requires_valid_token(client: TestClient) -> None:
    assert client.get(f"{API}/users/me").status_code == 401
    response = client.get(f"{API}/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 403


def test_chapter_out_of_range_is_rejected(client: TestClient, auth_headers: dict[str, str]) -> None:
    response = client.patch(f"{API}/users/me", headers=auth_headers, json={"current_chapter": 121})
    assert response.status_code == 422
