from conftest import BUTARO_USER, login, register


def test_register_returns_user_without_password(client):
    response = register(client, email="Jeanne@Butaro.rw")

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "jeanne@butaro.rw"
    assert body["hospital"] == "BUTARO HOSPITAL"
    assert body["is_active"] is True
    assert "password_hash" not in body


def test_register_duplicate_email_conflicts(client):
    assert register(client).status_code == 201
    assert register(client, name="Someone Else").status_code == 409


def test_register_rejects_inconsistent_location(client):
    response = register(client, district="Musanze")

    assert response.status_code == 422
    assert "hospital" in response.json()["detail"]["errors"]


def test_register_rejects_short_password(client):
    assert register(client, password="123").status_code == 422


def test_login_and_me(client, auth_headers):
    response = client.get("/api/auth/me", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["name"] == BUTARO_USER["name"]


def test_login_is_case_insensitive_on_email(client):
    register(client)
    assert login(client, email="JEANNE@BUTARO.RW").status_code == 200


def test_login_wrong_password(client):
    register(client)
    response = login(client, password="wrong-password")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_login_unknown_user(client):
    assert login(client, email="nobody@example.com").status_code == 401


def test_refresh_issues_a_new_token(client, auth_headers):
    response = client.post("/api/auth/refresh", headers=auth_headers)

    assert response.status_code == 200
    token = response.json()["access_token"]
    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 200


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401
