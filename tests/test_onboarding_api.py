def test_get_onboarding(client, auth_headers):
    response = client.get("/api/onboarding", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {
        "name": "Jeanne Uwase",
        "email": "jeanne@butaro.rw",
        "province": "Northern",
        "district": "Burera",
        "hospital": "BUTARO HOSPITAL",
    }


def test_update_onboarding(client, auth_headers):
    response = client.put(
        "/api/onboarding",
        json={"province": "Southern", "district": "Nyamagabe", "hospital": "KIGEME Hospital"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["hospital"] == "KIGEME Hospital"
    assert client.get("/api/auth/me", headers=auth_headers).json()["district"] == "Nyamagabe"


def test_update_onboarding_rejects_mismatch(client, auth_headers):
    response = client.put(
        "/api/onboarding",
        json={"province": "Northern", "district": "Burera", "hospital": "KIGEME Hospital"},
        headers=auth_headers,
    )

    assert response.status_code == 422
    assert list(response.json()["detail"]["errors"]) == ["hospital"]
    assert client.get("/api/onboarding", headers=auth_headers).json()["hospital"] == "BUTARO HOSPITAL"


def test_facility_context(client, auth_headers):
    response = client.get("/api/onboarding/facility", headers=auth_headers)

    body = response.json()
    assert body["facility_name"] == "BUTARO HOSPITAL"
    assert body["facility_type"] == "Hospital"
    assert body["district"] == "Burera"
    assert body["programs"] == ["HIV", "MALARIA", "TB"]
    assert len(body["health_centers"]["HIV"]) == 6
    assert body["health_centers"]["TB"] == []


def test_onboarding_requires_auth(client):
    assert client.get("/api/onboarding").status_code == 401
