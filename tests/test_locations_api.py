def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_provinces(client):
    response = client.get("/api/locations/provinces")

    assert response.status_code == 200
    assert [item["value"] for item in response.json()] == [
        "Eastern", "Kigali", "Northern", "Southern", "Western",
    ]


def test_districts_of_province(client):
    response = client.get("/api/locations/districts", params={"province": "Kigali"})

    values = [item["value"] for item in response.json()]
    assert values == sorted(values)
    assert values.count("Gasabo") == 1


def test_districts_require_province(client):
    assert client.get("/api/locations/districts").status_code == 422


def test_hospitals_filtered_by_district(client):
    response = client.get("/api/locations/hospitals", params={"province": "Northern", "district": "Burera"})
    assert [item["value"] for item in response.json()] == ["BUTARO HOSPITAL"]


def test_hospitals_running_a_program(client):
    response = client.get("/api/locations/hospitals", params={"program": "MALARIA"})
    assert len(response.json()) == 3

    response = client.get("/api/locations/hospitals", params={"program": "POLIO"})
    assert response.status_code == 200
    assert response.json() == []


def test_all_hospitals(client):
    response = client.get("/api/locations/hospitals")
    assert len(response.json()) == 3


def test_hospital_district(client):
    assert client.get("/api/locations/hospitals/BUTARO HOSPITAL/district").json() == {
        "hospital": "BUTARO HOSPITAL",
        "district": "Burera",
    }
    assert client.get("/api/locations/hospitals/Unknown/district").json()["district"] is None


def test_facilities(client):
    response = client.get("/api/locations/facilities", params={"program": "HIV", "hospital": "BUTARO HOSPITAL"})
    assert response.json()[:2] == ["BUTARO", "Kivuye"]

    response = client.get("/api/locations/facilities", params={"program": "TB", "hospital": "BUTARO HOSPITAL"})
    assert response.json() == []


def test_programs(client):
    assert client.get("/api/locations/programs").json() == ["HIV", "MALARIA", "TB"]


def test_catalog_activities(client):
    response = client.get("/api/locations/catalog/HIV/activities")

    body = response.json()
    assert len(body) == 10
    assert body[0] == {
        "category": "Human Resources (HR)",
        "activity": "Salaries",
        "activity_description": "Salaries of health workers supporting HIV services (nurses and data managers)",
    }


def test_catalog_of_unknown_program_is_empty(client):
    assert client.get("/api/locations/catalog/POLIO/activities").json() == []
