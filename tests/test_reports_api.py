import io

from openpyxl import load_workbook


def _fill(client, auth_headers, plan):
    ids = [a["id"] for a in plan["activities"]]
    response = client.put(
        f"/api/plans/{plan['id']}/activities",
        json={
            "activities": [
                {"id": ids[0], "quantity": 10, "frequency": 1, "unit_cost": 450000},
                {"id": ids[1], "quantity": 2, "frequency": 3, "unit_cost": 100},
                {"id": ids[6], "quantity": 1, "frequency": 3, "unit_cost": 5000},
            ]
        },
        headers=auth_headers,
    )
    assert response.status_code == 200


def test_plan_report(client, auth_headers, hiv_plan):
    _fill(client, auth_headers, hiv_plan)

    response = client.get(f"/api/reports/plans/{hiv_plan['id']}", headers=auth_headers)

    assert response.status_code == 200
    report = response.json()
    assert report["title"] == "HIV plan - BUTARO HOSPITAL - FY 2024"
    assert len(report["rows"]) == 10
    assert report["quarter_totals"] == {"Q1": 4_515_600, "Q2": 4_515_600, "Q3": 4_515_600, "Q4": 4_515_600}
    assert report["general_total"] == 18_062_400

    subtotals = {s["category"]: s["total"] for s in report["subtotals"]}
    assert subtotals == {
        "Human Resources (HR)": 18_002_400,
        "Travel Related Costs (TRC)": 0,
        "Health Products & Equipment (HPE)": 0,
        "Program Administration Costs (PA)": 60_000,
    }


def test_report_of_unknown_plan(client, auth_headers):
    assert client.get("/api/reports/plans/9999", headers=auth_headers).status_code == 404


def test_excel_export(client, auth_headers, hiv_plan):
    _fill(client, auth_headers, hiv_plan)

    response = client.get(f"/api/reports/plans/{hiv_plan['id']}/excel", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert "plan_hiv_butaro_hospital_fy2024.xlsx" in response.headers["content-disposition"]

    workbook = load_workbook(io.BytesIO(response.content))
    sheet = workbook["HIV"]
    assert sheet["A1"].value == "HIV plan - BUTARO HOSPITAL - FY 2024"
    values = [cell for row in sheet.iter_rows(values_only=True) for cell in row]
    assert "Salaries" in values
    assert 18_000_000 in values
