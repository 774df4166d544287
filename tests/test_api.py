import pytest
from fastapi.testclient import TestClient

from fieldsales.domain.visits.router import get_visit_marks
from fieldsales.main import app
from fieldsales.services.visit_marks import VisitMarks


@pytest.fixture
def seeded(make_vendor, make_client):
    vendor = make_vendor()
    clients = [make_client(name) for name in ("Alpha", "Bravo", "Charlie")]
    return vendor.id, [c.id for c in clients]


@pytest.fixture
def route_id(api_client: TestClient, seeded) -> int:
    vendor_id, _ = seeded
    response = api_client.post("/routes", json={"vendor_id": vendor_id, "name": "Campinas Norte"})
    assert response.status_code == 201
    return response.json()["id"]


def test_health(api_client: TestClient) -> None:
    assert api_client.get("/health").json() == {"status": "ok"}


def test_app_mounts_every_router() -> None:
    paths = {route.path for route in app.routes}

    assert {"/routes", "/visits", "/visits/agenda", "/inspection-reports", "/health"} <= paths


def test_route_lifecycle(api_client: TestClient, seeded, route_id) -> None:
    vendor_id, client_ids = seeded
    for client_id in client_ids:
        response = api_client.post(
            f"/routes/{route_id}/stops", json={"client_id": client_id, "weekday": "monday"}
        )
        assert response.status_code == 201

    duplicate = api_client.post(
        f"/routes/{route_id}/stops", json={"client_id": client_ids[0], "weekday": "MONDAY"}
    )
    assert duplicate.status_code == 409
    assert "already scheduled" in duplicate.json()["detail"]

    copied = api_client.post(
        f"/routes/{route_id}/copy-day", json={"from_weekday": "MONDAY", "to_weekday": "SATURDAY"}
    )
    assert copied.json()["copied"] == 3

    weekdays = api_client.get(f"/routes/{route_id}/weekdays").json()
    assert list(weekdays) == ["MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY"]
    assert [s["position"] for s in weekdays["SATURDAY"]] == [1, 2, 3]
    assert weekdays["MONDAY"][0]["client"]["name"] == "Alpha"

    detail = api_client.get(f"/routes/{route_id}").json()
    assert detail["total_stops"] == 6

    overview = api_client.get("/routes/weekly-overview").json()
    assert overview[0]["stops_per_weekday"]["SATURDAY"] == 3


def test_second_active_route_conflicts(api_client: TestClient, seeded, route_id) -> None:
    vendor_id, _ = seeded
    response = api_client.post("/routes", json={"vendor_id": vendor_id, "name": "Other"})

    assert response.status_code == 409


def test_reorder_endpoint_is_all_or_nothing(api_client: TestClient, seeded, route_id) -> None:
    _, client_ids = seeded
    stop_ids = [
        api_client.post(
            f"/routes/{route_id}/stops", json={"client_id": c, "weekday": "TUESDAY"}
        ).json()["id"]
        for c in client_ids
    ]

    rejected = api_client.put(
        f"/routes/{route_id}/reorder",
        json={"weekday": "TUESDAY", "stops": [{"stop_id": stop_ids[0], "position": 2}]},
    )
    assert rejected.status_code == 409

    accepted = api_client.put(
        f"/routes/{route_id}/reorder",
        json={
            "weekday": "TUESDAY",
            "stops": [
                {"stop_id": stop_ids[0], "position": 3},
                {"stop_id": stop_ids[2], "position": 1},
            ],
        },
    )
    assert accepted.status_code == 200
    assert [s["id"] for s in accepted.json()] == [stop_ids[2], stop_ids[1], stop_ids[0]]


def test_unknown_weekday_is_rejected(api_client: TestClient, seeded, route_id) -> None:
    _, client_ids = seeded
    response = api_client.post(
        f"/routes/{route_id}/stops", json={"client_id": client_ids[0], "weekday": "SUNDAY"}
    )

    assert response.status_code == 422


def test_visit_check_in_and_out(api_client: TestClient, seeded) -> None:
    vendor_id, client_ids = seeded
    visit = api_client.post(
        "/visits",
        json={"client_id": client_ids[0], "vendor_id": vendor_id, "scheduled_date": "2024-06-03"},
    ).json()
    assert visit["status"] == "SCHEDULED"

    early = api_client.post(f"/visits/{visit['id']}/check-out", json={})
    assert early.status_code == 409

    checked_in = api_client.post(
        f"/visits/{visit['id']}/check-in", json={"latitude": -22.9, "longitude": -47.06}
    )
    assert checked_in.status_code == 200
    body = checked_in.json()
    assert body["geocode_degraded"] is False
    assert body["visit"]["status"] == "IN_PROGRESS"
    assert body["visit"]["check_in_latitude"] == -22.9

    assert api_client.post(f"/visits/{visit['id']}/check-in").status_code == 409
    assert api_client.delete(f"/visits/{visit['id']}").status_code == 409

    checked_out = api_client.post(f"/visits/{visit['id']}/check-out", json={"notes": "ok"})
    assert checked_out.json()["visit"]["status"] == "COMPLETED"
    assert checked_out.json()["visit"]["duration_minutes"] >= 0

    completed = api_client.get("/visits", params={"status": "COMPLETED"}).json()
    assert [v["id"] for v in completed] == [visit["id"]]


def test_check_in_with_one_coordinate(api_client: TestClient, seeded) -> None:
    vendor_id, client_ids = seeded
    visit = api_client.post(
        "/visits",
        json={"client_id": client_ids[0], "vendor_id": vendor_id, "scheduled_date": "2024-06-03"},
    ).json()

    response = api_client.post(f"/visits/{visit['id']}/check-in", json={"latitude": -22.9})

    assert response.status_code == 400
    assert "together" in response.json()["detail"]


def test_agenda_endpoint(api_client: TestClient, seeded, route_id) -> None:
    vendor_id, client_ids = seeded
    api_client.post(f"/routes/{route_id}/stops", json={"client_id": client_ids[0], "weekday": "MONDAY"})
    api_client.post(
        "/visits",
        json={"client_id": client_ids[0], "vendor_id": vendor_id, "scheduled_date": "2024-06-03"},
    )

    agenda = api_client.get("/visits/agenda", params={"vendor_id": vendor_id, "date": "2024-06-03"}).json()
    assert agenda["weekday"] == "MONDAY"
    assert agenda["stops"][0]["visit"]["status"] == "SCHEDULED"
    assert agenda["counts"] == {"scheduled": 1, "completed": 0, "pending": 1, "extra": 0}

    sunday = api_client.get("/visits/agenda", params={"vendor_id": vendor_id, "date": "2024-06-02"}).json()
    assert sunday["counts"]["scheduled"] == 0

    missing = api_client.get("/visits/agenda", params={"vendor_id": 999, "date": "2024-06-03"})
    assert missing.status_code == 404


def test_monthly_summary_endpoint(api_client: TestClient, seeded) -> None:
    vendor_id, client_ids = seeded
    api_client.post(
        "/visits",
        json={"client_id": client_ids[1], "vendor_id": vendor_id, "scheduled_date": "2024-06-10"},
    )

    summary = api_client.get("/visits/summary", params={"year": 2024, "month": 6}).json()

    assert summary["totals"]["scheduled"] == 1
    assert summary["vendors"][0]["vendor_id"] == vendor_id


def test_visit_marks_endpoints(api_client: TestClient) -> None:
    class MemoryMarks(VisitMarks):
        def __init__(self):
            self.marks = set()

        def mark(self, user_id, day, client_id):
            self.marks.add((user_id, day, client_id))
            return True

        def unmark(self, user_id, day, client_id):
            self.marks.discard((user_id, day, client_id))
            return True

        def list_marks(self, user_id, day):
            return sorted(c for u, d, c in self.marks if (u, d) == (user_id, day))

    marks = MemoryMarks()
    app.dependency_overrides[get_visit_marks] = lambda: marks

    added = api_client.post("/visits/marks", json={"user_id": "u1", "day": "2024-06-03", "client_id": 5})
    assert added.json()["client_ids"] == [5]

    listed = api_client.get("/visits/marks", params={"user_id": "u1", "date": "2024-06-03"})
    assert listed.json()["client_ids"] == [5]

    removed = api_client.delete("/visits/marks/5", params={"user_id": "u1", "date": "2024-06-03"})
    assert removed.json()["client_ids"] == []


def test_inspection_report_flow(api_client: TestClient, seeded) -> None:
    vendor_id, client_ids = seeded
    visit = api_client.post(
        "/visits",
        json={"client_id": client_ids[0], "vendor_id": vendor_id, "scheduled_date": "2024-06-03"},
    ).json()

    defaults = api_client.get("/inspection-reports/default-values").json()
    assert defaults[1] == {"component_type": "PAD", "label": "Pad", "standard": 32.0, "limit": 22.0}

    created = api_client.post(
        "/inspection-reports",
        json={
            "visit_id": visit["id"],
            "inspector_id": "inspector-7",
            "equipment": "Escavadeira CAT 320",
            "serial_number": "CAT0320XK",
            "inspection_date": "2024-06-03",
            "soil_condition": "high_impact",
        },
    )
    assert created.status_code == 201
    report = created.json()
    assert report["number"] == "03/06/2024-0001"
    assert report["soil_condition"] == "HIGH_IMPACT"
    assert len(report["measurements"]) == 6

    row = api_client.patch(
        f"/inspection-reports/{report['id']}/measurements/PAD", json={"measured_left": 24}
    ).json()
    assert (row["wear_left"], row["condition_left"]) == (80.0, "VERIFY")

    assessment = api_client.get(f"/inspection-reports/{report['id']}/assessment").json()
    assert assessment["verify"] == ["PAD"]
    assert assessment["worst"] == "VERIFY"

    by_visit = api_client.get(f"/inspection-reports/visit/{visit['id']}").json()
    assert by_visit["id"] == report["id"]

    submitted = api_client.post(f"/inspection-reports/{report['id']}/submit").json()
    assert submitted["status"] == "SUBMITTED"

    frozen = api_client.patch(
        f"/inspection-reports/{report['id']}/measurements/PAD", json={"measured_left": 30}
    )
    assert frozen.status_code == 409

    linked = api_client.get(f"/visits/{visit['id']}").json()
    assert linked["inspection_report_id"] == report["id"]


def test_report_header_fields_cannot_be_cleared(api_client: TestClient, seeded) -> None:
    vendor_id, client_ids = seeded
    visit = api_client.post(
        "/visits",
        json={"client_id": client_ids[1], "vendor_id": vendor_id, "scheduled_date": "2024-06-03"},
    ).json()
    report = api_client.post(
        "/inspection-reports",
        json={
            "visit_id": visit["id"],
            "inspector_id": "inspector-7",
            "equipment": "Trator D6",
            "serial_number": "D6T001",
        },
    ).json()

    cleared = api_client.patch(f"/inspection-reports/{report['id']}", json={"equipment": None})
    assert cleared.status_code == 400
    assert "equipment" in cleared.json()["detail"]

    optional = api_client.patch(f"/inspection-reports/{report['id']}", json={"fleet": None})
    assert optional.status_code == 200
    assert api_client.get(f"/inspection-reports/{report['id']}").json()["equipment"] == "Trator D6"
