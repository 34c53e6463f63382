import uuid
from datetime import date, datetime

import pytest

from conftest import MockUser, PROJECT_ID, WEEK_MONDAY, add_schedule_activity
from core.security import get_current_user
from main import app
from models.interference import CompanyType
from models.weekly_plan import PlanStatus, WeeklyPlan
from services.interference_service import InterferenceService


def provision_week(client, reference_date="2024-06-05"):
    response = client.post(
        "/api/plans/provision",
        json={"project_id": str(PROJECT_ID), "reference_date": reference_date},
    )
    assert response.status_code == 200, response.text
    return response.json()


def act_as(role: str, sector: str = "Production") -> None:
    user = MockUser(role, sector=sector)
    app.dependency_overrides[get_current_user] = lambda: user


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/api/health").json()["status"] == "operational"


def test_resolve_week(client):
    response = client.get("/api/weeks/resolve", params={"reference_date": "2024-12-31"})

    assert response.status_code == 200
    assert response.json() == {
        "iso_week": 1,
        "iso_year": 2025,
        "start": "2024-12-30",
        "end": "2025-01-05",
        "label": "Week 1/2025",
    }


def test_resolve_week_rejects_garbage(client):
    response = client.get("/api/weeks/resolve", params={"reference_date": "someday"})
    assert response.status_code == 422


def test_provision_is_idempotent_over_http(client, db_session):
    add_schedule_activity(db_session, "H-1", WEEK_MONDAY, date(2024, 6, 9))

    first = provision_week(client)
    second = provision_week(client, "2024-06-09")

    assert first["is_new"] is True
    assert second["is_new"] is False
    assert second["plan"]["id"] == first["plan"]["id"]
    assert [a["code"] for a in first["activities"]] == ["H-1"]
    assert set(first["available_events"]) == {"SUBMIT_TO_PRODUCTION", "START_EXECUTION"}


def test_provision_by_iso_week(client):
    response = client.post(
        "/api/plans/provision",
        json={"project_id": str(PROJECT_ID), "iso_week": 23, "iso_year": 2024},
    )
    assert response.status_code == 200
    assert response.json()["plan"]["start_date"] == "2024-06-03"


def test_provision_needs_a_week(client):
    response = client.post("/api/plans/provision", json={"project_id": str(PROJECT_ID)})
    assert response.status_code == 422


def test_week_of_work_end_to_end(client, db_session):
    add_schedule_activity(db_session, "H-1", WEEK_MONDAY, date(2024, 6, 9))
    detail = provision_week(client)
    plan_id = detail["plan"]["id"]
    activity_id = detail["activities"][0]["id"]

    response = client.put(
        f"/api/plans/{plan_id}/activities/{activity_id}/planned",
        json={"planned_qty": [10, 10, 0, 0, 0, 0, 0]},
    )
    assert response.status_code == 200
    assert response.json()["total_planned"] == 20

    assert client.post(f"/api/plans/{plan_id}/submit").status_code == 200
    response = client.post(f"/api/plans/{plan_id}/accept", json={"notes": "ok"})
    assert response.json()["plan"]["status"] == "ACCEPTED"
    assert client.post(f"/api/plans/{plan_id}/start-execution").status_code == 200

    met = client.post(
        "/api/check-ins/",
        json={"activity_id": activity_id, "check_date": "2024-06-03", "actual_qty": 10},
    ).json()
    assert met["committed"] is True
    assert met["record"]["completed"] is True

    deferred = client.post(
        "/api/check-ins/",
        json={"activity_id": activity_id, "check_date": "2024-06-04", "actual_qty": 6},
    ).json()
    assert deferred == {
        "committed": False,
        "cause_required": True,
        "planned_qty": 10.0,
        "completed": False,
        "record": None,
    }

    with_cause = client.post(
        "/api/check-ins/",
        json={"activity_id": activity_id, "check_date": "2024-06-04", "actual_qty": 6, "cause": "LABOR"},
    ).json()
    assert with_cause["committed"] is True

    metrics = client.post(f"/api/plans/{plan_id}/metrics/recompute").json()
    assert metrics["weekly_ppc"] == 0.0
    assert metrics["ppc_by_day"]["MON"] == 100.0
    assert metrics["ppc_by_day"]["TUE"] == 0.0
    assert metrics["cause_histogram"]["LABOR"] == 1

    response = client.post(f"/api/plans/{plan_id}/complete")
    assert response.json()["plan"]["status"] == "COMPLETED"
    assert response.json()["activities"][0]["status"] == "NOT_COMPLETED"

    events = client.get(f"/api/plans/{plan_id}/acceptance-events").json()
    assert [e["event_type"] for e in events] == [
        "SUBMIT_TO_PRODUCTION", "ACCEPT", "START_EXECUTION", "COMPLETE",
    ]
    assert len(client.get(f"/api/plans/{plan_id}/check-ins").json()) == 2


def test_illegal_transition_is_409(client, db_session):
    add_schedule_activity(db_session, "H-1", WEEK_MONDAY, date(2024, 6, 9))
    plan_id = provision_week(client)["plan"]["id"]
    client.post(f"/api/plans/{plan_id}/start-execution")

    response = client.post(f"/api/plans/{plan_id}/submit")

    assert response.status_code == 409


def test_reject_without_notes_is_422(client):
    plan_id = provision_week(client)["plan"]["id"]
    client.post(f"/api/plans/{plan_id}/submit")

    response = client.post(f"/api/plans/{plan_id}/reject", json={"notes": ""})

    assert response.status_code == 422


@pytest.mark.parametrize(
    "role, path, expected",
    [
        ("PRODUCTION", "submit", 403),
        ("PLANNER", "start-execution", 403),
        ("VIEWER", "submit", 403),
    ],
)
def test_transitions_are_role_gated(client, role, path, expected):
    plan_id = provision_week(client)["plan"]["id"]
    act_as(role)

    response = client.post(f"/api/plans/{plan_id}/{path}")

    assert response.status_code == expected


def test_manual_activity_and_pull_forward(client, db_session):
    later = add_schedule_activity(db_session, "LATE-1", date(2024, 7, 1), date(2024, 7, 5))
    plan_id = provision_week(client)["plan"]["id"]

    available = client.get(f"/api/plans/{plan_id}/available-activities").json()
    assert [a["code"] for a in available] == ["LATE-1"]

    response = client.post(
        f"/api/plans/{plan_id}/activities/pull-forward",
        json={"schedule_activity_id": str(later.id)},
    )
    assert response.status_code == 201

    response = client.post(
        f"/api/plans/{plan_id}/activities",
        json={"name": "Housekeeping", "planned_qty": [1, 1, 1, 1, 1, 0, 0]},
    )
    assert response.status_code == 201
    manual_id = response.json()["id"]

    bad = client.post(f"/api/plans/{plan_id}/activities", json={"name": "Bad", "planned_qty": [1, 2, 3]})
    assert bad.status_code == 422

    assert client.delete(f"/api/plans/{plan_id}/activities/{manual_id}").status_code == 200
    detail = client.get(f"/api/plans/{plan_id}").json()
    assert [a["code"] for a in detail["activities"]] == ["LATE-1"]


def test_status_rebuild_is_admin_only(client):
    plan_id = provision_week(client)["plan"]["id"]
    assert client.post(f"/api/plans/{plan_id}/status/rebuild").json()["status"] == "PLANNED"

    act_as("PLANNER", sector="Planning")
    assert client.post(f"/api/plans/{plan_id}/status/rebuild").status_code == 403


def test_interference_promotion_over_http(client, db_session):
    add_schedule_activity(db_session, "H-1", WEEK_MONDAY, date(2024, 6, 9))
    detail = provision_week(client)

    created = client.post(
        "/api/interferences/",
        json={
            "project_id": str(PROJECT_ID),
            "plan_id": detail["plan"]["id"],
            "activity_id": detail["activities"][0]["id"],
            "company_involved": "City inspectors",
            "company_type": "INSPECTION",
            "category": "SAFETY",
            "description": "Site closed for inspection",
            "occurred_at": "2024-06-05T08:00:00",
        },
    )
    assert created.status_code == 201, created.text
    report = created.json()
    assert report["reporter_name"] == "test-user"
    assert report["status"] == "OPEN"

    promoted = client.post(f"/api/interferences/{report['id']}/promote")
    assert promoted.status_code == 200
    assert promoted.json()["status"] == "CONVERTED"
    assert promoted.json()["converted_constraint_id"] is not None

    again = client.post(f"/api/interferences/{report['id']}/promote")
    assert again.status_code == 409


def test_unknown_plan_is_404(client):
    response = client.get("/api/plans/00000000-0000-0000-0000-00000000dead")
    assert response.status_code == 404


def test_list_endpoints_are_company_scoped(client, db_session):
    other_company = uuid.uuid4()
    ours = provision_week(client)["plan"]
    db_session.add(
        WeeklyPlan(
            company_id=other_company,
            project_id=PROJECT_ID,
            iso_week=23,
            iso_year=2024,
            start_date=WEEK_MONDAY,
            end_date=date(2024, 6, 9),
            status=PlanStatus.PLANNED,
        )
    )
    db_session.commit()
    InterferenceService.report_interference(
        project_id=PROJECT_ID,
        reporter_name="elsewhere",
        company_involved="Acme",
        company_type=CompanyType.CONTRACTOR,
        description="Not our site",
        occurred_at=datetime(2024, 6, 4, 10, 0),
        db=db_session,
        company_id=other_company,
    )

    act_as("PLANNER", sector="Planning")
    plans = client.get("/api/plans/", params={"company_id": str(other_company)}).json()
    assert [p["id"] for p in plans] == [ours["id"]]
    assert client.get("/api/interferences/").json() == []

    act_as("ADMIN")
    plans = client.get("/api/plans/", params={"company_id": str(other_company)}).json()
    assert [p["company_id"] for p in plans] == [str(other_company)]
    reports = client.get("/api/interferences/", params={"company_id": str(other_company)}).json()
    assert [r["description"] for r in reports] == ["Not our site"]


def test_non_finite_quantities_are_422(client, db_session):
    add_schedule_activity(db_session, "N-1", WEEK_MONDAY, date(2024, 6, 9))
    detail = provision_week(client)
    plan_id = detail["plan"]["id"]
    activity_id = detail["activities"][0]["id"]
    headers = {"Content-Type": "application/json"}

    check_in = client.post(
        "/api/check-ins/",
        content=f'{{"activity_id": "{activity_id}", "check_date": "2024-06-03", "actual_qty": Infinity}}',
        headers=headers,
    )
    assert check_in.status_code == 422

    planned = client.put(
        f"/api/plans/{plan_id}/activities/{activity_id}/planned",
        content='{"planned_qty": [1, NaN, 1, 1, 1, 0, 0]}',
        headers=headers,
    )
    assert planned.status_code == 422
    assert client.get(f"/api/plans/{plan_id}/check-ins").json() == []


def test_update_plan_details_over_http(client):
    plan_id = provision_week(client)["plan"]["id"]

    response = client.patch(f"/api/plans/{plan_id}", json={"responsible": "Site lead", "notes": "Crane Tue only"})
    assert response.status_code == 200, response.text
    assert response.json()["plan"]["notes"] == "Crane Tue only"
    assert response.json()["plan"]["responsible"] == "Site lead"

    act_as("PRODUCTION")
    assert client.patch(f"/api/plans/{plan_id}", json={"notes": "x"}).status_code == 403
