from datetime import date

from conftest import MockUser, WEEK_MONDAY, add_constraint, add_schedule_activity, provision
from models.daily_check import DailyCheckRecord
from models.enums import CauseCategory, Weekday
from models.planned_activity import ActivityStatus, PlannedActivity
from models.weekly_plan import PlanStatus
from services.acceptance_service import AcceptanceService
from services.check_in_service import CheckInService
from services.plan_service import PlanService
from services.ppc_service import (
    PPCService,
    activity_totals,
    compute_metrics,
    derive_activity_status,
)

FULL_WEEKDAYS = [10, 10, 10, 10, 10, 0, 0]


def _activity(planned, actual, has_constraint=False):
    return PlannedActivity(planned_qty=list(planned), actual_qty=list(actual), has_constraint=has_constraint)


def test_partial_week_is_not_complete():
    totals = activity_totals(FULL_WEEKDAYS, [10, 10, 5, 0, 0, 0, 0])

    assert totals.total_planned == 50
    assert totals.total_actual == 25
    assert totals.completed is False
    assert totals.ppc == 40.0


def test_per_day_ppc_only_counts_days_with_planned_work():
    metrics = compute_metrics([_activity(FULL_WEEKDAYS, [10, 10, 5, 0, 0, 0, 0])], [])

    assert metrics.ppc_by_day[Weekday.MON] == 100.0
    assert metrics.ppc_by_day[Weekday.TUE] == 100.0
    assert metrics.ppc_by_day[Weekday.WED] == 0.0
    assert metrics.ppc_by_day[Weekday.SAT] == 0.0
    assert metrics.weekly_ppc == 0.0


def test_weekly_ppc_three_of_four():
    activities = [
        _activity(FULL_WEEKDAYS, FULL_WEEKDAYS),
        _activity(FULL_WEEKDAYS, [12, 10, 10, 10, 8, 0, 0]),
        _activity([0, 0, 5, 0, 0, 0, 0], [0, 0, 5, 0, 0, 0, 0]),
        _activity(FULL_WEEKDAYS, [10, 10, 10, 10, 9, 0, 0], has_constraint=True),
        # No planned work at all: left out of the ratio
        _activity([0] * 7, [0] * 7),
    ]

    metrics = compute_metrics(activities, [])

    assert metrics.weekly_ppc == 75.0
    assert metrics.total_activities == 5
    assert metrics.completed_activities == 3
    assert metrics.not_completed_activities == 1
    assert metrics.activities_with_constraint == 1
    assert metrics.ppc_by_day[Weekday.FRI] == 33.33


def test_empty_plan_yields_zero_metrics():
    metrics = compute_metrics([], [])

    assert metrics.weekly_ppc == 0.0
    assert metrics.total_activities == 0
    assert set(metrics.ppc_by_day.values()) == {0.0}
    assert set(metrics.cause_histogram.values()) == {0}


def test_cause_histogram_counts_missed_days_with_a_cause():
    records = [
        DailyCheckRecord(completed=False, cause=CauseCategory.MATERIAL),
        DailyCheckRecord(completed=False, cause=CauseCategory.MATERIAL),
        DailyCheckRecord(completed=False, cause=CauseCategory.SAFETY),
        DailyCheckRecord(completed=False, cause=None),
        DailyCheckRecord(completed=True, cause=CauseCategory.LABOR),
    ]

    histogram = compute_metrics([], records).cause_histogram

    assert histogram[CauseCategory.MATERIAL] == 2
    assert histogram[CauseCategory.SAFETY] == 1
    assert histogram[CauseCategory.LABOR] == 0
    assert set(histogram) == set(CauseCategory)


def test_metrics_dict_is_keyed_by_names():
    payload = compute_metrics([_activity(FULL_WEEKDAYS, FULL_WEEKDAYS)], []).to_dict()

    assert payload["weekly_ppc"] == 100.0
    assert payload["ppc_by_day"]["MON"] == 100.0
    assert payload["cause_histogram"]["MATERIAL"] == 0


def test_activity_status_derivation():
    done = activity_totals(FULL_WEEKDAYS, FULL_WEEKDAYS)
    started = activity_totals(FULL_WEEKDAYS, [5, 0, 0, 0, 0, 0, 0])
    untouched = activity_totals(FULL_WEEKDAYS, [0] * 7)
    nothing_planned = activity_totals([0] * 7, [0] * 7)

    assert derive_activity_status(done, PlanStatus.IN_EXECUTION) == ActivityStatus.COMPLETED
    assert derive_activity_status(started, PlanStatus.IN_EXECUTION) == ActivityStatus.IN_PROGRESS
    assert derive_activity_status(untouched, PlanStatus.ACCEPTED) == ActivityStatus.PENDING
    assert derive_activity_status(started, PlanStatus.COMPLETED) == ActivityStatus.NOT_COMPLETED
    assert derive_activity_status(nothing_planned, PlanStatus.COMPLETED) == ActivityStatus.PENDING


def test_recompute_writes_rollups_back(db_session):
    first = add_schedule_activity(db_session, "R-1", WEEK_MONDAY, date(2024, 6, 9))
    add_schedule_activity(db_session, "R-2", WEEK_MONDAY, date(2024, 6, 9))
    add_constraint(db_session, first.id, "Permit pending")
    result = provision(db_session)
    a, b = result.activities
    PlanService.update_planned_quantities(a.id, [10, 0, 0, 0, 0, 0, 0], db_session)
    PlanService.update_planned_quantities(b.id, [0, 8, 0, 0, 0, 0, 0], db_session)

    CheckInService.record_check_in(a.id, WEEK_MONDAY, 10, db_session)
    CheckInService.record_check_in(b.id, date(2024, 6, 4), 3, db_session, cause=CauseCategory.MACHINE)

    metrics = PPCService.recompute_metrics(result.plan.id, db_session)

    assert metrics.weekly_ppc == 50.0
    assert metrics.cause_histogram[CauseCategory.MACHINE] == 1

    plan = PlanService.get_plan(result.plan.id, db_session)
    assert plan.weekly_ppc == 50.0
    assert plan.total_activities == 2
    assert plan.completed_activities == 1
    assert plan.activities_with_constraint == 1

    a, b = PlanService.list_activities(plan.id, db_session)
    assert (a.status, a.activity_ppc) == (ActivityStatus.COMPLETED, 100.0)
    assert (b.status, b.activity_ppc) == (ActivityStatus.IN_PROGRESS, 0.0)


def test_completing_the_plan_marks_unmet_work(db_session):
    add_schedule_activity(db_session, "R-3", WEEK_MONDAY, date(2024, 6, 9))
    result = provision(db_session)
    PlanService.update_planned_quantities(result.activities[0].id, [4, 0, 0, 0, 0, 0, 0], db_session)

    user = MockUser("ADMIN")
    AcceptanceService.start_execution(result.plan.id, user, db_session)
    AcceptanceService.complete_execution(result.plan.id, user, db_session)

    [activity] = PlanService.list_activities(result.plan.id, db_session)
    assert activity.status == ActivityStatus.NOT_COMPLETED
