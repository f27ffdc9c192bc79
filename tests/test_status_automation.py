from datetime import date, datetime

from primaqonita.models import Doctor, Notification, Schedule
from primaqonita.services.notification_service import HOLIDAY_ENDED, HOLIDAY_SET
from primaqonita.services.status_automation import evaluate_schedule, update_schedule_statuses


def on_holiday(make_doctor, make_schedule, start=date(2025, 1, 10), end=date(2025, 1, 15)):
    doctor = make_doctor(status="holiday")
    return make_schedule(
        doctor,
        status="holiday",
        holiday_reason="Cuti",
        holiday_start_date=start,
        holiday_end_date=end,
    )


def test_holiday_lasts_through_last_millisecond_of_end_date(make_doctor, make_schedule):
    schedule = on_holiday(make_doctor, make_schedule)

    assert evaluate_schedule(schedule, datetime(2025, 1, 15, 23, 59, 59, 999000)) is None
    assert evaluate_schedule(schedule, datetime(2025, 1, 16, 0, 0, 0)) == HOLIDAY_ENDED


def test_staged_holiday_starts_at_midnight_of_start_date(make_doctor, make_schedule):
    schedule = make_schedule(
        make_doctor(),
        status="active",
        holiday_reason="Seminar",
        holiday_start_date=date(2025, 1, 10),
        holiday_end_date=date(2025, 1, 12),
    )

    assert evaluate_schedule(schedule, datetime(2025, 1, 9, 23, 59, 59, 999000)) is None
    assert evaluate_schedule(schedule, datetime(2025, 1, 10, 0, 0, 0)) == HOLIDAY_SET


def test_staged_holiday_without_end_date_does_not_start(make_doctor, make_schedule):
    schedule = make_schedule(make_doctor(), status="active", holiday_start_date=date(2025, 1, 1))

    assert evaluate_schedule(schedule, datetime(2025, 1, 8, 9, 30)) is None


def test_inactive_schedule_is_left_alone(make_doctor, make_schedule):
    schedule = make_schedule(
        make_doctor(),
        status="inactive",
        holiday_start_date=date(2025, 1, 1),
        holiday_end_date=date(2025, 1, 2),
    )

    assert evaluate_schedule(schedule, datetime(2025, 1, 8, 9, 30)) is None


def test_ending_holiday_clears_fields_and_cascades(db, make_doctor, make_schedule):
    schedule = on_holiday(make_doctor, make_schedule, start=date(2025, 1, 1), end=date(2025, 1, 5))

    summary = update_schedule_statuses(db, now=datetime(2025, 1, 8, 9, 30))

    assert summary == {
        "checked": 1,
        "holiday_started": 0,
        "holiday_ended": 1,
        "failed": 0,
        "total_updated": 1,
    }
    db.refresh(schedule)
    assert schedule.status == "active"
    assert schedule.holiday_reason is None
    assert schedule.holiday_start_date is None
    assert schedule.holiday_end_date is None

    doctor = db.query(Doctor).filter(Doctor.id == schedule.doctor_id).one()
    assert doctor.status == "active"

    notification = db.query(Notification).one()
    assert notification.type == HOLIDAY_ENDED
    assert notification.schedule_id == schedule.id
    assert "telah selesai libur" in notification.message


def test_starting_staged_holiday_keeps_fields_and_cascades(db, make_doctor, make_schedule):
    schedule = make_schedule(
        make_doctor(status="active"),
        status="active",
        holiday_reason="Seminar",
        holiday_start_date=date(2025, 1, 8),
        holiday_end_date=date(2025, 1, 9),
    )

    summary = update_schedule_statuses(db)

    assert summary["holiday_started"] == 1
    db.refresh(schedule)
    assert schedule.status == "holiday"
    assert schedule.holiday_reason == "Seminar"
    assert schedule.holiday_end_date == date(2025, 1, 9)
    assert db.query(Doctor).one().status == "holiday"

    notification = db.query(Notification).one()
    assert notification.type == HOLIDAY_SET
    assert "2025-01-08" in notification.message and "Seminar" in notification.message


def test_scan_is_idempotent_under_unchanged_clock(db, make_doctor, make_schedule):
    on_holiday(make_doctor, make_schedule, start=date(2025, 1, 1), end=date(2025, 1, 5))

    first = update_schedule_statuses(db)
    second = update_schedule_statuses(db)

    assert first["total_updated"] == 1
    assert second["total_updated"] == 0
    assert db.query(Notification).count() == 1


def test_one_transition_per_schedule_per_pass(db, make_doctor, make_schedule):
    # Ending this holiday leaves no staged dates behind, so the start rule cannot fire after it
    schedule = on_holiday(make_doctor, make_schedule, start=date(2025, 1, 1), end=date(2025, 1, 5))

    summary = update_schedule_statuses(db)

    assert summary["holiday_ended"] == 1
    assert summary["holiday_started"] == 0
    db.refresh(schedule)
    assert schedule.status == "active"


def test_missing_doctor_does_not_block_transition(db, make_schedule):
    schedule = make_schedule(
        doctor_id="deleted-doctor",
        status="holiday",
        holiday_reason="Cuti",
        holiday_start_date=date(2025, 1, 1),
        holiday_end_date=date(2025, 1, 2),
    )

    summary = update_schedule_statuses(db)

    assert summary["holiday_ended"] == 1
    db.refresh(schedule)
    assert schedule.status == "active"
    assert db.query(Notification).count() == 1


def test_failed_schedule_write_skips_cascades_and_continues(db, monkeypatch, make_doctor, make_schedule):
    failing = on_holiday(make_doctor, make_schedule, start=date(2025, 1, 1), end=date(2025, 1, 5))
    passing = on_holiday(make_doctor, make_schedule, start=date(2025, 1, 2), end=date(2025, 1, 6))

    real_commit = db.commit
    calls = {"count": 0}

    def commit_failing_once():
        calls["count"] += 1
        if calls["count"] == 1:
            raise RuntimeError("database unavailable")
        real_commit()

    monkeypatch.setattr(db, "commit", commit_failing_once)

    summary = update_schedule_statuses(db, schedules=[failing, passing])

    assert summary["failed"] == 1
    assert summary["holiday_ended"] == 1
    assert summary["total_updated"] == 1
    assert failing.status == "holiday"
    assert passing.status == "active"

    notifications = db.query(Notification).all()
    assert [n.schedule_id for n in notifications] == [passing.id]


def test_run_endpoint_returns_summary(client, make_doctor, make_schedule):
    on_holiday(make_doctor, make_schedule, start=date(2025, 1, 1), end=date(2025, 1, 5))

    response = client.post("/status/automation/run")

    assert response.status_code == 200
    assert response.json()["holiday_ended"] == 1
    assert response.json()["checked"] == 1


def test_analytics_counts_schedules_by_status(client, make_doctor, make_schedule):
    doctor = make_doctor()
    make_schedule(doctor, status="active")
    make_schedule(doctor, status="inactive")
    on_holiday(make_doctor, make_schedule)

    response = client.get("/status/analytics")

    assert response.json() == {"active": 1, "holiday": 1, "inactive": 1}


def test_schedule_count_matches_store(db, make_doctor, make_schedule):
    make_schedule(make_doctor())

    assert update_schedule_statuses(db)["checked"] == db.query(Schedule).count()
