from datetime import date

from primaqonita.models import Doctor, Notification, Schedule


def schedule_payload(doctor_id, **overrides):
    payload = {
        "doctorId": doctor_id,
        "days": ["Wednesday", "monday"],
        "shifts": [
            {"name": "Sore", "startTime": "16:00", "endTime": "20:00", "maxPatients": 15},
            {"name": "Pagi", "startTime": "08:00", "endTime": "12:00"},
        ],
    }
    payload.update(overrides)
    return payload


def test_orphaned_schedule_is_removed_on_list(client, db, make_doctor, make_schedule):
    kept = make_schedule(make_doctor())
    orphan = make_schedule(doctor_id="no-such-doctor")
    orphan_id = orphan.id

    response = client.get("/schedules")

    assert response.status_code == 200
    assert [s["id"] for s in response.json()] == [kept.id]
    assert db.query(Schedule).filter(Schedule.id == orphan_id).first() is None
    assert db.query(Notification).count() == 0


def test_list_applies_due_transitions(client, make_doctor, make_schedule):
    make_schedule(
        make_doctor(),
        status="holiday",
        holiday_reason="Cuti",
        holiday_start_date=date(2025, 1, 1),
        holiday_end_date=date(2025, 1, 7),
    )

    response = client.get("/schedules")

    assert response.json()[0]["status"] == "active"
    assert response.json()[0]["holidayReason"] is None


def test_list_filters(client, make_doctor, make_schedule):
    anak = make_schedule(make_doctor(name="dr. Sari"), poly="Poli Anak")
    kandungan = make_schedule(make_doctor(name="dr. Budi", specialization="Kandungan"), poly="Poli Kandungan")
    inactive = make_schedule(make_doctor(name="dr. Rina"), poly="Poli Anak", status="inactive")

    assert [s["id"] for s in client.get("/schedules", params={"search": "BUDI"}).json()] == [kandungan.id]
    assert [s["id"] for s in client.get("/schedules", params={"search": "kandungan"}).json()] == [kandungan.id]
    assert [s["id"] for s in client.get("/schedules", params={"status": "inactive"}).json()] == [inactive.id]
    by_poly = client.get("/schedules", params={"poly": "Poli Anak"}).json()
    assert {s["id"] for s in by_poly} == {anak.id, inactive.id}
    assert len(client.get("/schedules", params={"status": "all"}).json()) == 3


def test_polys_are_sorted_and_unique(client, make_doctor, make_schedule):
    doctor = make_doctor()
    make_schedule(doctor, poly="Poli Umum")
    make_schedule(doctor, poly="Poli Anak")
    make_schedule(doctor, poly="Poli Umum")

    assert client.get("/schedules/polys").json() == {"polys": ["Poli Anak", "Poli Umum"]}


def test_polys_skip_orphaned_schedules(client, make_doctor, make_schedule):
    make_schedule(make_doctor(), poly="Poli Anak")
    make_schedule(doctor_id="deleted-doctor", poly="Poli Gigi")

    assert client.get("/schedules/polys").json() == {"polys": ["Poli Anak"]}


def test_create_schedule(client, db, make_doctor):
    doctor = make_doctor(name="dr. Sari", specialization="Anak")

    response = client.post("/schedules", json=schedule_payload(doctor.id))

    assert response.status_code == 201
    body = response.json()
    assert body["doctorName"] == "dr. Sari"
    assert body["poly"] == "Anak"
    assert body["status"] == "active"
    assert body["days"] == ["monday", "wednesday"]
    assert [s["name"] for s in body["shifts"]] == ["Pagi", "Sore"]
    assert all(s["id"] for s in body["shifts"])
    assert body["shifts"][0]["maxPatients"] == 20

    assert db.query(Doctor).one().status == "active"
    notification = db.query(Notification).one()
    assert notification.type == "schedule_created"
    assert notification.message == "Jadwal praktek baru untuk dokter dr. Sari di Poli Anak telah dibuat."


def test_legacy_flat_times_become_one_shift(client, make_doctor):
    doctor = make_doctor()
    payload = schedule_payload(doctor.id, shifts=[], startTime="09:00", endTime="13:00", poly="Poli Anak")

    response = client.post("/schedules", json=payload)

    assert response.status_code == 201
    shifts = response.json()["shifts"]
    assert len(shifts) == 1
    assert shifts[0]["name"] == "Praktek"
    assert (shifts[0]["startTime"], shifts[0]["endTime"]) == ("09:00", "13:00")


def test_overlapping_shifts_are_rejected(client, db, make_doctor):
    doctor = make_doctor()
    shifts = [
        {"name": "Pagi", "startTime": "08:00", "endTime": "12:00"},
        {"name": "Siang", "startTime": "11:30", "endTime": "14:00"},
    ]

    response = client.post("/schedules", json=schedule_payload(doctor.id, shifts=shifts))

    assert response.status_code == 400
    assert response.json()["detail"] == "Waktu shift tidak boleh bertumpang tindih"
    assert db.query(Schedule).count() == 0


def test_back_to_back_shifts_are_allowed(client, make_doctor):
    doctor = make_doctor()
    shifts = [
        {"name": "Pagi", "startTime": "08:00", "endTime": "12:00"},
        {"name": "Siang", "startTime": "12:00", "endTime": "14:00"},
    ]

    assert client.post("/schedules", json=schedule_payload(doctor.id, shifts=shifts)).status_code == 201


def test_shift_must_end_after_it_starts(client, make_doctor):
    doctor = make_doctor()
    shifts = [{"name": "Malam", "startTime": "20:00", "endTime": "18:00"}]

    assert client.post("/schedules", json=schedule_payload(doctor.id, shifts=shifts)).status_code == 400


def test_schedule_needs_a_shift(client, make_doctor):
    doctor = make_doctor()

    response = client.post("/schedules", json=schedule_payload(doctor.id, shifts=[]))

    assert response.status_code == 400
    assert response.json()["detail"] == "Tambahkan minimal satu shift"


def test_schedule_validation_errors(client, make_doctor):
    doctor = make_doctor()

    assert client.post("/schedules", json=schedule_payload(doctor.id, days=[])).status_code == 422
    assert client.post("/schedules", json=schedule_payload(doctor.id, days=["funday"])).status_code == 422
    assert client.post("/schedules", json=schedule_payload(doctor.id, poly="  ")).status_code == 422
    assert client.post("/schedules", json=schedule_payload(doctor.id, status="holiday")).status_code == 422
    blank_shift = [{"name": " ", "startTime": "08:00", "endTime": "12:00"}]
    assert client.post("/schedules", json=schedule_payload(doctor.id, shifts=blank_shift)).status_code == 422
    assert client.post("/schedules", json=schedule_payload("ghost")).status_code == 400


def test_update_schedule(client, db, make_doctor, make_schedule):
    doctor = make_doctor()
    schedule = make_schedule(doctor)

    response = client.put(
        f"/schedules/{schedule.id}",
        json=schedule_payload(doctor.id, poly="Poli Tumbuh Kembang", status="inactive"),
    )

    assert response.status_code == 200
    assert response.json()["poly"] == "Poli Tumbuh Kembang"
    assert response.json()["status"] == "inactive"
    assert db.query(Doctor).one().status == "inactive"
    assert db.query(Notification).one().type == "schedule_updated"


def test_leaving_holiday_by_edit_clears_holiday_fields(client, make_doctor, make_schedule):
    doctor = make_doctor()
    schedule = make_schedule(
        doctor,
        status="holiday",
        holiday_reason="Cuti",
        holiday_start_date=date(2025, 1, 7),
        holiday_end_date=date(2025, 1, 20),
    )

    body = client.put(f"/schedules/{schedule.id}", json=schedule_payload(doctor.id, status="active")).json()

    assert body["status"] == "active"
    assert body["holidayReason"] is None
    assert body["holidayEndDate"] is None


def test_edit_without_status_keeps_holiday(client, make_doctor, make_schedule):
    doctor = make_doctor()
    schedule = make_schedule(
        doctor,
        status="holiday",
        holiday_reason="Cuti",
        holiday_start_date=date(2025, 1, 7),
        holiday_end_date=date(2025, 1, 20),
    )

    body = client.put(f"/schedules/{schedule.id}", json=schedule_payload(doctor.id)).json()

    assert body["status"] == "holiday"
    assert body["holidayReason"] == "Cuti"


def test_deleting_last_schedule_marks_doctor_inactive(client, db, make_doctor, make_schedule):
    doctor = make_doctor(status="active")
    schedule_id = make_schedule(doctor).id

    response = client.delete(f"/schedules/{schedule_id}")

    assert response.status_code == 200
    assert db.query(Schedule).count() == 0
    assert db.query(Doctor).one().status == "inactive"
    notification = db.query(Notification).one()
    assert notification.type == "schedule_deleted"
    assert notification.schedule_id == schedule_id


def test_deleting_one_of_several_schedules_keeps_doctor_status(client, db, make_doctor, make_schedule):
    doctor = make_doctor(status="active")
    first = make_schedule(doctor)
    make_schedule(doctor, poly="Poli Umum")

    client.delete(f"/schedules/{first.id}")

    assert db.query(Doctor).one().status == "active"


def test_missing_schedule_is_404(client, db):
    assert client.get("/schedules/missing").status_code == 404
    assert client.delete("/schedules/missing").status_code == 404
