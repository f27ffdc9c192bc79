from datetime import date


def test_dashboard_stats(client, make_patient, make_doctor, make_schedule):
    for day in range(1, 11):
        make_patient(
            nama=f"Pasien {day}",
            tanggal="2025-01-08" if day % 2 else "2025-01-09",
            tanggal_daftar=f"2025-01-{day:02d}T08:00:00",
        )
    make_patient(nama="Tanpa Tanggal Daftar", tanggal="08/01/2025")
    doctor = make_doctor()
    make_schedule(doctor)
    make_schedule(
        doctor,
        status="holiday",
        holiday_reason="Cuti",
        holiday_start_date=date(2025, 1, 8),
        holiday_end_date=date(2025, 1, 9),
    )

    stats = client.get("/dashboard/stats").json()

    assert stats["totalPatients"] == 11
    assert stats["todayPatients"] == 6
    assert stats["totalDoctors"] == 1
    assert stats["activeSchedules"] == 1
    assert [p["nama"] for p in stats["recentPatients"]] == [f"Pasien {day}" for day in range(10, 2, -1)]
