from io import BytesIO

import pytest
from openpyxl import load_workbook

from primaqonita.domain.patients.schemas import normalize_status, status_label
from primaqonita.models import Patient


@pytest.mark.parametrize(
    "raw, canonical",
    [
        ("Pending", "scheduled"),
        ("Terjadwal", "scheduled"),
        ("Confirmed", "queued"),
        ("Dalam Antrian", "queued"),
        ("Completed", "completed"),
        ("Selesai", "completed"),
        ("Cancelled", "cancelled"),
        ("Dibatalkan", "cancelled"),
        ("queued", "queued"),
        ("unknown", None),
        (None, None),
    ],
)
def test_status_vocabularies_normalize(raw, canonical):
    assert normalize_status(raw) == canonical


def test_status_label_is_indonesian():
    assert status_label("Confirmed") == "Dalam Antrian"
    assert status_label("completed") == "Selesai"


def test_list_sorted_by_date_then_queue(client, make_patient):
    third = make_patient(nama="C", tanggal="09/01/2025", queue_number=1)
    second = make_patient(nama="B", tanggal="2025-01-08", queue_number=2)
    first = make_patient(nama="A", tanggal="08/01/2025")

    ids = [p["id"] for p in client.get("/patients").json()]

    assert ids == [first.id, second.id, third.id]


def test_list_normalizes_legacy_status(client, make_patient):
    make_patient(status="Confirmed")

    patient = client.get("/patients").json()[0]

    assert patient["status"] == "queued"
    assert patient["status_label"] == "Dalam Antrian"


def test_search_by_name_nik_phone_or_id(client, make_patient):
    ayu = make_patient(nama="Ayu Lestari", nik="3201000000000001", telepon="0811111111")
    budi = make_patient(nama="Budi Santoso", nik="3201000000000002", telepon="0822222222")

    def search(term):
        return [p["id"] for p in client.get("/patients", params={"search": term}).json()]

    assert search("ayu") == [ayu.id]
    assert search("0000000002") == [budi.id]
    assert search("08222") == [budi.id]
    assert search(ayu.id[:10]) == [ayu.id]


def test_status_filter_accepts_either_vocabulary(client, make_patient):
    pending = make_patient(status="Pending")
    scheduled = make_patient(status="scheduled")
    make_patient(status="Selesai")

    ids = {p["id"] for p in client.get("/patients", params={"status": "Terjadwal"}).json()}

    assert ids == {pending.id, scheduled.id}


def test_layanan_filter_and_options(client, make_patient):
    anak = make_patient(layanan="Poli Anak")
    make_patient(layanan="Poli Kandungan")
    make_patient(layanan="Poli Anak")

    assert len(client.get("/patients", params={"layanan": "Poli Anak"}).json()) == 2
    assert anak.id in [p["id"] for p in client.get("/patients", params={"layanan": "Poli Anak"}).json()]
    assert client.get("/patients/layanan").json() == {"layanan": ["Poli Anak", "Poli Kandungan"]}


@pytest.mark.parametrize(
    "params, expected",
    [
        ({"date_filter": "today"}, {"today-iso", "today-slash"}),
        ({"date_filter": "yesterday"}, {"yesterday"}),
        ({"date_filter": "this_week"}, {"today-iso", "today-slash", "yesterday", "sunday", "saturday"}),
        (
            {"date_filter": "this_month"},
            {"today-iso", "today-slash", "yesterday", "sunday", "prev-saturday", "saturday", "next-sunday"},
        ),
        ({"date_filter": "custom_date", "date_from": "2025-01-04", "date_to": "2025-01-05"}, {"prev-saturday", "sunday"}),
        ({"date_filter": "custom_month", "month": "2024-12"}, {"december"}),
        ({"date_filter": "custom_date", "date_from": "2025-01-04"}, None),
    ],
)
def test_date_filters(client, make_patient, params, expected):
    dated = {
        "today-iso": "2025-01-08",
        "today-slash": "08/01/2025",
        "yesterday": "2025-01-07",
        "sunday": "2025-01-05",
        "prev-saturday": "2025-01-04",
        "saturday": "11/01/2025",
        "next-sunday": "2025-01-12",
        "december": "2024-12-31",
    }
    for name, tanggal in dated.items():
        make_patient(nama=name, tanggal=tanggal)

    names = {p["nama"] for p in client.get("/patients", params=params).json()}

    assert names == (expected if expected is not None else set(dated))


def test_unknown_date_filter_is_rejected(client, db):
    assert client.get("/patients", params={"date_filter": "next_year"}).status_code == 400
    assert client.get("/patients", params={"date_filter": "custom_month", "month": "2025-13"}).status_code == 422


def test_group_by_date(client, make_patient):
    make_patient(nama="A", tanggal="2025-01-09")
    make_patient(nama="B", tanggal="08/01/2025")
    make_patient(nama="C", tanggal="2025-01-08")

    groups = client.get("/patients", params={"group_by_date": True}).json()

    assert [g["date"] for g in groups] == ["2025-01-08", "2025-01-09"]
    assert {p["nama"] for p in groups[0]["patients"]} == {"B", "C"}


def test_status_update(client, db, make_patient):
    patient = make_patient(status="Pending")

    response = client.patch(f"/patients/{patient.id}/status", json={"status": "Selesai"})

    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    stored = db.query(Patient).one()
    assert stored.status == "completed"
    assert stored.updated_at is not None


def test_status_update_rejects_unchanged_status(client, make_patient):
    patient = make_patient(status="Confirmed")

    response = client.patch(f"/patients/{patient.id}/status", json={"status": "queued"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Status pasien tidak berubah"


def test_status_update_rejects_unknown_status(client, make_patient):
    patient = make_patient()

    assert client.patch(f"/patients/{patient.id}/status", json={"status": "lost"}).status_code == 422
    assert client.patch("/patients/missing/status", json={"status": "queued"}).status_code == 404


def test_export_filtered_patients(client, make_patient):
    make_patient(nama="Ayu", tanggal="2024-12-02", queue_number=3, status="Confirmed", queue_status="waiting")
    make_patient(nama="Budi", tanggal="2025-01-08")

    response = client.get("/patients/export", params={"date_filter": "custom_month", "month": "2024-12"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert response.headers["content-disposition"] == "attachment; filename=Data_Pasien_Desember_2024.xlsx"

    sheet = load_workbook(BytesIO(response.content))["Data Pasien"]
    rows = list(sheet.iter_rows(values_only=True))
    assert rows[0][:4] == ("No", "ID Registrasi", "Nomor Antrian", "Nama Pasien")
    assert len(rows[0]) == 19
    assert len(rows) == 2
    header = rows[0]
    assert rows[1][header.index("Nama Pasien")] == "Ayu"
    assert rows[1][header.index("Hari")] == "Senin"
    assert rows[1][header.index("Status")] == "Dalam Antrian"
    assert rows[1][header.index("Status Antrian")] == "Menunggu"


@pytest.mark.parametrize(
    "params, filename",
    [
        ({}, "Data_Pasien_Semua_Data_2025-01-08.xlsx"),
        ({"date_filter": "today"}, "Data_Pasien_Hari_Ini_2025-01-08.xlsx"),
        ({"date_filter": "this_week"}, "Data_Pasien_Minggu_Ini.xlsx"),
        ({"date_filter": "this_month"}, "Data_Pasien_Bulan_Ini.xlsx"),
        (
            {"date_filter": "custom_date", "date_from": "2025-01-01", "date_to": "2025-01-07"},
            "Data_Pasien_2025-01-01_sampai_2025-01-07.xlsx",
        ),
    ],
)
def test_export_filename(client, db, params, filename):
    response = client.get("/patients/export", params=params)

    assert response.headers["content-disposition"] == f"attachment; filename={filename}"
