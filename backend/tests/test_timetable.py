import uuid
from datetime import date, datetime, time, timezone

import pytest

from app import repositories, services
from app.errors import ValidationError
from app.repositories import weekdays_between
from app.schemas import TimetableSlotIn


def _slot(db, user_id, **fields):
    data = {"day_of_week": 1, "start_time": time(9), "end_time": time(10)}
    data.update(fields)
    return services.TimetableService(db).create(user_id, TimetableSlotIn(**data))


def _range(start, end):
    return datetime.combine(start, time.min), services.end_of_day(end)


def test_by_weekday_returns_recurring_slot(db, user):
    slot = _slot(db, user.id)
    resolver = services.ScheduleResolver(db)
    assert [s.id for s in resolver.by_weekday(user.id, 1)] == [slot.id]
    assert resolver.by_weekday(user.id, 2) == []


def test_by_weekday_orders_by_start_time(db, user):
    late = _slot(db, user.id, start_time=time(14), end_time=time(15))
    early = _slot(db, user.id, start_time=time(8), end_time=time(9))
    ids = [s.id for s in services.ScheduleResolver(db).by_weekday(user.id, 1)]
    assert ids == [early.id, late.id]


def test_by_weekday_skips_inactive_and_one_off(db, user):
    inactive = _slot(db, user.id)
    inactive.is_active = False
    services.TimetableService(db).repo.save(inactive)
    _slot(db, user.id, is_recurring=False, specific_date=date(2024, 3, 18))
    assert services.ScheduleResolver(db).by_weekday(user.id, 1) == []


@pytest.mark.parametrize("day", [-1, 7])
def test_by_weekday_rejects_out_of_range_day(db, user, day):
    with pytest.raises(ValidationError):
        services.ScheduleResolver(db).by_weekday(user.id, day)


def test_by_date_range_one_off_slot(db, user):
    slot = _slot(db, user.id, day_of_week=5, is_recurring=False, specific_date=date(2024, 3, 15))
    resolver = services.ScheduleResolver(db)
    inside = resolver.by_date_range(user.id, *_range(date(2024, 3, 10), date(2024, 3, 20)))
    assert [s.id for s in inside] == [slot.id]
    after = resolver.by_date_range(user.id, *_range(date(2024, 3, 16), date(2024, 3, 20)))
    assert after == []
    # both ends inclusive
    on_day = resolver.by_date_range(user.id, *_range(date(2024, 3, 15), date(2024, 3, 15)))
    assert [s.id for s in on_day] == [slot.id]


def test_by_date_range_recurring_slot_in_wrapping_range(db, user):
    monday = _slot(db, user.id, day_of_week=1)
    resolver = services.ScheduleResolver(db)
    # Wednesday through the following Tuesday covers a Monday
    wrapped = resolver.by_date_range(user.id, *_range(date(2024, 3, 13), date(2024, 3, 19)))
    assert [s.id for s in wrapped] == [monday.id]
    # Wednesday through Friday does not
    assert resolver.by_date_range(user.id, *_range(date(2024, 3, 13), date(2024, 3, 15))) == []


def test_by_date_range_rejects_reversed_range(db, user):
    with pytest.raises(ValidationError):
        services.ScheduleResolver(db).by_date_range(user.id, *_range(date(2024, 3, 20), date(2024, 3, 10)))


def test_weekdays_between():
    # 2024-03-13 is a Wednesday
    assert weekdays_between(date(2024, 3, 13), date(2024, 3, 15)) == [3, 4, 5]
    assert weekdays_between(date(2024, 3, 16), date(2024, 3, 18)) == [0, 1, 6]
    assert weekdays_between(date(2024, 3, 1), date(2024, 3, 31)) == list(range(7))


def test_slot_shape_is_validated():
    with pytest.raises(ValueError):
        TimetableSlotIn(day_of_week=1, start_time=time(10), end_time=time(9))
    with pytest.raises(ValueError):
        TimetableSlotIn(day_of_week=1, start_time=time(9), end_time=time(10), is_recurring=False)
    with pytest.raises(ValueError):
        TimetableSlotIn(day_of_week=1, start_time=time(9), end_time=time(10), specific_date=date(2024, 3, 18))
    with pytest.raises(ValueError):
        TimetableSlotIn(day_of_week=1, start_time=time(9, tzinfo=timezone.utc), end_time=time(10))


# --- HTTP -----------------------------------------------------------------

def test_slot_endpoints(client, register_user):
    _, headers = register_user()
    r = client.post(
        "/timetable/slots",
        json={"dayOfWeek": 1, "startTime": "09:00", "endTime": "10:00", "slotType": "lecture"},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    slot = r.json()
    assert slot["dayOfWeek"] == 1
    assert slot["isRecurring"] is True
    assert slot["isActive"] is True

    day = client.get("/timetable/day/1", headers=headers)
    assert day.status_code == 200
    assert [s["id"] for s in day.json()] == [slot["id"]]

    fetched = client.get(f"/timetable/slots/{slot['id']}", headers=headers)
    assert fetched.status_code == 200
    assert fetched.json()["startTime"] == "09:00:00"

    assert client.delete(f"/timetable/slots/{slot['id']}", headers=headers).status_code == 204
    assert client.get(f"/timetable/slots/{slot['id']}", headers=headers).status_code == 404


def test_day_out_of_range_is_bad_request(client, register_user):
    _, headers = register_user()
    r = client.get("/timetable/day/7", headers=headers)
    assert r.status_code == 400
    assert r.json() == {"error": "invalid day of week, must be 0-6"}


def test_one_off_slot_requires_date(client, register_user):
    _, headers = register_user()
    r = client.post(
        "/timetable/slots",
        json={"dayOfWeek": 5, "startTime": "09:00", "endTime": "10:00", "isRecurring": False},
        headers=headers,
    )
    assert r.status_code == 400
    assert "specificDate" in r.json()["error"]


def test_slot_time_with_offset_is_bad_request(client, register_user):
    _, headers = register_user()
    r = client.post(
        "/timetable/slots",
        json={"dayOfWeek": 1, "startTime": "09:00Z", "endTime": "10:00"},
        headers=headers,
    )
    assert r.status_code == 400
    assert "startTime" in r.json()["error"]
    assert client.get("/timetable/day/1", headers=headers).json() == []


def test_range_endpoint(client, register_user):
    _, headers = register_user()
    r = client.post(
        "/timetable/slots",
        json={
            "dayOfWeek": 5,
            "startTime": "11:00",
            "endTime": "12:00",
            "isRecurring": False,
            "specificDate": "2024-03-15",
        },
        headers=headers,
    )
    assert r.status_code == 201
    found = client.get("/timetable/range", params={"start": "2024-03-10", "end": "2024-03-20"}, headers=headers)
    assert found.status_code == 200
    assert [s["specificDate"] for s in found.json()] == ["2024-03-15"]

    missed = client.get("/timetable/range", params={"start": "2024-03-16", "end": "2024-03-20"}, headers=headers)
    assert missed.json() == []

    bad = client.get("/timetable/range", params={"start": "2024-03-16", "end": "not-a-date"}, headers=headers)
    assert bad.status_code == 400


def test_catalog_endpoints(client, register_user):
    _, headers = register_user()
    code = f"CS{uuid.uuid4().hex[:6]}"
    subject = {"code": code, "name": "Data Structures", "credits": 4}

    assert client.post("/timetable/subjects", json=subject).status_code == 401
    r = client.post("/timetable/subjects", json=subject, headers=headers)
    assert r.status_code == 201
    assert r.json()["shortName"] is None
    assert client.post("/timetable/subjects", json=subject, headers=headers).status_code == 409

    listed = client.get("/timetable/subjects")
    assert listed.status_code == 200
    assert code in [s["code"] for s in listed.json()]

    staff = client.post("/timetable/staff", json={"name": "Dr. Rao", "email": "rao@campuspilot.org"}, headers=headers)
    assert staff.status_code == 201
    venue = client.post("/timetable/venues", json={"name": "LH-101", "facilities": ["projector"]}, headers=headers)
    assert venue.status_code == 201
    assert venue.json()["facilities"] == ["projector"]
    assert venue.json()["type"] == "classroom"
    assert client.get("/timetable/staff").status_code == 200
    assert client.get("/timetable/venues").status_code == 200


def test_concurrent_duplicate_subject_conflicts(client, register_user, monkeypatch):
    _, headers = register_user()
    subject = {"code": f"CS{uuid.uuid4().hex[:6]}", "name": "Operating Systems"}
    assert client.post("/timetable/subjects", json=subject, headers=headers).status_code == 201

    monkeypatch.setattr(repositories.SubjectRepository, "get_by_code", lambda self, code: None)
    r = client.post("/timetable/subjects", json=subject, headers=headers)
    assert r.status_code == 409
    assert client.get("/timetable/subjects").status_code == 200
