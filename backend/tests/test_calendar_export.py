import logging
import uuid
from datetime import date, datetime, time

from app import models, services
from app.calendar_export import CalendarExporter, occurrence_date, render_calendar
from app.config import Settings
from app.schemas import TimetableSlotIn


def _slot(db, user_id, **fields):
    data = {"day_of_week": 1, "start_time": time(9), "end_time": time(10)}
    data.update(fields)
    return services.TimetableService(db).create(user_id, TimetableSlotIn(**data))


def _catalog(db):
    subject = models.Subject(code=f"DS{uuid.uuid4().hex[:6]}", name="Data Structures")
    staff = models.Staff(name="Dr. Rao")
    venue = models.Venue(name="LH-101")
    for row in (subject, staff, venue):
        db.add(row)
    db.commit()
    for row in (subject, staff, venue):
        db.refresh(row)
    return subject, staff, venue


def _export_range(start, end):
    return datetime.combine(start, time.min), services.end_of_day(end)


def test_recurring_slot_lands_on_next_matching_weekday():
    slot = models.TimetableSlot(user_id="u", day_of_week=1, start_time=time(9), end_time=time(10))
    # Wednesday start: the following Monday, never the one before
    assert occurrence_date(slot, date(2024, 3, 13)) == date(2024, 3, 18)
    # same weekday as the start
    assert occurrence_date(slot, date(2024, 3, 18)) == date(2024, 3, 18)


def test_one_off_slot_uses_its_own_date():
    slot = models.TimetableSlot(
        user_id="u", day_of_week=5, start_time=time(9), end_time=time(10),
        is_recurring=False, specific_date=date(2024, 3, 15),
    )
    assert occurrence_date(slot, date(2024, 3, 10)) == date(2024, 3, 15)


def test_export_enriches_events(db, user):
    subject, staff, venue = _catalog(db)
    _slot(db, user.id, subject_id=subject.id, staff_id=staff.id, venue_id=venue.id, slot_type="lecture")

    exporter = CalendarExporter(db, Settings(TIMEZONE="UTC"))
    events = exporter.build_events(user.id, *_export_range(date(2024, 3, 13), date(2024, 3, 19)))

    assert len(events) == 1
    ev = events[0]
    assert ev.summary == "Data Structures - lecture"
    assert ev.description == (
        f"Subject: Data Structures ({subject.code})\n"
        "Staff: Dr. Rao\n"
        "Venue: LH-101\n"
        "Type: lecture"
    )
    assert ev.location == "LH-101"
    assert ev.begin.date() == date(2024, 3, 18)
    assert ev.begin.time() == time(9)
    assert ev.end.time() == time(10)


def test_export_places_times_in_configured_zone(db, user):
    _slot(db, user.id)
    exporter = CalendarExporter(db, Settings(TIMEZONE="Asia/Kolkata"))
    events = exporter.build_events(user.id, *_export_range(date(2024, 3, 13), date(2024, 3, 19)))
    assert events[0].begin.utcoffset().total_seconds() == 5.5 * 3600
    assert events[0].begin.hour == 9


def test_missing_references_fall_back_to_sentinels(db, user, caplog):
    caplog.set_level(logging.WARNING, logger="app.calendar")
    _slot(db, user.id, subject_id="gone-subject", staff_id="gone-staff", venue_id="gone-venue", slot_type="lab")
    _slot(db, user.id, day_of_week=2)

    exporter = CalendarExporter(db, Settings(TIMEZONE="UTC"))
    events = exporter.build_events(user.id, *_export_range(date(2024, 3, 13), date(2024, 3, 19)))

    assert len(events) == 2
    dangling = next(e for e in events if e.summary.endswith("- lab"))
    assert dangling.summary == "Unknown Subject - lab"
    assert "Subject: Unknown Subject ()" in dangling.description
    assert "Staff: N/A" in dangling.description
    assert dangling.location == "N/A"
    assert any("gone-subject" in rec.getMessage() for rec in caplog.records)


def test_render_calendar_document(db, user):
    _slot(db, user.id)
    exporter = CalendarExporter(db, Settings(TIMEZONE="UTC"))
    text = exporter.export(user.id, *_export_range(date(2024, 3, 13), date(2024, 3, 19)))

    assert text.startswith("BEGIN:VCALENDAR")
    assert "PRODID:-//Campus Pilot//NONSGML Timetable//EN" in text
    assert "X-WR-CALNAME:Campus Pilot Timetable" in text
    assert "X-WR-CALDESC:Your personalized Campus Pilot Timetable" in text
    assert text.count("BEGIN:VEVENT") == 1
    assert "SUMMARY:Unknown Subject - lecture" in text


def test_empty_calendar_renders():
    text = render_calendar([])
    assert "BEGIN:VCALENDAR" in text
    assert "BEGIN:VEVENT" not in text


# --- HTTP -----------------------------------------------------------------

def test_export_endpoint(client, register_user):
    _, headers = register_user()
    client.post(
        "/timetable/slots",
        json={"dayOfWeek": 1, "startTime": "09:00", "endTime": "10:00"},
        headers=headers,
    )
    r = client.get("/timetable/export.ics", params={"start": "2024-03-13", "end": "2024-03-19"}, headers=headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/calendar")
    assert "attachment" in r.headers["content-disposition"]
    assert "BEGIN:VEVENT" in r.text


def test_export_endpoint_defaults_to_coming_week(client, register_user):
    _, headers = register_user()
    for day in range(7):
        client.post(
            "/timetable/slots",
            json={"dayOfWeek": day, "startTime": "09:00", "endTime": "10:00"},
            headers=headers,
        )
    r = client.get("/timetable/export.ics", headers=headers)
    assert r.status_code == 200
    assert r.text.count("BEGIN:VEVENT") == 7


def test_export_requires_auth(client):
    assert client.get("/timetable/export.ics").status_code == 401
