"""iCalendar export of a user's timetable.

The exporter turns resolved timetable slots into concrete events for a
date range and serializes them with the `ics` library. Subject, staff
and venue references are weak, so each lookup falls back to a sentinel
value (and logs a warning) instead of failing the export.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from ics import Calendar, Event
from ics.grammar.parse import ContentLine
from sqlmodel import Session

from . import models, repositories
from .config import Settings
from .repositories import weekday_number
from .services import ScheduleResolver

logger = logging.getLogger("app.calendar")

PRODID = "-//Campus Pilot//NONSGML Timetable//EN"
CALENDAR_NAME = "Campus Pilot Timetable"
CALENDAR_DESCRIPTION = "Your personalized Campus Pilot Timetable"
EXPORT_FILENAME = "campus-pilot-timetable.ics"

UNKNOWN_SUBJECT = "Unknown Subject"
NOT_AVAILABLE = "N/A"


@dataclass
class CalendarEvent:
    """A timetable slot placed on a concrete date, ready to serialize."""
    uid: str
    slot_id: str
    summary: str
    description: str
    location: str
    begin: datetime
    end: datetime


def occurrence_date(slot: models.TimetableSlot, start: date) -> date:
    """Date a slot falls on for an export starting at `start`.

    One-off slots use their own date. Recurring slots land on the first
    matching weekday on or after `start`; only that single occurrence is
    produced, even for ranges longer than a week.
    """
    if slot.specific_date is not None:
        return slot.specific_date
    days_ahead = (slot.day_of_week - weekday_number(start) + 7) % 7
    return start + timedelta(days=days_ahead)


class CalendarExporter:
    def __init__(self, session: Session, cfg: Settings):
        self.resolver = ScheduleResolver(session)
        self.subjects = repositories.SubjectRepository(session)
        self.staff = repositories.StaffRepository(session)
        self.venues = repositories.VenueRepository(session)
        self.tz = cfg.tzinfo

    def build_events(self, user_id: str, start: datetime, end: datetime) -> List[CalendarEvent]:
        """Resolve the user's slots in `[start, end]` and enrich them.

        Resolver failures propagate; enrichment failures never do.
        """
        slots = self.resolver.by_date_range(user_id, start, end)
        first_day = start.date() if isinstance(start, datetime) else start
        return [self._to_event(slot, first_day) for slot in slots]

    def export(self, user_id: str, start: datetime, end: datetime) -> str:
        """Return the iCalendar document for the user's slots in range."""
        events = self.build_events(user_id, start, end)
        logger.info("exporting %d events for user %s", len(events), user_id)
        return render_calendar(events)

    def _to_event(self, slot: models.TimetableSlot, first_day: date) -> CalendarEvent:
        day = occurrence_date(slot, first_day)
        begin = datetime.combine(day, slot.start_time, tzinfo=self.tz)
        end = datetime.combine(day, slot.end_time, tzinfo=self.tz)

        subject_name, subject_code = self._subject(slot)
        staff_name = self._staff_name(slot)
        venue_name = self._venue_name(slot)

        return CalendarEvent(
            uid=str(uuid.uuid4()),
            slot_id=slot.id,
            summary=f"{subject_name} - {slot.slot_type}",
            description=(
                f"Subject: {subject_name} ({subject_code})\n"
                f"Staff: {staff_name}\n"
                f"Venue: {venue_name}\n"
                f"Type: {slot.slot_type}"
            ),
            location=venue_name,
            begin=begin,
            end=end,
        )

    def _lookup(self, repo, kind: str, ref_id: Optional[str], slot_id: str):
        if not ref_id:
            return None
        try:
            row = repo.get(ref_id)
        except Exception:
            logger.warning("failed to load %s %s for slot %s", kind, ref_id, slot_id, exc_info=True)
            return None
        if row is None:
            logger.warning("%s %s referenced by slot %s not found", kind, ref_id, slot_id)
        return row

    def _subject(self, slot):
        subject = self._lookup(self.subjects, "subject", slot.subject_id, slot.id)
        if subject is None:
            return UNKNOWN_SUBJECT, ""
        return subject.name, subject.code

    def _staff_name(self, slot) -> str:
        staff = self._lookup(self.staff, "staff", slot.staff_id, slot.id)
        return staff.name if staff else NOT_AVAILABLE

    def _venue_name(self, slot) -> str:
        venue = self._lookup(self.venues, "venue", slot.venue_id, slot.id)
        return venue.name if venue else NOT_AVAILABLE


def render_calendar(events: List[CalendarEvent]) -> str:
    """Serialize events into one VCALENDAR document."""
    cal = Calendar(creator=PRODID)
    cal.extra.append(ContentLine(name="X-WR-CALNAME", value=CALENDAR_NAME))
    cal.extra.append(ContentLine(name="X-WR-CALDESC", value=CALENDAR_DESCRIPTION))
    for item in events:
        ev = Event()
        ev.uid = item.uid
        ev.name = item.summary
        ev.description = item.description
        ev.location = item.location
        # serialized as UTC instants
        ev.begin = item.begin.astimezone(timezone.utc)
        ev.end = item.end.astimezone(timezone.utc)
        cal.events.add(ev)
    return cal.serialize()
