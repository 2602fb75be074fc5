"""Timetable endpoints: catalog, slots, schedule queries and ICS export."""

from datetime import date, datetime, time, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from .. import services
from ..auth import get_current_user_id
from ..calendar_export import EXPORT_FILENAME, CalendarExporter
from ..config import settings
from ..database import get_session
from ..schemas import StaffIn, SubjectIn, TimetableSlotIn, VenueIn, dump, dump_all

router = APIRouter(prefix="/timetable", tags=["timetable"])


# --- catalog --------------------------------------------------------------

@router.get("/subjects")
def list_subjects(db: Session = Depends(get_session)):
    return dump_all(services.CatalogService(db).list_subjects())


@router.post("/subjects", status_code=status.HTTP_201_CREATED)
def create_subject(payload: SubjectIn, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.CatalogService(db).create_subject(payload))


@router.get("/staff")
def list_staff(db: Session = Depends(get_session)):
    return dump_all(services.CatalogService(db).list_staff())


@router.post("/staff", status_code=status.HTTP_201_CREATED)
def create_staff(payload: StaffIn, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.CatalogService(db).create_staff(payload))


@router.get("/venues")
def list_venues(db: Session = Depends(get_session)):
    return dump_all(services.CatalogService(db).list_venues())


@router.post("/venues", status_code=status.HTTP_201_CREATED)
def create_venue(payload: VenueIn, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.CatalogService(db).create_venue(payload))


# --- slots ----------------------------------------------------------------

@router.post("/slots", status_code=status.HTTP_201_CREATED)
def create_slot(payload: TimetableSlotIn, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    """Create a slot owned by the caller."""
    return dump(services.TimetableService(db).create(user_id, payload))


@router.get("/slots/{slot_id}")
def get_slot(slot_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.TimetableService(db).get(user_id, slot_id))


@router.delete("/slots/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_slot(slot_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    services.TimetableService(db).delete(user_id, slot_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- schedule queries -----------------------------------------------------

@router.get("/day/{day_of_week}")
def by_weekday(day_of_week: int, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    """Recurring slots for a weekday, 0=Sunday..6=Saturday."""
    return dump_all(services.ScheduleResolver(db).by_weekday(user_id, day_of_week))


@router.get("/range")
def by_date_range(start: date, end: date, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    """Slots that may occur between two dates, both inclusive."""
    slots = services.ScheduleResolver(db).by_date_range(
        user_id, datetime.combine(start, time.min), services.end_of_day(end)
    )
    return dump_all(slots)


@router.get("/export.ics")
def export_calendar(
    start: Optional[date] = None,
    end: Optional[date] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
):
    """Download the caller's timetable as an iCalendar file.

    Defaults to the seven days starting today in the server time zone.
    """
    if start is None:
        start = datetime.now(settings.tzinfo).date()
    if end is None:
        end = start + timedelta(days=6)
    exporter = CalendarExporter(db, settings)
    body = exporter.export(user_id, datetime.combine(start, time.min), services.end_of_day(end))
    return Response(
        content=body,
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )
