"""Repository classes encapsulating database operations.

Each repository is small and focused on a single table. Repositories
return SQLModel objects and perform commits/refreshes where appropriate;
they never check ownership, that is the services' job. Store errors
propagate to the caller unchanged.
"""

from datetime import date, datetime, timedelta
from typing import Generic, List, Optional, Type, TypeVar

from sqlmodel import Session, SQLModel, select

from . import models

ModelT = TypeVar("ModelT", bound=SQLModel)


class BaseRepository(Generic[ModelT]):
    """Shared create/get/save/delete for a single table."""
    model: Type[ModelT]

    def __init__(self, session: Session):
        self.session = session

    def create(self, obj: ModelT) -> ModelT:
        """Persist a new row and return the managed instance."""
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def get(self, obj_id: str) -> Optional[ModelT]:
        """Fetch a row by primary key or return `None`."""
        return self.session.get(self.model, obj_id)

    def save(self, obj: ModelT) -> ModelT:
        """Flush changes made to a managed instance."""
        if hasattr(obj, "updated_at"):
            obj.updated_at = models.utcnow()
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def delete(self, obj: ModelT) -> None:
        self.session.delete(obj)
        self.session.commit()

    def list_all(self) -> List[ModelT]:
        return list(self.session.exec(select(self.model)).all())


class UserRepository(BaseRepository[models.User]):
    """Identity store."""
    model = models.User

    def get_by_email(self, email: str) -> Optional[models.User]:
        """Return a `User` by email or `None` if not found."""
        stmt = select(models.User).where(models.User.email == email)
        return self.session.exec(stmt).first()


class SubjectRepository(BaseRepository[models.Subject]):
    model = models.Subject

    def get_by_code(self, code: str) -> Optional[models.Subject]:
        stmt = select(models.Subject).where(models.Subject.code == code)
        return self.session.exec(stmt).first()


class StaffRepository(BaseRepository[models.Staff]):
    model = models.Staff


class VenueRepository(BaseRepository[models.Venue]):
    model = models.Venue


def weekday_number(value) -> int:
    """Day of week with 0=Sunday..6=Saturday."""
    return value.isoweekday() % 7


def _as_date(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def weekdays_between(start, end) -> List[int]:
    """Weekday numbers of every date from `start` to `end` inclusive."""
    first, last = _as_date(start), _as_date(end)
    span = (last - first).days + 1
    if span >= 7:
        return list(range(7))
    return sorted({weekday_number(first + timedelta(days=i)) for i in range(max(span, 0))})


class TimetableSlotRepository(BaseRepository[models.TimetableSlot]):
    """Per-user timetable slots."""
    model = models.TimetableSlot

    def list_by_user_and_day(self, user_id: str, day_of_week: int) -> List[models.TimetableSlot]:
        """Active recurring slots for one weekday, earliest first."""
        Slot = models.TimetableSlot
        stmt = (
            select(Slot)
            .where(
                Slot.user_id == user_id,
                Slot.day_of_week == day_of_week,
                Slot.is_active == True,  # noqa: E712
                Slot.is_recurring == True,  # noqa: E712
            )
            .order_by(Slot.start_time)
        )
        return list(self.session.exec(stmt).all())

    def list_by_user_and_date_range(self, user_id: str, start, end) -> List[models.TimetableSlot]:
        """Active slots that may fall within `[start, end]`, earliest first.

        Recurring slots match when their weekday occurs on some date of the
        range. One-off slots match when `specific_date` lies in the
        range, both ends inclusive.
        """
        Slot = models.TimetableSlot
        stmt = (
            select(Slot)
            .where(
                Slot.user_id == user_id,
                Slot.is_active == True,  # noqa: E712
                (
                    (Slot.is_recurring == True)  # noqa: E712
                    & Slot.day_of_week.in_(weekdays_between(start, end))
                )
                | (
                    (Slot.is_recurring == False)  # noqa: E712
                    & Slot.specific_date.between(_as_date(start), _as_date(end))
                ),
            )
            .order_by(Slot.start_time)
        )
        return list(self.session.exec(stmt).all())


class AssignmentRepository(BaseRepository[models.Assignment]):
    model = models.Assignment
    OPEN_STATUSES = (models.AssignmentStatus.PENDING.value, models.AssignmentStatus.IN_PROGRESS.value)

    def list_for_user(self, user_id: str) -> List[models.Assignment]:
        stmt = select(models.Assignment).where(models.Assignment.user_id == user_id).order_by(models.Assignment.due_date)
        return list(self.session.exec(stmt).all())

    def list_pending(self, user_id: str, now: datetime) -> List[models.Assignment]:
        """Open assignments that are not yet due."""
        A = models.Assignment
        stmt = (
            select(A)
            .where(A.user_id == user_id, A.status.in_(self.OPEN_STATUSES), A.due_date >= now)
            .order_by(A.due_date)
        )
        return list(self.session.exec(stmt).all())

    def list_overdue(self, user_id: str, now: datetime) -> List[models.Assignment]:
        """Open assignments whose due date has passed."""
        A = models.Assignment
        stmt = (
            select(A)
            .where(A.user_id == user_id, A.status.in_(self.OPEN_STATUSES), A.due_date < now)
            .order_by(A.due_date)
        )
        return list(self.session.exec(stmt).all())


class ExamRepository(BaseRepository[models.Exam]):
    model = models.Exam

    def list_for_user(self, user_id: str) -> List[models.Exam]:
        E = models.Exam
        stmt = select(E).where(E.user_id == user_id).order_by(E.exam_date, E.start_time)
        return list(self.session.exec(stmt).all())

    def list_upcoming(self, user_id: str, today: date) -> List[models.Exam]:
        E = models.Exam
        stmt = select(E).where(E.user_id == user_id, E.exam_date >= today).order_by(E.exam_date, E.start_time)
        return list(self.session.exec(stmt).all())


class ImportantQuestionRepository(BaseRepository[models.ImportantQuestion]):
    model = models.ImportantQuestion

    def list_for_exam(self, user_id: str, exam_id: str) -> List[models.ImportantQuestion]:
        Q = models.ImportantQuestion
        stmt = select(Q).where(Q.user_id == user_id, Q.exam_id == exam_id).order_by(Q.created_at)
        return list(self.session.exec(stmt).all())

    def list_for_subject(self, user_id: str, subject_id: str) -> List[models.ImportantQuestion]:
        Q = models.ImportantQuestion
        stmt = select(Q).where(Q.user_id == user_id, Q.subject_id == subject_id).order_by(Q.created_at)
        return list(self.session.exec(stmt).all())


class LabRecordRepository(BaseRepository[models.LabRecord]):
    model = models.LabRecord

    def list_for_user(self, user_id: str) -> List[models.LabRecord]:
        L = models.LabRecord
        stmt = select(L).where(L.user_id == user_id).order_by(L.lab_date.desc(), L.experiment_number)
        return list(self.session.exec(stmt).all())

    def list_for_subject(self, user_id: str, subject_id: str) -> List[models.LabRecord]:
        L = models.LabRecord
        stmt = select(L).where(L.user_id == user_id, L.subject_id == subject_id).order_by(L.experiment_number)
        return list(self.session.exec(stmt).all())


class DocumentRepository(BaseRepository[models.Document]):
    model = models.Document

    def list_for_user(self, user_id: str) -> List[models.Document]:
        D = models.Document
        stmt = select(D).where(D.user_id == user_id).order_by(D.created_at.desc())
        return list(self.session.exec(stmt).all())

    def list_for_subject(self, user_id: str, subject_id: str) -> List[models.Document]:
        D = models.Document
        stmt = select(D).where(D.user_id == user_id, D.subject_id == subject_id).order_by(D.created_at.desc())
        return list(self.session.exec(stmt).all())


class StudyPlanRepository(BaseRepository[models.StudyPlan]):
    model = models.StudyPlan

    def list_for_user(self, user_id: str) -> List[models.StudyPlan]:
        P = models.StudyPlan
        stmt = select(P).where(P.user_id == user_id).order_by(P.plan_date.desc(), P.created_at.desc())
        return list(self.session.exec(stmt).all())

    def list_for_date(self, user_id: str, plan_date: date) -> List[models.StudyPlan]:
        P = models.StudyPlan
        stmt = select(P).where(P.user_id == user_id, P.plan_date == plan_date).order_by(P.created_at.desc())
        return list(self.session.exec(stmt).all())


class StudySessionRepository(BaseRepository[models.StudySession]):
    model = models.StudySession

    def list_for_user(self, user_id: str) -> List[models.StudySession]:
        S = models.StudySession
        stmt = select(S).where(S.user_id == user_id).order_by(S.planned_start_time.desc(), S.created_at.desc())
        return list(self.session.exec(stmt).all())

    def list_for_plan(self, study_plan_id: str) -> List[models.StudySession]:
        S = models.StudySession
        stmt = select(S).where(S.study_plan_id == study_plan_id).order_by(S.planned_start_time, S.created_at)
        return list(self.session.exec(stmt).all())


class AnalyticsRepository:
    """Activity logs and pre-aggregated daily statistics."""
    def __init__(self, session: Session):
        self.session = session

    def create_log(self, log: models.ActivityLog) -> models.ActivityLog:
        self.session.add(log)
        self.session.commit()
        self.session.refresh(log)
        return log

    def list_logs(self, user_id: str, activity_type: Optional[str] = None) -> List[models.ActivityLog]:
        L = models.ActivityLog
        stmt = select(L).where(L.user_id == user_id)
        if activity_type:
            stmt = stmt.where(L.activity_type == activity_type)
        return list(self.session.exec(stmt.order_by(L.created_at.desc())).all())

    def get_stats(self, user_id: str, stat_date: date) -> Optional[models.DailyStats]:
        S = models.DailyStats
        stmt = select(S).where(S.user_id == user_id, S.stat_date == stat_date)
        return self.session.exec(stmt).first()

    def list_stats(self, user_id: str) -> List[models.DailyStats]:
        S = models.DailyStats
        stmt = select(S).where(S.user_id == user_id).order_by(S.stat_date.desc())
        return list(self.session.exec(stmt).all())

    def upsert_stats(self, user_id: str, stat_date: date, counters: dict) -> models.DailyStats:
        """Create or update the stats row for `user_id`/`stat_date`.

        Only the counters present in `counters` are written.
        """
        stats = self.get_stats(user_id, stat_date)
        if stats is None:
            stats = models.DailyStats(user_id=user_id, stat_date=stat_date)
        for key, value in counters.items():
            setattr(stats, key, value)
        self.session.add(stats)
        self.session.commit()
        self.session.refresh(stats)
        return stats
