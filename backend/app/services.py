"""Business logic services used by the HTTP routers.

This module holds small service classes that coordinate repositories.
Services are intentionally thin: they validate, enforce ownership of
per-user rows and persist through the repositories. Every failure is
raised as an `app.errors.AppError` subclass. A unique-key collision
becomes `ConflictError`; other store errors propagate unchanged and are
never retried.
"""

from datetime import date, datetime, time
from typing import List, Optional, Type

from passlib.context import CryptContext
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from . import models, repositories
from .auth import TokenService
from .errors import ConflictError, ForbiddenError, InvalidCredentialsError, NotFoundError, ValidationError

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class AuthService:
    """Authentication related operations (register + login)."""
    def __init__(self, session: Session, tokens: TokenService):
        self.session = session
        self.tokens = tokens
        self.user_repo = repositories.UserRepository(session)

    def register(self, payload) -> models.User:
        """Create a new user with a hashed password.

        Raises `ConflictError` when the email is already registered.
        """
        if self.user_repo.get_by_email(payload.email):
            raise ConflictError("user with this email already exists")
        user = models.User(
            email=payload.email,
            password_hash=PWD_CTX.hash(payload.password),
            full_name=payload.full_name,
            register_number=payload.register_number,
            department=payload.department,
            year=payload.year,
            semester=payload.semester,
        )
        try:
            return self.user_repo.create(user)
        except IntegrityError as e:
            # lost a race with a concurrent registration
            self.session.rollback()
            raise ConflictError("user with this email already exists") from e

    def login(self, email: str, password: str) -> str:
        """Verify credentials and return a signed token.

        An unknown email and a wrong password fail identically so the
        response does not reveal which accounts exist.
        """
        user = self.user_repo.get_by_email(email)
        if not user or not PWD_CTX.verify(password, user.password_hash):
            raise InvalidCredentialsError()
        user.last_login_at = models.utcnow()
        self.user_repo.save(user)
        return self.tokens.issue_token(user.id)

    def profile(self, user_id: str) -> models.User:
        user = self.user_repo.get(user_id)
        if not user:
            raise NotFoundError("user")
        return user


class CatalogService:
    """Shared reference data: subjects, staff and venues."""
    def __init__(self, session: Session):
        self.session = session
        self.subjects = repositories.SubjectRepository(session)
        self.staff = repositories.StaffRepository(session)
        self.venues = repositories.VenueRepository(session)

    def create_subject(self, payload) -> models.Subject:
        if self.subjects.get_by_code(payload.code):
            raise ConflictError(f"subject with code {payload.code} already exists")
        try:
            return self.subjects.create(models.Subject(**payload.model_dump()))
        except IntegrityError as e:
            self.session.rollback()
            raise ConflictError(f"subject with code {payload.code} already exists") from e

    def list_subjects(self) -> List[models.Subject]:
        return self.subjects.list_all()

    def create_staff(self, payload) -> models.Staff:
        return self.staff.create(models.Staff(**payload.model_dump()))

    def list_staff(self) -> List[models.Staff]:
        return self.staff.list_all()

    def create_venue(self, payload) -> models.Venue:
        return self.venues.create(models.Venue(**payload.model_dump()))

    def list_venues(self) -> List[models.Venue]:
        return self.venues.list_all()


class OwnedService:
    """CRUD over a per-user table with ownership checks.

    Single-row reads, updates and deletes load the row first: a missing
    row raises `NotFoundError`, a row owned by someone else raises
    `ForbiddenError`, and nothing is mutated in either case.
    """
    repo_class: Type[repositories.BaseRepository]
    resource: str

    def __init__(self, session: Session):
        self.session = session
        self.repo = self.repo_class(session)

    def get(self, user_id: str, obj_id: str):
        obj = self.repo.get(obj_id)
        if obj is None:
            raise NotFoundError(self.resource)
        if obj.user_id != user_id:
            raise ForbiddenError(self.resource)
        return obj

    def create(self, user_id: str, payload: BaseModel):
        obj = self.repo.model(user_id=user_id, **payload.model_dump())
        return self.repo.create(obj)

    def update(self, user_id: str, obj_id: str, payload: BaseModel):
        """Apply the fields present in `payload`; absent fields keep their values."""
        obj = self.get(user_id, obj_id)
        for key, value in payload.model_dump(exclude_unset=True).items():
            setattr(obj, key, value)
        return self.repo.save(obj)

    def delete(self, user_id: str, obj_id: str) -> None:
        obj = self.get(user_id, obj_id)
        self.repo.delete(obj)

    def _set_field(self, user_id: str, obj_id: str, field: str, value):
        obj = self.get(user_id, obj_id)
        setattr(obj, field, value)
        return self.repo.save(obj)


class TimetableService(OwnedService):
    """A user's own timetable slots."""
    repo_class = repositories.TimetableSlotRepository
    resource = "timetable slot"

    def create(self, user_id: str, payload: BaseModel) -> models.TimetableSlot:
        slot = models.TimetableSlot(user_id=user_id, **payload.model_dump())
        slot.is_active = True
        return self.repo.create(slot)


def _check_day_of_week(day_of_week: int) -> None:
    if not 0 <= day_of_week <= 6:
        raise ValidationError("invalid day of week, must be 0-6")


class ScheduleResolver:
    """Answer "which slots apply" for a weekday or a date range.

    Results are slot rows, not per-date occurrences; placing a recurring
    slot on a concrete date is left to the calendar exporter.
    """
    def __init__(self, session: Session):
        self.slot_repo = repositories.TimetableSlotRepository(session)

    def by_weekday(self, user_id: str, day_of_week: int) -> List[models.TimetableSlot]:
        """Active recurring slots on `day_of_week` (0=Sunday), earliest first."""
        _check_day_of_week(day_of_week)
        return self.slot_repo.list_by_user_and_day(user_id, day_of_week)

    def by_date_range(self, user_id: str, start, end) -> List[models.TimetableSlot]:
        """Active slots that could occur within `[start, end]`.

        `end` should already cover the whole last day. A recurring slot is
        included when its weekday falls on some date of the range.
        """
        if end < start:
            raise ValidationError("end must not be before start")
        return self.slot_repo.list_by_user_and_date_range(user_id, start, end)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


class AssignmentService(OwnedService):
    repo_class = repositories.AssignmentRepository
    resource = "assignment"

    def create(self, user_id: str, payload: BaseModel) -> models.Assignment:
        fields = payload.model_dump()
        if fields.get("assigned_date") is None:
            fields["assigned_date"] = date.today()
        return self.repo.create(models.Assignment(user_id=user_id, **fields))

    def list(self, user_id: str) -> List[models.Assignment]:
        return self.repo.list_for_user(user_id)

    def pending(self, user_id: str, now: Optional[datetime] = None) -> List[models.Assignment]:
        return self.repo.list_pending(user_id, now or models.utcnow())

    def overdue(self, user_id: str, now: Optional[datetime] = None) -> List[models.Assignment]:
        return self.repo.list_overdue(user_id, now or models.utcnow())

    def update_status(self, user_id: str, obj_id: str, status: str) -> models.Assignment:
        return self._set_field(user_id, obj_id, "status", status)


class ExamService(OwnedService):
    repo_class = repositories.ExamRepository
    resource = "exam"

    def list(self, user_id: str) -> List[models.Exam]:
        return self.repo.list_for_user(user_id)

    def upcoming(self, user_id: str, today: Optional[date] = None) -> List[models.Exam]:
        return self.repo.list_upcoming(user_id, today or date.today())

    def update_prep_status(self, user_id: str, obj_id: str, prep_status: str) -> models.Exam:
        return self._set_field(user_id, obj_id, "prep_status", prep_status)


class ImportantQuestionService(OwnedService):
    repo_class = repositories.ImportantQuestionRepository
    resource = "important question"

    def list_for_exam(self, user_id: str, exam_id: str) -> List[models.ImportantQuestion]:
        return self.repo.list_for_exam(user_id, exam_id)

    def list_for_subject(self, user_id: str, subject_id: str) -> List[models.ImportantQuestion]:
        return self.repo.list_for_subject(user_id, subject_id)


class LabRecordService(OwnedService):
    repo_class = repositories.LabRecordRepository
    resource = "lab record"

    def list(self, user_id: str) -> List[models.LabRecord]:
        return self.repo.list_for_user(user_id)

    def list_for_subject(self, user_id: str, subject_id: str) -> List[models.LabRecord]:
        return self.repo.list_for_subject(user_id, subject_id)

    def update_status(self, user_id: str, obj_id: str, status: str) -> models.LabRecord:
        return self._set_field(user_id, obj_id, "status", status)


class DocumentService(OwnedService):
    repo_class = repositories.DocumentRepository
    resource = "document"

    def list(self, user_id: str) -> List[models.Document]:
        return self.repo.list_for_user(user_id)

    def list_for_subject(self, user_id: str, subject_id: str) -> List[models.Document]:
        return self.repo.list_for_subject(user_id, subject_id)

    def _get_readable(self, user_id: str, obj_id: str) -> models.Document:
        """Owner, public documents and explicit shares may be read."""
        doc = self.repo.get(obj_id)
        if doc is None:
            raise NotFoundError(self.resource)
        if doc.user_id != user_id and not doc.is_public and user_id not in (doc.shared_with or []):
            raise ForbiddenError(self.resource)
        return doc

    def record_view(self, user_id: str, obj_id: str) -> models.Document:
        doc = self._get_readable(user_id, obj_id)
        doc.view_count += 1
        doc.last_accessed_at = models.utcnow()
        return self.repo.save(doc)

    def record_download(self, user_id: str, obj_id: str) -> models.Document:
        doc = self._get_readable(user_id, obj_id)
        doc.download_count += 1
        doc.last_accessed_at = models.utcnow()
        return self.repo.save(doc)


class StudyPlanService(OwnedService):
    repo_class = repositories.StudyPlanRepository
    resource = "study plan"

    def list(self, user_id: str) -> List[models.StudyPlan]:
        return self.repo.list_for_user(user_id)

    def list_for_date(self, user_id: str, plan_date: date) -> List[models.StudyPlan]:
        return self.repo.list_for_date(user_id, plan_date)


class StudySessionService(OwnedService):
    repo_class = repositories.StudySessionRepository
    resource = "study session"

    def __init__(self, session: Session):
        super().__init__(session)
        self.plans = StudyPlanService(session)

    def create(self, user_id: str, payload: BaseModel) -> models.StudySession:
        if payload.study_plan_id:
            self.plans.get(user_id, payload.study_plan_id)
        return super().create(user_id, payload)

    def update(self, user_id: str, obj_id: str, payload: BaseModel) -> models.StudySession:
        if payload.study_plan_id:
            self.plans.get(user_id, payload.study_plan_id)
        return super().update(user_id, obj_id, payload)

    def list(self, user_id: str) -> List[models.StudySession]:
        return self.repo.list_for_user(user_id)

    def list_for_plan(self, user_id: str, study_plan_id: str) -> List[models.StudySession]:
        self.plans.get(user_id, study_plan_id)
        return self.repo.list_for_plan(study_plan_id)


class AnalyticsService:
    """Activity log entries and daily statistics for the acting user."""
    def __init__(self, session: Session):
        self.repo = repositories.AnalyticsRepository(session)

    def log_activity(self, user_id: str, payload) -> models.ActivityLog:
        fields = payload.model_dump()
        fields["details"] = fields.pop("metadata")
        return self.repo.create_log(models.ActivityLog(user_id=user_id, **fields))

    def list_activity(self, user_id: str, activity_type: Optional[str] = None) -> List[models.ActivityLog]:
        return self.repo.list_logs(user_id, activity_type)

    def list_stats(self, user_id: str) -> List[models.DailyStats]:
        return self.repo.list_stats(user_id)

    def get_stats(self, user_id: str, stat_date: date) -> models.DailyStats:
        stats = self.repo.get_stats(user_id, stat_date)
        if stats is None:
            raise NotFoundError("daily stats")
        return stats

    def upsert_stats(self, user_id: str, payload) -> models.DailyStats:
        counters = payload.model_dump(exclude_none=True)
        stat_date = counters.pop("stat_date")
        return self.repo.upsert_stats(user_id, stat_date, counters)
