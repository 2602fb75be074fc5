"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and provide validation for
the routers and tests. JSON uses camelCase field names; snake_case names
are accepted too so Python callers can build payloads directly.
"""

from datetime import date, datetime, time, timezone
from typing import Annotated, Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel

from . import models

# never leaves the server
_PRIVATE_FIELDS = {"password_hash"}
_RENAMED_FIELDS = {"details": "metadata"}


def _to_utc(value: datetime) -> datetime:
    # offset-less input is taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _local_time(value: time) -> time:
    if value.tzinfo is not None:
        raise ValueError("time of day must not carry a UTC offset")
    return value


# Timestamps are stored as aware UTC.
UtcDateTime = Annotated[datetime, AfterValidator(_to_utc)]
# Wall-clock times in the configured zone.
LocalTime = Annotated[time, AfterValidator(_local_time)]


def dump(obj: SQLModel) -> Dict[str, Any]:
    """Serialize a table row to a camelCase JSON-ready dict."""
    data = obj.model_dump()
    out = {}
    for key, value in data.items():
        if key in _PRIVATE_FIELDS:
            continue
        out[to_camel(_RENAMED_FIELDS.get(key, key))] = value
    return jsonable_encoder(out)


def dump_all(rows) -> List[Dict[str, Any]]:
    return [dump(r) for r in rows]


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)


# --- auth -----------------------------------------------------------------

class RegisterIn(ApiModel):
    """Payload for user registration."""
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: str = Field(min_length=1)
    register_number: str = Field(min_length=1)
    department: str = Field(min_length=1)
    year: int = Field(ge=1, le=4)
    semester: int = Field(ge=1, le=8)


class LoginIn(ApiModel):
    email: EmailStr
    password: str = Field(min_length=1)


class TokenOut(BaseModel):
    """Authentication response containing an access token."""
    access_token: str
    token_type: str = "bearer"


# --- timetable ------------------------------------------------------------

class SubjectIn(ApiModel):
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    short_name: Optional[str] = None
    type: str = "theory"
    credits: Optional[int] = Field(default=None, ge=0)
    department: Optional[str] = None
    semester: Optional[int] = Field(default=None, ge=1, le=8)
    color: Optional[str] = None


class StaffIn(ApiModel):
    name: str = Field(min_length=1)
    title: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    cabin: Optional[str] = None


class VenueIn(ApiModel):
    name: str = Field(min_length=1)
    building: Optional[str] = None
    floor: Optional[int] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    type: str = "classroom"
    facilities: List[str] = Field(default_factory=list)


class TimetableSlotIn(ApiModel):
    """A recurring weekly slot, or a one-off slot when `isRecurring` is false."""
    subject_id: Optional[str] = None
    staff_id: Optional[str] = None
    venue_id: Optional[str] = None
    day_of_week: int = Field(ge=0, le=6)
    start_time: LocalTime
    end_time: LocalTime
    period_number: Optional[int] = Field(default=None, ge=0)
    slot_type: str = "lecture"
    is_recurring: bool = True
    specific_date: Optional[date] = None
    notes: Optional[str] = None
    batch_filter: Optional[str] = None

    @model_validator(mode="after")
    def _check_shape(self):
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        if self.is_recurring and self.specific_date is not None:
            raise ValueError("recurring slots cannot have a specificDate")
        if not self.is_recurring and self.specific_date is None:
            raise ValueError("one-off slots require a specificDate")
        return self


# --- assignments ----------------------------------------------------------

class AssignmentIn(ApiModel):
    subject_id: Optional[str] = None
    staff_id: Optional[str] = None
    title: str = Field(min_length=1)
    description: Optional[str] = None
    instructions: Optional[str] = None
    assignment_type: str = Field(min_length=1)
    assigned_date: Optional[date] = None
    due_date: UtcDateTime
    submitted_at: Optional[UtcDateTime] = None
    status: models.AssignmentStatus = models.AssignmentStatus.PENDING
    max_marks: Optional[float] = Field(default=None, ge=0)
    obtained_marks: Optional[float] = Field(default=None, ge=0)
    feedback: Optional[str] = None
    priority: models.Priority = models.Priority.MEDIUM
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    actual_hours: Optional[float] = Field(default=None, ge=0)
    reminder_enabled: bool = True
    reminder_before_hours: Optional[int] = Field(default=None, ge=0)
    tags: List[str] = Field(default_factory=list)
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = None


class AssignmentStatusIn(ApiModel):
    status: models.AssignmentStatus


# --- exams ----------------------------------------------------------------

class ExamIn(ApiModel):
    subject_id: Optional[str] = None
    venue_id: Optional[str] = None
    title: str = Field(min_length=1)
    exam_type: str = Field(min_length=1)
    exam_date: date
    start_time: Optional[LocalTime] = None
    end_time: Optional[LocalTime] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    syllabus_units: List[str] = Field(default_factory=list)
    syllabus_topics: List[str] = Field(default_factory=list)
    syllabus_notes: Optional[str] = None
    max_marks: Optional[float] = Field(default=None, ge=0)
    obtained_marks: Optional[float] = Field(default=None, ge=0)
    grade: Optional[str] = None
    prep_status: models.PrepStatus = models.PrepStatus.NOT_STARTED
    prep_notes: Optional[str] = None
    study_hours_logged: Optional[float] = Field(default=None, ge=0)
    reminder_enabled: bool = True


class PrepStatusIn(ApiModel):
    prep_status: models.PrepStatus


class ImportantQuestionIn(ApiModel):
    subject_id: Optional[str] = None
    exam_id: Optional[str] = None
    question_text: str = Field(min_length=1)
    answer_text: Optional[str] = None
    source: Optional[str] = None
    unit: Optional[str] = None
    topic: Optional[str] = None
    marks: Optional[int] = Field(default=None, ge=0)
    frequency_count: Optional[int] = Field(default=None, ge=0)
    is_practiced: bool = False
    last_practiced_at: Optional[UtcDateTime] = None
    confidence_level: Optional[int] = Field(default=None, ge=1, le=5)
    tags: List[str] = Field(default_factory=list)


# --- lab records ----------------------------------------------------------

class LabRecordIn(ApiModel):
    subject_id: Optional[str] = None
    experiment_number: int = Field(ge=1)
    title: str = Field(min_length=1)
    lab_date: Optional[date] = None
    record_written_date: Optional[date] = None
    submitted_date: Optional[date] = None
    status: models.LabRecordStatus = models.LabRecordStatus.PENDING
    aim: Optional[str] = None
    algorithm: Optional[str] = None
    code: Optional[str] = None
    output: Optional[str] = None
    observations: Optional[str] = None
    result: Optional[str] = None
    viva_questions: List[str] = Field(default_factory=list)
    print_required: bool = True
    pages_to_print: Optional[int] = Field(default=None, ge=0)
    printed_at: Optional[UtcDateTime] = None
    marks: Optional[float] = Field(default=None, ge=0)
    staff_remarks: Optional[str] = None


class LabRecordStatusIn(ApiModel):
    status: models.LabRecordStatus


# --- documents ------------------------------------------------------------

class DocumentIn(ApiModel):
    subject_id: Optional[str] = None
    title: str = Field(min_length=1)
    description: Optional[str] = None
    document_type: str = Field(min_length=1)
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = Field(default=None, ge=0)
    file_url: str = Field(min_length=1)
    storage_key: Optional[str] = None
    folder: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_public: bool = False
    shared_with: List[str] = Field(default_factory=list)


# --- study plans and sessions ---------------------------------------------

class StudyPlanIn(ApiModel):
    title: str = Field(min_length=1)
    plan_date: date
    plan_type: models.PlanType
    status: models.StudyStatus = models.StudyStatus.PLANNED
    notes: Optional[str] = None


class StudySessionIn(ApiModel):
    study_plan_id: Optional[str] = None
    subject_id: Optional[str] = None
    planned_start_time: Optional[UtcDateTime] = None
    planned_end_time: Optional[UtcDateTime] = None
    planned_duration_minutes: Optional[int] = Field(default=None, ge=0)
    actual_start_time: Optional[UtcDateTime] = None
    actual_end_time: Optional[UtcDateTime] = None
    actual_duration_minutes: Optional[int] = Field(default=None, ge=0)
    session_type: models.SessionType
    topics_to_cover: List[str] = Field(default_factory=list)
    topics_covered: List[str] = Field(default_factory=list)
    status: models.StudyStatus = models.StudyStatus.PLANNED
    completion_percentage: int = Field(default=0, ge=0, le=100)
    productivity_rating: Optional[int] = Field(default=None, ge=1, le=5)
    notes: Optional[str] = None
    blockers: Optional[str] = None


# --- analytics ------------------------------------------------------------

class ActivityLogIn(ApiModel):
    activity_type: str = Field(min_length=1)
    description: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class DailyStatsIn(ApiModel):
    stat_date: date
    study_minutes: Optional[int] = Field(default=None, ge=0)
    sessions_completed: Optional[int] = Field(default=None, ge=0)
    topics_covered: Optional[int] = Field(default=None, ge=0)
    assignments_completed: Optional[int] = Field(default=None, ge=0)
    assignments_added: Optional[int] = Field(default=None, ge=0)
    classes_attended: Optional[int] = Field(default=None, ge=0)
    total_classes: Optional[int] = Field(default=None, ge=0)
    xp_earned: Optional[int] = Field(default=None, ge=0)
