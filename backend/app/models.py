"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Identifiers are UUID strings. Per-user tables carry a `user_id`; the
reference tables (subjects, staff, venues) are global.

Foreign keys to subjects, staff and venues are weak: they are stored as
plain identifiers and the referenced row may be missing, so readers must
fall back gracefully instead of failing.
"""

import enum
import uuid
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def default_notification_preferences() -> Dict[str, bool]:
    return {"push": True, "email": True, "morning_briefing": True}


class AssignmentStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SUBMITTED = "submitted"
    GRADED = "graded"
    OVERDUE = "overdue"


class Priority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class PrepStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    REVISION = "revision"
    READY = "ready"


class LabRecordStatus(str, enum.Enum):
    PENDING = "pending"
    PRACTICED = "practiced"
    WRITTEN = "written"
    PRINTED = "printed"
    SUBMITTED = "submitted"
    SIGNED = "signed"
    RETURNED = "returned"


class PlanType(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    WEEKEND = "weekend"
    EXAM_PREP = "exam_prep"
    REVISION = "revision"
    CUSTOM = "custom"


class StudyStatus(str, enum.Enum):
    """Shared by study plans and study sessions."""
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    PARTIAL = "partial"
    SKIPPED = "skipped"


class SessionType(str, enum.Enum):
    STUDY = "study"
    REVISION = "revision"
    PRACTICE = "practice"
    ASSIGNMENT = "assignment"
    LAB_PREP = "lab_prep"
    EXAM_PREP = "exam_prep"


class User(SQLModel, table=True):
    """A registered student.

    `password_hash` is never serialized; see `schemas.dump`.
    """
    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True)
    email: str = Field(index=True, nullable=False, unique=True)
    password_hash: str
    full_name: str
    avatar_url: Optional[str] = None
    phone: Optional[str] = None

    register_number: Optional[str] = None
    department: str
    year: Optional[int] = None
    semester: Optional[int] = None
    section: Optional[str] = None
    batch: Optional[str] = None
    is_hosteler: bool = False

    notification_preferences: Dict[str, Any] = Field(
        default_factory=default_notification_preferences, sa_column=Column(JSON)
    )
    theme: str = "system"
    timezone: str = "Asia/Kolkata"

    google_id: Optional[str] = None
    github_id: Optional[str] = None

    is_active: bool = True
    is_verified: bool = False
    last_login_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Subject(SQLModel, table=True):
    __tablename__ = "subjects"

    id: str = Field(default_factory=new_id, primary_key=True)
    code: str = Field(index=True, unique=True)
    name: str
    short_name: Optional[str] = None
    type: str = "theory"
    credits: Optional[int] = None
    department: Optional[str] = None
    semester: Optional[int] = None
    color: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Staff(SQLModel, table=True):
    __tablename__ = "staff"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    title: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    cabin: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Venue(SQLModel, table=True):
    __tablename__ = "venues"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    building: Optional[str] = None
    floor: Optional[int] = None
    capacity: Optional[int] = None
    type: str = "classroom"
    facilities: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow)


class TimetableSlot(SQLModel, table=True):
    """A block in a user's timetable.

    A slot is either recurring weekly (`is_recurring`, no
    `specific_date`) or one-off (`specific_date` set, `day_of_week`
    informational only). `day_of_week` uses 0=Sunday..6=Saturday.
    """
    __tablename__ = "timetable_slots"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    subject_id: Optional[str] = None
    staff_id: Optional[str] = None
    venue_id: Optional[str] = None
    day_of_week: int = Field(index=True)
    start_time: time
    end_time: time
    period_number: Optional[int] = None
    slot_type: str = "lecture"
    is_recurring: bool = True
    specific_date: Optional[date] = None
    notes: Optional[str] = None
    batch_filter: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Assignment(SQLModel, table=True):
    __tablename__ = "assignments"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    subject_id: Optional[str] = None
    staff_id: Optional[str] = None

    title: str
    description: Optional[str] = None
    instructions: Optional[str] = None
    assignment_type: str

    assigned_date: Optional[date] = None
    due_date: datetime = Field(index=True)
    submitted_at: Optional[datetime] = None

    status: str = AssignmentStatus.PENDING.value

    max_marks: Optional[float] = None
    obtained_marks: Optional[float] = None
    feedback: Optional[str] = None

    priority: str = Priority.MEDIUM.value
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None

    reminder_enabled: bool = True
    reminder_before_hours: Optional[int] = None
    last_reminded_at: Optional[datetime] = None

    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Exam(SQLModel, table=True):
    __tablename__ = "exams"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    subject_id: Optional[str] = None
    venue_id: Optional[str] = None

    title: str
    exam_type: str

    exam_date: date = Field(index=True)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    duration_minutes: Optional[int] = None

    syllabus_units: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    syllabus_topics: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    syllabus_notes: Optional[str] = None

    max_marks: Optional[float] = None
    obtained_marks: Optional[float] = None
    grade: Optional[str] = None

    prep_status: str = PrepStatus.NOT_STARTED.value
    prep_notes: Optional[str] = None
    study_hours_logged: Optional[float] = None

    reminder_enabled: bool = True

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ImportantQuestion(SQLModel, table=True):
    __tablename__ = "important_questions"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    subject_id: Optional[str] = Field(default=None, index=True)
    exam_id: Optional[str] = Field(default=None, index=True)

    question_text: str
    answer_text: Optional[str] = None
    source: Optional[str] = None

    unit: Optional[str] = None
    topic: Optional[str] = None
    marks: Optional[int] = None
    frequency_count: Optional[int] = None

    is_practiced: bool = False
    last_practiced_at: Optional[datetime] = None
    confidence_level: Optional[int] = None

    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class LabRecord(SQLModel, table=True):
    __tablename__ = "lab_records"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    subject_id: Optional[str] = Field(default=None, index=True)

    experiment_number: int
    title: str

    lab_date: Optional[date] = None
    record_written_date: Optional[date] = None
    submitted_date: Optional[date] = None

    status: str = LabRecordStatus.PENDING.value

    aim: Optional[str] = None
    algorithm: Optional[str] = None
    code: Optional[str] = None
    output: Optional[str] = None
    observations: Optional[str] = None
    result: Optional[str] = None
    viva_questions: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    print_required: bool = True
    pages_to_print: Optional[int] = None
    printed_at: Optional[datetime] = None

    marks: Optional[float] = None
    staff_remarks: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Document(SQLModel, table=True):
    __tablename__ = "documents"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    subject_id: Optional[str] = Field(default=None, index=True)

    title: str
    description: Optional[str] = None
    document_type: str

    file_name: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    file_url: str
    storage_key: Optional[str] = None

    folder: Optional[str] = None
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    is_public: bool = False
    shared_with: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    view_count: int = 0
    download_count: int = 0
    last_accessed_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class StudyPlan(SQLModel, table=True):
    __tablename__ = "study_plans"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    title: str
    plan_date: date = Field(index=True)
    plan_type: str
    status: str = StudyStatus.PLANNED.value
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class StudySession(SQLModel, table=True):
    __tablename__ = "study_sessions"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    study_plan_id: Optional[str] = Field(default=None, index=True)
    subject_id: Optional[str] = None

    planned_start_time: Optional[datetime] = None
    planned_end_time: Optional[datetime] = None
    planned_duration_minutes: Optional[int] = None

    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None
    actual_duration_minutes: Optional[int] = None

    session_type: str
    topics_to_cover: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    topics_covered: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    status: str = StudyStatus.PLANNED.value
    completion_percentage: int = 0

    productivity_rating: Optional[int] = None
    notes: Optional[str] = None
    blockers: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ActivityLog(SQLModel, table=True):
    __tablename__ = "activity_logs"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    activity_type: str = Field(index=True)
    description: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    # `metadata` is reserved on declarative classes
    details: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column("metadata", JSON))
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class DailyStats(SQLModel, table=True):
    __tablename__ = "daily_stats"
    __table_args__ = (UniqueConstraint("user_id", "stat_date"),)

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    stat_date: date

    study_minutes: int = 0
    sessions_completed: int = 0
    topics_covered: int = 0

    assignments_completed: int = 0
    assignments_added: int = 0

    classes_attended: int = 0
    total_classes: int = 0

    xp_earned: int = 0
