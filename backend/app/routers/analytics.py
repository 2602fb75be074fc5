from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from .. import services
from ..auth import get_current_user_id
from ..database import get_session
from ..schemas import ActivityLogIn, DailyStatsIn, dump, dump_all

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.post("/activity-logs", status_code=status.HTTP_201_CREATED)
def log_activity(payload: ActivityLogIn, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.AnalyticsService(db).log_activity(user_id, payload))


@router.get("/activity-logs")
def list_activity(
    activity_type: Optional[str] = Query(default=None, alias="activityType"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
):
    """Newest first; `activity_type` narrows to one kind of entry."""
    return dump_all(services.AnalyticsService(db).list_activity(user_id, activity_type))


@router.get("/daily-stats")
def list_daily_stats(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump_all(services.AnalyticsService(db).list_stats(user_id))


@router.get("/daily-stats/date")
def daily_stats_for_date(stat_date: date = Query(alias="date"), user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.AnalyticsService(db).get_stats(user_id, stat_date))


@router.put("/daily-stats")
def upsert_daily_stats(payload: DailyStatsIn, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    """Create or update the caller's stats for `statDate`."""
    return dump(services.AnalyticsService(db).upsert_stats(user_id, payload))
