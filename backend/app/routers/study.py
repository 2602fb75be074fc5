"""Study plans and the sessions scheduled under them."""

from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel import Session

from .. import services
from ..auth import get_current_user_id
from ..database import get_session
from ..schemas import StudyPlanIn, StudySessionIn, dump, dump_all

router = APIRouter(tags=["study"])


@router.post("/study-plans", status_code=status.HTTP_201_CREATED)
def create_plan(payload: StudyPlanIn, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.StudyPlanService(db).create(user_id, payload))


@router.get("/study-plans")
def list_plans(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump_all(services.StudyPlanService(db).list(user_id))


@router.get("/study-plans/date")
def plans_for_date(plan_date: date = Query(alias="date"), user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump_all(services.StudyPlanService(db).list_for_date(user_id, plan_date))


@router.get("/study-plans/{plan_id}")
def get_plan(plan_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.StudyPlanService(db).get(user_id, plan_id))


@router.put("/study-plans/{plan_id}")
def update_plan(plan_id: str, payload: StudyPlanIn, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.StudyPlanService(db).update(user_id, plan_id, payload))


@router.delete("/study-plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_plan(plan_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    services.StudyPlanService(db).delete(user_id, plan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- sessions -------------------------------------------------------------

@router.post("/study-sessions", status_code=status.HTTP_201_CREATED)
def create_session(payload: StudySessionIn, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.StudySessionService(db).create(user_id, payload))


@router.get("/study-sessions")
def list_sessions(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump_all(services.StudySessionService(db).list(user_id))


@router.get("/study-sessions/plan/{plan_id}")
def sessions_for_plan(plan_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump_all(services.StudySessionService(db).list_for_plan(user_id, plan_id))


@router.get("/study-sessions/{session_id}")
def get_study_session(session_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.StudySessionService(db).get(user_id, session_id))


@router.put("/study-sessions/{session_id}")
def update_study_session(
    session_id: str,
    payload: StudySessionIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
):
    return dump(services.StudySessionService(db).update(user_id, session_id, payload))


@router.delete("/study-sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_study_session(session_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    services.StudySessionService(db).delete(user_id, session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
