from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from .. import services
from ..auth import get_current_user_id
from ..database import get_session
from ..schemas import AssignmentIn, AssignmentStatusIn, dump, dump_all

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_assignment(payload: AssignmentIn, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.AssignmentService(db).create(user_id, payload))


@router.get("")
def list_assignments(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump_all(services.AssignmentService(db).list(user_id))


@router.get("/pending")
def pending_assignments(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    """Open assignments that are not yet due."""
    return dump_all(services.AssignmentService(db).pending(user_id))


@router.get("/overdue")
def overdue_assignments(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump_all(services.AssignmentService(db).overdue(user_id))


@router.get("/{assignment_id}")
def get_assignment(assignment_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.AssignmentService(db).get(user_id, assignment_id))


@router.put("/{assignment_id}")
def update_assignment(
    assignment_id: str,
    payload: AssignmentIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
):
    return dump(services.AssignmentService(db).update(user_id, assignment_id, payload))


@router.patch("/{assignment_id}/status")
def update_assignment_status(
    assignment_id: str,
    payload: AssignmentStatusIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
):
    services.AssignmentService(db).update_status(user_id, assignment_id, payload.status)
    return {"message": "Assignment status updated successfully"}


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assignment(assignment_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    services.AssignmentService(db).delete(user_id, assignment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
