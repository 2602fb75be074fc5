from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from .. import services
from ..auth import get_current_user_id
from ..database import get_session
from ..schemas import LabRecordIn, LabRecordStatusIn, dump, dump_all

router = APIRouter(prefix="/lab-records", tags=["lab-records"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_lab_record(payload: LabRecordIn, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.LabRecordService(db).create(user_id, payload))


@router.get("")
def list_lab_records(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    """Newest lab first, then by experiment number."""
    return dump_all(services.LabRecordService(db).list(user_id))


@router.get("/subject/{subject_id}")
def lab_records_for_subject(subject_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump_all(services.LabRecordService(db).list_for_subject(user_id, subject_id))


@router.get("/{record_id}")
def get_lab_record(record_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.LabRecordService(db).get(user_id, record_id))


@router.put("/{record_id}")
def update_lab_record(
    record_id: str,
    payload: LabRecordIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
):
    return dump(services.LabRecordService(db).update(user_id, record_id, payload))


@router.patch("/{record_id}/status")
def update_lab_record_status(
    record_id: str,
    payload: LabRecordStatusIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
):
    services.LabRecordService(db).update_status(user_id, record_id, payload.status)
    return {"message": "Lab record status updated successfully"}


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_lab_record(record_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    services.LabRecordService(db).delete(user_id, record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
