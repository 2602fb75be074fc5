"""Document metadata. Files themselves live behind `fileUrl`."""

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from .. import services
from ..auth import get_current_user_id
from ..database import get_session
from ..schemas import DocumentIn, dump, dump_all

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_document(payload: DocumentIn, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.DocumentService(db).create(user_id, payload))


@router.get("")
def list_documents(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump_all(services.DocumentService(db).list(user_id))


@router.get("/subject/{subject_id}")
def documents_for_subject(subject_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump_all(services.DocumentService(db).list_for_subject(user_id, subject_id))


@router.get("/{document_id}")
def get_document(document_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.DocumentService(db).get(user_id, document_id))


@router.put("/{document_id}")
def update_document(
    document_id: str,
    payload: DocumentIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
):
    return dump(services.DocumentService(db).update(user_id, document_id, payload))


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(document_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    services.DocumentService(db).delete(user_id, document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{document_id}/view")
def record_view(document_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    services.DocumentService(db).record_view(user_id, document_id)
    return {"message": "View count incremented"}


@router.post("/{document_id}/download-count")
def record_download(document_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    services.DocumentService(db).record_download(user_id, document_id)
    return {"message": "Download count incremented"}
