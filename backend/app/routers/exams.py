"""Exams and the important questions attached to them."""

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from .. import services
from ..auth import get_current_user_id
from ..database import get_session
from ..schemas import ExamIn, ImportantQuestionIn, PrepStatusIn, dump, dump_all

router = APIRouter(tags=["exams"])


@router.post("/exams", status_code=status.HTTP_201_CREATED)
def create_exam(payload: ExamIn, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.ExamService(db).create(user_id, payload))


@router.get("/exams")
def list_exams(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump_all(services.ExamService(db).list(user_id))


@router.get("/exams/upcoming")
def upcoming_exams(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump_all(services.ExamService(db).upcoming(user_id))


@router.get("/exams/{exam_id}")
def get_exam(exam_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.ExamService(db).get(user_id, exam_id))


@router.put("/exams/{exam_id}")
def update_exam(exam_id: str, payload: ExamIn, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.ExamService(db).update(user_id, exam_id, payload))


@router.patch("/exams/{exam_id}/prep-status")
def update_prep_status(
    exam_id: str,
    payload: PrepStatusIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
):
    services.ExamService(db).update_prep_status(user_id, exam_id, payload.prep_status)
    return {"message": "Exam prep status updated successfully"}


@router.delete("/exams/{exam_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_exam(exam_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    services.ExamService(db).delete(user_id, exam_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- important questions --------------------------------------------------

@router.post("/important-questions", status_code=status.HTTP_201_CREATED)
def create_question(payload: ImportantQuestionIn, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump(services.ImportantQuestionService(db).create(user_id, payload))


@router.get("/important-questions/exam/{exam_id}")
def questions_for_exam(exam_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump_all(services.ImportantQuestionService(db).list_for_exam(user_id, exam_id))


@router.get("/important-questions/subject/{subject_id}")
def questions_for_subject(subject_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    return dump_all(services.ImportantQuestionService(db).list_for_subject(user_id, subject_id))


@router.put("/important-questions/{question_id}")
def update_question(
    question_id: str,
    payload: ImportantQuestionIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
):
    return dump(services.ImportantQuestionService(db).update(user_id, question_id, payload))


@router.delete("/important-questions/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_question(question_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_session)):
    services.ImportantQuestionService(db).delete(user_id, question_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
