# internal imports
from typing import List
from fastapi import APIRouter, Depends, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

# external imports
from api.deps import Actor, require_user
from db.database import get_session
from db.models import PatientHistory, ReminderFrequency, utcnow
from services.errors import NotFoundError, StorageError, ValidationError
from services.schemas import HistoryCreate, HistoryRead, HistoryUpdate


router = APIRouter(prefix="/api/history", tags=["medical history"])


def get_owned_entry(session: Session, entry_id: int, actor: Actor) -> PatientHistory:
    entry = session.get(PatientHistory, entry_id)
    # other patients' rows are reported as missing
    if not entry or entry.patient_id != actor.user_id:
        raise NotFoundError(f"History entry {entry_id} not found")
    return entry


def save(session: Session, entry: PatientHistory) -> PatientHistory:
    try:
        session.add(entry)
        session.commit()
        session.refresh(entry)
        return entry
    except SQLAlchemyError as e:
        session.rollback()
        raise StorageError(f"Error saving to database: {e}") from e


@router.get("/", response_model=List[HistoryRead])
def list_history(session: Session = Depends(get_session), actor: Actor = Depends(require_user)):
    return session.exec(
        select(PatientHistory)
        .where(PatientHistory.patient_id == actor.user_id)
        .order_by(col(PatientHistory.start_date).desc())
    ).all()


@router.post("/", response_model=HistoryRead, status_code=201)
def add_history(
    body: HistoryCreate,
    session: Session = Depends(get_session),
    actor: Actor = Depends(require_user),
):
    entry = PatientHistory(patient_id=actor.user_id, **body.model_dump())
    return save(session, entry)


@router.patch("/{entry_id}", response_model=HistoryRead)
def update_history(
    entry_id: int,
    body: HistoryUpdate,
    session: Session = Depends(get_session),
    actor: Actor = Depends(require_user),
):
    entry = get_owned_entry(session, entry_id, actor)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(entry, field, value)

    if entry.reminder_enabled and not entry.reminder_time:
        raise ValidationError("A reminder time is required when reminders are enabled")
    if entry.reminder_enabled and entry.reminder_frequency is None:
        entry.reminder_frequency = ReminderFrequency.daily

    entry.updated_at = utcnow()
    return save(session, entry)


@router.delete("/{entry_id}", status_code=204)
def delete_history(
    entry_id: int,
    session: Session = Depends(get_session),
    actor: Actor = Depends(require_user),
):
    entry = get_owned_entry(session, entry_id, actor)
    try:
        session.delete(entry)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StorageError(f"Error deleting from database: {e}") from e
    return Response(status_code=204)
