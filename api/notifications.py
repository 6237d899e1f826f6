# internal imports
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, col, select

# external imports
from api.deps import Actor, require_role, require_user
from db.database import get_session
from db.models import AppRole, Notification, utcnow
from services.errors import NotFoundError
from services.reminders import run_reminders
from services.schemas import NotificationRead, ReminderRunResult


router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("/", response_model=List[NotificationRead])
def list_notifications(
    unread_only: bool = Query(False),
    session: Session = Depends(get_session),
    actor: Actor = Depends(require_user),
):
    query = select(Notification).where(Notification.user_id == actor.user_id)
    if unread_only:
        query = query.where(Notification.read == False)  # noqa: E712
    return session.exec(query.order_by(col(Notification.created_at).desc())).all()


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_read(
    notification_id: int,
    session: Session = Depends(get_session),
    actor: Actor = Depends(require_user),
):
    notification = session.get(Notification, notification_id)
    if not notification or notification.user_id != actor.user_id:
        raise NotFoundError(f"Notification {notification_id} not found")
    notification.read = True
    session.add(notification)
    session.commit()
    session.refresh(notification)
    return notification


@router.post("/reminders/run", response_model=ReminderRunResult)
def check_medicine_reminders(
    session: Session = Depends(get_session),
    actor: Actor = Depends(require_role(AppRole.admin)),
):
    """Meant to be hit once a minute by a scheduler."""
    checked, sent = run_reminders(session, utcnow())
    return ReminderRunResult(reminders_checked=checked, notifications_sent=sent)
