"""Medicine reminder scheduling: which history entries are due at a given minute."""
import logging
from datetime import datetime
from typing import Iterable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from db.models import Notification, PatientHistory, Profile, ReminderFrequency
from services.errors import StorageError

logger = logging.getLogger(__name__)

# weekly reminders go out on Mondays
WEEKLY_REMINDER_WEEKDAY = 0


def is_due(entry: PatientHistory, now: datetime) -> bool:
    if not entry.reminder_enabled or not entry.reminder_time:
        return False

    hours, minutes = (int(part) for part in entry.reminder_time.split(":")[:2])
    current = (now.hour, now.minute)

    if entry.reminder_frequency == ReminderFrequency.twice_daily:
        return current in ((hours, minutes), ((hours + 12) % 24, minutes))
    if entry.reminder_frequency == ReminderFrequency.weekly and now.weekday() != WEEKLY_REMINDER_WEEKDAY:
        return False
    return current == (hours, minutes)


def due_reminders(entries: Iterable[PatientHistory], now: datetime) -> List[PatientHistory]:
    return [entry for entry in entries if is_due(entry, now)]


def reminders_muted(profile: Profile | None) -> bool:
    prefs = (profile.notification_preferences if profile else None) or {}
    return prefs.get("medicine_reminders") is False


def run_reminders(session: Session, now: datetime) -> tuple[int, int]:
    """Create a notification for every reminder due at `now`. Returns (checked, sent)."""
    try:
        entries = session.exec(
            select(PatientHistory).where(PatientHistory.reminder_enabled == True)  # noqa: E712
        ).all()
        logger.info(f"Checking {len(entries)} reminders for {now:%H:%M}")

        sent = 0
        for entry in due_reminders(entries, now):
            profile = session.exec(select(Profile).where(Profile.user_id == entry.patient_id)).first()
            if reminders_muted(profile):
                continue
            session.add(
                Notification(
                    user_id=entry.patient_id,
                    type="medicine_reminder",
                    title="Medicine Reminder",
                    message=f"Time to take {entry.medicine_name} - {entry.dosage}",
                    details={
                        "medicine_name": entry.medicine_name,
                        "dosage": entry.dosage,
                        "patient_history_id": entry.id,
                    },
                )
            )
            sent += 1
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Reminder run failed: {e}")
        raise StorageError(f"Reminder run failed: {e}") from e

    logger.info(f"Created {sent} reminder notifications")
    return len(entries), sent
