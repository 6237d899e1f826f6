# internal imports
from collections import Counter
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

# external imports
from db.database import get_session
from db.models import Drug, PatientHistory, ScanLog, ScanStatus
from services.errors import StorageError
from services.schemas import DashboardStats


router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

RECENT_SCAN_SAMPLE = 100


def count_rows(session: Session, model) -> int:
    return session.exec(select(func.count()).select_from(model)).one()


@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(session: Session = Depends(get_session)):
    """Table totals, plus outcome counts over the most recent scans."""
    try:
        recent = session.exec(
            select(ScanLog.status).order_by(col(ScanLog.timestamp).desc()).limit(RECENT_SCAN_SAMPLE)
        ).all()
        outcomes = Counter(ScanStatus(status) for status in recent)

        return DashboardStats(
            total_drugs=count_rows(session, Drug),
            total_patients=count_rows(session, PatientHistory),
            total_scans=count_rows(session, ScanLog),
            counterfeit_detected=outcomes[ScanStatus.counterfeit],
            expired_detected=outcomes[ScanStatus.expired],
            verified_scans=outcomes[ScanStatus.verified],
        )
    except SQLAlchemyError as e:
        raise StorageError(f"Error fetching dashboard stats: {e}") from e
