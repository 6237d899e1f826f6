# internal imports
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, col, select

# external imports
from api.deps import Actor, get_actor, require_role
from db.database import get_session
from db.models import AppRole, ScanLog
from services.schemas import ScanLogRead, VerificationResult, VerifyRequest
from services.verification import SQLDrugStore, SQLScanLogStore, VerificationEngine


router = APIRouter(prefix="/api/verify", tags=["verify"])


def get_engine(session: Session = Depends(get_session)) -> VerificationEngine:
    return VerificationEngine(SQLDrugStore(session), SQLScanLogStore(session))


@router.post("/", response_model=VerificationResult)
def verify_drug(
    body: VerifyRequest,
    engine: VerificationEngine = Depends(get_engine),
    actor: Actor = Depends(get_actor),
):
    """
    The main verification endpoint.

    Looks the batch number up, classifies it as verified, counterfeit, expired or
    not_found, flags repeat scans inside the duplicate window and logs the attempt.
    """
    return engine.verify(body.batch_number, actor_id=actor.user_id)


@router.get("/scans", response_model=List[ScanLogRead])
def recent_scans(
    limit: int = Query(50, ge=1, le=200),
    session: Session = Depends(get_session),
    actor: Actor = Depends(require_role(AppRole.pharmacist, AppRole.admin)),
):
    return session.exec(
        select(ScanLog).order_by(col(ScanLog.timestamp).desc()).limit(limit)
    ).all()
