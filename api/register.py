# internal imports
from typing import List
from fastapi import APIRouter, Depends
from sqlmodel import Session, select

# external imports
from api.deps import Actor, require_role
from db.database import get_session
from db.models import AppRole, Drug
from services.errors import NotFoundError
from services.registry import import_drugs, register_drug
from services.schemas import DrugCreate, DrugImportResult, DrugRead
from services.verification import normalize_batch_number


router = APIRouter(prefix="/api/drugs", tags=["register drug"])


@router.post("/", response_model=DrugRead, status_code=201)
def register(
    body: DrugCreate,
    session: Session = Depends(get_session),
    actor: Actor = Depends(require_role(AppRole.admin)),
):
    """
    Register a single drug batch.

    Args:
        body: Drug record. A missing batch number or drug id is generated, a
            missing risk level is derived from the dosage form and strength.
        session: Database session (injected)
    """
    return register_drug(session, body)


@router.post("/import", response_model=DrugImportResult)
def bulk_import(
    body: List[DrugCreate],
    session: Session = Depends(get_session),
    actor: Actor = Depends(require_role(AppRole.admin)),
):
    """Import a list of drug records. Batches already on file are skipped."""
    return import_drugs(session, body)


@router.get("/{batch_no}", response_model=DrugRead)
def get_drug(batch_no: str, session: Session = Depends(get_session)):
    normalized = normalize_batch_number(batch_no)
    drug = session.exec(select(Drug).where(Drug.batch_no == normalized)).first()
    if not drug:
        raise NotFoundError(f"Batch '{normalized}' not found in our database.")
    return drug
