"""Administrative drug import: defaults, generated identifiers and risk classification."""
import logging
import secrets
import string
from typing import Iterable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from db.models import Drug, DrugType, RiskLevel
from services.errors import StorageError, ValidationError
from services.schemas import DrugCreate, DrugImportResult
from services.verification import normalize_batch_number

logger = logging.getLogger(__name__)

BATCH_ALPHABET = string.ascii_uppercase + string.digits


def generate_batch_number() -> str:
    return "BATCH-" + "".join(secrets.choice(BATCH_ALPHABET) for _ in range(8))


def generate_drug_id() -> str:
    return "DRUG-" + secrets.token_hex(4).upper()


def classify_risk_level(dosage_form: str, strength: str = "") -> RiskLevel:
    form = dosage_form.lower()
    strength = strength.lower()

    if "injection" in form or "injectable" in form:
        return RiskLevel.critical
    if "mg/ml" in strength or "infusion" in form:
        return RiskLevel.high
    if "tablet" in form or "capsule" in form:
        return RiskLevel.medium
    if any(term in form for term in ("topical", "ophthalmic", "ointment", "cream")):
        return RiskLevel.low
    return RiskLevel.medium


def build_drug(payload: DrugCreate) -> Drug:
    if payload.exp_date < payload.mfg_date:
        raise ValidationError("Expiry date cannot be before the manufacturing date")
    batch_no = normalize_batch_number(payload.batch_no) if payload.batch_no else generate_batch_number()
    return Drug(
        drug_id=payload.drug_id or generate_drug_id(),
        name=payload.name.strip(),
        batch_no=batch_no,
        mfg_date=payload.mfg_date,
        exp_date=payload.exp_date,
        manufacturer=payload.manufacturer.strip(),
        drug_type=payload.drug_type or DrugType.authentic,
        risk_level=payload.risk_level or classify_risk_level(payload.dosage_form, payload.strength),
        active_ingredient=payload.active_ingredient.strip(),
        dosage_form=payload.dosage_form.strip(),
    )


def batch_exists(session: Session, batch_no: str) -> bool:
    return session.exec(select(Drug.id).where(Drug.batch_no == batch_no)).first() is not None


def register_drug(session: Session, payload: DrugCreate) -> Drug:
    drug = build_drug(payload)
    duplicate = f"Batch '{drug.batch_no}' already exists in the database."
    if batch_exists(session, drug.batch_no):
        raise ValidationError(duplicate)
    try:
        session.add(drug)
        session.commit()
        session.refresh(drug)
    except IntegrityError as e:
        # a concurrent registration won the unique batch_no constraint
        session.rollback()
        logger.warning(f"Duplicate batch {drug.batch_no} rejected by the database: {e.orig}")
        raise ValidationError(duplicate) from e
    except SQLAlchemyError as e:
        session.rollback()
        raise StorageError(f"Error saving to database: {e}") from e
    logger.info(f"Registered drug {drug.name} batch {drug.batch_no}")
    return drug


def import_drugs(session: Session, payloads: Iterable[DrugCreate]) -> DrugImportResult:
    imported, skipped = 0, 0
    seen = set()
    try:
        for payload in payloads:
            drug = build_drug(payload)
            if drug.batch_no in seen or batch_exists(session, drug.batch_no):
                skipped += 1
                continue
            seen.add(drug.batch_no)
            session.add(drug)
            imported += 1
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StorageError(f"Drug import failed: {e}") from e
    logger.info(f"Drug import finished: {imported} imported, {skipped} skipped")
    return DrugImportResult(imported=imported, skipped=skipped)
