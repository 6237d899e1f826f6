"""
Batch verification.

A batch number is validated and normalized, resolved against the drug store,
classified, checked for repeat scans inside the duplicate window, and every
attempt is written to the scan log, whatever the outcome.
"""
import logging
import re
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from config.settings import DUPLICATE_WINDOW_HOURS
from db.models import Drug, DrugType, ScanLog, ScanStatus, utcnow
from services.errors import StorageError, ValidationError
from services.schemas import DrugRead, VerificationResult

logger = logging.getLogger(__name__)

BATCH_NUMBER_PATTERN = re.compile(r"^[A-Z0-9-]+$", re.IGNORECASE)
MAX_BATCH_NUMBER_LENGTH = 50


def normalize_batch_number(batch_number: str) -> str:
    """Trim, validate and upper-case a batch number, or raise ValidationError."""
    if not isinstance(batch_number, str):
        raise ValidationError("Batch number is required")
    value = batch_number.strip()
    if not value:
        raise ValidationError("Batch number is required")
    if len(value) > MAX_BATCH_NUMBER_LENGTH:
        raise ValidationError(f"Batch number must be at most {MAX_BATCH_NUMBER_LENGTH} characters")
    if not BATCH_NUMBER_PATTERN.match(value):
        raise ValidationError("Invalid batch number format. Use only letters, numbers, and hyphens")
    return value.upper()


def classify(drug: Drug, today) -> ScanStatus:
    if drug.drug_type == DrugType.counterfeit:
        return ScanStatus.counterfeit
    if drug.drug_type == DrugType.expired or drug.exp_date < today:
        return ScanStatus.expired
    return ScanStatus.verified


def new_scan_id(now: datetime) -> str:
    millis = int(now.timestamp() * 1000)
    return f"SCAN-{millis}-{secrets.token_hex(3).upper()}"


# ============================================================================
# STORES
# ============================================================================
class DrugStore(Protocol):
    def find_by_batch_number(self, batch_number: str) -> Optional[Drug]: ...


class ScanLogStore(Protocol):
    def insert(self, entry: ScanLog) -> ScanLog: ...

    def query_recent(self, batch_number: str, since: datetime) -> Sequence[ScanLog]: ...


class SQLDrugStore:
    def __init__(self, session: Session):
        self.session = session

    def find_by_batch_number(self, batch_number: str) -> Optional[Drug]:
        try:
            return self.session.exec(
                select(Drug).where(Drug.batch_no == batch_number)
            ).first()
        except SQLAlchemyError as e:
            logger.error(f"Drug lookup failed for {batch_number}: {e}")
            raise StorageError(f"Drug lookup failed: {e}") from e


class SQLScanLogStore:
    def __init__(self, session: Session):
        self.session = session

    def insert(self, entry: ScanLog) -> ScanLog:
        try:
            self.session.add(entry)
            self.session.commit()
            self.session.refresh(entry)
            return entry
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Scan log insert failed for {entry.batch_no}: {e}")
            raise StorageError(f"Scan log insert failed: {e}") from e

    def query_recent(self, batch_number: str, since: datetime) -> Sequence[ScanLog]:
        try:
            return self.session.exec(
                select(ScanLog)
                .where(ScanLog.batch_no == batch_number)
                .where(ScanLog.timestamp >= since)
                .order_by(col(ScanLog.timestamp).desc())
            ).all()
        except SQLAlchemyError as e:
            logger.error(f"Scan log query failed for {batch_number}: {e}")
            raise StorageError(f"Scan log query failed: {e}") from e


# ============================================================================
# ENGINE
# ============================================================================
class VerificationEngine:
    def __init__(
        self,
        drugs: DrugStore,
        scan_logs: ScanLogStore,
        clock: Callable[[], datetime] = utcnow,
        duplicate_window: timedelta = timedelta(hours=DUPLICATE_WINDOW_HOURS),
    ):
        self.drugs = drugs
        self.scan_logs = scan_logs
        self.clock = clock
        self.duplicate_window = duplicate_window

    def verify(self, batch_number: str, actor_id: Optional[str] = None) -> VerificationResult:
        normalized = normalize_batch_number(batch_number)
        now = self.clock()

        drug = self.drugs.find_by_batch_number(normalized)

        # Unknown batches are never flagged as duplicates
        is_duplicate = False
        if drug is None:
            status = ScanStatus.not_found
        else:
            status = classify(drug, now.date())
            recent = self.scan_logs.query_recent(normalized, now - self.duplicate_window)
            is_duplicate = len(recent) > 0

        self.scan_logs.insert(
            ScanLog(
                scan_id=new_scan_id(now),
                batch_no=normalized,
                drug_id=drug.id if drug is not None else None,
                status=status,
                duplicate_flag=is_duplicate,
                scanned_by=actor_id,
                timestamp=now,
            )
        )

        logger.info(f"Verified batch {normalized}: status={status.value} duplicate={is_duplicate}")
        return VerificationResult(
            status=status,
            drug=DrugRead.model_validate(drug) if drug is not None else None,
            is_duplicate=is_duplicate,
        )
