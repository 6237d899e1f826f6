# internal imports
import html
import logging
import secrets
from pathlib import Path
from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, UploadFile
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from pydantic import SecretStr
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

# external imports
from api.deps import Actor, get_actor, require_role, require_user
from config import settings
from config.report_html import HTML
from db.database import get_session
from db.models import AppRole, CounterfeitReport, RiskLevel, UserReward
from services.errors import StorageError, ValidationError
from services.reports import get_rewards, verify_report
from services.schemas import ReportRead, RewardsRead


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/report", tags=["report"])

MAX_PHOTO_BYTES = 10 * 1024 * 1024


def mail_config() -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=settings.MAIL_EMAIL,
        MAIL_PASSWORD=SecretStr(settings.MAIL_PASSWORD),
        MAIL_FROM=settings.MAIL_EMAIL,
        MAIL_PORT=settings.MAIL_PORT,
        MAIL_SERVER=settings.MAIL_SERVER,
        MAIL_FROM_NAME="MedVerify Report",
        MAIL_STARTTLS=True,
        MAIL_SSL_TLS=False,
        USE_CREDENTIALS=True,
        VALIDATE_CERTS=True,
    )


def render_report(report: CounterfeitReport) -> str:
    location = ", ".join(
        part for part in (report.location_address, report.location_city, report.location_state) if part
    )
    fields = {
        "drug_name": report.drug_name,
        "batch_number": report.batch_number or "N/A",
        "manufacturer": report.manufacturer or "N/A",
        "description": report.description,
        "symptoms": report.symptoms or "N/A",
        "location": location or "N/A",
        "purchase_location": report.purchase_location or "N/A",
    }
    # reporter text lands in the regulator's mail client, never as markup
    return HTML.format(
        report_id=report.id,
        severity=RiskLevel(report.severity).value.upper(),
        **{key: html.escape(str(value)) for key, value in fields.items()},
    )


async def save_photo(photo: UploadFile) -> str:
    data = await photo.read()
    if not data:
        raise ValidationError("Uploaded photo is empty")
    if len(data) > MAX_PHOTO_BYTES:
        raise ValidationError("Photo must be smaller than 10 MB")

    photos_dir = Path(settings.REPORT_PHOTOS_DIR)
    photos_dir.mkdir(parents=True, exist_ok=True)
    suffix = Path(photo.filename or "").suffix or ".jpg"
    path = photos_dir / f"report_{secrets.token_hex(8)}{suffix}"
    path.write_bytes(data)
    return str(path)


async def send_report_email(report_id: int, subject: str, html_body: str, attachments: List[str]):
    """Runs after the response is sent, so failures are logged rather than raised."""
    if settings.DEV_MODE:
        logger.info(
            f"DEV MODE: report #{report_id} not mailed (to={settings.REGULATOR_EMAIL}, "
            f"subject={subject!r}, attachments={len(attachments)})"
        )
        return
    if not settings.REGULATOR_EMAIL:
        logger.warning(f"REGULATOR_EMAIL not set, report #{report_id} was stored but not mailed")
        return

    message = MessageSchema(
        subject=subject,
        recipients=[settings.REGULATOR_EMAIL],  # type: ignore
        body=html_body,
        subtype=MessageType.html,
        attachments=attachments,
    )
    try:
        await FastMail(mail_config()).send_message(message)
        logger.info(f"Report #{report_id} mailed to {settings.REGULATOR_EMAIL}")
    except Exception as e:
        logger.error(f"Error sending report #{report_id}: {e}")


@router.post("/", response_model=ReportRead, status_code=201)
async def send_report(
    background_tasks: BackgroundTasks,
    drug_name: str = Form(..., min_length=2, max_length=200),
    location_address: str = Form(..., min_length=1, max_length=500),
    description: str = Form(..., min_length=10, max_length=2000),
    severity: RiskLevel = Form(RiskLevel.medium),
    batch_number: Optional[str] = Form(None, max_length=50),
    manufacturer: Optional[str] = Form(None, max_length=200),
    location_city: Optional[str] = Form(None, max_length=100),
    location_state: Optional[str] = Form(None, max_length=100),
    purchase_location: Optional[str] = Form(None, max_length=200),
    symptoms: Optional[str] = Form(None, max_length=2000),
    is_anonymous: bool = Form(False),
    reporter_name: Optional[str] = Form(None, max_length=100),
    photo: UploadFile | None = File(None),
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_actor),
):
    """
    Stores a community report of a suspected counterfeit drug and mails it to the regulator.

    Args:
        drug_name: Name of the suspected counterfeit drug
        location_address: Where the drug was found
        description: What looked wrong
        severity: low, medium, high or critical
        is_anonymous: Hide the reporter's account; `reporter_name` is kept only for anonymous reports
        photo: Optional photo of the product
    """
    anonymous = is_anonymous or actor.is_anonymous

    photo_urls = None
    if photo is not None and photo.filename:
        photo_urls = [await save_photo(photo)]

    report = CounterfeitReport(
        user_id=None if anonymous else actor.user_id,
        reporter_name=reporter_name.strip() if anonymous and reporter_name else None,
        is_anonymous=anonymous,
        drug_name=drug_name.strip(),
        batch_number=batch_number.strip().upper() if batch_number and batch_number.strip() else None,
        manufacturer=manufacturer,
        location_address=location_address.strip(),
        location_city=location_city,
        location_state=location_state,
        purchase_location=purchase_location,
        description=description.strip(),
        symptoms=symptoms,
        severity=severity,
        photo_urls=photo_urls,
    )
    try:
        session.add(report)
        session.commit()
        session.refresh(report)
    except SQLAlchemyError as e:
        session.rollback()
        for path in photo_urls or []:
            Path(path).unlink(missing_ok=True)
        raise StorageError(f"Error saving report: {e}") from e

    logger.info(f"Counterfeit report #{report.id} received for {report.drug_name} ({report.severity})")

    # Send in the background so the user isn't waiting
    background_tasks.add_task(
        send_report_email,
        report.id,
        "CRITICAL: Counterfeit Drug Report (MedVerify)",
        render_report(report),
        photo_urls or [],
    )
    return report


@router.get("/", response_model=List[ReportRead])
def list_reports(
    severity: Optional[RiskLevel] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    session: Session = Depends(get_session),
):
    query = select(CounterfeitReport)
    if severity is not None:
        query = query.where(CounterfeitReport.severity == severity)
    return session.exec(query.order_by(col(CounterfeitReport.created_at).desc()).limit(limit)).all()


@router.post("/{report_id}/verify", response_model=ReportRead)
def verify(
    report_id: int,
    session: Session = Depends(get_session),
    actor: Actor = Depends(require_role(AppRole.pharmacist, AppRole.admin)),
):
    return verify_report(session, report_id, actor.user_id)


@router.get("/rewards/me", response_model=RewardsRead)
def my_rewards(session: Session = Depends(get_session), actor: Actor = Depends(require_user)):
    return get_rewards(session, actor.user_id) or UserReward(user_id=actor.user_id, badges=[])
