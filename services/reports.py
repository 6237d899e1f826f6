"""Community counterfeit reports and the reward points earned when one is verified."""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from db.models import CounterfeitReport, Notification, ReportStatus, RiskLevel, UserReward, utcnow
from services.errors import NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)

SEVERITY_POINTS = {
    RiskLevel.critical: 100,
    RiskLevel.high: 75,
    RiskLevel.medium: 50,
    RiskLevel.low: 25,
}
POINTS_PER_LEVEL = 100


def level_for(total_points: int) -> int:
    return total_points // POINTS_PER_LEVEL + 1


def get_rewards(session: Session, user_id: str) -> Optional[UserReward]:
    return session.exec(select(UserReward).where(UserReward.user_id == user_id)).first()


def award_points(session: Session, user_id: str, points: int) -> UserReward:
    rewards = get_rewards(session, user_id)
    if rewards is None:
        rewards = UserReward(user_id=user_id, badges=[])
    rewards.total_points += points
    rewards.verified_reports_count += 1
    rewards.level = level_for(rewards.total_points)
    badges = list(rewards.badges or [])
    if rewards.verified_reports_count == 1 and "first_report" not in badges:
        badges.append("first_report")
    rewards.badges = badges
    rewards.updated_at = utcnow()
    session.add(rewards)
    return rewards


def verify_report(session: Session, report_id: int, verifier_id: str) -> CounterfeitReport:
    report = session.get(CounterfeitReport, report_id)
    if report is None:
        raise NotFoundError(f"Report {report_id} not found")
    if report.is_verified:
        raise ValidationError(f"Report {report_id} has already been verified")

    points = SEVERITY_POINTS[RiskLevel(report.severity)]
    now = utcnow()
    report.status = ReportStatus.verified
    report.is_verified = True
    report.verified_by = verifier_id
    report.verified_at = now
    report.reward_points = points
    report.updated_at = now

    try:
        session.add(report)
        if report.user_id:
            award_points(session, report.user_id, points)
            session.add(
                Notification(
                    user_id=report.user_id,
                    type="report_verified",
                    title="Report Verified",
                    message=f"Your report on {report.drug_name} was verified. You earned {points} points.",
                    details={"report_id": report.id, "points": points},
                )
            )
        session.commit()
        session.refresh(report)
    except SQLAlchemyError as e:
        session.rollback()
        raise StorageError(f"Error verifying report: {e}") from e

    logger.info(f"Report {report_id} verified by {verifier_id}, {points} points awarded")
    return report
