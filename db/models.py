from enum import Enum
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Column, JSON
from typing import Optional, List
from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp, the form every datetime column is written in."""
    return datetime.now(timezone.utc)


class DrugType(str, Enum):
    authentic = "authentic"
    counterfeit = "counterfeit"
    expired = "expired"


class RiskLevel(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class ScanStatus(str, Enum):
    verified = "verified"
    counterfeit = "counterfeit"
    expired = "expired"
    not_found = "not_found"


class AppRole(str, Enum):
    patient = "patient"
    pharmacist = "pharmacist"
    admin = "admin"


class ReminderFrequency(str, Enum):
    daily = "daily"
    twice_daily = "twice_daily"
    weekly = "weekly"


class ReportStatus(str, Enum):
    pending = "pending"
    verified = "verified"


# -------------------
# DRUG MODEL
# -------------------
class Drug(SQLModel, table=True):
    __tablename__ = "drugs"

    id: Optional[int] = Field(default=None, primary_key=True)
    drug_id: str = Field(index=True)
    name: str
    batch_no: str = Field(index=True, unique=True)
    mfg_date: date
    exp_date: date
    manufacturer: str
    drug_type: DrugType = DrugType.authentic
    risk_level: RiskLevel = RiskLevel.medium
    active_ingredient: str
    dosage_form: str
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


# -------------------
# SCAN LOG MODEL (append-only)
# -------------------
class ScanLog(SQLModel, table=True):
    __tablename__ = "scan_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    scan_id: str = Field(index=True)
    batch_no: str = Field(index=True)
    drug_id: Optional[int] = Field(default=None, foreign_key="drugs.id")
    status: ScanStatus
    duplicate_flag: bool = False
    scanned_by: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow, index=True, sa_type=DateTime(timezone=True))


# -------------------
# PATIENT HISTORY MODEL
# -------------------
class PatientHistory(SQLModel, table=True):
    __tablename__ = "patient_history"

    id: Optional[int] = Field(default=None, primary_key=True)
    patient_id: str = Field(index=True)
    medicine_name: str
    dosage: str
    start_date: date
    notes: Optional[str] = None
    reminder_enabled: bool = False
    reminder_time: Optional[str] = None  # "HH:MM"
    reminder_frequency: Optional[ReminderFrequency] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class Profile(SQLModel, table=True):
    __tablename__ = "profiles"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True, unique=True)
    full_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    notification_preferences: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    type: str
    title: str
    message: str
    # "metadata" is reserved on declarative classes, only the column carries the name
    details: Optional[dict] = Field(default=None, sa_column=Column("metadata", JSON))
    read: bool = False
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


# -------------------
# COMMUNITY REPORTING
# -------------------
class CounterfeitReport(SQLModel, table=True):
    __tablename__ = "counterfeit_reports"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[str] = Field(default=None, index=True)
    reporter_name: Optional[str] = None
    is_anonymous: bool = False
    drug_name: str
    batch_number: Optional[str] = None
    manufacturer: Optional[str] = None
    location_address: str
    location_city: Optional[str] = None
    location_state: Optional[str] = None
    purchase_location: Optional[str] = None
    description: str
    symptoms: Optional[str] = None
    severity: RiskLevel = RiskLevel.medium
    photo_urls: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    status: ReportStatus = ReportStatus.pending
    is_verified: bool = False
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    reward_points: int = 0
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class UserReward(SQLModel, table=True):
    __tablename__ = "user_rewards"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True, unique=True)
    total_points: int = 0
    level: int = 1
    verified_reports_count: int = 0
    badges: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class UserRole(SQLModel, table=True):
    __tablename__ = "user_roles"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True, unique=True)
    role: AppRole = AppRole.patient
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
