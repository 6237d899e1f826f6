"""
Request/response shapes shared by the routers and the services.

JSON keys are camelCase on the wire; attributes stay snake_case.
"""
import re
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from db.models import DrugType, ReminderFrequency, ReportStatus, RiskLevel, ScanStatus


MAX_LIST_ITEMS = 50
MAX_TEXT_LENGTH = 200
REMINDER_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# ============================================================================
# DRUGS & VERIFICATION
# ============================================================================
class DrugRead(CamelModel):
    id: int
    drug_id: str = Field(alias="drugId")
    name: str
    batch_no: str = Field(alias="batchNo")
    mfg_date: date = Field(alias="mfgDate")
    exp_date: date = Field(alias="expDate")
    manufacturer: str
    drug_type: DrugType = Field(alias="type")
    risk_level: RiskLevel = Field(alias="riskLevel")
    active_ingredient: str = Field(alias="activeIngredient")
    dosage_form: str = Field(alias="dosageForm")


class DrugCreate(CamelModel):
    drug_id: Optional[str] = Field(default=None, alias="drugId")
    name: str = Field(min_length=1, max_length=MAX_TEXT_LENGTH)
    batch_no: Optional[str] = Field(default=None, alias="batchNo")
    mfg_date: date = Field(alias="mfgDate")
    exp_date: date = Field(alias="expDate")
    manufacturer: str = Field(min_length=1, max_length=MAX_TEXT_LENGTH)
    drug_type: Optional[DrugType] = Field(default=None, alias="type")
    risk_level: Optional[RiskLevel] = Field(default=None, alias="riskLevel")
    active_ingredient: str = Field(alias="activeIngredient")
    dosage_form: str = Field(alias="dosageForm")
    strength: str = ""


class DrugImportResult(BaseModel):
    imported: int
    skipped: int


class VerifyRequest(CamelModel):
    batch_number: str = Field(alias="batchNumber")


class VerificationResult(CamelModel):
    status: ScanStatus
    drug: Optional[DrugRead] = None
    is_duplicate: bool = Field(default=False, alias="isDuplicate")


class ScanLogRead(CamelModel):
    scan_id: str = Field(alias="scanId")
    batch_no: str = Field(alias="batchNo")
    drug_id: Optional[int] = Field(default=None, alias="drugId")
    status: ScanStatus
    duplicate_flag: bool = Field(alias="duplicateFlag")
    scanned_by: Optional[str] = Field(default=None, alias="scannedBy")
    timestamp: datetime


# ============================================================================
# SAFETY SCORE
# ============================================================================
def _clean_text_list(values: List[str], label: str) -> List[str]:
    if len(values) > MAX_LIST_ITEMS:
        raise ValueError(f"Invalid {label} (max {MAX_LIST_ITEMS})")
    return [v.strip()[:MAX_TEXT_LENGTH] for v in values]


class SafetyScoreRequest(CamelModel):
    age: int = Field(ge=0, le=150)
    conditions: List[str] = Field(default_factory=list)
    current_medications: List[str] = Field(default_factory=list, alias="currentMedications")
    new_medication: str = Field(alias="newMedication")

    @field_validator("conditions")
    @classmethod
    def clean_conditions(cls, v):
        return _clean_text_list(v, "conditions")

    @field_validator("current_medications")
    @classmethod
    def clean_medications(cls, v):
        return _clean_text_list(v, "medications list")

    @field_validator("new_medication")
    @classmethod
    def clean_new_medication(cls, v):
        v = v.strip()
        if not v or len(v) > MAX_TEXT_LENGTH:
            raise ValueError("Invalid medication name")
        return v


class SafetyScoreResponse(CamelModel):
    score: int = Field(ge=0, le=100)
    level: Literal["safe", "caution", "danger"]
    risks: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


# ============================================================================
# PATIENT HISTORY
# ============================================================================
class _ReminderFields(CamelModel):
    @field_validator("reminder_time", check_fields=False)
    @classmethod
    def check_reminder_time(cls, v):
        if v is not None and not REMINDER_TIME_PATTERN.match(v):
            raise ValueError("Reminder time must use the HH:MM format")
        return v


class HistoryCreate(_ReminderFields):
    medicine_name: str = Field(alias="medicineName", min_length=2, max_length=200)
    dosage: str = Field(min_length=1, max_length=50)
    start_date: date = Field(alias="startDate")
    notes: Optional[str] = Field(default=None, max_length=1000)
    reminder_enabled: bool = Field(default=False, alias="reminderEnabled")
    reminder_time: Optional[str] = Field(default=None, alias="reminderTime")
    reminder_frequency: Optional[ReminderFrequency] = Field(default=None, alias="reminderFrequency")

    @field_validator("medicine_name", "dosage", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def reminder_needs_time(self):
        if self.reminder_enabled and not self.reminder_time:
            raise ValueError("A reminder time is required when reminders are enabled")
        if self.reminder_enabled and self.reminder_frequency is None:
            self.reminder_frequency = ReminderFrequency.daily
        return self


class HistoryUpdate(_ReminderFields):
    medicine_name: Optional[str] = Field(default=None, alias="medicineName", min_length=2, max_length=200)
    dosage: Optional[str] = Field(default=None, min_length=1, max_length=50)
    start_date: Optional[date] = Field(default=None, alias="startDate")
    notes: Optional[str] = Field(default=None, max_length=1000)
    reminder_enabled: Optional[bool] = Field(default=None, alias="reminderEnabled")
    reminder_time: Optional[str] = Field(default=None, alias="reminderTime")
    reminder_frequency: Optional[ReminderFrequency] = Field(default=None, alias="reminderFrequency")

    @field_validator("medicine_name", "dosage", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("medicine_name", "dosage", "start_date", "reminder_enabled")
    @classmethod
    def not_null(cls, v, info):
        # only runs for values sent explicitly, omitted fields keep their stored value
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class HistoryRead(CamelModel):
    id: int
    patient_id: str = Field(alias="patientId")
    medicine_name: str = Field(alias="medicineName")
    dosage: str
    start_date: date = Field(alias="startDate")
    notes: Optional[str] = None
    reminder_enabled: bool = Field(alias="reminderEnabled")
    reminder_time: Optional[str] = Field(default=None, alias="reminderTime")
    reminder_frequency: Optional[ReminderFrequency] = Field(default=None, alias="reminderFrequency")


# ============================================================================
# NOTIFICATIONS, PROFILE, REPORTS
# ============================================================================
class NotificationRead(CamelModel):
    id: int
    type: str
    title: str
    message: str
    # the ORM attribute is `details`, the wire key is `metadata`
    details: Optional[dict] = Field(default=None, validation_alias="details", serialization_alias="metadata")
    read: bool
    created_at: datetime = Field(alias="createdAt")


class ReminderRunResult(CamelModel):
    reminders_checked: int = Field(alias="remindersChecked")
    notifications_sent: int = Field(alias="notificationsSent")


class ProfileUpdate(CamelModel):
    full_name: Optional[str] = Field(default=None, alias="fullName", min_length=2, max_length=100)
    phone: Optional[str] = Field(default=None, pattern=r"^\+?[1-9]\d{1,14}$")
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")
    notification_preferences: Optional[dict] = Field(default=None, alias="notificationPreferences")


class ProfileRead(CamelModel):
    user_id: str = Field(alias="userId")
    full_name: Optional[str] = Field(default=None, alias="fullName")
    phone: Optional[str] = None
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")
    notification_preferences: Optional[dict] = Field(default=None, alias="notificationPreferences")
    role: str = "patient"


class RoleUpdate(BaseModel):
    role: Literal["patient", "pharmacist", "admin"]


class ReportRead(CamelModel):
    id: int
    drug_name: str = Field(alias="drugName")
    batch_number: Optional[str] = Field(default=None, alias="batchNumber")
    manufacturer: Optional[str] = None
    location_address: str = Field(alias="locationAddress")
    location_city: Optional[str] = Field(default=None, alias="locationCity")
    location_state: Optional[str] = Field(default=None, alias="locationState")
    purchase_location: Optional[str] = Field(default=None, alias="purchaseLocation")
    description: str
    symptoms: Optional[str] = None
    severity: RiskLevel
    is_anonymous: bool = Field(alias="isAnonymous")
    reporter_name: Optional[str] = Field(default=None, alias="reporterName")
    photo_urls: Optional[List[str]] = Field(default=None, alias="photoUrls")
    status: ReportStatus
    is_verified: bool = Field(alias="isVerified")
    reward_points: int = Field(alias="rewardPoints")
    created_at: datetime = Field(alias="createdAt")


class RewardsRead(CamelModel):
    user_id: str = Field(alias="userId")
    total_points: int = Field(alias="totalPoints")
    level: int
    verified_reports_count: int = Field(alias="verifiedReportsCount")
    badges: Optional[List[str]] = None


class DashboardStats(CamelModel):
    total_drugs: int = Field(alias="totalDrugs")
    total_patients: int = Field(alias="totalPatients")
    total_scans: int = Field(alias="totalScans")
    counterfeit_detected: int = Field(alias="counterfeitDetected")
    expired_detected: int = Field(alias="expiredDetected")
    verified_scans: int = Field(alias="verifiedScans")


# ============================================================================
# AI COLLABORATORS (shapes the model must answer with)
# ============================================================================
class MedicineInfoRequest(CamelModel):
    medicine_name: str = Field(alias="medicineName", min_length=1, max_length=MAX_TEXT_LENGTH)


class MedicineInfo(CamelModel):
    name: str
    generic_name: Optional[str] = Field(default=None, alias="genericName")
    category: Optional[str] = None
    uses: List[str] = Field(default_factory=list)
    dosage: Optional[str] = None
    side_effects: List[str] = Field(default_factory=list, alias="sideEffects")
    contraindications: List[str] = Field(default_factory=list)
    interactions: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class InteractionRequest(CamelModel):
    medications: List[str] = Field(min_length=2, max_length=MAX_LIST_ITEMS)
    check_food: bool = Field(default=False, alias="checkFood")
    check_alcohol: bool = Field(default=False, alias="checkAlcohol")


class DrugInteraction(CamelModel):
    drugs: List[str]
    severity: Literal["SEVERE", "MODERATE", "MINOR", "NO_INTERACTION"]
    description: str
    effects: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class FoodInteraction(CamelModel):
    drug: str
    foods: List[str] = Field(default_factory=list)
    recommendation: str


class AlcoholInteraction(CamelModel):
    severity: Literal["SEVERE", "MODERATE", "MINOR", "NONE"]
    description: str = ""
    recommendation: str = ""


class Alternative(CamelModel):
    instead_of: str
    consider: List[str] = Field(default_factory=list)
    reason: str = ""


class InteractionReport(CamelModel):
    interactions: List[DrugInteraction] = Field(default_factory=list)
    food_interactions: List[FoodInteraction] = Field(default_factory=list, alias="foodInteractions")
    alcohol_interaction: Optional[AlcoholInteraction] = Field(default=None, alias="alcoholInteraction")
    alternatives: List[Alternative] = Field(default_factory=list)
    overall_safety: Literal["SAFE", "CAUTION", "DANGER"]
    summary: str = ""


class PrescriptionPerson(CamelModel):
    name: Optional[str] = None
    age: Optional[str] = None
    gender: Optional[str] = None


class PrescriptionDoctor(CamelModel):
    name: Optional[str] = None
    license: Optional[str] = None
    clinic: Optional[str] = None


class PrescribedMedication(CamelModel):
    name: str
    generic_name: Optional[str] = Field(default=None, alias="genericName")
    dosage: str = ""
    form: str = ""
    frequency: str = ""
    duration: str = ""
    instructions: Optional[str] = None


class PrescriptionExtraction(CamelModel):
    patient: PrescriptionPerson = Field(default_factory=PrescriptionPerson)
    doctor: PrescriptionDoctor = Field(default_factory=PrescriptionDoctor)
    medications: List[PrescribedMedication] = Field(default_factory=list)
    prescription_date: Optional[str] = Field(default=None, alias="prescriptionDate")
    refills: Optional[str] = None
    confidence: Literal["high", "medium", "low"] = "low"


class DietRequest(CamelModel):
    daily_meals: str = Field(alias="dailyMeals", min_length=1, max_length=5000)
    current_weight: float = Field(alias="currentWeight", gt=0, le=500)
    height: float = Field(gt=0, le=300)
    target_weight: Optional[float] = Field(default=None, alias="targetWeight", gt=0, le=500)
    duration: Optional[int] = Field(default=None, gt=0, le=520)
    goal: str = Field(min_length=1, max_length=1000)


class DietRecommendation(CamelModel):
    bmi: float
    target_bmi: Optional[float] = Field(default=None, alias="targetBmi")
    recommendation: str


class ChatMessage(CamelModel):
    role: Literal["user", "assistant"]
    content: str = Field(min_length=1, max_length=4000)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v


class DietChatRequest(CamelModel):
    messages: List[ChatMessage] = Field(min_length=1, max_length=MAX_LIST_ITEMS)

    @model_validator(mode="after")
    def ends_with_user(self):
        if self.messages[-1].role != "user":
            raise ValueError("The last message must come from the user")
        return self


class DietChatReply(CamelModel):
    response: str


class RecognizedMedicine(CamelModel):
    name: str
    manufacturer: Optional[str] = None
    batch_number: Optional[str] = Field(default=None, alias="batchNumber")
    expiry_date: Optional[str] = Field(default=None, alias="expiryDate")
    dosage_form: Optional[str] = Field(default=None, alias="dosageForm")
    strength: Optional[str] = None
    confidence: Literal["high", "medium", "low"] = "low"
