"""
Rule-based medication safety score.

Starts at 100 and deducts points for age, high-risk conditions,
polypharmacy and anticoagulant therapy. Pure: no I/O, no clock.
"""
from services.errors import ValidationError
from services.schemas import SafetyScoreRequest, SafetyScoreResponse


STARTING_SCORE = 100

PEDIATRIC_AGE = 18
ELDERLY_AGE = 65
PEDIATRIC_DEDUCTION = 10
ELDERLY_DEDUCTION = 15

HIGH_RISK_CONDITIONS = ("heart disease", "kidney disease", "liver disease", "diabetes")
CONDITION_DEDUCTION = 20

POLYPHARMACY_THRESHOLD = 3
POLYPHARMACY_DEDUCTION = 15

ANTICOAGULANTS = ("warfarin", "aspirin")
ANTICOAGULANT_DEDUCTION = 25

SAFE_THRESHOLD = 75
CAUTION_THRESHOLD = 50


def classify_score(score: int) -> str:
    if score >= SAFE_THRESHOLD:
        return "safe"
    if score >= CAUTION_THRESHOLD:
        return "caution"
    return "danger"


def calculate_safety_score(request: SafetyScoreRequest) -> SafetyScoreResponse:
    if request.age < 0:
        raise ValidationError("Age must be a non-negative integer")

    score = STARTING_SCORE
    risks = []
    recommendations = []

    # Age
    if request.age < PEDIATRIC_AGE:
        score -= PEDIATRIC_DEDUCTION
        risks.append("Pediatric patient - requires careful dosage monitoring")
        recommendations.append("Consult pediatrician for appropriate dosage")
    elif request.age > ELDERLY_AGE:
        score -= ELDERLY_DEDUCTION
        risks.append("Elderly patient - increased risk of adverse reactions")
        recommendations.append("Start with lower doses and monitor closely")

    # Conditions, each matching one deducts on its own
    for condition in request.conditions:
        lowered = condition.lower()
        if any(term in lowered for term in HIGH_RISK_CONDITIONS):
            score -= CONDITION_DEDUCTION
            risks.append(f"{condition} may interact with medication")
            recommendations.append(f"Monitor {condition} symptoms closely")

    if len(request.current_medications) > POLYPHARMACY_THRESHOLD:
        score -= POLYPHARMACY_DEDUCTION
        risks.append("Polypharmacy detected - increased interaction risk")
        recommendations.append("Review all medications with pharmacist")

    # Substring match, fires at most once
    has_anticoagulant = any(
        ac in med.lower() for med in request.current_medications for ac in ANTICOAGULANTS
    )
    if has_anticoagulant:
        score -= ANTICOAGULANT_DEDUCTION
        risks.append("Potential bleeding risk with anticoagulant therapy")
        recommendations.append("Monitor INR levels regularly")

    score = max(0, min(STARTING_SCORE, score))

    return SafetyScoreResponse(
        score=score,
        level=classify_score(score),
        risks=risks,
        recommendations=recommendations,
    )
