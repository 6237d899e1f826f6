import pytest
from pydantic import ValidationError as SchemaError

from services.safety_score import calculate_safety_score, classify_score
from services.schemas import SafetyScoreRequest


def request(age=30, conditions=(), medications=(), new="Paracetamol"):
    return SafetyScoreRequest(
        age=age,
        conditions=list(conditions),
        currentMedications=list(medications),
        newMedication=new,
    )


def test_healthy_adult_scores_full_marks():
    result = calculate_safety_score(request())
    assert result.score == 100
    assert result.level == "safe"
    assert result.risks == []
    assert result.recommendations == []


def test_elderly_patient_with_diabetes_polypharmacy_and_anticoagulants():
    result = calculate_safety_score(
        request(
            age=70,
            conditions=["Type 2 Diabetes"],
            medications=["Warfarin", "Metformin", "Lisinopril", "Aspirin"],
            new="Ibuprofen",
        )
    )

    assert result.score == 25
    assert result.level == "danger"
    assert result.risks == [
        "Elderly patient - increased risk of adverse reactions",
        "Type 2 Diabetes may interact with medication",
        "Polypharmacy detected - increased interaction risk",
        "Potential bleeding risk with anticoagulant therapy",
    ]
    assert result.recommendations == [
        "Start with lower doses and monitor closely",
        "Monitor Type 2 Diabetes symptoms closely",
        "Review all medications with pharmacist",
        "Monitor INR levels regularly",
    ]


def test_pediatric_deduction():
    result = calculate_safety_score(request(age=12))
    assert result.score == 90
    assert result.risks == ["Pediatric patient - requires careful dosage monitoring"]


@pytest.mark.parametrize("age", [18, 40, 65])
def test_no_age_deduction_for_adults(age):
    assert calculate_safety_score(request(age=age)).score == 100


def test_each_high_risk_condition_deducts():
    result = calculate_safety_score(
        request(conditions=["Chronic Kidney Disease", "asthma", "Heart Disease"])
    )
    assert result.score == 60
    assert result.level == "caution"
    assert result.risks == [
        "Chronic Kidney Disease may interact with medication",
        "Heart Disease may interact with medication",
    ]


def test_polypharmacy_needs_more_than_three():
    assert calculate_safety_score(request(medications=["a", "b", "c"])).score == 100
    assert calculate_safety_score(request(medications=["a", "b", "c", "d"])).score == 85


def test_anticoagulant_substring_match_fires_once():
    result = calculate_safety_score(request(medications=["Baby Aspirin", "warfarin sodium"]))
    assert result.score == 75
    assert result.level == "safe"
    assert len(result.risks) == 1


def test_score_never_negative():
    result = calculate_safety_score(
        request(
            age=80,
            conditions=["diabetes", "heart disease", "liver disease", "kidney disease"],
            medications=["warfarin", "b", "c", "d"],
        )
    )
    assert result.score == 0
    assert result.level == "danger"


def test_is_deterministic():
    req = request(age=70, conditions=["diabetes"], medications=["aspirin"])
    assert calculate_safety_score(req) == calculate_safety_score(req)


@pytest.mark.parametrize("score,level", [(100, "safe"), (75, "safe"), (74, "caution"), (50, "caution"), (49, "danger"), (0, "danger")])
def test_classify_score_boundaries(score, level):
    assert classify_score(score) == level


def test_request_rejects_negative_age():
    with pytest.raises(SchemaError):
        request(age=-1)


def test_request_trims_and_truncates_entries():
    req = request(conditions=["  diabetes  ", "x" * 300])
    assert req.conditions[0] == "diabetes"
    assert len(req.conditions[1]) == 200


def test_request_rejects_too_many_medications():
    with pytest.raises(SchemaError):
        request(medications=[f"med{i}" for i in range(51)])
