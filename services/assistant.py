"""
AI-backed collaborators: medicine info, interaction analysis, prescription OCR,
diet advice and chat, package recognition and the AI safety score.

The answers are opaque model output; the only guarantee made here is that
they match the documented response shape.
"""
import logging
from typing import Optional

from config.system_prompts import (
    DIET_ADVISOR,
    DIET_CHAT,
    DRUG_INTERACTIONS,
    DRUG_INTERACTIONS_FORMAT,
    MEDICINE_INFO,
    MEDICINE_RECOGNIZER,
    PRESCRIPTION_OCR,
    SAFETY_ADVISOR,
)
from services.errors import ExternalServiceError, NotFoundError, ValidationError
from services.gemini import GeminiClient, chat_turn, image_part, load_model_json, parse_model_json
from services.schemas import (
    DietChatReply,
    DietChatRequest,
    DietRecommendation,
    DietRequest,
    InteractionReport,
    InteractionRequest,
    MedicineInfo,
    PrescriptionExtraction,
    RecognizedMedicine,
    SafetyScoreRequest,
    SafetyScoreResponse,
)

logger = logging.getLogger(__name__)


def body_mass_index(weight_kg: float, height_cm: float) -> float:
    if height_cm <= 0:
        raise ValidationError("Height must be positive")
    return round(weight_kg / ((height_cm / 100) ** 2), 1)


async def medicine_info(gemini: GeminiClient, medicine_name: str) -> MedicineInfo:
    prompt = (
        f"Provide detailed medical information about: {medicine_name.strip()}\n"
        "Return ONLY valid JSON with no additional text."
    )
    text = await gemini.generate(MEDICINE_INFO, [prompt], temperature=0.3)
    data = load_model_json(text)
    if isinstance(data, dict) and data.get("error"):
        raise NotFoundError(f"Medicine not recognized: {data['error']}")
    return parse_model_json(text, MedicineInfo)


async def analyze_interactions(gemini: GeminiClient, request: InteractionRequest) -> InteractionReport:
    lines = [f"Analyze drug interactions for: {', '.join(m.strip() for m in request.medications)}"]
    if request.check_food:
        lines.append("Include food interactions and dietary restrictions.")
    if request.check_alcohol:
        lines.append("Include alcohol interaction warnings.")
    lines.append(DRUG_INTERACTIONS_FORMAT)
    return await gemini.generate_json(DRUG_INTERACTIONS, ["\n".join(lines)], InteractionReport, temperature=0.3)


async def extract_prescription(gemini: GeminiClient, image: bytes, mime_type: Optional[str]) -> PrescriptionExtraction:
    if not image:
        raise ValidationError("Image data is required")
    contents = [
        "Extract all prescription details from this image.",
        image_part(image, mime_type),
    ]
    result = await gemini.generate_json(PRESCRIPTION_OCR, contents, PrescriptionExtraction, temperature=0.1)
    logger.info(f"Prescription OCR extracted {len(result.medications)} medications ({result.confidence} confidence)")
    return result


async def recognize_medicine(gemini: GeminiClient, image: bytes, mime_type: Optional[str]) -> RecognizedMedicine:
    if not image:
        raise ValidationError("Image data is required")
    contents = [
        "Identify the medicine on this package.",
        image_part(image, mime_type),
    ]
    return await gemini.generate_json(MEDICINE_RECOGNIZER, contents, RecognizedMedicine, temperature=0.1)


async def recommend_diet(gemini: GeminiClient, request: DietRequest) -> DietRecommendation:
    bmi = body_mass_index(request.current_weight, request.height)
    target_bmi = None
    if request.target_weight:
        target_bmi = body_mass_index(request.target_weight, request.height)

    prompt = f"""
Create a comprehensive personalized diet recommendation based on the following information:

Current Measurements:
- Weight: {request.current_weight} kg
- Height: {request.height} cm
- BMI: {bmi}

Current Diet:
{request.daily_meals}

Goals:
{request.goal}
"""
    if request.target_weight:
        prompt += f"\nTarget Weight: {request.target_weight} kg (BMI: {target_bmi})"
    if request.duration:
        prompt += f"\nTime Frame: {request.duration} weeks"
    prompt += """

Please provide an analysis of the current diet, specific nutritional recommendations, a suggested meal plan
structure, foods to include and avoid, portion guidance, important health considerations and tips for
achieving the goals safely. Keep the recommendation practical, actionable, and encouraging."""

    text = await gemini.generate(DIET_ADVISOR, [prompt], json_output=False)
    return DietRecommendation(bmi=bmi, target_bmi=target_bmi, recommendation=text)


async def diet_chat(gemini: GeminiClient, request: DietChatRequest) -> DietChatReply:
    contents = [chat_turn(message.role, message.content) for message in request.messages]
    text = await gemini.generate(DIET_CHAT, contents, json_output=False, temperature=0.7)
    if not text:
        raise ExternalServiceError("AI service returned an empty response", 502)
    return DietChatReply(response=text)


async def ai_safety_score(gemini: GeminiClient, request: SafetyScoreRequest) -> SafetyScoreResponse:
    conditions = ", ".join(request.conditions) or "None reported"
    medications = ", ".join(request.current_medications) or "None"
    prompt = f"""Patient Profile:
- Age: {request.age} years old
- Medical Conditions: {conditions}
- Current Medications: {medications}

New Medication to Evaluate: {request.new_medication}"""
    return await gemini.generate_json(SAFETY_ADVISOR, [prompt], SafetyScoreResponse)
