# internal imports
import logging
from fastapi import APIRouter, Depends

# external imports
from services.assistant import ai_safety_score
from services.gemini import GeminiClient, get_gemini
from services.safety_score import calculate_safety_score
from services.schemas import SafetyScoreRequest, SafetyScoreResponse


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/safety-score", tags=["safety score"])


@router.post("/", response_model=SafetyScoreResponse)
def safety_score(body: SafetyScoreRequest):
    """Deterministic point-deduction score for adding `newMedication` to a patient profile."""
    return calculate_safety_score(body)


@router.post("/ai", response_model=SafetyScoreResponse)
async def safety_score_ai(body: SafetyScoreRequest, gemini: GeminiClient = Depends(get_gemini)):
    """Same question answered by the AI gateway. Not deterministic."""
    logger.info(
        f"AI safety score requested: age={body.age} conditions={len(body.conditions)} "
        f"medications={len(body.current_medications)}"
    )
    return await ai_safety_score(gemini, body)
