# internal imports
from fastapi import APIRouter, Depends, File, UploadFile

# external imports
from services import assistant
from services.errors import ValidationError
from services.gemini import GeminiClient, get_gemini
from services.schemas import (
    DietChatReply,
    DietChatRequest,
    DietRecommendation,
    DietRequest,
    InteractionReport,
    InteractionRequest,
    MedicineInfo,
    MedicineInfoRequest,
    PrescriptionExtraction,
    RecognizedMedicine,
)


router = APIRouter(prefix="/api/ai", tags=["ai"])

MAX_IMAGE_BYTES = 10 * 1024 * 1024


async def read_image(upload: UploadFile) -> bytes:
    if upload.content_type and not upload.content_type.startswith("image/"):
        raise ValidationError(f"Unsupported file type '{upload.content_type}'. Upload an image.")
    data = await upload.read()
    if not data:
        raise ValidationError("Image data is required")
    if len(data) > MAX_IMAGE_BYTES:
        raise ValidationError("Image must be smaller than 10 MB")
    return data


@router.post("/medicine-info", response_model=MedicineInfo)
async def medicine_info(body: MedicineInfoRequest, gemini: GeminiClient = Depends(get_gemini)):
    return await assistant.medicine_info(gemini, body.medicine_name)


@router.post("/interactions", response_model=InteractionReport)
async def drug_interactions(body: InteractionRequest, gemini: GeminiClient = Depends(get_gemini)):
    """Analyze interactions between two or more medications, optionally with food and alcohol."""
    return await assistant.analyze_interactions(gemini, body)


@router.post("/prescription-ocr", response_model=PrescriptionExtraction)
async def prescription_ocr(image: UploadFile = File(...), gemini: GeminiClient = Depends(get_gemini)):
    data = await read_image(image)
    return await assistant.extract_prescription(gemini, data, image.content_type)


@router.post("/recognize", response_model=RecognizedMedicine)
async def recognize_medicine(image: UploadFile = File(...), gemini: GeminiClient = Depends(get_gemini)):
    """Read the name, manufacturer and batch number off a photo of a medicine package."""
    data = await read_image(image)
    return await assistant.recognize_medicine(gemini, data, image.content_type)


@router.post("/diet", response_model=DietRecommendation)
async def diet_recommendation(body: DietRequest, gemini: GeminiClient = Depends(get_gemini)):
    return await assistant.recommend_diet(gemini, body)


@router.post("/diet/chat", response_model=DietChatReply)
async def diet_chat(body: DietChatRequest, gemini: GeminiClient = Depends(get_gemini)):
    """Continue a diet conversation. Send the whole history; the last message must be the user's."""
    return await assistant.diet_chat(gemini, body)
