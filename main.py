# local imports
import logging
import logging.config
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# external imports
from config import settings
from api import ai, dashboard, history, notifications, profile, register, report, safety, verify
from db.database import init_db
from services.errors import MedVerifyError

logging.config.dictConfig(settings.LOGGING_CONFIG)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if not settings.GOOGLE_API_KEY:
        logger.warning("GOOGLE_API_KEY not set, AI endpoints will answer 503")
    logger.info(f"MedVerify API started (dev_mode={settings.DEV_MODE}, model={settings.GEMINI_MODEL})")
    yield
    logger.info("MedVerify API shutting down")


app = FastAPI(
    title="MedVerify API",
    description="""
    **MedVerify** is a patient-facing API for drug authenticity checks, medication history
    and medication safety scoring.

    ## Features

    * **Batch Verification** - Classifies a batch number as verified, counterfeit, expired or not found, and flags repeat scans
    * **Safety Score** - Deterministic point-deduction score for adding a medication to a patient profile
    * **Medical History** - Medication records with reminders
    * **Community Reporting** - Counterfeit reports forwarded to the regulator, with reward points
    * **AI Assistant** - Medicine info, interaction analysis, prescription OCR, diet advice (Gemini)
    """,
    version="1.0.0",
    contact={
        "name": "MedVerify Team",
    },
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allows all origins
    allow_credentials=False,  # Must be False when allow_origins=["*"]
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MedVerifyError)
async def medverify_error_handler(request: Request, exc: MedVerifyError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={"error": f"{field}: {message}" if field else message},
    )


app.include_router(verify.router)
app.include_router(register.router)
app.include_router(safety.router)
app.include_router(history.router)
app.include_router(notifications.router)
app.include_router(profile.router)
app.include_router(report.router)
app.include_router(dashboard.router)
app.include_router(ai.router)
