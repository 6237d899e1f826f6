from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session, create_engine
from sqlmodel.pool import StaticPool

import db.models  # noqa: F401
from db.database import get_session
from db.models import AppRole, Drug, DrugType, RiskLevel, UserRole, utcnow
from main import app
from services.gemini import GeminiClient, get_gemini


class FakeGemini(GeminiClient):
    """Answers every prompt with a canned reply and records what it was asked."""

    def __init__(self):
        super().__init__(client=object(), model="fake-model")
        self.reply = "{}"
        self.error = None
        self.calls = []

    async def generate(self, system_prompt, contents, json_output=True, temperature=None):
        self.calls.append({"system_prompt": system_prompt, "contents": contents, "json_output": json_output})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def gemini():
    return FakeGemini()


@pytest.fixture
def client(engine, gemini):
    def get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_gemini] = lambda: gemini
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_drug(session):
    def _make(batch_no="BATCH001", **overrides):
        today = utcnow().date()
        fields = dict(
            drug_id=f"DRUG-{batch_no}",
            name="Paracetamol",
            batch_no=batch_no,
            mfg_date=today - timedelta(days=365),
            exp_date=today + timedelta(days=365),
            manufacturer="Acme Pharma",
            drug_type=DrugType.authentic,
            risk_level=RiskLevel.low,
            active_ingredient="Acetaminophen",
            dosage_form="Tablet",
        )
        fields.update(overrides)
        drug = Drug(**fields)
        session.add(drug)
        session.commit()
        session.refresh(drug)
        return drug

    return _make


@pytest.fixture
def grant_role(session):
    def _grant(user_id: str, role: AppRole):
        session.add(UserRole(user_id=user_id, role=role))
        session.commit()
        return {"X-User-Id": user_id}

    return _grant
