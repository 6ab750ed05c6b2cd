import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CATEGORY_MATCHER"] = "undefined"
os.environ["DEFAULT_CURRENCY"] = "USD"
os.environ["BASE_CURRENCY"] = "USD"

import pytest
from fastapi.testclient import TestClient

from budgetbot import crud
from budgetbot.db import Base, SessionLocal, engine
from budgetbot.deps import get_llm, get_messenger
from budgetbot.main import app
from budgetbot.schemas import TelegramUserIn
from budgetbot.seed import seed_reference_data


class FakeLLM:
    def __init__(self) -> None:
        self.extraction = ""
        self.analysis = "Report"
        self.error: Exception | None = None
        self.messages: list[str] = []
        self.prompts: list[str] = []

    def extract_transaction(self, message: str) -> str:
        self.messages.append(message)
        if self.error:
            raise self.error
        return self.extraction

    def analyze(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.analysis


class FakeMessenger:
    def __init__(self) -> None:
        self.sent: list[tuple[int, str, str | None]] = []

    async def send(self, chat_id: int, text: str, parse_mode: str | None = None) -> bool:
        self.sent.append((chat_id, text, parse_mode))
        return True


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    seed_reference_data(engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(database):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def messenger() -> FakeMessenger:
    return FakeMessenger()


@pytest.fixture
def client(llm, messenger):
    app.dependency_overrides[get_llm] = lambda: llm
    app.dependency_overrides[get_messenger] = lambda: messenger
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user(db):
    return crud.create_user(db, TelegramUserIn(id=1001, username="alice", first_name="Alice", language_code="en"))


@pytest.fixture
def ai_user(db, user):
    return crud.update_user(db, user, ai_features_enabled=True)
