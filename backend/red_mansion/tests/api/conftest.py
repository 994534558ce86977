from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from red_mansion.api.deps import get_db, get_llm_client, get_perplexity_client
from red_mansion.core.config import settings
from red_mansion.core.db import build_engine, init_db
from red_mansion.main import app


@pytest.fixture
def session() -> Generator[Session, None, None]:
    engine = build_engine("sqlite:///:memory:")
    with Session(engine) as session:
        init_db(session)
        yield session


@pytest.fixture
def llm() -> MagicMock:
    llm = MagicMock()
    llm.generate_structured = AsyncMock()
    return llm


@pytest.fixture
def perplexity() -> MagicMock:
    client = MagicMock()
    client.completion_request = AsyncMock()
    return client


@pytest.fixture
def client(session: Session, llm: MagicMock, perplexity: MagicMock) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_db] = lambda: session
    app.dependency_overrides[get_llm_client] = lambda: llm
    app.dependency_overrides[get_perplexity_client] = lambda: perplexity
    # Not entered as a context manager so the lifespan never touches the real database.
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client: TestClient) -> dict[str, str]:
    response = client.post(
        f"{settings.API_V1_STR}/login/access-token",
        data={"username": settings.FIRST_SUPERUSER, "password": settings.FIRST_SUPERUSER_PASSWORD},
    )
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}
