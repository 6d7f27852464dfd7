from __future__ import annotations

import json
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, List, Optional

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("LOG_FILE", "")

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from estrategia_enem.api.v1.routes.router import router as api_router
from estrategia_enem.core.completion_client import CompletionClient, get_completion_client
from estrategia_enem.core.error_handlers import register_exception_handlers
from estrategia_enem.db.deps import Base, get_db
from estrategia_enem.models.question import Question
from estrategia_enem.models.user import User
from estrategia_enem.utils.enums import PlanTier


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Run every async test and fixture on asyncio."""
    return "asyncio"


@pytest.fixture(scope="session")
def test_app() -> FastAPI:
    app = FastAPI()
    app.include_router(api_router, prefix="/api/v1")
    register_exception_handlers(app)
    return app


@pytest.fixture()
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.sqlite'}", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@dataclass
class StubCompletionEndpoint:
    """Scripted stand-in for the completion endpoint behind httpx.MockTransport."""

    replies: List[Any] = field(default_factory=list)
    requests: List[dict] = field(default_factory=list)

    def reply_with(self, content: str) -> None:
        self.replies.append(
            httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})
        )

    def fail_with(self, status_code: int, message: str) -> None:
        self.replies.append(httpx.Response(status_code, json={"error": {"message": message}}))

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(
            {
                "url": str(request.url),
                "headers": dict(request.headers),
                "json": json.loads(request.content),
            }
        )
        if not self.replies:
            raise AssertionError("Unexpected call to the completion endpoint")
        return self.replies.pop(0)

    def client(self, api_key: Optional[str] = "test-key") -> CompletionClient:
        return CompletionClient(
            api_key=api_key,
            base_url="https://llm.test/v1",
            model="gpt-4o-mini",
            transport=httpx.MockTransport(self._handle),
        )


@pytest.fixture()
def completion_endpoint() -> StubCompletionEndpoint:
    return StubCompletionEndpoint()


@pytest.fixture()
async def client(
    test_app: FastAPI,
    db_session: AsyncSession,
    completion_endpoint: StubCompletionEndpoint,
) -> AsyncGenerator[AsyncClient, None]:
    async def _get_test_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    test_app.dependency_overrides[get_db] = _get_test_db
    test_app.dependency_overrides[get_completion_client] = completion_endpoint.client

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client

    test_app.dependency_overrides.clear()


async def create_user(session: AsyncSession, plan: PlanTier = PlanTier.free, **kwargs) -> User:
    user = User(id=kwargs.pop("id", uuid.uuid4()), name=kwargs.pop("name", "Ana"), plan=plan, **kwargs)
    session.add(user)
    await session.commit()
    return user


async def create_questions(
    session: AsyncSession, count: int = 10, subject: str = "matematica"
) -> List[Question]:
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    questions = []
    for i in range(count):
        questions.append(
            Question(
                prompt=f"Questão {i + 1} de {subject}",
                options=["A", "B", "C", "D", "E"],
                correct_option="ABCDE"[i % 5],
                subject=subject,
                difficulty=1 + i % 3,
                created_at=base.replace(minute=i),
            )
        )
    session.add_all(questions)
    await session.commit()
    return questions


@pytest.fixture()
async def free_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, PlanTier.free)


@pytest.fixture()
async def premium_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, PlanTier.premium, name="Bruno")


@pytest.fixture()
def user_factory(db_session: AsyncSession):
    async def _make(plan: PlanTier = PlanTier.free, **kwargs) -> User:
        return await create_user(db_session, plan, **kwargs)

    return _make


@pytest.fixture()
def question_factory(db_session: AsyncSession):
    async def _make(count: int = 10, subject: str = "matematica") -> List[Question]:
        return await create_questions(db_session, count=count, subject=subject)

    return _make
