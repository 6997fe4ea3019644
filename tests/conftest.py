"""Shared fixtures: in-memory catalog, fake generator and fake object store."""

import os

os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("MINIO_ACCESS_KEY", "minio")
os.environ.setdefault("MINIO_SECRET_KEY", "minio-secret")
os.environ.setdefault("MINIO_BUCKET", "podcasts")
os.environ.setdefault("MINIO_SERVER", "localhost:9000")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api.deps import get_generator, get_session, get_store  # noqa: E402
from app.core.ai import SpeechResult  # noqa: E402
from app.core.errors import StorageFailed  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.core.storage import StoredAsset  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Base, Podcast, User  # noqa: E402


class FakeGenerator:
    def __init__(self):
        self.speech = SpeechResult(data=b"ID3-fake-mp3", duration=42.5)
        self.image: bytes | None = b"\x89PNG-fake"
        self.speech_error: Exception | None = None
        self.image_error: Exception | None = None
        self.speech_calls: list[tuple[str, str]] = []
        self.image_calls: list[str] = []

    async def text_to_speech(self, text, voice):
        self.speech_calls.append((text, voice))
        if self.speech_error:
            raise self.speech_error
        return self.speech

    async def text_to_image(self, prompt):
        self.image_calls.append(prompt)
        if self.image_error:
            raise self.image_error
        return self.image


class FakeStore:
    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.fail_put = False
        self.deleted: list[str] = []

    async def put(self, data, filename, content_type):
        if self.fail_put:
            raise StorageFailed(f"Could not upload {filename}")
        self.objects[filename] = (data, content_type)
        return StoredAsset(reference=filename, url=await self.get_url(filename))

    async def get_url(self, reference):
        return f"https://cdn.test/{reference}"

    async def delete(self, reference):
        self.deleted.append(reference)
        if reference not in self.objects:
            raise StorageFailed(f"Could not delete {reference}: NoSuchKey")
        del self.objects[reference]


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
async def client(session_factory, generator, store):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_generator] = lambda: generator
    app.dependency_overrides[get_store] = lambda: store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def auth_headers(subject: str, email: str) -> dict[str, str]:
    token = create_access_token({"sub": subject, "email": email})
    return {"Authorization": f"Bearer {token}"}


ADMIN_HEADERS = {"X-Admin-Key": "test-admin-key"}


async def make_user(session, clerk_id: str, name: str, email: str | None = None) -> User:
    user = User(
        clerk_id=clerk_id,
        name=name,
        email=email or f"{clerk_id}@example.com",
        image_url=f"https://img.test/{clerk_id}.png",
    )
    session.add(user)
    await session.commit()
    return user


async def make_podcast(session, author: User, **fields) -> Podcast:
    values = dict(
        title="Untitled",
        description="No description",
        audio_storage_id="podcast-a.mp3",
        audio_url="https://cdn.test/podcast-a.mp3",
        image_storage_id="thumbnail-a.png",
        image_url="https://cdn.test/thumbnail-a.png",
        voice_prompt="Hello listeners",
        image_prompt="A microphone",
        voice_type="alloy",
        views=0,
        audio_duration=10.0,
    )
    values.update(fields)
    podcast = Podcast(
        **values,
        author=author.name,
        author_id=author.clerk_id,
        author_image_url=author.image_url,
        user_id=author.id,
    )
    session.add(podcast)
    await session.commit()
    return podcast
