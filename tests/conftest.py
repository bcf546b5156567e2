"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("APP_SECRET_KEY", "Vt9xQ2mLk8Rz4WpB7nHc3JdF6gYs1AeU")

from collections.abc import AsyncGenerator, Callable  # noqa: E402
from pathlib import Path  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.auth.dependencies import get_current_user, get_optional_user  # noqa: E402
from src.db.database import get_db  # noqa: E402
from src.main import app  # noqa: E402
from src.models import Base, Comment, Playlist, Tweet, User, Video  # noqa: E402
from src.services.assets import StoredAsset, get_asset_store  # noqa: E402
from src.utils.cache import cache  # noqa: E402
from src.utils.secrets import hash_password  # noqa: E402

# Test database URL (uses SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "Sup3r-Long-Passw0rd"
# bcrypt is slow on purpose; hash once for every fixture user
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


class FakeAssetStore:
    """Asset store double recording what was stored and removed.

    Uploads whose file name ends with one of ``fail_suffixes`` fail.
    """

    def __init__(self) -> None:
        self.stored: list[str] = []
        self.removed: list[str] = []
        self.fail_suffixes: set[str] = set()

    async def store(self, path: str) -> StoredAsset | None:
        if Path(path).suffix in self.fail_suffixes:
            return None
        assert Path(path).exists()
        url = f"https://assets.test/{len(self.stored)}{Path(path).suffix}"
        self.stored.append(url)
        return StoredAsset(url=url, duration_seconds=12.5)

    async def remove(self, url: str) -> bool:
        self.removed.append(url)
        return True


class InMemoryRedis:
    """The slice of the redis client API the cache uses, kept in a dict."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def setex(self, key: str, seconds: int, value: str) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> int:
        return 1 if self.data.pop(key, None) is not None else 0

    async def aclose(self) -> None:
        self.data.clear()


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh in-memory database and a session on it."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def asset_store() -> FakeAssetStore:
    return FakeAssetStore()


async def _create_user(db: AsyncSession, username: str) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        display_name=username.capitalize(),
        password_hash=TEST_PASSWORD_HASH,
        avatar_url=f"https://assets.test/{username}-avatar.png",
        watch_history=[],
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user for authenticated tests."""
    return await _create_user(db_session, "testuser")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    """Create another test user for isolation tests."""
    return await _create_user(db_session, "otheruser")


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, asset_store: FakeAssetStore
) -> AsyncGenerator[AsyncClient, None]:
    """Create an unauthenticated test client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_asset_store] = lambda: asset_store

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def act_as(client: AsyncClient) -> Callable[[User | None], None]:
    """Switch the user the client acts as (None for anonymous)."""

    def switch(user: User | None) -> None:
        if user is None:
            app.dependency_overrides.pop(get_current_user, None)
            app.dependency_overrides.pop(get_optional_user, None)
            return
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_optional_user] = lambda: user

    return switch


@pytest_asyncio.fixture
async def authenticated_client(
    client: AsyncClient, test_user: User, act_as: Callable[[User | None], None]
) -> AsyncClient:
    """Create an authenticated test client with a test user."""
    act_as(test_user)
    return client


@pytest.fixture
def make_video(db_session: AsyncSession) -> Callable:
    async def factory(owner: User, title: str = "A video", **fields) -> Video:
        video = Video(
            owner_id=owner.id,
            title=title,
            description=fields.pop("description", f"About {title}"),
            video_url=fields.pop("video_url", "https://assets.test/video.mp4"),
            thumbnail_url=fields.pop("thumbnail_url", "https://assets.test/thumb.png"),
            duration_seconds=fields.pop("duration_seconds", 60.0),
            view_count=fields.pop("view_count", 0),
            is_published=fields.pop("is_published", True),
            **fields,
        )
        db_session.add(video)
        await db_session.commit()
        await db_session.refresh(video)
        return video

    return factory


@pytest.fixture
def make_comment(db_session: AsyncSession) -> Callable:
    async def factory(video: Video, owner: User, content: str = "Nice video") -> Comment:
        comment = Comment(video_id=video.id, owner_id=owner.id, content=content)
        db_session.add(comment)
        await db_session.commit()
        await db_session.refresh(comment)
        return comment

    return factory


@pytest.fixture
def make_tweet(db_session: AsyncSession) -> Callable:
    async def factory(owner: User, content: str = "Hello") -> Tweet:
        tweet = Tweet(owner_id=owner.id, content=content)
        db_session.add(tweet)
        await db_session.commit()
        await db_session.refresh(tweet)
        return tweet

    return factory


@pytest.fixture
def make_playlist(db_session: AsyncSession) -> Callable:
    async def factory(owner: User, name: str = "Favourites", videos: list[str] | None = None) -> Playlist:
        playlist = Playlist(owner_id=owner.id, name=name, description="My list", videos=videos or [])
        db_session.add(playlist)
        await db_session.commit()
        await db_session.refresh(playlist)
        return playlist

    return factory


@pytest.fixture
def redis_cache(monkeypatch: pytest.MonkeyPatch) -> InMemoryRedis:
    """Connect the global cache to an in-memory Redis for one test."""
    backend = InMemoryRedis()
    monkeypatch.setattr(cache, "_client", backend)
    monkeypatch.setattr(cache, "_connected", True)
    return backend


@pytest.fixture
def user_password() -> str:
    """Password of the users created by test_user and other_user."""
    return TEST_PASSWORD
