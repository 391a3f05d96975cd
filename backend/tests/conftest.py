"""
xpanel 测试基础配置

提供 SQLite in-memory 异步数据库、记录型遥测上报器、FastAPI 测试客户端等通用 fixture。
所有测试使用隔离的内存数据库，不依赖外部服务。
"""
import os
from typing import AsyncGenerator

# 必须在导入 xpanel 之前设置环境变量，避免真实连接和真实上报
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["TELEMETRY_URL"] = ""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from xpanel import models  # noqa: F401
from xpanel.core.database import Base, get_db
from xpanel.core.deps import get_setting_service
from xpanel.core.security import create_access_token
from xpanel.schemas.setting import AllSetting
from xpanel.services.setting_defaults import XRAY_TEMPLATE_CONFIG
from xpanel.services.setting_service import SettingService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ── 记录型遥测上报器 ──────────────────────────────────────────────────
class FakeNotifier:
    """只记录调用，不发送任何请求。"""
    def __init__(self):
        self.changes: list[tuple[str, object]] = []
        self.bulks: list[dict] = []

    def notify_change(self, key, value) -> None:
        self.changes.append((key, value))

    def notify_bulk(self, values) -> None:
        self.bulks.append(dict(values))


def make_all_setting(**overrides) -> AllSetting:
    """以默认值构造一个合法的 AllSetting，可按属性名覆盖。"""
    values = {
        "web_listen": "",
        "web_port": 54321,
        "web_cert_file": "",
        "web_key_file": "",
        "web_base_path": "/",
        "session_max_age": 0,
        "time_location": "Asia/Shanghai",
        "xray_template_config": XRAY_TEMPLATE_CONFIG,
    }
    values.update(overrides)
    return AllSetting(**values)


# ── Fixtures ──────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def engine():
    """每个测试一个独立的内存数据库，StaticPool 保证所有会话共享同一连接。"""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """提供一个干净的数据库会话。"""
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def service(db_session: AsyncSession, notifier: FakeNotifier) -> SettingService:
    return SettingService(db_session, notifier=notifier)


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, notifier: FakeNotifier) -> AsyncGenerator[AsyncClient, None]:
    """提供配置好依赖覆盖的异步 HTTP 测试客户端。"""
    from xpanel.main import app

    async def override_get_db():
        yield db_session

    async def override_get_setting_service():
        return SettingService(db_session, notifier=notifier)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_setting_service] = override_get_setting_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def auth_headers(service: SettingService) -> dict:
    """用当前面板 secret 签发的认证头。"""
    token = create_access_token("admin", await service.get_secret())
    return {"Authorization": f"Bearer {token}"}
