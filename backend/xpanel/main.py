"""
xpanel 应用入口模块 (xpanel Application Entry Module)

负责 FastAPI 应用的生命周期管理：建表、固定面板密钥、启停设置变更上报 worker，
以及异常处理器与路由注册。

Owns the FastAPI application lifecycle: table creation, pinning the panel
secret, starting/stopping the settings telemetry worker, exception handlers and
router registration.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from xpanel import __version__
from xpanel.core.database import async_session, engine, init_db
from xpanel.core.exceptions import register_exception_handlers
from xpanel.routers import settings as settings_router
from xpanel.services.setting_notifier import setting_notifier
from xpanel.services.setting_service import SettingService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用生命周期管理器 (Application Lifecycle Manager)

    启动时建表并读取一次面板密钥：首次启动时默认密钥在这里写入数据库，
    之后每次启动都读到同一个密钥。
    """
    await init_db()
    async with async_session() as db:
        await SettingService(db).get_secret()

    setting_notifier.start()

    yield

    await setting_notifier.stop()
    await engine.dispose()


def create_app(base_path: str = "/") -> FastAPI:
    """创建 FastAPI 应用，所有路由挂载在 base_path 之下（需已规范化为 "/.../"）。"""
    app = FastAPI(
        title="xpanel",
        description="Proxy panel runtime settings",
        version=__version__,
        lifespan=lifespan,
    )

    # 注册全局异常处理器 (Register global exception handlers)
    register_exception_handlers(app)

    app.include_router(settings_router.router, prefix=base_path.rstrip("/"))

    @app.get("/health")
    async def health():
        """健康检查接口 (Health Check Endpoint)"""
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
