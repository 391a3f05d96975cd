"""
数据库连接模块 (Database Connection Module)

基于 SQLAlchemy 2.0 异步模式创建数据库引擎和会话管理，为 settings 表提供持久化支持。
包含异步引擎创建、会话工厂配置、ORM 基类定义和依赖注入函数。

Creates the database engine and session management on SQLAlchemy 2.0 async mode,
providing persistence for the settings table. Includes async engine creation,
session factory configuration, the ORM base class and the dependency function.
"""
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from xpanel.core.config import settings

# 创建异步数据库引擎 (Create Async Database Engine)
engine = create_async_engine(settings.database_url, echo=False)

# 创建异步会话工厂 (Create Async Session Factory)
# 提交后不过期对象，逐行提交后仍可访问已保存的数据 (Don't expire objects after commit)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """ORM 模型基类 (ORM Model Base Class)"""
    pass


async def init_db() -> None:
    """创建所有数据表（已存在则跳过）。不做迁移：新增设置项只是新增行。"""
    # 导入模型以确保表注册到 metadata (Import models so tables register on the metadata)
    from xpanel import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 依赖项：获取数据库会话 (FastAPI Dependency: Get Database Session)

    使用异步上下文管理器确保会话在请求结束后正确关闭，防止连接泄漏。

    Yields:
        AsyncSession: 异步数据库会话实例 (Async database session instance)
    """
    async with async_session() as session:
        yield session
