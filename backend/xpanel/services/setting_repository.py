"""
设置表访问层 (Settings Row Store)

settings 表之上的窄接口：按键读取、全部读取、插入或更新、全部删除。
不做缓存，也不含业务逻辑；每次调用都是一次数据库往返，存储异常原样抛出。
"""
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from xpanel.models.setting import Setting


class SettingRepository:
    """settings 表的键值读写。"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, key: str) -> Optional[Setting]:
        """按键读取一行，不存在时返回 None。"""
        result = await self.db.execute(select(Setting).where(Setting.key == key))
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Setting]:
        result = await self.db.execute(select(Setting))
        return list(result.scalars().all())

    async def upsert(self, key: str, value: str) -> Setting:
        """
        先查后定：键不存在则插入，存在则原地更新 value。

        每次调用单独提交，失败时回滚会话，保证同一会话里后续的键仍可写入。
        同一键的并发写入以最后一次提交为准。
        """
        try:
            setting = await self.get(key)
            if setting is None:
                setting = Setting(key=key, value=value)
                self.db.add(setting)
            else:
                setting.value = value
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return setting

    async def delete_all(self) -> int:
        """无条件删除所有行，返回删除的行数。"""
        try:
            result = await self.db.execute(delete(Setting))
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return result.rowcount
