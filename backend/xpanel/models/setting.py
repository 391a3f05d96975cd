"""
系统设置模型

定义键值对形式的设置项表结构。值一律以字符串存储，类型由 AllSetting 的字段声明决定。
"""
from sqlalchemy import Column, String, Text, DateTime, func

from xpanel.core.database import Base


class Setting(Base):
    """设置表，每个设置项一行；某个键没有行表示"使用默认值"。"""
    __tablename__ = "settings"

    key = Column(String(255), primary_key=True, index=True)
    value = Column(Text, nullable=False, default="")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Setting(key='{self.key}')>"
