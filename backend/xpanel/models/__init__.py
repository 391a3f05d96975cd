"""
数据模型包 (Data Models Package)

集中导出 SQLAlchemy ORM 模型。设置以"每个键一行"的形式存储，新增设置项无需迁移。

Centrally exports the SQLAlchemy ORM models. Settings are stored one row per
key, so adding an option never needs a migration.
"""
from xpanel.models.setting import Setting

__all__ = ["Setting"]
