"""
面板设置服务 (Panel Settings Service)

在 settings 表之上提供强类型的设置读写：
- 读取：先应用所有存储行，再用默认值目录补齐未出现的键，得到完整的 AllSetting；
- 写入：先做聚合校验，再逐键插入或更新，部分失败时汇总所有失败的键；
- 单键读写与派生访问器（端口、基础路径、时区、会话时长、面板密钥等）。

Typed settings access over the settings table. Reads overlay compiled-in
defaults on top of stored rows, so an empty or partially filled table always
yields a complete aggregate; writes are validated first and then saved one key
at a time. Storage errors propagate unchanged and nothing is retried here.
"""
import logging
from datetime import timedelta
from typing import Dict, Optional, Set
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from xpanel.core.exceptions import ConfigurationError, SettingsWriteError
from xpanel.schemas.setting import AllSetting, normalize_base_path
from xpanel.services.setting_defaults import DEFAULT_SETTINGS, default_of
from xpanel.services.setting_mapper import (
    ScalarValue,
    apply_row,
    build_all_setting,
    flatten_to_rows,
    parse_int,
)
from xpanel.services.setting_notifier import SettingNotifier, setting_notifier
from xpanel.services.setting_repository import SettingRepository

logger = logging.getLogger(__name__)


class SettingService:
    """面板设置服务类，每个请求构造一次，聚合对象用完即弃。"""

    def __init__(self, db: AsyncSession, notifier: Optional[SettingNotifier] = None):
        self.db = db
        self.repo = SettingRepository(db)
        self.notifier = setting_notifier if notifier is None else notifier

    # ------------------------------------------------------------------
    # 聚合读写 (Aggregate read/write)
    # ------------------------------------------------------------------

    async def get_all_setting(self) -> AllSetting:
        """
        读取全部设置。

        存储行优先，没有行的键使用默认值。任何一个值解析失败都会中止整个读取，
        不会返回部分填充的聚合。

        Raises:
            SettingTypeError: 存储值与字段类型不符
            ConfigurationError: 某字段既无存储行也无默认值
        """
        draft: Dict[str, ScalarValue] = {}
        seen: Set[str] = set()

        for setting in await self.repo.list_all():
            apply_row(draft, setting.key, setting.value)
            seen.add(setting.key)

        for key, value in DEFAULT_SETTINGS.items():
            if key in seen:
                continue
            apply_row(draft, key, value)

        return build_all_setting(draft)

    async def update_all_setting(self, all_setting: AllSetting) -> None:
        """
        校验并保存全部设置。

        校验失败时不做任何写入。每个键单独保存，互不影响：前面已保存的键不会回滚，
        所有失败的键汇总在一个 SettingsWriteError 中。全部成功后才上报遥测。

        Raises:
            ValidationError: 聚合校验失败
            SettingsWriteError: 部分键保存失败
        """
        all_setting.check_valid()

        errors: Dict[str, Exception] = {}
        for key, value in flatten_to_rows(all_setting):
            try:
                await self.repo.upsert(key, value)
            except SQLAlchemyError as e:
                logger.error("Failed to save setting %s: %s", key, e)
                errors[key] = e

        if errors:
            raise SettingsWriteError(errors)

        self.notifier.notify_bulk(all_setting.to_external())

    async def reset_settings(self) -> None:
        """删除所有设置行，之后的读取全部回落到默认值。"""
        deleted = await self.repo.delete_all()
        logger.info("Settings reset, %d rows deleted", deleted)
        self.notifier.notify_change("reset_settings", "all_settings_reset")

    # ------------------------------------------------------------------
    # 单键读写 (Single-key accessors)
    # ------------------------------------------------------------------

    async def get_string(self, key: str) -> str:
        setting = await self.repo.get(key)
        if setting is not None:
            return setting.value
        default = default_of(key)
        if default is None:
            raise ConfigurationError(f"key <{key}> not in default settings")
        return default

    async def set_string(self, key: str, value: str) -> None:
        await self.repo.upsert(key, value)
        self.notifier.notify_change(key, value)

    async def get_int(self, key: str) -> int:
        return parse_int(key, await self.get_string(key))

    async def set_int(self, key: str, value: int) -> None:
        await self.set_string(key, str(value))

    async def get_duration(self, key: str, unit: timedelta = timedelta(minutes=1)) -> timedelta:
        """以整数存储的时长，按 unit 换算为 timedelta。"""
        return await self.get_int(key) * unit

    # ------------------------------------------------------------------
    # 派生访问器 (Derived accessors)
    # ------------------------------------------------------------------

    async def get_xray_config_template(self) -> str:
        return await self.get_string("xrayTemplateConfig")

    async def get_listen(self) -> str:
        return await self.get_string("webListen")

    async def get_port(self) -> int:
        return await self.get_int("webPort")

    async def set_port(self, port: int) -> None:
        await self.set_int("webPort", port)

    async def get_cert_file(self) -> str:
        return await self.get_string("webCertFile")

    async def get_key_file(self) -> str:
        return await self.get_string("webKeyFile")

    async def get_session_max_age(self) -> timedelta:
        return await self.get_duration("sessionMaxAge")

    async def get_base_path(self) -> str:
        return normalize_base_path(await self.get_string("webBasePath"))

    async def get_time_location(self) -> ZoneInfo:
        """
        解析存储的时区名；无效时记录错误并改用默认时区。

        默认时区也无法解析时直接抛出，不再回退。
        """
        name = await self.get_string("timeLocation")
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            default_name = DEFAULT_SETTINGS["timeLocation"]
            logger.error("location <%s> not exist, using default location: %s", name, default_name)
            return ZoneInfo(default_name)

    async def get_secret(self) -> bytes:
        """
        面板签名密钥。

        默认 secret 每个进程随机生成一次；数据库里还没有 secret 行时，把默认值写入数据库固定下来，
        避免下次启动换成新的随机值。已有行时只读不写。写入失败只记警告。
        """
        setting = await self.repo.get("secret")
        if setting is not None:
            return setting.value.encode()

        secret = DEFAULT_SETTINGS["secret"]
        try:
            await self.set_string("secret", secret)
        except SQLAlchemyError as e:
            logger.warning("save secret failed: %s", e)
        return secret.encode()
