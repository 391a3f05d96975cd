"""
面板设置聚合模型。

AllSetting 是设置表的强类型视图：每个字段对应 settings 表中的一行，字段别名即外部键名，
同时用于数据库键、默认值目录和 HTTP 接口的 JSON 序列化。
"""
import ipaddress
import json
import ssl
from typing import Any, Dict
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field

from xpanel.core.exceptions import ValidationError

# 整数设置按有符号 32 位存储
INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


def normalize_base_path(base_path: str) -> str:
    """保证路径以 "/" 开头并以 "/" 结尾，如 "api" → "/api/"，"" → "/"。"""
    if not base_path.startswith("/"):
        base_path = "/" + base_path
    if not base_path.endswith("/"):
        base_path += "/"
    return base_path


class AllSetting(BaseModel):
    """面板全部可配置项，由设置行与默认值合成，不会整体落库。"""
    web_listen: str = Field(alias="webListen")
    web_port: int = Field(alias="webPort")
    web_cert_file: str = Field(alias="webCertFile")
    web_key_file: str = Field(alias="webKeyFile")
    web_base_path: str = Field(alias="webBasePath")
    session_max_age: int = Field(alias="sessionMaxAge")  # 分钟，0 表示不过期
    time_location: str = Field(alias="timeLocation")
    xray_template_config: str = Field(alias="xrayTemplateConfig")

    model_config = {"populate_by_name": True}

    def to_external(self) -> Dict[str, Any]:
        """按外部键名导出。"""
        return self.model_dump(by_alias=True)

    def check_valid(self) -> None:
        """
        字段间一致性校验，遇到第一个不满足的约束即抛出 ValidationError。

        校验通过时顺带规范化 web_base_path。
        """
        if self.web_listen:
            try:
                ipaddress.ip_address(self.web_listen)
            except ValueError:
                raise ValidationError(f"web listen is not a valid ip: {self.web_listen}")

        if self.web_port <= 0 or self.web_port > 65535:
            raise ValidationError(f"web port is not a valid port: {self.web_port}")

        if self.session_max_age < 0 or self.session_max_age > INT32_MAX:
            raise ValidationError(f"session max age out of range: {self.session_max_age}")

        if self.web_cert_file or self.web_key_file:
            self._check_key_pair()

        self.web_base_path = normalize_base_path(self.web_base_path)

        try:
            template = json.loads(self.xray_template_config)
        except ValueError as e:
            raise ValidationError("xray template config invalid", str(e))
        if not isinstance(template, dict):
            raise ValidationError("xray template config invalid", "top level must be a JSON object")

        try:
            ZoneInfo(self.time_location)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            # 目录名如 "America" 会抛 IsADirectoryError
            raise ValidationError(f"time location not exist: {self.time_location}")

    def _check_key_pair(self) -> None:
        if not (self.web_cert_file and self.web_key_file):
            raise ValidationError("web cert file and key file must be set together")
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        try:
            context.load_cert_chain(self.web_cert_file, self.web_key_file)
        except (OSError, ssl.SSLError) as e:
            raise ValidationError(
                f"cert file <{self.web_cert_file}> or key file <{self.web_key_file}> invalid",
                str(e),
            )
