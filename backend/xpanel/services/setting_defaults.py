"""
设置默认值目录 (Default Settings Catalog)

当 settings 表中没有某个键的行时使用的内置默认值，进程启动时确定，运行期间只读。
所有值都以字符串形式给出，与数据库中的存储形式一致；xrayTemplateConfig 的默认值
是随包发布的 JSON 模板文档全文。

Compiled-in fallback values used when the settings table has no row for a key.
Fixed at process start and read-only afterwards, so concurrent readers need no
locking. Values are strings, exactly as they are stored.
"""
import secrets
import string
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

# 随包发布的代理引擎配置模板 (Bundled proxy engine configuration template)
TEMPLATE_PATH = Path(__file__).resolve().parent.parent / "resources" / "xray_template.json"

SECRET_LENGTH = 32


def random_seq(length: int) -> str:
    """生成由大小写字母和数字组成的随机串。"""
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


XRAY_TEMPLATE_CONFIG = TEMPLATE_PATH.read_text(encoding="utf-8")

# secret 每个进程生成一次，首次读取时由 SettingService.get_secret 写入数据库固定下来
DEFAULT_SETTINGS: Mapping[str, str] = MappingProxyType({
    "xrayTemplateConfig": XRAY_TEMPLATE_CONFIG,
    "webListen": "",
    "webPort": "54321",
    "webCertFile": "",
    "webKeyFile": "",
    "secret": random_seq(SECRET_LENGTH),
    "webBasePath": "/",
    "sessionMaxAge": "0",
    "timeLocation": "Asia/Shanghai",
})


def default_of(key: str) -> Optional[str]:
    """返回键的默认值，目录中没有该键时返回 None。"""
    return DEFAULT_SETTINGS.get(key)
