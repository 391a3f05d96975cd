"""
设置聚合映射 (Settings Aggregate Mapper)

在强类型的 AllSetting 与 settings 表的扁平键值行之间双向转换。

字段到外部键的映射只在 SETTING_FIELDS 中声明一次：新增一个设置项只需在 AllSetting
上加字段、在这里加一条描述，读写路径自动生效，无需修改转换逻辑。

Converts between the typed AllSetting aggregate and flat key/value rows. The
field-to-key mapping is declared once, in SETTING_FIELDS, and every operation
below walks that table; nothing is discovered by introspection at call time.

支持的字段类型只有 str 与 int：
- int 按十进制严格解析，范围为有符号 32 位；
- str 原样赋值；
- 其他类型视为映射配置错误 (ConfigurationError)。
"""
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from xpanel.core.exceptions import ConfigurationError, SettingTypeError
from xpanel.schemas.setting import INT32_MAX, INT32_MIN, AllSetting

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")

ScalarValue = Union[int, str]


@dataclass(frozen=True)
class SettingField:
    """一条字段描述：AllSetting 属性名、外部键名、标量类型。"""
    attr: str
    key: str
    type: type


SETTING_FIELDS: Tuple[SettingField, ...] = (
    SettingField("web_listen", "webListen", str),
    SettingField("web_port", "webPort", int),
    SettingField("web_cert_file", "webCertFile", str),
    SettingField("web_key_file", "webKeyFile", str),
    SettingField("web_base_path", "webBasePath", str),
    SettingField("session_max_age", "sessionMaxAge", int),
    SettingField("time_location", "timeLocation", str),
    SettingField("xray_template_config", "xrayTemplateConfig", str),
)

_FIELDS_BY_KEY: Dict[str, SettingField] = {f.key: f for f in SETTING_FIELDS}


def find_field(key: str) -> Optional[SettingField]:
    return _FIELDS_BY_KEY.get(key)


def parse_int(key: str, raw: str) -> int:
    """严格十进制解析，不接受空白、下划线或超出 32 位的值。"""
    if not _INT_PATTERN.fullmatch(raw):
        raise SettingTypeError(key, "int", raw, "invalid syntax")
    value = int(raw)
    if value < INT32_MIN or value > INT32_MAX:
        raise SettingTypeError(key, "int", raw, "value out of range")
    return value


def parse_value(field: SettingField, raw: str) -> ScalarValue:
    """按字段声明类型把存储字符串转换为 Python 值。"""
    if field.type is int:
        return parse_int(field.key, raw)
    if field.type is str:
        return raw
    raise ConfigurationError(f"unsupported field type {field.type.__name__} for setting <{field.key}>")


def format_value(field: SettingField, value: Any) -> str:
    """把字段值转换为规范的存储字符串：int 用十进制，str 原样。"""
    if field.type is int:
        # bool 是 int 的子类，这里排除
        if not isinstance(value, int) or isinstance(value, bool):
            raise SettingTypeError(field.key, "int", repr(value))
        if value < INT32_MIN or value > INT32_MAX:
            raise SettingTypeError(field.key, "int", repr(value), "value out of range")
        return str(value)
    if field.type is str:
        if not isinstance(value, str):
            raise SettingTypeError(field.key, "str", repr(value))
        return value
    raise ConfigurationError(f"unsupported field type {field.type.__name__} for setting <{field.key}>")


def apply_row(draft: Dict[str, ScalarValue], key: str, raw: str) -> bool:
    """
    把一行设置写入草稿 draft（属性名 → 已转换的值）。

    Args:
        draft: 正在组装的 AllSetting 字段值
        key: 外部键名
        raw: 存储的字符串值

    Returns:
        bool: 键对应 AllSetting 的某个字段时为 True。找不到字段不算错误，
              例如自动生成的 secret 不返回给前端，直接忽略并返回 False。

    Raises:
        SettingTypeError: 值无法转换为字段类型
        ConfigurationError: 字段声明了不支持的类型
    """
    field = find_field(key)
    if field is None:
        return False
    draft[field.attr] = parse_value(field, raw)
    return True


def build_all_setting(draft: Mapping[str, ScalarValue]) -> AllSetting:
    """
    由完整的草稿构造 AllSetting。

    任何字段缺值（既无存储行也无默认值）都属于 schema 缺陷，抛出 ConfigurationError，
    绝不返回部分填充的聚合。
    """
    missing = [f.key for f in SETTING_FIELDS if f.attr not in draft]
    if missing:
        raise ConfigurationError(
            "settings have neither a stored row nor a default value",
            ", ".join(missing),
        )
    return AllSetting(**{f.attr: draft[f.attr] for f in SETTING_FIELDS})


def flatten_to_rows(all_setting: AllSetting) -> List[Tuple[str, str]]:
    """把 AllSetting 展开为 (外部键, 字符串值) 列表，每个字段一行。"""
    return [(f.key, format_value(f, getattr(all_setting, f.attr))) for f in SETTING_FIELDS]
