"""
应用配置模块 (Application Configuration Module)

使用 Pydantic Settings 管理 xpanel 进程级配置项，支持从 .env 文件和环境变量读取。
这里只放启动进程所需的参数（数据库地址、遥测端点等）；面板可在运行时修改的选项
（监听地址、端口、证书、时区……）保存在 settings 表中，由 SettingService 管理。

Uses Pydantic Settings to manage xpanel's process-level configuration, read from
the .env file and environment variables. Only bootstrap parameters live here
(database URL, telemetry endpoint, ...); operator-editable panel options are
stored in the settings table and served by SettingService.
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    进程全局配置类 (Process Global Configuration Class)

    字段名自动映射同名环境变量（不区分大小写），支持 .env 文件加载。

    Field names map to same-named environment variables (case insensitive),
    with .env file loading supported.
    """

    # 数据库配置 (Database Configuration)
    database_url: str = "sqlite+aiosqlite:///./xpanel.db"  # SQLAlchemy 异步连接 URL (Async connection URL)

    # 遥测配置 (Telemetry Configuration)
    telemetry_url: str = ""  # 设置变更上报地址，留空则关闭 (Settings change endpoint, empty disables)
    telemetry_timeout: float = 10.0  # 单次上报超时（秒） (Per-request timeout in seconds)
    telemetry_queue_size: int = 100  # 待发送事件队列上限，满则丢弃 (Pending event cap, drops when full)

    # 日志配置 (Logging Configuration)
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}  # 自动加载 .env 文件 (Auto-load .env file)


# 全局配置实例 (Global Configuration Instance)
settings = Settings()
