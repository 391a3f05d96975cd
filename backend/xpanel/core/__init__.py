"""
核心模块包 (Core Module Package)

xpanel 的基础设施组件：进程级配置、数据库连接、异常定义、令牌签发与依赖注入。

Infrastructure components for xpanel: process-level configuration, database
connections, exception definitions, token signing and dependency injection.
"""
