"""xpanel - 代理面板运行时配置存储 (runtime settings store for the proxy panel)."""

__version__ = "0.1.0"
