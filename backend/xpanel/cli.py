"""
xpanel 命令行入口模块。

提供 CLI 命令：run（按存储的监听地址/端口/证书运行面板）、setting（离线查看或修改设置）、
token（签发管理令牌）。
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable

import click
import uvicorn

from xpanel import __version__
from xpanel.core.config import settings
from xpanel.core.database import async_session, engine, init_db
from xpanel.core.security import create_access_token
from xpanel.services.setting_service import SettingService

logger = logging.getLogger("xpanel")


def _with_service(func: Callable[[SettingService], Awaitable[Any]]) -> Any:
    """建表、固定面板密钥后，在一个数据库会话里执行 func。"""
    async def runner():
        await init_db()
        try:
            async with async_session() as db:
                service = SettingService(db)
                await service.get_secret()
                return await func(service)
        finally:
            # 连接不能跨事件循环复用
            await engine.dispose()

    return asyncio.run(runner())


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__)
def cli(verbose):
    """xpanel - 代理面板。"""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@cli.command()
def run():
    """以前台模式运行面板。"""
    async def load(service: SettingService):
        return (
            await service.get_listen(),
            await service.get_port(),
            await service.get_cert_file(),
            await service.get_key_file(),
            await service.get_base_path(),
        )

    listen, port, cert_file, key_file, base_path = _with_service(load)

    from xpanel.main import create_app

    scheme = "https" if cert_file and key_file else "http"
    logger.info(f"Starting xpanel v{__version__} on {scheme}://{listen or '0.0.0.0'}:{port}{base_path}")
    uvicorn.run(
        create_app(base_path),
        host=listen or "0.0.0.0",
        port=port,
        ssl_certfile=cert_file or None,
        ssl_keyfile=key_file or None,
    )


@cli.command()
@click.option("--show", is_flag=True, help="Show current settings")
@click.option("--port", type=click.IntRange(1, 65535), default=None, help="Set panel port")
@click.option("--reset", is_flag=True, help="Reset all settings to defaults")
def setting(show, port, reset):
    """查看或修改面板设置（修改在面板重启后生效）。"""
    async def apply(service: SettingService):
        if reset:
            await service.reset_settings()
            click.echo("Settings reset to defaults")
        if port is not None:
            await service.set_port(port)
            click.echo(f"Panel port set to {port}")
        if show:
            all_setting = await service.get_all_setting()
            for key, value in all_setting.to_external().items():
                # 模板太长，只显示大小
                if key == "xrayTemplateConfig":
                    value = f"<{len(value)} bytes>"
                click.echo(f"{key}: {value}")

    _with_service(apply)


@cli.command()
@click.option("--subject", default="admin", show_default=True, help="Token subject")
def token(subject):
    """签发一个面板访问令牌。"""
    async def issue(service: SettingService):
        return create_access_token(subject, await service.get_secret(), await service.get_session_max_age())

    click.echo(_with_service(issue))


def main():
    """CLI 入口函数。"""
    cli()


if __name__ == "__main__":
    main()
