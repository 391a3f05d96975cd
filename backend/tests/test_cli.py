"""命令行测试。"""
import pytest
from click.testing import CliRunner
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import xpanel.cli as cli_module
from xpanel.core.database import Base


@pytest.fixture
def runner(tmp_path, monkeypatch) -> CliRunner:
    """把 CLI 指向临时目录中的 SQLite 文件。"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'xpanel.db'}")

    async def init_db():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    monkeypatch.setattr(cli_module, "engine", engine)
    monkeypatch.setattr(cli_module, "init_db", init_db)
    monkeypatch.setattr(
        cli_module, "async_session", async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    )
    return CliRunner()


class TestSettingCommand:
    def test_show_defaults(self, runner):
        result = runner.invoke(cli_module.cli, ["setting", "--show"])
        assert result.exit_code == 0, result.output
        assert "webPort: 54321" in result.output
        assert "secret" not in result.output

    def test_set_port(self, runner):
        result = runner.invoke(cli_module.cli, ["setting", "--port", "8443"])
        assert result.exit_code == 0, result.output
        result = runner.invoke(cli_module.cli, ["setting", "--show"])
        assert "webPort: 8443" in result.output

    def test_reset(self, runner):
        runner.invoke(cli_module.cli, ["setting", "--port", "8443"])
        result = runner.invoke(cli_module.cli, ["setting", "--reset", "--show"])
        assert result.exit_code == 0, result.output
        assert "webPort: 54321" in result.output

    def test_port_out_of_range(self, runner):
        result = runner.invoke(cli_module.cli, ["setting", "--port", "0"])
        assert result.exit_code == 2


class TestTokenCommand:
    def test_token_issued(self, runner):
        result = runner.invoke(cli_module.cli, ["token"])
        assert result.exit_code == 0, result.output
        assert result.output.strip().count(".") == 2
