import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from replybot import cli
from replybot.memory.sql import open_settings_store


def test_settings_set_show_unset(tmp_path, capsys):
    db = str(tmp_path / "settings.db")

    assert cli.main(["--db", db, "settings", "set", "openai_key", "sk-abcdef123456"]) == 0
    assert cli.main(["--db", db, "settings", "set", "openai_model", "llama-3.1-8b-instant"]) == 0
    capsys.readouterr()

    assert cli.main(["--db", db, "settings", "show"]) == 0
    out = capsys.readouterr().out
    assert "openai_key = sk-a...3456" in out
    assert "openai_model = llama-3.1-8b-instant" in out

    assert cli.main(["--db", db, "settings", "unset", "openai_model"]) == 0
    assert cli.main(["--db", db, "settings", "unset", "openai_model"]) == 1
    assert open_settings_store(db).get_all() == {"openai_key": "sk-abcdef123456"}


def test_short_secrets_are_fully_masked():
    assert cli._mask("openai_key", "short") == "****"
    assert cli._mask("system_prompt", "short") == "short"


def test_parser_requires_a_command():
    parser = cli.build_parser()
    args = parser.parse_args(["models", "--api-key", "k"])
    assert (args.command, args.api_key) == ("models", "k")


@pytest.mark.asyncio
async def test_signal_refresh_task_is_held_until_done(caplog):
    runtime = SimpleNamespace(refresh_settings=AsyncMock(side_effect=RuntimeError("db locked")))
    pending: set = set()

    task = cli._refresh_on_signal(runtime, pending)
    assert pending == {task}

    await asyncio.gather(task, return_exceptions=True)
    await asyncio.sleep(0)

    assert pending == set()
    runtime.refresh_settings.assert_awaited_once()
    assert "Settings refresh failed: db locked" in caplog.text
