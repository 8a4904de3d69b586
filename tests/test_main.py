from __future__ import annotations

import asyncio
from typing import Any, List

import pytest

from rtoc_bot import main
from rtoc_bot.config import Settings


def test_flags_map_onto_environment_aliases() -> None:
    args = main.parse_args(["--master-id", "7", "--vehicles", "x"])

    assert main.settings_overrides(args) == {"MASTER_ID": "7", "VEHICLES": "x"}


def test_flags_override_environment(monkeypatch: pytest.MonkeyPatch, tmp_path, settings_values) -> None:
    monkeypatch.chdir(tmp_path)
    for name, value in settings_values.items():
        monkeypatch.setenv(name, value)
    args = main.parse_args(["--vehicles", "abc123", "--api-url", "https://other.example.test"])

    settings = Settings(**main.settings_overrides(args))

    assert settings.vehicle_list == ["ABC123"]
    assert settings.api_url == "https://other.example.test"
    assert settings.master_id == 424242


def test_cli_exits_with_code_2_on_missing_configuration(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    served: List[Any] = []

    async def fake_run(settings: Settings) -> None:
        served.append(settings)

    monkeypatch.setattr(main, "run", fake_run)

    with pytest.raises(SystemExit) as excinfo:
        main.cli([])

    assert excinfo.value.code == 2
    assert served == []


def test_cli_serves_with_valid_configuration(monkeypatch: pytest.MonkeyPatch, tmp_path, settings_values) -> None:
    monkeypatch.chdir(tmp_path)
    for name, value in settings_values.items():
        monkeypatch.setenv(name, value)
    served: List[Settings] = []

    async def fake_run(settings: Settings) -> None:
        served.append(settings)

    monkeypatch.setattr(main, "run", fake_run)

    main.cli(["--master-id", "7"])

    assert [settings.master_id for settings in served] == [7]


class FakeSession:
    def __init__(self, events: List[str]) -> None:
        self.events = events

    async def close(self) -> None:
        self.events.append("session.close")


class FakeBot:
    events: List[str] = []

    def __init__(self, token: str, default: Any = None) -> None:
        self.session = FakeSession(self.events)

    async def set_my_commands(self, commands) -> None:
        self.events.append("set_my_commands")


class FakeDispatcher:
    polling_kwargs: List[dict] = []

    def __init__(self, **workflow_data: Any) -> None:
        self.workflow_data = workflow_data

    def include_router(self, router) -> None:
        pass

    async def start_polling(self, bot, **kwargs: Any) -> None:
        self.polling_kwargs.append(kwargs)
        FakeBot.events.append("polling.done")
        # A batch still in flight when polling ends.
        self.workflow_data["sequencer"].submit(["T945CAP"], cooldown=0)
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_run_closes_session_after_batches_finish(monkeypatch: pytest.MonkeyPatch, settings) -> None:
    events: List[str] = []
    FakeBot.events = events
    FakeDispatcher.polling_kwargs = []

    async def fake_check(self, vehicle: str):
        events.append(f"lookup:{vehicle}")
        await asyncio.sleep(0.01)
        raise RuntimeError("offline")

    monkeypatch.setattr(main, "Bot", FakeBot)
    monkeypatch.setattr(main, "Dispatcher", FakeDispatcher)
    monkeypatch.setattr(main.OffenceLookupClient, "check", fake_check)

    async def fake_notify(text: str) -> bool:
        events.append("notify")
        return True

    monkeypatch.setattr(main, "create_notifier", lambda bot, chat_id, attempts: fake_notify)

    await main.run(settings)

    assert FakeDispatcher.polling_kwargs == [{"close_bot_session": False}]
    assert events[-1] == "session.close"
    assert events.index("polling.done") < events.index("notify")
    assert events.index("notify") < events.index("session.close")
