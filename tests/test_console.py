import asyncio
import json
from pathlib import Path

import pytest

from nightfall import console
from nightfall.console import ANSI_RESET, ConsoleView, format_notification, render_grid
from nightfall.dispatcher import Dispatcher, Grab, Move, Start
from nightfall.scenario import build_grid
from nightfall.state import Mode, item_acquired, missing_key, nothing_to_grab
from nightfall.timers import ManualClock


def test_format_notification_applies_severity_colors() -> None:
    assert format_notification(item_acquired("key")) == f"\033[32m[+] Picked up: key{ANSI_RESET}"
    assert format_notification(missing_key("key")).startswith("\033[31m[!] ")
    assert format_notification(nothing_to_grab(), color=False) == "[i] There is nothing here to grab."


def test_render_grid_draws_player_items_and_hides_scares() -> None:
    layout = build_grid(
        {
            "start": [0, 0],
            "legend": {"K": {"kind": "item", "item": "key"}, "C": {"kind": "item", "item": "candle"}},
            "rows": [".K!", "#CE"],
        }
    )

    assert render_grid(layout.instantiate(), (0, 0)) == "@ K .\n# * E"


def test_console_view_prints_grid_and_notifications(monkeypatch: pytest.MonkeyPatch) -> None:
    lines = []
    monkeypatch.setattr(console, "emit_print", lambda *args, **kwargs: lines.append(" ".join(map(str, args))))
    view = ConsoleView(color=False)
    dispatcher = Dispatcher(
        Mode.GRID,
        layout=build_grid({"start": [0, 0], "legend": {"K": {"kind": "item", "item": "key"}}, "rows": [".K"]}),
        clock=ManualClock(),
        renderer=view.render,
        notifier=view.notify,
    )
    view.dispatcher = dispatcher

    dispatcher.dispatch(Start())
    dispatcher.dispatch(Move(1, 0))
    dispatcher.dispatch(Grab())

    assert "@ K" in lines
    assert ". @" in lines
    assert "[+] Picked up: key" in lines
    assert any(line.startswith("HEALTH:100 | SANITY:100 | ITEMS:[key]") for line in lines)


def test_main_reports_invalid_story_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    story_path = tmp_path / "story.json"
    story_path.write_text(json.dumps({"nodes": [{"id": 0, "text": "A", "choices": [{"text": "Go", "next": 3}]}]}))

    code = asyncio.run(
        console.main(["--story", str(story_path), "--settings", str(tmp_path / "settings.json")])
    )

    assert code == 1
    assert "[Scenario] Invalid story data" in capsys.readouterr().err
