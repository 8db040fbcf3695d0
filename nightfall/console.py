#!/usr/bin/env python3
"""
Nightfall terminal front-end.
- Story mode: numbered choices, text revealed a character at a time.
- Grid mode: W/A/S/D to move, G (or space/Enter) to grab, find the key and the exit.
- R restarts, M toggles sound, Q quits.
Usage: python3 -m nightfall.console [--mode story|grid] [--story PATH] [--grid PATH]
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

if __package__ in (None, ""):
    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from nightfall.dispatcher import Dispatcher, SelectChoice, Start, command_for_key
from nightfall.scenario import CellKind, Grid, load_grid, load_story
from nightfall.settings import SETTINGS_PATH, load_settings, save_settings
from nightfall.state import Mode, Notification, Scene, Severity, Snapshot
from nightfall.timers import AsyncioClock
from nightfall.world import default_grid, default_story

LINE_WIDTH = 72
ANSI_RESET = "\033[0m"
SEVERITY_STYLES = {
    Severity.INFO: ("[i]", "\033[36m"),
    Severity.SUCCESS: ("[+]", "\033[32m"),
    Severity.ERROR: ("[!]", "\033[31m"),
}
DANGER_COLOR = "\033[31m"
ITEM_GLYPHS = {"key": "K", "book": "B", "flashlight": "F"}
CELL_GLYPHS = {
    CellKind.EMPTY: ".",
    CellKind.WALL: "#",
    CellKind.EXIT: "E",
    # Scare cells look like floor until stepped on.
    CellKind.SCARE: ".",
}


def emit_print(*args, **kwargs) -> None:
    print(*args, **kwargs)


async def read_input(prompt: str = "") -> str:
    return await asyncio.to_thread(input, prompt)


def colorize(text: str, color: str, *, enabled: bool = True) -> str:
    if not enabled or not color:
        return text
    return f"{color}{text}{ANSI_RESET}"


def format_notification(note: Notification, *, color: bool = True) -> str:
    marker, ansi = SEVERITY_STYLES.get(note.severity, ("[i]", ""))
    return colorize(f"{marker} {note.message}", ansi, enabled=color)


def format_status(snapshot: Snapshot) -> str:
    items = ", ".join(snapshot.inventory) or "—"
    sound = "on" if snapshot.sound_enabled else "off"
    return f"HEALTH:{snapshot.health} | SANITY:{snapshot.sanity} | ITEMS:[{items}] | SOUND:{sound}"


def render_grid(grid: Grid, position) -> str:
    lines = []
    for y, row in enumerate(grid.rows):
        glyphs = []
        for x, cell in enumerate(row):
            if position == (x, y):
                glyphs.append("@")
            elif cell.kind is CellKind.ITEM:
                glyphs.append(ITEM_GLYPHS.get(cell.item, "*"))
            else:
                glyphs.append(CELL_GLYPHS[cell.kind])
        lines.append(" ".join(glyphs))
    return "\n".join(lines)


class ConsoleView:
    """Turns snapshots into terminal output; holds only what was already printed."""

    def __init__(self, dispatcher: Optional[Dispatcher] = None, *, color: bool = True) -> None:
        self.dispatcher = dispatcher
        self.color = color
        self._printed = ""
        self._node_id = None
        self._block_closed = True
        self._scene = Scene.MENU
        self._scare = False
        self._grid_key = None

    def notify(self, note: Notification) -> None:
        emit_print(format_notification(note, color=self.color))

    def render(self, snapshot: Snapshot) -> None:
        if snapshot.scare_active and not self._scare:
            bell = "\a" if snapshot.sound_enabled else ""
            emit_print(colorize(f"\n{bell}[!!!] Something lunges out of the dark!", DANGER_COLOR, enabled=self.color))
        self._scare = snapshot.scare_active

        if snapshot.mode is Mode.STORY:
            self._render_story(snapshot)
        else:
            self._render_grid(snapshot)

        if snapshot.scene is not self._scene:
            self._scene = snapshot.scene
            if snapshot.scene is Scene.DEATH:
                emit_print(colorize("\n*** You have perished. ***", DANGER_COLOR, enabled=self.color))
            elif snapshot.scene is Scene.WIN:
                emit_print("\n*** You escaped. ***")
            if snapshot.scene.is_terminal:
                emit_print("  R. Restart    Q. Quit")

    def _render_story(self, snapshot: Snapshot) -> None:
        text = snapshot.displayed_text
        if snapshot.node_id != self._node_id or not text.startswith(self._printed):
            self._node_id = snapshot.node_id
            self._printed = ""
            self._block_closed = False
            emit_print("\n" + "=" * LINE_WIDTH)
        if text != self._printed:
            emit_print(text[len(self._printed):], end="", flush=True)
            self._printed = text
        if snapshot.revealing or self._block_closed:
            return
        self._block_closed = True
        emit_print("")
        emit_print("-" * LINE_WIDTH)
        emit_print(format_status(snapshot))
        for idx, choice in enumerate(snapshot.choices, start=1):
            emit_print(f"  {idx}. {choice}")

    def _render_grid(self, snapshot: Snapshot) -> None:
        grid = self.dispatcher.grid if self.dispatcher is not None else None
        key = (snapshot.position, snapshot.inventory, snapshot.scene, snapshot.sound_enabled)
        if grid is None or key == self._grid_key:
            return
        self._grid_key = key
        emit_print("")
        emit_print(render_grid(grid, snapshot.position))
        emit_print(format_status(snapshot))


async def wait_for_reveal(dispatcher: Dispatcher) -> None:
    while dispatcher.reveal.revealing:
        await asyncio.sleep(max(dispatcher.reveal.interval, 10) / 1000.0)


async def play(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Start())
    while True:
        await wait_for_reveal(dispatcher)
        raw = await read_input("> ")
        token = raw if raw == " " else raw.strip().lower()
        if token in {"q", "quit"}:
            return
        command = command_for_key(token or "enter")
        if command is None:
            emit_print("Enter a number, W/A/S/D, G, R, M or Q.")
            continue
        if isinstance(command, SelectChoice):
            choices = dispatcher.snapshot().choices
            if dispatcher.state.scene is Scene.ACTIVE and not (0 <= command.index < len(choices)):
                emit_print("Pick a valid choice number.")
                continue
        dispatcher.dispatch(command)


def parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play Nightfall in the terminal.")
    parser.add_argument("--mode", choices=[m.value for m in Mode], default=Mode.STORY.value)
    parser.add_argument("--story", help="Path to a story JSON file (defaults to the built-in story).")
    parser.add_argument("--grid", help="Path to a grid JSON file (defaults to the built-in cellar).")
    parser.add_argument("--settings", default=str(SETTINGS_PATH), help="Path to settings.json.")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colours.")
    return parser.parse_args(argv)


async def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    mode = Mode(args.mode)
    settings = load_settings(args.settings)
    try:
        story = load_story(args.story) if args.story else default_story()
        layout = load_grid(args.grid) if args.grid else default_grid()
    except (OSError, ValueError) as exc:
        print(f"[Scenario] {exc}", file=sys.stderr)
        return 1

    view = ConsoleView(color=settings.color_output and not args.no_color)
    dispatcher = Dispatcher(
        mode,
        story=story,
        layout=layout,
        clock=AsyncioClock(),
        settings=settings,
        renderer=view.render,
        notifier=view.notify,
    )
    view.dispatcher = dispatcher
    title = story.title if mode is Mode.STORY else layout.title
    emit_print(f"\n=== {title} ===")
    await play(dispatcher)

    if dispatcher.settings.to_dict() != settings.to_dict():
        save_settings(dispatcher.settings, args.settings)
    return 0


def run() -> None:
    try:
        raise SystemExit(asyncio.run(main()))
    except KeyboardInterrupt:
        emit_print("\n[Interrupted] Bye.")


if __name__ == "__main__":
    run()
