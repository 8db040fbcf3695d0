"""Single entry point for player commands and timer callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from nightfall.scenario import Grid, GridLayout, StoryGraph, StoryNode
from nightfall.settings import Settings
from nightfall.state import (
    Mode,
    Notification,
    Outcome,
    PlayerState,
    Scene,
    Snapshot,
    TransitionResult,
    grid_start,
    menu_state,
    story_start,
)
from nightfall.timekeeping import JUMP_SCARE_DELAY_MS, compute_reveal_interval
from nightfall.timers import Callback, Clock, ManualClock, ScareFlag, TextReveal, TimerHandle
from nightfall.transitions import grab, move, select_choice


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class Move:
    dx: int
    dy: int


@dataclass(frozen=True)
class Grab:
    pass


@dataclass(frozen=True)
class SelectChoice:
    index: int


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class ToggleSound:
    pass


Command = Union[Start, Move, Grab, SelectChoice, Reset, ToggleSound]

KEY_BINDINGS = {
    "w": Move(0, -1),
    "up": Move(0, -1),
    "arrowup": Move(0, -1),
    "s": Move(0, 1),
    "down": Move(0, 1),
    "arrowdown": Move(0, 1),
    "a": Move(-1, 0),
    "left": Move(-1, 0),
    "arrowleft": Move(-1, 0),
    "d": Move(1, 0),
    "right": Move(1, 0),
    "arrowright": Move(1, 0),
    " ": Grab(),
    "g": Grab(),
    "grab": Grab(),
    "enter": Grab(),
    "r": Reset(),
    "reset": Reset(),
    "m": ToggleSound(),
    "sound": ToggleSound(),
}


def command_for_key(key: str) -> Optional[Command]:
    """Map a key name or typed token to a command; digits pick choices 1..n."""
    if not isinstance(key, str) or not key:
        return None
    if key == " ":
        return KEY_BINDINGS[key]
    token = key.strip().lower()
    if token.isascii() and token.isdecimal():
        index = int(token)
        return SelectChoice(index - 1) if index >= 1 else None
    return KEY_BINDINGS.get(token)


Renderer = Callable[[Snapshot], None]
Notifier = Callable[[Notification], None]


@dataclass(frozen=True)
class DispatchResult:
    snapshot: Snapshot
    notifications: Tuple[Notification, ...]
    outcome: Outcome


class _SerialClock:
    """Routes every timer callback through the dispatcher's serializer."""

    def __init__(self, clock: Clock, run: Callable[[TimerHandle, Callback], None]) -> None:
        self._clock = clock
        self._run = run

    def schedule(self, delay: int, callback: Callback) -> TimerHandle:
        slot: List[TimerHandle] = []
        handle = self._clock.schedule(delay, lambda: self._run(slot[0], callback))
        slot.append(handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        self._clock.cancel(handle)


class Dispatcher:
    def __init__(
        self,
        mode: Mode,
        *,
        story: Optional[StoryGraph] = None,
        layout: Optional[GridLayout] = None,
        clock: Optional[Clock] = None,
        settings: Optional[Settings] = None,
        renderer: Optional[Renderer] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        if mode is Mode.STORY and story is None:
            raise ValueError("Story mode requires a story graph.")
        if mode is Mode.GRID and layout is None:
            raise ValueError("Grid mode requires a grid layout.")
        self.mode = mode
        self.story = story
        self.layout = layout
        self.settings = settings.copy() if isinstance(settings, Settings) else Settings()
        self.clock = clock if clock is not None else ManualClock()
        self.renderer = renderer
        self.notifier = notifier

        self.state: PlayerState = menu_state(mode)
        self.grid: Optional[Grid] = None
        self._busy = False
        self._deferred: List[Tuple[TimerHandle, Callback]] = []

        serial = _SerialClock(self.clock, self._run_timer)
        interval = compute_reveal_interval(
            self.settings.text_speed, reduce_animations=self.settings.reduce_animations
        )
        self.reveal = TextReveal(
            serial, interval, on_update=self._publish, on_complete=self._reveal_complete
        )
        self.scare = ScareFlag(serial, on_change=self._publish)

    # ---------- Public surface ----------
    @property
    def current_node(self) -> Optional[StoryNode]:
        if self.story is None or self.state.node_id is None:
            return None
        return self.story[self.state.node_id]

    def snapshot(self) -> Snapshot:
        state = self.state
        choices: Tuple[str, ...] = ()
        node = self.current_node
        if node is not None and state.is_active and not self.reveal.revealing:
            choices = tuple(choice.text for choice in node.choices)
        return Snapshot(
            mode=state.mode,
            scene=state.scene,
            health=state.health,
            sanity=state.sanity,
            inventory=state.inventory,
            node_id=state.node_id,
            position=state.position,
            scare_active=self.scare.active,
            displayed_text=self.reveal.displayed,
            revealing=self.reveal.revealing,
            choices=choices,
            sound_enabled=self.settings.sound_enabled,
        )

    def dispatch(self, command: Command) -> DispatchResult:
        self._busy = True
        try:
            result = self._handle(command)
            snapshot = self.snapshot()
            if self.renderer:
                self.renderer(snapshot)
            if self.notifier:
                for note in result.notifications:
                    self.notifier(note)
        finally:
            self._busy = False
            self._drain()
        return DispatchResult(snapshot, result.notifications, result.outcome)

    # ---------- Routing ----------
    def _handle(self, command: Command) -> TransitionResult:
        state = self.state
        if isinstance(command, Reset):
            return self._begin()
        if isinstance(command, Start):
            if state.scene is Scene.MENU:
                return self._begin()
            return TransitionResult(state, (), Outcome.IGNORED)
        if isinstance(command, ToggleSound):
            self.settings.sound_enabled = not self.settings.sound_enabled
            return TransitionResult(state, (), Outcome.CONTINUE)
        if not state.is_active:
            return TransitionResult(state, (), Outcome.IGNORED)

        if isinstance(command, SelectChoice) and self.mode is Mode.STORY:
            if self.reveal.revealing:
                return TransitionResult(state, (), Outcome.NOOP)
            result = select_choice(state, command.index, self.story)
            self.state = result.state
            if result.outcome is Outcome.CONTINUE or result.state.node_id != state.node_id:
                self._enter_node(self.story[result.state.node_id])
            return result
        if isinstance(command, Move) and self.mode is Mode.GRID:
            result = move(state, command.dx, command.dy, self.grid)
            self.state = result.state
            if result.scare_triggered:
                self.scare.trigger()
            return result
        if isinstance(command, Grab) and self.mode is Mode.GRID:
            result = grab(state, self.grid)
            self.state = result.state
            return result
        return TransitionResult(state, (), Outcome.IGNORED)

    def _begin(self) -> TransitionResult:
        self.scare.reset()
        self.reveal.cancel()
        if self.mode is Mode.STORY:
            self.state = story_start(self.story.start_id)
            self.grid = None
            self._enter_node(self.story.start)
        else:
            self.state = grid_start(self.layout.start)
            self.grid = self.layout.instantiate()
        return TransitionResult(self.state, (), Outcome.CONTINUE)

    def _enter_node(self, node: StoryNode) -> None:
        self.scare.drop_pending()
        self.reveal.start(node.text)

    def _reveal_complete(self) -> None:
        node = self.current_node
        if node is not None and node.jump_scare:
            self.scare.trigger_later(JUMP_SCARE_DELAY_MS)

    # ---------- Timer serialization ----------
    def _run_timer(self, handle: TimerHandle, callback: Callback) -> None:
        if self._busy:
            self._deferred.append((handle, callback))
            return
        callback()

    def _drain(self) -> None:
        while self._deferred:
            handle, callback = self._deferred.pop(0)
            if not handle.cancelled:
                callback()

    def _publish(self) -> None:
        if self._busy or self.renderer is None:
            return
        self.renderer(self.snapshot())
