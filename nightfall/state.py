"""Player state, notifications and transition results."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

STAT_MIN = 0
STAT_MAX = 100


class Mode(enum.Enum):
    STORY = "story"
    GRID = "grid"


class Scene(enum.Enum):
    MENU = "menu"
    ACTIVE = "active"
    DEATH = "death"
    WIN = "win"

    @property
    def is_terminal(self) -> bool:
        return self in (Scene.DEATH, Scene.WIN)


class Outcome(enum.Enum):
    CONTINUE = "continue"
    NOOP = "noop"
    IGNORED = "ignored"
    DEATH = "death"
    WIN = "win"


class Severity(enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class NoticeKind(enum.Enum):
    ITEM_ACQUIRED = "item_acquired"
    MISSING_REQUIREMENT = "missing_requirement"
    MISSING_KEY = "missing_key"
    NOTHING_TO_GRAB = "nothing_to_grab"


@dataclass(frozen=True)
class Notification:
    kind: NoticeKind
    severity: Severity
    message: str
    subject: Optional[str] = None


def item_acquired(item: str) -> Notification:
    return Notification(NoticeKind.ITEM_ACQUIRED, Severity.SUCCESS, f"Picked up: {item}", item)


def missing_requirement(item: str) -> Notification:
    return Notification(
        NoticeKind.MISSING_REQUIREMENT, Severity.ERROR, f"You need the {item} for that.", item
    )


def missing_key(item: str) -> Notification:
    return Notification(
        NoticeKind.MISSING_KEY, Severity.ERROR, f"The door is locked. Find the {item}.", item
    )


def nothing_to_grab() -> Notification:
    return Notification(NoticeKind.NOTHING_TO_GRAB, Severity.INFO, "There is nothing here to grab.")


def clamp(n: int, lo: int = STAT_MIN, hi: int = STAT_MAX) -> int:
    return lo if n < lo else hi if n > hi else n


@dataclass(frozen=True)
class PlayerState:
    mode: Mode
    scene: Scene = Scene.MENU
    health: int = STAT_MAX
    sanity: int = STAT_MAX
    inventory: Tuple[str, ...] = ()
    node_id: Optional[int] = None
    position: Optional[Tuple[int, int]] = None

    @property
    def is_active(self) -> bool:
        return self.scene is Scene.ACTIVE

    def has_item(self, item: str) -> bool:
        return item in self.inventory

    def with_item(self, item: str) -> "PlayerState":
        if item in self.inventory:
            return self
        return replace(self, inventory=self.inventory + (item,))

    def with_deltas(self, health: int = 0, sanity: int = 0) -> "PlayerState":
        return replace(
            self,
            health=clamp(self.health + health),
            sanity=clamp(self.sanity + sanity),
        )

    def with_scene(self, scene: Scene) -> "PlayerState":
        return replace(self, scene=scene)

    def at_node(self, node_id: int) -> "PlayerState":
        return replace(self, node_id=node_id)

    def at_position(self, x: int, y: int) -> "PlayerState":
        return replace(self, position=(x, y))


def menu_state(mode: Mode) -> PlayerState:
    return PlayerState(mode=mode)


def story_start(start_id: int) -> PlayerState:
    return PlayerState(mode=Mode.STORY, scene=Scene.ACTIVE, node_id=start_id)


def grid_start(start: Tuple[int, int]) -> PlayerState:
    return PlayerState(mode=Mode.GRID, scene=Scene.ACTIVE, position=tuple(start))


@dataclass(frozen=True)
class TransitionResult:
    state: PlayerState
    notifications: Tuple[Notification, ...] = ()
    outcome: Outcome = Outcome.NOOP


@dataclass(frozen=True)
class MoveResult(TransitionResult):
    scare_triggered: bool = False


@dataclass(frozen=True)
class Snapshot:
    """What the renderer sees after every command or timer tick."""

    mode: Mode
    scene: Scene
    health: int
    sanity: int
    inventory: Tuple[str, ...]
    node_id: Optional[int]
    position: Optional[Tuple[int, int]]
    scare_active: bool = False
    displayed_text: str = ""
    revealing: bool = False
    choices: Tuple[str, ...] = field(default=())
    sound_enabled: bool = True
