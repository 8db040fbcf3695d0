"""Transition rules for story and grid play.

Every function here is pure with respect to ``PlayerState``: it returns a new
state instead of mutating the one passed in. The only in-place change is
``grab`` emptying a collected cell on the per-run ``Grid``.
"""

from __future__ import annotations

from typing import List

from nightfall.scenario import CellKind, Choice, Grid, StoryGraph
from nightfall.state import (
    MoveResult,
    Notification,
    Outcome,
    PlayerState,
    Scene,
    TransitionResult,
    item_acquired,
    missing_key,
    missing_requirement,
    nothing_to_grab,
)

EXIT_KEY_ITEM = "key"

CARDINAL_STEPS = {(0, -1), (0, 1), (-1, 0), (1, 0)}


def _ignored(state: PlayerState) -> TransitionResult:
    return TransitionResult(state, (), Outcome.IGNORED)


# ---------- Story mode ----------
def apply_choice(state: PlayerState, choice: Choice, graph: StoryGraph) -> TransitionResult:
    if not state.is_active:
        return _ignored(state)

    if choice.requirement and not state.has_item(choice.requirement):
        return TransitionResult(state, (missing_requirement(choice.requirement),), Outcome.NOOP)

    notes: List[Notification] = []
    effect = choice.effect
    updated = state
    if effect is not None:
        updated = updated.with_deltas(health=effect.health or 0, sanity=effect.sanity or 0)
        if effect.item and not updated.has_item(effect.item):
            updated = updated.with_item(effect.item)
            notes.append(item_acquired(effect.item))

    if updated.health <= 0:
        return TransitionResult(updated.with_scene(Scene.DEATH), tuple(notes), Outcome.DEATH)

    next_node = graph[choice.next_id]
    updated = updated.at_node(next_node.id)
    if next_node.is_dead_end:
        return TransitionResult(updated.with_scene(Scene.DEATH), tuple(notes), Outcome.DEATH)
    if next_node.is_win:
        return TransitionResult(updated.with_scene(Scene.WIN), tuple(notes), Outcome.WIN)
    return TransitionResult(updated, tuple(notes), Outcome.CONTINUE)


def select_choice(state: PlayerState, index: int, graph: StoryGraph) -> TransitionResult:
    """Resolve a 0-based index into the current node's choices."""
    if not state.is_active:
        return _ignored(state)
    choices = graph[state.node_id].choices
    if not (0 <= index < len(choices)):
        return TransitionResult(state, (), Outcome.NOOP)
    return apply_choice(state, choices[index], graph)


# ---------- Grid mode ----------
def move(state: PlayerState, dx: int, dy: int, grid: Grid) -> MoveResult:
    if not state.is_active:
        return MoveResult(state, (), Outcome.IGNORED)
    if (dx, dy) not in CARDINAL_STEPS:
        return MoveResult(state, (), Outcome.NOOP)

    x, y = state.position
    nx, ny = x + dx, y + dy
    # Bumping into the edge or a wall is silent.
    if not grid.in_bounds(nx, ny):
        return MoveResult(state, (), Outcome.NOOP)
    cell = grid.cell(nx, ny)
    if cell.kind is CellKind.WALL:
        return MoveResult(state, (), Outcome.NOOP)

    updated = state.at_position(nx, ny)
    scare = cell.kind is CellKind.SCARE
    if cell.kind is CellKind.EXIT:
        if updated.has_item(EXIT_KEY_ITEM):
            return MoveResult(updated.with_scene(Scene.WIN), (), Outcome.WIN, scare)
        return MoveResult(updated, (missing_key(EXIT_KEY_ITEM),), Outcome.CONTINUE, scare)
    return MoveResult(updated, (), Outcome.CONTINUE, scare)


def grab(state: PlayerState, grid: Grid) -> TransitionResult:
    if not state.is_active:
        return _ignored(state)

    x, y = state.position
    cell = grid.cell(x, y)
    if cell.kind is CellKind.ITEM and cell.item and not state.has_item(cell.item):
        grid.clear(x, y)
        return TransitionResult(state.with_item(cell.item), (item_acquired(cell.item),), Outcome.CONTINUE)
    return TransitionResult(state, (nothing_to_grab(),), Outcome.NOOP)
