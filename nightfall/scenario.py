"""Immutable scenario data: the story graph and the grid layout."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from nightfall.schema import validate_grid, validate_story
from nightfall.world_schema import coerce_node_id, normalize_nodes, resolve_legend


class CellKind(enum.Enum):
    EMPTY = "empty"
    WALL = "wall"
    ITEM = "item"
    EXIT = "exit"
    SCARE = "scare"


@dataclass(frozen=True)
class Effect:
    health: Optional[int] = None
    sanity: Optional[int] = None
    item: Optional[str] = None


@dataclass(frozen=True)
class Choice:
    text: str
    next_id: int
    requirement: Optional[str] = None
    effect: Optional[Effect] = None


@dataclass(frozen=True)
class StoryNode:
    id: int
    text: str
    choices: Tuple[Choice, ...] = ()
    is_dead_end: bool = False
    is_win: bool = False
    jump_scare: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.is_dead_end or self.is_win


@dataclass(frozen=True)
class StoryGraph:
    """Id-indexed story nodes. Every ``next_id`` resolves by construction."""

    nodes: Mapping[int, StoryNode]
    start_id: int
    title: str = "Untitled"

    def __getitem__(self, node_id: int) -> StoryNode:
        return self.nodes[node_id]

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __iter__(self) -> Iterator[int]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def start(self) -> StoryNode:
        return self.nodes[self.start_id]


@dataclass(frozen=True)
class GridCell:
    kind: CellKind
    item: Optional[str] = None


EMPTY_CELL = GridCell(CellKind.EMPTY)


@dataclass(frozen=True)
class GridLayout:
    """The pristine grid definition; ``instantiate`` yields a playable copy."""

    cells: Tuple[Tuple[GridCell, ...], ...]
    start: Tuple[int, int]
    title: str = "Untitled"

    @property
    def width(self) -> int:
        return len(self.cells[0]) if self.cells else 0

    @property
    def height(self) -> int:
        return len(self.cells)

    def instantiate(self) -> "Grid":
        return Grid([list(row) for row in self.cells])


@dataclass
class Grid:
    """Per-run grid. Cells are replaced in place when an item is collected."""

    rows: List[List[GridCell]] = field(default_factory=list)

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def height(self) -> int:
        return len(self.rows)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= y < self.height and 0 <= x < self.width

    def cell(self, x: int, y: int) -> GridCell:
        return self.rows[y][x]

    def clear(self, x: int, y: int) -> None:
        self.rows[y][x] = EMPTY_CELL


def _raise_validation(label: str, errors: List[str]) -> None:
    raise ValueError(f"Invalid {label}:\n- " + "\n- ".join(errors))


def _build_effect(raw: Any) -> Optional[Effect]:
    if not raw:
        return None
    return Effect(
        health=raw.get("health"),
        sanity=raw.get("sanity"),
        item=raw.get("item"),
    )


def build_story(raw: Mapping[str, Any]) -> StoryGraph:
    if not isinstance(raw, Mapping):
        _raise_validation("story data", ["Story data must be a JSON object."])
    errors = validate_story(raw)
    if errors:
        _raise_validation("story data", errors)

    raw_nodes, _ = normalize_nodes(raw.get("nodes"))
    nodes: Dict[int, StoryNode] = {}
    for node_id, payload in raw_nodes.items():
        choices = tuple(
            Choice(
                text=entry["text"],
                next_id=coerce_node_id(entry["next"]),
                requirement=entry.get("requirement"),
                effect=_build_effect(entry.get("effect")),
            )
            for entry in payload.get("choices") or []
        )
        nodes[node_id] = StoryNode(
            id=node_id,
            text=payload["text"],
            choices=choices,
            is_dead_end=bool(payload.get("dead_end", False)),
            is_win=bool(payload.get("win", False)),
            jump_scare=bool(payload.get("jump_scare", False)),
        )
    return StoryGraph(
        nodes=nodes,
        start_id=coerce_node_id(raw.get("start", 0)),
        title=raw.get("title") or "Untitled",
    )


def build_grid(raw: Mapping[str, Any]) -> GridLayout:
    if not isinstance(raw, Mapping):
        _raise_validation("grid data", ["Grid data must be a JSON object."])
    errors = validate_grid(raw)
    if errors:
        _raise_validation("grid data", errors)

    legend = resolve_legend(raw.get("legend"))
    cells = tuple(
        tuple(
            GridCell(CellKind(legend[glyph]["kind"]), legend[glyph].get("item"))
            for glyph in row
        )
        for row in raw["rows"]
    )
    x, y = raw["start"]
    return GridLayout(cells=cells, start=(x, y), title=raw.get("title") or "Untitled")


def _load_json(path: Path | str) -> Any:
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def load_story(path: Path | str) -> StoryGraph:
    return build_story(_load_json(path))


def load_grid(path: Path | str) -> GridLayout:
    return build_grid(_load_json(path))
