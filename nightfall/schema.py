"""Shared schema validation utilities for Nightfall scenarios."""

from __future__ import annotations

from typing import Any, List, Mapping, Sequence

from nightfall.world_schema import (
    CELL_FIELDS,
    CELL_KINDS,
    CHOICE_FIELDS,
    EFFECT_FIELDS,
    NODE_FIELDS,
    FieldSpec,
    coerce_node_id,
    format_validation_message,
    is_int,
    is_non_empty_str,
    normalize_nodes,
    path,
    resolve_legend,
)


class ValidationContext:
    """Utility container for accumulating validation errors."""

    def __init__(self) -> None:
        self.errors: List[str] = []

    def add(self, context: str, path_str: str, message: str) -> None:
        self.errors.append(format_validation_message(path_str, context, message))

    def ok(self) -> bool:
        return not self.errors


def require(condition: bool, context: str, path_str: str, message: str, ctx: ValidationContext) -> None:
    if not condition:
        ctx.add(context, path_str, message)


def check_fields(
    payload: Mapping[str, Any],
    fields: Mapping[str, FieldSpec],
    context: str,
    path_parts: Sequence[object],
    ctx: ValidationContext,
) -> None:
    for name, spec in fields.items():
        if spec.required and name not in payload:
            ctx.add(context, path(*path_parts, name), f"is missing '{name}' ({spec.rule}).")
    for name in payload:
        if name not in fields:
            ctx.add(context, path(*path_parts, str(name)), f"unknown field '{name}'.")


def validate_effect(
    effect: Any, context: str, path_parts: Sequence[object], ctx: ValidationContext
) -> None:
    if effect is None:
        return
    if not isinstance(effect, Mapping):
        ctx.add(context, path(*path_parts), "effect must be an object or null.")
        return
    check_fields(effect, EFFECT_FIELDS, context, path_parts, ctx)
    for stat in ("health", "sanity"):
        value = effect.get(stat)
        if value is not None and not is_int(value):
            ctx.add(context, path(*path_parts, stat), f"'{stat}' must be an integer delta.")
    item = effect.get("item")
    if item is not None and not is_non_empty_str(item):
        ctx.add(context, path(*path_parts, "item"), "'item' must be a non-empty string.")


def validate_choice(
    choice: Any,
    node_id: int,
    index: int,
    nodes: Mapping[int, Any],
    path_parts: Sequence[object],
    ctx: ValidationContext,
) -> None:
    context = f"Choice {index} in node {node_id}"
    if not isinstance(choice, Mapping):
        ctx.add(context, path(*path_parts), "must be an object.")
        return
    check_fields(choice, CHOICE_FIELDS, context, path_parts, ctx)

    text = choice.get("text")
    if "text" in choice and not is_non_empty_str(text):
        ctx.add(context, path(*path_parts, "text"), "requires non-empty 'text'.")

    if "next" in choice:
        target = coerce_node_id(choice.get("next"))
        if target is None:
            ctx.add(context, path(*path_parts, "next"), "must use an integer 'next'.")
        elif target not in nodes:
            ctx.add(
                context,
                path(*path_parts, "next"),
                f"targets unknown node {target}.",
            )

    requirement = choice.get("requirement")
    if requirement is not None and not is_non_empty_str(requirement):
        ctx.add(context, path(*path_parts, "requirement"), "must be a non-empty item identifier.")

    validate_effect(choice.get("effect"), context, (*path_parts, "effect"), ctx)


def validate_story(story: Mapping[str, Any]) -> List[str]:
    ctx = ValidationContext()

    require(
        "nodes" in story,
        "Story data",
        path("nodes"),
        "must include a 'nodes' section.",
        ctx,
    )
    title = story.get("title")
    if title is not None and not is_non_empty_str(title):
        ctx.add("Story data", path("title"), "'title' must be a non-empty string if present.")

    nodes, _node_errors = normalize_nodes(story.get("nodes"), ctx)

    start = coerce_node_id(story.get("start", 0))
    if start is None:
        ctx.add("Story data", path("start"), "'start' must be an integer node id.")
    elif nodes and start not in nodes:
        ctx.add("Story data", path("start"), f"references unknown node {start}.")
    if "nodes" in story and not nodes and not ctx.errors:
        ctx.add("Story data", path("nodes"), "must define at least one node.")

    for node_id, node in nodes.items():
        node_path = ("nodes", node_id)
        context = f"Node {node_id}"
        check_fields(node, NODE_FIELDS, context, node_path, ctx)
        if "text" in node and not isinstance(node.get("text"), str):
            ctx.add(context, path(*node_path, "text"), "'text' must be a string.")
        for flag in ("dead_end", "win", "jump_scare"):
            if flag in node and not isinstance(node[flag], bool):
                ctx.add(context, path(*node_path, flag), f"'{flag}' must be a boolean.")
        if node.get("dead_end") and node.get("win"):
            ctx.add(context, path(*node_path), "cannot be both a dead end and a win.")
        choices = node.get("choices")
        if choices is None:
            continue
        if not isinstance(choices, Sequence) or isinstance(choices, (str, bytes)):
            ctx.add(
                context,
                path(*node_path, "choices"),
                "choices must be provided as a list.",
            )
            continue
        for index, choice in enumerate(choices):
            validate_choice(
                choice,
                node_id,
                index,
                nodes,
                (*node_path, "choices", index),
                ctx,
            )

    return ctx.errors


def validate_cell(spec: Any, context: str, path_parts: Sequence[object], ctx: ValidationContext) -> None:
    if not isinstance(spec, Mapping):
        ctx.add(context, path(*path_parts), "cell definition must be an object.")
        return
    check_fields(spec, CELL_FIELDS, context, path_parts, ctx)
    kind = spec.get("kind")
    if "kind" in spec and kind not in CELL_KINDS:
        ctx.add(context, path(*path_parts, "kind"), f"unsupported cell kind '{kind}'.")
        return
    item = spec.get("item")
    if kind == "item":
        if not is_non_empty_str(item):
            ctx.add(context, path(*path_parts, "item"), "item cells require a non-empty 'item'.")
    elif item is not None:
        ctx.add(context, path(*path_parts, "item"), "only item cells may carry an 'item'.")


def validate_grid(grid: Mapping[str, Any]) -> List[str]:
    ctx = ValidationContext()

    title = grid.get("title")
    if title is not None and not is_non_empty_str(title):
        ctx.add("Grid data", path("title"), "'title' must be a non-empty string if present.")

    legend = resolve_legend(grid.get("legend"), ctx)
    for glyph, spec in legend.items():
        validate_cell(spec, f"Legend '{glyph}'", ("legend", glyph), ctx)

    rows = grid.get("rows")
    if not isinstance(rows, list) or not rows:
        ctx.add("Grid data", path("rows"), "must include a non-empty list of row strings.")
        return ctx.errors

    width = None
    for y, row in enumerate(rows):
        if not isinstance(row, str) or not row:
            ctx.add(f"Row {y}", path("rows", y), "rows must be non-empty strings.")
            continue
        if width is None:
            width = len(row)
        elif len(row) != width:
            ctx.add(f"Row {y}", path("rows", y), f"expected {width} cells, found {len(row)}.")
        for x, glyph in enumerate(row):
            if glyph not in legend:
                ctx.add(f"Cell ({x}, {y})", path("rows", y), f"unknown glyph '{glyph}'.")

    start = grid.get("start")
    if (
        not isinstance(start, Sequence)
        or isinstance(start, (str, bytes))
        or len(start) != 2
        or not all(is_int(value) for value in start)
    ):
        ctx.add("Grid data", path("start"), "'start' must be an [x, y] pair of integers.")
    elif ctx.ok():
        x, y = start
        if not (0 <= y < len(rows) and 0 <= x < len(rows[y])):
            ctx.add("Grid data", path("start"), f"start ({x}, {y}) is out of bounds.")
        elif legend[rows[y][x]].get("kind") == "wall":
            ctx.add("Grid data", path("start"), f"start ({x}, {y}) is inside a wall.")

    return ctx.errors
