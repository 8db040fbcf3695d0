"""Machine-readable schema specs for Nightfall scenarios."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
import json
import re
from typing import Any, Dict, List, Mapping, MutableMapping, Sequence, Tuple

CELL_KINDS = ("empty", "wall", "item", "exit", "scare")

# Glyphs usable in grid rows without a legend entry.
DEFAULT_LEGEND: Dict[str, Dict[str, Any]] = {
    ".": {"kind": "empty"},
    " ": {"kind": "empty"},
    "#": {"kind": "wall"},
    "E": {"kind": "exit"},
    "!": {"kind": "scare"},
}


def path(*parts: object) -> str:
    path_str = ""
    for part in parts:
        if isinstance(part, int):
            path_str = f"{path_str}[{part}]"
            continue
        if not isinstance(part, str):
            part = str(part)
        if part.isidentifier():
            path_str = f"{path_str}.{part}" if path_str else part
        else:
            path_str = f'{path_str}[{json.dumps(part)}]'
    return path_str


def format_validation_message(path_str: str, context: str, message: str) -> str:
    if context:
        return f"{path_str}: {context}: {message}"
    return f"{path_str}: {message}"


def is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def coerce_node_id(value: Any) -> int | None:
    """Accept ints and decimal strings (JSON object keys) as node ids."""
    if is_int(value):
        return value
    if isinstance(value, str) and re.fullmatch(r"-?[0-9]+", value.strip()):
        return int(value.strip())
    return None


def normalize_nodes(
    raw_nodes: Any, ctx: Any | None = None
) -> Tuple[Dict[int, Dict[str, Any]], List[str]]:
    nodes: Dict[int, Dict[str, Any]] = {}
    errors: List[str] = []
    node_ids: List[int] = []

    def add_error(context: str, path_parts: Sequence[object], message: str) -> None:
        path_str = path(*path_parts)
        errors.append(format_validation_message(path_str, context, message))
        if ctx is not None:
            ctx.add(context, path_str, message)

    if isinstance(raw_nodes, dict):
        for raw_id, payload in raw_nodes.items():
            node_id = coerce_node_id(raw_id)
            if node_id is None:
                add_error("Nodes", ("nodes", str(raw_id)), "node identifiers must be integers.")
                continue
            if not isinstance(payload, dict):
                add_error(
                    "Nodes",
                    ("nodes", node_id),
                    f"node {node_id} must be an object.",
                )
                continue
            node_ids.append(node_id)
            nodes[node_id] = payload
    elif isinstance(raw_nodes, list):
        for idx, entry in enumerate(raw_nodes, start=1):
            if not isinstance(entry, MutableMapping):
                add_error(
                    f"Node entry {idx}",
                    ("nodes", idx - 1),
                    "must be an object.",
                )
                continue
            node_id = coerce_node_id(entry.get("id"))
            if node_id is None:
                add_error(
                    f"Node entry {idx}",
                    ("nodes", idx - 1, "id"),
                    "is missing a valid integer 'id'.",
                )
                continue
            node_ids.append(node_id)
            payload = dict(entry)
            payload.pop("id", None)
            nodes[node_id] = payload
    else:
        add_error(
            "Story data",
            ("nodes",),
            "must be an object mapping IDs to node definitions or a list of node entries.",
        )

    duplicates = [node_id for node_id, count in Counter(node_ids).items() if count > 1]
    if duplicates:
        dup_list = ", ".join(str(node_id) for node_id in sorted(set(duplicates)))
        add_error("Nodes", ("nodes",), f"duplicate node IDs found: {dup_list}.")

    return nodes, errors


def resolve_legend(raw_legend: Any, ctx: Any | None = None) -> Dict[str, Dict[str, Any]]:
    """Merge a grid's custom legend over the default glyphs."""
    legend = {glyph: dict(spec) for glyph, spec in DEFAULT_LEGEND.items()}
    if raw_legend is None:
        return legend
    if not isinstance(raw_legend, Mapping):
        if ctx is not None:
            ctx.add("Grid data", path("legend"), "'legend' must map glyphs to cell objects.")
        return legend
    for glyph, spec in raw_legend.items():
        if not isinstance(glyph, str) or len(glyph) != 1:
            if ctx is not None:
                ctx.add("Legend", path("legend", str(glyph)), "glyphs must be single characters.")
            continue
        if not isinstance(spec, Mapping):
            if ctx is not None:
                ctx.add("Legend", path("legend", glyph), "cell definition must be an object.")
            continue
        legend[glyph] = dict(spec)
    return legend


@dataclass(frozen=True)
class FieldSpec:
    required: bool
    rule: str


CHOICE_FIELDS: Mapping[str, FieldSpec] = {
    "text": FieldSpec(True, "non-empty string"),
    "next": FieldSpec(True, "integer id of an existing node"),
    "requirement": FieldSpec(False, "optional non-empty item identifier"),
    "effect": FieldSpec(False, "optional object with 'health', 'sanity', 'item'"),
}

EFFECT_FIELDS: Mapping[str, FieldSpec] = {
    "health": FieldSpec(False, "optional signed integer delta"),
    "sanity": FieldSpec(False, "optional signed integer delta"),
    "item": FieldSpec(False, "optional non-empty item identifier to grant"),
}

NODE_FIELDS: Mapping[str, FieldSpec] = {
    "text": FieldSpec(True, "string"),
    "choices": FieldSpec(False, "list of choice objects"),
    "dead_end": FieldSpec(False, "boolean"),
    "win": FieldSpec(False, "boolean"),
    "jump_scare": FieldSpec(False, "boolean"),
}

CELL_FIELDS: Mapping[str, FieldSpec] = {
    "kind": FieldSpec(True, f"one of {', '.join(CELL_KINDS)}"),
    "item": FieldSpec(False, "non-empty item identifier, only for 'item' cells"),
}
