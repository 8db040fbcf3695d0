import pytest

from nightfall.scenario import CellKind, build_grid
from nightfall.state import NoticeKind, Outcome, Scene, Severity, grid_start
from nightfall.transitions import grab, move


def build_layout():
    return build_grid(
        {
            "start": [1, 1],
            "legend": {
                "K": {"kind": "item", "item": "key"},
                "B": {"kind": "item", "item": "book"},
            },
            "rows": [
                "#####",
                "#..B#",
                "#K#!#",
                "#.E.#",
                "#####",
            ],
        }
    )


def test_move_then_grab_collects_key_and_empties_cell() -> None:
    grid = build_layout().instantiate()
    state = grid_start((1, 1))

    moved = move(state, 0, 1, grid)
    grabbed = grab(moved.state, grid)

    assert moved.state.position == (1, 2)
    assert grabbed.state.inventory == ("key",)
    assert grabbed.notifications[0].kind is NoticeKind.ITEM_ACQUIRED
    assert grabbed.notifications[0].severity is Severity.SUCCESS
    assert grid.cell(1, 2).kind is CellKind.EMPTY
    assert grid.cell(1, 2).item is None


def test_second_grab_finds_nothing() -> None:
    grid = build_layout().instantiate()
    state = move(grid_start((1, 1)), 0, 1, grid).state
    state = grab(state, grid).state

    again = grab(state, grid)

    assert again.state.inventory == ("key",)
    assert again.outcome is Outcome.NOOP
    assert [note.kind for note in again.notifications] == [NoticeKind.NOTHING_TO_GRAB]
    assert again.notifications[0].severity is Severity.INFO


def test_grab_on_plain_floor_finds_nothing() -> None:
    grid = build_layout().instantiate()
    state = grid_start((1, 1))

    result = grab(state, grid)

    assert result.state == state
    assert [note.kind for note in result.notifications] == [NoticeKind.NOTHING_TO_GRAB]


@pytest.mark.parametrize(("start", "step"), [((1, 1), (-1, 0)), ((1, 1), (0, -1)), ((2, 1), (0, 1))])
def test_walls_block_silently(start, step) -> None:
    grid = build_layout().instantiate()
    state = grid_start(start)

    result = move(state, *step, grid)

    assert result.state.position == start
    assert result.notifications == ()
    assert result.outcome is Outcome.NOOP


def test_out_of_bounds_is_silent() -> None:
    grid = build_grid({"start": [0, 0], "rows": ["..", ".."]}).instantiate()
    state = grid_start((0, 0))

    for dx, dy in ((-1, 0), (0, -1)):
        result = move(state, dx, dy, grid)
        assert result.state.position == (0, 0)
        assert result.notifications == ()


@pytest.mark.parametrize("step", [(1, 1), (0, 0), (2, 0), (-1, -1)])
def test_non_cardinal_steps_are_noops(step) -> None:
    grid = build_layout().instantiate()
    state = grid_start((1, 1))

    result = move(state, *step, grid)

    assert result.state == state
    assert result.outcome is Outcome.NOOP


def test_exit_without_key_warns_and_keeps_scene() -> None:
    grid = build_layout().instantiate()
    state = grid_start((1, 3))

    result = move(state, 1, 0, grid)

    assert result.state.position == (2, 3)
    assert result.state.scene is Scene.ACTIVE
    assert [note.kind for note in result.notifications] == [NoticeKind.MISSING_KEY]
    assert result.notifications[0].severity is Severity.ERROR


def test_exit_with_key_wins_and_freezes() -> None:
    grid = build_layout().instantiate()
    state = grid_start((1, 3)).with_item("key")

    result = move(state, 1, 0, grid)

    assert result.outcome is Outcome.WIN
    assert result.state.scene is Scene.WIN
    frozen = move(result.state, -1, 0, grid)
    assert frozen.outcome is Outcome.IGNORED
    assert frozen.state.position == (2, 3)
    assert grab(result.state, grid).outcome is Outcome.IGNORED


def test_scare_cell_reports_trigger() -> None:
    grid = build_layout().instantiate()
    state = grid_start((3, 1))

    result = move(state, 0, 1, grid)

    assert result.scare_triggered
    assert result.state.position == (3, 2)
    assert result.notifications == ()
