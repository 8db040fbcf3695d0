import pytest

from nightfall.scenario import Choice, Effect, build_story
from nightfall.state import NoticeKind, Outcome, Scene, Severity, story_start
from nightfall.transitions import apply_choice, select_choice


def build_graph():
    return build_story(
        {
            "title": "Test",
            "start": 0,
            "nodes": [
                {
                    "id": 0,
                    "text": "Crossroads",
                    "choices": [
                        {"text": "Walk on", "next": 1, "effect": {"health": -10, "sanity": -20}},
                        {"text": "Open the gate", "next": 2, "requirement": "key"},
                        {"text": "Pick up the key", "next": 0, "effect": {"item": "key"}},
                        {"text": "Jump", "next": 3},
                    ],
                },
                {"id": 1, "text": "Road", "choices": [{"text": "Back", "next": 0}]},
                {"id": 2, "text": "Home", "win": True},
                {"id": 3, "text": "Pit", "dead_end": True},
            ],
        }
    )


def test_missing_requirement_rejects_choice_without_mutation() -> None:
    graph = build_graph()
    state = story_start(graph.start_id)

    result = select_choice(state, 1, graph)

    assert result.outcome is Outcome.NOOP
    assert result.state == state
    assert len(result.notifications) == 1
    note = result.notifications[0]
    assert note.kind is NoticeKind.MISSING_REQUIREMENT
    assert note.severity is Severity.ERROR
    assert note.subject == "key"


def test_requirement_met_reaches_win() -> None:
    graph = build_graph()
    state = story_start(graph.start_id).with_item("key")

    result = select_choice(state, 1, graph)

    assert result.outcome is Outcome.WIN
    assert result.state.scene is Scene.WIN
    assert result.state.node_id == 2


def test_effects_apply_deltas_and_move_to_next_node() -> None:
    graph = build_graph()
    result = select_choice(story_start(0), 0, graph)

    assert result.outcome is Outcome.CONTINUE
    assert (result.state.health, result.state.sanity) == (90, 80)
    assert result.state.node_id == 1
    assert result.state.scene is Scene.ACTIVE


def test_stats_are_clamped_to_bounds() -> None:
    graph = build_graph()
    heal = Choice("Rest", 1, effect=Effect(health=500, sanity=-500))

    result = apply_choice(story_start(0), heal, graph)

    assert result.state.health == 100
    assert result.state.sanity == 0
    assert result.outcome is Outcome.CONTINUE


def test_item_effect_grants_once() -> None:
    graph = build_graph()
    first = select_choice(story_start(0), 2, graph)
    second = select_choice(first.state, 2, graph)

    assert first.state.inventory == ("key",)
    assert [note.kind for note in first.notifications] == [NoticeKind.ITEM_ACQUIRED]
    assert second.state.inventory == ("key",)
    assert second.notifications == ()


def test_health_reaching_zero_is_death_even_towards_a_win() -> None:
    graph = build_graph()
    fatal = Choice("Sprint home", 2, effect=Effect(health=-100))

    result = apply_choice(story_start(0), fatal, graph)

    assert result.outcome is Outcome.DEATH
    assert result.state.scene is Scene.DEATH
    assert result.state.health == 0


def test_dead_end_node_is_death() -> None:
    graph = build_graph()
    result = select_choice(story_start(0), 3, graph)

    assert result.outcome is Outcome.DEATH
    assert result.state.scene is Scene.DEATH
    assert result.state.node_id == 3


@pytest.mark.parametrize("index", [0, 1, 2, 3])
def test_terminal_scene_ignores_choices(index: int) -> None:
    graph = build_graph()
    dead = select_choice(story_start(0), 3, graph).state

    result = select_choice(dead, index, graph)

    assert result.outcome is Outcome.IGNORED
    assert result.state == dead
    assert result.notifications == ()


def test_out_of_range_index_is_silent_noop() -> None:
    graph = build_graph()
    state = story_start(0)

    result = select_choice(state, 9, graph)

    assert result.outcome is Outcome.NOOP
    assert result.state == state
    assert result.notifications == ()
