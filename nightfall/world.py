"""Built-in scenarios: the Ashgrove house story and the cellar maze."""

from nightfall.scenario import GridLayout, StoryGraph, build_grid, build_story

DEFAULT_STORY = {
    "title": "The House on Ashgrove Lane",
    "start": 0,
    "nodes": [
        {
            "id": 0,
            "text": (
                "Rain hammers the porch of the house on Ashgrove Lane. The front door "
                "hangs open. Somewhere inside, a clock ticks out of time."
            ),
            "choices": [
                {"text": "Step into the hallway.", "next": 1},
                {"text": "Unlock the cellar hatch by the porch.", "next": 6, "requirement": "Basement Key"},
                {"text": "Walk back to the car.", "next": 9},
            ],
        },
        {
            "id": 1,
            "text": (
                "The hallway smells of wet plaster. A study lies to the left, the stairs "
                "climb into darkness on the right."
            ),
            "choices": [
                {"text": "Search the study.", "next": 2},
                {"text": "Climb the stairs.", "next": 3, "effect": {"sanity": -10}},
                {"text": "Go back outside.", "next": 0},
            ],
        },
        {
            "id": 2,
            "text": (
                "Books lie in drifts across the study floor. One heavy volume is chained "
                "shut; a brass key glints in the desk drawer."
            ),
            "choices": [
                {"text": "Take the key.", "next": 1, "effect": {"item": "Basement Key"}},
                {
                    "text": "Take the heavy book.",
                    "next": 1,
                    "effect": {"item": "Heavy Book", "sanity": -5},
                },
                {"text": "Read the chained book.", "next": 4, "effect": {"sanity": -30}},
            ],
        },
        {
            "id": 3,
            "text": (
                "At the top of the stairs a child's drawing is pinned to the wall. "
                "Every face in it has been scratched out. A door at the end of the landing "
                "rattles."
            ),
            "jump_scare": True,
            "choices": [
                {"text": "Open the rattling door.", "next": 5, "effect": {"health": -40}},
                {"text": "Wedge the door with the heavy book.", "next": 7, "requirement": "Heavy Book"},
                {"text": "Run downstairs.", "next": 1, "effect": {"sanity": -5}},
            ],
        },
        {
            "id": 4,
            "text": (
                "The words crawl across the page and into your eyes. You read until the "
                "candle gutters, and you keep reading after."
            ),
            "dead_end": True,
        },
        {
            "id": 5,
            "text": (
                "Something heavy shoves back from the other side. You stagger away with "
                "splinters in your arm and the taste of copper in your mouth."
            ),
            "choices": [
                {"text": "Push through anyway.", "next": 7, "effect": {"health": -70}},
                {"text": "Retreat down the stairs.", "next": 1},
            ],
        },
        {
            "id": 6,
            "text": (
                "The cellar hatch groans open. Stone steps lead down to a bricked "
                "tunnel, and at its end the pale square of a way out."
            ),
            "choices": [
                {"text": "Follow the tunnel.", "next": 8},
                {"text": "Close the hatch and go back.", "next": 0},
            ],
        },
        {
            "id": 7,
            "text": (
                "The door holds. Behind it the noise dissolves into a sigh. On the landing "
                "window the rain stops, and you see the cellar hatch standing open below."
            ),
            "choices": [
                {"text": "Go down to the cellar.", "next": 6, "effect": {"sanity": 10}},
            ],
        },
        {
            "id": 8,
            "text": "You climb out into the orchard behind the house as the sun comes up.",
            "win": True,
        },
        {
            "id": 9,
            "text": (
                "The car will not start. In the rear-view mirror the front door of the "
                "house swings shut."
            ),
            "dead_end": True,
        },
    ],
}

DEFAULT_GRID = {
    "title": "The Cellar",
    "start": [1, 1],
    "legend": {
        "K": {"kind": "item", "item": "key"},
        "B": {"kind": "item", "item": "book"},
        "F": {"kind": "item", "item": "flashlight"},
    },
    "rows": [
        "#######",
        "#..#.F#",
        "#.#!..#",
        "#B#.#.#",
        "#..!#K#",
        "##...E#",
        "#######",
    ],
}


def default_story() -> StoryGraph:
    return build_story(DEFAULT_STORY)


def default_grid() -> GridLayout:
    return build_grid(DEFAULT_GRID)
