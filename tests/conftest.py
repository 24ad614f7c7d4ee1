from __future__ import annotations

import copy

import pytest

_LIGHT = {"primary": "#1a73e8", "background": "#FFFFFF", "accent": "#fbbc04", "theme": "light"}
_DARK = {"primary": "#8ab4f8", "background": "#202124", "accent": "#fdd663", "theme": "dark"}

_SEARCH_SCENE = {
    "sceneId": "search",
    "imagePath": "screens/search.png",
    "colorScheme": _LIGHT,
    "elements": [
        {
            "id": "search_input",
            "kind": "input",
            "description": "Search input",
            "geometry": {"x": 745, "y": 390, "width": 600, "height": 40},
            "content": {"text": "Search the web"},
        },
        {
            "id": "submit_button",
            "kind": "button",
            "description": "Search button",
            "geometry": {"x": 900, "y": 460, "width": 140, "height": 36},
            "styling": {"backgroundColor": "#1a73e8", "textColor": "#FFFFFF", "borderRadius": 4},
        },
        {
            "id": "brand_logo",
            "kind": "logo",
            "description": "Brand logo",
            "geometry": {"x": 860, "y": 200, "width": 200, "height": 80},
        },
    ],
}

_RESULTS_SCENE = {
    "sceneId": "results",
    "imagePath": "screens/results.png",
    "colorScheme": _DARK,
    "elements": [
        {
            "id": "search_input",
            "kind": "input",
            "description": "Search input",
            "geometry": {"x": 120, "y": 40, "width": 500, "height": 40},
        },
        {
            "id": "first_result",
            "kind": "link",
            "description": "First result link",
            "geometry": {"x": 120, "y": 160, "width": 420, "height": 24},
        },
    ],
}


@pytest.fixture
def search_storyboard() -> dict:
    return {
        "scenes": [copy.deepcopy(_SEARCH_SCENE)],
        "actions": [
            {"kind": "cursor_move", "targetElementId": "search_input", "duration": 1.0},
            {"kind": "click", "targetElementId": "search_input", "duration": 0.2},
            {"kind": "type", "targetElementId": "search_input", "payload": "Hello World", "duration": 2.0},
        ],
    }


@pytest.fixture
def two_scene_storyboard() -> dict:
    return {
        "scenes": [copy.deepcopy(_SEARCH_SCENE), copy.deepcopy(_RESULTS_SCENE)],
        "actions": [
            {"kind": "cursor_move", "targetElementId": "search_input", "duration": 0.5},
            {"kind": "type", "targetElementId": "search_input", "payload": "uireel", "duration": 0.6},
            {"kind": "switch_scene", "payload": "results", "duration": 0.8},
            {"kind": "cursor_move", "targetElementId": "first_result", "duration": 0.5},
            {"kind": "click", "targetElementId": "first_result", "duration": 0.2},
            {"kind": "wait", "duration": 0.25},
        ],
    }
