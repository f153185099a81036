"""Default settings bag stored on every new project.

The values are opaque to the ordering engine; they are persisted so editor
clients get the same defaults they always had.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Mapping, Optional

DEFAULT_PROJECT_SETTINGS: Dict[str, Any] = {
    "language": "EN",
    "rtl": False,
    "UIColor": "#1AA7EC",
    "layout": "News",
    "debug": False,
    "general": {
        "autoSave": False,
        "autoSaveInterval": 300,
        "promptAutosave": True,
        "projectsRefreshInterval": 60,
        "createNewItemAbove": True,
        "itemArrows": True,
    },
    "hotkeys": {
        "basic": {
            "cut": "CTRL + SHIFT + X",
            "copy": "CTRL + SHIFT + C",
            "paste": "CTRL + SHIFT + V",
            "delete": "CTRL + SHIFT + D",
        },
        "inAndOut": {
            "insert": "NumbpadEnter",
            "clearSupers": "Numpad1",
            "clearStripe": "Numpad2",
            "clearBox": "Numpad3",
            "clearCG": "Numpad4",
            "clearFingers": "Numpad5",
            "clearCounter": "Numpad6",
            "clearLive": "Numpad7",
            "clearTicker": "Numpad8",
            "clearPromo": "Numpad9",
            "clearRoller": "Numpad0",
            "clearAll": "NumpadDivide",
        },
        "create": {
            "newSuper": "ALT + 1",
            "newStripe": "ALT + 2",
            "newBox": "ALT + 3",
            "newCG": "ALT + 4",
            "newFinger": "ALT + 5",
            "newCounter": "ALT + 6",
            "newLive": "ALT + 7",
            "newTicker": "ALT + 8",
            "newRoller": "ALT + 9",
            "newPromo": "ALT + 0",
        },
        "others": {
            "newProject": "ALT + P",
            "newItem": "ALT + N",
            "newImport": "ALT + I",
            "moveElementUp": "NumpadSubtract",
            "moveElementDown": "NumpadAdd",
        },
    },
}


def merged_settings(overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Return the defaults with ``overrides`` merged in (nested dicts merge key-wise)."""
    result = copy.deepcopy(DEFAULT_PROJECT_SETTINGS)
    _merge(result, overrides or {})
    return result


def _merge(target: Dict[str, Any], overrides: Mapping[str, Any]) -> None:
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)


__all__ = ["DEFAULT_PROJECT_SETTINGS", "merged_settings"]
