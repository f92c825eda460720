# engine/action_handler.py
"""
Translates player input into simulation changes: camera-relative movement,
sprint and reload requests.  Front-ends either build an :class:`Intent`
directly or pass action dictionaries through
:func:`intent_from_action`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

import structlog

from game.game_state import GameState
from game.systems import combat_system, movement_system

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Intent:
    """Input snapshot for one tick."""

    forward: bool = False
    backward: bool = False
    left: bool = False
    right: bool = False
    reload: bool = False
    sprint: bool = False
    aim: Tuple[float, float] | None = None
    camera_forward: Tuple[float, float] = movement_system.DEFAULT_CAMERA_FORWARD

    @property
    def axes(self) -> Tuple[float, float]:
        """(forward, right) axis values in [-1, 1]."""
        return (
            float(self.forward) - float(self.backward),
            float(self.right) - float(self.left),
        )

    @property
    def is_moving(self) -> bool:
        return self.axes != (0.0, 0.0)


IDLE = Intent()

_DIRECTION_FLAGS: Dict[str, str] = {
    "up": "forward",
    "down": "backward",
    "left": "left",
    "right": "right",
}


def intent_from_action(action: Dict[str, Any]) -> Intent:
    """Build an intent from an action dict such as ``{"type": "move", "dirs": ["up"]}``."""
    action_type = action.get("type")
    if action_type == "move":
        flags = {
            _DIRECTION_FLAGS[d]: True
            for d in action.get("dirs", ())
            if d in _DIRECTION_FLAGS
        }
        return Intent(sprint=bool(action.get("sprint", False)), aim=action.get("aim"), **flags)
    if action_type == "reload":
        return Intent(reload=True, aim=action.get("aim"))
    if action_type in (None, "wait"):
        return Intent(aim=action.get("aim"))
    log.warning("Unknown action type", action_type=action_type)
    return IDLE


def process_intent(
    intent: Intent,
    gs: GameState,
    delta: float,
    now: float,
    sprint_multiplier: float = 1.0,
) -> bool:
    """
    Applies one tick of player input. Returns True if the player moved.
    Reload requests go through the normal reload rules and may be ignored.
    """
    if gs.is_dead:
        return False

    if intent.reload:
        combat_system.reload(gs, now)

    if not intent.is_moving:
        return False
    forward_axis, right_axis = intent.axes
    direction = movement_system.intent_direction(
        forward_axis, right_axis, intent.camera_forward
    )
    multiplier = sprint_multiplier if intent.sprint else 1.0
    return movement_system.move_player(gs, direction, delta, multiplier)
