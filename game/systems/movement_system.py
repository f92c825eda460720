"""Movement helper utilities.

This module exposes small helper functions for moving the player around the
town.  Movement is continuous; terrain collision is resolved per axis so the
player slides along walls instead of sticking to them.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Tuple

from game.world.collision import CollisionIndex

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from game.game_state import GameState

# Default isometric camera looks down the (-1, 0, -1) diagonal.
DEFAULT_CAMERA_FORWARD: Tuple[float, float] = (-math.sqrt(0.5), -math.sqrt(0.5))


def camera_basis(forward: Tuple[float, float] = DEFAULT_CAMERA_FORWARD) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """Ground-plane forward and right vectors for a camera heading."""
    fx, fz = forward
    length = math.hypot(fx, fz)
    if length == 0:
        fx, fz = DEFAULT_CAMERA_FORWARD
    else:
        fx, fz = fx / length, fz / length
    # right = forward x up
    return (fx, fz), (-fz, fx)


def intent_direction(
    forward_axis: float,
    right_axis: float,
    forward: Tuple[float, float] = DEFAULT_CAMERA_FORWARD,
) -> Tuple[float, float]:
    """Map input axes to a normalised world-space direction (or zero)."""
    (fx, fz), (rx, rz) = camera_basis(forward)
    dx = fx * forward_axis + rx * right_axis
    dz = fz * forward_axis + rz * right_axis
    length = math.hypot(dx, dz)
    if length == 0:
        return 0.0, 0.0
    return dx / length, dz / length


def resolve_move(
    collision: CollisionIndex,
    x: float,
    z: float,
    dx: float,
    dz: float,
    radius: float,
) -> Tuple[float, float]:
    """Apply a displacement with per-axis sliding.

    Parameters
    ----------
    collision:
        Static collision index of the current map.
    x, z:
        Current position.
    dx, dz:
        Desired displacement for this tick.
    radius:
        Collision radius of the moving actor.

    Returns
    -------
    tuple
        The resolved position.  The x move is tried against the original z,
        then the z move against the (possibly updated) x; each axis succeeds
        or fails on its own.
    """

    new_x, new_z = x, z
    if not collision.is_blocked(x + dx, z, radius):
        new_x = x + dx
    if not collision.is_blocked(new_x, z + dz, radius):
        new_z = z + dz
    return new_x, new_z


def move_player(
    gs: GameState,
    direction: Tuple[float, float],
    delta: float,
    speed_multiplier: float = 1.0,
) -> bool:
    """Move the player along ``direction`` for ``delta`` seconds.

    Returns ``True`` if the position changed.
    """

    dir_x, dir_z = direction
    if dir_x == 0 and dir_z == 0:
        return False
    speed = gs.combat_stats.speed * speed_multiplier
    new_x, new_z = resolve_move(
        gs.collision,
        gs.player.x,
        gs.player.z,
        dir_x * speed * delta,
        dir_z * speed * delta,
        gs.player_radius,
    )
    moved = (new_x, new_z) != (gs.player.x, gs.player.z)
    gs.player.x, gs.player.z = new_x, new_z
    return moved
