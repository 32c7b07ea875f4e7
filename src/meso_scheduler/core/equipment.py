"""
Discrete equipment weights.

Every weight the planner emits must be one of the equipment's legal
weight_options.  find_nearest_weight() is the single rounding primitive;
everything else here builds on it.

Rounding modes
--------------
  up           smallest legal weight >= target, or None
  down         largest legal weight <= target, or None
  nearest      closer of up/down; exact tie goes down
  prefer-down  down if it exists, else up
  prefer-up    up if it exists, else down

An empty or missing list yields None for every mode.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Sequence
from typing import Literal

from .errors import ConfigurationError
from .models import EquipmentType, Exercise

RoundingMode = Literal["up", "down", "nearest", "prefer-down", "prefer-up"]

ROUNDING_MODES: tuple[str, ...] = ("up", "down", "nearest", "prefer-down", "prefer-up")


def _round_up(options: Sequence[float], target: float) -> float | None:
    i = bisect_left(options, target)
    return options[i] if i < len(options) else None


def _round_down(options: Sequence[float], target: float) -> float | None:
    i = bisect_right(options, target)
    return options[i - 1] if i > 0 else None


def find_nearest_weight(
    options: Sequence[float] | None,
    target: float,
    mode: RoundingMode = "nearest",
) -> float | None:
    """
    Round a target weight onto an ascending list of legal weights.

    Args:
        options: Ascending legal weights (may be empty or None)
        target: Desired weight
        mode: One of ROUNDING_MODES

    Returns:
        A member of options, or None when no weight satisfies the mode
        (always None for an empty list)

    Raises:
        ValueError: If mode is not a known rounding mode
    """
    if mode not in ROUNDING_MODES:
        raise ValueError(f"Unknown rounding mode '{mode}'. Valid: {', '.join(ROUNDING_MODES)}")
    if not options:
        return None

    up = _round_up(options, target)
    down = _round_down(options, target)

    if mode == "up":
        return up
    if mode == "down":
        return down
    if mode == "prefer-down":
        return down if down is not None else up
    if mode == "prefer-up":
        return up if up is not None else down

    # nearest
    if up is None:
        return down
    if down is None:
        return up
    return down if target - down <= up - target else up


def generate_weight_options(minimum: float, increment: float, maximum: float) -> list[float]:
    """
    Build an ascending weight ladder.

    Steps from minimum by increment while the value stays <= maximum,
    e.g. (45, 5, 70) -> [45, 50, 55, 60, 65, 70] and (45, 10, 73) -> [45, 55, 65].

    Raises:
        ValueError: If increment is not positive or maximum < minimum
    """
    if increment <= 0:
        raise ValueError("increment must be positive")
    if maximum < minimum:
        raise ValueError("maximum must be >= minimum")

    ladder: list[float] = []
    step = 0
    # minimum + step * increment, never a running sum
    value = minimum
    while value <= maximum + 1e-9:
        ladder.append(round(value, 6))
        step += 1
        value = minimum + step * increment
    return ladder


def next_weight_above(options: Sequence[float], weight: float) -> float | None:
    """Smallest legal weight strictly greater than weight, or None."""
    i = bisect_right(options, weight)
    return options[i] if i < len(options) else None


def smallest_increment(options: Sequence[float]) -> float | None:
    """Smallest gap between adjacent legal weights, or None with < 2 options."""
    if len(options) < 2:
        return None
    return min(hi - lo for lo, hi in zip(options, options[1:]))


def require_weight_options(equipment: EquipmentType, exercise: Exercise) -> list[float]:
    """
    Return the equipment's legal weights, refusing an empty ladder.

    Raises:
        ConfigurationError: If the equipment has no weight options
    """
    if not equipment.weight_options:
        raise ConfigurationError(
            f"Exercise '{exercise.name}' ({exercise.exercise_id}) uses equipment "
            f"'{equipment.title}' ({equipment.equipment_id}) which has no weight options"
        )
    return list(equipment.weight_options)
