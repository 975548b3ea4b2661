"""Helper functions for mapping requested values onto device levels."""

import logging
from typing import List, Sequence

from constants import MAX_LEVEL_VALUE
from errors import ConfigurationInvalid
from models import LevelTable

logger = logging.getLogger(__name__)


def resolve_nearest_level(table: LevelTable, target: int) -> int:
    """
    Return the index of the level closest to target.

    The table is sorted ascending. The first level with value >= target is the
    upper candidate; an exact match therefore resolves to itself. Equal
    distances go to the upper neighbour. Targets outside the table are
    clamped to the first or last level.
    """
    if len(table) == 0:
        raise ConfigurationInvalid("Cannot resolve a level from an empty table")

    upper = None
    for i, level in enumerate(table):
        if level.value >= target:
            upper = i
            break

    if upper is None:
        logger.debug(f"Requested {target} above highest level {table[-1].value}, clamping")
        return len(table) - 1
    if upper == 0:
        if target < table[0].value:
            logger.debug(f"Requested {target} below lowest level {table[0].value}, clamping")
        return 0

    to_lower = target - table[upper - 1].value
    to_upper = table[upper].value - target
    if to_upper > to_lower:
        return upper - 1
    return upper


def generate_toggle_levels(level_count: int, ascending: bool) -> List[int]:
    """
    Brightness values a toggle actuator cycles through, in pulse order.

    Each stop is index * (100 // level_count); stop 0 is "off".
    """
    if level_count < 1:
        raise ConfigurationInvalid(f"level_count must be >= 1, got {level_count}")
    step = MAX_LEVEL_VALUE // level_count
    indices = range(level_count) if ascending else range(level_count - 1, -1, -1)
    return [i * step for i in indices]


def closest_toggle_index(levels: Sequence[int], target: int) -> int:
    """Index of the generated level nearest to target; first minimum wins."""
    if not levels:
        raise ConfigurationInvalid("Cannot look up a level in an empty toggle sequence")
    best = 0
    best_distance = abs(levels[0] - target)
    for i, value in enumerate(levels[1:], start=1):
        distance = abs(value - target)
        if distance < best_distance:
            best = i
            best_distance = distance
    return best


def plan_toggle_steps(current_index: int, target_index: int, level_count: int) -> int:
    """
    Number of forward pulses from current_index to target_index.

    Pulses only move forward through the generated sequence and wrap from the
    last stop to the first, so this is the cyclic forward distance.
    """
    if level_count < 1:
        raise ConfigurationInvalid(f"level_count must be >= 1, got {level_count}")
    return (target_index - current_index) % level_count
