"""Formation slots and enemy execution order.

Each lane shows up to three fixed slots. A single member stands in the
bottom slot, two members take top and bottom, three take top, middle and
bottom. Enemies act top slot first, which makes the execution order
depend only on the spawn layout.
"""

from __future__ import annotations

from itertools import groupby
from typing import TYPE_CHECKING

from skirmish.core.constants import FORMATION_LAYOUTS, SLOT_HEIGHT_BOTTOM


if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from skirmish.models.character import CharacterState


def slot_heights(count: int) -> list[float]:
    """Get the slot height for each member of a lane.

    Args:
        count: Number of members in the lane.

    Returns:
        Heights in member order. Members past the third share the bottom slot.
    """
    if count <= 0:
        return []
    layout = FORMATION_LAYOUTS[min(count, 3)]
    return list(layout) + [SLOT_HEIGHT_BOTTOM] * (count - len(layout))


def arrange_formation(characters: Iterable[CharacterState]) -> None:
    """Assign formation heights lane by lane, in spawn order.

    Args:
        characters: Characters of one faction.
    """
    by_lane = sorted(characters, key=lambda c: (c.lane_index, c.spawn_index))
    for _, lane_members in groupby(by_lane, key=lambda c: c.lane_index):
        members = list(lane_members)
        for member, height in zip(members, slot_heights(len(members))):
            member.formation_height = height


def execution_order(characters: Sequence[CharacterState]) -> list[str]:
    """Order characters top slot first, then by lane, then by spawn order.

    Args:
        characters: Characters with formation heights assigned.

    Returns:
        Character ids in acting order.
    """
    ordered = sorted(
        characters,
        key=lambda c: (-c.formation_height, c.lane_index, c.spawn_index),
    )
    return [c.character_id for c in ordered]


__all__ = [
    "slot_heights",
    "arrange_formation",
    "execution_order",
]
