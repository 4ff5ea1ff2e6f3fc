# Copyright (c) 2025, 7th software Ltd.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Random brick layouts for breakout levels.

Later levels get sparser but tougher: fewer bricks overall, more of them reinforced.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from random import Random

from .entities import Brick, PowerupKind

logger = logging.getLogger(__name__)

# Reinforced bricks take this many hits
REINFORCED_HITS = 3

# Range of powerup bricks per level (inclusive)
MIN_POWERUPS = 2
MAX_POWERUPS = 8


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (not to even)."""

    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class BrickLayout:
    cols: int = 8
    brick_w: float = 80
    brick_h: float = 20
    padding: float = 10
    offset_top: float = 40
    field_width: float = 800

    @property
    def pitch(self) -> float:
        return self.brick_w + self.padding

    @property
    def left_start(self) -> int:
        """Left edge of an unshifted row, with the grid centred in the field."""

        total_row_w = self.cols * self.pitch - self.padding
        return round_half_up((self.field_width - total_row_w) / 2)

    @property
    def stagger_shift(self) -> int:
        return round_half_up(self.pitch / 2)


def density_for(level: int) -> float:
    """Chance of a cell holding a brick."""

    return max(0.35, 0.75 - 0.04 * (level - 1))


def reinforce_prob_for(level: int) -> float:
    """Chance of a present brick being reinforced."""

    return min(0.35, 0.12 + 0.03 * (level - 1))


def generate_bricks(level: int, rows: int, rng: Random, layout: BrickLayout | None = None) -> list[list[Brick]]:
    """
    Build a random brick grid for a level.

    Args:
        level: Level number starting at 1.
        rows: Number of brick rows.
        rng: Random source (seed it for reproducible layouts).
        layout: Brick geometry. Defaults to the standard 8-column layout.

    Behaviour:
        - Each cell is present with probability `density_for(level)`.
        - Present bricks are reinforced (3 hits) with probability `reinforce_prob_for(level)`,
          otherwise they take 1 hit.
        - With a 60% chance (once per level), odd rows are shifted right by half a brick pitch.
        - If nothing was placed, the middle row is filled with 1-hit bricks.
        - The reinforced count is then pulled into `[min(n, level + 1), min(n, level + 2)]`,
          where `n` is the number of present bricks, by demoting or promoting random bricks.

    Returns:
        list[list[Brick]]: Grid indexed `[row][col]`, absent cells included.
    """

    if layout is None:
        layout = BrickLayout()

    density = density_for(level)
    reinforce_prob = reinforce_prob_for(level)
    do_stagger = rng.random() < 0.6

    bricks = []
    for r in range(rows):
        row = []
        row_offset = layout.stagger_shift if do_stagger and r % 2 == 1 else 0
        for c in range(layout.cols):
            x = layout.left_start + row_offset + c * layout.pitch
            y = layout.offset_top + r * (layout.brick_h + layout.padding)
            present = rng.random() < density
            if present:
                hits = REINFORCED_HITS if rng.random() < reinforce_prob else 1
            else:
                hits = 0
            row.append(Brick(x, y, w=layout.brick_w, h=layout.brick_h, present=present, hits=hits))
        bricks.append(row)

    # Never hand out an empty level
    if not any(brick.present for row in bricks for brick in row):
        for brick in bricks[rows // 2]:
            brick.present = True
            brick.hits = 1

    _clamp_reinforced(bricks, level, rng)

    logger.debug(
        "level %d: %d rows, %d bricks, %d reinforced, stagger=%s",
        level,
        rows,
        sum(brick.present for row in bricks for brick in row),
        count_reinforced(bricks),
        do_stagger,
    )
    return bricks


def _clamp_reinforced(bricks: list[list[Brick]], level: int, rng: Random) -> None:
    present = [brick for row in bricks for brick in row if brick.present]
    min_reinforced = min(len(present), level + 1)
    max_reinforced = min(len(present), level + 2)

    reinforced = [brick for brick in present if brick.hits >= REINFORCED_HITS]

    # Too many due to randomness - demote some back to normal bricks
    while len(reinforced) > max_reinforced:
        pick = reinforced.pop(rng.randrange(len(reinforced)))
        pick.hits = 1

    # Too few - promote random plain bricks
    candidates = [brick for brick in present if brick.hits < REINFORCED_HITS]
    while len(reinforced) < min_reinforced and candidates:
        pick = candidates.pop(rng.randrange(len(candidates)))
        pick.hits = REINFORCED_HITS
        reinforced.append(pick)


def count_reinforced(bricks: list[list[Brick]]) -> int:
    return sum(brick.reinforced for row in bricks for brick in row)


def assign_powerups(bricks: list[list[Brick]], count: int, rng: Random) -> int:
    """
    Hide powerups in random present bricks, replacing any earlier assignment.

    Args:
        bricks: The level grid.
        count: How many bricks should carry a powerup (capped at the number present).
        rng: Random source.

    Returns:
        int: Number of bricks that now carry a powerup.
    """

    candidates = []
    for row in bricks:
        for brick in row:
            brick.powerup = None
            if brick.present:
                candidates.append(brick)

    count = max(0, min(count, len(candidates)))
    kinds = list(PowerupKind)
    for brick in rng.sample(candidates, count):
        brick.powerup = rng.choice(kinds)

    return count


def random_powerup_count(rng: Random) -> int:
    return rng.randint(MIN_POWERUPS, MAX_POWERUPS)
