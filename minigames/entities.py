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
Game entities for both simulations.

Entities are plain records; the games own and mutate them. Balls compare by identity so that
per-ball snapshots survive other balls being added or removed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .geometry import Box


class PowerupKind(Enum):
    ENLARGE = "enlarge"
    LIFE = "life"
    SLOW = "slow"
    MULTIBALL = "multiball"
    STICKY = "sticky"
    SHIELD = "shield"
    SCORE = "score"


class ObstacleKind(Enum):
    TIRE = "tire"
    CONE = "cone"
    BARRIER = "barrier"
    BOX = "box"
    SIGN = "sign"
    ROCK = "rock"


class RunnerPowerupKind(Enum):
    SHIELD = "shield"
    SLOW_MO = "slowMo"
    DOUBLE_PTS = "doublePts"


# --- Breakout ---


@dataclass(eq=False)
class Ball:
    """Breakout ball; a stuck ball rides the paddle at `stuck_offset` from its left edge"""
    x: float
    y: float
    r: float = 8.0
    dx: float = 0.0
    dy: float = 0.0
    stuck: bool = False
    stuck_offset: float | None = None

    def __post_init__(self):
        assert self.r > 0, "ball radius must be positive"


@dataclass
class Paddle:
    x: float            # Left edge
    y: float            # Top edge
    w: float = 120.0
    h: float = 12.0
    speed: float = 8.0  # Pixels per frame while a direction key is held

    def box(self) -> Box:
        return Box(self.x, self.y, self.w, self.h)


@dataclass
class Brick:
    """Grid cell; `hits` is the number of collisions still needed to clear it"""
    x: float
    y: float
    w: float = 80.0
    h: float = 20.0
    present: bool = True
    hits: int = 1
    powerup: PowerupKind | None = None
    hit_flash: int = 0   # Frames left of the "survived a hit" flash

    def __post_init__(self):
        assert self.w >= 0 and self.h >= 0, "brick size must not be negative"
        assert self.hits >= 0, "brick hits must not be negative"

    @property
    def reinforced(self) -> bool:
        return self.present and self.hits >= 3

    def box(self) -> Box:
        return Box(self.x, self.y, self.w, self.h)


@dataclass
class FallingPowerup:
    x: float
    y: float
    kind: PowerupKind
    r: float = 16.0
    dy: float = 0.9


# --- Runner ---


@dataclass
class Runner:
    x: float
    y: float
    r: float = 20.0
    vy: float = 0.0
    is_jumping: bool = False


@dataclass
class Obstacle:
    x: float
    y: float
    w: float
    h: float
    kind: ObstacleKind

    def __post_init__(self):
        assert self.w >= 0 and self.h >= 0, "obstacle size must not be negative"

    def box(self) -> Box:
        return Box(self.x, self.y, self.w, self.h)

    def collision_box(self) -> Box:
        """Box used for hits. Rocks are irregular, so only their middle 70% counts."""

        if self.kind is ObstacleKind.ROCK:
            return Box(self.x + self.w * 0.15, self.y, self.w * 0.7, self.h)
        return self.box()


@dataclass
class RunnerPowerup:
    x: float
    y: float
    kind: RunnerPowerupKind
    w: float = 24.0
    h: float = 24.0

    def box(self) -> Box:
        return Box(self.x, self.y, self.w, self.h)


@dataclass
class Particle:
    """Purely cosmetic; lives for `max_life` ticks"""
    x: float
    y: float
    vx: float
    vy: float
    life: int
    max_life: int
    size: float

    def __post_init__(self):
        assert 0 <= self.life <= self.max_life, "particle life out of range"
        assert self.size >= 0, "particle size must not be negative"

    def update(self, gravity: float = 0.0) -> bool:
        """
        Advance one tick.

        Returns:
            bool: True while the particle is still alive.
        """

        self.x += self.vx
        self.y += self.vy
        self.vy += gravity
        self.life = max(0, self.life - 1)
        return self.life > 0
