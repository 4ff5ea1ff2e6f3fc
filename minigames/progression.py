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
Run lifecycle, level progression and runner difficulty tiers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from random import Random

logger = logging.getLogger(__name__)

# Row count never grows beyond this
MAX_ROWS = 8

# Ball and paddle speeds scale by this per level
LEVEL_SPEEDUP = 1.2

# Randomised spawn intervals vary by this fraction either side of the base interval
SPAWN_VARIANCE = 0.3


class TransitionError(RuntimeError):
    """Raised when the game is asked to move between phases that aren't connected."""


class Phase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    WON = "won"
    LOST = "lost"


class Progression():
    # Legal (from, to) phase pairs, excluding restart which is allowed from anywhere
    transitions = {
        (Phase.IDLE, Phase.RUNNING),
        (Phase.RUNNING, Phase.PAUSED),
        (Phase.PAUSED, Phase.RUNNING),
        (Phase.RUNNING, Phase.WON),
        (Phase.WON, Phase.RUNNING),
        (Phase.RUNNING, Phase.LOST),
    }

    def __init__(self, name: str) -> None:
        """
        Create a lifecycle controller, starting in `IDLE`.

        Args:
            name: Game name, used in log messages.
        """

        self.name = name
        self.phase = Phase.IDLE

    @property
    def running(self) -> bool:
        return self.phase is Phase.RUNNING

    @property
    def paused(self) -> bool:
        return self.phase is Phase.PAUSED

    def _move(self, target: Phase) -> None:
        if (self.phase, target) not in Progression.transitions:
            raise TransitionError(f"{self.name}: cannot go from {self.phase.value} to {target.value}")
        logger.debug("%s: %s -> %s", self.name, self.phase.value, target.value)
        self.phase = target

    def start(self) -> None:
        self._move(Phase.RUNNING)

    def pause(self) -> None:
        self._move(Phase.PAUSED)

    def resume(self) -> None:
        self._move(Phase.RUNNING)

    def toggle_pause(self) -> bool:
        """
        Pause a running game or resume a paused one.

        Returns:
            bool: True if the phase changed. Other phases (idle, won, lost) ignore the toggle.
        """

        if self.phase is Phase.RUNNING:
            self.pause()
        elif self.phase is Phase.PAUSED:
            self.resume()
        else:
            return False
        return True

    def win(self) -> None:
        self._move(Phase.WON)

    def proceed(self) -> None:
        self._move(Phase.RUNNING)

    def lose(self) -> None:
        self._move(Phase.LOST)

    def restart(self) -> None:
        """Begin a fresh run from any phase. The caller resets the world."""

        logger.debug("%s: restart from %s", self.name, self.phase.value)
        self.phase = Phase.RUNNING


@dataclass(frozen=True)
class LevelPlan:
    """Parameters of the level that follows a cleared one."""

    level: int
    rows: int
    speed_factor: float

    @classmethod
    def after(cls, level: int, rows: int) -> LevelPlan:
        """
        Plan the level after `level`.

        Args:
            level: The level just cleared.
            rows: Brick rows on the level just cleared.

        Returns:
            LevelPlan: One more row (capped at `MAX_ROWS`), speeds scaled by `1.2 ** (next - 1)`.
        """

        next_level = level + 1
        return cls(
            level=next_level,
            rows=min(MAX_ROWS, rows + 1),
            speed_factor=LEVEL_SPEEDUP ** (next_level - 1),
        )


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    INSANE = "insane"

    @classmethod
    def parse(cls, value: str | Difficulty) -> Difficulty:
        """
        Accept either a member or its name.

        Raises:
            ValueError: If the name isn't one of the four tiers.
        """

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            names = ", ".join(d.value for d in cls)
            raise ValueError(f"unknown difficulty {value!r} (expected one of: {names})") from None


@dataclass(frozen=True)
class DifficultyTier:
    spawn_interval: int     # Base frames between obstacle spawns
    speed_ramp: float       # Added to the scroll speed every frame


TIERS = {
    Difficulty.EASY: DifficultyTier(spawn_interval=100, speed_ramp=0.0005),
    Difficulty.MEDIUM: DifficultyTier(spawn_interval=80, speed_ramp=0.001),
    Difficulty.HARD: DifficultyTier(spawn_interval=60, speed_ramp=0.0015),
    Difficulty.INSANE: DifficultyTier(spawn_interval=45, speed_ramp=0.0025),
}


def next_spawn_interval(base: float, rng: Random) -> float:
    """
    Draw the number of frames until the next obstacle.

    Each draw is independent: uniform within +/-30% of `base`.
    """

    variance = base * SPAWN_VARIANCE
    return base - variance + rng.random() * (variance * 2)
