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


"""Pytest configuration and fixtures for the mini-game tests."""

import random

import pytest

from minigames.breakout import BreakoutGame
from minigames.entities import Brick
from minigames.runner import RunnerGame
from minigames.scores import MemoryScoreStore


@pytest.fixture
def seeded_rng():
    """Provide a deterministic RNG for tests."""
    return random.Random(42)


@pytest.fixture
def store():
    return MemoryScoreStore()


@pytest.fixture
def breakout(seeded_rng, store):
    """A running breakout game at level 1."""
    game = BreakoutGame(rng=seeded_rng, store=store)
    game.start()
    return game


@pytest.fixture
def empty_breakout(breakout):
    """A running breakout game with no balls, no falling powerups and one out-of-the-way brick.

    The spare brick stops the level counting as cleared when a test destroys its own bricks.
    """
    breakout.balls = []
    breakout.powerups = []
    breakout.bricks = [[Brick(0, 0, w=20, h=10)]]
    breakout.paddle.x = 340
    return breakout


@pytest.fixture
def runner(seeded_rng, store):
    """A running runner game on easy."""
    game = RunnerGame(difficulty="easy", rng=seeded_rng, store=store)
    game.start()
    return game
