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


"""Tests for random brick layouts and powerup assignment."""

import random

import pytest

from minigames.entities import Brick, PowerupKind
from minigames.levels import (
    REINFORCED_HITS,
    BrickLayout,
    assign_powerups,
    count_reinforced,
    density_for,
    generate_bricks,
    random_powerup_count,
    reinforce_prob_for,
    round_half_up,
)


def present_bricks(bricks):
    return [brick for row in bricks for brick in row if brick.present]


class TestLayout:
    def test_default_grid_is_centred(self):
        layout = BrickLayout()
        assert layout.pitch == 90
        assert layout.left_start == 45
        assert layout.stagger_shift == 45

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.4) == 2

    def test_density_and_reinforcement_curves(self):
        assert density_for(1) == pytest.approx(0.75)
        assert density_for(50) == pytest.approx(0.35)
        assert reinforce_prob_for(1) == pytest.approx(0.12)
        assert reinforce_prob_for(50) == pytest.approx(0.35)


class TestGenerateBricks:
    @pytest.mark.parametrize("level", [1, 2, 3, 5, 8, 12])
    def test_bounds_hold_across_seeds(self, level):
        """Test every generated level against its brick, hit and reinforcement bounds."""
        rows = min(8, 4 + level)
        for seed in range(40):
            bricks = generate_bricks(level, rows, random.Random(seed))

            assert len(bricks) == rows
            assert all(len(row) == 8 for row in bricks)

            present = present_bricks(bricks)
            assert len(present) >= 1
            for row in bricks:
                for brick in row:
                    if brick.present:
                        assert brick.hits in (1, REINFORCED_HITS)
                    else:
                        assert brick.hits == 0

            n = len(present)
            assert min(n, level + 1) <= count_reinforced(bricks) <= min(n, level + 2)

    def test_rows_stack_downwards(self, seeded_rng):
        bricks = generate_bricks(1, 5, seeded_rng)
        assert [row[0].y for row in bricks] == [40, 70, 100, 130, 160]

    def test_odd_rows_are_shifted_or_aligned_together(self):
        for seed in range(20):
            bricks = generate_bricks(1, 6, random.Random(seed))
            even_x = [row[0].x for row in bricks[0::2]]
            odd_x = [row[0].x for row in bricks[1::2]]
            assert set(even_x) == {45}
            assert len(set(odd_x)) == 1
            assert odd_x[0] in (45, 90)

    def test_same_seed_same_level(self):
        first = generate_bricks(3, 7, random.Random(7))
        second = generate_bricks(3, 7, random.Random(7))
        assert [[(b.present, b.hits) for b in row] for row in first] == [
            [(b.present, b.hits) for b in row] for row in second
        ]

    def test_empty_draw_fills_middle_row(self):
        class NeverRng(random.Random):
            """Every cell comes out absent."""

            def random(self):
                return 0.99

        bricks = generate_bricks(1, 5, NeverRng(0))
        assert all(brick.present for brick in bricks[2])
        assert len(present_bricks(bricks)) == 8
        # Still at least level + 1 reinforced bricks
        assert count_reinforced(bricks) == 2


class TestAssignPowerups:
    def test_only_present_bricks_get_powerups(self, seeded_rng):
        bricks = generate_bricks(1, 5, seeded_rng)
        count = assign_powerups(bricks, 6, seeded_rng)

        carriers = [b for row in bricks for b in row if b.powerup is not None]
        assert count == 6
        assert len(carriers) == 6
        assert all(b.present for b in carriers)
        assert all(isinstance(b.powerup, PowerupKind) for b in carriers)

    def test_reassignment_replaces_old_powerups(self, seeded_rng):
        bricks = generate_bricks(1, 5, seeded_rng)
        assign_powerups(bricks, 8, seeded_rng)
        assign_powerups(bricks, 2, seeded_rng)
        assert sum(b.powerup is not None for row in bricks for b in row) == 2

    def test_count_capped_by_present_bricks(self, seeded_rng):
        bricks = [[Brick(0, 0), Brick(90, 0, present=False, hits=0), Brick(180, 0)]]
        assert assign_powerups(bricks, 8, seeded_rng) == 2
        assert bricks[0][1].powerup is None

    def test_random_count_range(self, seeded_rng):
        counts = {random_powerup_count(seeded_rng) for _ in range(300)}
        assert counts == set(range(2, 9))
