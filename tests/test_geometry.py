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


"""Tests for the motion and collision primitives."""

import math

import pytest

from minigames.geometry import (
    DEGENERATE_DISTANCE,
    PUSH_EPSILON,
    Box,
    bounce_off_walls,
    circle_rect_contact,
    circle_touches_box,
    closest_point,
    ground_y,
    paddle_deflection,
    reflect,
    resolve_contact,
    substeps,
)


class FakeBody:
    def __init__(self, x, y, r, dx=0.0, dy=0.0):
        self.x = x
        self.y = y
        self.r = r
        self.dx = dx
        self.dy = dy


class TestSubsteps:
    def test_slow_motion_needs_one_step(self):
        assert substeps(0, 0, 8) == 1
        assert substeps(3, -4, 8) == 1

    def test_fast_motion_is_split(self):
        # Half a radius of 8 is 4 pixels per step
        assert substeps(30, 0, 8) == 8
        assert substeps(0, -12, 8) == 3

    def test_tiny_radius_steps_at_least_one_pixel(self):
        assert substeps(5, 0, 1) == 5

    @pytest.mark.parametrize("r", [1, 4, 8, 20])
    def test_increment_never_exceeds_half_radius(self, r, seeded_rng):
        """Test that every increment is at most max(1, r / 2) on either axis."""
        for _ in range(200):
            dx = seeded_rng.uniform(-60, 60)
            dy = seeded_rng.uniform(-60, 60)
            steps = substeps(dx, dy, r)
            limit = max(1.0, r * 0.5)
            assert abs(dx) / steps <= limit + 1e-9
            assert abs(dy) / steps <= limit + 1e-9


class TestReflect:
    def test_reflect_off_horizontal_surface(self):
        assert reflect(3, -4, 0, 1) == (3, 4)

    def test_reflect_off_vertical_surface(self):
        assert reflect(5, 2, -1, 0) == (-5, 2)

    def test_reflection_preserves_speed(self, seeded_rng):
        for _ in range(50):
            angle = seeded_rng.uniform(0, math.tau)
            nx, ny = math.cos(angle), math.sin(angle)
            vx, vy = seeded_rng.uniform(-10, 10), seeded_rng.uniform(-10, 10)
            rx, ry = reflect(vx, vy, nx, ny)
            assert math.hypot(rx, ry) == pytest.approx(math.hypot(vx, vy))


class TestCircleRectContact:
    box = Box(0, 0, 100, 20)

    def test_closest_point_clamps_into_box(self):
        assert closest_point(-10, 50, self.box) == (0, 20)
        assert closest_point(50, 10, self.box) == (50, 10)

    def test_contact_from_above(self):
        contact = circle_rect_contact(50, -5, 8, self.box)
        assert contact is not None
        assert (contact.nx, contact.ny) == (0, -1)
        assert contact.distance == pytest.approx(5)
        assert contact.reach == 8

    def test_contact_from_corner_is_diagonal(self):
        contact = circle_rect_contact(103, 24, 8, self.box)
        assert contact is not None
        assert contact.nx == pytest.approx(0.6)
        assert contact.ny == pytest.approx(0.8)

    def test_padding_extends_reach(self):
        assert circle_rect_contact(50, -11, 8, self.box) is None
        contact = circle_rect_contact(50, -11, 8, self.box, pad=4)
        assert contact is not None
        assert contact.reach == 12

    def test_exactly_touching_counts(self):
        assert circle_rect_contact(50, -8, 8, self.box) is not None

    def test_degenerate_normal_opposes_velocity(self):
        """Test that a centre inside the box bounces back the way it came."""
        contact = circle_rect_contact(50, 10, 8, self.box, vx=3, vy=4)
        assert contact is not None
        assert contact.nx == pytest.approx(-0.6)
        assert contact.ny == pytest.approx(-0.8)
        assert contact.distance == DEGENERATE_DISTANCE

    def test_degenerate_normal_when_still_points_up(self):
        contact = circle_rect_contact(50, 10, 8, self.box)
        assert (contact.nx, contact.ny) == (0.0, -1.0)

    def test_resolve_contact_reflects_and_separates(self):
        body = FakeBody(50, 25, 8, dx=2, dy=-4)
        contact = circle_rect_contact(body.x, body.y, body.r, self.box, body.dx, body.dy, pad=4)
        resolve_contact(body, contact)

        assert (body.dx, body.dy) == (2, 4)
        # Pushed to reach plus the epsilon below the box
        assert body.y == pytest.approx(20 + 12 + PUSH_EPSILON)
        assert circle_rect_contact(body.x, body.y, body.r, self.box, pad=4) is None

    def test_strict_touch_test(self):
        assert not circle_touches_box(50, -8, 8, self.box)
        assert circle_touches_box(50, -7.9, 8, self.box)


class TestBox:
    def test_touching_edges_do_not_overlap(self):
        assert not Box(0, 0, 10, 10).overlaps(Box(10, 0, 10, 10))
        assert Box(0, 0, 10, 10).overlaps(Box(9.5, 9.5, 10, 10))

    def test_inflate(self):
        assert Box(10, 10, 20, 5).inflate(4) == Box(6, 6, 28, 13)


class TestWallsAndPaddle:
    def test_right_wall(self):
        body = FakeBody(797, 100, 8, dx=4, dy=1)
        assert bounce_off_walls(body, 800)
        assert body.x == 792
        assert body.dx == -4

    def test_left_and_top_corner(self):
        body = FakeBody(3, 2, 8, dx=-4, dy=-4)
        assert bounce_off_walls(body, 800)
        assert (body.x, body.y) == (8, 8)
        assert (body.dx, body.dy) == (4, 4)

    def test_body_moving_back_in_keeps_its_direction(self):
        """Test that overlapping a wall while already heading inward doesn't turn the body round."""
        body = FakeBody(795, 100, 8, dx=-3, dy=1)
        assert bounce_off_walls(body, 800)
        assert body.x == 792
        assert body.dx == -3

        body = FakeBody(4, 100, 8, dx=2, dy=1)
        bounce_off_walls(body, 800)
        assert (body.x, body.dx) == (8, 2)

        body = FakeBody(400, 3, 8, dx=0, dy=5)
        bounce_off_walls(body, 800)
        assert (body.y, body.dy) == (8, 5)

    def test_repeated_checks_do_not_flip_back(self):
        body = FakeBody(797, 100, 8, dx=4, dy=0)
        for _ in range(3):
            bounce_off_walls(body, 800)
        assert body.dx == -4

    def test_floor_is_open(self):
        body = FakeBody(400, 1000, 8, dx=0, dy=4)
        assert not bounce_off_walls(body, 800)
        assert body.dy == 4

    def test_paddle_deflection_range(self):
        assert paddle_deflection(400, 340, 120, 6) == 0
        assert paddle_deflection(340, 340, 120, 6) == -6
        assert paddle_deflection(460, 340, 120, 6) == 6
        assert paddle_deflection(430, 340, 120, 6) == pytest.approx(3)


def test_ground_slopes_down_to_the_right():
    assert ground_y(0, 800, 180) == 160
    assert ground_y(400, 800, 180) == 170
    assert ground_y(800, 800, 180) == 180
