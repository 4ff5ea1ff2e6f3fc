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
Brick-breaker simulation: world state, per-frame stepper and powerup effects.

The game owns all of its state. A driver calls `tick()` once per displayed frame and reads
`snapshot()` (or the attributes directly) to paint; input arrives through the `on_*` methods.
"""

from __future__ import annotations

import copy
import logging
import math
from random import Random
from typing import Any, Callable

import numpy as np

from .effects import EffectManager, Restore
from .entities import Ball, Brick, FallingPowerup, Paddle, PowerupKind
from .events import EventKind, EventQueue, GameEvent
from .geometry import Box, bounce_off_walls, circle_rect_contact, paddle_deflection, resolve_contact, substeps
from .levels import BrickLayout, assign_powerups, generate_bricks, random_powerup_count, round_half_up
from .progression import LevelPlan, Phase, Progression
from .scores import BestScore, ScoreStore

logger = logging.getLogger(__name__)


class BreakoutGame():
    # Store key for the best score
    best_key = "game1_highScore"

    # Lives at the start of a session, and brick rows on level 1
    starting_lives = 3
    starting_rows = 5

    # Starting ball speed (pixels per frame on each axis) and radius
    ball_speed = 4
    ball_radius = 8

    # Timed powerups last this many ticks (10 seconds at 60 frames per second)
    effect_ticks = 600

    enlarge_factor = 1.6
    slow_factor = 0.6

    # Horizontal speed given to a ball hitting the very end of the paddle
    max_deflection = 6

    # Pixels of padding around each brick for collisions
    brick_pad = 4

    # Points for destroying a brick, for a reinforced brick surviving a hit, and for the score powerup
    break_score = 10
    hit_score = 5
    bonus_score = 150

    # Frames a reinforced brick flashes after surviving a hit
    hit_flash_ticks = 10

    # Falling powerups are large (easier to catch) and fall slowly
    powerup_radius = 16
    powerup_fall = 0.9

    def __init__(
        self,
        rng: Random | None = None,
        store: ScoreStore | None = None,
        width: int = 800,
        height: int = 500,
    ) -> None:
        """
        Set up a session at level 1, waiting to be started.

        Args:
            rng: Random source for layouts, powerups and serve directions. Seed it for reproducible games.
            store: Persistent best-score store. None keeps the best score in memory only.
            width: Play field width in pixels.
            height: Play field height in pixels.
        """

        self.rng = rng if rng is not None else Random()
        self.width = width
        self.height = height
        self.layout = BrickLayout(field_width=width)

        self.paddle = Paddle(x=(width - Paddle.w) / 2, y=height - 40)
        self.base_paddle_speed = self.paddle.speed
        self.balls: list[Ball] = []
        self.bricks: list[list[Brick]] = []
        self.powerups: list[FallingPowerup] = []

        self.effects = EffectManager()
        self.progress = Progression("breakout")
        self.events = EventQueue()
        self.best = BestScore(store, BreakoutGame.best_key)

        self.left_held = False
        self.right_held = False

        # Each powerup kind has exactly one handler
        self._activators: dict[PowerupKind, Callable[[], None]] = {
            PowerupKind.ENLARGE: self._enlarge_paddle,
            PowerupKind.LIFE: self._gain_life,
            PowerupKind.SLOW: self._slow_balls,
            PowerupKind.MULTIBALL: self._multiball,
            PowerupKind.STICKY: self._sticky_paddle,
            PowerupKind.SHIELD: self._gain_shield,
            PowerupKind.SCORE: self._bonus_score,
        }
        assert set(self._activators) == set(PowerupKind), "every powerup kind needs a handler"

        self._new_session()

    @property
    def phase(self) -> Phase:
        return self.progress.phase

    @property
    def shields(self) -> int:
        """Shield charges held; each one saves the player from losing a life."""

        return self.effects.charges(PowerupKind.SHIELD)

    def _new_session(self) -> None:
        self.level = 1
        self.rows = BreakoutGame.starting_rows
        self.score = 0
        self.lives = BreakoutGame.starting_lives
        self.frame = 0
        self.pending: LevelPlan | None = None
        self.powerups = []
        self.announced_best = False

        self.effects.clear_all()
        self.paddle.speed = self.base_paddle_speed
        self._build_level()
        self.reset_ball_and_paddle()

    def _build_level(self) -> None:
        self.bricks = generate_bricks(self.level, self.rows, self.rng, self.layout)
        assign_powerups(self.bricks, random_powerup_count(self.rng), self.rng)

    def reset_ball_and_paddle(self) -> None:
        """
        Centre the paddle and serve a single ball from just above it.

        Behaviour:
            - The ball heads up and randomly to the left or right at the base speed.
        """

        self.paddle.x = (self.width - self.paddle.w) / 2
        direction = 1 if self.rng.random() > 0.5 else -1
        self.balls = [
            Ball(
                x=self.width / 2,
                y=self.height - 60,
                r=BreakoutGame.ball_radius,
                dx=BreakoutGame.ball_speed * direction,
                dy=-BreakoutGame.ball_speed,
            )
        ]

    # --- lifecycle ---

    def start(self) -> None:
        """Leave the idle phase and begin play."""

        self.progress.start()

    def restart(self) -> None:
        """
        Throw away the current session and begin a new one immediately.

        Behaviour:
            - Back to level 1 with 5 rows, fresh bricks and powerups, zero score and full lives.
            - Every effect is reversed and all shields are lost. Falling powerups disappear.
        """

        self.best.save()
        self._new_session()
        self.events.clear()
        self.progress.restart()
        logger.info("breakout restarted")

    def continue_level(self) -> bool:
        """
        Move on to the level prepared when the last one was cleared.

        Behaviour:
            - Builds the new brick grid and reassigns powerups.
            - Serves a new ball, then scales ball velocities and paddle speed by the plan's speed factor.

        Returns:
            bool: False if no level transition was pending.
        """

        plan = self.pending
        if plan is None:
            return False

        self.level = plan.level
        self.rows = plan.rows
        self._build_level()
        self.reset_ball_and_paddle()
        for ball in self.balls:
            ball.dx *= plan.speed_factor
            ball.dy *= plan.speed_factor
        self.paddle.speed = self.base_paddle_speed * plan.speed_factor

        self.pending = None
        self.progress.proceed()
        logger.debug("breakout level %d: %d rows, speed x%.3f", plan.level, plan.rows, plan.speed_factor)
        return True

    # --- input ---

    def on_move_to(self, x: float) -> None:
        """Centre the paddle on a pointer position (play field coordinates)."""

        if self.phase in (Phase.RUNNING, Phase.IDLE):
            self.paddle.x = x - self.paddle.w / 2
            self._clamp_paddle()

    def on_hold_left(self, held: bool) -> None:
        self.left_held = held

    def on_hold_right(self, held: bool) -> None:
        self.right_held = held

    def on_jump_or_release(self) -> None:
        """Launch: starts an idle game, otherwise releases any balls stuck to the paddle."""

        if self.phase is Phase.IDLE:
            self.start()
        elif self.phase is Phase.RUNNING:
            self.release_stuck_balls()

    def on_pause_toggle(self) -> None:
        self.progress.toggle_pause()

    def on_restart(self) -> None:
        self.restart()

    def on_continue(self) -> None:
        self.continue_level()

    # --- stepper ---

    def tick(self) -> None:
        """
        Advance the simulation by one frame.

        Behaviour:
            - Does nothing unless the game is running (idle, paused, between levels or lost).
            - Moves the paddle, then each ball (sub-stepped, one brick hit at most), then the falling
              powerups. Brick flashes fade and timed effects count down once.
        """

        if not self.progress.running:
            return

        self.frame += 1
        self._move_paddle()

        for ball in list(self.balls):
            self._update_ball(ball)
            if not self.progress.running:
                # Level cleared or game over
                return

        self._update_powerups()

        for row in self.bricks:
            for brick in row:
                if brick.hit_flash > 0:
                    brick.hit_flash -= 1

        for kind in self.effects.tick():
            self.events.message(f"{kind.value.capitalize()} ended", self.score)

        assert self.lives >= 0, "lives must not go negative"

    def _move_paddle(self) -> None:
        if self.right_held:
            self.paddle.x += self.paddle.speed
        if self.left_held:
            self.paddle.x -= self.paddle.speed
        self._clamp_paddle()

    def _clamp_paddle(self) -> None:
        self.paddle.x = max(0, min(self.width - self.paddle.w, self.paddle.x))

    def _update_ball(self, ball: Ball) -> None:
        paddle = self.paddle

        # Stuck balls ride along with the paddle, no physics
        if ball.stuck:
            offset = ball.stuck_offset if ball.stuck_offset is not None else paddle.w / 2
            ball.x = paddle.x + offset
            ball.y = paddle.y - ball.r - 2
            return

        # Move in sub-steps of at most half a radius, so fast balls can't tunnel through bricks
        steps = substeps(ball.dx, ball.dy, ball.r)
        for _ in range(steps):
            ball.x += ball.dx / steps
            ball.y += ball.dy / steps

            bounce_off_walls(ball, self.width)

            if self._check_paddle_collision(ball):
                break

            # Only one brick per ball per frame
            if self._check_brick_collision(ball):
                break

            # Fell off the bottom
            if ball.y - ball.r > self.height:
                self._lose_ball(ball)
                break

    def _check_paddle_collision(self, ball: Ball) -> bool:
        """
        Bounce (or catch) a ball landing on the paddle.

        Behaviour:
            - Only balls moving down, with their bottom below the paddle top and their centre
              within the paddle's span, are affected.
            - With the sticky effect active, the ball sticks where it landed.
            - Otherwise the bounce angle depends on the landing point, and the ball always heads up.

        Returns:
            bool: True if the ball touched the paddle.
        """

        paddle = self.paddle
        if not (ball.dy > 0 and ball.y + ball.r > paddle.y and paddle.x < ball.x < paddle.x + paddle.w):
            return False

        if self.effects.is_active(PowerupKind.STICKY):
            ball.stuck = True
            ball.stuck_offset = ball.x - paddle.x
            ball.dx = 0
            ball.dy = 0
            self.events.message("Ball stuck! Launch to release", self.score)
        else:
            ball.dx = paddle_deflection(ball.x, paddle.x, paddle.w, BreakoutGame.max_deflection)
            ball.dy = -abs(ball.dy)

        return True

    def _check_brick_collision(self, ball: Ball) -> bool:
        """
        Resolve the first brick the ball is touching, if any.

        Returns:
            bool: True if a brick was hit.
        """

        pad = BreakoutGame.brick_pad
        ball_box = Box(ball.x - ball.r, ball.y - ball.r, ball.r * 2, ball.r * 2)

        for row in self.bricks:
            for brick in row:
                if not brick.present:
                    continue

                box = brick.box()
                if not ball_box.overlaps(box.inflate(pad)):
                    continue

                contact = circle_rect_contact(ball.x, ball.y, ball.r, box, ball.dx, ball.dy, pad=pad)
                if contact is None:
                    continue

                resolve_contact(ball, contact)
                self._hit_brick(brick)
                return True

        return False

    def _hit_brick(self, brick: Brick) -> None:
        """
        Knock a hit off a brick.

        Behaviour:
            - A brick with hits left scores `hit_score` and flashes.
            - A brick reaching zero is removed for the rest of the level, scores `break_score`, drops its
              powerup (if it has one) and may clear the level.
        """

        assert brick.present and brick.hits > 0, "only present bricks with hits left can be hit"

        brick.hits -= 1
        if brick.hits > 0:
            brick.hit_flash = BreakoutGame.hit_flash_ticks
            self._add_score(BreakoutGame.hit_score)
            self.events.message(f"Reinforced! {brick.hits} hit(s) left", self.score)
            return

        brick.present = False
        self._add_score(BreakoutGame.break_score)

        if brick.powerup is not None:
            self.powerups.append(
                FallingPowerup(
                    x=round_half_up(brick.x + brick.w / 2),
                    y=round_half_up(brick.y + brick.h),
                    kind=brick.powerup,
                    r=BreakoutGame.powerup_radius,
                    dy=BreakoutGame.powerup_fall,
                )
            )

        if self.bricks_left() == 0:
            self._level_cleared()

    def _level_cleared(self) -> None:
        plan = LevelPlan.after(self.level, self.rows)
        self.pending = plan
        self.best.save()
        self.progress.win()
        self.events.emit(EventKind.WON_LEVEL, self.score, plan=plan)
        self.events.emit(EventKind.LEVEL_TRANSITION, self.score, plan=plan)
        logger.info("breakout level %d cleared with score %d", self.level, self.score)

    def _lose_ball(self, ball: Ball) -> None:
        """
        Remove a ball that fell off the bottom.

        Behaviour:
            - While other balls remain, nothing else happens.
            - Losing the last ball spends a shield if there is one, otherwise a life. Either way a new
              ball is served, unless that was the last life and the game is lost.
        """

        self.balls.remove(ball)
        if self.balls:
            return

        if self.effects.use_charge(PowerupKind.SHIELD):
            self.events.message("Shield saved you!", self.score)
            self.reset_ball_and_paddle()
            return

        self.lives -= 1
        if self.lives > 0:
            self.reset_ball_and_paddle()
            return

        self.best.save()
        self.progress.lose()
        self.events.emit(EventKind.LOST, self.score)
        logger.info("breakout over at level %d with score %d (best %d)", self.level, self.score, self.best.value)

    def _update_powerups(self) -> None:
        paddle = self.paddle
        for powerup in list(self.powerups):
            powerup.y += powerup.dy

            # Caught by the paddle?
            if powerup.y + powerup.r >= paddle.y and paddle.x <= powerup.x <= paddle.x + paddle.w:
                self.powerups.remove(powerup)
                self.activate_powerup(powerup.kind)
                continue

            # Missed
            if powerup.y - powerup.r > self.height:
                self.powerups.remove(powerup)

    def _add_score(self, points: int) -> None:
        assert points >= 0, "score never goes down"
        self.score += points
        if self.best.submit(self.score) and not self.announced_best:
            self.announced_best = True
            self.events.message("New High Score!", self.score)

    def bricks_left(self) -> int:
        return sum(brick.present for row in self.bricks for brick in row)

    def release_stuck_balls(self) -> int:
        """
        Launch every ball stuck to the paddle.

        Returns:
            int: Number of balls released.
        """

        released = 0
        for ball in self.balls:
            if ball.stuck:
                ball.stuck = False
                ball.stuck_offset = None
                ball.dx = self.rng.random() * 6 - 3
                ball.dy = -BreakoutGame.ball_speed
                released += 1

        if released:
            self.events.message("Released stuck balls", self.score)
        return released

    # --- powerups ---

    def activate_powerup(self, kind: PowerupKind) -> None:
        self._activators[kind]()

    def _gain_life(self) -> None:
        self.lives += 1
        self.events.message("Life +1", self.score)

    def _gain_shield(self) -> None:
        self.effects.add_charge(PowerupKind.SHIELD)
        self.events.message("Shield +1", self.score)

    def _bonus_score(self) -> None:
        self._add_score(BreakoutGame.bonus_score)
        self.events.message(f"Score +{BreakoutGame.bonus_score}", self.score)

    def _enlarge_paddle(self) -> None:
        paddle = self.paddle

        def activate() -> Restore:
            original_w = paddle.w
            paddle.w = min(self.width, round_half_up(paddle.w * BreakoutGame.enlarge_factor))
            self._clamp_paddle()

            def restore() -> None:
                paddle.w = original_w
                self._clamp_paddle()

            return restore

        self.effects.apply(PowerupKind.ENLARGE, activate, BreakoutGame.effect_ticks)
        self.events.message("Paddle enlarged for 10s", self.score)

    def _slow_balls(self) -> None:
        def activate() -> Restore:
            # Snapshot each ball in play now; balls added later aren't covered
            saved = {ball: (ball.dx, ball.dy) for ball in self.balls if not ball.stuck}
            for ball in saved:
                ball.dx *= BreakoutGame.slow_factor
                ball.dy *= BreakoutGame.slow_factor

            def restore() -> None:
                for ball, (dx, dy) in saved.items():
                    if ball in self.balls and not ball.stuck:
                        # Original speeds, current directions; a component that is now 0 stays 0
                        ball.dx = math.copysign(abs(dx), ball.dx) if ball.dx else 0.0
                        ball.dy = math.copysign(abs(dy), ball.dy) if ball.dy else 0.0

            return restore

        self.effects.apply(PowerupKind.SLOW, activate, BreakoutGame.effect_ticks)
        self.events.message("Ball slowed for 10s", self.score)

    def _multiball(self) -> None:
        extra = []
        for ball in self.balls:
            for nudge in (1.2, -1.2):
                clone = copy.copy(ball)
                clone.dx = ball.dx * 0.9 + nudge
                clone.dy = -abs(ball.dy)
                extra.append(clone)

        self.balls.extend(extra)
        self.events.message("Multi-ball!", self.score)

    def _sticky_paddle(self) -> None:
        self.effects.apply(PowerupKind.STICKY, lambda: None, BreakoutGame.effect_ticks)
        self.events.message("Sticky paddle for 10s", self.score)

    # --- queries ---

    def drain_events(self) -> list[GameEvent]:
        return self.events.drain()

    def brick_hits(self) -> np.ndarray:
        """
        Remaining hits for every grid cell.

        Returns:
            np.ndarray: Integer array shaped (rows, cols); 0 marks an absent brick.
        """

        return np.array(
            [[brick.hits if brick.present else 0 for brick in row] for row in self.bricks],
            dtype=np.int16,
        )

    def snapshot(self) -> dict[str, Any]:
        """
        Copy of everything a renderer needs for one frame.

        Returns:
            dict: Phase, counters, copies of every entity and the active effects with their
                  remaining ticks. Mutating it has no effect on the game.
        """

        return {
            "phase": self.phase.value,
            "frame": self.frame,
            "score": self.score,
            "best": self.best.value,
            "lives": self.lives,
            "shields": self.shields,
            "level": self.level,
            "rows": self.rows,
            "paddle": copy.copy(self.paddle),
            "balls": [copy.copy(ball) for ball in self.balls],
            "bricks": [[copy.copy(brick) for brick in row] for row in self.bricks],
            "powerups": [copy.copy(powerup) for powerup in self.powerups],
            "effects": {kind.value: self.effects.remaining(kind) for kind in self.effects.active_kinds()},
            "pending": self.pending,
        }
