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
Endless runner simulation: a ball rolls along a sloped road, jumping obstacles that scroll in
from the right. Powerups float above the road and particles decorate jumps and shield hits.
"""

from __future__ import annotations

import copy
import logging
import math
from random import Random
from typing import Any

from .effects import EffectManager
from .entities import Obstacle, ObstacleKind, Particle, Runner, RunnerPowerup, RunnerPowerupKind
from .events import EventKind, EventQueue, GameEvent
from .geometry import circle_touches_box, ground_y, substeps
from .progression import TIERS, Difficulty, DifficultyTier, Phase, Progression, next_spawn_interval
from .scores import BestScore, ScoreStore

logger = logging.getLogger(__name__)


class RunnerGame():
    runner_x = 50
    runner_radius = 20
    gravity = 1.2
    jump_power = -18

    # Scroll speed at the start of a run; the difficulty tier adds a little every frame
    base_speed = 5

    # One point every this many frames
    score_every = 6

    # Chance of a powerup spawning alongside each obstacle, and tries to find it a clear spot
    powerup_chance = 0.3
    placement_attempts = 5

    slow_mo_ticks = 300
    slow_mo_factor = 0.5
    double_pts_ticks = 600

    jump_particles = 6
    burst_particles = 20
    particle_gravity = 0.15

    def __init__(
        self,
        difficulty: str | Difficulty = "easy",
        rng: Random | None = None,
        store: ScoreStore | None = None,
        width: int = 800,
        height: int = 200,
    ) -> None:
        """
        Set up a run, waiting to be started.

        Args:
            difficulty: Tier name or member; see `progression.TIERS`.
            rng: Random source for obstacles, powerups, spawn timing and particles.
            store: Persistent best-score store. None keeps best scores in memory only.
            width: Play field width in pixels.
            height: Play field height in pixels. The road baseline is 20 pixels above the bottom.

        Raises:
            ValueError: For an unknown difficulty name.
        """

        self.rng = rng if rng is not None else Random()
        self.store = store
        self.width = width
        self.height = height
        self.baseline = height - 20

        self.effects = EffectManager()
        self.progress = Progression("runner")
        self.events = EventQueue()

        self.difficulty = Difficulty.parse(difficulty)
        self.tier: DifficultyTier = TIERS[self.difficulty]
        self.best = BestScore(store, self.best_key)

        self.runner = Runner(x=RunnerGame.runner_x, y=0, r=RunnerGame.runner_radius)
        self._reset_world()

    @property
    def phase(self) -> Phase:
        return self.progress.phase

    @property
    def best_key(self) -> str:
        return f"game2_highScore_{self.difficulty.value}"

    @property
    def speed(self) -> float:
        """Scroll speed before effects."""

        return RunnerGame.base_speed + self.speed_increment

    @property
    def scroll_speed(self) -> float:
        """Pixels the world moves left this frame."""

        if self.effects.is_active(RunnerPowerupKind.SLOW_MO):
            return self.speed * RunnerGame.slow_mo_factor
        return self.speed

    @property
    def shielded(self) -> bool:
        return self.effects.is_active(RunnerPowerupKind.SHIELD)

    def ground_at(self, x: float) -> float:
        return ground_y(x, self.width, self.baseline)

    def _reset_world(self) -> None:
        runner = self.runner
        runner.y = self.ground_at(runner.x) - runner.r
        runner.vy = 0
        runner.is_jumping = False

        self.obstacles: list[Obstacle] = []
        self.powerups: list[RunnerPowerup] = []
        self.particles: list[Particle] = []

        self.frame = 0
        self.score = 0
        self.score_timer = 0
        self.speed_increment = 0.0
        self.obstacle_timer = 0
        self.effects.clear_all()

        # The tier must be in place before the first interval is drawn
        self.next_obstacle_in = next_spawn_interval(self.tier.spawn_interval, self.rng)

    # --- lifecycle ---

    def set_difficulty(self, difficulty: str | Difficulty) -> bool:
        """
        Switch difficulty tier between runs.

        Behaviour:
            - Ignored while a run is in progress (running or paused).
            - Loads the best score kept for the new tier.

        Returns:
            bool: True if the difficulty was changed.

        Raises:
            ValueError: For an unknown difficulty name.
        """

        chosen = Difficulty.parse(difficulty)
        if self.phase in (Phase.RUNNING, Phase.PAUSED):
            return False

        self.difficulty = chosen
        self.tier = TIERS[chosen]
        self.best = BestScore(self.store, self.best_key)
        self.next_obstacle_in = next_spawn_interval(self.tier.spawn_interval, self.rng)
        logger.debug("runner difficulty %s (spawn every %d frames)", chosen.value, self.tier.spawn_interval)
        return True

    def start(self) -> None:
        self._reset_world()
        self.progress.start()

    def restart(self) -> None:
        """Start a new run from any phase, discarding all entities and effects."""

        self.best.save()
        self._reset_world()
        self.events.clear()
        self.progress.restart()
        logger.info("runner restarted on %s", self.difficulty.value)

    def jump(self) -> bool:
        """
        Jump, if the runner is on the ground.

        Returns:
            bool: True if a jump started.
        """

        runner = self.runner
        if runner.is_jumping:
            return False

        runner.vy = RunnerGame.jump_power
        runner.is_jumping = True
        self._emit_particles(
            runner.x,
            runner.y + runner.r,
            RunnerGame.jump_particles,
            speed=(0.5, 2.0),
            life=(15, 25),
            size=(2.0, 4.0),
            upward=True,
        )
        return True

    # --- input ---

    def on_jump_or_release(self) -> None:
        """Starts an idle run, restarts a lost one, otherwise jumps. Ignored while paused."""

        if self.phase is Phase.IDLE:
            self.start()
        elif self.phase is Phase.LOST:
            self.restart()
        elif self.phase is Phase.RUNNING:
            self.jump()

    def on_pause_toggle(self) -> None:
        self.progress.toggle_pause()

    def on_restart(self) -> None:
        self.restart()

    # There are no levels to continue to, and the ball doesn't steer

    def on_continue(self) -> None:
        pass

    def on_move_to(self, x: float) -> None:
        pass

    def on_hold_left(self, held: bool) -> None:
        pass

    def on_hold_right(self, held: bool) -> None:
        pass

    # --- stepper ---

    def tick(self) -> None:
        """
        Advance the simulation by one frame.

        Behaviour:
            - Does nothing unless the game is running.
            - Gravity applies once; vertical motion and scrolling are then split into sub-steps,
              with landing, pickups and obstacle hits checked at every sub-step.
            - An unshielded obstacle hit ends the run and stops the frame there.
            - Otherwise off-screen entities are removed, and spawning, scoring, particles, effects
              and the speed ramp all advance once.
        """

        if not self.progress.running:
            return

        self.frame += 1
        runner = self.runner
        runner.vy += RunnerGame.gravity

        scroll = self.scroll_speed
        steps = substeps(scroll, runner.vy, runner.r)
        for _ in range(steps):
            runner.y += runner.vy / steps
            self._land()

            for obstacle in self.obstacles:
                obstacle.x -= scroll / steps
                # Obstacles ride the slope
                obstacle.y = self.ground_at(obstacle.x) - obstacle.h
            for powerup in self.powerups:
                powerup.x -= scroll / steps

            self._collect_powerups()
            if self._check_obstacles():
                return

        self.obstacles = [o for o in self.obstacles if o.x + o.w >= 0]
        self.powerups = [p for p in self.powerups if p.x + p.w >= 0]

        self.obstacle_timer += 1
        if self.obstacle_timer > self.next_obstacle_in:
            self.spawn_obstacle()
            self.obstacle_timer = 0
            self.next_obstacle_in = next_spawn_interval(self.tier.spawn_interval, self.rng)

        self.score_timer += 1
        if self.score_timer >= RunnerGame.score_every:
            self.score += 2 if self.effects.is_active(RunnerPowerupKind.DOUBLE_PTS) else 1
            self.score_timer = 0
            self.best.submit(self.score)

        self.particles = [p for p in self.particles if p.update(RunnerGame.particle_gravity)]

        for kind in self.effects.tick():
            self.events.message(f"{kind.value} ended", self.score)

        self.speed_increment += self.tier.speed_ramp

    def _land(self) -> None:
        runner = self.runner
        ground = self.ground_at(runner.x)
        if runner.y >= ground - runner.r:
            runner.y = ground - runner.r
            runner.vy = 0
            runner.is_jumping = False

    def _collect_powerups(self) -> None:
        runner = self.runner
        for powerup in list(self.powerups):
            if circle_touches_box(runner.x, runner.y, runner.r, powerup.box()):
                self.powerups.remove(powerup)
                self.activate_powerup(powerup.kind)

    def _check_obstacles(self) -> bool:
        """
        Test the runner against every obstacle.

        Behaviour:
            - A hit while shielded uses up the shield, removes the obstacle and bursts particles.
            - Any other hit ends the run.

        Returns:
            bool: True if the run ended.
        """

        runner = self.runner
        for obstacle in list(self.obstacles):
            if not circle_touches_box(runner.x, runner.y, runner.r, obstacle.collision_box()):
                continue

            if self.effects.consume(RunnerPowerupKind.SHIELD):
                self.obstacles.remove(obstacle)
                self._emit_particles(
                    runner.x,
                    runner.y,
                    RunnerGame.burst_particles,
                    speed=(2.0, 5.0),
                    life=(25, 40),
                    size=(2.0, 5.0),
                )
                self.events.message("Shield absorbed the hit!", self.score)
                continue

            self._game_over()
            return True

        return False

    def _game_over(self) -> None:
        self.best.submit(self.score)
        self.best.save()
        self.progress.lose()
        self.events.emit(EventKind.LOST, self.score)
        logger.info(
            "runner over on %s with score %d (best %d)", self.difficulty.value, self.score, self.best.value
        )

    def obstacle_size(self, kind: ObstacleKind) -> tuple[float, float]:
        """
        Draw the size of a new obstacle.

        Behaviour:
            - Heights grow with the score, up to 1.8x from 400 points.

        Returns:
            tuple[float, float]: Width and height.
        """

        height_scale = 1 + min(self.score / 500, 0.8)
        rng = self.rng

        if kind is ObstacleKind.TIRE:
            w, h = 35, 35
        elif kind is ObstacleKind.CONE:
            w, h = 25, 50
        elif kind is ObstacleKind.BARRIER:
            w, h = 35 + rng.random() * 25, 40 + rng.random() * 20
        elif kind is ObstacleKind.BOX:
            w, h = 30, 35
        elif kind is ObstacleKind.SIGN:
            w, h = 15, 55
        elif kind is ObstacleKind.ROCK:
            w, h = 40 + rng.random() * 15, 30 + rng.random() * 15
        else:
            raise AssertionError(f"unhandled obstacle kind {kind}")

        return w, h * height_scale

    def spawn_obstacle(self, kind: ObstacleKind | None = None) -> Obstacle:
        """
        Add an obstacle on the road at the right edge, possibly with a powerup ahead of it.

        Args:
            kind: Obstacle kind, or None for a random one.

        Returns:
            Obstacle: The new obstacle.
        """

        if kind is None:
            kind = self.rng.choice(list(ObstacleKind))
        w, h = self.obstacle_size(kind)
        obstacle = Obstacle(x=self.width, y=self.ground_at(self.width) - h, w=w, h=h, kind=kind)
        self.obstacles.append(obstacle)

        if self.rng.random() < RunnerGame.powerup_chance:
            self.spawn_powerup(obstacle)

        return obstacle

    def spawn_powerup(self, obstacle: Obstacle, kind: RunnerPowerupKind | None = None) -> RunnerPowerup | None:
        """
        Try to float a powerup above the road beyond an obstacle.

        Behaviour:
            - Up to `placement_attempts` random spots are tried; the first one clear of every
              obstacle's bounding box is used.

        Returns:
            RunnerPowerup | None: The powerup, or None if every spot overlapped an obstacle.
        """

        if kind is None:
            kind = self.rng.choice(list(RunnerPowerupKind))

        for _ in range(RunnerGame.placement_attempts):
            x = obstacle.x + obstacle.w + 40 + self.rng.random() * 120
            lift = 20 + self.rng.random() * 60
            powerup = RunnerPowerup(x=x, y=0, kind=kind)
            powerup.y = self.ground_at(x) - powerup.h - lift

            if not any(powerup.box().overlaps(other.box()) for other in self.obstacles):
                self.powerups.append(powerup)
                return powerup

        logger.debug("no room for a %s powerup", kind.value)
        return None

    def activate_powerup(self, kind: RunnerPowerupKind) -> None:
        if kind is RunnerPowerupKind.SHIELD:
            self.effects.apply(kind, lambda: None, None)
            self.events.message("Shield up!", self.score)
        elif kind is RunnerPowerupKind.SLOW_MO:
            self.effects.apply(kind, lambda: None, RunnerGame.slow_mo_ticks)
            self.events.message("Slow motion!", self.score)
        elif kind is RunnerPowerupKind.DOUBLE_PTS:
            self.effects.apply(kind, lambda: None, RunnerGame.double_pts_ticks)
            self.events.message("Double points!", self.score)
        else:
            raise AssertionError(f"unhandled powerup kind {kind}")

    def _emit_particles(
        self,
        x: float,
        y: float,
        count: int,
        speed: tuple[float, float],
        life: tuple[int, int],
        size: tuple[float, float],
        upward: bool = False,
    ) -> None:
        rng = self.rng
        for i in range(count):
            if upward:
                # Spray up and sideways, never down into the road
                angle = math.pi + rng.random() * math.pi
            else:
                angle = (i / count) * math.tau + rng.random() * 0.3
            magnitude = rng.uniform(*speed)
            max_life = rng.randint(*life)
            self.particles.append(
                Particle(
                    x=x,
                    y=y,
                    vx=math.cos(angle) * magnitude,
                    vy=math.sin(angle) * magnitude,
                    life=max_life,
                    max_life=max_life,
                    size=rng.uniform(*size),
                )
            )

    # --- queries ---

    def drain_events(self) -> list[GameEvent]:
        return self.events.drain()

    def snapshot(self) -> dict[str, Any]:
        """
        Copy of everything a renderer needs for one frame.

        Returns:
            dict: Phase, counters, copies of every entity and the active effects. Shield maps to
                  None (it has no countdown); timed effects map to their remaining ticks.
        """

        return {
            "phase": self.phase.value,
            "frame": self.frame,
            "difficulty": self.difficulty.value,
            "score": self.score,
            "best": self.best.value,
            "speed": self.speed,
            "scroll_speed": self.scroll_speed,
            "runner": copy.copy(self.runner),
            "obstacles": [copy.copy(o) for o in self.obstacles],
            "powerups": [copy.copy(p) for p in self.powerups],
            "particles": [copy.copy(p) for p in self.particles],
            "effects": {kind.value: self.effects.remaining(kind) for kind in self.effects.active_kinds()},
        }
