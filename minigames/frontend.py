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
pygame window, input mapping and painting for both games.

Nothing in here changes the simulation except through the games' `on_*` input methods,
`tick()` and `continue_level()`.
"""

from __future__ import annotations

import logging
from typing import Any

import pygame

from .breakout import BreakoutGame
from .entities import ObstacleKind, PowerupKind, RunnerPowerupKind
from .events import EventKind, GameEvent
from .progression import Phase
from .runner import RunnerGame

logger = logging.getLogger(__name__)


class Graphics():
    colours = {
        'black': (0, 0, 0),
        'white': (255, 255, 255),
        'paddle': (64, 128, 255),
        'ball': (255, 255, 255),
        'metal': (181, 192, 201),
        'flash': (255, 240, 96),
        'ground': (85, 85, 85),
        'hud': (196, 224, 255),
        'message': (128, 255, 192),
        'advance': (128, 255, 192),
        'die': (255, 164, 164),
        'shield': (64, 224, 224),
    }

    # Brick colours by row for 1-hit bricks
    row_colours = [
        (255, 96, 96),
        (255, 164, 32),
        (255, 240, 96),
        (64, 255, 128),
        (64, 224, 224),
        (64, 128, 255),
        (160, 96, 255),
        (224, 0, 192),
    ]

    powerup_colours = {
        PowerupKind.ENLARGE: (64, 255, 128),
        PowerupKind.LIFE: (255, 96, 96),
        PowerupKind.SLOW: (64, 128, 255),
        PowerupKind.MULTIBALL: (255, 240, 96),
        PowerupKind.STICKY: (224, 0, 192),
        PowerupKind.SHIELD: (64, 224, 224),
        PowerupKind.SCORE: (255, 164, 32),
        RunnerPowerupKind.SHIELD: (64, 224, 224),
        RunnerPowerupKind.SLOW_MO: (64, 128, 255),
        RunnerPowerupKind.DOUBLE_PTS: (255, 240, 96),
    }

    obstacle_colours = {
        ObstacleKind.TIRE: (51, 51, 51),
        ObstacleKind.CONE: (255, 102, 0),
        ObstacleKind.BARRIER: (255, 204, 0),
        ObstacleKind.BOX: (139, 69, 19),
        ObstacleKind.SIGN: (204, 0, 0),
        ObstacleKind.ROCK: (102, 102, 102),
    }

    def __init__(self, width: int, height: int, caption: str) -> None:
        """
        Open the game window.

        Args:
            width: Window width in pixels (the play field width).
            height: Window height in pixels (the play field height).
            caption: Window title.
        """

        self.width = width
        self.height = height
        self.screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption(caption)

        self.black_screen = pygame.Surface((width, height))
        self.black_screen.fill(Graphics.colours['black'])

        self.clock = pygame.time.Clock()

    def darken_screen(self, alpha: int) -> None:
        self.black_screen.set_alpha(max(0, min(255, abs(int(alpha)))))
        self.screen.blit(self.black_screen, (0, 0))

    def text_at(
        self,
        text: str,
        colour: tuple[int, int, int],
        x: int,
        y: int,
        font_size: int = 24,
        centred: bool = True,
    ) -> pygame.Rect:
        """
        Render text at (x, y), either centred there or with its top-left corner there.

        Returns:
            pygame.Rect: Bounding rectangle of the rendered text.
        """

        font = pygame.font.Font(None, font_size)
        text_surface = font.render(text, True, colour)
        if centred:
            text_rect = text_surface.get_rect(center=(x, y))
        else:
            text_rect = text_surface.get_rect(topleft=(x, y))
        self.screen.blit(text_surface, text_rect)
        return text_rect

    def overlay(self, title: str, text: str, colour: tuple[int, int, int]) -> None:
        self.darken_screen(160)
        self.text_at(title, colour, self.width // 2, self.height // 2 - 20, font_size=56)
        self.text_at(text, Graphics.colours['white'], self.width // 2, self.height // 2 + 20)

    def display(self, fps: int = 60) -> None:
        pygame.display.flip()
        self.clock.tick(fps)


def draw_breakout(gfx: Graphics, state: dict[str, Any]) -> None:
    """Paint one breakout snapshot."""

    screen = gfx.screen
    screen.fill(Graphics.colours['black'])

    for r, row in enumerate(state["bricks"]):
        for brick in row:
            if not brick.present:
                continue
            if brick.hit_flash > 0:
                colour = Graphics.colours['flash']
            elif brick.reinforced or brick.hits > 1:
                colour = Graphics.colours['metal']
            else:
                colour = Graphics.row_colours[r % len(Graphics.row_colours)]
            pygame.draw.rect(screen, colour, pygame.Rect(brick.x, brick.y, brick.w, brick.h))

    paddle = state["paddle"]
    pygame.draw.rect(screen, Graphics.colours['paddle'], pygame.Rect(paddle.x, paddle.y, paddle.w, paddle.h))

    for ball in state["balls"]:
        pygame.draw.circle(screen, Graphics.colours['ball'], (ball.x, ball.y), ball.r)

    for powerup in state["powerups"]:
        pygame.draw.circle(screen, Graphics.powerup_colours[powerup.kind], (powerup.x, powerup.y), powerup.r)
        gfx.text_at(powerup.kind.value[0].upper(), Graphics.colours['black'], int(powerup.x), int(powerup.y))

    effects = ", ".join(f"{name} {ticks // 60}s" for name, ticks in state["effects"].items())
    hud = (
        f"Score: {state['score']}   High: {state['best']}   Lives: {state['lives']}   "
        f"Shields: {state['shields']}   Level: {state['level']}   {effects}"
    )
    gfx.text_at(hud, Graphics.colours['hud'], 10, gfx.height - 22, font_size=22, centred=False)


def draw_runner(gfx: Graphics, state: dict[str, Any], baseline: float) -> None:
    """Paint one runner snapshot, with the road sloping down from left to right."""

    screen = gfx.screen
    screen.fill(Graphics.colours['black'])

    # Road
    pygame.draw.polygon(
        screen,
        (34, 34, 34),
        [(0, baseline - 20), (gfx.width, baseline), (gfx.width, gfx.height), (0, gfx.height)],
    )
    pygame.draw.line(screen, Graphics.colours['ground'], (0, baseline - 20), (gfx.width, baseline), 2)

    for particle in state["particles"]:
        fade = particle.life / particle.max_life
        colour = tuple(int(c * fade) for c in Graphics.colours['white'])
        pygame.draw.circle(screen, colour, (particle.x, particle.y), particle.size)

    for obstacle in state["obstacles"]:
        colour = Graphics.obstacle_colours[obstacle.kind]
        rect = pygame.Rect(obstacle.x, obstacle.y, obstacle.w, obstacle.h)
        if obstacle.kind is ObstacleKind.TIRE:
            pygame.draw.ellipse(screen, colour, rect)
        elif obstacle.kind is ObstacleKind.CONE:
            pygame.draw.polygon(screen, colour, [rect.midtop, rect.bottomleft, rect.bottomright])
        else:
            pygame.draw.rect(screen, colour, rect)

    for powerup in state["powerups"]:
        rect = pygame.Rect(powerup.x, powerup.y, powerup.w, powerup.h)
        pygame.draw.rect(screen, Graphics.powerup_colours[powerup.kind], rect, border_radius=6)

    runner = state["runner"]
    pygame.draw.circle(screen, Graphics.colours['ball'], (runner.x, runner.y), runner.r)
    if "shield" in state["effects"]:
        pygame.draw.circle(screen, Graphics.colours['shield'], (runner.x, runner.y), runner.r + 5, 2)

    gfx.text_at(f"Score: {state['score']}", Graphics.colours['white'], gfx.width - 150, 12, centred=False)
    gfx.text_at(f"High: {state['best']}", Graphics.colours['white'], gfx.width - 150, 36, centred=False)
    gfx.text_at(state["difficulty"], Graphics.colours['hud'], 10, 12, centred=False)


def game_loop(game: BreakoutGame | RunnerGame, gfx: Graphics, fps: int = 60) -> bool:
    """
    Drive a game until the user quits.

    Args:
        game: The simulation to drive.
        gfx: Window to paint into.
        fps: Frame rate; the simulation ticks once per frame.

    Returns:
        bool: True if the user asked to quit (window close, Q or Escape).

    Behaviour:
        - Mouse motion steers the paddle; arrow keys hold it left or right.
        - Space, the up arrow or a left click launches (start, release or jump).
        - P pauses, R restarts.
        - A click or a key continues after a cleared breakout level.
    """

    is_breakout = isinstance(game, BreakoutGame)
    overlay: tuple[str, str, tuple[int, int, int]] | None = None
    message = ""
    message_frames = 0

    while True:
        # Handle pending events
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return True

            elif event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_q, pygame.K_ESCAPE):
                    return True
                elif game.phase is Phase.WON:
                    game.on_continue()
                elif event.key in (pygame.K_SPACE, pygame.K_UP):
                    game.on_jump_or_release()
                elif event.key == pygame.K_p:
                    game.on_pause_toggle()
                elif event.key == pygame.K_r:
                    game.on_restart()
                elif event.key == pygame.K_LEFT:
                    game.on_hold_left(True)
                elif event.key == pygame.K_RIGHT:
                    game.on_hold_right(True)

            elif event.type == pygame.KEYUP:
                if event.key == pygame.K_LEFT:
                    game.on_hold_left(False)
                elif event.key == pygame.K_RIGHT:
                    game.on_hold_right(False)

            elif event.type == pygame.MOUSEMOTION:
                game.on_move_to(event.pos[0])

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                if game.phase is Phase.WON:
                    game.on_continue()
                else:
                    game.on_jump_or_release()

        game.tick()

        for e in game.drain_events():
            overlay, message, message_frames = _handle_event(e, overlay, message, message_frames)

        if game.phase is Phase.RUNNING:
            overlay = None

        state = game.snapshot()
        if is_breakout:
            draw_breakout(gfx, state)
        else:
            draw_runner(gfx, state, game.baseline)

        if message_frames > 0:
            message_frames -= 1
            gfx.text_at(message, Graphics.colours['message'], gfx.width // 2, gfx.height // 2 + 60)

        if game.phase is Phase.IDLE:
            gfx.overlay("Ready", "Press space or click to start", Graphics.colours['advance'])
        elif game.phase is Phase.PAUSED:
            gfx.overlay("Paused", "Press P to resume", Graphics.colours['white'])
        elif overlay is not None:
            gfx.overlay(*overlay)

        gfx.display(fps)


def _handle_event(
    event: GameEvent,
    overlay: tuple[str, str, tuple[int, int, int]] | None,
    message: str,
    message_frames: int,
) -> tuple[tuple[str, str, tuple[int, int, int]] | None, str, int]:
    if event.kind is EventKind.MESSAGE:
        return overlay, event.text or "", 90

    if event.kind is EventKind.LOST:
        logger.debug("game over overlay at score %d", event.score)
        return ("GAME OVER", f"Score: {event.score}   Press R to restart", Graphics.colours['die']), message, 0

    if event.kind is EventKind.LEVEL_TRANSITION and event.plan is not None:
        text = f"Level {event.plan.level}: {event.plan.rows} rows. Click to continue"
        return ("LEVEL CLEARED", text, Graphics.colours['advance']), message, 0

    return overlay, message, message_frames


def run(game: BreakoutGame | RunnerGame, fps: int = 60) -> int:
    """Open a window sized to the game and run it. Returns 0 when the user quits."""

    caption = "Breakout" if isinstance(game, BreakoutGame) else "Runner"
    gfx = Graphics(game.width, game.height, caption)
    game_loop(game, gfx, fps=fps)
    # Anything scored since the last level or run ended
    game.best.save()
    return 0
