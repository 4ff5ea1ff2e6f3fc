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

"""Command line entry point: pick a game, then play it in a pygame window."""

from __future__ import annotations

import argparse
import logging
import os
import traceback
from random import Random
from typing import Optional, Sequence

from .breakout import BreakoutGame
from .progression import Difficulty
from .runner import RunnerGame
from .scores import JsonScoreStore

DEFAULT_SCORES = os.path.join("~", ".minigames", "scores.json")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Two retro mini-games: a brick-breaker with powerups, and an endless runner."
    )
    parser.add_argument("--game", "-g", choices=["breakout", "runner"], default="breakout",
                        help="Which game to play. Default: breakout")
    parser.add_argument("--difficulty", "-d", choices=[d.value for d in Difficulty], default="easy",
                        help="Runner difficulty. Default: easy")
    parser.add_argument("--seed", "-s", type=int,
                        help="Seed for the random number generator, for repeatable games.")
    parser.add_argument("--scores", default=DEFAULT_SCORES,
                        help=f"File to keep best scores in. Default: {DEFAULT_SCORES}")
    parser.add_argument("--fps", type=int, default=60,
                        help="Frames per second (one simulation tick per frame). Default: 60")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log debug messages.")
    return parser


def create_game(args: argparse.Namespace) -> BreakoutGame | RunnerGame:
    """Build the chosen game from parsed arguments, with its RNG and best-score store."""

    rng = Random(args.seed)
    store = JsonScoreStore(os.path.expanduser(args.scores))
    if args.game == "runner":
        return RunnerGame(difficulty=args.difficulty, rng=rng, store=store)
    return BreakoutGame(rng=rng, store=store)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    # pygame is only needed once there's a window to open
    import pygame

    from .frontend import run

    # Initialise pygame
    pygame.init()

    try:
        rc = run(create_game(args), fps=args.fps)
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130
    except Exception:
        # Print the full traceback like the default handler
        traceback.print_exc()
        return 1
    finally:
        pygame.quit()

    return rc


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
