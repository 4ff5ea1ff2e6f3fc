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


"""Tests for command line parsing and game construction."""

import os

import pytest

from minigames.breakout import BreakoutGame
from minigames.cli import DEFAULT_SCORES, build_parser, create_game, main
from minigames.progression import Difficulty, Phase
from minigames.runner import RunnerGame


class TestArguments:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.game == "breakout"
        assert args.difficulty == "easy"
        assert args.seed is None
        assert args.scores == DEFAULT_SCORES
        assert args.fps == 60
        assert not args.verbose

    def test_runner_options(self):
        args = build_parser().parse_args(["--game", "runner", "-d", "insane", "--seed", "7", "-v"])
        assert (args.game, args.difficulty, args.seed, args.verbose) == ("runner", "insane", 7, True)

    def test_bad_choice_exits(self):
        with pytest.raises(SystemExit) as excinfo:
            main(["--difficulty", "nightmare"])
        assert excinfo.value.code == 2

    def test_help_exits_cleanly(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--help"])
        assert excinfo.value.code == 0
        assert "--difficulty" in capsys.readouterr().out


class TestCreateGame:
    def test_breakout(self, tmp_path):
        args = build_parser().parse_args(["--scores", str(tmp_path / "s.json"), "--seed", "1"])
        game = create_game(args)
        assert isinstance(game, BreakoutGame)
        assert game.phase is Phase.IDLE

    def test_runner_with_difficulty(self, tmp_path):
        args = build_parser().parse_args(
            ["--game", "runner", "--difficulty", "hard", "--scores", str(tmp_path / "s.json")]
        )
        game = create_game(args)
        assert isinstance(game, RunnerGame)
        assert game.difficulty is Difficulty.HARD

    def test_seed_makes_games_repeatable(self, tmp_path):
        argv = ["--seed", "3", "--scores", str(tmp_path / "s.json")]
        first = create_game(build_parser().parse_args(argv))
        second = create_game(build_parser().parse_args(argv))
        assert (first.brick_hits() == second.brick_hits()).all()

    def test_scores_written_where_asked(self, tmp_path):
        path = tmp_path / "deep" / "scores.json"
        args = build_parser().parse_args(["--scores", str(path)])
        game = create_game(args)
        game.start()
        game.best.submit(5)
        assert not os.path.exists(path)
        assert game.best.save()
        assert os.path.exists(path)
