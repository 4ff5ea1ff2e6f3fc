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

"""Notifications a game queues for its driver (overlays, level scenes, HUD messages)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .progression import LevelPlan


class EventKind(Enum):
    WON_LEVEL = "won-level"
    LOST = "lost"
    LEVEL_TRANSITION = "level-transition"
    MESSAGE = "message"


@dataclass(frozen=True)
class GameEvent:
    kind: EventKind
    score: int
    plan: LevelPlan | None = None
    text: str | None = None


class EventQueue():
    def __init__(self) -> None:
        self._pending: list[GameEvent] = []

    def emit(self, kind: EventKind, score: int, plan: LevelPlan | None = None, text: str | None = None) -> GameEvent:
        event = GameEvent(kind, score, plan=plan, text=text)
        self._pending.append(event)
        return event

    def message(self, text: str, score: int) -> GameEvent:
        return self.emit(EventKind.MESSAGE, score, text=text)

    def drain(self) -> list[GameEvent]:
        """Hand over (and forget) everything queued since the last drain."""

        events, self._pending = self._pending, []
        return events

    def clear(self) -> None:
        self._pending.clear()
