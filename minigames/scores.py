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
Best-score persistence.

A store is a tiny key -> number mapping. Storage problems are never fatal: a store that can't be
read reports zero, and one that can't be written keeps the value in memory for the session.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from typing import Protocol

logger = logging.getLogger(__name__)


class ScoreStore(Protocol):
    def get_best(self, key: str) -> float: ...

    def set_best(self, key: str, value: float) -> None: ...


class MemoryScoreStore():
    def __init__(self, initial: dict[str, float] | None = None) -> None:
        self.values = dict(initial or {})

    def get_best(self, key: str) -> float:
        return self.values.get(key, 0)

    def set_best(self, key: str, value: float) -> None:
        self.values[key] = value


class JsonScoreStore():
    def __init__(self, path: str) -> None:
        """
        Create a store backed by a single JSON object on disk.

        Args:
            path: File to read and write. Missing parent directories are created on first write.
        """

        self.path = path
        self.memory = MemoryScoreStore()
        self.loaded = False

    def _load(self) -> None:
        if self.loaded:
            return
        self.loaded = True

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return
        except (OSError, ValueError) as e:
            logger.warning("Can't read best scores from %s: %s", self.path, e)
            return

        if not isinstance(data, dict):
            logger.warning("Ignoring malformed best scores in %s", self.path)
            return

        for key, value in data.items():
            try:
                self.memory.set_best(key, float(value))
            except (TypeError, ValueError):
                logger.warning("Ignoring best score %r for %s", value, key)

    def get_best(self, key: str) -> float:
        self._load()
        return self.memory.get_best(key)

    def set_best(self, key: str, value: float) -> None:
        self._load()
        self.memory.set_best(key, value)

        try:
            folder = os.path.dirname(self.path) or "."
            os.makedirs(folder, exist_ok=True)

            # Write a sibling file and swap it in, so the old scores survive a failed write
            fd, temp_path = tempfile.mkstemp(prefix=".scores-", suffix=".tmp", dir=folder)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(self.memory.values, f, indent=2, sort_keys=True)
                os.replace(temp_path, self.path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(temp_path)
                raise
        except OSError as e:
            logger.warning("Can't save best scores to %s: %s", self.path, e)


class BestScore():
    def __init__(self, store: ScoreStore | None, key: str) -> None:
        """
        Track the best score for one mode (or one difficulty).

        Args:
            store: Persistent store, or None to keep the best in memory only.
            key: Store key for this mode, e.g. `game1_highScore`.

        Behaviour:
            - Any failure while reading the store is logged and the best starts at 0.
            - New bests are held in memory by `submit()` and only written out by `save()`, which the
              games call at the end of a level or run, never every frame.
        """

        self.store = store
        self.key = key
        self.value = 0
        self.dirty = False

        if store is not None:
            try:
                self.value = max(0, int(store.get_best(key) or 0))
            except Exception as e:
                # Stores are external collaborators; whatever goes wrong, carry on in memory
                logger.warning("Best score for %s unavailable: %s", key, e)
                self.value = 0

    def submit(self, score: int) -> bool:
        """
        Offer a score, keeping it only if it beats the current best.

        Returns:
            bool: True if this is a new best.
        """

        if score <= self.value:
            return False

        self.value = score
        self.dirty = True
        return True

    def save(self) -> bool:
        """
        Persist the best score if it has improved since the last save.

        Returns:
            bool: True if the store was written.
        """

        if not self.dirty or self.store is None:
            return False

        self.dirty = False
        try:
            self.store.set_best(self.key, self.value)
        except Exception as e:
            logger.warning("Best score for %s not saved: %s", self.key, e)
            return False

        logger.info("new best for %s: %d", self.key, self.value)
        return True
