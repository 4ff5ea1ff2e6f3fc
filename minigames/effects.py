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
Timed and single-use modifiers (powerup effects).

An effect is applied by a callable that makes its change and hands back another callable able to
undo exactly that change. The manager keeps at most one instance of each kind, counts deadlines
down in ticks, and always undoes the previous instance before a re-application.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Hashable, Iterable

logger = logging.getLogger(__name__)

Restore = Callable[[], None]


def _name(kind: Hashable) -> str:
    return kind.value if isinstance(kind, Enum) else str(kind)


class Effect():
    def __init__(self, kind: Hashable, restore: Restore | None, remaining: int | None) -> None:
        """
        Record an active effect.

        Args:
            kind: The effect kind (normally an enum member).
            restore: Callable putting back whatever the effect overrode, or None if nothing needs undoing.
            remaining: Ticks left before expiry, or None for effects that are consumed on use.
        """

        assert remaining is None or remaining > 0, "effects must start with a positive lifetime"

        self.kind = kind
        self.restore = restore
        self.remaining = remaining

    def undo(self) -> None:
        if self.restore is not None:
            self.restore()


class EffectManager():
    def __init__(self) -> None:
        self._active: dict[Hashable, Effect] = {}
        self._charges: dict[Hashable, int] = {}

    def apply(self, kind: Hashable, activate: Callable[[], Restore | None], duration: int | None) -> None:
        """
        Activate an effect, replacing any instance of the same kind.

        Args:
            kind: The effect kind.
            activate: Makes the change and returns a restore callable that captures the pre-effect state.
            duration: Lifetime in ticks, or None for an effect that lasts until consumed.

        Behaviour:
            - An existing instance is reversed first, so its saved state is put back before the new
              instance snapshots anything. Effects never stack.
        """

        if kind in self._active:
            self.expire(kind)

        restore = activate()
        self._active[kind] = Effect(kind, restore, duration)
        logger.debug("effect %s applied for %s ticks", _name(kind), duration)

    def expire(self, kind: Hashable) -> bool:
        """
        End an effect, restoring what it overrode.

        Returns:
            bool: True if the effect was active.
        """

        effect = self._active.pop(kind, None)
        if effect is None:
            return False

        effect.undo()
        logger.debug("effect %s expired", _name(kind))
        return True

    def consume(self, kind: Hashable) -> bool:
        """Use up a single-use effect (for example, a shield absorbing a hit)."""

        return self.expire(kind)

    def tick(self) -> list[Hashable]:
        """
        Count every timed effect down by one tick.

        Returns:
            list: The kinds that expired on this tick.
        """

        expired = []
        for kind, effect in list(self._active.items()):
            if effect.remaining is None:
                continue
            effect.remaining -= 1
            if effect.remaining <= 0:
                expired.append(kind)

        for kind in expired:
            self.expire(kind)

        return expired

    def clear_all(self) -> None:
        """Force-expire every active effect and zero all charge counters."""

        for kind in list(self._active):
            self.expire(kind)
        self._charges.clear()

    def is_active(self, kind: Hashable) -> bool:
        return kind in self._active

    def remaining(self, kind: Hashable) -> int | None:
        """
        Ticks left on an effect.

        Returns:
            int | None: Remaining ticks, 0 if the effect is not active, or None for a consumable effect.
        """

        effect = self._active.get(kind)
        if effect is None:
            return 0
        return effect.remaining

    def active_kinds(self) -> list[Hashable]:
        return sorted(self._active, key=_name)

    def add_charge(self, kind: Hashable, count: int = 1) -> int:
        """Add stackable single-use charges (for example, breakout shields). Returns the new count."""

        self._charges[kind] = self._charges.get(kind, 0) + count
        return self._charges[kind]

    def use_charge(self, kind: Hashable) -> bool:
        """
        Spend one charge.

        Returns:
            bool: True if a charge was available and has been spent.
        """

        count = self._charges.get(kind, 0)
        if count <= 0:
            return False
        self._charges[kind] = count - 1
        return True

    def charges(self, kind: Hashable) -> int:
        return self._charges.get(kind, 0)

    def names(self, kinds: Iterable[Hashable] | None = None) -> list[str]:
        """Plain string names of the given kinds (defaults to the active ones), for snapshots."""

        if kinds is None:
            kinds = self.active_kinds()
        return [_name(kind) for kind in kinds]
