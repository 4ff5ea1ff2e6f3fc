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


"""Tests for the timed and single-use effect manager."""

from enum import Enum

from minigames.effects import EffectManager


class Kind(Enum):
    WIDE = "wide"
    FAST = "fast"
    GUARD = "guard"


class Target:
    """Something with a value an effect can override."""

    def __init__(self, value=10):
        self.value = value

    def doubler(self):
        def activate():
            original = self.value
            self.value = original * 2

            def restore():
                self.value = original

            return restore

        return activate


class TestEffectManager:
    def test_apply_and_expire_restores_original(self):
        target = Target()
        effects = EffectManager()

        effects.apply(Kind.WIDE, target.doubler(), 5)
        assert target.value == 20
        assert effects.is_active(Kind.WIDE)

        assert effects.expire(Kind.WIDE)
        assert target.value == 10
        assert not effects.is_active(Kind.WIDE)
        assert not effects.expire(Kind.WIDE)

    def test_reapplying_does_not_stack(self):
        """Test that a second application starts from the restored value, not the modified one."""
        target = Target()
        effects = EffectManager()

        effects.apply(Kind.WIDE, target.doubler(), 5)
        effects.apply(Kind.WIDE, target.doubler(), 5)
        assert target.value == 20

        effects.expire(Kind.WIDE)
        assert target.value == 10

    def test_reapplying_resets_the_countdown(self):
        effects = EffectManager()
        effects.apply(Kind.FAST, lambda: None, 3)
        effects.tick()
        effects.tick()
        assert effects.remaining(Kind.FAST) == 1

        effects.apply(Kind.FAST, lambda: None, 3)
        assert effects.remaining(Kind.FAST) == 3

    def test_tick_expires_on_deadline(self):
        target = Target()
        effects = EffectManager()
        effects.apply(Kind.WIDE, target.doubler(), 3)

        assert effects.tick() == []
        assert effects.tick() == []
        assert effects.tick() == [Kind.WIDE]
        assert target.value == 10
        assert effects.remaining(Kind.WIDE) == 0

    def test_independent_expiry(self):
        effects = EffectManager()
        effects.apply(Kind.WIDE, lambda: None, 2)
        effects.apply(Kind.FAST, lambda: None, 4)

        effects.tick()
        effects.tick()
        assert effects.active_kinds() == [Kind.FAST]
        assert effects.remaining(Kind.FAST) == 2

    def test_consumable_effect_never_times_out(self):
        effects = EffectManager()
        effects.apply(Kind.GUARD, lambda: None, None)
        for _ in range(1000):
            effects.tick()

        assert effects.is_active(Kind.GUARD)
        assert effects.remaining(Kind.GUARD) is None
        assert effects.consume(Kind.GUARD)
        assert not effects.consume(Kind.GUARD)

    def test_clear_all_restores_everything_and_zeros_charges(self):
        wide = Target()
        fast = Target(3)
        effects = EffectManager()
        effects.apply(Kind.WIDE, wide.doubler(), 100)
        effects.apply(Kind.FAST, fast.doubler(), 100)
        effects.add_charge(Kind.GUARD, 2)

        effects.clear_all()

        assert (wide.value, fast.value) == (10, 3)
        assert effects.active_kinds() == []
        assert effects.charges(Kind.GUARD) == 0

    def test_charges_stack_and_spend(self):
        effects = EffectManager()
        assert effects.add_charge(Kind.GUARD) == 1
        assert effects.add_charge(Kind.GUARD) == 2

        assert effects.use_charge(Kind.GUARD)
        assert effects.use_charge(Kind.GUARD)
        assert not effects.use_charge(Kind.GUARD)
        assert effects.charges(Kind.GUARD) == 0

    def test_names_for_snapshots(self):
        effects = EffectManager()
        effects.apply(Kind.WIDE, lambda: None, 2)
        effects.apply(Kind.FAST, lambda: None, 2)
        assert effects.names() == ["fast", "wide"]
