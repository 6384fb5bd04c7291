import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from astralgate.application.dtos import RollStatus
from astralgate.application.services.gate_registry import GateRegistry
from astralgate.application.services.gate_roll_engine import GateRollEngine
from astralgate.application.services.reward_applier import RewardApplier
from astralgate.application.services.reward_resolver import collectible_name
from astralgate.domain.capabilities import GateDefinition
from astralgate.domain.errors import PremiumInvariantError
from astralgate.domain.models.premium import PremiumAccount
from astralgate.domain.models.reward import (
    RewardKind,
    RewardMagnitude,
    RewardTarget,
    RewardToken,
    collectible_reward,
    material_reward,
    parse_reward_token,
)
from astralgate.infrastructure.gates.table_gate import TableGateDefinition
from astralgate.infrastructure.inmemory.inmemory_player import InMemoryPlayer


class _ScriptedGate(GateDefinition):
    def __init__(self, name: str, tokens, *, cost_per_roll: int = 10, interval: int = 5, now: int = 100) -> None:
        self.name = name
        self.max_rolls = 5
        self.now = now
        self.tokens = [parse_reward_token(token) if isinstance(token, str) else token for token in tokens]
        self.cost_per_roll = cost_per_roll
        self.interval = interval
        self.rolls = 0
        self.spend_calls = 0

    def progress_signal(self, player) -> int:
        return self.now

    def free_roll_interval(self) -> int:
        return self.interval

    def roll_cost(self, count: int) -> int:
        return self.cost_per_roll * count

    def can_afford(self, player, account, count: int) -> bool:
        return account.can_afford(self.roll_cost(count))

    def spend_currency(self, player, account, count: int) -> int:
        self.spend_calls += 1
        account.debit(self.roll_cost(count))
        return self.roll_cost(count)

    def roll(self) -> RewardToken:
        token = self.tokens[self.rolls % len(self.tokens)]
        self.rolls += 1
        return token


class _GoldGate(_ScriptedGate):
    def can_afford(self, player, account, count: int) -> bool:
        return player.gold >= self.roll_cost(count)

    def spend_currency(self, player, account, count: int) -> int:
        self.spend_calls += 1
        player.spend_gold(self.roll_cost(count))
        return self.roll_cost(count)


class _BrokenXpPlayer(InMemoryPlayer):
    def gain_xp(self, amount: int) -> None:
        raise RuntimeError("xp store offline")


class GateRollEngineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.gate = _ScriptedGate("astral", ["xp:player:lg", "currency:player:sm", "collectible:player:Red"])
        self.engine = GateRollEngine(GateRegistry([self.gate]))
        self.player = InMemoryPlayer(name="hero", max_xp=1000)

    def test_unknown_gate_changes_nothing(self) -> None:
        account = PremiumAccount(player_id="p1", balance=100)

        result = self.engine.roll(account, self.player, "nowhere", 1)

        self.assertEqual(RollStatus.UNKNOWN_GATE, result.status)
        self.assertEqual(100, account.balance)
        self.assertEqual({}, dict(self.player.statistics))

    def test_count_above_hard_cap_cannot_roll(self) -> None:
        account = PremiumAccount(player_id="p1", balance=1_000, free_roll_markers={"astral": 500})

        for count in (0, 6):
            with self.subTest(count=count):
                result = self.engine.roll(account, self.player, "astral", count)
                self.assertEqual(RollStatus.CANNOT_ROLL, result.status)
        self.assertEqual(1_000, account.balance)
        self.assertEqual(0, self.gate.rolls)

    def test_free_batch_charges_nothing_and_advances_marker_once(self) -> None:
        account = PremiumAccount(player_id="p1", balance=0, free_roll_markers={"astral": 100})

        result = self.engine.roll(account, self.player, "astral", 3)

        self.assertEqual(RollStatus.OK, result.status)
        self.assertTrue(result.free)
        self.assertEqual(0, result.cost)
        self.assertEqual(105, account.next_free_roll("astral"))
        self.assertEqual(3, len(result.rewards))
        self.assertEqual(0, self.gate.spend_calls)
        self.assertEqual(1, self.player.statistics["Astral Gate/Roll/Free"])
        self.assertEqual(1, self.player.statistics["Astral Gate/Gates/astral"])

    def test_paid_batch_is_billed_once_for_all_rolls(self) -> None:
        account = PremiumAccount(player_id="p1", balance=100, free_roll_markers={"astral": 500})

        result = self.engine.roll(account, self.player, "astral", 3)

        self.assertTrue(result.succeeded)
        self.assertFalse(result.free)
        self.assertEqual(30, result.cost)
        self.assertEqual(70, account.balance)
        self.assertEqual(1, self.gate.spend_calls)
        self.assertEqual(500, account.next_free_roll("astral"))
        self.assertEqual(1, self.player.statistics["Astral Gate/Roll/Currency"])
        self.assertNotIn("Astral Gate/Roll/Free", self.player.statistics)

    def test_insufficient_funds_aborts_before_rolling(self) -> None:
        account = PremiumAccount(player_id="p1", balance=29, free_roll_markers={"astral": 500})

        result = self.engine.roll(account, self.player, "astral", 3)

        self.assertEqual(RollStatus.INSUFFICIENT_FUNDS, result.status)
        self.assertEqual(29, account.balance)
        self.assertEqual(0, self.gate.rolls)
        self.assertEqual(0, self.player.xp)
        self.assertEqual({}, dict(self.player.statistics))

    def test_rewards_are_resolved_then_applied(self) -> None:
        account = PremiumAccount(player_id="p1", free_roll_markers={"astral": 0})
        self.player.collectibles[collectible_name("Red")] = None  # already owned

        result = self.engine.roll(account, self.player, "astral", 3)

        self.assertEqual(
            [parse_reward_token("xp:player:lg"), parse_reward_token("currency:player:sm"), material_reward("Red")],
            list(result.rewards),
        )
        self.assertEqual(100, self.player.xp)
        self.assertEqual(1_000, self.player.gold)
        self.assertEqual(1, self.player.materials.materials["CrystalRed"])

    def test_new_collectible_is_registered(self) -> None:
        gate = _ScriptedGate("souls", [collectible_reward("Blue")])
        engine = GateRollEngine(GateRegistry([gate]))
        account = PremiumAccount(player_id="p1")

        result = engine.roll(account, self.player, "souls", 2)

        self.assertEqual([collectible_reward("Blue"), material_reward("Blue")], list(result.rewards))
        self.assertTrue(self.player.has_collectible("Pet Soul: Blue"))
        self.assertEqual(1, self.player.materials.materials["CrystalBlue"])

    def test_failure_after_billing_restores_account(self) -> None:
        bad = RewardToken(kind=RewardKind.CURRENCY, target=RewardTarget.PLAYER, magnitude=RewardMagnitude.MAX)
        gate = _ScriptedGate("broken", [bad])
        engine = GateRollEngine(GateRegistry([gate]), applier=RewardApplier(strict=True))
        account = PremiumAccount(player_id="p1", balance=50, free_roll_markers={"broken": 500})

        with self.assertRaises(PremiumInvariantError):
            engine.roll(account, self.player, "broken", 2)

        self.assertEqual(50, account.balance)
        self.assertEqual(0, self.player.gold)

    def test_strict_rejection_on_gold_gate_charges_nothing(self) -> None:
        bad = RewardToken(kind=RewardKind.CURRENCY, target=RewardTarget.PLAYER, magnitude=RewardMagnitude.MAX)
        gate = _GoldGate("golden", [bad])
        engine = GateRollEngine(GateRegistry([gate]), applier=RewardApplier(strict=True))
        player = InMemoryPlayer(name="hero", gold_on_hand=500)

        with self.assertRaises(PremiumInvariantError):
            engine.roll(PremiumAccount(player_id="p1"), player, "golden", 2)

        self.assertEqual(0, gate.spend_calls)
        self.assertEqual(500, player.gold)
        self.assertEqual({}, dict(player.statistics))

    def test_failure_while_applying_refunds_gold_and_skips_statistics(self) -> None:
        gate = TableGateDefinition("golden", {"xp:player:sm": 1}, currency="gold", cost_per_roll=100)
        engine = GateRollEngine(GateRegistry([gate]))
        player = _BrokenXpPlayer(name="hero", gold_on_hand=500)
        account = PremiumAccount(player_id="p1", balance=7)

        with self.assertRaises(PremiumInvariantError):
            engine.roll(account, player, "golden", 2)

        self.assertEqual(500, player.gold)
        self.assertEqual(7, account.balance)
        self.assertEqual({}, dict(player.statistics))

    def test_unexpected_gate_error_is_reported_as_invariant_violation(self) -> None:
        gate = _ScriptedGate("empty", [])
        engine = GateRollEngine(GateRegistry([gate]))
        account = PremiumAccount(player_id="p1")

        with self.assertRaises(PremiumInvariantError):
            engine.roll(account, self.player, "empty", 1)

        self.assertFalse(account.has_free_roll_marker("empty"))


if __name__ == "__main__":
    unittest.main()
