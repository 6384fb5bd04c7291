import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from astralgate.application.services.balance_tables import UPGRADE_SCALE
from astralgate.domain.errors import PremiumInvariantError
from astralgate.domain.models.premium import (
    MAX_BALANCE,
    PremiumAccount,
    PremiumTier,
    PurchaseStatus,
    UpgradeKind,
)


class PremiumAccountLedgerTests(unittest.TestCase):
    def test_new_account_starts_empty(self) -> None:
        account = PremiumAccount(player_id="p1")

        self.assertEqual(0, account.balance)
        self.assertEqual(PremiumTier.NONE, account.tier)
        self.assertEqual({}, account.upgrade_levels)
        self.assertEqual(0, account.next_free_roll("astral"))

    def test_debit_clamps_at_zero(self) -> None:
        account = PremiumAccount(player_id="p1", balance=30)

        account.debit(10)
        self.assertEqual(20, account.balance)
        account.debit(1_000)
        self.assertEqual(0, account.balance)

    def test_credit_and_can_afford(self) -> None:
        account = PremiumAccount(player_id="p1")

        account.credit(25)

        self.assertTrue(account.can_afford(25))
        self.assertFalse(account.can_afford(26))

    def test_credit_rejects_overflow_and_negative_amounts(self) -> None:
        account = PremiumAccount(player_id="p1", balance=MAX_BALANCE - 1)

        with self.assertRaises(PremiumInvariantError):
            account.credit(2)
        with self.assertRaises(PremiumInvariantError):
            account.credit(-1)
        with self.assertRaises(PremiumInvariantError):
            account.debit(-1)
        self.assertEqual(MAX_BALANCE - 1, account.balance)


class PremiumAccountUpgradeTests(unittest.TestCase):
    def test_purchase_scales_exponentially_and_fails_without_funds(self) -> None:
        scale = {UpgradeKind.INVENTORY_SIZE: 10}
        account = PremiumAccount(player_id="p1", balance=100)

        first = account.purchase_upgrade(UpgradeKind.INVENTORY_SIZE, scale)

        self.assertEqual(PurchaseStatus.SUCCESS, first.status)
        self.assertEqual(10, first.cost)
        self.assertEqual(1, first.level)
        self.assertEqual(90, account.balance)

        second = account.purchase_upgrade(UpgradeKind.INVENTORY_SIZE, scale)

        self.assertEqual(PurchaseStatus.INSUFFICIENT_FUNDS, second.status)
        self.assertEqual(100, second.cost)
        self.assertEqual(90, account.balance)
        self.assertEqual(1, account.upgrade_level(UpgradeKind.INVENTORY_SIZE))

    def test_cost_matches_scale_power_for_every_scaled_kind(self) -> None:
        for kind, base in UPGRADE_SCALE.items():
            for level in range(4):
                account = PremiumAccount(player_id="p1", upgrade_levels={kind: level})
                self.assertEqual(base ** (level + 1), account.upgrade_cost(kind, UPGRADE_SCALE))

    def test_success_changes_balance_and_level_by_exact_amounts(self) -> None:
        account = PremiumAccount(player_id="p1", balance=10_000, upgrade_levels={UpgradeKind.MAX_STAMINA: 2})

        result = account.purchase_upgrade(UpgradeKind.MAX_STAMINA, UPGRADE_SCALE)

        self.assertTrue(result.succeeded)
        self.assertEqual(1_000, result.cost)
        self.assertEqual(9_000, account.balance)
        self.assertEqual(3, account.upgrade_level(UpgradeKind.MAX_STAMINA))

    def test_kind_without_scale_is_not_purchasable(self) -> None:
        account = PremiumAccount(player_id="p1", balance=10**9)

        result = account.purchase_upgrade(UpgradeKind.MAX_PETS_IN_COMBAT, UPGRADE_SCALE)

        self.assertEqual(PurchaseStatus.NOT_PURCHASABLE, result.status)
        self.assertIsNone(result.cost)
        self.assertEqual(10**9, account.balance)
        self.assertEqual(0, account.upgrade_level(UpgradeKind.MAX_PETS_IN_COMBAT))


class PremiumAccountRecordTests(unittest.TestCase):
    def test_snapshot_round_trips_through_record(self) -> None:
        account = PremiumAccount(
            player_id="p1",
            balance=42,
            tier=PremiumTier.SUBSCRIBER,
            upgrade_levels={UpgradeKind.ENCHANT_CAP: 2},
            free_roll_markers={"astral": 1234},
        )

        restored = PremiumAccount.from_record(account.snapshot())

        self.assertEqual(account, restored)

    def test_from_record_drops_unknown_upgrades_and_normalizes_tier(self) -> None:
        restored = PremiumAccount.from_record(
            {
                "player_id": 7,
                "balance": 5,
                "tier": "donator",
                "upgrade_levels": {"inventory_size": 3, "teleport_discount": 9},
            }
        )

        self.assertEqual("7", restored.player_id)
        self.assertEqual(PremiumTier.DONATOR, restored.tier)
        self.assertEqual({UpgradeKind.INVENTORY_SIZE: 3}, restored.upgrade_levels)

    def test_restore_rewinds_in_place(self) -> None:
        account = PremiumAccount(player_id="p1", balance=50)
        snapshot = account.snapshot()

        account.debit(20)
        account.set_free_roll_marker("astral", 99)
        account.restore(snapshot)

        self.assertEqual(50, account.balance)
        self.assertFalse(account.has_free_roll_marker("astral"))


if __name__ == "__main__":
    unittest.main()
