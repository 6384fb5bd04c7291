from __future__ import annotations

import argparse
from typing import Sequence

from astralgate.application.services.premium_service import PremiumService
from astralgate.application.services.reward_resolver import collectible_name
from astralgate.application.services.balance_tables import COLLECTIBLE_RARITY, COLLECTIBLE_STORYLINE
from astralgate.domain.models.premium import UpgradeKind
from astralgate.domain.models.reward import CollectibleDescriptor
from astralgate.infrastructure.inmemory.inmemory_player import InMemoryCompanion, InMemoryPlayer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="astralgate", description="Premium ledger, upgrades and gate rolls.")
    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="Show a player's premium account.")
    show.add_argument("--player", required=True)

    grant = sub.add_parser("grant", help="Credit ILP to a player.")
    grant.add_argument("--player", required=True)
    grant.add_argument("--amount", type=int, required=True)

    buy = sub.add_parser("buy", help="Buy the next level of a permanent upgrade.")
    buy.add_argument("--player", required=True)
    buy.add_argument("--upgrade", required=True, choices=[kind.value for kind in UpgradeKind])

    roll = sub.add_parser("roll", help="Roll a gate for a sample player.")
    roll.add_argument("--player", required=True)
    roll.add_argument("--gate", required=True)
    roll.add_argument("--count", type=int, default=1)
    roll.add_argument("--max-xp", type=int, default=1000)
    roll.add_argument("--gold", type=int, default=0)
    roll.add_argument("--companion", default="")
    roll.add_argument("--owned", default="", help="Comma separated soul variants the player already holds.")
    return parser


def _sample_player(args: argparse.Namespace) -> InMemoryPlayer:
    player = InMemoryPlayer(
        name=str(args.player),
        max_xp=int(args.max_xp),
        gold_on_hand=int(args.gold),
        companion=InMemoryCompanion(name=args.companion) if args.companion else None,
    )
    for variant in [value.strip() for value in str(args.owned or "").split(",") if value.strip()]:
        player.try_find_collectible(
            CollectibleDescriptor(
                name=collectible_name(variant),
                rarity=COLLECTIBLE_RARITY,
                description="",
                storyline=COLLECTIBLE_STORYLINE,
            )
        )
    return player


def run(service: PremiumService, argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "show":
        view = service.account_view(args.player)
        print(f"Player {view.player_id}: {view.balance} ILP ({view.tier})")
        for kind, cost in view.next_upgrade_costs.items():
            level = view.upgrade_levels.get(kind, 0)
            price = "not purchasable" if cost is None else f"next level costs {cost}"
            print(f"- {kind}: level {level}, {price}")
        for gate, marker in sorted(view.free_roll_markers.items()):
            print(f"- next free {gate} roll at {marker}")
        return 0

    if args.command == "grant":
        balance = service.grant_ilp(args.player, args.amount)
        print(f"Player {args.player} now has {balance} ILP.")
        return 0

    if args.command == "buy":
        result = service.purchase_upgrade(args.player, args.upgrade)
        if not result.succeeded:
            print(f"Could not buy {result.kind.value}: {result.status.value}.")
            return 1
        print(f"Bought {result.kind.value} level {result.level} for {result.cost} ILP.")
        return 0

    player = _sample_player(args)
    result = service.roll(args.player, player, args.gate, args.count)
    if not result.succeeded:
        print(f"Could not roll {args.gate}: {result.status.value}.")
        return 1
    billing = "free roll" if result.free else f"paid {result.cost}"
    print(f"{result.gate_name} x{result.count} ({billing}):")
    for label in result.reward_labels:
        print(f"- {label}")
    return 0
