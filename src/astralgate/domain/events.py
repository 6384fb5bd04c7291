from dataclasses import dataclass


@dataclass
class UpgradePurchasedEvent:
    player_id: str
    upgrade_kind: str
    new_level: int
    cost: int
    balance_after: int


@dataclass
class GateRolledEvent:
    player_id: str
    gate_name: str
    roll_count: int
    free: bool
    cost: int
    rewards: tuple[str, ...]


@dataclass
class IlpGrantedEvent:
    player_id: str
    amount: int
    balance_after: int
