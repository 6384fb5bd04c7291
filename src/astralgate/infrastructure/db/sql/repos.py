from __future__ import annotations

import json
import logging
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from astralgate.domain.models.premium import PremiumAccount
from astralgate.domain.repositories import PremiumAccountRepository

from . import connection


CREATE_PREMIUM_ACCOUNT_TABLE = """
CREATE TABLE IF NOT EXISTS premium_account (
    player_id VARCHAR(64) NOT NULL PRIMARY KEY,
    ilp BIGINT NOT NULL DEFAULT 0,
    premium_tier INTEGER NOT NULL DEFAULT 0,
    upgrade_levels_json TEXT,
    free_roll_markers_json TEXT
)
"""

_logger = logging.getLogger(__name__)


def ensure_schema(engine: Engine) -> None:
    with engine.begin() as conn:
        conn.execute(text(CREATE_PREMIUM_ACCOUNT_TABLE))


def _load_json_map(raw: Any, *, column: str, player_id: str) -> dict[str, Any]:
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return raw
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError):
        _logger.warning(
            "Unreadable premium column, treating as empty",
            extra={"player_id": player_id, "column": column},
        )
        return {}
    return payload if isinstance(payload, dict) else {}


class SqlPremiumAccountRepository(PremiumAccountRepository):
    """Premium accounts stored one row per player.

    Both maps are stored as JSON text so the whole record is written in a single
    statement inside one transaction.
    """

    def __init__(self, session_factory=None) -> None:
        self._session_factory = session_factory

    def _sessions(self):
        return self._session_factory or connection.SessionLocal

    def get(self, player_id: str) -> Optional[PremiumAccount]:
        key = str(player_id)
        with self._sessions()() as session:
            row = session.execute(
                text(
                    """
                    SELECT player_id, ilp, premium_tier, upgrade_levels_json, free_roll_markers_json
                    FROM premium_account
                    WHERE player_id = :pid
                    """
                ),
                {"pid": key},
            ).first()
        if row is None:
            return None
        return PremiumAccount.from_record(
            {
                "player_id": row.player_id,
                "balance": row.ilp,
                "tier": row.premium_tier,
                "upgrade_levels": _load_json_map(row.upgrade_levels_json, column="upgrade_levels_json", player_id=key),
                "free_roll_markers": _load_json_map(
                    row.free_roll_markers_json, column="free_roll_markers_json", player_id=key
                ),
            }
        )

    def save(self, account: PremiumAccount) -> None:
        record = account.snapshot()
        with self._sessions().begin() as session:
            dialect = session.bind.dialect.name if session.bind is not None else "mysql"
            if dialect == "mysql":
                statement = text(
                    """
                    INSERT INTO premium_account (player_id, ilp, premium_tier, upgrade_levels_json, free_roll_markers_json)
                    VALUES (:pid, :ilp, :tier, :levels, :markers)
                    ON DUPLICATE KEY UPDATE
                        ilp = VALUES(ilp),
                        premium_tier = VALUES(premium_tier),
                        upgrade_levels_json = VALUES(upgrade_levels_json),
                        free_roll_markers_json = VALUES(free_roll_markers_json)
                    """
                )
            else:
                statement = text(
                    """
                    INSERT INTO premium_account (player_id, ilp, premium_tier, upgrade_levels_json, free_roll_markers_json)
                    VALUES (:pid, :ilp, :tier, :levels, :markers)
                    ON CONFLICT(player_id) DO UPDATE SET
                        ilp = excluded.ilp,
                        premium_tier = excluded.premium_tier,
                        upgrade_levels_json = excluded.upgrade_levels_json,
                        free_roll_markers_json = excluded.free_roll_markers_json
                    """
                )
            session.execute(
                statement,
                {
                    "pid": record["player_id"],
                    "ilp": record["balance"],
                    "tier": record["tier"],
                    "levels": json.dumps(record["upgrade_levels"], sort_keys=True),
                    "markers": json.dumps(record["free_roll_markers"], sort_keys=True),
                },
            )
