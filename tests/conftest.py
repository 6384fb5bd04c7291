import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def disable_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("time.sleep", lambda *_args, **_kwargs: None)


@pytest.fixture(autouse=True)
def isolated_premium_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "ASTRALGATE_DATABASE_URL",
        "ASTRALGATE_STRICT_INVARIANTS",
        "ASTRALGATE_GATE_CATALOGUE_PATH",
        "ASTRALGATE_GATE_CATALOGUE_URL",
        "ASTRALGATE_RNG_SEED",
    ):
        monkeypatch.delenv(name, raising=False)
