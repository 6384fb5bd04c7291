from pathlib import Path
import logging
import os
import sys

from dotenv import load_dotenv

# Ensure the src directory is on sys.path when running as a script
_SRC_DIR = Path(__file__).resolve().parents[1]
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from astralgate.bootstrap import create_premium_service
from astralgate.domain.errors import PremiumInvariantError
from astralgate.presentation.cli import run


def main(argv=None) -> int:
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("ASTRALGATE_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        service = create_premium_service()
        return run(service, argv)
    except PremiumInvariantError as exc:
        print(f"Premium state error: {exc}")
        return 2
    except RuntimeError as exc:
        print("Premium store unavailable.")
        print(f"Reason: {exc}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
