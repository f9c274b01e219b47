"""
Seed the admin credential, default portfolio and starter projects.

Runs the same idempotent steps the web process runs at startup, for
deployments that set BOOTSTRAP_ON_STARTUP=false.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portfolio_api.bootstrap import ensure_admin, ensure_profile, seed_projects
from portfolio_api.config import get_settings
from portfolio_api.dependencies import get_db_client

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Portfolio first-run bootstrap")
    parser.add_argument(
        "--skip-projects",
        action="store_true",
        help="Do not insert the starter projects",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Override DATABASE_URL",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    settings = get_settings()
    if args.database_url:
        settings.database_url = args.database_url
    if not settings.database_url:
        logger.warning("DATABASE_URL is not set; seeding an in-memory database has no effect")

    db = get_db_client()
    try:
        created = ensure_admin(db, settings)
        logger.info("Admin %s", "created" if created else "already present")
        ensure_profile(db)
        if not args.skip_projects:
            seed_projects(db)
    except Exception as exc:
        logger.exception("Bootstrap failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
