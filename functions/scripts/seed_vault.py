"""
Seed (or reset and re-seed) the configured vault store with default content.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from vault.config import get_settings
from vault.dependencies import get_kv_store
from vault.seed import seed_defaults
from vault.stores import (
    COMMENTS_KEY,
    NOTIFICATIONS_KEY,
    SESSION_KEY,
    SITE_SETTINGS_KEY,
    USERS_KEY,
    WORKS_KEY,
    VaultStores,
)

logger = logging.getLogger(__name__)

ALL_KEYS = (
    USERS_KEY,
    WORKS_KEY,
    COMMENTS_KEY,
    SITE_SETTINGS_KEY,
    NOTIFICATIONS_KEY,
    SESSION_KEY,
)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the Creative Vault store")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete every vault document before seeding",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    settings = get_settings()
    kv = get_kv_store()
    if args.reset:
        for key in ALL_KEYS:
            kv.delete(key)
        logger.info("Cleared %d vault documents", len(ALL_KEYS))

    seeded = seed_defaults(
        VaultStores(kv),
        owner_email=settings.owner_email,
        owner_profile_id=settings.owner_profile_id,
        owner_display_name=settings.owner_display_name,
    )
    if not seeded:
        logger.info("Vault already seeded; nothing to do")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
