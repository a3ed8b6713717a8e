#!/usr/bin/env python3
"""
Cosmic profile reader. Prints an address's on-chain profile from Base and,
with --sync, overwrites its cached session in the local store.

Usage:
  python read_profile.py 0xabc...            # read only
  python read_profile.py 0xabc... --sync     # read and cache
  python read_profile.py 0xabc... --match 0xdef...
  python read_profile.py 0xabc... --create-profile   # needs SIGNER_PRIVATE_KEY
"""

from __future__ import annotations

import argparse
import json
import sys

from cosmic_backend.chain import connect_contract
from cosmic_backend.config import get_settings
from cosmic_backend.core.exceptions import CosmicBackendError
from cosmic_backend.cosmic_logging import get_logger
from cosmic_backend.database import get_database
from cosmic_backend.services.fortune import element_name, fortune_cooldown_remaining
from cosmic_backend.services.profile_sync import (
    claim_fortune_onchain,
    compute_match,
    create_profile_onchain,
    refresh_profile,
)

logger = get_logger("read_profile")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Read a cosmic profile from chain")
    parser.add_argument("address", help="Wallet address (0x...)")
    parser.add_argument("--sync", action="store_true", help="Write the profile into the session cache")
    parser.add_argument("--match", metavar="OTHER", help="Compute and record compatibility with OTHER")
    parser.add_argument("--create-profile", action="store_true", help="Send createProfile() from the configured signer")
    parser.add_argument("--claim-fortune", action="store_true", help="Send claimDailyFortune() from the configured signer")
    args = parser.parse_args(argv)

    settings = get_settings()
    contract = connect_contract(settings)

    try:
        contract.ensure_network()
        if args.create_profile or args.claim_fortune:
            db = get_database(settings.db_path, url=settings.database_url)
            action = create_profile_onchain if args.create_profile else claim_fortune_onchain
            recorded = action(db, contract)
            print(f"tx {recorded.tx_hash} confirmed, activity id={recorded.activity_id}")
        profile = contract.get_profile(args.address)
        if profile is None:
            print(f"{args.address}: no cosmic profile")
        else:
            out = profile.as_cache_fields()
            out["element_name"] = element_name(profile.element)
            out["fortune_cooldown_sec"] = fortune_cooldown_remaining(profile.last_fortune)
            print(json.dumps(out, indent=2))

        if args.sync or args.match:
            db = get_database(settings.db_path, url=settings.database_url)
            if args.sync:
                session = refresh_profile(db, contract, args.address)
                print(f"cached session id={session.id} has_profile={session.has_profile}")
            if args.match:
                outcome = compute_match(db, contract, args.address, args.match)
                print(f"compatibility with {args.match}: {outcome.compatibility}%")
    except CosmicBackendError as e:
        logger.error("read_profile_failed", wallet_id=args.address, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
