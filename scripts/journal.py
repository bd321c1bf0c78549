"""CLI for journal administration.

Usage:
    python scripts/journal.py --issue-token              # Mint one pre-issued identity token
    python scripts/journal.py --issue-token --count 5    # Mint five
    python scripts/journal.py --export UID ./out          # Write UID's trade_records.csv into ./out
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


async def do_issue_tokens(count: int) -> None:
    """Create pre-authenticated identities and print their tokens."""
    from app.config import settings
    from app.database import make_engine, make_session_factory
    from app.services.identity import IdentityService

    engine = make_engine(settings.database_url)
    identities = IdentityService(make_session_factory(engine))
    try:
        print("\n=== Issued Tokens ===")
        for _ in range(count):
            identity = await identities.issue_token()
            print(f"  uid={identity.uid}")
            print(f"  JOURNAL_INITIAL_AUTH_TOKEN={identity.token}")
        print("=====================\n")
    finally:
        await engine.dispose()


async def do_export(uid: str, directory: Path) -> bool:
    """Write one owner's journal to trade_records.csv."""
    from app.client.export import save_csv
    from app.config import settings
    from app.database import make_engine, make_session_factory
    from app.services.journal.export import EmptyExportError
    from app.services.journal.feed import LocalChangeFeed
    from app.services.journal.store import TradeStore

    engine = make_engine(settings.database_url)
    store = TradeStore(make_session_factory(engine), LocalChangeFeed(), settings.app_id)
    try:
        records = await store.list_records(uid)
        path = save_csv(records, directory)
    except EmptyExportError:
        print(f"No trade records to export for {uid}.")
        return False
    finally:
        await engine.dispose()

    print(f"Exported {len(records)} record(s) to {path}")
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Trade Journal administration")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--issue-token", action="store_true", help="Mint pre-issued identity tokens")
    group.add_argument("--export", nargs=2, metavar=("UID", "DIR"), help="Export a user's journal as CSV")
    parser.add_argument("--count", type=int, default=1, help="Number of tokens to issue")
    args = parser.parse_args()

    if args.issue_token:
        if args.count < 1:
            parser.error("--count must be at least 1")
        asyncio.run(do_issue_tokens(args.count))
    elif args.export:
        uid, directory = args.export
        if not asyncio.run(do_export(uid, Path(directory))):
            sys.exit(1)


if __name__ == "__main__":
    main()
