#!/usr/bin/env python3
"""
Seed Supabase with a compiled question bank.

Upserts every item of <bank_dir> into question_bank_items keyed on hash, so
re-running is safe and colliding items collapse to one row.

USAGE:
  cd backend && python scripts/seed_question_bank.py --bank-dir question_bank/v1
"""
import argparse
import logging
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BACKEND_DIR))

from striker.core.config import get_settings  # noqa: E402
from striker.core.deps import get_supabase_client  # noqa: E402
from striker.services.bank_store import TABLE, SupabaseBankStore, load_bank  # noqa: E402

logger = logging.getLogger("striker.seed")


def main(argv=None):
    settings = get_settings()
    parser = argparse.ArgumentParser(description=f"Upsert a compiled bank into Supabase ({TABLE})")
    parser.add_argument("--bank-dir", default=settings.bank_dir, help="Compiled bank directory (default: %(default)s)")
    parser.add_argument("--batch-size", type=int, default=500, help="Rows per upsert call")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    items = load_bank(args.bank_dir)
    if not items:
        print(f"Error: no items found under {args.bank_dir}", file=sys.stderr)
        sys.exit(1)

    try:
        store = SupabaseBankStore(get_supabase_client())
        written = store.upsert_items(items, batch_size=args.batch_size)
    except Exception as e:
        logger.error(f"[seed_question_bank] {e}", exc_info=True)
        sys.exit(1)

    logger.info("[seed_question_bank] upserted %d item(s) into %s", written, TABLE)


if __name__ == "__main__":
    main()
