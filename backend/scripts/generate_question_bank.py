#!/usr/bin/env python3
"""
Compile the question bank to disk.

Writes <out>/<domain>.ndjson for the five domains plus <out>/index.json.
Same --version and --seed always give the same item files.

USAGE:
  cd backend && python scripts/generate_question_bank.py --version v1 --seed 1337 --out question_bank/v1
"""
import argparse
import json
import logging
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BACKEND_DIR))

from striker.core.config import get_settings  # noqa: E402
from striker.services.bank_compiler import compile_bank  # noqa: E402


def main(argv=None):
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Deterministic question-bank compiler")
    parser.add_argument("--version", default=settings.bank_version, help="Bank version tag (default: %(default)s)")
    parser.add_argument("--seed", type=int, default=settings.bank_seed, help="Master seed (default: %(default)s)")
    parser.add_argument("--out", default=None, help="Output directory (default: question_bank/<version>)")
    parser.add_argument(
        "--generated-at",
        default=None,
        help="Fixed manifest timestamp, e.g. 2024-01-01T00:00:00.000Z (default: now)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    out_dir = Path(args.out or f"question_bank/{args.version}")
    try:
        manifest = compile_bank(
            args.version,
            args.seed,
            out_dir,
            targets=settings.target_counts(),
            generated_at=args.generated_at,
        )
    except OSError as e:
        print(f"Error: could not write bank to {out_dir}: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(manifest.model_dump(by_alias=True), indent=2))
    print(f"\n--- Bank Summary ---", file=sys.stderr)
    print(f"Output: {out_dir}", file=sys.stderr)
    print(f"Items: {manifest.totals['all']} ({manifest.totals['duplicates']} duplicate hash(es))", file=sys.stderr)
    print(f"---", file=sys.stderr)


if __name__ == "__main__":
    main()
