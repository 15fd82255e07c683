"""
Bank compiler: runs the five domain generators at their target counts and
writes one NDJSON file per domain plus an index.json manifest.

Hash collisions are counted across the whole corpus (cross-domain included)
but never removed: every generated item is written. Uniqueness is enforced
downstream by the persistence layer, keyed on the hash.

Output is byte-identical for identical (version, seed, targets, generated_at).
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Union

from striker.generators.registry import GENERATOR_REGISTRY
from striker.models.bank import DOMAIN_ORDER, BankItem, BankManifest

logger = logging.getLogger(__name__)

DEFAULT_TARGETS: dict[str, int] = {
    "multiplication": 1200,
    "division": 900,
    "fractions": 1400,
    "patterns": 700,
    "word_problems": 900,
}

MANIFEST_NAME = "index.json"


def _iso_utc(ts: datetime) -> str:
    ts = ts.astimezone(timezone.utc)
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def serialize_item(item: BankItem) -> str:
    return json.dumps(item.to_record(), ensure_ascii=False, separators=(",", ":"))


def write_ndjson(path: Path, items: Iterable[BankItem]) -> int:
    """Write one compact JSON record per line. OSError propagates."""
    path.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        for item in items:
            f.write(serialize_item(item) + "\n")
            written += 1
    return written


def dedup_stats(items: Iterable[BankItem]) -> tuple[int, int]:
    """Return (distinct hashes, collisions). Nothing is removed."""
    seen: set[str] = set()
    duplicates = 0
    for item in items:
        if item.hash in seen:
            duplicates += 1
        else:
            seen.add(item.hash)
    return len(seen), duplicates


def generate_bank(version: str, seed: int, targets: Optional[dict[str, int]] = None) -> dict[str, list[BankItem]]:
    """Generate every domain in fixed order. Sequential by construction."""
    targets = {**DEFAULT_TARGETS, **(targets or {})}
    bank: dict[str, list[BankItem]] = {}
    for domain in DOMAIN_ORDER:
        key = domain.value
        items = GENERATOR_REGISTRY[key].generate(version, seed, targets[key])
        if len(items) < targets[key]:
            logger.debug(
                "[bank_compiler] %s: %d of %d iterations produced items",
                key, len(items), targets[key],
            )
        bank[key] = items
    return bank


def compile_bank(
    version: str,
    seed: int,
    out_dir: Union[str, Path],
    targets: Optional[dict[str, int]] = None,
    generated_at: Optional[Union[datetime, str]] = None,
) -> BankManifest:
    """
    Generate, serialize and summarise one bank.

    Args:
        version:      Content-bank version tag stamped on every item.
        seed:         Master seed; each domain XORs in its own salt.
        out_dir:      Directory for <domain>.ndjson files and index.json.
        targets:      Per-domain iteration counts (defaults to DEFAULT_TARGETS).
        generated_at: Timestamp for the manifest. Pass a fixed value for
                      byte-identical manifests; defaults to now (UTC).

    Returns:
        The manifest written to index.json.
    """
    out = Path(out_dir)
    bank = generate_bank(version, seed, targets)

    for domain, items in bank.items():
        write_ndjson(out / f"{domain}.ndjson", items)

    all_items = [item for items in bank.values() for item in items]
    unique, duplicates = dedup_stats(all_items)

    if generated_at is None:
        generated_at = datetime.now(timezone.utc)
    if isinstance(generated_at, datetime):
        generated_at = _iso_utc(generated_at)

    totals = {domain: len(items) for domain, items in bank.items()}
    totals["all"] = len(all_items)
    totals["uniqueByHash"] = unique
    totals["duplicates"] = duplicates

    manifest = BankManifest(version=version, seed=seed, generated_at=generated_at, totals=totals)
    (out / MANIFEST_NAME).write_text(
        json.dumps(manifest.model_dump(by_alias=True), ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )

    logger.info(
        "[bank_compiler] compiled %s seed=%d: %d items, %d unique, %d duplicate(s) kept",
        version, seed, len(all_items), unique, duplicates,
    )
    return manifest
