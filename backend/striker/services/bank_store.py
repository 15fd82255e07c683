"""
Question-bank storage: reading compiled banks back and serving the
selector's working set.

The selector itself never queries storage; a store hands it a pool already
narrowed to a reasonable working set.
"""
from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Optional, Union

from striker.models.bank import DOMAIN_ORDER, BankItem

logger = logging.getLogger(__name__)

TABLE = "question_bank_items"


def load_bank(bank_dir: Union[str, Path]) -> list[BankItem]:
    """Load every <domain>.ndjson under bank_dir. Missing files are skipped with a warning."""
    bank_dir = Path(bank_dir)
    items: list[BankItem] = []
    for domain in DOMAIN_ORDER:
        path = bank_dir / f"{domain.value}.ndjson"
        if not path.exists():
            logger.warning("[bank_store.load_bank] %s not found, skipping", path)
            continue
        with open(path, encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    items.append(BankItem.model_validate(json.loads(line)))
    logger.info("[bank_store.load_bank] loaded %d item(s) from %s", len(items), bank_dir)
    return items


def bank_stats(items: list[BankItem]) -> dict:
    by_domain = Counter(str(item.domain) for item in items)
    by_difficulty = Counter(item.global_difficulty for item in items)
    return {
        "total": len(items),
        "by_domain": dict(by_domain),
        "by_difficulty": {str(k): v for k, v in sorted(by_difficulty.items())},
    }


class BankStore:
    def working_set(self, target_difficulty: int) -> list[BankItem]:
        raise NotImplementedError

    def get(self, item_id: str) -> Optional[BankItem]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def stats(self) -> dict:
        raise NotImplementedError


class InMemoryBankStore(BankStore):
    def __init__(self, items: Optional[list[BankItem]] = None):
        self._items: list[BankItem] = list(items or [])
        self._by_id = {item.id: item for item in self._items}

    def working_set(self, target_difficulty: int) -> list[BankItem]:
        # the whole bank; the selector samples it down
        return self._items

    def get(self, item_id: str) -> Optional[BankItem]:
        return self._by_id.get(item_id)

    def count(self) -> int:
        return len(self._items)

    def stats(self) -> dict:
        return bank_stats(self._items)


class SupabaseBankStore(BankStore):
    def __init__(self, supabase_client, working_set_limit: int = 500):
        self.sb = supabase_client
        self.working_set_limit = working_set_limit

    @staticmethod
    def to_row(item: BankItem) -> dict:
        return item.model_dump(mode="json")

    def upsert_items(self, items: list[BankItem], batch_size: int = 500) -> int:
        """Insert or update by hash; the table's unique hash index is the identity key."""
        # one row per hash: postgres rejects a batch that hits the same conflict key twice
        first_by_hash: dict[str, BankItem] = {}
        for item in items:
            first_by_hash.setdefault(item.hash, item)
        items = list(first_by_hash.values())
        written = 0
        for start in range(0, len(items), batch_size):
            batch = [self.to_row(item) for item in items[start:start + batch_size]]
            self.sb.table(TABLE).upsert(batch, on_conflict="hash").execute()
            written += len(batch)
        return written

    def working_set(self, target_difficulty: int) -> list[BankItem]:
        """Items within ±2 of the target, the row limit split evenly across domains."""
        lo = max(1, target_difficulty - 2)
        hi = min(6, target_difficulty + 2)
        per_domain = max(1, self.working_set_limit // len(DOMAIN_ORDER))
        items: list[BankItem] = []
        for domain in DOMAIN_ORDER:
            r = (
                self.sb.table(TABLE)
                .select("*")
                .eq("domain", domain.value)
                .gte("global_difficulty", lo)
                .lte("global_difficulty", hi)
                .limit(per_domain)
                .execute()
            )
            rows = getattr(r, "data", None) or []
            items.extend(BankItem.model_validate(row) for row in rows)
        return items

    def get(self, item_id: str) -> Optional[BankItem]:
        r = self.sb.table(TABLE).select("*").eq("id", item_id).maybe_single().execute()
        data = getattr(r, "data", None)
        if not data:
            return None
        return BankItem.model_validate(data)

    def count(self) -> int:
        r = self.sb.table(TABLE).select("id", count="exact").limit(1).execute()
        return int(getattr(r, "count", None) or 0)

    def stats(self) -> dict:
        r = self.sb.table(TABLE).select("domain,global_difficulty").execute()
        rows = getattr(r, "data", None) or []
        by_domain = Counter(row["domain"] for row in rows)
        by_difficulty = Counter(int(row["global_difficulty"]) for row in rows)
        return {
            "total": len(rows),
            "by_domain": dict(by_domain),
            "by_difficulty": {str(k): v for k, v in sorted(by_difficulty.items())},
        }
