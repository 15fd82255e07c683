"""
Content hashing for bank items.

The hash is the only identity used for dedup and for persistence-level
uniqueness, so it covers exactly the semantic fields of an item:

    domain, skillTag, questionType, prompt, choices, correctAnswer, visual

Normalisation:
  - prompt is trimmed and internal whitespace collapsed to single spaces
  - missing fields serialise as null
  - nested mappings are serialised with sorted keys
  - a multi-choice answer is a set, so its members are sorted

Serialisation is compact JSON with non-ASCII kept as-is, digested with SHA-256.
"""
from __future__ import annotations

import hashlib
import json
import re
from enum import Enum
from typing import Any, Optional

_WS_RE = re.compile(r"\s+")


def normalize_prompt(prompt: Optional[str]) -> str:
    return _WS_RE.sub(" ", (prompt or "").strip())


def _canonical(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _canonical(value[k]) for k in sorted(value, key=str)}
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    return value


def canonical_form(
    domain: Any,
    skill_tag: str,
    question_type: Any,
    prompt: str,
    choices: Optional[list] = None,
    correct_answer: Any = None,
    visual: Optional[dict] = None,
) -> dict:
    answer = _canonical(correct_answer)
    if isinstance(answer, list):
        answer = sorted(answer, key=str)
    return {
        "domain": _canonical(domain),
        "skillTag": skill_tag,
        "questionType": _canonical(question_type),
        "prompt": normalize_prompt(prompt),
        "choices": _canonical(choices),
        "correctAnswer": answer,
        "visual": _canonical(visual),
    }


def compute_hash(
    domain: Any,
    skill_tag: str,
    question_type: Any,
    prompt: str,
    choices: Optional[list] = None,
    correct_answer: Any = None,
    visual: Optional[dict] = None,
) -> str:
    """Stable SHA-256 hex digest of an item's normalised semantic fields."""
    form = canonical_form(domain, skill_tag, question_type, prompt, choices, correct_answer, visual)
    payload = json.dumps(form, ensure_ascii=False, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def hash_item(item) -> str:
    """Recompute the hash of a BankItem (or any object with the same fields)."""
    return compute_hash(
        item.domain,
        item.skill_tag,
        item.question_type,
        item.prompt,
        item.choices,
        item.correct_answer,
        item.visual,
    )
