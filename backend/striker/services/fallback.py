"""Procedural fallback: build a single item on the fly when the bank runs dry."""
from __future__ import annotations

import logging
from typing import Optional

from striker.core.rng import SeededRandom
from striker.generators.common import clamp_difficulty
from striker.generators.registry import GENERATOR_REGISTRY, domain_for_skill
from striker.models.bank import DOMAIN_ORDER, BankItem

logger = logging.getLogger(__name__)

FALLBACK_VERSION = "procedural"
WEAK_DOMAIN_BIAS = 0.4


def _domain_of(tag: Optional[str]) -> Optional[str]:
    if not tag:
        return None
    if tag in GENERATOR_REGISTRY:
        return tag
    return domain_for_skill(tag)


def choose_domain(
    rng: SeededRandom,
    weak_skills: Optional[list[str]] = None,
    skill_tag: Optional[str] = None,
) -> str:
    explicit = _domain_of(skill_tag)
    if explicit:
        return explicit
    weak_domains = [d for d in (_domain_of(s) for s in weak_skills or []) if d]
    if weak_domains and rng.next() < WEAK_DOMAIN_BIAS:
        return rng.pick(weak_domains)
    return rng.pick([d.value for d in DOMAIN_ORDER])


def generate_fallback_item(
    difficulty: int,
    index: int,
    seed: int,
    weak_skills: Optional[list[str]] = None,
    skill_tag: Optional[str] = None,
) -> BankItem:
    """
    Deterministic for (difficulty, index, seed, weak_skills, skill_tag).

    The chosen domain's eligible variants are tried in a seeded shuffled
    order (a requested fine skill first) until one builds; other domains are
    tried only if every variant of the chosen one draws degenerate.
    """
    rng = SeededRandom(seed + index)
    difficulty = clamp_difficulty(difficulty)
    domain = choose_domain(rng, weak_skills, skill_tag)
    order = [domain] + [d.value for d in DOMAIN_ORDER if d.value != domain]

    for name in order:
        gen = GENERATOR_REGISTRY[name]
        variants = rng.shuffle([s for s in gen.skills if gen.eligible(s.tag, difficulty)])
        variants.sort(key=lambda s: s.tag != skill_tag)
        for skill in variants:
            item = gen.build(rng, skill, difficulty, index, FALLBACK_VERSION)
            if item is not None:
                logger.debug("[fallback] built %s (domain=%s, d=%d)", item.id, name, difficulty)
                return item

    raise RuntimeError(f"no generator could build an item at difficulty {difficulty}")
