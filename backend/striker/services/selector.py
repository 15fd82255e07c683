"""
Selector: draws the next bank item for a learner.

  1. Resolve the target skill (explicit, or a weak skill 40% of the time).
  2. Anti-repetition: drop the target if it was served the last two times.
  3. Difficulty band [target-1, target+1], clamped to [1, 6].
  4. Candidates: in band, matching the target skill, not recently served;
     a seeded reservoir sample of at most pool_cap.
  5. Relaxation ladder: drop the skill match, then the band. The recent-id
     exclusion is never dropped; exhaustion returns None and the caller
     falls back to procedural generation.
  6. Roulette draw, exact-difficulty candidates weighted 3x.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from striker.core.rng import RandomSource, entropy_rng
from striker.generators.registry import domain_for_skill
from striker.models.bank import BankItem, SelectionCriteria

logger = logging.getLogger(__name__)

WEAK_SKILL_BIAS = 0.4
EXACT_MATCH_WEIGHT = 3
DEFAULT_POOL_CAP = 50


def resolve_target_skill(criteria: SelectionCriteria, rng: RandomSource) -> Optional[str]:
    target = criteria.skill_tag
    if not target and criteria.weak_skills and rng.next() < WEAK_SKILL_BIAS:
        weak = criteria.weak_skills
        target = weak[int(rng.next() * len(weak))]

    recent = criteria.recent_skill_tags
    if target and len(recent) >= 2 and all(_served_as(tag, target) for tag in recent[-2:]):
        logger.debug("[selector] skill %s served twice in a row; forcing variety", target)
        target = None
    return target


def _served_as(tag: str, target: str) -> bool:
    # weak skills are domain keys while the history holds fine skill tags
    return tag == target or domain_for_skill(tag) == target


def difficulty_band(target: int) -> tuple[int, int]:
    return max(1, target - 1), min(6, target + 1)


def _matches_skill(item: BankItem, skill: str) -> bool:
    return item.skill_tag == skill or item.domain == skill


def build_candidates(
    pool: Iterable[BankItem],
    recent_ids: set[str],
    band: Optional[tuple[int, int]] = None,
    skill: Optional[str] = None,
    cap: int = DEFAULT_POOL_CAP,
    rng: Optional[RandomSource] = None,
) -> list[BankItem]:
    """
    Filter `pool` and keep at most `cap` matches.

    With an rng the kept matches are a uniform reservoir sample (Algorithm R);
    without one they are the first `cap` matches in pool order.
    """
    out: list[BankItem] = []
    seen = 0
    for item in pool:
        if item.id in recent_ids:
            continue
        if band is not None and not band[0] <= item.global_difficulty <= band[1]:
            continue
        if skill is not None and not _matches_skill(item, skill):
            continue
        seen += 1
        if len(out) < cap:
            out.append(item)
        elif rng is None:
            break
        else:
            slot = int(rng.next() * seen)
            if slot < cap:
                out[slot] = item
    return out


def pick_weighted(candidates: list[BankItem], target: int, rng: RandomSource) -> BankItem:
    weights = [EXACT_MATCH_WEIGHT if c.global_difficulty == target else 1 for c in candidates]
    roll = rng.next() * sum(weights)
    for item, weight in zip(candidates, weights):
        roll -= weight
        if roll <= 0:
            return item
    return candidates[-1]


def select_next(
    criteria: SelectionCriteria,
    pool: list[BankItem],
    rng: Optional[RandomSource] = None,
    pool_cap: int = DEFAULT_POOL_CAP,
) -> Optional[BankItem]:
    """
    Pick one item from `pool` for the given criteria.

    Args:
        criteria: Target difficulty, skill hints and the recent-history windows.
        pool:     Working set supplied by the bank store.
        rng:      Random source for the weak-skill bias, the candidate sample
                  and the weighted draw.
                  Pass a SeededRandom for reproducible selection.
        pool_cap: Upper bound on candidates considered per stage.

    Returns:
        The drawn item, or None when nothing survives full relaxation.
    """
    rng = rng or entropy_rng()
    target = criteria.target_difficulty
    skill = resolve_target_skill(criteria, rng)
    band = difficulty_band(target)
    recent_ids = set(criteria.recent_ids)

    stages = []
    if skill is not None:
        stages.append(("skill+band", band, skill))
    stages.append(("band", band, None))
    stages.append(("exclusion_only", None, None))

    for name, stage_band, stage_skill in stages:
        candidates = build_candidates(pool, recent_ids, stage_band, stage_skill, pool_cap, rng)
        if candidates:
            logger.debug(
                "[selector] stage=%s candidates=%d target=%d skill=%s",
                name, len(candidates), target, stage_skill,
            )
            return pick_weighted(candidates, target, rng)

    logger.info("[selector] no bank item after full relaxation (target=%d)", target)
    return None
