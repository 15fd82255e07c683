"""
Practice flow: applies one graded attempt to a learner's state.

Pure: takes a LearnerState and returns a new one plus the reward events the
client should animate. Persisting the result is the caller's job.

Serving: serve_next draws from the bank pool and falls back to procedural
generation, recording whatever it served in the session history.

Rewards:
  correct → xp += 10 + 2 * difficulty, coins += 5 (+3 once the streak hits 3)
  wrong   → xp += 2, streak reset
Every `adjust_every`-th answered question re-evaluates difficulty from the
rolling accuracy, then league promotion is checked against the new xp and
skill model.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Sequence

from striker.core.rng import SeededRandom
from striker.generators.registry import generator_for
from striker.models.bank import BankItem, League
from striker.services.fallback import generate_fallback_item
from striker.services.progress_store import LearnerState
from striker.services.progression import (
    ADJUST_EVERY,
    ROLLING_WINDOW,
    adjust_difficulty,
    check_league_promotion,
    compute_rolling_accuracy,
    should_adjust_difficulty,
    update_skill_model,
)
from striker.services.selector import DEFAULT_POOL_CAP, select_next
from striker.services.session_history import SessionHistory

logger = logging.getLogger(__name__)

BASE_XP = 10
XP_PER_DIFFICULTY = 2
CONSOLATION_XP = 2
BASE_COINS = 5
STREAK_BONUS_COINS = 3
STREAK_BONUS_AT = 3


@dataclass
class AttemptOutcome:
    correct: bool
    state: LearnerState
    xp_gained: int
    coins_gained: int
    rolling_accuracy: Optional[float] = None
    difficulty_changed: bool = False
    promoted_to: Optional[League] = None
    reward_events: list[dict[str, Any]] = field(default_factory=list)


def xp_for(correct: bool, difficulty: int) -> int:
    return BASE_XP + XP_PER_DIFFICULTY * difficulty if correct else CONSOLATION_XP


def coins_for(correct: bool, streak: int) -> int:
    if not correct:
        return 0
    return BASE_COINS + (STREAK_BONUS_COINS if streak >= STREAK_BONUS_AT else 0)


def apply_attempt(
    state: LearnerState,
    skill_tag: str,
    correct: bool,
    recent_attempts: Sequence,
    rolling_window: int = ROLLING_WINDOW,
    adjust_every: int = ADJUST_EVERY,
) -> AttemptOutcome:
    """
    Args:
        state:           Learner state before this attempt (not mutated).
        skill_tag:       Key to update in the skill model.
        correct:         Grading result.
        recent_attempts: Attempt history, oldest first, including this attempt.
    """
    difficulty = state.current_difficulty
    xp_gained = xp_for(correct, difficulty)
    streak = state.streak_current + 1 if correct else 0
    coins_gained = coins_for(correct, streak)

    new_state = replace(
        state,
        xp=state.xp + xp_gained,
        coins=state.coins + coins_gained,
        streak_current=streak,
        streak_best=max(state.streak_best, streak),
        skill_model=update_skill_model(state.skill_model, skill_tag, correct),
        questions_answered=state.questions_answered + 1,
    )

    events: list[dict[str, Any]] = [{"type": "xp", "amount": xp_gained}]
    if coins_gained:
        events.append({"type": "coins", "amount": coins_gained})

    rolling = None
    changed = False
    if should_adjust_difficulty(new_state.questions_answered, adjust_every):
        rolling = compute_rolling_accuracy(recent_attempts, rolling_window)
        new_difficulty = adjust_difficulty(difficulty, rolling)
        if new_difficulty != difficulty:
            logger.debug(
                "[practice.apply_attempt] %s difficulty %d -> %d (rolling=%.2f)",
                state.learner_id, difficulty, new_difficulty, rolling,
            )
            new_state.current_difficulty = new_difficulty
            changed = True

    promoted = check_league_promotion(new_state.current_league, new_state.xp, new_state.skill_model)
    if promoted is not None:
        logger.info("[practice.apply_attempt] %s promoted to %s", state.learner_id, promoted.value)
        new_state.current_league = promoted.value
        events.append({"type": "league", "league": promoted.value})

    return AttemptOutcome(
        correct=correct,
        state=new_state,
        xp_gained=xp_gained,
        coins_gained=coins_gained,
        rolling_accuracy=rolling,
        difficulty_changed=changed,
        promoted_to=promoted,
        reward_events=events,
    )


def grade_answer(item: BankItem, answer) -> bool:
    return generator_for(item.domain).grade(item, answer)


def serve_next(
    history: SessionHistory,
    target_difficulty: int,
    pool: Sequence[BankItem],
    pool_cap: int = DEFAULT_POOL_CAP,
    weak_skills: Optional[list[str]] = None,
    skill_tag: Optional[str] = None,
) -> tuple[BankItem, str]:
    """
    Pick the next item for `history` and record it as served.

    Selection is seeded from the session seed plus the question index, so a
    seeded session replays the same items. Returns (item, "bank") or
    (item, "procedural").
    """
    criteria = history.criteria(target_difficulty, weak_skills, skill_tag)
    rng = SeededRandom(history.seed + history.question_index)
    item = select_next(criteria, list(pool), rng, pool_cap)
    source = "bank"
    if item is None:
        item = generate_fallback_item(
            target_difficulty,
            history.question_index,
            history.seed,
            weak_skills=weak_skills,
            skill_tag=skill_tag,
        )
        source = "procedural"
    history.record(item)
    return item, source
