from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from striker.models.bank import LEAGUE_ORDER, League

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EMA_ALPHA = 0.15
DEFAULT_MASTERY = 0.5
ROLLING_WINDOW = 20
ADJUST_EVERY = 5
PROMOTE_AT = 0.85
DEMOTE_BELOW = 0.60
WEAK_SKILL_THRESHOLD = 0.6

# Requirement to *enter* each league: (minimum xp, minimum average mastery)
LEAGUE_THRESHOLDS: dict[League, tuple[int, float]] = {
    League.U8: (0, 0.0),
    League.U10: (200, 0.40),
    League.U12: (600, 0.55),
    League.U14: (1200, 0.65),
    League.HS: (2500, 0.75),
    League.COLLEGE: (5000, 0.85),
}

_LEAGUE_BANDS: dict[League, tuple[int, int]] = {
    League.U8: (1, 2),
    League.U10: (2, 3),
    League.U12: (3, 4),
    League.U14: (4, 5),
    League.HS: (5, 5),
    League.COLLEGE: (6, 6),
}

# Assessment score → (starting difficulty, starting league), first match wins
_SCORE_BANDS: list[tuple[int, int, League]] = [
    (90, 5, League.HS),
    (75, 4, League.U14),
    (60, 3, League.U12),
    (40, 2, League.U10),
    (0, 1, League.U8),
]


@dataclass
class Attempt:
    skill_tag: str
    correct: bool
    response_time_ms: int = 0


@dataclass
class AssessmentResult:
    overall_score: int
    per_skill_scores: dict[str, int] = field(default_factory=dict)
    starting_difficulty: int = 1
    starting_league: League = League.U8


def _round_half_up(value: float, digits: int = 0) -> float:
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


# ---------------------------------------------------------------------------
# Pure functions (no stores, testable without mocks)
# ---------------------------------------------------------------------------

def update_skill_model(
    skill_model: dict[str, float],
    skill_tag: str,
    correct: bool,
    alpha: float = EMA_ALPHA,
) -> dict[str, float]:
    """EMA update of one skill; returns a new model, rounded to 3 decimals."""
    current = skill_model.get(skill_tag, DEFAULT_MASTERY)
    value = current * (1 - alpha) + (1.0 if correct else 0.0) * alpha
    return {**skill_model, skill_tag: _round_half_up(value, 3)}


def compute_rolling_accuracy(attempts: Sequence, window: int = ROLLING_WINDOW) -> float:
    """
    Fraction correct over the most recent `window` attempts (oldest first in
    `attempts`). Accepts Attempt objects, dicts with a "correct" key or bools.
    """
    recent = list(attempts)[-window:] if window > 0 else []
    if not recent:
        return 0.5
    correct = sum(1 for a in recent if _is_correct(a))
    return correct / len(recent)


def _is_correct(attempt) -> bool:
    if isinstance(attempt, bool):
        return attempt
    if isinstance(attempt, dict):
        return attempt.get("correct") is True
    return getattr(attempt, "correct", False) is True


def should_adjust_difficulty(questions_answered: int, every: int = ADJUST_EVERY) -> bool:
    return questions_answered > 0 and questions_answered % every == 0


def adjust_difficulty(current_difficulty: int, rolling_accuracy: float) -> int:
    """
    ≥85% correct → +1 (max 6)
    60-85%       → unchanged
    <60%         → -1 (min 1)
    """
    if rolling_accuracy >= PROMOTE_AT:
        return min(6, current_difficulty + 1)
    if rolling_accuracy < DEMOTE_BELOW:
        return max(1, current_difficulty - 1)
    return current_difficulty


def average_mastery(skill_model: dict[str, float]) -> float:
    if not skill_model:
        return 0.0
    return sum(skill_model.values()) / len(skill_model)


def check_league_promotion(
    current_league: League | str,
    xp: int,
    skill_model: dict[str, float],
) -> Optional[League]:
    """Return the next league when both of its thresholds are met, else None."""
    league = League(current_league)
    idx = LEAGUE_ORDER.index(league)
    if idx >= len(LEAGUE_ORDER) - 1:
        return None

    next_league = LEAGUE_ORDER[idx + 1]
    min_xp, min_mastery = LEAGUE_THRESHOLDS[next_league]
    if xp >= min_xp and average_mastery(skill_model) >= min_mastery:
        return next_league
    return None


def get_weak_skills(skill_model: dict[str, float], threshold: float = WEAK_SKILL_THRESHOLD) -> list[str]:
    """Skills below threshold, weakest first."""
    weak = [(skill, value) for skill, value in skill_model.items() if value < threshold]
    weak.sort(key=lambda kv: kv[1])
    return [skill for skill, _ in weak]


def league_difficulty_band(league: League | str) -> tuple[int, int]:
    try:
        return _LEAGUE_BANDS[League(league)]
    except ValueError:
        return (1, 3)


def _score_band(score: int) -> tuple[int, League]:
    for floor, difficulty, league in _SCORE_BANDS:
        if score >= floor:
            return difficulty, league
    return 1, League.U8


def score_assessment(attempts: Sequence[Attempt]) -> AssessmentResult:
    """
    Score a one-shot placement assessment.

    overall = round(correct / total * 100) plus a speed bonus
    (+5 when the mean response time is under 5s, +2 under 8s), capped at 100.
    The adjusted score picks the starting difficulty and league.

    Raises:
        ValueError: on an empty batch.
    """
    if not attempts:
        raise ValueError("score_assessment needs at least one attempt")

    total_correct = sum(1 for a in attempts if a.correct)
    overall = int(_round_half_up(total_correct / len(attempts) * 100))

    buckets: dict[str, list[int]] = {}
    for a in attempts:
        bucket = buckets.setdefault(a.skill_tag, [0, 0])
        bucket[1] += 1
        if a.correct:
            bucket[0] += 1
    per_skill = {
        skill: int(_round_half_up(correct / total * 100))
        for skill, (correct, total) in buckets.items()
    }

    avg_time = sum(a.response_time_ms for a in attempts) / len(attempts)
    if avg_time < 5000:
        speed_bonus = 5
    elif avg_time < 8000:
        speed_bonus = 2
    else:
        speed_bonus = 0
    adjusted = min(100, overall + speed_bonus)

    difficulty, league = _score_band(adjusted)
    return AssessmentResult(
        overall_score=adjusted,
        per_skill_scores=per_skill,
        starting_difficulty=difficulty,
        starting_league=league,
    )


def skill_model_from_assessment(result: AssessmentResult) -> dict[str, float]:
    return {skill: score / 100 for skill, score in result.per_skill_scores.items()}
