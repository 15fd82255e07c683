"""Shared helpers for the domain generators: difficulty, ids, distractors."""
from __future__ import annotations

import re
from fractions import Fraction

from striker.core.rng import SeededRandom

_ID_SEP_RE = re.compile(r"[^a-z0-9]+")
_DISTRACTOR_OFFSETS = (-3, -2, -1, 1, 2, 3, 5, 10)


def clamp_difficulty(d: int) -> int:
    return max(1, min(6, d))


def roll_difficulty(rng: SeededRandom) -> int:
    return clamp_difficulty(1 + int(rng.next() * 6))


def format_id(parts: list[str]) -> str:
    """
    Lower-case, join with underscores, collapse separators.

    Examples:
        ["mult_facts", "d3", "v1", "0007"] → "mult_facts_d3_v1_0007"
        ["wp_div", "d2", "V 1.2", "0010"]  → "wp_div_d2_v_1_2_0010"
    """
    joined = "_".join(_ID_SEP_RE.sub("_", p.lower()) for p in parts)
    return re.sub(r"_+", "_", joined).strip("_")


def grade_band(d: int) -> str:
    if d <= 1:
        return "2"
    if d <= 2:
        return "2-3"
    if d <= 4:
        return "3"
    return "3-4"


def tier(d: int, small, medium, large):
    """Pick the value for the difficulty tier: 1-2 small, 3-4 medium, 5-6 large."""
    if d <= 2:
        return small
    if d <= 4:
        return medium
    return large


def distractors(rng: SeededRandom, correct: int, *nearby: int) -> list[int]:
    """Three distinct, strictly positive wrong answers near `correct`."""
    pool: list[int] = []
    for n in nearby:
        if n > 0 and n != correct and n not in pool:
            pool.append(n)
    while len(pool) < 6:
        n = correct + rng.pick(_DISTRACTOR_OFFSETS) * rng.pick((1, 2))
        if n > 0 and n != correct and n not in pool:
            pool.append(n)
    return list(rng.shuffle(pool))[:3]


def choices4(rng: SeededRandom, correct: int, *nearby: int) -> list[str]:
    """Correct answer plus three distractors, shuffled, as strings."""
    return [str(n) for n in rng.shuffle([correct, *distractors(rng, correct, *nearby)])]


def frac(n: int, d: int) -> str:
    return f"{n}/{d}"


def pad_fractions(options: list[str], value: Fraction, den: int, size: int) -> list[str]:
    """Fill `options` up to `size` with proper fractions not equal in value to `value`."""
    d = den
    while len(options) < size:
        for n in range(1, d):
            f = frac(n, d)
            if Fraction(n, d) != value and f not in options:
                options.append(f)
                if len(options) >= size:
                    break
        d += 1
    return options


def frac_choices(rng: SeededRandom, numerator: int, parts: int) -> list[str]:
    """Four fraction choices: the answer plus same-denominator wrong fractions."""
    correct = frac(numerator, parts)
    options = [correct]
    attempts = 0
    while len(options) < 4 and attempts < 20:
        f = frac(rng.int(1, parts - 1), parts)
        if f not in options:
            options.append(f)
        attempts += 1
    if len(options) < 4:
        pad_fractions(options, Fraction(numerator, parts), parts + 1, 4)
    return list(rng.shuffle(options))
