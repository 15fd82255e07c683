"""Base generator contract for question-bank domains.

Every domain generator (multiplication, fractions, ...) subclasses
GeneratorContract, declares its skill variants and seed salt, and overrides
build_variant(). The shared generate() loop owns the draw order, so two
generators never interleave draws from the same stream.
"""
from __future__ import annotations

from dataclasses import dataclass

from striker.core.rng import SeededRandom
from striker.generators.common import format_id, grade_band, roll_difficulty
from striker.models.bank import SOURCE, BankItem, Domain
from striker.services.content_hash import compute_hash


@dataclass(frozen=True)
class SkillVariant:
    tag: str
    subskills: tuple[str, ...] = ()


class GeneratorContract:
    domain: Domain
    salt: int = 0
    skills: tuple[SkillVariant, ...] = ()
    # skill_tag -> lowest difficulty the variant makes sense at
    min_difficulty: dict[str, int] = {}

    def eligible(self, skill_tag: str, difficulty: int) -> bool:
        return difficulty >= self.min_difficulty.get(skill_tag, 1)

    def build_variant(self, rng: SeededRandom, skill: SkillVariant, difficulty: int) -> dict | None:
        """
        Synthesize one problem instance.
        Returns:
        {
            "question_type": QuestionType,
            "prompt": str,
            "choices": list[str] | None,
            "correct_answer": str | list[str],
            "visual": dict | None,
            "explanation": str,
            "subskill_tags": list[str] (optional override)
        }
        or None when the draw is degenerate and the iteration should be dropped.
        """
        return None

    def build(
        self,
        rng: SeededRandom,
        skill: SkillVariant,
        difficulty: int,
        index: int,
        version: str,
    ) -> BankItem | None:
        variant = self.build_variant(rng, skill, difficulty)
        if variant is None:
            return None

        question_type = variant["question_type"]
        choices = variant.get("choices")
        visual = variant.get("visual")
        item_hash = compute_hash(
            self.domain,
            skill.tag,
            question_type,
            variant["prompt"],
            choices,
            variant["correct_answer"],
            visual,
        )
        return BankItem(
            id=format_id([skill.tag, f"d{difficulty}", version, f"{index + 1:04d}"]),
            version=version,
            domain=self.domain,
            skill_tag=skill.tag,
            subskill_tags=variant.get("subskill_tags") or list(skill.subskills),
            grade_band=grade_band(difficulty),
            question_type=question_type,
            global_difficulty=difficulty,
            skill_difficulty=difficulty,
            prompt=variant["prompt"],
            choices=choices,
            correct_answer=variant["correct_answer"],
            visual=visual,
            explanation=variant.get("explanation", ""),
            source=SOURCE,
            hash=item_hash,
        )

    def generate(self, version: str, seed: int, count: int) -> list[BankItem]:
        """
        Run `count` iterations against the domain's own stream.
        Ineligible (variant, difficulty) pairs and degenerate draws are
        dropped, so the result can be shorter than `count`.
        """
        rng = SeededRandom(seed ^ self.salt)
        items: list[BankItem] = []
        for i in range(count):
            skill = rng.pick(self.skills)
            difficulty = roll_difficulty(rng)
            if not self.eligible(skill.tag, difficulty):
                continue
            item = self.build(rng, skill, difficulty, i, version)
            if item is not None:
                items.append(item)
        return items

    def grade(self, item: BankItem, answer) -> bool:
        """Deterministic grading against the served item."""
        expected = item.correct_answer
        if isinstance(expected, list):
            given = answer if isinstance(answer, (list, tuple, set)) else [answer]
            return sorted(str(a).strip() for a in given) == sorted(expected)
        if isinstance(answer, (list, tuple, set)):
            return False
        return str(answer).strip() == expected
