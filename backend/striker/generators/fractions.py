"""Fractions generator: identify, equivalence, compare, number line, fraction of a set."""
from fractions import Fraction

from striker.generators.base import GeneratorContract, SkillVariant
from striker.generators.common import frac, frac_choices, pad_fractions, tier
from striker.models.bank import Domain, QuestionType


class FractionsGenerator(GeneratorContract):
    domain = Domain.FRACTIONS
    salt = 0x9B77A1CD
    skills = (
        SkillVariant("frac_identify", ("fraction_bars",)),
        SkillVariant("frac_equivalent", ("equivalence",)),
        SkillVariant("frac_compare", ("compare",)),
        SkillVariant("frac_numberline", ("number_line",)),
        SkillVariant("frac_of_set", ("fraction_of_set",)),
    )
    min_difficulty = {"frac_of_set": 3}

    def build_variant(self, rng, skill, difficulty):
        if skill.tag == "frac_identify":
            parts = rng.pick(tier(difficulty, (2, 3, 4), (4, 5, 6, 8), (6, 8, 10, 12)))
            shaded = rng.int(1, parts - 1)
            answer = frac(shaded, parts)
            shape = "fractionBars" if rng.next() < 0.5 else "fractionCircle"
            noun = "bar" if shape == "fractionBars" else "circle"
            return {
                "question_type": QuestionType.VISUAL,
                "prompt": f"What fraction of the {noun} is shaded?",
                "visual": {"type": shape, "parts": parts, "shaded": shaded},
                "choices": frac_choices(rng, shaded, parts),
                "correct_answer": answer,
                "explanation": f"{parts} equal parts, {shaded} shaded = {answer}.",
            }

        if skill.tag == "frac_equivalent":
            base_den = rng.pick((2, 3, 4) if difficulty <= 2 else (3, 4, 5, 6))
            base_num = rng.int(1, base_den - 1)
            mult = rng.pick(tier(difficulty, (2, 3), (2, 3, 4), (3, 4, 5)))
            base = Fraction(base_num, base_den)
            correct = frac(base_num * mult, base_den * mult)

            options = [correct]
            attempts = 0
            while len(options) < 4 and attempts < 20:
                m2 = rng.pick((2, 3, 4, 5))
                den2 = base_den * m2
                num2 = max(1, min(den2 - 1, base_num * m2 + rng.pick((-1, 1, 2, -2))))
                candidate = frac(num2, den2)
                if Fraction(num2, den2) != base and candidate not in options:
                    options.append(candidate)
                attempts += 1
            if len(options) < 4:
                pad_fractions(options, base, base_den * mult, 4)

            return {
                "question_type": QuestionType.MCQ_SINGLE,
                "prompt": f"Which fraction is equivalent to {frac(base_num, base_den)}?",
                "choices": rng.shuffle(options),
                "correct_answer": correct,
                "explanation": (
                    f"Multiply top and bottom by {mult}: "
                    f"{base_num}×{mult}/{base_den}×{mult} = {correct}."
                ),
            }

        if skill.tag == "frac_compare":
            den = rng.pick((2, 3, 4) if difficulty <= 2 else (4, 5, 6, 8))
            n1 = rng.int(1, den - 1)
            n2 = rng.int(1, den - 1)
            if n2 == n1:
                n2 = max(1, n2 - 1)
            if n2 == n1:
                return None
            f1, f2 = frac(n1, den), frac(n2, den)
            return {
                "question_type": QuestionType.MCQ_SINGLE,
                "prompt": f"Which is greater: {f1} or {f2}?",
                "choices": rng.shuffle([f1, f2, "They are equal"]),
                "correct_answer": f1 if n1 > n2 else f2,
                "explanation": "Same denominator: bigger numerator = bigger fraction.",
            }

        if skill.tag == "frac_numberline":
            if difficulty <= 2:
                den = 4
            else:
                den = rng.pick((4, 5, 6) if difficulty <= 4 else (6, 8))
            num = rng.int(1, den - 1)
            answer = frac(num, den)
            return {
                "question_type": QuestionType.VISUAL,
                "prompt": "What fraction is marked on the number line?",
                "visual": {"type": "numberLine", "min": 0, "max": 1, "divisions": den, "marked": num},
                "choices": frac_choices(rng, num, den),
                "correct_answer": answer,
                "explanation": f"The line splits into {den} parts. The mark is at {num} parts = {answer}.",
            }

        # frac_of_set (difficulty 3+)
        den = rng.pick((2, 3, 4, 5, 8))
        num = rng.int(1, min(den - 1, 3))
        set_size = den * rng.pick((2, 3, 4, 5))
        unit = set_size // den
        answer = unit * num

        options: list[int] = []
        for n in (answer, answer + 1, answer - 1, unit + 1):
            if n > 0 and n not in options:
                options.append(n)
        k = 2
        while len(options) < 4:
            if answer + k not in options:
                options.append(answer + k)
            k += 1

        return {
            "question_type": QuestionType.MCQ_SINGLE,
            "prompt": f"What is {frac(num, den)} of {set_size}?",
            "choices": [str(n) for n in rng.shuffle(options)],
            "correct_answer": str(answer),
            "explanation": f"{set_size} ÷ {den} = {unit}. Then × {num} = {answer}.",
        }


def generate_fractions(version: str = "v1", seed: int = 1337, count: int = 1400):
    return FractionsGenerator().generate(version, seed, count)
