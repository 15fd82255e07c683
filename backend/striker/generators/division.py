"""Division generator: facts, sharing word framing, inverse, remainders."""

from striker.generators.base import GeneratorContract, SkillVariant
from striker.generators.common import choices4, tier
from striker.models.bank import Domain, QuestionType

SHARE_ITEMS = ("stickers", "soccer cards", "marbles", "cones", "juice boxes", "pencils")


def _wrong_remainder(quotient: int, rem: int, divisor: int) -> str:
    if rem + 1 < divisor:
        return f"{quotient} R{rem + 1}"
    if rem > 1:
        return f"{quotient} R{rem - 1}"
    return f"{quotient + 1} R{rem}"


class DivisionGenerator(GeneratorContract):
    domain = Domain.DIVISION
    salt = 0x2AD3B10F
    skills = (
        SkillVariant("div_facts", ("facts_within_100",)),
        SkillVariant("div_interpretation", ("grouping_sharing",)),
        SkillVariant("div_inverse", ("fact_family",)),
        SkillVariant("div_remainders", ("simple_remainder",)),
    )
    min_difficulty = {"div_remainders": 4}

    def build_variant(self, rng, skill, difficulty):
        divisor = rng.int(2, 10 if difficulty <= 2 else 12)
        quotient = rng.int(1, tier(difficulty, 10, 12, 15))
        dividend = divisor * quotient

        if skill.tag == "div_facts":
            return {
                "question_type": QuestionType.MCQ_SINGLE,
                "prompt": f"What is {dividend} ÷ {divisor}?",
                "choices": choices4(rng, quotient, quotient + 1, quotient - 1, divisor),
                "correct_answer": str(quotient),
                "explanation": f"{dividend} ÷ {divisor} = {quotient}. Think: {divisor} × {quotient} = {dividend}.",
            }

        if skill.tag == "div_interpretation":
            thing = rng.pick(SHARE_ITEMS)
            return {
                "question_type": QuestionType.WORD,
                "prompt": (
                    f"You have {dividend} {thing} to share equally among {divisor} friends. "
                    "How many does each friend get?"
                ),
                "choices": choices4(rng, quotient, quotient + 1, quotient - 1, quotient + 2),
                "correct_answer": str(quotient),
                "explanation": f"Sharing equally means divide: {dividend} ÷ {divisor} = {quotient}.",
            }

        if skill.tag == "div_inverse":
            return {
                "question_type": QuestionType.MCQ_SINGLE,
                "prompt": f"If {divisor} × □ = {dividend}, what is □?",
                "choices": choices4(rng, quotient, quotient + 1, quotient - 1, divisor),
                "correct_answer": str(quotient),
                "explanation": f"Division undoes multiplication: {dividend} ÷ {divisor} = {quotient}.",
            }

        # div_remainders (difficulty 4+)
        rem = rng.int(1, divisor - 1)
        total = dividend + rem
        answer = f"{quotient} R{rem}"
        return {
            "question_type": QuestionType.MCQ_SINGLE,
            "prompt": f"What is {total} ÷ {divisor}?",
            "choices": rng.shuffle([
                answer,
                str(quotient),
                str(quotient + 1),
                _wrong_remainder(quotient, rem, divisor),
            ]),
            "correct_answer": answer,
            "explanation": f"{divisor} × {quotient} = {dividend}. {total} - {dividend} = {rem} left over.",
        }


def generate_division(version: str = "v1", seed: int = 1337, count: int = 900):
    return DivisionGenerator().generate(version, seed, count)
