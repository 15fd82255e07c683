"""Multiplication generator: facts, missing factor, arrays, commutativity, comparison."""

from striker.generators.base import GeneratorContract, SkillVariant
from striker.generators.common import choices4, tier
from striker.models.bank import Domain, QuestionType

EQUAL_CHOICE = "Yes, they are equal"


class MultiplicationGenerator(GeneratorContract):
    domain = Domain.MULTIPLICATION
    salt = 0x51F1C0DE
    skills = (
        SkillVariant("mult_facts", ("facts_0_12",)),
        SkillVariant("mult_missing_factor", ("missing_factor",)),
        SkillVariant("mult_arrays", ("arrays_visual",)),
        SkillVariant("mult_properties", ("commutative", "distributive")),
        SkillVariant("mult_compare", ("greater_less",)),
    )

    def build_variant(self, rng, skill, difficulty):
        top = tier(difficulty, 10, 12, 15)
        a = rng.int(1, top)
        b = rng.int(1, top)
        product = a * b

        if skill.tag == "mult_facts":
            return {
                "question_type": QuestionType.MCQ_SINGLE,
                "prompt": f"What is {a} × {b}?",
                "choices": choices4(rng, product, (a + 1) * b, a * (b + 1), (a - 1) * b),
                "correct_answer": str(product),
                "explanation": f"{a} × {b} means {a} groups of {b}. That equals {product}.",
            }

        if skill.tag == "mult_missing_factor":
            left = rng.next() < 0.5
            missing, known = (a, b) if left else (b, a)
            prompt = (
                f"□ × {known} = {product}. What goes in the box?"
                if left
                else f"{known} × □ = {product}. What goes in the box?"
            )
            return {
                "question_type": QuestionType.MCQ_SINGLE,
                "prompt": prompt,
                "choices": choices4(rng, missing, missing + 1, missing - 1, missing + 2),
                "correct_answer": str(missing),
                "explanation": f"{product} ÷ {known} = {missing}.",
            }

        if skill.tag == "mult_arrays":
            rows = min(a, 10)
            cols = min(b, 10)
            total = rows * cols
            return {
                "question_type": QuestionType.VISUAL,
                "prompt": f"This array has {rows} rows and {cols} columns. How many dots total?",
                "visual": {"type": "arraysMultiplication", "rows": rows, "cols": cols},
                "choices": choices4(rng, total, (rows + 1) * cols, rows * (cols + 1)),
                "correct_answer": str(total),
                "explanation": f"{rows} rows × {cols} columns = {total}.",
            }

        if skill.tag == "mult_properties":
            return {
                "question_type": QuestionType.MCQ_SINGLE,
                "prompt": f"Is {a} × {b} the same as {b} × {a}?",
                "choices": rng.shuffle([
                    EQUAL_CHOICE,
                    "No, the first one is bigger",
                    "No, the second one is bigger",
                ]),
                "correct_answer": EQUAL_CHOICE,
                "explanation": f"Multiplication is commutative: {a} × {b} = {b} × {a} = {product}.",
            }

        # mult_compare
        a2 = rng.int(1, top)
        b2 = rng.int(1, top)
        product2 = a2 * b2
        if product == product2:
            return None
        first, second = f"{a} × {b}", f"{a2} × {b2}"
        bigger = first if product > product2 else second
        return {
            "question_type": QuestionType.MCQ_SINGLE,
            "prompt": f"Which is greater: {first} or {second}?",
            "choices": rng.shuffle([first, second, "They are equal"]),
            "correct_answer": bigger,
            "explanation": f"{first} = {product}. {second} = {product2}. {bigger} is greater.",
        }


def generate_multiplication(version: str = "v1", seed: int = 1337, count: int = 1200):
    return MultiplicationGenerator().generate(version, seed, count)
