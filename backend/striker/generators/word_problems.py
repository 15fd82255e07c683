"""Word-problem generator: named-character narratives around one- and two-step problems."""

from striker.generators.base import GeneratorContract, SkillVariant
from striker.generators.common import choices4
from striker.models.bank import Domain, QuestionType

NAMES = (
    "Alex", "Jordan", "Mia", "Liam", "Addie", "Kai", "Zara", "Noah",
    "Priya", "Diego", "Amara", "Yuki", "Ravi", "Lena", "Omar",
)
SOCCER_OBJECTS = ("cones", "balls", "shin guards", "pennies", "water bottles", "jerseys")
NEUTRAL_OBJECTS = ("stickers", "pencils", "books", "markers", "snacks", "marbles")


class WordProblemsGenerator(GeneratorContract):
    domain = Domain.WORD_PROBLEMS
    salt = 0x19F0A8A3
    skills = (
        SkillVariant("wp_mult", ("single_step",)),
        SkillVariant("wp_div", ("single_step",)),
        SkillVariant("wp_frac", ("fraction_of_set",)),
        SkillVariant("wp_multi_step", ("two_step",)),
    )
    min_difficulty = {"wp_frac": 2, "wp_multi_step": 4}

    def build_variant(self, rng, skill, difficulty):
        name = rng.pick(NAMES)
        soccer = rng.next() < 0.55
        obj = rng.pick(SOCCER_OBJECTS if soccer else NEUTRAL_OBJECTS)

        if skill.tag == "wp_mult":
            variant = self._multiply(rng, difficulty, name, soccer, obj)
        elif skill.tag == "wp_div":
            variant = self._divide(rng, difficulty, soccer, obj)
        elif skill.tag == "wp_frac":
            variant = self._fraction(rng, difficulty, name, soccer, obj)
        else:
            variant = self._two_step(rng, name, obj)

        if variant is None:
            return None
        variant["question_type"] = QuestionType.WORD
        variant["subskill_tags"] = [*skill.subskills, "soccer" if soccer else "neutral"]
        return variant

    def _multiply(self, rng, difficulty, name, soccer, obj):
        a = rng.pick((2, 3, 4, 5) if difficulty <= 2 else (4, 5, 6, 7, 8))
        b = rng.pick((3, 4, 5, 6) if difficulty <= 2 else (5, 6, 7, 8, 9))
        total = a * b
        if soccer:
            templates = [
                f"{name} practices {a} days. Each day they set up {b} {obj}. How many total?",
                f"There are {a} teams. Each team gets {b} {obj}. How many {obj} total?",
                f"{name} scores {b} goals in each of {a} games. How many goals total?",
            ]
        else:
            templates = [
                f"{name} has {a} bags with {b} {obj} each. How many total?",
                f"There are {a} boxes with {b} {obj} each. How many total?",
                f"{name} reads {b} pages for {a} days. How many pages total?",
            ]
        return {
            "prompt": rng.pick(templates),
            "choices": choices4(rng, total, total + b, total - b, a + b),
            "correct_answer": str(total),
            "explanation": f"{a} × {b} = {total}.",
        }

    def _divide(self, rng, difficulty, soccer, obj):
        groups = rng.pick((2, 3, 4) if difficulty <= 2 else (3, 4, 5, 6))
        per = rng.pick((3, 4, 5, 6) if difficulty <= 2 else (5, 6, 7, 8))
        total = groups * per
        if soccer:
            prompt = f"{total} {obj} are shared equally among {groups} players. How many does each player get?"
        else:
            prompt = f"{total} {obj} shared equally among {groups} kids. How many each?"
        return {
            "prompt": prompt,
            "choices": choices4(rng, per, per + 1, per - 1, groups),
            "correct_answer": str(per),
            "explanation": f"{total} ÷ {groups} = {per}.",
        }

    def _fraction(self, rng, difficulty, name, soccer, obj):
        den = rng.pick((2, 3, 4) if difficulty <= 3 else (4, 5, 6, 8))
        num = 1 if difficulty <= 3 else rng.pick((1, 2, 3))
        total = den * rng.pick((2, 3, 4, 5))
        unit = total // den
        answer = unit * num
        if soccer:
            prompt = f"{num}/{den} of {name}'s {total} {obj} are red. How many red {obj}?"
        else:
            prompt = f"{num}/{den} of {total} {obj} are new. How many new {obj}?"
        return {
            "prompt": prompt,
            "choices": choices4(rng, answer, answer + 1, answer - 1, unit),
            "correct_answer": str(answer),
            "explanation": f"{total} ÷ {den} = {unit}. × {num} = {answer}.",
        }

    def _two_step(self, rng, name, obj):
        a = rng.pick((3, 4, 5, 6))
        b = rng.pick((4, 5, 6, 7))
        c = rng.pick((2, 3, 4, 5))
        use_add = rng.next() < 0.6
        answer = a * b + c if use_add else a * b - c
        if answer <= 0:
            return None
        if use_add:
            prompt = f"{name} buys {a} packs of {b} {obj}, then gets {c} more. Total {obj}?"
            explanation = f"{a} × {b} = {a * b}. + {c} = {answer}."
        else:
            prompt = f"{name} has {a} bags of {b} {obj} but gives away {c}. How many left?"
            explanation = f"{a} × {b} = {a * b}. - {c} = {answer}."
        return {
            "prompt": prompt,
            "choices": choices4(rng, answer, a * b, answer + c, answer - c),
            "correct_answer": str(answer),
            "explanation": explanation,
        }


def generate_word_problems(version: str = "v1", seed: int = 1337, count: int = 900):
    return WordProblemsGenerator().generate(version, seed, count)
