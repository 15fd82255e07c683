"""Patterns generator: arithmetic sequences, rule identification, function tables."""

from striker.generators.base import GeneratorContract, SkillVariant
from striker.generators.common import choices4, tier
from striker.models.bank import Domain, QuestionType


def _apply_rule(op: str, n: int, n2: int, x: int) -> int:
    if op == "add":
        return x + n
    if op == "multiply":
        return x * n
    return x * n + n2


class PatternsGenerator(GeneratorContract):
    domain = Domain.PATTERNS
    salt = 0x6CAA9F11
    skills = (
        SkillVariant("pattern_number", ("skip_counting", "growing")),
        SkillVariant("pattern_rule", ("find_rule",)),
        SkillVariant("function_machine", ("input_output",)),
    )

    def build_variant(self, rng, skill, difficulty):
        if skill.tag == "pattern_number":
            return self._number_pattern(rng, difficulty)
        if skill.tag == "pattern_rule":
            return self._rule_pattern(rng, difficulty)
        return self._function_machine(rng, difficulty)

    def _number_pattern(self, rng, difficulty):
        step = rng.pick((2, 3, 5, 10) if difficulty <= 2 else (3, 4, 6, 7, 8))
        start = rng.pick((0, 1, 2, 3) if difficulty <= 3 else (5, 6, 7, 8, 10))
        decreasing = difficulty >= 4 and rng.next() < 0.3
        if decreasing:
            seq = [start * step - step * j for j in range(5)]
            after = start * step - step * 5
        else:
            seq = [start + step * j for j in range(5)]
            after = start + step * 5

        if rng.next() < 0.5:
            verb = "Subtract" if decreasing else "Add"
            sign = "-" if decreasing else "+"
            return {
                "question_type": QuestionType.MCQ_SINGLE,
                "prompt": f"What comes next? {', '.join(str(n) for n in seq)}, ?",
                "choices": choices4(rng, after, after + step, after - step, after + 1),
                "correct_answer": str(after),
                "explanation": f"{verb} {step} each time: {seq[4]} {sign} {step} = {after}.",
            }

        hole = rng.int(2, 3)
        missing = seq[hole]
        shown = ", ".join("□" if idx == hole else str(n) for idx, n in enumerate(seq))
        return {
            "question_type": QuestionType.MCQ_SINGLE,
            "prompt": f"Fill in the missing number: {shown}",
            "choices": choices4(rng, missing, missing + step, missing - step, missing + 1),
            "correct_answer": str(missing),
            "explanation": f"The pattern {'subtracts' if decreasing else 'adds'} {step} each time.",
        }

    def _rule_pattern(self, rng, difficulty):
        step = rng.pick(tier(difficulty, (2, 3, 5), (3, 4, 6), (6, 7, 8)))
        seq = [step * (j + 1) for j in range(5)]
        correct = [f"Add {step} each time", f"Counting by {step}s"]
        wrong = [
            "Multiply by 2 each time",
            f"Counting by {step - 1}s",
            f"Add {step + 1} each time",
        ]
        return {
            "question_type": QuestionType.MCQ_MULTI,
            "prompt": f"Select ALL rules that match: {', '.join(str(n) for n in seq)}",
            "choices": rng.shuffle([*correct, *rng.shuffle(wrong)[:2]]),
            "correct_answer": correct,
            "explanation": f"Each number is {step} more than the last = counting by {step}s.",
        }

    def _function_machine(self, rng, difficulty):
        if difficulty <= 2:
            op = "add"
        elif difficulty <= 4:
            op = rng.pick(("add", "multiply"))
        else:
            op = rng.pick(("add", "multiply", "two_op"))
        n = rng.pick(tier(difficulty, (2, 3, 4), (3, 4, 5), (4, 5, 6)))
        n2 = rng.pick((1, 2, 3))

        inputs = [1, 2, 3, 4]
        outputs = [_apply_rule(op, n, n2, x) for x in inputs]
        test_in = rng.pick((5, 6, 7))
        test_out = _apply_rule(op, n, n2, test_in)

        if op == "add":
            explanation = f"Add {n}: {test_in} + {n} = {test_out}."
        elif op == "multiply":
            explanation = f"Multiply by {n}: {test_in} × {n} = {test_out}."
        else:
            explanation = f"Multiply by {n} then add {n2}: {test_in} × {n} + {n2} = {test_out}."

        table = ", ".join(f"{x}→{y}" for x, y in zip(inputs, outputs))
        return {
            "question_type": QuestionType.VISUAL,
            "prompt": f"In → Out: {table}. If In = {test_in}, Out = ?",
            "visual": {
                "type": "functionMachine",
                "operation": op,
                "n": n,
                "examples": [{"input": x, "output": y} for x, y in zip(inputs, outputs)],
            },
            "choices": choices4(rng, test_out, test_out + 1, test_out - 1, test_out + n),
            "correct_answer": str(test_out),
            "explanation": explanation,
        }


def generate_patterns(version: str = "v1", seed: int = 1337, count: int = 700):
    return PatternsGenerator().generate(version, seed, count)
