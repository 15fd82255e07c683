"""
Tests for select_next: band, exclusion, anti-repetition, relaxation ladder
and the weighted draw. Pools are built by hand so every case is explicit.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from striker.core.rng import SeededRandom
from striker.models.bank import BankItem, SelectionCriteria
from striker.services.bank_compiler import generate_bank
from striker.services.bank_store import InMemoryBankStore
from striker.services.selector import (
    build_candidates,
    difficulty_band,
    pick_weighted,
    resolve_target_skill,
    select_next,
)
from striker.services.session_history import SessionHistory


def _item(item_id, difficulty, skill="mult_facts", domain="multiplication"):
    return BankItem(
        id=item_id,
        version="v1",
        domain=domain,
        skill_tag=skill,
        grade_band="3",
        question_type="mcq_single",
        global_difficulty=difficulty,
        skill_difficulty=difficulty,
        prompt=f"prompt {item_id}",
        choices=["1", "2", "3", "4"],
        correct_answer="1",
        hash=f"h-{item_id}",
    )


class FixedRandom:
    """RandomSource returning a scripted sequence."""

    def __init__(self, *values):
        self.values = list(values)

    def next(self):
        return self.values.pop(0)


def _pool():
    pool = []
    for d in range(1, 7):
        pool.append(_item(f"m{d}", d))
        pool.append(_item(f"f{d}", d, skill="frac_compare", domain="fractions"))
    return pool


class TestBand:

    def test_band_clamped(self):
        assert difficulty_band(1) == (1, 2)
        assert difficulty_band(3) == (2, 4)
        assert difficulty_band(6) == (5, 6)

    def test_result_within_band(self):
        pool = _pool()
        for seed in range(50):
            item = select_next(SelectionCriteria(target_difficulty=3), pool, SeededRandom(seed))
            assert 2 <= item.global_difficulty <= 4


class TestExclusion:

    def test_recent_ids_never_returned(self):
        pool = _pool()
        recent = [i.id for i in pool if i.global_difficulty in (2, 3, 4)][:5]
        for seed in range(50):
            criteria = SelectionCriteria(target_difficulty=3, recent_ids=recent)
            item = select_next(criteria, pool, SeededRandom(seed))
            assert item.id not in recent

    def test_exclusion_survives_full_relaxation(self):
        pool = [_item("only", 1)]
        criteria = SelectionCriteria(target_difficulty=6, recent_ids=["only"])
        assert select_next(criteria, pool, SeededRandom(1)) is None

    def test_empty_pool(self):
        assert select_next(SelectionCriteria(target_difficulty=3), [], SeededRandom(1)) is None


class TestSkillTargeting:

    def test_explicit_skill_tag(self):
        pool = _pool()
        for seed in range(30):
            criteria = SelectionCriteria(target_difficulty=3, skill_tag="frac_compare")
            assert select_next(criteria, pool, SeededRandom(seed)).skill_tag == "frac_compare"

    def test_domain_matches_as_skill(self):
        pool = _pool()
        criteria = SelectionCriteria(target_difficulty=3, skill_tag="fractions")
        assert select_next(criteria, pool, SeededRandom(4)).domain == "fractions"

    def test_anti_repetition_clears_target(self):
        criteria = SelectionCriteria(
            target_difficulty=3,
            skill_tag="frac_compare",
            recent_skill_tags=["mult_facts", "frac_compare", "frac_compare"],
        )
        assert resolve_target_skill(criteria, FixedRandom()) is None

    def test_single_repeat_keeps_target(self):
        criteria = SelectionCriteria(
            target_difficulty=3,
            skill_tag="frac_compare",
            recent_skill_tags=["mult_facts", "frac_compare"],
        )
        assert resolve_target_skill(criteria, FixedRandom()) == "frac_compare"

    def test_weak_skill_cleared_after_two_serves(self):
        criteria = SelectionCriteria(
            target_difficulty=3,
            weak_skills=["fractions"],
            recent_skill_tags=["fractions", "fractions"],
        )
        # bias roll hits, index roll picks "fractions", then anti-repetition clears it
        assert resolve_target_skill(criteria, FixedRandom(0.1, 0.0)) is None

    def test_weak_domain_cleared_by_its_skill_tags(self):
        criteria = SelectionCriteria(
            target_difficulty=3,
            weak_skills=["fractions"],
            recent_skill_tags=["mult_facts", "frac_compare", "frac_of_set"],
        )
        assert resolve_target_skill(criteria, FixedRandom(0.1, 0.0)) is None

    def test_weak_domain_kept_after_other_domain(self):
        criteria = SelectionCriteria(
            target_difficulty=3,
            weak_skills=["fractions"],
            recent_skill_tags=["frac_compare", "mult_facts"],
        )
        assert resolve_target_skill(criteria, FixedRandom(0.1, 0.0)) == "fractions"

    def test_weak_skill_bias_below_threshold(self):
        criteria = SelectionCriteria(target_difficulty=3, weak_skills=["fractions", "patterns"])
        assert resolve_target_skill(criteria, FixedRandom(0.39, 0.6)) == "patterns"

    def test_weak_skill_bias_above_threshold(self):
        criteria = SelectionCriteria(target_difficulty=3, weak_skills=["fractions"])
        assert resolve_target_skill(criteria, FixedRandom(0.4)) is None

    def test_no_weak_skills_draws_nothing(self):
        criteria = SelectionCriteria(target_difficulty=3)
        # an empty script would raise if a draw happened
        assert resolve_target_skill(criteria, FixedRandom()) is None


class TestRelaxation:

    def test_drops_skill_when_no_skill_match(self):
        pool = [_item("m3", 3)]
        criteria = SelectionCriteria(target_difficulty=3, skill_tag="frac_compare")
        assert select_next(criteria, pool, SeededRandom(1)).id == "m3"

    def test_drops_band_keeping_exclusion(self):
        pool = [_item("far", 6), _item("near", 2)]
        criteria = SelectionCriteria(target_difficulty=2, recent_ids=["near"])
        assert select_next(criteria, pool, SeededRandom(1)).id == "far"

    def test_pool_cap_without_rng_is_prefix(self):
        pool = [_item(f"i{n}", 3) for n in range(80)]
        out = build_candidates(pool, set(), (2, 4), None, cap=50)
        assert len(out) == 50
        assert out[0].id == "i0" and out[-1].id == "i49"

    def test_pool_cap_sample_reaches_past_prefix(self):
        pool = [_item(f"i{n}", 3) for n in range(200)]
        out = build_candidates(pool, set(), (2, 4), None, cap=50, rng=SeededRandom(7))
        assert len(out) == 50
        assert len({i.id for i in out}) == 50
        assert any(int(i.id[1:]) >= 50 for i in out)

    def test_pool_cap_sample_reproducible(self):
        pool = [_item(f"i{n}", 3) for n in range(200)]
        a = build_candidates(pool, set(), (2, 4), None, cap=50, rng=SeededRandom(7))
        b = build_candidates(pool, set(), (2, 4), None, cap=50, rng=SeededRandom(7))
        assert [i.id for i in a] == [i.id for i in b]

    def test_small_pool_draws_nothing_for_sampling(self):
        pool = [_item(f"i{n}", 3) for n in range(10)]
        # fewer matches than the cap: an empty script would raise if a draw happened
        out = build_candidates(pool, set(), (2, 4), None, cap=50, rng=FixedRandom())
        assert [i.id for i in out] == [f"i{n}" for n in range(10)]


class TestWeightedDraw:

    def test_exact_match_weighted_three(self):
        candidates = [_item("a", 2), _item("b", 3)]
        # weights [1, 3]; total 4
        assert pick_weighted(candidates, 3, FixedRandom(0.2)).id == "a"
        assert pick_weighted(candidates, 3, FixedRandom(0.3)).id == "b"
        assert pick_weighted(candidates, 3, FixedRandom(0.99)).id == "b"

    def test_exact_match_favoured_statistically(self):
        candidates = [_item("a", 2), _item("b", 3), _item("c", 4)]
        rng = SeededRandom(2024)
        hits = sum(pick_weighted(candidates, 3, rng).id == "b" for _ in range(3000))
        # expected share 3/5
        assert 0.55 < hits / 3000 < 0.65

    def test_reproducible_with_seed(self):
        pool = _pool()
        criteria = SelectionCriteria(target_difficulty=4, weak_skills=["fractions"])
        a = [select_next(criteria, pool, SeededRandom(s)).id for s in range(20)]
        b = [select_next(criteria, pool, SeededRandom(s)).id for s in range(20)]
        assert a == b


class TestCriteriaValidation:

    def test_target_out_of_range(self):
        with pytest.raises(ValueError):
            SelectionCriteria(target_difficulty=7)

    def test_recent_skill_tags_bounded(self):
        with pytest.raises(ValueError):
            SelectionCriteria(target_difficulty=3, recent_skill_tags=["a"] * 6)


# ---------------------------------------------------------------------------
# selection over a compiled bank
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module")
def compiled_store():
    bank = generate_bank("v1", 1337)
    return InMemoryBankStore([item for items in bank.values() for item in items])


def _serve(store, n, target, weak_skills=None):
    history = SessionHistory(session_id="s1")
    served = []
    for i in range(n):
        criteria = history.criteria(target, weak_skills)
        item = select_next(criteria, store.working_set(target), SeededRandom(42 + i))
        history.record(item)
        served.append(item)
    return served


class TestCompiledBank:

    def test_serves_more_than_one_domain(self, compiled_store):
        served = _serve(compiled_store, 60, 3)
        assert len({item.domain for item in served}) > 1

    def test_no_repeats_and_within_band(self, compiled_store):
        served = _serve(compiled_store, 60, 3)
        assert len({item.id for item in served}) == 60
        assert all(2 <= item.global_difficulty <= 4 for item in served)

    def test_weak_domain_gets_served(self, compiled_store):
        served = _serve(compiled_store, 60, 3, weak_skills=["patterns"])
        assert any(item.domain == "patterns" for item in served)
