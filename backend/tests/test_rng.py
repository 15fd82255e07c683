"""
Reference vectors for the seeded random source.
Expected values come from the JavaScript mulberry32 the bank format was
first produced with; any drift here changes every compiled bank.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from striker.core.rng import SeededRandom, entropy_rng


def _first(seed, n=3):
    rng = SeededRandom(seed)
    return [rng.next() for _ in range(n)]


class TestReferenceVectors:

    @pytest.mark.parametrize("seed, expected", [
        (0, [0.26642920868471265, 0.0003297457005828619, 0.2232720274478197]),
        (1, [0.6270739405881613, 0.002735721180215478, 0.5274470399599522]),
        (1337, [0.1844118325971067, 0.18998925131745636, 0.8104719922412187]),
        (4294967295, [0.8964226141106337, 0.189478256739676, 0.7156526781618595]),
    ])
    def test_first_three_draws(self, seed, expected):
        assert _first(seed) == expected

    def test_salted_multiplication_seed(self):
        seed = 1337 ^ 0x51F1C0DE
        assert seed == 1374799335
        assert _first(seed) == [0.6089877346530557, 0.37295934883877635, 0.3064954150468111]

    def test_negative_seed_reduces_mod_2_32(self):
        assert SeededRandom(-5).seed == 4294967291
        assert _first(-5) == [0.48384718922898173, 0.05296749505214393, 0.9390332337934524]

    def test_large_seed_wraps(self):
        assert _first(2 ** 32 + 1) == _first(1)


class TestHelpers:

    def test_int_inclusive_range(self):
        rng = SeededRandom(42)
        assert [rng.int(1, 6), rng.int(1, 6), rng.int(1, 6), rng.int(10, 20)] == [4, 3, 6, 17]

    def test_shuffle_in_place(self):
        items = [1, 2, 3, 4, 5, 6, 7, 8]
        out = SeededRandom(7).shuffle(items)
        assert out is items
        assert items == [5, 7, 2, 3, 4, 6, 8, 1]

    def test_pick(self):
        assert SeededRandom(7).pick(["a", "b", "c", "d"]) == "a"

    def test_next_in_unit_interval(self):
        rng = SeededRandom(99)
        for _ in range(2000):
            x = rng.next()
            assert 0.0 <= x < 1.0

    def test_int_never_leaves_bounds(self):
        rng = SeededRandom(3)
        values = {rng.int(2, 5) for _ in range(500)}
        assert values == {2, 3, 4, 5}

    def test_entropy_rng_is_seeded_random(self):
        rng = entropy_rng()
        assert isinstance(rng, SeededRandom)
        assert 0 <= rng.seed < 2 ** 32
