"""
Unit tests for match code generation.
"""
import random
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from engine.codes import CODE_ALPHABET, CODE_LENGTH, generate_code, generate_codes
from engine.elimination import generate_bracket


class TestGenerateCode:

    def test_alphabet(self):
        assert len(CODE_ALPHABET) == 32
        assert len(set(CODE_ALPHABET)) == 32
        for ambiguous in "0O1I":
            assert ambiguous not in CODE_ALPHABET
        assert CODE_ALPHABET == CODE_ALPHABET.upper()

    def test_code_length_and_symbols(self):
        for _ in range(200):
            code = generate_code()
            assert len(code) == CODE_LENGTH == 6
            assert all(c in CODE_ALPHABET for c in code)

    def test_seeded_rng_is_reproducible(self):
        assert generate_code(random.Random(5)) == generate_code(random.Random(5))


class TestGenerateCodes:

    def test_shape_matches_bracket(self):
        bracket = generate_bracket([f"T{i}" for i in range(6)])
        codes = generate_codes(bracket)
        assert [len(r) for r in codes] == [len(r) for r in bracket] == [4, 2, 1]

    def test_every_code_valid(self):
        bracket = generate_bracket([f"T{i}" for i in range(16)])
        for round_codes in generate_codes(bracket, rng=random.Random(11)):
            for code in round_codes:
                assert len(code) == 6
                assert set(code) <= set(CODE_ALPHABET)
