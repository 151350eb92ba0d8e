"""
Match codes: short random labels handed out once per match.

Codes are display labels only. Two matches may end up with the same code.
"""
import secrets
from typing import List

# Uppercase letters and digits without the look-alikes 0/O and 1/I
CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
CODE_LENGTH = 6


def generate_code(rng=None) -> str:
    """Generate a single match code, using secrets unless an rng is given."""
    choose = rng.choice if rng is not None else secrets.choice
    return ''.join(choose(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def generate_codes(bracket, rng=None) -> List[List[str]]:
    """Generate one code per match, shaped like the bracket."""
    return [[generate_code(rng) for _ in round_matches] for round_matches in bracket]
