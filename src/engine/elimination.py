"""
Single elimination bracket generation and winner advancement.

A bracket is a list of rounds, each round a list of matches and each match a
two-element list ``[slot_a, slot_b]``. A slot holds a team name, ``BYE``, or
``None`` while the match feeding it is undecided. Results and match codes
share the same round/match shape as the bracket.
"""
import copy
import logging
import math
import random
from typing import List, Optional, Sequence, Tuple

from .errors import AlreadyDecided, InvalidInput, InvalidWinner, OutOfRange
from .models import BYE, MAX_BRACKET_SIZE, MIN_TEAMS

logger = logging.getLogger(__name__)

Match = List[Optional[str]]
Bracket = List[List[Match]]
Results = List[List[Optional[str]]]


def get_round_name(teams_in_round: int) -> str:
    """Get the name of a round based on number of teams."""
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def calculate_bracket_size(num_teams: int) -> int:
    """Calculate the bracket size (next power of 2, at least 2, at most 16)."""
    return min(2 ** math.ceil(math.log2(max(num_teams, MIN_TEAMS))), MAX_BRACKET_SIZE)


def calculate_byes(num_teams: int) -> int:
    """Calculate number of byes needed."""
    return calculate_bracket_size(num_teams) - num_teams


def validate_team_names(team_names: Sequence[str]):
    """Raise InvalidInput unless team_names can be seeded into a bracket."""
    if len(team_names) < MIN_TEAMS:
        raise InvalidInput(f"At least {MIN_TEAMS} teams are required, got {len(team_names)}")
    if len(team_names) > MAX_BRACKET_SIZE:
        raise InvalidInput(f"At most {MAX_BRACKET_SIZE} teams are supported, got {len(team_names)}")
    seen = set()
    for name in team_names:
        if not isinstance(name, str) or not name.strip():
            raise InvalidInput(f"Invalid team name: {name!r}")
        if name == BYE:
            raise InvalidInput(f"'{BYE}' is reserved and cannot be used as a team name")
        if name in seen:
            raise InvalidInput(f"Duplicate team name: {name}")
        seen.add(name)


def seed_positions(entries: Sequence[str]) -> List[str]:
    """
    Place entries alternately from the front and from the back.

    Entries at even positions fill slots from index 0 upwards, entries at odd
    positions fill slots from the last index downwards. For entries 1..8 the
    slots read [1, 3, 5, 7, 8, 6, 4, 2].
    """
    seeded = [None] * len(entries)
    left, right = 0, len(entries) - 1
    for i, entry in enumerate(entries):
        if i % 2 == 0:
            seeded[left] = entry
            left += 1
        else:
            seeded[right] = entry
            right -= 1
    return seeded


def generate_bracket(team_names: Sequence[str], rng: Optional[random.Random] = None) -> Bracket:
    """
    Generate a randomly seeded single elimination bracket.

    The team list is shuffled, padded with BYE up to the bracket size and
    placed with seed_positions(). Round 0 pairs consecutive slots; every
    later round has half the matches of the one before it, with both slots
    empty until winners are advanced into them.

    Byes are not resolved here; see advance_byes().
    """
    validate_team_names(team_names)
    rng = rng or random

    entries = list(team_names)
    rng.shuffle(entries)

    bracket_size = calculate_bracket_size(len(entries))
    entries.extend([BYE] * (bracket_size - len(entries)))
    seeded = seed_positions(entries)

    bracket = [[[seeded[i], seeded[i + 1]] for i in range(0, bracket_size, 2)]]
    num_matches = bracket_size // 2
    while num_matches > 1:
        num_matches //= 2
        bracket.append([[None, None] for _ in range(num_matches)])

    logger.debug("Generated %d-slot bracket with %d rounds for %d teams",
                 bracket_size, len(bracket), len(team_names))
    return bracket


def empty_results(bracket: Bracket) -> Results:
    """Create a results structure with no winners, shaped like the bracket."""
    return [[None] * len(round_matches) for round_matches in bracket]


def set_winner(bracket: Bracket, results: Results, round_idx: int, match_idx: int,
               winner: str) -> Tuple[Bracket, Results]:
    """
    Record the winner of a match and advance it into the next round.

    The winner of match m goes to match m // 2 of the next round, into slot A
    when m is even and slot B when m is odd. Nothing is propagated from the
    final.

    Returns updated copies of bracket and results; the arguments are left
    untouched, also when an error is raised.

    Raises:
        OutOfRange: round_idx/match_idx does not name a match.
        AlreadyDecided: the match already has a winner.
        InvalidWinner: the match is not ready (a slot is still empty), the
            winner is not one of its occupants, or a bye is named as the
            winner against a team.
    """
    if not 0 <= round_idx < len(bracket) or not 0 <= match_idx < len(bracket[round_idx]):
        raise OutOfRange(f"No match {match_idx} in round {round_idx}")

    slot_a, slot_b = bracket[round_idx][match_idx]
    decided = results[round_idx][match_idx]
    if decided is not None:
        raise AlreadyDecided(f"Match {match_idx} in round {round_idx} was already won by {decided}")
    if slot_a is None or slot_b is None:
        raise InvalidWinner(f"Match {match_idx} in round {round_idx} is not ready")
    if winner not in (slot_a, slot_b):
        raise InvalidWinner(f"{winner} is not playing in match {match_idx} of round {round_idx}")
    if winner == BYE and (slot_a, slot_b) != (BYE, BYE):
        raise InvalidWinner(f"A bye cannot win match {match_idx} of round {round_idx}")

    bracket = copy.deepcopy(bracket)
    results = copy.deepcopy(results)
    results[round_idx][match_idx] = winner

    if round_idx + 1 < len(bracket):
        bracket[round_idx + 1][match_idx // 2][match_idx % 2] = winner
    else:
        logger.debug("Final decided: %s", winner)

    return bracket, results


def advance_byes(bracket: Bracket, results: Results) -> Tuple[Bracket, Results]:
    """
    Resolve every match that has a bye in it.

    The team paired with a bye wins; two byes produce a bye, which is then
    resolved in the following round. Rounds are walked in order so that a
    single pass reaches every bye.
    """
    for round_idx in range(len(bracket)):
        for match_idx in range(len(bracket[round_idx])):
            slot_a, slot_b = bracket[round_idx][match_idx]
            if results[round_idx][match_idx] is not None:
                continue
            if slot_a is None or slot_b is None or BYE not in (slot_a, slot_b):
                continue
            winner = slot_b if slot_a == BYE else slot_a
            bracket, results = set_winner(bracket, results, round_idx, match_idx, winner)
    return bracket, results


def is_started(bracket: Bracket, results: Results) -> bool:
    """Whether any match between two teams has been decided."""
    for round_matches, round_results in zip(bracket, results):
        for match, winner in zip(round_matches, round_results):
            if winner is not None and BYE not in match:
                return True
    return False


def get_champion(results: Results) -> Optional[str]:
    """Winner of the final, or None while the tournament is running."""
    if not results:
        return None
    return results[-1][0]


def get_bracket_display(bracket: Bracket, results: Results, codes: Optional[List[List[str]]] = None) -> dict:
    """
    Get bracket data formatted for UI display.
    """
    bracket_size = len(bracket[0]) * 2 if bracket else 0
    first_round_slots = [slot for match in bracket[0] for slot in match] if bracket else []

    rounds = []
    for round_idx, round_matches in enumerate(bracket):
        matches = []
        for match_idx, (slot_a, slot_b) in enumerate(round_matches):
            winner = results[round_idx][match_idx]
            is_bye = BYE in (slot_a, slot_b)
            is_placeholder = slot_a is None or slot_b is None
            matches.append({
                'teams': [
                    slot_a or f'Winner M{match_idx * 2 + 1}',
                    slot_b or f'Winner M{match_idx * 2 + 2}',
                ],
                'round_index': round_idx,
                'match_index': match_idx,
                'match_number': match_idx + 1,
                'code': codes[round_idx][match_idx] if codes else None,
                'winner': winner,
                'is_bye': is_bye,
                'is_placeholder': is_placeholder,
                'is_playable': winner is None and not is_bye and not is_placeholder,
            })
        rounds.append({
            'name': get_round_name(len(round_matches) * 2),
            'matches': matches,
        })

    return {
        'rounds': rounds,
        'bracket_size': bracket_size,
        'total_rounds': len(bracket),
        'total_teams': sum(1 for slot in first_round_slots if slot != BYE),
        'byes': first_round_slots.count(BYE),
        'champion': get_champion(results),
    }
