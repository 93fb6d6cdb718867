"""
Single elimination bracket generation and winner propagation.
"""
import math
import random
from typing import List, Dict, Tuple, Optional

from .models import Competitor, Match
from .outcomes import OutcomeStore


EMPTY = 'empty'
PENDING = 'pending'
DECIDED = 'decided'


def match_id(round_index: int, match_index: int) -> str:
    """Deterministic match key, derived only from the match's position in the tree."""
    return f"r{round_index}-m{match_index}"


def next_power_of_two(n: int) -> int:
    p = 1
    while p < n:
        p <<= 1
    return p


def calculate_bracket_size(num_entrants: int) -> int:
    """Calculate the bracket size (next power of 2, at least 2)."""
    if num_entrants <= 0:
        return 0
    return max(2, next_power_of_two(num_entrants))


def calculate_byes(num_entrants: int) -> int:
    """Calculate number of byes needed."""
    return calculate_bracket_size(num_entrants) - num_entrants


def calculate_total_rounds(bracket_size: int) -> int:
    if bracket_size < 2:
        return 0
    return int(math.log2(bracket_size))


def get_round_name(round_index: int, total_rounds: int) -> str:
    """Get the display name of a round from its 0-based index."""
    if round_index == total_rounds - 1:
        return "Final"
    return f"Round {round_index + 1}"


def generate_seeding(size: int) -> List[int]:
    """
    Generate the standard tournament seed order for a bracket of ``size`` slots.

    Each pass doubles the sequence by pairing every seed ``x`` with ``S + 1 - x``,
    so if all higher seeds win they meet in the proper rounds.

    For 8 slots: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    Final: 1v2 (if chalk)
    """
    if size < 2:
        return [1]
    order = [1, 2]
    while len(order) < size:
        doubled = len(order) * 2
        next_order = []
        for seed in order:
            next_order.extend([seed, doubled + 1 - seed])
        order = next_order
    return order


def seed_entrants(entrant_names: List[str], shuffle: bool,
                  rng: Optional[random.Random] = None) -> List[Competitor]:
    """
    Create competitors for the entrants, seeded by their final order.

    Seeds always follow the post-shuffle position, so seed 1 is the first slot
    rather than the first name typed.
    """
    seeded = [Competitor.entrant(name, i + 1) for i, name in enumerate(entrant_names)]
    if shuffle:
        rng = rng or random.Random()
        # Fisher-Yates
        for i in range(len(seeded) - 1, 0, -1):
            j = rng.randint(0, i)
            seeded[i], seeded[j] = seeded[j], seeded[i]
        seeded = [c.with_seed(idx + 1) for idx, c in enumerate(seeded)]
    return seeded


def _bye_winner(match: Match) -> Optional[Competitor]:
    """Return the real competitor of a match against a bye, if that is what it is."""
    a, b = match.player_a, match.player_b
    if a is None or b is None:
        return None
    if a.is_bye and not b.is_bye:
        return b
    if b.is_bye and not a.is_bye:
        return a
    return None


def build_bracket(entrant_names: List[str], shuffle: bool,
                  rng: Optional[random.Random] = None) -> Tuple[List[Match], Dict[str, str]]:
    """
    Create the first round of a single elimination bracket.

    Returns (round0_matches, initial_outcomes). ``initial_outcomes`` maps the id of
    every match pairing a real entrant with a bye to that entrant's id and is meant
    to pre-seed the outcome store. An empty entrant list builds nothing.
    """
    if not entrant_names:
        return [], {}

    num_entrants = len(entrant_names)
    bracket_size = calculate_bracket_size(num_entrants)
    seeded = seed_entrants(entrant_names, shuffle, rng)

    slots = []
    for seed in generate_seeding(bracket_size):
        if seed <= num_entrants:
            slots.append(seeded[seed - 1])
        else:
            slots.append(Competitor.bye(seed))

    round0 = []
    for i in range(0, len(slots), 2):
        round0.append(Match(match_id(0, i // 2), slots[i], slots[i + 1]))

    auto_wins = {}
    for match in round0:
        winner = _bye_winner(match)
        if winner:
            auto_wins[match.id] = winner.id

    return round0, auto_wins


def _resolve_winner(match: Match, outcomes, allow_bye: bool = True) -> Optional[Competitor]:
    """
    Determine the winner of a match.

    An explicit pick wins over everything; a pick that matches neither side (for
    example one left over from an earlier build) resolves to no winner. Without a
    pick, a real competitor facing a bye advances.
    """
    picked = outcomes.get(match.id)
    if picked:
        return match.find_player(picked)
    if allow_bye:
        return _bye_winner(match)
    return None


def _place_next(rounds: List[List[Match]], round_index: int, match_index: int,
                competitor: Optional[Competitor]):
    if round_index >= len(rounds) - 1 or competitor is None:
        return
    parent = rounds[round_index + 1][match_index // 2]
    if match_index % 2 == 0:
        parent.player_a = competitor
    else:
        parent.player_b = competitor


def derive_rounds(round0_matches: List[Match], outcomes=None) -> Tuple[List[List[Match]], Optional[Competitor]]:
    """
    Rebuild every round of the bracket from the first round and the outcome store.

    Args:
        round0_matches: First round matches as produced by build_bracket
        outcomes: OutcomeStore or plain dict of match id -> competitor id

    Returns:
        (rounds, champion). Inputs are never mutated, so calling this twice with
        the same arguments yields equal trees.
    """
    if outcomes is None:
        outcomes = {}
    if not round0_matches:
        return [], None

    bracket_size = len(round0_matches) * 2
    total_rounds = calculate_total_rounds(bracket_size)

    rounds = []
    first_round = []
    for i, m in enumerate(round0_matches):
        mid = match_id(0, i)
        first_round.append(Match(mid, m.player_a, m.player_b, outcomes.get(mid)))
    rounds.append(first_round)

    for r in range(1, total_rounds):
        matches_in_round = bracket_size // (2 ** (r + 1))
        rounds.append([
            Match(match_id(r, i), winner_id=outcomes.get(match_id(r, i)))
            for i in range(matches_in_round)
        ])

    for r in range(total_rounds - 1):
        for i, match in enumerate(rounds[r]):
            winner = _resolve_winner(match, outcomes)
            match.winner_id = winner.id if winner else None
            _place_next(rounds, r, i, winner)

    final = rounds[-1][0]
    champion = None
    if final.player_a is not None and final.player_b is not None:
        champion = _resolve_winner(final, outcomes, allow_bye=False)
    final.winner_id = champion.id if champion else None

    return rounds, champion


def match_state(match: Match) -> str:
    """Return 'empty', 'pending' or 'decided' for a derived match."""
    if match.player_a is None or match.player_b is None:
        return EMPTY
    if match.winner_id is None:
        return PENDING
    return DECIDED


def pick_winner(rounds: List[List[Match]], outcomes: OutcomeStore, round_index: int,
                match_index: int, competitor_id: str) -> bool:
    """
    Record a user's pick for the match at (round_index, match_index).

    Picking in a match that does not exist, an empty slot, or a bye is ignored.
    Returns True when the store was written; callers re-derive the rounds after.
    """
    if not 0 <= round_index < len(rounds):
        return False
    if not 0 <= match_index < len(rounds[round_index]):
        return False
    match = rounds[round_index][match_index]
    return outcomes.record_winner(match.id, match.find_player(competitor_id))


def get_bracket_display(round0_matches: List[Match], outcomes=None) -> Dict:
    """
    Get bracket data formatted for UI display.
    """
    rounds, champion = derive_rounds(round0_matches, outcomes)
    total_rounds = len(rounds)

    entrants = 0
    byes = 0
    for match in round0_matches:
        for player in match.players:
            if player is None:
                continue
            if player.is_bye:
                byes += 1
            else:
                entrants += 1

    unresolved = sum(1 for matches in rounds for m in matches if match_state(m) == PENDING)

    return {
        'rounds': rounds,
        'round_names': [get_round_name(r, total_rounds) for r in range(total_rounds)],
        'champion': champion,
        'bracket_size': len(round0_matches) * 2,
        'total_rounds': total_rounds,
        'total_entrants': entrants,
        'byes': byes,
        'unresolved': unresolved,
    }
