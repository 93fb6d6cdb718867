"""
Persisted bracket document: everything needed to rebuild the bracket view.
"""
from typing import Dict, List, Optional

from .elimination import build_bracket, derive_rounds, get_bracket_display, pick_winner
from .entrants import parse_entrants
from .models import Match
from .outcomes import OutcomeStore


DEFAULT_TITLE = "Tournament Tool"


class BracketState:
    """
    The single saved blob of the application.

    Only the first round and the outcome store are kept; later rounds are always
    re-derived, so the stored match ids must stay valid across rebuilds.
    """

    def __init__(self, entrants_text: str = "", shuffle: bool = True,
                 initial_matches: Optional[List[Match]] = None,
                 outcomes: Optional[OutcomeStore] = None, title: str = DEFAULT_TITLE):
        self.entrants_text = entrants_text
        self.shuffle = shuffle
        self.initial_matches = initial_matches or []
        self.outcomes = outcomes if outcomes is not None else OutcomeStore()
        self.title = title

    @property
    def entrants(self) -> List[str]:
        return parse_entrants(self.entrants_text)

    def build(self, rng=None) -> bool:
        """Build a fresh bracket from the current entrants. Returns False when there are none."""
        entrants = self.entrants
        if not entrants:
            return False
        self.initial_matches, auto_wins = build_bracket(entrants, self.shuffle, rng)
        self.outcomes = OutcomeStore(auto_wins)
        return True

    def pick(self, round_index: int, match_index: int, competitor_id: str) -> bool:
        rounds, _ = derive_rounds(self.initial_matches, self.outcomes)
        return pick_winner(rounds, self.outcomes, round_index, match_index, competitor_id)

    def reset(self):
        """Drop the bracket and every recorded outcome; entrants and title are kept."""
        self.initial_matches = []
        self.outcomes.clear()

    def display(self) -> Dict:
        return get_bracket_display(self.initial_matches, self.outcomes)

    def to_dict(self) -> Dict:
        return {
            'entrants_text': self.entrants_text,
            'shuffle': self.shuffle,
            'initial_matches': [m.to_dict() for m in self.initial_matches],
            'winners_map': self.outcomes.to_dict(),
            'title': self.title,
        }

    @classmethod
    def from_dict(cls, data) -> 'BracketState':
        """Load a saved blob, falling back to defaults for anything missing or malformed."""
        if not isinstance(data, dict):
            return cls()

        entrants_text = data.get('entrants_text')
        if not isinstance(entrants_text, str):
            entrants_text = ""

        shuffle = data.get('shuffle')
        if not isinstance(shuffle, bool):
            shuffle = True

        initial_matches = []
        raw_matches = data.get('initial_matches')
        if isinstance(raw_matches, list):
            initial_matches = [Match.from_dict(raw) for raw in raw_matches]
        # A first round with unreadable matches, or that is not a full
        # power-of-two layer, cannot be re-derived
        count = len(initial_matches)
        if None in initial_matches or count & (count - 1):
            initial_matches = []

        winners = data.get('winners_map')
        outcomes = OutcomeStore(winners if isinstance(winners, dict) else None)

        title = data.get('title')
        if not isinstance(title, str) or not title:
            title = DEFAULT_TITLE

        return cls(entrants_text, shuffle, initial_matches, outcomes, title)

    def __repr__(self):
        return (f"BracketState(title={self.title}, entrants={len(self.entrants)}, "
                f"matches={len(self.initial_matches)}, outcomes={len(self.outcomes)})")
