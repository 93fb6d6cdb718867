"""
Outcome store: the durable mapping of match id -> chosen competitor id.
"""
from typing import Dict, Optional

from .models import Competitor


class OutcomeStore:
    """Holds winner picks keyed by match id.

    Entries are only ever overwritten or cleared wholesale. Byes are never
    recorded as explicit picks; bye advancement is recomputed during
    derivation (the builder may still pre-seed bye winners via ``update``).
    """

    def __init__(self, winners: Optional[Dict[str, str]] = None):
        self._winners = {}
        if winners:
            self.update(winners)

    def record_winner(self, match_id: str, competitor: Optional[Competitor]) -> bool:
        """Record ``competitor`` as the winner of ``match_id``. Returns False on a no-op."""
        if not match_id or competitor is None or competitor.is_bye:
            return False
        self._winners[match_id] = competitor.id
        return True

    def update(self, winners: Dict[str, str]):
        for match_id, competitor_id in winners.items():
            if match_id and competitor_id:
                self._winners[str(match_id)] = str(competitor_id)

    def clear(self):
        self._winners.clear()

    def get(self, match_id: str) -> Optional[str]:
        return self._winners.get(match_id)

    def to_dict(self) -> Dict[str, str]:
        return dict(self._winners)

    def __contains__(self, match_id):
        return match_id in self._winners

    def __len__(self):
        return len(self._winners)

    def __repr__(self):
        return f"OutcomeStore(winners={self._winners})"
