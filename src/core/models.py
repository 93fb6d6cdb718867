import uuid


BYE_NAME = "BYE"


def uid(prefix="id"):
    """Return a short random identifier such as ``p_3f9a1c2``."""
    return f"{prefix}_{uuid.uuid4().hex[:7]}"


class Competitor:
    def __init__(self, id, name, seed, is_bye=False):
        self.id = id
        self.name = name
        self.seed = seed
        self.is_bye = is_bye

    @classmethod
    def entrant(cls, name, seed):
        return cls(uid("p"), name, seed, is_bye=False)

    @classmethod
    def bye(cls, seed):
        return cls(uid("bye"), BYE_NAME, seed, is_bye=True)

    def with_seed(self, seed):
        return Competitor(self.id, self.name, seed, self.is_bye)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'seed': self.seed, 'is_bye': self.is_bye}

    @classmethod
    def from_dict(cls, data):
        """Rebuild a competitor from persisted data; returns None for unusable input."""
        if not isinstance(data, dict) or not data.get('id'):
            return None
        is_bye = bool(data.get('is_bye', False))
        name = data.get('name') or (BYE_NAME if is_bye else '')
        return cls(str(data['id']), str(name), data.get('seed'), is_bye)

    def __eq__(self, other):
        if not isinstance(other, Competitor):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"Competitor(id={self.id}, name={self.name}, seed={self.seed}, is_bye={self.is_bye})"


class Match:
    def __init__(self, id, player_a=None, player_b=None, winner_id=None):
        self.id = id
        self.player_a = player_a
        self.player_b = player_b
        self.winner_id = winner_id  # Competitor id, or None while undecided

    @property
    def players(self):
        return [self.player_a, self.player_b]

    def copy(self):
        return Match(self.id, self.player_a, self.player_b, self.winner_id)

    def find_player(self, competitor_id):
        """Return the competitor in this match with the given id, if any."""
        if competitor_id is None:
            return None
        for player in self.players:
            if player is not None and player.id == competitor_id:
                return player
        return None

    def to_dict(self):
        return {
            'id': self.id,
            'player_a': self.player_a.to_dict() if self.player_a else None,
            'player_b': self.player_b.to_dict() if self.player_b else None,
            'winner_id': self.winner_id,
        }

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            return None
        return cls(
            data.get('id'),
            Competitor.from_dict(data.get('player_a')),
            Competitor.from_dict(data.get('player_b')),
            data.get('winner_id'),
        )

    def __eq__(self, other):
        if not isinstance(other, Match):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Match(id={self.id}, player_a={self.player_a}, player_b={self.player_b}, winner_id={self.winner_id})"
