"""
Data models shared by the fixture generators and the advancement propagator.
"""
import re
from typing import Dict, List, Optional, Tuple

BYE_ID = 'bye'
DUMMY_PREFIX = 'dummy_'

STAGE_POOL = 'pool'
STAGE_PLAYOFF = 'playoff'

QUARTER_FINAL = 'quarterFinal'
SEMI_FINAL = 'semiFinal'
FINAL = 'final'
THIRD_PLACE = '3rdPlace'

CUP_GOLD = 'gold'
CUP_SILVER = 'silver'

BRACKET_WINNERS = 'winners'
BRACKET_LOSERS = 'losers'
BRACKET_FINAL = 'final'

STATE_PENDING = 'pending'
STATE_READY = 'ready'
STATE_COMPLETED = 'completed'


def is_placeholder(participant_id: Optional[str]) -> bool:
    """Check whether an id belongs to a synthetic bye/dummy entrant."""
    if not participant_id:
        return False
    return participant_id == BYE_ID or participant_id.startswith(DUMMY_PREFIX)


def placeholder_display_name(participant_id: str) -> str:
    """Human name for a placeholder entrant ("Bye", "Player 3", ...)."""
    if participant_id == BYE_ID:
        return 'Bye'
    match = re.match(r'dummy_(\d+)$', participant_id or '')
    if match:
        return f"Player {int(match.group(1)) + 1}"
    return 'Unknown Player'


class Participant:
    def __init__(self, id, category, seed=None):
        self.id = id
        self.category = category
        self.seed = seed

    @classmethod
    def from_dict(cls, data: Dict) -> 'Participant':
        return cls(id=data['id'], category=data.get('category'), seed=data.get('seed'))

    def to_dict(self) -> Dict:
        return {'id': self.id, 'category': self.category, 'seed': self.seed}

    @property
    def is_placeholder(self) -> bool:
        return is_placeholder(self.id)

    def __eq__(self, other):
        if not isinstance(other, Participant):
            return NotImplemented
        return (self.id, self.category, self.seed) == (other.id, other.category, other.seed)

    def __repr__(self):
        return f"Participant(id={self.id}, category={self.category}, seed={self.seed})"


class Match:
    """
    One fixture between two participant slots.

    Slots left as None are filled later, either by the advancement
    propagator or by an organizer.
    """

    FIELDS = ('id', 'round', 'match_number', 'player1', 'player2', 'winner', 'score',
              'completed', 'category', 'stage', 'group', 'playoff_round', 'cup', 'bracket')

    def __init__(self, id, round, match_number, category, player1=None, player2=None,
                 winner=None, score=None, completed=False, stage=None, group=None,
                 playoff_round=None, cup=None, bracket=None):
        self.id = id
        self.round = round
        self.match_number = match_number
        self.category = category
        self.player1 = player1
        self.player2 = player2
        self.winner = winner
        self.score = score
        self.completed = completed
        self.stage = stage
        self.group = group
        self.playoff_round = playoff_round
        self.cup = cup
        self.bracket = bracket

    @classmethod
    def from_dict(cls, data: Dict) -> 'Match':
        return cls(**{field: data.get(field) for field in cls.FIELDS if field in data})

    def to_dict(self) -> Dict:
        return {field: getattr(self, field) for field in self.FIELDS}

    def copy(self) -> 'Match':
        return Match.from_dict(self.to_dict())

    def has_data(self) -> bool:
        """True when the match carries anything an organizer entered or advancement filled."""
        return bool(self.player1 or self.player2 or self.score or self.completed)

    def loser(self) -> Optional[str]:
        if not self.completed or self.winner is None:
            return None
        return self.player2 if self.player1 == self.winner else self.player1

    def state(self) -> str:
        if self.completed:
            return STATE_COMPLETED
        if self.player1 is None or self.player2 is None:
            return STATE_PENDING
        return STATE_READY

    def playoff_key(self) -> Optional[Tuple]:
        if not self.playoff_round:
            return None
        return (self.category, self.playoff_round, self.match_number, self.cup)

    def __eq__(self, other):
        if not isinstance(other, Match):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"Match(id={self.id}, round={self.round}, match_number={self.match_number}, "
                f"player1={self.player1}, player2={self.player2}, winner={self.winner})")


class Group:
    def __init__(self, id, name, category, player_ids=None):
        self.id = id
        self.name = name
        self.category = category
        self.player_ids = list(player_ids) if player_ids else []

    @property
    def letter(self) -> str:
        # "Group A" -> "A"
        parts = self.name.split(' ')
        return parts[1] if len(parts) > 1 else ''

    @classmethod
    def from_dict(cls, data: Dict) -> 'Group':
        return cls(id=data['id'], name=data['name'], category=data.get('category'),
                   player_ids=data.get('player_ids') or [])

    def to_dict(self) -> Dict:
        return {'id': self.id, 'name': self.name, 'category': self.category,
                'player_ids': list(self.player_ids)}

    def copy(self) -> 'Group':
        return Group.from_dict(self.to_dict())

    def __eq__(self, other):
        if not isinstance(other, Group):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Group(id={self.id}, name={self.name}, player_ids={self.player_ids})"


def matches_from_dicts(items: List[Dict]) -> List[Match]:
    return [Match.from_dict(item) for item in items or []]


def groups_from_dicts(items: List[Dict]) -> List[Group]:
    return [Group.from_dict(item) for item in items or []]
