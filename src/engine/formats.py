"""
Tournament formats the fixture generator understands.
"""
from .exceptions import InvalidFormatError


class TournamentFormat:
    ROUND_ROBIN = 'roundRobin'
    ROUND_ROBIN_GROUPS = 'roundRobinGroups'
    SINGLE_ELIMINATION = 'singleElimination'
    DOUBLE_ELIMINATION = 'doubleElimination'
    POOL_PLAY_PLAYOFFS = 'poolPlayPlayoffs'
    POOL_PLAY_CUPS = 'poolPlayCups'
    SWISS = 'swiss'

    ALL = (ROUND_ROBIN, ROUND_ROBIN_GROUPS, SINGLE_ELIMINATION, DOUBLE_ELIMINATION,
           POOL_PLAY_PLAYOFFS, POOL_PLAY_CUPS, SWISS)

    # Entrants a category is padded up to before pairing
    REQUIRED_PLAYERS = {
        ROUND_ROBIN: 2,
        ROUND_ROBIN_GROUPS: 4,
        SINGLE_ELIMINATION: 8,
        DOUBLE_ELIMINATION: 8,
        POOL_PLAY_PLAYOFFS: 8,
        POOL_PLAY_CUPS: 8,
        SWISS: 4,
    }

    DEFAULT_GROUP_COUNT = 2

    @classmethod
    def validate(cls, fmt: str) -> str:
        if fmt not in cls.ALL:
            raise InvalidFormatError(f"Unsupported tournament format: {fmt}")
        return fmt

    @classmethod
    def required_players(cls, fmt: str) -> int:
        return cls.REQUIRED_PLAYERS[cls.validate(fmt)]

    @classmethod
    def uses_groups(cls, fmt: str) -> bool:
        return fmt in (cls.ROUND_ROBIN_GROUPS, cls.POOL_PLAY_PLAYOFFS, cls.POOL_PLAY_CUPS)

    @classmethod
    def has_playoffs(cls, fmt: str) -> bool:
        return fmt in (cls.POOL_PLAY_PLAYOFFS, cls.POOL_PLAY_CUPS)

    @classmethod
    def is_elimination(cls, fmt: str) -> bool:
        return fmt in (cls.SINGLE_ELIMINATION, cls.DOUBLE_ELIMINATION)
