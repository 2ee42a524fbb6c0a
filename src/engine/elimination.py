"""
Single elimination bracket generation.
"""
import math
from typing import List, Optional, Tuple

from .models import DUMMY_PREFIX, Match, Participant
from .roster import make_placeholders, sort_by_seed


def get_round_name(teams_in_round: int, total_teams: int) -> str:
    """Get the name of a round based on number of teams."""
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def calculate_rounds(num_teams: int) -> int:
    """Number of rounds r with 2**(r-1) < num_teams <= 2**r."""
    if num_teams <= 1:
        return 0
    return math.ceil(math.log2(num_teams))


def calculate_bracket_size(num_teams: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_teams <= 0:
        return 0
    return 2 ** calculate_rounds(num_teams)


def feeder_target(round_number: int, match_number: int) -> Tuple[int, int, str]:
    """
    Where the winner of a bracket match goes next.

    Winner of match k in round r plays match ceil(k/2) in round r+1, in the
    player1 slot for odd k and player2 for even k.
    """
    next_match = (match_number + 1) // 2
    slot = 'player1' if match_number % 2 == 1 else 'player2'
    return round_number + 1, next_match, slot


def generate_single_elimination_fixtures(participants: List[Participant], category: str,
                                         id_prefix: str = '', bracket: Optional[str] = None) -> List[Match]:
    """
    Build a single elimination bracket.

    The roster is padded with placeholders up to the next power of two and
    ordered by seed; round 1 pairs seed 1 with the last seed, seed 2 with the
    second-last, and so on. Later rounds are created with empty slots, to be
    filled as winners advance.
    """
    entrants = sort_by_seed([p for p in participants if p.category == category])
    rounds = max(1, calculate_rounds(len(entrants)))
    bracket_size = max(2, calculate_bracket_size(len(entrants)))
    if len(entrants) < bracket_size:
        entrants = entrants + make_placeholders(category, bracket_size - len(entrants),
                                                start=_next_dummy_index(entrants))

    fixtures = []
    for i in range(bracket_size // 2):
        fixtures.append(Match(
            id=f"{id_prefix}{category}_R1_M{i + 1}",
            round=1,
            match_number=i + 1,
            category=category,
            player1=entrants[i].id,
            player2=entrants[bracket_size - 1 - i].id,
            bracket=bracket,
        ))

    for round_number in range(2, rounds + 1):
        for i in range(bracket_size // (2 ** round_number)):
            fixtures.append(Match(
                id=f"{id_prefix}{category}_R{round_number}_M{i + 1}",
                round=round_number,
                match_number=i + 1,
                category=category,
                bracket=bracket,
            ))

    return fixtures


def _next_dummy_index(participants: List[Participant]) -> int:
    indexes = [int(p.id[len(DUMMY_PREFIX):]) for p in participants
               if p.id.startswith(DUMMY_PREFIX) and p.id[len(DUMMY_PREFIX):].isdigit()]
    return max(indexes) + 1 if indexes else 0
