"""
Swiss system: only round 1 is paired up front.

Later rounds are allocated as empty slots; pairing them by record happens
outside the engine once the previous round's results are known.
"""
import random
from typing import List, Optional

from .models import Match, Participant
from .roster import normalize

MIN_SWISS_PLAYERS = 4


def generate_swiss_fixtures(participants: List[Participant], category: str,
                            round_count: int = 3, rng: Optional[random.Random] = None) -> List[Match]:
    entrants = [p for p in participants if p.category == category]
    if len(entrants) < MIN_SWISS_PLAYERS:
        entrants = normalize(entrants, category, min_count=0, required_count=MIN_SWISS_PLAYERS)

    player_ids = [p.id for p in entrants]
    shuffled = list(player_ids)
    (rng or random).shuffle(shuffled)

    fixtures = []
    for i in range(len(shuffled) // 2):
        fixtures.append(Match(
            id=f"{category}_Swiss_R1_M{i + 1}",
            round=1,
            match_number=i + 1,
            category=category,
            player1=shuffled[i * 2],
            player2=shuffled[i * 2 + 1],
        ))

    for round_number in range(2, round_count + 1):
        for i in range(len(player_ids) // 2):
            fixtures.append(Match(
                id=f"{category}_Swiss_R{round_number}_M{i + 1}",
                round=round_number,
                match_number=i + 1,
                category=category,
            ))

    return fixtures
