"""
Round robin scheduling (circle method) and pool-play group fixtures.
"""
import logging
from typing import List, Tuple

from .groups import allocate_groups
from .models import BYE_ID, DUMMY_PREFIX, STAGE_POOL, Group, Match, Participant
from .roster import sort_by_seed

logger = logging.getLogger(__name__)


def circle_rounds(player_ids: List[str]) -> List[List[Tuple[str, str]]]:
    """
    Pair players for every round with the circle method.

    An odd list gets a "bye" entrant; pairings against it are dropped so the
    paired player sits that round out. The first player stays fixed while
    the rest rotate one position per round.
    """
    ids = list(player_ids)
    if len(ids) % 2 == 1:
        ids.append(BYE_ID)

    rounds = []
    per_round = len(ids) // 2
    for _ in range(len(ids) - 1):
        pairs = []
        for i in range(per_round):
            home, away = ids[i], ids[len(ids) - 1 - i]
            if home != BYE_ID and away != BYE_ID:
                pairs.append((home, away))
        rounds.append(pairs)
        ids.insert(1, ids.pop())
    return rounds


def generate_round_robin_fixtures(player_ids: List[str], category: str,
                                  match_frequency: int = 1) -> List[Match]:
    """
    Generate every round robin match for `player_ids`.

    With P players (made even by a bye) there are P-1 rounds and every pair
    meets once per cycle. `match_frequency` repeats the cycle, swapping home
    and away on alternate cycles and continuing the round numbers.
    """
    ids = list(player_ids)
    if len(ids) < 2:
        ids += [f"{DUMMY_PREFIX}{i}" for i in range(2 - len(ids))]

    cycle = circle_rounds(ids)
    fixtures = []
    match_number = 0
    for repeat in range(max(1, match_frequency)):
        for round_index, pairs in enumerate(cycle):
            round_number = repeat * len(cycle) + round_index + 1
            for home, away in pairs:
                if repeat % 2 == 1:
                    home, away = away, home
                match_number += 1
                fixtures.append(Match(
                    id=f"{category}_RR_R{round_number}_M{match_number}",
                    round=round_number,
                    match_number=match_number,
                    category=category,
                    player1=home,
                    player2=away,
                ))
    return fixtures


def generate_group_fixtures(participants: List[Participant], category: str,
                            group_count: int = 2, match_frequency: int = 1) -> Tuple[List[Match], List[Group]]:
    """
    Snake-allocate `participants` into groups and round robin inside each.

    Every fixture is tagged with stage "pool" and its group id.
    """
    groups = allocate_groups(sort_by_seed(participants), group_count, category)
    logger.debug("Allocated %d groups for %s: %s", len(groups), category,
                 [len(g.player_ids) for g in groups])

    fixtures = []
    for group in groups:
        if len(group.player_ids) < 2:
            logger.warning("%s has fewer than 2 players (%d), skipping match generation",
                           group.name, len(group.player_ids))
            continue
        for match in generate_round_robin_fixtures(group.player_ids, category, match_frequency):
            match.id = f"{group.id}_{match.id}"
            match.group = group.id
            match.stage = STAGE_POOL
            fixtures.append(match)
    return fixtures, groups
