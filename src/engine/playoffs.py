"""
Knockout stage built from completed pool play.

Groups passed in here must already be ordered by standing (index 0 is the
group winner). The builders only append fixtures; removing a previous
playoff stage for the category is the caller's job.

Cross seeding for the quarterfinal structure:
- 2 groups: QF1 = A1 v B2, QF2 = B1 v A2, one semifinal
- 4 groups: QF1 = A1 v D2, QF2 = B1 v C2, QF3 = C1 v B2, QF4 = D1 v A2, two semifinals
- any other count: best effort fold of the top two of every group, first
  against last, working inwards
"""
import logging
import math
from typing import List, Optional, Tuple

from .exceptions import InvalidFormatError
from .groups import sort_groups_by_letter
from .models import (CUP_GOLD, CUP_SILVER, FINAL, QUARTER_FINAL, SEMI_FINAL, STAGE_PLAYOFF,
                     THIRD_PLACE, Group, Match)

logger = logging.getLogger(__name__)

QUARTER_FINALS = 'quarterFinals'
SEMI_FINALS = 'semiFinals'
FINAL_ONLY = 'finalOnly'
PLAYOFF_STRUCTURES = (QUARTER_FINALS, SEMI_FINALS, FINAL_ONLY)

# Standings each group sends to the gold bracket; silver takes the next ones down.
GOLD_DEPTH = {QUARTER_FINALS: 2, SEMI_FINALS: 1, FINAL_ONLY: 0}

SeedRef = Tuple[int, int]

_CROSS_SEED_TABLES = {
    2: [((0, 0), (1, 1)), ((1, 0), (0, 1))],
    4: [((0, 0), (3, 1)), ((1, 0), (2, 1)), ((2, 0), (1, 1)), ((3, 0), (0, 1))],
}


def cross_seed_table(group_count: int) -> Optional[List[Tuple[SeedRef, SeedRef]]]:
    """
    Quarterfinal seeding as ((group_index, standing_index), (group_index, standing_index)) pairs.

    Returns None when there is no fixed table for `group_count`; callers fall
    back to the fold.
    """
    table = _CROSS_SEED_TABLES.get(group_count)
    return list(table) if table else None


def validate_structure(structure: str) -> str:
    if structure not in PLAYOFF_STRUCTURES:
        raise InvalidFormatError(f"Unsupported playoff structure: {structure}")
    return structure


def _standing(group: Group, index: int) -> Optional[str]:
    if 0 <= index < len(group.player_ids):
        return group.player_ids[index]
    return None


def _quarterfinal_pairs(groups: List[Group], offset: int) -> List[Tuple[Optional[str], Optional[str]]]:
    table = cross_seed_table(len(groups))
    if table is not None:
        return [
            (_standing(groups[g1], s1 + offset), _standing(groups[g2], s2 + offset))
            for (g1, s1), (g2, s2) in table
        ]

    logger.info("No cross seeding table for %d groups, folding top two of each group", len(groups))
    qualified = [pid for group in groups for pid in group.player_ids[offset:offset + 2]]
    return [(qualified[i], qualified[len(qualified) - 1 - i]) for i in range(len(qualified) // 2)]


def _semifinal_pairs(groups: List[Group], offset: int) -> List[Tuple[Optional[str], Optional[str]]]:
    count = min(2, len(groups) // 2)
    return [
        (_standing(groups[i], offset), _standing(groups[len(groups) - 1 - i], offset))
        for i in range(count)
    ]


def _bracket_shape(groups: List[Group], structure: str, offset: int):
    """First-round pairs and semifinal slots for one bracket."""
    if structure == QUARTER_FINALS:
        qf_pairs = _quarterfinal_pairs(groups, offset)
        sf_pairs = [(None, None)] * math.ceil(len(qf_pairs) / 2)
        return qf_pairs, sf_pairs
    if structure == SEMI_FINALS:
        return [], _semifinal_pairs(groups, offset)
    return [], []


class _Numbering:
    """Hands out match numbers per round so brackets sharing a category never collide."""

    def __init__(self):
        self._next = {}

    def take(self, round_number: int) -> int:
        number = self._next.get(round_number, 1)
        self._next[round_number] = number + 1
        return number


def _playoff_match(category, prefix, code, round_number, match_number, cup,
                   playoff_round, player1=None, player2=None) -> Match:
    return Match(
        id=f"{category}_{prefix}_{code}",
        round=round_number,
        match_number=match_number,
        category=category,
        player1=player1,
        player2=player2,
        stage=STAGE_PLAYOFF,
        playoff_round=playoff_round,
        cup=cup,
    )


def _emit_bracket(category: str, prefix: str, cup: Optional[str], qf_pairs, sf_pairs,
                  numbering: _Numbering, third_place: bool = True) -> List[Match]:
    fixtures = []
    round_number = 1

    if qf_pairs:
        for i, (p1, p2) in enumerate(qf_pairs):
            fixtures.append(_playoff_match(category, prefix, f"QF{i + 1}", round_number,
                                           numbering.take(round_number), cup, QUARTER_FINAL, p1, p2))
        round_number += 1

    if sf_pairs:
        for i, (p1, p2) in enumerate(sf_pairs):
            fixtures.append(_playoff_match(category, prefix, f"SF{i + 1}", round_number,
                                           numbering.take(round_number), cup, SEMI_FINAL, p1, p2))
        round_number += 1

    fixtures.append(_playoff_match(category, prefix, "Final", round_number,
                                   numbering.take(round_number), cup, FINAL))
    if third_place:
        fixtures.append(_playoff_match(category, prefix, "3rdPlace", round_number,
                                       numbering.take(round_number), cup, THIRD_PLACE))
    return fixtures


def generate_playoff_fixtures(groups: List[Group], category: str,
                              structure: str = QUARTER_FINALS) -> List[Match]:
    """Build a single knockout bracket ending in a Final and a 3rd place match."""
    validate_structure(structure)
    sorted_groups = sort_groups_by_letter([g for g in groups if g.category in (None, category)])
    if len(sorted_groups) < 2 and structure != FINAL_ONLY:
        logger.warning("Cannot build playoffs for %s: need at least 2 groups, found %d",
                       category, len(sorted_groups))
        return []

    qf_pairs, sf_pairs = _bracket_shape(sorted_groups, structure, 0)
    return _emit_bracket(category, 'Playoff', None, qf_pairs, sf_pairs, _Numbering())


def generate_cups_fixtures(groups: List[Group], category: str,
                           structure: str = QUARTER_FINALS) -> List[Match]:
    """
    Build parallel Gold and Silver cup brackets.

    Gold draws on the top standings of every group, Silver on the ones just
    below. Both brackets share the round layout; match numbers within a
    round continue from gold into silver.
    """
    validate_structure(structure)
    sorted_groups = sort_groups_by_letter([g for g in groups if g.category in (None, category)])
    if len(sorted_groups) < 2 and structure != FINAL_ONLY:
        logger.warning("Cannot build cups for %s: need at least 2 groups, found %d",
                       category, len(sorted_groups))
        return []

    depth = GOLD_DEPTH[structure]
    gold_qf, gold_sf = _bracket_shape(sorted_groups, structure, 0)
    silver_qf, silver_sf = _bracket_shape(sorted_groups, structure, depth)
    if structure == SEMI_FINALS:
        # a silver semifinal needs both groups deep enough to supply a player
        silver_sf = [pair for pair in silver_sf if pair[0] is not None and pair[1] is not None]

    numbering = _Numbering()
    gold = _emit_bracket(category, 'Gold', CUP_GOLD, gold_qf, gold_sf, numbering)
    silver = _emit_bracket(category, 'Silver', CUP_SILVER, silver_qf, silver_sf, numbering)

    # Interleave by round so silver numbers follow gold within every round.
    return sorted(gold + silver, key=lambda m: (m.round, m.match_number))
