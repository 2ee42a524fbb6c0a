"""
Group allocation for pool play and group standings after pool play.
"""
import logging
from typing import Dict, List, Tuple

from .exceptions import InvalidInputError
from .models import Group, Match, Participant

logger = logging.getLogger(__name__)


def group_letter(index: int) -> str:
    return chr(ord('A') + index)


def allocate_groups(participants: List[Participant], group_count: int, category: str) -> List[Group]:
    """
    Split a seed-ordered roster into `group_count` groups using a snake draw.

    Seed 1 goes to group A, seed 2 to group B, ... then the direction
    reverses at the last group, so with two groups A gets seeds 1, 4, 5, 8
    and B gets 2, 3, 6, 7. Group sizes differ by at most one.
    """
    if group_count < 1:
        raise InvalidInputError(f"Group count must be at least 1, got {group_count}")

    groups = [
        Group(id=f"{category}_Group{group_letter(i)}",
              name=f"Group {group_letter(i)}",
              category=category)
        for i in range(group_count)
    ]

    current = 0
    direction = 1
    for participant in participants:
        groups[current].player_ids.append(participant.id)
        if group_count == 1:
            continue
        current += direction
        if current >= group_count:
            direction = -1
            current = group_count - 1
        elif current < 0:
            direction = 1
            current = 0

    return groups


def sort_groups_by_letter(groups: List[Group]) -> List[Group]:
    return sorted(groups, key=lambda g: g.letter)


def parse_score(score) -> Tuple[int, int]:
    """Parse an "A-B" score string into (A, B). Unparseable scores count as (0, 0)."""
    if not score:
        return 0, 0
    parts = str(score).split('-')
    if len(parts) != 2:
        logger.warning("Ignoring malformed score %r", score)
        return 0, 0
    try:
        return int(parts[0].strip()), int(parts[1].strip())
    except ValueError:
        logger.warning("Ignoring malformed score %r", score)
        return 0, 0


def compute_group_stats(group: Group, fixtures: List[Match]) -> Dict[str, Dict]:
    """
    Aggregate wins and points for every player in a group.

    Only completed, scored pool matches of this group count.
    """
    stats = {
        player_id: {'matches': 0, 'matches_won': 0, 'pts_won': 0, 'pts_lost': 0, 'pts_diff': 0}
        for player_id in group.player_ids
    }

    for match in fixtures:
        if match.group != group.id or not match.completed or not match.score:
            continue
        if not match.player1 or not match.player2:
            continue

        score1, score2 = parse_score(match.score)
        for player, won, lost in ((match.player1, score1, score2), (match.player2, score2, score1)):
            if player not in stats:
                continue
            stats[player]['matches'] += 1
            stats[player]['pts_won'] += won
            stats[player]['pts_lost'] += lost
            if match.winner == player:
                stats[player]['matches_won'] += 1

    for player_stats in stats.values():
        player_stats['pts_diff'] = player_stats['pts_won'] - player_stats['pts_lost']

    return stats


def order_group_by_standing(group: Group, fixtures: List[Match]) -> Group:
    stats = compute_group_stats(group, fixtures)
    ordered = sorted(
        group.player_ids,
        key=lambda pid: (-stats[pid]['matches_won'], -stats[pid]['pts_diff'])
    )
    standing = group.copy()
    standing.player_ids = ordered
    return standing


def order_groups_by_standing(groups: List[Group], fixtures: List[Match]) -> List[Group]:
    """Return copies of `groups` with player_ids re-ordered 1st..Nth by wins, then point difference."""
    return [order_group_by_standing(group, fixtures) for group in groups]
