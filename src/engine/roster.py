"""
Roster normalization: filter registrants to one category, order them by
seed and pad the list with placeholder entrants up to a target size.
"""
from typing import Dict, Iterable, List

from .models import DUMMY_PREFIX, Participant


def participants_from_records(records: Iterable[Dict]) -> List[Participant]:
    """Build participants from `{id, category, seed}` records (as read from YAML/JSON)."""
    participants = []
    for record in records or []:
        if isinstance(record, Participant):
            participants.append(record)
        else:
            participants.append(Participant.from_dict(record))
    return participants


def sort_by_seed(participants: List[Participant]) -> List[Participant]:
    """
    Order participants by ascending seed.

    Unseeded participants (seed None) sort after every seeded one. The sort is
    stable, so equal or missing seeds keep their input order.
    """
    return sorted(
        participants,
        key=lambda p: (p.seed is None, p.seed if p.seed is not None else 0)
    )


def make_placeholders(category: str, count: int, start: int = 0) -> List[Participant]:
    return [Participant(id=f"{DUMMY_PREFIX}{start + i}", category=category, seed=None)
            for i in range(count)]


def normalize(participants: List[Participant], category: str,
              min_count: int = 20, required_count: int = 0) -> List[Participant]:
    """
    Return exactly max(required_count, min_count) entrants for `category`.

    Real participants come first in seed order; the rest of the list is
    filled with `dummy_<n>` placeholders. When there are more registrants
    than the target, the lowest-seeded ones are dropped.
    """
    in_category = [p for p in participants if p.category == category]
    target = max(required_count, min_count)

    ordered = sort_by_seed(in_category)
    if len(ordered) >= target:
        return ordered[:target]

    return ordered + make_placeholders(category, target - len(ordered))
