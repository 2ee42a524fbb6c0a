"""
The collection of every match and group of one tournament, and the
operations that change it between generation runs.
"""
import logging
from typing import Dict, List, Tuple

from .models import (STAGE_PLAYOFF, STAGE_POOL, Group, Match, groups_from_dicts, is_placeholder,
                     matches_from_dicts)

logger = logging.getLogger(__name__)


def _fixture_key(match: Match) -> Tuple:
    # playoff matches are identified by their bracket position, everything else by id
    return match.playoff_key() or ('id', match.id)


class FixtureSet:
    """
    Matches and groups for a tournament, partitioned by category.

    `formats` maps each category to the format its fixtures were generated
    with; `format` is the format of the most recent generation.
    """

    def __init__(self, format=None, fixtures=None, groups=None, formats=None):
        self.format = format
        self.fixtures: List[Match] = []
        self.groups: List[Group] = list(groups or [])
        self.formats: Dict[str, str] = dict(formats or {})
        # category -> message for categories that failed to generate; not persisted
        self.errors: Dict[str, str] = {}
        self._index: Dict[Tuple, Match] = {}
        for match in fixtures or []:
            self.add(match)

    def add(self, match: Match) -> bool:
        """
        Insert a match, refusing duplicates.

        When a match with the same key is already present, the variant
        carrying data wins and False is returned.
        """
        key = _fixture_key(match)
        existing = self._index.get(key)
        if existing is None:
            self._index[key] = match
            self.fixtures.append(match)
            return True

        if match.has_data() and not existing.has_data():
            position = self.fixtures.index(existing)
            self.fixtures[position] = match
            self._index[key] = match
            logger.info("Replaced empty duplicate %s with %s", existing.id, match.id)
        else:
            logger.info("Ignored duplicate fixture %s (already have %s)", match.id, existing.id)
        return False

    def extend(self, matches: List[Match]) -> int:
        return sum(1 for match in matches if self.add(match))

    @classmethod
    def from_dict(cls, data: Dict) -> 'FixtureSet':
        data = data or {}
        return cls(
            format=data.get('format'),
            fixtures=matches_from_dicts(data.get('fixtures')),
            groups=groups_from_dicts(data.get('groups')),
            formats=data.get('formats'),
        )

    def to_dict(self) -> Dict:
        return {
            'format': self.format,
            'formats': dict(self.formats),
            'fixtures': [match.to_dict() for match in self.fixtures],
            'groups': [group.to_dict() for group in self.groups],
        }

    def __len__(self):
        return len(self.fixtures)

    def __repr__(self):
        return f"FixtureSet(format={self.format}, fixtures={len(self.fixtures)}, groups={len(self.groups)})"


def deduplicate_playoff_fixtures(fixtures: List[Match]) -> Tuple[List[Match], List[str]]:
    """
    Drop repeated playoff matches sharing (category, playoff_round, match_number, cup).

    The first occurrence is kept unless a later one carries players or a
    score and the first does not. Returns the surviving list, in original
    order, and the ids of the removed matches.
    """
    chosen: Dict[Tuple, Match] = {}
    for match in fixtures:
        key = match.playoff_key()
        if key is None:
            continue
        current = chosen.get(key)
        if current is None or (match.has_data() and not current.has_data()):
            chosen[key] = match

    kept = []
    removed_ids = []
    for match in fixtures:
        key = match.playoff_key()
        if key is None or chosen[key] is match:
            kept.append(match)
        else:
            removed_ids.append(match.id)

    if removed_ids:
        logger.info("Removed %d duplicate playoff fixtures: %s", len(removed_ids), removed_ids)
    return kept, removed_ids


def fixtures_for_category(fixture_set: FixtureSet, category: str) -> List[Match]:
    return [m for m in fixture_set.fixtures if m.category == category]


def groups_for_category(fixture_set: FixtureSet, category: str) -> List[Group]:
    return [g for g in fixture_set.groups if g.category == category]


def pool_fixtures(fixture_set: FixtureSet, category: str) -> List[Match]:
    return [m for m in fixtures_for_category(fixture_set, category) if m.stage == STAGE_POOL]


def playoff_fixtures(fixture_set: FixtureSet, category: str) -> List[Match]:
    return [m for m in fixtures_for_category(fixture_set, category) if m.stage == STAGE_PLAYOFF]


def pool_complete(fixture_set: FixtureSet, category: str) -> bool:
    """
    True when the category has pool matches and all of them are completed.

    Matches between two placeholders can never be won and do not count.
    """
    pool = [m for m in pool_fixtures(fixture_set, category)
            if not (is_placeholder(m.player1) and is_placeholder(m.player2))]
    return bool(pool) and all(m.completed for m in pool)


def playoffs_exist(fixture_set: FixtureSet, category: str) -> bool:
    return bool(playoff_fixtures(fixture_set, category))


def replace_pool_fixtures(fixture_set: FixtureSet, category: str, new_set: FixtureSet) -> FixtureSet:
    """
    Swap in freshly generated fixtures for one category.

    Playoff matches already generated for the category survive, other
    categories are untouched, and the category's groups are replaced by
    the new ones.
    """
    kept = [m for m in fixture_set.fixtures
            if m.category != category or m.stage == STAGE_PLAYOFF]
    groups = [g for g in fixture_set.groups if g.category != category]

    preserved = len([m for m in kept if m.category == category])
    if preserved:
        logger.info("Keeping %d playoff fixtures for %s while regenerating pool play", preserved, category)

    formats = dict(fixture_set.formats)
    formats.update(new_set.formats)
    result = FixtureSet(format=new_set.format or fixture_set.format, fixtures=kept,
                        groups=groups + [g for g in new_set.groups if g.category == category],
                        formats=formats)
    result.extend([m for m in new_set.fixtures if m.category == category])
    return result


def replace_playoff_fixtures(fixture_set: FixtureSet, category: str,
                             new_playoffs: List[Match]) -> FixtureSet:
    """Remove the category's playoff matches, then append `new_playoffs`."""
    removed = playoff_fixtures(fixture_set, category)
    if removed:
        logger.info("Removing %d existing playoff fixtures for %s", len(removed), category)

    result = FixtureSet(
        format=fixture_set.format,
        fixtures=[m for m in fixture_set.fixtures if not (m.category == category and m.stage == STAGE_PLAYOFF)],
        groups=fixture_set.groups,
        formats=fixture_set.formats,
    )
    result.extend(new_playoffs)
    return result


def calculate_total_matches(fixture_set) -> int:
    """Number of match records in a fixture set (or a plain list of matches)."""
    if isinstance(fixture_set, FixtureSet):
        return len(fixture_set.fixtures)
    return len(fixture_set or [])
