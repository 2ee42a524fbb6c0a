"""
Fixture generation for a whole tournament, one category at a time.
"""
import logging
from typing import Dict, Optional

from .double_elimination import generate_double_elimination_fixtures
from .elimination import generate_single_elimination_fixtures
from .exceptions import FixtureEngineError, InvalidInputError
from .fixture_set import (FixtureSet, groups_for_category, playoffs_exist, pool_complete,
                          replace_playoff_fixtures)
from .formats import TournamentFormat
from .groups import order_groups_by_standing
from .playoffs import QUARTER_FINALS, generate_cups_fixtures, generate_playoff_fixtures, validate_structure
from .roster import normalize, participants_from_records
from .round_robin import generate_group_fixtures, generate_round_robin_fixtures
from .swiss import generate_swiss_fixtures

logger = logging.getLogger(__name__)


def _tournament_participants(tournament: Dict):
    participants = tournament.get('participants') if tournament else None
    categories = tournament.get('categories') if tournament else None
    if not participants or not categories:
        raise InvalidInputError('Tournament must have participants and categories')
    return participants_from_records(participants), list(categories)


def generate_category_fixtures(participants, category: str, fmt: str, min_players: int = 20,
                               group_count: Optional[int] = None, match_frequency: int = 1,
                               swiss_rounds: int = 3) -> FixtureSet:
    """Generate the first-stage fixtures of one category. Pool formats get pool play only."""
    entrants = normalize(participants, category, min_count=min_players,
                         required_count=TournamentFormat.required_players(fmt))
    logger.info("Generating %s fixtures for %s with %d entrants", fmt, category, len(entrants))

    fixture_set = FixtureSet(format=fmt, formats={category: fmt})
    if fmt == TournamentFormat.ROUND_ROBIN:
        fixture_set.extend(generate_round_robin_fixtures([p.id for p in entrants], category, match_frequency))
    elif TournamentFormat.uses_groups(fmt):
        fixtures, groups = generate_group_fixtures(entrants, category,
                                                   group_count if group_count is not None else TournamentFormat.DEFAULT_GROUP_COUNT,
                                                   match_frequency)
        fixture_set.extend(fixtures)
        fixture_set.groups.extend(groups)
    elif fmt == TournamentFormat.SINGLE_ELIMINATION:
        fixture_set.extend(generate_single_elimination_fixtures(entrants, category))
    elif fmt == TournamentFormat.DOUBLE_ELIMINATION:
        fixture_set.extend(generate_double_elimination_fixtures(entrants, category))
    elif fmt == TournamentFormat.SWISS:
        fixture_set.extend(generate_swiss_fixtures(entrants, category, round_count=swiss_rounds))
    return fixture_set


def generate_fixtures(tournament: Dict, format: str, min_players: int = 20,
                      group_count: Optional[int] = None, playoff_structure: Optional[str] = None,
                      category: Optional[str] = None, match_frequency: int = 1) -> FixtureSet:
    """
    Generate fixtures for every category of `tournament` (or just `category`).

    `tournament` holds `participants` (records with id, category and seed)
    and `categories`. A failure in one category is logged and recorded in
    the returned set's `errors`, the other categories are still generated.
    When a single category was asked for, its failure is raised.
    """
    TournamentFormat.validate(format)
    if playoff_structure is not None:
        validate_structure(playoff_structure)
    participants, categories = _tournament_participants(tournament)

    if category is not None:
        categories = [c for c in categories if c == category]
        if not categories:
            raise InvalidInputError(f"Unknown category: {category}")

    result = FixtureSet(format=format)
    for current in categories:
        try:
            generated = generate_category_fixtures(participants, current, format, min_players,
                                                   group_count, match_frequency)
        except FixtureEngineError as e:
            logger.error("Fixture generation failed for %s: %s", current, e)
            if category is not None:
                raise
            result.errors[current] = str(e)
            continue
        result.extend(generated.fixtures)
        result.groups.extend(generated.groups)
        result.formats[current] = format

    if result.errors and len(result.errors) == len(categories):
        raise InvalidInputError(f"Fixture generation failed for every category: {result.errors}")
    return result


def build_playoffs(fixture_set: FixtureSet, category: str, structure: Optional[str] = None,
                   cups: Optional[bool] = None) -> FixtureSet:
    """
    Build the knockout stage for a category once its pool play is complete.

    Groups are re-ordered by standing and stored back, any previous playoff
    matches for the category are removed and the new bracket appended.
    `cups` defaults to whether the category was generated as poolPlayCups.
    """
    structure = validate_structure(structure or QUARTER_FINALS)
    if cups is None:
        cups = fixture_set.formats.get(category, fixture_set.format) == TournamentFormat.POOL_PLAY_CUPS

    if not pool_complete(fixture_set, category):
        raise InvalidInputError(f"Pool play for {category} is not complete")

    standings = order_groups_by_standing(groups_for_category(fixture_set, category), fixture_set.fixtures)
    builder = generate_cups_fixtures if cups else generate_playoff_fixtures
    new_playoffs = builder(standings, category, structure)
    if not new_playoffs:
        logger.warning("No playoff fixtures built for %s, keeping existing fixtures", category)
        return fixture_set

    if playoffs_exist(fixture_set, category):
        logger.info("Rebuilding playoffs for %s", category)
    result = replace_playoff_fixtures(fixture_set, category, new_playoffs)
    result.groups = [g for g in result.groups if g.category != category] + standings
    return result


def category_summary(fixture_set: FixtureSet) -> Dict[str, Dict[str, int]]:
    """Count matches per category and stage, for previews."""
    summary: Dict[str, Dict[str, int]] = {}
    for match in fixture_set.fixtures:
        stage = match.stage or match.bracket or 'main'
        counts = summary.setdefault(match.category, {})
        counts[stage] = counts.get(stage, 0) + 1
    return summary

