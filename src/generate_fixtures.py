import os
import sys

from engine.double_elimination import get_losers_round_name
from engine.elimination import get_round_name
from engine.exceptions import FixtureEngineError
from engine.fixture_set import FixtureSet
from engine.formats import TournamentFormat
from engine.generation import generate_fixtures
from engine.models import BRACKET_FINAL, BRACKET_LOSERS, is_placeholder, placeholder_display_name
from engine.storage import load_roster_file, roster_as_tournament


def display_name(participant_id):
    if participant_id is None:
        return 'TBD'
    if is_placeholder(participant_id):
        return placeholder_display_name(participant_id)
    return participant_id


def round_label(match, matches):
    """Name of the elimination round `match` belongs to ("Semifinal", "Losers Final", ...)."""
    if match.bracket == BRACKET_FINAL:
        return "Grand Final"
    bracket = [m for m in matches if m.bracket == match.bracket]
    if match.bracket == BRACKET_LOSERS:
        return get_losers_round_name(match.round, max(m.round for m in bracket))
    bracket_size = 2 * len([m for m in bracket if m.round == 1])
    return get_round_name(bracket_size // 2 ** (match.round - 1), bracket_size)


def format_fixtures(fixture_set):
    """Render fixtures as text, one section per category and one line per match."""
    lines = []
    categories = []
    for match in fixture_set.fixtures:
        if match.category not in categories:
            categories.append(match.category)

    for category in categories:
        if lines:
            lines.append('')  # blank line between categories
        lines.append(f"# {category}")
        matches = [m for m in fixture_set.fixtures if m.category == category]
        elimination = TournamentFormat.is_elimination(fixture_set.formats.get(category))
        current_section = None
        for match in sorted(matches, key=lambda m: (m.group or '', m.bracket or '', m.round, m.match_number)):
            section = match.group or match.bracket
            if section and section != current_section:
                lines.append(f"## {section}")
                current_section = section
            label = f" ({round_label(match, matches)})" if elimination and not match.stage else ""
            lines.append(f"R{match.round} M{match.match_number}{label}: "
                         f"{display_name(match.player1)} vs {display_name(match.player2)}")

    for category, error in fixture_set.errors.items():
        lines.append(f"Warning: {category} skipped: {error}")
    return '\n'.join(lines)


def main():
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    # Use command line arguments if provided, otherwise use defaults
    roster_file = sys.argv[1] if len(sys.argv) > 1 else os.path.join(base_dir, 'data', 'roster.yaml')
    fmt = sys.argv[2] if len(sys.argv) > 2 else TournamentFormat.ROUND_ROBIN
    min_players = int(sys.argv[3]) if len(sys.argv) > 3 else None

    participants = load_roster_file(roster_file)
    if not participants:
        print(f"No participants found in {roster_file}")
        return 1

    tournament = roster_as_tournament(participants)
    fixture_set = FixtureSet(format=fmt)
    for category in tournament['categories']:
        # Without an explicit minimum every registered entrant of the category is kept
        registered = len([p for p in participants if p.category == category])
        try:
            generated = generate_fixtures(tournament, fmt, category=category,
                                          min_players=registered if min_players is None else min_players)
        except FixtureEngineError as e:
            fixture_set.errors[category] = str(e)
            continue
        fixture_set.extend(generated.fixtures)
        fixture_set.groups.extend(generated.groups)
        fixture_set.formats.update(generated.formats)

    print(format_fixtures(fixture_set))
    return 0


if __name__ == '__main__':
    sys.exit(main())
