"""
Flask web application for the fixture engine.
"""
import os

from flask import Flask, jsonify, request

from engine import storage
from engine.advancement import record_score, reset_scores
from engine.exceptions import FixtureEngineError, InvalidInputError
from engine.fixture_set import (FixtureSet, calculate_total_matches, fixtures_for_category,
                                groups_for_category, replace_pool_fixtures)
from engine.generation import build_playoffs, category_summary, generate_fixtures
from engine.groups import compute_group_stats, order_group_by_standing
from engine.models import is_placeholder, placeholder_display_name
from engine.roster import participants_from_records

app = Flask(__name__)

SETTINGS_KEYS = ('format', 'players_per_category', 'group_count', 'match_frequency', 'playoff_structure')
INT_SETTINGS = ('players_per_category', 'group_count', 'match_frequency')


@app.errorhandler(InvalidInputError)
def handle_invalid_input(e):
    app.logger.warning(f'Rejected request to {request.path}: {e}')
    return jsonify({'success': False, 'error': str(e)}), 400


@app.errorhandler(FixtureEngineError)
def handle_engine_error(e):
    app.logger.error(f'Fixture engine error on {request.path}: {e}')
    return jsonify({'success': False, 'error': str(e)}), 500


def _request_data() -> dict:
    return request.get_json(silent=True) or {}


def _int_option(data: dict, key: str, default):
    value = data.get(key, default)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f'{key} must be a number, got {value!r}')


def _generation_options(data: dict) -> dict:
    """Merge request options over the stored settings (per category when one is given)."""
    settings = storage.load_settings()
    category = data.get('category')
    defaults = storage.category_settings(settings, category) if category else settings
    return {
        'format': data.get('format', defaults['format']),
        'min_players': _int_option(data, 'min_players', defaults['players_per_category']),
        'group_count': _int_option(data, 'group_count', defaults['group_count']),
        'match_frequency': _int_option(data, 'match_frequency', defaults['match_frequency']),
        'playoff_structure': data.get('playoff_structure', defaults['playoff_structure']),
        'category': category,
    }


def _tournament_from_request(data: dict) -> dict:
    if data.get('participants') is not None:
        return {'participants': data['participants'], 'categories': data.get('categories') or []}
    return storage.roster_as_tournament(storage.load_roster())


def _fixtures_response(fixture_set: FixtureSet, **extra):
    payload = {'success': True, 'total_matches': calculate_total_matches(fixture_set)}
    payload.update(fixture_set.to_dict())
    payload.update(extra)
    return jsonify(payload)


@app.route('/api/fixtures', methods=['GET'])
def api_get_fixtures():
    """Return the stored fixture set, optionally for one category."""
    fixture_set = storage.load_fixture_set()
    category = request.args.get('category')
    if category:
        fixture_set = FixtureSet(format=fixture_set.formats.get(category, fixture_set.format),
                                 fixtures=fixtures_for_category(fixture_set, category),
                                 groups=groups_for_category(fixture_set, category),
                                 formats={category: fixture_set.formats.get(category)})
    return _fixtures_response(fixture_set)


@app.route('/api/fixtures/generate', methods=['POST'])
def api_generate_fixtures():
    """Generate fixtures and merge them into the stored set.

    Regenerating a category replaces its pool matches and groups but keeps
    playoff matches already built for it.
    """
    data = _request_data()
    options = _generation_options(data)
    tournament = _tournament_from_request(data)

    with storage.get_lock():
        generated = generate_fixtures(tournament, **options)
        fixture_set = storage.load_fixture_set()
        for category in generated.formats:
            fixture_set = replace_pool_fixtures(fixture_set, category, generated)
        fixture_set.format = generated.format
        storage.save_fixture_set(fixture_set)

    app.logger.info(f'Generated {calculate_total_matches(generated)} fixtures '
                    f'({options["format"]}) for {sorted(generated.formats)}')
    return _fixtures_response(fixture_set, generated=calculate_total_matches(generated),
                              errors=generated.errors)


@app.route('/api/fixtures/estimate', methods=['POST'])
def api_estimate_fixtures():
    """Preview how many matches generation would create, without saving anything."""
    data = _request_data()
    options = _generation_options(data)
    generated = generate_fixtures(_tournament_from_request(data), **options)
    return jsonify({
        'success': True,
        'total_matches': calculate_total_matches(generated),
        'by_category': category_summary(generated),
        'errors': generated.errors,
    })


@app.route('/api/fixtures/playoffs', methods=['POST'])
def api_build_playoffs():
    """Build playoffs (or gold/silver cups) for a category whose pool play is complete."""
    data = _request_data()
    category = data.get('category')
    if not category:
        raise InvalidInputError('category is required')

    settings = storage.category_settings(storage.load_settings(), category)
    structure = data.get('structure') or settings['playoff_structure']
    with storage.get_lock():
        fixture_set = storage.load_fixture_set()
        before = calculate_total_matches(fixture_set)
        fixture_set = build_playoffs(fixture_set, category, structure, data.get('cups'))
        storage.save_fixture_set(fixture_set)

    app.logger.info(f'Playoffs for {category}: {calculate_total_matches(fixture_set) - before:+d} fixtures')
    return _fixtures_response(fixture_set)


@app.route('/api/fixtures/score', methods=['POST'])
def api_record_score():
    """Record an "A-B" score and advance the winner."""
    data = _request_data()
    match_id = data.get('match_id')
    score = data.get('score')
    if not match_id or not score:
        raise InvalidInputError('match_id and score are required')

    with storage.get_lock():
        fixture_set = storage.load_fixture_set()
        updated = record_score(fixture_set.fixtures, match_id, score, formats=fixture_set.formats)
        storage.save_fixture_set(fixture_set)

    app.logger.info(f'Score {score} recorded for {match_id}, updated {[m.id for m in updated[1:]]}')
    return jsonify({'success': True, 'updated': [m.to_dict() for m in updated]})


@app.route('/api/fixtures/reset-scores', methods=['POST'])
def api_reset_scores():
    """Clear scores and winners, for all categories or one."""
    data = _request_data()
    with storage.get_lock():
        fixture_set = storage.load_fixture_set()
        count = reset_scores(fixture_set.fixtures, data.get('category'))
        storage.save_fixture_set(fixture_set)

    app.logger.info(f'Reset {count} match scores')
    return jsonify({'success': True, 'reset': count})


@app.route('/api/standings/<category>', methods=['GET'])
def api_standings(category):
    """Group standings for a category, best first."""
    fixture_set = storage.load_fixture_set()
    standings = []
    for group in groups_for_category(fixture_set, category):
        stats = compute_group_stats(group, fixture_set.fixtures)
        ordered = order_group_by_standing(group, fixture_set.fixtures)
        rows = []
        for position, player_id in enumerate(ordered.player_ids, start=1):
            row = {'position': position, 'player': player_id,
                   'name': placeholder_display_name(player_id) if is_placeholder(player_id) else player_id}
            row.update(stats[player_id])
            rows.append(row)
        standings.append({'group': group.id, 'name': group.name, 'standings': rows})
    return jsonify({'success': True, 'category': category, 'groups': standings})


@app.route('/api/settings', methods=['GET'])
def api_get_settings():
    return jsonify(storage.load_settings())


@app.route('/api/settings/update', methods=['POST'])
def api_update_settings():
    """Update fixture settings, globally or for one category."""
    data = _request_data()
    settings = storage.load_settings()
    category = data.get('category')
    target = settings
    if category:
        categories = settings.get('categories') or {}
        settings['categories'] = categories
        target = categories.get(category) or {}
        categories[category] = target

    for key in SETTINGS_KEYS:
        if key in data:
            target[key] = _int_option(data, key, None) if key in INT_SETTINGS else data[key]

    storage.save_settings(settings)
    return jsonify({'success': True})


@app.route('/api/roster', methods=['GET'])
def api_get_roster():
    participants = storage.load_roster()
    return jsonify({'participants': [p.to_dict() for p in participants]})


@app.route('/api/roster', methods=['POST'])
def api_save_roster():
    """Replace the roster with `participants` ({id, category, seed} records)."""
    data = _request_data()
    records = data.get('participants')
    if not isinstance(records, list):
        raise InvalidInputError('participants must be a list')
    participants = participants_from_records(records)
    if any(not p.id or not p.category for p in participants):
        raise InvalidInputError('every participant needs an id and a category')
    storage.save_roster(participants)
    return jsonify({'success': True, 'count': len(participants)})


if __name__ == '__main__':
    app.run(debug=True, port=int(os.environ.get('PORT', 5000)))
