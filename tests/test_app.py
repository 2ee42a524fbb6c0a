"""
Tests for the Flask JSON endpoints.
"""
import pytest
import sys
import os
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from engine import storage
from engine.advancement import find_match


@pytest.fixture
def roster(temp_data_dir, sample_participants):
    storage.save_roster(sample_participants)
    return sample_participants


def _complete_pool(category):
    """Complete every stored pool match of `category`, player1 winning."""
    fixture_set = storage.load_fixture_set()
    for match in fixture_set.fixtures:
        if match.category == category and match.stage == 'pool':
            match.winner = match.player1
            match.score = '21-12'
            match.completed = True
    storage.save_fixture_set(fixture_set)


class TestFixturesRoutes:
    """Tests for generation and retrieval."""

    def test_empty_store(self, client):
        response = client.get('/api/fixtures')
        data = response.get_json()
        assert response.status_code == 200
        assert data['fixtures'] == []
        assert data['total_matches'] == 0

    def test_generate_from_stored_roster(self, client, roster):
        response = client.post('/api/fixtures/generate', json={'format': 'roundRobin', 'min_players': 8})
        data = response.get_json()
        assert data['success'] is True
        assert data['total_matches'] == 56
        assert data['formats'] == {'MS': 'roundRobin', 'WS': 'roundRobin'}
        assert storage.load_fixture_set().format == 'roundRobin'

    def test_generate_from_request_participants(self, client):
        response = client.post('/api/fixtures/generate', json={
            'format': 'singleElimination',
            'min_players': 0,
            'participants': [{'id': f'p{i}', 'category': 'XD', 'seed': i} for i in range(1, 5)],
            'categories': ['XD'],
        })
        assert response.get_json()['total_matches'] == 7

    def test_generate_without_roster_is_rejected(self, client):
        response = client.post('/api/fixtures/generate', json={'format': 'roundRobin'})
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_generate_bad_format(self, client, roster):
        response = client.post('/api/fixtures/generate', json={'format': 'ladder'})
        assert response.status_code == 400
        assert 'Unsupported tournament format' in response.get_json()['error']

    def test_generate_uses_category_settings(self, client, roster):
        client.post('/api/settings/update', json={'category': 'WS', 'format': 'roundRobin',
                                                  'players_per_category': 4})
        response = client.post('/api/fixtures/generate', json={'category': 'WS'})
        data = response.get_json()
        # 3 registrants + 1 placeholder, round robin: 6 matches
        assert data['total_matches'] == 6
        assert data['formats'] == {'WS': 'roundRobin'}

    def test_regenerate_keeps_other_categories(self, client, roster):
        client.post('/api/fixtures/generate', json={'format': 'roundRobin', 'min_players': 8})
        client.post('/api/fixtures/generate', json={'format': 'roundRobin', 'min_players': 4, 'category': 'WS'})
        fixture_set = storage.load_fixture_set()
        assert len([m for m in fixture_set.fixtures if m.category == 'MS']) == 28
        assert len([m for m in fixture_set.fixtures if m.category == 'WS']) == 6

    def test_filter_by_category(self, client, roster):
        client.post('/api/fixtures/generate', json={'format': 'roundRobin', 'min_players': 8})
        data = client.get('/api/fixtures?category=WS').get_json()
        assert {m['category'] for m in data['fixtures']} == {'WS'}
        assert data['total_matches'] == 28

    def test_estimate_does_not_write(self, client, roster, temp_data_dir):
        response = client.post('/api/fixtures/estimate', json={'format': 'poolPlayPlayoffs', 'min_players': 8})
        data = response.get_json()
        # two groups of four per category: 12 matches each
        assert data['total_matches'] == 24
        assert data['by_category'] == {'MS': {'pool': 12}, 'WS': {'pool': 12}}
        assert not os.path.exists(os.path.join(temp_data_dir, 'fixtures.yaml'))


class TestPlayoffRoutes:
    """Tests for building playoffs and entering scores."""

    @pytest.fixture
    def pool_generated(self, client, roster):
        client.post('/api/fixtures/generate', json={'format': 'poolPlayPlayoffs', 'min_players': 8,
                                                    'group_count': 2, 'category': 'MS'})

    def test_playoffs_need_complete_pool(self, client, pool_generated):
        response = client.post('/api/fixtures/playoffs', json={'category': 'MS'})
        assert response.status_code == 400
        assert 'not complete' in response.get_json()['error']

    def test_playoffs_need_category(self, client, pool_generated):
        assert client.post('/api/fixtures/playoffs', json={}).status_code == 400

    def test_build_score_and_advance(self, client, pool_generated):
        _complete_pool('MS')
        response = client.post('/api/fixtures/playoffs', json={'category': 'MS', 'structure': 'quarterFinals'})
        data = response.get_json()
        assert data['success'] is True
        playoffs = [m for m in data['fixtures'] if m['stage'] == 'playoff']
        assert len(playoffs) == 5

        qf1 = next(m for m in playoffs if m['id'] == 'MS_Playoff_QF1')
        response = client.post('/api/fixtures/score', json={'match_id': 'MS_Playoff_QF1', 'score': '21-17'})
        updated = response.get_json()['updated']
        assert updated[0]['winner'] == qf1['player1']
        assert updated[1]['id'] == 'MS_Playoff_SF1'
        assert updated[1]['player1'] == qf1['player1']

        stored = find_match(storage.load_fixture_set().fixtures, 'MS_Playoff_SF1')
        assert stored.player1 == qf1['player1']

    def test_rebuilding_playoffs_does_not_duplicate(self, client, pool_generated):
        _complete_pool('MS')
        client.post('/api/fixtures/playoffs', json={'category': 'MS'})
        client.post('/api/fixtures/playoffs', json={'category': 'MS'})
        fixture_set = storage.load_fixture_set()
        assert len([m for m in fixture_set.fixtures if m.stage == 'playoff']) == 5

    def test_score_errors(self, client, pool_generated):
        assert client.post('/api/fixtures/score', json={'match_id': 'nope', 'score': '21-3'}).status_code == 400
        assert client.post('/api/fixtures/score', json={'match_id': 'nope'}).status_code == 400

    def test_reset_scores(self, client, pool_generated):
        _complete_pool('MS')
        response = client.post('/api/fixtures/reset-scores', json={'category': 'MS'})
        assert response.get_json()['reset'] == 12
        assert not any(m.completed for m in storage.load_fixture_set().fixtures)

    def test_standings(self, client, pool_generated):
        _complete_pool('MS')
        data = client.get('/api/standings/MS').get_json()
        assert [g['name'] for g in data['groups']] == ['Group A', 'Group B']
        rows = data['groups'][0]['standings']
        assert [r['position'] for r in rows] == [1, 2, 3, 4]
        assert rows[0]['matches'] == 3
        assert rows[0]['matches_won'] >= rows[-1]['matches_won']


class TestSettingsRoutes:
    """Tests for settings and roster endpoints."""

    def test_update_settings(self, client, temp_data_dir):
        response = client.post('/api/settings/update', json={'group_count': '3', 'format': 'swiss'})
        assert response.get_json()['success'] is True
        with open(os.path.join(temp_data_dir, 'settings.yaml')) as f:
            saved = yaml.safe_load(f)
        assert saved['group_count'] == 3
        assert saved['format'] == 'swiss'
        assert client.get('/api/settings').get_json()['group_count'] == 3

    def test_update_category_settings_with_empty_categories_key(self, client, temp_data_dir):
        with open(os.path.join(temp_data_dir, 'settings.yaml'), 'w') as f:
            f.write('format: roundRobin\ncategories:\n')
        response = client.post('/api/settings/update', json={'category': 'MS', 'group_count': 4})
        assert response.status_code == 200
        assert storage.load_settings()['categories'] == {'MS': {'group_count': 4}}

    def test_update_settings_rejects_non_numbers(self, client, temp_data_dir):
        response = client.post('/api/settings/update', json={'group_count': 'many'})
        assert response.status_code == 400

    def test_roster_round_trip(self, client, temp_data_dir):
        records = [{'id': 'alice', 'category': 'WS', 'seed': 1}, {'id': 'bob', 'category': 'MS', 'seed': None}]
        assert client.post('/api/roster', json={'participants': records}).get_json()['count'] == 2
        assert client.get('/api/roster').get_json()['participants'] == [
            {'id': 'alice', 'category': 'WS', 'seed': 1},
            {'id': 'bob', 'category': 'MS', 'seed': None},
        ]

    def test_roster_validation(self, client, temp_data_dir):
        assert client.post('/api/roster', json={'participants': 'x'}).status_code == 400
        assert client.post('/api/roster', json={'participants': [{'id': 'a'}]}).status_code == 400
