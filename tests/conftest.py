"""
Shared pytest fixtures for fixture engine tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from engine.models import Group, Participant


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the fixture store at an empty temporary directory."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setenv('FIXTURE_DATA_DIR', str(data_dir))
    return str(data_dir)


@pytest.fixture
def client(temp_data_dir):
    """Create a test client backed by the temporary data directory."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def make_participants():
    """Factory for seeded participants: make_participants('MS', 5) -> MS_1..MS_5 seeded 1..5."""
    def _make(category, count, seeded=True):
        return [
            Participant(id=f"{category}_{i}", category=category, seed=i if seeded else None)
            for i in range(1, count + 1)
        ]
    return _make


@pytest.fixture
def sample_participants(make_participants):
    """Eight seeded men's singles players and three unseeded women's singles players."""
    return make_participants('MS', 8) + make_participants('WS', 3, seeded=False)


@pytest.fixture
def two_groups():
    """Two groups already ordered by standing."""
    return [
        Group(id="MS_GroupA", name="Group A", category="MS", player_ids=["a1", "a2", "a3", "a4"]),
        Group(id="MS_GroupB", name="Group B", category="MS", player_ids=["b1", "b2", "b3", "b4"]),
    ]


@pytest.fixture
def four_groups():
    """Four groups already ordered by standing."""
    return [
        Group(id=f"MS_Group{letter}", name=f"Group {letter}", category="MS",
              player_ids=[f"{letter.lower()}{i}" for i in range(1, 5)])
        for letter in "ABCD"
    ]


@pytest.fixture
def tournament(sample_participants):
    """Tournament payload as accepted by generate_fixtures."""
    return {
        'participants': [p.to_dict() for p in sample_participants],
        'categories': ['MS', 'WS'],
    }
