"""
YAML persistence for rosters, fixture settings and fixture sets.

Every file lives in one data directory. Writes of the fixture set go
through a FileLock and replace the whole document at once.
"""
import logging
import os
from typing import Dict, List, Optional

import yaml
from filelock import FileLock

from .fixture_set import FixtureSet, deduplicate_playoff_fixtures
from .formats import TournamentFormat
from .models import Participant, groups_from_dicts, matches_from_dicts
from .playoffs import QUARTER_FINALS

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DEFAULT_DATA_DIR = os.path.join(BASE_DIR, 'data')

FIXTURES_FILE = 'fixtures.yaml'
SETTINGS_FILE = 'settings.yaml'
ROSTER_FILE = 'roster.yaml'
LOCK_FILE = '.lock'
LOCK_TIMEOUT = 10


def get_data_dir() -> str:
    return os.environ.get('FIXTURE_DATA_DIR', DEFAULT_DATA_DIR)


def _file_path(filename: str, data_dir: Optional[str] = None) -> str:
    return os.path.join(data_dir or get_data_dir(), filename)


# One lock object per directory so nested acquisition in a process is re-entrant
_locks: Dict[str, FileLock] = {}


def get_lock(data_dir: Optional[str] = None) -> FileLock:
    directory = os.path.abspath(data_dir or get_data_dir())
    if directory not in _locks:
        os.makedirs(directory, exist_ok=True)
        _locks[directory] = FileLock(os.path.join(directory, LOCK_FILE), timeout=LOCK_TIMEOUT)
    return _locks[directory]


def _write_yaml(path: str, data):
    """Write `data` next to `path` and move it into place."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    tmp_path = path + '.tmp'
    with open(tmp_path, 'w', encoding='utf-8') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    os.replace(tmp_path, path)


def _read_yaml(path: str):
    if not os.path.exists(path):
        return None
    with open(path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f)


def get_default_settings() -> Dict:
    """Return default fixture settings."""
    return {
        'format': TournamentFormat.POOL_PLAY_PLAYOFFS,
        'players_per_category': 20,
        'group_count': TournamentFormat.DEFAULT_GROUP_COUNT,
        'match_frequency': 1,
        'playoff_structure': QUARTER_FINALS,
        'categories': {},
    }


def load_settings(data_dir: Optional[str] = None) -> Dict:
    """Load settings from YAML file, merging with defaults."""
    defaults = get_default_settings()
    data = _read_yaml(_file_path(SETTINGS_FILE, data_dir))
    if not data:
        return defaults
    for key, value in defaults.items():
        if key not in data:
            data[key] = value
    return data


def save_settings(settings: Dict, data_dir: Optional[str] = None):
    with get_lock(data_dir):
        _write_yaml(_file_path(SETTINGS_FILE, data_dir), settings)


def category_settings(settings: Dict, category: str) -> Dict:
    """Settings for one category: its own entry in `categories` over the top-level values."""
    merged = {key: value for key, value in settings.items() if key != 'categories'}
    merged.update((settings.get('categories') or {}).get(category) or {})
    return merged


def load_roster(data_dir: Optional[str] = None) -> List[Participant]:
    return load_roster_file(_file_path(ROSTER_FILE, data_dir))


def load_roster_file(path: str) -> List[Participant]:
    """
    Load a roster file, a mapping of category to entrants.

    Entrants are either plain ids or `{id, seed}` mappings.
    """
    data = _read_yaml(path)
    if not data:
        return []
    participants = []
    for category, entrants in data.items():
        for entrant in entrants or []:
            if isinstance(entrant, dict):
                participants.append(Participant(id=str(entrant['id']), category=category,
                                                seed=entrant.get('seed')))
            else:
                participants.append(Participant(id=str(entrant), category=category))
    return participants


def save_roster(participants: List[Participant], data_dir: Optional[str] = None):
    data: Dict[str, List[Dict]] = {}
    for participant in participants:
        data.setdefault(participant.category, []).append({'id': participant.id, 'seed': participant.seed})
    with get_lock(data_dir):
        _write_yaml(_file_path(ROSTER_FILE, data_dir), data)


def roster_as_tournament(participants: List[Participant]) -> Dict:
    """The tournament shape `generate_fixtures` expects."""
    categories = []
    for participant in participants:
        if participant.category not in categories:
            categories.append(participant.category)
    return {
        'participants': [p.to_dict() for p in participants],
        'categories': categories,
    }


def load_fixture_set(data_dir: Optional[str] = None) -> FixtureSet:
    """
    Load the stored fixture set, removing duplicate playoff matches.

    When duplicates were found the cleaned set is written back.
    """
    path = _file_path(FIXTURES_FILE, data_dir)
    data = _read_yaml(path)
    if not data:
        return FixtureSet()

    fixtures, removed_ids = deduplicate_playoff_fixtures(matches_from_dicts(data.get('fixtures')))
    fixture_set = FixtureSet(
        format=data.get('format'),
        fixtures=fixtures,
        groups=groups_from_dicts(data.get('groups')),
        formats=data.get('formats'),
    )
    if removed_ids:
        logger.info("Cleaned %d duplicate fixtures from %s", len(removed_ids), path)
        save_fixture_set(fixture_set, data_dir)
    return fixture_set


def save_fixture_set(fixture_set: FixtureSet, data_dir: Optional[str] = None):
    with get_lock(data_dir):
        _write_yaml(_file_path(FIXTURES_FILE, data_dir), fixture_set.to_dict())


def clear_fixture_set(data_dir: Optional[str] = None):
    path = _file_path(FIXTURES_FILE, data_dir)
    with get_lock(data_dir):
        if os.path.exists(path):
            os.remove(path)
