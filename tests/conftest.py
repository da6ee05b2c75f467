"""
Shared pytest fixtures for tournament bracket tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os
import tempfile

# Keep import-time initialization of the app out of the repository root
_IMPORT_DIR = tempfile.mkdtemp(prefix='tournament-tests-')
os.environ.setdefault('TOURNAMENT_DATA_FILE', os.path.join(_IMPORT_DIR, 'tournament-data.json'))
os.environ.setdefault('TOURNAMENT_UPLOADS_DIR', os.path.join(_IMPORT_DIR, 'uploads'))
os.environ.setdefault('TOURNAMENT_SETTINGS_FILE', os.path.join(_IMPORT_DIR, 'settings.yaml'))

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.store import TournamentStore


@pytest.fixture
def store(tmp_path):
    """A store backed by an initialized document in a temporary directory."""
    store = TournamentStore(str(tmp_path / 'tournament-data.json'), lock_timeout=1)
    store.initialize_if_absent()
    return store


@pytest.fixture
def uploads_dir(tmp_path):
    path = tmp_path / 'uploads'
    path.mkdir()
    return path


@pytest.fixture
def client(store, uploads_dir, monkeypatch):
    """Create a test client wired to a temporary store and uploads directory."""
    import app as app_module
    monkeypatch.setattr(app_module, 'store', store)
    monkeypatch.setattr(app_module, 'UPLOADS_DIR', str(uploads_dir))
    app_module.app.config['TESTING'] = True
    with app_module.app.test_client() as client:
        yield client


@pytest.fixture
def png_bytes():
    """A tiny but well-formed 1x1 PNG."""
    return bytes.fromhex(
        '89504e470d0a1a0a0000000d4948445200000001000000010806000000'
        '1f15c4890000000d49444154789c6360000002000001e221bc330000000049454e44ae426082'
    )
