"""
Shared pytest fixtures for bracket builder tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))


@pytest.fixture
def client():
    """Create a test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the app at a temporary data directory with no saved bracket."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    monkeypatch.setattr(app_module, 'STATE_FILE', str(data_dir / "bracket_state.yaml"))
    return data_dir


@pytest.fixture
def three_entrants():
    return "A\nB\nC"


@pytest.fixture
def eight_entrants():
    return "\n".join(f"Team{i}" for i in range(1, 9))
