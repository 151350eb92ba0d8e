"""
Shared pytest fixtures for tournament bracket tests.

Running tests:
    pytest tests/
"""
import pytest
import random
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))


class FixedOrder:
    """Stand-in rng whose shuffle puts the items in a given order."""

    def __init__(self, order):
        self.order = list(order)

    def shuffle(self, items):
        items[:] = self.order


@pytest.fixture
def fixed_order():
    """Factory for an rng that draws teams in exactly the given order."""
    return FixedOrder


@pytest.fixture
def seeded_rng():
    return random.Random(2024)


@pytest.fixture
def client():
    """Create a test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the app at an empty temporary data directory."""
    import app as app_module

    tournaments_dir = tmp_path / "tournaments"

    monkeypatch.setattr(app_module, 'DATA_DIR', str(tmp_path))
    monkeypatch.setattr(app_module, 'TEAMS_FILE', str(tmp_path / "teams.yaml"))
    monkeypatch.setattr(app_module, 'TOURNAMENTS_FILE', str(tmp_path / "tournaments.yaml"))
    monkeypatch.setattr(app_module, 'TOURNAMENTS_DIR', str(tournaments_dir))

    return tmp_path


@pytest.fixture
def four_teams():
    return ["Ice Wolves", "Blue Liners", "Crease Crew", "Slap Shots"]
